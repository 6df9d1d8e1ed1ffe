"""
Admin dashboard data: four analytics endpoints fetched in parallel and
applied together, or not at all.
"""
from concurrent.futures import ThreadPoolExecutor
from typing import Dict, List, Optional
import logging

from moodflix.client.errors import AuthRequiredError, MoodFlixError
from moodflix.client.optimistic import BusyFlag
from moodflix.client.state import AppState

logger = logging.getLogger(__name__)

ENDPOINTS = ("analytics/overview", "analytics/moods", "analytics/top-movies", "analytics/reviews")


class AdminAnalytics:
    def __init__(self, state: AppState, max_workers: int = 4):
        self.state = state
        self.max_workers = max_workers
        self.overview: Optional[Dict] = None
        self.moods: List[Dict] = []
        self.top_movies: List[Dict] = []
        self.review_stats: Optional[Dict] = None
        self.error: Optional[str] = None
        self._busy = BusyFlag()

    @property
    def is_loading(self) -> bool:
        return self._busy.busy

    def refetch(self) -> bool:
        try:
            self.state.require_user("Please sign in as an admin")
        except AuthRequiredError as e:
            self.error = str(e)
            self.state.notifier.error(str(e))
            return False

        with self._busy.claim() as acquired:
            if not acquired:
                return False

            token = self.state.token
            with ThreadPoolExecutor(max_workers=self.max_workers) as pool:
                futures = [pool.submit(self.state.api.admin, path, token) for path in ENDPOINTS]
                try:
                    overview, moods, top_movies, reviews = [f.result() for f in futures]
                except MoodFlixError as e:
                    logger.error(f"Error fetching admin analytics: {str(e)}")
                    self.error = str(e)
                    self.state.notifier.error("Failed to load analytics", str(e))
                    return False

            self.overview = overview
            self.moods = list(moods.get("moods") or [])
            self.top_movies = list(top_movies.get("movies") or [])
            self.review_stats = reviews
            self.error = None
            return True
