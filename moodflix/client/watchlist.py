from typing import Dict, List
import logging

from moodflix.client.errors import AuthRequiredError, MoodFlixError
from moodflix.client.optimistic import attempt
from moodflix.client.records import movie_payload, now_iso, temp_id
from moodflix.client.state import AppState

logger = logging.getLogger(__name__)


class WatchlistStore:
    def __init__(self, state: AppState):
        self.state = state
        self.items: List[Dict] = []

    @property
    def notifier(self):
        return self.state.notifier

    def is_in_watchlist(self, movie_id: int) -> bool:
        return any(item["movie_id"] == movie_id for item in self.items)

    def _load(self):
        data = self.state.api.user_data("get_watchlist", self.state.token)
        self.items = list(data.get("watchlist") or [])

    def fetch(self) -> List[Dict]:
        if not self.state.is_signed_in:
            self.items = []
            return self.items
        try:
            self._load()
        except MoodFlixError as e:
            logger.error(f"Error fetching watchlist: {str(e)}")
            self.notifier.error("Couldn't load your watchlist", str(e))
        return self.items

    def add(self, movie: Dict) -> bool:
        try:
            self.state.require_user("Please sign in to add movies to your watchlist")
        except AuthRequiredError as e:
            self.notifier.error(str(e))
            return False

        payload = movie_payload(movie)
        if self.is_in_watchlist(payload["movie_id"]):
            self.notifier.info("This movie is already in your watchlist")
            return False

        temp = {"id": temp_id(), **payload, "created_at": now_iso()}

        def apply():
            previous = list(self.items)
            self.items = [temp] + self.items
            return previous

        def rollback(previous):
            self.items = previous

        try:
            result = attempt(apply, lambda: self.state.api.user_data("add_to_watchlist", self.state.token, payload), rollback)
        except MoodFlixError as e:
            logger.error(f"Error adding to watchlist: {str(e)}")
            self.notifier.error("Failed to add movie to watchlist")
            return False

        # Swap the temp record for the stored one
        try:
            self._load()
        except MoodFlixError as e:
            logger.warning(f"Watchlist refresh failed after add, keeping local record: {str(e)}")

        if result.get("alreadyExists"):
            self.notifier.info("This movie is already in your watchlist")
            return False

        self.notifier.success(f'Added "{payload["title"]}" to watchlist')
        return True

    def remove(self, movie_id: int) -> bool:
        try:
            self.state.require_user("Please sign in to manage your watchlist")
        except AuthRequiredError as e:
            self.notifier.error(str(e))
            return False

        def apply():
            previous = list(self.items)
            self.items = [item for item in self.items if item["movie_id"] != movie_id]
            return previous

        def rollback(previous):
            self.items = previous

        try:
            attempt(
                apply,
                lambda: self.state.api.user_data("remove_from_watchlist", self.state.token, {"movie_id": movie_id}),
                rollback,
            )
        except MoodFlixError as e:
            logger.error(f"Error removing from watchlist: {str(e)}")
            self.notifier.error("Failed to remove movie")
            return False

        self.notifier.success("Removed from watchlist")
        return True
