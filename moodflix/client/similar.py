from typing import Dict, List, Optional
import logging

from moodflix.client.errors import MoodFlixError
from moodflix.client.notices import Notifier
from moodflix.client.optimistic import BusyFlag

logger = logging.getLogger(__name__)


class SimilarMoviesPager:
    """Pages through the movies similar to one title"""

    def __init__(self, api, movie_id: int, notifier: Optional[Notifier] = None):
        self.api = api
        self.movie_id = movie_id
        self.notifier = notifier or Notifier()
        self.movies: List[Dict] = []
        self.page = 0
        self.total_pages = 0
        self.has_more = True
        self._loading = BusyFlag()

    @property
    def is_loading(self) -> bool:
        return self._loading.busy

    def _fetch(self, page: int) -> Optional[List[Dict]]:
        with self._loading.claim() as acquired:
            if not acquired:
                return None
            try:
                data = self.api.invoke("similar-movies", {"movieId": self.movie_id, "page": page})
            except MoodFlixError as e:
                logger.error(f"Error fetching similar movies for {self.movie_id}: {str(e)}")
                self.has_more = False
                self.notifier.error("Couldn't load similar movies", str(e))
                return None

            batch = list(data.get("movies") or [])
            self.movies = batch if page == 1 else self.movies + batch
            self.page = data.get("page", page)
            self.total_pages = data.get("totalPages", 0)
            self.has_more = bool(data.get("hasMore"))
            return batch

    def reset(self, movie_id: Optional[int] = None) -> Optional[List[Dict]]:
        """Start over (optionally for another movie) and fetch page 1"""
        if movie_id is not None:
            self.movie_id = movie_id
        self.movies = []
        self.page = 0
        self.total_pages = 0
        self.has_more = True
        return self._fetch(1)

    def load_more(self) -> Optional[List[Dict]]:
        if self.is_loading or not self.has_more:
            return None
        return self._fetch(self.page + 1)
