from typing import Dict, List
import logging

from moodflix.client.errors import MoodFlixError
from moodflix.client.optimistic import attempt
from moodflix.client.records import now_iso, temp_id
from moodflix.client.state import AppState

logger = logging.getLogger(__name__)

STORAGE_KEY = "moodflix_watch_history"


class WatchHistoryStore:
    """Watched movies, newest first, kept in local storage"""

    def __init__(self, state: AppState):
        self.state = state
        self.items: List[Dict] = []

    @property
    def notifier(self):
        return self.state.notifier

    def load(self) -> List[Dict]:
        self.items = list(self.state.storage.get_json(STORAGE_KEY, []) or [])
        return self.items

    def is_watched(self, movie_id: int) -> bool:
        return any(item["movie_id"] == movie_id for item in self.items)

    def _save(self, items: List[Dict]) -> bool:
        def apply():
            previous = self.items
            self.items = items
            return previous

        def rollback(previous):
            self.items = previous

        try:
            attempt(apply, lambda: self.state.storage.set_json(STORAGE_KEY, items), rollback)
        except MoodFlixError as e:
            logger.error(f"Error saving watch history: {str(e)}")
            self.notifier.error("Couldn't update watch history", str(e))
            return False
        return True

    def mark_as_watched(self, movie: Dict, rating=None) -> bool:
        """Record a viewing; watching again moves the movie to the front"""
        movie_id = int(movie.get("movie_id") or movie["id"])
        item = {
            "id": temp_id("local"),
            "movie_id": movie_id,
            "title": movie["title"],
            "poster_path": movie.get("poster_path") or movie.get("posterUrl"),
            "watched_at": now_iso(),
            "rating": rating,
        }
        items = [item] + [i for i in self.items if i["movie_id"] != movie_id]
        if not self._save(items):
            return False
        self.notifier.success("Marked as watched", movie["title"])
        return True

    def remove(self, movie_id: int) -> bool:
        if not self.is_watched(movie_id):
            return False
        if not self._save([i for i in self.items if i["movie_id"] != movie_id]):
            return False
        self.notifier.success("Removed from watch history")
        return True

    def clear(self) -> bool:
        if not self._save([]):
            return False
        self.notifier.info("Watch history cleared")
        return True
