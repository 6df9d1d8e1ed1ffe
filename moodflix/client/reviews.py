"""
Reviews of one movie, with the signed-in user's own review tracked apart.
"""
from typing import Dict, List, Optional
import logging

from moodflix.client.errors import AuthRequiredError, MoodFlixError
from moodflix.client.optimistic import attempt
from moodflix.client.state import AppState
from moodflix.client.records import now_iso, temp_id

logger = logging.getLogger(__name__)


class ReviewStore:
    def __init__(self, state: AppState, movie_id: int):
        self.state = state
        self.movie_id = movie_id
        self.reviews: List[Dict] = []
        self.user_review: Optional[Dict] = None

    @property
    def notifier(self):
        return self.state.notifier

    @property
    def average_rating(self) -> Optional[float]:
        if not self.reviews:
            return None
        return round(sum(r["rating"] for r in self.reviews) / len(self.reviews), 1)

    def _load(self):
        data = self.state.api.user_data("get_movie_reviews", self.state.token, {"movie_id": self.movie_id})
        self.reviews = list(data.get("reviews") or [])
        self.user_review = data.get("userReview")

    def fetch(self) -> List[Dict]:
        try:
            self._load()
        except MoodFlixError as e:
            logger.error(f"Error fetching reviews for {self.movie_id}: {str(e)}")
            self.notifier.error("Couldn't load reviews", str(e))
        return self.reviews

    def submit(self, rating: int, review_text: Optional[str], movie_title: str, movie_poster: Optional[str] = None) -> bool:
        """Write or replace the user's review"""
        try:
            user = self.state.require_user("Please sign in to write a review")
        except AuthRequiredError as e:
            self.notifier.error(str(e))
            return False

        payload = {
            "movie_id": self.movie_id,
            "movie_title": movie_title,
            "movie_poster": movie_poster,
            "rating": rating,
            "review_text": review_text,
        }
        temp = {
            "id": temp_id(),
            "user_id": user.id,
            "display_name": user.display_name,
            **payload,
            "created_at": now_iso(),
            "updated_at": now_iso(),
        }

        def apply():
            previous = (list(self.reviews), self.user_review)
            others = [r for r in self.reviews if r.get("user_id") != user.id]
            self.reviews = [temp] + others
            self.user_review = temp
            return previous

        def rollback(previous):
            self.reviews, self.user_review = previous

        try:
            attempt(apply, lambda: self.state.api.user_data("add_review", self.state.token, payload), rollback)
        except MoodFlixError as e:
            logger.error(f"Error submitting review: {str(e)}")
            self.notifier.error("Error submitting review", str(e))
            return False

        try:
            self._load()
        except MoodFlixError as e:
            logger.warning(f"Review refresh failed after submit: {str(e)}")

        self.notifier.success("Review submitted successfully")
        return True

    def delete(self) -> bool:
        try:
            self.state.require_user("Please sign in to manage your reviews")
        except AuthRequiredError as e:
            self.notifier.error(str(e))
            return False

        own = self.user_review
        if own is None:
            return False

        def apply():
            previous = (list(self.reviews), self.user_review)
            self.reviews = [r for r in self.reviews if r["id"] != own["id"]]
            self.user_review = None
            return previous

        def rollback(previous):
            self.reviews, self.user_review = previous

        try:
            attempt(apply, lambda: self.state.api.user_data("delete_review", self.state.token, {"review_id": own["id"]}), rollback)
        except MoodFlixError as e:
            logger.error(f"Error deleting review: {str(e)}")
            self.notifier.error("Error deleting review", str(e))
            return False

        self.notifier.success("Review deleted")
        return True
