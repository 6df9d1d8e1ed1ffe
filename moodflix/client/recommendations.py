"""
Mood recommendation session with load-more pagination.

Every title shown in the session is remembered and sent back as the
exclusion list on load-more, so no movie is recommended twice until the
history is cleared.
"""
from typing import Dict, List, Optional, Union
import logging

from moodflix.client.errors import MoodFlixError
from moodflix.client.notices import Notifier
from moodflix.client.optimistic import BusyFlag
from moodflix.schemas.recommendation import RecommendationRequest

logger = logging.getLogger(__name__)

RATE_LIMITED_TEXT = "Too many requests. Please wait a moment and try again."
UNAVAILABLE_TEXT = "Service temporarily unavailable. Please try again later."
FAILED_TEXT = "Failed to get movie recommendations"


def describe_error(error: Exception) -> str:
    message = str(error)
    if "Rate limit" in message:
        return RATE_LIMITED_TEXT
    if "Payment" in message:
        return UNAVAILABLE_TEXT
    return FAILED_TEXT


class RecommendationSession:
    def __init__(self, api, notifier: Optional[Notifier] = None, state=None):
        """state (an AppState) is optional; when signed in its token tags searches with the user"""
        self.api = api
        self.notifier = notifier or Notifier()
        self.state = state
        self.movies: List[Dict] = []
        self.has_more = True
        self.last_params: Optional[RecommendationRequest] = None
        self._seen_titles: List[str] = []
        self._loading = BusyFlag()
        self._loading_more = BusyFlag()

    @property
    def is_loading(self) -> bool:
        return self._loading.busy

    @property
    def is_loading_more(self) -> bool:
        return self._loading_more.busy

    @property
    def previously_recommended(self) -> List[str]:
        return list(self._seen_titles)

    @property
    def recommended_count(self) -> int:
        return len(self._seen_titles)

    def _remember(self, movies: List[Dict]):
        seen = set(self._seen_titles)
        for movie in movies:
            title = movie.get("title")
            if title and title not in seen:
                seen.add(title)
                self._seen_titles.append(title)

    def get_recommendations(
        self,
        params: Union[RecommendationRequest, Dict],
        append: bool = False,
    ) -> Optional[List[Dict]]:
        """
        Fetch a batch for the given filters.

        A fresh call replaces the list and resets the exclusion history once
        the server answers; append adds to the list and excludes every title
        already shown. Returns the new movies, or None when the call was
        turned away or failed (state is left untouched on failure).
        """
        if not isinstance(params, RecommendationRequest):
            params = RecommendationRequest.model_validate(params)

        flag = self._loading_more if append else self._loading
        with flag.claim() as acquired:
            if not acquired:
                logger.debug("Recommendation request already in flight")
                return None

            excluded = list(self._seen_titles) if append else []
            body = params.model_copy(update={"previously_recommended": excluded}).model_dump(mode="json", by_alias=True)

            try:
                token = self.state.token if self.state is not None else None
                data = self.api.invoke("recommend-movies", body, token=token)
            except MoodFlixError as e:
                logger.error(f"Error getting recommendations: {str(e)}")
                self.notifier.error("Error", describe_error(e))
                return None

            new_movies = list(data.get("movies") or [])

            if append:
                if not new_movies:
                    self.has_more = False
                    self.notifier.info(
                        "You've reached the end",
                        "No more movies to recommend for this mood. Try clearing history or changing filters.",
                    )
                    return []
                self.movies = self.movies + new_movies
                self._remember(new_movies)
                logger.info(f"Loaded {len(new_movies)} more, {self.recommended_count} titles excluded")
                return new_movies

            self.last_params = params
            self.movies = new_movies
            self._seen_titles = []
            self._remember(new_movies)
            self.has_more = bool(new_movies)
            if new_movies:
                self.notifier.success(
                    "Fresh recommendations!",
                    f"Found {len(new_movies)} movies matching your {params.mood} mood",
                )
            return new_movies

    def load_more(self) -> Optional[List[Dict]]:
        if self.is_loading_more or not self.has_more or self.last_params is None:
            return None
        return self.get_recommendations(self.last_params, append=True)

    def clear_history(self):
        self._seen_titles = []
        self.has_more = True
        self.notifier.info("History cleared", "You may see previously recommended movies again")

    def reset_all(self):
        self.movies = []
        self._seen_titles = []
        self.has_more = True
        self.last_params = None
