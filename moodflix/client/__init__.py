"""
MoodFlix client: HTTP access to the API plus the stateful stores behind
the recommendation, watchlist, collection, review, follow and profile views.
"""
from .analytics import AdminAnalytics
from .api import MoodFlixAPI
from .collections import CollectionStore
from .errors import AuthRequiredError, FunctionError, MoodFlixError, StorageError
from .follows import FollowStore
from .notices import Notice, Notifier
from .optimistic import BusyFlag, attempt
from .profile import ProfileStore
from .recommendations import RecommendationSession
from .reviews import ReviewStore
from .similar import SimilarMoviesPager
from .state import AppState, SignedInUser
from .storage import LocalStorage
from .watch_history import WatchHistoryStore
from .watchlist import WatchlistStore

__all__ = [
    "AdminAnalytics",
    "AppState",
    "AuthRequiredError",
    "BusyFlag",
    "CollectionStore",
    "FollowStore",
    "FunctionError",
    "LocalStorage",
    "MoodFlixAPI",
    "MoodFlixError",
    "Notice",
    "Notifier",
    "ProfileStore",
    "RecommendationSession",
    "ReviewStore",
    "SignedInUser",
    "SimilarMoviesPager",
    "StorageError",
    "WatchHistoryStore",
    "WatchlistStore",
    "attempt",
]
