"""
Import all models to ensure they are registered with SQLAlchemy
"""
from moodflix.models.user import User, UserSession
from moodflix.models.watchlist import WatchlistItem, Collection, CollectionMovie
from moodflix.models.review import Review
from moodflix.models.social import Follow, MoodSearch

__all__ = [
    "User",
    "UserSession",
    "WatchlistItem",
    "Collection",
    "CollectionMovie",
    "Review",
    "Follow",
    "MoodSearch"
]
