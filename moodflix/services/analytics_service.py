"""
Analytics Service - aggregate counts for the admin dashboard.
Each method answers one dashboard panel; the client fetches them in parallel.
"""
from typing import Dict, List
from sqlalchemy import func
from sqlalchemy.orm import Session

from moodflix.models.review import Review
from moodflix.models.social import Follow, MoodSearch
from moodflix.models.user import User
from moodflix.models.watchlist import Collection, WatchlistItem
from moodflix.services.review_service import ReviewService


class AnalyticsService:
    TOP_LIMIT = 10

    @staticmethod
    def overview(db: Session) -> Dict[str, int]:
        return {
            "total_users": db.query(func.count(User.id)).scalar() or 0,
            "total_reviews": db.query(func.count(Review.id)).scalar() or 0,
            "total_watchlist_items": db.query(func.count(WatchlistItem.id)).scalar() or 0,
            "total_collections": db.query(func.count(Collection.id)).scalar() or 0,
            "total_follows": db.query(func.count(Follow.id)).scalar() or 0,
            "total_mood_searches": db.query(func.count(MoodSearch.id)).scalar() or 0,
        }

    @staticmethod
    def mood_counts(db: Session, limit: int = TOP_LIMIT) -> List[Dict]:
        """Most searched moods"""
        count = func.count(MoodSearch.id).label("count")
        rows = (
            db.query(MoodSearch.mood, count)
            .group_by(MoodSearch.mood)
            .order_by(count.desc(), MoodSearch.mood)
            .limit(limit)
            .all()
        )
        return [{"mood": mood, "count": total} for mood, total in rows]

    @staticmethod
    def top_movies(db: Session, limit: int = TOP_LIMIT) -> List[Dict]:
        """Most watchlisted movies"""
        count = func.count(WatchlistItem.id).label("count")
        rows = (
            db.query(WatchlistItem.movie_id, func.max(WatchlistItem.title), count)
            .group_by(WatchlistItem.movie_id)
            .order_by(count.desc(), WatchlistItem.movie_id)
            .limit(limit)
            .all()
        )
        return [{"movie_id": movie_id, "title": title, "count": total} for movie_id, title, total in rows]

    @staticmethod
    def review_stats(db: Session) -> Dict:
        total, average = db.query(func.count(Review.id), func.avg(Review.rating)).one()
        return {
            "total_reviews": total or 0,
            "average_rating": round(float(average), 2) if average is not None else 0.0,
            "distribution": {str(k): v for k, v in ReviewService.rating_distribution(db).items()},
        }
