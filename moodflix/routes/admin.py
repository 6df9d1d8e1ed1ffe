"""
Admin Routes
Dashboard analytics and background job monitoring.

All endpoints require an admin account (ADMIN_USERNAMES at registration).
"""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from moodflix.database import get_db
from moodflix.utils.dependencies import get_admin_user
from moodflix.utils.cache import get_cache_stats
from moodflix.models.user import User
from moodflix.services.analytics_service import AnalyticsService
from moodflix.services.background_jobs import background_jobs

router = APIRouter(prefix="/api/admin", tags=["Admin"])


@router.get("/analytics/overview")
def analytics_overview(
    db: Session = Depends(get_db),
    admin: User = Depends(get_admin_user)
):
    """Row counts of every user generated table"""
    return AnalyticsService.overview(db)


@router.get("/analytics/moods")
def analytics_moods(
    db: Session = Depends(get_db),
    admin: User = Depends(get_admin_user)
):
    """Top 10 searched moods"""
    return {"moods": AnalyticsService.mood_counts(db)}


@router.get("/analytics/top-movies")
def analytics_top_movies(
    db: Session = Depends(get_db),
    admin: User = Depends(get_admin_user)
):
    """Top 10 most watchlisted movies"""
    return {"movies": AnalyticsService.top_movies(db)}


@router.get("/analytics/reviews")
def analytics_reviews(
    db: Session = Depends(get_db),
    admin: User = Depends(get_admin_user)
):
    """Review count, average rating and 1-10 distribution"""
    return AnalyticsService.review_stats(db)


@router.get("/jobs/status")
def get_jobs_status(admin: User = Depends(get_admin_user)):
    """
    Status of the scheduled jobs plus cache hit statistics

    - Next scheduled run time
    - Last execution time and result
    - Current status (idle, running, success, failed)
    """
    return {**background_jobs.get_job_stats(), "cache": get_cache_stats()}
