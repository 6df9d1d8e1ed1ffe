"""
Scheduled maintenance for the MoodFlix API.

warm_trending   hourly, refills the TMDB lists behind the home page rails
purge_sessions  daily 03:00, deletes expired login sessions

Set ENABLE_BACKGROUND_JOBS=false to run without a scheduler (tests, one-off scripts).
"""

from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.cron import CronTrigger
from moodflix.database import SessionLocal
from moodflix.services.auth_service import AuthService
from moodflix.services.tmdb_service import TMDBService
from moodflix.utils.cache import warm_cache
from datetime import datetime
from typing import Callable, Dict
from pytz import timezone
import logging
import os

logger = logging.getLogger(__name__)

HOME_RAILS = [
    (TMDBService.get_trending, [(('week',), {}), (('day',), {})]),
    (TMDBService.get_top_rated, [((), {})]),
    (TMDBService.get_upcoming, [((), {})]),
]


class BackgroundJobService:
    def __init__(self):
        self.timezone = timezone(os.getenv("TIMEZONE", "UTC"))
        self.scheduler = BackgroundScheduler(timezone=self.timezone)
        # job id -> (display name, cron fields, bound method)
        self.jobs = {
            'warm_trending': ("Warm trending movie caches", {'minute': 0}, self.warm_trending_cache),
            'purge_sessions': ("Purge expired user sessions", {'hour': 3, 'minute': 0}, self.purge_expired_sessions),
        }
        self.job_stats = {
            job_id: {'last_run': None, 'status': 'idle', 'error': None, 'result': None}
            for job_id in self.jobs
        }

    @staticmethod
    def enabled() -> bool:
        return os.getenv("ENABLE_BACKGROUND_JOBS", "true").lower() == "true"

    def start(self):
        if not self.enabled():
            logger.info("Background jobs disabled (ENABLE_BACKGROUND_JOBS is not 'true')")
            return

        for job_id, (name, cron, func) in self.jobs.items():
            self.scheduler.add_job(
                func=func,
                trigger=CronTrigger(timezone=self.timezone, **cron),
                id=job_id,
                name=name,
                replace_existing=True,
                max_instances=1,
            )
            logger.info(f"Scheduled {job_id}: {name} ({cron})")

        self.scheduler.start()
        logger.info(f"Scheduler running with {len(self.jobs)} jobs in {self.timezone}")

    def shutdown(self):
        if self.scheduler.running:
            self.scheduler.shutdown(wait=True)
            logger.info("Scheduler stopped")

    def get_job_stats(self) -> Dict:
        """Per-job status for the admin dashboard, with next run times while scheduled"""
        scheduled = {job.id: job for job in self.scheduler.get_jobs()}
        jobs = []
        for job_id, (name, _, _) in self.jobs.items():
            job = scheduled.get(job_id)
            next_run = job.next_run_time if job else None
            jobs.append({
                'id': job_id,
                'name': name,
                'next_run': next_run.isoformat() if next_run else None,
                **self.job_stats[job_id],
            })

        return {
            'scheduler_running': self.scheduler.running,
            'timezone': str(self.timezone),
            'jobs': jobs,
        }

    def _run(self, job_id: str, work: Callable[[], str]):
        """Run one job body, recording its outcome in job_stats. Failures are logged, never raised."""
        stats = self.job_stats[job_id]
        stats.update(status='running', error=None)
        started = datetime.now()
        try:
            result = work()
        except Exception as e:
            stats.update(status='failed', error=str(e), result=None)
            logger.error(f"[{job_id}] failed after {(datetime.now() - started).total_seconds():.2f}s: {str(e)}")
        else:
            stats.update(status='success', result=result)
            logger.info(f"[{job_id}] {result} in {(datetime.now() - started).total_seconds():.2f}s")
        stats['last_run'] = datetime.now().isoformat()

    # ============================================
    # Jobs
    # ============================================

    def warm_trending_cache(self):
        def work():
            warmed = 0
            for lister, calls in HOME_RAILS:
                lister.clear()
                warmed += warm_cache(lister, calls)
            return f"warmed {warmed} lists"

        self._run('warm_trending', work)

    def purge_expired_sessions(self):
        def work():
            db = SessionLocal()
            try:
                return f"removed {AuthService.purge_expired_sessions(db)} sessions"
            except Exception:
                db.rollback()
                raise
            finally:
                db.close()

        self._run('purge_sessions', work)


background_jobs = BackgroundJobService()
