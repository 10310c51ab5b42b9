"""
Background Jobs Service
Sweeps stale movie and show detail cache entries so the cache tables do not
grow without bound.

Features:
- Scheduled jobs using APScheduler
- Configurable timezone and retention
- Job monitoring and statistics
"""

from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.cron import CronTrigger
from sqlalchemy.orm import Session
from cinescope.database import SessionLocal
from cinescope.services.catalog_service import movie_cache, show_cache
from datetime import datetime, timedelta
import logging
import os
from typing import Dict
from pytz import timezone

logger = logging.getLogger(__name__)


class BackgroundJobService:
    """
    Manages scheduled background jobs

    Jobs:
    - Cleanup stale detail cache (weekly on Sunday at 4 AM)

    Usage:
        jobs = BackgroundJobService()
        jobs.start()
        jobs.shutdown()
    """

    JOB_IDS = ('cleanup_cache',)

    def __init__(self, session_factory=SessionLocal):
        """Initialize scheduler with timezone configuration"""
        tz_name = os.getenv("TIMEZONE", "UTC")
        self.timezone = timezone(tz_name)
        self.scheduler = BackgroundScheduler(timezone=self.timezone)
        self.session_factory = session_factory

        self.job_stats = {
            job_id: {'last_run': None, 'status': 'idle', 'error': None, 'deleted': None}
            for job_id in self.JOB_IDS
        }

    def start(self):
        """
        Start all scheduled background jobs

        Jobs are only started if ENABLE_BACKGROUND_JOBS=true in environment
        """
        if os.getenv("ENABLE_BACKGROUND_JOBS", "true").lower() != "true":
            logger.info("Background jobs disabled via ENABLE_BACKGROUND_JOBS environment variable")
            return

        self.scheduler.add_job(
            func=self.cleanup_stale_cache,
            trigger=CronTrigger(day_of_week='sun', hour=4, minute=0, timezone=self.timezone),
            id='cleanup_cache',
            name='Cleanup stale movie/show cache',
            replace_existing=True,
            max_instances=1
        )
        logger.info("Scheduled: Cleanup stale cache (weekly Sunday 4:00 AM)")

        self.scheduler.start()
        logger.info(f"Background jobs started (timezone {self.timezone}, {len(self.scheduler.get_jobs())} jobs)")

    def shutdown(self):
        """Shutdown scheduler gracefully"""
        if self.scheduler.running:
            self.scheduler.shutdown(wait=True)
            logger.info("Background jobs stopped gracefully")

    def get_job_stats(self) -> Dict:
        """
        Get statistics for all jobs including next run times
        """
        scheduled = {job.id: job for job in self.scheduler.get_jobs()}
        jobs_info = []
        for job_id, stats in self.job_stats.items():
            job = scheduled.get(job_id)
            next_run = getattr(job, 'next_run_time', None) if job else None
            jobs_info.append({
                'id': job_id,
                'name': job.name if job else None,
                'next_run': next_run.isoformat() if next_run else None,
                'last_run': stats['last_run'],
                'status': stats['status'],
                'error': stats['error'],
                'deleted': stats['deleted'],
            })

        return {
            'scheduler_running': self.scheduler.running,
            'timezone': str(self.timezone),
            'jobs': jobs_info
        }

    def cleanup_stale_cache(self) -> int:
        """
        Remove movie and show cache entries not refreshed within the retention
        period (CACHE_RETENTION_DAYS, default 30).

        Returns the number of deleted entries.
        """
        job_id = 'cleanup_cache'
        self.job_stats[job_id]['status'] = 'running'
        self.job_stats[job_id]['error'] = None

        db: Session = self.session_factory()
        start_time = datetime.now()

        try:
            retention = timedelta(days=int(os.getenv("CACHE_RETENTION_DAYS", "30")))
            logger.info(f"[{job_id}] Starting cache cleanup (retention {retention.days} days)...")

            deleted_count = movie_cache().sweep(db, retention) + show_cache().sweep(db, retention)
            db.commit()

            elapsed = (datetime.now() - start_time).total_seconds()
            logger.info(f"[{job_id}] Completed in {elapsed:.2f}s - Deleted {deleted_count} stale entries")

            self.job_stats[job_id]['status'] = 'success'
            self.job_stats[job_id]['deleted'] = deleted_count
            return deleted_count

        except Exception as e:
            db.rollback()
            elapsed = (datetime.now() - start_time).total_seconds()
            logger.error(f"[{job_id}] Failed after {elapsed:.2f}s: {str(e)}")

            self.job_stats[job_id]['status'] = 'failed'
            self.job_stats[job_id]['error'] = str(e)
            raise

        finally:
            self.job_stats[job_id]['last_run'] = datetime.now().isoformat()
            db.close()


# Global singleton instance
background_jobs = BackgroundJobService()
