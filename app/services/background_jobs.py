"""
Background Jobs Service
Periodically purges expired login sessions and stale password-reset tokens

Features:
- Scheduled jobs using APScheduler
- Configurable timezone
- Job monitoring and statistics
- Manual triggering from the admin API
"""

from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.cron import CronTrigger
from datetime import datetime
from typing import Callable, Dict
from pytz import timezone
import logging

from app import config
from app.database import Database
from app.schemas.password_reset import CleanupType
from app.services.password_reset_service import PasswordResetService
from app.services.session_service import SessionService

logger = logging.getLogger(__name__)

PURGE_SESSIONS = 'purge_expired_sessions'
CLEANUP_RESETS = 'cleanup_password_resets'


class BackgroundJobService:
    """
    Manages scheduled maintenance jobs

    Jobs:
    - Purge expired sessions (hourly)
    - Clean up used and expired password-reset tokens (daily at 3 AM)

    Usage:
        jobs = BackgroundJobService(database)
        jobs.start()  # Start all scheduled jobs
        jobs.shutdown()  # Stop all jobs gracefully
    """

    def __init__(self, database: Database):
        self.database = database
        self.timezone = timezone(config.TIMEZONE)
        self.scheduler = BackgroundScheduler(timezone=self.timezone)

        # Track job execution statistics
        self.job_stats = {
            PURGE_SESSIONS: {'last_run': None, 'status': 'idle', 'error': None, 'deleted': None},
            CLEANUP_RESETS: {'last_run': None, 'status': 'idle', 'error': None, 'deleted': None},
        }

    @property
    def jobs(self) -> Dict[str, Callable[[], None]]:
        return {
            PURGE_SESSIONS: self.purge_expired_sessions,
            CLEANUP_RESETS: self.cleanup_password_resets,
        }

    def start(self):
        """
        Start all scheduled background jobs

        Jobs are only started if ENABLE_BACKGROUND_JOBS=true in environment
        """
        if not config.ENABLE_BACKGROUND_JOBS:
            logger.info("Background jobs disabled via ENABLE_BACKGROUND_JOBS environment variable")
            return

        self.scheduler.add_job(
            func=self.purge_expired_sessions,
            trigger=CronTrigger(minute=0, timezone=self.timezone),  # Every hour at :00
            id=PURGE_SESSIONS,
            name='Purge expired login sessions',
            replace_existing=True,
            max_instances=1  # Prevent concurrent runs
        )
        logger.info("Scheduled: Purge expired sessions (hourly)")

        self.scheduler.add_job(
            func=self.cleanup_password_resets,
            trigger=CronTrigger(hour=3, minute=0, timezone=self.timezone),
            id=CLEANUP_RESETS,
            name='Clean up password reset tokens',
            replace_existing=True,
            max_instances=1
        )
        logger.info("Scheduled: Clean up password reset tokens (daily 3:00 AM)")

        self.scheduler.start()
        logger.info(f"Background jobs started (timezone: {self.timezone}, jobs: {len(self.scheduler.get_jobs())})")

    def shutdown(self):
        """Shutdown scheduler gracefully"""
        if self.scheduler.running:
            self.scheduler.shutdown(wait=True)
            logger.info("Background jobs stopped gracefully")

    def get_job_stats(self) -> Dict:
        """
        Get statistics for all jobs including next run times

        Jobs that are not scheduled (scheduler disabled) are still reported
        with their manual-run history.
        """
        scheduled = {job.id: job for job in self.scheduler.get_jobs()}
        jobs_info = []
        for job_id, stats in self.job_stats.items():
            job = scheduled.get(job_id)
            jobs_info.append({
                'id': job_id,
                'name': job.name if job else job_id,
                'next_run': job.next_run_time.isoformat() if job and job.next_run_time else None,
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

    def trigger(self, job_id: str) -> Dict:
        """Run a job immediately in the calling thread"""
        job = self.jobs.get(job_id)
        if job is None:
            raise KeyError(job_id)
        job()
        return dict(self.job_stats[job_id], id=job_id)

    # ============================================
    # Main Job Methods
    # ============================================

    def purge_expired_sessions(self):
        self._run(PURGE_SESSIONS, SessionService.purge_expired)

    def cleanup_password_resets(self):
        self._run(CLEANUP_RESETS, lambda db: PasswordResetService.cleanup(db, CleanupType.ALL))

    def _run(self, job_id: str, work: Callable):
        """Execute one job with its own session and record the outcome"""
        self.job_stats[job_id]['status'] = 'running'
        self.job_stats[job_id]['error'] = None

        db = self.database.session()
        start_time = datetime.now()

        try:
            logger.info(f"[{job_id}] Starting...")
            deleted = work(db)
            elapsed = (datetime.now() - start_time).total_seconds()

            logger.info(f"[{job_id}] Completed in {elapsed:.2f}s - Deleted {deleted} row(s)")

            self.job_stats[job_id]['status'] = 'success'
            self.job_stats[job_id]['deleted'] = deleted
            self.job_stats[job_id]['last_run'] = datetime.now().isoformat()

        except Exception as e:
            # Scheduler threads have no caller to propagate to
            db.rollback()
            elapsed = (datetime.now() - start_time).total_seconds()
            error_msg = str(e)

            logger.error(f"[{job_id}] Failed after {elapsed:.2f}s: {error_msg}", exc_info=True)

            self.job_stats[job_id]['status'] = 'failed'
            self.job_stats[job_id]['error'] = error_msg
            self.job_stats[job_id]['last_run'] = datetime.now().isoformat()

        finally:
            db.close()
