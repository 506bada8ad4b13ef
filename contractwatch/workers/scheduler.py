"""
Periodic ingestion and rating.

Two cron jobs (Europe/London by default):
  - contract search   daily at 02:00
  - contract rating   every 6 hours
plus manual entry points for the web layer and scripts.
"""
import logging
from typing import Optional
from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.cron import CronTrigger
from contractwatch.database import SessionLocal, settings
from contractwatch.services.store import NoticeStore
from contractwatch.workers.ingestion_worker import IngestionSummary, IngestionWorker
from contractwatch.workers.rating_worker import BatchRatingSummary, RatingWorker

logger = logging.getLogger(__name__)


class ContractScheduler:

    def __init__(
        self,
        ingestion_worker: Optional[IngestionWorker] = None,
        rating_worker: Optional[RatingWorker] = None,
        session_factory=SessionLocal,
        scheduler: Optional[BackgroundScheduler] = None,
        timezone: Optional[str] = None,
    ):
        self.timezone = timezone or settings.SCHEDULER_TIMEZONE
        self.ingestion_worker = ingestion_worker or IngestionWorker(session_factory=session_factory)
        self.rating_worker = rating_worker or RatingWorker(session_factory=session_factory)
        self.session_factory = session_factory
        self.scheduler = scheduler or BackgroundScheduler(timezone=self.timezone)
        self.setup_jobs()

    def setup_jobs(self):
        """Set up scheduled jobs."""
        self.scheduler.add_job(
            func=self.run_scheduled_search,
            trigger=CronTrigger.from_crontab(settings.INGESTION_CRON, timezone=self.timezone),
            id="contracts_search",
            name="Search Contracts Finder for profile keywords",
            replace_existing=True,
            max_instances=1,
            coalesce=True,
        )

        self.scheduler.add_job(
            func=self.run_scheduled_rating,
            trigger=CronTrigger.from_crontab(settings.RATING_CRON, timezone=self.timezone),
            id="contracts_rating",
            name="AI-rate unrated contracts",
            replace_existing=True,
            max_instances=1,
            coalesce=True,
        )

        logger.info(
            f"Scheduler jobs configured (search '{settings.INGESTION_CRON}', "
            f"rating '{settings.RATING_CRON}', {self.timezone})"
        )

    def start(self):
        """Start the scheduler."""
        self.scheduler.start()
        logger.info("Contracts scheduler started")

    def shutdown(self, wait: bool = True):
        """Shutdown the scheduler."""
        self.scheduler.shutdown(wait=wait)
        logger.info("Contracts scheduler stopped")

    def profile_keywords(self):
        db = self.session_factory()
        try:
            return NoticeStore(db).get_search_keywords()
        finally:
            db.close()

    def run_scheduled_search(self) -> Optional[IngestionSummary]:
        logger.info("Starting scheduled contracts search...")
        try:
            result = self.ingestion_worker.run(self.profile_keywords())
        except Exception as e:
            logger.error(f"Error in scheduled contracts search: {e}")
            return None
        logger.info(f"Scheduled contracts search completed: {result.as_dict()}")
        return result

    def run_scheduled_rating(self) -> Optional[BatchRatingSummary]:
        logger.info("Starting scheduled contract rating...")
        try:
            result = self.rating_worker.rate_all_unrated()
        except Exception as e:
            logger.error(f"Error in scheduled contract rating: {e}")
            return None
        logger.info(f"Scheduled contract rating completed: {result.as_dict()}")
        return result

    def trigger_manual_search(self, keyword: Optional[str] = None) -> IngestionSummary:
        """Ad-hoc search for one keyword, or the profile keywords when none is given."""
        keywords = [keyword] if keyword else self.profile_keywords()
        logger.info(f"Manually triggering contracts search for keywords: {', '.join(keywords)}")
        result = self.ingestion_worker.run(keywords)
        logger.info(f"Manual contracts search completed: {result.as_dict()}")
        return result

    def trigger_rating(self) -> BatchRatingSummary:
        return self.rating_worker.rate_all_unrated()

    def rate_single(self, item_id: str):
        return self.rating_worker.rate_one(item_id)

    def get_job_status(self, job_id: str):
        job = self.scheduler.get_job(job_id)
        if job:
            # Jobs added before start() have no next_run_time yet
            next_run = getattr(job, "next_run_time", None)
            return {
                "id": job.id,
                "name": job.name,
                "next_run_time": next_run.isoformat() if next_run else None,
            }
        return None
