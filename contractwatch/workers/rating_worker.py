import logging
import threading
import time
from dataclasses import dataclass, asdict
from typing import Callable, Optional
from contractwatch.database import SessionLocal
from contractwatch.services.rating.rating_engine import RatingEngine
from contractwatch.services.store import NoticeStore

logger = logging.getLogger(__name__)

ALREADY_RUNNING = "Already in progress"


@dataclass(frozen=True)
class RatingPolicy:
    """Pacing for batch rating, in seconds. Keeps the model API under its rate limit."""
    batch_size: int = 5
    item_delay: float = 2.0
    batch_delay: float = 5.0

    @classmethod
    def from_settings(cls) -> "RatingPolicy":
        from contractwatch.database import settings
        return cls(
            batch_size=settings.RATING_BATCH_SIZE,
            item_delay=settings.RATING_ITEM_DELAY,
            batch_delay=settings.RATING_BATCH_DELAY,
        )


@dataclass
class BatchRatingSummary:
    processed: int = 0
    rated: int = 0
    errors: int = 0
    skipped: bool = False
    reason: Optional[str] = None

    def as_dict(self):
        data = asdict(self)
        if not self.skipped:
            data.pop("skipped")
            data.pop("reason")
        return data


class RatingWorker:
    """
    Rates every unrated contract in paced batches, one contract at a time.

    Only one run executes per worker at once; a call that arrives while a
    run is in progress returns a skipped summary and does nothing.
    """

    def __init__(
        self,
        policy: Optional[RatingPolicy] = None,
        session_factory=SessionLocal,
        engine_factory: Optional[Callable] = None,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.policy = policy or RatingPolicy.from_settings()
        self.session_factory = session_factory
        self.engine_factory = engine_factory or RatingEngine
        self.sleep = sleep
        self._lock = threading.Lock()

    @property
    def is_running(self) -> bool:
        return self._lock.locked()

    def rate_all_unrated(self) -> BatchRatingSummary:
        if not self._lock.acquire(blocking=False):
            logger.info("Contract rating already in progress. Skipping this request.")
            return BatchRatingSummary(skipped=True, reason=ALREADY_RUNNING)

        try:
            return self._run()
        except Exception as e:
            logger.error(f"Error in batch contract rating: {e}")
            raise
        finally:
            self._lock.release()

    def rate_one(self, item_id: str):
        """Rates a single contract outside the batch loop."""
        db = self.session_factory()
        try:
            return self.engine_factory(db).rate(item_id)
        finally:
            db.close()

    def _run(self) -> BatchRatingSummary:
        db = self.session_factory()
        try:
            store = NoticeStore(db)
            if store.get_profile() is None:
                logger.info("No organisation profile found. Skipping contract rating.")
                return BatchRatingSummary()

            engine = self.engine_factory(db)
            summary = BatchRatingSummary()
            # Failed contracts stay unrated; don't pick them up again in this run
            attempted = set()
            batch_number = 0

            while True:
                batch_number += 1
                batch = store.find_unrated(self.policy.batch_size, exclude=attempted)
                if not batch:
                    logger.info("No more unrated contracts found. Rating process complete.")
                    break

                logger.info(f"Processing batch {batch_number}: {len(batch)} contracts")
                batch_rated = 0
                batch_errors = 0

                for item_id, title in [(c.item_id, c.title) for c in batch]:
                    attempted.add(item_id)
                    try:
                        engine.rate(item_id)
                        batch_rated += 1
                        logger.info(f"Rated contract: {title}")
                    except Exception as e:
                        batch_errors += 1
                        logger.error(f"Error rating contract {item_id}: {e}")
                        db.rollback()
                    self.sleep(self.policy.item_delay)

                summary.processed += len(batch)
                summary.rated += batch_rated
                summary.errors += batch_errors
                logger.info(
                    f"Batch {batch_number} completed. Processed: {len(batch)}, "
                    f"Rated: {batch_rated}, Errors: {batch_errors}"
                )

                remaining = store.count_unrated(exclude=attempted)
                if remaining > 0:
                    logger.info(f"{remaining} contracts remaining. Waiting {self.policy.batch_delay}s before next batch...")
                    self.sleep(self.policy.batch_delay)

            logger.info(
                f"Contract rating completed. Total processed: {summary.processed}, "
                f"Rated: {summary.rated}, Errors: {summary.errors}"
            )
            return summary
        finally:
            db.close()
