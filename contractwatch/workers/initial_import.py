import logging
from contractwatch.database import SessionLocal, settings
from contractwatch.services.store import NoticeStore
from contractwatch.workers.ingestion_worker import IngestionWorker

logger = logging.getLogger(__name__)


def run_initial_import(ingestion_worker: IngestionWorker = None, session_factory=SessionLocal) -> dict:
    """
    Seeds an empty store on first start-up. Does nothing when contracts
    already exist. Never raises; failures are reported in the result.
    """
    try:
        db = session_factory()
        try:
            store = NoticeStore(db)
            contract_count = store.count()
            keywords = store.get_search_keywords(default=settings.INITIAL_IMPORT_KEYWORDS)
        finally:
            db.close()

        if contract_count > 0:
            logger.info(f"Database already has {contract_count} contracts. Skipping initial import.")
            return {"success": True, "skipped": True, "existing_count": contract_count}

        logger.info(f"Database is empty. Running initial import with keywords: {', '.join(keywords)}")
        worker = ingestion_worker or IngestionWorker(session_factory=session_factory)
        result = worker.run(keywords)

        logger.info(
            f"Initial import completed! Total processed: {result.processed}, "
            f"New: {result.new}, Updated: {result.updated}"
        )
        return {"success": True, **result.as_dict()}
    except Exception as e:
        logger.error(f"Error during initial import check: {e}")
        return {"success": False, "error": str(e)}
