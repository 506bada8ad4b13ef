import logging
from dataclasses import dataclass, asdict
from typing import Iterable, Optional, Union
from contractwatch.database import SessionLocal
from contractwatch.exceptions import RecordUpsertFailure
from contractwatch.services.ingestion.clients.contracts_finder_client import ContractsFinderClient
from contractwatch.services.ingestion.normalizer import Normalizer
from contractwatch.services.store import NoticeStore

logger = logging.getLogger(__name__)


@dataclass
class IngestionSummary:
    processed: int = 0
    new: int = 0
    updated: int = 0

    def add(self, other: "IngestionSummary"):
        self.processed += other.processed
        self.new += other.new
        self.updated += other.updated

    def as_dict(self):
        return asdict(self)


class IngestionWorker:
    """
    Pulls notices from Contracts Finder for each keyword and upserts them.

    A bad record is logged and skipped. A feed failure is not: it aborts the
    run so the caller sees it, and later keywords are not searched.
    """

    def __init__(self, client: Optional[ContractsFinderClient] = None, session_factory=SessionLocal):
        self.client = client or ContractsFinderClient()
        self.normalizer = Normalizer()
        self.session_factory = session_factory

    def run(self, keywords: Union[str, Iterable[str]]) -> IngestionSummary:
        if isinstance(keywords, str):
            keywords = [keywords]
        keywords = list(keywords)

        db = self.session_factory()
        store = NoticeStore(db)
        total = IngestionSummary()

        try:
            for keyword in keywords:
                logger.info(f"Searching for keyword: {keyword}")
                page = self.client.search(keyword)

                if not page.notices:
                    logger.info(f"No contracts found for keyword: {keyword}")
                    continue

                result = self._store_notices(store, page.notices)
                total.add(result)
                logger.info(
                    f"Processed {result.processed} contracts for keyword '{keyword}'. "
                    f"New: {result.new}, Updated: {result.updated}"
                )
        finally:
            db.close()

        logger.info(f"Total processed: {total.processed}. Total new: {total.new}, Total updated: {total.updated}")
        return total

    def _store_notices(self, store: NoticeStore, notices) -> IngestionSummary:
        result = IngestionSummary()
        for notice in notices:
            try:
                item_id, fields = self.normalizer.map_notice(notice)
                outcome = store.upsert(item_id, fields)
            except RecordUpsertFailure as e:
                logger.error(f"Error processing contract {e.item_id or '<unknown>'}: {e}")
                continue
            except Exception as e:
                logger.error(f"Unexpected error processing notice: {e}")
                continue

            if outcome.created:
                result.new += 1
            else:
                result.updated += 1
            result.processed += 1
        return result


if __name__ == "__main__":
    from contractwatch.logging_config import configure_logging

    configure_logging()
    db = SessionLocal()
    try:
        keywords = NoticeStore(db).get_search_keywords()
    finally:
        db.close()
    print(IngestionWorker().run(keywords).as_dict())
