import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Optional
from sqlalchemy import update
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.orm import Session
from contractwatch.exceptions import RecordUpsertFailure
from contractwatch.models import ContractRecord, OrganisationProfile

logger = logging.getLogger(__name__)

_DIALECT_INSERTS = {
    "postgresql": postgresql.insert,
    "sqlite": sqlite.insert,
}


@dataclass
class UpsertResult:
    item_id: str
    created: bool


class NoticeStore:
    """
    Persistence for contract notices keyed by Contracts Finder item id.
    Every write commits on its own so a failing record never takes the
    rest of a batch with it.
    """

    def __init__(self, db: Session):
        self.db = db
        dialect = db.get_bind().dialect.name
        if dialect not in _DIALECT_INSERTS:
            raise ValueError(f"Upsert is not supported on dialect '{dialect}'")
        self._insert = _DIALECT_INSERTS[dialect]

    def upsert(self, item_id: str, fields: Dict[str, Any]) -> UpsertResult:
        """
        Inserts the notice, or overwrites its feed fields when the item id is
        already stored. Rating, reviewer and deal columns are never touched.
        """
        now = datetime.now(timezone.utc)
        values = {k: v for k, v in fields.items() if k != "item_id"}

        try:
            stmt = (
                self._insert(ContractRecord)
                .values(item_id=item_id, created_at=now, updated_at=now, **values)
                .on_conflict_do_nothing(index_elements=["item_id"])
                .returning(ContractRecord.item_id)
            )
            created = self.db.execute(stmt).first() is not None

            if not created:
                self.db.execute(
                    update(ContractRecord)
                    .where(ContractRecord.item_id == item_id)
                    .values(updated_at=now, **values)
                )
            self.db.commit()
        except Exception as e:
            self.db.rollback()
            raise RecordUpsertFailure(f"Failed to upsert contract {item_id}: {e}", item_id=item_id) from e

        return UpsertResult(item_id=item_id, created=created)

    def get(self, item_id: str) -> Optional[ContractRecord]:
        return self.db.query(ContractRecord).filter(ContractRecord.item_id == item_id).first()

    def count(self) -> int:
        return self.db.query(ContractRecord).count()

    def find_unrated(self, limit: int, exclude: Iterable[str] = ()) -> List[ContractRecord]:
        """Records without an AI score, at most `limit`, skipping `exclude` ids."""
        return self._unrated_query(exclude).order_by(ContractRecord.id).limit(limit).all()

    def count_unrated(self, exclude: Iterable[str] = ()) -> int:
        return self._unrated_query(exclude).count()

    def _unrated_query(self, exclude: Iterable[str]):
        query = self.db.query(ContractRecord).filter(ContractRecord.ai_score.is_(None))
        exclude = list(exclude)
        if exclude:
            query = query.filter(ContractRecord.item_id.not_in(exclude))
        return query

    def apply_rating(self, item_id: str, rating, rated_by: str, rated_at: datetime) -> Optional[ContractRecord]:
        """
        Writes the ai_* columns. Returns None when the record disappeared
        after it was selected for rating.
        """
        record = self.get(item_id)
        if record is None:
            logger.warning(f"Contract {item_id} vanished before its rating could be saved")
            return None

        record.ai_score = rating.score
        record.ai_relevance = rating.relevance
        record.ai_explanation = rating.explanation
        record.ai_opportunity_description = rating.opportunity_description
        record.ai_match_reasons = list(rating.match_reasons)
        record.ai_rated_at = rated_at
        record.ai_rated_by = rated_by
        self.db.commit()
        return record

    def get_profile(self) -> Optional[OrganisationProfile]:
        return self.db.query(OrganisationProfile).order_by(OrganisationProfile.id).first()

    def get_search_keywords(self, default: Optional[List[str]] = None) -> List[str]:
        """The profile's search keywords, or `default` (settings) when unset."""
        if default is None:
            from contractwatch.database import settings
            default = settings.DEFAULT_SEARCH_KEYWORDS

        profile = self.get_profile()
        if profile and profile.search_keywords:
            return list(profile.search_keywords)
        return list(default)
