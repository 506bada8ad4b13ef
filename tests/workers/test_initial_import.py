from unittest.mock import MagicMock

from contractwatch.database import settings
from contractwatch.exceptions import FeedUnavailable
from contractwatch.workers.ingestion_worker import IngestionSummary
from contractwatch.workers.initial_import import run_initial_import

def test_empty_store_runs_import_with_default_keywords(db, session_factory):
    worker = MagicMock()
    worker.run.return_value = IngestionSummary(processed=5, new=5, updated=0)

    result = run_initial_import(ingestion_worker=worker, session_factory=session_factory)

    worker.run.assert_called_once_with(settings.INITIAL_IMPORT_KEYWORDS)
    assert result == {"success": True, "processed": 5, "new": 5, "updated": 0}

def test_empty_store_prefers_profile_keywords(db, session_factory, profile):
    worker = MagicMock()
    worker.run.return_value = IngestionSummary()

    run_initial_import(ingestion_worker=worker, session_factory=session_factory)

    worker.run.assert_called_once_with(["data", "analytics"])

def test_populated_store_is_skipped(db, session_factory, add_contracts):
    """Start-up import only runs against an empty store."""
    add_contracts(2)
    worker = MagicMock()

    result = run_initial_import(ingestion_worker=worker, session_factory=session_factory)

    assert result == {"success": True, "skipped": True, "existing_count": 2}
    worker.run.assert_not_called()

def test_failure_is_reported(db, session_factory):
    worker = MagicMock()
    worker.run.side_effect = FeedUnavailable("HTTP error! status: 500", keyword="data")

    result = run_initial_import(ingestion_worker=worker, session_factory=session_factory)

    assert result["success"] is False
    assert "500" in result["error"]
