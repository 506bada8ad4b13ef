from unittest.mock import MagicMock

import pytest
from apscheduler.schedulers.background import BackgroundScheduler

from contractwatch.exceptions import FeedUnavailable
from contractwatch.workers.ingestion_worker import IngestionSummary
from contractwatch.workers.rating_worker import BatchRatingSummary
from contractwatch.workers.scheduler import ContractScheduler

@pytest.fixture
def workers():
    ingestion = MagicMock()
    ingestion.run.return_value = IngestionSummary(processed=3, new=2, updated=1)
    rating = MagicMock()
    rating.rate_all_unrated.return_value = BatchRatingSummary(processed=1, rated=1)
    return ingestion, rating

@pytest.fixture
def scheduler(session_factory, workers):
    ingestion, rating = workers
    return ContractScheduler(
        ingestion_worker=ingestion,
        rating_worker=rating,
        session_factory=session_factory,
        scheduler=BackgroundScheduler(timezone="Europe/London"),
        timezone="Europe/London",
    )

def test_jobs_registered_with_cron_triggers(scheduler):
    search = scheduler.scheduler.get_job("contracts_search")
    rating = scheduler.scheduler.get_job("contracts_rating")

    assert search is not None and rating is not None
    assert str(search.trigger.timezone) == "Europe/London"
    fields = {f.name: str(f) for f in search.trigger.fields}
    assert fields["hour"] == "2" and fields["minute"] == "0"
    fields = {f.name: str(f) for f in rating.trigger.fields}
    assert fields["hour"] == "*/6" and fields["minute"] == "0"
    assert scheduler.get_job_status("contracts_rating")["name"] == "AI-rate unrated contracts"
    assert scheduler.get_job_status("missing") is None

def test_scheduled_search_uses_profile_keywords(scheduler, workers, profile):
    ingestion, _ = workers

    result = scheduler.run_scheduled_search()

    ingestion.run.assert_called_once_with(["data", "analytics"])
    assert result.processed == 3

def test_scheduled_search_falls_back_to_default_keywords(scheduler, workers, db):
    ingestion, _ = workers
    scheduler.run_scheduled_search()
    ingestion.run.assert_called_once_with(["data"])

def test_scheduled_failures_are_logged_not_raised(scheduler, workers, db):
    """Errors inside scheduled jobs are logged, not raised, and the jobs stay registered."""
    ingestion, rating = workers
    ingestion.run.side_effect = FeedUnavailable("down", keyword="data")
    rating.rate_all_unrated.side_effect = RuntimeError("boom")

    assert scheduler.run_scheduled_search() is None
    assert scheduler.run_scheduled_rating() is None
    # Jobs stay registered after a failure
    assert scheduler.scheduler.get_job("contracts_search") is not None
    assert scheduler.scheduler.get_job("contracts_rating") is not None

def test_scheduled_rating_runs_batch(scheduler, workers):
    _, rating = workers
    result = scheduler.run_scheduled_rating()
    assert result.rated == 1
    rating.rate_all_unrated.assert_called_once_with()

def test_manual_search_with_keyword(scheduler, workers, profile):
    ingestion, _ = workers
    result = scheduler.trigger_manual_search("cloud")
    ingestion.run.assert_called_once_with(["cloud"])
    assert result.as_dict() == {"processed": 3, "new": 2, "updated": 1}

def test_manual_search_without_keyword_uses_profile(scheduler, workers, profile):
    ingestion, _ = workers
    scheduler.trigger_manual_search()
    ingestion.run.assert_called_once_with(["data", "analytics"])

def test_manual_search_propagates_feed_errors(scheduler, workers, db):
    """Manual searches surface feed errors to the caller."""
    ingestion, _ = workers
    ingestion.run.side_effect = FeedUnavailable("down", keyword="cloud")
    with pytest.raises(FeedUnavailable):
        scheduler.trigger_manual_search("cloud")

def test_manual_rating_entry_points(scheduler, workers):
    _, rating = workers
    scheduler.trigger_rating()
    scheduler.rate_single("c-9")
    rating.rate_all_unrated.assert_called_once_with()
    rating.rate_one.assert_called_once_with("c-9")

def test_start_and_shutdown(scheduler):
    scheduler.start()
    try:
        assert scheduler.scheduler.running
        assert scheduler.get_job_status("contracts_search")["next_run_time"] is not None
    finally:
        scheduler.shutdown(wait=False)
    assert not scheduler.scheduler.running
