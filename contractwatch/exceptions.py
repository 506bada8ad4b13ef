"""Exception hierarchy for the ingestion and rating pipeline."""
from typing import Optional


class ContractWatchError(Exception):
    """Base exception for all pipeline errors."""

    def __init__(self, message: str, details: Optional[dict] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class FeedUnavailable(ContractWatchError):
    """Contracts Finder returned a non-2xx status or could not be reached."""

    def __init__(
        self,
        message: str,
        keyword: Optional[str] = None,
        status_code: Optional[int] = None,
        details: Optional[dict] = None,
    ):
        super().__init__(message, details)
        self.keyword = keyword
        self.status_code = status_code


class RecordUpsertFailure(ContractWatchError):
    """A single notice could not be mapped or written."""

    def __init__(self, message: str, item_id: Optional[str] = None, details: Optional[dict] = None):
        super().__init__(message, details)
        self.item_id = item_id


class NotFound(ContractWatchError):
    """A record the caller asked for does not exist."""


class ContractNotFound(NotFound):

    def __init__(self, item_id: str):
        super().__init__(f"Contract not found: {item_id}", {"item_id": item_id})
        self.item_id = item_id


class NoProfile(NotFound):

    def __init__(self):
        super().__init__(
            "No organisation profile found. Please set up your organisation profile first."
        )


class GenerationFailure(ContractWatchError):
    """The rating model call itself failed."""

    def __init__(self, message: str, model: Optional[str] = None, details: Optional[dict] = None):
        super().__init__(message, details)
        self.model = model
