"""
Error taxonomy for the RAG service.

Every failure the service knows about is a RagError. The HTTP layer maps
them onto status codes:

- ValidationError      -> 400 (missing or blank required input)
- ProviderError        -> 500 (embedding / generation backend failed)
- PartialBatchFailure  -> 500 (ingest or backfill aborted mid-batch)
- SnapshotError        -> fatal at startup (snapshot exists but is unreadable)

Nothing is retried. The message of the underlying failure is kept verbatim
so callers see what the backend actually said.
"""

from __future__ import annotations


class RagError(Exception):
    """Base class for all service errors."""


class ValidationError(RagError):
    """Required request input is missing or blank."""


class ProviderError(RagError):
    """An external model provider is unreachable or returned an error."""

    def __init__(self, message: str, provider: str = "unknown"):
        super().__init__(message)
        self.provider = provider


class PartialBatchFailure(RagError):
    """
    A batch (ingest or backfill) failed part way through.

    Items processed before the failure stay in memory but the snapshot
    is NOT rewritten. The triggering ProviderError is chained as __cause__.
    """

    def __init__(self, message: str, completed: int = 0, total: int = 0):
        super().__init__(message)
        self.completed = completed
        self.total = total


class SnapshotError(RagError):
    """The persisted snapshot exists but could not be read or parsed."""
