"""Outcome of fetching one resource."""

from collections.abc import Callable
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any

from github_data_explorer.exceptions import (
    GitHubNotFoundError,
    GitHubRateLimitError,
    RetryExhaustedError,
)
from github_data_explorer.utils.rate_limiter import RateLimitSnapshot


class FetchStatus(str, Enum):
    """How a resource fetch ended."""

    COMPLETE = "complete"
    RATE_LIMITED = "rate_limited"
    EXHAUSTED = "exhausted"  # deferred response never resolved
    NOT_FOUND = "not_found"
    FAILED = "failed"

    @classmethod
    def from_error(cls, error: Exception) -> "FetchStatus":
        """Status a fetch ends with when ``error`` stops it."""
        if isinstance(error, GitHubRateLimitError):
            return cls.RATE_LIMITED
        if isinstance(error, RetryExhaustedError):
            return cls.EXHAUSTED
        if isinstance(error, GitHubNotFoundError):
            return cls.NOT_FOUND
        return cls.FAILED


@dataclass
class FetchResult:
    """Records collected for one resource plus how the collection ended.

    ``records`` keeps the API's order, pages concatenated. When ``status`` is
    anything but COMPLETE, ``records`` holds whatever arrived before the
    failure and ``error`` holds the cause.
    """

    resource: str
    records: list[dict[str, Any]] = field(default_factory=list)
    status: FetchStatus = FetchStatus.COMPLETE
    pages_fetched: int = 0
    error: Exception | None = None
    rate_limit: RateLimitSnapshot | None = None

    def __len__(self) -> int:
        return len(self.records)

    @property
    def is_complete(self) -> bool:
        return self.status is FetchStatus.COMPLETE

    @property
    def is_partial(self) -> bool:
        """Stopped early but kept some records."""
        return not self.is_complete and bool(self.records)

    @property
    def failed(self) -> bool:
        """Stopped early with nothing to show."""
        return not self.is_complete and not self.records

    def stop(self, error: Exception) -> "FetchResult":
        """Mark the fetch as ended by ``error``, keeping collected records."""
        self.status = FetchStatus.from_error(error)
        self.error = error
        if isinstance(error, GitHubRateLimitError) and error.rate_limit is not None:
            self.rate_limit = error.rate_limit
        return self

    def filtered(self, predicate: Callable[[dict[str, Any]], bool]) -> "FetchResult":
        """Copy of this result keeping only records matching ``predicate``."""
        return replace(self, records=[r for r in self.records if predicate(r)])

    def describe(self) -> str:
        """Short human-readable outcome, e.g. for console output."""
        text = f"{len(self.records)} {self.resource}"
        if self.is_complete:
            return text
        return f"{text} ({self.status.value}: {self.error})"
