"""Exceptions for GitHub Data Explorer.

Exception Hierarchy:
    GitHubExplorerError (base)
    ├── GitHubAPIError (HTTP API errors with status codes, fatal)
    │   ├── GitHubRateLimitError (403 with an exhausted rate limit)
    │   ├── GitHubNotFoundError (404 not found)
    │   └── DeferredResponseError (202, GitHub is still computing the result)
    ├── TransientError (network-level failure: timeout, connection reset)
    ├── RetryExhaustedError (a deferred response never resolved)
    └── ConfigurationError (invalid or missing settings)

Usage:
    - DeferredResponseError and TransientError are retried by the
      RetryController up to its attempt bound.
    - GitHubRateLimitError is never retried; the PaginationWalker stops
      the whole walk when it sees one.
    - RetryExhaustedError means "gave up waiting for computation" and is
      deliberately not a GitHubAPIError, so callers can tell it apart from
      "the server rejected the request".
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from github_data_explorer.utils.rate_limiter import RateLimitSnapshot

__all__ = [
    "GitHubExplorerError",
    "GitHubAPIError",
    "GitHubRateLimitError",
    "GitHubNotFoundError",
    "DeferredResponseError",
    "TransientError",
    "RetryExhaustedError",
    "ConfigurationError",
]


class GitHubExplorerError(Exception):
    """Base exception for all GitHub Data Explorer errors."""

    pass


class GitHubAPIError(GitHubExplorerError):
    """Base exception for GitHub API errors (HTTP responses with error status codes)."""

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        response_body: dict | None = None,
    ):
        super().__init__(message)
        self.status_code = status_code
        self.response_body = response_body


class GitHubRateLimitError(GitHubAPIError):
    """Raised when GitHub answers 403 and the remaining quota is zero."""

    def __init__(
        self,
        message: str,
        status_code: int | None = 403,
        response_body: dict | None = None,
        rate_limit: RateLimitSnapshot | None = None,
    ):
        super().__init__(message, status_code=status_code, response_body=response_body)
        self.rate_limit = rate_limit

    @property
    def reset_time(self) -> float | None:
        """Unix timestamp at which the quota resets, if known."""
        return self.rate_limit.reset_time if self.rate_limit else None


class GitHubNotFoundError(GitHubAPIError):
    """Raised when a GitHub resource is not found (HTTP 404)."""

    def __init__(
        self,
        message: str,
        status_code: int | None = 404,
        response_body: dict | None = None,
    ):
        super().__init__(message, status_code=status_code, response_body=response_body)


class DeferredResponseError(GitHubAPIError):
    """Raised when GitHub answers 202 Accepted.

    Statistics endpoints are computed lazily: the first request starts a
    background job and returns 202 until the data is ready.
    """

    def __init__(self, message: str, status_code: int | None = 202):
        super().__init__(message, status_code=status_code)


class TransientError(GitHubExplorerError):
    """Raised for network-level failures that may succeed on a later attempt."""

    pass


class RetryExhaustedError(GitHubExplorerError):
    """Raised when every attempt of a call came back deferred."""

    def __init__(self, message: str, attempts: int, last_error: Exception | None = None):
        super().__init__(message)
        self.attempts = attempts
        self.last_error = last_error


class ConfigurationError(GitHubExplorerError):
    """Raised when configuration values are missing or invalid."""

    pass
