"""Utility modules for GitHub Data Explorer."""

from github_data_explorer.utils.pagination import PageCursor, RequestDescriptor
from github_data_explorer.utils.rate_limiter import (
    RateLimitSnapshot,
    check_and_report_rate_limit,
    check_rate_limit_from_api,
    format_reset_time,
    format_time_remaining,
)

__all__ = [
    "PageCursor",
    "RequestDescriptor",
    "RateLimitSnapshot",
    "check_and_report_rate_limit",
    "check_rate_limit_from_api",
    "format_reset_time",
    "format_time_remaining",
]
