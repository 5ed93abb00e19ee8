"""Rate limit snapshots and reporting for GitHub API responses."""

import logging
import math
import time
from collections.abc import Mapping
from dataclasses import dataclass
from datetime import datetime

import httpx
from rich.console import Console

from github_data_explorer._version import version as __version__

logger = logging.getLogger(__name__)

console = Console(stderr=True)

# Warn when fewer requests than this remain in the current window
LOW_REMAINING_THRESHOLD = 10

LIMIT_HEADER = "x-ratelimit-limit"
REMAINING_HEADER = "x-ratelimit-remaining"
RESET_HEADER = "x-ratelimit-reset"


def format_time_remaining(seconds: float) -> str:
    """Format seconds into a human-friendly string."""
    if seconds <= 0:
        return "now"

    seconds = int(seconds)

    if seconds < 60:
        return f"{seconds} second{'s' if seconds != 1 else ''}"
    elif seconds < 3600:
        minutes = seconds // 60
        secs = seconds % 60
        if secs > 0:
            return f"{minutes} min {secs} sec"
        return f"{minutes} minute{'s' if minutes != 1 else ''}"
    else:
        hours = seconds // 3600
        minutes = (seconds % 3600) // 60
        if minutes > 0:
            return f"{hours} hr {minutes} min"
        return f"{hours} hour{'s' if hours != 1 else ''}"


def format_reset_time(reset_timestamp: float) -> str:
    """Format reset timestamp to a human-readable local time."""
    try:
        reset_dt = datetime.fromtimestamp(reset_timestamp)
    except (OverflowError, OSError, ValueError):
        return "unknown"
    return reset_dt.strftime("%H:%M:%S")


@dataclass(frozen=True)
class RateLimitSnapshot:
    """Rate limit values read from one response. Any field may be missing."""

    limit: int | None = None
    remaining: int | None = None
    reset_time: float | None = None  # Unix timestamp

    @classmethod
    def from_headers(cls, headers: Mapping[str, str]) -> "RateLimitSnapshot":
        """Build a snapshot from GitHub API response headers."""
        lowered = {k.lower(): v for k, v in headers.items()}
        return cls(
            limit=_parse_int(lowered.get(LIMIT_HEADER)),
            remaining=_parse_int(lowered.get(REMAINING_HEADER)),
            reset_time=_parse_timestamp(lowered.get(RESET_HEADER)),
        )

    @property
    def is_exhausted(self) -> bool:
        """True only when the server explicitly reported zero remaining requests."""
        return self.remaining is not None and self.remaining <= 0

    @property
    def is_low(self) -> bool:
        return self.remaining is not None and self.remaining < LOW_REMAINING_THRESHOLD

    @property
    def seconds_until_reset(self) -> float:
        """Get seconds until rate limit resets."""
        if self.reset_time is None:
            return 0.0
        return max(0.0, self.reset_time - time.time())

    def describe(self) -> str:
        """One-line description suitable for log messages."""
        remaining = "?" if self.remaining is None else self.remaining
        limit = "?" if self.limit is None else self.limit
        parts = [f"{remaining}/{limit} remaining"]
        if self.reset_time is not None:
            parts.append(
                f"resets in {format_time_remaining(self.seconds_until_reset)} "
                f"(at {format_reset_time(self.reset_time)})"
            )
        return ", ".join(parts)


def _parse_int(value: str | None) -> int | None:
    if value is None:
        return None
    try:
        return int(value)
    except ValueError:
        return None


def _parse_timestamp(value: str | None) -> float | None:
    """Parse a Unix timestamp header, None unless it is a representable time."""
    if value is None:
        return None
    try:
        timestamp = float(value)
        datetime.fromtimestamp(timestamp)
    except (ValueError, OverflowError, OSError):
        return None
    return timestamp if math.isfinite(timestamp) else None


async def check_rate_limit_from_api(
    api_url: str = "https://api.github.com",
    token: str | None = None,
    timeout: float = 30.0,
) -> RateLimitSnapshot | None:
    """Check current core rate limit status from the GitHub API.

    The /rate_limit endpoint does not count against the quota.

    Returns:
        Snapshot of the core rate limit, or None if it could not be checked
    """
    headers = {
        "Accept": "application/vnd.github+json",
        "User-Agent": f"github-data-explorer/{__version__}",
    }
    if token:
        headers["Authorization"] = f"Bearer {token}"

    try:
        async with httpx.AsyncClient(timeout=timeout) as client:
            response = await client.get(f"{api_url.rstrip('/')}/rate_limit", headers=headers)
    except httpx.HTTPError as e:
        logger.warning("Could not check rate limit: %s", e)
        return None

    if response.status_code != 200:
        logger.warning("Could not check rate limit: HTTP %d", response.status_code)
        return None

    try:
        body = response.json()
    except ValueError:
        body = None
    if not isinstance(body, dict):
        logger.warning("Could not check rate limit: unexpected response body")
        return None

    core = (body.get("resources") or {}).get("core") or {}
    return RateLimitSnapshot(
        limit=core.get("limit"),
        remaining=core.get("remaining"),
        reset_time=core.get("reset"),
    )


def check_and_report_rate_limit(snapshot: RateLimitSnapshot, is_authenticated: bool) -> bool:
    """Check rate limit and report status to user.

    Args:
        snapshot: Rate limit snapshot from check_rate_limit_from_api()
        is_authenticated: Whether using authenticated access

    Returns:
        True if OK to proceed, False if rate limit exhausted
    """
    if snapshot.is_exhausted:
        console.print(
            f"\n[red]Rate limit exhausted[/red] (0/{snapshot.limit} requests remaining)"
        )
        if snapshot.reset_time is not None:
            human_time = format_time_remaining(snapshot.seconds_until_reset)
            reset_at = format_reset_time(snapshot.reset_time)
            console.print(f"[yellow]  Resets in: {human_time} (at {reset_at})[/yellow]")

        if not is_authenticated:
            console.print(
                "[dim]  Tip: Set GITHUB_TOKEN for 5,000 requests/hour instead of 60[/dim]"
            )

        console.print()
        return False

    # Show warning if running low
    if snapshot.is_low:
        console.print(
            f"[yellow]Warning: Only {snapshot.remaining}/{snapshot.limit} "
            f"API requests remaining[/yellow]"
        )

    return True
