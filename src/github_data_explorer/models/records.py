"""Typed views of raw GitHub REST API records."""

import logging
from datetime import date, datetime, timezone
from typing import Any, TypeVar

from pydantic import BaseModel, Field, ValidationError

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)


class Issue(BaseModel):
    """Issue data."""

    number: int
    title: str
    state: str  # open, closed
    created_at: datetime
    closed_at: datetime | None = None
    url: str = ""
    labels: list[str] = Field(default_factory=list)
    body: str | None = None
    comments_count: int = 0

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> "Issue":
        """Create from GitHub Issues API response."""
        return cls(
            number=data["number"],
            title=data.get("title") or "",
            state=data.get("state") or "",
            created_at=_parse_datetime(data.get("created_at")),
            closed_at=_parse_datetime(data.get("closed_at")),
            url=data.get("html_url") or "",
            labels=[label.get("name", "") for label in data.get("labels") or []],
            body=data.get("body"),
            comments_count=data.get("comments") or 0,
        )


class PullRequest(BaseModel):
    """Pull request data."""

    number: int
    title: str
    state: str  # open, closed
    created_at: datetime
    merged_at: datetime | None = None
    closed_at: datetime | None = None
    url: str = ""
    body: str | None = None
    comments_count: int = 0
    review_comments_count: int = 0
    # Only present on single pull request responses, zero from list endpoints
    changed_files: int = 0
    additions: int = 0
    deletions: int = 0

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> "PullRequest":
        """Create from GitHub Pull Requests API response."""
        return cls(
            number=data["number"],
            title=data.get("title") or "",
            state=data.get("state") or "",
            created_at=_parse_datetime(data.get("created_at")),
            merged_at=_parse_datetime(data.get("merged_at")),
            closed_at=_parse_datetime(data.get("closed_at")),
            url=data.get("html_url") or "",
            body=data.get("body"),
            comments_count=data.get("comments") or 0,
            review_comments_count=data.get("review_comments") or 0,
            changed_files=data.get("changed_files") or 0,
            additions=data.get("additions") or 0,
            deletions=data.get("deletions") or 0,
        )

    @property
    def is_merged(self) -> bool:
        return self.merged_at is not None

    @property
    def changes(self) -> int:
        return self.additions + self.deletions


class Commit(BaseModel):
    """Git commit data."""

    sha: str
    short_sha: str
    message: str
    date: datetime
    url: str = ""
    author_name: str = ""
    author_email: str | None = None

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> "Commit":
        """Create from GitHub Commits API response."""
        commit_data = data["commit"]
        author_data = commit_data.get("author") or {}
        sha = data["sha"]
        return cls(
            sha=sha,
            short_sha=sha[:7],
            message=commit_data.get("message") or "",
            date=_parse_datetime(author_data.get("date")),
            url=data.get("html_url") or "",
            author_name=author_data.get("name") or "",
            author_email=author_data.get("email"),
        )

    @property
    def subject(self) -> str:
        """First line of the commit message."""
        return self.message.split("\n", 1)[0]


class Comment(BaseModel):
    """Issue comment or pull request review comment."""

    id: int
    user: str
    created_at: datetime
    updated_at: datetime | None = None
    body: str = ""
    url: str = ""

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> "Comment":
        """Create from GitHub comments API response."""
        return cls(
            id=data["id"],
            user=(data.get("user") or {}).get("login", ""),
            created_at=_parse_datetime(data.get("created_at")),
            updated_at=_parse_datetime(data.get("updated_at")),
            body=data.get("body") or "",
            url=data.get("html_url") or "",
        )


class WeeklyContribution(BaseModel):
    """One week of a contributor's activity."""

    week: date
    additions: int = 0
    deletions: int = 0
    commits: int = 0

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> "WeeklyContribution":
        """Create from one entry of the ``weeks`` array (``w`` is a Unix timestamp)."""
        return cls(
            week=datetime.fromtimestamp(data["w"], tz=timezone.utc).date(),
            additions=data.get("a", 0),
            deletions=data.get("d", 0),
            commits=data.get("c", 0),
        )


class ContributorStats(BaseModel):
    """Contribution statistics for one contributor."""

    username: str
    total_commits: int = 0
    weekly_contributions: list[WeeklyContribution] = Field(default_factory=list)

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> "ContributorStats":
        """Create from one entry of the contributor statistics response."""
        return cls(
            username=(data.get("author") or {}).get("login", ""),
            total_commits=data.get("total", 0),
            weekly_contributions=[WeeklyContribution.from_api(w) for w in data.get("weeks", [])],
        )

    @classmethod
    def for_user(cls, data: list[dict[str, Any]], username: str) -> "ContributorStats | None":
        """Find the statistics of ``username`` in a contributor statistics response."""
        for stats in parse_records(cls, data):
            if stats.username.lower() == username.lower():
                return stats
        return None

    @property
    def total_additions(self) -> int:
        return sum(w.additions for w in self.weekly_contributions)

    @property
    def total_deletions(self) -> int:
        return sum(w.deletions for w in self.weekly_contributions)

    @property
    def active_weeks(self) -> list[WeeklyContribution]:
        """Weeks with at least one commit, busiest first."""
        weeks = [w for w in self.weekly_contributions if w.commits > 0]
        return sorted(weeks, key=lambda w: w.commits, reverse=True)


def parse_records(model: type[ModelT], records: list[dict[str, Any]]) -> list[ModelT]:
    """Convert raw records with ``model.from_api``, skipping malformed ones."""
    parsed = []
    for record in records:
        try:
            parsed.append(model.from_api(record))
        except (KeyError, TypeError, AttributeError, ValidationError) as e:
            logger.warning("Skipping malformed %s record: %s", model.__name__, e)
    return parsed


def _parse_datetime(value: str | None) -> datetime | None:
    """Parse ISO datetime string."""
    if not value:
        return None
    try:
        if value.endswith("Z"):
            value = value[:-1] + "+00:00"
        return datetime.fromisoformat(value)
    except (ValueError, TypeError):
        return None
