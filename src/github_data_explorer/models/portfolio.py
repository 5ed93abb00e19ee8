"""Portfolio summary derived from a user's fetched activity."""

import math
from datetime import date, datetime

from pydantic import BaseModel, Field

from github_data_explorer.models.records import (
    Commit,
    ContributorStats,
    Issue,
    PullRequest,
    WeeklyContribution,
)

# Checked in order; the first matching keyword decides the work type
WORK_TYPE_KEYWORDS: tuple[tuple[str, tuple[str, ...]], ...] = (
    ("bug_fixes", ("fix", "bug")),
    ("features", ("feat", "add")),
    ("refactoring", ("refactor",)),
    ("testing", ("test",)),
    ("documentation", ("docs", "document")),
)

TOP_PULL_REQUESTS = 5
TOP_ACTIVE_WEEKS = 3


def classify_commit(message: str) -> str:
    """Classify a commit message into a work type (``other`` if nothing matches)."""
    lowered = message.lower()
    for work_type, keywords in WORK_TYPE_KEYWORDS:
        if any(keyword in lowered for keyword in keywords):
            return work_type
    return "other"


class ProjectDuration(BaseModel):
    """First and last day the user was active in the repository."""

    start_date: date | None = None
    end_date: date | None = None
    duration_days: int = 0

    @classmethod
    def from_dates(cls, dates: list[datetime]) -> "ProjectDuration":
        if not dates:
            return cls()
        first, last = min(dates), max(dates)
        return cls(
            start_date=first.date(),
            end_date=last.date(),
            duration_days=math.ceil((last - first).total_seconds() / 86400),
        )


class ContributionCounts(BaseModel):
    """Counts of the user's issues, pull requests and commits."""

    total_issues: int = 0
    open_issues: int = 0
    closed_issues: int = 0
    total_prs: int = 0
    open_prs: int = 0
    closed_prs: int = 0
    merged_prs: int = 0
    total_commits: int = 0
    lines_added: int = 0
    lines_deleted: int = 0


class WorkBreakdown(BaseModel):
    """Commits per work type."""

    bug_fixes: int = 0
    features: int = 0
    refactoring: int = 0
    testing: int = 0
    documentation: int = 0
    other: int = 0

    @classmethod
    def from_commits(cls, commits: list[Commit]) -> "WorkBreakdown":
        counts: dict[str, int] = {}
        for commit in commits:
            work_type = classify_commit(commit.message)
            counts[work_type] = counts.get(work_type, 0) + 1
        return cls(**counts)


class TopPullRequest(BaseModel):
    """A pull request ranked by lines changed."""

    number: int
    title: str
    url: str = ""
    changes: int = 0


class PortfolioSummary(BaseModel):
    """Portfolio-ready summary of one user's work in one repository."""

    duration: ProjectDuration = Field(default_factory=ProjectDuration)
    contributions: ContributionCounts = Field(default_factory=ContributionCounts)
    work_breakdown: WorkBreakdown = Field(default_factory=WorkBreakdown)
    top_prs: list[TopPullRequest] = Field(default_factory=list)
    active_periods: list[WeeklyContribution] = Field(default_factory=list)
    contributor_stats: ContributorStats | None = None

    @classmethod
    def from_data(
        cls,
        issues: list[Issue],
        pull_requests: list[PullRequest],
        commits: list[Commit],
        contributor_stats: ContributorStats | None = None,
    ) -> "PortfolioSummary":
        """Create summary from typed activity records."""
        dates = (
            [i.created_at for i in issues]
            + [p.created_at for p in pull_requests]
            + [c.date for c in commits]
        )

        contributions = ContributionCounts(
            total_issues=len(issues),
            open_issues=sum(1 for i in issues if i.state == "open"),
            closed_issues=sum(1 for i in issues if i.state == "closed"),
            total_prs=len(pull_requests),
            open_prs=sum(1 for p in pull_requests if p.state == "open"),
            closed_prs=sum(1 for p in pull_requests if p.state == "closed"),
            merged_prs=sum(1 for p in pull_requests if p.is_merged),
            total_commits=len(commits),
            lines_added=sum(p.additions for p in pull_requests),
            lines_deleted=sum(p.deletions for p in pull_requests),
        )

        top_prs = sorted(pull_requests, key=lambda p: p.changes, reverse=True)[:TOP_PULL_REQUESTS]

        return cls(
            duration=ProjectDuration.from_dates(dates),
            contributions=contributions,
            work_breakdown=WorkBreakdown.from_commits(commits),
            top_prs=[
                TopPullRequest(number=p.number, title=p.title, url=p.url, changes=p.changes)
                for p in top_prs
            ],
            active_periods=(
                contributor_stats.active_weeks[:TOP_ACTIVE_WEEKS] if contributor_stats else []
            ),
            contributor_stats=contributor_stats,
        )
