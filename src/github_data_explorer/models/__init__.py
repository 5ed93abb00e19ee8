"""Data models for GitHub Data Explorer."""

from github_data_explorer.models.portfolio import (
    ContributionCounts,
    PortfolioSummary,
    ProjectDuration,
    TopPullRequest,
    WorkBreakdown,
    classify_commit,
)
from github_data_explorer.models.records import (
    Comment,
    Commit,
    ContributorStats,
    Issue,
    PullRequest,
    WeeklyContribution,
    parse_records,
)
from github_data_explorer.models.results import FetchResult, FetchStatus

__all__ = [
    "Issue",
    "PullRequest",
    "Commit",
    "Comment",
    "ContributorStats",
    "WeeklyContribution",
    "parse_records",
    "FetchResult",
    "FetchStatus",
    "PortfolioSummary",
    "ProjectDuration",
    "ContributionCounts",
    "WorkBreakdown",
    "TopPullRequest",
    "classify_commit",
]
