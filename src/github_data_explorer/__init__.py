"""GitHub Data Explorer - Extract one user's activity in one GitHub repository.

This package collects, for a single user and repository:
- Issues and pull requests opened by the user
- Commits authored by the user
- Issue comments and pull request review comments
- Contributor statistics (computed lazily by GitHub)

Every fetch is sequential, retries deferred and transient failures a bounded
number of times, and degrades to a partial result instead of raising.

Example usage:
    ```python
    from github_data_explorer import Config, GitHubDataExplorer

    async with GitHubDataExplorer(Config(github_token="ghp_xxx")) as explorer:
        data = await explorer.collect("octo-org", "octo-repo", "octocat")
        print(f"Commits: {len(data.commits)} ({data.results['commits'].status.value})")
    ```
"""

from github_data_explorer._version import version as __version__
from github_data_explorer.config import Config
from github_data_explorer.exceptions import (
    ConfigurationError,
    DeferredResponseError,
    GitHubAPIError,
    GitHubExplorerError,
    GitHubNotFoundError,
    GitHubRateLimitError,
    RetryExhaustedError,
    TransientError,
)
from github_data_explorer.explorer import ALL_RESOURCES, ExplorerData, GitHubDataExplorer
from github_data_explorer.models import (
    Comment,
    Commit,
    ContributorStats,
    FetchResult,
    FetchStatus,
    Issue,
    PortfolioSummary,
    PullRequest,
    WeeklyContribution,
)

__all__ = [
    "__version__",
    # Main entry point
    "GitHubDataExplorer",
    "ExplorerData",
    "ALL_RESOURCES",
    # Configuration
    "Config",
    # Exceptions
    "GitHubExplorerError",
    "GitHubAPIError",
    "GitHubRateLimitError",
    "GitHubNotFoundError",
    "DeferredResponseError",
    "TransientError",
    "RetryExhaustedError",
    "ConfigurationError",
    # Results
    "FetchResult",
    "FetchStatus",
    # Models
    "Issue",
    "PullRequest",
    "Commit",
    "Comment",
    "ContributorStats",
    "WeeklyContribution",
    "PortfolioSummary",
]
