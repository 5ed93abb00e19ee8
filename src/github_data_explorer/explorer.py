"""GitHub Data Explorer - High-level API for collecting a user's repository activity."""

import asyncio
import logging
from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import Optional

import httpx

from github_data_explorer.config import Config
from github_data_explorer.exceptions import GitHubExplorerError
from github_data_explorer.models.portfolio import PortfolioSummary
from github_data_explorer.models.records import (
    Comment,
    Commit,
    ContributorStats,
    Issue,
    PullRequest,
    parse_records,
)
from github_data_explorer.models.results import FetchResult
from github_data_explorer.services.github_rest_client import GitHubRestClient
from github_data_explorer.services.paginator import PaginationWalker
from github_data_explorer.services.resource_fetchers import RESOURCES, ResourceFetcher
from github_data_explorer.services.retry import RetryController, RetryPolicy, SleepFn

logger = logging.getLogger(__name__)

ALL_RESOURCES: tuple[str, ...] = tuple(RESOURCES)


@dataclass
class ExplorerData:
    """Everything collected for one user in one repository."""

    owner: str
    repo: str
    user: str
    results: dict[str, FetchResult] = field(default_factory=dict)
    issues: list[Issue] = field(default_factory=list)
    pull_requests: list[PullRequest] = field(default_factory=list)
    commits: list[Commit] = field(default_factory=list)
    review_comments: list[Comment] = field(default_factory=list)
    issue_comments: list[Comment] = field(default_factory=list)
    contributor_stats: Optional[ContributorStats] = None

    @property
    def is_complete(self) -> bool:
        """True when every requested resource was fetched in full."""
        return all(result.is_complete for result in self.results.values())

    @property
    def incomplete(self) -> list[FetchResult]:
        return [result for result in self.results.values() if not result.is_complete]

    def portfolio(self) -> PortfolioSummary:
        """Summarize the collected records for a portfolio."""
        return PortfolioSummary.from_data(
            issues=self.issues,
            pull_requests=self.pull_requests,
            commits=self.commits,
            contributor_stats=self.contributor_stats,
        )


class GitHubDataExplorer:
    """High-level client for collecting one user's activity in one repository.

    Resources are fetched one after another, never concurrently, so the
    rate-limit budget consumed by a run stays predictable.

    Example usage:
        ```python
        from github_data_explorer import Config, GitHubDataExplorer

        async with GitHubDataExplorer(Config(github_token="ghp_xxx")) as explorer:
            data = await explorer.collect("octo-org", "octo-repo", "octocat")
            print(len(data.commits), data.results["commits"].status)
        ```

    Args:
        config: Immutable configuration (token, API URL, paging and retry settings)
        transport: Optional httpx transport, e.g. ``httpx.MockTransport`` in tests
        sleep: Coroutine used for every delay (retries and between pages)
    """

    def __init__(
        self,
        config: Config,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        sleep: SleepFn = asyncio.sleep,
    ):
        self._config = config
        self._transport = transport
        self._sleep = sleep
        self._rest_client: GitHubRestClient | None = None
        self._walker: PaginationWalker | None = None
        self._initialized = False

    @property
    def is_authenticated(self) -> bool:
        """Check if a token is configured."""
        return self._config.is_authenticated

    async def __aenter__(self) -> "GitHubDataExplorer":
        """Async context manager entry."""
        await self._initialize()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        """Async context manager exit."""
        await self.close()

    async def _initialize(self) -> None:
        """Initialize the transport and the fetch machinery."""
        if self._initialized:
            return

        self._rest_client = GitHubRestClient(config=self._config, transport=self._transport)
        retry = RetryController(
            RetryPolicy(
                max_attempts=self._config.max_attempts,
                delay=self._config.retry_delay,
            ),
            sleep=self._sleep,
        )
        self._walker = PaginationWalker(
            self._rest_client,
            retry=retry,
            per_page=self._config.per_page,
            page_delay=self._config.page_delay,
            sleep=self._sleep,
        )

        self._initialized = True
        logger.debug(
            "GitHubDataExplorer initialized (authenticated=%s)",
            self.is_authenticated,
        )

    async def close(self) -> None:
        """Close all HTTP connections."""
        if self._rest_client:
            await self._rest_client.close()
        self._initialized = False
        logger.debug("GitHubDataExplorer closed")

    def _ensure_initialized(self) -> None:
        """Ensure the client is initialized."""
        if not self._initialized:
            raise GitHubExplorerError(
                "Client not initialized. Use 'async with GitHubDataExplorer(...) as explorer:'"
            )

    def fetcher(self, owner: str, repo: str, user: str) -> ResourceFetcher:
        """Resource fetcher bound to one user in one repository."""
        self._ensure_initialized()
        return ResourceFetcher(self._walker, owner, repo, user)

    async def collect(
        self,
        owner: str,
        repo: str,
        user: str,
        resources: Iterable[str] = ALL_RESOURCES,
    ) -> ExplorerData:
        """Fetch the selected resources and convert them to typed records.

        A failure of one resource never stops the others; check
        ``ExplorerData.results`` for each resource's status.

        Args:
            owner: Repository owner (user or organization)
            repo: Repository name
            user: GitHub login whose activity is collected
            resources: Names from ``ALL_RESOURCES``

        Returns:
            ExplorerData with typed records and the raw FetchResult per resource
        """
        self._ensure_initialized()
        selected = list(dict.fromkeys(resources))
        unknown = [name for name in selected if name not in RESOURCES]
        if unknown:
            raise GitHubExplorerError(f"Unknown resource(s): {', '.join(unknown)}")

        logger.info("Collecting %s for %s in %s/%s", ", ".join(selected), user, owner, repo)

        fetcher = self.fetcher(owner, repo, user)
        data = ExplorerData(owner=owner, repo=repo, user=user)

        for name in selected:
            result = await fetcher.fetch(RESOURCES[name])
            data.results[name] = result

            if name == "issues":
                data.issues = parse_records(Issue, result.records)
            elif name == "pull_requests":
                data.pull_requests = parse_records(PullRequest, result.records)
            elif name == "commits":
                data.commits = parse_records(Commit, result.records)
            elif name == "review_comments":
                data.review_comments = parse_records(Comment, result.records)
            elif name == "issue_comments":
                data.issue_comments = parse_records(Comment, result.records)
            elif name == "contributor_stats":
                data.contributor_stats = ContributorStats.for_user(result.records, user)

        if not data.is_complete:
            logger.warning(
                "Incomplete results for %s: %s",
                user,
                "; ".join(result.describe() for result in data.incomplete),
            )

        return data
