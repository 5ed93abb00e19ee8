"""Resource fetchers: one declaration per kind of repository activity.

Each resource is a ``ResourceSpec`` naming the endpoint, its fixed query
parameters and an optional client-side filter for endpoints that cannot
filter by user on the server. Filters run after the walk, so page-size
termination always sees the raw page lengths.
"""

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any, Optional

from github_data_explorer.exceptions import GitHubAPIError, GitHubExplorerError
from github_data_explorer.models.results import FetchResult
from github_data_explorer.services.paginator import PaginationWalker
from github_data_explorer.services.retry import DEFAULT_RETRY_ON, DEFERRED_ONLY
from github_data_explorer.utils.pagination import RequestDescriptor

logger = logging.getLogger(__name__)

RecordFilter = Callable[[dict[str, Any], str], bool]


def _authored_by(record: dict[str, Any], user: str) -> bool:
    login = (record.get("user") or {}).get("login") or ""
    return login.lower() == user.lower()


def _is_plain_issue(record: dict[str, Any], user: str) -> bool:
    # The issues endpoint also lists pull requests
    return "pull_request" not in record


@dataclass(frozen=True)
class ResourceSpec:
    """How to fetch one resource kind for a user in a repository."""

    name: str
    endpoint: str  # template with {owner} and {repo}
    params: dict[str, str] = field(default_factory=dict)  # values may use {user}
    record_filter: Optional[RecordFilter] = None
    paginated: bool = True
    retry_on: tuple[type[Exception], ...] = DEFAULT_RETRY_ON

    def request(self, owner: str, repo: str, user: str) -> RequestDescriptor:
        return RequestDescriptor(
            endpoint=self.endpoint.format(owner=owner, repo=repo),
            params={key: value.format(user=user) for key, value in self.params.items()},
        )


ISSUES = ResourceSpec(
    name="issues",
    endpoint="/repos/{owner}/{repo}/issues",
    params={"creator": "{user}", "state": "all"},
    record_filter=_is_plain_issue,
)

PULL_REQUESTS = ResourceSpec(
    name="pull_requests",
    endpoint="/repos/{owner}/{repo}/pulls",
    params={"state": "all"},
    record_filter=_authored_by,
)

COMMITS = ResourceSpec(
    name="commits",
    endpoint="/repos/{owner}/{repo}/commits",
    params={"author": "{user}"},
)

REVIEW_COMMENTS = ResourceSpec(
    name="review_comments",
    endpoint="/repos/{owner}/{repo}/pulls/comments",
    record_filter=_authored_by,
)

ISSUE_COMMENTS = ResourceSpec(
    name="issue_comments",
    endpoint="/repos/{owner}/{repo}/issues/comments",
    record_filter=_authored_by,
)

# Computed lazily by GitHub: answers 202 until ready. Only 202 is retried.
CONTRIBUTOR_STATS = ResourceSpec(
    name="contributor_stats",
    endpoint="/repos/{owner}/{repo}/stats/contributors",
    paginated=False,
    retry_on=DEFERRED_ONLY,
)

RESOURCES: dict[str, ResourceSpec] = {
    spec.name: spec
    for spec in (
        ISSUES,
        PULL_REQUESTS,
        COMMITS,
        REVIEW_COMMENTS,
        ISSUE_COMMENTS,
        CONTRIBUTOR_STATS,
    )
}


class ResourceFetcher:
    """Fetches activity of one user in one repository.

    Every method returns a FetchResult and never raises for API failures;
    inspect ``status`` to learn whether the collection is complete.
    """

    def __init__(self, walker: PaginationWalker, owner: str, repo: str, user: str):
        self.walker = walker
        self.owner = owner
        self.repo = repo
        self.user = user

    @property
    def repo_full_name(self) -> str:
        return f"{self.owner}/{self.repo}"

    async def fetch(self, spec: ResourceSpec) -> FetchResult:
        """Fetch any declared resource."""
        request = spec.request(self.owner, self.repo, self.user)
        logger.debug("Fetching %s for %s in %s", spec.name, self.user, self.repo_full_name)

        if spec.paginated:
            result = await self.walker.walk(request, resource=spec.name, retry_on=spec.retry_on)
        else:
            result = await self._fetch_single(request, spec)

        if spec.record_filter is not None:
            record_filter = spec.record_filter
            result = result.filtered(lambda record: record_filter(record, self.user))
        return result

    async def _fetch_single(self, request: RequestDescriptor, spec: ResourceSpec) -> FetchResult:
        result = FetchResult(resource=spec.name)
        client = self.walker.client
        try:
            response = await self.walker.retry.call(
                lambda: client.get(request),
                retry_on=spec.retry_on,
                description=spec.name,
            )
        except GitHubExplorerError as e:
            logger.warning("Could not fetch %s for %s: %s", spec.name, self.repo_full_name, e)
            return result.stop(e)

        result.rate_limit = response.rate_limit
        result.pages_fetched = 1
        # 204 No Content is returned for repositories without history
        body = response.body if response.body is not None else []
        if not isinstance(body, list):
            error = GitHubAPIError(
                f"Expected a list from {request.endpoint}, got {type(body).__name__}",
                status_code=response.status_code,
            )
            logger.warning("Could not fetch %s for %s: %s", spec.name, self.repo_full_name, error)
            return result.stop(error)

        result.records.extend(body)
        return result

    async def fetch_issues(self) -> FetchResult:
        """Issues opened by the user (pull requests excluded)."""
        return await self.fetch(ISSUES)

    async def fetch_pull_requests(self) -> FetchResult:
        """Pull requests opened by the user, in any state."""
        return await self.fetch(PULL_REQUESTS)

    async def fetch_commits(self) -> FetchResult:
        """Commits authored by the user on the default branch."""
        return await self.fetch(COMMITS)

    async def fetch_review_comments(self) -> FetchResult:
        """Pull request review comments written by the user."""
        return await self.fetch(REVIEW_COMMENTS)

    async def fetch_issue_comments(self) -> FetchResult:
        """Issue and pull request conversation comments written by the user."""
        return await self.fetch(ISSUE_COMMENTS)

    async def fetch_contributor_stats(self) -> FetchResult:
        """Weekly contribution statistics for every contributor of the repository."""
        return await self.fetch(CONTRIBUTOR_STATS)
