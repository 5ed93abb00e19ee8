"""Pagination walker for list endpoints of the GitHub REST API."""

import asyncio
import logging

from github_data_explorer.exceptions import GitHubAPIError, GitHubExplorerError
from github_data_explorer.models.results import FetchResult
from github_data_explorer.services.github_rest_client import GitHubRestClient
from github_data_explorer.services.retry import (
    DEFAULT_RETRY_ON,
    RetryController,
    SleepFn,
)
from github_data_explorer.utils.pagination import PageCursor, RequestDescriptor

logger = logging.getLogger(__name__)


class PaginationWalker:
    """Collects every page of a list endpoint, one page at a time.

    Pages are requested in increasing order starting at 1. The walk ends on
    the first page holding fewer than ``per_page`` records; the ``Link``
    header is not consulted. Any error that survives the retry controller
    ends the walk too, and the records gathered so far are returned with a
    status naming the cause. ``walk`` never raises for API failures.
    """

    def __init__(
        self,
        client: GitHubRestClient,
        retry: RetryController | None = None,
        per_page: int = 100,
        page_delay: float = 0.1,
        sleep: SleepFn = asyncio.sleep,
    ):
        self.client = client
        self.retry = retry or RetryController(sleep=sleep)
        self.per_page = per_page
        self.page_delay = page_delay
        self._sleep = sleep

    async def walk(
        self,
        request: RequestDescriptor,
        resource: str | None = None,
        retry_on: tuple[type[Exception], ...] = DEFAULT_RETRY_ON,
    ) -> FetchResult:
        """Fetch all pages of ``request``.

        Args:
            request: Endpoint and fixed query parameters (without paging)
            resource: Name used in logs and on the result
            retry_on: Exception types the retry controller may retry

        Returns:
            FetchResult with the concatenated records of every fetched page
        """
        resource = resource or request.endpoint
        cursor = PageCursor(per_page=self.per_page)
        result = FetchResult(resource=resource)

        while True:
            page_request = cursor.request_for(request)
            try:
                response = await self.retry.call(
                    lambda: self.client.get(page_request),
                    retry_on=retry_on,
                    description=f"{resource} page {cursor.page}",
                )
            except GitHubExplorerError as e:
                return self._abandon(result, e, cursor.page)

            result.rate_limit = response.rate_limit
            records = response.body if response.body is not None else []
            if not isinstance(records, list):
                error = GitHubAPIError(
                    f"Expected a list from {request.endpoint}, got {type(records).__name__}",
                    status_code=response.status_code,
                )
                return self._abandon(result, error, cursor.page)

            result.records.extend(records)
            result.pages_fetched += 1

            if cursor.is_last_page(len(records)):
                logger.info(
                    "Fetched %d %s in %d page(s)",
                    len(result.records),
                    resource,
                    result.pages_fetched,
                )
                return result

            cursor.advance()
            if self.page_delay > 0:
                await self._sleep(self.page_delay)

    def _abandon(self, result: FetchResult, error: Exception, page: int) -> FetchResult:
        result.stop(error)
        logger.warning(
            "Stopped fetching %s at page %d (%s): %s. Keeping %d record(s).",
            result.resource,
            page,
            result.status.value,
            error,
            len(result.records),
        )
        return result
