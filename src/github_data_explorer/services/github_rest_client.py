"""GitHub REST API transport.

One call to ``GitHubRestClient.get`` performs exactly one HTTP request and
either returns the decoded response or raises a classified exception. Retries
and delays live in ``services.retry``.
"""

import logging
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Optional

import httpx

from github_data_explorer._version import version as __version__
from github_data_explorer.config import Config
from github_data_explorer.exceptions import (
    DeferredResponseError,
    GitHubAPIError,
    GitHubNotFoundError,
    GitHubRateLimitError,
    TransientError,
)
from github_data_explorer.utils.pagination import RequestDescriptor
from github_data_explorer.utils.rate_limiter import RateLimitSnapshot

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ApiResponse:
    """Successful response: decoded body plus the headers the core cares about."""

    body: Any
    status_code: int
    headers: Mapping[str, str]
    rate_limit: RateLimitSnapshot


class GitHubRestClient:
    """Async single-shot client for the GitHub REST API."""

    def __init__(
        self,
        config: Config,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.config = config
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None
        self.last_rate_limit: Optional[RateLimitSnapshot] = None

    def _get_headers(self) -> dict[str, str]:
        """Get headers for API requests."""
        headers = {
            "Accept": "application/vnd.github+json",
            "X-GitHub-Api-Version": "2022-11-28",
            "User-Agent": f"github-data-explorer/{__version__}",
        }
        if self.config.github_token:
            headers["Authorization"] = f"Bearer {self.config.github_token}"
        return headers

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create the HTTP client."""
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                base_url=self.config.github_api_url,
                headers=self._get_headers(),
                timeout=self.config.request_timeout,
                transport=self._transport,
                follow_redirects=True,
            )
        return self._client

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._client and not self._client.is_closed:
            await self._client.aclose()

    async def __aenter__(self) -> "GitHubRestClient":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    async def get(self, request: RequestDescriptor) -> ApiResponse:
        """Perform one GET request and classify the outcome.

        Raises:
            DeferredResponseError: 202, the result is still being computed
            GitHubRateLimitError: 403 with zero remaining requests
            GitHubNotFoundError: 404
            TransientError: timeout or connection failure
            GitHubAPIError: any other non-2xx status, invalid JSON, or another httpx error
        """
        client = await self._get_client()
        logger.debug("GET %s", request)

        try:
            response = await client.get(request.endpoint, params=request.query_params())
        except httpx.TimeoutException as e:
            raise TransientError(f"Request timed out: {request}") from e
        except httpx.TransportError as e:
            raise TransientError(f"Connection failed for {request}: {e}") from e
        except httpx.HTTPError as e:
            # Undecodable body or redirect loop
            raise GitHubAPIError(f"Request failed for {request}: {e}") from e

        rate_limit = RateLimitSnapshot.from_headers(response.headers)
        self.last_rate_limit = rate_limit
        if rate_limit.is_low:
            logger.warning("GitHub rate limit low: %s", rate_limit.describe())

        status = response.status_code

        if status == 202:
            raise DeferredResponseError(f"Still computing: {request.endpoint}")
        elif status == 404:
            raise GitHubNotFoundError(
                f"Resource not found: {request.endpoint}",
                response_body=_error_body(response),
            )
        elif status == 403 and rate_limit.is_exhausted:
            raise GitHubRateLimitError(
                f"Rate limit exceeded ({rate_limit.describe()})",
                response_body=_error_body(response),
                rate_limit=rate_limit,
            )
        elif not 200 <= status < 300:
            body = _error_body(response)
            raise GitHubAPIError(
                f"API error {status}: {body.get('message', 'Unknown error')}",
                status_code=status,
                response_body=body,
            )

        if not response.content:
            body = None
        else:
            try:
                body = response.json()
            except ValueError as e:
                raise GitHubAPIError(
                    f"Invalid JSON in response from {request.endpoint}",
                    status_code=status,
                ) from e

        return ApiResponse(
            body=body,
            status_code=status,
            headers=response.headers,
            rate_limit=rate_limit,
        )


def _error_body(response: httpx.Response) -> dict:
    if not response.content:
        return {}
    try:
        body = response.json()
    except ValueError:
        return {"message": response.text[:200]}
    return body if isinstance(body, dict) else {"message": str(body)[:200]}
