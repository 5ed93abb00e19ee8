"""Pytest configuration and fixtures."""

import time
from collections.abc import Callable
from typing import Any
from unittest.mock import AsyncMock

import httpx
import pytest

from github_data_explorer.config import Config
from github_data_explorer.services.github_rest_client import GitHubRestClient
from github_data_explorer.services.paginator import PaginationWalker
from github_data_explorer.services.retry import RetryController, RetryPolicy

Handler = Callable[[httpx.Request], httpx.Response]


def json_response(
    data: Any = None,
    status_code: int = 200,
    remaining: int | None = 4999,
    limit: int = 5000,
) -> httpx.Response:
    """Build a GitHub-like response with rate limit headers."""
    headers = {
        "X-RateLimit-Limit": str(limit),
        "X-RateLimit-Reset": str(int(time.time()) + 3600),
    }
    if remaining is not None:
        headers["X-RateLimit-Remaining"] = str(remaining)
    if data is None:
        return httpx.Response(status_code, headers=headers)
    return httpx.Response(status_code, json=data, headers=headers)


def make_records(count: int, prefix: str = "record") -> list[dict[str, Any]]:
    return [{"id": i, "name": f"{prefix}-{i}"} for i in range(1, count + 1)]


class FakeGitHub:
    """In-memory stand-in for the GitHub REST API, served through httpx.MockTransport.

    Routes map a URL path to either a list of responses returned in order, or
    a handler called with the request.
    """

    def __init__(self):
        self.requests: list[httpx.Request] = []
        self._queues: dict[str, list[httpx.Response | Exception]] = {}
        self._handlers: dict[str, Handler] = {}

    def queue(self, path: str, *responses: httpx.Response | Exception) -> None:
        """Serve ``responses`` one per request, in order."""
        self._queues.setdefault(path, []).extend(responses)

    def route(self, path: str, handler: Handler) -> None:
        self._handlers[path] = handler

    def serve_pages(self, path: str, records: list[dict[str, Any]]) -> None:
        """Serve ``records`` honoring the page and per_page query parameters."""

        def handler(request: httpx.Request) -> httpx.Response:
            page = int(request.url.params.get("page", "1"))
            per_page = int(request.url.params.get("per_page", "30"))
            start = (page - 1) * per_page
            return json_response(records[start : start + per_page])

        self.route(path, handler)

    def handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path

        queued = self._queues.get(path)
        if queued:
            response = queued.pop(0)
            if isinstance(response, Exception):
                raise response
            return response

        handler = self._handlers.get(path)
        if handler is not None:
            return handler(request)

        return json_response({"message": "Not Found"}, status_code=404)

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handle)

    def requests_for(self, path: str) -> list[httpx.Request]:
        return [r for r in self.requests if r.url.path == path]

    def pages_requested(self, path: str) -> list[int]:
        return [int(r.url.params["page"]) for r in self.requests_for(path)]


@pytest.fixture
def test_config():
    """Create a test configuration."""
    return Config(
        github_token="test_token",
        github_api_url="https://api.github.com",
        per_page=100,
        page_delay=0.5,
        max_attempts=3,
        retry_delay=1.0,
    )


@pytest.fixture
def fake_github():
    return FakeGitHub()


@pytest.fixture
def sleep():
    """Recorded replacement for asyncio.sleep so tests never wait."""
    return AsyncMock(return_value=None)


@pytest.fixture
def rest_client(test_config, fake_github):
    return GitHubRestClient(test_config, transport=fake_github.transport)


@pytest.fixture
def retry_controller(sleep):
    return RetryController(RetryPolicy(max_attempts=3, delay=1.0), sleep=sleep)


@pytest.fixture
def walker(rest_client, retry_controller, sleep):
    return PaginationWalker(
        rest_client,
        retry=retry_controller,
        per_page=100,
        page_delay=0.5,
        sleep=sleep,
    )
