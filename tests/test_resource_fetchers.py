"""Tests for resource fetchers."""

from unittest.mock import call

import httpx
import pytest

from conftest import json_response

from github_data_explorer.models.results import FetchStatus
from github_data_explorer.services.resource_fetchers import (
    CONTRIBUTOR_STATS,
    RESOURCES,
    ResourceFetcher,
)

REPO = "/repos/octo/repo"


@pytest.fixture
def fetcher(walker):
    return ResourceFetcher(walker, owner="octo", repo="repo", user="octocat")


def issue(number: int, login: str = "octocat", is_pr: bool = False) -> dict:
    record = {"number": number, "user": {"login": login}}
    if is_pr:
        record["pull_request"] = {"url": f"https://api.github.com{REPO}/pulls/{number}"}
    return record


def comment(comment_id: int, login: str) -> dict:
    return {"id": comment_id, "user": {"login": login}, "body": "LGTM"}


class TestResourceSpecs:
    """Tests for the declared resources."""

    def test_all_resources_declared(self):
        """Test that every resource kind has a declaration."""
        assert set(RESOURCES) == {
            "issues",
            "pull_requests",
            "commits",
            "review_comments",
            "issue_comments",
            "contributor_stats",
        }

    def test_request_fills_templates(self):
        """Test that owner, repo and user are substituted."""
        request = RESOURCES["issues"].request("octo", "repo", "octocat")

        assert request.endpoint == f"{REPO}/issues"
        assert dict(request.params) == {"creator": "octocat", "state": "all"}

    def test_only_stats_is_unpaginated(self):
        """Test that contributor statistics is the single non-paginated resource."""
        unpaginated = [name for name, spec in RESOURCES.items() if not spec.paginated]
        assert unpaginated == ["contributor_stats"]


class TestPaginatedFetchers:
    """Tests for fetchers backed by the pagination walker."""

    @pytest.mark.asyncio
    async def test_fetch_issues_excludes_pull_requests(self, fetcher, fake_github):
        """Test that issues are requested by creator and PRs are dropped."""
        fake_github.queue(
            f"{REPO}/issues",
            json_response([issue(1), issue(2, is_pr=True), issue(3)]),
        )

        result = await fetcher.fetch_issues()

        assert [r["number"] for r in result.records] == [1, 3]
        assert result.resource == "issues"
        params = fake_github.requests[0].url.params
        assert params["creator"] == "octocat"
        assert params["state"] == "all"

    @pytest.mark.asyncio
    async def test_fetch_pull_requests_filters_by_author(self, fetcher, fake_github):
        """Test that only the user's pull requests are kept."""
        fake_github.queue(
            f"{REPO}/pulls",
            json_response([issue(10, "octocat"), issue(11, "someone"), issue(12, "OctoCat")]),
        )

        result = await fetcher.fetch_pull_requests()

        assert [r["number"] for r in result.records] == [10, 12]
        assert fake_github.requests[0].url.params["state"] == "all"

    @pytest.mark.asyncio
    async def test_filter_runs_after_walk(self, fetcher, fake_github):
        """Test that filtering does not shorten pages and end the walk early."""
        first_page = [issue(n, "someone") for n in range(1, 100)] + [issue(100, "octocat")]
        fake_github.queue(
            f"{REPO}/pulls",
            json_response(first_page),
            json_response([issue(101, "octocat")]),
        )

        result = await fetcher.fetch_pull_requests()

        assert [r["number"] for r in result.records] == [100, 101]
        assert len(fake_github.requests) == 2

    @pytest.mark.asyncio
    async def test_fetch_commits_by_author(self, fetcher, fake_github):
        """Test that commits are requested with the author filter."""
        fake_github.queue(f"{REPO}/commits", json_response([{"sha": "abc"}]))

        result = await fetcher.fetch_commits()

        assert result.records == [{"sha": "abc"}]
        assert fake_github.requests[0].url.params["author"] == "octocat"

    @pytest.mark.asyncio
    async def test_fetch_review_comments(self, fetcher, fake_github):
        """Test that review comments are filtered to the user."""
        fake_github.queue(
            f"{REPO}/pulls/comments",
            json_response([comment(1, "octocat"), comment(2, "reviewer")]),
        )

        result = await fetcher.fetch_review_comments()

        assert [r["id"] for r in result.records] == [1]

    @pytest.mark.asyncio
    async def test_fetch_issue_comments(self, fetcher, fake_github):
        """Test that issue comments are filtered to the user."""
        fake_github.queue(
            f"{REPO}/issues/comments",
            json_response([comment(1, "reviewer"), comment(2, "octocat")]),
        )

        result = await fetcher.fetch_issue_comments()

        assert [r["id"] for r in result.records] == [2]

    @pytest.mark.asyncio
    async def test_partial_result_keeps_filter(self, fetcher, fake_github):
        """Test that a throttled walk still filters and reports its status."""
        first_page = [issue(n, "octocat" if n % 2 else "someone") for n in range(1, 101)]
        fake_github.queue(
            f"{REPO}/pulls",
            json_response(first_page),
            json_response({"message": "rate limited"}, status_code=403, remaining=0),
        )

        result = await fetcher.fetch_pull_requests()

        assert result.status is FetchStatus.RATE_LIMITED
        assert len(result.records) == 50


class TestContributorStats:
    """Tests for the lazily computed contributor statistics."""

    STATS_PATH = f"{REPO}/stats/contributors"

    @pytest.mark.asyncio
    async def test_deferred_twice_then_ready(self, fetcher, fake_github, sleep):
        """Test 202, 202, 200 succeeds after sleeping twice."""
        stats = [{"author": {"login": "octocat"}, "total": 5, "weeks": []}]
        fake_github.queue(
            self.STATS_PATH,
            json_response({}, status_code=202),
            json_response({}, status_code=202),
            json_response(stats),
        )

        result = await fetcher.fetch_contributor_stats()

        assert result.is_complete
        assert result.records == stats
        assert len(fake_github.requests) == 3
        assert sleep.await_args_list == [call(1.0), call(1.0)]

    @pytest.mark.asyncio
    async def test_not_paginated(self, fetcher, fake_github):
        """Test that statistics are requested once without paging params."""
        fake_github.queue(self.STATS_PATH, json_response([]))

        await fetcher.fetch_contributor_stats()

        assert "page" not in fake_github.requests[0].url.params

    @pytest.mark.asyncio
    async def test_still_computing_exhausts(self, fetcher, fake_github):
        """Test that persistent 202 ends with EXHAUSTED after max attempts."""
        fake_github.route(self.STATS_PATH, lambda request: json_response({}, status_code=202))

        result = await fetcher.fetch_contributor_stats()

        assert result.status is FetchStatus.EXHAUSTED
        assert result.records == []
        assert len(fake_github.requests) == 3

    @pytest.mark.asyncio
    async def test_transient_is_fatal_for_stats(self, fetcher, fake_github, sleep):
        """Test that only 202 is retried for statistics."""
        fake_github.queue(self.STATS_PATH, httpx.ConnectError("reset"))

        result = await fetcher.fetch_contributor_stats()

        assert result.status is FetchStatus.FAILED
        assert len(fake_github.requests) == 1
        sleep.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_no_content_is_empty(self, fetcher, fake_github):
        """Test that 204 for an empty repository is a complete empty result."""
        fake_github.queue(self.STATS_PATH, json_response(None, status_code=204))

        result = await fetcher.fetch_contributor_stats()

        assert result.is_complete
        assert result.records == []

    @pytest.mark.asyncio
    async def test_rate_limited(self, fetcher, fake_github):
        """Test that throttling is reported, not raised."""
        fake_github.queue(
            self.STATS_PATH,
            json_response({"message": "rate limited"}, status_code=403, remaining=0),
        )

        result = await fetcher.fetch(CONTRIBUTOR_STATS)

        assert result.status is FetchStatus.RATE_LIMITED
        assert result.rate_limit.remaining == 0
