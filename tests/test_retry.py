"""Tests for the retry controller."""

from unittest.mock import AsyncMock, call

import pytest

from github_data_explorer.exceptions import (
    DeferredResponseError,
    GitHubAPIError,
    GitHubNotFoundError,
    GitHubRateLimitError,
    RetryExhaustedError,
    TransientError,
)
from github_data_explorer.services.retry import (
    DEFERRED_ONLY,
    RetryController,
    RetryPolicy,
)
from github_data_explorer.utils.rate_limiter import RateLimitSnapshot


def deferred() -> DeferredResponseError:
    return DeferredResponseError("Still computing")


class TestRetryPolicy:
    """Tests for RetryPolicy validation."""

    def test_defaults(self):
        """Test default attempt count and delay."""
        policy = RetryPolicy()
        assert policy.max_attempts == 3
        assert policy.delay == 1.0

    def test_rejects_zero_attempts(self):
        """Test that at least one attempt is required."""
        with pytest.raises(ValueError):
            RetryPolicy(max_attempts=0)

    def test_rejects_negative_delay(self):
        """Test that negative delays are rejected."""
        with pytest.raises(ValueError):
            RetryPolicy(delay=-1)


class TestRetryController:
    """Tests for RetryController outcomes."""

    @pytest.mark.asyncio
    async def test_success_first_attempt(self, retry_controller, sleep):
        """Test that a successful call returns immediately without sleeping."""
        operation = AsyncMock(return_value=[1, 2, 3])

        result = await retry_controller.call(operation)

        assert result == [1, 2, 3]
        assert operation.await_count == 1
        sleep.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_deferred_twice_then_success(self, retry_controller, sleep):
        """Test 202, 202, 200 succeeds on the third attempt after two sleeps."""
        operation = AsyncMock(side_effect=[deferred(), deferred(), {"ok": True}])

        result = await retry_controller.call(operation)

        assert result == {"ok": True}
        assert operation.await_count == 3
        assert sleep.await_args_list == [call(1.0), call(1.0)]

    @pytest.mark.asyncio
    async def test_deferred_every_attempt_exhausts(self, retry_controller, sleep):
        """Test that persistent 202 makes exactly max_attempts attempts."""
        operation = AsyncMock(side_effect=deferred())

        with pytest.raises(RetryExhaustedError) as exc_info:
            await retry_controller.call(operation, description="stats")

        assert operation.await_count == 3
        assert exc_info.value.attempts == 3
        assert isinstance(exc_info.value.last_error, DeferredResponseError)
        assert "stats" in str(exc_info.value)
        # Sleeps only between attempts, each exactly the configured delay
        assert sleep.await_count == 2
        assert all(c == call(1.0) for c in sleep.await_args_list)

    @pytest.mark.asyncio
    async def test_exhaustion_is_not_an_api_error(self, retry_controller):
        """Test that callers can tell exhaustion apart from a rejected request."""
        operation = AsyncMock(side_effect=deferred())

        with pytest.raises(RetryExhaustedError) as exc_info:
            await retry_controller.call(operation)

        assert not isinstance(exc_info.value, GitHubAPIError)

    @pytest.mark.asyncio
    async def test_transient_recovers(self, retry_controller, sleep):
        """Test that a transient failure is retried."""
        operation = AsyncMock(side_effect=[TransientError("reset"), "data"])

        assert await retry_controller.call(operation) == "data"
        assert operation.await_count == 2
        assert sleep.await_count == 1

    @pytest.mark.asyncio
    async def test_transient_exhausted_raises_last_error(self, retry_controller):
        """Test that the last transient error propagates after the final attempt."""
        errors = [TransientError("first"), TransientError("second"), TransientError("third")]
        operation = AsyncMock(side_effect=errors)

        with pytest.raises(TransientError) as exc_info:
            await retry_controller.call(operation)

        assert exc_info.value is errors[-1]
        assert operation.await_count == 3

    @pytest.mark.asyncio
    async def test_rate_limit_not_retried(self, retry_controller, sleep):
        """Test that throttling propagates immediately with its snapshot."""
        snapshot = RateLimitSnapshot(limit=5000, remaining=0, reset_time=1700000000)
        operation = AsyncMock(side_effect=GitHubRateLimitError("limited", rate_limit=snapshot))

        with pytest.raises(GitHubRateLimitError) as exc_info:
            await retry_controller.call(operation)

        assert exc_info.value.rate_limit is snapshot
        assert operation.await_count == 1
        sleep.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_not_found_not_retried(self, retry_controller, sleep):
        """Test that 404 propagates immediately."""
        operation = AsyncMock(side_effect=GitHubNotFoundError("missing"))

        with pytest.raises(GitHubNotFoundError):
            await retry_controller.call(operation)

        assert operation.await_count == 1
        sleep.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_fatal_not_retried(self, retry_controller):
        """Test that other API errors propagate immediately."""
        operation = AsyncMock(side_effect=GitHubAPIError("boom", status_code=500))

        with pytest.raises(GitHubAPIError):
            await retry_controller.call(operation)

        assert operation.await_count == 1

    @pytest.mark.asyncio
    async def test_deferred_only_does_not_retry_transient(self, retry_controller, sleep):
        """Test that restricting retry_on makes transient failures fatal."""
        operation = AsyncMock(side_effect=TransientError("reset"))

        with pytest.raises(TransientError):
            await retry_controller.call(operation, retry_on=DEFERRED_ONLY)

        assert operation.await_count == 1
        sleep.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_attempts_reset_between_calls(self, retry_controller):
        """Test that each call gets the full attempt budget."""
        first = AsyncMock(side_effect=[deferred(), deferred(), "one"])
        second = AsyncMock(side_effect=[deferred(), deferred(), "two"])

        assert await retry_controller.call(first) == "one"
        assert await retry_controller.call(second) == "two"
        assert second.await_count == 3

    @pytest.mark.asyncio
    async def test_custom_policy(self):
        """Test a policy with more attempts and a different delay."""
        sleep = AsyncMock()
        controller = RetryController(RetryPolicy(max_attempts=5, delay=0.25), sleep=sleep)
        operation = AsyncMock(side_effect=deferred())

        with pytest.raises(RetryExhaustedError) as exc_info:
            await controller.call(operation)

        assert exc_info.value.attempts == 5
        assert sleep.await_args_list == [call(0.25)] * 4

    @pytest.mark.asyncio
    async def test_single_attempt_policy(self, sleep):
        """Test that max_attempts=1 never sleeps."""
        controller = RetryController(RetryPolicy(max_attempts=1), sleep=sleep)
        operation = AsyncMock(side_effect=deferred())

        with pytest.raises(RetryExhaustedError):
            await controller.call(operation)

        assert operation.await_count == 1
        sleep.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_plain_callable_is_awaited(self, retry_controller, sleep):
        """Test that a lambda returning a coroutine is awaited and retried."""
        get = AsyncMock(side_effect=[deferred(), "page"])

        result = await retry_controller.call(lambda: get())

        assert result == "page"
        assert get.await_count == 2
        assert sleep.await_args_list == [call(1.0)]

    @pytest.mark.asyncio
    async def test_plain_callable_exhausts(self, retry_controller):
        """Test that a lambda that keeps deferring exhausts the attempts."""
        get = AsyncMock(side_effect=deferred())

        with pytest.raises(RetryExhaustedError):
            await retry_controller.call(lambda: get())

        assert get.await_count == 3
