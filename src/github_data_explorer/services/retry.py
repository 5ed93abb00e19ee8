"""Bounded retries for single logical GitHub requests.

A logical request is one page of a paginated endpoint or one statistics call.
Only deferred (202) and transient (network) failures are retried; everything
else surfaces on the first occurrence. Each ``call`` builds a fresh
``AsyncRetrying``, so the attempt count starts at zero for every request.
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import TypeVar

from tenacity import (
    AsyncRetrying,
    RetryCallState,
    RetryError,
    retry_if_exception_type,
    stop_after_attempt,
    wait_fixed,
)

from github_data_explorer.exceptions import (
    DeferredResponseError,
    RetryExhaustedError,
    TransientError,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")

SleepFn = Callable[[float], Awaitable[None]]

DEFAULT_RETRY_ON: tuple[type[Exception], ...] = (DeferredResponseError, TransientError)
DEFERRED_ONLY: tuple[type[Exception], ...] = (DeferredResponseError,)


@dataclass(frozen=True)
class RetryPolicy:
    """How many times to try a request and how long to wait between tries."""

    max_attempts: int = 3
    delay: float = 1.0  # seconds

    def __post_init__(self) -> None:
        if self.max_attempts < 1:
            raise ValueError(f"max_attempts must be at least 1, got {self.max_attempts}")
        if self.delay < 0:
            raise ValueError(f"delay must not be negative, got {self.delay}")


class RetryController:
    """Runs one request under a RetryPolicy.

    Outcomes of ``call``:
        - returns the operation's result (succeeded)
        - raises RetryExhaustedError when every attempt came back deferred
        - re-raises the last TransientError when every attempt failed on the network
        - re-raises anything else immediately (rate limited, not found, fatal)
    """

    def __init__(self, policy: RetryPolicy | None = None, sleep: SleepFn = asyncio.sleep):
        self.policy = policy or RetryPolicy()
        self._sleep = sleep

    async def call(
        self,
        operation: Callable[[], Awaitable[T]],
        retry_on: tuple[type[Exception], ...] = DEFAULT_RETRY_ON,
        description: str = "request",
    ) -> T:
        """Await ``operation()`` until it succeeds or the policy gives up.

        Args:
            operation: Zero-argument coroutine function performing one attempt
            retry_on: Exception types worth another attempt
            description: Label used in log messages and errors
        """

        def log_retry(retry_state: RetryCallState) -> None:
            error = retry_state.outcome.exception() if retry_state.outcome else None
            logger.info(
                "%s: attempt %d/%d failed (%s), retrying in %.1fs",
                description,
                retry_state.attempt_number,
                self.policy.max_attempts,
                type(error).__name__,
                self.policy.delay,
            )

        retrying = AsyncRetrying(
            stop=stop_after_attempt(self.policy.max_attempts),
            wait=wait_fixed(self.policy.delay),
            retry=retry_if_exception_type(retry_on),
            sleep=self._sleep,
            before_sleep=log_retry,
            reraise=False,
        )

        async def attempt() -> T:
            # tenacity only awaits coroutine functions
            return await operation()

        try:
            return await retrying(attempt)
        except RetryError as e:
            attempts = e.last_attempt.attempt_number
            last_error = e.last_attempt.exception()
            if isinstance(last_error, DeferredResponseError):
                raise RetryExhaustedError(
                    f"{description}: still computing after {attempts} attempts",
                    attempts=attempts,
                    last_error=last_error,
                ) from last_error
            logger.warning("%s: giving up after %d attempts: %s", description, attempts, last_error)
            raise last_error from e
