"""Service for executing API calls with automatic retries.

Implements exponential backoff for errors a caller-supplied predicate
declares retryable (for MARS: rate limits (429) and server errors (5xx)).
The driver never decides retryability on its own.
"""

import asyncio
import logging
import random
from typing import Any, Awaitable, Callable, Optional, TypeVar

from marsmcp.domain.models.common import RetryPolicy
from marsmcp.infrastructure.resilience.backoff import delay_for

logger = logging.getLogger(__name__)

T = TypeVar("T")

Operation = Callable[[int], Awaitable[T]]
RetryPredicate = Callable[[Exception], bool]
RetryObserver = Callable[[int, Exception, float], None]


class ApiRetryService:
    """Runs an async operation until it succeeds or its retries are exhausted."""

    def __init__(
        self,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
        rng: Callable[[], float] = random.random,
        jitter: bool = True,
    ):
        """Initializes the ApiRetryService.

        Args:
            sleep: Coroutine function used to wait between attempts.
            rng: Random source for backoff jitter.
            jitter: Whether backoff delays get a random component.
        """
        self._sleep = sleep
        self._rng = rng
        self._jitter = jitter

    async def execute_with_retry(
        self,
        operation: Operation,
        policy: RetryPolicy,
        should_retry: RetryPredicate,
        on_retry: Optional[RetryObserver] = None,
    ) -> T:
        """Executes ``operation`` with retries.

        Args:
            operation: Async callable performing one attempt; receives the
                zero-based attempt index.
            policy: Retry budget and backoff delays.
            should_retry: Sole authority on whether a failure is retryable.
            on_retry: Called with (attempt, error, delay) before each backoff sleep.

        Returns:
            The result of the first successful attempt.

        Raises:
            Exception: The error of the last attempt, unchanged, when the
                predicate rejects it or the retry budget is spent.
        """
        attempt = 0
        while True:
            try:
                return await operation(attempt)
            except Exception as e:
                if attempt >= policy.max_retries:
                    logger.debug(f"Retry budget exhausted after {attempt + 1} attempt(s): {e}")
                    raise
                if not should_retry(e):
                    logger.debug(f"Non-retryable error on attempt {attempt + 1}: {e}")
                    raise

                delay = delay_for(
                    attempt,
                    policy.base_delay_s,
                    policy.max_delay_s,
                    jitter=self._jitter,
                    rng=self._rng,
                )
                if on_retry is not None:
                    on_retry(attempt, e, delay)
                await self._sleep(delay)
                attempt += 1
