"""Retry with bounded attempts and backoff.

Every outbound call (Telegram file download, notes API, reader, LLM,
Telegraph) goes through a RetryExecutor. The delay before attempt n+1 is
``backoff(n, base_delay)``; with the default linear shape that is
``n * base_delay``, so three attempts wait 1s then 2s.
"""

import asyncio
import logging
from typing import Any, Awaitable, Callable, Optional

import httpx
from telegram.error import BadRequest, NetworkError, RetryAfter

Operation = Callable[[], Awaitable[Any]]
Backoff = Callable[[int, float], float]
Sleep = Callable[[float], Awaitable[Any]]

DEFAULT_MAX_ATTEMPTS = 3
DEFAULT_BASE_DELAY = 1.0

# 4xx codes worth another try; every 5xx is retried
_TRANSIENT_STATUS = {408, 425, 429}


def linear_backoff(attempt: int, base_delay: float) -> float:
    return attempt * base_delay


def constant_backoff(attempt: int, base_delay: float) -> float:
    return base_delay


def exponential_backoff(attempt: int, base_delay: float) -> float:
    return base_delay * (2 ** (attempt - 1))


def is_transient_error(e: BaseException) -> bool:
    """Return True for failures that may succeed on a later attempt.

    Network/transport errors, timeouts and Telegram flood waits are
    transient. HTTP status errors are transient only for 408/425/429 and
    any 5xx; a 400 or 401 will fail the same way every time.
    """
    if isinstance(e, httpx.HTTPStatusError):
        code = e.response.status_code
        return code in _TRANSIENT_STATUS or code >= 500
    if isinstance(e, BadRequest):
        # BadRequest subclasses NetworkError in python-telegram-bot
        return False
    if isinstance(e, (httpx.TransportError, NetworkError, RetryAfter, asyncio.TimeoutError, ConnectionError)):
        return True
    return False


class RetryExecutor:
    """Run an async operation up to ``max_attempts`` times.

    The executor holds configuration only. Each ``run()`` call keeps its own
    attempt counter, so one executor can be shared by concurrent callers.
    """

    def __init__(
        self,
        max_attempts: int = DEFAULT_MAX_ATTEMPTS,
        base_delay: float = DEFAULT_BASE_DELAY,
        backoff: Backoff = linear_backoff,
        sleep: Optional[Sleep] = None,
        logger: Optional[logging.Logger] = None,
        should_retry: Optional[Callable[[Exception], bool]] = None,
    ):
        """Initialize the executor.

        Args:
            max_attempts: Total attempts including the first. Values below 1
                are treated as 1.
            base_delay: Seconds fed to ``backoff``.
            backoff: Maps (attempt index, base delay) to seconds to wait.
            sleep: Awaitable sleep, ``asyncio.sleep`` when omitted.
            logger: Receives one warning per failed attempt.
            should_retry: Predicate on the raised exception. Returning False
                re-raises immediately.
        """
        self.max_attempts = max(1, int(max_attempts))
        self.base_delay = base_delay
        self.backoff = backoff
        self._sleep = sleep or asyncio.sleep
        self._logger = logger or logging.getLogger("noterelay.retry")
        self._should_retry = should_retry

    def delay_for(self, attempt: int) -> float:
        """Seconds to wait after failed attempt number ``attempt`` (1-based)."""
        return max(0.0, self.backoff(attempt, self.base_delay))

    async def run(self, operation: Operation) -> Any:
        """Invoke ``operation`` until it succeeds or attempts run out.

        Returns the first successful result. Raises the exception from the
        last attempt once all attempts have failed.
        """
        last_error: Optional[Exception] = None

        for attempt in range(1, self.max_attempts + 1):
            try:
                return await operation()
            except Exception as e:
                last_error = e
                if self._should_retry is not None and not self._should_retry(e):
                    self._logger.warning(
                        f"Attempt {attempt}/{self.max_attempts} failed, not retrying: {type(e).__name__}: {e}",
                        exc_info=True,
                    )
                    raise
                self._logger.warning(
                    f"Retry {attempt}/{self.max_attempts} failed: {type(e).__name__}: {e}",
                    exc_info=True,
                )
                if attempt < self.max_attempts:
                    await self._sleep(self.delay_for(attempt))

        raise last_error


async def retry_operation(operation: Operation, max_retries: int = DEFAULT_MAX_ATTEMPTS, **kwargs) -> Any:
    """One-shot helper: ``await retry_operation(lambda: client.get(url))``."""
    return await RetryExecutor(max_attempts=max_retries, **kwargs).run(operation)
