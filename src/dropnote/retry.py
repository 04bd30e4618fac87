"""Bounded exponential-backoff retry for remote operations."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import TypeVar

from dropnote.exceptions import RemoteError

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_RETRIES = 5
DEFAULT_INITIAL_DELAY = 2.0
DEFAULT_SLOW_THRESHOLD = 0.5


def _noop() -> None:
    pass


class BusyIndicator:
    """Toggles a busy indicator around work that turns out to be slow.

    on_start fires only if the awaited work is still unresolved after
    threshold seconds; on_end then fires exactly once when it resolves,
    whether it succeeded or raised.
    """

    def __init__(
        self,
        on_start: Callable[[], None] | None = None,
        on_end: Callable[[], None] | None = None,
        *,
        threshold: float = DEFAULT_SLOW_THRESHOLD,
    ) -> None:
        self._on_start = on_start or _noop
        self._on_end = on_end or _noop
        self.threshold = threshold

    async def wrap(self, work: Awaitable[T]) -> T:
        started = False

        def start() -> None:
            nonlocal started
            started = True
            self._on_start()

        handle = asyncio.get_running_loop().call_later(self.threshold, start)
        try:
            return await work
        finally:
            if started:
                self._on_end()
            else:
                handle.cancel()


class RetryExecutor:
    """Runs remote operations with retry and a single slow-work indicator.

    A failed attempt publishes a "Retrying in Ns" notice, waits, doubles the
    delay and tries again until the retry budget is spent; the last error
    then propagates. Only RemoteError is retried.
    """

    def __init__(
        self,
        *,
        notify: Callable[[str], None] | None = None,
        on_slow_start: Callable[[], None] | None = None,
        on_slow_end: Callable[[], None] | None = None,
        retries: int = DEFAULT_RETRIES,
        initial_delay: float = DEFAULT_INITIAL_DELAY,
        slow_threshold: float = DEFAULT_SLOW_THRESHOLD,
        sleep: Callable[[float], Awaitable[object]] = asyncio.sleep,
    ) -> None:
        """Initialize the executor.

        Args:
            notify: Receives the transient notice shown before each wait
            on_slow_start: Called once a sequence outlives slow_threshold
            on_slow_end: Called when such a slow sequence resolves
            retries: Retries after the first attempt
            initial_delay: Seconds to wait after the first failure
            slow_threshold: Seconds before a sequence counts as slow
            sleep: Coroutine function used for waiting
        """
        self._notify = notify or (lambda message: None)
        self._indicator = BusyIndicator(on_slow_start, on_slow_end, threshold=slow_threshold)
        self.retries = retries
        self.initial_delay = initial_delay
        self._sleep = sleep

    async def execute(self, operation: Callable[[], Awaitable[T]]) -> T:
        """Run operation until it succeeds or the retry budget is exhausted."""
        return await self._indicator.wrap(self._attempts(operation))

    async def _attempts(self, operation: Callable[[], Awaitable[T]]) -> T:
        delay = self.initial_delay
        budget = self.retries
        while True:
            try:
                return await operation()
            except RemoteError as e:
                if budget <= 0:
                    logger.error(f"Giving up after {self.retries + 1} attempts: {e}")
                    raise
                notice = f"Retrying in {delay:g}s"
                logger.warning(f"{e}; {notice.lower()}")
                self._notify(notice)
                await self._sleep(delay)
                delay *= 2
                budget -= 1
