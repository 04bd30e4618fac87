"""Debounced dispatch of search queries."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable

from dropnote.exceptions import RemoteError
from dropnote.models import Entry

logger = logging.getLogger(__name__)

DEFAULT_WAIT = 0.3


class SearchDebouncer:
    """Collapses bursts of queries into one remote search.

    Each call to search() supersedes the previous one, cancelling it whether
    it is still waiting out the quiet period or already talking to the
    store. The only effect of a completed search is on_results.
    """

    def __init__(
        self,
        search: Callable[[str], Awaitable[list[Entry]]],
        on_results: Callable[[str, list[Entry]], None],
        *,
        wait: float = DEFAULT_WAIT,
        on_error: Callable[[str, RemoteError], None] | None = None,
    ) -> None:
        self._search = search
        self._on_results = on_results
        self._on_error = on_error
        self.wait_time = wait
        self._task: asyncio.Task[None] | None = None

    def search(self, query: str) -> None:
        self.cancel()
        if not query.strip():
            return
        self._task = asyncio.get_running_loop().create_task(self._dispatch(query))

    async def _dispatch(self, query: str) -> None:
        await asyncio.sleep(self.wait_time)
        logger.debug(f"Searching for {query!r}")
        try:
            entries = await self._search(query)
        except RemoteError as e:
            logger.error(f"Search for {query!r} failed: {e}")
            if self._on_error:
                self._on_error(query, e)
            return
        self._on_results(query, entries)

    def cancel(self) -> None:
        if self._task is not None and not self._task.done():
            self._task.cancel()
        self._task = None

    async def wait(self) -> None:
        """Wait until the latest scheduled search has finished or been cancelled."""
        while self._task is not None and not self._task.done():
            await asyncio.wait({self._task})
