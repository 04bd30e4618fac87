"""Tests for the search debouncer."""

from __future__ import annotations

import asyncio
from unittest.mock import AsyncMock

from helpers import file_entry, run

from dropnote import Entry, RemoteError, SearchDebouncer


class TestSearchDebouncer:
    """Tests for debounced search dispatch."""

    def test_burst_collapses_into_one_search_with_last_query(self) -> None:
        """Test that three quick calls issue a single search for the last query."""
        search = AsyncMock(return_value=[file_entry("milk.md")])
        results: list[tuple[str, list[Entry]]] = []

        async def scenario() -> None:
            debouncer = SearchDebouncer(
                search, lambda q, e: results.append((q, e)), wait=0.3
            )
            debouncer.search("m")
            await asyncio.sleep(0.05)
            debouncer.search("mi")
            await asyncio.sleep(0.05)
            debouncer.search("milk")
            await debouncer.wait()

        run(scenario())

        search.assert_awaited_once_with("milk")
        assert [q for q, _ in results] == ["milk"]

    def test_spaced_calls_search_separately(self) -> None:
        """Test that calls further apart than the wait each reach the store."""
        search = AsyncMock(return_value=[])

        async def scenario() -> None:
            debouncer = SearchDebouncer(search, lambda q, e: None, wait=0.01)
            debouncer.search("a")
            await debouncer.wait()
            debouncer.search("b")
            await debouncer.wait()

        run(scenario())

        assert [c.args[0] for c in search.await_args_list] == ["a", "b"]

    def test_blank_query_issues_no_search(self) -> None:
        """Test that blank queries cause no remote traffic."""
        search = AsyncMock(return_value=[])

        async def scenario() -> None:
            debouncer = SearchDebouncer(search, lambda q, e: None, wait=0.01)
            debouncer.search("milk")
            debouncer.search("   ")
            await debouncer.wait()
            await asyncio.sleep(0.03)

        run(scenario())

        search.assert_not_awaited()

    def test_in_flight_search_is_cancelled_when_superseded(self) -> None:
        """Test that a slow search does not deliver results once replaced."""
        results: list[str] = []

        async def slow_search(query: str) -> list[Entry]:
            await asyncio.sleep(0.1 if query == "old" else 0)
            return [file_entry(f"{query}.md")]

        async def scenario() -> None:
            debouncer = SearchDebouncer(
                slow_search, lambda q, e: results.append(q), wait=0.01
            )
            debouncer.search("old")
            await asyncio.sleep(0.03)
            debouncer.search("new")
            await debouncer.wait()
            await asyncio.sleep(0.12)

        run(scenario())

        assert results == ["new"]

    def test_errors_go_to_on_error(self) -> None:
        """Test that a failed search reports through on_error, not on_results."""
        error = RemoteError("down", 503)
        search = AsyncMock(side_effect=error)
        results: list[str] = []
        errors: list[tuple[str, RemoteError]] = []

        async def scenario() -> None:
            debouncer = SearchDebouncer(
                search,
                lambda q, e: results.append(q),
                wait=0.01,
                on_error=lambda q, e: errors.append((q, e)),
            )
            debouncer.search("milk")
            await debouncer.wait()

        run(scenario())

        assert results == []
        assert errors == [("milk", error)]
