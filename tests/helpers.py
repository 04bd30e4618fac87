"""Shared test helpers for dropnote tests."""

from __future__ import annotations

import asyncio
from collections.abc import Coroutine
from typing import Any, TypeVar

from dropnote import DownloadResult, Entry, RemoteError

T = TypeVar("T")


def run(coro: Coroutine[Any, Any, T]) -> T:
    """Run a coroutine to completion on a fresh event loop."""
    return asyncio.run(coro)


class RecordingSleep:
    """Stand-in for asyncio.sleep that records delays without waiting."""

    def __init__(self) -> None:
        self.delays: list[float] = []

    async def __call__(self, delay: float) -> None:
        self.delays.append(delay)


def file_entry(name: str, folder: str = "", rev: str = "r1", id: str | None = None) -> Entry:
    return Entry(
        id=id or f"id:{name}",
        is_folder=False,
        title=name,
        path_display=f"{folder}/{name}",
        rev=rev,
    )


def folder_entry(name: str, folder: str = "") -> Entry:
    return Entry(id=f"id:{name}", is_folder=True, title=name, path_display=f"{folder}/{name}")


def download(entry: Entry, content: str) -> DownloadResult:
    return DownloadResult(entry=entry, content=content)


def failing(times: int, result: Any = None, status: int | None = 503) -> list[Any]:
    """side_effect list: `times` RemoteErrors followed by result."""
    errors: list[Any] = [RemoteError("Service unavailable", status) for _ in range(times)]
    return errors + [result]
