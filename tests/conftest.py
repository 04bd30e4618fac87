"""Pytest fixtures for dropnote tests."""

from __future__ import annotations

from unittest.mock import AsyncMock

import pytest
from helpers import RecordingSleep, file_entry, folder_entry

from dropnote import Entry, NotesApp, RemoteStore


@pytest.fixture
def sleep() -> RecordingSleep:
    """Record retry backoff waits instead of sleeping."""
    return RecordingSleep()


@pytest.fixture
def notices() -> list[str]:
    """Collect transient notices published by the app."""
    return []


@pytest.fixture
def store() -> AsyncMock:
    """Create a mock RemoteStore."""
    store = AsyncMock(spec=RemoteStore)
    store.list_folder.return_value = []
    store.search.return_value = []
    return store


@pytest.fixture
def root_items() -> list[Entry]:
    """Create a mock root folder listing."""
    return [
        folder_entry("Work"),
        file_entry("a.md", rev="r1", id="1"),
    ]


@pytest.fixture
def app(store: AsyncMock, sleep: RecordingSleep, notices: list[str]) -> NotesApp:
    """Create a NotesApp wired to the mock store with instant retries."""
    return NotesApp(store, notify=notices.append, sleep=sleep, search_wait=0.01)
