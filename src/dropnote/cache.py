"""In-memory cache of folder listings."""

from __future__ import annotations

from dropnote import paths
from dropnote.models import Entry


class FolderCache:
    """Last known listing of every folder visited this session.

    A listing is replaced wholesale by put(); there is no expiry, so the
    cache only grows with the number of folders visited.
    """

    def __init__(self) -> None:
        self._listings: dict[str, list[Entry]] = {}

    def get(self, path: str) -> list[Entry] | None:
        return self._listings.get(paths.normalize_path(path))

    def put(self, path: str, entries: list[Entry]) -> None:
        self._listings[paths.normalize_path(path)] = entries

    def __contains__(self, path: object) -> bool:
        return isinstance(path, str) and paths.normalize_path(path) in self._listings

    def __len__(self) -> int:
        return len(self._listings)
