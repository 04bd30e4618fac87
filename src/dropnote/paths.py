"""Path helpers for the remote store's path conventions.

The store addresses its root as the empty string and every other path
with a leading slash, e.g. ``/Notes/todo.md``.
"""

from __future__ import annotations

import posixpath

DEFAULT_EXTENSION = ".md"
UNTITLED = "Untitled.md"


def normalize_path(path: str | None) -> str:
    """Normalize a folder or file path to the store's form."""
    if not path:
        return ""
    path = path.strip()
    if not path.startswith("/"):
        path = "/" + path
    path = path.rstrip("/")
    return path


def basename(path: str | None) -> str:
    """Return the last segment of a path."""
    return posixpath.basename(normalize_path(path))


def parent(path: str | None) -> str:
    """Return the folder holding a path ("" for top level entries)."""
    head = posixpath.dirname(normalize_path(path))
    return "" if head == "/" else head


def join(folder: str | None, name: str) -> str:
    """Join a folder path and an entry name."""
    return f"{normalize_path(folder)}/{name}"


def note_filename(title: str | None) -> str:
    """Turn a note title into a file name, appending .md when it has no extension."""
    title = (title or "").strip()
    if not title:
        return UNTITLED
    if not posixpath.splitext(title)[1]:
        title += DEFAULT_EXTENSION
    return title


def note_path(folder: str | None, title: str | None) -> str:
    """Compute the path a note with this title is stored at inside folder."""
    return join(folder, note_filename(title))
