"""Data models for the dropnote library."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field, replace
from typing import Any

from dropnote import paths

LOADING_CONTENT = "Loading..."


@dataclass(frozen=True)
class Entry:
    """A folder or file in the remote store."""

    id: str
    is_folder: bool
    title: str
    path_display: str
    rev: str | None = None

    @classmethod
    def from_metadata(cls, data: dict[str, Any], default_tag: str = "file") -> Entry:
        """Build an Entry from the store's metadata shape.

        Search results wrap metadata one level deeper under a "metadata"
        tag; that wrapper is unwrapped here. Endpoints that only ever return
        one kind of entry omit ".tag", hence default_tag.
        """
        if data.get(".tag") == "metadata" and "metadata" in data:
            data = data["metadata"]
        tag = data.get(".tag", default_tag)
        return cls(
            id=data.get("id", ""),
            is_folder=tag == "folder",
            title=data.get("name", ""),
            path_display=data.get("path_display", ""),
            rev=data.get("rev") if tag != "folder" else None,
        )


@dataclass(frozen=True)
class DownloadResult:
    """File metadata and content of a download, spliced into one object."""

    entry: Entry
    content: str


@dataclass(frozen=True)
class UploadMode:
    """Write mode of an upload.

    "add" refuses to overwrite (the store autorenames instead), "update"
    only overwrites when the remote file is still at ``rev``.
    """

    tag: str
    rev: str | None = None

    @classmethod
    def add(cls) -> UploadMode:
        return cls("add")

    @classmethod
    def update(cls, rev: str) -> UploadMode:
        return cls("update", rev)

    def to_wire(self) -> dict[str, str]:
        if self.tag == "update":
            return {".tag": "update", "update": self.rev or ""}
        return {".tag": self.tag}


@dataclass(frozen=True)
class Note:
    """A file entry projected into memory together with its text content."""

    id: str
    title: str
    path_display: str | None = None
    rev: str | None = None
    content: str = ""
    loading: bool = False

    @classmethod
    def new(cls) -> Note:
        """An empty note that has never been saved."""
        return cls(id="", title="", content="")

    @classmethod
    def placeholder(cls, path: str) -> Note:
        """The note shown while the content of path is downloading.

        It carries no rev and its content is not the file's, so it is never
        a valid base for a save.
        """
        return cls(
            id="",
            title=paths.basename(path),
            path_display=path,
            content=LOADING_CONTENT,
            loading=True,
        )

    @classmethod
    def from_entry(cls, entry: Entry, content: str) -> Note:
        return cls(
            id=entry.id,
            title=entry.title,
            path_display=entry.path_display,
            rev=entry.rev,
            content=content,
        )

    @classmethod
    def from_download(cls, result: DownloadResult) -> Note:
        return cls.from_entry(result.entry, result.content)

    @property
    def is_saved(self) -> bool:
        return self.path_display is not None

    def with_changes(self, **changes: Any) -> Note:
        return replace(self, **changes)


class RouteKind(enum.Enum):
    NOTE_LIST = "NoteList"
    NOTE_EDIT = "NoteEdit"


@dataclass(frozen=True)
class Route:
    """One frame of the navigation stack."""

    kind: RouteKind
    path: str = ""
    note: Note | None = None

    @classmethod
    def note_list(cls, path: str) -> Route:
        return cls(RouteKind.NOTE_LIST, path=paths.normalize_path(path))

    @classmethod
    def note_edit(cls, note: Note) -> Route:
        return cls(RouteKind.NOTE_EDIT, path=note.path_display or "", note=note)


class SaveStatus(enum.Enum):
    CLEAN = "clean"
    DIRTY = "dirty"
    SAVING = "saving"
    FAILED = "failed"


@dataclass
class AppState:
    """State published to the UI layer after every change."""

    path: str = ""
    items: list[Entry] = field(default_factory=list)
    note: Note | None = None
    is_loading: bool = False
    refreshing: int = 0
    status: SaveStatus = SaveStatus.CLEAN
    error: str | None = None
    search_query: str = ""

    @property
    def is_refreshing(self) -> bool:
        return self.refreshing > 0
