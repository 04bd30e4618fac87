"""The pending, unsaved edit of the note being edited."""

from __future__ import annotations

from dataclasses import dataclass, field

from dropnote.models import Note

EDITABLE_FIELDS = ("title", "content")


@dataclass(frozen=True)
class PendingEdit:
    """Snapshot of a buffered edit: the canonical note plus changed fields."""

    note: Note | None = None
    changes: dict[str, str] = field(default_factory=dict)

    @property
    def title(self) -> str | None:
        return self.changes.get("title")

    @property
    def content(self) -> str | None:
        return self.changes.get("content")

    @property
    def is_empty(self) -> bool:
        return not self.changes

    def apply(self, note: Note) -> Note:
        return note.with_changes(**self.changes) if self.changes else note


class DirtyNoteBuffer:
    """Holds at most one pending edit patch.

    Partial updates are shallow-merged in call order. The canonical note is
    never touched; merged() overlays the patch for display only. capture()
    reads and clears in one step, so edits made while a save is in flight
    land in a fresh patch.
    """

    def __init__(self) -> None:
        self._note: Note | None = None
        self._changes: dict[str, str] = {}

    @property
    def is_empty(self) -> bool:
        return not self._changes

    @property
    def has_content(self) -> bool:
        return "content" in self._changes

    @property
    def pending(self) -> PendingEdit:
        return PendingEdit(self._note, dict(self._changes))

    def update(self, note: Note | None = None, **changes: str) -> None:
        unknown = set(changes) - set(EDITABLE_FIELDS)
        if unknown:
            raise TypeError(f"Not an editable note field: {', '.join(sorted(unknown))}")
        if note is not None:
            self._note = note
        self._changes.update(changes)

    def merged(self, note: Note) -> Note:
        return self.pending.apply(note)

    def capture(self) -> PendingEdit:
        edit = self.pending
        self.clear()
        return edit

    def restore(self, edit: PendingEdit) -> None:
        """Put a failed save's edit back underneath any newer changes."""
        self._changes = {**edit.changes, **self._changes}
        if self._note is None:
            self._note = edit.note

    def clear(self) -> None:
        self._note = None
        self._changes = {}
