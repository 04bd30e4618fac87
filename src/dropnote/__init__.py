"""Dropnote - notes kept as plain text files in a Dropbox folder.

Example usage:
    from dropnote import NotesApp, RemoteStore

    async with RemoteStore("access-token") as store:
        app = NotesApp(store, notify=print)
        await app.start()                      # list the root folder
        await app.edit_note("/todo.md")        # open a note
        app.update_note(content="- buy milk")  # buffer an edit
        await app.save_note()                  # upload it, guarded by rev
"""

from dropnote.app import NotesApp
from dropnote.buffer import DirtyNoteBuffer, PendingEdit
from dropnote.cache import FolderCache
from dropnote.exceptions import (
    ConfigError,
    ContentError,
    DropnoteError,
    RemoteError,
    RevisionConflictError,
)
from dropnote.models import (
    AppState,
    DownloadResult,
    Entry,
    Note,
    Route,
    RouteKind,
    SaveStatus,
    UploadMode,
)
from dropnote.navigation import Navigator
from dropnote.remote import RemoteStore
from dropnote.retry import BusyIndicator, RetryExecutor
from dropnote.search import SearchDebouncer

__version__ = "0.1.0"

__all__ = [
    # Controller
    "NotesApp",
    # Building blocks
    "RemoteStore",
    "RetryExecutor",
    "BusyIndicator",
    "FolderCache",
    "DirtyNoteBuffer",
    "PendingEdit",
    "SearchDebouncer",
    "Navigator",
    # Models
    "AppState",
    "DownloadResult",
    "Entry",
    "Note",
    "Route",
    "RouteKind",
    "SaveStatus",
    "UploadMode",
    # Exceptions
    "DropnoteError",
    "RemoteError",
    "RevisionConflictError",
    "ContentError",
    "ConfigError",
]
