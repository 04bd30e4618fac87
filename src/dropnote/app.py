"""NotesApp: the controller behind the note list and note editor screens."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from typing import Any

from dropnote import paths
from dropnote.buffer import DirtyNoteBuffer, PendingEdit
from dropnote.cache import FolderCache
from dropnote.exceptions import DropnoteError, RemoteError
from dropnote.models import AppState, Entry, Note, Route, RouteKind, SaveStatus, UploadMode
from dropnote.navigation import Navigator
from dropnote.remote import RemoteStore
from dropnote.retry import RetryExecutor
from dropnote.search import SearchDebouncer

logger = logging.getLogger(__name__)


class NotesApp:
    """Keeps the note list and note editor in step with the remote store.

    UI events come in through the public coroutines (add_note, edit_note,
    update_note, save_note, ...). Every remote call goes through one
    RetryExecutor. The result of each event is reflected in ``state`` and
    published through on_change; nothing is returned to the UI.

    Example:
        async with RemoteStore(token) as store:
            app = NotesApp(store, notify=print)
            await app.start()
            await app.edit_note("/todo.md")
            app.update_note(content="- buy milk")
            await app.save_note()
    """

    def __init__(
        self,
        store: RemoteStore,
        *,
        root: str = "",
        notify: Callable[[str], None] | None = None,
        on_change: Callable[[AppState], None] | None = None,
        share: Callable[[dict[str, str]], None] | None = None,
        retries: int | None = None,
        initial_delay: float | None = None,
        slow_threshold: float | None = None,
        search_wait: float | None = None,
        sleep: Callable[[float], Any] | None = None,
    ) -> None:
        """Initialize the controller.

        Args:
            store: Remote store client
            root: Folder shown first and searched by on_search_change
            notify: Receives transient notices such as "Retrying in 2s"
            on_change: Called with the state after every change
            share: Receives {"title", "message"} payloads from share_note
            retries, initial_delay, slow_threshold, sleep: RetryExecutor overrides
            search_wait: Quiet period of the search debouncer in seconds
        """
        self.store = store
        self.root = paths.normalize_path(root)
        self.state = AppState(path=self.root)
        self.cache = FolderCache()
        self.buffer = DirtyNoteBuffer()
        self.navigator = Navigator(Route.note_list(self.root))

        self._notify = notify or (lambda message: None)
        self._on_change = on_change
        self._share = share
        self._shared_text: str | None = None
        self._save_lock = asyncio.Lock()

        executor_options: dict[str, Any] = {
            "retries": retries,
            "initial_delay": initial_delay,
            "slow_threshold": slow_threshold,
            "sleep": sleep,
        }
        self.executor = RetryExecutor(
            notify=self._notify,
            on_slow_start=self._slow_start,
            on_slow_end=self._slow_end,
            **{k: v for k, v in executor_options.items() if v is not None},
        )
        search_options = {"wait": search_wait} if search_wait is not None else {}
        self.searcher = SearchDebouncer(
            self._search,
            self._show_search_results,
            on_error=lambda query, e: self._report(f"Search for {query!r} failed", e),
            **search_options,
        )

    # -- state plumbing --------------------------------------------------

    def _publish(self) -> None:
        if self._on_change:
            self._on_change(self.state)

    def _slow_start(self) -> None:
        self.state.refreshing += 1
        self._publish()

    def _slow_end(self) -> None:
        self.state.refreshing = max(0, self.state.refreshing - 1)
        self._publish()

    def _report(self, message: str, error: Exception) -> None:
        logger.error(f"{message}: {error}")
        self.state.error = f"{message}: {error}"
        self._publish()

    def _editing(self, path: str | None) -> bool:
        """Whether the editor is open on path."""
        return self.navigator.editing and self.navigator.current.path == (path or "")

    def _show_note(self, note: Note) -> None:
        """Make note the canonical note of the open editor."""
        self.state.note = note
        if self.navigator.editing:
            self.navigator.replace_current(Route.note_edit(note))

    @property
    def displayed_note(self) -> Note | None:
        """The open note with pending edits applied, for rendering."""
        if self.state.note is None:
            return None
        return self.buffer.merged(self.state.note)

    # -- folders ---------------------------------------------------------

    async def start(self) -> None:
        """Load the root folder."""
        await self.on_will_focus(self.navigator.current)

    async def open_folder(self, path: str) -> None:
        route = self.navigator.push(Route.note_list(path))
        await self.on_will_focus(route)

    async def on_will_focus(self, route: Route) -> None:
        """Show a route that is about to gain focus.

        A folder shows its cached listing at once, then the fresh one.
        """
        if route.kind is RouteKind.NOTE_EDIT:
            self.state.note = route.note
            self._publish()
            return
        self.searcher.cancel()
        self.state.search_query = ""
        self.state.path = route.path
        self.state.note = None
        self.state.is_loading = False
        cached = self.cache.get(route.path)
        if cached is not None:
            self.state.items = cached
        self._publish()
        await self.list_folder(route.path)

    async def list_folder(self, path: str) -> list[Entry] | None:
        """Fetch a listing into the cache, displaying it if path is still in view."""
        path = paths.normalize_path(path)
        try:
            entries = await self.executor.execute(lambda: self.store.list_folder(path))
        except RemoteError as e:
            self._report(f"Could not list {path or '/'}", e)
            return None
        self.cache.put(path, entries)
        if path != self.state.path or self.state.search_query:
            logger.debug(f"Not displaying stale listing of {path or '/'}")
            return entries
        self.state.items = entries
        self._publish()
        return entries

    async def on_refresh(self) -> None:
        await self.list_folder(self.state.path)

    async def on_refresh_control(self) -> None:
        """Pull-to-refresh: the indicator shows for the whole refresh."""
        self.state.refreshing += 1
        self._publish()
        try:
            await self.on_refresh()
        finally:
            self.state.refreshing -= 1
            self._publish()

    async def add_folder(self, path: str) -> Entry | None:
        """Create a folder; relative names are created in the current folder."""
        if not path.startswith("/"):
            path = paths.join(self.state.path, path)
        try:
            entry = await self.executor.execute(lambda: self.store.create_folder(path))
        except RemoteError as e:
            self._report(f"Could not create folder {path}", e)
            return None
        await self.on_refresh()
        return entry

    # -- notes -----------------------------------------------------------

    async def _leave_note(self) -> bool:
        """Save the open note before another one is opened.

        Returns False when unsaved edits remain after a failed save; those
        have to be saved with retry_save() or dropped with discard_changes()
        first.
        """
        await self.save_note()
        if self.buffer.is_empty:
            return True
        logger.warning("Unsaved changes are still pending; not opening another note")
        self._notify("Unsaved changes: retry saving or discard them first")
        return False

    async def add_note(self) -> Note | None:
        """Open the editor on a new, empty note."""
        if not await self._leave_note():
            return None
        note = Note.new()
        self.navigator.push(Route.note_edit(note))
        self.state.note = note
        self.state.is_loading = False
        self.state.error = None
        self.state.status = SaveStatus.CLEAN
        self._inject_shared_text()
        self._publish()
        return note

    async def edit_note(self, path: str) -> Note | None:
        """Open the editor on path, showing a placeholder until it downloads."""
        if not await self._leave_note():
            return None
        path = paths.normalize_path(path)
        placeholder = Note.placeholder(path)
        self.navigator.push(Route.note_edit(placeholder))
        self.state.note = placeholder
        self.state.error = None
        self.state.status = SaveStatus.CLEAN
        return await self._load_note(path)

    async def _load_note(self, path: str) -> Note | None:
        self.state.is_loading = True
        self._publish()
        try:
            result = await self.executor.execute(lambda: self.store.download(path))
        except DropnoteError as e:
            await self._abandon_load(path, e)
            return None
        if not self._editing(path):
            logger.debug(f"Discarding download of {path}; editor moved on")
            if self._edited_while_loading(path):
                self.buffer.update(Note.from_download(result))
                await self.save_note()
            return None
        note = Note.from_download(result)
        self._show_note(note)
        if not self.buffer.is_empty:
            # typed into the placeholder: keep the edits, rebased on the real note
            self.buffer.update(note)
        self._inject_shared_text()
        self.state.is_loading = False
        self._publish()
        return note

    def _edited_while_loading(self, path: str) -> bool:
        """Whether the buffered edits were typed into the placeholder of path."""
        pending = self.buffer.pending
        return (
            not pending.is_empty
            and pending.note is not None
            and pending.note.loading
            and pending.note.path_display == path
        )

    async def _abandon_load(self, path: str, error: DropnoteError) -> None:
        """Give up on a note whose content never arrived.

        Edits typed into its placeholder have nothing to be applied to and
        are dropped. An editor still showing the placeholder is closed.
        """
        if self._edited_while_loading(path):
            logger.warning(f"Dropping edits made while {path} was loading")
            self.buffer.clear()
            self.state.status = SaveStatus.CLEAN
        if not self._editing(path):
            return
        self.state.is_loading = False
        self._report(f"Could not open {path}", error)
        if self.state.note is not None and self.state.note.loading:
            self.navigator.pop()
            await self.on_will_focus(self.navigator.current)

    def update_note(self, **changes: str) -> None:
        """Buffer a partial edit (title and/or content) of the open note."""
        if self.state.note is None:
            raise DropnoteError("No note is open")
        self.buffer.update(self.state.note, **changes)
        if self.state.status is SaveStatus.CLEAN:
            self.state.status = SaveStatus.DIRTY
        self._publish()

    async def save_note(self) -> Note | None:
        """Write buffered edits to the store.

        Returns the saved note, or None when there was nothing to save or
        the save failed. A failed save puts its edits back in the buffer
        and leaves the status FAILED until retry_save() succeeds. Edits made
        while the note is still loading stay buffered until it has loaded.
        """
        async with self._save_lock:
            if self.buffer.is_empty:
                return None
            pending = self.buffer.pending.note or self.state.note
            if pending is not None and pending.loading:
                logger.debug(f"Not saving {pending.path_display} before it has loaded")
                return None
            edit = self.buffer.capture()
            base = edit.note or self.state.note
            if base is None:
                return None
            created = not base.is_saved
            self.state.status = SaveStatus.SAVING
            self._publish()

            try:
                base, renamed = await self._move_if_renamed(base, edit)
                saved = await self._upload(base, edit)
            except RemoteError as e:
                self.buffer.restore(PendingEdit(base, edit.changes))
                self.state.status = SaveStatus.FAILED
                self._report(f"Could not save {base.path_display or base.title or 'note'}", e)
                return None

            if self.buffer.is_empty:
                self.state.status = SaveStatus.CLEAN
            else:
                self.buffer.update(saved)
                self.state.status = SaveStatus.DIRTY
            self.state.error = None
            self._publish()

        if created or renamed:
            await self.on_refresh()
        return saved

    async def _move_if_renamed(self, base: Note, edit: PendingEdit) -> tuple[Note, bool]:
        """Move the file when the title changed; returns the note at its new path.

        The new path is in the note's own folder, which is the current folder
        for notes opened from the list, so notes opened from search results
        stay where they are.
        """
        if not (base.is_saved and base.title and edit.title and edit.title != base.title):
            return base, False
        source = base.path_display or ""
        target = paths.note_path(paths.parent(source), edit.title)
        if target == source:
            return base, False
        moved = await self.executor.execute(lambda: self.store.move(source, target))
        logger.info(f"Renamed {source} -> {moved.path_display or target}")
        moved_note = base.with_changes(
            id=moved.id or base.id,
            title=moved.title or paths.basename(target),
            path_display=moved.path_display or target,
            rev=moved.rev or base.rev,
        )
        if self.state.note == base:
            self._show_note(moved_note)
        return moved_note, True

    async def _upload(self, base: Note, edit: PendingEdit) -> Note:
        content = edit.content if edit.content is not None else base.content
        if base.is_saved:
            path = base.path_display or ""
        else:
            path = paths.note_path(self.state.path, edit.title or base.title)
        mode = UploadMode.update(base.rev) if base.rev else UploadMode.add()
        entry = await self.executor.execute(lambda: self.store.upload(path, mode, content))
        saved = Note.from_entry(entry, content)
        if self.state.note == base:
            self._show_note(saved)
        return saved

    async def retry_save(self) -> Note | None:
        """Run a save that previously failed again."""
        if self.state.status is not SaveStatus.FAILED:
            return None
        return await self.save_note()

    def discard_changes(self) -> None:
        """Drop buffered edits, e.g. after a save that keeps failing."""
        self.buffer.clear()
        self.state.status = SaveStatus.CLEAN
        self.state.error = None
        self._publish()

    async def delete_note(self, note: Note | None = None) -> bool:
        """Delete a note (the open one by default) and refresh its folder."""
        note = note or self.state.note
        if note is None:
            return False
        is_open = self.state.note is not None and (
            self.state.note == note
            or (note.is_saved and self.state.note.path_display == note.path_display)
        )
        if note.is_saved:
            path = note.path_display or ""
            try:
                await self.executor.execute(lambda: self.store.delete(path))
            except RemoteError as e:
                self._report(f"Could not delete {path}", e)
                return False
        if is_open:
            self.buffer.clear()
            self.state.status = SaveStatus.CLEAN
            if self.navigator.editing:
                self.navigator.pop()
                await self.on_will_focus(self.navigator.current)
                return True
        await self.on_refresh()
        return True

    def share_note(self, note: Note | None = None) -> dict[str, str]:
        """Hand a note's title and text to the share sink."""
        note = note or self.displayed_note
        if note is None:
            raise DropnoteError("No note to share")
        if self.state.note is not None and note == self.state.note:
            note = self.buffer.merged(note)
        payload = {"title": note.title, "message": note.content}
        if self._share:
            self._share(payload)
        return payload

    # -- external signals -----------------------------------------------

    def receive_shared_text(self, text: str) -> None:
        """Accept text shared from another app.

        It goes into the open note straight away, or waits for the next note
        to be created or opened.
        """
        if not text:
            return
        self._shared_text = text if self._shared_text is None else f"{self._shared_text}\n\n{text}"
        if self.navigator.editing and not self.state.is_loading:
            self._inject_shared_text()
            self._publish()

    def _inject_shared_text(self) -> None:
        if self._shared_text is None or self.state.note is None:
            return
        current = self.buffer.merged(self.state.note).content
        content = f"{current}\n\n{self._shared_text}" if current else self._shared_text
        self._shared_text = None
        self.buffer.update(self.state.note, content=content)
        if self.state.status is SaveStatus.CLEAN:
            self.state.status = SaveStatus.DIRTY

    async def on_app_state_change(self, active: bool) -> None:
        """Save when the app goes to the background, reload when it comes back."""
        if not active:
            await self.save_note()
            return
        note = self.state.note
        if self.navigator.editing and note is not None and note.is_saved:
            if self.buffer.is_empty and not self.state.is_loading:
                await self._load_note(note.path_display or "")
            return
        if not self.navigator.editing:
            await self.on_refresh()

    async def on_back(self) -> bool:
        """Leave the current screen, saving the open note.

        Returns False when already at the root screen.
        """
        if self.navigator.pop() is None:
            await self.save_note()
            return False
        await asyncio.gather(self.save_note(), self.on_will_focus(self.navigator.current))
        return True

    # -- search ----------------------------------------------------------

    def on_search_change(self, text: str) -> None:
        """Search as the user types; clearing the box restores the folder."""
        self.state.search_query = text
        if not text.strip():
            self.searcher.cancel()
            cached = self.cache.get(self.state.path)
            if cached is not None:
                self.state.items = cached
            self._publish()
            return
        self.searcher.search(text)
        self._publish()

    async def _search(self, query: str) -> list[Entry]:
        return await self.executor.execute(lambda: self.store.search(query, self.root))

    def _show_search_results(self, query: str, entries: list[Entry]) -> None:
        if query != self.state.search_query:
            return
        self.state.items = entries
        self._publish()
