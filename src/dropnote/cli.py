"""Command-line interface for dropnote."""

from __future__ import annotations

import asyncio
import logging
import sys
from collections.abc import Awaitable, Callable
from typing import Any, NoReturn, TypeVar

import click

from dropnote import paths
from dropnote.app import NotesApp
from dropnote.config import get_config
from dropnote.exceptions import ConfigError, DropnoteError
from dropnote.models import AppState, Note, SaveStatus
from dropnote.remote import RemoteStore

T = TypeVar("T")


def _toast(message: str) -> None:
    """Transient notices go to stderr so stdout stays clean for note content."""
    click.echo(click.style(message, fg="yellow"), err=True)


def run_app(action: Callable[[NotesApp], Awaitable[T]]) -> tuple[T, AppState]:
    """Build a NotesApp from the environment and run one action with it."""
    config = get_config()

    async def runner() -> tuple[T, AppState]:
        async with RemoteStore(
            config["DROPBOX_ACCESS_TOKEN"], timeout=config["DROPNOTE_TIMEOUT"]
        ) as store:
            app = NotesApp(
                store,
                root=config["DROPNOTE_ROOT"],
                notify=_toast,
                retries=config["DROPNOTE_RETRY_BUDGET"],
                initial_delay=config["DROPNOTE_RETRY_DELAY_MS"] / 1000,
            )
            result = await action(app)
            return result, app.state

    return asyncio.run(runner())


def _fail(message: str) -> NoReturn:
    click.echo(click.style(message, fg="red"), err=True)
    sys.exit(1)


def _invoke(action: Callable[[NotesApp], Awaitable[T]]) -> tuple[T, AppState]:
    """run_app with the CLI's error reporting."""
    try:
        result, state = run_app(action)
    except ConfigError as e:
        _fail(f"Configuration error: {e}")
    except DropnoteError as e:
        _fail(f"Error: {e}")
    if state.error:
        _fail(f"Error: {state.error}")
    return result, state


def _read_content(content: str | None) -> str:
    if content is not None:
        return content
    return click.get_text_stream("stdin").read()


def _report_saved(note: Note | None, state: AppState) -> None:
    if note is None or state.status is SaveStatus.FAILED:
        _fail(f"Save failed: {state.error or 'nothing was written'}")
    click.echo(click.style("✓ ", fg="green") + f"{note.path_display} (rev {note.rev})")


@click.group()
@click.version_option(package_name="dropnote")
@click.option("--verbose", "-v", is_flag=True, help="Log debug output")
def main(verbose: bool) -> None:
    """Dropnote - Notes kept as text files in Dropbox."""
    logging.basicConfig(
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        level=logging.DEBUG if verbose else logging.WARNING,
    )


@main.command("ls")
@click.argument("path", default="")
def list_folder(path: str) -> None:
    """List the notes and folders in PATH (default: the notes root).

    Examples:

        dropnote ls

        dropnote ls /Notes/Work
    """

    async def action(app: NotesApp) -> None:
        await app.open_folder(path or app.root)

    _, state = _invoke(action)
    if not state.items:
        click.echo(f"(empty folder: {state.path or '/'})")
    for entry in state.items:
        if entry.is_folder:
            click.echo(click.style(f"  {entry.title}/", fg="blue"))
        else:
            click.echo(f"  {entry.title}")


@main.command()
@click.argument("path")
def cat(path: str) -> None:
    """Print the content of the note at PATH."""

    async def action(app: NotesApp) -> Note | None:
        return await app.edit_note(path)

    note, _ = _invoke(action)
    if note is not None:
        click.echo(note.content, nl=not note.content.endswith("\n"))


@main.command()
@click.argument("path")
@click.option("--content", "-c", default=None, help="New content (default: read stdin)")
def write(path: str, content: str | None) -> None:
    """Replace the content of the note at PATH.

    The write only succeeds if nobody changed the note since it was read.

    Examples:

        echo "- milk" | dropnote write /Notes/shopping.md
    """
    text = _read_content(content)

    async def action(app: NotesApp) -> Note | None:
        if await app.edit_note(path) is None:
            return None
        app.update_note(content=text)
        return await app.save_note()

    try:
        note, state = run_app(action)
    except DropnoteError as e:
        _fail(f"Error: {e}")
    _report_saved(note, state)


@main.command()
@click.argument("title")
@click.option("--folder", "-f", default=None, help="Folder to create the note in")
@click.option("--content", "-c", default=None, help="Note content (default: read stdin)")
def new(title: str, folder: str | None, content: str | None) -> None:
    """Create a note called TITLE (".md" is added when it has no extension).

    Examples:

        echo "call back" | dropnote new Todo --folder /Notes
    """
    text = _read_content(content)

    async def action(app: NotesApp) -> Note | None:
        await app.open_folder(folder or app.root)
        app.receive_shared_text(text)
        await app.add_note()
        app.update_note(title=title)
        return await app.save_note()

    try:
        note, state = run_app(action)
    except DropnoteError as e:
        _fail(f"Error: {e}")
    _report_saved(note, state)


@main.command()
@click.argument("path")
@click.argument("title")
def mv(path: str, title: str) -> None:
    """Rename the note at PATH to TITLE within its folder."""

    async def action(app: NotesApp) -> Note | None:
        if await app.edit_note(path) is None:
            return None
        app.update_note(title=title)
        return await app.save_note()

    try:
        note, state = run_app(action)
    except DropnoteError as e:
        _fail(f"Error: {e}")
    _report_saved(note, state)


@main.command()
@click.argument("path")
def rm(path: str) -> None:
    """Delete the note at PATH."""
    path = paths.normalize_path(path)

    async def action(app: NotesApp) -> bool:
        app.state.path = paths.parent(path)
        note = Note(id="", title=paths.basename(path), path_display=path)
        return await app.delete_note(note)

    deleted, _ = _invoke(action)
    if deleted:
        click.echo(click.style(f"Deleted: {path}", fg="green"))


@main.command()
@click.argument("path")
def mkdir(path: str) -> None:
    """Create a folder at PATH."""
    path = paths.normalize_path(path)

    async def action(app: NotesApp) -> Any:
        app.state.path = paths.parent(path)
        return await app.add_folder(path)

    _invoke(action)
    click.echo(click.style(f"Created folder: {path}", fg="green"))


@main.command()
@click.argument("query")
def search(query: str) -> None:
    """Search note names under the notes root for QUERY."""

    async def action(app: NotesApp) -> None:
        app.on_search_change(query)
        await app.searcher.wait()

    _, state = _invoke(action)
    if not state.items:
        click.echo(f"No matches for {query!r}")
    for entry in state.items:
        suffix = "/" if entry.is_folder else ""
        click.echo(f"  {entry.path_display}{suffix}")


if __name__ == "__main__":
    main()
