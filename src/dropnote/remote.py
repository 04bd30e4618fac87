"""Typed client for the remote file store holding the notes."""

from __future__ import annotations

import logging
from typing import Any

import httpx

from dropnote import paths
from dropnote._internal.transport import DEFAULT_TIMEOUT, DropboxTransport
from dropnote.exceptions import ContentError, RemoteError
from dropnote.models import DownloadResult, Entry, UploadMode

logger = logging.getLogger(__name__)

DEFAULT_MAX_RESULTS = 20


class RemoteStore:
    """One coroutine per capability of the remote file store.

    Nothing here retries: every failure is raised as RemoteError and left
    to the caller (normally a RetryExecutor).

    Example:
        async with RemoteStore("token") as store:
            entries = await store.list_folder("")
            result = await store.download("/todo.md")
            await store.upload("/todo.md", UploadMode.update(result.entry.rev), "new text")
    """

    def __init__(
        self,
        access_token: str,
        *,
        client: httpx.AsyncClient | None = None,
        timeout: float = DEFAULT_TIMEOUT,
    ) -> None:
        """Initialize the store client.

        Args:
            access_token: OAuth2 bearer token for the account
            client: Optional preconfigured httpx client (not closed by aclose)
            timeout: Transport timeout in seconds for each request
        """
        self._transport = DropboxTransport(access_token, client=client, timeout=timeout)

    async def __aenter__(self) -> RemoteStore:
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._transport.aclose()

    async def list_folder(self, path: str) -> list[Entry]:
        """List a folder, following continuation cursors until complete."""
        path = paths.normalize_path(path)
        data = await self._transport.rpc("files/list_folder", {"path": path})
        entries = [Entry.from_metadata(item) for item in data.get("entries", [])]
        while data.get("has_more"):
            data = await self._transport.rpc(
                "files/list_folder/continue", {"cursor": data["cursor"]}
            )
            entries.extend(Entry.from_metadata(item) for item in data.get("entries", []))
        logger.debug(f"Listed {len(entries)} entries in {path or '/'}")
        return entries

    async def create_folder(self, path: str) -> Entry:
        path = paths.normalize_path(path)
        if not path:
            raise RemoteError("Cannot create root folder")
        data = await self._transport.rpc(
            "files/create_folder_v2", {"path": path, "autorename": False}
        )
        logger.info(f"Created folder: {path}")
        return Entry.from_metadata(data.get("metadata", {}), default_tag="folder")

    async def move(self, from_path: str, to_path: str) -> Entry:
        from_path = paths.normalize_path(from_path)
        to_path = paths.normalize_path(to_path)
        data = await self._transport.rpc(
            "files/move_v2",
            {"from_path": from_path, "to_path": to_path, "autorename": False},
        )
        logger.info(f"Moved {from_path} -> {to_path}")
        return Entry.from_metadata(data.get("metadata", {}))

    async def delete(self, path: str) -> None:
        path = paths.normalize_path(path)
        await self._transport.rpc("files/delete_v2", {"path": path})
        logger.info(f"Deleted {path}")

    async def upload(self, path: str, mode: UploadMode, content: str) -> Entry:
        """Write content to path.

        Args:
            path: File path to write
            mode: UploadMode.add() or UploadMode.update(rev)
            content: Text content, sent as UTF-8

        Returns:
            Entry for the stored file, carrying its new rev
        """
        path = paths.normalize_path(path)
        # an update that loses the rev race must fail, not land as a conflicted copy
        arg = {"path": path, "mode": mode.to_wire(), "autorename": mode.tag == "add"}
        data = await self._transport.upload("files/upload", arg, content.encode("utf-8"))
        entry = Entry.from_metadata(data)
        logger.info(f"Uploaded {entry.path_display or path} (rev {entry.rev})")
        return entry

    async def download(self, path: str) -> DownloadResult:
        """Fetch a file, splicing header metadata and body content together.

        Raises:
            ContentError: If the file is not UTF-8 text
        """
        path = paths.normalize_path(path)
        metadata, body = await self._transport.download("files/download", {"path": path})
        try:
            content = body.decode("utf-8")
        except UnicodeDecodeError as e:
            raise ContentError(f"{path} is not UTF-8 text") from e
        return DownloadResult(entry=Entry.from_metadata(metadata), content=content)

    async def search(
        self, query: str, path: str = "", max_results: int = DEFAULT_MAX_RESULTS
    ) -> list[Entry]:
        data = await self._transport.rpc(
            "files/search_v2",
            {
                "query": query,
                "options": {
                    "path": paths.normalize_path(path),
                    "max_results": max_results,
                },
            },
        )
        return [Entry.from_metadata(match["metadata"]) for match in data.get("matches", [])]
