"""HTTP transport for the Dropbox API v2 RPC and content endpoints."""

from __future__ import annotations

import json
import logging
from typing import Any

import httpx

from dropnote.exceptions import RemoteError, RevisionConflictError

logger = logging.getLogger(__name__)

API_URL = "https://api.dropboxapi.com/2"
CONTENT_URL = "https://content.dropboxapi.com/2"
API_ARG_HEADER = "Dropbox-API-Arg"
API_RESULT_HEADER = "Dropbox-API-Result"
DEFAULT_TIMEOUT = 30.0


class DropboxTransport:
    """Bearer-authenticated calls to the two Dropbox endpoint styles.

    RPC endpoints take and return JSON bodies. Content endpoints carry their
    JSON arguments in the Dropbox-API-Arg header so the body can hold raw
    file bytes; downloads return their metadata in the Dropbox-API-Result
    header for the same reason.
    """

    def __init__(
        self,
        access_token: str,
        *,
        client: httpx.AsyncClient | None = None,
        timeout: float = DEFAULT_TIMEOUT,
        api_url: str = API_URL,
        content_url: str = CONTENT_URL,
    ) -> None:
        self._access_token = access_token
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(timeout=httpx.Timeout(timeout))
        self.api_url = api_url
        self.content_url = content_url

    def _headers(self) -> dict[str, str]:
        return {"Authorization": f"Bearer {self._access_token}"}

    async def _send(self, url: str, **kwargs: Any) -> httpx.Response:
        """Post a request, turning every failure into a RemoteError."""
        try:
            response = await self._client.post(url, **kwargs)
        except httpx.HTTPError as e:
            raise RemoteError(f"Request to {url} failed: {e}") from e
        if response.is_error:
            raise _error_from_response(url, response)
        return response

    async def rpc(self, endpoint: str, payload: dict[str, Any]) -> dict[str, Any]:
        """Call a JSON RPC endpoint, e.g. ``files/list_folder``."""
        url = f"{self.api_url}/{endpoint}"
        logger.debug(f"RPC {endpoint} {payload}")
        response = await self._send(url, json=payload, headers=self._headers())
        try:
            return response.json()  # type: ignore[no-any-return]
        except ValueError as e:
            raise RemoteError(f"Invalid JSON from {endpoint}", response.status_code) from e

    async def upload(self, endpoint: str, arg: dict[str, Any], body: bytes) -> dict[str, Any]:
        """Send raw bytes to a content endpoint and return its JSON result."""
        url = f"{self.content_url}/{endpoint}"
        headers = self._headers()
        headers[API_ARG_HEADER] = json.dumps(arg)
        headers["Content-Type"] = "application/octet-stream"
        logger.debug(f"Upload {endpoint} {arg} ({len(body)} bytes)")
        response = await self._send(url, content=body, headers=headers)
        try:
            return response.json()  # type: ignore[no-any-return]
        except ValueError as e:
            raise RemoteError(f"Invalid JSON from {endpoint}", response.status_code) from e

    async def download(self, endpoint: str, arg: dict[str, Any]) -> tuple[dict[str, Any], bytes]:
        """Fetch a content endpoint, returning (header metadata, body bytes)."""
        url = f"{self.content_url}/{endpoint}"
        headers = self._headers()
        headers[API_ARG_HEADER] = json.dumps(arg)
        logger.debug(f"Download {endpoint} {arg}")
        response = await self._send(url, headers=headers)
        raw = response.headers.get(API_RESULT_HEADER)
        if not raw:
            raise RemoteError(f"Missing {API_RESULT_HEADER} header", response.status_code)
        try:
            metadata = json.loads(raw)
        except ValueError as e:
            raise RemoteError(f"Invalid {API_RESULT_HEADER} header", response.status_code) from e
        return metadata, response.content

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()


def _error_from_response(url: str, response: httpx.Response) -> RemoteError:
    """Build the RemoteError for a non-2xx response."""
    summary = response.text
    try:
        data = response.json()
    except ValueError:
        data = None
    if isinstance(data, dict):
        summary = data.get("error_summary") or summary
    message = f"{url.rsplit('/2/', 1)[-1]}: {summary.strip() or response.reason_phrase}"
    if response.status_code == 409 and "conflict" in summary:
        return RevisionConflictError(message, response.status_code)
    return RemoteError(message, response.status_code)
