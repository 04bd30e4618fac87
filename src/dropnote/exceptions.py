"""Exception hierarchy for the dropnote library."""

from __future__ import annotations


class DropnoteError(Exception):
    """Base exception for all dropnote errors."""

    pass


class RemoteError(DropnoteError):
    """Raised when a call to the remote file store fails.

    The status attribute holds the HTTP status code of the failed response,
    or None when the request never produced one (network failure, timeout).
    """

    def __init__(self, message: str, status: int | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.status = status

    def __str__(self) -> str:
        if self.status is None:
            return self.message
        return f"{self.message} (HTTP {self.status})"


class RevisionConflictError(RemoteError):
    """Raised when a write is rejected because the remote revision changed."""

    pass


class ContentError(DropnoteError):
    """Raised when a downloaded file is not UTF-8 text."""

    pass


class ConfigError(DropnoteError):
    """Raised when required configuration is missing or invalid."""

    pass
