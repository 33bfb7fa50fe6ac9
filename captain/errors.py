"""Typed errors raised by the hook and config stores."""

from __future__ import annotations

from captain.models import ErrorKind, OperationError

CONNECTION_REFUSED_MESSAGE = "Connection refused. Is the server running?"


class CaptainError(Exception):
    """Base class for failures that map onto an ``ErrorKind``."""

    kind: ErrorKind = ErrorKind.INVALID_INPUT

    def __init__(self, message: str, detail: str | None = None) -> None:
        self.message = message
        self.detail = detail
        super().__init__(message)

    def to_error(self) -> OperationError:
        return OperationError(kind=self.kind, message=self.message, detail=self.detail)


class HookNotFoundError(CaptainError):
    """Raised when a hook body file does not exist."""

    kind = ErrorKind.NOT_FOUND

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"{name}.json does not exist")


class HookParseError(CaptainError):
    """Raised when a stored file is not valid JSON or has the wrong shape."""

    kind = ErrorKind.PARSE_ERROR

    def __init__(self, path: str, reason: str) -> None:
        self.path = path
        super().__init__(f"Could not parse {path}", detail=reason)


class InvalidInputError(CaptainError):
    """Raised when a request is malformed (bad name, missing URL, bad body)."""

    kind = ErrorKind.INVALID_INPUT
