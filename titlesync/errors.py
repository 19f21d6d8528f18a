"""Exceptions shared across layers."""

from __future__ import annotations


class TransportError(RuntimeError):
    """Network-level failure or server-side error worth retrying."""

    def __init__(self, message: str, *, status: int | None = None, body: str = "") -> None:
        super().__init__(message)
        self.status = status
        self.body = body


class CaseAPIError(RuntimeError):
    """Case API answered with something other than 200."""

    def __init__(self, message: str, *, status: int, body: str) -> None:
        super().__init__(message)
        self.status = status
        self.body = body


class ResponseBodyError(RuntimeError):
    """Server sent a status line but its body could not be read.

    Never retried: the request has already been acted on.
    """

    def __init__(self, message: str, *, status: int) -> None:
        super().__init__(message)
        self.status = status
