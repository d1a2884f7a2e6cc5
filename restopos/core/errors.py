from __future__ import annotations


class RestoPosError(Exception):
    """Base class for errors raised by stores, repositories and services."""

    status_code = 500

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class StorageError(RestoPosError):
    """The local store could not be opened, read or written."""

    status_code = 503


class ValidationError(RestoPosError):
    status_code = 400


class NotFoundError(RestoPosError):
    status_code = 404
