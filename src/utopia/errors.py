"""Exceptions raised by the Utopia client."""

from __future__ import annotations


class UtopiaError(Exception):
    """Base class for every error raised by this package."""


class InvalidCredentialError(UtopiaError, ValueError):
    """The API token is missing or not hexadecimal."""


class TransportError(UtopiaError):
    """A request did not come back with status 200 and a JSON body."""

    def __init__(
        self,
        message: str,
        *,
        cause: BaseException | None = None,
        status_code: int | None = None,
    ) -> None:
        super().__init__(message)
        self.cause = cause
        self.status_code = status_code


class MissingParameterError(UtopiaError, TypeError):
    """Arguments don't fit the request shape of an operation."""


class NotificationSetupError(UtopiaError):
    """The notification channel could not be negotiated or opened."""


class MalformedFrameError(UtopiaError):
    """A notification frame is not a JSON object with a string ``type``."""


class ChannelClosedError(UtopiaError):
    """The notification channel is closed; no more events will arrive."""


class FileAccessError(UtopiaError):
    """A file given to an upload helper can't be read."""


class FilenameRequiredError(FileAccessError):
    pass


class FileMissingError(FileAccessError):
    pass


class PathIsDirectoryError(FileAccessError):
    pass
