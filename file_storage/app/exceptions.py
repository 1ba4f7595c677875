"""Error types raised by storage and request handling.

Each error carries the message shown to the client and the HTTP status it
maps to, so routes can turn any of them into a response in one place.
"""


class FileServerError(Exception):
    """Base class for all file server errors."""

    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ClientError(FileServerError):
    status_code = 400


class ValidationError(ClientError):
    """Uploaded file failed size or extension checks."""


class InvalidFilenameError(ClientError):
    """Name is not a single path segment inside the storage root."""


class NotFoundError(FileServerError):
    status_code = 404


class FileMissingError(NotFoundError):
    """No stored file under the requested name."""


class ServerError(FileServerError):
    status_code = 500


class StorageWriteError(ServerError):
    """Bytes could not be written to the storage root."""
