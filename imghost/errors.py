"""Failure kinds raised by the storage layer.

Each error carries the HTTP status it is reported with; the mapping to a
JSON response lives in ``imghost.handlers``.
"""


class ImageHostError(Exception):
    status_code = 500

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class ValidationError(ImageHostError):
    """Bad or missing input: no file, disallowed MIME type, bad filename."""

    status_code = 400


class FileTooLargeError(ValidationError):
    status_code = 413


class NotFoundError(ImageHostError):
    status_code = 404


class StorageError(ImageHostError):
    """Unexpected filesystem failure."""

    status_code = 500
