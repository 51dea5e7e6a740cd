"""
Thumbnail Proxy Errors

Every per-request failure is a ThumbnailError carrying the HTTP status it maps to.
InvalidCapacity is a startup error and is never raised while serving a request.
"""


class ThumbnailError(Exception):
    """Base class for pipeline failures."""

    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    @property
    def is_client_error(self) -> bool:
        return 400 <= self.status_code < 500


class MalformedSpec(ThumbnailError):
    """The spec token could not be decoded."""
    status_code = 400


class InvalidOperation(ThumbnailError):
    """A decoded operation has out-of-range parameters."""
    status_code = 400


class FetchError(ThumbnailError):
    """The source image could not be retrieved."""
    status_code = 400


class DecodeError(ThumbnailError):
    """The source bytes are not a recognizable image."""
    status_code = 400


class EncodeError(ThumbnailError):
    """The output image could not be produced."""
    status_code = 500


class InvalidCapacity(ValueError):
    """Cache capacity must be a positive integer."""
