"""Exception hierarchy for fatbox.

Every error kind carries the HTTP status it is rendered with at the
endpoint boundary.
"""


class FatboxError(Exception):
    """Base exception for fatbox."""

    status_code = 500

    def __init__(self, message: str, details: str | None = None):
        super().__init__(message)
        self.message = message
        self.details = details


class InvalidInputError(FatboxError):
    """A required field is missing or malformed."""

    status_code = 400


class SessionNotFoundError(FatboxError):
    """No chunks were received for the given upload identifier."""

    status_code = 400


class StorageError(FatboxError):
    """Scratch filesystem read, write or delete failed."""

    status_code = 500


class UpstreamError(FatboxError):
    """A hosting destination failed or returned an unusable response."""

    status_code = 500


class UpstreamTimeoutError(UpstreamError):
    """A hosting destination did not answer within the forward timeout."""

    status_code = 504


class UploadFailedError(FatboxError):
    """Wraps any failure of a finish or direct upload past validation."""

    def __init__(self, message: str, cause: Exception):
        super().__init__(message, details=str(cause))
        if isinstance(cause, FatboxError):
            self.status_code = cause.status_code
