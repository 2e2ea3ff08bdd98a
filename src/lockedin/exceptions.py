"""Domain errors raised by the service layer.

The HTTP layer maps each class to a status code in
``lockedin.middleware.error_handler``.
"""


class LockedInError(Exception):
    """Base class for expected, caller-facing failures."""

    status_code = 500

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ValidationError(LockedInError):
    """Malformed or missing input. Nothing was written."""

    status_code = 400


class NotFoundError(LockedInError):
    """Unknown invite code, user or group."""

    status_code = 404


class ConflictError(LockedInError):
    """Uniqueness violation that the caller must hear about (e.g. username taken)."""

    status_code = 409
