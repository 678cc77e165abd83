"""Domain error taxonomy.

Services raise these; ``middleware.error_handler`` turns every one of them into
the canonical ``{"success": false, "message": ...}`` envelope with the matching
HTTP status.
"""

from __future__ import annotations


class AirwalkError(Exception):
    """Base class for expected, user-facing failures."""

    status_code: int = 400

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ValidationError(AirwalkError):
    """Missing or malformed input."""

    status_code = 400


class AuthError(AirwalkError):
    """Bad credentials."""

    status_code = 401


class NotFoundError(AirwalkError):
    """Referenced entity does not exist."""

    status_code = 404


class ConflictError(AirwalkError):
    """Unique key or ownership conflict."""

    status_code = 409


class LockedError(AirwalkError):
    """Account temporarily locked after repeated failed logins."""

    status_code = 429


class InternalError(AirwalkError):
    """Unexpected failure inside an operation."""

    status_code = 500
