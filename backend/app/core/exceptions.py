"""Typed failures raised by the service layer.

Services raise these; ``app.main`` turns them into JSON responses with the
matching status code.  Nothing here is retried by the services themselves.
"""

from __future__ import annotations

from fastapi import status


class CoreError(Exception):
    """Base class for every failure the service layer reports to callers."""

    code = "CORE_ERROR"
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, detail: str) -> None:
        super().__init__(detail)
        self.detail = detail


class ValidationError(CoreError):
    """A required field is missing or holds an unusable value."""

    code = "VALIDATION_ERROR"
    status_code = status.HTTP_400_BAD_REQUEST


class MissingField(ValidationError):
    code = "MISSING_FIELD"


class InvalidTier(ValidationError):
    code = "INVALID_TIER"


class InvalidTransition(ValidationError):
    code = "INVALID_TRANSITION"


class NotFoundError(CoreError):
    code = "NOT_FOUND"
    status_code = status.HTTP_404_NOT_FOUND


class InvariantViolation(CoreError):
    """Stored ordering no longer satisfies the contiguity invariant."""

    code = "INVARIANT_VIOLATION"
    status_code = status.HTTP_409_CONFLICT


class ConflictError(CoreError):
    """A natural key collided or a concurrent write won the race."""

    code = "CONFLICT"
    status_code = status.HTTP_409_CONFLICT


class StoreFailure(CoreError):
    code = "STORE_FAILURE"
    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
