"""Domain exceptions and their HTTP mapping."""

from typing import Any


class TravelTrekError(Exception):
    """Base class for errors surfaced to API callers."""

    status_code = 500

    def __init__(self, message: str, /, **extra: Any):
        super().__init__(message)
        self.message = message
        self.extra = extra

    def to_dict(self) -> dict:
        return {"error": self.message, **self.extra}


class ValidationError(TravelTrekError):
    """Malformed or missing input."""

    status_code = 400


class ConflictError(TravelTrekError):
    """Duplicate email, already-active or already-pending membership."""

    status_code = 400


class DuplicateAccountError(ConflictError):
    """Registration with an email that already has an account."""

    status_code = 409


class NotFoundError(TravelTrekError):
    status_code = 404


class StateError(TravelTrekError):
    """Operation not valid for the membership's current lifecycle state."""

    status_code = 400


class AuthenticationError(TravelTrekError):
    status_code = 401


class PermissionDeniedError(TravelTrekError):
    status_code = 403


class RateLimitedError(TravelTrekError):
    status_code = 429


class UpstreamError(TravelTrekError):
    """Notification or AI provider failure. Logged, never fails the caller."""

    status_code = 502
