"""Typed failures shared by the unlock flow and drop management.

Each error carries a stable `kind` that clients switch on, the HTTP status the
API renders it with, and an optional extra payload.
"""

from __future__ import annotations

from typing import Any, ClassVar

GENERIC_NOT_FOUND_MESSAGE = "No drop found at this location with that secret phrase"
GENERIC_INTERNAL_MESSAGE = "Internal server error"


class TroveError(Exception):
    """Base exception for every typed failure."""

    kind: ClassVar[str] = "internal"
    status_code: ClassVar[int] = 500
    default_message: ClassVar[str] = GENERIC_INTERNAL_MESSAGE

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)

    def extra(self) -> dict[str, Any]:
        """Additional fields rendered next to `error` and `message`."""
        return {}

    def to_payload(self) -> dict[str, Any]:
        return {"error": self.kind, "message": self.message, **self.extra()}


class InvalidInputError(TroveError):
    """Malformed request; never written to the access log."""

    kind = "invalid-input"
    status_code = 400
    default_message = "Invalid input"

    def __init__(self, message: str | None = None, errors: list[str] | None = None) -> None:
        super().__init__(message)
        self.errors = list(errors or [])

    def extra(self) -> dict[str, Any]:
        return {"errors": self.errors} if self.errors else {}


class RateLimitedError(TroveError):
    """Too many attempts for this identity or address."""

    kind = "rate-limited"
    status_code = 429
    default_message = "Too many unlock attempts. Please try again later."

    def __init__(self, retry_after_seconds: float, message: str | None = None) -> None:
        super().__init__(message)
        self.retry_after_seconds = max(0.0, retry_after_seconds)

    def extra(self) -> dict[str, Any]:
        return {"retry_after_seconds": self.retry_after_seconds}


class NotFoundError(TroveError):
    """No matching drop; indistinguishable from a wrong secret on the search path."""

    kind = "not-found"
    status_code = 404
    default_message = GENERIC_NOT_FOUND_MESSAGE


class ExpiredError(TroveError):
    kind = "expired"
    status_code = 410
    default_message = "This drop has expired"


class ForbiddenError(TroveError):
    """Ownership or secret mismatch."""

    kind = "forbidden"
    status_code = 403
    default_message = "Access denied"


class AuthenticationRequiredError(TroveError):
    kind = "unauthenticated"
    status_code = 401
    default_message = "Authentication required"


class LocationRequiredError(TroveError):
    kind = "location-required"
    status_code = 400
    default_message = "Location required for this drop"


class TooFarError(TroveError):
    """Outside the geofence; discloses the rounded distance and the radius."""

    kind = "too-far"
    status_code = 403

    def __init__(self, distance_m: float, required_m: int) -> None:
        super().__init__(f"You need to be within {required_m}m of the drop location.")
        self.distance_m = round(distance_m)
        self.required_m = required_m

    def extra(self) -> dict[str, Any]:
        return {"distance_m": self.distance_m, "required_m": self.required_m}


class InternalError(TroveError):
    """Unexpected collaborator failure; details stay in server logs."""
