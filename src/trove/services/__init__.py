"""Business logic services for the Trove application."""

from .errors import (
    AuthenticationRequiredError,
    ExpiredError,
    ForbiddenError,
    InternalError,
    InvalidInputError,
    LocationRequiredError,
    NotFoundError,
    RateLimitedError,
    TooFarError,
    TroveError,
)

__all__ = [
    "TroveError",
    "InvalidInputError",
    "RateLimitedError",
    "NotFoundError",
    "ExpiredError",
    "ForbiddenError",
    "AuthenticationRequiredError",
    "LocationRequiredError",
    "TooFarError",
    "InternalError",
]
