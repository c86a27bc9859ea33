"""Subscription tier limits for drop creation.

Tiers gate what an owner may create (file size, radius bounds, physical
retrieval, hunts, quota). They never gate unlocking.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Final, Literal

Tier = Literal["free", "premium", "business"]

DEFAULT_TIER: Final[Tier] = "free"


@dataclass(frozen=True)
class TierLimits:
    """Limits for a subscription tier."""

    max_file_size_mb: float
    min_radius_m: int
    max_radius_m: int
    can_use_physical_mode: bool
    can_use_hunts: bool
    default_expiry_days: int | None  # None = drops never expire by default
    max_drops_per_owner: int


@dataclass(frozen=True)
class ProposalValidation:
    """Outcome of checking a drop proposal against a tier."""

    valid: bool
    errors: list[str] = field(default_factory=list)


TIER_LIMITS: Final[dict[str, TierLimits]] = {
    "free": TierLimits(
        max_file_size_mb=10,
        min_radius_m=50,
        max_radius_m=500,
        can_use_physical_mode=False,
        can_use_hunts=False,
        default_expiry_days=30,
        max_drops_per_owner=10,
    ),
    "premium": TierLimits(
        max_file_size_mb=100,
        min_radius_m=10,
        max_radius_m=1000,
        can_use_physical_mode=True,
        can_use_hunts=True,
        default_expiry_days=365,
        max_drops_per_owner=100,
    ),
    "business": TierLimits(
        max_file_size_mb=500,
        min_radius_m=5,
        max_radius_m=5000,
        can_use_physical_mode=True,
        can_use_hunts=True,
        default_expiry_days=None,
        max_drops_per_owner=1000,
    ),
}


def normalize_tier(tier: str | None) -> Tier:
    """Map an arbitrary tier string to a known tier, defaulting to free."""
    name = tier.strip().lower() if isinstance(tier, str) else ""
    if name in TIER_LIMITS:
        return name  # type: ignore[return-value]
    return DEFAULT_TIER


def limits_for(tier: str | None) -> TierLimits:
    """Get limits for a given tier; unknown tiers get the free limits."""
    return TIER_LIMITS[normalize_tier(tier)]


def radius_error(tier: str | None, radius_m: float) -> str | None:
    """Return an error message if the radius is outside the tier's inclusive bounds."""
    limits = limits_for(tier)
    if limits.min_radius_m <= radius_m <= limits.max_radius_m:
        return None
    return (
        f"Radius {radius_m:g}m is out of range for {normalize_tier(tier)} tier "
        f"(must be between {limits.min_radius_m}m and {limits.max_radius_m}m)"
    )


def validate_drop_proposal(
    tier: str | None,
    proposed_size_mb: float,
    proposed_radius_m: float,
    wants_physical: bool,
    wants_hunt: bool,
) -> ProposalValidation:
    """Validate a complete drop proposal, collecting every violation.

    Args:
        tier: Owner's subscription tier.
        proposed_size_mb: Total size of the files to bury, in megabytes.
        proposed_radius_m: Requested geofence radius in meters.
        wants_physical: True if the drop requires physical presence to unlock.
        wants_hunt: True if the drop is a treasure hunt.

    Returns:
        A `ProposalValidation` listing one message per independent violation.
    """
    name = normalize_tier(tier)
    limits = TIER_LIMITS[name]
    errors: list[str] = []

    if proposed_size_mb > limits.max_file_size_mb:
        errors.append(
            f"File size {proposed_size_mb:.2f}MB exceeds {limits.max_file_size_mb:g}MB "
            f"limit for {name} tier"
        )

    radius_message = radius_error(name, proposed_radius_m)
    if radius_message:
        errors.append(radius_message)

    if wants_physical and not limits.can_use_physical_mode:
        errors.append("Physical unlock mode requires Premium+ tier")

    if wants_hunt and not limits.can_use_hunts:
        errors.append("Treasure hunts require Premium+ tier")

    return ProposalValidation(valid=not errors, errors=errors)
