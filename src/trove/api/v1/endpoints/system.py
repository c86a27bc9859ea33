"""System and transparency endpoints for the Trove API."""

from __future__ import annotations

from dataclasses import asdict

from fastapi import APIRouter

from trove.api.v1.dependencies import ServicesDep
from trove.core.tiers import TIER_LIMITS
from trove.services.hunt_permissions import HINT_STRENGTHS

router = APIRouter(prefix="/system", tags=["system", "transparency"])


@router.get("/config")
async def get_public_config(services: ServicesDep) -> dict[str, object]:
    """Return a sanitized snapshot of public runtime configuration.

    Excludes secrets and connection strings; suitable for clients that render
    tier comparisons and throttling notices.

    Args:
        services: Service container holding the active settings

    Returns:
        Dictionary containing app metadata, tier limits, hunt hint strengths,
        the unlock throttling policy and signed link lifetime
    """
    config = services.settings
    return {
        "app": {
            "name": config.app_name,
            "version": config.app_version,
            "debug": config.debug,
        },
        "tiers": {name: asdict(limits) for name, limits in TIER_LIMITS.items()},
        "hunts": {
            "hint_strengths": {
                difficulty: asdict(strength) for difficulty, strength in HINT_STRENGTHS.items()
            },
        },
        "unlock": {
            "rate_limit": {
                "max_attempts": services.rate_limiter.max_attempts,
                "window_seconds": int(services.rate_limiter.window.total_seconds()),
            },
            "signed_url_ttl_seconds": config.signed_url_ttl_seconds,
        },
    }
