"""Profile endpoints for the authenticated caller."""

from __future__ import annotations

from fastapi import APIRouter

from trove.api.v1.dependencies import CurrentIdentityDep, ServicesDep
from trove.db.time import utcnow
from trove.models.access import UserProfile
from trove.schemas import DropView, ProfileResponse, ProfileUpdate
from trove.services.identity import VerifiedIdentity

router = APIRouter(prefix="/users", tags=["users"])


def _profile_response(identity: VerifiedIdentity, profile: UserProfile | None) -> ProfileResponse:
    return ProfileResponse(
        id=identity.id,
        display_name=profile.display_name if profile else None,
        tier=identity.tier,
        is_admin=identity.is_admin,
        updated_at=profile.updated_at if profile else utcnow(),
    )


@router.get("/me", response_model=ProfileResponse)
async def read_profile(services: ServicesDep, identity: CurrentIdentityDep) -> ProfileResponse:
    return _profile_response(identity, await services.users.get(identity.id))


@router.put("/me", response_model=ProfileResponse)
async def update_profile(
    payload: ProfileUpdate,
    services: ServicesDep,
    identity: CurrentIdentityDep,
) -> ProfileResponse:
    """Set the display name shown next to the caller's drops."""
    display_name = payload.display_name.strip() if payload.display_name else None
    profile = await services.users.upsert(identity.id, display_name, utcnow())
    return _profile_response(identity, profile)


@router.get("/me/drops", response_model=list[DropView])
async def list_my_drops(services: ServicesDep, identity: CurrentIdentityDep) -> list[DropView]:
    """Every drop the caller owns, newest first, including expired ones."""
    return await services.drops.list_owned(identity)
