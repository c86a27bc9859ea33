"""Treasure hunt endpoints."""

from __future__ import annotations

from fastapi import APIRouter

from trove.api.v1.dependencies import CurrentIdentityDep, OptionalIdentityDep, ServicesDep
from trove.schemas import HintRequest, HintResponse, HuntJoinRequest, HuntJoinResponse

router = APIRouter(prefix="/hunts", tags=["hunts"])


@router.post("/join", response_model=HuntJoinResponse)
async def join_hunt(
    payload: HuntJoinRequest,
    services: ServicesDep,
    identity: CurrentIdentityDep,
) -> HuntJoinResponse:
    return await services.hunts.join_hunt(identity, payload.hunt_code)


@router.post("/hint", response_model=HintResponse)
async def proximity_hint(
    payload: HintRequest,
    services: ServicesDep,
    identity: OptionalIdentityDep,
) -> HintResponse:
    """Return a proximity hint for a hunt the caller joined.

    Every other case, including unknown drops, answers ``show_hint: false``.
    """
    hint = await services.hunts.hint_for(identity, payload.drop_id, payload.coordinate.to_coordinate())
    return HintResponse(show_hint=hint.show_hint, hint_type=hint.hint_type, message=hint.message)
