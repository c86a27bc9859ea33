"""Unlock endpoints: unearth by location and unlock by id."""

from __future__ import annotations

from fastapi import APIRouter

from trove.api.v1.dependencies import ClientIpHashDep, OptionalIdentityDep, ServicesDep
from trove.schemas import (
    DisambiguationList,
    ErrorResponse,
    UnearthRequest,
    UnlockByIdRequest,
    UnlockResult,
)

router = APIRouter(prefix="/drops", tags=["unlock"])

_ERRORS = {
    400: {"model": ErrorResponse},
    403: {"model": ErrorResponse},
    404: {"model": ErrorResponse},
    410: {"model": ErrorResponse},
    429: {"model": ErrorResponse},
}


@router.post(
    "/unearth",
    response_model=UnlockResult | DisambiguationList,
    responses=_ERRORS,
)
async def unearth(
    payload: UnearthRequest,
    services: ServicesDep,
    identity: OptionalIdentityDep,
    ip_hash: ClientIpHashDep,
) -> UnlockResult | DisambiguationList:
    """Find and unlock the drop buried here under this secret phrase.

    When several drops match, the response lists them and the client unlocks
    the chosen one through `/drops/{drop_id}/unlock`, sending the secret again.
    """
    return await services.unlock.unlock_by_location(
        payload.coordinate.to_coordinate(),
        payload.secret,
        identity=identity,
        ip_hash=ip_hash,
    )


@router.post("/{drop_id}/unlock", response_model=UnlockResult, responses=_ERRORS)
async def unlock_drop(
    drop_id: str,
    payload: UnlockByIdRequest,
    services: ServicesDep,
    identity: OptionalIdentityDep,
    ip_hash: ClientIpHashDep,
) -> UnlockResult:
    """Unlock a known drop; the coordinate is checked whenever it is supplied."""
    return await services.unlock.unlock_by_id(
        drop_id,
        payload.secret,
        coordinate=payload.coordinate.to_coordinate() if payload.coordinate else None,
        identity=identity,
        ip_hash=ip_hash,
    )
