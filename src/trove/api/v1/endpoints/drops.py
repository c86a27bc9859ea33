"""Drop management endpoints."""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Query, Response, status

from trove.api.v1.dependencies import CurrentIdentityDep, OptionalIdentityDep, ServicesDep
from trove.core.geo import BoundingBox
from trove.models.drop import Drop
from trove.schemas import (
    DropCreate,
    DropMapItem,
    DropUpdate,
    DropView,
    ReportCreate,
    ReportReceipt,
)

router = APIRouter(prefix="/drops", tags=["drops"])


@router.post("", response_model=DropView, status_code=status.HTTP_201_CREATED)
async def create_drop(
    payload: DropCreate,
    services: ServicesDep,
    identity: CurrentIdentityDep,
) -> DropView:
    """Bury a new drop owned by the caller.

    Files are uploaded separately under the returned drop's storage prefix.
    """
    drop: Drop = await services.drops.create_drop(identity, payload)
    return await services.drops.view_drop(identity, drop.id)


@router.get("", response_model=list[DropMapItem])
async def list_discoverable_drops(
    services: ServicesDep,
    south: Annotated[float, Query(ge=-90, le=90)] = -90,
    west: Annotated[float, Query(ge=-180, le=180)] = -180,
    north: Annotated[float, Query(ge=-90, le=90)] = 90,
    east: Annotated[float, Query(ge=-180, le=180)] = 180,
) -> list[DropMapItem]:
    """Return discoverable drops inside the map viewport."""
    bounds = BoundingBox(south=south, west=west, north=north, east=east)
    return await services.drops.list_discoverable(bounds)


@router.get("/{drop_id}", response_model=DropView)
async def get_drop(
    drop_id: str,
    services: ServicesDep,
    identity: OptionalIdentityDep,
) -> DropView:
    return await services.drops.view_drop(identity, drop_id)


@router.patch("/{drop_id}", response_model=DropView)
async def update_drop(
    drop_id: str,
    payload: DropUpdate,
    services: ServicesDep,
    identity: CurrentIdentityDep,
) -> DropView:
    """Edit title, description, secret phrase or radius of an owned drop."""
    await services.drops.update_drop(identity, drop_id, payload)
    return await services.drops.view_drop(identity, drop_id)


@router.delete("/{drop_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_drop(
    drop_id: str,
    services: ServicesDep,
    identity: CurrentIdentityDep,
) -> Response:
    await services.drops.delete_drop(identity, drop_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/{drop_id}/report", response_model=ReportReceipt, status_code=status.HTTP_201_CREATED)
async def report_drop(
    drop_id: str,
    payload: ReportCreate,
    services: ServicesDep,
    identity: CurrentIdentityDep,
) -> ReportReceipt:
    """Flag a drop for moderator review."""
    report = await services.reports.report_drop(identity, drop_id, payload)
    return ReportReceipt(id=report.id, status=report.status)
