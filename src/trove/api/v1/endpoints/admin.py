"""Admin endpoints: account settings and report moderation."""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Query

from trove.api.v1.dependencies import CurrentIdentityDep, ServicesDep
from trove.models.access import UserProfile
from trove.models.report import DropReport, ReportStatus
from trove.schemas import AccountView, AdminUpdate, ReportReview, ReportView, TierUpdate

router = APIRouter(prefix="/admin", tags=["admin"])


def _account_view(profile: UserProfile) -> AccountView:
    return AccountView(**profile.model_dump())


def _report_view(report: DropReport) -> ReportView:
    return ReportView(**report.model_dump())


@router.put("/users/{user_id}/tier", response_model=AccountView)
async def update_user_tier(
    user_id: str,
    payload: TierUpdate,
    services: ServicesDep,
    identity: CurrentIdentityDep,
) -> AccountView:
    """Change a user's subscription tier; applies from their next request."""
    return _account_view(await services.accounts.set_tier(identity, user_id, payload.tier))


@router.put("/users/{user_id}/admin", response_model=AccountView)
async def update_user_admin(
    user_id: str,
    payload: AdminUpdate,
    services: ServicesDep,
    identity: CurrentIdentityDep,
) -> AccountView:
    return _account_view(await services.accounts.set_admin(identity, user_id, payload.is_admin))


@router.get("/reports", response_model=list[ReportView])
async def list_reports(
    services: ServicesDep,
    identity: CurrentIdentityDep,
    status: Annotated[ReportStatus | None, Query()] = "pending",
) -> list[ReportView]:
    reports = await services.reports.list_reports(identity, status)
    return [_report_view(report) for report in reports]


@router.patch("/reports/{report_id}", response_model=ReportView)
async def review_report(
    report_id: str,
    payload: ReportReview,
    services: ServicesDep,
    identity: CurrentIdentityDep,
) -> ReportView:
    return _report_view(await services.reports.review_report(identity, report_id, payload))
