"""Drop report schemas."""

from __future__ import annotations

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, Field, field_validator

from trove.models.report import ReportCategory, ReportStatus


class ReportCreate(BaseModel):
    category: ReportCategory
    reason: str = Field(..., min_length=1, max_length=500)
    details: str = Field("", max_length=2000)

    @field_validator("reason")
    @classmethod
    def _reason_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("must not be blank")
        return value.strip()


class ReportReceipt(BaseModel):
    id: str
    status: ReportStatus
    message: str = "Report submitted. Our team will review it shortly."


class ReportReview(BaseModel):
    """Moderator decision on a pending report."""

    status: Literal["reviewed", "resolved", "dismissed"]
    notes: str | None = Field(None, max_length=2000)


class ReportView(BaseModel):
    id: str
    drop_id: str
    reported_by: str
    category: ReportCategory
    reason: str
    details: str
    drop_title: str
    drop_owner_id: str
    status: ReportStatus
    reviewed_by: str | None
    reviewed_at: datetime | None
    review_notes: str | None
    created_at: datetime
    updated_at: datetime
