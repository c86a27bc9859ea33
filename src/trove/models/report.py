# src/trove/models/report.py
"""Abuse reports filed against drops and their moderation state."""

from __future__ import annotations

from datetime import datetime
from typing import Literal

from pydantic import BaseModel

REPORTS_COLLECTION = "drop_reports"

ReportCategory = Literal["inappropriate", "harassment", "spam", "illegal", "copyright", "other"]
ReportStatus = Literal["pending", "reviewed", "resolved", "dismissed"]


class DropReport(BaseModel):
    """One report; the drop title and owner are copied so reports outlive the drop."""

    id: str
    drop_id: str
    reported_by: str
    category: ReportCategory
    reason: str
    details: str = ""
    drop_title: str
    drop_owner_id: str
    status: ReportStatus = "pending"
    reviewed_by: str | None = None
    reviewed_at: datetime | None = None
    review_notes: str | None = None
    created_at: datetime
    updated_at: datetime
