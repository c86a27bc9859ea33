"""Drop reports: filed by signed-in users, reviewed by admins."""
from __future__ import annotations

import logging
import uuid
from collections.abc import Callable
from datetime import datetime

from trove.db.time import utcnow
from trove.models.report import DropReport, ReportStatus
from trove.repositories import DropRepository, ReportRepository
from trove.schemas.report import ReportCreate, ReportReview
from trove.services.accounts import require_admin
from trove.services.errors import NotFoundError
from trove.services.identity import VerifiedIdentity

logger = logging.getLogger(__name__)


class ReportService:
    def __init__(
        self,
        *,
        drops: DropRepository,
        reports: ReportRepository,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self._drops = drops
        self._reports = reports
        self._clock = clock

    async def report_drop(
        self, identity: VerifiedIdentity, drop_id: str, submission: ReportCreate
    ) -> DropReport:
        """File a pending report against a drop.

        Owner-only drops cannot be reported by anyone but their owner, since
        they do not exist for anyone else.

        Raises:
            NotFoundError: The drop is unknown to the caller.
        """
        drop = await self._drops.get(drop_id)
        if drop is None or (drop.access_scope == "owner-only" and not drop.is_owned_by(identity.id)):
            raise NotFoundError("Drop not found")

        now = self._clock()
        report = DropReport(
            id=uuid.uuid4().hex,
            drop_id=drop.id,
            reported_by=identity.id,
            category=submission.category,
            reason=submission.reason,
            details=submission.details.strip(),
            drop_title=drop.title,
            drop_owner_id=drop.owner_id,
            created_at=now,
            updated_at=now,
        )
        await self._reports.create(report)
        logger.info("Drop %s reported (%s)", drop.id, report.category)
        return report

    async def list_reports(
        self, admin: VerifiedIdentity, status: ReportStatus | None = "pending"
    ) -> list[DropReport]:
        """Return reports in `status` (every report when None), newest first."""
        require_admin(admin)
        return await self._reports.list({"status": status} if status else None)

    async def review_report(
        self, admin: VerifiedIdentity, report_id: str, review: ReportReview
    ) -> DropReport:
        require_admin(admin)
        if await self._reports.get(report_id) is None:
            raise NotFoundError("Report not found")
        now = self._clock()
        report = await self._reports.update_fields(
            report_id,
            {
                "status": review.status,
                "reviewed_by": admin.id,
                "reviewed_at": now.isoformat(),
                "review_notes": review.notes,
                "updated_at": now.isoformat(),
            },
        )
        logger.info("Report %s marked %s by %s", report_id, review.status, admin.id)
        return report
