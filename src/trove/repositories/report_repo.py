"""Data access helpers for drop reports."""
from __future__ import annotations

from typing import Any

from trove.models.report import REPORTS_COLLECTION, DropReport
from trove.services.store import DocumentStore

__all__ = ["ReportRepository"]


class ReportRepository:
    def __init__(self, store: DocumentStore) -> None:
        self.store = store

    async def create(self, report: DropReport) -> DropReport:
        await self.store.put(REPORTS_COLLECTION, report.id, report.model_dump(mode="json"))
        return report

    async def get(self, report_id: str) -> DropReport | None:
        document = await self.store.get(REPORTS_COLLECTION, report_id)
        return DropReport.model_validate(document) if document is not None else None

    async def list(self, filters: dict[str, Any] | None = None) -> list[DropReport]:
        """Return matching reports, newest first."""
        documents = await self.store.query(REPORTS_COLLECTION, filters)
        reports = [DropReport.model_validate(doc) for doc in documents]
        return sorted(reports, key=lambda report: report.created_at, reverse=True)

    async def update_fields(self, report_id: str, fields: dict[str, Any]) -> DropReport:
        document = await self.store.update(REPORTS_COLLECTION, report_id, fields=fields)
        return DropReport.model_validate(document)
