"""Data access helpers for working with drops."""
from __future__ import annotations

import logging
from datetime import datetime
from typing import Any

from pydantic import ValidationError

from trove.models.drop import DROPS_COLLECTION, Drop, drop_from_document, drop_to_document
from trove.services.store import DocumentStore

__all__ = ["DropRepository"]

logger = logging.getLogger(__name__)


class DropRepository:
    """Thin wrapper around document store access for drop entities."""

    def __init__(self, store: DocumentStore) -> None:
        self.store = store

    async def get(self, drop_id: str) -> Drop | None:
        """Return a drop by identifier."""
        document = await self.store.get(DROPS_COLLECTION, drop_id)
        return drop_from_document(document) if document is not None else None

    async def list(self, filters: dict[str, Any] | None = None) -> list[Drop]:
        """Return every drop matching the equality filters.

        Documents that no longer parse are skipped so one bad record cannot
        break searches for everyone.
        """
        drops: list[Drop] = []
        for document in await self.store.query(DROPS_COLLECTION, filters):
            try:
                drops.append(drop_from_document(document))
            except ValidationError:
                logger.warning("Skipping malformed drop document %s", document.get("id"))
        return drops

    async def count_for_owner(self, owner_id: str) -> int:
        return len(await self.store.query(DROPS_COLLECTION, {"owner_id": owner_id}))

    async def create(self, drop: Drop) -> Drop:
        """Insert a new drop and return it."""
        await self.store.put(DROPS_COLLECTION, drop.id, drop_to_document(drop))
        return drop

    async def update_fields(self, drop_id: str, fields: dict[str, Any]) -> Drop:
        """Set top-level fields on an existing drop and return the result."""
        document = await self.store.update(DROPS_COLLECTION, drop_id, fields=fields)
        return drop_from_document(document)

    async def record_unlock(self, drop_id: str, at: datetime) -> Drop:
        """Atomically count a successful unlock."""
        document = await self.store.update(
            DROPS_COLLECTION,
            drop_id,
            fields={"stats.last_accessed_at": at.isoformat()},
            increments={"stats.unlock_count": 1},
        )
        return drop_from_document(document)

    async def record_view(self, drop_id: str, at: datetime) -> Drop:
        """Atomically count a view by a non-owner."""
        document = await self.store.update(
            DROPS_COLLECTION,
            drop_id,
            fields={"stats.last_accessed_at": at.isoformat()},
            increments={"stats.view_count": 1},
        )
        return drop_from_document(document)

    async def delete(self, drop_id: str) -> bool:
        return await self.store.delete(DROPS_COLLECTION, drop_id)
