"""Data access helpers for access logs, hunt memberships and user profiles."""
from __future__ import annotations

from datetime import datetime
from typing import Any

from trove.models.access import (
    ACCESS_LOGS_COLLECTION,
    HUNT_MEMBERSHIPS_COLLECTION,
    USERS_COLLECTION,
    AccessLogEntry,
    HuntMembership,
    UserProfile,
)
from trove.services.store import DocumentStore

__all__ = ["AccessLogRepository", "HuntMembershipRepository", "UserRepository"]


class AccessLogRepository:
    """Append-only writer for unlock audit records."""

    def __init__(self, store: DocumentStore) -> None:
        self.store = store

    async def append(self, entry: AccessLogEntry) -> str:
        """Persist `entry` and return its generated identifier."""
        return await self.store.add(ACCESS_LOGS_COLLECTION, entry.model_dump(mode="json"))

    async def list_for_drop(self, drop_id: str) -> list[AccessLogEntry]:
        documents = await self.store.query(ACCESS_LOGS_COLLECTION, {"drop_id": drop_id})
        entries = [AccessLogEntry.model_validate(doc) for doc in documents]
        return sorted(entries, key=lambda entry: entry.created_at)


class HuntMembershipRepository:
    """Links between identities and the hunt codes they joined."""

    def __init__(self, store: DocumentStore) -> None:
        self.store = store

    async def joined_codes(self, identity_id: str) -> set[str]:
        """Return every hunt code `identity_id` has joined."""
        documents = await self.store.query(HUNT_MEMBERSHIPS_COLLECTION, {"identity": identity_id})
        return {doc["hunt_code"] for doc in documents if doc.get("hunt_code")}

    async def join(self, membership: HuntMembership) -> bool:
        """Record `membership` unless it already exists.

        Returns:
            True when a new membership was written, False if it was already present.
        """
        doc_id = HuntMembership.document_id(membership.identity, membership.hunt_code)

        def _insert(current: dict[str, Any] | None) -> tuple[dict[str, Any] | None, bool]:
            if current is not None:
                return None, False
            return membership.model_dump(mode="json"), True

        return await self.store.transact(HUNT_MEMBERSHIPS_COLLECTION, doc_id, _insert)


class UserRepository:
    """Public profile records keyed by identity."""

    def __init__(self, store: DocumentStore) -> None:
        self.store = store

    async def get(self, identity_id: str) -> UserProfile | None:
        document = await self.store.get(USERS_COLLECTION, identity_id)
        return UserProfile.model_validate(document) if document is not None else None

    async def display_name(self, identity_id: str) -> str | None:
        profile = await self.get(identity_id)
        return profile.display_name if profile else None

    async def upsert(self, identity_id: str, display_name: str | None, now: datetime) -> UserProfile:
        """Set the display name of `identity_id`, keeping its account settings."""
        return await self._merge(identity_id, {"display_name": display_name}, now)

    async def set_account(
        self,
        identity_id: str,
        now: datetime,
        *,
        tier: str | None = None,
        is_admin: bool | None = None,
    ) -> UserProfile:
        """Record admin-managed account settings; None leaves a setting unchanged."""
        fields: dict[str, Any] = {}
        if tier is not None:
            fields["tier"] = tier
        if is_admin is not None:
            fields["is_admin"] = is_admin
        return await self._merge(identity_id, fields, now)

    async def _merge(self, identity_id: str, fields: dict[str, Any], now: datetime) -> UserProfile:
        def _apply(current: dict[str, Any] | None) -> tuple[dict[str, Any], dict[str, Any]]:
            document = dict(current or {"id": identity_id})
            document.update(fields)
            document["updated_at"] = now.isoformat()
            return document, document

        document = await self.store.transact(USERS_COLLECTION, identity_id, _apply)
        return UserProfile.model_validate(document)
