"""Owner operations on drops: bury, edit, delete, view and map listing."""
from __future__ import annotations

import asyncio
import logging
import uuid
from collections.abc import Callable
from datetime import UTC, datetime, timedelta
from typing import Any

from trove.core.geo import BoundingBox, geohash_for
from trove.core.security import SecretHasher
from trove.core.tiers import limits_for, normalize_tier, radius_error, validate_drop_proposal
from trove.db.time import utcnow
from trove.models.drop import DiscoverableDrop, Drop, DropLocation, HiddenDrop, HuntDrop
from trove.repositories import DropRepository, UserRepository
from trove.schemas.drop import DropCreate, DropLocationView, DropMapItem, DropUpdate, DropView
from trove.services.blobs import BlobStore
from trove.services.errors import ForbiddenError, InvalidInputError, NotFoundError
from trove.services.hunt_permissions import generate_hunt_code, is_valid_hunt_code
from trove.services.identity import VerifiedIdentity

__all__ = ["DropService", "storage_path_for"]

logger = logging.getLogger(__name__)

HUNT_CODE_ATTEMPTS = 5


def storage_path_for(drop_id: str) -> str:
    """Blob prefix holding a drop's files."""
    return f"drops/{drop_id}/"


def _as_utc(value: datetime) -> datetime:
    return value.replace(tzinfo=UTC) if value.tzinfo is None else value.astimezone(UTC)


def _to_view(
    drop: Drop, *, is_owner: bool, owner_name: str | None, file_count: int, now: datetime
) -> DropView:
    show_location = is_owner or drop.visibility_class == "discoverable"
    return DropView(
        id=drop.id,
        title=drop.title,
        description=drop.description,
        visibility_class=drop.visibility_class,
        access_scope=drop.access_scope,
        retrieval_mode=drop.retrieval_mode,
        geofence_radius_m=drop.geofence_radius_m,
        tier=drop.tier,
        created_at=drop.created_at,
        updated_at=drop.updated_at,
        expires_at=drop.expires_at,
        is_expired=drop.is_expired(now),
        is_owner=is_owner,
        owner_display_name=owner_name,
        file_count=file_count,
        view_count=drop.stats.view_count,
        unlock_count=drop.stats.unlock_count,
        location=DropLocationView(**drop.location.model_dump()) if show_location else None,
        hunt_difficulty=drop.hunt_difficulty if isinstance(drop, HuntDrop) else None,
        hunt_code=drop.hunt_code if isinstance(drop, HuntDrop) and is_owner else None,
    )


class DropService:
    """Drop lifecycle operations gated by ownership and tier limits."""

    def __init__(
        self,
        *,
        drops: DropRepository,
        users: UserRepository,
        blobs: BlobStore,
        hasher: SecretHasher,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self._drops = drops
        self._users = users
        self._blobs = blobs
        self._hasher = hasher
        self._clock = clock

    async def create_drop(self, identity: VerifiedIdentity, proposal: DropCreate) -> Drop:
        """Bury a new drop for `identity`.

        Every tier violation is collected and reported together.

        Raises:
            InvalidInputError: The proposal breaks tier limits, the owner's
                quota, or hunt code rules.
        """
        tier = normalize_tier(identity.tier)
        limits = limits_for(tier)
        is_hunt = proposal.visibility_class == "hunt"
        now = self._clock()

        validation = validate_drop_proposal(
            tier,
            proposed_size_mb=proposal.total_size_mb,
            proposed_radius_m=proposal.geofence_radius_m,
            wants_physical=proposal.retrieval_mode == "physical",
            wants_hunt=is_hunt,
        )
        errors = list(validation.errors)

        if await self._drops.count_for_owner(identity.id) >= limits.max_drops_per_owner:
            errors.append(
                f"Drop limit reached for {tier} tier ({limits.max_drops_per_owner} drops)"
            )

        expires_at = _as_utc(proposal.expires_at) if proposal.expires_at else None
        if expires_at is not None and expires_at <= now:
            errors.append("Expiry must be in the future")
        if expires_at is None and limits.default_expiry_days is not None:
            expires_at = now + timedelta(days=limits.default_expiry_days)

        hunt_code: str | None = None
        if is_hunt:
            hunt_code = await self._resolve_hunt_code(proposal.hunt_code, errors)

        if errors:
            raise InvalidInputError("Drop proposal is not allowed for this tier", errors)

        drop_id = uuid.uuid4().hex
        lat, lng = proposal.coordinate.lat, proposal.coordinate.lng
        fields: dict[str, Any] = {
            "id": drop_id,
            "owner_id": identity.id,
            "title": proposal.title.strip(),
            "description": proposal.description.strip(),
            "secret_digest": await asyncio.to_thread(self._hasher.hash, proposal.secret),
            "location": DropLocation(lat=lat, lng=lng, geohash=geohash_for(lat, lng)),
            "geofence_radius_m": proposal.geofence_radius_m,
            "access_scope": proposal.access_scope,
            "retrieval_mode": proposal.retrieval_mode,
            "tier": tier,
            "storage_path": storage_path_for(drop_id),
            "created_at": now,
            "updated_at": now,
            "expires_at": expires_at,
        }
        drop: Drop
        if hunt_code is not None:
            drop = HuntDrop(
                **fields,
                hunt_code=hunt_code,
                hunt_difficulty=proposal.hunt_difficulty or "intermediate",
            )
        elif proposal.visibility_class == "discoverable":
            drop = DiscoverableDrop(**fields)
        else:
            drop = HiddenDrop(**fields)

        await self._drops.create(drop)
        logger.info("Drop %s created (%s, tier=%s)", drop.id, drop.visibility_class, tier)
        return drop

    async def _hunt_code_taken(self, code: str) -> bool:
        return bool(await self._drops.list({"visibility_class": "hunt", "hunt_code": code}))

    async def _resolve_hunt_code(self, requested: str | None, errors: list[str]) -> str | None:
        if not requested:
            for _ in range(HUNT_CODE_ATTEMPTS):
                code = generate_hunt_code()
                if not await self._hunt_code_taken(code):
                    return code
                logger.warning("Generated hunt code collided, retrying")
            errors.append("Could not generate a unique hunt code")
            return None
        code = requested.strip().upper()
        if not is_valid_hunt_code(code):
            errors.append("Invalid hunt code format")
            return None
        if await self._hunt_code_taken(code):
            errors.append("Hunt code already in use")
            return None
        return code

    async def _owned(self, identity: VerifiedIdentity, drop_id: str) -> Drop:
        drop = await self._drops.get(drop_id)
        if drop is None:
            raise NotFoundError("Drop not found")
        if not drop.is_owned_by(identity.id):
            raise ForbiddenError("Only the owner can modify this drop")
        return drop

    async def update_drop(
        self, identity: VerifiedIdentity, drop_id: str, changes: DropUpdate
    ) -> Drop:
        """Apply owner edits; the radius stays within the drop's tier bounds."""
        drop = await self._owned(identity, drop_id)
        fields: dict[str, Any] = {}
        if changes.title is not None:
            fields["title"] = changes.title.strip()
        if changes.description is not None:
            fields["description"] = changes.description.strip()
        if changes.geofence_radius_m is not None:
            error = radius_error(drop.tier, changes.geofence_radius_m)
            if error:
                raise InvalidInputError(error, [error])
            fields["geofence_radius_m"] = changes.geofence_radius_m
        if changes.secret is not None:
            fields["secret_digest"] = await asyncio.to_thread(self._hasher.hash, changes.secret)
        if not fields:
            return drop

        fields["updated_at"] = self._clock().isoformat()
        updated = await self._drops.update_fields(drop.id, fields)
        logger.info("Drop %s updated (%s)", drop.id, ", ".join(sorted(fields)))
        return updated

    async def delete_drop(self, identity: VerifiedIdentity, drop_id: str) -> None:
        """Delete a drop and its files; owners and admins only.

        File removal is best effort: a failing blob is logged and skipped.
        """
        drop = await self._drops.get(drop_id)
        if drop is None:
            raise NotFoundError("Drop not found")
        if not (drop.is_owned_by(identity.id) or identity.is_admin):
            raise ForbiddenError("Only the owner or an admin can delete this drop")

        try:
            files = await self._blobs.list(drop.storage_path)
        except Exception:
            logger.exception("Could not list files of drop %s", drop.id)
            files = []
        for blob in files:
            try:
                await self._blobs.delete(blob.path)
            except Exception:
                logger.exception("Could not delete file %s of drop %s", blob.path, drop.id)

        await self._drops.delete(drop.id)
        logger.info("Drop %s deleted by %s", drop.id, "admin" if identity.is_admin else "owner")

    async def view_drop(self, identity: VerifiedIdentity | None, drop_id: str) -> DropView:
        """Return a public-safe view of a drop.

        Owner-only drops do not exist for anyone but their owner. Views by
        anyone other than the owner are counted.
        """
        drop = await self._drops.get(drop_id)
        is_owner = drop is not None and drop.is_owned_by(identity.id if identity else None)
        if drop is None or (drop.access_scope == "owner-only" and not is_owner):
            raise NotFoundError("Drop not found")

        now = self._clock()
        if not is_owner:
            drop = await self._drops.record_view(drop.id, now)

        files, owner_name = await asyncio.gather(
            self._blobs.list(drop.storage_path),
            self._users.display_name(drop.owner_id),
        )
        return _to_view(
            drop, is_owner=is_owner, owner_name=owner_name, file_count=len(files), now=now
        )

    async def list_owned(self, identity: VerifiedIdentity) -> list[DropView]:
        """Return every drop owned by `identity`, newest first, without counting views."""
        drops = await self._drops.list({"owner_id": identity.id})
        drops.sort(key=lambda drop: drop.created_at, reverse=True)
        owner_name = await self._users.display_name(identity.id)
        file_lists = await asyncio.gather(*(self._blobs.list(drop.storage_path) for drop in drops))
        now = self._clock()
        return [
            _to_view(drop, is_owner=True, owner_name=owner_name, file_count=len(files), now=now)
            for drop, files in zip(drops, file_lists, strict=True)
        ]

    async def list_discoverable(self, bounds: BoundingBox) -> list[DropMapItem]:
        """Return shared, unexpired discoverable drops inside `bounds`, newest first."""
        if not bounds.is_valid():
            raise InvalidInputError("Invalid map bounds")
        now = self._clock()
        drops = await self._drops.list(
            {"visibility_class": "discoverable", "access_scope": "shared"}
        )
        visible = [
            drop
            for drop in drops
            if not drop.is_expired(now) and bounds.contains(drop.location.coordinate())
        ]
        visible.sort(key=lambda drop: drop.created_at, reverse=True)
        return [
            DropMapItem(
                id=drop.id,
                title=drop.title,
                description=drop.description,
                location=DropLocationView(**drop.location.model_dump()),
                geofence_radius_m=drop.geofence_radius_m,
                retrieval_mode=drop.retrieval_mode,
                created_at=drop.created_at,
                expires_at=drop.expires_at,
            )
            for drop in visible
        ]
