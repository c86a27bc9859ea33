"""Hunt membership and proximity hints."""
from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import datetime

from trove.core.geo import Coordinate, distance_meters
from trove.db.time import utcnow
from trove.models.access import HuntMembership
from trove.models.drop import HuntDrop
from trove.repositories import DropRepository, HuntMembershipRepository
from trove.schemas.hunt import HuntJoinResponse
from trove.services.errors import ExpiredError, InvalidInputError, NotFoundError
from trove.services.hunt_permissions import NO_HINT, ProximityHint, is_valid_hunt_code, proximity_hint
from trove.services.identity import VerifiedIdentity

logger = logging.getLogger(__name__)


class HuntService:
    def __init__(
        self,
        *,
        drops: DropRepository,
        memberships: HuntMembershipRepository,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self._drops = drops
        self._memberships = memberships
        self._clock = clock

    async def join_hunt(self, identity: VerifiedIdentity, code: str) -> HuntJoinResponse:
        """Join the hunt behind `code`; joining twice is a no-op.

        Raises:
            InvalidInputError: The code is malformed.
            NotFoundError: No hunt drop carries the code.
            ExpiredError: The hunt drop has expired.
        """
        hunt_code = code.strip().upper()
        if not is_valid_hunt_code(hunt_code):
            raise InvalidInputError("Invalid hunt code format")

        matches = await self._drops.list({"visibility_class": "hunt", "hunt_code": hunt_code})
        hunts = [drop for drop in matches if isinstance(drop, HuntDrop)]
        if not hunts:
            raise NotFoundError("Hunt not found")
        drop = hunts[0]

        now = self._clock()
        if drop.is_expired(now):
            raise ExpiredError("This hunt has ended")

        joined = await self._memberships.join(
            HuntMembership(identity=identity.id, hunt_code=hunt_code, drop_id=drop.id, joined_at=now)
        )
        if joined:
            await self._drops.record_view(drop.id, now)
            logger.info("Identity joined hunt for drop %s", drop.id)

        return HuntJoinResponse(
            status="joined" if joined else "already_joined",
            drop_id=drop.id,
            title=drop.title,
            hunt_difficulty=drop.hunt_difficulty,
        )

    async def hint_for(
        self,
        identity: VerifiedIdentity | None,
        drop_id: str,
        coordinate: Coordinate,
    ) -> ProximityHint:
        """Return the proximity hint a searcher at `coordinate` may see.

        Unknown drops answer exactly like drops that never give hints.
        """
        drop = await self._drops.get(drop_id)
        if drop is None or not isinstance(drop, HuntDrop):
            return NO_HINT
        joined = await self._memberships.joined_codes(identity.id) if identity else set()
        distance = distance_meters(coordinate, drop.location.coordinate())
        return proximity_hint(drop, identity.id if identity else None, joined, distance)
