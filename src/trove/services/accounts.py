"""Account settings managed by admins: subscription tier and admin flag.

Settings stored on a profile take precedence over the claims of the bearer
token, so an admin's change applies to the next request without a new token.
"""
from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import replace
from datetime import datetime

from trove.core.tiers import TIER_LIMITS
from trove.db.time import utcnow
from trove.models.access import UserProfile
from trove.repositories import UserRepository
from trove.services.errors import ForbiddenError, InvalidInputError
from trove.services.identity import VerifiedIdentity

logger = logging.getLogger(__name__)


def require_admin(identity: VerifiedIdentity) -> None:
    """Raise `ForbiddenError` unless `identity` is an admin."""
    if not identity.is_admin:
        raise ForbiddenError("Admin access required")


class AccountService:
    def __init__(
        self,
        *,
        users: UserRepository,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self._users = users
        self._clock = clock

    async def resolve(self, identity: VerifiedIdentity) -> VerifiedIdentity:
        """Apply stored account settings on top of the token's claims."""
        profile = await self._users.get(identity.id)
        if profile is None:
            return identity
        return replace(
            identity,
            tier=profile.tier if profile.tier is not None else identity.tier,
            is_admin=profile.is_admin if profile.is_admin is not None else identity.is_admin,
        )

    async def set_tier(self, admin: VerifiedIdentity, user_id: str, tier: str) -> UserProfile:
        """Change the subscription tier of `user_id`.

        Raises:
            ForbiddenError: The caller is not an admin.
            InvalidInputError: The tier is unknown.
        """
        require_admin(admin)
        name = tier.strip().lower()
        if name not in TIER_LIMITS:
            raise InvalidInputError("Invalid tier", [f"tier must be one of {', '.join(TIER_LIMITS)}"])
        profile = await self._users.set_account(user_id, self._clock(), tier=name)
        logger.info("Admin %s set tier of %s to %s", admin.id, user_id, name)
        return profile

    async def set_admin(self, admin: VerifiedIdentity, user_id: str, is_admin: bool) -> UserProfile:
        """Grant or revoke the admin flag of `user_id`."""
        require_admin(admin)
        profile = await self._users.set_account(user_id, self._clock(), is_admin=is_admin)
        logger.info("Admin %s %s admin rights of %s", admin.id, "granted" if is_admin else "revoked", user_id)
        return profile
