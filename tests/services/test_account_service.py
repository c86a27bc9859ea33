"""Tests for admin-managed account settings."""

import pytest

from trove.repositories import UserRepository
from trove.services.errors import ForbiddenError, InvalidInputError
from trove.services.identity import VerifiedIdentity

ADMIN = VerifiedIdentity(id="admin-1", is_admin=True)
MEMBER = VerifiedIdentity(id="member-1")


@pytest.mark.asyncio
async def test_resolve_without_profile_keeps_token_claims(services) -> None:
    assert await services.accounts.resolve(MEMBER) == MEMBER


@pytest.mark.asyncio
async def test_tier_change_overrides_token_claim(services) -> None:
    profile = await services.accounts.set_tier(ADMIN, MEMBER.id, " Premium ")

    assert profile.tier == "premium"
    resolved = await services.accounts.resolve(MEMBER)
    assert resolved.tier == "premium"
    assert resolved.is_admin is False


@pytest.mark.asyncio
async def test_admin_flag_can_be_revoked(services) -> None:
    await services.accounts.set_admin(ADMIN, MEMBER.id, True)
    assert (await services.accounts.resolve(MEMBER)).is_admin is True

    await services.accounts.set_admin(ADMIN, "admin-1", False)
    assert (await services.accounts.resolve(ADMIN)).is_admin is False


@pytest.mark.asyncio
async def test_only_admins_change_accounts(services) -> None:
    with pytest.raises(ForbiddenError):
        await services.accounts.set_tier(MEMBER, MEMBER.id, "business")
    with pytest.raises(ForbiddenError):
        await services.accounts.set_admin(MEMBER, MEMBER.id, True)
    assert await services.accounts.resolve(MEMBER) == MEMBER


@pytest.mark.asyncio
async def test_unknown_tier_rejected(services) -> None:
    with pytest.raises(InvalidInputError) as excinfo:
        await services.accounts.set_tier(ADMIN, MEMBER.id, "platinum")
    assert "free" in excinfo.value.errors[0]


@pytest.mark.asyncio
async def test_display_name_update_keeps_account_settings(services, store, clock) -> None:
    await services.accounts.set_tier(ADMIN, MEMBER.id, "business")

    profile = await UserRepository(store).upsert(MEMBER.id, "Scout", clock())

    assert profile.display_name == "Scout"
    assert profile.tier == "business"
