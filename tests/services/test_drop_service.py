"""Tests for owner operations on drops."""

from datetime import timedelta

import pytest

from trove.core.geo import BoundingBox
from trove.models.drop import DiscoverableDrop, HiddenDrop, HuntDrop
from trove.repositories import DropRepository
from trove.schemas.drop import DropCreate, DropUpdate
from trove.services.errors import ForbiddenError, InvalidInputError, NotFoundError
from trove.services.hunt_permissions import is_valid_hunt_code
from trove.services.identity import VerifiedIdentity

FREE_OWNER = VerifiedIdentity(id="owner-free")
PREMIUM_OWNER = VerifiedIdentity(id="owner-1", tier="premium")
BUSINESS_OWNER = VerifiedIdentity(id="owner-biz", tier="business")
STRANGER = VerifiedIdentity(id="stranger")
ADMIN = VerifiedIdentity(id="admin", is_admin=True)


def _proposal(**overrides) -> DropCreate:
    data = {
        "title": "Picnic photos",
        "description": "Under the oak",
        "secret": "Pineapple",
        "coordinate": {"lat": 48.8584, "lng": 2.2945},
        "geofence_radius_m": 100,
    }
    data.update(overrides)
    return DropCreate.model_validate(data)


@pytest.mark.asyncio
async def test_create_hidden_drop(services, store, hasher, clock) -> None:
    drop = await services.drops.create_drop(FREE_OWNER, _proposal())

    assert isinstance(drop, HiddenDrop)
    assert drop.owner_id == "owner-free"
    assert drop.tier == "free"
    assert drop.storage_path == f"drops/{drop.id}/"
    assert drop.location.geohash.startswith("u09tun")
    assert drop.expires_at == clock() + timedelta(days=30)
    assert drop.stats.unlock_count == 0 and drop.stats.view_count == 0
    assert "Pineapple" not in drop.secret_digest
    assert hasher.verify("pineapple", drop.secret_digest)
    assert await DropRepository(store).get(drop.id) == drop


@pytest.mark.asyncio
async def test_create_reports_every_tier_violation(services) -> None:
    proposal = _proposal(geofence_radius_m=10, retrieval_mode="physical", total_size_mb=50)

    with pytest.raises(InvalidInputError) as excinfo:
        await services.drops.create_drop(FREE_OWNER, proposal)

    assert len(excinfo.value.errors) == 3
    assert excinfo.value.to_payload()["errors"] == excinfo.value.errors


@pytest.mark.asyncio
async def test_create_enforces_owner_quota(services, seed_drop) -> None:
    for _ in range(10):
        await seed_drop(owner_id="owner-free")

    with pytest.raises(InvalidInputError) as excinfo:
        await services.drops.create_drop(FREE_OWNER, _proposal())

    assert any("Drop limit reached" in error for error in excinfo.value.errors)


@pytest.mark.asyncio
async def test_create_hunt_generates_code(services) -> None:
    drop = await services.drops.create_drop(
        PREMIUM_OWNER, _proposal(visibility_class="hunt", hunt_difficulty="expert")
    )
    assert isinstance(drop, HuntDrop)
    assert is_valid_hunt_code(drop.hunt_code)
    assert drop.hunt_difficulty == "expert"


@pytest.mark.asyncio
async def test_generated_hunt_code_skips_codes_in_use(services, seed_drop, mocker) -> None:
    await seed_drop(visibility_class="hunt", hunt_code="HUNT-ABC123-WXYZ")
    mocker.patch(
        "trove.services.drops.generate_hunt_code",
        side_effect=["HUNT-ABC123-WXYZ", "HUNT-ABC123-QQQQ"],
    )

    drop = await services.drops.create_drop(PREMIUM_OWNER, _proposal(visibility_class="hunt"))

    assert isinstance(drop, HuntDrop)
    assert drop.hunt_code == "HUNT-ABC123-QQQQ"


@pytest.mark.asyncio
async def test_create_hunt_with_supplied_code(services) -> None:
    proposal = _proposal(visibility_class="hunt", hunt_code=" hunt-abc123-wxyz ")
    drop = await services.drops.create_drop(PREMIUM_OWNER, proposal)
    assert isinstance(drop, HuntDrop)
    assert drop.hunt_code == "HUNT-ABC123-WXYZ"
    assert drop.hunt_difficulty == "intermediate"

    with pytest.raises(InvalidInputError) as excinfo:
        await services.drops.create_drop(PREMIUM_OWNER, proposal)
    assert "Hunt code already in use" in excinfo.value.errors


@pytest.mark.asyncio
async def test_create_rejects_malformed_hunt_code(services) -> None:
    with pytest.raises(InvalidInputError) as excinfo:
        await services.drops.create_drop(
            PREMIUM_OWNER, _proposal(visibility_class="hunt", hunt_code="TREASURE")
        )
    assert excinfo.value.errors == ["Invalid hunt code format"]


@pytest.mark.asyncio
async def test_create_expiry(services, clock) -> None:
    naive = (clock() + timedelta(days=3)).replace(tzinfo=None)
    drop = await services.drops.create_drop(BUSINESS_OWNER, _proposal(expires_at=naive))
    assert drop.expires_at == clock() + timedelta(days=3)

    forever = await services.drops.create_drop(BUSINESS_OWNER, _proposal())
    assert forever.expires_at is None

    with pytest.raises(InvalidInputError):
        await services.drops.create_drop(
            BUSINESS_OWNER, _proposal(expires_at=clock() - timedelta(minutes=1))
        )


@pytest.mark.asyncio
async def test_update_by_owner(services, seed_drop, hasher, clock) -> None:
    drop = await seed_drop(radius=100)
    clock.advance(hours=1)

    updated = await services.drops.update_drop(
        PREMIUM_OWNER,
        drop.id,
        DropUpdate(title=" New title ", secret="mango", geofence_radius_m=250),
    )

    assert updated.title == "New title"
    assert updated.geofence_radius_m == 250
    assert updated.updated_at == clock()
    assert updated.location == drop.location
    assert hasher.verify("mango", updated.secret_digest)
    assert not hasher.verify("pineapple", updated.secret_digest)


@pytest.mark.asyncio
async def test_update_radius_respects_drop_tier(services, seed_drop) -> None:
    drop = await seed_drop(tier="free")
    with pytest.raises(InvalidInputError) as excinfo:
        await services.drops.update_drop(PREMIUM_OWNER, drop.id, DropUpdate(geofence_radius_m=20))
    assert "between 50m and 500m" in excinfo.value.message


@pytest.mark.asyncio
async def test_update_rejects_non_owner(services, seed_drop) -> None:
    drop = await seed_drop()
    with pytest.raises(ForbiddenError):
        await services.drops.update_drop(STRANGER, drop.id, DropUpdate(title="mine"))
    with pytest.raises(NotFoundError):
        await services.drops.update_drop(PREMIUM_OWNER, "missing", DropUpdate(title="x"))


@pytest.mark.asyncio
async def test_delete_cascades_to_files(services, store, blobs, seed_drop) -> None:
    drop = await seed_drop()
    other = await seed_drop()

    await services.drops.delete_drop(PREMIUM_OWNER, drop.id)

    assert await DropRepository(store).get(drop.id) is None
    assert all(not path.startswith(drop.storage_path) for path in blobs.paths())
    assert any(path.startswith(other.storage_path) for path in blobs.paths())


@pytest.mark.asyncio
async def test_delete_permissions(services, seed_drop) -> None:
    drop = await seed_drop()
    with pytest.raises(ForbiddenError):
        await services.drops.delete_drop(STRANGER, drop.id)
    await services.drops.delete_drop(ADMIN, drop.id)
    with pytest.raises(NotFoundError):
        await services.drops.delete_drop(ADMIN, drop.id)


@pytest.mark.asyncio
async def test_delete_survives_blob_failures(services, store, blobs, seed_drop, mocker) -> None:
    drop = await seed_drop()
    mocker.patch.object(blobs, "delete", side_effect=OSError("disk"))

    await services.drops.delete_drop(PREMIUM_OWNER, drop.id)

    assert await DropRepository(store).get(drop.id) is None


@pytest.mark.asyncio
async def test_view_hides_location_of_hidden_drops(services, store, seed_drop) -> None:
    drop = await seed_drop()

    view = await services.drops.view_drop(STRANGER, drop.id)
    assert view.location is None
    assert view.is_owner is False
    assert view.file_count == 2
    assert view.view_count == 1

    owner_view = await services.drops.view_drop(PREMIUM_OWNER, drop.id)
    assert owner_view.location is not None
    assert owner_view.view_count == 1

    anonymous = await services.drops.view_drop(None, drop.id)
    assert anonymous.view_count == 2


@pytest.mark.asyncio
async def test_view_of_hunt_shows_code_to_owner_only(services, seed_drop) -> None:
    drop = await seed_drop(visibility_class="hunt", hunt_code="HUNT-ABC123-WXYZ")
    assert (await services.drops.view_drop(STRANGER, drop.id)).hunt_code is None
    assert (await services.drops.view_drop(PREMIUM_OWNER, drop.id)).hunt_code == "HUNT-ABC123-WXYZ"


@pytest.mark.asyncio
async def test_owner_only_drops_do_not_exist_for_others(services, seed_drop) -> None:
    drop = await seed_drop(access_scope="owner-only", visibility_class="discoverable")
    with pytest.raises(NotFoundError):
        await services.drops.view_drop(STRANGER, drop.id)
    with pytest.raises(NotFoundError):
        await services.drops.view_drop(None, drop.id)
    assert (await services.drops.view_drop(PREMIUM_OWNER, drop.id)).is_owner


@pytest.mark.asyncio
async def test_list_discoverable(services, seed_drop, clock) -> None:
    visible = await seed_drop(visibility_class="discoverable", lat=1, lng=1)
    await seed_drop(visibility_class="hidden", lat=1, lng=1)
    await seed_drop(visibility_class="discoverable", access_scope="owner-only", lat=1, lng=1)
    await seed_drop(
        visibility_class="discoverable",
        lat=1,
        lng=1,
        expires_at=(clock() - timedelta(days=1)).isoformat(),
    )
    await seed_drop(visibility_class="discoverable", lat=40, lng=40)

    items = await services.drops.list_discoverable(BoundingBox(south=0, west=0, north=2, east=2))

    assert [item.id for item in items] == [visible.id]
    assert items[0].location.lat == 1


@pytest.mark.asyncio
async def test_list_discoverable_rejects_bad_bounds(services) -> None:
    with pytest.raises(InvalidInputError):
        await services.drops.list_discoverable(BoundingBox(south=5, west=0, north=-5, east=2))


def test_discoverable_variant_has_no_hunt_fields() -> None:
    assert "hunt_code" not in DiscoverableDrop.model_fields
