# tests/conftest.py
from __future__ import annotations

import os
import uuid
from collections.abc import Awaitable, Callable, Iterator
from datetime import UTC, datetime, timedelta
from typing import Any

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

os.environ["SECRET_KEY"] = "test-secret-key-not-for-production"
os.environ["STORE_BACKEND"] = "memory"
os.environ["BLOB_BACKEND"] = "memory"
os.environ["RATE_LIMIT_BACKEND"] = "store"
os.environ["ARGON2_TIME_COST"] = "1"
os.environ["ARGON2_MEMORY_COST"] = "8"
os.environ["ARGON2_PARALLELISM"] = "1"
os.environ.setdefault("LOG_LEVEL", "WARNING")

from trove.api.v1.dependencies import get_services
from trove.core.geo import geohash_for
from trove.core.security import SecretHasher
from trove.core.settings import Settings
from trove.main import app as fastapi_app
from trove.models.drop import Drop, drop_from_document
from trove.repositories import DropRepository
from trove.services.blobs import MemoryBlobStore
from trove.services.container import Services, build_services
from trove.services.store import MemoryDocumentStore

START = datetime(2026, 1, 1, 12, 0, tzinfo=UTC)


class FakeClock:
    """Controllable clock injected wherever services read the time."""

    def __init__(self, start: datetime = START) -> None:
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs: float) -> None:
        self.now += timedelta(**kwargs)


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture(scope="session")
def hasher() -> SecretHasher:
    """Cheap Argon2 parameters keep the suite fast."""
    return SecretHasher(time_cost=1, memory_cost=8, parallelism=1)


@pytest.fixture()
def store() -> MemoryDocumentStore:
    return MemoryDocumentStore()


@pytest.fixture()
def blobs() -> MemoryBlobStore:
    return MemoryBlobStore()


@pytest.fixture()
def test_settings() -> Settings:
    return Settings()  # type: ignore[call-arg]


@pytest.fixture()
def services(
    test_settings: Settings,
    store: MemoryDocumentStore,
    blobs: MemoryBlobStore,
    hasher: SecretHasher,
    clock: FakeClock,
) -> Services:
    return build_services(test_settings, store=store, blobs=blobs, hasher=hasher, clock=clock)


@pytest.fixture()
def app(services: Services) -> Iterator[FastAPI]:
    fastapi_app.dependency_overrides[get_services] = lambda: services
    try:
        yield fastapi_app
    finally:
        fastapi_app.dependency_overrides.pop(get_services, None)


@pytest.fixture()
def client(app: FastAPI) -> Iterator[TestClient]:
    with TestClient(app, base_url="http://test") as test_client:
        yield test_client


@pytest.fixture()
def make_headers(services: Services) -> Callable[..., dict[str, str]]:
    """Return a factory of bearer headers for arbitrary identities."""

    def _make(identity_id: str, tier: str = "free", admin: bool = False) -> dict[str, str]:
        token = services.identity.create_access_token(identity_id, tier=tier, is_admin=admin)
        return {"Authorization": f"Bearer {token}"}

    return _make


@pytest.fixture()
def owner_headers(make_headers: Callable[..., dict[str, str]]) -> dict[str, str]:
    """Premium owner, allowed to use physical mode and hunts."""
    return make_headers("owner-1", tier="premium")


@pytest.fixture()
def other_headers(make_headers: Callable[..., dict[str, str]]) -> dict[str, str]:
    return make_headers("visitor-1")


SeedDrop = Callable[..., Awaitable[Drop]]


@pytest.fixture()
def seed_drop(
    store: MemoryDocumentStore,
    blobs: MemoryBlobStore,
    hasher: SecretHasher,
    clock: FakeClock,
) -> SeedDrop:
    """Write a drop (and its files) straight into the stores."""

    async def _seed(
        *,
        secret: str = "pineapple",
        lat: float = 0.0,
        lng: float = 0.0,
        radius: int = 100,
        owner_id: str = "owner-1",
        files: tuple[str, ...] = ("1_map.pdf", "2_notes.txt"),
        **overrides: Any,
    ) -> Drop:
        drop_id = overrides.pop("id", uuid.uuid4().hex)
        document: dict[str, Any] = {
            "id": drop_id,
            "owner_id": owner_id,
            "title": f"Drop {drop_id[:6]}",
            "description": "Buried for tests",
            "secret_digest": hasher.hash(secret),
            "location": {"lat": lat, "lng": lng, "geohash": geohash_for(lat, lng)},
            "geofence_radius_m": radius,
            "visibility_class": "hidden",
            "access_scope": "shared",
            "retrieval_mode": "remote",
            "tier": "premium",
            "storage_path": f"drops/{drop_id}/",
            "created_at": clock().isoformat(),
            "updated_at": clock().isoformat(),
            "expires_at": None,
        }
        document.update(overrides)
        drop = drop_from_document(document)
        await DropRepository(store).create(drop)
        for name in files:
            blobs.add_blob(f"{drop.storage_path}{name}", b"buried")
        return drop

    return _seed
