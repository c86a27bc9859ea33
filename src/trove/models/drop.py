# src/trove/models/drop.py
"""Drop documents: the protected unit of files anchored to a coordinate.

A drop is a tagged union keyed by `visibility_class`; only the `hunt` variant
can carry a hunt code and difficulty.
"""

from __future__ import annotations

from datetime import datetime
from typing import Annotated, Any, Literal

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter

from trove.core.geo import Coordinate

VisibilityClass = Literal["hidden", "discoverable", "hunt"]
AccessScope = Literal["owner-only", "shared"]
RetrievalMode = Literal["remote", "physical"]
HuntDifficulty = Literal["beginner", "intermediate", "expert", "master"]

DROPS_COLLECTION = "drops"


class DropLocation(BaseModel):
    """Anchor point of a drop plus its geohash index token. Immutable."""

    lat: float
    lng: float
    geohash: str

    model_config = ConfigDict(frozen=True)

    def coordinate(self) -> Coordinate:
        return Coordinate(lat=self.lat, lng=self.lng)


class DropStats(BaseModel):
    """Monotonic counters, only ever changed through atomic store increments."""

    view_count: int = 0
    unlock_count: int = 0
    last_accessed_at: datetime | None = None


class _DropBase(BaseModel):
    id: str
    owner_id: str
    title: str
    description: str = ""
    secret_digest: str
    location: DropLocation
    geofence_radius_m: int
    access_scope: AccessScope = "shared"
    retrieval_mode: RetrievalMode = "remote"
    tier: str = "free"
    storage_path: str
    created_at: datetime
    updated_at: datetime
    expires_at: datetime | None = None
    stats: DropStats = Field(default_factory=DropStats)

    model_config = ConfigDict(extra="forbid")

    def is_expired(self, now: datetime) -> bool:
        """Return True once `expires_at` has elapsed."""
        return self.expires_at is not None and self.expires_at <= now

    def is_owned_by(self, identity_id: str | None) -> bool:
        return identity_id is not None and identity_id == self.owner_id


class HiddenDrop(_DropBase):
    """Never shown on the map; reachable only by location + secret or by id."""

    visibility_class: Literal["hidden"] = "hidden"


class DiscoverableDrop(_DropBase):
    """Shown on the public map."""

    visibility_class: Literal["discoverable"] = "discoverable"


class HuntDrop(_DropBase):
    """Treasure hunt drop; members who joined via `hunt_code` get proximity hints."""

    visibility_class: Literal["hunt"] = "hunt"
    hunt_code: str
    hunt_difficulty: HuntDifficulty = "intermediate"


Drop = Annotated[HiddenDrop | DiscoverableDrop | HuntDrop, Field(discriminator="visibility_class")]

_DROP_ADAPTER: TypeAdapter[Drop] = TypeAdapter(Drop)


def drop_from_document(document: dict[str, Any]) -> Drop:
    """Parse a stored document into the matching drop variant."""
    return _DROP_ADAPTER.validate_python(document)


def drop_to_document(drop: Drop) -> dict[str, Any]:
    """Serialize a drop into a JSON-compatible document."""
    return drop.model_dump(mode="json")
