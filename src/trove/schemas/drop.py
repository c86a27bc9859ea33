"""Drop management schemas."""
from __future__ import annotations

from datetime import datetime

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator, model_validator

from trove.models.drop import AccessScope, HuntDifficulty, RetrievalMode, VisibilityClass
from trove.schemas.common import CoordinateIn
from trove.schemas.unlock import MAX_SECRET_LENGTH


class DropCreate(BaseModel):
    """Schema for burying a new drop."""

    title: str = Field(..., min_length=1, max_length=120)
    description: str = Field("", max_length=2000)
    secret: str = Field(..., min_length=1, max_length=MAX_SECRET_LENGTH)
    coordinate: CoordinateIn = Field(..., validation_alias=AliasChoices("coordinate", "coords"))
    geofence_radius_m: int = Field(100, gt=0, description="Unlock radius in meters")
    visibility_class: VisibilityClass = "hidden"
    access_scope: AccessScope = "shared"
    retrieval_mode: RetrievalMode = "remote"
    hunt_code: str | None = Field(None, description="Generated when omitted for hunt drops")
    hunt_difficulty: HuntDifficulty | None = None
    total_size_mb: float = Field(0, ge=0, description="Combined size of the files to upload")
    expires_at: datetime | None = None

    @field_validator("title", "secret")
    @classmethod
    def _not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("must not be blank")
        return value

    @model_validator(mode="after")
    def _hunt_fields_only_for_hunts(self) -> DropCreate:
        if self.visibility_class != "hunt" and (self.hunt_code or self.hunt_difficulty):
            raise ValueError("hunt_code and hunt_difficulty are only allowed for hunt drops")
        return self


class DropUpdate(BaseModel):
    """Owner-editable fields. Location and visibility are immutable."""

    title: str | None = Field(None, min_length=1, max_length=120)
    description: str | None = Field(None, max_length=2000)
    secret: str | None = Field(None, min_length=1, max_length=MAX_SECRET_LENGTH)
    geofence_radius_m: int | None = Field(None, gt=0)

    model_config = ConfigDict(extra="forbid")

    @field_validator("title", "secret")
    @classmethod
    def _not_blank(cls, value: str | None) -> str | None:
        if value is not None and not value.strip():
            raise ValueError("must not be blank")
        return value


class DropLocationView(BaseModel):
    lat: float
    lng: float
    geohash: str


class DropView(BaseModel):
    """Public-safe view of a drop; owners additionally see location and hunt code."""

    id: str
    title: str
    description: str
    visibility_class: VisibilityClass
    access_scope: AccessScope
    retrieval_mode: RetrievalMode
    geofence_radius_m: int
    tier: str
    created_at: datetime
    updated_at: datetime
    expires_at: datetime | None = None
    is_expired: bool
    is_owner: bool
    owner_display_name: str | None = None
    file_count: int
    view_count: int
    unlock_count: int
    location: DropLocationView | None = None
    hunt_difficulty: HuntDifficulty | None = None
    hunt_code: str | None = None


class DropMapItem(BaseModel):
    """Marker for a discoverable drop on the public map."""

    id: str
    title: str
    description: str
    location: DropLocationView
    geofence_radius_m: int
    retrieval_mode: RetrievalMode
    created_at: datetime
    expires_at: datetime | None = None
