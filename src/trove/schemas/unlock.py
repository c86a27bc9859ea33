"""Unlock request and response schemas."""
from __future__ import annotations

from datetime import datetime
from typing import Literal

from pydantic import AliasChoices, BaseModel, Field

from trove.schemas.common import CoordinateIn

MAX_SECRET_LENGTH = 256


class UnearthRequest(BaseModel):
    """Search for drops around a coordinate that open with a secret phrase."""

    coordinate: CoordinateIn = Field(
        ...,
        validation_alias=AliasChoices("coordinate", "coords"),
    )
    secret: str = Field(..., max_length=MAX_SECRET_LENGTH, description="Secret phrase")


class UnlockByIdRequest(BaseModel):
    """Unlock a drop whose id is already known (e.g. after disambiguation)."""

    coordinate: CoordinateIn | None = Field(
        None,
        validation_alias=AliasChoices("coordinate", "coords"),
    )
    secret: str = Field(..., max_length=MAX_SECRET_LENGTH, description="Secret phrase")


class UnlockResult(BaseModel):
    """Download links for every file of an unlocked drop.

    `download_urls[i]` serves `file_names[i]`; links expire after the
    configured signed URL lifetime.
    """

    status: Literal["unlocked"] = "unlocked"
    drop_id: str
    title: str
    description: str
    file_names: list[str]
    download_urls: list[str]
    created_at: datetime
    distance_m: int | None = None


class DropCandidate(BaseModel):
    """Public-safe summary of one drop matching a search."""

    id: str
    title: str
    description: str
    file_count: int
    created_at: datetime
    owner_display_name: str | None = None
    distance_m: int
    view_count: int
    unlock_count: int


class DisambiguationList(BaseModel):
    """Several drops matched; the client must pick one and unlock it by id."""

    status: Literal["disambiguation-required"] = "disambiguation-required"
    message: str = "Multiple drops found at this location. Choose one to unlock."
    candidates: list[DropCandidate]
