"""Treasure hunt schemas."""
from __future__ import annotations

from typing import Literal

from pydantic import AliasChoices, BaseModel, Field

from trove.models.drop import HuntDifficulty
from trove.schemas.common import CoordinateIn


class HuntJoinRequest(BaseModel):
    hunt_code: str = Field(..., min_length=1, max_length=64)


class HuntJoinResponse(BaseModel):
    status: Literal["joined", "already_joined"]
    drop_id: str
    title: str
    hunt_difficulty: HuntDifficulty


class HintRequest(BaseModel):
    drop_id: str = Field(..., min_length=1, max_length=255)
    coordinate: CoordinateIn = Field(..., validation_alias=AliasChoices("coordinate", "coords"))


class HintResponse(BaseModel):
    show_hint: bool
    hint_type: Literal["close", "medium", "far", "none"] = "none"
    message: str | None = None
