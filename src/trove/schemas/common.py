"""Shared Pydantic schemas for common API elements."""
from __future__ import annotations

from pydantic import AliasChoices, BaseModel, ConfigDict, Field

from trove.core.geo import Coordinate


class CoordinateIn(BaseModel):
    """Latitude/longitude pair supplied by a client."""

    lat: float = Field(..., ge=-90, le=90, validation_alias=AliasChoices("lat", "latitude"))
    lng: float = Field(..., ge=-180, le=180, validation_alias=AliasChoices("lng", "longitude"))

    model_config = ConfigDict(allow_inf_nan=False)

    def to_coordinate(self) -> Coordinate:
        return Coordinate(lat=self.lat, lng=self.lng)


class ErrorResponse(BaseModel):
    """Body of every typed failure."""

    error: str = Field(..., description="Stable failure kind clients switch on.")
    message: str
