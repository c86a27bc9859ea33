import datetime

from pydantic import BaseModel, Field


class ProfileUpdate(BaseModel):
    display_name: str | None = Field(None, min_length=2, max_length=32)


class ProfileResponse(BaseModel):
    id: str
    display_name: str | None
    tier: str
    is_admin: bool
    updated_at: datetime.datetime


class TierUpdate(BaseModel):
    tier: str = Field(..., min_length=1, max_length=32)


class AdminUpdate(BaseModel):
    is_admin: bool


class AccountView(BaseModel):
    id: str
    display_name: str | None
    tier: str | None
    is_admin: bool | None
    updated_at: datetime.datetime
