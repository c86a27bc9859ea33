# src/trove/models/access.py
"""Records supporting access auditing, throttling, hunts and profiles."""

from __future__ import annotations

from datetime import datetime
from typing import Literal

from pydantic import BaseModel

from trove.models.drop import RetrievalMode

ACCESS_LOGS_COLLECTION = "drop_access_logs"
RATE_LIMITS_COLLECTION = "rate_limits"
HUNT_MEMBERSHIPS_COLLECTION = "hunt_memberships"
USERS_COLLECTION = "users"

AccessResult = Literal["success", "failure"]


class AccessLogEntry(BaseModel):
    """Append-only audit record for one unlock attempt.

    `reason` holds the failure kind (e.g. `too-far`) or `unlocked`.
    """

    drop_id: str | None
    identity: str | None
    ip_hash: str
    result: AccessResult
    reason: str
    distance_m: float | None = None
    mode: RetrievalMode = "remote"
    created_at: datetime


class RateLimitRecord(BaseModel):
    """Fixed-window attempt counter; one record per key, reset in place."""

    key: str
    attempts: int
    window_start: datetime


class HuntMembership(BaseModel):
    """Link between an identity and a hunt code it joined."""

    identity: str
    hunt_code: str
    drop_id: str
    joined_at: datetime

    @staticmethod
    def document_id(identity: str, hunt_code: str) -> str:
        return f"{identity}:{hunt_code}"


class UserProfile(BaseModel):
    """Public profile fields plus account settings managed by admins.

    `tier` and `is_admin` stay None until an admin sets them; until then the
    claims of the bearer token apply.
    """

    id: str
    display_name: str | None = None
    tier: str | None = None
    is_admin: bool | None = None
    updated_at: datetime
