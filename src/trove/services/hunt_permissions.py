"""Decides whether proximity hints may be surfaced for a drop.

Only `hunt` drops ever produce hints, and only for identities that joined the
drop's hunt code. Hidden and discoverable drops never emit proximity
information for anyone, the owner included. Hints are presentational: they
never influence whether an unlock succeeds.
"""

from __future__ import annotations

import math
import re
import secrets
import string
import time
from collections.abc import Collection
from dataclasses import dataclass
from typing import Final, Literal

from trove.models.drop import Drop, HuntDrop

HintDetail = Literal["strong", "moderate", "minimal", "none"]
HintType = Literal["close", "medium", "far", "none"]

CLOSE_BAND_M: Final[float] = 10.0
MEDIUM_BAND_M: Final[float] = 25.0

HUNT_CODE_PATTERN: Final[re.Pattern[str]] = re.compile(r"^HUNT-[A-Z0-9]{6,}-[A-Z0-9]{4}$")
_CODE_ALPHABET: Final[str] = string.ascii_uppercase + string.digits
_BASE36_DIGITS: Final[str] = string.digits + string.ascii_uppercase


@dataclass(frozen=True)
class ProximityPermission:
    can_show: bool
    visibility_class: str


@dataclass(frozen=True)
class HintStrength:
    max_hint_radius_m: int
    detail_level: HintDetail


@dataclass(frozen=True)
class ProximityHint:
    show_hint: bool
    hint_type: HintType = "none"
    message: str | None = None


NO_HINT: Final[ProximityHint] = ProximityHint(show_hint=False)

HINT_STRENGTHS: Final[dict[str, HintStrength]] = {
    "beginner": HintStrength(max_hint_radius_m=100, detail_level="strong"),
    "intermediate": HintStrength(max_hint_radius_m=50, detail_level="moderate"),
    "expert": HintStrength(max_hint_radius_m=25, detail_level="minimal"),
    "master": HintStrength(max_hint_radius_m=10, detail_level="none"),
}

_HINT_MESSAGES: Final[dict[tuple[HintType, HintDetail], str]] = {
    ("close", "strong"): "Very close! You're almost there!",
    ("close", "moderate"): "Close",
    ("close", "minimal"): "Here-ish",
    ("medium", "strong"): "Getting warmer!",
    ("medium", "moderate"): "Warmer",
    ("medium", "minimal"): "Warm",
    ("far", "strong"): "Keep searching in this area",
    ("far", "moderate"): "Searching...",
    ("far", "minimal"): "...",
}


def hint_strength(difficulty: str | None) -> HintStrength:
    """Map a hunt difficulty to its hint radius and detail; unknown means intermediate."""
    return HINT_STRENGTHS.get(difficulty or "", HINT_STRENGTHS["intermediate"])


def can_show_proximity_hints(
    drop: Drop,
    identity_id: str | None,
    joined_hunts: Collection[str],
) -> ProximityPermission:
    """Return whether `identity_id` may see proximity hints for `drop`.

    Args:
        drop: The drop being searched for.
        identity_id: Verified requester, or None when anonymous.
        joined_hunts: Hunt codes the requester has joined.
    """
    if not isinstance(drop, HuntDrop):
        return ProximityPermission(can_show=False, visibility_class=drop.visibility_class)
    allowed = identity_id is not None and bool(drop.hunt_code) and drop.hunt_code in joined_hunts
    return ProximityPermission(can_show=allowed, visibility_class=drop.visibility_class)


def proximity_hint(
    drop: Drop,
    identity_id: str | None,
    joined_hunts: Collection[str],
    distance_m: float,
) -> ProximityHint:
    """Select the hint to show a searcher `distance_m` away from the drop."""
    permission = can_show_proximity_hints(drop, identity_id, joined_hunts)
    if not permission.can_show or not isinstance(drop, HuntDrop):
        return NO_HINT

    strength = hint_strength(drop.hunt_difficulty)
    if not math.isfinite(distance_m) or distance_m > strength.max_hint_radius_m:
        return NO_HINT

    if distance_m <= CLOSE_BAND_M:
        hint_type: HintType = "close"
    elif distance_m <= MEDIUM_BAND_M:
        hint_type = "medium"
    else:
        hint_type = "far"

    # "none" detail confirms presence without a graded message.
    message = _HINT_MESSAGES.get((hint_type, strength.detail_level))
    return ProximityHint(show_hint=True, hint_type=hint_type, message=message)


def is_valid_hunt_code(code: str | None) -> bool:
    """Return True for codes shaped like ``HUNT-<6+ alnum>-<4 alnum>``."""
    return bool(code) and HUNT_CODE_PATTERN.match(code) is not None  # type: ignore[arg-type]


def _base36(value: int) -> str:
    digits = []
    while value:
        value, remainder = divmod(value, 36)
        digits.append(_BASE36_DIGITS[remainder])
    return "".join(reversed(digits)) or "0"


def generate_hunt_code() -> str:
    """Return a fresh hunt code: millisecond timestamp in base 36 plus a random suffix."""
    stamp = _base36(int(time.time() * 1000)).rjust(6, "0")
    suffix = "".join(secrets.choice(_CODE_ALPHABET) for _ in range(4))
    return f"HUNT-{stamp}-{suffix}"
