"""Tests for the hunt proximity hint rules."""

import math
import re

import pytest
import pytest_asyncio

from trove.services.hunt_permissions import (
    HINT_STRENGTHS,
    NO_HINT,
    can_show_proximity_hints,
    generate_hunt_code,
    hint_strength,
    is_valid_hunt_code,
    proximity_hint,
)

CODE = "HUNT-ABC123-WXYZ"
OTHER_CODE = "HUNT-ZZZ999-AAAA"


@pytest_asyncio.fixture()
async def hunt_drop(seed_drop):
    return await seed_drop(visibility_class="hunt", hunt_code=CODE, hunt_difficulty="beginner")


@pytest.mark.asyncio
@pytest.mark.parametrize("visibility", ["hidden", "discoverable"])
@pytest.mark.parametrize("identity", [None, "owner-1", "member", "stranger"])
async def test_non_hunt_drops_never_show_hints(seed_drop, visibility: str, identity) -> None:
    drop = await seed_drop(visibility_class=visibility)
    joined = {CODE, OTHER_CODE}

    permission = can_show_proximity_hints(drop, identity, joined)

    assert permission.can_show is False
    assert permission.visibility_class == visibility
    assert proximity_hint(drop, identity, joined, 0.0) == NO_HINT


@pytest.mark.asyncio
async def test_hunt_hints_require_membership(hunt_drop) -> None:
    assert can_show_proximity_hints(hunt_drop, "member", {CODE}).can_show
    assert not can_show_proximity_hints(hunt_drop, None, {CODE}).can_show
    assert not can_show_proximity_hints(hunt_drop, "member", {OTHER_CODE}).can_show
    assert not can_show_proximity_hints(hunt_drop, "owner-1", set()).can_show


def test_difficulty_table() -> None:
    assert [(s.max_hint_radius_m, s.detail_level) for s in HINT_STRENGTHS.values()] == [
        (100, "strong"),
        (50, "moderate"),
        (25, "minimal"),
        (10, "none"),
    ]
    assert hint_strength("unknown") == HINT_STRENGTHS["intermediate"]
    assert hint_strength(None) == HINT_STRENGTHS["intermediate"]


@pytest.mark.asyncio
@pytest.mark.parametrize(
    ("distance", "hint_type"),
    [(0.0, "close"), (10.0, "close"), (10.5, "medium"), (25.0, "medium"), (60.0, "far"), (100.0, "far")],
)
async def test_hint_bands(hunt_drop, distance: float, hint_type: str) -> None:
    hint = proximity_hint(hunt_drop, "member", {CODE}, distance)
    assert hint.show_hint
    assert hint.hint_type == hint_type
    assert hint.message


@pytest.mark.asyncio
@pytest.mark.parametrize("distance", [100.5, 5_000.0, math.inf, math.nan])
async def test_no_hint_outside_max_radius(hunt_drop, distance: float) -> None:
    assert proximity_hint(hunt_drop, "member", {CODE}, distance) == NO_HINT


@pytest.mark.asyncio
async def test_master_confirms_presence_without_message(seed_drop) -> None:
    drop = await seed_drop(visibility_class="hunt", hunt_code=CODE, hunt_difficulty="master")

    near = proximity_hint(drop, "member", {CODE}, 8.0)
    assert near.show_hint and near.hint_type == "close" and near.message is None
    assert proximity_hint(drop, "member", {CODE}, 11.0) == NO_HINT


def test_hunt_codes() -> None:
    code = generate_hunt_code()
    assert re.fullmatch(r"HUNT-[0-9A-Z]{6,}-[0-9A-Z]{4}", code)
    assert is_valid_hunt_code(code)
    assert generate_hunt_code() != code
    for bad in (None, "", "hunt-abc123-wxyz", "HUNT-ABC-WXYZ", "HUNT-ABC123-WXY"):
        assert not is_valid_hunt_code(bad)
