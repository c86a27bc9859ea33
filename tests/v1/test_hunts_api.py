"""Tests for treasure hunt endpoints."""

from fastapi import status
from fastapi.testclient import TestClient

SPOT = {"lat": 40.6892, "lng": -74.0445}


def _bury_hunt(client: TestClient, headers: dict[str, str], difficulty: str = "beginner") -> dict:
    r = client.post(
        "/api/v1/drops",
        json={
            "title": "Liberty hunt",
            "secret": "torch",
            "coordinate": SPOT,
            "visibility_class": "hunt",
            "hunt_difficulty": difficulty,
        },
        headers=headers,
    )
    assert r.status_code == status.HTTP_201_CREATED, r.text
    return r.json()


def test_hunt_code_visible_to_owner_only(
    client: TestClient, owner_headers: dict[str, str], other_headers: dict[str, str]
) -> None:
    drop = _bury_hunt(client, owner_headers)
    assert drop["hunt_code"].startswith("HUNT-")

    r = client.get(f"/api/v1/drops/{drop['id']}", headers=other_headers)
    assert r.json()["hunt_code"] is None
    assert r.json()["hunt_difficulty"] == "beginner"


def test_join_and_hint(
    client: TestClient, owner_headers: dict[str, str], other_headers: dict[str, str]
) -> None:
    drop = _bury_hunt(client, owner_headers)
    hint_body = {"drop_id": drop["id"], "coordinate": {"lat": 40.68925, "lng": -74.0445}}

    r = client.post("/api/v1/hunts/hint", json=hint_body, headers=other_headers)
    assert r.json() == {"show_hint": False, "hint_type": "none", "message": None}

    r = client.post(
        "/api/v1/hunts/join", json={"hunt_code": drop["hunt_code"].lower()}, headers=other_headers
    )
    assert r.status_code == status.HTTP_200_OK
    assert r.json()["status"] == "joined"
    assert r.json()["drop_id"] == drop["id"]

    r = client.post("/api/v1/hunts/join", json={"hunt_code": drop["hunt_code"]}, headers=other_headers)
    assert r.json()["status"] == "already_joined"

    r = client.post("/api/v1/hunts/hint", json=hint_body, headers=other_headers)
    assert r.status_code == status.HTTP_200_OK
    assert r.json()["show_hint"] is True
    assert r.json()["hint_type"] == "close"
    assert r.json()["message"] == "Very close! You're almost there!"


def test_hint_never_reveals_drop_existence(
    client: TestClient, owner_headers: dict[str, str]
) -> None:
    hidden = client.post(
        "/api/v1/drops",
        json={"title": "Hidden", "secret": "torch", "coordinate": SPOT},
        headers=owner_headers,
    ).json()

    for drop_id in (hidden["id"], "does-not-exist"):
        r = client.post("/api/v1/hunts/hint", json={"drop_id": drop_id, "coordinate": SPOT})
        assert r.status_code == status.HTTP_200_OK
        assert r.json()["show_hint"] is False


def test_join_errors(client: TestClient, other_headers: dict[str, str]) -> None:
    r = client.post("/api/v1/hunts/join", json={"hunt_code": "HUNT-ABC123-WXYZ"})
    assert r.status_code == status.HTTP_401_UNAUTHORIZED

    r = client.post("/api/v1/hunts/join", json={"hunt_code": "treasure"}, headers=other_headers)
    assert r.status_code == status.HTTP_400_BAD_REQUEST

    r = client.post(
        "/api/v1/hunts/join", json={"hunt_code": "HUNT-ABC123-WXYZ"}, headers=other_headers
    )
    assert r.status_code == status.HTTP_404_NOT_FOUND
    assert r.json()["message"] == "Hunt not found"
