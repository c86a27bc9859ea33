"""Tests for profile endpoints."""

from fastapi import status
from fastapi.testclient import TestClient


def test_profile_roundtrip(client: TestClient, owner_headers: dict[str, str]) -> None:
    r = client.get("/api/v1/users/me", headers=owner_headers)
    assert r.status_code == status.HTTP_200_OK
    assert r.json()["id"] == "owner-1"
    assert r.json()["display_name"] is None

    r = client.put("/api/v1/users/me", json={"display_name": " Captain "}, headers=owner_headers)
    assert r.status_code == status.HTTP_200_OK
    assert r.json()["display_name"] == "Captain"

    assert client.get("/api/v1/users/me", headers=owner_headers).json()["display_name"] == "Captain"


def test_display_name_shown_on_drops(
    client: TestClient, owner_headers: dict[str, str], other_headers: dict[str, str]
) -> None:
    client.put("/api/v1/users/me", json={"display_name": "Captain"}, headers=owner_headers)
    drop = client.post(
        "/api/v1/drops",
        json={"title": "Map", "secret": "x marks", "coordinate": {"lat": 0, "lng": 0}},
        headers=owner_headers,
    ).json()

    r = client.get(f"/api/v1/drops/{drop['id']}", headers=other_headers)
    assert r.json()["owner_display_name"] == "Captain"


def test_profile_validation(client: TestClient, owner_headers: dict[str, str]) -> None:
    r = client.put("/api/v1/users/me", json={"display_name": "x"}, headers=owner_headers)
    assert r.status_code == status.HTTP_400_BAD_REQUEST

    assert client.get("/api/v1/users/me").status_code == status.HTTP_401_UNAUTHORIZED


def test_my_drops_lists_only_callers_drops(
    client: TestClient, owner_headers: dict[str, str], other_headers: dict[str, str]
) -> None:
    payload = {"secret": "x marks", "coordinate": {"lat": 0, "lng": 0}}
    for title in ("First", "Second"):
        client.post("/api/v1/drops", json={**payload, "title": title}, headers=owner_headers)
    client.post("/api/v1/drops", json={**payload, "title": "Theirs"}, headers=other_headers)

    r = client.get("/api/v1/users/me/drops", headers=owner_headers)
    assert r.status_code == status.HTTP_200_OK
    drops = r.json()
    assert sorted(drop["title"] for drop in drops) == ["First", "Second"]
    assert all(drop["is_owner"] for drop in drops)
    assert all(drop["view_count"] == 0 for drop in drops)

    assert client.get("/api/v1/users/me/drops").status_code == status.HTTP_401_UNAUTHORIZED
