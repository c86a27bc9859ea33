"""Tests for system and transparency endpoints."""

from fastapi import status
from fastapi.testclient import TestClient


def test_system_config(client: TestClient) -> None:
    """Public configuration exposes limits but no secrets."""
    r = client.get("/api/v1/system/config")
    assert r.status_code == status.HTTP_200_OK
    data = r.json()
    assert data["app"]["name"]
    assert data["tiers"]["free"]["max_radius_m"] == 500
    assert data["tiers"]["business"]["default_expiry_days"] is None
    assert data["hunts"]["hint_strengths"]["master"]["max_hint_radius_m"] == 10
    assert data["unlock"]["rate_limit"] == {"max_attempts": 5, "window_seconds": 60}
    assert data["unlock"]["signed_url_ttl_seconds"] > 0
    assert "secret_key" not in r.text
