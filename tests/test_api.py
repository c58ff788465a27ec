"""Tests for the claims HTTP API."""

import tempfile

import pytest
from fastapi.testclient import TestClient

from claimreg.config import load_settings
from claimreg.runtime import build_runtime
from web.backend.app.main import app
from web.backend.app.routers.claims import get_runtime


@pytest.fixture
def runtime():
    with tempfile.TemporaryDirectory() as tmpdir:
        rt = build_runtime(load_settings(home=tmpdir, env={}))
        app.dependency_overrides[get_runtime] = lambda: rt
        yield rt
        app.dependency_overrides.clear()


@pytest.fixture
def client(runtime):
    return TestClient(app)


def _as(account: str) -> dict:
    return {"X-Account-Id": account}


def test_health(client):
    assert client.get("/health").json() == {"status": "healthy"}


def test_claim_lifecycle(client, runtime):
    resp = client.post("/api/claims/novel", headers=_as("1"))
    assert resp.status_code == 201
    assert resp.json() == {
        "key_hex": b"novel".hex(),
        "key_text": "novel",
        "owner": "1",
        "sequence": 0,
    }

    assert client.post("/api/claims/novel", headers=_as("2")).status_code == 409
    assert client.get("/api/claims/novel", headers=_as("2")).status_code == 403
    assert client.get("/api/claims/novel", headers=_as("1")).status_code == 200

    runtime.blocks.advance(3)
    assert client.put("/api/claims/novel", headers=_as("2")).status_code == 403
    resp = client.put("/api/claims/novel", headers=_as("1"))
    assert resp.status_code == 200
    assert resp.json()["sequence"] == 3

    assert client.delete("/api/claims/novel", headers=_as("2")).status_code == 403
    assert client.delete("/api/claims/novel", headers=_as("1")).status_code == 200
    assert client.get("/api/claims/novel", headers=_as("1")).status_code == 404


def test_error_body_carries_code(client):
    resp = client.get("/api/claims/missing", headers=_as("1"))
    assert resp.status_code == 404
    assert resp.json()["detail"]["code"] == "not_found"


def test_missing_account_is_unauthorized(client):
    assert client.post("/api/claims/novel").status_code == 401


def test_hex_key_and_listing(client):
    assert client.post("/api/claims/00ff?hex=true", headers=_as("1")).status_code == 201
    assert client.post("/api/claims/zz?hex=true", headers=_as("1")).status_code == 400

    body = client.get("/api/claims").json()
    assert body["total_count"] == 1
    assert body["entries"][0]["key_hex"] == "00ff"
    assert body["entries"][0]["key_text"] == "0x00ff"


def test_block_and_events(client, runtime):
    runtime.blocks.set(7)
    assert client.get("/api/claims/-/block").json() == {"block_number": 7}

    client.post("/api/claims/a", headers=_as("1"))
    client.get("/api/claims/a", headers=_as("1"))

    events = client.get("/api/claims/-/events").json()
    assert [e["kind"] for e in events] == ["read", "created"]
    assert events[0]["key_hex"] is None
    assert events[1]["key_hex"] == b"a".hex()
