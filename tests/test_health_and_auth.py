import pytest
from fastapi.testclient import TestClient
from sizeguide.main import app
from sizeguide.config import settings


client = TestClient(app)


def test_health():
    r = client.get("/v1/health")
    assert r.status_code == 200
    assert r.json()["status"] == "ok"


def test_token():
    r = client.post("/v1/auth/token")
    assert r.status_code == 200
    assert "token" in r.json()


def test_jwt_bearer_is_accepted():
    token = client.post("/v1/auth/token").json()["token"]
    r = client.post("/v1/translate", json={"text": "胸围"}, headers={"Authorization": f"Bearer {token}"})
    assert r.status_code == 200


def test_api_key_bearer_is_accepted():
    r = client.post("/v1/translate", json={"text": "胸围"}, headers={"Authorization": f"Bearer {settings.api_key}"})
    assert r.status_code == 200


@pytest.mark.parametrize("headers", [
    {},
    {"X-API-Key": "wrong"},
    {"Authorization": "Bearer not-a-jwt"},
    {"Authorization": "Basic abc"},
])
def test_rejects_missing_or_invalid_credentials(headers):
    r = client.post("/v1/translate", json={"text": "胸围"}, headers=headers)
    assert r.status_code == 401


def test_rate_limit_returns_429(monkeypatch):
    monkeypatch.setattr(settings, "rate_limit_burst", 2)
    monkeypatch.setattr(settings, "rate_limit_per_min", 1)
    assert client.get("/v1/health").status_code == 200
    assert client.get("/v1/health").status_code == 200
    r = client.get("/v1/health")
    assert r.status_code == 429
    assert r.json()["detail"] == "Too Many Requests"


def test_debug_status_reports_cache_and_limits():
    r = client.get("/v1/debug/status")
    assert r.status_code == 200
    body = r.json()
    assert body["cache"] == {"entries": 0, "expired": 0}
    assert body["ocr"]["language"] == settings.ocr_language
    assert body["rate_limiting"]["burst_capacity"] == settings.rate_limit_burst
