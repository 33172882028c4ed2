from fastapi import FastAPI
from fastapi.testclient import TestClient

from app.core.middleware import SnapshotSizeLimitMiddleware


def test_health_endpoints(client):
    assert client.get("/api/health").json() == {"status": "ok"}

    live = client.get("/api/health/live")
    assert live.status_code == 200
    assert live.json()["status"] == "ok"

    ready = client.get("/api/health/ready")
    assert ready.status_code == 200
    payload = ready.json()
    assert payload["database"]["schema_ok"] is True
    assert payload["database"]["missing_tables"] == []


def test_security_and_timing_headers(client):
    response = client.get("/api/health")
    assert response.headers["X-Content-Type-Options"] == "nosniff"
    assert response.headers["X-Frame-Options"] == "DENY"
    assert "X-Process-Time-Ms" in response.headers


def test_oversized_body_is_refused():
    limited = FastAPI()
    limited.add_middleware(SnapshotSizeLimitMiddleware, max_bytes=16)

    @limited.post("/echo")
    def echo(payload: dict) -> dict:
        return payload

    with TestClient(limited) as limited_client:
        assert limited_client.post("/echo", json={"a": 1}).status_code == 200
        response = limited_client.post("/echo", json={"schedule": ["x" * 32]})
    assert response.status_code == 413
    assert response.json()["details"] == {"max_bytes": 16}
