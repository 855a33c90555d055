"""Tests for the health probes."""

from fastapi.testclient import TestClient

from src.library_api.api.http.app_data import ApplicationDependencies


def test_liveness(client: TestClient):
    response = client.get("/health")

    assert response.status_code == 200
    assert response.json() == {"status": "healthy"}
    assert response.headers["X-Content-Type-Options"] == "nosniff"
    assert "X-Request-ID" in response.headers


def test_readiness(client: TestClient):
    response = client.get("/health/ready")

    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "ready"
    assert body["checks"]["database"] == {"status": "healthy", "type": "sqlite"}


def test_readiness_when_database_is_down(client: TestClient, app_dependencies: ApplicationDependencies, monkeypatch):
    monkeypatch.setattr(app_dependencies.database_service, "health_check", lambda: False)

    response = client.get("/health/ready")

    assert response.status_code == 503
    assert response.json()["checks"]["database"]["status"] == "unhealthy"


def test_request_id_is_echoed(client: TestClient):
    response = client.get("/health", headers={"X-Request-ID": "abc-123"})

    assert response.headers["X-Request-ID"] == "abc-123"
