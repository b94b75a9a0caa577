from fastapi.testclient import TestClient
from sqlalchemy.pool import StaticPool

from app.database import Database
from app.main import create_app


def test_health(client):
    response = client.get("/health")

    assert response.status_code == 200
    assert response.json()["database"] == "connected"


def test_security_headers(client):
    response = client.get("/")

    assert response.headers["X-Content-Type-Options"] == "nosniff"
    assert response.headers["X-Frame-Options"] == "DENY"
    assert "Content-Security-Policy" in response.headers


def test_lifespan_connects_and_disconnects_database():
    database = Database("sqlite://", connect_args={"check_same_thread": False}, poolclass=StaticPool)
    app = create_app(database)

    assert not database.is_connected
    with TestClient(app) as test_client:
        assert database.is_connected
        assert test_client.get("/health").json()["database"] == "connected"
    assert not database.is_connected
