"""
Tests for health endpoints
"""
from app.core.constants import SERVICE_NAME


def test_health_endpoint(client):
    """Liveness never touches the database"""
    response = client.get("/api/v1/health")

    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "ok"
    assert data["service"] == SERVICE_NAME


def test_readiness_endpoint(client):
    response = client.get("/api/v1/health/ready")

    assert response.status_code == 200
    assert response.json()["database"] == "ok"
