"""Tests for status endpoints and the front-end page."""
from fastapi.testclient import TestClient


def test_status(client):
    """Test basic liveness check."""
    response = client.get("/status")

    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "online"
    assert data["port"] == 8000
    assert data["environment"] == "development"
    assert "timestamp" in data


def test_mongo_status_online(client):
    response = client.get("/mongo-status")

    assert response.status_code == 200
    data = response.json()
    assert data["success"] is True
    assert data["mongodb"]["connected"] is True
    assert data["mongodb"]["status"] == "online"


def test_mongo_status_offline(app, mongo_server):
    mongo_server.available = False

    with TestClient(app) as client:
        response = client.get("/mongo-status")

    assert response.status_code == 200
    data = response.json()
    assert data["success"] is True
    assert data["mongodb"]["connected"] is False
    assert data["mongodb"]["status"] == "offline"


def test_root_serves_front_end(client):
    """Test root endpoint returns the HTML page."""
    response = client.get("/")

    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/html")
    assert "Product Catalog" in response.text


def test_static_assets_served(client):
    response = client.get("/static/app.js")

    assert response.status_code == 200
    assert "/api/products" in response.text
