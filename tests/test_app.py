"""Tests for application-wide error handling and startup behavior."""
from fastapi.testclient import TestClient

from catalog.database import RelationalDatabase
from catalog.main import create_app


def test_unknown_route_returns_json_404(client):
    response = client.get("/api/nope")

    assert response.status_code == 404
    assert response.json() == {
        "success": False,
        "error": "Route not found",
        "path": "/api/nope",
        "method": "GET",
    }


def test_method_not_allowed(client):
    response = client.patch("/api/products")

    assert response.status_code == 405
    assert response.json()["success"] is False


def test_malformed_json_body_returns_400(client):
    response = client.post(
        "/api/products",
        content="{not json",
        headers={"Content-Type": "application/json"},
    )

    assert response.status_code == 400
    data = response.json()
    assert data["success"] is False
    assert data["error"] == "Invalid request body"


def test_cors_headers(client):
    response = client.get("/status", headers={"Origin": "http://example.com"})

    assert response.headers["access-control-allow-origin"] == "*"


def test_production_hides_error_details(settings, relational_db, document_store):
    settings.environment = "production"
    app = create_app(settings=settings, relational_db=relational_db, document_store=document_store)

    # No products table was created, so the query fails
    with TestClient(app) as client:
        response = client.get("/api/products")

    assert response.status_code == 500
    data = response.json()
    assert data["error"] == "Failed to fetch products"
    assert "details" not in data


def _app_with_failing_route(settings, relational_db, document_store):
    app = create_app(settings=settings, relational_db=relational_db, document_store=document_store)

    @app.get("/boom")
    async def boom():
        raise RuntimeError("kaboom")

    return app


def test_global_error_handler_development(settings, relational_db, document_store):
    app = _app_with_failing_route(settings, relational_db, document_store)

    with TestClient(app, raise_server_exceptions=False) as client:
        response = client.get("/boom")

    assert response.status_code == 500
    assert response.json() == {
        "success": False,
        "error": "Internal server error",
        "message": "kaboom",
    }


def test_global_error_handler_production(settings, relational_db, document_store):
    settings.environment = "production"
    app = _app_with_failing_route(settings, relational_db, document_store)

    with TestClient(app, raise_server_exceptions=False) as client:
        response = client.get("/boom")

    assert response.status_code == 500
    assert response.json()["message"] == "Contact the administrator"


def test_startup_survives_missing_stores(settings, document_store, mongo_server):
    """Neither store is required for the server to start."""
    mongo_server.available = False
    unreachable = RelationalDatabase.from_url(
        "sqlite+aiosqlite:////nonexistent-dir/catalog.db"
    )
    app = create_app(settings=settings, relational_db=unreachable, document_store=document_store)

    with TestClient(app) as client:
        assert client.get("/status").status_code == 200
        assert client.get("/api/products").status_code == 500
