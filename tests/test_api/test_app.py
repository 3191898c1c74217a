"""Tests for the app factory, health and metrics endpoints."""

from __future__ import annotations

from fastapi.testclient import TestClient

from addrhooks.api.app import create_app
from addrhooks.config.settings import AppConfig, MetricsConfig, StoreConfig, StoreEngine


def test_health_endpoint(test_client):
    """GET /health should return 200 with status ok."""
    response = test_client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


def test_app_has_openapi(test_client):
    """The app should serve an OpenAPI schema."""
    response = test_client.get("/openapi.json")
    assert response.status_code == 200
    schema = response.json()
    assert schema["info"]["title"] == "addrhooks"
    assert "/api/v1/add-address-callback" in schema["paths"]


def test_metrics_endpoint(test_client):
    test_client.get("/health")
    response = test_client.get("/metrics")
    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/plain")
    body = response.text
    assert "addrhooks_http_requests_total" in body
    assert 'route="/health"' in body
    assert "addrhooks_tx_queue_depth" in body


def test_metrics_middleware_disabled():
    config = AppConfig(
        store=StoreConfig(engine=StoreEngine.MEMORY),
        metrics=MetricsConfig(enabled=False),
    )
    with TestClient(create_app(config=config)) as client:
        client.get("/health")
        body = client.get("/metrics").text
    assert "addrhooks_http_requests_total" not in body


def test_engine_unavailable_without_lifespan(app_config):
    """Without the lifespan running there is no engine: 503."""
    client = TestClient(create_app(config=app_config))
    response = client.post("/api/v1/list-address-callbacks", json={"address": "x" * 42})
    assert response.status_code == 503
    assert response.json()["code"] == "engine-unavailable"


def test_engine_closed_on_shutdown(app_config):
    app = create_app(config=app_config)
    with TestClient(app):
        engine = app.state.engine
        assert engine.is_initialized
    assert not engine.is_initialized


def test_cors_preflight(test_client):
    response = test_client.options(
        "/api/v1/add-address-callback",
        headers={
            "Origin": "https://dashboard.example.com",
            "Access-Control-Request-Method": "POST",
            "Access-Control-Request-Headers": "Content-Type",
        },
    )
    assert response.status_code == 200
    assert response.headers["access-control-allow-origin"] == "*"
