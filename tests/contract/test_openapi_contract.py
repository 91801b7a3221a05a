"""Contract tests for the OpenAPI document and operational endpoints.

These tests verify that the API matches its published OpenAPI document
and that endpoints return expected response structures.
"""

from __future__ import annotations

import pytest


@pytest.mark.contract
class TestOpenAPIContract:

    def test_health_endpoint(self, client):
        resp = client.get("/health")
        assert resp.status_code == 200
        data = resp.json()
        assert data["status"] == "healthy"
        assert data["version"] == "1.0.0"
        assert "timestamp" in data

    def test_database_health_memory_backend(self, client):
        resp = client.get("/health/db")
        assert resp.status_code == 200
        assert resp.json() == {"status": "healthy", "database": "memory"}

    def test_openapi_schema_available(self, client):
        resp = client.get("/openapi.json")
        assert resp.status_code == 200
        schema = resp.json()
        assert schema["info"]["title"] == "Electricity Billing Service"
        assert "paths" in schema

    def test_endpoints_documented(self, client):
        paths = client.get("/openapi.json").json()["paths"]
        for path in (
            "/api/v1/calculation",
            "/api/v1/calculation/pdf",
            "/api/v1/calculation/history",
            "/api/v1/calculation/history/{record_id}",
            "/api/v1/calculation/history/consumer/{consumer_id}",
            "/api/v1/calculation/stats/{month}",
            "/api/v1/config",
            "/api/v1/config/effective",
            "/api/v1/config/flat-rate",
            "/api/v1/config/{rate_id}",
            "/api/v1/config/{rate_id}/toggle",
            "/api/v1/auth/login",
        ):
            assert path in paths, path

    def test_metrics_exposed(self, client):
        client.get("/health")
        resp = client.get("/metrics")
        assert resp.status_code == 200
        assert "api_requests_total" in resp.text

    def test_request_id_echoed(self, client):
        resp = client.get("/health", headers={"X-Request-ID": "trace-123"})
        assert resp.headers["X-Request-ID"] == "trace-123"

    def test_request_id_generated(self, client):
        assert client.get("/health").headers["X-Request-ID"]

    def test_error_responses_follow_rfc9457(self, client):
        resp = client.post("/api/v1/calculation", json={})
        assert resp.status_code == 422
        assert resp.headers["content-type"].startswith("application/problem+json")
        data = resp.json()
        assert data["status"] == 422
        assert data["title"] == "Validation Error"
        assert data["instance"] == "/api/v1/calculation"
        assert "detail" in data
