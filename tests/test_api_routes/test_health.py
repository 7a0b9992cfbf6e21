"""
Tests for the health and metrics endpoints.
"""


class TestHealth:
    """Unauthenticated service status."""

    def test_health_ok(self, client, backend):
        response = client.get("/health")
        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "ok"
        assert data["components"]["database"]["status"] == "healthy"
        assert data["components"]["database"]["type"] == backend
        assert data["uptime_seconds"] >= 0

    def test_health_reports_unreachable_storage(self, app, client, monkeypatch):
        storage = app.state.services.storage

        def broken_ping():
            raise OSError("storage offline")

        monkeypatch.setattr(storage, "ping", broken_ping)
        response = client.get("/health")
        assert response.status_code == 503
        data = response.json()
        assert data["status"] == "unhealthy"
        assert data["components"]["database"]["error_type"] == "OSError"
        assert "storage offline" not in response.text

    def test_request_id_header(self, client):
        response = client.get("/health")
        assert response.headers.get("X-Request-ID")


class TestMetrics:
    """Prometheus exposition."""

    def test_metrics(self, client, auth_header):
        client.get("/api/groups", headers=auth_header)
        response = client.get("/metrics")
        assert response.status_code == 200
        assert "text/plain" in response.headers["content-type"]
        assert "http_requests_total" in response.text
