"""
Smoke tests for the main blueprint routes.

These verify that the application starts up correctly and the index
and health check endpoints respond.
"""


class TestIndex:
    """Tests for the API index."""

    def test_index_returns_200(self, client):
        response = client.get("/")
        assert response.status_code == 200

    def test_index_lists_collections(self, client):
        endpoints = client.get("/").get_json()["endpoints"]
        assert endpoints["customers"] == "/api/customers"
        assert endpoints["service_requests"] == "/api/requests"


class TestHealthCheck:
    """Tests for the health check endpoint."""

    def test_health_check_returns_200(self, client):
        """The health check should report a connected database."""
        response = client.get("/health")
        assert response.status_code == 200
        body = response.get_json()
        assert body["status"] == "healthy"
        assert body["database"] == "connected"

    def test_health_check_reports_cache_stats(self, client):
        caches = client.get("/health").get_json()["cache"]["caches"]
        assert set(caches) == {"customer", "car", "service_center", "service_request"}


class TestErrorPages:
    def test_unknown_route_is_json_404(self, client):
        response = client.get("/no-such-page")
        assert response.status_code == 404
        assert response.get_json()["error"] == "not_found"

    def test_wrong_method_is_json_405(self, client):
        response = client.patch("/api/customers")
        assert response.status_code == 405
        assert response.get_json()["error"] == "method_not_allowed"
