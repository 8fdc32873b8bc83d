"""
Tests for catalog, dashboard, health and real-time endpoints.
"""

import time

from fastapi.testclient import TestClient

from backend.app.dependencies import get_dashboard_service
from stockapp.notifications import Events


class TestCatalogEndpoints:
    def test_category_crud(self, test_app_client):
        client = test_app_client

        created = client.post("/api/v1/categories", json={"name": "Hardware"}).json()
        renamed = client.put(f"/api/v1/categories/{created['id']}", json={"name": "Tools"}).json()
        listed = client.get("/api/v1/categories").json()
        deleted = client.delete(f"/api/v1/categories/{created['id']}")

        assert renamed["name"] == "Tools"
        assert [c["name"] for c in listed] == ["Tools"]
        assert deleted.status_code == 200
        assert client.get(f"/api/v1/categories/{created['id']}").status_code == 404

    def test_category_in_use_cannot_be_deleted(self, seeded_client):
        client, refs = seeded_client
        client.post(
            "/api/v1/products",
            json={
                "name": "Vida",
                "category_id": refs["category"]["id"],
                "current_purchase_price": 1,
                "current_sale_price": 2,
            },
        )

        response = client.delete(f"/api/v1/categories/{refs['category']['id']}")

        assert response.status_code == 400

    def test_blank_location_name_is_rejected(self, test_app_client):
        response = test_app_client.post("/api/v1/locations", json={"name": ""})

        assert response.status_code == 422


class TestDashboard:
    def test_stats(self, seeded_client):
        client, refs = seeded_client

        stats = client.get("/api/v1/dashboard/stats").json()

        assert stats["total_categories"] == 1
        assert stats["total_locations"] == 1
        assert stats["total_products"] == 0


class TestErrorHandling:
    def test_business_rule_violation_is_bad_request(self, test_app_client):
        response = test_app_client.post("/api/v1/categories", json={"name": "   "})

        assert response.status_code == 400
        assert response.json()["detail"] == "Name cannot be empty"

    def test_internal_value_error_is_not_leaked(self, test_app_client):
        class BrokenDashboard:
            def get_stats(self, session):
                raise ValueError("Unknown search collection: secret")

        app = test_app_client.app
        app.dependency_overrides[get_dashboard_service] = lambda: BrokenDashboard()
        client = TestClient(app, raise_server_exceptions=False)

        response = client.get("/api/v1/dashboard/stats")

        assert response.status_code == 500
        assert response.json() == {"detail": "Internal server error", "status_code": 500}


class TestHealth:
    def test_health(self, test_app_client):
        assert test_app_client.get("/health").json() == {"status": "ok"}

    def test_ready(self, test_app_client):
        body = test_app_client.get("/health/ready").json()

        assert body["status"] == "ready"
        assert body["checks"]["search"] is True

    def test_request_id_header(self, test_app_client):
        response = test_app_client.get("/health", headers={"X-Request-ID": "abc123"})

        assert response.headers["x-request-id"] == "abc123"


class TestRealtimeHub:
    def test_websocket_receives_change_events(self, test_app_client):
        client = test_app_client
        hub = client.app.state.hub

        with client.websocket_connect("/hubs/stock") as websocket:
            deadline = time.monotonic() + 2
            while hub.connection_count == 0 and time.monotonic() < deadline:
                time.sleep(0.01)

            client.post("/api/v1/categories", json={"name": "Hardware"})

            first = websocket.receive_json()
            second = websocket.receive_json()

        assert first["event"] == Events.CATEGORY_CREATED
        assert first["payload"]["name"] == "Hardware"
        assert second["event"] == Events.DASHBOARD_STATS_UPDATED
