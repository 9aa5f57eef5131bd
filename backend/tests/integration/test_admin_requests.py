"""
Integration tests for the admin request workflow.

Covers the X-Admin-Key guard and approve/reject over HTTP.
"""

from unittest.mock import patch

from fastapi.testclient import TestClient

from membership.domain.subscription import RequestStatus, SubscriptionStatus


def submit(client: TestClient, headers, plan_id: str) -> str:
    response = client.post(
        "/api/subscriptions/requests",
        json={"plan_id": plan_id},
        headers=headers,
    )
    assert response.status_code == 201
    return response.json()["request_id"]


class TestAdminGuard:
    """All admin routes require the admin key."""

    def test_missing_key(self, client: TestClient):
        response = client.get("/api/admin/requests")
        assert response.status_code == 422  # Header is required

    def test_wrong_key(self, client: TestClient):
        response = client.get("/api/admin/requests", headers={"X-Admin-Key": "nope"})
        assert response.status_code == 403
        assert response.json()["detail"] == "Invalid admin API key"

    def test_key_not_configured(self, client: TestClient, admin_headers):
        from membership.config.settings import get_settings

        with patch.object(get_settings(), "admin_api_key", None):
            response = client.get("/api/admin/requests", headers=admin_headers)

        assert response.status_code == 503

    def test_member_token_is_not_enough(self, client: TestClient, auth_headers):
        response = client.post("/api/admin/requests/r1/approve", headers=auth_headers)
        assert response.status_code == 422


class TestAdminRequests:
    """Listing, approving and rejecting requests."""

    def test_list_and_get(self, client: TestClient, auth_headers, admin_headers):
        request_id = submit(client, auth_headers, "walkin")

        listed = client.get("/api/admin/requests", headers=admin_headers)
        assert listed.status_code == 200
        assert [r["id"] for r in listed.json()] == [request_id]

        pending = client.get(
            "/api/admin/requests", params={"status": "pending"}, headers=admin_headers
        )
        assert len(pending.json()) == 1

        approved = client.get(
            "/api/admin/requests", params={"status": "approved"}, headers=admin_headers
        )
        assert approved.json() == []

        fetched = client.get(f"/api/admin/requests/{request_id}", headers=admin_headers)
        assert fetched.json()["plan_name"] == "Walk-in Session"

    def test_get_unknown_request(self, client: TestClient, admin_headers):
        response = client.get("/api/admin/requests/missing", headers=admin_headers)
        assert response.status_code == 404
        assert response.json()["error"] == "RequestNotFoundError"

    def test_approve(self, client: TestClient, auth_headers, admin_headers, store, mock_user_id):
        request_id = submit(client, auth_headers, "monthly")

        response = client.post(f"/api/admin/requests/{request_id}/approve", headers=admin_headers)

        assert response.status_code == 200
        subscription_id = response.json()["subscription_id"]
        subscription = store.subscriptions[subscription_id]
        assert subscription.status == SubscriptionStatus.ACTIVE
        assert (subscription.end_date - subscription.start_date).days == 31
        assert store.users[mock_user_id].active_subscription_id == subscription_id

        status = client.get("/api/subscriptions/status", headers=auth_headers).json()
        assert status["has_active_subscription"] is True

    def test_approve_twice_is_conflict(self, client: TestClient, auth_headers, admin_headers, store):
        request_id = submit(client, auth_headers, "walkin")

        first = client.post(f"/api/admin/requests/{request_id}/approve", headers=admin_headers)
        second = client.post(f"/api/admin/requests/{request_id}/approve", headers=admin_headers)

        assert first.status_code == 200
        assert second.status_code == 409
        assert second.json()["error"] == "AlreadyResolvedError"
        assert len(store.subscriptions) == 1

    def test_reject(self, client: TestClient, auth_headers, admin_headers, store):
        request_id = submit(client, auth_headers, "coaching-solo")

        response = client.post(f"/api/admin/requests/{request_id}/reject", headers=admin_headers)

        assert response.status_code == 200
        assert response.json() == {"request_id": request_id, "status": "rejected"}
        assert store.requests[request_id].status == RequestStatus.REJECTED
        assert store.subscriptions == {}

        again = client.post(f"/api/admin/requests/{request_id}/approve", headers=admin_headers)
        assert again.status_code == 409

    def test_reject_unknown(self, client: TestClient, admin_headers):
        response = client.post("/api/admin/requests/missing/reject", headers=admin_headers)
        assert response.status_code == 404
