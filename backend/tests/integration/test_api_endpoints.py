"""
Integration tests for the membership API endpoints.

Tests the full request/response cycle against the in-memory store.
"""

from datetime import datetime, timedelta, timezone

from fastapi.testclient import TestClient

from membership.domain.subscription import RequestStatus


def in_days(days: float) -> datetime:
    return datetime.now(timezone.utc) + timedelta(days=days)


class TestHealthEndpoints:
    """Tests for health check endpoints."""

    def test_root_endpoint(self, client: TestClient):
        """Root endpoint should return welcome message."""
        response = client.get("/")
        assert response.status_code == 200
        data = response.json()
        assert "message" in data

    def test_health_endpoint(self, client: TestClient):
        """Health endpoint should return healthy status."""
        response = client.get("/health")
        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "healthy"


class TestPlanEndpoints:
    """Tests for the public plan catalog."""

    def test_list_plans_cheapest_first(self, client: TestClient):
        response = client.get("/api/plans")
        assert response.status_code == 200
        ids = [p["id"] for p in response.json()]
        assert ids == ["walkin", "monthly", "coaching-group", "coaching-solo"]

    def test_inactive_plans_hidden(self, client: TestClient, store):
        store.plans["walkin"] = store.plans["walkin"].model_copy(update={"is_active": False})

        response = client.get("/api/plans")

        assert "walkin" not in [p["id"] for p in response.json()]

    def test_get_plan(self, client: TestClient):
        response = client.get("/api/plans/monthly")
        assert response.status_code == 200
        data = response.json()
        assert data["name"] == "Monthly Plan"
        assert data["period"] == "per month"
        assert data["period_length_days"] == 31

    def test_get_unknown_plan(self, client: TestClient):
        response = client.get("/api/plans/platinum")
        assert response.status_code == 404
        assert response.json()["error"] == "PlanNotFoundError"


class TestSubmitEndpoint:
    """Tests for POST /api/subscriptions/requests."""

    def test_created(self, client: TestClient, auth_headers, store, mock_user_id):
        response = client.post(
            "/api/subscriptions/requests",
            json={"plan_id": "walkin"},
            headers=auth_headers,
        )

        assert response.status_code == 201
        data = response.json()
        assert data["outcome"] == "created"
        request = store.requests[data["request_id"]]
        assert request.status == RequestStatus.PENDING
        assert request.payment_method == "counter"

        # Member record materialized from the token claims
        user = store.users[mock_user_id]
        assert user.email == "member@example.com"
        assert user.display_name == "Gym Member"

    def test_profile_in_body_wins_over_token(self, client: TestClient, auth_headers, store, mock_user_id):
        response = client.post(
            "/api/subscriptions/requests",
            json={
                "plan_id": "monthly",
                "payment_method": "gcash",
                "profile": {"email": "desk@example.com", "display_name": "Front Desk"},
            },
            headers=auth_headers,
        )

        assert response.status_code == 201
        assert store.users[mock_user_id].email == "desk@example.com"
        request = store.requests[response.json()["request_id"]]
        assert request.payment_method == "gcash"
        assert request.user_display_name == "Front Desk"

    def test_blocked(self, client: TestClient, auth_headers, store, add_active_subscription, mock_user_id):
        add_active_subscription(mock_user_id, "monthly", end_date=in_days(10))

        response = client.post(
            "/api/subscriptions/requests",
            json={"plan_id": "walkin", "bypass_check": True},
            headers=auth_headers,
        )

        assert response.status_code == 403
        data = response.json()
        assert data["outcome"] == "blocked"
        assert data["title"] == "Cannot Add Walk-in to Monthly Subscription"
        assert data["allowed"] is False
        assert store.requests == {}

    def test_confirmation_then_bypass(self, client: TestClient, auth_headers, store, add_active_subscription, mock_user_id):
        add_active_subscription(mock_user_id, "walkin", end_date=in_days(0.5))

        first = client.post(
            "/api/subscriptions/requests",
            json={"plan_id": "monthly"},
            headers=auth_headers,
        )
        assert first.status_code == 409
        assert first.json()["outcome"] == "needs_confirmation"
        assert first.json()["title"] == "Upgrade to Monthly Subscription!"
        assert first.json()["requires_confirmation"] is True

        second = client.post(
            "/api/subscriptions/requests",
            json={"plan_id": "monthly", "bypass_check": True},
            headers=auth_headers,
        )
        assert second.status_code == 201
        assert len(store.requests) == 1

    def test_unknown_plan(self, client: TestClient, auth_headers):
        response = client.post(
            "/api/subscriptions/requests",
            json={"plan_id": "platinum"},
            headers=auth_headers,
        )
        assert response.status_code == 404

    def test_requires_plan_id(self, client: TestClient, auth_headers):
        response = client.post("/api/subscriptions/requests", json={}, headers=auth_headers)
        assert response.status_code == 422  # Validation error

    def test_blank_plan_id(self, client: TestClient, auth_headers):
        response = client.post(
            "/api/subscriptions/requests",
            json={"plan_id": "   "},
            headers=auth_headers,
        )
        assert response.status_code == 422

    def test_store_failure_is_503(self, client: TestClient, auth_headers, store):
        store.fail_commit = True

        response = client.post(
            "/api/subscriptions/requests",
            json={"plan_id": "walkin"},
            headers=auth_headers,
        )

        assert response.status_code == 503
        assert response.json()["error"] == "TransientStoreError"


class TestMemberViews:
    """Tests for transition preview, status and history."""

    def test_transition_without_subscription(self, client: TestClient, auth_headers):
        response = client.get(
            "/api/subscriptions/transition",
            params={"plan_id": "monthly"},
            headers=auth_headers,
        )

        assert response.status_code == 200
        assert response.json() == {
            "plan_id": "monthly",
            "has_current_subscription": False,
            "decision": None,
        }

    def test_transition_with_subscription(self, client: TestClient, auth_headers, add_active_subscription, mock_user_id):
        add_active_subscription(mock_user_id, "coaching-group", end_date=in_days(3))

        response = client.get(
            "/api/subscriptions/transition",
            params={"plan_id": "coaching-solo"},
            headers=auth_headers,
        )

        decision = response.json()["decision"]
        assert decision["title"] == "Cannot Switch to Solo Coaching"
        assert decision["kind"] == "forbidden"

    def test_status_without_user(self, client: TestClient, auth_headers):
        response = client.get("/api/subscriptions/status", headers=auth_headers)
        assert response.status_code == 200
        assert response.json()["has_active_subscription"] is False

    def test_status_with_active_subscription(self, client: TestClient, auth_headers, add_active_subscription, mock_user_id):
        subscription = add_active_subscription(mock_user_id, "monthly", end_date=in_days(12))

        data = client.get("/api/subscriptions/status", headers=auth_headers).json()

        assert data["has_active_subscription"] is True
        assert data["subscription_id"] == subscription.id
        assert data["subscription"]["plan_id"] == "monthly"

    def test_history_newest_first(self, client: TestClient, auth_headers, add_active_subscription, mock_user_id):
        old = add_active_subscription(mock_user_id, "walkin", start_date=in_days(-40), end_date=in_days(-39))
        new = add_active_subscription(mock_user_id, "monthly", start_date=in_days(-1), end_date=in_days(30))

        data = client.get("/api/subscriptions/history", headers=auth_headers).json()

        assert [s["id"] for s in data] == [new.id, old.id]
