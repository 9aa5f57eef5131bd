"""
Test configuration and fixtures for the Membership Backend.

Provides shared fixtures for unit and integration tests, including an
in-memory unit of work so services and routes run without a database.
"""

import os
import time
from datetime import datetime, timedelta, timezone
from typing import Callable, Dict, List, Optional

import jwt
import pytest
from fastapi.testclient import TestClient

TEST_JWT_SECRET = "test-jwt-secret-with-at-least-32-bytes!!"
TEST_ADMIN_KEY = "test-admin-key"

# Settings are cached on first import, so the test environment goes first
os.environ["AUTH_JWT_SECRET"] = TEST_JWT_SECRET
os.environ["ADMIN_API_KEY"] = TEST_ADMIN_KEY
os.environ["ENVIRONMENT"] = "development"
os.environ.pop("DATABASE_URL", None)

from membership.domain.interfaces import (  # noqa: E402
    PlanCatalog,
    RequestStore,
    SubscriptionStore,
    UnitOfWork,
    UserStore,
)
from membership.domain.plans import DEFAULT_PLANS, SubscriptionPlan  # noqa: E402
from membership.domain.subscription import (  # noqa: E402
    PendingSubscriptionRequest,
    RequestStatus,
    Subscription,
    SubscriptionStatus,
    User,
)
from membership.infrastructure.exceptions import (  # noqa: E402
    NotFoundError,
    TransientStoreError,
)


NOW = datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)


# =============================================================================
# In-Memory Stores
# =============================================================================

class InMemoryStore:
    """Committed state shared by every unit of work in a test."""

    def __init__(self, plans: Optional[List[SubscriptionPlan]] = None):
        self.plans: Dict[str, SubscriptionPlan] = {p.id: p for p in (plans or [])}
        self.users: Dict[str, User] = {}
        self.subscriptions: Dict[str, Subscription] = {}
        self.requests: Dict[str, PendingSubscriptionRequest] = {}
        self.commits = 0
        self.fail_commit = False


class InMemoryPlanCatalog(PlanCatalog):
    def __init__(self, plans: Dict[str, SubscriptionPlan]):
        self._plans = plans

    async def get(self, plan_id):
        return self._plans.get(plan_id)

    async def list_active(self):
        active = [p for p in self._plans.values() if p.is_active]
        return sorted(active, key=lambda p: (p.price, p.id))


class InMemoryUserStore(UserStore):
    def __init__(self, users: Dict[str, User]):
        self._users = users

    async def get(self, user_id):
        user = self._users.get(user_id)
        return user.model_copy(deep=True) if user else None

    async def get_for_update(self, user_id):
        return await self.get(user_id)

    async def create(self, user):
        self._users[user.id] = user.model_copy(deep=True)
        return user

    async def set_active_subscription(self, user_id, subscription_id, now):
        user = self._users.get(user_id)
        if user is None:
            raise NotFoundError(f"User not found: {user_id}", table="users")
        history = list(user.subscription_history)
        if subscription_id not in history:
            history.append(subscription_id)
        self._users[user_id] = user.model_copy(update={
            "active_subscription_id": subscription_id,
            "subscription_history": history,
            "updated_at": now,
        })


class InMemorySubscriptionStore(SubscriptionStore):
    def __init__(self, subscriptions: Dict[str, Subscription]):
        self._subscriptions = subscriptions

    async def get(self, subscription_id):
        subscription = self._subscriptions.get(subscription_id)
        return subscription.model_copy(deep=True) if subscription else None

    async def create(self, subscription):
        self._subscriptions[subscription.id] = subscription.model_copy(deep=True)
        return subscription

    async def list_by_ids(self, subscription_ids):
        return [
            self._subscriptions[sid].model_copy(deep=True)
            for sid in subscription_ids
            if sid in self._subscriptions
        ]


class InMemoryRequestStore(RequestStore):
    def __init__(self, requests: Dict[str, PendingSubscriptionRequest], store: InMemoryStore):
        self._requests = requests
        self._store = store

    async def get(self, request_id):
        request = self._requests.get(request_id)
        return request.model_copy(deep=True) if request else None

    async def create(self, request):
        self._requests[request.id] = request.model_copy(deep=True)
        return request

    async def list(self, status=None):
        requests = [r for r in self._requests.values() if status is None or r.status == status]
        return sorted(requests, key=lambda r: r.request_date, reverse=True)

    async def mark_resolved(self, request_id, status, resolved_at, subscription_id=None):
        # Checked against committed state, like a row-level conditional UPDATE
        committed = self._store.requests.get(request_id)
        current = self._requests.get(request_id)
        if committed is None or current is None:
            return False
        if committed.status != RequestStatus.PENDING or current.status != RequestStatus.PENDING:
            return False

        update = {"status": status, "updated_at": resolved_at}
        if status == RequestStatus.APPROVED:
            update.update(approved_at=resolved_at, subscription_id=subscription_id)
        else:
            update["rejected_at"] = resolved_at
        self._requests[request_id] = current.model_copy(update=update)
        return True


class FakeUnitOfWork(UnitOfWork):
    """Copies committed state on enter and writes it back on commit."""

    def __init__(self, store: InMemoryStore, on_enter: Optional[Callable[[InMemoryStore], None]] = None):
        self._store = store
        self._on_enter = on_enter
        self._committed = False

    async def __aenter__(self):
        self._users = dict(self._store.users)
        self._subscriptions = dict(self._store.subscriptions)
        self._requests = dict(self._store.requests)

        self.plans = InMemoryPlanCatalog(self._store.plans)
        self.users = InMemoryUserStore(self._users)
        self.subscriptions = InMemorySubscriptionStore(self._subscriptions)
        self.requests = InMemoryRequestStore(self._requests, self._store)

        # Lets a test commit a competing change after our snapshot
        if self._on_enter is not None:
            self._on_enter(self._store)
        return self

    async def commit(self):
        if self._store.fail_commit:
            raise TransientStoreError("Store unavailable", operation="commit")
        self._store.users = self._users
        self._store.subscriptions = self._subscriptions
        self._store.requests = self._requests
        self._store.commits += 1
        self._committed = True

    async def rollback(self):
        pass


# =============================================================================
# Store Fixtures
# =============================================================================

@pytest.fixture
def now() -> datetime:
    """Fixed instant used as the service clock."""
    return NOW


@pytest.fixture
def clock(now) -> Callable[[], datetime]:
    return lambda: now


@pytest.fixture
def store() -> InMemoryStore:
    """In-memory store seeded with the default plan catalog."""
    return InMemoryStore(DEFAULT_PLANS)


@pytest.fixture
def uow_factory(store) -> Callable[[], FakeUnitOfWork]:
    return lambda: FakeUnitOfWork(store)


@pytest.fixture
def make_uow_factory(store):
    """Build a unit-of-work factory with an on-enter hook."""
    def _make(on_enter: Callable[[InMemoryStore], None]):
        return lambda: FakeUnitOfWork(store, on_enter=on_enter)
    return _make


@pytest.fixture
def mock_user_id() -> str:
    return "member-123"


@pytest.fixture
def add_user(store):
    """Insert a committed user record."""
    def _add_user(user_id: str, email: str = "member@example.com", display_name: str = "Gym Member") -> User:
        user = User(id=user_id, email=email, display_name=display_name, created_at=NOW, updated_at=NOW)
        store.users[user_id] = user
        return user
    return _add_user


@pytest.fixture
def add_active_subscription(store, add_user):
    """Give a user a committed active subscription to the given plan."""
    def _add(
        user_id: str,
        plan_id: str,
        end_date: datetime,
        start_date: Optional[datetime] = None,
        status: SubscriptionStatus = SubscriptionStatus.ACTIVE,
    ) -> Subscription:
        if user_id not in store.users:
            add_user(user_id)
        plan = store.plans[plan_id]
        subscription = Subscription(
            id=f"sub-{plan_id}-{len(store.subscriptions) + 1}",
            user_id=user_id,
            plan_id=plan.id,
            plan_name=plan.name,
            price=plan.price,
            status=status,
            start_date=start_date or end_date - timedelta(days=1),
            end_date=end_date,
        )
        store.subscriptions[subscription.id] = subscription
        user = store.users[user_id]
        store.users[user_id] = user.model_copy(update={
            "active_subscription_id": subscription.id,
            "subscription_history": [*user.subscription_history, subscription.id],
        })
        return subscription
    return _add


# =============================================================================
# App Fixtures
# =============================================================================

@pytest.fixture
def app(uow_factory):
    """Get the FastAPI application wired to the in-memory store."""
    from membership.main import app
    from membership.infrastructure.db.dependencies import get_uow_factory

    app.dependency_overrides[get_uow_factory] = lambda: uow_factory
    yield app
    app.dependency_overrides.clear()


@pytest.fixture
def client(app):
    """Get synchronous test client."""
    return TestClient(app)


def make_token(user_id: str, secret: str = TEST_JWT_SECRET, expires_in: int = 3600, **claims) -> str:
    payload = {"sub": user_id, "exp": int(time.time()) + expires_in, **claims}
    return jwt.encode(payload, secret, algorithm="HS256")


@pytest.fixture
def token_factory():
    return make_token


@pytest.fixture
def auth_headers(mock_user_id):
    """Bearer headers for a member with email and name claims."""
    token = make_token(mock_user_id, email="member@example.com", name="Gym Member")
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def admin_headers():
    return {"X-Admin-Key": TEST_ADMIN_KEY}
