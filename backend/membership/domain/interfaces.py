"""
Storage Interfaces for the Membership Domain

Defines the store contracts the subscription services depend on.
Concrete implementations live in the infrastructure layer.
"""

from abc import ABC, abstractmethod
from datetime import datetime
from typing import List, Optional

from membership.domain.plans import SubscriptionPlan
from membership.domain.subscription import (
    PendingSubscriptionRequest,
    RequestStatus,
    Subscription,
    User,
)


class PlanCatalog(ABC):
    """Read-only lookup of plan metadata keyed by plan id."""

    @abstractmethod
    async def get(self, plan_id: str) -> Optional[SubscriptionPlan]:
        """Get a plan by id."""
        pass

    @abstractmethod
    async def list_active(self) -> List[SubscriptionPlan]:
        """List purchasable plans, cheapest first."""
        pass


class UserStore(ABC):
    """Member records."""

    @abstractmethod
    async def get(self, user_id: str) -> Optional[User]:
        """Get a user by id."""
        pass

    @abstractmethod
    async def get_for_update(self, user_id: str) -> Optional[User]:
        """Get a user and hold a write lock on it until the unit of work ends."""
        pass

    @abstractmethod
    async def create(self, user: User) -> User:
        """Create a user record."""
        pass

    @abstractmethod
    async def set_active_subscription(
        self,
        user_id: str,
        subscription_id: str,
        now: datetime,
    ) -> None:
        """Repoint the active subscription and append it to the history."""
        pass


class SubscriptionStore(ABC):
    """Dated subscriptions. Append-only from this core's point of view."""

    @abstractmethod
    async def get(self, subscription_id: str) -> Optional[Subscription]:
        """Get a subscription by id."""
        pass

    @abstractmethod
    async def create(self, subscription: Subscription) -> Subscription:
        """Create a subscription record."""
        pass

    @abstractmethod
    async def list_by_ids(self, subscription_ids: List[str]) -> List[Subscription]:
        """Fetch the given subscriptions, silently skipping missing ids."""
        pass


class RequestStore(ABC):
    """Pending subscription requests."""

    @abstractmethod
    async def get(self, request_id: str) -> Optional[PendingSubscriptionRequest]:
        """Get a request by id."""
        pass

    @abstractmethod
    async def create(self, request: PendingSubscriptionRequest) -> PendingSubscriptionRequest:
        """Create a request record."""
        pass

    @abstractmethod
    async def list(
        self,
        status: Optional[RequestStatus] = None,
    ) -> List[PendingSubscriptionRequest]:
        """List requests, newest request_date first."""
        pass

    @abstractmethod
    async def mark_resolved(
        self,
        request_id: str,
        status: RequestStatus,
        resolved_at: datetime,
        subscription_id: Optional[str] = None,
    ) -> bool:
        """
        Conditionally move a request out of PENDING.

        The write only applies if the stored status is still PENDING at
        write time. Returns False when another writer got there first.
        """
        pass


class UnitOfWork(ABC):
    """
    One atomic unit of work over all stores.

    Used as an async context manager. Changes are applied only by
    commit(); leaving the block any other way discards them.
    """

    plans: PlanCatalog
    users: UserStore
    subscriptions: SubscriptionStore
    requests: RequestStore

    async def __aenter__(self) -> "UnitOfWork":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.rollback()

    @abstractmethod
    async def commit(self) -> None:
        """Apply all changes made in this unit of work."""
        pass

    @abstractmethod
    async def rollback(self) -> None:
        """Discard uncommitted changes. A no-op after commit."""
        pass
