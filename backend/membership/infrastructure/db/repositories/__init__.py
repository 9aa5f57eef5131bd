"""
Repository Pattern Implementation for the Membership Backend

Provides data access abstraction over SQLModel tables.
"""

from membership.infrastructure.db.repositories.base_repository import BaseRepository
from membership.infrastructure.db.repositories.plan_repository import PlanRepository
from membership.infrastructure.db.repositories.user_repository import UserRepository
from membership.infrastructure.db.repositories.subscription_repository import (
    SubscriptionRepository,
)
from membership.infrastructure.db.repositories.request_repository import RequestRepository


__all__ = [
    "BaseRepository",
    "PlanRepository",
    "UserRepository",
    "SubscriptionRepository",
    "RequestRepository",
]
