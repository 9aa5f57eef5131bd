"""
SQLModel ORM Models for the Membership Backend

Exports all database models for Alembic autogenerate and application use.
Import models here to register them with SQLModel.metadata.
"""

from membership.infrastructure.db.models.base import TimestampMixin
from membership.infrastructure.db.models.user import UserModel
from membership.infrastructure.db.models.plan import SubscriptionPlanModel
from membership.infrastructure.db.models.subscription import SubscriptionModel
from membership.infrastructure.db.models.pending_request import (
    PendingSubscriptionRequestModel,
)


__all__ = [
    "TimestampMixin",
    "UserModel",
    "SubscriptionPlanModel",
    "SubscriptionModel",
    "PendingSubscriptionRequestModel",
]
