"""
Subscription Repository

Data access layer for subscription persistence.
Subscriptions are inserted on approval and never updated or deleted here.
"""

import logging
from typing import List

from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from membership.domain.interfaces import SubscriptionStore
from membership.domain.subscription import (
    ExtensionLogEntry,
    Subscription,
    SubscriptionStatus,
)
from membership.infrastructure.db.models.subscription import SubscriptionModel
from membership.infrastructure.db.repositories.base_repository import BaseRepository, as_utc


logger = logging.getLogger(__name__)


class SubscriptionRepository(BaseRepository[SubscriptionModel, Subscription], SubscriptionStore):
    """
    Repository for subscription data access.

    Maps between SubscriptionModel rows and Subscription domain models.
    """

    def __init__(self, session: AsyncSession):
        super().__init__(SubscriptionModel, session)

    async def create(self, subscription: Subscription) -> Subscription:
        created = await super().create(subscription)
        logger.info(f"Created subscription {created.id} for user {created.user_id}")
        return created

    async def list_by_ids(self, subscription_ids: List[str]) -> List[Subscription]:
        if not subscription_ids:
            return []
        statement = select(SubscriptionModel).where(
            SubscriptionModel.id.in_(subscription_ids)
        )
        return await self._list(statement)

    # =========================================================================
    # Mapping
    # =========================================================================

    def _to_domain(self, model: SubscriptionModel) -> Subscription:
        return Subscription(
            id=model.id,
            user_id=model.user_id,
            user_email=model.user_email,
            user_display_name=model.user_display_name,
            plan_id=model.plan_id,
            plan_name=model.plan_name,
            price=model.price,
            status=SubscriptionStatus(model.status),
            start_date=as_utc(model.start_date),
            end_date=as_utc(model.end_date),
            max_sessions=model.max_sessions,
            used_sessions=model.used_sessions,
            payment_method=model.payment_method,
            approved_at=as_utc(model.approved_at),
            approved_by=model.approved_by,
            created_at=as_utc(model.created_at),
            updated_at=as_utc(model.updated_at),
            extension_log=[
                ExtensionLogEntry.model_validate(entry)
                for entry in (model.extension_log or [])
            ],
        )

    def _to_model(self, subscription: Subscription) -> SubscriptionModel:
        data = {
            "id": subscription.id,
            "user_id": subscription.user_id,
            "user_email": subscription.user_email,
            "user_display_name": subscription.user_display_name,
            "plan_id": subscription.plan_id,
            "plan_name": subscription.plan_name,
            "price": subscription.price,
            "status": subscription.status.value,
            "start_date": subscription.start_date,
            "end_date": subscription.end_date,
            "max_sessions": subscription.max_sessions,
            "used_sessions": subscription.used_sessions,
            "payment_method": subscription.payment_method,
            "approved_at": subscription.approved_at,
            "approved_by": subscription.approved_by,
            "extension_log": [
                entry.model_dump(mode="json") for entry in subscription.extension_log
            ],
        }
        if subscription.created_at:
            data["created_at"] = subscription.created_at
        if subscription.updated_at:
            data["updated_at"] = subscription.updated_at
        return SubscriptionModel(**data)
