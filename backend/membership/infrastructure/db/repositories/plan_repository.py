"""
Subscription Plan Repository

Read access to the plan catalog, plus the upsert used by seeding.
"""

import logging
from typing import List

from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from membership.domain.interfaces import PlanCatalog
from membership.domain.plans import PlanPeriod, SubscriptionPlan
from membership.infrastructure.db.models.plan import SubscriptionPlanModel
from membership.infrastructure.db.repositories.base_repository import BaseRepository


logger = logging.getLogger(__name__)


class PlanRepository(BaseRepository[SubscriptionPlanModel, SubscriptionPlan], PlanCatalog):
    """Plan catalog backed by the subscription_plans table."""

    def __init__(self, session: AsyncSession):
        super().__init__(SubscriptionPlanModel, session)

    async def list_active(self) -> List[SubscriptionPlan]:
        statement = (
            select(SubscriptionPlanModel)
            .where(SubscriptionPlanModel.is_active == True)  # noqa: E712
            .order_by(SubscriptionPlanModel.price, SubscriptionPlanModel.id)
        )
        return await self._list(statement)

    async def upsert(self, plan: SubscriptionPlan) -> SubscriptionPlan:
        """Insert or overwrite a plan by id."""
        model = await self._session.merge(self._to_model(plan))
        await self._session.flush()
        logger.info(f"Upserted subscription plan {plan.id}")
        return self._to_domain(model)

    def _to_domain(self, model: SubscriptionPlanModel) -> SubscriptionPlan:
        return SubscriptionPlan(
            id=model.id,
            name=model.name,
            price=model.price,
            period=PlanPeriod(model.period),
            period_length_days=model.period_length_days,
            description=model.description,
            features=list(model.features or []),
            max_sessions=model.max_sessions,
            is_active=model.is_active,
        )

    def _to_model(self, plan: SubscriptionPlan) -> SubscriptionPlanModel:
        return SubscriptionPlanModel(
            id=plan.id,
            name=plan.name,
            price=plan.price,
            period=plan.period.value,
            period_length_days=plan.period_length_days,
            description=plan.description,
            features=list(plan.features),
            max_sessions=plan.max_sessions,
            is_active=plan.is_active,
        )

