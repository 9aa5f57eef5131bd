"""
Pending Subscription Request Repository

Data access for plan requests awaiting an admin decision.
"""

import logging
from datetime import datetime
from typing import List, Optional

from sqlalchemy import update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from membership.domain.interfaces import RequestStore
from membership.domain.subscription import PendingSubscriptionRequest, RequestStatus
from membership.infrastructure.db.models.pending_request import (
    PendingSubscriptionRequestModel,
)
from membership.infrastructure.db.repositories.base_repository import BaseRepository, as_utc


logger = logging.getLogger(__name__)


class RequestRepository(
    BaseRepository[PendingSubscriptionRequestModel, PendingSubscriptionRequest],
    RequestStore,
):
    """Requests backed by the pending_subscriptions table."""

    def __init__(self, session: AsyncSession):
        super().__init__(PendingSubscriptionRequestModel, session)

    async def list(
        self,
        status: Optional[RequestStatus] = None,
    ) -> List[PendingSubscriptionRequest]:
        statement = select(PendingSubscriptionRequestModel)
        if status is not None:
            statement = statement.where(
                PendingSubscriptionRequestModel.status == status.value
            )
        statement = statement.order_by(PendingSubscriptionRequestModel.request_date.desc())
        return await self._list(statement)

    async def mark_resolved(
        self,
        request_id: str,
        status: RequestStatus,
        resolved_at: datetime,
        subscription_id: Optional[str] = None,
    ) -> bool:
        values = {"status": status.value, "updated_at": resolved_at}
        if status == RequestStatus.APPROVED:
            values["approved_at"] = resolved_at
            values["subscription_id"] = subscription_id
        elif status == RequestStatus.REJECTED:
            values["rejected_at"] = resolved_at

        # Guarded write: only a still-pending row changes
        statement = (
            update(PendingSubscriptionRequestModel)
            .where(
                PendingSubscriptionRequestModel.id == request_id,
                PendingSubscriptionRequestModel.status == RequestStatus.PENDING.value,
            )
            .values(**values)
            .execution_options(synchronize_session="fetch")
        )
        result = await self._session.execute(statement)

        if result.rowcount != 1:
            logger.warning(f"Request {request_id} was not pending, {status.value} not applied")
            return False
        return True

    def _to_domain(self, model: PendingSubscriptionRequestModel) -> PendingSubscriptionRequest:
        return PendingSubscriptionRequest(
            id=model.id,
            user_id=model.user_id,
            user_email=model.user_email,
            user_display_name=model.user_display_name,
            plan_id=model.plan_id,
            plan_name=model.plan_name,
            price=model.price,
            status=RequestStatus(model.status),
            payment_method=model.payment_method,
            request_date=as_utc(model.request_date),
            approved_at=as_utc(model.approved_at),
            rejected_at=as_utc(model.rejected_at),
            subscription_id=model.subscription_id,
            created_at=as_utc(model.created_at),
            updated_at=as_utc(model.updated_at),
        )

    def _to_model(self, request: PendingSubscriptionRequest) -> PendingSubscriptionRequestModel:
        data = request.model_dump(exclude={"created_at", "updated_at", "status"})
        data["status"] = request.status.value
        if request.created_at:
            data["created_at"] = request.created_at
        if request.updated_at:
            data["updated_at"] = request.updated_at
        return PendingSubscriptionRequestModel(**data)
