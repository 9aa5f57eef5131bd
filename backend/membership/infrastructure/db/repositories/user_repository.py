"""
User Repository

Data access for member records and their active-subscription pointer.
"""

import logging
from datetime import datetime
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from membership.domain.interfaces import UserStore
from membership.domain.subscription import User
from membership.infrastructure.db.models.user import UserModel
from membership.infrastructure.db.repositories.base_repository import BaseRepository, as_utc
from membership.infrastructure.exceptions import NotFoundError


logger = logging.getLogger(__name__)


class UserRepository(BaseRepository[UserModel, User], UserStore):
    """Users backed by the users table."""

    def __init__(self, session: AsyncSession):
        super().__init__(UserModel, session)

    async def _get_locked(self, user_id: str) -> Optional[UserModel]:
        statement = (
            select(UserModel)
            .where(UserModel.id == user_id)
            .with_for_update()
            .execution_options(populate_existing=True)
        )
        result = await self._session.execute(statement)
        return result.scalar_one_or_none()

    async def get_for_update(self, user_id: str) -> Optional[User]:
        model = await self._get_locked(user_id)
        if model is None:
            return None
        return self._to_domain(model)

    async def set_active_subscription(
        self,
        user_id: str,
        subscription_id: str,
        now: datetime,
    ) -> None:
        model = await self._get_locked(user_id)
        if model is None:
            raise NotFoundError(
                f"User not found: {user_id}",
                operation="set_active_subscription",
                table="users",
            )

        model.active_subscription_id = subscription_id
        # JSON columns only track reassignment, not in-place mutation
        history = list(model.subscription_history or [])
        if subscription_id not in history:
            history.append(subscription_id)
        model.subscription_history = history
        model.updated_at = now

        self._session.add(model)
        await self._session.flush()
        logger.debug(f"User {user_id} now points at subscription {subscription_id}")

    def _to_domain(self, model: UserModel) -> User:
        return User(
            id=model.id,
            email=model.email,
            display_name=model.display_name,
            photo_url=model.photo_url,
            active_subscription_id=model.active_subscription_id,
            subscription_history=list(model.subscription_history or []),
            created_at=as_utc(model.created_at),
            updated_at=as_utc(model.updated_at),
        )

    def _to_model(self, user: User) -> UserModel:
        data = {
            "id": user.id,
            "email": user.email,
            "display_name": user.display_name,
            "photo_url": user.photo_url,
            "active_subscription_id": user.active_subscription_id,
            "subscription_history": list(user.subscription_history),
        }
        if user.created_at:
            data["created_at"] = user.created_at
        if user.updated_at:
            data["updated_at"] = user.updated_at
        return UserModel(**data)
