"""
SQL Unit of Work

Binds every repository to one AsyncSession so a service operation commits
or rolls back as a whole. Store failures surface as TransientStoreError.
"""

import logging
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from membership.domain.interfaces import UnitOfWork
from membership.infrastructure.db.database import get_db_manager
from membership.infrastructure.db.repositories import (
    PlanRepository,
    RequestRepository,
    SubscriptionRepository,
    UserRepository,
)
from membership.infrastructure.exceptions import TransientStoreError


logger = logging.getLogger(__name__)


class SqlUnitOfWork(UnitOfWork):
    """
    Unit of work over the membership tables.

    Usage:
        async with SqlUnitOfWork() as uow:
            plan = await uow.plans.get("monthly")
            await uow.commit()

    Args:
        session_factory: Session factory; defaults to the shared pool
    """

    def __init__(self, session_factory: Optional[async_sessionmaker[AsyncSession]] = None):
        self._session_factory = session_factory
        self._session: Optional[AsyncSession] = None
        self._committed = False

    async def __aenter__(self) -> "SqlUnitOfWork":
        factory = self._session_factory or get_db_manager().session_factory
        self._session = factory()
        self._committed = False

        self.plans = PlanRepository(self._session)
        self.users = UserRepository(self._session)
        self.subscriptions = SubscriptionRepository(self._session)
        self.requests = RequestRepository(self._session)
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        try:
            if not self._committed:
                await self.rollback()
        finally:
            await self._session.close()
            self._session = None

        if isinstance(exc, SQLAlchemyError):
            logger.error(f"Store call failed, transaction rolled back: {exc}")
            raise TransientStoreError(
                "Membership store is temporarily unavailable",
                operation="transaction",
                original_error=exc,
            ) from exc

    async def commit(self) -> None:
        try:
            await self._session.commit()
        except SQLAlchemyError as e:
            logger.error(f"Commit failed: {e}")
            await self._session.rollback()
            raise TransientStoreError(
                "Failed to commit membership changes",
                operation="commit",
                original_error=e,
            ) from e
        self._committed = True

    async def rollback(self) -> None:
        if self._session is not None and not self._committed:
            await self._session.rollback()
