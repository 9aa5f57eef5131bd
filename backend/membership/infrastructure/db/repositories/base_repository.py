"""
Base Repository for the Membership Backend

Generic async repository over one SQLModel table, mapping rows to domain
models. Repositories never commit; the unit of work owns the transaction.
"""

from datetime import datetime, timezone
from typing import Generic, List, Optional, Type, TypeVar

from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import SQLModel


# Type variables for generic repository
ModelType = TypeVar("ModelType", bound=SQLModel)
DomainType = TypeVar("DomainType", bound=BaseModel)


def as_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Read stored timestamps as UTC; drivers without tz support return naive values."""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


class BaseRepository(Generic[ModelType, DomainType]):
    """
    Generic async repository with row/domain mapping.

    Subclasses implement `_to_domain` and `_to_model`.

    Args:
        model: The SQLModel class to operate on
        session: Async database session
    """

    def __init__(self, model: Type[ModelType], session: AsyncSession):
        self._model = model
        self._session = session

    @property
    def session(self) -> AsyncSession:
        """Get the current session."""
        return self._session

    def _to_domain(self, model: ModelType) -> DomainType:
        raise NotImplementedError

    def _to_model(self, entity: DomainType) -> ModelType:
        raise NotImplementedError

    async def _get_model(self, id: str) -> Optional[ModelType]:
        return await self._session.get(self._model, id)

    async def get(self, id: str) -> Optional[DomainType]:
        """
        Get a single record by its primary key.

        Returns:
            Domain model or None if not found
        """
        model = await self._get_model(id)
        if model is None:
            return None
        return self._to_domain(model)

    async def create(self, entity: DomainType) -> DomainType:
        """
        Insert a new record and flush it within the current transaction.

        Returns:
            The stored record as a domain model
        """
        model = self._to_model(entity)
        self._session.add(model)
        await self._session.flush()
        return self._to_domain(model)

    async def _list(self, statement) -> List[DomainType]:
        result = await self._session.execute(statement)
        return [self._to_domain(model) for model in result.scalars().all()]

