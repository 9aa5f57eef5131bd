"""
Dependency Injection Providers for the Membership Backend

Provides the FastAPI dependency for units of work.
"""

from typing import Annotated

from fastapi import Depends

from membership.domain.services import UnitOfWorkFactory
from membership.infrastructure.db.unit_of_work import SqlUnitOfWork


def get_uow_factory() -> UnitOfWorkFactory:
    """
    Dependency provider for unit-of-work factories.

    Services open one unit of work per operation, so they receive the
    factory rather than a session. Tests override this provider.
    """
    return SqlUnitOfWork


UowFactoryDep = Annotated[UnitOfWorkFactory, Depends(get_uow_factory)]
