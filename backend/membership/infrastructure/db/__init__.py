"""
Database Infrastructure Package for the Membership Backend

Exports database utilities and the SQL unit of work.
"""

from membership.infrastructure.db.database import (
    DatabaseManager,
    get_db_manager,
    get_session_context,
    init_db,
    close_db,
)

from membership.infrastructure.db.unit_of_work import SqlUnitOfWork

from membership.infrastructure.db.dependencies import (
    UowFactoryDep,
    get_uow_factory,
)


__all__ = [
    # Database management
    "DatabaseManager",
    "get_db_manager",
    "get_session_context",
    "init_db",
    "close_db",
    # Unit of work
    "SqlUnitOfWork",
    # Dependencies
    "UowFactoryDep",
    "get_uow_factory",
]
