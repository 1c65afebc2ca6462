"""SQLAlchemy adapter package for catalogsync."""

from __future__ import annotations

from .mappings import create_all_tables, mapper_registry, start_mappers
from .repositories import (
    SqlAlchemyCatalogItemRepository,
    SqlAlchemyIntegrationRepository,
    SqlAlchemySyncRunRepository,
    SqlAlchemySyncStateRepository,
)
from .unit_of_work import (
    BaseSqlAlchemyUnitOfWork,
    SqlAlchemyCatalogUnitOfWork,
    StartupError,
    configured_engine,
    is_started,
    shutdown,
    startup,
)

__all__ = [
    "BaseSqlAlchemyUnitOfWork",
    "SqlAlchemyCatalogItemRepository",
    "SqlAlchemyCatalogUnitOfWork",
    "SqlAlchemyIntegrationRepository",
    "SqlAlchemySyncRunRepository",
    "SqlAlchemySyncStateRepository",
    "StartupError",
    "configured_engine",
    "create_all_tables",
    "is_started",
    "mapper_registry",
    "shutdown",
    "start_mappers",
    "startup",
]
