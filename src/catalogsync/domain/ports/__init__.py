"""Domain port definitions for adapters."""

from __future__ import annotations

from .fetching import RawBatch, RawBatchFetcher
from .persistence import (
    CatalogItemRepository,
    IntegrationRepository,
    Repository,
    SyncRunRepository,
    SyncStateRepository,
)
from .unit_of_work import (
    CatalogRepositories,
    CatalogUnitOfWork,
    CatalogUnitOfWorkFactory,
    RepositoryCollection,
    UnitOfWork,
)

__all__ = [
    "CatalogItemRepository",
    "CatalogRepositories",
    "CatalogUnitOfWork",
    "CatalogUnitOfWorkFactory",
    "IntegrationRepository",
    "RawBatch",
    "RawBatchFetcher",
    "Repository",
    "RepositoryCollection",
    "SyncRunRepository",
    "SyncStateRepository",
    "UnitOfWork",
]
