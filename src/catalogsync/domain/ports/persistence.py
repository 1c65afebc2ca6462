"""Ports for persisting reconciliation records."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

from catalogsync.domain.model import (
    VendorCatalogItem,
    VendorIntegration,
    VendorSyncRun,
    VendorSyncState,
)

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping
    from datetime import datetime
    from uuid import UUID


@runtime_checkable
class Repository[TEntity](Protocol):
    """Minimal repository contract for a persistent record store."""

    def add(self, entity: TEntity) -> None: ...


@runtime_checkable
class CatalogItemRepository(Repository[VendorCatalogItem], Protocol):
    """Persistence contract for a vendor's current catalog items."""

    def hashes_for_vendor(self, vendor: str) -> dict[str, str]: ...

    def list_for_vendor(self, vendor: str) -> list[VendorCatalogItem]: ...

    def update_payload(
        self,
        vendor: str,
        catalog_id: str,
        *,
        raw_payload: Mapping[str, object],
        normalized_payload: Mapping[str, object],
        hash: str,  # noqa: A002
        at: datetime,
    ) -> None: ...

    def delete_many(self, vendor: str, catalog_ids: Iterable[str]) -> int: ...


@runtime_checkable
class SyncStateRepository(Protocol):
    """Persistence contract for the one-row-per-vendor sync state."""

    def get(self, vendor: str) -> VendorSyncState | None: ...

    def upsert(self, state: VendorSyncState) -> VendorSyncState: ...

    def lock(self, vendor: str) -> None:
        """Block other writers of the vendor until the current transaction ends."""
        ...

    def list(self) -> list[VendorSyncState]: ...


@runtime_checkable
class SyncRunRepository(Repository[VendorSyncRun], Protocol):
    """Persistence contract for the append-only run audit."""

    def get(self, run_id: UUID) -> VendorSyncRun | None: ...

    def list_for_vendor(
        self, vendor: str | None, *, offset: int = 0, limit: int = 20
    ) -> list[VendorSyncRun]: ...

    def count_for_vendor(self, vendor: str | None) -> int: ...


@runtime_checkable
class IntegrationRepository(Repository[VendorIntegration], Protocol):
    """Persistence contract for vendor integration settings."""

    def get(self, vendor: str) -> VendorIntegration | None: ...

    def list_configured(self) -> list[VendorIntegration]: ...

    def save(self, integration: VendorIntegration) -> None: ...
