"""Repository implementations backed by SQLAlchemy sessions."""

from __future__ import annotations

from typing import TYPE_CHECKING

from sqlalchemy import delete, func, select, update

from catalogsync.adapters.sqlalchemy.mappings import (
    vendor_catalog_item_table,
    vendor_integration_table,
    vendor_sync_run_table,
    vendor_sync_state_table,
)
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

    from sqlalchemy.orm import Session


class SqlAlchemyCatalogItemRepository:
    def __init__(self, session: Session) -> None:
        self.session = session

    def add(self, entity: VendorCatalogItem) -> None:
        self.session.add(entity)

    def hashes_for_vendor(self, vendor: str) -> dict[str, str]:
        table = vendor_catalog_item_table
        stmt = select(table.c.catalog_id, table.c.hash).where(table.c.vendor == vendor)
        return {catalog_id: item_hash for catalog_id, item_hash in self.session.execute(stmt)}

    def list_for_vendor(self, vendor: str) -> list[VendorCatalogItem]:
        stmt = (
            select(VendorCatalogItem)
            .where(vendor_catalog_item_table.c.vendor == vendor)
            .order_by(vendor_catalog_item_table.c.catalog_id)
        )
        return list(self.session.execute(stmt).scalars())

    def update_payload(
        self,
        vendor: str,
        catalog_id: str,
        *,
        raw_payload: Mapping[str, object],
        normalized_payload: Mapping[str, object],
        hash: str,  # noqa: A002
        at: datetime,
    ) -> None:
        stmt = select(VendorCatalogItem).where(
            vendor_catalog_item_table.c.vendor == vendor,
            vendor_catalog_item_table.c.catalog_id == catalog_id,
        )
        item = self.session.execute(stmt).scalar_one_or_none()
        if item is None:
            raise LookupError(f"No catalog item {catalog_id} for '{vendor}'")
        item.refresh(
            raw_payload=dict(raw_payload),
            normalized_payload=dict(normalized_payload),
            hash=hash,
            at=at,
        )

    def delete_many(self, vendor: str, catalog_ids: Iterable[str]) -> int:
        ids = list(catalog_ids)
        if not ids:
            return 0
        stmt = (
            delete(VendorCatalogItem)
            .where(vendor_catalog_item_table.c.vendor == vendor)
            .where(vendor_catalog_item_table.c.catalog_id.in_(ids))
        )
        result = self.session.execute(stmt)
        return result.rowcount or 0  # pyright: ignore[reportAttributeAccessIssue]


class SqlAlchemySyncStateRepository:
    def __init__(self, session: Session) -> None:
        self.session = session

    def get(self, vendor: str) -> VendorSyncState | None:
        return self.session.get(VendorSyncState, vendor)

    def upsert(self, state: VendorSyncState) -> VendorSyncState:
        return self.session.merge(state)

    def lock(self, vendor: str) -> None:
        # a write takes the row lock, or the database write lock on SQLite;
        # a missing row is inserted so there is something to hold
        if self.get(vendor) is None:
            self.session.add(VendorSyncState(vendor=vendor))
            self.session.flush()
            return
        table = vendor_sync_state_table
        self.session.execute(
            update(table).where(table.c.vendor == vendor).values(vendor=table.c.vendor)
        )

    def list(self) -> list[VendorSyncState]:
        stmt = select(VendorSyncState).order_by(vendor_sync_state_table.c.vendor)
        return list(self.session.execute(stmt).scalars())


class SqlAlchemySyncRunRepository:
    def __init__(self, session: Session) -> None:
        self.session = session

    def add(self, entity: VendorSyncRun) -> None:
        self.session.add(entity)

    def get(self, run_id: UUID) -> VendorSyncRun | None:
        return self.session.get(VendorSyncRun, run_id)

    def list_for_vendor(
        self, vendor: str | None, *, offset: int = 0, limit: int = 20
    ) -> list[VendorSyncRun]:
        stmt = select(VendorSyncRun)
        if vendor is not None:
            stmt = stmt.where(vendor_sync_run_table.c.vendor == vendor)
        stmt = (
            stmt.order_by(vendor_sync_run_table.c.started_at.desc(), vendor_sync_run_table.c.id)
            .offset(offset)
            .limit(limit)
        )
        return list(self.session.execute(stmt).scalars())

    def count_for_vendor(self, vendor: str | None) -> int:
        stmt = select(func.count()).select_from(vendor_sync_run_table)
        if vendor is not None:
            stmt = stmt.where(vendor_sync_run_table.c.vendor == vendor)
        return int(self.session.execute(stmt).scalar_one())


class SqlAlchemyIntegrationRepository:
    def __init__(self, session: Session) -> None:
        self.session = session

    def add(self, entity: VendorIntegration) -> None:
        self.session.add(entity)

    def get(self, vendor: str) -> VendorIntegration | None:
        return self.session.get(VendorIntegration, vendor)

    def list_configured(self) -> list[VendorIntegration]:
        stmt = select(VendorIntegration).order_by(vendor_integration_table.c.vendor)
        return list(self.session.execute(stmt).scalars())

    def save(self, integration: VendorIntegration) -> None:
        self.session.merge(integration)


if TYPE_CHECKING:
    from catalogsync.domain.ports import (
        CatalogItemRepository,
        IntegrationRepository,
        SyncRunRepository,
        SyncStateRepository,
    )

    def _check_repositories(session: Session) -> None:
        _items: CatalogItemRepository = SqlAlchemyCatalogItemRepository(session)
        _states: SyncStateRepository = SqlAlchemySyncStateRepository(session)
        _runs: SyncRunRepository = SqlAlchemySyncRunRepository(session)
        _integrations: IntegrationRepository = SqlAlchemyIntegrationRepository(session)


__all__ = [
    "SqlAlchemyCatalogItemRepository",
    "SqlAlchemyIntegrationRepository",
    "SqlAlchemySyncRunRepository",
    "SqlAlchemySyncStateRepository",
]
