"""SQLAlchemy mapping metadata for the catalog reconciliation records."""

from __future__ import annotations

import logging
import uuid
from datetime import UTC, datetime
from functools import cache
from typing import TYPE_CHECKING, Any

from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    DateTime,
    Dialect,
    Enum,
    Index,
    Integer,
    String,
    Table,
    Text,
    TypeDecorator,
    UniqueConstraint,
    Uuid,
    orm,
)
from sqlalchemy.orm import configure_mappers

from catalogsync.domain.model import (
    ApiAuthType,
    DiffCounts,
    IntegrationType,
    RunStatus,
    SyncMode,
    VendorCatalogItem,
    VendorIntegration,
    VendorSyncRun,
    VendorSyncState,
)

if TYPE_CHECKING:
    from sqlalchemy.engine import Engine

log = logging.getLogger(__name__)

UUIDColumnType = Uuid[uuid.UUID]


class UTCDateTime(TypeDecorator[datetime]):
    impl = DateTime(timezone=True)
    cache_ok = True

    def process_bind_param(self, value: datetime | None, dialect: Dialect) -> datetime | None:
        _ = dialect
        if value is None:
            return None
        if value.tzinfo is None:
            value = value.replace(tzinfo=UTC)
        return value.astimezone(UTC)

    def process_result_value(self, value: datetime | None, dialect: Dialect) -> datetime | None:
        _ = dialect
        if value is None:
            return None
        return value if value.tzinfo else value.replace(tzinfo=UTC)


class DiffCountsType(TypeDecorator[DiffCounts]):
    impl = JSON
    cache_ok = True

    def process_bind_param(
        self, value: DiffCounts | None, dialect: Dialect
    ) -> dict[str, int] | None:
        _ = dialect
        if value is None:
            return None
        return value.to_dict()

    def process_result_value(self, value: Any, dialect: Dialect) -> DiffCounts | None:
        _ = dialect
        if not isinstance(value, dict):
            return None
        return DiffCounts.from_dict(value)


mapper_registry = orm.registry()
mapper_registry.metadata.naming_convention = {
    "ix": "ix_%(column_0_label)s",
    "uq": "uq_%(table_name)s_%(column_0_label)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
    "fk": "fk_%(table_name)s_%(column_0_label)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s",
}

vendor_catalog_item_table = Table(
    "vendor_catalog_item",
    mapper_registry.metadata,
    Column("id", UUIDColumnType, primary_key=True, default=uuid.uuid4),
    Column("vendor", String(64), nullable=False),
    Column("catalog_id", String(255), nullable=False),
    Column("raw_payload", JSON, nullable=False),
    Column("normalized_payload", JSON, nullable=False),
    Column("hash", String(64), nullable=False),
    Column("created_at", UTCDateTime(), nullable=False),
    Column("updated_at", UTCDateTime(), nullable=False),
    UniqueConstraint("vendor", "catalog_id", name="uq_vendor_catalog_item_vendor_catalog_id"),
)

vendor_sync_state_table = Table(
    "vendor_sync_state",
    mapper_registry.metadata,
    Column("vendor", String(64), primary_key=True),
    Column("last_run_at", UTCDateTime(), nullable=True),
    Column("last_duration_ms", Integer, nullable=True),
    Column("total_items", Integer, nullable=False, default=0),
    Column("last_hash", String(64), nullable=True),
    Column("last_source", Text, nullable=True),
    Column("last_error", Text, nullable=True),
    Column("last_run_by", String(255), nullable=True),
    Column("updated_at", UTCDateTime(), nullable=False),
)

vendor_sync_run_table = Table(
    "vendor_sync_run",
    mapper_registry.metadata,
    Column("id", UUIDColumnType, primary_key=True, default=uuid.uuid4),
    Column("vendor", String(64), nullable=False),
    Column("mode", Enum(SyncMode, native_enum=False), nullable=False),
    Column("status", Enum(RunStatus, native_enum=False), nullable=False),
    Column("actor", String(255), nullable=False),
    Column("source_path", Text, nullable=True),
    Column("started_at", UTCDateTime(), nullable=False),
    Column("finished_at", UTCDateTime(), nullable=True),
    Column("duration_ms", Integer, nullable=True),
    Column("total_items", Integer, nullable=True),
    Column("hash", String(64), nullable=True),
    Column("diff_summary", DiffCountsType(), nullable=True),
    Column("error", Text, nullable=True),
    Index("ix_vendor_sync_run_vendor_started_at", "vendor", "started_at"),
)

vendor_integration_table = Table(
    "vendor_integration",
    mapper_registry.metadata,
    Column("vendor", String(64), primary_key=True),
    Column("name", String(255), nullable=False),
    Column("type", Enum(IntegrationType, native_enum=False), nullable=False),
    Column("scraper_path", Text, nullable=True),
    Column("api_base_url", Text, nullable=True),
    Column("api_auth_type", Enum(ApiAuthType, native_enum=False), nullable=False),
    Column("api_auth_header", String(255), nullable=True),
    Column("api_key", Text, nullable=True),
    Column("last_test_at", UTCDateTime(), nullable=True),
    Column("last_test_ok", Boolean, nullable=True),
    Column("last_test_error", Text, nullable=True),
    Column("meta", JSON, nullable=False),
)


@cache
def start_mappers() -> orm.registry:
    """Configure SQLAlchemy mappers for the reconciliation records."""

    log.info("Starting SQLAlchemy mappers")

    mapper_registry.map_imperatively(VendorCatalogItem, vendor_catalog_item_table)
    mapper_registry.map_imperatively(VendorSyncState, vendor_sync_state_table)
    mapper_registry.map_imperatively(VendorSyncRun, vendor_sync_run_table)
    mapper_registry.map_imperatively(VendorIntegration, vendor_integration_table)

    configure_mappers()
    return mapper_registry


def create_all_tables(engine: Engine) -> None:
    """Create database tables for the mapped metadata."""

    log.info("Creating all tables")
    mapper_registry.metadata.create_all(engine)
