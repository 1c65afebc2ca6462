"""initial catalog reconciliation schema

Revision ID: 0001
Revises:
Create Date: 2025-11-03 09:12:44.518203
"""

from __future__ import annotations

from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op

revision: str = "0001"
down_revision: str | Sequence[str] | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    op.create_table(
        "vendor_catalog_item",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("vendor", sa.String(length=64), nullable=False),
        sa.Column("catalog_id", sa.String(length=255), nullable=False),
        sa.Column("raw_payload", sa.JSON(), nullable=False),
        sa.Column("normalized_payload", sa.JSON(), nullable=False),
        sa.Column("hash", sa.String(length=64), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_vendor_catalog_item")),
        sa.UniqueConstraint(
            "vendor", "catalog_id", name="uq_vendor_catalog_item_vendor_catalog_id"
        ),
    )
    op.create_table(
        "vendor_sync_state",
        sa.Column("vendor", sa.String(length=64), nullable=False),
        sa.Column("last_run_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("last_duration_ms", sa.Integer(), nullable=True),
        sa.Column("total_items", sa.Integer(), nullable=False),
        sa.Column("last_hash", sa.String(length=64), nullable=True),
        sa.Column("last_source", sa.Text(), nullable=True),
        sa.Column("last_error", sa.Text(), nullable=True),
        sa.Column("last_run_by", sa.String(length=255), nullable=True),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("vendor", name=op.f("pk_vendor_sync_state")),
    )
    op.create_table(
        "vendor_sync_run",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("vendor", sa.String(length=64), nullable=False),
        sa.Column(
            "mode",
            sa.Enum("DRY_RUN", "APPLY", name="syncmode", native_enum=False),
            nullable=False,
        ),
        sa.Column(
            "status",
            sa.Enum("PENDING", "SUCCESS", "FAILED", name="runstatus", native_enum=False),
            nullable=False,
        ),
        sa.Column("actor", sa.String(length=255), nullable=False),
        sa.Column("source_path", sa.Text(), nullable=True),
        sa.Column("started_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("finished_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("duration_ms", sa.Integer(), nullable=True),
        sa.Column("total_items", sa.Integer(), nullable=True),
        sa.Column("hash", sa.String(length=64), nullable=True),
        sa.Column("diff_summary", sa.JSON(), nullable=True),
        sa.Column("error", sa.Text(), nullable=True),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_vendor_sync_run")),
    )
    op.create_index(
        "ix_vendor_sync_run_vendor_started_at",
        "vendor_sync_run",
        ["vendor", "started_at"],
        unique=False,
    )
    op.create_table(
        "vendor_integration",
        sa.Column("vendor", sa.String(length=64), nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column(
            "type",
            sa.Enum("SCRAPER", "API", name="integrationtype", native_enum=False),
            nullable=False,
        ),
        sa.Column("scraper_path", sa.Text(), nullable=True),
        sa.Column("api_base_url", sa.Text(), nullable=True),
        sa.Column(
            "api_auth_type",
            sa.Enum("NONE", "BEARER", "HEADER", name="apiauthtype", native_enum=False),
            nullable=False,
        ),
        sa.Column("api_auth_header", sa.String(length=255), nullable=True),
        sa.Column("api_key", sa.Text(), nullable=True),
        sa.Column("last_test_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("last_test_ok", sa.Boolean(), nullable=True),
        sa.Column("last_test_error", sa.Text(), nullable=True),
        sa.Column("meta", sa.JSON(), nullable=False),
        sa.PrimaryKeyConstraint("vendor", name=op.f("pk_vendor_integration")),
    )


def downgrade() -> None:
    op.drop_table("vendor_integration")
    op.drop_index("ix_vendor_sync_run_vendor_started_at", table_name="vendor_sync_run")
    op.drop_table("vendor_sync_run")
    op.drop_table("vendor_sync_state")
    op.drop_table("vendor_catalog_item")
