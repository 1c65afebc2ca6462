"""Persisted reconciliation records: catalog items, sync state, run audit, integrations."""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any

from catalogsync.domain.errors import RunAlreadyFinalizedError

from .enums import ApiAuthType, IntegrationType, RunStatus, SyncMode

if TYPE_CHECKING:
    from collections.abc import Mapping


def _utcnow() -> datetime:
    return datetime.now(tz=UTC)


@dataclass(frozen=True, slots=True)
class DiffCounts:
    """Per-status counts of a diff, stored as JSON on the run record."""

    total: int = 0
    created: int = 0
    updated: int = 0
    unchanged: int = 0
    removed: int = 0
    dropped: int = 0
    duplicates: int = 0

    def to_dict(self) -> dict[str, int]:
        return {
            "total": self.total,
            "created": self.created,
            "updated": self.updated,
            "unchanged": self.unchanged,
            "removed": self.removed,
            "dropped": self.dropped,
            "duplicates": self.duplicates,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> DiffCounts:
        return cls(**{key: int(data.get(key, 0) or 0) for key in cls.__slots__})


@dataclass(eq=False, kw_only=True)
class VendorCatalogItem:
    """Last accepted raw and normalized record of one vendor product."""

    vendor: str
    catalog_id: str
    raw_payload: dict[str, Any]
    normalized_payload: dict[str, Any]
    hash: str
    id: uuid.UUID = field(default_factory=uuid.uuid4)
    created_at: datetime = field(default_factory=_utcnow)
    updated_at: datetime = field(default_factory=_utcnow)

    def refresh(
        self,
        *,
        raw_payload: dict[str, Any],
        normalized_payload: dict[str, Any],
        hash: str,  # noqa: A002
        at: datetime,
    ) -> None:
        self.raw_payload = raw_payload
        self.normalized_payload = normalized_payload
        self.hash = hash
        self.updated_at = at


@dataclass(eq=False, kw_only=True)
class VendorSyncState:
    """Latest successful apply for a vendor; one row per vendor."""

    vendor: str
    last_run_at: datetime | None = None
    last_duration_ms: int | None = None
    total_items: int = 0
    last_hash: str | None = None
    last_source: str | None = None
    last_error: str | None = None
    last_run_by: str | None = None
    updated_at: datetime = field(default_factory=_utcnow)


@dataclass(eq=False, kw_only=True)
class VendorSyncRun:
    """Audit record of one sync execution.

    Created ``pending`` before any work happens; :meth:`finish` moves it to a
    terminal status exactly once.
    """

    vendor: str
    mode: SyncMode
    actor: str
    source_path: str | None = None
    status: RunStatus = RunStatus.PENDING
    id: uuid.UUID = field(default_factory=uuid.uuid4)
    started_at: datetime = field(default_factory=_utcnow)
    finished_at: datetime | None = None
    duration_ms: int | None = None
    total_items: int | None = None
    hash: str | None = None
    diff_summary: DiffCounts | None = None
    error: str | None = None

    @property
    def dry_run(self) -> bool:
        return self.mode is SyncMode.DRY_RUN

    @property
    def is_pending(self) -> bool:
        return self.status is RunStatus.PENDING

    def finish(
        self,
        status: RunStatus,
        *,
        finished_at: datetime,
        total_items: int | None = None,
        hash: str | None = None,  # noqa: A002
        diff_summary: DiffCounts | None = None,
        error: str | None = None,
        source_path: str | None = None,
    ) -> None:
        if not self.is_pending:
            raise RunAlreadyFinalizedError(
                f"Run {self.id} for '{self.vendor}' is already {self.status.value}"
            )
        if status is RunStatus.PENDING:
            raise ValueError("A run cannot be finished as pending")
        self.status = status
        self.finished_at = finished_at
        self.duration_ms = max(0, int((finished_at - self.started_at).total_seconds() * 1000))
        self.total_items = total_items
        self.hash = hash
        self.diff_summary = diff_summary
        self.error = error
        if source_path is not None:
            self.source_path = source_path


@dataclass(eq=False, kw_only=True)
class VendorIntegration:
    """How a vendor's raw batch is obtained, plus the outcome of its last smoke test."""

    vendor: str
    name: str
    type: IntegrationType
    scraper_path: str | None = None
    api_base_url: str | None = None
    api_auth_type: ApiAuthType = ApiAuthType.NONE
    api_auth_header: str | None = None
    api_key: str | None = None
    last_test_at: datetime | None = None
    last_test_ok: bool | None = None
    last_test_error: str | None = None
    meta: dict[str, Any] = field(default_factory=dict)

    def record_test_outcome(
        self,
        *,
        ok: bool,
        at: datetime,
        error: str | None = None,
        meta: Mapping[str, Any] | None = None,
    ) -> None:
        self.last_test_at = at
        self.last_test_ok = ok
        self.last_test_error = None if ok else error
        self.meta = dict(meta or {})
