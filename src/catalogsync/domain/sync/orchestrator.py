"""Drive one vendor sync run: normalize, diff, then report or apply.

The run audit record lives in its own units of work, opened before and after
the catalog transaction, so a rolled back apply still leaves a ``failed`` run
behind. Dry-runs never write catalog items or sync state.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any

from catalogsync.domain.diff import DuplicatePolicy, HashedProduct, compute_diff
from catalogsync.domain.errors import (
    SourceLoadError,
    SyncError,
    SyncPersistenceError,
    VendorNotConfiguredError,
)
from catalogsync.domain.hashing import content_hash
from catalogsync.domain.model import (
    DiffCounts,
    RunStatus,
    SyncMode,
    VendorCatalogItem,
    VendorSyncRun,
    VendorSyncState,
)
from catalogsync.domain.normalization import (
    AdapterNotFoundError,
    ItemRejection,
    normalize_batch,
    normalize_slug,
)
from catalogsync.domain.ports.fetching import RawBatch
from catalogsync.domain.sync.locks import VendorLocks
from catalogsync.domain.sync.sources import InjectedItems, LiveAdapter, SourcePath
from catalogsync.domain.sync.state import RunPhase, RunStateMachine

if TYPE_CHECKING:
    from collections.abc import Callable, Mapping, Sequence
    from uuid import UUID

    from catalogsync.domain.diff import DiffResult
    from catalogsync.domain.model import IntegrationType, VendorIntegration
    from catalogsync.domain.normalization import AdapterRegistry
    from catalogsync.domain.ports import CatalogUnitOfWorkFactory, RawBatchFetcher
    from catalogsync.domain.sync.sources import SourceLoader, SyncSource

log = logging.getLogger(__name__)

DEFAULT_ACTOR = "service"


def utcnow() -> datetime:
    return datetime.now(tz=UTC)


@dataclass(frozen=True, slots=True)
class SyncRequest:
    vendor: str
    mode: SyncMode
    source: SyncSource = field(default_factory=LiveAdapter)
    actor: str = DEFAULT_ACTOR

    @property
    def dry_run(self) -> bool:
        return self.mode is SyncMode.DRY_RUN


@dataclass(frozen=True, slots=True)
class RunSummary:
    run_id: UUID
    dry_run: bool
    vendor: str
    source_path: str
    total: int
    created: int
    updated: int
    removed: int
    unchanged: int
    dropped: int
    duplicates: int
    duration_ms: int
    hash: str
    status: RunStatus
    finished_at: datetime
    rejections: tuple[ItemRejection, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        return {
            "runId": str(self.run_id),
            "dryRun": self.dry_run,
            "vendor": self.vendor,
            "sourcePath": self.source_path,
            "total": self.total,
            "created": self.created,
            "updated": self.updated,
            "removed": self.removed,
            "unchanged": self.unchanged,
            "dropped": self.dropped,
            "duplicates": self.duplicates,
            "durationMs": self.duration_ms,
            "hash": self.hash,
            "status": self.status.value,
            "finishedAt": self.finished_at.isoformat(),
            "rejections": [
                {"index": r.index, "catalogId": r.catalog_id, "message": r.message}
                for r in self.rejections
            ],
        }


class SyncOrchestrator:
    """Reconcile a vendor's raw batch with its persisted catalog."""

    def __init__(
        self,
        *,
        registry: AdapterRegistry,
        unit_of_work_factory: CatalogUnitOfWorkFactory,
        source_loader: SourceLoader,
        fetchers: Mapping[IntegrationType, RawBatchFetcher] | None = None,
        locks: VendorLocks | None = None,
        lock_timeout: float | None = None,
        clock: Callable[[], datetime] = utcnow,
        duplicate_policy: DuplicatePolicy = DuplicatePolicy.LAST_WINS,
    ) -> None:
        self._registry = registry
        self._uow_factory = unit_of_work_factory
        self._source_loader = source_loader
        self._fetchers = dict(fetchers or {})
        self._locks = locks or VendorLocks()
        self._lock_timeout = lock_timeout
        self._clock = clock
        self._duplicate_policy = duplicate_policy

    def sync(self, request: SyncRequest) -> RunSummary:
        vendor = normalize_slug(request.vendor)
        run = self._open_run(vendor, request)
        machine = RunStateMachine(f"{vendor}/{run.id}")
        log.info("Sync %s started for '%s' (mode=%s)", run.id, vendor, request.mode)

        source_label = run.source_path
        try:
            try:
                self._registry.get(vendor)
            except AdapterNotFoundError as exc:
                raise VendorNotConfiguredError(vendor) from exc

            raw_batch = self._load(vendor, request.source)
            source_label = raw_batch.source

            machine.advance(RunPhase.NORMALIZING)
            normalized = normalize_batch(self._registry, vendor, raw_batch.items)
            hashed = [
                HashedProduct(product=item.product, hash=content_hash(item.product), raw=item.raw)
                for item in normalized.items
            ]

            machine.advance(RunPhase.DIFFING)
            with self._uow_factory() as uow:
                persisted = uow.repositories.items.hashes_for_vendor(vendor)
            diff = self._diff(hashed, persisted, dropped=normalized.dropped)

            if request.dry_run:
                machine.advance(RunPhase.DRY_RUN_REPORTED)
            else:
                machine.advance(RunPhase.APPLYING)
                diff = self._apply(
                    vendor,
                    hashed,
                    dropped=normalized.dropped,
                    source=source_label,
                    actor=request.actor,
                    started_at=run.started_at,
                )
        except Exception as exc:
            machine.advance(RunPhase.FINISHED)
            self._fail_run(run.id, exc, source_path=source_label)
            raise

        machine.advance(RunPhase.FINISHED)
        try:
            finished = self._finalize(
                run.id,
                RunStatus.SUCCESS,
                total_items=diff.counts.total,
                hash=diff.hash,
                diff_summary=diff.counts,
                source_path=source_label,
            )
        except Exception as exc:
            self._fail_run(run.id, exc, source_path=source_label)
            raise
        summary = RunSummary(
            run_id=run.id,
            dry_run=request.dry_run,
            vendor=vendor,
            source_path=source_label or "",
            total=diff.counts.total,
            created=diff.counts.created,
            updated=diff.counts.updated,
            removed=diff.counts.removed,
            unchanged=diff.counts.unchanged,
            dropped=diff.counts.dropped,
            duplicates=diff.counts.duplicates,
            duration_ms=finished.duration_ms or 0,
            hash=diff.hash,
            status=finished.status,
            finished_at=finished.finished_at or self._clock(),
            rejections=normalized.rejections,
        )
        log.info(
            "Sync %s for '%s' finished: total=%d created=%d updated=%d removed=%d "
            "unchanged=%d dropped=%d dry_run=%s",
            run.id,
            vendor,
            summary.total,
            summary.created,
            summary.updated,
            summary.removed,
            summary.unchanged,
            summary.dropped,
            summary.dry_run,
        )
        return summary

    # Run audit -------------------------------------------------------------

    def _open_run(self, vendor: str, request: SyncRequest) -> VendorSyncRun:
        run = VendorSyncRun(
            vendor=vendor,
            mode=request.mode,
            actor=request.actor,
            source_path=_describe_source(request.source),
            started_at=self._clock(),
        )
        with self._uow_factory() as uow:
            uow.repositories.runs.add(run)
            uow.commit()
        return run

    def _finalize(
        self,
        run_id: UUID,
        status: RunStatus,
        *,
        total_items: int | None = None,
        hash: str | None = None,  # noqa: A002
        diff_summary: DiffCounts | None = None,
        error: str | None = None,
        source_path: str | None = None,
    ) -> VendorSyncRun:
        with self._uow_factory() as uow:
            run = uow.repositories.runs.get(run_id)
            if run is None:
                raise SyncPersistenceError(f"Run {run_id} disappeared before it was finalized")
            run.finish(
                status,
                finished_at=self._clock(),
                total_items=total_items,
                hash=hash,
                diff_summary=diff_summary,
                error=error,
                source_path=source_path,
            )
            uow.commit()
        return run

    def _fail_run(self, run_id: UUID, exc: Exception, *, source_path: str | None) -> None:
        message = str(exc) or type(exc).__name__
        log.error("Sync %s failed: %s", run_id, message)
        try:
            self._finalize(run_id, RunStatus.FAILED, error=message, source_path=source_path)
        except Exception:
            # the original failure is re-raised by the caller
            log.exception("Could not record failure of run %s", run_id)

    # Pipeline steps ----------------------------------------------------------

    def _load(self, vendor: str, source: SyncSource) -> RawBatch:
        match source:
            case InjectedItems(items=items, label=label):
                return RawBatch(items=list(items), source=label)
            case SourcePath(path=path):
                return self._source_loader(vendor, explicit=path)
            case LiveAdapter(override=override):
                return self._fetch_live(vendor, override)

    def _fetch_live(self, vendor: str, override: str | None) -> RawBatch:
        integration = self._integration(vendor)
        if integration is None:
            return self._source_loader(vendor, explicit=override)
        fetcher = self._fetchers.get(integration.type)
        if fetcher is None:
            return self._source_loader(vendor, explicit=override, integration=integration)
        try:
            return asyncio.run(fetcher(integration, source_override=override))
        except SyncError:
            raise
        except Exception as exc:
            raise SourceLoadError(f"Fetching the {vendor} catalog failed: {exc}") from exc

    def _integration(self, vendor: str) -> VendorIntegration | None:
        with self._uow_factory() as uow:
            return uow.repositories.integrations.get(vendor)

    def _diff(
        self,
        hashed: Sequence[HashedProduct],
        persisted: Mapping[str, str],
        *,
        dropped: int,
    ) -> DiffResult:
        return compute_diff(
            hashed,
            persisted,
            duplicate_policy=self._duplicate_policy,
            dropped=dropped,
        )

    def _apply(
        self,
        vendor: str,
        hashed: Sequence[HashedProduct],
        *,
        dropped: int,
        source: str | None,
        actor: str,
        started_at: datetime,
    ) -> DiffResult:
        with self._locks.hold(vendor, timeout=self._lock_timeout):
            try:
                with self._uow_factory() as uow:
                    repositories = uow.repositories
                    # other processes block here until this transaction ends
                    repositories.states.lock(vendor)
                    # another apply may have committed since the dry diff
                    persisted = repositories.items.hashes_for_vendor(vendor)
                    diff = self._diff(hashed, persisted, dropped=dropped)
                    now = self._clock()

                    for decision in diff.created:
                        repositories.items.add(
                            VendorCatalogItem(
                                vendor=vendor,
                                catalog_id=decision.catalog_id,
                                raw_payload=dict(decision.item.raw),
                                normalized_payload=decision.item.product.to_payload(),
                                hash=decision.hash,
                                created_at=now,
                                updated_at=now,
                            )
                        )
                    for decision in diff.updated:
                        repositories.items.update_payload(
                            vendor,
                            decision.catalog_id,
                            raw_payload=dict(decision.item.raw),
                            normalized_payload=decision.item.product.to_payload(),
                            hash=decision.hash,
                            at=now,
                        )
                    if diff.removed:
                        repositories.items.delete_many(vendor, diff.removed)

                    repositories.states.upsert(
                        VendorSyncState(
                            vendor=vendor,
                            last_run_at=now,
                            last_duration_ms=max(
                                0, int((now - started_at).total_seconds() * 1000)
                            ),
                            total_items=diff.counts.total,
                            last_hash=diff.hash,
                            last_source=source,
                            last_error=None,
                            last_run_by=actor,
                            updated_at=now,
                        )
                    )
                    uow.commit()
            except SyncError:
                raise
            except Exception as exc:
                raise SyncPersistenceError(
                    f"Apply for '{vendor}' was rolled back: {exc}"
                ) from exc
        return diff


def _describe_source(source: SyncSource) -> str | None:
    match source:
        case InjectedItems(label=label):
            return label
        case SourcePath(path=path):
            return path
        case LiveAdapter(override=override):
            return override
