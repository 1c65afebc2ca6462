from __future__ import annotations

import dataclasses
import json
from dataclasses import dataclass
from typing import TYPE_CHECKING

import pytest

from catalogsync.adapters.vendors import MoscotAdapter
from catalogsync.domain.errors import (
    SourceLoadError,
    SyncPersistenceError,
    VendorNotConfiguredError,
)
from catalogsync.domain.model import (
    IntegrationType,
    LensVariant,
    RunStatus,
    SyncMode,
    VendorCatalogItem,
    VendorIntegration,
)
from catalogsync.domain.normalization import (
    AdapterRegistry,
    ExecutionError,
    NormalizationError,
    OutputValidationError,
)
from catalogsync.domain.sync import (
    InjectedItems,
    JsonFileSourceLoader,
    LiveAdapter,
    SourcePath,
    SyncOrchestrator,
    SyncRequest,
)
from tests.helpers.catalog import (
    FakeStoreError,
    InMemoryCatalogStore,
    ScriptedFetcher,
    SteppingClock,
    fake_unit_of_work_factory,
    moscot_accessory,
    moscot_frame,
)

if TYPE_CHECKING:
    from pathlib import Path
    from uuid import UUID

    from catalogsync.adapters.vendors.moscot import MoscotProduct
    from catalogsync.domain.model import CanonicalProduct, VendorSyncRun
    from catalogsync.domain.ports import RawBatchFetcher


def _seed(store: InMemoryCatalogStore, vendor: str, hashes: dict[str, str]) -> None:
    for catalog_id, item_hash in hashes.items():
        store.items[(vendor, catalog_id)] = VendorCatalogItem(
            vendor=vendor,
            catalog_id=catalog_id,
            raw_payload={"catalogId": catalog_id},
            normalized_payload={"catalog_id": catalog_id},
            hash=item_hash,
        )


def _orchestrator(
    store: InMemoryCatalogStore,
    registry: AdapterRegistry,
    clock: SteppingClock,
    *,
    loader: JsonFileSourceLoader | None = None,
    fetchers: dict[IntegrationType, RawBatchFetcher] | None = None,
) -> SyncOrchestrator:
    return SyncOrchestrator(
        registry=registry,
        unit_of_work_factory=fake_unit_of_work_factory(store),
        source_loader=loader or JsonFileSourceLoader(environ={}),
        fetchers=fetchers,
        clock=clock,
    )


def _request(mode: SyncMode, *items: dict[str, object]) -> SyncRequest:
    return SyncRequest(vendor="moscot", mode=mode, source=InjectedItems(items=list(items)))


def test_apply_updates_changed_item_and_bulk_deletes_missing_ones(
    store: InMemoryCatalogStore, registry: AdapterRegistry, clock: SteppingClock
) -> None:
    _seed(store, "moscot", {"LEMTOSH": "hash-a", "CHARLIE": "hash-b"})

    summary = _orchestrator(store, registry, clock).sync(
        _request(SyncMode.APPLY, moscot_frame("LEMTOSH"))
    )

    assert (summary.created, summary.updated, summary.removed, summary.unchanged) == (0, 1, 1, 0)
    assert store.mutation_calls() == [
        "items.update_payload",
        "items.delete_many",
        "states.upsert",
    ]
    assert store.deleted == [["CHARLIE"]]
    assert set(store.hashes("moscot")) == {"LEMTOSH"}
    assert store.hashes("moscot")["LEMTOSH"] != "hash-a"

    state = store.states["moscot"]
    assert state.total_items == 1
    assert state.last_hash == summary.hash
    assert state.last_source == "(injected)"
    assert state.last_run_by == "service"


def test_apply_persists_raw_and_normalized_payloads(
    store: InMemoryCatalogStore, registry: AdapterRegistry, clock: SteppingClock
) -> None:
    raw = moscot_frame("MILTZEN")

    summary = _orchestrator(store, registry, clock).sync(_request(SyncMode.APPLY, raw))

    item = store.items[("moscot", "MILTZEN")]
    assert summary.created == 1
    assert item.raw_payload == raw
    assert item.normalized_payload["catalog_id"] == "MILTZEN"
    assert item.normalized_payload["category"] == "Frames"
    assert item.normalized_payload["variants"][0]["kind"] == "frame"


def test_dry_run_issues_no_catalog_or_state_writes(
    store: InMemoryCatalogStore, registry: AdapterRegistry, clock: SteppingClock
) -> None:
    _seed(store, "moscot", {"LEMTOSH": "hash-a", "CHARLIE": "hash-b"})

    summary = _orchestrator(store, registry, clock).sync(
        _request(SyncMode.DRY_RUN, moscot_frame("LEMTOSH"), moscot_frame("MILTZEN"))
    )

    assert summary.dry_run
    assert (summary.created, summary.updated, summary.removed) == (1, 1, 1)
    assert store.mutation_calls() == []
    assert store.hashes("moscot") == {"LEMTOSH": "hash-a", "CHARLIE": "hash-b"}
    assert store.states == {}


def test_dry_run_is_idempotent(
    store: InMemoryCatalogStore, registry: AdapterRegistry, clock: SteppingClock
) -> None:
    orchestrator = _orchestrator(store, registry, clock)
    request = _request(SyncMode.DRY_RUN, moscot_frame("LEMTOSH"), moscot_frame("MILTZEN"))

    first = orchestrator.sync(request)
    second = orchestrator.sync(request)

    volatile = {"runId", "finishedAt"}
    assert {k: v for k, v in first.to_dict().items() if k not in volatile} == {
        k: v for k, v in second.to_dict().items() if k not in volatile
    }
    assert store.mutation_calls() == []


def test_second_apply_reports_everything_unchanged(
    store: InMemoryCatalogStore, registry: AdapterRegistry, clock: SteppingClock
) -> None:
    orchestrator = _orchestrator(store, registry, clock)
    request = _request(SyncMode.APPLY, moscot_frame("LEMTOSH"), moscot_accessory())

    first = orchestrator.sync(request)
    store.calls.clear()
    second = orchestrator.sync(request)

    assert first.created == 2
    assert (second.created, second.updated, second.removed, second.unchanged) == (0, 0, 0, 2)
    assert second.hash == first.hash
    assert store.mutation_calls() == ["states.upsert"]


def test_invalid_items_are_dropped_and_counted(
    store: InMemoryCatalogStore, registry: AdapterRegistry, clock: SteppingClock
) -> None:
    broken = moscot_frame("BROKEN")
    broken["variants"] = []

    summary = _orchestrator(store, registry, clock).sync(
        _request(SyncMode.DRY_RUN, moscot_frame("LEMTOSH"), broken, {"catalogId": ""})
    )

    assert summary.total == 1
    assert summary.dropped == 2
    assert {rejection.index for rejection in summary.rejections} == {1, 2}


def test_duplicates_keep_last_occurrence(
    store: InMemoryCatalogStore, registry: AdapterRegistry, clock: SteppingClock
) -> None:
    summary = _orchestrator(store, registry, clock).sync(
        _request(
            SyncMode.APPLY,
            moscot_frame("LEMTOSH", color="Black"),
            moscot_frame("LEMTOSH", color="Tortoise"),
        )
    )

    item = store.items[("moscot", "LEMTOSH")]
    assert summary.duplicates == 1
    assert summary.total == 1
    assert item.raw_payload["variants"][0]["color"] == {"name": "Tortoise"}


def test_runs_are_audited(
    store: InMemoryCatalogStore, registry: AdapterRegistry, clock: SteppingClock
) -> None:
    summary = _orchestrator(store, registry, clock).sync(
        SyncRequest(
            vendor="MOSCOT",
            mode=SyncMode.DRY_RUN,
            source=InjectedItems(items=[moscot_frame()]),
            actor="ops@example.com",
        )
    )

    run = store.runs[summary.run_id]
    assert run.vendor == "moscot"
    assert run.status is RunStatus.SUCCESS
    assert run.mode is SyncMode.DRY_RUN
    assert run.actor == "ops@example.com"
    assert run.diff_summary is not None
    assert run.diff_summary.created == 1
    assert run.duration_ms == summary.duration_ms
    assert run.duration_ms is not None
    assert run.duration_ms > 0


def test_failed_apply_rolls_back_and_records_failure(
    store: InMemoryCatalogStore, registry: AdapterRegistry, clock: SteppingClock
) -> None:
    _seed(store, "moscot", {"LEMTOSH": "hash-a", "CHARLIE": "hash-b"})
    store.fail_on.add("items.delete_many")

    with pytest.raises(SyncPersistenceError):
        _orchestrator(store, registry, clock).sync(
            _request(SyncMode.APPLY, moscot_frame("LEMTOSH"), moscot_frame("MILTZEN"))
        )

    assert store.hashes("moscot") == {"LEMTOSH": "hash-a", "CHARLIE": "hash-b"}
    assert store.states == {}
    (run,) = store.runs.values()
    assert run.status is RunStatus.FAILED
    assert run.error is not None
    assert "items.delete_many failed" in run.error
    assert run.finished_at is not None


@dataclass(frozen=True)
class BreakingMoscotAdapter(MoscotAdapter):
    """MOSCOT adapter that mishandles one catalog id."""

    broken_id: str = "BROKEN"
    crash: bool = False

    def normalize(self, record: MoscotProduct) -> CanonicalProduct:
        product = super().normalize(record)
        if product.catalog_id != self.broken_id:
            return product
        if self.crash:
            raise KeyError("size")
        return dataclasses.replace(product, variants=(LensVariant(id=f"{self.broken_id}-1"),))


@pytest.mark.parametrize(
    ("crash", "expected"),
    [(False, OutputValidationError), (True, ExecutionError)],
    ids=["contract-violation", "adapter-crash"],
)
def test_adapter_failure_aborts_apply_without_writes(
    store: InMemoryCatalogStore,
    clock: SteppingClock,
    crash: bool,  # noqa: FBT001
    expected: type[NormalizationError],
) -> None:
    _seed(store, "moscot", {"LEMTOSH": "hash-a", "CHARLIE": "hash-b"})
    registry = AdapterRegistry([BreakingMoscotAdapter(crash=crash)])

    with pytest.raises(expected) as excinfo:
        _orchestrator(store, registry, clock).sync(
            _request(SyncMode.APPLY, moscot_frame("LEMTOSH"), moscot_frame("BROKEN"))
        )

    assert excinfo.value.catalog_id == "BROKEN"
    assert store.mutation_calls() == []
    assert store.hashes("moscot") == {"LEMTOSH": "hash-a", "CHARLIE": "hash-b"}
    assert store.states == {}
    (run,) = store.runs.values()
    assert run.status is RunStatus.FAILED
    assert run.error is not None
    assert "BROKEN" in run.error
    assert run.finished_at is not None


def test_failure_to_finalize_success_marks_run_failed(
    store: InMemoryCatalogStore, registry: AdapterRegistry, clock: SteppingClock
) -> None:
    orchestrator = _orchestrator(store, registry, clock)
    finalize = orchestrator._finalize  # noqa: SLF001

    def flaky_finalize(run_id: UUID, status: RunStatus, **fields: object) -> VendorSyncRun:
        if status is RunStatus.SUCCESS:
            raise FakeStoreError("connection reset")
        return finalize(run_id, status, **fields)  # type: ignore[arg-type]

    orchestrator._finalize = flaky_finalize  # type: ignore[method-assign]  # noqa: SLF001

    with pytest.raises(FakeStoreError):
        orchestrator.sync(_request(SyncMode.APPLY, moscot_frame("LEMTOSH")))

    assert store.hashes("moscot").keys() == {"LEMTOSH"}
    (run,) = store.runs.values()
    assert run.status is RunStatus.FAILED
    assert run.error == "connection reset"


def test_unknown_vendor_fails_run(
    store: InMemoryCatalogStore, registry: AdapterRegistry, clock: SteppingClock
) -> None:
    with pytest.raises(VendorNotConfiguredError):
        _orchestrator(store, registry, clock).sync(
            SyncRequest(vendor="rayban", mode=SyncMode.APPLY, source=InjectedItems(items=[]))
        )

    (run,) = store.runs.values()
    assert run.vendor == "rayban"
    assert run.status is RunStatus.FAILED
    assert store.mutation_calls() == []


def test_missing_source_fails_run(
    store: InMemoryCatalogStore, registry: AdapterRegistry, clock: SteppingClock, tmp_path: Path
) -> None:
    missing = (tmp_path / "missing.json").resolve()

    with pytest.raises(SourceLoadError) as excinfo:
        _orchestrator(store, registry, clock).sync(
            SyncRequest(vendor="moscot", mode=SyncMode.DRY_RUN, source=SourcePath(str(missing)))
        )

    assert str(missing) in str(excinfo.value)
    (run,) = store.runs.values()
    assert run.status is RunStatus.FAILED


def test_source_path_is_read_and_reported(
    store: InMemoryCatalogStore, registry: AdapterRegistry, clock: SteppingClock, tmp_path: Path
) -> None:
    path = tmp_path / "moscot.json"
    path.write_text(json.dumps([moscot_frame("LEMTOSH"), moscot_frame("MILTZEN")]))

    summary = _orchestrator(store, registry, clock).sync(
        SyncRequest(vendor="moscot", mode=SyncMode.DRY_RUN, source=SourcePath(str(path)))
    )

    assert summary.total == 2
    assert summary.source_path == str(path.resolve())
    assert store.runs[summary.run_id].source_path == str(path.resolve())


def test_live_source_uses_integration_fetcher(
    store: InMemoryCatalogStore, registry: AdapterRegistry, clock: SteppingClock
) -> None:
    store.integrations["moscot"] = VendorIntegration(
        vendor="moscot", name="MOSCOT", type=IntegrationType.SCRAPER
    )
    fetcher = ScriptedFetcher(batches={"moscot": [moscot_frame()]})

    summary = _orchestrator(
        store, registry, clock, fetchers={IntegrationType.SCRAPER: fetcher}
    ).sync(SyncRequest(vendor="moscot", mode=SyncMode.DRY_RUN, source=LiveAdapter()))

    assert fetcher.calls == ["moscot"]
    assert summary.source_path == "scripted://moscot"
    assert summary.total == 1


def test_live_fetch_failure_becomes_source_error(
    store: InMemoryCatalogStore, registry: AdapterRegistry, clock: SteppingClock
) -> None:
    store.integrations["moscot"] = VendorIntegration(
        vendor="moscot", name="MOSCOT", type=IntegrationType.SCRAPER
    )
    fetcher = ScriptedFetcher(errors={"moscot": ConnectionError("feed offline")})

    with pytest.raises(SourceLoadError, match="feed offline"):
        _orchestrator(store, registry, clock, fetchers={IntegrationType.SCRAPER: fetcher}).sync(
            SyncRequest(vendor="moscot", mode=SyncMode.APPLY, source=LiveAdapter())
        )

    (run,) = store.runs.values()
    assert run.status is RunStatus.FAILED
    assert run.error is not None
    assert "feed offline" in run.error


def test_summary_serializes_with_camel_case_keys(
    store: InMemoryCatalogStore, registry: AdapterRegistry, clock: SteppingClock
) -> None:
    summary = _orchestrator(store, registry, clock).sync(
        _request(SyncMode.DRY_RUN, moscot_frame())
    )

    payload = summary.to_dict()
    assert payload["dryRun"] is True
    assert payload["sourcePath"] == "(injected)"
    assert payload["status"] == "success"
    assert set(payload) >= {"total", "created", "updated", "removed", "unchanged", "durationMs"}
