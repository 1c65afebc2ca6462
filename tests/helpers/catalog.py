"""Reusable raw records, in-memory persistence fakes and fetchers for catalog tests."""

from __future__ import annotations

import asyncio
import copy
import threading
from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta
from typing import TYPE_CHECKING, Any, Literal

from catalogsync.domain.model import (
    CanonicalProduct,
    Category,
    Color,
    FrameVariant,
    LegacySize,
    Photo,
    SourceDescriptor,
    VendorRef,
)
from catalogsync.domain.ports import CatalogRepositories, RawBatch

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable, Mapping, Sequence
    from types import TracebackType
    from uuid import UUID

    from catalogsync.domain.model import (
        VendorCatalogItem,
        VendorIntegration,
        VendorSyncRun,
        VendorSyncState,
    )

ITEM_MUTATIONS = frozenset({"items.add", "items.update_payload", "items.delete_many"})
STATE_MUTATIONS = frozenset({"states.upsert"})


def moscot_frame(
    catalog_id: str = "LEMTOSH",
    *,
    name: str | None = None,
    color: str = "Black",
    sizes: Sequence[tuple[float, float, float]] = ((46, 24, 145), (49, 24, 145)),
) -> dict[str, Any]:
    """Raw MOSCOT scraper record of a sized optical frame."""

    return {
        "catalogId": catalog_id,
        "category": "Frames",
        "brand": "MOSCOT",
        "model": catalog_id.title(),
        "name": name or f"The {catalog_id.title()}",
        "collections": ["Originals"],
        "tags": ["acetate", "round"],
        "photos": [
            {
                "url": f"https://cdn.example.com/{catalog_id}/front.jpg",
                "angle": "front",
                "isHero": True,
            },
            {"url": f"https://cdn.example.com/{catalog_id}/side.jpg", "angle": "side"},
        ],
        "source": {
            "supplier": "MOSCOT",
            "url": f"https://moscot.example.com/{catalog_id.lower()}",
            "lastSyncISO": "2025-01-05T10:00:00Z",
            "confidence": "verified",
        },
        "price": {"amount": "320.00", "currency": "USD"},
        "variants": [
            {
                "id": f"{catalog_id}-{lens}",
                "sku": f"{catalog_id}-{color.upper()}-{lens}",
                "sizeLabel": str(lens),
                "fit": "average",
                "usage": "optical",
                "size": {"lens": lens, "bridge": bridge, "temple": temple},
                "color": {"name": color},
            }
            for lens, bridge, temple in sizes
        ],
    }


def moscot_accessory(catalog_id: str = "CLEANING-KIT") -> dict[str, Any]:
    return {
        "catalogId": catalog_id,
        "category": "Care",
        "name": "Lens Cleaning Kit",
        "variants": [{"sku": f"{catalog_id}-1", "packSize": "2"}],
    }


def canonical_frame(catalog_id: str = "AURORA", *, color: str = "Tortoise") -> dict[str, Any]:
    """Raw record in the canonical partner-feed shape."""

    return {
        "catalogId": catalog_id,
        "category": "Frames",
        "brand": "Partner",
        "name": f"{catalog_id.title()} Optical",
        "variants": [
            {
                "kind": "frame",
                "id": f"{catalog_id}-50",
                "sku": f"{catalog_id}-50",
                "legacySize": {"lens": 50, "bridge": 20, "temple": 145},
                "color": {"name": color},
                "usage": "optical",
            }
        ],
        "photos": [{"url": f"https://partner.example.com/{catalog_id}.jpg", "isHero": True}],
        "source": {"supplier": "Partner", "confidence": "manual"},
        "price": {"amount": 180, "currency": "eur"},
    }


def canonical_contact(catalog_id: str = "DAILY-1") -> dict[str, Any]:
    return {
        "catalogId": catalog_id,
        "category": "Contacts",
        "name": "Daily Comfort",
        "variants": [
            {"kind": "contact", "id": f"{catalog_id}-m125", "power": -1.25, "packSize": 30},
            {"kind": "contact", "id": f"{catalog_id}-m150", "power": -1.5, "packSize": 30},
        ],
    }


def frame_product(
    catalog_id: str = "LEMTOSH",
    *,
    vendor: str = "moscot",
    color: str = "Black",
    lenses: Sequence[float] = (46, 49),
    tags: Sequence[str] = ("acetate", "round"),
    synced_at: datetime | None = None,
) -> CanonicalProduct:
    """Canonical frame product built directly, without an adapter."""

    return CanonicalProduct(
        vendor=VendorRef(slug=vendor, name=vendor.upper()),
        catalog_id=catalog_id,
        category=Category.FRAMES,
        name=f"The {catalog_id.title()}",
        variants=tuple(
            FrameVariant(
                id=f"{catalog_id}-{lens:g}",
                sku=f"{catalog_id}-{color.upper()}-{lens:g}",
                legacy_size=LegacySize(lens=lens, bridge=24, temple=145),
                color=Color(name=color),
            )
            for lens in lenses
        ),
        photos=(Photo(url=f"https://cdn.example.com/{catalog_id}.jpg", is_hero=True),),
        source=SourceDescriptor(supplier=vendor.upper(), last_synced_at=synced_at),
        tags=tuple(tags),
    )


# Persistence ------------------------------------------------------------------


class FakeStoreError(RuntimeError):
    pass


@dataclass
class InMemoryCatalogStore:
    """Committed state shared by every fake unit of work created for it."""

    items: dict[tuple[str, str], VendorCatalogItem] = field(default_factory=dict)
    states: dict[str, VendorSyncState] = field(default_factory=dict)
    runs: dict[UUID, VendorSyncRun] = field(default_factory=dict)
    integrations: dict[str, VendorIntegration] = field(default_factory=dict)
    calls: list[str] = field(default_factory=list)
    fail_on: set[str] = field(default_factory=set)
    deleted: list[list[str]] = field(default_factory=list)
    # held by each open unit of work, like a database serializing transactions
    guard: threading.RLock = field(default_factory=threading.RLock, repr=False, compare=False)

    def record(self, call: str) -> None:
        self.calls.append(call)
        if call in self.fail_on:
            raise FakeStoreError(f"{call} failed")

    def mutation_calls(self) -> list[str]:
        return [call for call in self.calls if call in ITEM_MUTATIONS | STATE_MUTATIONS]

    def snapshot(self) -> tuple[Any, ...]:
        return copy.deepcopy((self.items, self.states, self.runs, self.integrations))

    def restore(self, snapshot: tuple[Any, ...]) -> None:
        self.items, self.states, self.runs, self.integrations = copy.deepcopy(snapshot)

    def hashes(self, vendor: str) -> dict[str, str]:
        return {cid: item.hash for (slug, cid), item in self.items.items() if slug == vendor}


class FakeCatalogItemRepository:
    def __init__(self, store: InMemoryCatalogStore) -> None:
        self.store = store

    def add(self, entity: VendorCatalogItem) -> None:
        self.store.record("items.add")
        self.store.items[(entity.vendor, entity.catalog_id)] = entity

    def hashes_for_vendor(self, vendor: str) -> dict[str, str]:
        return self.store.hashes(vendor)

    def list_for_vendor(self, vendor: str) -> list[VendorCatalogItem]:
        return sorted(
            (item for (slug, _), item in self.store.items.items() if slug == vendor),
            key=lambda item: item.catalog_id,
        )

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
        self.store.record("items.update_payload")
        item = self.store.items.get((vendor, catalog_id))
        if item is None:
            raise LookupError(catalog_id)
        item.refresh(
            raw_payload=dict(raw_payload),
            normalized_payload=dict(normalized_payload),
            hash=hash,
            at=at,
        )

    def delete_many(self, vendor: str, catalog_ids: Iterable[str]) -> int:
        ids = list(catalog_ids)
        self.store.record("items.delete_many")
        self.store.deleted.append(ids)
        removed = 0
        for catalog_id in ids:
            if self.store.items.pop((vendor, catalog_id), None) is not None:
                removed += 1
        return removed


class FakeSyncStateRepository:
    def __init__(self, store: InMemoryCatalogStore) -> None:
        self.store = store

    def get(self, vendor: str) -> VendorSyncState | None:
        return self.store.states.get(vendor)

    def upsert(self, state: VendorSyncState) -> VendorSyncState:
        self.store.record("states.upsert")
        self.store.states[state.vendor] = state
        return state

    def lock(self, vendor: str) -> None:
        self.store.record("states.lock")

    def list(self) -> list[VendorSyncState]:
        return [self.store.states[vendor] for vendor in sorted(self.store.states)]


class FakeSyncRunRepository:
    def __init__(self, store: InMemoryCatalogStore) -> None:
        self.store = store

    def add(self, entity: VendorSyncRun) -> None:
        self.store.record("runs.add")
        self.store.runs[entity.id] = entity

    def get(self, run_id: UUID) -> VendorSyncRun | None:
        return self.store.runs.get(run_id)

    def _matching(self, vendor: str | None) -> list[VendorSyncRun]:
        runs = [run for run in self.store.runs.values() if vendor is None or run.vendor == vendor]
        return sorted(runs, key=lambda run: (-run.started_at.timestamp(), str(run.id)))

    def list_for_vendor(
        self, vendor: str | None, *, offset: int = 0, limit: int = 20
    ) -> list[VendorSyncRun]:
        return self._matching(vendor)[offset : offset + limit]

    def count_for_vendor(self, vendor: str | None) -> int:
        return len(self._matching(vendor))


class FakeIntegrationRepository:
    def __init__(self, store: InMemoryCatalogStore) -> None:
        self.store = store

    def add(self, entity: VendorIntegration) -> None:
        self.store.integrations[entity.vendor] = entity

    def get(self, vendor: str) -> VendorIntegration | None:
        return self.store.integrations.get(vendor)

    def list_configured(self) -> list[VendorIntegration]:
        return [self.store.integrations[vendor] for vendor in sorted(self.store.integrations)]

    def save(self, integration: VendorIntegration) -> None:
        self.store.record("integrations.save")
        self.store.integrations[integration.vendor] = integration


class FakeUnitOfWork:
    """Uncommitted changes are discarded when the block exits."""

    def __init__(self, store: InMemoryCatalogStore) -> None:
        self.store = store
        self.commits = 0
        self._repositories = CatalogRepositories(
            items=FakeCatalogItemRepository(store),
            states=FakeSyncStateRepository(store),
            runs=FakeSyncRunRepository(store),
            integrations=FakeIntegrationRepository(store),
        )
        self._committed: tuple[Any, ...] | None = None

    @property
    def repositories(self) -> CatalogRepositories:
        return self._repositories

    def __enter__(self) -> FakeUnitOfWork:
        self.store.guard.acquire()
        self._committed = self.store.snapshot()
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_value: BaseException | None,
        traceback: TracebackType | None,
    ) -> Literal[False]:
        try:
            self.rollback()
        finally:
            self.store.guard.release()
        return False

    def commit(self) -> None:
        self.commits += 1
        self._committed = self.store.snapshot()

    def rollback(self) -> None:
        if self._committed is not None:
            self.store.restore(self._committed)


def fake_unit_of_work_factory(store: InMemoryCatalogStore) -> Callable[[], FakeUnitOfWork]:
    def factory() -> FakeUnitOfWork:
        return FakeUnitOfWork(store)

    return factory


# Clocks and fetchers ---------------------------------------------------------


class SteppingClock:
    """Deterministic clock advancing by ``step`` on every call."""

    def __init__(
        self,
        start: datetime | None = None,
        *,
        step: timedelta = timedelta(milliseconds=250),
    ) -> None:
        self.current = start or datetime(2025, 1, 6, 9, 0, tzinfo=UTC)
        self.step = step

    def __call__(self) -> datetime:
        value = self.current
        self.current += self.step
        return value


@dataclass
class ScriptedFetcher:
    """Async fetcher returning canned batches per vendor, or failing on cue."""

    batches: dict[str, list[dict[str, Any]]] = field(default_factory=dict)
    delays: dict[str, float] = field(default_factory=dict)
    errors: dict[str, Exception] = field(default_factory=dict)
    calls: list[str] = field(default_factory=list)

    async def __call__(
        self,
        integration: VendorIntegration,
        *,
        source_override: str | None = None,
    ) -> RawBatch:
        vendor = integration.vendor
        self.calls.append(vendor)
        delay = self.delays.get(vendor)
        if delay:
            await asyncio.sleep(delay)
        error = self.errors.get(vendor)
        if error is not None:
            raise error
        return RawBatch(
            items=list(self.batches.get(vendor, [])),
            source=source_override or f"scripted://{vendor}",
        )
