"""Application orchestration entry points."""

from __future__ import annotations

from dataclasses import dataclass
from logging import getLogger
from typing import TYPE_CHECKING, Any

from catalogsync.adapters.fetchers import default_fetchers
from catalogsync.adapters.sqlalchemy.unit_of_work import (
    SqlAlchemyCatalogUnitOfWork,
    is_started,
    startup,
)
from catalogsync.adapters.vendors import build_default_registry
from catalogsync.config import get_storage_config, get_sync_config
from catalogsync.domain.diff import DuplicatePolicy
from catalogsync.domain.integration_tests import (
    IntegrationOverrides,
    IntegrationTester,
    IntegrationTestResult,
    TestAllResult,
)
from catalogsync.domain.model import ApiAuthType, IntegrationType, VendorIntegration
from catalogsync.domain.normalization import normalize_batch, normalize_slug
from catalogsync.domain.sync import (
    INJECTED_LABEL,
    InjectedItems,
    JsonFileSourceLoader,
    LiveAdapter,
    SourcePath,
    SyncOrchestrator,
    SyncRequest,
    VendorLocks,
)

if TYPE_CHECKING:
    from collections.abc import Mapping, Sequence

    from catalogsync.config import SyncConfig
    from catalogsync.domain.model import (
        CanonicalProduct,
        SyncMode,
        VendorSyncRun,
        VendorSyncState,
    )
    from catalogsync.domain.normalization import AdapterRegistry, ItemRejection
    from catalogsync.domain.ports import CatalogUnitOfWorkFactory, RawBatchFetcher
    from catalogsync.domain.sync import RunSummary, SourceLoader, SyncSource

log = getLogger(__name__)

DEFAULT_PAGE_SIZE = 20
MAX_PAGE_SIZE = 100
DEFAULT_PREVIEW_SAMPLE = 5

# shared by every orchestrator in the process so applies of one vendor queue up
APPLY_LOCKS = VendorLocks()


@dataclass(frozen=True, slots=True)
class RunPage:
    page: int
    page_size: int
    total_items: int
    has_more: bool
    items: tuple[VendorSyncRun, ...]


@dataclass(frozen=True, slots=True)
class VendorOverview:
    integration: VendorIntegration
    state: VendorSyncState | None


@dataclass(frozen=True, slots=True)
class NormalizationPreview:
    vendor: str
    source: str
    products: tuple[CanonicalProduct, ...]
    rejections: tuple[ItemRejection, ...]


def _default_source_loader() -> JsonFileSourceLoader:
    return JsonFileSourceLoader(default_dir=get_storage_config().resolve_data_dir())


def _unit_of_work_factory(
    unit_of_work_factory: CatalogUnitOfWorkFactory | None,
) -> CatalogUnitOfWorkFactory:
    if unit_of_work_factory is not None:
        return unit_of_work_factory
    if not is_started():
        startup()
    return SqlAlchemyCatalogUnitOfWork


def build_orchestrator(
    *,
    unit_of_work_factory: CatalogUnitOfWorkFactory | None = None,
    registry: AdapterRegistry | None = None,
    source_loader: SourceLoader | None = None,
    fetchers: Mapping[IntegrationType, RawBatchFetcher] | None = None,
    locks: VendorLocks | None = None,
    config: SyncConfig | None = None,
) -> SyncOrchestrator:
    settings = config or get_sync_config()
    loader = source_loader or _default_source_loader()
    if fetchers is None:
        fetchers = default_fetchers(loader, cache=settings.http_cache_config())
    return SyncOrchestrator(
        registry=registry or build_default_registry(settings.canonical_vendors),
        unit_of_work_factory=_unit_of_work_factory(unit_of_work_factory),
        source_loader=loader,
        fetchers=fetchers,
        locks=locks or APPLY_LOCKS,
        lock_timeout=settings.lock_timeout_seconds,
        duplicate_policy=DuplicatePolicy(settings.duplicate_policy),
    )


def build_tester(
    *,
    unit_of_work_factory: CatalogUnitOfWorkFactory | None = None,
    registry: AdapterRegistry | None = None,
    fetchers: Mapping[IntegrationType, RawBatchFetcher] | None = None,
    config: SyncConfig | None = None,
) -> IntegrationTester:
    settings = config or get_sync_config()
    if fetchers is None:
        fetchers = default_fetchers(
            _default_source_loader(), cache=settings.http_cache_config()
        )
    return IntegrationTester(
        registry=registry or build_default_registry(settings.canonical_vendors),
        unit_of_work_factory=_unit_of_work_factory(unit_of_work_factory),
        fetchers=fetchers,
        sample_size=settings.test_sample_size,
        timeout_seconds=settings.test_timeout_seconds,
        concurrency=settings.test_concurrency,
    )


def _source(
    items: Sequence[Mapping[str, Any]] | None, source_path: str | None
) -> SyncSource:
    if items is not None and source_path is not None:
        raise ValueError("Pass either items or source_path, not both")
    if items is not None:
        return InjectedItems(items=items)
    if source_path is not None:
        return SourcePath(path=source_path)
    return LiveAdapter()


def sync_vendor(
    vendor: str,
    mode: SyncMode,
    *,
    items: Sequence[Mapping[str, Any]] | None = None,
    source_path: str | None = None,
    actor: str | None = None,
    orchestrator: SyncOrchestrator | None = None,
    config: SyncConfig | None = None,
) -> RunSummary:
    """Run one dry-run or apply for ``vendor`` using the configured adapters."""

    settings = config or get_sync_config()
    effective = orchestrator or build_orchestrator(config=settings)
    request = SyncRequest(
        vendor=vendor,
        mode=mode,
        source=_source(items, source_path),
        actor=actor or settings.default_actor,
    )
    return effective.sync(request)


def run_integration_test(
    vendor: str,
    overrides: IntegrationOverrides | None = None,
    *,
    tester: IntegrationTester | None = None,
) -> IntegrationTestResult:
    return (tester or build_tester()).test_integration(vendor, overrides)


def run_all_integration_tests(*, tester: IntegrationTester | None = None) -> TestAllResult:
    return (tester or build_tester()).test_all()


def list_runs(
    vendor: str | None = None,
    *,
    page: int = 1,
    page_size: int = DEFAULT_PAGE_SIZE,
    unit_of_work_factory: CatalogUnitOfWorkFactory | None = None,
) -> RunPage:
    """Newest-first page of run audit records, optionally for one vendor."""

    if page < 1:
        raise ValueError("page must be at least 1")
    if not 1 <= page_size <= MAX_PAGE_SIZE:
        raise ValueError(f"page_size must be between 1 and {MAX_PAGE_SIZE}")
    slug = normalize_slug(vendor) if vendor else None
    offset = (page - 1) * page_size
    with _unit_of_work_factory(unit_of_work_factory)() as uow:
        total = uow.repositories.runs.count_for_vendor(slug)
        runs = uow.repositories.runs.list_for_vendor(slug, offset=offset, limit=page_size)
    return RunPage(
        page=page,
        page_size=page_size,
        total_items=total,
        has_more=offset + len(runs) < total,
        items=tuple(runs),
    )


def get_sync_state(
    vendor: str,
    *,
    unit_of_work_factory: CatalogUnitOfWorkFactory | None = None,
) -> VendorSyncState | None:
    with _unit_of_work_factory(unit_of_work_factory)() as uow:
        return uow.repositories.states.get(normalize_slug(vendor))


def vendor_overview(
    *,
    unit_of_work_factory: CatalogUnitOfWorkFactory | None = None,
) -> list[VendorOverview]:
    """Every configured integration next to the vendor's latest sync state."""

    with _unit_of_work_factory(unit_of_work_factory)() as uow:
        integrations = uow.repositories.integrations.list_configured()
        states = {state.vendor: state for state in uow.repositories.states.list()}
    return [
        VendorOverview(integration=integration, state=states.get(integration.vendor))
        for integration in sorted(integrations, key=lambda entry: entry.vendor)
    ]


def preview_normalization(
    vendor: str,
    *,
    items: Sequence[Mapping[str, Any]] | None = None,
    source_path: str | None = None,
    sample: int = DEFAULT_PREVIEW_SAMPLE,
    registry: AdapterRegistry | None = None,
    source_loader: SourceLoader | None = None,
) -> NormalizationPreview:
    """Normalize the first ``sample`` records without touching persistence."""

    if sample < 1:
        raise ValueError("sample must be at least 1")
    slug = normalize_slug(vendor)
    adapters = registry or build_default_registry(get_sync_config().canonical_vendors)
    adapters.get(slug)
    if items is not None:
        raws, label = list(items), INJECTED_LABEL
    else:
        batch = (source_loader or _default_source_loader())(slug, explicit=source_path)
        raws, label = list(batch.items), batch.source
    normalized = normalize_batch(adapters, slug, raws[:sample])
    return NormalizationPreview(
        vendor=slug,
        source=label,
        products=normalized.products,
        rejections=normalized.rejections,
    )


def configure_integration(
    vendor: str,
    *,
    type: IntegrationType,  # noqa: A002
    name: str | None = None,
    scraper_path: str | None = None,
    api_base_url: str | None = None,
    api_auth_type: ApiAuthType = ApiAuthType.NONE,
    api_auth_header: str | None = None,
    api_key: str | None = None,
    unit_of_work_factory: CatalogUnitOfWorkFactory | None = None,
) -> VendorIntegration:
    """Create or replace the integration settings of ``vendor``.

    The outcome of the last smoke test is kept when an integration is updated.
    """

    slug = normalize_slug(vendor)
    if not slug:
        raise ValueError("Vendor slug must not be blank")
    if type is IntegrationType.API and not api_base_url:
        raise ValueError("API integrations need an api_base_url")

    with _unit_of_work_factory(unit_of_work_factory)() as uow:
        existing = uow.repositories.integrations.get(slug)
        integration = VendorIntegration(
            vendor=slug,
            name=name or (existing.name if existing else slug),
            type=type,
            scraper_path=scraper_path,
            api_base_url=api_base_url,
            api_auth_type=api_auth_type,
            api_auth_header=api_auth_header,
            api_key=api_key,
            last_test_at=existing.last_test_at if existing else None,
            last_test_ok=existing.last_test_ok if existing else None,
            last_test_error=existing.last_test_error if existing else None,
            meta=dict(existing.meta) if existing else {},
        )
        uow.repositories.integrations.save(integration)
        uow.commit()
    log.info("Configured %s integration for '%s'", type, slug)
    return integration
