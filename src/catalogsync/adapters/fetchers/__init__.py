"""Raw batch fetchers keyed by integration type."""

from __future__ import annotations

from typing import TYPE_CHECKING

from catalogsync.domain.model import IntegrationType

from .api import (
    ApiCatalogFetcher,
    CatalogFetchError,
    auth_headers,
    catalog_url,
    is_catalog_page,
    parse_page,
)
from .scraper import ScraperFileFetcher

if TYPE_CHECKING:
    from catalogsync.config import CacheConfig
    from catalogsync.domain.ports import RawBatchFetcher
    from catalogsync.domain.sync.sources import SourceLoader


def default_fetchers(
    loader: SourceLoader | None = None, *, cache: CacheConfig | None = None
) -> dict[IntegrationType, RawBatchFetcher]:
    scraper = ScraperFileFetcher(loader) if loader is not None else ScraperFileFetcher()
    return {
        IntegrationType.SCRAPER: scraper,
        IntegrationType.API: ApiCatalogFetcher(cache=cache),
    }


__all__ = [
    "ApiCatalogFetcher",
    "CatalogFetchError",
    "ScraperFileFetcher",
    "auth_headers",
    "catalog_url",
    "default_fetchers",
    "is_catalog_page",
    "parse_page",
]
