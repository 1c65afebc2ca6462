"""Catalog pulls from partner APIs publishing ``GET <base>/catalog``.

The endpoint returns either a bare JSON array of records or an envelope
``{"items": [...], "next": "<url or null>"}``; ``next`` links are followed.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from logging import getLogger
from typing import TYPE_CHECKING, Any, cast

import httpx

from catalogsync.adapters.http_resilience import ResilientClient
from catalogsync.config import vendor_api_resilience
from catalogsync.domain.model import ApiAuthType
from catalogsync.domain.ports import RawBatch

if TYPE_CHECKING:
    from collections.abc import Callable

    from catalogsync.config import CacheConfig, ResilienceConfig
    from catalogsync.domain.model import VendorIntegration
    from catalogsync.domain.ports import RawBatchFetcher

log = getLogger(__name__)

CATALOG_PATH = "catalog"
DEFAULT_KEY_HEADER = "X-API-Key"
MAX_PAGES = 100


class CatalogFetchError(RuntimeError):
    """Raised when a partner catalog cannot be fetched or has an unexpected shape."""

    def __init__(self, message: str, *, vendor: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.vendor = vendor
        self.status_code = status_code


def _default_client_factory(config: ResilienceConfig) -> ResilientClient:
    return ResilientClient(config)


def catalog_url(base_url: str) -> str:
    return f"{base_url.rstrip('/')}/{CATALOG_PATH}"


def auth_headers(integration: VendorIntegration) -> dict[str, str]:
    if integration.api_auth_type is ApiAuthType.NONE:
        return {}
    if not integration.api_key:
        raise CatalogFetchError(
            f"{integration.api_auth_type} auth for '{integration.vendor}' has no API key",
            vendor=integration.vendor,
        )
    if integration.api_auth_type is ApiAuthType.BEARER:
        return {"Authorization": f"Bearer {integration.api_key}"}
    return {integration.api_auth_header or DEFAULT_KEY_HEADER: integration.api_key}


def parse_page(payload: object, *, vendor: str) -> tuple[list[dict[str, Any]], str | None]:
    """Split one response body into its records and the next page link."""

    next_link: str | None = None
    if isinstance(payload, dict):
        envelope = cast(dict[str, Any], payload)
        records = envelope.get("items")
        raw_next = envelope.get("next")
        if raw_next is not None and not isinstance(raw_next, str):
            raise CatalogFetchError("'next' must be a string or null", vendor=vendor)
        next_link = raw_next or None
    else:
        records = payload
    if not isinstance(records, list):
        raise CatalogFetchError(
            "Catalog response must be a JSON array or an object with an 'items' array",
            vendor=vendor,
        )
    items: list[dict[str, Any]] = []
    for index, record in enumerate(cast(list[object], records)):
        if not isinstance(record, dict):
            raise CatalogFetchError(f"Catalog record {index} is not an object", vendor=vendor)
        items.append(cast(dict[str, Any], record))
    return items, next_link


def is_catalog_page(payload: object) -> bool:
    """Only well-formed catalog pages go into the response cache."""

    if isinstance(payload, dict):
        return isinstance(cast(dict[str, Any], payload).get("items"), list)
    return isinstance(payload, list)


@dataclass(slots=True)
class ApiCatalogFetcher:
    client_factory: Callable[[ResilienceConfig], ResilientClient] = field(
        default=_default_client_factory
    )
    max_pages: int = MAX_PAGES
    cache: CacheConfig | None = None

    async def __call__(
        self,
        integration: VendorIntegration,
        *,
        source_override: str | None = None,
    ) -> RawBatch:
        vendor = integration.vendor
        base_url = source_override or integration.api_base_url
        if not base_url:
            raise CatalogFetchError(f"No API base URL configured for '{vendor}'", vendor=vendor)

        first_url = catalog_url(base_url)
        resilience = vendor_api_resilience(
            vendor,
            base_url=base_url,
            headers=auth_headers(integration),
            cache=replace(self.cache, should_cache=is_catalog_page) if self.cache else None,
        )

        items: list[dict[str, Any]] = []
        next_url: str | None = first_url
        pages = 0
        async with self.client_factory(resilience) as client:
            while next_url is not None:
                pages += 1
                if pages > self.max_pages:
                    raise CatalogFetchError(
                        f"Catalog for '{vendor}' exceeded {self.max_pages} pages", vendor=vendor
                    )
                payload = await self._get_json(client, next_url, vendor=vendor)
                page_items, link = parse_page(payload, vendor=vendor)
                items.extend(page_items)
                next_url = str(httpx.URL(next_url).join(link)) if link else None

        log.info(
            "Fetched %d %s record(s) from %s in %d page(s)", len(items), vendor, first_url, pages
        )
        return RawBatch(items=items, source=first_url)

    async def _get_json(self, client: ResilientClient, url: str, *, vendor: str) -> object:
        try:
            response = await client.get(url)
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            status = exc.response.status_code
            log.error("Catalog API for '%s' answered %s on %s", vendor, status, url)
            raise CatalogFetchError(
                f"Catalog API for '{vendor}' answered HTTP {status}",
                vendor=vendor,
                status_code=status,
            ) from exc
        except httpx.HTTPError as exc:
            log.error("Catalog API request for '%s' failed: %s", vendor, exc)
            raise CatalogFetchError(
                f"Catalog API request for '{vendor}' failed: {exc}", vendor=vendor
            ) from exc

        try:
            return response.json()
        except ValueError as exc:
            raise CatalogFetchError(
                f"Catalog API for '{vendor}' returned invalid JSON", vendor=vendor
            ) from exc


if TYPE_CHECKING:
    _fetcher_check: RawBatchFetcher = ApiCatalogFetcher()
