from __future__ import annotations

import asyncio
import json
from typing import TYPE_CHECKING

from catalogsync.adapters.fetchers import ScraperFileFetcher, default_fetchers
from catalogsync.adapters.fetchers.api import ApiCatalogFetcher
from catalogsync.domain.model import IntegrationType, VendorIntegration
from catalogsync.domain.sync import JsonFileSourceLoader
from tests.helpers.catalog import moscot_frame

if TYPE_CHECKING:
    from pathlib import Path


def test_scraper_fetcher_reads_integration_path(tmp_path: Path) -> None:
    path = tmp_path / "moscot.json"
    path.write_text(json.dumps([moscot_frame("LEMTOSH")]), encoding="utf-8")
    integration = VendorIntegration(
        vendor="moscot", name="MOSCOT", type=IntegrationType.SCRAPER, scraper_path=str(path)
    )
    fetcher = ScraperFileFetcher(JsonFileSourceLoader(environ={}))

    batch = asyncio.run(fetcher(integration))

    assert batch.source == str(path.resolve())
    assert batch.items[0]["catalogId"] == "LEMTOSH"


def test_scraper_fetcher_prefers_override(tmp_path: Path) -> None:
    stored = tmp_path / "stored.json"
    stored.write_text(json.dumps([moscot_frame("LEMTOSH")]), encoding="utf-8")
    override = tmp_path / "override.json"
    override.write_text(json.dumps([moscot_frame("CHARLIE")]), encoding="utf-8")
    integration = VendorIntegration(
        vendor="moscot", name="MOSCOT", type=IntegrationType.SCRAPER, scraper_path=str(stored)
    )

    batch = asyncio.run(
        ScraperFileFetcher(JsonFileSourceLoader(environ={}))(
            integration, source_override=str(override)
        )
    )

    assert batch.items[0]["catalogId"] == "CHARLIE"


def test_default_fetchers_cover_every_integration_type() -> None:
    fetchers = default_fetchers()

    assert set(fetchers) == set(IntegrationType)
    assert isinstance(fetchers[IntegrationType.SCRAPER], ScraperFileFetcher)
    assert isinstance(fetchers[IntegrationType.API], ApiCatalogFetcher)
