"""Raw batches produced by vendor scrapers as JSON files on disk."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from catalogsync.domain.sync.sources import JsonFileSourceLoader

if TYPE_CHECKING:
    from catalogsync.domain.model import VendorIntegration
    from catalogsync.domain.ports import RawBatch, RawBatchFetcher
    from catalogsync.domain.sync.sources import SourceLoader


@dataclass(slots=True)
class ScraperFileFetcher:
    """Read the scraper output on a worker thread.

    A caller-side timeout cannot interrupt the read: the thread runs until the file
    is loaded, and ``asyncio.run`` waits for it before returning.
    """

    loader: SourceLoader = field(default_factory=JsonFileSourceLoader)

    async def __call__(
        self,
        integration: VendorIntegration,
        *,
        source_override: str | None = None,
    ) -> RawBatch:
        return await asyncio.to_thread(
            self.loader,
            integration.vendor,
            explicit=source_override,
            integration=integration,
        )


if TYPE_CHECKING:
    _fetcher_check: RawBatchFetcher = ScraperFileFetcher()
