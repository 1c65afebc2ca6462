"""Where a sync run gets its raw batch from."""

from __future__ import annotations

import json
import logging
import os
import re
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING, Any, Protocol, cast

from catalogsync.domain.errors import SourceLoadError
from catalogsync.domain.ports.fetching import RawBatch

if TYPE_CHECKING:
    from collections.abc import Sequence

    from catalogsync.domain.model import VendorIntegration

log = logging.getLogger(__name__)

INJECTED_LABEL = "(injected)"


@dataclass(frozen=True, slots=True)
class InjectedItems:
    """Raw records handed over by the caller."""

    items: Sequence[Mapping[str, Any]]
    label: str = INJECTED_LABEL


@dataclass(frozen=True, slots=True)
class SourcePath:
    """A JSON file to read the batch from (first candidate path)."""

    path: str


@dataclass(frozen=True, slots=True)
class LiveAdapter:
    """Fetch through the vendor's configured integration."""

    override: str | None = None


type SyncSource = InjectedItems | SourcePath | LiveAdapter


class SourceLoader(Protocol):
    def __call__(
        self,
        vendor: str,
        *,
        explicit: str | None = None,
        integration: VendorIntegration | None = None,
    ) -> RawBatch: ...


def env_path_variable(vendor: str) -> str:
    """Environment variable naming a vendor's catalog file, e.g. ``CATALOGSYNC_MOSCOT_PATH``."""

    return f"CATALOGSYNC_{re.sub(r'[^A-Z0-9]+', '_', vendor.upper()).strip('_')}_PATH"


def parse_catalog_array(payload: object) -> list[dict[str, Any]]:
    """Check that ``payload`` is a list of objects each carrying a non-empty ``catalogId``."""

    if not isinstance(payload, list):
        raise ValueError(f"expected a JSON array, got {type(payload).__name__}")
    items: list[dict[str, Any]] = []
    for index, entry in enumerate(cast(list[object], payload)):
        if not isinstance(entry, dict):
            raise ValueError(f"item {index} is not an object")
        record = cast(dict[str, Any], entry)
        catalog_id = record.get("catalogId")
        if not isinstance(catalog_id, str) or not catalog_id:
            raise ValueError(f"item {index} has no catalogId")
        items.append(record)
    return items


@dataclass(slots=True)
class JsonFileSourceLoader:
    """Read a vendor batch from the first readable candidate JSON file.

    Candidates, in order: the explicit path, ``CATALOGSYNC_<SLUG>_PATH``, the
    integration's ``scraper_path`` and ``<default_dir>/<slug>.catalog.json``.
    """

    environ: Mapping[str, str] = field(default_factory=lambda: os.environ)
    default_dir: Path | None = None

    def candidate_paths(
        self,
        vendor: str,
        *,
        explicit: str | None = None,
        integration: VendorIntegration | None = None,
    ) -> list[Path]:
        candidates: list[Path] = []

        def push(value: str | Path | None) -> None:
            if not value:
                return
            resolved = Path(value).expanduser().resolve()
            if resolved not in candidates:
                candidates.append(resolved)

        push(explicit)
        push(self.environ.get(env_path_variable(vendor), "").strip() or None)
        if integration is not None:
            push(integration.scraper_path)
        if self.default_dir is not None:
            push(self.default_dir / f"{vendor}.catalog.json")
        return candidates

    def __call__(
        self,
        vendor: str,
        *,
        explicit: str | None = None,
        integration: VendorIntegration | None = None,
    ) -> RawBatch:
        candidates = self.candidate_paths(vendor, explicit=explicit, integration=integration)
        if not candidates:
            raise SourceLoadError(f"No catalog source configured for '{vendor}'")

        tried: list[str] = []
        last_error: Exception | None = None
        for candidate in candidates:
            tried.append(str(candidate))
            try:
                with candidate.open(encoding="utf-8") as handle:
                    items = parse_catalog_array(json.load(handle))
            except (OSError, ValueError) as exc:
                log.debug("Catalog candidate %s unusable: %s", candidate, exc)
                last_error = exc
                continue
            log.info("Loaded %d %s record(s) from %s", len(items), vendor, candidate)
            return RawBatch(items=items, source=str(candidate))

        raise SourceLoadError(
            f"Unable to read {vendor} catalog: {last_error}", tried=tuple(tried)
        ) from last_error
