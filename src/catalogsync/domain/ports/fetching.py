"""Ports for fetching raw vendor batches."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

if TYPE_CHECKING:
    from collections.abc import Mapping, Sequence

    from catalogsync.domain.model import VendorIntegration


@dataclass(frozen=True, slots=True)
class RawBatch:
    """Untyped vendor records plus a description of where they came from."""

    items: Sequence[Mapping[str, Any]]
    source: str


@runtime_checkable
class RawBatchFetcher(Protocol):
    """Async callable retrieving the raw batch an integration points at."""

    async def __call__(
        self,
        integration: VendorIntegration,
        *,
        source_override: str | None = None,
    ) -> RawBatch: ...


__all__ = ["RawBatch", "RawBatchFetcher"]
