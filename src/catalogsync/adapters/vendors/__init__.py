"""Vendor normalization adapters shipped with catalogsync."""

from __future__ import annotations

from typing import TYPE_CHECKING

from catalogsync.domain.model import VendorRef
from catalogsync.domain.normalization import AdapterRegistry, normalize_slug

from .canonical import CANONICAL_VENDOR, CanonicalFeedAdapter
from .moscot import MOSCOT_VENDOR, MoscotAdapter

if TYPE_CHECKING:
    from collections.abc import Iterable


def build_default_registry(canonical_vendors: Iterable[str] = ()) -> AdapterRegistry:
    """Registry with the shipped adapters plus one canonical feed per extra slug."""

    registry = AdapterRegistry([MoscotAdapter(), CanonicalFeedAdapter()])
    for slug in canonical_vendors:
        key = normalize_slug(slug)
        if not key or key in registry:
            continue
        registry.register(CanonicalFeedAdapter(vendor=VendorRef(slug=key, name=slug.strip())))
    return registry


__all__ = [
    "CANONICAL_VENDOR",
    "MOSCOT_VENDOR",
    "CanonicalFeedAdapter",
    "MoscotAdapter",
    "build_default_registry",
]
