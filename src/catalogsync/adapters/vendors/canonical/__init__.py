"""Pass-through adapter for partner feeds publishing canonical products."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Final

from catalogsync.domain.model import IntegrationType, VendorRef

from .schema import CanonicalRecord
from .translator import translate_record

if TYPE_CHECKING:
    from catalogsync.domain.model import CanonicalProduct

CANONICAL_VENDOR: Final[VendorRef] = VendorRef(slug="canonical", name="Canonical feed")


@dataclass(frozen=True, slots=True)
class CanonicalFeedAdapter:
    """Reusable for any vendor whose API already speaks the canonical shape."""

    vendor: VendorRef = CANONICAL_VENDOR
    input_model: type[CanonicalRecord] = CanonicalRecord
    supported_integrations: frozenset[IntegrationType] = field(
        default_factory=lambda: frozenset({IntegrationType.API, IntegrationType.SCRAPER})
    )

    def normalize(self, record: CanonicalRecord) -> CanonicalProduct:
        return translate_record(record, vendor=self.vendor)


__all__ = ["CANONICAL_VENDOR", "CanonicalFeedAdapter", "CanonicalRecord", "translate_record"]
