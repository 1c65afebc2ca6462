"""MOSCOT eyewear scraper feed adapter."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from catalogsync.domain.model import IntegrationType, VendorRef

from .schema import MoscotProduct
from .translator import MOSCOT_VENDOR, translate_product

if TYPE_CHECKING:
    from catalogsync.domain.model import CanonicalProduct


@dataclass(frozen=True, slots=True)
class MoscotAdapter:
    vendor: VendorRef = MOSCOT_VENDOR
    input_model: type[MoscotProduct] = MoscotProduct
    supported_integrations: frozenset[IntegrationType] = field(
        default_factory=lambda: frozenset({IntegrationType.SCRAPER})
    )

    def normalize(self, record: MoscotProduct) -> CanonicalProduct:
        return translate_product(record, vendor=self.vendor)


__all__ = ["MOSCOT_VENDOR", "MoscotAdapter", "MoscotProduct", "translate_product"]
