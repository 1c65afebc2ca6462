"""Invariant checks applied to every adapter output."""

from __future__ import annotations

from typing import TYPE_CHECKING

from catalogsync.domain.model import CATEGORY_VARIANT_KIND, FrameVariant

if TYPE_CHECKING:
    from catalogsync.domain.model import CanonicalProduct


def validate_product(product: CanonicalProduct) -> list[str]:
    """Return every invariant violation of ``product``; empty when valid."""

    issues: list[str] = []
    if not product.catalog_id.strip():
        issues.append("catalog_id must not be blank")
    if not product.vendor.slug.strip():
        issues.append("vendor slug must not be blank")

    if not product.variants:
        issues.append("product must have at least one variant")

    expected_kind = CATEGORY_VARIANT_KIND[product.category]
    seen_ids: set[str] = set()
    seen_skus: set[str] = set()
    for position, variant in enumerate(product.variants):
        label = variant.id or f"#{position}"
        if variant.kind is not expected_kind:
            issues.append(
                f"variant {label} is a {variant.kind} variant in category {product.category}"
            )
        if not variant.id.strip():
            issues.append(f"variant #{position} has a blank id")
        elif variant.id in seen_ids:
            issues.append(f"duplicate variant id {variant.id}")
        seen_ids.add(variant.id)
        if variant.sku:
            if variant.sku in seen_skus:
                issues.append(f"duplicate variant sku {variant.sku}")
            seen_skus.add(variant.sku)
        if isinstance(variant, FrameVariant) and not variant.is_sized:
            issues.append(f"frame variant {label} has neither a legacy size nor measurements")

    heroes = 0
    for position, photo in enumerate(product.photos):
        if not photo.url.strip():
            issues.append(f"photo #{position} has a blank url")
        heroes += photo.is_hero
    if heroes > 1:
        issues.append(f"{heroes} photos are marked as hero")

    return issues
