from __future__ import annotations

import pytest

from catalogsync.adapters.vendors import (
    CANONICAL_VENDOR,
    MOSCOT_VENDOR,
    CanonicalFeedAdapter,
    build_default_registry,
)
from catalogsync.domain.model import Category, ContactVariant, FrameVariant, IntegrationType
from catalogsync.domain.normalization import (
    AdapterRegistry,
    InputValidationError,
    normalize_item,
)
from tests.helpers.catalog import canonical_contact, canonical_frame


def test_frame_feed_normalizes(registry: AdapterRegistry) -> None:
    product = normalize_item(registry, "canonical", canonical_frame("AURORA"))

    assert product.vendor == CANONICAL_VENDOR
    assert product.category is Category.FRAMES
    (variant,) = product.variants
    assert isinstance(variant, FrameVariant)
    assert variant.is_sized
    assert variant.measurements is None
    assert product.price is not None
    assert product.price.currency == "EUR"
    assert product.source.supplier == "Partner"


def test_contact_feed_normalizes(registry: AdapterRegistry) -> None:
    product = normalize_item(registry, "canonical", canonical_contact("DAILY-1"))

    assert product.category is Category.CONTACTS
    assert all(isinstance(variant, ContactVariant) for variant in product.variants)
    powers = [variant.power for variant in product.variants if isinstance(variant, ContactVariant)]
    assert powers == [-1.25, -1.5]
    assert product.source.supplier == CANONICAL_VENDOR.name


def test_variant_kind_must_match_category(registry: AdapterRegistry) -> None:
    raw = canonical_contact()
    raw["category"] = "Lenses"

    with pytest.raises(InputValidationError, match="variant in category"):
        normalize_item(registry, "canonical", raw)


def test_frame_variant_needs_sizing(registry: AdapterRegistry) -> None:
    raw = canonical_frame()
    raw["variants"][0].pop("legacySize")
    raw["variants"][0]["measurements"] = {}

    with pytest.raises(InputValidationError, match="legacySize or measurements"):
        normalize_item(registry, "canonical", raw)


def test_unknown_variant_kind_is_rejected(registry: AdapterRegistry) -> None:
    raw = canonical_frame()
    raw["variants"][0]["kind"] = "hinge"

    with pytest.raises(InputValidationError):
        normalize_item(registry, "canonical", raw)


def test_two_hero_photos_are_rejected(registry: AdapterRegistry) -> None:
    raw = canonical_frame()
    raw["photos"].append({"url": "https://partner.example.com/other.jpg", "isHero": True})

    with pytest.raises(InputValidationError, match="hero"):
        normalize_item(registry, "canonical", raw)


def test_default_registry_adds_partner_feeds() -> None:
    registry = build_default_registry([" Acme ", "moscot", "", "acme"])

    assert registry.slugs == ("acme", "canonical", "moscot")
    partner = registry.get("acme")
    assert isinstance(partner, CanonicalFeedAdapter)
    assert partner.vendor.name == "Acme"
    assert registry.get("moscot").vendor == MOSCOT_VENDOR
    assert IntegrationType.API in partner.supported_integrations


def test_partner_feed_stamps_its_own_vendor() -> None:
    registry = build_default_registry(["acme"])

    product = normalize_item(registry, "acme", canonical_frame())

    assert product.vendor.slug == "acme"
    assert product.source.supplier == "Partner"
