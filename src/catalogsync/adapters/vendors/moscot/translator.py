"""Translate MOSCOT scraper records into canonical products.

Free-text vendor values are coerced into the closed canonical sets: unknown
categories become Accessories, ``Sunglasses`` are Frames, unknown photo angles
become ``unknown`` and unrecognised usage or fit values are dropped.
"""

from __future__ import annotations

from datetime import UTC, datetime
from logging import getLogger
from typing import TYPE_CHECKING, Final

from catalogsync.domain.model import (
    AccessoryVariant,
    CanonicalProduct,
    Category,
    Color,
    ContactVariant,
    FrameFit,
    FrameMeasurements,
    FrameVariant,
    LegacySize,
    LensVariant,
    Photo,
    PhotoAngle,
    Price,
    SourceConfidence,
    SourceDescriptor,
    Usage,
    Variant,
    VendorRef,
)
from catalogsync.domain.normalization import InputValidationError

from .schema import MoscotMeasurements, MoscotSize

if TYPE_CHECKING:
    from .schema import MoscotColor, MoscotPhoto, MoscotProduct, MoscotSource, MoscotVariant

log = getLogger(__name__)

MOSCOT_VENDOR: Final[VendorRef] = VendorRef(slug="moscot", name="MOSCOT")

_CATEGORY_ALIASES: Final[dict[str, Category]] = {
    "Frames": Category.FRAMES,
    "Sunglasses": Category.FRAMES,
    "Lenses": Category.LENSES,
    "Contacts": Category.CONTACTS,
    "Accessories": Category.ACCESSORIES,
}
_BOTH_USAGES: Final[frozenset[str]] = frozenset({"optical-sun", "sun-optical"})


def coerce_category(value: str) -> Category:
    return _CATEGORY_ALIASES.get(value.strip(), Category.ACCESSORIES)


def coerce_usage(value: str | None) -> Usage | None:
    if value is None:
        return None
    normalized = value.strip().lower()
    if normalized in _BOTH_USAGES:
        return Usage.BOTH
    try:
        return Usage(normalized)
    except ValueError:
        return None


def coerce_fit(value: str | None) -> FrameFit | None:
    if value is None:
        return None
    try:
        return FrameFit(value.strip().lower())
    except ValueError:
        return None


def coerce_angle(value: str | None) -> PhotoAngle | None:
    if value is None:
        return None
    try:
        return PhotoAngle(value.strip().lower())
    except ValueError:
        return PhotoAngle.UNKNOWN


def coerce_confidence(value: str | None) -> SourceConfidence:
    if value is None:
        return SourceConfidence.UNLINKED
    try:
        return SourceConfidence(value.strip().lower())
    except ValueError:
        return SourceConfidence.UNLINKED


def parse_timestamp(value: str | None) -> datetime | None:
    if not value:
        return None
    try:
        parsed = datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
    except ValueError:
        log.debug("Ignoring unparseable lastSyncISO %r", value)
        return None
    return parsed if parsed.tzinfo else parsed.replace(tzinfo=UTC)


def _color(payload: MoscotColor | None) -> Color | None:
    if payload is None or payload.name is None:
        return None
    return Color(name=payload.name, swatch=payload.swatch, finish=payload.finish)


def _measurements(variant: MoscotVariant) -> FrameMeasurements | None:
    measured = variant.measurements or MoscotMeasurements()
    fallback = variant.size or MoscotSize()
    result = FrameMeasurements(
        lens_width=_first(measured.lens_width, fallback.lens),
        lens_height=measured.lens_height,
        frame_width=measured.frame_width,
        bridge=_first(measured.bridge, fallback.bridge),
        temple=_first(measured.temple, fallback.temple),
    )
    return None if result.is_empty else result


def _first(*values: float | None) -> float | None:
    for value in values:
        if value is not None:
            return value
    return None


def _legacy_size(variant: MoscotVariant) -> LegacySize | None:
    size = variant.size
    if size is None or size.lens is None or size.bridge is None or size.temple is None:
        return None
    return LegacySize(lens=size.lens, bridge=size.bridge, temple=size.temple)


def _variant_id(variant: MoscotVariant, catalog_id: str, index: int) -> str:
    return variant.id or f"{catalog_id}:v{index}"


def _frame_variant(variant: MoscotVariant, catalog_id: str, index: int) -> FrameVariant:
    return FrameVariant(
        id=_variant_id(variant, catalog_id, index),
        sku=variant.sku,
        barcode=variant.barcode,
        notes=variant.notes,
        attributes=dict(variant.attributes or {}),
        size_label=variant.size_label,
        measurements=_measurements(variant),
        legacy_size=_legacy_size(variant),
        fit=coerce_fit(variant.fit),
        usage=coerce_usage(variant.usage),
        color=_color(variant.color),
        polarized=variant.polarized,
        clip_compatible=variant.clip_compatible,
    )


def _accessory_variant(variant: MoscotVariant, catalog_id: str, index: int) -> AccessoryVariant:
    return AccessoryVariant(
        id=_variant_id(variant, catalog_id, index),
        sku=variant.sku,
        barcode=variant.barcode,
        notes=variant.notes,
        attributes=dict(variant.attributes or {}),
        color=_color(variant.color),
        size_label=variant.size_label,
        pack_size=int(variant.pack_size) if variant.pack_size is not None else None,
    )


def _fallback_variant(category: Category, catalog_id: str) -> Variant:
    variant_id = f"{catalog_id}:variant"
    match category:
        case Category.LENSES:
            return LensVariant(id=variant_id)
        case Category.CONTACTS:
            return ContactVariant(id=variant_id)
        case _:
            return AccessoryVariant(id=variant_id)


def _variants(record: MoscotProduct, category: Category) -> tuple[Variant, ...]:
    catalog_id = record.catalog_id
    if category is Category.FRAMES:
        if not record.variants:
            raise _input_error(record, "frame product has no variants to size")
        frames = tuple(
            _frame_variant(variant, catalog_id, index)
            for index, variant in enumerate(record.variants)
        )
        unsized = [frame.id for frame in frames if not frame.is_sized]
        if unsized:
            raise _input_error(record, f"frame variant(s) without sizing: {', '.join(unsized)}")
        return frames
    if category is Category.ACCESSORIES and record.variants:
        return tuple(
            _accessory_variant(variant, catalog_id, index)
            for index, variant in enumerate(record.variants)
        )
    return (_fallback_variant(category, catalog_id),)


def _check_unique(record: MoscotProduct, variants: tuple[Variant, ...]) -> None:
    ids = [variant.id for variant in variants]
    skus = [variant.sku for variant in variants if variant.sku]
    if len(set(ids)) != len(ids):
        raise _input_error(record, "duplicate variant ids")
    if len(set(skus)) != len(skus):
        raise _input_error(record, "duplicate variant SKUs")


def _photos(photos: list[MoscotPhoto]) -> tuple[Photo, ...]:
    result: list[Photo] = []
    hero_taken = False
    for photo in photos:
        url = photo.url.strip()
        if not url:
            continue
        is_hero = bool(photo.is_hero) and not hero_taken
        hero_taken = hero_taken or is_hero
        result.append(
            Photo(
                url=url,
                label=photo.label,
                angle=coerce_angle(photo.angle),
                colorway_name=photo.colorway_name,
                is_hero=is_hero,
            )
        )
    return tuple(result)


def _source(source: MoscotSource | None, vendor: VendorRef) -> SourceDescriptor:
    if source is None:
        return SourceDescriptor(supplier=vendor.name)
    return SourceDescriptor(
        supplier=source.supplier or vendor.name,
        confidence=coerce_confidence(source.confidence),
        url=source.url,
        last_synced_at=parse_timestamp(source.last_sync_iso),
    )


def _price(record: MoscotProduct) -> Price | None:
    price = record.price
    if price is None or price.amount is None or price.currency is None:
        return None
    return Price(amount=price.amount, currency=price.currency)


def _extras(source: MoscotSource | None, vendor: VendorRef) -> dict[str, object]:
    extras: dict[str, object] = {}
    if source is None:
        return extras
    if source.confidence:
        extras["sourceConfidence"] = source.confidence
    if source.supplier and source.supplier != vendor.name:
        extras["supplierLabel"] = source.supplier
    return extras


def _clean(values: list[str]) -> tuple[str, ...]:
    return tuple(value.strip() for value in values if value.strip())


def _input_error(record: MoscotProduct, reason: str) -> InputValidationError:
    return InputValidationError(
        f"Invalid {MOSCOT_VENDOR.slug} record {record.catalog_id}: {reason}",
        vendor=MOSCOT_VENDOR.slug,
        catalog_id=record.catalog_id,
    )


def translate_product(
    record: MoscotProduct, *, vendor: VendorRef = MOSCOT_VENDOR
) -> CanonicalProduct:
    category = coerce_category(record.category)
    variants = _variants(record, category)
    _check_unique(record, variants)
    return CanonicalProduct(
        vendor=vendor,
        catalog_id=record.catalog_id,
        category=category,
        brand=record.brand,
        model=record.model,
        name=record.name,
        variants=variants,
        photos=_photos(record.photos),
        source=_source(record.source, vendor),
        price=_price(record),
        tags=_clean(record.tags),
        collections=_clean(record.collections),
        description_html=record.description_html,
        story_html=record.story_html,
        extras=_extras(record.source, vendor),
    )
