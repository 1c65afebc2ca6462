"""Map canonical-shaped partner records onto the domain value objects."""

from __future__ import annotations

from typing import TYPE_CHECKING, assert_never

from catalogsync.domain.model import (
    AccessoryVariant,
    CanonicalProduct,
    Color,
    ContactVariant,
    FrameMeasurements,
    FrameVariant,
    LegacySize,
    LensVariant,
    Photo,
    Price,
    SourceDescriptor,
    Variant,
)

from .schema import (
    AccessoryVariantPayload,
    ContactVariantPayload,
    FrameVariantPayload,
    LensVariantPayload,
)

if TYPE_CHECKING:
    from catalogsync.domain.model import VendorRef

    from .schema import AnyVariantPayload, CanonicalRecord, ColorPayload


def _color(payload: ColorPayload | None) -> Color | None:
    if payload is None:
        return None
    return Color(name=payload.name, swatch=payload.swatch, finish=payload.finish)


def _variant(payload: AnyVariantPayload) -> Variant:
    match payload:
        case FrameVariantPayload():
            measurements = (
                FrameMeasurements(**payload.measurements.model_dump())
                if payload.measurements is not None
                else None
            )
            legacy = (
                LegacySize(**payload.legacy_size.model_dump())
                if payload.legacy_size is not None
                else None
            )
            return FrameVariant(
                id=payload.id,
                sku=payload.sku,
                barcode=payload.barcode,
                notes=payload.notes,
                attributes=dict(payload.attributes),
                size_label=payload.size_label,
                measurements=(
                    None if measurements is None or measurements.is_empty else measurements
                ),
                legacy_size=legacy,
                fit=payload.fit,
                usage=payload.usage,
                color=_color(payload.color),
                polarized=payload.polarized,
                clip_compatible=payload.clip_compatible,
            )
        case LensVariantPayload():
            return LensVariant(
                id=payload.id,
                sku=payload.sku,
                barcode=payload.barcode,
                notes=payload.notes,
                attributes=dict(payload.attributes),
                index=payload.index,
                coating=payload.coating,
                diameter=payload.diameter,
                base_curve=payload.base_curve,
            )
        case ContactVariantPayload():
            return ContactVariant(
                id=payload.id,
                sku=payload.sku,
                barcode=payload.barcode,
                notes=payload.notes,
                attributes=dict(payload.attributes),
                power=payload.power,
                cylinder=payload.cylinder,
                axis=payload.axis,
                base_curve=payload.base_curve,
                diameter=payload.diameter,
                pack_size=payload.pack_size,
            )
        case AccessoryVariantPayload():
            return AccessoryVariant(
                id=payload.id,
                sku=payload.sku,
                barcode=payload.barcode,
                notes=payload.notes,
                attributes=dict(payload.attributes),
                color=_color(payload.color),
                size_label=payload.size_label,
                pack_size=payload.pack_size,
            )
        case _:
            assert_never(payload)


def translate_record(record: CanonicalRecord, *, vendor: VendorRef) -> CanonicalProduct:
    return CanonicalProduct(
        vendor=vendor,
        catalog_id=record.catalog_id.strip(),
        category=record.category,
        brand=record.brand,
        model=record.model,
        name=record.name,
        variants=tuple(_variant(variant) for variant in record.variants),
        photos=tuple(
            Photo(
                url=photo.url,
                label=photo.label,
                angle=photo.angle,
                colorway_name=photo.colorway_name,
                is_hero=photo.is_hero,
            )
            for photo in record.photos
        ),
        source=SourceDescriptor(
            supplier=record.source.supplier or vendor.name,
            confidence=record.source.confidence,
            url=record.source.url,
            last_synced_at=record.source.last_synced_at,
        ),
        price=(
            Price(amount=record.price.amount, currency=record.price.currency.upper())
            if record.price is not None
            else None
        ),
        tags=tuple(record.tags),
        collections=tuple(record.collections),
        description_html=record.description_html,
        story_html=record.story_html,
        extras=dict(record.extras),
    )
