"""Vendor-agnostic canonical product representation.

Products are immutable value objects. Variants form a tagged union keyed by
``kind``: each category has exactly one flat variant struct, see
``CATEGORY_VARIANT_KIND``.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field, fields, is_dataclass
from datetime import datetime
from enum import Enum
from typing import ClassVar

from catalogsync.domain.model.enums import (
    Category,
    FrameFit,
    PhotoAngle,
    SourceConfidence,
    Usage,
    VariantKind,
)

type JsonValue = None | bool | int | float | str | list[JsonValue] | dict[str, JsonValue]


@dataclass(frozen=True, slots=True)
class VendorRef:
    slug: str
    name: str | None = None


@dataclass(frozen=True, slots=True)
class Price:
    amount: float
    currency: str


@dataclass(frozen=True, slots=True)
class Color:
    name: str
    swatch: str | None = None
    finish: str | None = None


@dataclass(frozen=True, slots=True)
class FrameMeasurements:
    lens_width: float | None = None
    lens_height: float | None = None
    frame_width: float | None = None
    bridge: float | None = None
    temple: float | None = None

    @property
    def is_empty(self) -> bool:
        return all(getattr(self, f.name) is None for f in fields(self))


@dataclass(frozen=True, slots=True)
class LegacySize:
    """Lens/bridge/temple triple printed on older frame listings (e.g. 46-22-145)."""

    lens: float
    bridge: float
    temple: float


@dataclass(frozen=True, slots=True, kw_only=True)
class FrameVariant:
    KIND: ClassVar[VariantKind] = VariantKind.FRAME

    id: str
    sku: str | None = None
    barcode: str | None = None
    notes: str | None = None
    attributes: Mapping[str, object] = field(default_factory=dict)
    size_label: str | None = None
    measurements: FrameMeasurements | None = None
    legacy_size: LegacySize | None = None
    fit: FrameFit | None = None
    usage: Usage | None = None
    color: Color | None = None
    polarized: bool | None = None
    clip_compatible: bool | None = None

    @property
    def kind(self) -> VariantKind:
        return self.KIND

    @property
    def is_sized(self) -> bool:
        if self.legacy_size is not None:
            return True
        return self.measurements is not None and not self.measurements.is_empty


@dataclass(frozen=True, slots=True, kw_only=True)
class LensVariant:
    KIND: ClassVar[VariantKind] = VariantKind.LENS

    id: str
    sku: str | None = None
    barcode: str | None = None
    notes: str | None = None
    attributes: Mapping[str, object] = field(default_factory=dict)
    index: str | None = None
    coating: str | None = None
    diameter: float | None = None
    base_curve: float | None = None

    @property
    def kind(self) -> VariantKind:
        return self.KIND


@dataclass(frozen=True, slots=True, kw_only=True)
class ContactVariant:
    KIND: ClassVar[VariantKind] = VariantKind.CONTACT

    id: str
    sku: str | None = None
    barcode: str | None = None
    notes: str | None = None
    attributes: Mapping[str, object] = field(default_factory=dict)
    power: float | None = None
    cylinder: float | None = None
    axis: float | None = None
    base_curve: float | None = None
    diameter: float | None = None
    pack_size: int | None = None

    @property
    def kind(self) -> VariantKind:
        return self.KIND


@dataclass(frozen=True, slots=True, kw_only=True)
class AccessoryVariant:
    KIND: ClassVar[VariantKind] = VariantKind.ACCESSORY

    id: str
    sku: str | None = None
    barcode: str | None = None
    notes: str | None = None
    attributes: Mapping[str, object] = field(default_factory=dict)
    color: Color | None = None
    size_label: str | None = None
    pack_size: int | None = None

    @property
    def kind(self) -> VariantKind:
        return self.KIND


type Variant = FrameVariant | LensVariant | ContactVariant | AccessoryVariant

VARIANT_TYPES: dict[VariantKind, type[Variant]] = {
    VariantKind.FRAME: FrameVariant,
    VariantKind.LENS: LensVariant,
    VariantKind.CONTACT: ContactVariant,
    VariantKind.ACCESSORY: AccessoryVariant,
}


@dataclass(frozen=True, slots=True, kw_only=True)
class Photo:
    url: str
    label: str | None = None
    angle: PhotoAngle | None = None
    colorway_name: str | None = None
    is_hero: bool = False


@dataclass(frozen=True, slots=True, kw_only=True)
class SourceDescriptor:
    supplier: str | None = None
    confidence: SourceConfidence = SourceConfidence.UNLINKED
    url: str | None = None
    last_synced_at: datetime | None = None


@dataclass(frozen=True, slots=True, kw_only=True)
class CanonicalProduct:
    vendor: VendorRef
    catalog_id: str
    category: Category
    brand: str | None = None
    model: str | None = None
    name: str | None = None
    variants: tuple[Variant, ...] = ()
    photos: tuple[Photo, ...] = ()
    source: SourceDescriptor = field(default_factory=SourceDescriptor)
    price: Price | None = None
    tags: tuple[str, ...] = ()
    collections: tuple[str, ...] = ()
    description_html: str | None = None
    story_html: str | None = None
    extras: Mapping[str, object] = field(default_factory=dict)

    @property
    def display_name(self) -> str:
        return self.name or self.model or self.catalog_id

    def to_payload(self) -> dict[str, JsonValue]:
        """Return the JSON-compatible normalized payload stored alongside the raw record."""

        payload = to_json(self)
        if not isinstance(payload, dict):  # pragma: no cover - dataclasses always map to dicts
            raise TypeError("Product payload must serialise to an object")
        return payload


def to_json(value: object) -> JsonValue:
    """Convert domain value objects into plain JSON structures.

    Variants carry their ``kind`` tag so the union can be told apart once stored.
    """

    if value is None or isinstance(value, bool | int | float):
        return value
    if isinstance(value, Enum):
        return str(value.value)
    if isinstance(value, str):
        return value
    if isinstance(value, datetime):
        return value.isoformat()
    if is_dataclass(value) and not isinstance(value, type):
        data: dict[str, JsonValue] = {}
        kind = getattr(value, "KIND", None)
        if isinstance(kind, VariantKind):
            data["kind"] = kind.value
        for item in fields(value):
            data[item.name] = to_json(getattr(value, item.name))
        return data
    if isinstance(value, Mapping):
        return {str(key): to_json(item) for key, item in value.items()}
    if isinstance(value, list | tuple | set | frozenset):
        return [to_json(item) for item in value]
    raise TypeError(f"Unsupported value in product payload: {type(value).__name__}")
