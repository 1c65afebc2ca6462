"""Pydantic models for partner feeds that already publish the canonical product shape."""

from __future__ import annotations

from datetime import datetime
from typing import Annotated, Any, Literal

from pydantic import BaseModel, ConfigDict, Field, model_validator

from catalogsync.domain.model import (
    CATEGORY_VARIANT_KIND,
    Category,
    FrameFit,
    PhotoAngle,
    SourceConfidence,
    Usage,
)


class CanonicalBaseModel(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class ColorPayload(CanonicalBaseModel):
    name: str = Field(min_length=1)
    swatch: str | None = None
    finish: str | None = None


class MeasurementsPayload(CanonicalBaseModel):
    lens_width: float | None = Field(default=None, alias="lensWidth")
    lens_height: float | None = Field(default=None, alias="lensHeight")
    frame_width: float | None = Field(default=None, alias="frameWidth")
    bridge: float | None = None
    temple: float | None = None


class LegacySizePayload(CanonicalBaseModel):
    lens: float
    bridge: float
    temple: float


class VariantPayload(CanonicalBaseModel):
    id: str = Field(min_length=1)
    sku: str | None = None
    barcode: str | None = None
    notes: str | None = None
    attributes: dict[str, Any] = Field(default_factory=dict)


class FrameVariantPayload(VariantPayload):
    kind: Literal["frame"]
    size_label: str | None = Field(default=None, alias="sizeLabel")
    measurements: MeasurementsPayload | None = None
    legacy_size: LegacySizePayload | None = Field(default=None, alias="legacySize")
    fit: FrameFit | None = None
    usage: Usage | None = None
    color: ColorPayload | None = None
    polarized: bool | None = None
    clip_compatible: bool | None = Field(default=None, alias="clipCompatible")

    @model_validator(mode="after")
    def _requires_sizing(self) -> FrameVariantPayload:
        measured = self.measurements is not None and any(
            value is not None for value in self.measurements.model_dump().values()
        )
        if self.legacy_size is None and not measured:
            raise ValueError("frame variants need legacySize or measurements")
        return self


class LensVariantPayload(VariantPayload):
    kind: Literal["lens"]
    index: str | None = None
    coating: str | None = None
    diameter: float | None = None
    base_curve: float | None = Field(default=None, alias="baseCurve")


class ContactVariantPayload(VariantPayload):
    kind: Literal["contact"]
    power: float | None = None
    cylinder: float | None = None
    axis: float | None = None
    base_curve: float | None = Field(default=None, alias="baseCurve")
    diameter: float | None = None
    pack_size: int | None = Field(default=None, alias="packSize")


class AccessoryVariantPayload(VariantPayload):
    kind: Literal["accessory"]
    color: ColorPayload | None = None
    size_label: str | None = Field(default=None, alias="sizeLabel")
    pack_size: int | None = Field(default=None, alias="packSize")


AnyVariantPayload = Annotated[
    FrameVariantPayload | LensVariantPayload | ContactVariantPayload | AccessoryVariantPayload,
    Field(discriminator="kind"),
]


class PhotoPayload(CanonicalBaseModel):
    url: str = Field(min_length=1)
    label: str | None = None
    angle: PhotoAngle | None = None
    colorway_name: str | None = Field(default=None, alias="colorwayName")
    is_hero: bool = Field(default=False, alias="isHero")


class SourcePayload(CanonicalBaseModel):
    supplier: str | None = None
    confidence: SourceConfidence = SourceConfidence.UNLINKED
    url: str | None = None
    last_synced_at: datetime | None = Field(default=None, alias="lastSyncedAt")


class PricePayload(CanonicalBaseModel):
    amount: float
    currency: str = Field(min_length=3, max_length=3)


class CanonicalRecord(CanonicalBaseModel):
    catalog_id: str = Field(alias="catalogId", min_length=1)
    category: Category
    brand: str | None = None
    model: str | None = None
    name: str | None = None
    variants: list[AnyVariantPayload] = Field(min_length=1)
    photos: list[PhotoPayload] = Field(default_factory=list)
    source: SourcePayload = Field(default_factory=SourcePayload)
    price: PricePayload | None = None
    tags: list[str] = Field(default_factory=list)
    collections: list[str] = Field(default_factory=list)
    description_html: str | None = Field(default=None, alias="descriptionHtml")
    story_html: str | None = Field(default=None, alias="storyHtml")
    extras: dict[str, Any] = Field(default_factory=dict)

    @model_validator(mode="after")
    def _consistent(self) -> CanonicalRecord:
        expected = CATEGORY_VARIANT_KIND[self.category]
        for variant in self.variants:
            if variant.kind != expected:
                raise ValueError(
                    f"variant {variant.id} is a {variant.kind} variant in category {self.category}"
                )
        ids = [variant.id for variant in self.variants]
        if len(set(ids)) != len(ids):
            raise ValueError("variant ids must be unique")
        skus = [variant.sku for variant in self.variants if variant.sku]
        if len(set(skus)) != len(skus):
            raise ValueError("variant SKUs must be unique")
        if sum(photo.is_hero for photo in self.photos) > 1:
            raise ValueError("at most one photo may be the hero")
        return self
