"""Pydantic models describing the MOSCOT scraper feed records."""

from __future__ import annotations

import math
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator


def _blank_to_none(value: object) -> object:
    if isinstance(value, str):
        stripped = value.strip()
        return stripped or None
    return value


def _to_number(value: object) -> object:
    """Accept numbers and numeric strings; anything unparseable becomes ``None``."""

    if isinstance(value, bool):
        return None
    if isinstance(value, int | float):
        return value if math.isfinite(value) else None
    if isinstance(value, str):
        try:
            parsed = float(value.strip())
        except ValueError:
            return None
        return parsed if math.isfinite(parsed) else None
    return None


class MoscotBaseModel(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class MoscotMeasurements(MoscotBaseModel):
    lens_width: float | None = Field(default=None, alias="lensWidth")
    lens_height: float | None = Field(default=None, alias="lensHeight")
    frame_width: float | None = Field(default=None, alias="frameWidth")
    bridge: float | None = None
    temple: float | None = None

    _numbers = field_validator(
        "lens_width", "lens_height", "frame_width", "bridge", "temple", mode="before"
    )(_to_number)


class MoscotSize(MoscotBaseModel):
    """Legacy ``lens-bridge-temple`` size printed on the product page."""

    lens: float | None = None
    bridge: float | None = None
    temple: float | None = None

    _numbers = field_validator("lens", "bridge", "temple", mode="before")(_to_number)


class MoscotColor(MoscotBaseModel):
    name: str | None = None
    swatch: str | None = None
    finish: str | None = None

    _blanks = field_validator("name", "swatch", "finish", mode="before")(_blank_to_none)


class MoscotVariant(MoscotBaseModel):
    id: str | None = None
    sku: str | None = None
    barcode: str | None = None
    size_label: str | None = Field(default=None, alias="sizeLabel")
    fit: str | None = None
    usage: str | None = None
    polarized: bool | None = None
    clip_compatible: bool | None = Field(default=None, alias="clipCompatible")
    pack_size: float | None = Field(default=None, alias="packSize")
    notes: str | None = None
    measurements: MoscotMeasurements | None = None
    size: MoscotSize | None = None
    color: MoscotColor | None = None
    attributes: dict[str, Any] | None = None

    _blanks = field_validator("id", "sku", "barcode", "size_label", mode="before")(_blank_to_none)
    _numbers = field_validator("pack_size", mode="before")(_to_number)


class MoscotPhoto(MoscotBaseModel):
    url: str
    label: str | None = None
    is_hero: bool | None = Field(default=None, alias="isHero")
    angle: str | None = None
    colorway_name: str | None = Field(default=None, alias="colorwayName")


class MoscotSource(MoscotBaseModel):
    supplier: str | None = None
    url: str | None = None
    last_sync_iso: str | None = Field(default=None, alias="lastSyncISO")
    confidence: str | None = None

    _blanks = field_validator("supplier", "url", "confidence", mode="before")(_blank_to_none)


class MoscotPrice(MoscotBaseModel):
    amount: float | None = None
    currency: str | None = None

    _numbers = field_validator("amount", mode="before")(_to_number)
    _blanks = field_validator("currency", mode="before")(_blank_to_none)


class MoscotProduct(MoscotBaseModel):
    catalog_id: str = Field(alias="catalogId", min_length=1)
    category: str = Field(min_length=1)
    brand: str | None = None
    model: str | None = None
    name: str | None = None
    collections: list[str] = Field(default_factory=list)
    tags: list[str] = Field(default_factory=list)
    story_html: str | None = Field(default=None, alias="storyHtml")
    description_html: str | None = Field(default=None, alias="descriptionHtml")
    photos: list[MoscotPhoto] = Field(default_factory=list)
    source: MoscotSource | None = None
    price: MoscotPrice | None = None
    variants: list[MoscotVariant] = Field(default_factory=list)

    @field_validator("catalog_id", "category", mode="before")
    @classmethod
    def _strip(cls, value: object) -> object:
        return value.strip() if isinstance(value, str) else value
