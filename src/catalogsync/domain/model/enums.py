"""Domain enums (pure, dependency-light)."""

from __future__ import annotations

from enum import StrEnum


class Category(StrEnum):
    FRAMES = "Frames"
    LENSES = "Lenses"
    CONTACTS = "Contacts"
    ACCESSORIES = "Accessories"


class VariantKind(StrEnum):
    """Discriminator of the category-specific variant structs."""

    FRAME = "frame"
    LENS = "lens"
    CONTACT = "contact"
    ACCESSORY = "accessory"


class SourceConfidence(StrEnum):
    VERIFIED = "verified"
    MANUAL = "manual"
    UNLINKED = "unlinked"


class PhotoAngle(StrEnum):
    FRONT = "front"
    QUARTER = "quarter"
    SIDE = "side"
    TEMPLE = "temple"
    MODEL = "model"
    DETAIL = "detail"
    PACK = "pack"
    CLIP = "clip"
    UNKNOWN = "unknown"


class Usage(StrEnum):
    OPTICAL = "optical"
    SUN = "sun"
    BOTH = "both"


class FrameFit(StrEnum):
    NARROW = "narrow"
    AVERAGE = "average"
    WIDE = "wide"
    EXTRA_WIDE = "extra-wide"


class SyncMode(StrEnum):
    DRY_RUN = "dry_run"
    APPLY = "apply"


class RunStatus(StrEnum):
    PENDING = "pending"
    SUCCESS = "success"
    FAILED = "failed"


class IntegrationType(StrEnum):
    SCRAPER = "scraper"
    API = "api"


class ApiAuthType(StrEnum):
    NONE = "none"
    BEARER = "bearer"
    HEADER = "header"


CATEGORY_VARIANT_KIND: dict[Category, VariantKind] = {
    Category.FRAMES: VariantKind.FRAME,
    Category.LENSES: VariantKind.LENS,
    Category.CONTACTS: VariantKind.CONTACT,
    Category.ACCESSORIES: VariantKind.ACCESSORY,
}
