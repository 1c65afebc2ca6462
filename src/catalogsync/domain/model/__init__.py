"""Public domain model surface."""

from __future__ import annotations

from catalogsync.domain.model.catalog import (
    DiffCounts,
    VendorCatalogItem,
    VendorIntegration,
    VendorSyncRun,
    VendorSyncState,
)
from catalogsync.domain.model.enums import (
    CATEGORY_VARIANT_KIND,
    ApiAuthType,
    Category,
    FrameFit,
    IntegrationType,
    PhotoAngle,
    RunStatus,
    SourceConfidence,
    SyncMode,
    Usage,
    VariantKind,
)
from catalogsync.domain.model.product import (
    VARIANT_TYPES,
    AccessoryVariant,
    CanonicalProduct,
    Color,
    ContactVariant,
    FrameMeasurements,
    FrameVariant,
    JsonValue,
    LegacySize,
    LensVariant,
    Photo,
    Price,
    SourceDescriptor,
    Variant,
    VendorRef,
    to_json,
)

__all__ = [  # noqa: RUF022
    # product
    "AccessoryVariant",
    "CanonicalProduct",
    "Color",
    "ContactVariant",
    "FrameMeasurements",
    "FrameVariant",
    "JsonValue",
    "LegacySize",
    "LensVariant",
    "Photo",
    "Price",
    "SourceDescriptor",
    "VARIANT_TYPES",
    "Variant",
    "VendorRef",
    "to_json",
    # persisted records
    "DiffCounts",
    "VendorCatalogItem",
    "VendorIntegration",
    "VendorSyncRun",
    "VendorSyncState",
    # enums
    "ApiAuthType",
    "CATEGORY_VARIANT_KIND",
    "Category",
    "FrameFit",
    "IntegrationType",
    "PhotoAngle",
    "RunStatus",
    "SourceConfidence",
    "SyncMode",
    "Usage",
    "VariantKind",
]
