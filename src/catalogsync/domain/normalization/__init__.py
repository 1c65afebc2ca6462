"""Adapter contract: raw vendor record -> validated canonical product."""

from __future__ import annotations

from .contract import AdapterRegistry, VendorAdapter, normalize_slug
from .errors import (
    AdapterNotFoundError,
    ExecutionError,
    InputValidationError,
    NormalizationError,
    OutputValidationError,
)
from .normalize import (
    ItemRejection,
    NormalizedBatch,
    NormalizedItem,
    catalog_id_hint,
    normalize_batch,
    normalize_item,
)
from .validation import validate_product

__all__ = [
    "AdapterNotFoundError",
    "AdapterRegistry",
    "ExecutionError",
    "InputValidationError",
    "ItemRejection",
    "NormalizationError",
    "NormalizedBatch",
    "NormalizedItem",
    "OutputValidationError",
    "VendorAdapter",
    "catalog_id_hint",
    "normalize_batch",
    "normalize_item",
    "normalize_slug",
    "validate_product",
]
