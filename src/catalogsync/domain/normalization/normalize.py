"""Run raw vendor records through their adapter and enforce the output contract."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, cast

from pydantic import ValidationError

from catalogsync.domain.normalization.errors import (
    ExecutionError,
    InputValidationError,
    NormalizationError,
    OutputValidationError,
)
from catalogsync.domain.normalization.validation import validate_product

if TYPE_CHECKING:
    from collections.abc import Iterable

    from catalogsync.domain.model import CanonicalProduct
    from catalogsync.domain.normalization.contract import AdapterRegistry

log = logging.getLogger(__name__)

CATALOG_ID_KEYS = ("catalogId", "catalog_id")


@dataclass(frozen=True, slots=True)
class NormalizedItem:
    index: int
    product: CanonicalProduct
    raw: Mapping[str, Any]


@dataclass(frozen=True, slots=True)
class ItemRejection:
    index: int
    catalog_id: str | None
    message: str


@dataclass(frozen=True, slots=True)
class NormalizedBatch:
    items: tuple[NormalizedItem, ...]
    rejections: tuple[ItemRejection, ...]

    @property
    def products(self) -> tuple[CanonicalProduct, ...]:
        return tuple(item.product for item in self.items)

    @property
    def dropped(self) -> int:
        return len(self.rejections)


def catalog_id_hint(raw: object) -> str | None:
    if not isinstance(raw, Mapping):
        return None
    for key in CATALOG_ID_KEYS:
        value = raw.get(key)
        if isinstance(value, str) and value.strip():
            return value.strip()
    return None


def _describe(exc: ValidationError) -> str:
    parts: list[str] = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error.get("loc", ())) or "<root>"
        parts.append(f"{location}: {error.get('msg', 'invalid')}")
    return "; ".join(parts)


def normalize_item(registry: AdapterRegistry, slug: str, raw: object) -> CanonicalProduct:
    """Normalize one raw record for ``slug``.

    Raises ``AdapterNotFoundError``, ``InputValidationError``, ``ExecutionError``
    or ``OutputValidationError``; adapter-raised normalization errors pass
    through unchanged.
    """

    adapter = registry.get(slug)
    vendor = adapter.vendor.slug
    hint = catalog_id_hint(raw)

    if not isinstance(raw, Mapping):
        raise InputValidationError(
            f"Raw record must be an object, got {type(raw).__name__}",
            vendor=vendor,
            catalog_id=hint,
        )
    try:
        record = adapter.input_model.model_validate(raw)
    except ValidationError as exc:
        raise InputValidationError(
            f"Invalid {vendor} record {hint or '<unknown>'}: {_describe(exc)}",
            vendor=vendor,
            catalog_id=hint,
        ) from exc

    try:
        product = adapter.normalize(record)
    except NormalizationError:
        raise
    except Exception as exc:
        raise ExecutionError(
            f"Adapter '{vendor}' failed on {hint or '<unknown>'}: {exc}",
            vendor=vendor,
            catalog_id=hint,
        ) from exc

    issues = validate_product(product)
    if issues:
        raise OutputValidationError(issues, vendor=vendor, catalog_id=product.catalog_id or hint)
    return product


def normalize_batch(
    registry: AdapterRegistry, slug: str, raws: Iterable[object]
) -> NormalizedBatch:
    """Normalize a batch, dropping only records that fail input validation."""

    items: list[NormalizedItem] = []
    rejections: list[ItemRejection] = []
    for index, raw in enumerate(raws):
        try:
            product = normalize_item(registry, slug, raw)
        except InputValidationError as exc:
            rejections.append(
                ItemRejection(index=index, catalog_id=exc.catalog_id, message=str(exc))
            )
            continue
        record = cast("Mapping[str, Any]", raw)
        items.append(NormalizedItem(index=index, product=product, raw=dict(record)))
    if rejections:
        log.warning(
            "Dropped %d of %d %s record(s) failing input validation",
            len(rejections),
            len(items) + len(rejections),
            slug,
        )
    return NormalizedBatch(items=tuple(items), rejections=tuple(rejections))
