"""Deterministic content hashing of canonical products.

Two products hash equal exactly when their canonical forms are equal. The
canonical form ignores volatile fields (sync timestamps), absent values, key
order and the order of unordered collections.
"""

from __future__ import annotations

import hashlib
import json
from typing import TYPE_CHECKING, Final

if TYPE_CHECKING:
    from collections.abc import Iterable

    from catalogsync.domain.model import CanonicalProduct, JsonValue

VOLATILE_PATHS: Final[frozenset[tuple[str, ...]]] = frozenset({("source", "last_synced_at")})
UNORDERED_COLLECTIONS: Final[frozenset[str]] = frozenset(
    {"variants", "photos", "tags", "collections"}
)


def encode(value: JsonValue) -> str:
    return json.dumps(value, sort_keys=True, separators=(",", ":"), ensure_ascii=False)


def canonical_form(product: CanonicalProduct) -> JsonValue:
    return _canonicalize(product.to_payload(), ())


def _canonicalize(value: JsonValue, path: tuple[str, ...]) -> JsonValue:
    if isinstance(value, dict):
        result: dict[str, JsonValue] = {}
        for key in sorted(value):
            child = value[key]
            child_path = (*path, key)
            if child is None or child_path in VOLATILE_PATHS:
                continue
            result[key] = _canonicalize(child, child_path)
        return result
    if isinstance(value, list):
        items = [_canonicalize(item, path) for item in value]
        # only top-level product collections are unordered
        if len(path) == 1 and path[0] in UNORDERED_COLLECTIONS:
            items.sort(key=encode)
        return items
    return value


def content_hash(product: CanonicalProduct) -> str:
    """Return the SHA-256 hex digest of the product's canonical form."""

    return hashlib.sha256(encode(canonical_form(product)).encode("utf-8")).hexdigest()


def batch_hash(entries: Iterable[tuple[str, str]]) -> str:
    """Aggregate ``(catalog_id, hash)`` pairs into one order-independent digest.

    An empty batch hashes the empty string.
    """

    digest = hashlib.sha256()
    for catalog_id, item_hash in sorted(entries):
        digest.update(f"{catalog_id}:{item_hash}|".encode())
    return digest.hexdigest()
