"""Typed failures of vendor record normalization.

Each error is distinct and reaches the caller untouched:

* ``AdapterNotFoundError`` - unknown vendor slug, a configuration problem.
* ``InputValidationError`` - one raw record is malformed; skip the item.
* ``OutputValidationError`` - the adapter broke the canonical invariants; a bug.
* ``ExecutionError`` - the adapter crashed while mapping a valid record.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Sequence


class NormalizationError(Exception):
    def __init__(self, message: str, *, vendor: str, catalog_id: str | None = None) -> None:
        super().__init__(message)
        self.vendor = vendor
        self.catalog_id = catalog_id


class AdapterNotFoundError(NormalizationError):
    def __init__(self, vendor: str) -> None:
        super().__init__(f"No normalization adapter registered for '{vendor}'", vendor=vendor)


class InputValidationError(NormalizationError):
    pass


class ExecutionError(NormalizationError):
    pass


class OutputValidationError(NormalizationError):
    def __init__(
        self,
        issues: Sequence[str],
        *,
        vendor: str,
        catalog_id: str | None = None,
    ) -> None:
        label = catalog_id or "<unknown>"
        super().__init__(
            f"Adapter '{vendor}' produced an invalid product {label}: {'; '.join(issues)}",
            vendor=vendor,
            catalog_id=catalog_id,
        )
        self.issues = tuple(issues)
