"""Classify a normalized batch against the persisted catalog of a vendor.

Every incoming ``catalog_id`` ends up in exactly one of ``created``,
``updated`` or ``unchanged``; every persisted id absent from the batch is
``removed``. The batch is walked once against a map of persisted hashes.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import StrEnum
from typing import TYPE_CHECKING, Any

from catalogsync.domain.hashing import batch_hash
from catalogsync.domain.model import DiffCounts

if TYPE_CHECKING:
    from collections.abc import Mapping, Sequence

    from catalogsync.domain.model import CanonicalProduct

log = logging.getLogger(__name__)


class DiffStatus(StrEnum):
    CREATED = "created"
    UPDATED = "updated"
    UNCHANGED = "unchanged"


class DuplicatePolicy(StrEnum):
    """Which occurrence of a repeated ``catalog_id`` in one batch is kept."""

    LAST_WINS = "last_wins"
    FIRST_WINS = "first_wins"


@dataclass(frozen=True, slots=True)
class HashedProduct:
    product: CanonicalProduct
    hash: str
    raw: Mapping[str, Any] = field(default_factory=dict)

    @property
    def catalog_id(self) -> str:
        return self.product.catalog_id


@dataclass(frozen=True, slots=True)
class DiffDecision:
    catalog_id: str
    status: DiffStatus
    hash: str
    previous_hash: str | None
    item: HashedProduct


@dataclass(frozen=True, slots=True)
class DiffResult:
    decisions: tuple[DiffDecision, ...]
    removed: tuple[str, ...]
    counts: DiffCounts
    hash: str

    def _with_status(self, status: DiffStatus) -> tuple[DiffDecision, ...]:
        return tuple(decision for decision in self.decisions if decision.status is status)

    @property
    def created(self) -> tuple[DiffDecision, ...]:
        return self._with_status(DiffStatus.CREATED)

    @property
    def updated(self) -> tuple[DiffDecision, ...]:
        return self._with_status(DiffStatus.UPDATED)

    @property
    def unchanged(self) -> tuple[DiffDecision, ...]:
        return self._with_status(DiffStatus.UNCHANGED)

    @property
    def has_changes(self) -> bool:
        return bool(self.removed) or any(
            decision.status is not DiffStatus.UNCHANGED for decision in self.decisions
        )


def deduplicate(
    batch: Sequence[HashedProduct],
    policy: DuplicatePolicy = DuplicatePolicy.LAST_WINS,
) -> tuple[list[HashedProduct], int]:
    """Collapse repeated catalog ids according to ``policy``.

    The surviving entry keeps the position of the first occurrence. Returns the
    unique entries and the number of discarded duplicates.
    """

    chosen: dict[str, HashedProduct] = {}
    for entry in batch:
        if entry.catalog_id in chosen and policy is DuplicatePolicy.FIRST_WINS:
            continue
        chosen[entry.catalog_id] = entry
    duplicates = len(batch) - len(chosen)
    if duplicates:
        log.warning("Batch contains %d duplicate catalog id(s); policy=%s", duplicates, policy)
    return list(chosen.values()), duplicates


def compute_diff(
    batch: Sequence[HashedProduct],
    persisted_hashes: Mapping[str, str],
    *,
    duplicate_policy: DuplicatePolicy = DuplicatePolicy.LAST_WINS,
    dropped: int = 0,
) -> DiffResult:
    """Diff ``batch`` against ``persisted_hashes`` (``catalog_id -> hash``).

    ``dropped`` is the number of raw items rejected before hashing; it is only
    carried into the counts.
    """

    unique, duplicates = deduplicate(batch, duplicate_policy)

    visited: set[str] = set()
    decisions: list[DiffDecision] = []
    tally = {status: 0 for status in DiffStatus}
    for entry in unique:
        previous = persisted_hashes.get(entry.catalog_id)
        if previous is None:
            status = DiffStatus.CREATED
        elif previous == entry.hash:
            status = DiffStatus.UNCHANGED
        else:
            status = DiffStatus.UPDATED
        visited.add(entry.catalog_id)
        tally[status] += 1
        decisions.append(
            DiffDecision(
                catalog_id=entry.catalog_id,
                status=status,
                hash=entry.hash,
                previous_hash=previous,
                item=entry,
            )
        )

    removed = tuple(sorted(cid for cid in persisted_hashes if cid not in visited))
    counts = DiffCounts(
        total=len(unique),
        created=tally[DiffStatus.CREATED],
        updated=tally[DiffStatus.UPDATED],
        unchanged=tally[DiffStatus.UNCHANGED],
        removed=len(removed),
        dropped=dropped,
        duplicates=duplicates,
    )
    return DiffResult(
        decisions=tuple(decisions),
        removed=removed,
        counts=counts,
        hash=batch_hash((entry.catalog_id, entry.hash) for entry in unique),
    )
