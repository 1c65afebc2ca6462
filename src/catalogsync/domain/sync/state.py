"""Phases of a sync run and the allowed transitions between them."""

from __future__ import annotations

import logging
from enum import StrEnum
from typing import Final

from catalogsync.domain.errors import InvalidTransitionError

log = logging.getLogger(__name__)


class RunPhase(StrEnum):
    STARTED = "started"
    NORMALIZING = "normalizing"
    DIFFING = "diffing"
    DRY_RUN_REPORTED = "dry_run_reported"
    APPLYING = "applying"
    FINISHED = "finished"


TRANSITIONS: Final[dict[RunPhase, frozenset[RunPhase]]] = {
    RunPhase.STARTED: frozenset({RunPhase.NORMALIZING, RunPhase.FINISHED}),
    RunPhase.NORMALIZING: frozenset({RunPhase.DIFFING, RunPhase.FINISHED}),
    RunPhase.DIFFING: frozenset(
        {RunPhase.DRY_RUN_REPORTED, RunPhase.APPLYING, RunPhase.FINISHED}
    ),
    RunPhase.DRY_RUN_REPORTED: frozenset({RunPhase.FINISHED}),
    RunPhase.APPLYING: frozenset({RunPhase.FINISHED}),
    RunPhase.FINISHED: frozenset(),
}


class RunStateMachine:
    """Tracks the phase of one run; any phase may end the run early on failure."""

    def __init__(self, label: str) -> None:
        self.label = label
        self.phase = RunPhase.STARTED
        self.history: list[RunPhase] = [RunPhase.STARTED]

    def advance(self, target: RunPhase) -> None:
        if target not in TRANSITIONS[self.phase]:
            raise InvalidTransitionError(
                f"Run {self.label} cannot move from {self.phase} to {target}"
            )
        log.debug("Run %s: %s -> %s", self.label, self.phase, target)
        self.phase = target
        self.history.append(target)

    @property
    def finished(self) -> bool:
        return self.phase is RunPhase.FINISHED
