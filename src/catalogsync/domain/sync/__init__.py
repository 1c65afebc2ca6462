"""Sync orchestration: run a vendor batch through normalize, diff and apply."""

from __future__ import annotations

from catalogsync.domain.errors import (
    InvalidTransitionError,
    RunAlreadyFinalizedError,
    SourceLoadError,
    SyncError,
    SyncPersistenceError,
    VendorNotConfiguredError,
)

from .locks import VendorLocks, VendorLockTimeoutError
from .orchestrator import DEFAULT_ACTOR, RunSummary, SyncOrchestrator, SyncRequest, utcnow
from .sources import (
    INJECTED_LABEL,
    InjectedItems,
    JsonFileSourceLoader,
    LiveAdapter,
    SourceLoader,
    SourcePath,
    SyncSource,
    env_path_variable,
    parse_catalog_array,
)
from .state import RunPhase, RunStateMachine

__all__ = [
    "DEFAULT_ACTOR",
    "INJECTED_LABEL",
    "InjectedItems",
    "InvalidTransitionError",
    "JsonFileSourceLoader",
    "LiveAdapter",
    "RunAlreadyFinalizedError",
    "RunPhase",
    "RunStateMachine",
    "RunSummary",
    "SourceLoadError",
    "SourceLoader",
    "SourcePath",
    "SyncError",
    "SyncOrchestrator",
    "SyncPersistenceError",
    "SyncRequest",
    "SyncSource",
    "VendorLockTimeoutError",
    "VendorLocks",
    "VendorNotConfiguredError",
    "env_path_variable",
    "parse_catalog_array",
    "utcnow",
]
