"""Errors raised while reconciling a vendor catalog."""

from __future__ import annotations


class SyncError(RuntimeError):
    """Base class for failures of a sync run."""


class VendorNotConfiguredError(SyncError):
    """Raised when no normalization adapter is registered for a vendor."""

    def __init__(self, vendor: str) -> None:
        super().__init__(f"Vendor '{vendor}' is not configured")
        self.vendor = vendor


class SourceLoadError(SyncError):
    """Raised when the raw batch cannot be located or parsed."""

    def __init__(self, message: str, *, tried: tuple[str, ...] = ()) -> None:
        if tried:
            message = f"{message} (tried: {', '.join(tried)})"
        super().__init__(message)
        self.tried = tried


class SyncPersistenceError(SyncError):
    """Raised when the apply transaction fails and is rolled back."""


class RunAlreadyFinalizedError(SyncError):
    """Raised when finishing a run that already left the pending state."""


class InvalidTransitionError(SyncError):
    """Raised when a run moves between phases out of order."""
