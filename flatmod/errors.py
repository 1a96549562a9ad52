"""Exceptions raised by the flat module resolver.

Missing descriptors, missing resolution files and stale resolutions are normal
signals handled inside the resolver. Only the conditions below escape it.
"""

from pathlib import Path

# ============================================================================
# Exceptions
# ============================================================================


class FlatModuleError(Exception):
    """Base class for all flat module resolver errors."""

    pass


class ModuleNotFoundError(FlatModuleError):
    """Raised when neither flat nor legacy resolution can produce a module."""

    def __init__(self, request: str, requester: Path | None = None, message: str | None = None):
        self.request = request
        self.requester = requester
        if message is None:
            origin = f" from {requester}" if requester else ""
            message = f"Cannot find module '{request}'{origin}"
        super().__init__(message)


class FlatModeViolationError(FlatModuleError):
    """Raised when a root that already resolved in flat mode would fall back to legacy mode.

    This means the store is partially flattened. It is never recovered from.
    """

    def __init__(self, root: Path, reason: str):
        self.root = root
        self.reason = reason
        super().__init__(f"{reason}: flat mode is already enabled for {root}")


class ResolverAlreadyInstalledError(FlatModuleError):
    """Raised when installing a resolver on a host that already has one."""

    pass


class ResolverNotInstalledError(FlatModuleError):
    """Raised when uninstalling from a host that has no resolver installed."""

    pass
