"""Save/delete lifecycle hooks for project assets."""

from pixsync.lifecycle.capabilities import AllowAll, CapabilityChecker, StaticCapabilities
from pixsync.lifecycle.context import (
    DeleteContext,
    FailureKind,
    FieldFailure,
    SaveContext,
    SaveResult,
)
from pixsync.lifecycle.orchestrator import AssetLifecycle

__all__ = [
    "AllowAll",
    "AssetLifecycle",
    "CapabilityChecker",
    "DeleteContext",
    "FailureKind",
    "FieldFailure",
    "SaveContext",
    "SaveResult",
    "StaticCapabilities",
]
