"""Asset error types.

These errors are raised by the asset primitives (decoder, store, reaper).
The lifecycle hooks catch every one of them and degrade to a per-field
failure or a log line; none is allowed to abort the enclosing save or
delete request.
"""

from __future__ import annotations


class AssetError(Exception):
    """Base class for asset materialization and cleanup failures."""


class DecodeError(AssetError):
    """Raised when an inline payload is recognized but its body is malformed."""

    def __init__(self, reason: str) -> None:
        self.reason = reason
        super().__init__(f"Failed to decode inline image: {reason}")


class WriteError(AssetError):
    """Raised when an asset file can't be written."""

    def __init__(self, category: str, filename: str, reason: str) -> None:
        self.category = category
        self.filename = filename
        self.reason = reason
        super().__init__(f"Failed to write {category} asset {filename}: {reason}")


class DeleteError(AssetError):
    """Raised when an existing asset file can't be removed."""

    def __init__(self, category: str, filename: str, reason: str) -> None:
        self.category = category
        self.filename = filename
        self.reason = reason
        super().__init__(f"Failed to delete {category} asset {filename}: {reason}")


class DirectoryListError(AssetError):
    """Raised when an asset category directory can't be listed."""

    def __init__(self, category: str, reason: str) -> None:
        self.category = category
        self.reason = reason
        super().__init__(f"Failed to list {category} assets: {reason}")
