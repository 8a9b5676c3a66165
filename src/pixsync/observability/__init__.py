"""Observability module for pixsync.

Provides structured logging for the asset lifecycle hooks.
"""

from pixsync.observability.logging import (
    close_file_logging,
    configure_logging,
    get_logger,
    hook_context,
)

__all__ = [
    "close_file_logging",
    "configure_logging",
    "get_logger",
    "hook_context",
]
