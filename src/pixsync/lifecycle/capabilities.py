"""Authorization gate consulted before any file operation."""

from __future__ import annotations

from collections.abc import Iterable
from typing import Protocol, runtime_checkable


@runtime_checkable
class CapabilityChecker(Protocol):
    """Answers whether the current caller may perform an action."""

    def current_capability(self, action: str) -> bool: ...


class StaticCapabilities:
    """Fixed set of granted capabilities."""

    def __init__(self, granted: Iterable[str]) -> None:
        self.granted = frozenset(granted)

    def current_capability(self, action: str) -> bool:
        return action in self.granted


class AllowAll:
    """Grants every capability."""

    def current_capability(self, action: str) -> bool:
        return True
