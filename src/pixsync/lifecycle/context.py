"""Inputs and outputs of the save/delete lifecycle hooks.

The host framework hands the hooks a stored record id plus a metadata
bag (save) or the previous persisted record (delete). These types make
both explicit instead of reading them off request/response objects.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any


class FailureKind(StrEnum):
    """Why an inline field was left unmaterialized."""

    DECODE = "decode"
    WRITE = "write"
    MISSING_ID = "missing_id"
    INVALID_LAYER = "invalid_layer"


@dataclass(frozen=True)
class FieldFailure:
    """An inline image field that could not be materialized.

    Attributes:
        field: Document path of the field (``thumbnail``, ``layers[2].src``).
        kind: What prevented materialization.
        message: Error message.
    """

    field: str
    kind: FailureKind
    message: str


@dataclass
class SaveContext:
    """A save-hook invocation.

    Attributes:
        project_id: Id of the stored record, assigned by the host store.
        creating: True on first save, False on updates.
        meta: Mutable metadata bag holding the project document, or None
            if the request carried no metadata.
    """

    project_id: int
    creating: bool
    meta: dict[str, Any] | None

    @classmethod
    def from_request(cls, post_id: int, params: dict[str, Any], *, creating: bool) -> SaveContext:
        """Build from request parameters shaped ``{"meta": {...}, ...}``."""
        meta = params.get("meta")
        return cls(
            project_id=post_id,
            creating=creating,
            meta=meta if isinstance(meta, dict) else None,
        )


@dataclass
class SaveResult:
    """Outcome of a save hook.

    Attributes:
        meta: Metadata bag to persist; inline fields that were materialized
            now hold public references.
        failures: Fields left inline because they could not be materialized.
        written: Public references of the files written.
        reaped: Layer filenames deleted as orphans or superseded variants.
    """

    meta: dict[str, Any] | None
    failures: list[FieldFailure] = field(default_factory=list)
    written: list[str] = field(default_factory=list)
    reaped: list[str] = field(default_factory=list)

    @property
    def complete(self) -> bool:
        """True if no inline field was left behind."""
        return not self.failures


@dataclass
class DeleteContext:
    """A delete-hook invocation carrying the previous persisted record.

    Attributes:
        project_id: Id of the deleted record (0 if unknown).
        meta: The record's metadata bag before deletion.
    """

    project_id: int
    meta: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_response(cls, payload: dict[str, Any]) -> DeleteContext:
        """Build from a delete response shaped ``{"previous": {"id": ..., "meta": {...}}}``.

        A bare ``{"id": ..., "meta": {...}}`` record is accepted too.
        """
        previous = payload.get("previous", payload)
        if not isinstance(previous, dict):
            previous = {}

        try:
            project_id = abs(int(previous.get("id") or 0))
        except (TypeError, ValueError):
            project_id = 0

        meta = previous.get("meta")
        return cls(project_id=project_id, meta=meta if isinstance(meta, dict) else {})
