"""Project document models.

A project is the editor's saved state: a thumbnail, a larger preview and
an ordered stack of layers. Only the fields the asset lifecycle reads are
declared; everything else the editor stores (title, canvas size, layer
opacity, filters, ...) rides along as extra fields and is written back
untouched.

Documents come from an editor, not from a schema, so each field is read
on its own. A value of the wrong type reads as empty instead of
rejecting the whole document, and layer entries are kept raw on
``Project`` and parsed one at a time with ``Layer.model_validate``.
"""

from __future__ import annotations

from enum import StrEnum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

LAYER_TYPE_IMAGE = "image"


class AssetCategory(StrEnum):
    """Asset categories; values are the upload directory names."""

    THUMBNAILS = "thumbnails"
    PREVIEWS = "previews"
    LAYERS = "layers"


class Layer(BaseModel):
    """One entry in a project's layer stack.

    ``id`` is the only key correlating a layer with its file on disk
    across saves. ``src`` is meaningful only for image layers.
    """

    model_config = ConfigDict(extra="allow", coerce_numbers_to_str=True)

    id: str = Field(default="", description="Stable layer id, conventionally 'pixmagix-<suffix>'")
    type: str = Field(default="", description="Layer kind; only 'image' layers own an asset")
    src: str | None = Field(default=None, description="Inline payload, URL, or empty")

    @field_validator("id", "type", mode="before")
    @classmethod
    def _null_as_empty(cls, value: Any) -> Any:
        return "" if value is None else value

    @field_validator("src", mode="before")
    @classmethod
    def _non_string_src_as_empty(cls, value: Any) -> str | None:
        return value if isinstance(value, str) else None

    @property
    def is_image(self) -> bool:
        return self.type == LAYER_TYPE_IMAGE


class Project(BaseModel):
    """Project document as stored in the record's metadata bag."""

    model_config = ConfigDict(extra="allow")

    thumbnail: str | None = Field(default=None, description="Inline payload, URL, or empty")
    preview: str | None = Field(default=None, description="Inline payload, URL, or empty")
    layers: list[Any] = Field(default_factory=list, description="Raw layer entries in display order")

    @field_validator("thumbnail", "preview", mode="before")
    @classmethod
    def _non_string_as_empty(cls, value: Any) -> str | None:
        return value if isinstance(value, str) else None

    @field_validator("layers", mode="before")
    @classmethod
    def _non_list_as_empty(cls, value: Any) -> list[Any]:
        return value if isinstance(value, list) else []
