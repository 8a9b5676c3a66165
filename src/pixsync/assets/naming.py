"""Deterministic asset filenames.

Every asset role of a project maps to exactly one filename, so a later
save of the same role overwrites the earlier file in place. Names are
load-bearing: files written by older installs must keep resolving.

- thumbnail: ``project-{project_id}.jpg`` (in ``thumbnails/``)
- preview:   ``project-{project_id}.jpg`` (in ``previews/``)
- layer:     ``layer-{project_id}-{layer_id}.{ext}`` (in ``layers/``)
"""

from __future__ import annotations

import re
from dataclasses import dataclass

_LAYER_NAME_RE = re.compile(r"^layer-(?P<project_id>\d+)-(?P<layer_id>.+)\.(?P<ext>[A-Za-z0-9]+)$")


@dataclass(frozen=True)
class LayerFilename:
    """Parsed components of a layer asset filename."""

    project_id: int
    layer_id: str
    ext: str


def thumbnail_name(project_id: int) -> str:
    return f"project-{project_id}.jpg"


def preview_name(project_id: int) -> str:
    return f"project-{project_id}.jpg"


def layer_name(project_id: int, layer_id: str, ext: str) -> str:
    return f"layer-{project_id}-{layer_id}.{ext}"


def parse_layer_name(filename: str, project_id: int | None = None) -> LayerFilename | None:
    """Parse a layer asset filename.

    Args:
        filename: Bare filename (no directory).
        project_id: If given, only names belonging to this project match.

    Returns:
        LayerFilename, or None when the name is not a layer asset (of the
        requested project).
    """
    match = _LAYER_NAME_RE.match(filename)
    if match is None:
        return None

    # Compare the textual id: "layer-05-..." is not project 5's file.
    if project_id is not None and match.group("project_id") != str(project_id):
        return None

    return LayerFilename(
        project_id=int(match.group("project_id")),
        layer_id=match.group("layer_id"),
        ext=match.group("ext").lower(),
    )
