"""Removal of layer files that no project layer references anymore.

Layer files are correlated with layers purely by filename
(``layer-{project_id}-{layer_id}.{ext}``), so reaping compares the ids
found on disk for one project against the ids in its newly saved layer
stack. An unreadable directory counts as empty: leaking an orphan is
preferable to deleting a file that is still referenced.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from pixsync.assets.errors import DirectoryListError
from pixsync.assets.naming import LayerFilename, parse_layer_name
from pixsync.models.project import AssetCategory
from pixsync.observability.logging import get_logger

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping

    from pixsync.assets.store import AssetStore
    from pixsync.models.project import Layer

log = get_logger(__name__)

DEFAULT_LAYER_ID_PREFIX = "pixmagix-"


def project_layer_files(store: AssetStore, project_id: int) -> list[tuple[str, LayerFilename]]:
    """List the layer files on disk that belong to ``project_id``.

    Returns:
        (filename, parsed name) pairs; empty if the directory can't be read.
    """
    try:
        filenames = store.list_files(AssetCategory.LAYERS)
    except DirectoryListError as e:
        log.warning("layer_dir_unreadable", project_id=project_id, error=str(e))
        return []

    files = []
    for filename in filenames:
        parsed = parse_layer_name(filename, project_id)
        if parsed is not None:
            files.append((filename, parsed))
    return files


def reap_orphan_layers(
    store: AssetStore,
    project_id: int,
    layers: Iterable[Layer],
    *,
    layer_id_prefix: str = DEFAULT_LAYER_ID_PREFIX,
) -> list[str]:
    """Delete this project's layer files whose layer id is no longer present.

    Every layer contributes its id regardless of type: a file may have been
    written while the layer was an image and the layer changed type since.

    Args:
        store: Asset store to list and delete from.
        project_id: Project whose files are considered; other projects'
            files are never touched.
        layers: The new layer stack.
        layer_id_prefix: Only on-disk layer ids starting with this prefix
            are reap candidates. Empty string considers every id.

    Returns:
        Filenames that were deleted.
    """
    keep = {layer.id for layer in layers if layer.id}
    deleted = []

    for filename, parsed in project_layer_files(store, project_id):
        if not parsed.layer_id.startswith(layer_id_prefix):
            continue
        if parsed.layer_id in keep:
            continue
        if store.delete(AssetCategory.LAYERS, filename):
            deleted.append(filename)

    if deleted:
        log.info("orphan_layers_reaped", project_id=project_id, count=len(deleted), files=deleted)
    return deleted


def reap_superseded_variants(
    store: AssetStore,
    project_id: int,
    written: Mapping[str, str],
) -> list[str]:
    """Delete older files of re-materialized layers stored under another extension.

    Args:
        store: Asset store to list and delete from.
        project_id: Project the layers belong to.
        written: Layer id -> filename written during the current save.

    Returns:
        Filenames that were deleted.
    """
    if not written:
        return []

    deleted = []
    for filename, parsed in project_layer_files(store, project_id):
        current = written.get(parsed.layer_id)
        if current is None or current == filename:
            continue
        if store.delete(AssetCategory.LAYERS, filename):
            deleted.append(filename)

    if deleted:
        log.info("superseded_layers_reaped", project_id=project_id, count=len(deleted), files=deleted)
    return deleted
