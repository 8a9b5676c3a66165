"""Asset lifecycle orchestration for project save and delete.

On save, inline images in the project document (thumbnail, preview and
image layers) are written to deterministic files and the document fields
are rewritten to point at them. On update, layer files whose layer is
gone are reaped first. On delete, every asset the previous document
knew about is removed.

Neither hook raises for asset problems. A field that can't be decoded or
written stays inline in the returned document and is reported as a
FieldFailure, so a later save can retry it.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from pydantic import ValidationError

from pixsync.assets.errors import DecodeError, WriteError
from pixsync.assets.inline import decode_inline, extension_from_reference, is_inline
from pixsync.assets.naming import layer_name, preview_name, thumbnail_name
from pixsync.assets.reaper import reap_orphan_layers, reap_superseded_variants
from pixsync.config import SyncConfig
from pixsync.lifecycle.context import (
    DeleteContext,
    FailureKind,
    FieldFailure,
    SaveContext,
    SaveResult,
)
from pixsync.models.project import LAYER_TYPE_IMAGE, AssetCategory, Layer, Project
from pixsync.observability.logging import get_logger, hook_context

if TYPE_CHECKING:
    from collections.abc import Callable, Iterator

    from pixsync.assets.store import AssetStore
    from pixsync.lifecycle.capabilities import CapabilityChecker

log = get_logger(__name__)


def _is_inline_image_entry(entry: Any) -> bool:
    return isinstance(entry, dict) and entry.get("type") == LAYER_TYPE_IMAGE and is_inline(entry.get("src"))


class AssetLifecycle:
    """Save and delete hooks keeping asset files in step with project documents.

    Args:
        store: Where asset files are written and deleted.
        capabilities: Authorization gate for the current caller.
        config: Lifecycle settings; defaults if omitted.
    """

    def __init__(
        self,
        store: AssetStore,
        capabilities: CapabilityChecker,
        *,
        config: SyncConfig | None = None,
    ) -> None:
        self.store = store
        self.capabilities = capabilities
        self.config = config or SyncConfig()

    def _authorized(self) -> bool:
        return self.capabilities.current_capability(self.config.required_capability)

    def _load_project(self, meta: dict[str, Any] | None) -> Project | None:
        if not meta:
            return None
        document = meta.get(self.config.meta_key)
        if not document or not isinstance(document, dict):
            return None
        return Project.model_validate(document)

    def _iter_layers(self, project: Project, project_id: int) -> Iterator[tuple[int, Any, Layer | None]]:
        """Yield (index, raw entry, parsed layer) for each layer entry.

        A malformed entry is yielded with ``None`` in place of the layer and
        logged; it never affects its neighbours.
        """
        for index, entry in enumerate(project.layers):
            try:
                layer = Layer.model_validate(entry)
            except ValidationError as e:
                log.warning(
                    "layer_invalid",
                    project_id=project_id,
                    index=index,
                    errors=e.error_count(),
                    detail=str(e),
                )
                layer = None
            yield index, entry, layer

    # -------------------------------------------------------------------------
    # Save
    # -------------------------------------------------------------------------

    def on_save(self, ctx: SaveContext) -> SaveResult:
        """Materialize inline images of a saved project.

        The project document inside ``ctx.meta`` is rewritten in place.
        Guards (no capability, materialization disabled, no metadata, no
        id) leave the bag exactly as submitted.

        Args:
            ctx: The save-hook invocation.

        Returns:
            SaveResult with the bag to persist and any per-field failures.
        """
        with hook_context("save", ctx.project_id):
            return self._save(ctx)

    def _save(self, ctx: SaveContext) -> SaveResult:
        result = SaveResult(meta=ctx.meta)

        if not self._authorized():
            log.debug("asset_save_unauthorized", project_id=ctx.project_id)
            return result
        if not self.config.materialize_images:
            log.debug("asset_save_disabled", project_id=ctx.project_id)
            return result
        if not ctx.project_id:
            return result

        meta = ctx.meta
        project = self._load_project(meta)
        if project is None or meta is None:
            return result

        document: dict[str, Any] = meta[self.config.meta_key]
        project_id = ctx.project_id
        entries = list(self._iter_layers(project, project_id))

        # Orphans are reaped before any new layer file is written.
        if not ctx.creating:
            result.reaped.extend(
                reap_orphan_layers(
                    self.store,
                    project_id,
                    [layer for _, _, layer in entries if layer is not None],
                    layer_id_prefix=self.config.layer_id_prefix,
                )
            )

        for field_name, category, name_for in (
            ("thumbnail", AssetCategory.THUMBNAILS, thumbnail_name),
            ("preview", AssetCategory.PREVIEWS, preview_name),
        ):
            value = getattr(project, field_name)
            if not is_inline(value):
                continue
            written = self._materialize(
                result,
                field_name,
                value,
                category,
                lambda _ext, name_for=name_for: name_for(project_id),
            )
            if written is not None:
                document[field_name] = written[0]

        written_layers: dict[str, str] = {}
        for index, entry, layer in entries:
            field_path = f"layers[{index}].src"
            if layer is None:
                if _is_inline_image_entry(entry):
                    result.failures.append(
                        FieldFailure(field_path, FailureKind.INVALID_LAYER, "malformed image layer")
                    )
                continue
            if not layer.is_image or not is_inline(layer.src):
                continue
            if not layer.id:
                log.warning("layer_missing_id", project_id=project_id, field=field_path)
                result.failures.append(
                    FieldFailure(field_path, FailureKind.MISSING_ID, "image layer has no id")
                )
                continue

            written = self._materialize(
                result,
                field_path,
                layer.src,
                AssetCategory.LAYERS,
                lambda ext, layer_id=layer.id: layer_name(project_id, layer_id, ext),
            )
            if written is not None:
                reference, filename = written
                document["layers"][index]["src"] = reference
                written_layers[layer.id] = filename

        if not ctx.creating:
            result.reaped.extend(reap_superseded_variants(self.store, project_id, written_layers))

        log.info(
            "project_assets_saved",
            project_id=project_id,
            creating=ctx.creating,
            written=len(result.written),
            reaped=len(result.reaped),
            failed=len(result.failures),
        )
        return result

    def _materialize(
        self,
        result: SaveResult,
        field_path: str,
        value: str,
        category: AssetCategory,
        filename_for: Callable[[str], str],
    ) -> tuple[str, str] | None:
        """Decode and write one inline field.

        Returns:
            (public reference, filename) of the written file, or None if the
            field must stay inline (failure recorded on ``result``).
        """
        try:
            image = decode_inline(value)
        except DecodeError as e:
            log.warning("inline_decode_failed", field=field_path, error=str(e))
            result.failures.append(FieldFailure(field_path, FailureKind.DECODE, str(e)))
            return None

        filename = filename_for(image.extension)
        try:
            reference = self.store.write(category, filename, image.data)
        except WriteError as e:
            log.warning("asset_write_failed", field=field_path, filename=filename, error=e.reason)
            result.failures.append(FieldFailure(field_path, FailureKind.WRITE, str(e)))
            return None

        result.written.append(reference)
        log.debug("asset_materialized", field=field_path, filename=filename, size_bytes=image.size_bytes)
        return reference, filename

    # -------------------------------------------------------------------------
    # Delete
    # -------------------------------------------------------------------------

    def on_delete(self, ctx: DeleteContext) -> None:
        """Remove every asset file of a deleted project.

        Thumbnail and preview are removed by their deterministic names; each
        image layer of the previous document is removed under the extension
        derived from its stored reference. Missing files are not errors.

        Args:
            ctx: The delete-hook invocation with the previous record.
        """
        with hook_context("delete", ctx.project_id):
            self._delete(ctx)

    def _delete(self, ctx: DeleteContext) -> None:
        if not self._authorized():
            log.debug("asset_delete_unauthorized", project_id=ctx.project_id)
            return
        if not ctx.project_id:
            return

        document = ctx.meta.get(self.config.meta_key) if ctx.meta else None
        if not document:
            return

        project_id = ctx.project_id
        removed = 0
        removed += self.store.delete(AssetCategory.THUMBNAILS, thumbnail_name(project_id))
        removed += self.store.delete(AssetCategory.PREVIEWS, preview_name(project_id))

        project = self._load_project(ctx.meta)
        entries = self._iter_layers(project, project_id) if project is not None else ()
        for _, _, layer in entries:
            if layer is None or not layer.is_image or not layer.id:
                continue
            ext = extension_from_reference(layer.src)
            removed += self.store.delete(AssetCategory.LAYERS, layer_name(project_id, layer.id, ext))

        log.info("project_assets_deleted", project_id=project_id, removed=removed)
