"""Asset primitives: inline payload decoding, filenames, storage and reaping."""

from pixsync.assets.errors import (
    AssetError,
    DecodeError,
    DeleteError,
    DirectoryListError,
    WriteError,
)
from pixsync.assets.inline import (
    DEFAULT_EXTENSION,
    DecodedImage,
    decode_inline,
    extension_from_reference,
    is_inline,
)
from pixsync.assets.naming import (
    LayerFilename,
    layer_name,
    parse_layer_name,
    preview_name,
    thumbnail_name,
)
from pixsync.assets.reaper import (
    DEFAULT_LAYER_ID_PREFIX,
    reap_orphan_layers,
    reap_superseded_variants,
)
from pixsync.assets.store import AssetStore

__all__ = [
    "DEFAULT_EXTENSION",
    "DEFAULT_LAYER_ID_PREFIX",
    "AssetError",
    "AssetStore",
    "DecodeError",
    "DecodedImage",
    "DeleteError",
    "DirectoryListError",
    "LayerFilename",
    "WriteError",
    "decode_inline",
    "extension_from_reference",
    "is_inline",
    "layer_name",
    "parse_layer_name",
    "preview_name",
    "reap_orphan_layers",
    "reap_superseded_variants",
    "thumbnail_name",
]
