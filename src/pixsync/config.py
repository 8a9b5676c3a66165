"""pixsync configuration loading.

Settings come from ``pixsync.yaml`` with environment overrides on top:

1. Environment variable (``PIXSYNC_UPLOAD_ROOT``, ``PIXSYNC_BASE_URL``)
2. Config file value
3. Built-in default
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from ruamel.yaml import YAML

from pixsync.assets.reaper import DEFAULT_LAYER_ID_PREFIX

DEFAULT_CONFIG_FILE = Path("pixsync.yaml")
DEFAULT_UPLOAD_ROOT = Path("uploads")
DEFAULT_META_KEY = "pixmagix_project"
DEFAULT_CAPABILITY = "upload_files"

_TRUE_STRINGS = {"true", "yes", "on", "1"}
_FALSE_STRINGS = {"false", "no", "off", "0"}


def _parse_bool(key: str, value: Any) -> bool:
    """Read a boolean setting; quoted strings like 'false' are accepted.

    Raises:
        ValueError: If the value is neither a bool nor a recognized string.
    """
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        normalized = value.strip().lower()
        if normalized in _TRUE_STRINGS:
            return True
        if normalized in _FALSE_STRINGS:
            return False
    raise ValueError(f"{key} must be true or false, got {value!r}")


@dataclass
class SyncConfig:
    """Configuration for the asset lifecycle.

    Attributes:
        upload_root: Directory holding the thumbnails/previews/layers folders.
        base_url: Public URL prefix for ``upload_root``; None stores file paths.
        meta_key: Key of the project document inside the metadata bag.
        layer_id_prefix: Layer id prefix that marks reapable layer files.
        materialize_images: When False, inline images are left in the
            document and nothing is written.
        required_capability: Capability the caller needs for any file operation.
        capabilities: Capabilities granted when running from the CLI.
    """

    upload_root: Path = field(default_factory=lambda: DEFAULT_UPLOAD_ROOT)
    base_url: str | None = None
    meta_key: str = DEFAULT_META_KEY
    layer_id_prefix: str = DEFAULT_LAYER_ID_PREFIX
    materialize_images: bool = True
    required_capability: str = DEFAULT_CAPABILITY
    capabilities: list[str] = field(default_factory=lambda: [DEFAULT_CAPABILITY])

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> SyncConfig:
        """Create config from dictionary, applying environment overrides.

        Args:
            data: Parsed config file contents.

        Returns:
            SyncConfig instance.

        Raises:
            ValueError: If ``materialize_images`` is not a boolean.
        """
        upload_root = os.getenv("PIXSYNC_UPLOAD_ROOT") or data.get("upload_root")
        base_url = os.getenv("PIXSYNC_BASE_URL") or data.get("base_url")
        capabilities = data.get("capabilities", [DEFAULT_CAPABILITY])
        if isinstance(capabilities, str):
            capabilities = [capabilities]

        return cls(
            upload_root=Path(upload_root) if upload_root else DEFAULT_UPLOAD_ROOT,
            base_url=base_url or None,
            meta_key=data.get("meta_key", DEFAULT_META_KEY),
            layer_id_prefix=data.get("layer_id_prefix", DEFAULT_LAYER_ID_PREFIX) or "",
            materialize_images=_parse_bool("materialize_images", data.get("materialize_images", True)),
            required_capability=data.get("required_capability", DEFAULT_CAPABILITY),
            capabilities=[str(c) for c in capabilities],
        )

    def to_dict(self) -> dict[str, Any]:
        """Serialize for writing a config file."""
        data: dict[str, Any] = {
            "upload_root": self.upload_root.as_posix(),
            "meta_key": self.meta_key,
            "layer_id_prefix": self.layer_id_prefix,
            "materialize_images": self.materialize_images,
            "required_capability": self.required_capability,
            "capabilities": list(self.capabilities),
        }
        if self.base_url:
            data["base_url"] = self.base_url
        return data


class ConfigError(Exception):
    """Raised when configuration cannot be loaded."""

    def __init__(self, path: Path, reason: str) -> None:
        self.path = path
        self.reason = reason
        super().__init__(f"Failed to load config at {path}: {reason}")


def load_config(path: Path | None = None) -> SyncConfig:
    """Load configuration from a YAML file.

    Args:
        path: Explicit config file. When None, ``./pixsync.yaml`` is used
            if present, otherwise defaults (plus environment overrides).

    Returns:
        SyncConfig instance.

    Raises:
        ConfigError: If an explicit file is missing, or any file can't be parsed.
    """
    if path is None:
        if not DEFAULT_CONFIG_FILE.exists():
            return SyncConfig.from_dict({})
        path = DEFAULT_CONFIG_FILE

    if not path.exists():
        raise ConfigError(path, "File not found")

    yaml = YAML(typ="safe")
    try:
        with path.open("r", encoding="utf-8") as f:
            data = yaml.load(f)

        if data is None:
            return SyncConfig.from_dict({})
        if not isinstance(data, dict):
            raise ConfigError(path, "Top level must be a mapping")

        return SyncConfig.from_dict(dict(data))
    except Exception as e:
        if isinstance(e, ConfigError):
            raise
        raise ConfigError(path, str(e)) from e


def write_default_config(path: Path, config: SyncConfig | None = None) -> Path:
    """Write a config file with default (or given) settings."""
    config = config or SyncConfig()
    yaml = YAML()
    yaml.default_flow_style = False
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", encoding="utf-8") as f:
        yaml.dump(config.to_dict(), f)
    return path
