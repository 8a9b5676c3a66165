"""Asset storage for materialized project images.

Files live under ``{upload_root}/{category}/`` with deterministic names
(see :mod:`pixsync.assets.naming`), so writing the same role twice
overwrites in place. Writes go through a temp file and an atomic rename
so a reference is never handed out for a half-written file.
"""

from __future__ import annotations

import os
import tempfile
from pathlib import Path
from urllib.parse import quote

from pixsync.assets.errors import DeleteError, DirectoryListError, WriteError
from pixsync.models.project import AssetCategory
from pixsync.observability.logging import get_logger

log = get_logger(__name__)


class AssetStore:
    """Read, write and delete asset files for all projects.

    Args:
        upload_root: Base directory holding one subdirectory per category.
        base_url: Public URL prefix for ``upload_root``. When unset,
            references are absolute filesystem paths.
    """

    def __init__(self, upload_root: Path, base_url: str | None = None) -> None:
        self.upload_root = upload_root
        self.base_url = base_url.rstrip("/") if base_url else None

    def upload_dir(self, category: AssetCategory | str, filename: str | None = None) -> Path:
        """Resolve a category directory, optionally joined with a filename."""
        directory = self.upload_root / AssetCategory(category).value
        if filename is None:
            return directory
        return directory / filename

    def public_reference(self, category: AssetCategory | str, filename: str) -> str:
        """Return the reference stored in project documents for an asset."""
        category = AssetCategory(category)
        if self.base_url:
            return f"{self.base_url}/{category.value}/{quote(filename)}"
        return self.upload_dir(category, filename).resolve().as_posix()

    def write(self, category: AssetCategory | str, filename: str, data: bytes) -> str:
        """Write an asset file, replacing any existing one of the same name.

        Args:
            category: Asset category directory.
            filename: Deterministic filename.
            data: Raw file contents.

        Returns:
            Public reference of the written file.

        Raises:
            WriteError: If the directory or file can't be written.
        """
        category = AssetCategory(category)
        directory = self.upload_dir(category)
        target = directory / filename
        tmp_path: Path | None = None

        try:
            directory.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(prefix=f".{filename}.", suffix=".tmp", dir=directory)
            tmp_path = Path(tmp_name)
            with os.fdopen(fd, "wb") as f:
                f.write(data)
            # mkstemp creates 0600; assets are served publicly
            tmp_path.chmod(0o644)
            tmp_path.replace(target)
        except OSError as e:
            if tmp_path is not None:
                tmp_path.unlink(missing_ok=True)
            raise WriteError(category.value, filename, str(e)) from e

        log.debug("asset_stored", category=category.value, filename=filename, size_bytes=len(data))
        return self.public_reference(category, filename)

    def remove(self, category: AssetCategory | str, filename: str) -> bool:
        """Remove an asset file.

        Returns:
            True if a file was removed, False if it was already absent.

        Raises:
            DeleteError: If the file exists but can't be removed.
        """
        category = AssetCategory(category)
        path = self.upload_dir(category, filename)
        try:
            path.unlink()
        except FileNotFoundError:
            return False
        except OSError as e:
            raise DeleteError(category.value, filename, str(e)) from e

        log.debug("asset_deleted", category=category.value, filename=filename)
        return True

    def delete(self, category: AssetCategory | str, filename: str) -> bool:
        """Delete an asset file, best effort.

        Absence is not an error. A DeleteError is logged and swallowed;
        cleanup is advisory.

        Returns:
            True if a file was removed.
        """
        try:
            return self.remove(category, filename)
        except DeleteError as e:
            log.warning("asset_delete_failed", category=e.category, filename=e.filename, error=e.reason)
            return False

    def list_files(self, category: AssetCategory | str) -> list[str]:
        """List the regular files in a category directory, sorted by name.

        A directory that does not exist yet holds no files.

        Raises:
            DirectoryListError: If the directory exists but can't be read.
        """
        category = AssetCategory(category)
        directory = self.upload_dir(category)
        try:
            return sorted(p.name for p in directory.iterdir() if p.is_file() and not p.name.startswith("."))
        except FileNotFoundError:
            return []
        except OSError as e:
            raise DirectoryListError(category.value, str(e)) from e

    def exists(self, category: AssetCategory | str, filename: str) -> bool:
        return self.upload_dir(category, filename).is_file()
