"""Pytest configuration and shared fixtures."""

from __future__ import annotations

from pathlib import Path

import pytest

from pixsync.assets.store import AssetStore
from pixsync.config import SyncConfig
from pixsync.lifecycle import AllowAll, AssetLifecycle


@pytest.fixture(autouse=True)
def isolate_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep host environment overrides out of config resolution."""
    monkeypatch.delenv("PIXSYNC_UPLOAD_ROOT", raising=False)
    monkeypatch.delenv("PIXSYNC_BASE_URL", raising=False)
    monkeypatch.delenv("PIXSYNC_CONFIG", raising=False)


@pytest.fixture
def upload_root(tmp_path: Path) -> Path:
    """Return an empty upload directory."""
    return tmp_path / "uploads"


@pytest.fixture
def store(upload_root: Path) -> AssetStore:
    """Return an asset store publishing under a fixed base URL."""
    return AssetStore(upload_root, base_url="https://example.test/uploads")


@pytest.fixture
def config(upload_root: Path) -> SyncConfig:
    return SyncConfig(upload_root=upload_root, base_url="https://example.test/uploads")


@pytest.fixture
def lifecycle(store: AssetStore, config: SyncConfig) -> AssetLifecycle:
    """Return a lifecycle whose caller holds every capability."""
    return AssetLifecycle(store, AllowAll(), config=config)
