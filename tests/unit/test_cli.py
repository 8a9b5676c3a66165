"""Test CLI commands."""

from __future__ import annotations

import json
from typing import TYPE_CHECKING

from typer.testing import CliRunner

from pixsync import __version__
from pixsync.cli import app
from tests.fixtures.project_fixtures import (
    CORRUPT_INLINE,
    META_KEY,
    image_layer,
    inline_image,
    make_bag,
)

if TYPE_CHECKING:
    from pathlib import Path

runner = CliRunner()


def _write_config(tmp_path: Path, name: str = "pixsync.yaml", **extra: str) -> Path:
    lines = [f"upload_root: {(tmp_path / 'uploads').as_posix()}", "base_url: https://example.test/uploads"]
    lines += [f"{key}: {value}" for key, value in extra.items()]
    path = tmp_path / name
    path.write_text("\n".join(lines) + "\n")
    return path


def _write_json(path: Path, data: dict) -> Path:
    path.write_text(json.dumps(data))
    return path


def test_version_command() -> None:
    result = runner.invoke(app, ["version"])

    assert result.exit_code == 0
    assert f"v{__version__}" in result.stdout


def test_no_args_shows_help() -> None:
    result = runner.invoke(app, [])

    # no_args_is_help exits 2 on current click (0 on click < 8.2)
    assert result.exit_code in (0, 2)
    assert "pixsync" in result.output


# --- Init Command Tests ---


def test_init_writes_config(tmp_path: Path) -> None:
    import yaml

    result = runner.invoke(
        app,
        ["init", "--path", str(tmp_path), "--upload-root", "/srv/uploads", "--base-url", "https://x.test/u"],
    )

    assert result.exit_code == 0
    assert "Created config" in result.stdout
    config = yaml.safe_load((tmp_path / "pixsync.yaml").read_text())
    assert config["upload_root"] == "/srv/uploads"
    assert config["base_url"] == "https://x.test/u"
    assert config["layer_id_prefix"] == "pixmagix-"


def test_init_existing_config_fails(tmp_path: Path) -> None:
    (tmp_path / "pixsync.yaml").write_text("upload_root: x\n")

    result = runner.invoke(app, ["init", "--path", str(tmp_path)])

    assert result.exit_code == 1
    assert "already" in result.stdout


# --- Save Command Tests ---


def test_save_rewrites_bag(tmp_path: Path) -> None:
    config = _write_config(tmp_path)
    doc = _write_json(
        tmp_path / "bag.json",
        make_bag(thumbnail=inline_image(), layers=[image_layer("pixmagix-1", inline_image())]),
    )
    out = tmp_path / "saved.json"

    result = runner.invoke(app, ["--config", str(config), "save", str(doc), "--id", "5", "-o", str(out)])

    assert result.exit_code == 0
    saved = json.loads(out.read_text())
    assert saved[META_KEY]["thumbnail"] == "https://example.test/uploads/thumbnails/project-5.jpg"
    assert saved[META_KEY]["layers"][0]["src"] == "https://example.test/uploads/layers/layer-5-pixmagix-1.png"
    assert (tmp_path / "uploads" / "layers" / "layer-5-pixmagix-1.png").exists()


def test_save_to_stdout(tmp_path: Path) -> None:
    config = _write_config(tmp_path)
    doc = _write_json(tmp_path / "bag.json", make_bag(preview=inline_image()))

    result = runner.invoke(app, ["--config", str(config), "save", str(doc), "--id", "5"])

    assert result.exit_code == 0
    assert "https://example.test/uploads/previews/project-5.jpg" in result.stdout


def test_save_accepts_request_params(tmp_path: Path) -> None:
    config = _write_config(tmp_path)
    doc = _write_json(tmp_path / "req.json", {"meta": make_bag(thumbnail=inline_image())})
    out = tmp_path / "saved.json"

    result = runner.invoke(app, ["--config", str(config), "save", str(doc), "--id", "9", "-o", str(out)])

    assert result.exit_code == 0
    saved = json.loads(out.read_text())
    assert saved[META_KEY]["thumbnail"].endswith("/thumbnails/project-9.jpg")


def test_save_update_reaps_layers(tmp_path: Path) -> None:
    config = _write_config(tmp_path)
    first = _write_json(tmp_path / "v1.json", make_bag(layers=[image_layer("pixmagix-1", inline_image())]))
    second = _write_json(tmp_path / "v2.json", make_bag(layers=[image_layer("pixmagix-2", inline_image())]))
    out = tmp_path / "saved.json"

    runner.invoke(app, ["--config", str(config), "save", str(first), "--id", "5", "-o", str(out)])
    result = runner.invoke(
        app, ["--config", str(config), "save", str(second), "--id", "5", "--update", "-o", str(out)]
    )

    assert result.exit_code == 0
    layers_dir = tmp_path / "uploads" / "layers"
    assert [p.name for p in layers_dir.iterdir()] == ["layer-5-pixmagix-2.png"]


def test_save_reports_failures_but_succeeds(tmp_path: Path) -> None:
    config = _write_config(tmp_path)
    doc = _write_json(tmp_path / "bag.json", make_bag(thumbnail=CORRUPT_INLINE))
    out = tmp_path / "saved.json"

    result = runner.invoke(app, ["--config", str(config), "save", str(doc), "--id", "5", "-o", str(out)])

    assert result.exit_code == 0
    assert "left inline" in result.output
    assert json.loads(out.read_text())[META_KEY]["thumbnail"] == CORRUPT_INLINE


def test_save_invalid_json_fails(tmp_path: Path) -> None:
    config = _write_config(tmp_path)
    doc = tmp_path / "bag.json"
    doc.write_text("{not json")

    result = runner.invoke(app, ["--config", str(config), "save", str(doc), "--id", "5"])

    assert result.exit_code == 1
    assert "Cannot read" in result.output


def test_save_missing_config_fails(tmp_path: Path) -> None:
    doc = _write_json(tmp_path / "bag.json", make_bag())

    result = runner.invoke(
        app, ["--config", str(tmp_path / "nope.yaml"), "save", str(doc), "--id", "5"]
    )

    assert result.exit_code == 1
    assert "File not found" in result.output


def test_save_with_materialization_disabled(tmp_path: Path) -> None:
    config = _write_config(tmp_path, materialize_images="false")
    doc = _write_json(tmp_path / "bag.json", make_bag(thumbnail=inline_image()))
    out = tmp_path / "saved.json"

    result = runner.invoke(app, ["--config", str(config), "save", str(doc), "--id", "5", "-o", str(out)])

    assert result.exit_code == 0
    assert json.loads(out.read_text())[META_KEY]["thumbnail"] == inline_image()
    assert not (tmp_path / "uploads").exists()


# --- Delete Command Tests ---


def test_delete_removes_assets(tmp_path: Path) -> None:
    config = _write_config(tmp_path)
    doc = _write_json(
        tmp_path / "bag.json",
        make_bag(thumbnail=inline_image(), preview=inline_image(), layers=[image_layer("pixmagix-1", inline_image())]),
    )
    out = tmp_path / "saved.json"
    runner.invoke(app, ["--config", str(config), "save", str(doc), "--id", "5", "-o", str(out)])
    payload = _write_json(
        tmp_path / "deleted.json",
        {"deleted": True, "previous": {"id": 5, "meta": json.loads(out.read_text())}},
    )

    result = runner.invoke(app, ["--config", str(config), "delete", str(payload)])

    assert result.exit_code == 0
    assert "Removed 4 asset file(s) of project 5" in result.stdout
    assert [p for p in (tmp_path / "uploads").rglob("*") if p.is_file()] == []


def test_delete_without_capability_reports_nothing_removed(tmp_path: Path) -> None:
    config = _write_config(tmp_path)
    doc = _write_json(tmp_path / "bag.json", make_bag(thumbnail=inline_image()))
    out = tmp_path / "saved.json"
    runner.invoke(app, ["--config", str(config), "save", str(doc), "--id", "5", "-o", str(out)])
    readonly = _write_config(tmp_path, "readonly.yaml", capabilities="[]")
    payload = _write_json(tmp_path / "deleted.json", {"previous": {"id": 5, "meta": json.loads(out.read_text())}})

    result = runner.invoke(app, ["--config", str(readonly), "delete", str(payload)])

    assert result.exit_code == 0
    assert "No asset files removed for project 5" in result.stdout
    assert (tmp_path / "uploads" / "thumbnails" / "project-5.jpg").exists()


def test_delete_without_project_document_reports_nothing_removed(tmp_path: Path) -> None:
    config = _write_config(tmp_path)
    payload = _write_json(tmp_path / "deleted.json", {"previous": {"id": 5, "meta": {}}})

    result = runner.invoke(app, ["--config", str(config), "delete", str(payload)])

    assert result.exit_code == 0
    assert "No asset files removed for project 5" in result.stdout


def test_delete_without_id_warns(tmp_path: Path) -> None:
    config = _write_config(tmp_path)
    payload = _write_json(tmp_path / "deleted.json", {"previous": {"meta": make_bag()}})

    result = runner.invoke(app, ["--config", str(config), "delete", str(payload)])

    assert result.exit_code == 0
    assert "no id" in result.output


# --- Status Command Tests ---


def test_status_lists_assets(tmp_path: Path) -> None:
    config = _write_config(tmp_path)
    doc = _write_json(
        tmp_path / "bag.json",
        make_bag(thumbnail=inline_image(), layers=[image_layer("pixmagix-1", inline_image())]),
    )
    runner.invoke(app, ["--config", str(config), "save", str(doc), "--id", "5", "-o", str(tmp_path / "o.json")])

    result = runner.invoke(app, ["--config", str(config), "status", "--id", "5"])

    assert result.exit_code == 0
    assert "project-5.jpg" in result.stdout
    assert "pixmagix-1" in result.stdout
    assert "present" in result.stdout
    assert "missing" in result.stdout


def test_verbose_flag_exists() -> None:
    result = runner.invoke(app, ["--help"])

    assert "--verbose" in result.stdout
    assert "--log-dir" in result.stdout
