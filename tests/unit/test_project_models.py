"""Tests for project document models."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from pixsync.models import LAYER_TYPE_IMAGE, AssetCategory, Layer, Project


def test_extra_fields_preserved() -> None:
    project = Project.model_validate(
        {"title": "Poster", "width": 800, "layers": [{"id": "pixmagix-1", "type": "text", "text": "Hi"}]}
    )

    assert project.model_extra == {"title": "Poster", "width": 800}
    assert Layer.model_validate(project.layers[0]).model_extra == {"text": "Hi"}


def test_defaults() -> None:
    project = Project()

    assert project.thumbnail is None
    assert project.preview is None
    assert project.layers == []


def test_layer_is_image() -> None:
    assert Layer(id="pixmagix-1", type=LAYER_TYPE_IMAGE).is_image
    assert not Layer(id="pixmagix-1", type="text").is_image


@pytest.mark.parametrize("layers", [None, "nope", {"id": "pixmagix-1"}])
def test_non_list_layers_read_as_empty(layers: object) -> None:
    assert Project.model_validate({"layers": layers}).layers == []


def test_layer_entries_kept_raw() -> None:
    entries = [{"id": "pixmagix-1", "type": "image"}, "garbage", None]

    assert Project.model_validate({"layers": entries}).layers == entries


def test_non_string_thumbnail_reads_as_empty() -> None:
    project = Project.model_validate({"thumbnail": 5, "preview": ["x"]})

    assert project.thumbnail is None
    assert project.preview is None


def test_layer_null_fields_read_as_empty() -> None:
    layer = Layer.model_validate({"id": None, "type": None, "src": {"not": "a string"}})

    assert layer.id == ""
    assert layer.type == ""
    assert layer.src is None


def test_layer_numeric_id_coerced() -> None:
    assert Layer.model_validate({"id": 7, "type": "image"}).id == "7"


@pytest.mark.parametrize("entry", ["garbage", None, {"id": {"nested": 1}}])
def test_malformed_layer_entry_rejected(entry: object) -> None:
    with pytest.raises(ValidationError):
        Layer.model_validate(entry)


def test_asset_category_values() -> None:
    assert [c.value for c in AssetCategory] == ["thumbnails", "previews", "layers"]
