"""Pydantic models for project documents."""

from pixsync.models.project import LAYER_TYPE_IMAGE, AssetCategory, Layer, Project

__all__ = [
    "LAYER_TYPE_IMAGE",
    "AssetCategory",
    "Layer",
    "Project",
]
