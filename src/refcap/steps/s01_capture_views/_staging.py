"""Spatial and render-layer isolation of one asset at a time."""

from __future__ import annotations

import logging
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Iterator

from refcap.scene.graph import NUM_LAYERS, Scene, SceneNode

logger = logging.getLogger(__name__)

STAGED_NODE_NAME = "~CaptureTarget"


@dataclass(eq=False)
class AssetEntry:
    """A template plus its display name. Distinct by template identity."""

    template: SceneNode
    name: str


@dataclass(eq=False)
class StagedInstance:
    asset: AssetEntry
    root: SceneNode
    destroyed: bool = False


def first_layer_from_mask(mask: int) -> int | None:
    """Lowest layer index selected by a 32-bit mask, or None if none is."""
    mask &= 0xFFFFFFFF
    for layer in range(NUM_LAYERS):
        if mask >> layer & 1:
            return layer
    return None


def set_layer_recursively(root: SceneNode, layer: int) -> None:
    for node in root.descendants():
        node.layer = layer


class IsolationStager:
    """Instantiates assets at the staging position, one at a time."""

    def __init__(self, scene: Scene, staging_position, layer_mask: int):
        self.scene = scene
        self.staging_position = tuple(staging_position)
        self.layer = first_layer_from_mask(layer_mask)
        self._active: StagedInstance | None = None

    @property
    def active(self) -> StagedInstance | None:
        return self._active

    def stage(self, asset: AssetEntry) -> StagedInstance:
        if self._active is not None:
            raise RuntimeError(
                f"Cannot stage '{asset.name}' while '{self._active.asset.name}' is staged"
            )
        root = self.scene.instantiate(asset.template, name=STAGED_NODE_NAME)
        root.position = self.staging_position
        if self.layer is not None:
            set_layer_recursively(root, self.layer)
        self._active = StagedInstance(asset=asset, root=root)
        logger.debug(f"Staged '{asset.name}' at {self.staging_position} (layer={self.layer})")
        return self._active

    def unstage(self, instance: StagedInstance) -> None:
        if instance.destroyed:
            raise RuntimeError(f"'{instance.asset.name}' was already unstaged")
        try:
            self.scene.destroy(instance.root)
        finally:
            instance.destroyed = True
            if self._active is instance:
                self._active = None

    @contextmanager
    def staged(self, asset: AssetEntry) -> Iterator[StagedInstance]:
        """Stage ``asset`` for the duration of the block; always unstage."""
        instance = self.stage(asset)
        try:
            yield instance
        finally:
            self.unstage(instance)
