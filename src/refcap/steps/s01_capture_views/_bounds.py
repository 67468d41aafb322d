"""Union world-space bounding box of an instance's visible geometry."""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np
import trimesh

from refcap.scene.graph import SceneNode


@dataclass(frozen=True)
class Bounds:
    minimum: np.ndarray
    maximum: np.ndarray

    @property
    def center(self) -> np.ndarray:
        return (self.minimum + self.maximum) / 2.0

    @property
    def size(self) -> np.ndarray:
        return self.maximum - self.minimum


def compute_bounds(root: SceneNode) -> Bounds | None:
    """Union of the world AABBs of every visible geometry node under ``root``.

    Each node contributes the AABB of its eight transformed local-bounds
    corners. Returns None when no descendant carries visible geometry.
    """
    corners = [
        trimesh.transform_points(trimesh.bounds.corners(node.geometry.bounds), world)
        for node, world in root.walk()
        if node.has_geometry
    ]
    if not corners:
        return None
    points = np.vstack(corners)
    return Bounds(minimum=points.min(axis=0), maximum=points.max(axis=0))
