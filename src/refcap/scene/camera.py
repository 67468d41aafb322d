"""Camera and offscreen render target models."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any

import numpy as np
from scipy.spatial.transform import Rotation

from refcap.utils.geometry import as_vec3, compose_matrix

logger = logging.getLogger(__name__)

MAIN_CAMERA_TAG = "MainCamera"

# 32 render layers, all selected.
ALL_LAYERS = 0xFFFFFFFF


@dataclass
class RenderTarget:
    """Offscreen colour buffer a camera renders into.

    ``handle`` is owned by the backend that allocated the target.
    ``buffer`` holds the last RGBA8 frame written by that backend.
    """

    width: int
    height: int
    samples: int = 1
    handle: Any = None
    buffer: np.ndarray | None = None
    released: bool = False

    def read_pixels(self) -> np.ndarray:
        """Read back the full target region as an (H, W, 4) uint8 copy."""
        if self.released:
            raise RuntimeError("Render target has been released")
        if self.buffer is None:
            raise RuntimeError("Render target holds no rendered frame")
        return np.array(self.buffer, dtype=np.uint8, copy=True)


@dataclass
class Projection:
    """Camera projection settings."""

    orthographic: bool = False
    yfov_degrees: float = 60.0
    ortho_size: float = 5.0
    znear: float = 0.3
    zfar: float = 1000.0


@dataclass
class Camera:
    name: str
    position: np.ndarray = field(default_factory=lambda: np.zeros(3))
    rotation: Rotation = field(default_factory=Rotation.identity)
    projection: Projection = field(default_factory=Projection)
    clear_color: tuple[float, float, float, float] = (0.19, 0.3, 0.47, 1.0)
    culling_mask: int = ALL_LAYERS
    tag: str = ""
    target: RenderTarget | None = None

    def __post_init__(self):
        self.position = as_vec3(self.position)

    @property
    def world_matrix(self) -> np.ndarray:
        return compose_matrix(self.position, self.rotation)

    def set_pose(self, position, rotation: Rotation) -> None:
        self.position = as_vec3(position)
        self.rotation = rotation

    def culls_in(self, layer: int) -> bool:
        """True when objects on ``layer`` pass this camera's culling mask."""
        return bool((self.culling_mask & ALL_LAYERS) >> layer & 1)
