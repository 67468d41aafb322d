"""Render one pose into the offscreen target and save it as PNG."""

from __future__ import annotations

import logging
from pathlib import Path

import numpy as np

from refcap.core.errors import CaptureIOError, FatalRenderError
from refcap.scene.backend import RenderBackend
from refcap.scene.camera import Camera, RenderTarget
from refcap.scene.graph import Scene
from refcap.utils.io import encode_png, sanitize_filename, write_bytes
from ._poses import CapturePose

logger = logging.getLogger(__name__)


def capture_filename(asset_name: str, label: str) -> str:
    """``{sanitized-asset-name}_{label}.png``. Collisions are not detected."""
    return f"{sanitize_filename(asset_name)}_{label}.png"


class CaptureRenderer:
    def __init__(self, backend: RenderBackend):
        self.backend = backend

    def render_and_save(
        self,
        scene: Scene,
        camera: Camera,
        pose: CapturePose,
        target: RenderTarget,
        path: Path,
    ) -> Path:
        """Move the camera to ``pose``, render once into ``target``, write PNG.

        Leaves the camera transform and target changed; restoring them is the
        caller's job.
        """
        camera.set_pose(pose.position, pose.rotation)
        camera.target = target

        try:
            self.backend.render(scene, camera)
            pixels = target.read_pixels()
        except Exception as e:
            raise FatalRenderError(f"Render failed for {path.name}: {e}") from e

        expected = (target.height, target.width, 4)
        if pixels.shape != expected:
            raise FatalRenderError(
                f"Readback for {path.name} has shape {pixels.shape}, expected {expected}"
            )

        data = encode_png(np.ascontiguousarray(pixels))
        try:
            write_bytes(path, data)
        except OSError as e:
            raise CaptureIOError(path, e) from e

        logger.debug(f"Wrote {path} ({len(data)} bytes)")
        return path
