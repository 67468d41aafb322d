"""Offscreen render backends.

A backend renders the current view of a camera into the camera's bound
``RenderTarget`` and leaves the RGBA8 frame in ``target.buffer``. Layer
culling is decided by ``Scene.visible_geometry`` so every backend isolates
the same set of nodes.
"""

from __future__ import annotations

import logging
import os
from typing import Protocol, runtime_checkable

import numpy as np
from PIL import Image

from .camera import Camera, RenderTarget
from .graph import Scene

logger = logging.getLogger(__name__)

# MSAA sample count -> supersampling factor per axis.
SUPERSAMPLE_FACTORS = {1: 1, 2: 2, 4: 2, 8: 3}


@runtime_checkable
class RenderBackend(Protocol):
    def allocate_target(self, width: int, height: int, samples: int = 1) -> RenderTarget:
        ...

    def render(self, scene: Scene, camera: Camera) -> None:
        ...

    def release_target(self, target: RenderTarget) -> None:
        ...


class PyrenderBackend:
    """Headless OpenGL rendering through pyrender's OffscreenRenderer.

    pyrender has no MSAA switch, so antialiasing is done by rendering at a
    multiple of the target size and downsampling with LANCZOS.
    """

    def __init__(self, platform: str = "egl"):
        # Must be set before pyrender (PyOpenGL) is first imported.
        os.environ.setdefault("PYOPENGL_PLATFORM", platform)

    def allocate_target(self, width: int, height: int, samples: int = 1) -> RenderTarget:
        import pyrender

        factor = SUPERSAMPLE_FACTORS.get(samples, 1)
        handle = pyrender.OffscreenRenderer(width * factor, height * factor)
        logger.info(
            f"Allocated {width}x{height} render target (samples={samples}, supersample x{factor})"
        )
        return RenderTarget(width=width, height=height, samples=samples, handle=handle)

    def release_target(self, target: RenderTarget) -> None:
        if target.released:
            return
        if target.handle is not None:
            target.handle.delete()
        target.handle = None
        target.buffer = None
        target.released = True

    def render(self, scene: Scene, camera: Camera) -> None:
        target = camera.target
        if target is None or target.released or target.handle is None:
            raise RuntimeError(f"Camera '{camera.name}' has no live render target")

        import pyrender

        pr_scene = pyrender.Scene(
            bg_color=list(camera.clear_color),
            ambient_light=list(scene.ambient_light),
        )
        for node, world in scene.visible_geometry(camera.culling_mask):
            pr_scene.add(pyrender.Mesh.from_trimesh(node.geometry, smooth=False), pose=world)

        for light in scene.lights:
            pose = np.eye(4)
            pose[:3, :3] = light.rotation.as_matrix()
            pr_scene.add(
                pyrender.DirectionalLight(color=np.array(light.color), intensity=light.intensity),
                pose=pose,
            )

        proj = camera.projection
        aspect = target.width / target.height
        if proj.orthographic:
            pr_camera = pyrender.OrthographicCamera(
                xmag=proj.ortho_size * aspect, ymag=proj.ortho_size,
                znear=proj.znear, zfar=proj.zfar,
            )
        else:
            pr_camera = pyrender.PerspectiveCamera(
                yfov=np.deg2rad(proj.yfov_degrees), aspectRatio=aspect,
                znear=proj.znear, zfar=proj.zfar,
            )
        pr_scene.add(pr_camera, pose=camera.world_matrix)

        color, _depth = target.handle.render(pr_scene, flags=pyrender.RenderFlags.RGBA)
        color = np.ascontiguousarray(color, dtype=np.uint8)
        if color.shape[:2] != (target.height, target.width):
            color = np.asarray(
                Image.fromarray(color).resize((target.width, target.height), Image.Resampling.LANCZOS)
            )
        target.buffer = color
