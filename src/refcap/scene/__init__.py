"""Host scene primitives: scene graph, cameras, render targets, backends."""

from .camera import ALL_LAYERS, MAIN_CAMERA_TAG, Camera, Projection, RenderTarget
from .graph import DirectionalLight, Scene, SceneNode
from .backend import PyrenderBackend, RenderBackend

__all__ = [
    "ALL_LAYERS",
    "MAIN_CAMERA_TAG",
    "Camera",
    "Projection",
    "RenderTarget",
    "DirectionalLight",
    "Scene",
    "SceneNode",
    "PyrenderBackend",
    "RenderBackend",
]
