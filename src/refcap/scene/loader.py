"""Load host scenes from YAML and asset templates from mesh files."""

from __future__ import annotations

import logging
from pathlib import Path

import numpy as np
import trimesh
import yaml
from pydantic import BaseModel, Field

from refcap.utils.geometry import as_vec3, compose_matrix, euler_rotation
from .camera import ALL_LAYERS, MAIN_CAMERA_TAG, Camera, Projection
from .graph import DirectionalLight, Scene, SceneNode

logger = logging.getLogger(__name__)

MESH_EXTENSIONS = (".glb", ".gltf", ".obj", ".ply", ".stl", ".off")


# ── Scene description models ─────────────────────────────────────────

class CameraDescription(BaseModel):
    name: str = "Main Camera"
    tag: str = MAIN_CAMERA_TAG
    position: tuple[float, float, float] = (0.0, 1.0, 10.0)
    rotation_euler: tuple[float, float, float] = Field(
        (0.0, 0.0, 0.0), description="Euler angles in degrees (x, y, z)"
    )
    orthographic: bool = False
    yfov_degrees: float = Field(60.0, gt=0, lt=180)
    ortho_size: float = Field(5.0, gt=0)
    znear: float = Field(0.3, gt=0)
    zfar: float = Field(1000.0, gt=0)
    clear_color: tuple[float, float, float, float] = (0.19, 0.3, 0.47, 1.0)
    culling_mask: int = ALL_LAYERS


class LightDescription(BaseModel):
    name: str = "Sun"
    intensity: float = Field(1.0, ge=0)
    rotation_euler: tuple[float, float, float] = (50.0, -30.0, 0.0)
    color: tuple[float, float, float] = (1.0, 1.0, 1.0)


class ObjectDescription(BaseModel):
    name: str
    mesh: Path = Field(..., description="Mesh file, relative to the scene file")
    position: tuple[float, float, float] = (0.0, 0.0, 0.0)
    rotation_euler: tuple[float, float, float] = (0.0, 0.0, 0.0)
    scale: tuple[float, float, float] = (1.0, 1.0, 1.0)
    layer: int = Field(0, ge=0, lt=32)


class SceneDescription(BaseModel):
    name: str = "scene"
    ambient_light: tuple[float, float, float] = (0.2, 0.2, 0.2)
    cameras: list[CameraDescription] = Field(default_factory=lambda: [CameraDescription()])
    lights: list[LightDescription] = Field(default_factory=list)
    objects: list[ObjectDescription] = Field(default_factory=list)


# ── Templates ────────────────────────────────────────────────────────

def load_mesh_template(path: Path) -> SceneNode:
    """Load a mesh/scene file into a ``SceneNode`` template.

    The file's scene graph is flattened: every geometry instance becomes a
    direct child of a root named after the file, carrying its transform
    relative to the file's base frame.
    """
    path = Path(path)
    loaded = trimesh.load(str(path), force="scene")
    root = SceneNode(name=path.stem)

    for node_name in loaded.graph.nodes_geometry:
        transform, geometry_name = loaded.graph[node_name]
        geometry = loaded.geometry.get(geometry_name)
        if not isinstance(geometry, trimesh.Trimesh):
            # Point clouds and paths carry no renderable surface.
            logger.debug(f"Skipping non-mesh geometry '{geometry_name}' in {path.name}")
            continue
        root.add_child(SceneNode(
            name=str(node_name),
            matrix=np.asarray(transform, dtype=np.float64),
            geometry=geometry,
        ))

    logger.debug(f"Loaded template '{root.name}' with {len(root.children)} mesh nodes")
    return root


class TemplateCache:
    """Loads each template file once; the same file yields the same object."""

    def __init__(self):
        self._templates: dict[Path, SceneNode] = {}

    def get(self, path: Path) -> SceneNode:
        key = Path(path).resolve()
        template = self._templates.get(key)
        if template is None:
            template = load_mesh_template(key)
            self._templates[key] = template
        return template

    def __len__(self) -> int:
        return len(self._templates)


# ── Scenes ───────────────────────────────────────────────────────────

def build_scene(
    description: SceneDescription,
    base_dir: Path,
    templates: TemplateCache | None = None,
) -> Scene:
    """Instantiate a ``Scene`` from its description."""
    if templates is None:
        templates = TemplateCache()
    scene = Scene(name=description.name, ambient_light=description.ambient_light)

    for cam in description.cameras:
        scene.add_camera(Camera(
            name=cam.name,
            position=as_vec3(cam.position),
            rotation=euler_rotation(cam.rotation_euler),
            projection=Projection(
                orthographic=cam.orthographic,
                yfov_degrees=cam.yfov_degrees,
                ortho_size=cam.ortho_size,
                znear=cam.znear,
                zfar=cam.zfar,
            ),
            clear_color=cam.clear_color,
            culling_mask=cam.culling_mask,
            tag=cam.tag,
        ))

    for light in description.lights:
        scene.add_light(DirectionalLight(
            name=light.name,
            intensity=light.intensity,
            rotation=euler_rotation(light.rotation_euler),
            color=light.color,
        ))

    for obj in description.objects:
        mesh_path = obj.mesh if obj.mesh.is_absolute() else base_dir / obj.mesh
        node = scene.instantiate(templates.get(mesh_path), name=obj.name)
        node.matrix = compose_matrix(obj.position, euler_rotation(obj.rotation_euler), obj.scale)
        for child in node.descendants():
            child.layer = obj.layer

    logger.info(
        f"Scene '{scene.name}': {len(scene.cameras)} cameras, "
        f"{len(scene.lights)} lights, {len(scene.roots)} objects"
    )
    return scene


def load_scene(path: Path, templates: TemplateCache | None = None) -> Scene:
    """Load and validate a scene YAML file."""
    path = Path(path)
    with open(path, encoding="utf-8") as f:
        raw = yaml.safe_load(f) or {}
    return build_scene(SceneDescription(**raw), base_dir=path.parent, templates=templates)
