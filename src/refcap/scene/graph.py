"""Minimal scene graph: node trees, cameras and directional lights.

Templates loaded from disk are plain ``SceneNode`` trees. ``Scene.instantiate``
clones a template into the scene; clones share geometry with the template.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Iterator

import numpy as np
import trimesh
from scipy.spatial.transform import Rotation

from refcap.utils.geometry import as_vec3
from .camera import MAIN_CAMERA_TAG, Camera

logger = logging.getLogger(__name__)

# Hierarchies come from external files; refuse anything deeper than this.
MAX_HIERARCHY_DEPTH = 256

NUM_LAYERS = 32


@dataclass(eq=False)
class SceneNode:
    name: str
    matrix: np.ndarray = field(default_factory=lambda: np.eye(4))
    geometry: trimesh.Trimesh | None = None
    layer: int = 0
    visible: bool = True
    children: list[SceneNode] = field(default_factory=list)
    parent: SceneNode | None = field(default=None, repr=False)

    def __post_init__(self):
        if not 0 <= self.layer < NUM_LAYERS:
            raise ValueError(f"Layer must be in [0, {NUM_LAYERS}), got {self.layer}")

    @property
    def position(self) -> np.ndarray:
        return self.matrix[:3, 3].copy()

    @position.setter
    def position(self, value) -> None:
        self.matrix = self.matrix.copy()
        self.matrix[:3, 3] = as_vec3(value)

    @property
    def has_geometry(self) -> bool:
        return (
            self.visible
            and self.geometry is not None
            and len(self.geometry.vertices) > 0
        )

    def add_child(self, child: SceneNode) -> SceneNode:
        child.parent = self
        self.children.append(child)
        return child

    def world_matrix(self) -> np.ndarray:
        matrix = self.matrix
        node = self.parent
        while node is not None:
            matrix = node.matrix @ matrix
            node = node.parent
        return matrix

    def walk(self) -> Iterator[tuple[SceneNode, np.ndarray]]:
        """Yield (node, world matrix) for this node and all descendants.

        Depth-first, parents before children, children in insertion order.
        """
        base = self.parent.world_matrix() if self.parent is not None else np.eye(4)
        stack = [(self, base @ self.matrix, 0)]
        while stack:
            node, world, depth = stack.pop()
            if depth > MAX_HIERARCHY_DEPTH:
                raise ValueError(
                    f"Hierarchy under '{self.name}' exceeds {MAX_HIERARCHY_DEPTH} levels"
                )
            yield node, world
            for child in reversed(node.children):
                stack.append((child, world @ child.matrix, depth + 1))

    def descendants(self) -> Iterator[SceneNode]:
        for node, _ in self.walk():
            yield node

    def clone(self, name: str | None = None) -> SceneNode:
        """Deep-copy the node tree. Geometry objects are shared, not copied."""
        root = SceneNode(
            name=name or self.name,
            matrix=self.matrix.copy(),
            geometry=self.geometry,
            layer=self.layer,
            visible=self.visible,
        )
        stack = [(self, root, 0)]
        while stack:
            src, dst, depth = stack.pop()
            if depth > MAX_HIERARCHY_DEPTH:
                raise ValueError(
                    f"Hierarchy under '{self.name}' exceeds {MAX_HIERARCHY_DEPTH} levels"
                )
            for child in src.children:
                copy = dst.add_child(SceneNode(
                    name=child.name,
                    matrix=child.matrix.copy(),
                    geometry=child.geometry,
                    layer=child.layer,
                    visible=child.visible,
                ))
                stack.append((child, copy, depth + 1))
        return root


@dataclass(eq=False)
class DirectionalLight:
    name: str
    intensity: float = 1.0
    rotation: Rotation = field(default_factory=Rotation.identity)
    color: tuple[float, float, float] = (1.0, 1.0, 1.0)


class Scene:
    """Root container for nodes, cameras and lights."""

    def __init__(self, name: str = "scene", ambient_light=(0.2, 0.2, 0.2)):
        self.name = name
        self.ambient_light = tuple(ambient_light)
        self.roots: list[SceneNode] = []
        self.cameras: list[Camera] = []
        self.lights: list[DirectionalLight] = []

    def add(self, node: SceneNode) -> SceneNode:
        if node.parent is not None:
            raise ValueError(f"Node '{node.name}' already has a parent")
        self.roots.append(node)
        return node

    def instantiate(self, template: SceneNode, name: str | None = None) -> SceneNode:
        """Clone ``template`` into the scene as a new root."""
        instance = template.clone(name=name)
        self.roots.append(instance)
        logger.debug(f"Instantiated '{template.name}' as '{instance.name}'")
        return instance

    def destroy(self, node: SceneNode) -> None:
        """Remove a root node and its subtree from the scene immediately."""
        for i, root in enumerate(self.roots):
            if root is node:
                del self.roots[i]
                logger.debug(f"Destroyed '{node.name}'")
                return
        raise ValueError(f"Node '{node.name}' is not a root of scene '{self.name}'")

    def add_camera(self, camera: Camera) -> Camera:
        self.cameras.append(camera)
        return camera

    def main_camera(self) -> Camera | None:
        """First camera tagged as the main camera, if any."""
        return next((c for c in self.cameras if c.tag == MAIN_CAMERA_TAG), None)

    def add_light(self, light: DirectionalLight) -> DirectionalLight:
        self.lights.append(light)
        return light

    def remove_light(self, light: DirectionalLight) -> None:
        self.lights = [l for l in self.lights if l is not light]

    def walk(self) -> Iterator[tuple[SceneNode, np.ndarray]]:
        for root in list(self.roots):
            yield from root.walk()

    def visible_geometry(self, culling_mask: int) -> list[tuple[SceneNode, np.ndarray]]:
        """Geometry-bearing nodes whose layer is selected by ``culling_mask``."""
        mask = culling_mask & 0xFFFFFFFF
        return [
            (node, world)
            for node, world in self.walk()
            if node.has_geometry and (mask >> node.layer) & 1
        ]
