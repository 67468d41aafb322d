"""Shared pytest fixtures for refcap tests."""

from pathlib import Path

import numpy as np
import pytest
import trimesh
from scipy.spatial.transform import Rotation

from refcap.scene.camera import MAIN_CAMERA_TAG, Camera, RenderTarget
from refcap.scene.graph import Scene, SceneNode
from tests.fakes import RecordingBackend, make_template


@pytest.fixture
def backend() -> RecordingBackend:
    return RecordingBackend()


@pytest.fixture
def box_template() -> SceneNode:
    return make_template("Crate")


@pytest.fixture
def empty_template() -> SceneNode:
    root = SceneNode(name="Empty")
    root.add_child(SceneNode(name="locator"))
    return root


@pytest.fixture
def original_target() -> RenderTarget:
    return RenderTarget(width=4, height=4, handle="editor-view")


@pytest.fixture
def scene(original_target: RenderTarget) -> Scene:
    """Scene with a tagged main camera and a backdrop object at the origin."""
    scene = Scene(name="test_scene")
    scene.add_camera(Camera(
        name="Main Camera",
        position=np.array([0.0, 1.5, 4.0]),
        rotation=Rotation.from_euler("x", -15, degrees=True),
        tag=MAIN_CAMERA_TAG,
        target=original_target,
    ))
    backdrop = scene.add(make_template("Backdrop", extents=(20.0, 0.1, 20.0)))
    backdrop.position = (0.0, -0.05, 0.0)
    return scene


@pytest.fixture
def catalog_root(tmp_path: Path) -> Path:
    """Asset catalog root holding two mesh files in Png_folder."""
    root = tmp_path / "assets"
    folder = root / "Png_folder"
    folder.mkdir(parents=True)
    trimesh.creation.box(extents=(1.0, 1.0, 1.0)).export(str(folder / "Crate.stl"))
    trimesh.creation.icosphere(subdivisions=1).export(str(folder / "Ball.stl"))
    return root
