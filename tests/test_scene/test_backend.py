"""Tests for render backends. The pyrender test needs a working headless GL context."""

import numpy as np
import pytest

from refcap.scene.backend import SUPERSAMPLE_FACTORS, PyrenderBackend, RenderBackend
from refcap.scene.camera import MAIN_CAMERA_TAG, Camera, RenderTarget
from refcap.scene.graph import Scene
from tests.fakes import RecordingBackend, make_template


def _offscreen_backend():
    backend = PyrenderBackend()
    try:
        import pyrender  # noqa: F401
    except Exception as e:  # missing package or GL platform library
        pytest.skip(f"pyrender unavailable: {e}")
    try:
        target = backend.allocate_target(32, 24, samples=1)
    except Exception as e:  # no EGL/OSMesa on this machine
        pytest.skip(f"offscreen OpenGL unavailable: {e}")
    return backend, target


class TestProtocol:
    def test_backends_satisfy_protocol(self):
        assert isinstance(RecordingBackend(), RenderBackend)
        assert isinstance(PyrenderBackend(), RenderBackend)

    def test_supersample_table_covers_msaa_levels(self):
        assert set(SUPERSAMPLE_FACTORS) == {1, 2, 4, 8}


class TestRenderTarget:
    def test_read_pixels_requires_a_frame(self):
        with pytest.raises(RuntimeError):
            RenderTarget(width=2, height=2).read_pixels()

    def test_read_pixels_after_release_fails(self):
        target = RenderTarget(width=2, height=2, buffer=np.zeros((2, 2, 4), np.uint8))
        target.released = True
        with pytest.raises(RuntimeError):
            target.read_pixels()

    def test_read_pixels_returns_copy(self):
        buf = np.zeros((2, 2, 4), np.uint8)
        target = RenderTarget(width=2, height=2, buffer=buf)
        out = target.read_pixels()
        out[0, 0] = 255
        assert buf[0, 0, 0] == 0


class TestPyrenderBackend:
    def test_renders_rgba_frame_of_target_size(self):
        backend, target = _offscreen_backend()
        try:
            scene = Scene()
            scene.add(make_template("Crate"))
            camera = Camera(
                "Main", position=np.array([0.0, 0.0, 5.0]), tag=MAIN_CAMERA_TAG,
                clear_color=(0.0, 0.0, 0.0, 0.0), target=target,
            )
            backend.render(scene, camera)
            pixels = target.read_pixels()
            assert pixels.shape == (24, 32, 4)
            assert pixels[12, 16, 3] > 0
            assert pixels[0, 0, 3] == 0
        finally:
            backend.release_target(target)
        assert target.released

    def test_render_without_target_fails(self):
        backend = PyrenderBackend()
        with pytest.raises(RuntimeError):
            backend.render(Scene(), Camera("Main"))
