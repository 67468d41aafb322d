"""Batch capture state machine.

For every asset: stage it at the isolation position, compute its bounds,
render the four derived poses and unstage it. Everything the run mutates
(camera pose/target/clear colour/culling/projection, the offscreen target,
the temporary light) is undone in one ``finally`` block, whatever ends the
run.
"""

from __future__ import annotations

import logging
import threading
import time
from dataclasses import dataclass, replace
from enum import Enum
from pathlib import Path
from typing import Callable, Sequence

import numpy as np
from scipy.spatial.transform import Rotation

from refcap.core.errors import (
    CaptureAborted,
    CaptureIOError,
    CaptureValidationError,
    FatalRenderError,
    PipelineBusyError,
)
from refcap.scene.backend import RenderBackend
from refcap.scene.camera import Camera, Projection, RenderTarget
from refcap.scene.graph import DirectionalLight, Scene
from refcap.utils.geometry import euler_rotation
from ._bounds import compute_bounds
from ._poses import derive_poses
from ._renderer import CaptureRenderer, capture_filename
from ._staging import AssetEntry, IsolationStager
from .config import CaptureConfig
from .contracts import CaptureOutput, CaptureResult

logger = logging.getLogger(__name__)

TEMP_LIGHT_NAME = "~TempCaptureLight"

# Only one capture run per process may touch the shared camera and target.
_RUN_LOCK = threading.Lock()

ProgressCallback = Callable[[str, float], None]


class RunState(str, Enum):
    IDLE = "idle"
    VALIDATING = "validating"
    PREPARING = "preparing"
    PROCESSING_ASSET = "processing_asset"
    CAPTURING_DIRECTION = "capturing_direction"
    FINALIZING = "finalizing"
    DONE = "done"
    ABORTED = "aborted"


@dataclass(frozen=True)
class ReferenceCameraState:
    """Everything a run changes on the reference camera."""

    position: np.ndarray
    rotation: Rotation
    target: RenderTarget | None
    projection: Projection
    clear_color: tuple[float, float, float, float]
    culling_mask: int

    @classmethod
    def capture(cls, camera: Camera) -> ReferenceCameraState:
        return cls(
            position=camera.position.copy(),
            rotation=camera.rotation,
            target=camera.target,
            projection=replace(camera.projection),
            clear_color=camera.clear_color,
            culling_mask=camera.culling_mask,
        )

    def restore(self, camera: Camera) -> None:
        camera.position = self.position.copy()
        camera.rotation = self.rotation
        camera.target = self.target
        camera.projection = replace(self.projection)
        camera.clear_color = self.clear_color
        camera.culling_mask = self.culling_mask


def dedupe_assets(assets: Sequence[AssetEntry]) -> list[AssetEntry]:
    """Collapse entries sharing a template object, keeping first occurrence."""
    seen: set[int] = set()
    unique = []
    for asset in assets:
        if id(asset.template) in seen:
            continue
        seen.add(id(asset.template))
        unique.append(asset)
    return unique


def resolve_output_dir(output_dir: Path) -> Path:
    """Relative output folders are taken from the current working directory."""
    output_dir = Path(output_dir)
    return output_dir if output_dir.is_absolute() else Path.cwd() / output_dir


class BatchCapturePipeline:
    def __init__(self, scene: Scene, backend: RenderBackend, config: CaptureConfig):
        self.scene = scene
        self.backend = backend
        self.config = config
        self.renderer = CaptureRenderer(backend)
        self.state = RunState.IDLE

    def _transition(self, state: RunState) -> None:
        logger.debug(f"{self.state.value} -> {state.value}")
        self.state = state

    def run(
        self,
        assets: Sequence[AssetEntry],
        abort_event: threading.Event | None = None,
        progress_callback: ProgressCallback | None = None,
    ) -> CaptureOutput:
        """Capture every asset. Not reentrant: concurrent runs are refused."""
        if not _RUN_LOCK.acquire(blocking=False):
            raise PipelineBusyError("A capture run is already in progress")
        try:
            return self._run(assets, abort_event, progress_callback)
        finally:
            _RUN_LOCK.release()

    def _run(
        self,
        assets: Sequence[AssetEntry],
        abort_event: threading.Event | None,
        progress_callback: ProgressCallback | None,
    ) -> CaptureOutput:
        cfg = self.config
        self._transition(RunState.VALIDATING)

        camera = self.scene.main_camera()
        if camera is None:
            self._transition(RunState.ABORTED)
            raise CaptureValidationError(
                "No main camera found. Tag a camera in the scene as 'MainCamera'."
            )
        unique = dedupe_assets(assets)
        if not unique:
            self._transition(RunState.ABORTED)
            raise CaptureValidationError("No assets found in the capture folder.")
        if len(unique) < len(assets):
            logger.info(f"Collapsed {len(assets) - len(unique)} duplicate asset entries")

        self._transition(RunState.PREPARING)
        t0 = time.time()
        output_dir = resolve_output_dir(cfg.output_dir)
        snapshot = ReferenceCameraState.capture(camera)
        target: RenderTarget | None = None
        light: DirectionalLight | None = None
        results: list[CaptureResult] = []
        completed = False

        try:
            output_dir.mkdir(parents=True, exist_ok=True)
            try:
                target = self.backend.allocate_target(cfg.width, cfg.height, cfg.msaa)
            except Exception as e:
                raise FatalRenderError(f"Could not allocate render target: {e}") from e

            camera.clear_color = cfg.background_color
            camera.culling_mask = cfg.layer_mask
            if not cfg.use_reference_camera_settings:
                camera.projection = Projection()

            if cfg.add_directional_light:
                light = self.scene.add_light(DirectionalLight(
                    name=TEMP_LIGHT_NAME,
                    intensity=cfg.light_intensity,
                    rotation=euler_rotation(cfg.light_euler),
                ))

            stager = IsolationStager(self.scene, cfg.staging_position, cfg.layer_mask)
            for index, asset in enumerate(unique):
                self._check_abort(abort_event, results)
                if progress_callback:
                    progress_callback(asset.name, index / len(unique))
                results.append(
                    self._process_asset(asset, camera, snapshot, stager, target, output_dir,
                                        abort_event, results)
                )
            if progress_callback:
                progress_callback("", 1.0)
            completed = True
        finally:
            self._finalize(camera, snapshot, target, light, results, output_dir)
            self._transition(RunState.DONE if completed else RunState.ABORTED)

        return self._build_output(results, output_dir, time.time() - t0)

    def _process_asset(
        self,
        asset: AssetEntry,
        camera: Camera,
        snapshot: ReferenceCameraState,
        stager: IsolationStager,
        target: RenderTarget,
        output_dir: Path,
        abort_event: threading.Event | None,
        results: list[CaptureResult],
    ) -> CaptureResult:
        self._transition(RunState.PROCESSING_ASSET)
        with stager.staged(asset) as staged:
            bounds = compute_bounds(staged.root)
            if bounds is None:
                logger.warning(f"No renderable geometry found: {asset.name}")
                return CaptureResult(
                    asset_name=asset.name, status="skipped", reason="no renderable geometry",
                )

            poses = derive_poses(
                snapshot.position, snapshot.rotation, bounds.center, self.config.directions,
            )
            written: list[Path] = []
            try:
                for pose in poses:
                    self._check_abort(abort_event, results)
                    self._transition(RunState.CAPTURING_DIRECTION)
                    path = output_dir / capture_filename(asset.name, pose.label)
                    try:
                        written.append(
                            self.renderer.render_and_save(self.scene, camera, pose, target, path)
                        )
                    except CaptureIOError as e:
                        logger.error(f"{asset.name}: {e}; skipping its remaining directions")
                        return CaptureResult(
                            asset_name=asset.name, status="failed", paths=written, reason=str(e),
                        )
            except Exception as e:
                # Files already on disk still count towards the run's totals.
                if written:
                    results.append(CaptureResult(
                        asset_name=asset.name, status="failed", paths=list(written),
                        reason=f"interrupted: {e}",
                    ))
                    if isinstance(e, CaptureAborted):
                        e.results = list(results)
                raise

        logger.info(f"Captured {asset.name} ({len(written)} views)")
        return CaptureResult(asset_name=asset.name, status="captured", paths=written)

    def _check_abort(
        self, abort_event: threading.Event | None, results: list[CaptureResult]
    ) -> None:
        if abort_event is not None and abort_event.is_set():
            raise CaptureAborted("Capture run aborted", results=list(results))

    def _finalize(
        self,
        camera: Camera,
        snapshot: ReferenceCameraState,
        target: RenderTarget | None,
        light: DirectionalLight | None,
        results: list[CaptureResult],
        output_dir: Path,
    ) -> None:
        """Undo every run-scoped change. Each action runs even if one before it fails."""
        self._transition(RunState.FINALIZING)
        try:
            if target is not None:
                self.backend.release_target(target)
        finally:
            try:
                if light is not None:
                    self.scene.remove_light(light)
            finally:
                snapshot.restore(camera)
                files = sum(len(r.paths) for r in results)
                logger.info(
                    f"Reference capture finished. Files: {files}, Output: {output_dir}"
                )

    @staticmethod
    def _build_output(
        results: list[CaptureResult], output_dir: Path, elapsed: float
    ) -> CaptureOutput:
        return CaptureOutput(
            output_dir=output_dir,
            results=results,
            num_captured=sum(r.status == "captured" for r in results),
            num_skipped=sum(r.status == "skipped" for r in results),
            num_failed=sum(r.status == "failed" for r in results),
            files_written=sum(len(r.paths) for r in results),
            elapsed_seconds=round(elapsed, 2),
        )
