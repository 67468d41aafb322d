"""Step 01: Capture every collected asset from four directions around the main camera."""

from __future__ import annotations

import logging
import threading
from pathlib import Path
from typing import ClassVar

from refcap.core.step_base import BaseStep
from refcap.scene.backend import PyrenderBackend, RenderBackend
from refcap.scene.loader import TemplateCache, load_scene
from ._pipeline import BatchCapturePipeline, ProgressCallback
from ._staging import AssetEntry
from .config import CaptureConfig
from .contracts import CaptureInput, CaptureOutput

logger = logging.getLogger(__name__)


class CaptureViewsStep(BaseStep[CaptureInput, CaptureOutput, CaptureConfig]):
    name: ClassVar[str] = "capture_views"
    input_type: ClassVar = CaptureInput
    output_type: ClassVar = CaptureOutput
    config_type: ClassVar = CaptureConfig

    def __init__(
        self,
        config: CaptureConfig,
        data_root: Path,
        backend: RenderBackend | None = None,
        abort_event: threading.Event | None = None,
        progress_callback: ProgressCallback | None = None,
    ):
        super().__init__(config=config, data_root=data_root)
        self.backend = backend
        self.abort_event = abort_event
        self.progress_callback = progress_callback

    @property
    def scene_path(self) -> Path:
        scene_file = self.config.scene_file
        return scene_file if scene_file.is_absolute() else self.data_root / scene_file

    def validate_inputs(self, inputs: CaptureInput) -> bool:
        if not self.scene_path.exists():
            logger.error(f"Scene file not found: {self.scene_path}")
            return False
        missing = [a.path for a in inputs.assets if not a.path.exists()]
        if missing:
            logger.error(f"Asset files not found: {', '.join(str(p) for p in missing)}")
            return False
        return True

    def run(self, inputs: CaptureInput) -> CaptureOutput:
        templates = TemplateCache()
        scene = load_scene(self.scene_path, templates=templates)
        assets = [AssetEntry(template=templates.get(a.path), name=a.name) for a in inputs.assets]

        pipeline = BatchCapturePipeline(
            scene=scene,
            backend=self.backend or PyrenderBackend(),
            config=self.config,
        )
        output = pipeline.run(
            assets,
            abort_event=self.abort_event,
            progress_callback=self.progress_callback,
        )

        logger.info(
            f"Captured {output.num_captured} assets, skipped {output.num_skipped}, "
            f"failed {output.num_failed} ({output.files_written} files -> {output.output_dir})"
        )
        return output
