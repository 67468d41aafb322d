"""refcap core: pipeline runner, base step, shared contracts, errors."""

from .step_base import BaseStep
from .contracts import AssetRef, PipelineConfig, StepEntry, StepMeta
from .errors import (
    CaptureAborted,
    CaptureIOError,
    CaptureValidationError,
    FatalRenderError,
    PipelineBusyError,
    RefcapError,
    StepValidationError,
)
from .pipeline_runner import run_pipeline, load_pipeline_config
from .logging import setup_logging

__all__ = [
    "BaseStep",
    "AssetRef",
    "PipelineConfig",
    "StepEntry",
    "StepMeta",
    "RefcapError",
    "CaptureValidationError",
    "CaptureIOError",
    "FatalRenderError",
    "CaptureAborted",
    "PipelineBusyError",
    "StepValidationError",
    "run_pipeline",
    "load_pipeline_config",
    "setup_logging",
]
