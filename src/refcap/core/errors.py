"""Exception taxonomy for capture runs.

Skipped assets (no renderable geometry) are not errors: they show up as a
``skipped`` CaptureResult and a warning in the log.
"""

from __future__ import annotations


class RefcapError(Exception):
    """Base class for all refcap failures."""


class StepValidationError(RefcapError, ValueError):
    """A pipeline step rejected its inputs before running."""


class CaptureValidationError(RefcapError, ValueError):
    """Run refused before any side effect (no main camera, empty catalog)."""


class CaptureIOError(RefcapError):
    """Writing a capture to disk failed. Aborts the current asset only."""

    def __init__(self, path, cause: OSError):
        super().__init__(f"Failed to write {path}: {cause}")
        self.path = path
        self.cause = cause


class FatalRenderError(RefcapError, RuntimeError):
    """Render target allocation, render or readback failed. Aborts the batch."""


class CaptureAborted(RefcapError):
    """The run was cancelled through its abort signal."""

    def __init__(self, message: str, results: list | None = None):
        super().__init__(message)
        self.results = results or []


class PipelineBusyError(RefcapError, RuntimeError):
    """Another capture run is already in progress in this process."""
