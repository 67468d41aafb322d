"""Tests for the capture error taxonomy."""

from pathlib import Path

from refcap.core.errors import (
    CaptureAborted,
    CaptureIOError,
    CaptureValidationError,
    FatalRenderError,
    PipelineBusyError,
    RefcapError,
)


class TestErrors:
    def test_hierarchy(self):
        for cls in (CaptureValidationError, CaptureIOError, FatalRenderError,
                    CaptureAborted, PipelineBusyError):
            assert issubclass(cls, RefcapError)
        assert issubclass(CaptureValidationError, ValueError)
        assert issubclass(FatalRenderError, RuntimeError)

    def test_io_error_keeps_path_and_cause(self):
        cause = PermissionError("denied")
        err = CaptureIOError(Path("out/x.png"), cause)
        assert err.path == Path("out/x.png")
        assert err.cause is cause
        assert "out/x.png" in str(err)

    def test_aborted_carries_results(self):
        assert CaptureAborted("stop").results == []
        assert CaptureAborted("stop", results=["r"]).results == ["r"]
