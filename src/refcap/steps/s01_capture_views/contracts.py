"""I/O contracts for Step 01: Four-direction capture."""

from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field

from refcap.core.contracts import AssetRef


class CaptureInput(BaseModel):
    assets: list[AssetRef] = Field(default_factory=list, description="Templates to capture")


class CaptureResult(BaseModel):
    asset_name: str
    status: Literal["captured", "skipped", "failed"]
    paths: list[Path] = Field(default_factory=list, description="PNG files written for this asset")
    reason: str | None = Field(None, description="Why the asset was skipped or failed")


class CaptureOutput(BaseModel):
    output_dir: Path = Field(..., description="Absolute output folder")
    results: list[CaptureResult] = Field(default_factory=list)
    num_captured: int = Field(0, description="Assets with all four views written")
    num_skipped: int = Field(0, description="Assets without renderable geometry")
    num_failed: int = Field(0, description="Assets whose capture hit a write failure")
    files_written: int = Field(0, description="Total PNG files written")
    elapsed_seconds: float = 0.0
