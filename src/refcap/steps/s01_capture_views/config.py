"""Configuration for Step 01: Four-direction capture from the main camera."""

from pathlib import Path
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

from refcap.utils.io import INVALID_FILENAME_CHARS


class DirectionEntry(BaseModel):
    model_config = ConfigDict(frozen=True)

    label: str = Field(..., min_length=1, description="Suffix used in output file names")
    yaw_degrees: float = Field(0.0, description="Yaw offset about world up, degrees (mod 360)")

    @field_validator("label")
    @classmethod
    def _label_is_filename_safe(cls, value: str) -> str:
        bad = sorted(set(value) & INVALID_FILENAME_CHARS)
        if bad:
            raise ValueError(f"Direction label {value!r} contains invalid characters: {bad!r}")
        return value


def _default_directions() -> list[DirectionEntry]:
    return [
        DirectionEntry(label="front", yaw_degrees=0.0),
        DirectionEntry(label="right", yaw_degrees=90.0),
        DirectionEntry(label="back", yaw_degrees=180.0),
        DirectionEntry(label="left", yaw_degrees=270.0),
    ]


class CaptureConfig(BaseModel):
    model_config = ConfigDict(frozen=True)

    scene_file: Path = Field(Path("configs/scene.yaml"), description="Host scene, relative to data_root")
    output_dir: Path = Field(Path("CapturedPNGs"), description="Output folder, relative to the working directory")
    width: int = Field(1024, ge=1, le=16384, description="Image width (px)")
    height: int = Field(1024, ge=1, le=16384, description="Image height (px)")
    msaa: Literal[1, 2, 4, 8] = Field(4, description="Antialias sample count")
    use_reference_camera_settings: bool = Field(
        True, description="Keep the main camera's projection (FOV / orthographic) settings"
    )
    capture_layers: int = Field(-1, description="32-bit render-layer mask (-1 = all layers)")
    background_color: tuple[float, float, float, float] = Field(
        (0.0, 0.0, 0.0, 0.0), description="Clear colour RGBA 0-1"
    )

    add_directional_light: bool = Field(True, description="Add a temporary directional light")
    light_intensity: float = Field(1.2, ge=0.0, le=3.0, description="Temporary light intensity")
    light_euler: tuple[float, float, float] = Field(
        (30.0, 135.0, 0.0), description="Temporary light rotation, Euler degrees"
    )

    directions: list[DirectionEntry] = Field(
        default_factory=_default_directions, min_length=4, max_length=4,
        description="Exactly four (label, yaw offset) capture directions",
    )
    staging_position: tuple[float, float, float] = Field(
        (1000.0, 0.0, 1000.0), description="Isolated world position assets are captured at"
    )

    @field_validator("background_color")
    @classmethod
    def _color_in_unit_range(cls, value):
        if any(c < 0.0 or c > 1.0 for c in value):
            raise ValueError(f"background_color components must be in [0, 1], got {value}")
        return value

    @property
    def layer_mask(self) -> int:
        return self.capture_layers & 0xFFFFFFFF
