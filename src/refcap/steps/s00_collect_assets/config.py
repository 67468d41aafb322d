"""Configuration for Step 00: Collect capture assets from the catalog."""

from pathlib import Path

from pydantic import BaseModel, Field

from refcap.scene.loader import MESH_EXTENSIONS


class CollectAssetsConfig(BaseModel):
    catalog_root: Path = Field(Path("assets"), description="Asset catalog root, relative to data_root")
    folder: str = Field("Png_folder", description="Named folder under the catalog root to capture")
    extensions: list[str] = Field(
        default_factory=lambda: list(MESH_EXTENSIONS),
        description="File extensions treated as renderable templates",
    )
    recursive: bool = Field(True, description="Also search sub-folders")
