"""I/O contracts for Step 00: Collect capture assets."""

from pydantic import BaseModel, Field

from refcap.core.contracts import AssetRef


class CollectAssetsInput(BaseModel):
    folder: str | None = Field(None, description="Override the configured folder name")


class CollectAssetsOutput(BaseModel):
    assets: list[AssetRef] = Field(default_factory=list, description="Deduplicated templates")
    num_assets: int = Field(0, description="Number of distinct templates found")
