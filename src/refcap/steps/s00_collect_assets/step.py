"""Step 00: Enumerate renderable templates in the asset catalog."""

from __future__ import annotations

import logging
from typing import ClassVar

from refcap.core.step_base import BaseStep
from ._catalog import AssetCatalog
from .config import CollectAssetsConfig
from .contracts import CollectAssetsInput, CollectAssetsOutput

logger = logging.getLogger(__name__)


class CollectAssetsStep(BaseStep[CollectAssetsInput, CollectAssetsOutput, CollectAssetsConfig]):
    name: ClassVar[str] = "collect_assets"
    input_type: ClassVar = CollectAssetsInput
    output_type: ClassVar = CollectAssetsOutput
    config_type: ClassVar = CollectAssetsConfig

    def validate_inputs(self, inputs: CollectAssetsInput) -> bool:
        # A missing folder is reported downstream as an empty catalog.
        return True

    def run(self, inputs: CollectAssetsInput) -> CollectAssetsOutput:
        root = self.config.catalog_root
        if not root.is_absolute():
            root = self.data_root / root

        catalog = AssetCatalog(root, self.config.extensions)
        assets = catalog.find_templates(
            inputs.folder or self.config.folder,
            recursive=self.config.recursive,
        )
        return CollectAssetsOutput(assets=assets, num_assets=len(assets))
