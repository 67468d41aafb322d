"""Asset catalog query: renderable templates under a named folder."""

from __future__ import annotations

import logging
from pathlib import Path

from refcap.core.contracts import AssetRef

logger = logging.getLogger(__name__)


class AssetCatalog:
    """A directory of mesh templates."""

    def __init__(self, root: Path, extensions: list[str] | tuple[str, ...]):
        self.root = Path(root)
        self.extensions = {e.lower() if e.startswith(".") else f".{e.lower()}" for e in extensions}

    def find_templates(self, folder: str, recursive: bool = True) -> list[AssetRef]:
        """All templates under ``folder``, deduplicated by resolved path.

        A missing folder yields an empty list.
        """
        folder_path = self.root / folder
        if not folder_path.is_dir():
            logger.warning(f"Catalog folder not found: {folder_path}")
            return []

        pattern = "**/*" if recursive else "*"
        candidates = sorted(
            p for p in folder_path.glob(pattern)
            if p.is_file() and p.suffix.lower() in self.extensions
        )

        seen: set[Path] = set()
        assets: list[AssetRef] = []
        for path in candidates:
            resolved = path.resolve()
            if resolved in seen:
                logger.debug(f"Duplicate template reference skipped: {path}")
                continue
            seen.add(resolved)
            assets.append(AssetRef(name=path.stem, path=resolved))

        logger.info(
            f"Found {len(assets)} templates in {folder_path} "
            f"({len(candidates) - len(assets)} duplicates collapsed)"
        )
        return assets
