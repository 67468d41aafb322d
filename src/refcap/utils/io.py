"""I/O utilities: file-name sanitising and PNG encoding."""

from __future__ import annotations

import io
from pathlib import Path

import numpy as np
from PIL import Image

# Characters rejected by at least one mainstream filesystem.
INVALID_FILENAME_CHARS = frozenset('<>:"/\\|?*') | frozenset(chr(i) for i in range(32))


def sanitize_filename(name: str) -> str:
    """Replace every filesystem-invalid character with an underscore."""
    return "".join("_" if c in INVALID_FILENAME_CHARS else c for c in name)


def encode_png(pixels: np.ndarray) -> bytes:
    """Encode an (H, W, 4) uint8 RGBA buffer as PNG bytes."""
    if pixels.dtype != np.uint8 or pixels.ndim != 3 or pixels.shape[2] != 4:
        raise ValueError(
            f"Expected (H, W, 4) uint8 RGBA buffer, got {pixels.shape} {pixels.dtype}"
        )
    buf = io.BytesIO()
    Image.fromarray(pixels).save(buf, format="PNG")
    return buf.getvalue()


def write_bytes(path: Path, data: bytes) -> Path:
    """Write bytes to ``path``, creating parent directories."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(data)
    return path
