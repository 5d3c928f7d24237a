"""Resolve image resources and probe their intrinsic dimensions."""
from __future__ import annotations

import posixpath
from pathlib import Path
from typing import Optional, Tuple

from PIL import Image

from reflow_layout.utils.logger import get_logger

LOGGER = get_logger(__name__)


def resolve_image_path(spine_dir: Path, src: str) -> str:
    """Join a relative ``src`` with the document base directory."""
    src = src.split("#", 1)[0]
    if posixpath.isabs(src):
        return posixpath.normpath(src)
    return posixpath.normpath(posixpath.join(spine_dir.as_posix(), src))


def probe_image_size(path: str) -> Optional[Tuple[int, int]]:
    """Return ``(width, height)`` in pixels, or ``None`` when unreadable."""
    try:
        with Image.open(path) as image:
            return image.size
    except OSError as exc:
        LOGGER.debug("Could not read image %s: %s", path, exc)
        return None
