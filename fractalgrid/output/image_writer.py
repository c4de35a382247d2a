from __future__ import annotations

import os

import numpy as np
from PIL import Image

from fractalgrid.grid import PointGrid
from fractalgrid.output.palette import palette_lut, resolve_theme
from fractalgrid.util.logging_setup import get_logger

PREVIEW_FILE = "preview.png"

def render_image(grid: PointGrid, *, contour_levels: int, theme: int) -> Image.Image:
    """Color ``count mod contour_levels`` through the theme palette, y_min at the bottom."""
    _, formulae = resolve_theme(theme)
    lut = palette_lut(formulae, contour_levels)
    rgb = lut[grid.counts % contour_levels]
    return Image.fromarray(np.ascontiguousarray(np.flipud(rgb)))

def save_image(img: Image.Image, path: str) -> str:
    directory = os.path.dirname(os.path.abspath(path))
    os.makedirs(directory, exist_ok=True)
    tmp = os.path.join(directory, ".tmp-" + os.path.basename(path))
    try:
        img.save(tmp, format="PNG", optimize=True)
        os.replace(tmp, path)
    except BaseException:
        if os.path.exists(tmp):
            os.unlink(tmp)
        raise
    get_logger().info("Preview image written: %s (%sx%s)", path, img.size[0], img.size[1])
    return path
