from __future__ import annotations

import os
import tempfile
from typing import Iterable

from fractalgrid.grid import PointGrid
from fractalgrid.util.logging_setup import get_logger

CONTOURS_FILE = "contours.csv"
MASK_FILE = "mandelbrot.txt"

def atomic_write_lines(path: str, lines: Iterable[str]) -> str:
    """Write ``lines`` to a sibling temp file, then rename it over ``path``."""
    directory = os.path.dirname(os.path.abspath(path))
    os.makedirs(directory, exist_ok=True)
    fd, tmp = tempfile.mkstemp(prefix=".tmp-", dir=directory)
    try:
        with os.fdopen(fd, "w", encoding="utf-8", newline="\n") as f:
            for line in lines:
                f.write(line)
                f.write("\n")
        os.replace(tmp, path)
    except BaseException:
        os.unlink(tmp)
        raise
    return path

def contour_lines(grid: PointGrid, contour_levels: int) -> Iterable[str]:
    fmt = grid.region.precision.format
    for row in grid.normalized_rows(contour_levels):
        for nx, ny, k in row:
            yield "%s, %s, %d" % (fmt(nx), fmt(ny), k)
        yield ""

def write_contours(grid: PointGrid, path: str, contour_levels: int) -> str:
    logger = get_logger()
    atomic_write_lines(path, contour_lines(grid, contour_levels))
    logger.info("Contour records written: %s (%s samples, %s levels)", path, len(grid), contour_levels)
    return path

def write_mask(grid: PointGrid, path: str, symbol: str = "*") -> str:
    logger = get_logger()
    atomic_write_lines(path, grid.mask_rows(symbol=symbol))
    logger.info("Membership mask written: %s", path)
    return path
