"""Escape-time sampling of the quadratic map ``z <- z**2 + c``.

Only the choice of the orbit's starting point and constant depends on the
fractal variant; the iteration itself is shared.  Every pixel is a pure
function of its coordinate and the fractal parameters, which is what lets
``fractalgrid.renderers.cpu_pool`` split the rows across processes.
"""

from __future__ import annotations

from typing import Any, Callable, Optional, Sequence, Tuple

import numpy as np
from tqdm import tqdm

from fractalgrid.errors import SamplingCancelled
from fractalgrid.grid import PointGrid, allocate_counts, coordinate_axes
from fractalgrid.params import FractalParameters, FractalVariant
from fractalgrid.precision import Precision
from fractalgrid.region import PlaneRectangle, ScreenResolution
from fractalgrid.util.logging_setup import get_logger

# Squared escape radius; |z| > 2 guarantees divergence.
ESCAPE_RADIUS_SQUARED = 4

OrbitStart = Callable[[Any, Any], Tuple[Any, Any, Any, Any]]

def orbit_start(params: FractalParameters, precision: Precision) -> OrbitStart:
    """Return ``f(x0, y0) -> (zx, zy, cx, cy)`` for the parameters' variant."""
    if params.variant is FractalVariant.JULIA:
        c_re, c_im = (precision.convert(v) for v in params.julia_c)

        def julia(x0, y0):
            return x0, y0, c_re, c_im

        return julia

    zero = precision.convert(0)

    def mandelbrot(x0, y0):
        return zero, zero, x0, y0

    return mandelbrot

def escape_time(zx, zy, cx, cy, max_iterations: int, four, two) -> int:
    """Iterations performed before ``|z|**2 >= 4`` or the cap is reached."""
    n = 0
    x2 = zx * zx
    y2 = zy * zy
    while x2 + y2 < four and n < max_iterations:
        zy = two * zx * zy + cy
        zx = x2 - y2 + cx
        x2 = zx * zx
        y2 = zy * zy
        n += 1
    return n

def sample_point(x0, y0, params: FractalParameters, precision: Precision) -> int:
    x0 = precision.convert(x0)
    y0 = precision.convert(y0)
    zx, zy, cx, cy = orbit_start(params, precision)(x0, y0)
    return escape_time(zx, zy, cx, cy, params.max_iterations,
                       precision.convert(ESCAPE_RADIUS_SQUARED), precision.convert(2))

def sample_rows(
    xs: Sequence[Any],
    ys: Sequence[Any],
    params: FractalParameters,
    precision: Precision,
    out: np.ndarray,
    *,
    cancel=None,
    on_row: Optional[Callable[[int], None]] = None,
) -> np.ndarray:
    """Fill ``out[k, i]`` with the escape time of pixel ``(xs[i], ys[k])``.

    ``cancel`` is anything with ``is_set()``; it is checked before each row.
    """
    start = orbit_start(params, precision)
    max_iterations = params.max_iterations
    four = precision.convert(ESCAPE_RADIUS_SQUARED)
    two = precision.convert(2)

    for k, y0 in enumerate(ys):
        if cancel is not None and cancel.is_set():
            raise SamplingCancelled("Sampling cancelled by caller")
        row = out[k]
        for i, x0 in enumerate(xs):
            zx, zy, cx, cy = start(x0, y0)
            row[i] = escape_time(zx, zy, cx, cy, max_iterations, four, two)
        if on_row is not None:
            on_row(k)
    return out

def sample_grid(
    region: PlaneRectangle,
    resolution: ScreenResolution,
    params: FractalParameters,
    *,
    cancel=None,
    progress: bool = False,
) -> PointGrid:
    """Sample every pixel in-process, row 0 first."""
    logger = get_logger()
    counts = allocate_counts(resolution)
    xs, ys = coordinate_axes(region, resolution)

    logger.debug("In-process sampling %sx%s %s precision=%s",
                 resolution.width, resolution.height, params.variant.value, region.precision.name)

    with tqdm(total=resolution.height, unit="row", disable=not progress, leave=False) as bar:
        sample_rows(xs, ys, params, region.precision, counts,
                    cancel=cancel, on_row=lambda _k: bar.update(1))

    return PointGrid(region=region, resolution=resolution, params=params, xs=xs, ys=ys, counts=counts)
