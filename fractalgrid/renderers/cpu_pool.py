from __future__ import annotations

import logging
import os
from concurrent.futures import ProcessPoolExecutor
from typing import Any, List, Optional, Sequence, Tuple

import numpy as np
from tqdm import tqdm

from fractalgrid.errors import SamplingCancelled
from fractalgrid.grid import PointGrid, allocate_counts, coordinate_axes
from fractalgrid.params import FractalParameters
from fractalgrid.precision import Precision, get_precision
from fractalgrid.region import PlaneRectangle, ScreenResolution
from fractalgrid.sampler import sample_grid, sample_rows
from fractalgrid.util.logging_setup import get_logger, logging_initialiser

_G = {}

def _init_worker(precision_name, xs_packed, ys_packed, params, cancel, log_queue, log_level):
    precision = get_precision(precision_name)
    _G["precision"] = precision
    _G["xs"] = [precision.unpack(v) for v in xs_packed]
    _G["ys"] = [precision.unpack(v) for v in ys_packed]
    _G["params"] = params
    _G["cancel"] = cancel
    logging_initialiser(log_queue, log_level)

def _sample_band(y0_y1: Tuple[int, int]):
    y0, y1 = y0_y1
    xs = _G["xs"]
    ys = _G["ys"]

    logger = get_logger()
    band = np.empty((y1 - y0, len(xs)), dtype=np.int64)
    sample_rows(xs, ys[y0:y1], _G["params"], _G["precision"], band, cancel=_G["cancel"])
    logger.debug("Sampled rows %s..%s", y0, y1 - 1)
    return y0, band

def plan_bands(height: int, band_height: int) -> List[Tuple[int, int]]:
    """Contiguous, disjoint ``[y0, y1)`` row ranges covering ``0..height``."""
    if band_height < 1:
        raise ValueError("band_height must be >= 1")
    bands: List[Tuple[int, int]] = []
    y = 0
    while y < height:
        y1 = min(height, y + band_height)
        bands.append((y, y1))
        y = y1
    return bands

def _pack(axis: Sequence[Any], precision: Precision) -> List[Any]:
    return [precision.pack(v) for v in axis]

def sample_grid_parallel(
    region: PlaneRectangle,
    resolution: ScreenResolution,
    params: FractalParameters,
    *,
    workers: Optional[int] = None,
    band_height: int = 32,
    cancel=None,
    log_queue=None,
    log_level: int = logging.INFO,
    progress: bool = False,
) -> PointGrid:
    logger = get_logger()
    workers = workers or os.cpu_count() or 1

    if workers <= 1 or resolution.height <= band_height:
        return sample_grid(region, resolution, params, cancel=cancel, progress=progress)

    precision = region.precision
    counts = allocate_counts(resolution)
    bands = plan_bands(resolution.height, band_height)
    xs, ys = coordinate_axes(region, resolution)

    logger.info("Sampling %sx%s in %s bands on %s workers", resolution.width, resolution.height, len(bands), workers)

    with ProcessPoolExecutor(
        max_workers=workers,
        initializer=_init_worker,
        initargs=(precision.name, _pack(xs, precision), _pack(ys, precision), params, cancel, log_queue, log_level),
    ) as pool, tqdm(total=resolution.height, unit="row", disable=not progress, leave=False) as bar:
        for y0, band in pool.map(_sample_band, bands):
            if cancel is not None and cancel.is_set():
                pool.shutdown(wait=False, cancel_futures=True)
                raise SamplingCancelled("Sampling cancelled by caller")
            counts[y0:y0 + band.shape[0]] = band
            bar.update(band.shape[0])

    return PointGrid(region=region, resolution=resolution, params=params, xs=xs, ys=ys, counts=counts)
