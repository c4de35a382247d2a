import multiprocessing as mp

import numpy as np
import pytest

from fractalgrid.errors import SamplingCancelled
from fractalgrid.params import FractalParameters
from fractalgrid.precision import EXTENDED, QUAD, STANDARD
from fractalgrid.region import PlaneRectangle, map_resolution
from fractalgrid.renderers.cpu_pool import plan_bands, sample_grid_parallel
from fractalgrid.sampler import sample_grid


def test_bands_are_contiguous_and_cover_every_row():
    assert plan_bands(70, 32) == [(0, 32), (32, 64), (64, 70)]
    assert plan_bands(5, 32) == [(0, 5)]
    assert plan_bands(0, 8) == []
    with pytest.raises(ValueError):
        plan_bands(10, 0)


@pytest.mark.parametrize("precision", [STANDARD, EXTENDED, QUAD])
def test_parallel_matches_in_process(precision):
    region = PlaneRectangle.from_bounds("-2", "0.6", "-1.2", "1.2", precision=precision)
    res = map_resolution(region, 16)
    params = FractalParameters.mandelbrot(25)

    serial = sample_grid(region, res, params)
    parallel = sample_grid_parallel(region, res, params, workers=2, band_height=3)

    assert np.array_equal(serial.counts, parallel.counts)
    assert serial.xs == parallel.xs
    assert serial.ys == parallel.ys


def test_parallel_julia_matches_in_process():
    region = PlaneRectangle.from_bounds("-1.5", "1.5", "-1", "1")
    res = map_resolution(region, 18)
    params = FractalParameters.julia("-0.4", "0.6", max_iterations=40)

    serial = sample_grid(region, res, params)
    parallel = sample_grid_parallel(region, res, params, workers=3, band_height=2)
    assert np.array_equal(serial.counts, parallel.counts)


def test_single_worker_samples_in_process():
    region = PlaneRectangle.default()
    res = map_resolution(region, 12)
    params = FractalParameters.mandelbrot(20)
    grid = sample_grid_parallel(region, res, params, workers=1)
    assert np.array_equal(grid.counts, sample_grid(region, res, params).counts)


def test_parallel_cancel():
    region = PlaneRectangle.default()
    res = map_resolution(region, 16)
    cancel = mp.Event()
    cancel.set()
    with pytest.raises(SamplingCancelled):
        sample_grid_parallel(region, res, FractalParameters.mandelbrot(10),
                             workers=2, band_height=4, cancel=cancel)
