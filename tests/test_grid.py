import numpy as np
import pytest

from fractalgrid.errors import AllocationFailure
from fractalgrid.grid import PointGrid, Sample, allocate_counts, coordinate_axes
from fractalgrid.params import FractalParameters
from fractalgrid.precision import QUAD
from fractalgrid.region import PlaneRectangle, ScreenResolution, explicit_resolution
from fractalgrid.sampler import sample_grid


@pytest.fixture
def grid():
    region = PlaneRectangle.from_bounds("-2", "1", "-1", "1")
    return sample_grid(region, explicit_resolution(region, 6, 4), FractalParameters.mandelbrot(30))


def test_row_major_order_starts_at_y_min(grid):
    samples = list(grid)
    assert samples[0] == grid.sample(0, 0)
    assert samples[1] == grid.sample(0, 1)
    assert samples[grid.width] == grid.sample(1, 0)
    assert samples[0].y0 == grid.region.y_min
    assert all(s.y0 < t.y0 for s, t in zip(samples[::grid.width], samples[grid.width::grid.width]))


def test_stream_is_restartable(grid):
    assert list(grid) == list(grid)
    rows = list(grid.rows())
    assert len(rows) == grid.height
    assert all(len(r) == grid.width for r in rows)
    assert [s for r in rows for s in r] == list(grid)


def test_sample_coordinates(grid):
    s = grid.sample(2, 3)
    assert isinstance(s, Sample)
    assert s.x0 == pytest.approx(-2 + 0.5 * 3)
    assert s.y0 == pytest.approx(-1 + 0.5 * 2)
    assert s.iteration_count == grid.counts[2, 3]
    with pytest.raises(IndexError):
        grid.sample(4, 0)


def test_counts_are_read_only(grid):
    with pytest.raises(ValueError):
        grid.counts[0, 0] = 5


def test_membership_mask_is_derived_from_counts(grid):
    mask = grid.membership_mask()
    assert mask.dtype == bool
    assert np.array_equal(mask, grid.counts == 30)
    rows = list(grid.mask_rows(symbol="#", blank="."))
    assert len(rows) == grid.height
    for row, flags in zip(rows, mask):
        assert row == "".join("#" if f else "." for f in flags)


def test_normalized_rows(grid):
    rows = list(grid.normalized_rows(8))
    assert len(rows) == grid.height
    nx, ny, k = rows[0][0]
    assert (nx, ny) == (0, 0)
    assert k == grid.counts[0, 0] % 8
    for row in rows:
        for nx, ny, k in row:
            assert 0 <= nx < 1 and 0 <= ny < 1
            assert 0 <= k < 8
    assert rows[-1][-1][0] == pytest.approx(5 / 6)
    with pytest.raises(ValueError):
        next(grid.normalized_rows(0))


def test_unwritten_cells_are_rejected():
    region = PlaneRectangle.default()
    res = explicit_resolution(region, 3, 2)
    counts = allocate_counts(res)
    xs, ys = coordinate_axes(region, res)
    counts[0] = 1
    with pytest.raises(RuntimeError):
        PointGrid(region, res, FractalParameters.mandelbrot(5), xs, ys, counts)


def test_quad_axes_keep_their_type():
    region = PlaneRectangle.default(QUAD)
    res = explicit_resolution(region, 4, 3)
    xs, ys = coordinate_axes(region, res)
    assert all(type(x) is type(region.x_min) for x in xs + ys)
    assert xs[0] == region.x_min


def test_oversized_grid_is_an_allocation_failure():
    with pytest.raises(AllocationFailure):
        allocate_counts(ScreenResolution(10**10, 10**10, 1.0, 1.0))
