"""The point grid: the write-once result of one sampling pass."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterator, List, Tuple

import numpy as np

from fractalgrid.errors import AllocationFailure
from fractalgrid.params import FractalParameters
from fractalgrid.region import PlaneRectangle, ScreenResolution

UNWRITTEN = -1

@dataclass(frozen=True)
class Sample:
    x0: Any
    y0: Any
    iteration_count: int

def allocate_counts(resolution: ScreenResolution) -> np.ndarray:
    """Pre-size the iteration-count storage, every cell marked unwritten."""
    try:
        return np.full((resolution.height, resolution.width), UNWRITTEN, dtype=np.int64)
    except (MemoryError, ValueError) as e:
        raise AllocationFailure(
            f"Cannot allocate a {resolution.width}x{resolution.height} point grid: {e}"
        ) from e

@dataclass(frozen=True)
class PointGrid:
    """Row-major samples, row 0 being the row at ``y_min``.

    Coordinates are kept as two axes (``xs[col]``, ``ys[row]``) in the
    region's precision; iteration counts live in a read-only
    ``(height, width)`` array.  Every accessor derives its view from these,
    so nothing here ever re-runs the sampler.
    """

    region: PlaneRectangle
    resolution: ScreenResolution
    params: FractalParameters
    xs: Tuple[Any, ...]
    ys: Tuple[Any, ...]
    counts: np.ndarray

    def __post_init__(self) -> None:
        shape = (self.resolution.height, self.resolution.width)
        if self.counts.shape != shape:
            raise ValueError(f"counts shape {self.counts.shape} does not match resolution {shape}")
        if len(self.xs) != self.resolution.width or len(self.ys) != self.resolution.height:
            raise ValueError("coordinate axes do not match resolution")
        if self.counts.size and int(self.counts.min()) < 0:
            raise RuntimeError("point grid has cells that were never sampled")
        self.counts.flags.writeable = False

    @property
    def width(self) -> int:
        return self.resolution.width

    @property
    def height(self) -> int:
        return self.resolution.height

    @property
    def max_iterations(self) -> int:
        return self.params.max_iterations

    def __len__(self) -> int:
        return self.resolution.pixels

    def __iter__(self) -> Iterator[Sample]:
        for row in self.rows():
            yield from row

    def sample(self, row: int, col: int) -> Sample:
        if not (0 <= row < self.height and 0 <= col < self.width):
            raise IndexError(f"pixel ({row}, {col}) outside {self.width}x{self.height} grid")
        return Sample(self.xs[col], self.ys[row], int(self.counts[row, col]))

    def rows(self) -> Iterator[List[Sample]]:
        for j, y0 in enumerate(self.ys):
            counts = self.counts[j].tolist()
            yield [Sample(x0, y0, n) for x0, n in zip(self.xs, counts)]

    def membership_mask(self) -> np.ndarray:
        """True where the orbit never escaped within the iteration cap."""
        return self.counts == self.params.max_iterations

    def mask_rows(self, symbol: str = "*", blank: str = " ") -> Iterator[str]:
        for row in self.membership_mask():
            yield "".join(symbol if inside else blank for inside in row)

    def normalized_axes(self) -> Tuple[List[Any], List[Any]]:
        r = self.region
        x_span, y_span = r.x_span, r.y_span
        return [(x - r.x_min) / x_span for x in self.xs], [(y - r.y_min) / y_span for y in self.ys]

    def normalized_rows(self, contour_levels: int) -> Iterator[List[Tuple[Any, Any, int]]]:
        """Rows of ``(nx, ny, count mod contour_levels)`` with ``nx, ny`` in ``[0, 1]``."""
        if contour_levels <= 0:
            raise ValueError("contour_levels must be positive")
        nxs, nys = self.normalized_axes()
        for j, ny in enumerate(nys):
            levels = (self.counts[j] % contour_levels).tolist()
            yield [(nx, ny, k) for nx, k in zip(nxs, levels)]

def coordinate_axes(region: PlaneRectangle, resolution: ScreenResolution) -> Tuple[Tuple[Any, ...], Tuple[Any, ...]]:
    """``xs[i] = x_min + delta_x*i`` and ``ys[j] = y_min + delta_y*j``."""
    xs = tuple(region.x_min + resolution.delta_x * i for i in range(resolution.width))
    ys = tuple(region.y_min + resolution.delta_y * j for j in range(resolution.height))
    return xs, ys

