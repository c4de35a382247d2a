"""Plane rectangles, screen resolutions and the pixel-to-plane mapping."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Tuple

from fractalgrid.errors import InvalidRegion, InvalidResolution
from fractalgrid.precision import STANDARD, Precision
from fractalgrid.util.logging_setup import get_logger

DEFAULT_BOUNDS: Tuple[str, str, str, str] = ("-2.5", "1.0", "-1.3", "1.3")

@dataclass(frozen=True)
class PlaneRectangle:
    """Corners ``(x_min, y_min)``-``(x_max, y_max)`` held in one precision."""

    x_min: Any
    y_min: Any
    x_max: Any
    y_max: Any
    precision: Precision = field(default=STANDARD, compare=False, repr=False)

    def __post_init__(self) -> None:
        # Comparisons against NaN are false, so NaN bounds land here too.
        if not self.x_max > self.x_min:
            raise InvalidRegion(f"x_max ({self.x_max}) must be greater than x_min ({self.x_min})")
        if not self.y_max > self.y_min:
            raise InvalidRegion(f"y_max ({self.y_max}) must be greater than y_min ({self.y_min})")

    @classmethod
    def from_bounds(cls, x_min, x_max, y_min, y_max, precision: Precision = STANDARD) -> "PlaneRectangle":
        """Build a rectangle from user bounds, given in the original program's order."""
        try:
            values = [precision.convert(v) for v in (x_min, y_min, x_max, y_max)]
        except (TypeError, ValueError) as e:
            raise InvalidRegion(f"Region bounds must be numbers: {e}") from e
        return cls(*values, precision=precision)

    @classmethod
    def default(cls, precision: Precision = STANDARD) -> "PlaneRectangle":
        x_min, x_max, y_min, y_max = DEFAULT_BOUNDS
        return cls.from_bounds(x_min, x_max, y_min, y_max, precision)

    @property
    def x_span(self):
        return self.x_max - self.x_min

    @property
    def y_span(self):
        return self.y_max - self.y_min

    def describe(self) -> str:
        fmt = self.precision.format
        return "[%s, %s] x [%s, %s]" % (fmt(self.x_min), fmt(self.x_max), fmt(self.y_min), fmt(self.y_max))

@dataclass(frozen=True)
class ScreenResolution:
    width: int
    height: int
    delta_x: Any
    delta_y: Any

    def __post_init__(self) -> None:
        for axis, n in (("width", self.width), ("height", self.height)):
            if isinstance(n, bool) or not isinstance(n, int) or n < 1:
                raise InvalidResolution(f"{axis} must be a positive integer, got {n!r}")

    @property
    def pixels(self) -> int:
        return self.width * self.height

def _check_count(name: str, value) -> int:
    if isinstance(value, bool):
        raise InvalidResolution(f"{name} must be a positive integer, got {value!r}")
    try:
        n = int(value)
    except (TypeError, ValueError) as e:
        raise InvalidResolution(f"{name} must be a positive integer, got {value!r}") from e
    if n != value or n <= 0:
        raise InvalidResolution(f"{name} must be a positive integer, got {value!r}")
    return n

def _with_steps(region: PlaneRectangle, width: int, height: int) -> ScreenResolution:
    return ScreenResolution(
        width=width,
        height=height,
        delta_x=region.x_span / width,
        delta_y=region.y_span / height,
    )

def map_resolution(region: PlaneRectangle, max_pixels: int) -> ScreenResolution:
    """Give the longer plane axis ``max_pixels`` and scale the other by the aspect ratio.

    A count that floors to zero on a very thin rectangle is clamped to one
    pixel so the grid is never empty.
    """
    max_pixels = _check_count("max_pixels", max_pixels)

    if region.y_span > region.x_span:
        height = max_pixels
        width = int(region.x_span * max_pixels / region.y_span)
    else:
        width = max_pixels
        height = int(region.y_span * max_pixels / region.x_span)

    if width < 1 or height < 1:
        get_logger().warning(
            "Derived resolution %sx%s for region %s is empty along one axis; clamping to 1 pixel",
            width, height, region.describe(),
        )
        width = max(width, 1)
        height = max(height, 1)

    return _with_steps(region, width, height)

def explicit_resolution(region: PlaneRectangle, width: int, height: int) -> ScreenResolution:
    return _with_steps(region, _check_count("width", width), _check_count("height", height))
