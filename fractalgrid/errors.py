"""Error types raised while resolving and sampling a fractal field."""

from __future__ import annotations

class FractalGridError(Exception):
    """Base class for every failure detected before or during a sampling pass."""

class InvalidRegion(FractalGridError, ValueError):
    """Degenerate or inverted plane rectangle."""

class InvalidResolution(FractalGridError, ValueError):
    """Non-positive pixel budget or explicit screen size."""

class InvalidIterationBudget(FractalGridError, ValueError):
    """Non-positive iteration cap."""

class InvalidPrecision(FractalGridError, ValueError):
    """Unknown numeric precision name."""

class InvalidFractalParameters(FractalGridError, ValueError):
    """Unknown variant or a Julia run without its constant."""

class AllocationFailure(FractalGridError, MemoryError):
    """The point grid's backing storage could not be allocated."""

class SamplingCancelled(FractalGridError):
    """The caller asked the sampling pass to stop; the partial grid is discarded."""

class GnuplotError(RuntimeError):
    """gnuplot is missing or exited with a non-zero status."""
