from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional, Tuple

from fractalgrid.errors import InvalidFractalParameters, InvalidIterationBudget

DEFAULT_MAX_ITERATIONS = 1024

class FractalVariant(str, Enum):
    MANDELBROT = "mandelbrot"
    JULIA = "julia"

    @classmethod
    def parse(cls, value) -> "FractalVariant":
        if isinstance(value, cls):
            return value
        key = str(value).strip().lower()
        # The original command line selected the variant by number.
        aliases = {"1": cls.MANDELBROT, "2": cls.JULIA}
        if key in aliases:
            return aliases[key]
        try:
            return cls(key)
        except ValueError:
            raise InvalidFractalParameters(
                f"Unknown fractal {value!r}; choose 'mandelbrot' or 'julia'"
            ) from None

def _component(name: str, value: Any) -> Any:
    # Raw value kept; decimal strings are re-parsed by each precision.
    if isinstance(value, bool):
        raise InvalidFractalParameters(f"Julia constant {name} must be a number, got {value!r}")
    try:
        number = float(value.strip() if isinstance(value, str) else value)
    except (TypeError, ValueError):
        raise InvalidFractalParameters(f"Julia constant {name} must be a number, got {value!r}") from None
    if not math.isfinite(number):
        raise InvalidFractalParameters(f"Julia constant {name} must be finite, got {value!r}")
    return value.strip() if isinstance(value, str) else value

@dataclass(frozen=True)
class FractalParameters:
    """Variant, iteration cap and, for Julia sets, the fixed constant ``C``.

    ``julia_c`` keeps the caller's raw values (numbers or decimal strings) so
    each precision can parse them itself.
    """

    variant: FractalVariant = FractalVariant.MANDELBROT
    max_iterations: int = DEFAULT_MAX_ITERATIONS
    julia_c: Optional[Tuple[Any, Any]] = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "variant", FractalVariant.parse(self.variant))
        n = self.max_iterations
        if isinstance(n, bool) or not isinstance(n, int) or n <= 0:
            raise InvalidIterationBudget(f"max_iterations must be a positive integer, got {n!r}")
        if self.variant is FractalVariant.JULIA:
            if self.julia_c is None:
                raise InvalidFractalParameters("A Julia set needs its constant C = (re, im)")
            if len(self.julia_c) != 2:
                raise InvalidFractalParameters(f"Julia constant must be (re, im), got {self.julia_c!r}")
            re, im = self.julia_c
            object.__setattr__(self, "julia_c", (_component("re", re), _component("im", im)))

    @classmethod
    def mandelbrot(cls, max_iterations: int = DEFAULT_MAX_ITERATIONS) -> "FractalParameters":
        return cls(FractalVariant.MANDELBROT, max_iterations)

    @classmethod
    def julia(cls, c_re, c_im, max_iterations: int = DEFAULT_MAX_ITERATIONS) -> "FractalParameters":
        return cls(FractalVariant.JULIA, max_iterations, (c_re, c_im))
