"""Color themes and gnuplot's ``rgbformulae`` palette functions."""

from __future__ import annotations

from typing import Dict, Tuple

import numpy as np

from fractalgrid.util.logging_setup import get_logger

Formulae = Tuple[int, int, int]

DEFAULT_THEME = 2
FALLBACK_THEME = 7

THEMES: Dict[int, Tuple[str, Formulae]] = {
    1: ("Candy", (3, 11, 16)),
    2: ("Cosmic", (30, 31, 32)),
    3: ("Fire", (21, 22, 23)),
    4: ("Ocean", (23, 28, 3)),
    5: ("Rainbow", (22, 13, -31)),
    6: ("Violet", (33, 13, 10)),
    7: ("Volcano", (7, 5, 15)),
}

def resolve_theme(theme: int) -> Tuple[str, Formulae]:
    if theme in THEMES:
        return THEMES[theme]
    get_logger().warning("Unknown color theme %s; using %s", theme, THEMES[FALLBACK_THEME][0])
    return THEMES[FALLBACK_THEME]

def rgb_formula(n: int, x: np.ndarray) -> np.ndarray:
    """Evaluate gnuplot formula ``n`` on gray levels ``x`` in ``[0, 1]``.

    A negative ``n`` evaluates formula ``-n`` on ``1 - x``.  The result is
    clipped to ``[0, 1]``.
    """
    x = np.asarray(x, dtype=np.float64)
    if n < 0:
        x = 1.0 - x
        n = -n
    deg = np.pi / 180.0
    if n == 0:
        y = np.zeros_like(x)
    elif n == 1:
        y = np.full_like(x, 0.5)
    elif n == 2:
        y = np.ones_like(x)
    elif n == 3:
        y = x
    elif n == 4:
        y = x ** 2
    elif n == 5:
        y = x ** 3
    elif n == 6:
        y = x ** 4
    elif n == 7:
        y = np.sqrt(x)
    elif n == 8:
        y = np.sqrt(np.sqrt(x))
    elif n == 9:
        y = np.sin(90 * deg * x)
    elif n == 10:
        y = np.cos(90 * deg * x)
    elif n == 11:
        y = np.abs(x - 0.5)
    elif n == 12:
        y = (2 * x - 1) ** 2
    elif n == 13:
        y = np.sin(180 * deg * x)
    elif n == 14:
        y = np.abs(np.cos(180 * deg * x))
    elif n == 15:
        y = np.sin(360 * deg * x)
    elif n == 16:
        y = np.cos(360 * deg * x)
    elif n == 17:
        y = np.abs(np.sin(360 * deg * x))
    elif n == 18:
        y = np.abs(np.cos(360 * deg * x))
    elif n == 19:
        y = np.abs(np.sin(720 * deg * x))
    elif n == 20:
        y = np.abs(np.cos(720 * deg * x))
    elif n == 21:
        y = 3 * x
    elif n == 22:
        y = 3 * x - 1
    elif n == 23:
        y = 3 * x - 2
    elif n == 24:
        y = np.abs(3 * x - 1)
    elif n == 25:
        y = np.abs(3 * x - 2)
    elif n == 26:
        y = (3 * x - 1) / 2
    elif n == 27:
        y = (3 * x - 2) / 2
    elif n == 28:
        y = np.abs((3 * x - 1) / 2)
    elif n == 29:
        y = np.abs((3 * x - 2) / 2)
    elif n == 30:
        y = x / 0.32 - 0.78125
    elif n == 31:
        y = 2 * x - 0.84
    elif n == 32:
        y = np.select(
            [x <= 0.25, x < 0.42, x <= 0.92],
            [4 * x, np.ones_like(x), -2 * x + 1.84],
            default=x / 0.08 - 11.5,
        )
    elif n == 33:
        y = np.abs(2 * x - 0.5)
    elif n == 34:
        y = 2 * x
    elif n == 35:
        y = 2 * x - 0.5
    elif n == 36:
        y = 2 * x - 1
    else:
        raise ValueError(f"rgbformulae index must be in -36..36, got {n}")
    return np.clip(y, 0.0, 1.0)

def palette_lut(formulae: Formulae, levels: int) -> np.ndarray:
    """``(levels, 3)`` uint8 lookup table spreading ``levels`` evenly over the palette."""
    if levels < 1:
        raise ValueError("levels must be >= 1")
    gray = np.linspace(0.0, 1.0, levels) if levels > 1 else np.zeros(1)
    channels = [rgb_formula(n, gray) for n in formulae]
    return np.rint(np.stack(channels, axis=1) * 255).astype(np.uint8)
