import json
import math
import os
from typing import Any, Dict, Optional

from fractalgrid.output.palette import DEFAULT_THEME
from fractalgrid.params import DEFAULT_MAX_ITERATIONS, FractalVariant
from fractalgrid.precision import get_precision
from fractalgrid.region import DEFAULT_BOUNDS

BOUND_KEYS = ("x_min", "x_max", "y_min", "y_max")

def default_config() -> Dict[str, Any]:
    x_min, x_max, y_min, y_max = DEFAULT_BOUNDS
    return {
        "x_min": x_min,
        "x_max": x_max,
        "y_min": y_min,
        "y_max": y_max,
        "max_pixels": 2048,
        "width": None,
        "height": None,
        "max_iterations": DEFAULT_MAX_ITERATIONS,
        "fractal": FractalVariant.MANDELBROT.value,
        "julia_c": None,
        "precision": "standard",
        "contour_levels": 64,
        "color_theme": DEFAULT_THEME,
        "output_dir": ".",
        "workers": os.cpu_count() or 1,
        "band_height": 32,
        "write_png": True,
        "run_gnuplot": False,
        "progress": True,
    }

def load_config(config_path: Optional[str]) -> Dict[str, Any]:
    cfg = default_config()
    if config_path:
        with open(config_path, "r", encoding="utf-8") as f:
            user = json.load(f)
        if not isinstance(user, dict):
            raise ValueError("Config JSON must be an object.")
        unknown = sorted(set(user) - set(cfg))
        if unknown:
            raise ValueError(f"Unknown config field(s): {', '.join(unknown)}")
        cfg.update(user)
    return cfg

def _bound(name: str, value: Any) -> str:
    # Kept as text so wider precisions parse every digit.
    if isinstance(value, bool) or not isinstance(value, (int, float, str)):
        raise ValueError(f"{name} must be a number or decimal string, got {value!r}")
    text = value.strip() if isinstance(value, str) else repr(value)
    try:
        number = float(text)
    except ValueError:
        raise ValueError(f"{name} must be a number, got {value!r}") from None
    if not math.isfinite(number):
        raise ValueError(f"{name} must be finite, got {value!r}")
    return text

def _positive_int(cfg: Dict[str, Any], name: str) -> int:
    value = cfg[name]
    if isinstance(value, bool):
        raise ValueError(f"{name} must be a positive integer, got {value!r}")
    try:
        n = int(value)
    except (TypeError, ValueError):
        raise ValueError(f"{name} must be a positive integer, got {value!r}") from None
    if n <= 0 or n != float(value):
        raise ValueError(f"{name} must be a positive integer, got {value!r}")
    return n

def _flag(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in ("1", "true", "yes", "on")
    return bool(value)

def normalise_config(cfg: Dict[str, Any]) -> Dict[str, Any]:
    required = list(BOUND_KEYS) + ["max_pixels", "max_iterations", "fractal", "precision", "output_dir"]
    for r in required:
        if r not in cfg:
            raise ValueError(f"Missing config field: {r}")

    out = dict(default_config(), **cfg)
    for k in BOUND_KEYS:
        out[k] = _bound(k, cfg[k])

    for k in ("max_pixels", "max_iterations", "contour_levels", "band_height", "workers"):
        out[k] = _positive_int(out, k)
    out["color_theme"] = int(out["color_theme"])

    width, height = cfg.get("width"), cfg.get("height")
    if (width is None) != (height is None):
        raise ValueError("width and height must be given together.")
    if width is not None:
        out["width"] = _positive_int(out, "width")
        out["height"] = _positive_int(out, "height")

    out["fractal"] = FractalVariant.parse(cfg["fractal"]).value
    out["precision"] = get_precision(cfg["precision"]).name

    julia_c = cfg.get("julia_c")
    if out["fractal"] == FractalVariant.JULIA.value:
        if not (isinstance(julia_c, (list, tuple)) and len(julia_c) == 2):
            raise ValueError("julia_c must be [re, im] for a Julia set.")
        out["julia_c"] = [_bound("julia_c[0]", julia_c[0]), _bound("julia_c[1]", julia_c[1])]
    else:
        out["julia_c"] = None

    out["output_dir"] = str(cfg["output_dir"])
    for k in ("write_png", "run_gnuplot", "progress"):
        out[k] = _flag(out[k])
    return out
