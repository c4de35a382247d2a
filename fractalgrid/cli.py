from __future__ import annotations

import argparse
import os
import subprocess
import sys
from typing import Any, Dict, Optional

from fractalgrid.config import load_config, normalise_config
from fractalgrid.errors import FractalGridError, GnuplotError
from fractalgrid.output.palette import THEMES
from fractalgrid.pipeline import run, sample
from fractalgrid.precision import PRECISIONS, get_precision
from fractalgrid.util.logging_setup import LEVELS, configure_root_logging, get_logger, parse_level, queue_logging
from fractalgrid.util.manifest import build_manifest, write_manifest

EXIT_OK = 0
EXIT_GNUPLOT = 1
EXIT_INVALID = 2

def _git_commit() -> Optional[str]:
    try:
        r = subprocess.run(["git", "rev-parse", "HEAD"], capture_output=True, text=True, check=True)
        return r.stdout.strip()
    except (OSError, subprocess.CalledProcessError):
        return None

def _add_sampling_args(p: argparse.ArgumentParser) -> None:
    p.add_argument("bounds", nargs="*", metavar="BOUND", help="Region as x_min x_max y_min y_max (default -2.5 1.0 -1.3 1.3).")
    p.add_argument("-s", "--size", dest="max_pixels", type=int, default=None, help="Pixel budget of the longer axis.")
    p.add_argument("--width", type=int, default=None, help="Explicit width; requires --height and overrides --size.")
    p.add_argument("--height", type=int, default=None, help="Explicit height; requires --width.")
    p.add_argument("-i", "--iterations", dest="max_iterations", type=int, default=None, help="Iteration cap.")
    p.add_argument("-f", "--fractal", type=str, default=None, help="mandelbrot (1) or julia (2).")
    p.add_argument("--julia-c", type=str, nargs=2, metavar=("RE", "IM"), default=None, help="Julia constant C.")
    p.add_argument("--precision", type=str, default=None, choices=sorted(PRECISIONS), help="Arithmetic precision.")
    p.add_argument("--workers", type=int, default=None, help="Worker processes (1 samples in-process).")
    p.add_argument("--no-progress", dest="progress", action="store_false", default=None, help="Hide the progress bar.")

def build_arg_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="fractalgrid", description="Escape-time Mandelbrot/Julia point grids for plotting.")
    p.add_argument("--config", type=str, default=None, help="Path to config JSON. If omitted, built-in defaults are used.")
    p.add_argument("--log-level", type=str, default="INFO", choices=LEVELS, help="Log level.")
    p.add_argument("--log-file", type=str, default="", help="Log file path (rotating). Empty disables file logging.")
    sub = p.add_subparsers(dest="cmd", required=True)

    r = sub.add_parser("render", help="Sample the region and write contours, mask, gnuplot script and preview.")
    _add_sampling_args(r)
    r.add_argument("-c", "--contours", dest="contour_levels", type=int, default=None, help="Contour levels.")
    r.add_argument("-t", "--theme", dest="color_theme", type=int, default=None, help="Color theme 1-7.")
    r.add_argument("-o", "--output-dir", dest="output_dir", type=str, default=None, help="Directory for output files.")
    r.add_argument("--gnuplot", dest="run_gnuplot", action="store_true", default=None, help="Run gnuplot on the script.")
    r.add_argument("--no-png", dest="write_png", action="store_false", default=None, help="Skip the Pillow preview.")

    m = sub.add_parser("mask", help="Sample the region and print the membership mask.")
    _add_sampling_args(m)
    m.add_argument("--symbol", type=str, default="*", help="Character for points in the set.")

    sub.add_parser("themes", help="List color themes.")
    return p

def apply_overrides(cfg: Dict[str, Any], args: argparse.Namespace) -> Dict[str, Any]:
    out = dict(cfg)
    bounds = getattr(args, "bounds", None) or []
    if bounds:
        if len(bounds) != 4:
            raise ValueError("Region needs exactly four bounds: x_min x_max y_min y_max")
        out.update(zip(("x_min", "x_max", "y_min", "y_max"), bounds))
    for key in ("max_pixels", "width", "height", "max_iterations", "fractal", "julia_c", "precision",
                "workers", "progress", "contour_levels", "color_theme", "output_dir", "run_gnuplot", "write_png"):
        value = getattr(args, key, None)
        if value is not None:
            out[key] = value
    if getattr(args, "julia_c", None) is not None and getattr(args, "fractal", None) is None:
        out["fractal"] = "julia"
    return out

def main(argv: Optional[list] = None) -> int:
    args = build_arg_parser().parse_args(argv)

    if args.cmd == "themes":
        for number, (name, formulae) in sorted(THEMES.items()):
            print("%d  %-8s rgbformulae %s" % (number, name, ",".join(str(n) for n in formulae)))
        return EXIT_OK

    log_level = parse_level(args.log_level)
    log_file = args.log_file if args.log_file and args.log_file.strip() else None
    listener_logger = configure_root_logging(level=log_level, console=True, log_file=log_file)

    logger = get_logger()

    with queue_logging(listener_logger) as queue:
        try:
            return _dispatch(args, queue, log_level)
        except (FractalGridError, ValueError) as e:
            logger.error("%s: %s", type(e).__name__, e)
            return EXIT_INVALID
        except GnuplotError as e:
            logger.error("%s", e)
            return EXIT_GNUPLOT
        except OSError as e:
            logger.error("%s: %s", type(e).__name__, e)
            return EXIT_INVALID

def _dispatch(args: argparse.Namespace, queue, log_level: int) -> int:
    logger = get_logger()
    cfg = normalise_config(apply_overrides(load_config(args.config), args))

    if args.cmd == "render":
        summary = run(cfg, log_queue=queue, log_level=log_level)
        manifest = build_manifest(
            config=cfg,
            precision_info=get_precision(cfg["precision"]).describe(),
            result=summary,
            git_commit=_git_commit(),
        )
        path = os.path.join(cfg["output_dir"], "run.json")
        write_manifest(path, manifest)
        logger.info("Run manifest written: %s", path)
        return EXIT_OK

    if args.cmd == "mask":
        grid = sample(cfg, log_queue=queue, log_level=log_level)
        for line in grid.mask_rows(symbol=args.symbol):
            sys.stdout.write(line + "\n")
        return EXIT_OK

    raise RuntimeError("Unknown command.")
