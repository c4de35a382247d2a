from __future__ import annotations

import logging
import os
from typing import Any, Dict, Tuple

from fractalgrid.grid import PointGrid
from fractalgrid.output.gnuplot import SCRIPT_FILE, build_script, run_gnuplot, write_script
from fractalgrid.output.image_writer import PREVIEW_FILE, render_image, save_image
from fractalgrid.output.text_writer import CONTOURS_FILE, MASK_FILE, write_contours, write_mask
from fractalgrid.params import FractalParameters
from fractalgrid.precision import get_precision
from fractalgrid.region import PlaneRectangle, ScreenResolution, explicit_resolution, map_resolution
from fractalgrid.renderers.cpu_pool import sample_grid_parallel
from fractalgrid.util.logging_setup import get_logger

def resolve_inputs(cfg: Dict[str, Any]) -> Tuple[PlaneRectangle, ScreenResolution, FractalParameters]:
    """Turn a normalised config into the sampler's validated inputs."""
    precision = get_precision(cfg["precision"])
    region = PlaneRectangle.from_bounds(cfg["x_min"], cfg["x_max"], cfg["y_min"], cfg["y_max"], precision)

    if cfg.get("width") is not None:
        resolution = explicit_resolution(region, cfg["width"], cfg["height"])
    else:
        resolution = map_resolution(region, cfg["max_pixels"])

    julia_c = cfg.get("julia_c")
    params = FractalParameters(
        variant=cfg["fractal"],
        max_iterations=cfg["max_iterations"],
        julia_c=tuple(julia_c) if julia_c is not None else None,
    )
    return region, resolution, params

def sample(
    cfg: Dict[str, Any],
    *,
    cancel=None,
    log_queue=None,
    log_level: int = logging.INFO,
) -> PointGrid:
    logger = get_logger()
    region, resolution, params = resolve_inputs(cfg)

    logger.info(
        "Sampling %s region=%s size=%sx%s iter=%s precision=%s",
        params.variant.value, region.describe(), resolution.width, resolution.height,
        params.max_iterations, region.precision.name,
    )
    if params.julia_c is not None:
        logger.info("Julia constant C=(%s, %s)", *params.julia_c)

    grid = sample_grid_parallel(
        region, resolution, params,
        workers=int(cfg.get("workers", 1)),
        band_height=int(cfg.get("band_height", 32)),
        cancel=cancel,
        log_queue=log_queue,
        log_level=log_level,
        progress=bool(cfg.get("progress", False)),
    )
    logger.info("Sampling complete: %s samples, %s in set", len(grid), int(grid.membership_mask().sum()))
    return grid

def write_outputs(grid: PointGrid, cfg: Dict[str, Any]) -> Dict[str, str]:
    """Write every output file.  Only call this with a fully sampled grid."""
    out_dir = str(cfg["output_dir"])
    os.makedirs(out_dir, exist_ok=True)
    contour_levels = int(cfg["contour_levels"])
    theme = int(cfg["color_theme"])

    paths = {
        "contours": write_contours(grid, os.path.join(out_dir, CONTOURS_FILE), contour_levels),
        "mask": write_mask(grid, os.path.join(out_dir, MASK_FILE)),
    }

    script = build_script(contour_levels=contour_levels, width=grid.width, height=grid.height, theme=theme)
    paths["gnuplot_script"] = write_script(os.path.join(out_dir, SCRIPT_FILE), script)

    if cfg.get("write_png", True):
        img = render_image(grid, contour_levels=contour_levels, theme=theme)
        paths["preview"] = save_image(img, os.path.join(out_dir, PREVIEW_FILE))

    if cfg.get("run_gnuplot", False):
        run_gnuplot(paths["gnuplot_script"])
    return paths

def run(
    cfg: Dict[str, Any],
    *,
    cancel=None,
    log_queue=None,
    log_level: int = logging.INFO,
) -> Dict[str, Any]:
    grid = sample(cfg, cancel=cancel, log_queue=log_queue, log_level=log_level)
    paths = write_outputs(grid, cfg)
    return {
        "width": grid.width,
        "height": grid.height,
        "precision": grid.region.precision.name,
        "fractal": grid.params.variant.value,
        "in_set": int(grid.membership_mask().sum()),
        "outputs": paths,
    }
