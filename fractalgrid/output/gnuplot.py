from __future__ import annotations

import os
import shutil
import subprocess
from typing import Optional

from fractalgrid.errors import GnuplotError
from fractalgrid.output.palette import resolve_theme
from fractalgrid.output.text_writer import CONTOURS_FILE, atomic_write_lines
from fractalgrid.util.logging_setup import get_logger

SCRIPT_FILE = "contours.plt"
GNUPLOT_IMAGE_FILE = "contours.png"

def build_script(
    *,
    contour_levels: int,
    width: int,
    height: int,
    theme: int,
    data_file: str = CONTOURS_FILE,
    image_file: str = GNUPLOT_IMAGE_FILE,
) -> str:
    _, formulae = resolve_theme(theme)
    lines = [
        "reset",
        "",
        "unset key",
        "unset grid",
        "unset xzeroaxis",
        "unset yzeroaxis",
        "unset xtics",
        "unset ytics",
        "unset border",
        "unset surface",
        "unset colorbox",
        "",
        "set contour base",
        "set view map",
        f"set cntrparam levels {contour_levels}",
        "set isosample 250, 250",
        "set palette rgbformulae %s" % ",".join(str(n) for n in formulae),
        "",
        # Records are normalised to the unit square.
        "set xrange [0:1]",
        "set yrange [0:1]",
        "set size ratio %g" % (height / width),
        "set lmargin at screen 0",
        "set rmargin at screen 1",
        "set tmargin at screen 0",
        "set bmargin at screen 1",
        f"set terminal png size {width},{height}",
        f"set output '{image_file}'",
        f"splot '{data_file}' u 1:2:3 w image",
    ]
    return "\n".join(lines) + "\n"

def write_script(path: str, script: str) -> str:
    atomic_write_lines(path, script.rstrip("\n").split("\n"))
    get_logger().info("Gnuplot script written: %s", path)
    return path

def run_gnuplot(script_path: str, *, executable: Optional[str] = None) -> None:
    """Feed the script to gnuplot from the script's directory."""
    logger = get_logger()
    exe = executable or shutil.which("gnuplot")
    if not exe:
        raise GnuplotError("gnuplot not found on PATH")

    cwd = os.path.dirname(os.path.abspath(script_path))
    logger.info("Running %s < %s", exe, script_path)
    with open(script_path, "r", encoding="utf-8") as f:
        r = subprocess.run([exe], stdin=f, cwd=cwd, capture_output=True, text=True)
    if r.returncode != 0:
        raise GnuplotError(f"gnuplot failed with status {r.returncode}: {r.stderr.strip()}")
    logger.info("Gnuplot image written: %s", os.path.join(cwd, GNUPLOT_IMAGE_FILE))
