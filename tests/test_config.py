import json

import pytest

from fractalgrid.config import default_config, load_config, normalise_config
from fractalgrid.errors import InvalidPrecision, InvalidRegion, InvalidResolution
from fractalgrid.pipeline import resolve_inputs


def test_defaults_match_original_program():
    cfg = normalise_config(load_config(None))
    assert (cfg["x_min"], cfg["x_max"], cfg["y_min"], cfg["y_max"]) == ("-2.5", "1.0", "-1.3", "1.3")
    assert cfg["max_pixels"] == 2048
    assert cfg["max_iterations"] == 1024
    assert cfg["contour_levels"] == 64
    assert cfg["color_theme"] == 2
    assert cfg["fractal"] == "mandelbrot"
    assert cfg["precision"] == "standard"
    assert cfg["julia_c"] is None


def test_load_json(tmp_path):
    path = tmp_path / "cfg.json"
    path.write_text(json.dumps({"x_min": -1, "x_max": "0.5", "fractal": "julia", "julia_c": [-0.8, "0.156"]}))
    cfg = normalise_config(load_config(str(path)))
    assert cfg["x_min"] == "-1"
    assert cfg["x_max"] == "0.5"
    assert cfg["fractal"] == "julia"
    assert cfg["julia_c"] == ["-0.8", "0.156"]


def test_json_must_be_an_object(tmp_path):
    path = tmp_path / "cfg.json"
    path.write_text("[1, 2]")
    with pytest.raises(ValueError):
        load_config(str(path))


def test_unknown_field(tmp_path):
    path = tmp_path / "cfg.json"
    path.write_text(json.dumps({"zoom": 3}))
    with pytest.raises(ValueError):
        load_config(str(path))


@pytest.mark.parametrize(
    "override",
    [
        {"x_min": "left"},
        {"x_max": float("inf")},
        {"max_iterations": 0},
        {"max_pixels": 2.5},
        {"width": 10},
        {"fractal": "julia"},
        {"fractal": "newton"},
        {"workers": -1},
        {"contour_levels": "many"},
    ],
)
def test_bad_values(override):
    cfg = default_config()
    cfg.update(override)
    with pytest.raises(ValueError):
        normalise_config(cfg)


def test_unknown_precision_is_typed():
    cfg = default_config()
    cfg["precision"] = "octuple"
    with pytest.raises(InvalidPrecision):
        normalise_config(cfg)


def test_resolve_inputs_validates_region_and_size():
    cfg = default_config()
    cfg.update({"x_min": "1", "x_max": "0"})
    with pytest.raises(InvalidRegion):
        resolve_inputs(normalise_config(cfg))

    cfg = normalise_config(default_config())
    cfg["max_pixels"] = 0
    with pytest.raises(InvalidResolution):
        resolve_inputs(cfg)


def test_resolve_inputs_explicit_size():
    cfg = default_config()
    cfg.update({"width": 30, "height": 20, "precision": "quad"})
    region, res, params = resolve_inputs(normalise_config(cfg))
    assert (res.width, res.height) == (30, 20)
    assert region.precision.name == "quad"
    assert params.max_iterations == 1024
