import pytest

from fractalgrid.errors import InvalidRegion, InvalidResolution
from fractalgrid.precision import EXTENDED, QUAD, STANDARD
from fractalgrid.region import PlaneRectangle, explicit_resolution, map_resolution


@pytest.mark.parametrize(
    "bounds",
    [
        ("-2.5", "1.0", "-1.3", "1.3"),
        ("-2", "2", "-2", "2"),
        ("-0.1", "0.1", "-1", "1"),
        ("0.3", "0.31", "0.02", "0.0275"),
        ("-1.77", "-1.76", "-0.004", "0.004"),
    ],
)
def test_resolution_keeps_aspect_ratio(bounds):
    """The derived size is within one pixel of the region's aspect ratio."""
    region = PlaneRectangle.from_bounds(*bounds)
    for max_pixels in (1, 7, 100, 333):
        res = map_resolution(region, max_pixels)
        ratio = region.x_span / region.y_span
        if region.y_span > region.x_span:
            assert res.height == max_pixels
            assert abs(res.width - res.height * ratio) < 1 + 1e-9
        else:
            assert res.width == max_pixels
            assert abs(res.height - res.width / ratio) < 1 + 1e-9


def test_longer_axis_gets_full_budget():
    tall = PlaneRectangle.from_bounds("0", "1", "0", "2")
    res = map_resolution(tall, 50)
    assert (res.width, res.height) == (25, 50)

    square = PlaneRectangle.from_bounds("0", "1", "0", "1")
    res = map_resolution(square, 50)
    assert (res.width, res.height) == (50, 50)


def test_default_region_resolution_and_steps():
    region = PlaneRectangle.default()
    res = map_resolution(region, 100)
    assert (res.width, res.height) == (100, 74)
    assert res.delta_x == pytest.approx(3.5 / 100)
    assert res.delta_y == pytest.approx(2.6 / 74)


def test_thin_rectangle_is_clamped_to_one_pixel():
    region = PlaneRectangle.from_bounds("0", "1", "0", "1e-6")
    res = map_resolution(region, 100)
    assert (res.width, res.height) == (100, 1)
    assert res.delta_y == pytest.approx(1e-6)


@pytest.mark.parametrize(
    "bounds",
    [
        ("1", "0", "-1", "1"),
        ("0", "0", "-1", "1"),
        ("-1", "1", "1", "1"),
        ("-1", "1", "2", "-2"),
        ("nan", "1", "0", "1"),
    ],
)
def test_degenerate_or_inverted_region_is_rejected(bounds):
    with pytest.raises(InvalidRegion):
        PlaneRectangle.from_bounds(*bounds)


def test_non_numeric_bound_is_rejected():
    with pytest.raises(InvalidRegion):
        PlaneRectangle.from_bounds("left", "1", "0", "1")


@pytest.mark.parametrize("max_pixels", [0, -5, 2.5, True])
def test_bad_pixel_budget_is_rejected(max_pixels):
    with pytest.raises(InvalidResolution):
        map_resolution(PlaneRectangle.default(), max_pixels)


def test_explicit_resolution():
    region = PlaneRectangle.default()
    res = explicit_resolution(region, 35, 13)
    assert (res.width, res.height) == (35, 13)
    assert res.delta_x == pytest.approx(0.1)
    assert res.delta_y == pytest.approx(0.2)
    with pytest.raises(InvalidResolution):
        explicit_resolution(region, 0, 13)


@pytest.mark.parametrize("precision", [STANDARD, EXTENDED, QUAD])
def test_mapper_runs_in_every_precision(precision):
    region = PlaneRectangle.default(precision)
    res = map_resolution(region, 100)
    assert (res.width, res.height) == (100, 74)
    assert type(res.delta_x) is type(region.x_min)
