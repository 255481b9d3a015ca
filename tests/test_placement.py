"""
Tests for the placement resolver.

Run with: python -m pytest tests/test_placement.py -v
"""

import sys
from pathlib import Path

import pytest

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from watermark_pro.core.placement import (
    Anchor, CanvasGeometry, TileRule, corner_margin, resolve
)

GEOMETRIES = [
    CanvasGeometry(1000, 800),
    CanvasGeometry(800, 1000),
    CanvasGeometry(1, 1),
    CanvasGeometry(4000, 3),
    CanvasGeometry(3, 4000),
    CanvasGeometry(0, 0),
]

MARGIN_POSITIONS = ["center", "top-left", "top-right", "bottom-left", "bottom-right"]


@pytest.mark.parametrize("geometry", GEOMETRIES)
@pytest.mark.parametrize("position", MARGIN_POSITIONS)
def test_margin_positions_stay_on_canvas(geometry, position):
    anchor = resolve(geometry, position)
    assert isinstance(anchor, Anchor)
    assert 0 <= anchor.x <= geometry.width
    assert 0 <= anchor.y <= geometry.height


def test_center():
    assert resolve(CanvasGeometry(1000, 800), "center") == Anchor(500, 400)


def test_corners_use_five_percent_of_short_side():
    geometry = CanvasGeometry(1000, 800)
    assert corner_margin(geometry) == pytest.approx(40)
    assert resolve(geometry, "top-left") == Anchor(40, 40)
    assert resolve(geometry, "top-right") == Anchor(960, 40)
    assert resolve(geometry, "bottom-left") == Anchor(40, 760)
    assert resolve(geometry, "bottom-right") == Anchor(960, 760)


def test_margin_never_exceeds_half_a_side():
    for geometry in GEOMETRIES:
        margin = corner_margin(geometry)
        assert margin <= geometry.width / 2
        assert margin <= geometry.height / 2


def test_custom_origin_is_exact():
    for geometry in GEOMETRIES:
        assert resolve(geometry, "custom", 0, 0) == Anchor(0, 0)


def test_custom_scales_percentages():
    anchor = resolve(CanvasGeometry(1000, 800), "custom", 25, 75)
    assert anchor == Anchor(250, 600)


def test_custom_out_of_range_goes_off_canvas():
    anchor = resolve(CanvasGeometry(1000, 800), "custom", 150, -10)
    assert anchor.x == pytest.approx(1500)
    assert anchor.y == pytest.approx(-80)


@pytest.mark.parametrize("position", ["middle", "", "TOP-LEFT", None, 42])
def test_unknown_position_falls_back_to_origin(position):
    assert resolve(CanvasGeometry(640, 480), position) == Anchor(0, 0)


def test_tile_returns_rule_with_one_canvas_of_overdraw():
    rule = resolve(CanvasGeometry(800, 600), "tile")
    assert isinstance(rule, TileRule)
    assert (rule.x_start, rule.x_end) == (-800, 1600)
    assert (rule.y_start, rule.y_end) == (-600, 1200)
    assert rule.pivot == Anchor(400, 300)


def test_tile_rule_points():
    rule = resolve(CanvasGeometry(100, 100), "tile")
    points = list(rule.points(150, 100))
    xs = sorted({x for x, _ in points})
    ys = sorted({y for _, y in points})
    assert xs == [-100, 50]
    assert ys == [-100, 0, 100]
    assert len(points) == 6


def test_tile_rule_rejects_non_positive_steps():
    rule = resolve(CanvasGeometry(100, 100), "tile")
    assert list(rule.points(0, 10)) == []
    assert list(rule.points(10, -5)) == []
