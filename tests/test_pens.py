"""Tests for per-tool width formulas and colors."""

import math

import pytest

from relineate.constants import MAX_WIDTH, MIN_WIDTH
from relineate.parser import Pen, PenColor, Point, Stroke
from relineate.pens import (
    Family,
    PEN_FAMILY,
    StrokeStyle,
    effective_width,
    family_of,
    resolve_color,
    sample,
    stroke_style,
)


def pt(pressure=0.5, width=4.0, speed=0.0, direction=0.0):
    return Point(x=0.0, y=0.0, speed=speed, direction=direction, width=width, pressure=pressure)


def test_every_pen_has_a_family():
    assert set(PEN_FAMILY) == set(Pen)


def test_unknown_pen_uses_fallback():
    assert family_of(99) is Family.FALLBACK
    assert effective_width(99, 2.0, pt(width=6.0)) == 6.0
    assert effective_width(99, 2.0, pt(width=0.0)) == 2.0


@pytest.mark.parametrize("pen", [Pen.FINELINER, Pen.FINELINER_2])
def test_fineliner_ignores_dynamics(pen):
    expected = 1.3 * 2.0 ** 2.1
    assert effective_width(pen, 2.0, pt(pressure=0.1)) == pytest.approx(expected)
    assert effective_width(pen, 2.0, pt(pressure=1.0, speed=80, width=9)) == pytest.approx(expected)


def test_mechanical_pencil_is_base_squared():
    assert effective_width(Pen.MECHANICAL_PENCIL, 2.0, pt()) == pytest.approx(4.0)


def test_ballpoint_pressure_dominant():
    light = effective_width(Pen.BALLPOINT, 2.0, pt(pressure=0.1))
    heavy = effective_width(Pen.BALLPOINT, 2.0, pt(pressure=0.9))
    assert heavy > light
    assert heavy == pytest.approx(0.5 + 0.9 + 4.0)


def test_ballpoint_thins_with_speed():
    slow = effective_width(Pen.BALLPOINT, 2.0, pt(speed=0.0))
    fast = effective_width(Pen.BALLPOINT, 2.0, pt(speed=100.0))
    assert slow - fast == pytest.approx(1.0)


def test_brush_formula():
    value = effective_width(Pen.PAINTBRUSH, 2.0, pt(pressure=1.0, width=10.0))
    assert value == pytest.approx(0.7 * (2.4 * 10.0))


def test_pencil_formula():
    value = effective_width(Pen.PENCIL_2, 2.0, pt(pressure=0.0, width=5.0))
    assert value == pytest.approx(0.7 * (1.6 * 5.0))


def test_marker_tilt_thins_line():
    upright = effective_width(Pen.MARKER, 2.0, pt(direction=0.0, width=10.0))
    tilted = effective_width(Pen.MARKER, 2.0, pt(direction=math.pi / 2, width=10.0))
    assert upright == pytest.approx(0.9 * 10.0 * 0.8)
    assert tilted == pytest.approx(0.9 * 9.6 * 0.8)


def test_calligraphy_formula():
    value = effective_width(Pen.CALIGRAPHY, 2.0, pt(pressure=0.5, width=4.0))
    assert value == pytest.approx(0.9 * 1.5 * 4.0)


def test_highlighter_width_field_dominant():
    assert effective_width(Pen.HIGHLIGHTER, 2.0, pt(width=30.0)) == 30.0
    assert effective_width(Pen.HIGHLIGHTER_2, 2.0, pt(width=3.0)) == 15.0


def test_eraser_width_field_dominant():
    assert effective_width(Pen.ERASER, 2.0, pt(width=10.0)) == 20.0
    assert effective_width(Pen.ERASER, 2.0, pt(width=0.5)) == 4.0


def test_result_clamped():
    assert effective_width(Pen.BALLPOINT, 2.0, pt(width=1e9)) == MAX_WIDTH
    assert effective_width(Pen.PAINTBRUSH, 2.0, pt(width=-50.0)) == MIN_WIDTH


@pytest.mark.parametrize("pen", list(Pen) + [123])
@pytest.mark.parametrize("value", [float("nan"), float("inf"), -float("inf"), -1.0, 1e38])
def test_never_raises_and_stays_in_range(pen, value):
    point = Point(x=value, y=value, speed=value, direction=value, width=value, pressure=value)
    width = effective_width(pen, value, point)
    assert MIN_WIDTH <= width <= MAX_WIDTH


def test_sample_clamps_inputs():
    s = sample(float("nan"), pt(pressure=3.0, speed=1000.0, direction=10.0))
    assert s.base == 0.0
    assert s.pressure == 1.0
    assert s.speed == 4.0
    assert s.tilt == 1.0


def test_palette_colors():
    assert resolve_color(Pen.BALLPOINT, PenColor.BLACK) == "#000000"
    assert resolve_color(Pen.BALLPOINT, PenColor.GRAY) == "#7d7d7d"
    assert resolve_color(Pen.BALLPOINT, PenColor.WHITE) == "#ffffff"


def test_unknown_color_falls_back_to_black():
    assert resolve_color(Pen.BALLPOINT, 42) == "#000000"
    assert resolve_color(99, 42) == "#000000"


def test_tool_color_defaults():
    assert resolve_color(Pen.HIGHLIGHTER, PenColor.BLACK) == "#ffeb3b"
    assert resolve_color(Pen.ERASER, PenColor.BLACK) == "#ffffff"


def test_palette_override():
    palette = {PenColor.GRAY: "#808080"}
    assert resolve_color(Pen.PENCIL, PenColor.GRAY, palette) == "#808080"
    assert resolve_color(Pen.PENCIL, PenColor.BLACK, palette) == "#000000"


def test_stroke_styles():
    def style(pen):
        return stroke_style(Stroke(pen=pen, color=PenColor.BLACK, base_width=2.0))

    assert style(Pen.FINELINER).opacity == 1.0
    assert style(Pen.FINELINER).linecap == "round"
    assert style(Pen.HIGHLIGHTER).opacity == 0.4
    assert style(Pen.HIGHLIGHTER).linecap == "square"
    assert style(Pen.ERASER_AREA).opacity == 0.0
    assert style(Pen.SELECTION_BRUSH).opacity == 0.0
    assert style(77).opacity == 1.0


def test_eraser_takes_page_color():
    assert resolve_color(Pen.ERASER, PenColor.BLACK, page_color="#eeeeee") == "#eeeeee"
    eraser = Stroke(pen=Pen.ERASER, color=PenColor.BLACK, base_width=2.0)
    style = stroke_style(eraser, page_color="#eeeeee")
    assert style == StrokeStyle("#eeeeee", opacity=1.0)


def test_eraser_hidden_on_transparent_page():
    eraser = Stroke(pen=Pen.ERASER, color=PenColor.BLACK, base_width=2.0)
    assert stroke_style(eraser, page_color=None).opacity == 0.0
    pen = Stroke(pen=Pen.FINELINER, color=PenColor.BLACK, base_width=2.0)
    assert stroke_style(pen, page_color=None).opacity == 1.0
