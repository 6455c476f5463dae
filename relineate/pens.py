"""
Per-tool stroke geometry and styling.

Every pen maps to a family, and every family has one pure width formula.
Formulas work in device pixels and take sanitised inputs:

    p  pressure, clamped to [0, 1]
    w  encoded point width
    b  stroke base width
    t  tilt as a fraction of a right angle, clamped to [0, 1]
    s  speed / 50, clamped to [0, 4]

    brush        0.7 * ((1 + 1.4p) * w - 0.5t - 0.5s)
    pencil       0.7 * ((0.8b + 0.5p) * w - 0.25t - 0.6s)
    ballpoint    (0.5 + p) + w - 0.5s
    marker       0.9 * (w - 0.4t) * (0.6 + 0.4p)
    fineliner    1.3 * b ** 2.1            (no pressure response)
    mechanical   b ** 2                     (no pressure response)
    highlighter  max(w, 15)
    eraser       2 * max(w, b)
    area         w
    calligraphy  0.9 * ((1 + p) * w - 0.3t)
    fallback     w, or b when w is not positive

Results are clamped to [MIN_WIDTH, MAX_WIDTH]. Nothing here raises: values
read straight from a file (NaN, negative pressure, huge widths) still give
a drawable width.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Mapping, Optional

from .parser import Pen, PenColor, Point, Stroke
from .constants import (
    COLOR_MAP_HEX,
    ERASER_PENS,
    FALLBACK_HEX,
    HIGHLIGHTER_HEX,
    HIGHLIGHTER_OPACITY,
    INVISIBLE_PENS,
    MAX_WIDTH,
    MIN_WIDTH,
    PAGE_HEX,
    TRANSPARENT_PENS,
)


class Family(Enum):
    BRUSH = "brush"
    PENCIL = "pencil"
    BALLPOINT = "ballpoint"
    MARKER = "marker"
    FINELINER = "fineliner"
    MECHANICAL = "mechanical"
    HIGHLIGHTER = "highlighter"
    ERASER = "eraser"
    AREA = "area"
    CALLIGRAPHY = "calligraphy"
    FALLBACK = "fallback"


PEN_FAMILY = {
    Pen.PAINTBRUSH: Family.BRUSH,
    Pen.PAINTBRUSH_2: Family.BRUSH,
    Pen.PENCIL: Family.PENCIL,
    Pen.PENCIL_2: Family.PENCIL,
    Pen.BALLPOINT: Family.BALLPOINT,
    Pen.BALLPOINT_2: Family.BALLPOINT,
    Pen.MARKER: Family.MARKER,
    Pen.MARKER_2: Family.MARKER,
    Pen.FINELINER: Family.FINELINER,
    Pen.FINELINER_2: Family.FINELINER,
    Pen.MECHANICAL_PENCIL: Family.MECHANICAL,
    Pen.MECHANICAL_PENCIL_2: Family.MECHANICAL,
    Pen.HIGHLIGHTER: Family.HIGHLIGHTER,
    Pen.HIGHLIGHTER_2: Family.HIGHLIGHTER,
    Pen.ERASER: Family.ERASER,
    Pen.ERASER_AREA: Family.AREA,
    Pen.ERASE_ALL: Family.AREA,
    Pen.SELECTION_BRUSH: Family.AREA,
    Pen.SELECTION_BRUSH_2: Family.AREA,
    Pen.CALIGRAPHY: Family.CALLIGRAPHY,
}


def family_of(pen: Pen | int) -> Family:
    if isinstance(pen, Pen):
        return PEN_FAMILY.get(pen, Family.FALLBACK)
    return Family.FALLBACK


# =============================================================================
# Width Formulas
# =============================================================================

@dataclass(frozen=True)
class Sample:
    """Sanitised inputs for a width formula."""
    base: float
    pressure: float
    width: float
    tilt: float
    speed: float


def _clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


def _finite(value: float, default: float = 0.0) -> float:
    return value if math.isfinite(value) else default


def sample(base_width: float, point: Point) -> Sample:
    return Sample(
        base=max(0.0, _finite(base_width)),
        pressure=_clamp(_finite(point.pressure), 0.0, 1.0),
        width=_finite(point.width),
        tilt=_clamp(_finite(point.direction), 0.0, math.pi / 2) / (math.pi / 2),
        speed=_clamp(_finite(point.speed), 0.0, 200.0) / 50.0,
    )


def _brush(s: Sample) -> float:
    return 0.7 * ((1 + 1.4 * s.pressure) * s.width - 0.5 * s.tilt - 0.5 * s.speed)


def _pencil(s: Sample) -> float:
    return 0.7 * ((0.8 * s.base + 0.5 * s.pressure) * s.width - 0.25 * s.tilt - 0.6 * s.speed)


def _ballpoint(s: Sample) -> float:
    return (0.5 + s.pressure) + s.width - 0.5 * s.speed


def _marker(s: Sample) -> float:
    return 0.9 * (s.width - 0.4 * s.tilt) * (0.6 + 0.4 * s.pressure)


def _fineliner(s: Sample) -> float:
    return 1.3 * s.base ** 2.1


def _mechanical(s: Sample) -> float:
    return s.base ** 2


def _highlighter(s: Sample) -> float:
    return max(s.width, 15.0)


def _eraser(s: Sample) -> float:
    return 2 * max(s.width, s.base)


def _area(s: Sample) -> float:
    return s.width


def _calligraphy(s: Sample) -> float:
    return 0.9 * ((1 + s.pressure) * s.width - 0.3 * s.tilt)


def _fallback(s: Sample) -> float:
    return s.width if s.width > 0 else s.base


WIDTH_FORMULAS: dict[Family, Callable[[Sample], float]] = {
    Family.BRUSH: _brush,
    Family.PENCIL: _pencil,
    Family.BALLPOINT: _ballpoint,
    Family.MARKER: _marker,
    Family.FINELINER: _fineliner,
    Family.MECHANICAL: _mechanical,
    Family.HIGHLIGHTER: _highlighter,
    Family.ERASER: _eraser,
    Family.AREA: _area,
    Family.CALLIGRAPHY: _calligraphy,
    Family.FALLBACK: _fallback,
}


def effective_width(pen: Pen | int, base_width: float, point: Point) -> float:
    """Rendered width at a point, in device pixels."""
    formula = WIDTH_FORMULAS[family_of(pen)]
    width = _finite(formula(sample(base_width, point)), MIN_WIDTH)
    return _clamp(width, MIN_WIDTH, MAX_WIDTH)


# =============================================================================
# Color and Style
# =============================================================================

@dataclass(frozen=True)
class StrokeStyle:
    color: str
    opacity: float = 1.0
    linecap: str = "round"


def resolve_color(pen: Pen | int, color: PenColor | int,
                  palette: Optional[Mapping[PenColor, str]] = None,
                  page_color: Optional[str] = PAGE_HEX) -> str:
    """Get the hex color for a pen/color pair. Erasers take the page color."""
    if isinstance(pen, Pen):
        if pen in TRANSPARENT_PENS:
            return HIGHLIGHTER_HEX
        if pen in ERASER_PENS:
            return page_color or PAGE_HEX
    if isinstance(color, PenColor):
        if palette and color in palette:
            return palette[color]
        return COLOR_MAP_HEX.get(color, FALLBACK_HEX)
    return FALLBACK_HEX


def stroke_style(stroke: Stroke,
                 palette: Optional[Mapping[PenColor, str]] = None,
                 page_color: Optional[str] = PAGE_HEX) -> StrokeStyle:
    """
    Color, opacity and line cap for a stroke.

    page_color=None means a transparent page, where erasers cannot paint
    over earlier ink and are left out.
    """
    color = resolve_color(stroke.pen, stroke.color, palette, page_color)
    if stroke.pen in TRANSPARENT_PENS:
        return StrokeStyle(color, opacity=HIGHLIGHTER_OPACITY, linecap="square")
    if stroke.pen in INVISIBLE_PENS or (stroke.pen in ERASER_PENS and page_color is None):
        return StrokeStyle(color, opacity=0.0)
    return StrokeStyle(color)
