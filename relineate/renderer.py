"""
Path renderer for reMarkable strokes.

Turns a parsed Document into drawing primitives. A path element can only
carry one stroke width, so each point-to-point span becomes its own
width-carrying segment; emitters draw one element per segment.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Iterator, Mapping, Optional, Union

from .parser import Document, Pen, PenColor, Stroke
from .constants import PAGE_HEX
from .pens import effective_width, stroke_style


logger = logging.getLogger(__name__)


# =============================================================================
# Drawing Primitives
# =============================================================================

@dataclass(frozen=True)
class MoveTo:
    x: float
    y: float


@dataclass(frozen=True)
class LineTo:
    x: float
    y: float
    width: float


@dataclass(frozen=True)
class CurveTo:
    """Quadratic bezier to (x, y) with control point (cx, cy)."""
    cx: float
    cy: float
    x: float
    y: float
    width: float


@dataclass(frozen=True)
class Dot:
    x: float
    y: float
    radius: float


Segment = Union[LineTo, CurveTo]
Primitive = Union[MoveTo, LineTo, CurveTo, Dot]


@dataclass(frozen=True)
class RenderedStroke:
    """Primitives and style for one source stroke."""
    pen: Pen | int
    color: str
    opacity: float
    linecap: str
    layer: int
    index: int
    primitives: tuple[Primitive, ...] = ()

    @property
    def is_dot(self) -> bool:
        return len(self.primitives) == 1 and isinstance(self.primitives[0], Dot)

    def segments(self) -> Iterator[tuple[tuple[float, float], Segment]]:
        """Yield (start point, segment) for every width-carrying segment."""
        current = None
        for prim in self.primitives:
            if isinstance(prim, MoveTo):
                current = (prim.x, prim.y)
            elif isinstance(prim, (LineTo, CurveTo)):
                yield current, prim
                current = (prim.x, prim.y)


# =============================================================================
# Coordinate Transform
# =============================================================================

@dataclass(frozen=True)
class Transform:
    scale: float = 1.0
    x_offset: float = 0.0
    y_offset: float = 0.0

    def apply(self, x: float, y: float) -> tuple[float, float]:
        return x * self.scale + self.x_offset, y * self.scale + self.y_offset


IDENTITY = Transform()


def fit_transform(source_width: float, source_height: float,
                  target_width: float, target_height: float,
                  x_offset: float = 0.0) -> Transform:
    """
    Map device space into a target canvas.

    Uses one uniform scale so strokes keep their aspect ratio, and centers
    the scaled page. x_offset shifts in source units before scaling, which
    is how strokes are placed on pages wider than the tablet.
    """
    if min(source_width, source_height, target_width, target_height) <= 0:
        raise ValueError(
            f"Canvas sizes must be positive, got {source_width}x{source_height} "
            f"-> {target_width}x{target_height}"
        )
    scale = min(target_width / source_width, target_height / source_height)
    dx = (target_width - source_width * scale) / 2
    dy = (target_height - source_height * scale) / 2
    return Transform(scale=scale, x_offset=dx + x_offset * scale, y_offset=dy)


# =============================================================================
# Stroke Rendering
# =============================================================================

def _finite(value: float) -> float:
    return value if math.isfinite(value) else 0.0


def _midpoint(a: tuple[float, float], b: tuple[float, float]) -> tuple[float, float]:
    return (a[0] + b[0]) / 2, (a[1] + b[1]) / 2


def stroke_primitives(stroke: Stroke, transform: Transform = IDENTITY,
                      smooth: bool = False) -> tuple[Primitive, ...]:
    """
    Build the primitive sequence for a stroke.

    Zero points give nothing, one point gives a Dot, otherwise a MoveTo
    followed by exactly len(points) - 1 segments. With smooth=True the
    segments are quadratic curves through span midpoints.
    """
    points = stroke.points
    if not points:
        return ()

    # Non-finite coordinates collapse onto the origin
    coords = [transform.apply(_finite(p.x), _finite(p.y)) for p in points]
    widths = [
        effective_width(stroke.pen, stroke.base_width, p) * transform.scale
        for p in points
    ]

    if len(points) == 1:
        x, y = coords[0]
        return (Dot(x, y, widths[0] / 2),)

    prims: list[Primitive] = [MoveTo(*coords[0])]

    if not smooth or len(points) == 2:
        for (x, y), width in zip(coords[1:], widths[1:]):
            prims.append(LineTo(x, y, width))
        return tuple(prims)

    # First segment: line to midpoint
    mid = _midpoint(coords[0], coords[1])
    prims.append(LineTo(mid[0], mid[1], widths[1]))
    for i in range(2, len(coords)):
        ctrl = coords[i - 1]
        if i == len(coords) - 1:
            # Last segment: curve to end point
            end = coords[i]
        else:
            end = _midpoint(coords[i - 1], coords[i])
        prims.append(CurveTo(ctrl[0], ctrl[1], end[0], end[1], widths[i]))
    return tuple(prims)


def render_stroke(stroke: Stroke, layer: int = 0, index: int = 0,
                  transform: Transform = IDENTITY, smooth: bool = False,
                  palette: Optional[Mapping[PenColor, str]] = None,
                  page_color: Optional[str] = PAGE_HEX) -> RenderedStroke:
    """Render a single stroke with its resolved style."""
    style = stroke_style(stroke, palette, page_color)
    return RenderedStroke(
        pen=stroke.pen,
        color=style.color,
        opacity=style.opacity,
        linecap=style.linecap,
        layer=layer,
        index=index,
        primitives=stroke_primitives(stroke, transform, smooth),
    )


def render_document(doc: Document, transform: Transform = IDENTITY,
                    smooth: bool = False,
                    palette: Optional[Mapping[PenColor, str]] = None,
                    log: Optional[logging.Logger] = None,
                    page_color: Optional[str] = PAGE_HEX) -> list[RenderedStroke]:
    """
    Render every stroke in (layer, stroke) order.

    Empty strokes are kept with no primitives so positions never shift.
    """
    log = log or logger
    rendered = []
    for layer_index, layer in enumerate(doc.layers):
        for stroke_index, stroke in enumerate(layer.strokes):
            result = render_stroke(stroke, layer_index, stroke_index,
                                   transform, smooth, palette, page_color)
            if not result.primitives:
                log.debug("Layer %d stroke %d has no points", layer_index, stroke_index)
            rendered.append(result)
    log.info("Rendered %d strokes from %d layers", len(rendered), len(doc.layers))
    return rendered
