"""
PDF Export for rendered strokes.

Draws strokes on a blank page sized like the tablet, or overlays them on a
page of an existing PDF.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterable, Optional

import fitz  # PyMuPDF

from .parser import Document
from .renderer import CurveTo, RenderedStroke, fit_transform, render_document
from .config import RenderConfig
from .constants import (
    PDF_PAGE_HEIGHT,
    PDF_PAGE_WIDTH,
    REMARKABLE_HEIGHT,
    REMARKABLE_WIDTH,
)


logger = logging.getLogger(__name__)

LINE_CAPS = {"butt": 0, "round": 1, "square": 2}


def hex_to_rgb(color: str) -> tuple[float, float, float]:
    """Get RGB color (0-1 range) from #rrggbb."""
    value = color.lstrip("#")
    r, g, b = (int(value[i:i + 2], 16) for i in (0, 2, 4))
    return (r / 255, g / 255, b / 255)


def quad_to_cubic(start, ctrl, end):
    """Control points of the cubic bezier equal to a quadratic one."""
    c1 = (start[0] + 2 / 3 * (ctrl[0] - start[0]), start[1] + 2 / 3 * (ctrl[1] - start[1]))
    c2 = (end[0] + 2 / 3 * (ctrl[0] - end[0]), end[1] + 2 / 3 * (ctrl[1] - end[1]))
    return c1, c2


def draw_stroke_on_page(shape: fitz.Shape, stroke: RenderedStroke) -> int:
    """Draw a stroke using Shape for batched rendering. Returns items drawn."""
    if not stroke.primitives or stroke.opacity <= 0:
        return 0

    color = hex_to_rgb(stroke.color)

    if stroke.is_dot:
        dot = stroke.primitives[0]
        shape.draw_circle(fitz.Point(dot.x, dot.y), dot.radius)
        shape.finish(color=None, fill=color, fill_opacity=stroke.opacity, width=0)
        return 1

    drawn = 0
    cap = LINE_CAPS.get(stroke.linecap, 1)
    # Each segment is finished on its own so it keeps its width
    for start, segment in stroke.segments():
        p0 = fitz.Point(*start)
        end = fitz.Point(segment.x, segment.y)
        if isinstance(segment, CurveTo):
            c1, c2 = quad_to_cubic(start, (segment.cx, segment.cy), (segment.x, segment.y))
            shape.draw_bezier(p0, fitz.Point(*c1), fitz.Point(*c2), end)
        else:
            shape.draw_line(p0, end)
        shape.finish(color=color, width=segment.width, lineCap=cap, lineJoin=1,
                     stroke_opacity=stroke.opacity, closePath=False)
        drawn += 1
    return drawn


def open_background(path: Path) -> fitz.Document:
    """Open a background PDF, raising ValueError if it cannot be read."""
    try:
        return fitz.open(path, filetype="pdf")
    except RuntimeError as e:
        # PyMuPDF reports unreadable files as FileDataError, a RuntimeError
        raise ValueError(f"Cannot open background PDF {path}: {e}") from e


def render_pdf(
    strokes: Iterable[RenderedStroke],
    output_path: Path,
    width: float = PDF_PAGE_WIDTH,
    height: float = PDF_PAGE_HEIGHT,
    background: Optional[Path] = None,
    page: int = 0,
) -> int:
    """
    Write rendered strokes to a PDF.

    Args:
        strokes: Rendered strokes, already in page coordinates
        output_path: Output PDF path
        width: Page width in points (ignored with a background)
        height: Page height in points (ignored with a background)
        background: PDF to draw on; its other pages are kept
        page: Page index of the background to draw on

    Returns:
        Number of segments and dots drawn
    """
    if background is not None:
        pdf = open_background(background)
        if not 0 <= page < len(pdf):
            pdf.close()
            raise ValueError(f"{background} has no page {page}")
        target = pdf[page]
    else:
        pdf = fitz.open()
        target = pdf.new_page(width=width, height=height)

    try:
        shape = target.new_shape()
        drawn = sum(draw_stroke_on_page(shape, stroke) for stroke in strokes)
        shape.commit()  # Single commit per page
        Path(output_path).parent.mkdir(parents=True, exist_ok=True)
        pdf.ez_save(output_path)
    finally:
        pdf.close()

    logger.info("Wrote %d items to %s", drawn, output_path)
    return drawn


def page_size(background: Optional[Path], page: int = 0) -> tuple[float, float]:
    """Size of the page strokes will be drawn on."""
    if background is None:
        return PDF_PAGE_WIDTH, PDF_PAGE_HEIGHT
    with open_background(background) as pdf:
        if not 0 <= page < len(pdf):
            raise ValueError(f"{background} has no page {page}")
        rect = pdf[page].rect
        return rect.width, rect.height


def export_pdf(doc: Document, output_path: Path, config: Optional[RenderConfig] = None,
               background: Optional[Path] = None) -> int:
    """Render a document onto a PDF page."""
    config = config or RenderConfig()
    width, height = page_size(background, config.page)
    transform = fit_transform(REMARKABLE_WIDTH, REMARKABLE_HEIGHT, width, height,
                              config.x_offset)
    strokes = render_document(doc, transform, config.smooth, config.palette)
    return render_pdf(strokes, output_path, width, height, background, config.page)
