"""
SVG output for rendered strokes.

Each stroke becomes a group holding one <path> per segment, so every
segment keeps its own stroke-width. Single-point strokes become a <circle>.
"""

from __future__ import annotations

import sys
import xml.etree.ElementTree as ET
from pathlib import Path
from typing import Iterable, Optional, TextIO

from .parser import Document
from .renderer import CurveTo, Dot, RenderedStroke, fit_transform, render_document
from .config import RenderConfig
from .constants import REMARKABLE_HEIGHT, REMARKABLE_WIDTH


def _fmt(value: float) -> str:
    return f"{value:.2f}"


def segment_path(start: tuple[float, float], segment) -> str:
    """SVG path data for one segment."""
    path = f"M {_fmt(start[0])} {_fmt(start[1])}"
    if isinstance(segment, CurveTo):
        return path + (f" Q {_fmt(segment.cx)} {_fmt(segment.cy)}"
                       f" {_fmt(segment.x)} {_fmt(segment.y)}")
    return path + f" L {_fmt(segment.x)} {_fmt(segment.y)}"


def add_stroke(parent: ET.Element, stroke: RenderedStroke) -> Optional[ET.Element]:
    """Append the elements for one stroke, or nothing if it is invisible."""
    if not stroke.primitives or stroke.opacity <= 0:
        return None

    g = ET.SubElement(parent, "g")
    g.set("class", "stroke")
    if stroke.opacity < 1.0:
        g.set("opacity", f"{stroke.opacity:.2f}")

    if stroke.is_dot:
        dot: Dot = stroke.primitives[0]
        circle = ET.SubElement(g, "circle")
        circle.set("cx", _fmt(dot.x))
        circle.set("cy", _fmt(dot.y))
        circle.set("r", _fmt(dot.radius))
        circle.set("fill", stroke.color)
        return g

    for start, segment in stroke.segments():
        path = ET.SubElement(g, "path")
        path.set("d", segment_path(start, segment))
        path.set("stroke", stroke.color)
        path.set("stroke-width", _fmt(segment.width))
        path.set("stroke-linecap", stroke.linecap)
        path.set("stroke-linejoin", "round")
        path.set("fill", "none")
    return g


def render_svg(strokes: Iterable[RenderedStroke], output: TextIO,
               width: float = REMARKABLE_WIDTH, height: float = REMARKABLE_HEIGHT,
               background: Optional[str] = "#ffffff") -> None:
    """
    Write rendered strokes as an SVG document.

    Args:
        strokes: Rendered strokes in drawing order
        output: File-like object to write SVG to
        width: SVG width and viewBox width
        height: SVG height and viewBox height
        background: Page fill color, or None for transparent
    """
    svg = ET.Element("svg")
    svg.set("xmlns", "http://www.w3.org/2000/svg")
    svg.set("viewBox", f"0 0 {_fmt(width)} {_fmt(height)}")
    svg.set("width", _fmt(width))
    svg.set("height", _fmt(height))

    if background:
        bg = ET.SubElement(svg, "rect")
        bg.set("width", "100%")
        bg.set("height", "100%")
        bg.set("fill", background)

    # Layer groups in z-order
    layers: dict[int, ET.Element] = {}
    for stroke in strokes:
        if stroke.layer not in layers:
            g = ET.SubElement(svg, "g")
            g.set("id", f"layer-{stroke.layer + 1}")
            layers[stroke.layer] = g
        add_stroke(layers[stroke.layer], stroke)

    tree = ET.ElementTree(svg)
    ET.indent(tree, space="  ")
    # Declared by hand: with encoding="unicode" ElementTree declares the locale encoding
    output.write('<?xml version="1.0" encoding="UTF-8"?>\n')
    tree.write(output, encoding="unicode")
    output.write("\n")


def render_to_file(doc: Document, path: Path, config: Optional[RenderConfig] = None) -> None:
    """Render document to an SVG file, or stdout when path is "-"."""
    config = config or RenderConfig()
    transform = fit_transform(REMARKABLE_WIDTH, REMARKABLE_HEIGHT,
                              config.width, config.height, config.x_offset)
    strokes = render_document(doc, transform, config.smooth, config.palette,
                              page_color=config.background)

    if str(path) == "-":
        render_svg(strokes, sys.stdout, config.width, config.height, config.background)
        return
    Path(path).parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        render_svg(strokes, f, config.width, config.height, config.background)
