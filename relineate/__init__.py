"""
relineate

Convert reMarkable v5 .rm files to SVG.

Usage:
    from relineate import parse_file, render_to_file

    doc = parse_file("file.rm")
    render_to_file(doc, "output.svg")

CLI:
    relineate -i <input.rm> -o <output.svg>
"""

from .parser import (
    Document,
    Layer,
    Stroke,
    Point,
    Pen,
    PenColor,
    FormatError,
    VersionMismatch,
    Truncated,
    Malformed,
    decode,
    parse_file,
)
from .writer import (
    encode,
    write_file,
)
from .renderer import (
    MoveTo,
    LineTo,
    CurveTo,
    Dot,
    RenderedStroke,
    Transform,
    fit_transform,
    render_document,
    render_stroke,
)
from .pens import (
    effective_width,
    resolve_color,
)
from .config import (
    RenderConfig,
    load_config,
)
from .svg import (
    render_svg,
    render_to_file,
)

__all__ = [
    "Document",
    "Layer",
    "Stroke",
    "Point",
    "Pen",
    "PenColor",
    "FormatError",
    "VersionMismatch",
    "Truncated",
    "Malformed",
    "decode",
    "parse_file",
    "encode",
    "write_file",
    "MoveTo",
    "LineTo",
    "CurveTo",
    "Dot",
    "RenderedStroke",
    "Transform",
    "fit_transform",
    "render_document",
    "render_stroke",
    "effective_width",
    "resolve_color",
    "RenderConfig",
    "load_config",
    "render_svg",
    "render_to_file",
]

__version__ = "0.1.0"
