"""
Shared constants for the decoder, renderer and exporters.
"""

from .parser import Pen, PenColor

# reMarkable screen dimensions (device pixels)
REMARKABLE_WIDTH = 1404
REMARKABLE_HEIGHT = 1872

# DPI-based scaling
RM_DPI = 227
PDF_DPI = 72.0
RM_TO_PDF_SCALE = RM_DPI / PDF_DPI  # ~3.1528

# PDF page size matching the tablet screen (points)
PDF_PAGE_WIDTH = REMARKABLE_WIDTH / RM_TO_PDF_SCALE  # ~445
PDF_PAGE_HEIGHT = REMARKABLE_HEIGHT / RM_TO_PDF_SCALE  # ~594

# Color mapping - RGB tuples (0-255)
COLOR_MAP_RGB = {
    PenColor.BLACK: (0, 0, 0),
    PenColor.GRAY: (125, 125, 125),
    PenColor.WHITE: (255, 255, 255),
}

HIGHLIGHTER_RGB = (255, 235, 59)
PAGE_RGB = (255, 255, 255)
FALLBACK_RGB = (0, 0, 0)


def to_hex(rgb: tuple[int, int, int]) -> str:
    r, g, b = rgb
    return f"#{r:02x}{g:02x}{b:02x}"


# Color mapping - hex strings (for SVG)
COLOR_MAP_HEX = {color: to_hex(rgb) for color, rgb in COLOR_MAP_RGB.items()}

HIGHLIGHTER_HEX = to_hex(HIGHLIGHTER_RGB)
PAGE_HEX = to_hex(PAGE_RGB)
FALLBACK_HEX = to_hex(FALLBACK_RGB)

# Rendered width limits (device pixels)
MIN_WIDTH = 0.25
MAX_WIDTH = 120.0

# Pens that should render as semi-transparent
TRANSPARENT_PENS = {Pen.HIGHLIGHTER, Pen.HIGHLIGHTER_2}
HIGHLIGHTER_OPACITY = 0.4

# Erasers paint with the page color
ERASER_PENS = {Pen.ERASER}

# Area erasers and selections leave no visible ink
INVISIBLE_PENS = {
    Pen.ERASER_AREA,
    Pen.ERASE_ALL,
    Pen.SELECTION_BRUSH,
    Pen.SELECTION_BRUSH_2,
}
