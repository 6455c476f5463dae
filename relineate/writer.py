"""
Encoder for reMarkable v5 .rm files.

Writes a Document back to the exact byte layout `parser.decode` reads.
Unknown pen and color values are written back as their raw integers.
"""

from __future__ import annotations

import struct
from pathlib import Path

from .parser import HEADER_V5, Document, Point, Stroke


def encode_point(point: Point) -> bytes:
    return struct.pack(
        "<ffffff",
        point.x, point.y, point.speed, point.direction, point.width, point.pressure,
    )


def encode_stroke(stroke: Stroke) -> bytes:
    header = struct.pack(
        "<iiIffi",
        int(stroke.pen),
        int(stroke.color),
        stroke.flags,
        stroke.base_width,
        stroke.reserved,
        len(stroke.points),
    )
    return header + b"".join(encode_point(p) for p in stroke.points)


def encode(doc: Document) -> bytes:
    """Serialize a Document to v5 bytes."""
    parts = [HEADER_V5, struct.pack("<i", len(doc.layers))]
    for layer in doc.layers:
        parts.append(struct.pack("<i", len(layer.strokes)))
        parts.extend(encode_stroke(stroke) for stroke in layer.strokes)
    return b"".join(parts)


def write_file(doc: Document, path: Path) -> None:
    """Write document to a .rm file."""
    with open(path, "wb") as f:
        f.write(encode(doc))
