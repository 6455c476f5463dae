"""
reMarkable v5 .rm file parser

The v5 "lines" format is a flat, little-endian stream: a fixed ASCII header
followed by counted layers, strokes and points. There are no tags or block
lengths, so every count has to be trusted and walked in order.

Format Overview:
- Header: 43 bytes "reMarkable .lines file, version=5          "
- Layer count (i32), then per layer a stroke count (i32)
- Stroke: pen (i32), color (i32), flags (u32), base width (f32),
  reserved (f32), point count (i32)
- Points: 24 bytes each (x, y, speed, direction, width, pressure as f32)
"""

from __future__ import annotations

import logging
import re
import struct
from dataclasses import dataclass, field
from enum import IntEnum
from pathlib import Path
from typing import Iterator, Optional


logger = logging.getLogger(__name__)


# =============================================================================
# Constants
# =============================================================================

HEADER_V5 = b"reMarkable .lines file, version=5          "
HEADER_PATTERN = re.compile(rb"^reMarkable \.lines file, version=(\d+)")

# Minimum on-disk size of each counted record
LAYER_SIZE = 4
STROKE_SIZE = 24
POINT_SIZE = 24

# Largest byte span a count may describe
MAX_SECTION_BYTES = 0xFFFFFFFF


class Pen(IntEnum):
    """Pen/tool types."""
    PAINTBRUSH = 0
    PENCIL = 1
    BALLPOINT = 2
    MARKER = 3
    FINELINER = 4
    HIGHLIGHTER = 5
    ERASER = 6
    MECHANICAL_PENCIL = 7
    ERASER_AREA = 8
    ERASE_ALL = 9
    SELECTION_BRUSH = 10
    SELECTION_BRUSH_2 = 11
    PAINTBRUSH_2 = 12
    MECHANICAL_PENCIL_2 = 13
    PENCIL_2 = 14
    BALLPOINT_2 = 15
    MARKER_2 = 16
    FINELINER_2 = 17
    HIGHLIGHTER_2 = 18
    CALIGRAPHY = 21


class PenColor(IntEnum):
    """Pen colors."""
    BLACK = 0
    GRAY = 1
    WHITE = 2


# =============================================================================
# Errors
# =============================================================================

class FormatError(ValueError):
    """Base class for all decode failures. Always fatal for the whole file."""

    kind = "FormatError"

    def __init__(self, message: str, offset: Optional[int] = None):
        super().__init__(message)
        self.offset = offset


class VersionMismatch(FormatError):
    """Header does not identify a v5 lines stream."""
    kind = "VersionMismatch"


class Truncated(FormatError):
    """Buffer ended before a declared section was complete."""
    kind = "Truncated"


class Malformed(FormatError):
    """A declared count is internally inconsistent."""
    kind = "Malformed"


# =============================================================================
# Data Classes
# =============================================================================

@dataclass(frozen=True)
class Point:
    """A single pen sample in a stroke."""
    x: float
    y: float
    speed: float
    direction: float
    width: float
    pressure: float


@dataclass(frozen=True)
class Stroke:
    """A stroke (line) with pen settings and points."""
    pen: Pen | int  # Unknown pen types kept as int
    color: PenColor | int  # Unknown colors kept as int
    base_width: float
    points: tuple[Point, ...] = ()
    flags: int = 0
    reserved: float = 0.0


@dataclass(frozen=True)
class Layer:
    """A layer containing strokes, in drawing order."""
    strokes: tuple[Stroke, ...] = ()
    name: str = ""


@dataclass(frozen=True)
class Document:
    """Parsed .rm document."""
    layers: tuple[Layer, ...] = field(default_factory=tuple)
    version: int = 5

    def all_strokes(self) -> Iterator[Stroke]:
        """Iterate over all strokes in all layers."""
        for layer in self.layers:
            yield from layer.strokes

    @property
    def stroke_count(self) -> int:
        return sum(len(layer.strokes) for layer in self.layers)

    @property
    def point_count(self) -> int:
        return sum(len(stroke.points) for stroke in self.all_strokes())


def to_pen(value: int) -> Pen | int:
    try:
        return Pen(value)
    except ValueError:
        return value


def to_color(value: int) -> PenColor | int:
    try:
        return PenColor(value)
    except ValueError:
        return value


# =============================================================================
# Binary Buffer Reader
# =============================================================================

class BinaryReader:
    """Cursor over an immutable byte buffer."""

    def __init__(self, data: bytes):
        self.data = memoryview(data)
        self.pos = 0

    def tell(self) -> int:
        return self.pos

    def remaining(self) -> int:
        return len(self.data) - self.pos

    def _unpack(self, fmt: str, size: int, what: str):
        if self.remaining() < size:
            raise Truncated(
                f"Expected {size} bytes for {what} at offset {self.pos}, "
                f"got {self.remaining()}",
                offset=self.pos,
            )
        value = struct.unpack_from(fmt, self.data, self.pos)[0]
        self.pos += size
        return value

    def read_bytes(self, n: int, what: str = "bytes") -> bytes:
        """Read exactly n bytes, raise Truncated if not enough."""
        if self.remaining() < n:
            raise Truncated(
                f"Expected {n} bytes for {what} at offset {self.pos}, "
                f"got {self.remaining()}",
                offset=self.pos,
            )
        result = bytes(self.data[self.pos:self.pos + n])
        self.pos += n
        return result

    def read_int32(self, what: str = "int32") -> int:
        return self._unpack("<i", 4, what)

    def read_uint32(self, what: str = "uint32") -> int:
        return self._unpack("<I", 4, what)

    def read_float32(self, what: str = "float32") -> float:
        return self._unpack("<f", 4, what)

    def read_count(self, what: str, record_size: int) -> int:
        """Read a signed count and reject values no buffer could satisfy."""
        pos = self.pos
        count = self.read_int32(f"{what} count")
        if count < 0:
            raise Malformed(f"Negative {what} count {count} at offset {pos}", offset=pos)
        if count * record_size > MAX_SECTION_BYTES:
            raise Malformed(
                f"{what.capitalize()} count {count} at offset {pos} exceeds "
                f"the 32-bit size limit",
                offset=pos,
            )
        return count


# =============================================================================
# Document Parser
# =============================================================================

def read_header(reader: BinaryReader) -> None:
    """Read and validate the file header."""
    if reader.remaining() < len(HEADER_V5):
        raise Truncated(
            f"Buffer of {reader.remaining()} bytes is shorter than the "
            f"{len(HEADER_V5)}-byte header",
            offset=0,
        )
    header = reader.read_bytes(len(HEADER_V5), "header")
    if header == HEADER_V5:
        return
    match = HEADER_PATTERN.match(header)
    if match:
        version = int(match.group(1))
        raise VersionMismatch(f"Unsupported lines format version {version}, expected 5", offset=0)
    raise VersionMismatch(f"Invalid header: {header!r}", offset=0)


def read_point(reader: BinaryReader) -> Point:
    """Read a single point (24 bytes)."""
    x = reader.read_float32("point x")
    y = reader.read_float32("point y")
    speed = reader.read_float32("point speed")
    direction = reader.read_float32("point direction")
    width = reader.read_float32("point width")
    pressure = reader.read_float32("point pressure")
    return Point(x, y, speed, direction, width, pressure)


def read_stroke(reader: BinaryReader) -> Stroke:
    """Read a stroke header followed by its points."""
    pen_id = reader.read_int32("pen")
    color_id = reader.read_int32("color")
    flags = reader.read_uint32("stroke flags")
    base_width = reader.read_float32("base width")
    reserved = reader.read_float32("reserved")
    num_points = reader.read_count("point", POINT_SIZE)

    points = tuple(read_point(reader) for _ in range(num_points))

    return Stroke(
        pen=to_pen(pen_id),
        color=to_color(color_id),
        base_width=base_width,
        points=points,
        flags=flags,
        reserved=reserved,
    )


def read_layer(reader: BinaryReader, index: int) -> Layer:
    num_strokes = reader.read_count("stroke", STROKE_SIZE)
    strokes = tuple(read_stroke(reader) for _ in range(num_strokes))
    return Layer(strokes=strokes, name=f"Layer {index + 1}")


def decode(data: bytes, log: Optional[logging.Logger] = None) -> Document:
    """
    Decode a v5 lines buffer into a Document.

    Raises VersionMismatch, Truncated or Malformed; nothing is returned
    for a buffer that fails anywhere.
    """
    log = log or logger
    reader = BinaryReader(data)
    read_header(reader)

    num_layers = reader.read_count("layer", LAYER_SIZE)
    log.debug("Decoding %d layers from %d bytes", num_layers, len(data))

    layers = []
    for index in range(num_layers):
        layer = read_layer(reader, index)
        log.debug("%s: %d strokes", layer.name, len(layer.strokes))
        layers.append(layer)

    if reader.remaining():
        log.debug("Ignoring %d trailing bytes at offset %d", reader.remaining(), reader.tell())

    for stroke in (s for layer in layers for s in layer.strokes):
        if not isinstance(stroke.pen, Pen):
            log.info("Unknown pen type %d", stroke.pen)
        if not isinstance(stroke.color, PenColor):
            log.info("Unknown pen color %d", stroke.color)

    return Document(layers=tuple(layers))


def parse_file(path: Path, log: Optional[logging.Logger] = None) -> Document:
    """Read and decode a .rm file."""
    with open(path, "rb") as f:
        data = f.read()
    return decode(data, log=log)


# =============================================================================
# CLI
# =============================================================================

def analyze_file(path: Path) -> None:
    """Analyze a .rm file and print summary."""
    path = Path(path)
    print(f"File: {path.name}")
    print(f"Size: {path.stat().st_size} bytes")
    print()

    doc = parse_file(path)

    print(f"Layers: {len(doc.layers)}")
    print(f"Strokes: {doc.stroke_count}")
    print(f"Points: {doc.point_count}")

    if doc.stroke_count > 0:
        print("\nPen types used:")
        pens = {stroke.pen for stroke in doc.all_strokes()}
        for pen in sorted(pens, key=int):
            name = pen.name if isinstance(pen, Pen) else f"Unknown({pen})"
            print(f"  - {name}")

        print("\nColors used:")
        colors = {stroke.color for stroke in doc.all_strokes()}
        for color in sorted(colors, key=int):
            name = color.name if isinstance(color, PenColor) else f"Unknown({color})"
            print(f"  - {name}")


if __name__ == "__main__":
    import sys

    if len(sys.argv) < 2:
        print("Usage: python -m relineate.parser <file.rm>")
        sys.exit(1)

    path = Path(sys.argv[1])
    if not path.exists():
        print(f"File not found: {path}")
        sys.exit(1)

    analyze_file(path)
