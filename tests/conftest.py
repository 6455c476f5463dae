"""Shared fixtures: small documents built in memory and encoded to v5 bytes."""

import pytest

from relineate.parser import Document, Layer, Pen, PenColor, Point, Stroke
from relineate.writer import encode


def make_point(x, y, pressure=0.5, width=2.0, speed=0.0, direction=0.0):
    return Point(x=x, y=y, speed=speed, direction=direction, width=width, pressure=pressure)


def make_stroke(coords, pen=Pen.FINELINER, color=PenColor.BLACK, base_width=2.0, **point_kwargs):
    points = tuple(make_point(x, y, **point_kwargs) for x, y in coords)
    return Stroke(pen=pen, color=color, base_width=base_width, points=points)


def make_document(*layers):
    return Document(layers=tuple(
        Layer(strokes=tuple(strokes), name=f"Layer {i + 1}")
        for i, strokes in enumerate(layers)
    ))


@pytest.fixture
def point():
    return make_point


@pytest.fixture
def stroke():
    return make_stroke


@pytest.fixture
def document():
    return make_document


@pytest.fixture
def sample_doc():
    """Two layers with a mix of pens, a dot and an empty stroke."""
    return make_document(
        [
            make_stroke([(0, 0), (10, 0), (10, 10)]),
            make_stroke([(100, 100)], pen=Pen.BALLPOINT, color=PenColor.GRAY),
        ],
        [
            make_stroke([], pen=Pen.MARKER),
            make_stroke([(5, 5), (6, 7)], pen=Pen.HIGHLIGHTER, width=20.0),
            make_stroke([(1, 2), (3, 4)], pen=99, color=42),
        ],
    )


@pytest.fixture
def sample_bytes(sample_doc):
    return encode(sample_doc)


@pytest.fixture
def rm_file(tmp_path, sample_bytes):
    path = tmp_path / "page.rm"
    path.write_bytes(sample_bytes)
    return path
