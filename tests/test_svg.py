"""Tests for SVG output."""

import io
import xml.etree.ElementTree as ET

from relineate.config import RenderConfig
from relineate.parser import Pen
from relineate.renderer import CurveTo, LineTo, render_document
from relineate.svg import render_svg, render_to_file, segment_path

NS = {"svg": "http://www.w3.org/2000/svg"}


def to_tree(strokes, **kwargs):
    out = io.StringIO()
    render_svg(strokes, out, **kwargs)
    text = out.getvalue()
    assert text.startswith("<?xml")
    return ET.fromstring(text.split("\n", 1)[1])


def test_root_attributes(sample_doc):
    root = to_tree(render_document(sample_doc), width=100, height=200)
    assert root.get("viewBox") == "0 0 100.00 200.00"
    assert root.get("width") == "100.00"
    assert root.get("height") == "200.00"


def test_one_path_per_segment(sample_doc):
    root = to_tree(render_document(sample_doc))
    strokes = root.findall(".//svg:g[@class='stroke']", NS)
    # fineliner, dot, highlighter, unknown pen; the empty marker stroke is skipped
    assert len(strokes) == 4
    assert len(strokes[0].findall("svg:path", NS)) == 2
    assert strokes[1].find("svg:circle", NS) is not None
    assert len(strokes[3].findall("svg:path", NS)) == 1


def test_layers_grouped_in_order(sample_doc):
    root = to_tree(render_document(sample_doc))
    ids = [g.get("id") for g in root.findall("svg:g", NS)]
    assert ids == ["layer-1", "layer-2"]


def test_segment_widths_written(stroke, document):
    doc = document([stroke([(0, 0), (1, 0)], pen=Pen.MECHANICAL_PENCIL, base_width=3.0)])
    root = to_tree(render_document(doc))
    path = root.find(".//svg:path", NS)
    assert path.get("stroke-width") == "9.00"
    assert path.get("d") == "M 0.00 0.00 L 1.00 0.00"
    assert path.get("fill") == "none"


def test_highlighter_opacity(sample_doc):
    root = to_tree(render_document(sample_doc))
    highlighted = [g for g in root.iter("{http://www.w3.org/2000/svg}g") if g.get("opacity")]
    assert len(highlighted) == 1
    assert highlighted[0].get("opacity") == "0.40"
    assert highlighted[0].find("svg:path", NS).get("stroke-linecap") == "square"


def test_invisible_strokes_skipped(stroke, document):
    doc = document([stroke([(0, 0), (5, 5)], pen=Pen.ERASER_AREA)])
    root = to_tree(render_document(doc))
    assert root.findall(".//svg:path", NS) == []


def test_background(sample_doc):
    root = to_tree(render_document(sample_doc), background="#eeeeee")
    assert root.find("svg:rect", NS).get("fill") == "#eeeeee"
    root = to_tree(render_document(sample_doc), background=None)
    assert root.find("svg:rect", NS) is None


def test_segment_path_curve():
    d = segment_path((0, 0), CurveTo(1, 2, 3, 4, 1.0))
    assert d == "M 0.00 0.00 Q 1.00 2.00 3.00 4.00"
    assert segment_path((1, 1), LineTo(2, 2, 1.0)) == "M 1.00 1.00 L 2.00 2.00"


def test_render_to_file(tmp_path, sample_doc):
    path = tmp_path / "out.svg"
    render_to_file(sample_doc, path, RenderConfig(width=702, height=936, smooth=True))
    root = ET.parse(path).getroot()
    assert root.get("viewBox") == "0 0 702.00 936.00"
    assert "Q" in "".join(p.get("d") for p in root.iter("{http://www.w3.org/2000/svg}path"))


def test_render_to_stdout(capsys, sample_doc):
    render_to_file(sample_doc, "-")
    out = capsys.readouterr().out
    assert out.startswith("<?xml")
    assert "<svg" in out


def test_eraser_matches_background(tmp_path, stroke, document):
    doc = document([stroke([(0, 0), (5, 5)]), stroke([(0, 0), (5, 5)], pen=Pen.ERASER)])
    path = tmp_path / "out.svg"
    render_to_file(doc, path, RenderConfig(background="#eeeeee"))
    colors = [p.get("stroke") for p in ET.parse(path).getroot().iter(f"{{{NS['svg']}}}path")]
    assert colors == ["#000000", "#eeeeee"]


def test_eraser_skipped_without_background(tmp_path, stroke, document):
    doc = document([stroke([(0, 0), (5, 5)]), stroke([(0, 0), (5, 5)], pen=Pen.ERASER)])
    path = tmp_path / "out.svg"
    render_to_file(doc, path, RenderConfig(background=None))
    colors = [p.get("stroke") for p in ET.parse(path).getroot().iter(f"{{{NS['svg']}}}path")]
    assert colors == ["#000000"]


def test_render_to_file_creates_directories(tmp_path, sample_doc):
    path = tmp_path / "a" / "b" / "out.svg"
    render_to_file(sample_doc, path)
    assert ET.parse(path).getroot().get("viewBox") == "0 0 1404.00 1872.00"
