#!/usr/bin/env python3
# /// script
# requires-python = ">=3.10"
# dependencies = ["pytest"]
# ///
"""
Tests for the SVG drawing surface.

Run: pytest bullet-graphs/tests/test_svg_canvas.py -v
"""

from __future__ import annotations

import xml.etree.ElementTree as ET

import pytest

from bulletgraph import render
from svg_canvas import SVGCanvas

_NS = "{http://www.w3.org/2000/svg}"


def _canvas() -> SVGCanvas:
    c = SVGCanvas(400, 200)
    c.start()
    return c


def test_document_root() -> None:
    """Empty document is well-formed with size and viewBox."""
    c = _canvas()
    c.end()
    root = ET.fromstring(c.to_string())
    assert root.tag == f"{_NS}svg"
    assert root.attrib["width"] == "400"
    assert root.attrib["height"] == "200"
    assert root.attrib["viewBox"] == "0 0 400 200"


def test_shapes_serialized() -> None:
    c = _canvas()
    c.rect(250, 66, 663.6666666, 16, "fill:darkgray")
    c.line(10, 20, 10.5, 40, "stroke-width:3;stroke:black")
    c.circle(5, 6, 8)
    c.text(1, 2, "Revenue (275)", "text-anchor:end")
    c.end()
    out = c.to_string()
    assert '<rect x="250" y="66" width="663.67" height="16" style="fill:darkgray"/>' in out
    assert '<line x1="10" y1="20" x2="10.5" y2="40" style="stroke-width:3;stroke:black"/>' in out
    assert '<circle cx="5" cy="6" r="8"/>' in out
    assert '<text x="1" y="2" style="text-anchor:end">Revenue (275)</text>' in out


def test_number_formatting_edge_cases() -> None:
    c = _canvas()
    c.rect(-0.001, float("nan"), float("inf"), 2.5)
    c.end()
    assert '<rect x="0" y="0" width="0" height="2.5"/>' in c.to_string()


def test_text_and_style_escaped() -> None:
    """Markup in content and style cannot break out of the element."""
    c = _canvas()
    c.set_title("<script>alert(1)</script>")
    c.text(0, 0, "A & B <tag>", 'fill:red" onload="alert(1)')
    c.end()
    out = c.to_string()
    assert "<script>" not in out
    assert "&lt;script&gt;" in out
    assert "A &amp; B &lt;tag&gt;" in out
    assert 'onload="alert(1)"' not in out
    ET.fromstring(out)


def test_groups_nest() -> None:
    c = _canvas()
    c.begin_group("font-size:75%")
    c.begin_group("fill:red")
    c.rect(0, 0, 1, 1)
    c.end_group()
    c.end_group()
    c.end()
    root = ET.fromstring(c.to_string())
    outer = root.find(f"{_NS}g")
    assert outer is not None
    assert outer.attrib["style"] == "font-size:75%"
    inner = outer.find(f"{_NS}g")
    assert inner is not None
    assert inner.find(f"{_NS}rect") is not None


def test_end_group_without_begin_raises() -> None:
    c = _canvas()
    with pytest.raises(ValueError, match="without matching begin_group"):
        c.end_group()


def test_end_with_open_group_raises() -> None:
    c = _canvas()
    c.begin_group("fill:red")
    with pytest.raises(ValueError, match="open group"):
        c.end()


def test_drawing_before_start_raises() -> None:
    c = SVGCanvas(10, 10)
    with pytest.raises(ValueError, match="outside start"):
        c.rect(0, 0, 1, 1)


def test_to_string_before_end_raises() -> None:
    c = _canvas()
    with pytest.raises(ValueError, match="call end"):
        c.to_string()


def test_calls_logged_in_order() -> None:
    c = _canvas()
    c.set_title("t")
    c.begin_group("fill:red")
    c.rect(1, 2, 3, 4)
    c.end_group()
    assert c.calls == [
        ("set_title", ("t",)),
        ("begin_group", ("fill:red",)),
        ("rect", (1, 2, 3, 4, None)),
        ("end_group", ()),
    ]


def test_rendered_document_is_well_formed() -> None:
    """A full bullet graph renders to parseable SVG with the expected shapes."""
    c = SVGCanvas(1024, 800)
    c.start()
    render(
        [
            {
                "title": "Revenue",
                "subtitle": "USD(1000)",
                "scale": "0,300,50",
                "qmeasure": "150,225",
                "cmeasure": 250,
                "measure": 275,
            }
        ],
        {"title": "Q3", "use_circle_marker": True},
        ["Source: finance"],
        c,
    )
    c.end()
    root = ET.fromstring(c.to_string())
    assert root.find(f"{_NS}title").text == "Q3"  # type: ignore[union-attr]
    assert len(root.findall(f".//{_NS}rect")) == 4
    assert len(root.findall(f".//{_NS}circle")) == 1
    texts = [t.text for t in root.iter(f"{_NS}text")]
    assert texts[:2] == ["Revenue (275)", "USD(1000)"]
    assert texts[-1] == "Source: finance"
