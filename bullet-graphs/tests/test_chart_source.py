#!/usr/bin/env python3
# /// script
# requires-python = ">=3.10"
# dependencies = ["pytest"]
# ///
"""
Tests for reading bullet graph definitions from JSON and XML.

Run: pytest bullet-graphs/tests/test_chart_source.py -v
"""

from __future__ import annotations

import json

import pytest

from chart_source import detect_format, load_definitions

_XML_DOC = """<?xml version="1.0"?>
<bulletgraph top="60" left="200" right="40" title="Quarterly results">
  <bdata title="Revenue" subtitle="USD(1000)" scale="0,300,50" qmeasure="150,225" cmeasure="250" measure="275"/>
  <bdata title="Profit" subtitle="%" scale="0,30,5" qmeasure="20,25" cmeasure="27" measure="22.5"/>
  <note>Source: finance</note>
  <note>  Unaudited  </note>
</bulletgraph>
"""

_JSON_DOC = {
    "title": "Quarterly results",
    "left": 200,
    "options": {"use_circle_marker": True, "left": 150},
    "charts": [
        {
            "title": "Revenue",
            "subtitle": "USD(1000)",
            "scale": "0,300,50",
            "qmeasure": "150,225",
            "cmeasure": 250,
            "measure": 275,
        },
    ],
    "notes": ["Source: finance"],
}


def test_detect_format() -> None:
    assert detect_format("  \n<bulletgraph/>") == "xml"
    assert detect_format('{"charts": []}') == "json"


def test_xml_document() -> None:
    """Root attributes become options, bdata become charts, notes keep order."""
    doc = load_definitions(_XML_DOC)
    assert doc["options"] == {"top": "60", "left": "200", "right": "40", "title": "Quarterly results"}
    assert [c["title"] for c in doc["charts"]] == ["Revenue", "Profit"]
    assert doc["charts"][0] == {
        "title": "Revenue",
        "subtitle": "USD(1000)",
        "scale": "0,300,50",
        "qmeasure": "150,225",
        "cmeasure": "250",
        "measure": "275",
    }
    assert doc["notes"] == ["Source: finance", "Unaudited"]


def test_xml_unknown_elements_ignored() -> None:
    doc = load_definitions('<bulletgraph><legend/><bdata title="A"/></bulletgraph>')
    assert doc["charts"] == [{"title": "A"}]
    assert doc["notes"] == []


def test_xml_wrong_root() -> None:
    with pytest.raises(ValueError, match="root must be <bulletgraph>"):
        load_definitions("<charts/>")


def test_xml_malformed() -> None:
    with pytest.raises(ValueError, match="invalid XML"):
        load_definitions("<bulletgraph><bdata></bulletgraph>")


def test_json_document() -> None:
    """Explicit options win over root-level shorthand keys."""
    doc = load_definitions(json.dumps(_JSON_DOC))
    assert doc["options"] == {"use_circle_marker": True, "left": 150, "title": "Quarterly results"}
    assert doc["charts"] == _JSON_DOC["charts"]
    assert doc["notes"] == ["Source: finance"]


def test_json_list_shorthand() -> None:
    """A bare array is a list of charts."""
    doc = load_definitions('[{"title": "A", "scale": "0,10,1"}]')
    assert doc == {"charts": [{"title": "A", "scale": "0,10,1"}], "options": {}, "notes": []}


def test_json_list_valued_scale_joined() -> None:
    doc = load_definitions('{"charts": [{"scale": [0, 60, 2], "qmeasure": [27, 29.5]}]}')
    assert doc["charts"][0] == {"scale": "0,60,2", "qmeasure": "27,29.5"}


def test_json_unknown_chart_fields_dropped() -> None:
    doc = load_definitions('{"charts": [{"title": "A", "color": "red"}]}')
    assert doc["charts"] == [{"title": "A"}]


@pytest.mark.parametrize(
    ("text", "message"),
    [
        ("{not json", "invalid JSON"),
        ('"just a string"', "must be an object"),
        ('{"rows": []}', "'charts' key"),
        ('{"charts": {}}', "'charts' must be an array"),
        ('{"charts": [1]}', "chart 0 must be an object"),
        ('{"charts": [], "options": []}', "'options' must be an object"),
        ('{"charts": [], "notes": "x"}', "'notes' must be an array"),
    ],
)
def test_json_structural_errors(text: str, message: str) -> None:
    with pytest.raises(ValueError, match=message):
        load_definitions(text)


def test_forced_format() -> None:
    """An explicit format skips detection."""
    with pytest.raises(ValueError, match="invalid JSON"):
        load_definitions("<bulletgraph/>", "json")
    with pytest.raises(ValueError, match="invalid XML"):
        load_definitions('{"charts": []}', "xml")


def test_unknown_format() -> None:
    with pytest.raises(ValueError, match="unknown format"):
        load_definitions("{}", "yaml")


def test_empty_input() -> None:
    with pytest.raises(ValueError, match="empty input"):
        load_definitions("   \n")
