#!/usr/bin/env python3
# /// script
# requires-python = ">=3.10"
# dependencies = []
# ///
"""
Read bullet graph definitions from JSON or XML.

Both formats produce the same structure:
    {"charts": [...], "options": {...}, "notes": [...]}

JSON:
    {
      "title": "Quarterly results",
      "left": 250,
      "options": {"use_circle_marker": true},
      "charts": [
        {"title": "Revenue", "subtitle": "USD(1000)", "scale": "0,300,50",
         "qmeasure": "150,225", "cmeasure": 250, "measure": 275}
      ],
      "notes": ["Source: finance"]
    }

XML:
    <bulletgraph top="50" left="250" right="50" title="Quarterly results">
      <bdata title="Revenue" subtitle="USD(1000)" scale="0,300,50"
             qmeasure="150,225" cmeasure="250" measure="275"/>
      <note>Source: finance</note>
    </bulletgraph>

Only document structure is checked here. Field values (scale strings,
measures) are validated per row by bulletgraph.render.
"""

from __future__ import annotations

import json
import xml.etree.ElementTree as ET
from typing import Any

CHART_FIELDS = ("title", "subtitle", "scale", "qmeasure", "cmeasure", "measure")
# Root-level keys accepted alongside "options" in JSON and as XML root attributes.
ROOT_OPTION_KEYS = ("top", "left", "right", "title")

VALID_FORMATS = {"auto", "json", "xml"}


def detect_format(text: str) -> str:
    """XML when the document starts with '<', JSON otherwise."""
    return "xml" if text.lstrip().startswith("<") else "json"


def _chart_from_mapping(index: int, raw: Any) -> dict[str, Any]:
    if not isinstance(raw, dict):
        raise ValueError(f"chart {index} must be an object (got {type(raw).__name__})")
    chart: dict[str, Any] = {}
    for field in CHART_FIELDS:
        if field not in raw:
            continue
        value = raw[field]
        if field in ("scale", "qmeasure") and isinstance(value, list):
            value = ",".join(str(v) for v in value)
        chart[field] = value
    return chart


def _parse_json(text: str) -> dict[str, Any]:
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise ValueError(f"invalid JSON input: {e}") from e

    if isinstance(data, list):
        data = {"charts": data}
    if not isinstance(data, dict):
        raise ValueError("JSON must be an object with a 'charts' key")
    if "charts" not in data:
        raise ValueError("JSON must be an object with a 'charts' key")

    charts = data["charts"]
    if not isinstance(charts, list):
        raise ValueError("'charts' must be an array")

    options = data.get("options", {})
    if not isinstance(options, dict):
        raise ValueError("'options' must be an object")
    options = dict(options)
    for key in ROOT_OPTION_KEYS:
        if key in data and key not in options:
            options[key] = data[key]

    notes = data.get("notes", [])
    if not isinstance(notes, list):
        raise ValueError("'notes' must be an array")

    return {
        "charts": [_chart_from_mapping(i, c) for i, c in enumerate(charts)],
        "options": options,
        "notes": [str(n) for n in notes],
    }


def _parse_xml(text: str) -> dict[str, Any]:
    try:
        root = ET.fromstring(text)
    except ET.ParseError as e:
        raise ValueError(f"invalid XML input: {e}") from e

    if root.tag != "bulletgraph":
        raise ValueError(f"XML root must be <bulletgraph> (got <{root.tag}>)")

    options = {key: root.attrib[key] for key in ROOT_OPTION_KEYS if key in root.attrib}
    charts: list[dict[str, Any]] = []
    notes: list[str] = []
    for child in root:
        if child.tag == "bdata":
            charts.append({field: child.attrib[field] for field in CHART_FIELDS if field in child.attrib})
        elif child.tag == "note":
            notes.append((child.text or "").strip())

    return {"charts": charts, "options": options, "notes": notes}


def load_definitions(text: str, fmt: str = "auto") -> dict[str, Any]:
    """Parse a definition document into charts, options and notes."""
    if fmt not in VALID_FORMATS:
        raise ValueError(f"unknown format '{fmt}'. Must be one of: {sorted(VALID_FORMATS)}")
    if not text.strip():
        raise ValueError("empty input")
    if fmt == "auto":
        fmt = detect_format(text)
    if fmt == "xml":
        return _parse_xml(text)
    return _parse_json(text)
