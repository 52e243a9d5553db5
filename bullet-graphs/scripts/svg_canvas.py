#!/usr/bin/env python3
# /// script
# requires-python = ">=3.10"
# dependencies = []
# ///
"""
Minimal SVG drawing surface.

Accepts the drawing commands issued by bulletgraph.render and serializes
them into a standalone SVG document. Every call is also kept in `calls`
so output order can be inspected.
"""

from __future__ import annotations

import html
import math
from typing import Any


def _esc(text: Any) -> str:
    """Escape text for SVG interpolation."""
    return html.escape(str(text), quote=True)


def _fmt(value: Any) -> str:
    """Format a coordinate without trailing zeros. Non-finite values become 0."""
    try:
        number = float(value)
    except (TypeError, ValueError):
        return "0"
    if not math.isfinite(number):
        return "0"
    text = f"{number:.2f}".rstrip("0").rstrip(".")
    return "0" if text == "-0" else text


def _style_attr(style: str | None) -> str:
    return f' style="{_esc(style)}"' if style else ""


class SVGCanvas:
    """Builds an SVG document from drawing commands.

    Call start() first and end() last; to_string() returns the document.
    """

    def __init__(self, width: float, height: float):
        self.width = width
        self.height = height
        self.elements: list[str] = []
        self.calls: list[tuple[str, tuple[Any, ...]]] = []
        self._depth = 0
        self._started = False
        self._ended = False

    def _emit(self, method: str, args: tuple[Any, ...], markup: str) -> None:
        if not self._started or self._ended:
            raise ValueError(f"{method}() called outside start()/end()")
        self.calls.append((method, args))
        self.elements.append(markup)

    def start(self) -> None:
        """Open the document root."""
        if self._started:
            raise ValueError("start() called twice")
        self._started = True
        w, h = _fmt(self.width), _fmt(self.height)
        self.elements.append('<?xml version="1.0"?>')
        self.elements.append(
            f'<svg width="{w}" height="{h}" viewBox="0 0 {w} {h}" '
            f'xmlns="http://www.w3.org/2000/svg" '
            f'xmlns:xlink="http://www.w3.org/1999/xlink">'
        )

    def end(self) -> None:
        """Close the document root. All groups must be closed."""
        if not self._started or self._ended:
            raise ValueError("end() called without matching start()")
        if self._depth:
            raise ValueError(f"end() called with {self._depth} open group(s)")
        self._ended = True
        self.elements.append("</svg>")

    def set_title(self, text: str) -> None:
        self._emit("set_title", (text,), f"<title>{_esc(text)}</title>")

    def rect(self, x: float, y: float, w: float, h: float, style: str | None = None) -> None:
        self._emit(
            "rect",
            (x, y, w, h, style),
            f'<rect x="{_fmt(x)}" y="{_fmt(y)}" width="{_fmt(w)}" height="{_fmt(h)}"{_style_attr(style)}/>',
        )

    def line(self, x1: float, y1: float, x2: float, y2: float, style: str | None = None) -> None:
        self._emit(
            "line",
            (x1, y1, x2, y2, style),
            f'<line x1="{_fmt(x1)}" y1="{_fmt(y1)}" x2="{_fmt(x2)}" y2="{_fmt(y2)}"{_style_attr(style)}/>',
        )

    def circle(self, cx: float, cy: float, r: float, style: str | None = None) -> None:
        self._emit(
            "circle",
            (cx, cy, r, style),
            f'<circle cx="{_fmt(cx)}" cy="{_fmt(cy)}" r="{_fmt(r)}"{_style_attr(style)}/>',
        )

    def text(self, x: float, y: float, content: str, style: str | None = None) -> None:
        self._emit(
            "text",
            (x, y, content, style),
            f'<text x="{_fmt(x)}" y="{_fmt(y)}"{_style_attr(style)}>{_esc(content)}</text>',
        )

    def begin_group(self, style: str) -> None:
        self._emit("begin_group", (style,), f"<g{_style_attr(style)}>")
        self._depth += 1

    def end_group(self) -> None:
        if self._depth == 0:
            raise ValueError("end_group() without matching begin_group()")
        self._emit("end_group", (), "</g>")
        self._depth -= 1

    def to_string(self) -> str:
        """Return the finished document."""
        if not self._ended:
            raise ValueError("document not finished; call end() first")
        return "\n".join(self.elements) + "\n"
