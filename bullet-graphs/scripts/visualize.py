#!/usr/bin/env python3
# /// script
# requires-python = ">=3.10"
# dependencies = []
# ///
"""
Render bullet graphs from a JSON or XML definition file as SVG.

Outputs raw SVG by default, or a self-contained HTML page with --html.
Skipped rows and coerced values are reported on stderr.

Usage:
    python visualize.py charts.json
    python visualize.py charts.xml --circle-marker -o charts.svg
    cat charts.json | python visualize.py --html -o report.html
"""

from __future__ import annotations

import argparse
import html
import os
import sys
from typing import Any

from bulletgraph import render, resolve_options, style
from chart_source import VALID_FORMATS, load_definitions
from svg_canvas import SVGCanvas

FONT_FAMILY = "Calibri"

_OPTION_FLAGS = (
    "width",
    "height",
    "top",
    "left",
    "right",
    "bar_height",
    "gutter",
    "font_size",
    "background_color",
    "bar_color",
    "data_color",
    "comparative_color",
    "title",
)


def _write_output(data: str, output_path: str | None) -> None:
    """Write document string to file or stdout."""
    if output_path:
        abs_path = os.path.abspath(output_path)
        parent = os.path.dirname(abs_path)
        if parent == "/":
            print(f"Error: output path resolves to root directory: {output_path}", file=sys.stderr)
            sys.exit(1)
        os.makedirs(parent, exist_ok=True)
        with open(abs_path, "w", encoding="utf-8") as f:
            f.write(data)
    else:
        sys.stdout.write(data)


def _esc(text: Any) -> str:
    """Escape text for HTML embedding."""
    return html.escape(str(text), quote=True)


# ---------------------------------------------------------------------------
# Document assembly
# ---------------------------------------------------------------------------


def merge_options(document_options: dict[str, Any], args: argparse.Namespace) -> dict[str, Any]:
    """Layer CLI flags over options read from the definition document."""
    merged = dict(document_options)
    for key in _OPTION_FLAGS:
        value = getattr(args, key, None)
        if value is not None:
            merged[key] = value
    if args.show_title:
        merged["show_title_below"] = True
    if args.circle_marker:
        merged["use_circle_marker"] = True
    if args.explicit_zero:
        merged["zero_means_default"] = False
    return merged


def render_document(
    charts: list[dict[str, Any]],
    options: dict[str, Any],
    notes: list[str],
) -> tuple[str, dict[str, Any]]:
    """Render a complete SVG document. Returns (svg_text, render_result)."""
    opts = resolve_options(options)
    canvas = SVGCanvas(opts["width"], opts["height"])
    canvas.start()
    canvas.rect(0, 0, opts["width"], opts["height"], style({"fill": opts["background_color"]}))
    canvas.begin_group(style({"font-family": FONT_FAMILY, "font-size": f"{opts['font_size']:g}px"}))
    result = render(charts, opts, notes, canvas)
    canvas.end_group()
    canvas.end()
    return canvas.to_string(), result


def _css() -> str:
    """Return the inline CSS for the HTML page."""
    return """
        * { margin: 0; padding: 0; box-sizing: border-box; }
        body {
            font-family: Calibri, -apple-system, 'Segoe UI', Roboto, sans-serif;
            background: #f4f4f5;
            color: #18181b;
            padding: 2rem;
        }
        header h1 { font-size: 1.5rem; margin-bottom: 1rem; }
        .chart-container {
            display: flex;
            justify-content: center;
            background: #ffffff;
            border: 1px solid #e4e4e7;
            border-radius: 12px;
            padding: 1rem;
        }
        .chart-container svg { max-width: 100%; height: auto; }
    """


def compose_html(svg_text: str, title: str) -> str:
    """Wrap an SVG document in a self-contained HTML page."""
    # Inline SVG must not carry the XML declaration.
    body = "\n".join(line for line in svg_text.splitlines() if not line.startswith("<?xml"))
    page_title = _esc(title or "Bullet Graphs")
    return (
        "<!DOCTYPE html>\n"
        '<html lang="en">\n'
        "<head>\n"
        '    <meta charset="UTF-8">\n'
        '    <meta name="viewport" content="width=device-width, initial-scale=1.0">\n'
        f"    <title>{page_title}</title>\n"
        f"    <style>{_css()}</style>\n"
        "</head>\n"
        "<body>\n"
        f"<header><h1>{page_title}</h1></header>\n"
        f'<main><div class="chart-container">\n{body}\n</div></main>\n'
        "</body>\n"
        "</html>\n"
    )


def _report(result: dict[str, Any]) -> None:
    """Human-readable render summary to stderr."""
    for w in result["warnings"]:
        print(f"Warning: [{w['code']}] {w['message']}", file=sys.stderr)
    total = result["drawn"] + result["skipped"]
    print(f"Rows rendered: {result['drawn']}/{total}", file=sys.stderr)


# ---------------------------------------------------------------------------
# CLI
# ---------------------------------------------------------------------------


def parse_args() -> argparse.Namespace:
    """Parse command-line arguments."""
    p = argparse.ArgumentParser(description="Render bullet graphs from a JSON or XML definition as SVG")
    p.add_argument("input", nargs="?", help="Definition file (reads stdin when omitted)")
    p.add_argument("--format", choices=sorted(VALID_FORMATS), default="auto", help="Input format")
    p.add_argument("-o", "--output", help="Write document to file instead of stdout")
    p.add_argument("--html", action="store_true", help="Wrap the SVG in a self-contained HTML page")
    p.add_argument("--width", type=float, help="Canvas width")
    p.add_argument("--height", type=float, help="Canvas height")
    p.add_argument("--top", type=float, help="Top of the first bullet graph")
    p.add_argument("--left", type=float, help="Left margin of the plot area")
    p.add_argument("--right", type=float, help="Right margin of the plot area")
    p.add_argument("--bar-height", type=float, help="Bar height")
    p.add_argument("--gutter", type=float, help="Vertical space between graphs")
    p.add_argument("--font-size", type=float, help="Font size (px)")
    p.add_argument("--background-color", help="Background color")
    p.add_argument("--bar-color", help="Qualitative band color")
    p.add_argument("--data-color", help="Measure bar color")
    p.add_argument("--comparative-color", help="Comparative marker color")
    p.add_argument("--title", help="Document title")
    p.add_argument("--show-title", action="store_true", help="Show the title below the last graph")
    p.add_argument("--circle-marker", action="store_true", help="Draw the comparative measure as a circle")
    p.add_argument(
        "--explicit-zero",
        action="store_true",
        help="Honour zero margins and gutter instead of falling back to defaults",
    )
    p.add_argument("--strict", action="store_true", help="Exit 1 if any row is skipped")
    return p.parse_args()


def _read_input(path: str | None) -> str:
    if path:
        if not os.path.isfile(path):
            print(f"Error: input file not found: {path}", file=sys.stderr)
            sys.exit(1)
        with open(path, encoding="utf-8") as f:
            return f.read()
    if sys.stdin.isatty():
        print("Error: pass a definition file or pipe one via stdin", file=sys.stderr)
        print("Example: cat charts.json | python visualize.py", file=sys.stderr)
        sys.exit(1)
    return sys.stdin.read()


def main() -> None:
    """Entry point."""
    args = parse_args()
    text = _read_input(args.input)

    try:
        definitions = load_definitions(text, args.format)
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)

    options = merge_options(definitions["options"], args)
    svg_text, result = render_document(definitions["charts"], options, definitions["notes"])

    output = compose_html(svg_text, resolve_options(options)["title"]) if args.html else svg_text
    _write_output(output, args.output)
    _report(result)

    if args.strict and result["skipped"]:
        sys.exit(1)


if __name__ == "__main__":
    main()
