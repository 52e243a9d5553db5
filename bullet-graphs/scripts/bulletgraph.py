#!/usr/bin/env python3
# /// script
# requires-python = ">=3.10"
# dependencies = []
# ///
"""
Bullet graph layout and rendering engine.

Bullet graphs follow the Perceptual Edge design specification
(http://www.perceptualedge.com/articles/misc/Bullet_Graph_Design_Spec.pdf):
a performance measure drawn as a bar over qualitative bands on a
quantitative scale, with a comparative marker for the target value.

The engine maps chart rows into pixel space and issues drawing calls to an
injected surface (see svg_canvas.SVGCanvas). It keeps no state between calls.

Usage:
    from bulletgraph import render
    from svg_canvas import SVGCanvas

    canvas = SVGCanvas(1024, 800)
    canvas.start()
    result = render(
        [{"title": "Revenue", "subtitle": "USD(1000)", "scale": "0,300,50",
          "qmeasure": "150,225", "cmeasure": 250, "measure": 275}],
        {"width": 1024},
        [],
        canvas,
    )
    canvas.end()
"""

from __future__ import annotations

import math
from decimal import Decimal
from typing import Any, Protocol

# ---------------------------------------------------------------------------
# Options
# ---------------------------------------------------------------------------

DEFAULT_OPTIONS: dict[str, Any] = {
    "width": 1024,
    "height": 800,
    "top": 50,
    "left": 250,
    "right": 50,
    "bar_height": 48,
    "gutter": 30,
    "font_size": 18,
    "background_color": "white",
    "bar_color": "rgb(200,200,200)",
    "data_color": "darkgray",
    "comparative_color": "black",
    "title": "",
    "show_title_below": False,
    "use_circle_marker": False,
    "zero_means_default": True,
}

# Zero falls back to the default for these unless zero_means_default is off.
_ZERO_DEFAULT_KEYS = ("top", "left", "right", "gutter")
# Zero or negative is never usable for these.
_POSITIVE_KEYS = ("width", "height", "bar_height", "font_size")
_COLOR_KEYS = ("background_color", "bar_color", "data_color", "comparative_color")

SCALE_LABEL_GAP = 4
NOTE_LEADING = 3
MAX_TICKS = 1000

# Warning severities: high = row skipped, low = row rendered with a coerced value.
WARNING_SEVERITY: dict[str, str] = {
    "MALFORMED_SCALE": "high",
    "MISSING_BANDS": "high",
    "DEGENERATE_SCALE": "high",
    "NON_POSITIVE_INCREMENT": "high",
    "TOO_MANY_TICKS": "high",
    "NUMBER_COERCED": "low",
}


class Surface(Protocol):
    """Drawing commands the engine issues, in order."""

    def set_title(self, text: str) -> None: ...

    def rect(self, x: float, y: float, w: float, h: float, style: str | None = None) -> None: ...

    def line(self, x1: float, y1: float, x2: float, y2: float, style: str | None = None) -> None: ...

    def circle(self, cx: float, cy: float, r: float, style: str | None = None) -> None: ...

    def text(self, x: float, y: float, content: str, style: str | None = None) -> None: ...

    def begin_group(self, style: str) -> None: ...

    def end_group(self) -> None: ...


def _as_number(value: Any) -> float | None:
    """Coerce to finite float, or None if not numeric."""
    if isinstance(value, bool):
        return None
    try:
        result = float(value)
    except (TypeError, ValueError):
        return None
    return result if math.isfinite(result) else None


_TRUE_WORDS = {"true", "yes", "on", "1"}
_FALSE_WORDS = {"false", "no", "off", "0"}


def _as_flag(value: Any) -> bool | None:
    """Coerce to bool, or None if not a recognisable flag."""
    if isinstance(value, bool):
        return value
    if isinstance(value, int) and value in (0, 1):
        return bool(value)
    if isinstance(value, str):
        word = value.strip().lower()
        if word in _TRUE_WORDS:
            return True
        if word in _FALSE_WORDS:
            return False
    return None


def resolve_options(options: dict[str, Any] | None) -> dict[str, Any]:
    """Return a new options dict with every key resolved against DEFAULT_OPTIONS."""
    given = options if isinstance(options, dict) else {}
    resolved = dict(DEFAULT_OPTIONS)

    zero_means_default = _as_flag(given.get("zero_means_default"))
    if zero_means_default is not None:
        resolved["zero_means_default"] = zero_means_default

    for key in _ZERO_DEFAULT_KEYS:
        value = _as_number(given.get(key))
        if value is None:
            continue
        if value == 0 and resolved["zero_means_default"]:
            continue
        resolved[key] = value

    for key in _POSITIVE_KEYS:
        value = _as_number(given.get(key))
        if value is not None and value > 0:
            resolved[key] = value

    for key in _COLOR_KEYS:
        value = given.get(key)
        if isinstance(value, str) and value.strip():
            resolved[key] = value.strip()

    for key in ("show_title_below", "use_circle_marker"):
        flag = _as_flag(given.get(key))
        if flag is not None:
            resolved[key] = flag

    title = given.get("title")
    if title is not None:
        resolved["title"] = str(title)

    return resolved


# ---------------------------------------------------------------------------
# Geometry helpers
# ---------------------------------------------------------------------------


def vmap(value: float, low1: float, high1: float, low2: float, high2: float) -> float:
    """Map value from the interval [low1, high1] onto [low2, high2]."""
    return low2 + (high2 - low2) * (value - low1) / (high1 - low1)


def fraction(n: float) -> float:
    """Fractional part of n (truncated toward zero)."""
    return n - int(n)


def tick_count(scale_min: float, scale_max: float, increment: float) -> int:
    """Number of ticks from scale_min to scale_max inclusive."""
    if scale_max < scale_min:
        return 0
    return math.floor((scale_max - scale_min) / increment + 1e-9) + 1


def scale_ticks(scale_min: float, scale_max: float, increment: float) -> list[float]:
    """Tick values from scale_min to scale_max inclusive, stepping by increment.

    Ticks are computed by index so float error never drops the last one.
    """
    return [scale_min + i * increment for i in range(tick_count(scale_min, scale_max, increment))]


def fmt_g(value: float) -> str:
    """Shortest round-trip digits; exponent form when the exponent is < -4 or >= 6."""
    number = float(value)
    if number == 0 or not math.isfinite(number):
        return f"{number:g}"
    sign = "-" if number < 0 else ""
    _, digit_tuple, dec_exp = Decimal(repr(abs(number))).normalize().as_tuple()
    digits = "".join(str(d) for d in digit_tuple)
    exp = len(digits) - 1 + int(dec_exp)
    if exp < -4 or exp >= 6:
        mantissa = digits[0] + ("." + digits[1:] if len(digits) > 1 else "")
        return f"{sign}{mantissa}e{'+' if exp >= 0 else '-'}{abs(exp):02d}"
    if exp < 0:
        return f"{sign}0.{'0' * (-exp - 1)}{digits}"
    if exp >= len(digits) - 1:
        return f"{sign}{digits}{'0' * (exp - len(digits) + 1)}"
    return f"{sign}{digits[: exp + 1]}.{digits[exp + 1 :]}"


def tick_label(value: float, increment: float) -> str:
    """One decimal place for fractional increments, compact otherwise."""
    if fraction(increment) > 0:
        return f"{value:.1f}"
    return fmt_g(value)


def style(props: dict[str, Any]) -> str:
    """Serialize ordered style properties as key:value;key:value."""
    return ";".join(f"{key}:{value}" for key, value in props.items())


# ---------------------------------------------------------------------------
# Row validation
# ---------------------------------------------------------------------------


def _warn(code: str, message: str) -> dict[str, str]:
    """Create a warning dict with code, message, and severity."""
    return {
        "code": code,
        "message": message,
        "severity": WARNING_SEVERITY.get(code, "medium"),
    }


def _split(field: Any) -> list[str]:
    if isinstance(field, (list, tuple)):
        return [str(v).strip() for v in field]
    if field is None:
        return []
    return [token.strip() for token in str(field).split(",")]


def _label(index: int, chart: dict[str, Any]) -> str:
    title = str(chart.get("title", "") or "").strip()
    return f"chart {index} ({title!r})" if title else f"chart {index}"


def parse_row(index: int, chart: dict[str, Any]) -> tuple[dict[str, Any] | None, list[dict[str, str]]]:
    """Validate one chart row.

    Returns (parsed, warnings). parsed is None when the row must be skipped;
    in that case the last warning explains why.
    """
    warnings: list[dict[str, str]] = []
    label = _label(index, chart)

    def _number(token: Any, field: str) -> float:
        value = _as_number(token)
        if value is None:
            warnings.append(_warn("NUMBER_COERCED", f"{label}: {field} value {token!r} is not a number, using 0"))
            return 0.0
        return value

    scale_tokens = _split(chart.get("scale"))
    if len(scale_tokens) != 3:
        return None, [
            _warn(
                "MALFORMED_SCALE",
                f"{label}: scale must be 'min,max,increment' (got {len(scale_tokens)} values)",
            )
        ]

    band_tokens = [t for t in _split(chart.get("qmeasure")) if t]
    if not band_tokens:
        return None, [_warn("MISSING_BANDS", f"{label}: at least one qualitative measure is required")]

    scale_min = _number(scale_tokens[0], "scale min")
    scale_max = _number(scale_tokens[1], "scale max")
    increment = _number(scale_tokens[2], "scale increment")

    if scale_min == scale_max:
        return None, warnings + [_warn("DEGENERATE_SCALE", f"{label}: scale min and max are both {scale_min:g}")]
    if increment <= 0:
        return None, warnings + [
            _warn("NON_POSITIVE_INCREMENT", f"{label}: scale increment must be positive (got {increment:g})")
        ]

    count = tick_count(scale_min, scale_max, increment)
    if count > MAX_TICKS:
        return None, warnings + [
            _warn("TOO_MANY_TICKS", f"{label}: scale produces {count} ticks (limit {MAX_TICKS})")
        ]

    parsed = {
        "title": str(chart.get("title", "") or ""),
        "subtitle": str(chart.get("subtitle", "") or ""),
        "scale_min": scale_min,
        "scale_max": scale_max,
        "increment": increment,
        "ticks": scale_ticks(scale_min, scale_max, increment),
        "bands": [_number(t, "qualitative measure") for t in band_tokens],
        "cmeasure": _number(chart.get("cmeasure", 0), "comparative measure"),
        "measure": _number(chart.get("measure", 0), "measure"),
    }
    return parsed, warnings


# ---------------------------------------------------------------------------
# Rendering
# ---------------------------------------------------------------------------


def _draw_row(surface: Surface, row: dict[str, Any], opts: dict[str, Any], y: float) -> None:
    """Emit labels, scale, bands, measure bar and marker for one row at y."""
    x = opts["left"]
    bar_h = opts["bar_height"]
    font_size = opts["font_size"]
    plot_w = opts["width"] - opts["left"] - opts["right"]
    tx = x - font_size
    lo, hi = row["scale_min"], row["scale_max"]

    def _px(value: float) -> float:
        return vmap(value, lo, hi, 0, plot_w)

    # Labels
    surface.text(
        tx,
        y + bar_h / 3,
        f"{row['title']} ({fmt_g(row['measure'])})",
        style({"text-anchor": "end", "font-weight": "bold"}),
    )
    surface.text(tx, y + bar_h / 3 + font_size, row["subtitle"], style({"text-anchor": "end", "font-size": "75%"}))

    # Scale
    surface.begin_group(style({"text-anchor": "middle", "font-size": "75%"}))
    label_y = y + SCALE_LABEL_GAP + bar_h + font_size / 2
    for tick in row["ticks"]:
        surface.text(x + _px(tick), label_y, tick_label(tick, row["increment"]))
    surface.end_group()

    # Qualitative bands, drawn in input order so later bands overlay earlier ones
    surface.begin_group(style({"fill-opacity": "0.5", "fill": opts["bar_color"]}))
    surface.rect(x, y, plot_w, bar_h)
    for band in row["bands"]:
        surface.rect(x, y, _px(band), bar_h)
    surface.end_group()

    # Measure and comparative measure
    surface.rect(x, y + bar_h / 3, _px(row["measure"]), bar_h / 3, style({"fill": opts["data_color"]}))
    cx = x + _px(row["cmeasure"])
    if opts["use_circle_marker"]:
        surface.circle(
            cx,
            y + bar_h / 2,
            bar_h / 6,
            style({"fill-opacity": "0.3", "fill": opts["comparative_color"]}),
        )
    else:
        quarter = bar_h / 4
        surface.line(
            cx,
            y + quarter,
            cx,
            y + bar_h - quarter,
            style({"stroke-width": "3", "stroke": opts["comparative_color"]}),
        )


def render(
    charts: list[dict[str, Any]],
    options: dict[str, Any] | None,
    notes: list[str] | None,
    surface: Surface,
) -> dict[str, Any]:
    """Render chart rows, optional trailing title and notes onto surface.

    Malformed rows are skipped without drawing anything; the returned dict
    records the outcome of every row plus any warnings.
    """
    opts = resolve_options(options)
    title = opts["title"]
    font_size = opts["font_size"]

    rows: list[dict[str, Any]] = []
    warnings: list[dict[str, str]] = []
    y = opts["top"]

    surface.set_title(title)
    for index, chart in enumerate(charts or []):
        if not isinstance(chart, dict):
            chart = {}
        parsed, row_warnings = parse_row(index, chart)
        warnings.extend(row_warnings)
        if parsed is None:
            rows.append(
                {
                    "index": index,
                    "title": str(chart.get("title", "") or ""),
                    "status": "skipped",
                    "y": None,
                    "reason": row_warnings[-1]["code"],
                }
            )
            continue

        _draw_row(surface, parsed, opts, y)
        rows.append({"index": index, "title": parsed["title"], "status": "ok", "y": y, "reason": None})
        y += opts["bar_height"] + opts["gutter"]

    if opts["show_title_below"] and title:
        y += font_size * 2
        surface.text(opts["left"], y, title, style({"text-anchor": "start", "font-size": "200%"}))

    note_lines = [str(n) for n in notes or []]
    if note_lines:
        surface.begin_group(style({"font-size": "100%", "text-anchor": "start"}))
        y += font_size * 2
        for note in note_lines:
            surface.text(opts["left"], y, note)
            y += font_size + NOTE_LEADING
        surface.end_group()

    drawn = sum(1 for r in rows if r["status"] == "ok")
    return {
        "rows": rows,
        "warnings": warnings,
        "drawn": drawn,
        "skipped": len(rows) - drawn,
        "bottom": y,
    }
