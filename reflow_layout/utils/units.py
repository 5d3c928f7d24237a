"""Unit conversion helpers for CSS-like lengths expressed in device pixels."""
from __future__ import annotations

import math
from typing import Optional

POINTS_PER_INCH = 72
CSS_PIXELS_PER_INCH = 96
MILLIMETERS_PER_INCH = 25.4


def pt_to_px(value: float, dpi: int) -> int:
    """Convert typographic points to device pixels."""
    return int(round(value * dpi / POINTS_PER_INCH))


def px_to_pt(value: float, dpi: int) -> float:
    """Convert device pixels to typographic points."""
    return value * POINTS_PER_INCH / dpi


def mm_to_px(value: float, dpi: int) -> int:
    """Convert millimeters to device pixels."""
    return int(round(value * dpi / MILLIMETERS_PER_INCH))


def parse_length(
    value: Optional[str],
    font_size_px: float,
    dpi: int,
    percent_base: float = 0.0,
    root_font_size_px: Optional[float] = None,
) -> Optional[int]:
    """Parse a CSS length into device pixels.

    Relative units resolve against ``font_size_px`` (``em``), ``root_font_size_px``
    (``rem``) and ``percent_base`` (``%``). Unitless numbers are read as CSS
    pixels. Returns ``None`` for ``auto`` and for anything that does not parse.
    """
    if value is None:
        return None
    text = value.strip().lower()
    if not text or text == "auto":
        return None

    unit_map = {
        "rem": root_font_size_px if root_font_size_px is not None else font_size_px,
        "em": font_size_px,
        "ex": font_size_px / 2.0,
        "px": dpi / CSS_PIXELS_PER_INCH,
        "pt": dpi / POINTS_PER_INCH,
        "pc": 12.0 * dpi / POINTS_PER_INCH,
        "in": float(dpi),
        "cm": dpi / 2.54,
        "mm": dpi / MILLIMETERS_PER_INCH,
        "%": percent_base / 100.0,
    }
    for unit, factor in unit_map.items():
        if text.endswith(unit):
            return _rounded(parse_number(text[: -len(unit)]), factor)
    return _rounded(parse_number(text), dpi / CSS_PIXELS_PER_INCH)


def _rounded(number: Optional[float], factor: float) -> Optional[int]:
    if number is None:
        return None
    scaled = number * factor
    if not math.isfinite(scaled):
        return None
    return int(round(scaled))


def parse_number(value: Optional[str]) -> Optional[float]:
    """Return the float value of a unitless number, or ``None``."""
    if value is None:
        return None
    try:
        number = float(value.strip())
    except ValueError:
        return None
    if not math.isfinite(number):
        return None
    return number
