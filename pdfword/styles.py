"""Decode packed per-fragment style descriptors into :class:`Style` values.

The parser reports each text run with a ``TS`` array shaped
``[scale, unused, flags, color]`` and an optional ``T_F`` font family. Decoding
is total: whatever the descriptor looks like, a fully populated style comes
back, with defaults substituted for anything missing or malformed.
"""
from __future__ import annotations

import math
from numbers import Real
from typing import Any, Mapping

from .types import (
    DEFAULT_ALIGNMENT,
    DEFAULT_COLOR_HEX,
    DEFAULT_FONT_FAMILY,
    DEFAULT_FONT_SIZE_HALF_POINTS,
    Style,
)

__all__ = ["HALF_POINTS_PER_SCALE_UNIT", "BOLD_FLAG", "ITALIC_FLAG", "decode_style", "format_color"]

HALF_POINTS_PER_SCALE_UNIT = 24
BOLD_FLAG = 2
ITALIC_FLAG = 1

_COLOR_MASK = 0xFFFFFF


def _component(values: Any, index: int) -> Any:
    if not isinstance(values, (list, tuple)) or len(values) <= index:
        return None
    return values[index]


def _is_number(value: Any) -> bool:
    return isinstance(value, Real) and not isinstance(value, bool)


def _font_size(scale: Any) -> int:
    if not _is_number(scale):
        return DEFAULT_FONT_SIZE_HALF_POINTS
    scale = float(scale)
    if not math.isfinite(scale) or scale < 0:
        return DEFAULT_FONT_SIZE_HALF_POINTS
    return int(round(scale * HALF_POINTS_PER_SCALE_UNIT))


def _flags(value: Any) -> int:
    if not _is_number(value):
        return 0
    if isinstance(value, float) and not math.isfinite(value):
        return 0
    # Fractional flag values truncate toward zero.
    return int(value)


def format_color(value: Any) -> str:
    """Format a numeric color as six lowercase hex digits.

    Non-numeric values fall back to black.
    """
    if not _is_number(value):
        return DEFAULT_COLOR_HEX
    if isinstance(value, float) and not math.isfinite(value):
        return DEFAULT_COLOR_HEX
    return format(int(value) & _COLOR_MASK, "06x")


def decode_style(descriptor: Mapping[str, Any] | None) -> Style:
    """Return the :class:`Style` encoded by ``descriptor``.

    >>> decode_style({"TS": [10, 0, 3, 0xFF0000], "T_F": "Times"})
    Style(bold=True, italic=True, font_size_half_points=240, font_family='Times', color_hex='ff0000', alignment='left')
    """
    if not isinstance(descriptor, Mapping):
        return Style()

    packed = descriptor.get("TS")
    flags = _flags(_component(packed, 2))

    family = descriptor.get("T_F")
    if not isinstance(family, str) or not family.strip():
        family = DEFAULT_FONT_FAMILY

    return Style(
        bold=bool(flags & BOLD_FLAG),
        italic=bool(flags & ITALIC_FLAG),
        font_size_half_points=_font_size(_component(packed, 0)),
        font_family=family,
        color_hex=format_color(_component(packed, 3)),
        alignment=DEFAULT_ALIGNMENT,
    )
