"""PDF parsing built on :mod:`pypdf`.

:func:`parse_pdf` turns raw PDF bytes into the page/fragment structure consumed
by the extractor. Each shown string becomes a raw fragment::

    {"x": 4.5, "y": 2.1, "R": [{"T": "Hello%20world", "TS": [1.0, 0, 2, 0], "T_F": "Helvetica"}]}

Coordinates are in page units of 16 pt (points divided by 16) measured from the
top-left corner of the media box, ``T`` is percent-encoded, and ``TS`` packs
``[font size / 12 pt, 0, flags, color]``. Parsing never raises; the outcome is a
:class:`ParseResult` that is either a success carrying the pages or a failure
carrying the reason.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from io import BytesIO
from typing import Any, Sequence
from urllib.parse import quote

from pypdf import PdfReader
from pypdf.generic import DictionaryObject, IndirectObject

from .exceptions import InvalidPDFError
from .styles import BOLD_FLAG, ITALIC_FLAG
from .types import RawPage

__all__ = [
    "PAGE_UNIT",
    "FONT_SCALE_UNIT",
    "ParseResult",
    "PageCollector",
    "font_family",
    "font_flags",
    "parse_pdf",
    "text_width",
]

LOGGER = logging.getLogger(__name__)

PAGE_UNIT = 16.0
FONT_SCALE_UNIT = 12.0

_HEADER_WINDOW = 1024
_BOLD_MARKERS = ("BOLD", "BLACK", "HEAVY", "SEMIBOLD", "DEMI")
_ITALIC_MARKERS = ("ITALIC", "OBLIQUE")
_IDENTITY = (1.0, 0.0, 0.0, 1.0, 0.0, 0.0)
_SHOW_TEXT = (b"Tj", b"TJ", b"'", b"\"")
# Glyph width, in 1/1000 text space units, for fonts without a /Widths array.
_DEFAULT_GLYPH_WIDTH = 500.0


@dataclass(frozen=True, slots=True)
class ParseResult:
    """Outcome of a single parse: exactly one of ``pages`` or ``error`` is set."""

    pages: tuple[RawPage, ...] | None = None
    error: str | None = None

    @classmethod
    def success(cls, pages: Sequence[RawPage]) -> "ParseResult":
        return cls(pages=tuple(pages))

    @classmethod
    def failure(cls, reason: str) -> "ParseResult":
        return cls(error=reason)

    @property
    def ok(self) -> bool:
        return self.error is None

    def unwrap(self) -> tuple[RawPage, ...]:
        """Return the parsed pages or raise :class:`InvalidPDFError`."""
        if self.error is not None or self.pages is None:
            raise InvalidPDFError(self.error or "PDF parsing produced no result")
        return self.pages


def _resolve(value: Any) -> Any:
    if isinstance(value, IndirectObject):
        return value.get_object()
    return value


def text_width(text: str, font_dict: Any, font_size: float) -> float:
    """Advance of ``text`` in unscaled text space units.

    Glyph widths come from the font's ``/Widths`` array, indexed from
    ``/FirstChar`` by character code.
    """
    font_dict = _resolve(font_dict)
    widths: list = []
    first_char = 0
    if isinstance(font_dict, DictionaryObject):
        resolved = _resolve(font_dict.get("/Widths"))
        if isinstance(resolved, list):
            widths = resolved
        first = _resolve(font_dict.get("/FirstChar"))
        if isinstance(first, (int, float)):
            first_char = int(first)

    total = 0.0
    for char in text:
        width = _DEFAULT_GLYPH_WIDTH
        index = ord(char) - first_char
        if 0 <= index < len(widths):
            glyph = _resolve(widths[index])
            if isinstance(glyph, (int, float)):
                width = float(glyph)
        total += width
    return total * float(font_size or 0.0) / 1000.0


def _translate(tm: Sequence[float], advance: float) -> tuple[float, ...]:
    a, b, c, d, e, f = tm
    return (a, b, c, d, e + advance * a, f + advance * b)


def _base_font_name(font_dict: Any) -> str | None:
    font_dict = _resolve(font_dict)
    if not isinstance(font_dict, DictionaryObject):
        return None
    base_font = font_dict.get("/BaseFont")
    if base_font is None:
        return None
    name = str(base_font).lstrip("/")
    return name or None


def font_family(base_font: str | None) -> str | None:
    """Strip the subset prefix and style suffix from a base font name.

    ``ABCDEF+Helvetica-BoldOblique`` becomes ``Helvetica``.
    """
    if not base_font:
        return None
    name = base_font.split("+", 1)[-1]
    for separator in ("-", ","):
        name = name.split(separator, 1)[0]
    return name or None


def font_flags(base_font: str | None) -> int:
    if not base_font:
        return 0
    upper = base_font.upper()
    flags = 0
    if any(marker in upper for marker in _BOLD_MARKERS):
        flags |= BOLD_FLAG
    if any(marker in upper for marker in _ITALIC_MARKERS):
        flags |= ITALIC_FLAG
    return flags


def _multiply(m1: Sequence[float], m2: Sequence[float]) -> tuple[float, ...]:
    a1, b1, c1, d1, e1, f1 = m1
    a2, b2, c2, d2, e2, f2 = m2
    return (
        a1 * a2 + b1 * c2,
        a1 * b2 + b1 * d2,
        c1 * a2 + d1 * c2,
        c1 * b2 + d1 * d2,
        e1 * a2 + f1 * c2 + e2,
        e1 * b2 + f1 * d2 + f2,
    )


def _rgb_to_int(red: float, green: float, blue: float) -> int:
    def channel(value: float) -> int:
        return max(0, min(255, int(round(float(value) * 255))))

    return (channel(red) << 16) | (channel(green) << 8) | channel(blue)


def _color_from_operands(operands: Sequence[Any]) -> int | None:
    try:
        values = [float(value) for value in operands]
    except (TypeError, ValueError):
        return None
    if len(values) == 1:
        return _rgb_to_int(values[0], values[0], values[0])
    if len(values) == 3:
        return _rgb_to_int(*values)
    if len(values) == 4:
        cyan, magenta, yellow, black = values
        return _rgb_to_int(
            (1 - cyan) * (1 - black),
            (1 - magenta) * (1 - black),
            (1 - yellow) * (1 - black),
        )
    return None


@dataclass
class PageCollector:
    """Collects raw fragments for one page through pypdf's text visitors."""

    top: float
    left: float = 0.0
    fragments: list[dict[str, Any]] = field(default_factory=list)
    _color: int = 0
    _color_stack: list[int] = field(default_factory=list)
    _origin: tuple[tuple[float, ...], float, tuple[float, ...], int] | None = None
    # pypdf leaves the text matrix in place while text is shown, so the width
    # of text already flushed at an unchanged matrix is tracked here.
    _run_tm: tuple[float, ...] | None = None
    _advance: float = 0.0

    def visit_operand(self, operator: bytes, operands: list, cm: Sequence[float], tm: Sequence[float]) -> None:
        if operator == b"BT":
            self._run_tm = None
        elif operator == b"q":
            self._color_stack.append(self._color)
        elif operator == b"Q":
            if self._color_stack:
                self._color = self._color_stack.pop()
        elif operator in (b"rg", b"g", b"k", b"sc", b"scn"):
            color = _color_from_operands(operands)
            if color is not None:
                self._color = color

    def visit_operand_after(self, operator: bytes, operands: list, cm: Sequence[float], tm: Sequence[float]) -> None:
        # Origin and color of the first string shown since the last flush, read
        # after the operator so ' and " report the line they moved to.
        if operator in _SHOW_TEXT and self._origin is None:
            current = tuple(tm)
            if current != self._run_tm:
                self._run_tm, self._advance = current, 0.0
            self._origin = (current, self._advance, tuple(cm), self._color)

    def visit_text(self, text: str, cm: Sequence[float], tm: Sequence[float], font_dict: Any, font_size: float) -> None:
        origin, self._origin = self._origin, None
        cleaned = text.replace("\r", "").replace("\n", "")
        if origin is not None:
            self._advance += text_width(cleaned, font_dict, font_size)
        if not cleaned.strip():
            return
        color = self._color
        if origin is not None:
            tm, advance, cm, color = origin
            tm = _translate(tm, advance)
        _a, _b, c, d, e, f = _multiply(tm or _IDENTITY, cm or _IDENTITY)
        scale = (c * c + d * d) ** 0.5 or 1.0
        effective_size = float(font_size or 0.0) * scale
        base_font = _base_font_name(font_dict)
        self.fragments.append(
            {
                "x": (e - self.left) / PAGE_UNIT,
                "y": (self.top - f) / PAGE_UNIT,
                "R": [
                    {
                        "T": quote(cleaned, safe=""),
                        "TS": [effective_size / FONT_SCALE_UNIT, 0, font_flags(base_font), color],
                        "T_F": font_family(base_font),
                    }
                ],
            }
        )


def _looks_like_pdf(data: bytes) -> bool:
    return b"%PDF-" in data[:_HEADER_WINDOW]


def _collect_page(page: Any) -> list[dict[str, Any]]:
    box = page.mediabox
    collector = PageCollector(top=float(box.top), left=float(box.left))
    page.extract_text(
        visitor_operand_before=collector.visit_operand,
        visitor_operand_after=collector.visit_operand_after,
        visitor_text=collector.visit_text,
    )
    return collector.fragments


def parse_pdf(data: bytes) -> ParseResult:
    """Parse ``data`` into per-page raw fragment lists."""
    if not data:
        return ParseResult.failure("Empty PDF buffer")
    if not _looks_like_pdf(data):
        return ParseResult.failure("Input is not a PDF document")

    try:
        reader = PdfReader(BytesIO(data))
        if reader.is_encrypted:
            reader.decrypt("")
        pages = [_collect_page(page) for page in reader.pages]
    except Exception as exc:
        LOGGER.error("PDF parsing error: %s", exc)
        return ParseResult.failure(f"Unable to parse PDF: {exc}")

    LOGGER.info("PDF parsing successful: %d pages", len(pages))
    return ParseResult.success(pages)
