"""Group extracted fragments into reading-order lines."""
from __future__ import annotations

from functools import cmp_to_key
from typing import Iterable, Sequence

from .types import Page, Paragraph, TextFragment

__all__ = [
    "LINE_TOLERANCE",
    "PRECISE_Y_SCALE",
    "assemble_page",
    "group_lines",
    "precise_y",
    "reading_order",
]

# Fragments whose y differs by less than this many source units share a line.
LINE_TOLERANCE = 0.1
PRECISE_Y_SCALE = 100


def precise_y(y: float) -> int:
    """Quantise ``y`` into the integer key used to identify a line."""
    return int(round(y * PRECISE_Y_SCALE))


def _compare(a: TextFragment, b: TextFragment) -> int:
    if abs(a.y - b.y) < LINE_TOLERANCE:
        return (a.x > b.x) - (a.x < b.x)
    return (a.y > b.y) - (a.y < b.y)


def reading_order(fragments: Iterable[TextFragment]) -> list[TextFragment]:
    """Sort top-to-bottom, then left-to-right within a line."""
    return sorted(fragments, key=cmp_to_key(_compare))


def group_lines(fragments: Sequence[TextFragment]) -> list[list[TextFragment]]:
    """Split already sorted ``fragments`` into lines.

    A fragment opens a new line when it sits ``LINE_TOLERANCE`` or more away
    from the previous fragment of the open line, the same threshold
    :func:`reading_order` uses to decide two fragments share a line.
    """
    lines: list[list[TextFragment]] = []
    current: list[TextFragment] = []

    for fragment in fragments:
        if current and abs(fragment.y - current[-1].y) >= LINE_TOLERANCE:
            lines.append(current)
            current = []
        current.append(fragment)

    if current:
        lines.append(current)
    return lines


def assemble_page(fragments: Iterable[TextFragment]) -> Page:
    """Turn one page's fragments into a :class:`Page` of line paragraphs.

    A line is keyed by the precise-Y of the last fragment reached in reading
    order.
    """
    paragraphs = []
    for line in group_lines(reading_order(fragments)):
        # Re-assert left-to-right order within the line.
        ordered = tuple(sorted(line, key=lambda item: item.x))
        paragraphs.append(Paragraph(fragments=ordered, source_y=precise_y(line[-1].y)))
    return Page(paragraphs=tuple(paragraphs))
