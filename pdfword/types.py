"""Data structures shared by the PDF → DOCX conversion stages."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Literal, Mapping, Sequence, Union

Alignment = Literal["left", "center", "right", "justify"]

DEFAULT_FONT_FAMILY = "Arial"
DEFAULT_COLOR_HEX = "000000"
DEFAULT_FONT_SIZE_HALF_POINTS = 11
DEFAULT_ALIGNMENT: Alignment = "left"


@dataclass(frozen=True, slots=True)
class Style:
    """Semantic run attributes recovered from a packed style descriptor."""

    bold: bool = False
    italic: bool = False
    font_size_half_points: int = DEFAULT_FONT_SIZE_HALF_POINTS
    font_family: str = DEFAULT_FONT_FAMILY
    color_hex: str = DEFAULT_COLOR_HEX
    alignment: Alignment = DEFAULT_ALIGNMENT


@dataclass(frozen=True, slots=True)
class TextFragment:
    """A positioned, styled piece of text as reported by the PDF parser."""

    text: str
    x: float
    y: float
    style: Style = field(default_factory=Style)


@dataclass(frozen=True, slots=True)
class Paragraph:
    """One assembled visual line of text on a page.

    ``source_y`` is the line's precise-Y key (``round(y * 100)``).
    """

    fragments: tuple[TextFragment, ...]
    source_y: int


@dataclass(frozen=True, slots=True)
class Page:
    """Ordered paragraphs of a single PDF page."""

    paragraphs: tuple[Paragraph, ...] = ()

    @property
    def is_empty(self) -> bool:
        return not self.paragraphs


# ---------------------------------------------------------------------------
# Output document model
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class Spacing:
    """Paragraph spacing in twentieths of a point."""

    before: int = 0
    after: int = 0
    line: int = 240
    line_rule: Literal["atLeast", "exact", "auto"] = "atLeast"


@dataclass(frozen=True, slots=True)
class TextRun:
    text: str
    bold: bool
    italic: bool
    size: int
    font: str
    color: str


@dataclass(frozen=True, slots=True)
class OutputParagraph:
    runs: tuple[TextRun, ...]
    alignment: Alignment = DEFAULT_ALIGNMENT
    spacing: Spacing = field(default_factory=Spacing)


@dataclass(frozen=True, slots=True)
class PageBreak:
    """Marker emitted as the first element of every section after the first."""


SectionElement = Union[PageBreak, OutputParagraph]


@dataclass(frozen=True, slots=True)
class Section:
    """One page worth of content in the output document."""

    elements: tuple[SectionElement, ...] = ()

    @property
    def paragraphs(self) -> tuple[OutputParagraph, ...]:
        return tuple(item for item in self.elements if isinstance(item, OutputParagraph))


@dataclass(frozen=True, slots=True)
class DefaultRunStyle:
    font: str = DEFAULT_FONT_FAMILY
    size: int = 24


@dataclass(frozen=True, slots=True)
class DocumentModel:
    """Ordered sections plus the document wide run defaults."""

    sections: tuple[Section, ...]
    default_run: DefaultRunStyle = field(default_factory=DefaultRunStyle)

    @property
    def page_break_count(self) -> int:
        return sum(
            1 for section in self.sections for item in section.elements if isinstance(item, PageBreak)
        )

    @property
    def paragraph_count(self) -> int:
        return sum(len(section.paragraphs) for section in self.sections)


RawFragment = Mapping[str, Any]
RawPage = Sequence[RawFragment]

__all__ = [
    "Alignment",
    "DEFAULT_ALIGNMENT",
    "DEFAULT_COLOR_HEX",
    "DEFAULT_FONT_FAMILY",
    "DEFAULT_FONT_SIZE_HALF_POINTS",
    "DefaultRunStyle",
    "DocumentModel",
    "OutputParagraph",
    "Page",
    "PageBreak",
    "Paragraph",
    "RawFragment",
    "RawPage",
    "Section",
    "SectionElement",
    "Spacing",
    "Style",
    "TextFragment",
    "TextRun",
]
