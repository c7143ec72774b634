"""Map assembled pages onto the output document model."""
from __future__ import annotations

import logging
from typing import Sequence

from .exceptions import NoContentExtractedError
from .types import (
    DEFAULT_ALIGNMENT,
    DefaultRunStyle,
    DocumentModel,
    OutputParagraph,
    Page,
    PageBreak,
    Paragraph,
    Section,
    SectionElement,
    Spacing,
    TextFragment,
    TextRun,
)

__all__ = ["DocumentBuilder", "build_document", "fragment_to_run", "paragraph_to_output"]

LOGGER = logging.getLogger(__name__)

LINE_SPACING = Spacing(before=0, after=0, line=240, line_rule="atLeast")


def fragment_to_run(fragment: TextFragment) -> TextRun:
    style = fragment.style
    return TextRun(
        text=fragment.text,
        bold=style.bold,
        italic=style.italic,
        size=style.font_size_half_points,
        font=style.font_family,
        color=style.color_hex,
    )


def paragraph_to_output(paragraph: Paragraph) -> OutputParagraph:
    """Convert one line paragraph, one run per fragment.

    Alignment follows the first fragment only.
    """
    runs = tuple(fragment_to_run(fragment) for fragment in paragraph.fragments)
    alignment = paragraph.fragments[0].style.alignment if paragraph.fragments else DEFAULT_ALIGNMENT
    return OutputParagraph(runs=runs, alignment=alignment, spacing=LINE_SPACING)


class DocumentBuilder:
    """Accumulate pages and build a :class:`DocumentModel`."""

    def __init__(self, default_run: DefaultRunStyle | None = None) -> None:
        self.default_run = default_run or DefaultRunStyle()
        self._sections: list[Section] = []
        self._has_content = False

    def add_page(self, page: Page) -> Section:
        elements: list[SectionElement] = []
        if self._sections:
            elements.append(PageBreak())
        elements.extend(paragraph_to_output(paragraph) for paragraph in page.paragraphs)
        section = Section(elements=tuple(elements))
        self._sections.append(section)
        self._has_content = self._has_content or not page.is_empty
        LOGGER.debug(
            "Built section %d with %d paragraphs", len(self._sections), len(page.paragraphs)
        )
        return section

    def build(self) -> DocumentModel:
        if not self._sections or not self._has_content:
            raise NoContentExtractedError()
        return DocumentModel(sections=tuple(self._sections), default_run=self.default_run)


def build_document(pages: Sequence[Page]) -> DocumentModel:
    """Build the output model for ``pages``.

    Raises:
        NoContentExtractedError: If there are no pages or none carries text.
    """
    builder = DocumentBuilder()
    for page in pages:
        builder.add_page(page)
    return builder.build()
