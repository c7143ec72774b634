"""Package a :class:`DocumentModel` into DOCX bytes using python-docx."""
from __future__ import annotations

import logging
from io import BytesIO

from docx import Document
from docx.enum.text import WD_ALIGN_PARAGRAPH, WD_LINE_SPACING
from docx.shared import Pt, RGBColor, Twips

from .exceptions import SerializationError
from .types import DocumentModel, OutputParagraph, PageBreak, TextRun

__all__ = ["serialize_document"]

LOGGER = logging.getLogger(__name__)

_ALIGNMENTS = {
    "left": WD_ALIGN_PARAGRAPH.LEFT,
    "center": WD_ALIGN_PARAGRAPH.CENTER,
    "right": WD_ALIGN_PARAGRAPH.RIGHT,
    "justify": WD_ALIGN_PARAGRAPH.JUSTIFY,
}

_LINE_RULES = {
    "atLeast": WD_LINE_SPACING.AT_LEAST,
    "exact": WD_LINE_SPACING.EXACTLY,
}


def _half_points(value: int) -> Pt:
    return Pt(value / 2)


def _apply_run(run, source: TextRun) -> None:
    run.bold = source.bold
    run.italic = source.italic
    run.font.size = _half_points(source.size)
    run.font.name = source.font
    run.font.color.rgb = RGBColor.from_string(source.color.upper())


def _write_paragraph(document, source: OutputParagraph) -> None:
    paragraph = document.add_paragraph()
    fmt = paragraph.paragraph_format
    fmt.space_before = Twips(source.spacing.before)
    fmt.space_after = Twips(source.spacing.after)
    fmt.line_spacing = Twips(source.spacing.line)
    rule = _LINE_RULES.get(source.spacing.line_rule)
    if rule is not None:
        fmt.line_spacing_rule = rule
    paragraph.alignment = _ALIGNMENTS.get(source.alignment, WD_ALIGN_PARAGRAPH.LEFT)
    for item in source.runs:
        _apply_run(paragraph.add_run(item.text), item)


def _write_page_break(document) -> None:
    paragraph = document.add_paragraph()
    paragraph.paragraph_format.page_break_before = True


def serialize_document(model: DocumentModel) -> bytes:
    """Render ``model`` as a DOCX package and return its bytes.

    Every model section is written into the single Word body in order; the
    page-break marker at the head of each later section is what starts a new
    page.

    Raises:
        SerializationError: If python-docx fails to build or save the package.
    """
    try:
        document = Document()
        normal = document.styles["Normal"].font
        normal.name = model.default_run.font
        normal.size = _half_points(model.default_run.size)

        for section in model.sections:
            for element in section.elements:
                if isinstance(element, PageBreak):
                    _write_page_break(document)
                else:
                    _write_paragraph(document, element)

        buffer = BytesIO()
        document.save(buffer)
    except Exception as exc:
        LOGGER.error("DOCX serialization failed: %s", exc)
        raise SerializationError(f"Failed to generate Word document: {exc}") from exc

    payload = buffer.getvalue()
    LOGGER.debug("Serialized %d sections into %d bytes", len(model.sections), len(payload))
    return payload
