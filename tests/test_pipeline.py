from __future__ import annotations

from io import BytesIO
from pathlib import Path
from typing import Callable
from unittest.mock import MagicMock

import pytest
from docx import Document

from conftest import text_item
from pdfword.exceptions import ConversionError, InvalidPDFError, NoContentExtractedError, SerializationError
from pdfword.parser import ParseResult
from pdfword.pipeline import ConversionPipeline, ConversionStage, convert_pdf_bytes, convert_pdf_to_docx

FULL_RUN = (
    ConversionStage.IDLE,
    ConversionStage.PARSING,
    ConversionStage.EXTRACTING,
    ConversionStage.ASSEMBLING,
    ConversionStage.BUILDING,
    ConversionStage.SERIALIZING,
    ConversionStage.DONE,
)


def _raw(text: str, x: float, y: float) -> dict[str, object]:
    return {"x": x, "y": y, "R": [{"T": text, "TS": [1, 0, 0, 0]}]}


def _parser(*pages: list[dict[str, object]]) -> Callable[[bytes], ParseResult]:
    return lambda data: ParseResult.success(pages)


def test_stages_run_in_order() -> None:
    pipeline = ConversionPipeline(parser=_parser([_raw("Hi", 0, 0)]))
    result = pipeline.run(b"%PDF-")

    assert result.stages == FULL_RUN
    assert result.page_count == 1
    assert result.paragraph_count == 1
    assert result.content[:2] == b"PK"


def test_bad_fragment_is_dropped_but_siblings_convert() -> None:
    pipeline = ConversionPipeline(
        parser=_parser([_raw("kept", 0, 1), _raw("%E0%A4%A", 0, 2), _raw("also%20kept", 0, 3)])
    )
    result = pipeline.run(b"%PDF-")

    assert result.skipped_fragments == 1
    texts = [paragraph.text for paragraph in Document(BytesIO(result.content)).paragraphs]
    assert texts == ["kept", "also kept"]


def test_pages_without_text_fail_before_serialization() -> None:
    serializer = MagicMock(return_value=b"never")
    pipeline = ConversionPipeline(parser=_parser([], []), serializer=serializer)

    with pytest.raises(NoContentExtractedError):
        pipeline.run(b"%PDF-")

    serializer.assert_not_called()
    assert pipeline.last_state is not None
    assert pipeline.last_state.stage is ConversionStage.FAILED
    assert pipeline.last_state.history[-2] is ConversionStage.BUILDING


def test_fragments_that_all_fail_count_as_no_content() -> None:
    serializer = MagicMock()
    pipeline = ConversionPipeline(parser=_parser([_raw("%", 0, 0)]), serializer=serializer)

    with pytest.raises(NoContentExtractedError):
        pipeline.run(b"%PDF-")
    serializer.assert_not_called()


def test_parse_failure_is_terminal() -> None:
    pipeline = ConversionPipeline(parser=lambda data: ParseResult.failure("corrupt xref"))

    with pytest.raises(InvalidPDFError, match="corrupt xref"):
        pipeline.run(b"junk")
    assert pipeline.last_state.history == [ConversionStage.IDLE, ConversionStage.PARSING, ConversionStage.FAILED]


def test_serializer_errors_propagate() -> None:
    def explode(model):
        raise SerializationError("disk full")

    pipeline = ConversionPipeline(parser=_parser([_raw("x", 0, 0)]), serializer=explode)
    with pytest.raises(SerializationError, match="disk full"):
        pipeline.run(b"%PDF-")
    assert pipeline.last_state.history[-2] is ConversionStage.SERIALIZING


def test_unexpected_errors_are_wrapped() -> None:
    def broken(data: bytes) -> ParseResult:
        raise KeyError("Pages")

    with pytest.raises(ConversionError):
        ConversionPipeline(parser=broken).run(b"%PDF-")


def test_end_to_end_conversion(sample_pdf: Path) -> None:
    document = Document(BytesIO(convert_pdf_bytes(sample_pdf.read_bytes())))

    paragraphs = document.paragraphs
    assert [paragraph.text for paragraph in paragraphs] == [
        "First page",
        "Second line",
        "",
        "Page two",
        "",
        "Page three",
    ]
    breaks = [paragraph.paragraph_format.page_break_before for paragraph in paragraphs]
    assert breaks.count(True) == 2
    assert breaks[2] is True and breaks[4] is True

    bold_run = paragraphs[3].runs[0]
    assert bold_run.bold is True
    assert bold_run.font.name == "Helvetica"
    assert str(bold_run.font.color.rgb) == "FF0000"

    italic_run = paragraphs[5].runs[0]
    assert italic_run.italic is True
    assert italic_run.font.size.pt == 18


def test_same_line_fragments_merge_in_x_order(pdf_factory: Callable[..., Path]) -> None:
    path = pdf_factory([[text_item("World", 120, 100), text_item("Hello ", 20, 100), text_item("Below", 20, 60)]])

    document = Document(BytesIO(convert_pdf_bytes(path.read_bytes())))

    assert [paragraph.text for paragraph in document.paragraphs] == ["Hello World", "Below"]
    assert [run.text for run in document.paragraphs[0].runs] == ["Hello ", "World"]


def test_blank_pdf_is_a_content_error(blank_pdf: Path) -> None:
    with pytest.raises(NoContentExtractedError):
        convert_pdf_bytes(blank_pdf.read_bytes())


def test_convert_pdf_to_docx_writes_file(sample_pdf: Path, tmp_path: Path) -> None:
    destination = tmp_path / "out" / "sample.docx"

    result = convert_pdf_to_docx(sample_pdf, destination)

    assert result == destination.resolve()
    assert destination.read_bytes()[:2] == b"PK"
