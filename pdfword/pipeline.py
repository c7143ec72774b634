"""Conversion pipeline orchestrating PDF → DOCX stages."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Callable, Sequence

from .assembler import assemble_page
from .builder import build_document
from .exceptions import ConversionError, PdfWordError
from .extractor import ExtractionStats, extract_fragments
from .parser import ParseResult, parse_pdf
from .serializer import serialize_document
from .types import DocumentModel, Page, RawPage, TextFragment
from .utils import PathLike, ensure_output_directory, time_block, to_path

__all__ = [
    "ConversionPipeline",
    "ConversionResult",
    "ConversionStage",
    "convert_pdf_bytes",
    "convert_pdf_to_docx",
]

LOGGER = logging.getLogger(__name__)


class ConversionStage(str, Enum):
    IDLE = "idle"
    PARSING = "parsing"
    EXTRACTING = "extracting"
    ASSEMBLING = "assembling"
    BUILDING = "building"
    SERIALIZING = "serializing"
    DONE = "done"
    FAILED = "failed"


_ORDER: Sequence[ConversionStage] = (
    ConversionStage.IDLE,
    ConversionStage.PARSING,
    ConversionStage.EXTRACTING,
    ConversionStage.ASSEMBLING,
    ConversionStage.BUILDING,
    ConversionStage.SERIALIZING,
    ConversionStage.DONE,
)


@dataclass(frozen=True, slots=True)
class ConversionResult:
    """Summary of a successful conversion."""

    content: bytes
    page_count: int
    paragraph_count: int
    skipped_fragments: int
    stages: tuple[ConversionStage, ...]


@dataclass(slots=True)
class PipelineState:
    """Holds intermediate data for a single conversion."""

    stage: ConversionStage = ConversionStage.IDLE
    history: list[ConversionStage] = field(default_factory=lambda: [ConversionStage.IDLE])
    raw_pages: tuple[RawPage, ...] = ()
    fragments: list[list[TextFragment]] = field(default_factory=list)
    pages: list[Page] = field(default_factory=list)
    document: DocumentModel | None = None
    stats: ExtractionStats = field(default_factory=ExtractionStats)

    def advance(self, stage: ConversionStage) -> None:
        if self.stage is ConversionStage.FAILED:
            raise RuntimeError("Cannot advance a failed conversion")
        expected = _ORDER[_ORDER.index(self.stage) + 1]
        if stage is not expected:
            raise RuntimeError(f"Invalid stage transition {self.stage.value} -> {stage.value}")
        self.stage = stage
        self.history.append(stage)

    def fail(self) -> None:
        self.stage = ConversionStage.FAILED
        self.history.append(ConversionStage.FAILED)


class ConversionPipeline:
    """Runs one PDF → DOCX conversion through its sequential stages.

    A pipeline instance is cheap and holds no state between runs; each call to
    :meth:`run` works on a fresh :class:`PipelineState`. Any stage failure
    moves the state to ``FAILED`` and propagates the originating error.
    """

    def __init__(
        self,
        parser: Callable[[bytes], ParseResult] = parse_pdf,
        serializer: Callable[[DocumentModel], bytes] = serialize_document,
    ) -> None:
        self.parser = parser
        self.serializer = serializer
        self.last_state: PipelineState | None = None

    def run(self, data: bytes) -> ConversionResult:
        state = PipelineState()
        self.last_state = state
        try:
            with time_block(LOGGER, "PDF to DOCX conversion"):
                self._parse(state, data)
                self._extract(state)
                self._assemble(state)
                self._build(state)
                content = self._serialize(state)
        except PdfWordError as exc:
            state.fail()
            LOGGER.error("Conversion failed during %s: %s", state.history[-2].value, exc)
            raise
        except Exception as exc:
            state.fail()
            LOGGER.exception("Unexpected conversion failure during %s", state.history[-2].value)
            raise ConversionError(str(exc)) from exc

        state.advance(ConversionStage.DONE)
        assert state.document is not None
        return ConversionResult(
            content=content,
            page_count=len(state.pages),
            paragraph_count=state.document.paragraph_count,
            skipped_fragments=state.stats.skipped,
            stages=tuple(state.history),
        )

    # ------------------------------------------------------------------
    # Stage helpers
    # ------------------------------------------------------------------
    def _parse(self, state: PipelineState, data: bytes) -> None:
        state.advance(ConversionStage.PARSING)
        LOGGER.info("Starting PDF parsing (%d bytes)", len(data))
        state.raw_pages = self.parser(data).unwrap()

    def _extract(self, state: PipelineState) -> None:
        state.advance(ConversionStage.EXTRACTING)
        state.fragments = [extract_fragments(page, state.stats) for page in state.raw_pages]
        if state.stats.skipped:
            LOGGER.warning("Skipped %d undecodable text fragments", state.stats.skipped)

    def _assemble(self, state: PipelineState) -> None:
        state.advance(ConversionStage.ASSEMBLING)
        state.pages = [assemble_page(fragments) for fragments in state.fragments]

    def _build(self, state: PipelineState) -> None:
        state.advance(ConversionStage.BUILDING)
        state.document = build_document(state.pages)
        LOGGER.info(
            "PDF content extracted: %d pages, %d paragraphs",
            len(state.pages),
            state.document.paragraph_count,
        )

    def _serialize(self, state: PipelineState) -> bytes:
        state.advance(ConversionStage.SERIALIZING)
        assert state.document is not None
        LOGGER.info("Generating Word document")
        return self.serializer(state.document)


def convert_pdf_bytes(data: bytes) -> bytes:
    """Convert PDF ``data`` and return the DOCX bytes."""
    return ConversionPipeline().run(data).content


def convert_pdf_to_docx(input_path: PathLike, output_path: PathLike) -> Path:
    """Convert the PDF at ``input_path`` and write the DOCX to ``output_path``."""
    source = to_path(input_path)
    destination = to_path(output_path)
    ensure_output_directory(destination)

    LOGGER.info("Starting conversion: %s -> %s", source, destination)
    result = ConversionPipeline().run(source.read_bytes())
    destination.write_bytes(result.content)
    LOGGER.info("Conversion completed: %s", destination)
    return destination
