"""Top-level package for pdfword.

This module exposes the public API for rebuilding PDF text, line by line and
with its fonts and colors, as a Word document.
"""
from .assembler import assemble_page
from .builder import build_document
from .exceptions import (
    ConversionError,
    InvalidPDFError,
    NoContentExtractedError,
    PdfWordError,
    SerializationError,
)
from .extractor import extract_fragments
from .parser import ParseResult, parse_pdf
from .pipeline import (
    ConversionPipeline,
    ConversionResult,
    ConversionStage,
    convert_pdf_bytes,
    convert_pdf_to_docx,
)
from .serializer import serialize_document
from .styles import decode_style
from .tools import compress_pdf_bytes, merge_pdf_bytes
from .types import DocumentModel, Page, Paragraph, Style, TextFragment

__all__ = [
    "ConversionError",
    "ConversionPipeline",
    "ConversionResult",
    "ConversionStage",
    "DocumentModel",
    "InvalidPDFError",
    "NoContentExtractedError",
    "Page",
    "Paragraph",
    "ParseResult",
    "PdfWordError",
    "SerializationError",
    "Style",
    "TextFragment",
    "assemble_page",
    "build_document",
    "compress_pdf_bytes",
    "convert_pdf_bytes",
    "convert_pdf_to_docx",
    "decode_style",
    "extract_fragments",
    "merge_pdf_bytes",
    "parse_pdf",
    "serialize_document",
]

__version__ = "0.1.0"
