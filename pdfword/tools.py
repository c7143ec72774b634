"""Merge and compress helpers delegating to :mod:`pypdf`."""

from __future__ import annotations

import logging
from io import BytesIO
from typing import Iterable

from pypdf import PdfReader, PdfWriter

from .exceptions import InvalidPDFError

__all__ = ["compress_pdf_bytes", "merge_pdf_bytes"]

LOGGER = logging.getLogger(__name__)


def _load_reader(data: bytes, label: str) -> PdfReader:
    if not data:
        raise InvalidPDFError(f"{label} is empty")
    try:
        reader = PdfReader(BytesIO(data))
        if reader.is_encrypted:
            LOGGER.debug("Attempting to decrypt encrypted PDF %s", label)
            reader.decrypt("")
        # Touch the page tree so structural errors surface here.
        len(reader.pages)
    except Exception as exc:
        raise InvalidPDFError(f"Unable to read {label}: {exc}") from exc
    return reader


def _write(writer: PdfWriter) -> bytes:
    buffer = BytesIO()
    writer.write(buffer)
    return buffer.getvalue()


def merge_pdf_bytes(buffers: Iterable[bytes]) -> bytes:
    """Merge the PDF documents in ``buffers`` into one, preserving page order.

    Raises:
        InvalidPDFError: If fewer than two inputs are supplied or any input
            cannot be read.
    """
    documents = list(buffers)
    if len(documents) < 2:
        raise InvalidPDFError("Please provide at least 2 PDF files")

    writer = PdfWriter()
    for index, data in enumerate(documents, start=1):
        reader = _load_reader(data, f"file {index}")
        for page_index, page in enumerate(reader.pages):
            LOGGER.debug("Adding page %s from file %s", page_index, index)
            writer.add_page(page)

    return _write(writer)


def compress_pdf_bytes(data: bytes) -> bytes:
    """Rewrite ``data`` with compressed content streams and shared objects."""
    reader = _load_reader(data, "PDF")
    writer = PdfWriter()
    for page in reader.pages:
        writer.add_page(page)

    for page in writer.pages:
        try:
            page.compress_content_streams()
        except Exception as exc:  # pragma: no cover - depends on stream filters
            LOGGER.warning("Failed to compress content streams: %s", exc)

    if reader.metadata:
        cleaned = {key: value for key, value in reader.metadata.items() if value is not None}
        if cleaned:
            writer.add_metadata(cleaned)

    writer.compress_identical_objects()
    payload = _write(writer)
    LOGGER.info("Compressed PDF from %d to %d bytes", len(data), len(payload))
    return payload
