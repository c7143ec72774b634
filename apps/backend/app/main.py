"""FastAPI application exposing the pdfword conversion tools."""

from __future__ import annotations

import logging
import traceback
from datetime import datetime, timezone
from typing import List
from urllib.parse import quote

from fastapi import FastAPI, File, HTTPException, Request, UploadFile
from fastapi.concurrency import run_in_threadpool
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response
from pydantic import BaseModel
from starlette.exceptions import HTTPException as StarletteHTTPException

from pdfword import ConversionPipeline, ConversionResult, compress_pdf_bytes, merge_pdf_bytes
from pdfword.config import load_settings
from pdfword.exceptions import MissingFileError, PdfWordError, UploadTooLargeError
from pdfword.utils import DOCX_MEDIA_TYPE, configure_logging, docx_filename, safe_filename

LOGGER = logging.getLogger("pdfword.api")

settings = load_settings()
configure_logging(settings.log_level)

app = FastAPI(title="pdfword API", version="0.1.0")
API_PREFIX = "/api"
PDF_PREFIX = f"{API_PREFIX}/pdf"

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["GET", "HEAD", "PUT", "PATCH", "POST", "DELETE", "OPTIONS"],
    allow_headers=["Content-Type", "Authorization", "Origin", "Accept"],
)


class ErrorResponse(BaseModel):
    """JSON body returned for every failed request."""

    message: str
    error: str
    details: str | None = None


def _error_response(
    status_code: int,
    message: str,
    error: str,
    *,
    exc: BaseException | None = None,
    extra: dict[str, object] | None = None,
) -> JSONResponse:
    details = None
    if settings.debug and exc is not None:
        details = "".join(traceback.format_exception(type(exc), exc, exc.__traceback__))
    body = ErrorResponse(message=message, error=error, details=details).model_dump(exclude_none=True)
    if extra:
        body.update(extra)
    return JSONResponse(status_code=status_code, content=body)


def _content_disposition(filename: str) -> str:
    """Build an ``attachment`` header value that survives non-ASCII names."""

    if filename.isascii():
        return f'attachment; filename="{filename}"'
    return f"attachment; filename*=utf-8''{quote(filename)}"


async def _read_upload(upload: UploadFile | None) -> bytes:
    """Read ``upload`` into memory enforcing the configured size limit."""

    if upload is None:
        raise MissingFileError("No file was uploaded in the 'file' field")

    limit = settings.max_upload_bytes
    if upload.size is not None and upload.size > limit:
        raise UploadTooLargeError(f"File '{upload.filename}' exceeds the {limit} byte limit")

    contents = await upload.read(limit + 1)
    if len(contents) > limit:
        raise UploadTooLargeError(f"File '{upload.filename}' exceeds the {limit} byte limit")
    if not contents:
        raise MissingFileError(f"File '{upload.filename}' is empty")
    return contents


@app.middleware("http")
async def log_requests(request: Request, call_next):
    LOGGER.info("%s %s", request.method, request.url.path)
    return await call_next(request)


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    if exc.status_code == 404:
        return _error_response(
            404,
            "Route not found",
            str(exc.detail),
            extra={"path": request.url.path, "method": request.method},
        )
    return _error_response(exc.status_code, str(exc.detail), str(exc.detail))


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    messages = "; ".join(str(error.get("msg", error)) for error in exc.errors())
    return _error_response(400, "Validation Error", messages or "Invalid request")


@app.get("/health", response_class=JSONResponse)
async def health() -> dict[str, str]:
    """Lightweight health endpoint for uptime checks."""
    return {"status": "ok"}


@app.get(f"{API_PREFIX}/test")
async def api_test() -> dict[str, str]:
    return {
        "message": "API is working",
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }


@app.post(
    f"{PDF_PREFIX}/to-word",
    summary="Convert a PDF document to DOCX",
    response_description="DOCX document rebuilt from the uploaded PDF.",
    responses={400: {"model": ErrorResponse}, 413: {"model": ErrorResponse}, 422: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)
async def convert_pdf_to_word(
    file: UploadFile | None = File(None, description="Source PDF to convert."),
) -> Response:
    """Convert an uploaded PDF into a Word document.

    Text is rebuilt line by line with per-run font, size, weight, slant and
    color; each PDF page becomes its own section behind a page break.
    """

    message = "Failed to convert PDF to Word"
    try:
        contents = await _read_upload(file)
        LOGGER.info("Starting PDF to Word conversion: %s (%d bytes)", file.filename, len(contents))
        result = await run_in_threadpool(_perform_pdf_to_docx_conversion, contents)
    except MissingFileError as exc:
        return _error_response(exc.status_code, "Please provide a PDF file", exc.reason, exc=exc)
    except PdfWordError as exc:
        return _error_response(exc.status_code, message, exc.reason, exc=exc)
    except Exception as exc:  # pragma: no cover
        LOGGER.exception("Error in PDF to Word conversion")
        return _error_response(500, message, str(exc), exc=exc)

    headers = {
        "Content-Disposition": _content_disposition(docx_filename(file.filename)),
        "X-Pdfword-Page-Count": str(result.page_count),
        "X-Pdfword-Paragraph-Count": str(result.paragraph_count),
        "X-Pdfword-Skipped-Fragments": str(result.skipped_fragments),
    }
    return Response(content=result.content, media_type=DOCX_MEDIA_TYPE, headers=headers)


@app.post(
    f"{PDF_PREFIX}/merge",
    summary="Merge PDF documents",
    response_description="PDF containing every page of the uploads in order.",
    responses={400: {"model": ErrorResponse}, 413: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)
async def merge_documents(
    files: List[UploadFile] | None = File(None, description="PDF files to merge"),
) -> Response:
    """Merge two or more uploaded PDFs into a single document."""

    message = "Failed to merge PDFs"
    uploads = files or []
    if len(uploads) < 2:
        return _error_response(400, "Please provide at least 2 PDF files", f"Received {len(uploads)} file(s)")
    if len(uploads) > settings.max_files:
        return _error_response(
            400, f"Please provide at most {settings.max_files} PDF files", f"Received {len(uploads)} files"
        )

    try:
        buffers = [await _read_upload(upload) for upload in uploads]
        payload = await run_in_threadpool(merge_pdf_bytes, buffers)
    except PdfWordError as exc:
        return _error_response(exc.status_code, message, exc.reason, exc=exc)
    except Exception as exc:  # pragma: no cover
        LOGGER.exception("Error merging PDFs")
        return _error_response(500, message, str(exc), exc=exc)

    return Response(
        content=payload,
        media_type="application/pdf",
        headers={"Content-Disposition": _content_disposition("merged.pdf")},
    )


@app.post(
    f"{PDF_PREFIX}/compress",
    summary="Compress a PDF document",
    response_description="PDF rewritten with compressed content streams.",
    responses={400: {"model": ErrorResponse}, 413: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)
async def compress_document(
    file: UploadFile | None = File(None, description="Source PDF to compress."),
) -> Response:
    """Rewrite an uploaded PDF with compressed content streams."""

    message = "Failed to compress PDF"
    try:
        contents = await _read_upload(file)
        payload = await run_in_threadpool(compress_pdf_bytes, contents)
    except MissingFileError as exc:
        return _error_response(exc.status_code, "Please provide a PDF file", exc.reason, exc=exc)
    except PdfWordError as exc:
        return _error_response(exc.status_code, message, exc.reason, exc=exc)
    except Exception as exc:  # pragma: no cover
        LOGGER.exception("Error compressing PDF")
        return _error_response(500, message, str(exc), exc=exc)

    filename = f"compressed_{safe_filename(file.filename, 'document.pdf')}"
    return Response(
        content=payload,
        media_type="application/pdf",
        headers={"Content-Disposition": _content_disposition(filename)},
    )


__all__ = ["app"]


def _perform_pdf_to_docx_conversion(contents: bytes) -> ConversionResult:
    """Run the conversion pipeline for one request.

    Each call builds its own :class:`ConversionPipeline`, so concurrent
    requests never share parser or document state.
    """

    return ConversionPipeline().run(contents)
