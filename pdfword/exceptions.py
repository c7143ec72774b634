"""Custom exceptions for pdfword."""
from __future__ import annotations


class PdfWordError(RuntimeError):
    """Base class for all pdfword exceptions.

    ``status_code`` is the HTTP status the API layer reports for the error.
    """

    status_code: int = 500
    message: str = "PDF processing failed"

    def __init__(self, reason: str | None = None) -> None:
        super().__init__(reason or self.message)
        self.reason = reason or self.message


class InvalidPDFError(PdfWordError):
    """Raised when the provided bytes cannot be parsed as a PDF document."""

    status_code = 400
    message = "Invalid or unreadable PDF"


class MissingFileError(PdfWordError):
    """Raised when a request does not carry the expected upload."""

    status_code = 400
    message = "Please provide a PDF file"


class UploadTooLargeError(PdfWordError):
    """Raised when an upload exceeds the configured size limit."""

    status_code = 413
    message = "Uploaded file is too large"


class NoContentExtractedError(PdfWordError):
    """Raised when parsing succeeds but no text could be recovered."""

    status_code = 422
    message = "No content could be extracted from the PDF"


class SerializationError(PdfWordError):
    """Raised when the DOCX package cannot be generated."""

    message = "Failed to generate the Word document"


class ConversionError(PdfWordError):
    """Raised when any other conversion stage fails."""

    message = "Failed to convert PDF to Word"
