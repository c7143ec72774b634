from __future__ import annotations

from io import BytesIO
from pathlib import Path

import pytest
from docx import Document
from fastapi.testclient import TestClient
from pypdf import PdfReader

from apps.backend.app import main
from apps.backend.app.main import app
from pdfword.config import Settings

DOCX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.wordprocessingml.document"

client = TestClient(app)


def _upload(path: Path, name: str | None = None) -> dict[str, tuple[str, bytes, str]]:
    return {"file": (name or path.name, path.read_bytes(), "application/pdf")}


def test_pdf_to_word_conversion_endpoint(sample_pdf: Path) -> None:
    response = client.post("/api/pdf/to-word", files=_upload(sample_pdf))

    assert response.status_code == 200
    assert response.headers.get("content-type") == DOCX_MEDIA_TYPE
    disposition = response.headers.get("content-disposition", "")
    assert "sample.docx" in disposition
    assert response.headers.get("x-pdfword-page-count") == "3"
    assert response.content[:2] == b"PK"

    document = Document(BytesIO(response.content))
    assert document.paragraphs[0].text == "First page"


def test_filename_keeps_stem_and_swaps_extension(sample_pdf: Path) -> None:
    response = client.post("/api/pdf/to-word", files=_upload(sample_pdf, "Lecture.Notes.PDF"))

    assert response.status_code == 200
    assert 'filename="Lecture.Notes.docx"' in response.headers["content-disposition"]


def test_missing_file_is_a_bad_request() -> None:
    response = client.post("/api/pdf/to-word")

    assert response.status_code == 400
    body = response.json()
    assert body["message"] == "Please provide a PDF file"
    assert body["error"]


def test_non_pdf_upload_is_rejected() -> None:
    files = {"file": ("notes.pdf", b"definitely not a pdf", "application/pdf")}

    response = client.post("/api/pdf/to-word", files=files)

    assert response.status_code == 400
    body = response.json()
    assert body["message"] == "Failed to convert PDF to Word"
    assert "not a PDF" in body["error"]
    assert "details" not in body


def test_pdf_without_text_is_a_content_error(blank_pdf: Path) -> None:
    response = client.post("/api/pdf/to-word", files=_upload(blank_pdf))

    assert response.status_code == 422
    assert response.json()["error"] == "No content could be extracted from the PDF"


def test_upload_limit(sample_pdf: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(main, "settings", Settings(max_upload_bytes=64))

    response = client.post("/api/pdf/to-word", files=_upload(sample_pdf))

    assert response.status_code == 413


def test_debug_mode_includes_details(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(main, "settings", Settings(debug=True))
    files = {"file": ("bad.pdf", b"plain text upload", "application/pdf")}

    response = client.post("/api/pdf/to-word", files=files)

    assert response.status_code == 400
    assert "Traceback" in response.json()["details"]


def test_merge_endpoint(sample_pdf: Path, blank_pdf: Path) -> None:
    files = [
        ("files", ("a.pdf", sample_pdf.read_bytes(), "application/pdf")),
        ("files", ("b.pdf", blank_pdf.read_bytes(), "application/pdf")),
    ]

    response = client.post("/api/pdf/merge", files=files)

    assert response.status_code == 200
    assert response.headers["content-type"] == "application/pdf"
    assert "merged.pdf" in response.headers["content-disposition"]
    assert len(PdfReader(BytesIO(response.content)).pages) == 6


def test_merge_requires_two_files(sample_pdf: Path) -> None:
    files = [("files", ("a.pdf", sample_pdf.read_bytes(), "application/pdf"))]

    response = client.post("/api/pdf/merge", files=files)

    assert response.status_code == 400
    assert response.json()["message"] == "Please provide at least 2 PDF files"


def test_compress_endpoint(sample_pdf: Path) -> None:
    response = client.post("/api/pdf/compress", files=_upload(sample_pdf))

    assert response.status_code == 200
    assert "compressed_sample.pdf" in response.headers["content-disposition"]
    assert len(PdfReader(BytesIO(response.content)).pages) == 3


def test_api_test_and_health_routes() -> None:
    assert client.get("/health").json() == {"status": "ok"}
    body = client.get("/api/test").json()
    assert body["message"] == "API is working"
    assert "timestamp" in body


def test_unknown_route_returns_json_404() -> None:
    response = client.get("/api/nope")

    assert response.status_code == 404
    body = response.json()
    assert body["message"] == "Route not found"
    assert body["path"] == "/api/nope"
    assert body["method"] == "GET"
