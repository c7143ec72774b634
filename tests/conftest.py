from __future__ import annotations

from pathlib import Path
from typing import Callable, Mapping, Sequence
import sys

import pytest
from pypdf import PdfWriter
from pypdf.generic import (
    ArrayObject,
    DictionaryObject,
    FloatObject,
    NameObject,
    NumberObject,
    StreamObject,
)

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

# (text, x, y, base font, size, (r, g, b)) in PDF user space, origin bottom-left.
TextItem = tuple[str, float, float, str, float, tuple[float, float, float]]


def text_item(
    text: str,
    x: float,
    y: float,
    *,
    font: str = "Helvetica",
    size: float = 12,
    color: tuple[float, float, float] = (0, 0, 0),
) -> TextItem:
    return (text, x, y, font, size, color)


def _escape(text: str) -> str:
    return text.replace("\\", r"\\").replace("(", r"\(").replace(")", r"\)")


def _font_object(writer: PdfWriter, base_font: str, widths: float | None = None):
    font_dict = DictionaryObject(
        {
            NameObject("/Type"): NameObject("/Font"),
            NameObject("/Subtype"): NameObject("/Type1"),
            NameObject("/BaseFont"): NameObject(f"/{base_font}"),
        }
    )
    if widths is not None:
        font_dict[NameObject("/FirstChar")] = NumberObject(32)
        font_dict[NameObject("/LastChar")] = NumberObject(126)
        font_dict[NameObject("/Widths")] = ArrayObject([FloatObject(widths)] * 95)
    return writer._add_object(font_dict)


def _attach_content(writer: PdfWriter, page, fonts: DictionaryObject, content: str) -> None:
    page[NameObject("/Resources")] = DictionaryObject({NameObject("/Font"): fonts})
    content_bytes = content.encode("latin-1")
    stream = StreamObject()
    stream[NameObject("/Length")] = NumberObject(len(content_bytes))
    stream._data = content_bytes
    page[NameObject("/Contents")] = writer._add_object(stream)


def write_pdf(path: Path, pages: Sequence[Sequence[TextItem]], *, size: float = 200) -> Path:
    writer = PdfWriter()
    for items in pages:
        page = writer.add_blank_page(width=size, height=size)
        fonts = DictionaryObject()
        font_keys: dict[str, str] = {}
        operations: list[str] = []
        for text, x, y, font, font_size, (red, green, blue) in items:
            key = font_keys.get(font)
            if key is None:
                key = f"/F{len(font_keys) + 1}"
                font_keys[font] = key
                fonts[NameObject(key)] = _font_object(writer, font)
            operations.append(
                f"{red} {green} {blue} rg BT {key} {font_size} Tf {x} {y} Td ({_escape(text)}) Tj ET"
            )
        _attach_content(writer, page, fonts, " ".join(operations))
    with path.open("wb") as handle:
        writer.write(handle)
    return path


def write_content_pdf(
    path: Path,
    content: str,
    fonts: Mapping[str, str],
    *,
    widths: float | None = None,
    size: float = 200,
) -> Path:
    """Write a one page PDF with a hand-written content stream.

    ``fonts`` maps resource names such as ``"/F1"`` to base font names; with
    ``widths`` every font gets a uniform ``/Widths`` array.
    """
    writer = PdfWriter()
    page = writer.add_blank_page(width=size, height=size)
    resources = DictionaryObject()
    for key, base_font in fonts.items():
        resources[NameObject(key)] = _font_object(writer, base_font, widths)
    _attach_content(writer, page, resources, content)
    with path.open("wb") as handle:
        writer.write(handle)
    return path


@pytest.fixture()
def pdf_factory(tmp_path: Path) -> Callable[..., Path]:
    def _create(pages: Sequence[Sequence[TextItem]], filename: str = "document.pdf") -> Path:
        return write_pdf(tmp_path / filename, pages)

    return _create


@pytest.fixture()
def sample_pdf(pdf_factory: Callable[..., Path]) -> Path:
    return pdf_factory(
        [
            [text_item("First page", 72, 150), text_item("Second line", 72, 100)],
            [text_item("Page two", 72, 150, font="Helvetica-Bold", color=(1, 0, 0))],
            [text_item("Page three", 72, 150, font="Helvetica-Oblique", size=18)],
        ],
        filename="sample.pdf",
    )


@pytest.fixture()
def blank_pdf(tmp_path: Path) -> Path:
    pdf_path = tmp_path / "blank.pdf"
    writer = PdfWriter()
    for _ in range(3):
        writer.add_blank_page(width=200, height=200)
    with pdf_path.open("wb") as stream:
        writer.write(stream)
    return pdf_path
