"""Utility helpers for pdfword."""
from __future__ import annotations

import logging
import os
from contextlib import contextmanager
from datetime import datetime, timezone
from pathlib import Path
from typing import Iterator, Union

PathLike = Union[str, os.PathLike[str]]

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
DOCX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.wordprocessingml.document"


def configure_logging(level: str | int = logging.INFO) -> None:
    """Configure package-wide logging."""
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.INFO
    logging.basicConfig(level=level, format=LOG_FORMAT)


def to_path(path: PathLike) -> Path:
    """Normalize an input path to :class:`Path`."""
    return Path(path).expanduser().resolve()


def ensure_output_directory(path: Path) -> None:
    """Ensure the parent directory of ``path`` exists."""
    path.parent.mkdir(parents=True, exist_ok=True)


@contextmanager
def time_block(logger: logging.Logger, message: str) -> Iterator[None]:
    """Context manager that logs the execution time of a code block."""
    start = datetime.now(tz=timezone.utc)
    logger.debug("Starting %s", message)
    try:
        yield
    finally:
        end = datetime.now(tz=timezone.utc)
        elapsed = (end - start).total_seconds()
        logger.info("%s completed in %.2fs", message, elapsed)


def docx_filename(filename: str | None, default: str = "document.docx") -> str:
    """Derive the output filename by swapping a ``.pdf`` suffix for ``.docx``.

    Only the basename of ``filename`` is kept so client supplied directory
    components never reach the response headers.
    """
    if not filename:
        return default
    name = Path(filename).name
    if not name:
        return default
    if name.lower().endswith(".pdf"):
        return name[: -len(".pdf")] + ".docx"
    return f"{name}.docx"


def safe_filename(filename: str | None, default: str) -> str:
    """Return a filesystem-safe filename derived from user input."""
    if not filename:
        return default
    candidate = Path(filename).name
    return candidate or default
