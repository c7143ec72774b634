"""Environment driven settings for the pdfword service."""
from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Mapping

MEGABYTE = 1024 * 1024

_TRUTHY = {"1", "true", "yes", "on"}


@dataclass(frozen=True)
class Settings:
    """Runtime configuration shared by the API and CLI."""

    max_upload_bytes: int = 50 * MEGABYTE
    max_files: int = 10
    debug: bool = False
    log_level: str = "INFO"


def _read_int(env: Mapping[str, str], name: str, default: int) -> int:
    raw = env.get(name)
    if raw is None or not raw.strip():
        return default
    try:
        value = int(raw)
    except ValueError as exc:
        raise ValueError(f"{name} must be an integer, got {raw!r}") from exc
    if value < 1:
        raise ValueError(f"{name} must be a positive integer, got {value}")
    return value


def load_settings(env: Mapping[str, str] | None = None) -> Settings:
    """Load :class:`Settings` from ``env`` (defaults to ``os.environ``)."""
    source = os.environ if env is None else env
    return Settings(
        max_upload_bytes=_read_int(source, "PDFWORD_MAX_UPLOAD_BYTES", Settings.max_upload_bytes),
        max_files=_read_int(source, "PDFWORD_MAX_FILES", Settings.max_files),
        debug=source.get("PDFWORD_DEBUG", "").strip().lower() in _TRUTHY,
        log_level=source.get("PDFWORD_LOG_LEVEL", Settings.log_level).strip().upper() or Settings.log_level,
    )
