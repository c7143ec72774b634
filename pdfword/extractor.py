"""Flatten parser fragments into decoded :class:`TextFragment` values."""
from __future__ import annotations

import logging
import math
import re
from numbers import Real
from typing import Any, Iterable, Mapping
from urllib.parse import unquote_to_bytes

from .styles import decode_style
from .types import RawFragment, TextFragment

__all__ = ["decode_uri_component", "extract_fragment", "extract_fragments", "ExtractionStats"]

LOGGER = logging.getLogger(__name__)

_MALFORMED_ESCAPE = re.compile(r"%(?![0-9A-Fa-f]{2})")


class ExtractionStats:
    """Counters collected while extracting a page."""

    __slots__ = ("extracted", "skipped")

    def __init__(self) -> None:
        self.extracted = 0
        self.skipped = 0


def decode_uri_component(value: str) -> str:
    """Percent-decode ``value`` as UTF-8, rejecting malformed input.

    Unlike :func:`urllib.parse.unquote` this raises :class:`ValueError` for a
    ``%`` that does not start a two digit escape and for byte sequences that
    are not valid UTF-8.
    """
    if _MALFORMED_ESCAPE.search(value):
        raise ValueError(f"Malformed percent escape in {value!r}")
    return unquote_to_bytes(value).decode("utf-8")


def _coordinate(raw: RawFragment, key: str) -> float:
    value = raw.get(key)
    if not isinstance(value, Real) or isinstance(value, bool) or not math.isfinite(value):
        raise ValueError(f"Fragment coordinate {key!r} is not a finite number: {value!r}")
    return float(value)


def extract_fragment(raw: RawFragment) -> TextFragment | None:
    """Decode one raw fragment, returning ``None`` when it cannot be decoded.

    The encoded runs are joined before decoding so escape sequences split
    across runs still form valid characters.
    """
    try:
        if not isinstance(raw, Mapping):
            raise TypeError(f"Fragment must be a mapping, got {type(raw).__name__}")
        runs = raw.get("R") or []
        encoded = "".join(run["T"] for run in runs)
        text = decode_uri_component(encoded)
        x = _coordinate(raw, "x")
        y = _coordinate(raw, "y")
        first_run: Any = runs[0] if runs else None
    except (KeyError, TypeError, ValueError) as exc:
        LOGGER.warning("Skipping undecodable text fragment: %s", exc)
        return None

    return TextFragment(text=text, x=x, y=y, style=decode_style(first_run))


def extract_fragments(
    raw_fragments: Iterable[RawFragment],
    stats: ExtractionStats | None = None,
) -> list[TextFragment]:
    """Decode ``raw_fragments`` in source order, dropping undecodable ones."""
    fragments: list[TextFragment] = []
    for raw in raw_fragments:
        fragment = extract_fragment(raw)
        if fragment is None:
            if stats is not None:
                stats.skipped += 1
            continue
        fragments.append(fragment)
    if stats is not None:
        stats.extracted += len(fragments)
    return fragments
