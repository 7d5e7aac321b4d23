"""Text normalization utilities for scanner findings."""

from __future__ import annotations

import re

_LEADING_PUNCTUATION = re.compile(r"^[:\s-]+")
_WHITESPACE = re.compile(r"\s+")

FINDING_TEXT_LIMIT = 200
ELLIPSIS = "..."


def collapse_whitespace(text: str) -> str:
    """Return ``text`` with runs of whitespace collapsed to single spaces and trimmed."""
    return _WHITESPACE.sub(" ", text).strip()


def marker_text(line: str, tail: str, *, limit: int = FINDING_TEXT_LIMIT) -> str:
    """Build the display text for a marker found on ``line``.

    Args:
        line: Full source line containing the marker.
        tail: Portion of the line after the marker.
        limit: Maximum characters kept before the ellipsis is appended.

    Returns:
        str: The tail stripped of leading ``:``/``-``/whitespace, or the whole
        line when the tail is empty, whitespace-collapsed and capped at ``limit``
        characters followed by ``...``.
    """

    text = _LEADING_PUNCTUATION.sub("", tail).strip()
    if not text:
        text = line.strip()
    text = collapse_whitespace(text)
    if len(text) > limit:
        return text[:limit] + ELLIPSIS
    return text


__all__ = ["FINDING_TEXT_LIMIT", "ELLIPSIS", "collapse_whitespace", "marker_text"]
