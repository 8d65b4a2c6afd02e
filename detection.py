"""Classify backend `/version` responses into known service variants."""

from __future__ import annotations

from typing import Optional, Tuple

from bs4 import BeautifulSoup
from bs4.builder import ParserRejectedMarkup

from constants import (
    EXTENDED_MARKER_REGEX,
    INFO_CARD_REGEX,
    SCRIPT_FRAGMENT_REGEX,
    SNIPPET_LIMIT,
    TAG_REGEX,
    VERSION_REGEX,
    WHITESPACE_REGEX,
)
from models import BackendInfo, Variant

__all__ = [
    "strip_html",
    "compact_snippet",
    "parse_extended_info",
    "detect_backend",
]

_LABEL_KEYS = {
    "version": "version",
    "build": "build",
    "build date": "build_date",
}


def strip_html(value: str) -> str:
    """Reduce an HTML fragment to plain text with no angle brackets left.

    Script-like elements are dropped structurally first. The regex passes
    that follow run on the extracted text as well, since entity-decoded
    text can reintroduce markup.
    """
    try:
        soup = BeautifulSoup(value, "html.parser")
    except ParserRejectedMarkup:
        text = value
    else:
        for tag in soup(["script", "style", "noscript", "template"]):
            tag.decompose()
        text = soup.get_text()
    cleaned = WHITESPACE_REGEX.sub(" ", text)

    previous = None
    while cleaned != previous:
        previous = cleaned
        cleaned = SCRIPT_FRAGMENT_REGEX.sub("", cleaned)

    cleaned = TAG_REGEX.sub("", cleaned)
    cleaned = cleaned.replace("<", "").replace(">", "")
    return cleaned.strip()


def compact_snippet(text: str, limit: int = SNIPPET_LIMIT) -> str:
    """Collapse whitespace and cut to `limit` characters with a trailing ellipsis."""
    compact = WHITESPACE_REGEX.sub(" ", text).strip()
    if len(compact) > limit:
        return compact[:limit] + "..."
    return compact


def parse_extended_info(text: str) -> Optional[BackendInfo]:
    """Extract Version/Build/Build Date info cards from an extended backend page.

    Returns None unless the marker is present and at least one field
    carries a value.
    """
    if not EXTENDED_MARKER_REGEX.search(text):
        return None

    info: BackendInfo = {}
    for match in INFO_CARD_REGEX.finditer(text):
        key = _LABEL_KEYS.get(match.group(1).strip().lower())
        value = strip_html(match.group(2))
        if key is None or not value:
            continue
        info[key] = value  # type: ignore[literal-required]

    if not info:
        return None
    return info


def detect_backend(text: str) -> Tuple[Variant, BackendInfo]:
    """Run the Extended -> Standard -> Unknown cascade over a response body."""
    extended = parse_extended_info(text)
    if extended is not None:
        return Variant.EXTENDED, extended

    trimmed = text.strip()
    if VERSION_REGEX.match(trimmed) or "subconverter" in trimmed.lower():
        return Variant.STANDARD, {"version": trimmed}

    return Variant.UNKNOWN, {"snippet": compact_snippet(trimmed)}
