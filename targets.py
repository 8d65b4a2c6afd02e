"""Resolve configured backend addresses into check targets."""

from __future__ import annotations

import os
from typing import List, Mapping, Optional, Tuple
from urllib.parse import urlsplit, urlunsplit

from constants import DEFAULT_BACKEND, MAX_BACKENDS, SCHEME_REGEX, SEPARATOR_REGEX
from models import BackendTarget

__all__ = [
    "parse_backend_list",
    "normalize_backend_target",
    "resolve_targets",
    "load_backend_targets",
]

VERSION_PATH = "/version"


def parse_backend_list(value: str) -> List[str]:
    """Split on commas and any whitespace, dropping empty tokens."""
    if not value:
        return []
    return [item for item in SEPARATOR_REGEX.split(value) if item]


def _version_path(path: str) -> str:
    if not path or path == "/":
        return VERSION_PATH
    stripped = path[:-1] if path.endswith("/") else path
    if stripped == VERSION_PATH:
        return VERSION_PATH
    return stripped + VERSION_PATH


def normalize_backend_target(raw: str) -> Tuple[str, str]:
    """Return ``(display, url)`` for a single address.

    The url is empty when the address cannot be parsed; callers drop such
    entries instead of failing the whole batch.
    """
    trimmed = raw.strip()
    if not trimmed:
        return "", ""

    candidate = trimmed if SCHEME_REGEX.match(trimmed) else f"https://{trimmed}"
    try:
        parts = urlsplit(candidate)
        # urlsplit validates the port lazily
        parts.port  # pylint: disable=pointless-statement
    except ValueError:
        return trimmed, ""

    netloc, path = parts.netloc, parts.path
    if not netloc and path:
        netloc, path = path, ""

    url = urlunsplit((parts.scheme, netloc, _version_path(path), "", ""))
    return trimmed, url


def resolve_targets(
    raw: Optional[str], default: str = DEFAULT_BACKEND, limit: int = MAX_BACKENDS
) -> Tuple[List[BackendTarget], bool]:
    """Turn a delimited address list into ordered targets plus a truncation flag."""
    value = (raw or "").strip() or default
    items = parse_backend_list(value)
    truncated = len(items) > limit

    targets: List[BackendTarget] = []
    for item in items[:limit]:
        display, url = normalize_backend_target(item)
        if not display or not url:
            continue
        targets.append(BackendTarget(display=display, url=url))
    return targets, truncated


def load_backend_targets(
    environ: Optional[Mapping[str, str]] = None,
) -> Tuple[List[BackendTarget], bool]:
    """Read BACKEND_URLS (or BACKEND_URL) from the environment and resolve it."""
    env = os.environ if environ is None else environ
    raw = (env.get("BACKEND_URLS") or "").strip() or (env.get("BACKEND_URL") or "").strip()
    return resolve_targets(raw)
