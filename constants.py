"""Shared configuration constants for the application."""

from __future__ import annotations

import re
from typing import Dict, FrozenSet

DEFAULT_BACKEND = "api.asailor.org"
MAX_BACKENDS = 20
MAX_CONCURRENCY = 5
DEFAULT_TIMEOUT = 10
POLL_TIMEOUT = 30
POLL_RETRY_DELAY = 2
BACKEND_BODY_LIMIT = 128 * 1024
UPDATES_BODY_LIMIT = 1024 * 1024
SNIPPET_LIMIT = 200
TELEGRAM_LIMIT = 3900
TELEGRAM_API_BASE = "https://api.telegram.org"

USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) "
    "AppleWebKit/537.36 (KHTML, like Gecko) "
    "Chrome/91.0.4472.124 Safari/537.36"
)
ACCEPT = "text/plain,text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8"
BACKEND_HEADERS: Dict[str, str] = {
    "User-Agent": USER_AGENT,
    "Accept": ACCEPT,
}

TRIGGER_COMMANDS: FrozenSet[str] = frozenset(["/backend", "/后端状态", "后端状态"])
SECRET_HEADER = "X-Telegram-Bot-Api-Secret-Token"

VERSION_REGEX = re.compile(r"^subconverter\s+v[\d.]+-\w+ backend$", flags=re.IGNORECASE)
EXTENDED_MARKER_REGEX = re.compile(r"SubConverter-Extended", flags=re.IGNORECASE)
INFO_CARD_REGEX = re.compile(
    r'<span class="info-label">\s*(Version|Build|Build Date)\s*</span>\s*'
    r'<div class="info-value">(.*?)</div>',
    flags=re.IGNORECASE | re.DOTALL,
)
SCRIPT_FRAGMENT_REGEX = re.compile(r"</?script", flags=re.IGNORECASE)
TAG_REGEX = re.compile(r"<[^>]+>", flags=re.DOTALL)
WHITESPACE_REGEX = re.compile(r"\s+")
SCHEME_REGEX = re.compile(r"^[a-zA-Z][a-zA-Z0-9+.-]*://")
SEPARATOR_REGEX = re.compile(r"[\s,]+")

_EXPORTED_NAMES = (
    "DEFAULT_BACKEND",
    "MAX_BACKENDS",
    "MAX_CONCURRENCY",
    "DEFAULT_TIMEOUT",
    "POLL_TIMEOUT",
    "POLL_RETRY_DELAY",
    "BACKEND_BODY_LIMIT",
    "UPDATES_BODY_LIMIT",
    "SNIPPET_LIMIT",
    "TELEGRAM_LIMIT",
    "TELEGRAM_API_BASE",
    "USER_AGENT",
    "ACCEPT",
    "BACKEND_HEADERS",
    "TRIGGER_COMMANDS",
    "SECRET_HEADER",
    "VERSION_REGEX",
    "EXTENDED_MARKER_REGEX",
    "INFO_CARD_REGEX",
    "SCRIPT_FRAGMENT_REGEX",
    "TAG_REGEX",
    "WHITESPACE_REGEX",
    "SCHEME_REGEX",
    "SEPARATOR_REGEX",
)

__all__ = [name for name in _EXPORTED_NAMES if name in globals()]
