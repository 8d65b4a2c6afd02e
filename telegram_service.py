"""Telegram Bot API delivery helpers."""

from __future__ import annotations

import json
from typing import Any, Dict, List, Optional

import requests

from constants import DEFAULT_TIMEOUT, POLL_TIMEOUT, TELEGRAM_API_BASE, UPDATES_BODY_LIMIT
from report import trim_message
from scanner import read_body

__all__ = ["TelegramError", "redact_token", "get_updates", "send_message"]

_ERROR_BODY_LIMIT = 1024


class TelegramError(RuntimeError):
    """Raised when the Bot API rejects a call or answers with garbage."""


def redact_token(message: str, token: str) -> str:
    """Hide the bot token from text that may end up in logs."""
    if token:
        return message.replace(token, "<redacted>")
    return message


def _endpoint(token: str, method: str) -> str:
    return f"{TELEGRAM_API_BASE}/bot{token}/{method}"


def _decode(resp: requests.Response, method: str) -> Dict[str, Any]:
    try:
        body = read_body(resp, limit=UPDATES_BODY_LIMIT)
    finally:
        resp.close()
    if resp.status_code != 200:
        raise TelegramError(
            f"{method} status {resp.status_code}: {body[:_ERROR_BODY_LIMIT].strip()}"
        )
    try:
        data = json.loads(body)
    except ValueError as exc:
        raise TelegramError(f"{method} returned invalid JSON") from exc
    if not isinstance(data, dict) or not data.get("ok"):
        raise TelegramError("telegram api returned ok=false")
    return data


def get_updates(
    session: requests.Session, token: str, offset: int, poll_timeout: int = POLL_TIMEOUT
) -> List[Dict[str, Any]]:
    """Long-poll for new message updates starting at `offset`.

    At most UPDATES_BODY_LIMIT bytes of the answer are read.
    """
    resp = session.get(
        _endpoint(token, "getUpdates"),
        params={
            "timeout": poll_timeout,
            "offset": offset,
            "allowed_updates": "message",
        },
        timeout=poll_timeout + 5,
        stream=True,
    )
    data = _decode(resp, "getUpdates")
    result = data.get("result") or []
    return [item for item in result if isinstance(item, dict)]


def send_message(
    session: requests.Session,
    token: str,
    chat_id: int,
    text: str,
    *,
    limit: Optional[int] = None,
) -> None:
    """Post `text` to a chat with link previews disabled."""
    payload = {
        "chat_id": chat_id,
        "text": trim_message(text, limit) if limit else text,
        "disable_web_page_preview": True,
    }
    resp = session.post(_endpoint(token, "sendMessage"), json=payload, timeout=DEFAULT_TIMEOUT)
    if resp.status_code != 200:
        body = resp.text[:_ERROR_BODY_LIMIT].strip()
        raise TelegramError(f"sendMessage status {resp.status_code}: {body}")
