#!/usr/bin/env python3
"""Webhook endpoint receiving Telegram updates for backend status commands."""

from __future__ import annotations

import hmac
import logging
import os
from typing import Any, Dict

import requests
from flask import Flask, request

from bot import build_status_message, is_backend_command
from constants import SECRET_HEADER, TELEGRAM_LIMIT
from scanner import build_session
from telegram_service import TelegramError, redact_token, send_message

app = Flask(__name__)
logger = logging.getLogger(__name__)


def _secret_matches(expected: str) -> bool:
    provided = request.headers.get(SECRET_HEADER, "")
    return hmac.compare_digest(provided.encode("utf-8"), expected.encode("utf-8"))


@app.route("/", defaults={"path": ""}, methods=["GET", "POST"])
@app.route("/<path:path>", methods=["GET", "POST"])
def webhook(path: str):
    del path
    if request.method == "GET":
        return "ok"

    token = os.getenv("BOT_TOKEN", "").strip()
    if not token:
        return "BOT_TOKEN not set", 500

    secret = os.getenv("WEBHOOK_SECRET", "")
    if secret and not _secret_matches(secret):
        return "Unauthorized", 401

    update = request.get_json(force=True, silent=True)
    if not isinstance(update, dict):
        return "Bad Request", 400

    message: Dict[str, Any] = update.get("message") or update.get("edited_message") or {}
    chat_id = (message.get("chat") or {}).get("id")
    text = message.get("text")
    if not chat_id or not text or not is_backend_command(text):
        return "ok"

    session = build_session()
    try:
        reply = build_status_message(session)
        send_message(session, token, chat_id, reply, limit=TELEGRAM_LIMIT)
    except (TelegramError, requests.exceptions.RequestException) as exc:
        logger.error("sendMessage failed: %s", redact_token(str(exc), token))
    finally:
        session.close()
    return "ok"


if __name__ == "__main__":
    logging.basicConfig(level=os.getenv("LOG_LEVEL", "INFO").upper())
    app.run(host="0.0.0.0", port=int(os.getenv("PORT", "8080")))
