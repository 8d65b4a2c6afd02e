#!/usr/bin/env python3
"""Long-polling Telegram bot that answers backend status commands."""

from __future__ import annotations

import argparse
import logging
import os
import sys
import time
from typing import Any, Callable, Dict, Iterable, Mapping, Optional

import requests

from constants import POLL_RETRY_DELAY, TRIGGER_COMMANDS
from report import NOT_CONFIGURED_MESSAGE, render_report
from scanner import build_session, check_backends, fetch_backend_info
from targets import load_backend_targets
from telegram_service import TelegramError, get_updates, redact_token, send_message

__all__ = [
    "is_backend_command",
    "build_status_message",
    "next_offset",
    "handle_update",
    "run_polling",
    "run_healthcheck",
    "main",
]

logger = logging.getLogger(__name__)


def is_backend_command(text: Optional[str]) -> bool:
    """Exact, case-sensitive match against the trigger phrases."""
    if not text:
        return False
    return text.strip() in TRIGGER_COMMANDS


def build_status_message(
    session: Optional[requests.Session] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> str:
    """Resolve targets, check them and render the report text."""
    targets, truncated = load_backend_targets(environ)
    if not targets:
        return NOT_CONFIGURED_MESSAGE
    results = check_backends(targets, session=session)
    return render_report(targets, results, truncated)


def next_offset(updates: Iterable[Mapping[str, Any]], offset: int) -> int:
    """Advance the getUpdates cursor past every update seen."""
    for update in updates:
        update_id = update.get("update_id")
        if isinstance(update_id, int) and update_id >= offset:
            offset = update_id + 1
    return offset


def handle_update(session: requests.Session, token: str, update: Mapping[str, Any]) -> bool:
    """Reply to a single update if it carries a trigger command.

    Returns True when a report was sent.
    """
    message: Dict[str, Any] = update.get("message") or {}
    chat_id = (message.get("chat") or {}).get("id")
    if chat_id is None or not is_backend_command(message.get("text")):
        return False

    try:
        reply = build_status_message(session)
    except Exception:  # pylint: disable=broad-except
        logger.exception("status check failed for chat %s", chat_id)
        return False

    try:
        send_message(session, token, chat_id, reply)
    except (TelegramError, requests.exceptions.RequestException) as exc:
        logger.error("sendMessage error: %s", redact_token(str(exc), token))
        return False
    return True


def run_polling(
    token: str,
    *,
    session: Optional[requests.Session] = None,
    offset: int = 0,
    sleep: Callable[[float], None] = time.sleep,
    max_cycles: Optional[int] = None,
) -> int:
    """Poll for commands until `max_cycles` is reached (forever when None).

    Returns the cursor the next poll would start from.
    """
    active = build_session() if session is None else session
    cycles = 0
    while max_cycles is None or cycles < max_cycles:
        cycles += 1
        try:
            updates = get_updates(active, token, offset)
        except (TelegramError, requests.exceptions.RequestException) as exc:
            logger.warning("getUpdates error: %s", redact_token(str(exc), token))
            sleep(POLL_RETRY_DELAY)
            continue

        for update in updates:
            offset = next_offset([update], offset)
            handle_update(active, token, update)
    return offset


def run_healthcheck(
    session: Optional[requests.Session] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> None:
    """Check the primary backend; raise RuntimeError when it is unreachable."""
    targets, _ = load_backend_targets(environ)
    if not targets:
        raise RuntimeError("no backend targets configured")

    active = build_session() if session is None else session
    try:
        result = fetch_backend_info(active, targets[0].url)
    finally:
        if session is None:
            active.close()
    if not result["ok"]:
        raise RuntimeError(f"backend offline: {result['error']}")


def parse_args(argv: Optional[list] = None) -> argparse.Namespace:
    p = argparse.ArgumentParser(
        description="Telegram bot reporting the status of subconverter backends."
    )
    mode = p.add_mutually_exclusive_group()
    mode.add_argument(
        "--healthcheck",
        action="store_true",
        help="Check the first configured backend and exit non-zero if it is offline.",
    )
    mode.add_argument(
        "--once",
        action="store_true",
        help="Print a single status report to stdout and exit.",
    )
    return p.parse_args(argv)


def main(argv: Optional[list] = None) -> None:
    args = parse_args(argv)
    logging.basicConfig(
        level=os.getenv("LOG_LEVEL", "INFO").upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if args.healthcheck:
        try:
            run_healthcheck()
        except RuntimeError as exc:
            logger.error("healthcheck failed: %s", exc)
            sys.exit(1)
        return

    if args.once:
        print(build_status_message())
        return

    token = os.getenv("BOT_TOKEN", "").strip()
    if not token:
        raise SystemExit("BOT_TOKEN is not set")

    logger.info("Polling for backend status commands")
    run_polling(token)


if __name__ == "__main__":
    main()
