"""Core scanning utilities for backend health checks."""

from __future__ import annotations

import time
from concurrent.futures import ThreadPoolExecutor
from typing import List, Optional, Sequence

import requests
import urllib3
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from constants import BACKEND_BODY_LIMIT, BACKEND_HEADERS, DEFAULT_TIMEOUT, MAX_CONCURRENCY
from detection import detect_backend
from models import BackendResult, BackendTarget

__all__ = [
    "build_session",
    "classify_error",
    "read_body",
    "fetch_backend_info",
    "check_backends",
]

_CHUNK_SIZE = 8192


def build_session(pool_size: int = MAX_CONCURRENCY) -> requests.Session:
    """Create a `requests.Session` that makes exactly one attempt per request."""
    session = requests.Session()
    retry = Retry(
        total=0,
        read=False,
        raise_on_status=False,
    )
    adapter = HTTPAdapter(
        max_retries=retry,
        pool_connections=pool_size,
        pool_maxsize=pool_size,
    )
    session.mount("http://", adapter)
    session.mount("https://", adapter)
    session.headers.update(BACKEND_HEADERS)
    return session


def _make_offline_result(error: str, status: Optional[int] = None) -> BackendResult:
    return {
        "ok": False,
        "status": status,
        "error": error,
        "variant": None,
        "info": {},
    }


def classify_error(exc: Exception) -> str:
    """Map a transport exception onto the reported error reason."""
    # urllib3 derives NewConnectionError from ConnectTimeoutError
    if isinstance(exc, urllib3.exceptions.NewConnectionError):
        return "connection_error"
    if isinstance(exc, (requests.exceptions.Timeout, urllib3.exceptions.TimeoutError)):
        return "timeout"
    if isinstance(
        exc,
        (
            requests.exceptions.InvalidURL,
            requests.exceptions.MissingSchema,
            requests.exceptions.InvalidSchema,
            urllib3.exceptions.LocationParseError,
            ValueError,
        ),
    ):
        return "request_error"
    return "connection_error"


def read_body(
    resp: requests.Response,
    limit: int = BACKEND_BODY_LIMIT,
    deadline: Optional[float] = None,
) -> str:
    """Read at most `limit` bytes of the body; the rest is discarded.

    `deadline` is a `time.monotonic()` value; once it passes the read stops
    with `requests.exceptions.ReadTimeout`. urllib3 errors are re-raised as
    the matching `requests` exceptions.
    """
    chunks: List[bytes] = []
    size = 0
    try:
        while size < limit:
            if deadline is not None and time.monotonic() >= deadline:
                raise requests.exceptions.ReadTimeout("deadline exceeded while reading body")
            chunk = resp.raw.read1(min(_CHUNK_SIZE, limit - size), decode_content=True)
            if not chunk:
                break
            chunk = chunk[: limit - size]
            chunks.append(chunk)
            size += len(chunk)
    except urllib3.exceptions.ReadTimeoutError as exc:
        raise requests.exceptions.ReadTimeout(exc) from exc
    except urllib3.exceptions.ProtocolError as exc:
        raise requests.exceptions.ChunkedEncodingError(exc) from exc
    except urllib3.exceptions.DecodeError as exc:
        raise requests.exceptions.ContentDecodingError(exc) from exc
    except urllib3.exceptions.HTTPError as exc:
        raise requests.exceptions.ConnectionError(exc) from exc
    return b"".join(chunks).decode("utf-8", errors="replace")


def fetch_backend_info(
    session: requests.Session, url: str, timeout: float = DEFAULT_TIMEOUT
) -> BackendResult:
    """Check one backend and classify its response.

    `timeout` bounds the whole request, body included.
    """
    deadline = time.monotonic() + timeout
    try:
        resp = session.get(url, timeout=timeout, stream=True)
    except (
        requests.exceptions.RequestException,
        urllib3.exceptions.HTTPError,
        ValueError,
    ) as exc:
        return _make_offline_result(classify_error(exc))

    try:
        text = read_body(resp, deadline=deadline)
    except requests.exceptions.Timeout:
        return _make_offline_result("timeout")
    except requests.exceptions.RequestException:
        return _make_offline_result("read_error")
    finally:
        resp.close()

    if resp.status_code != 200:
        return _make_offline_result(f"HTTP {resp.status_code}", status=resp.status_code)

    variant, info = detect_backend(text.strip())
    return {
        "ok": True,
        "status": resp.status_code,
        "error": None,
        "variant": variant,
        "info": info,
    }


def check_backends(
    targets: Sequence[BackendTarget],
    *,
    session: Optional[requests.Session] = None,
    timeout: float = DEFAULT_TIMEOUT,
    max_workers: int = MAX_CONCURRENCY,
) -> List[BackendResult]:
    """Check every target with bounded concurrency; results follow target order."""
    if not targets:
        return []

    owned = session is None
    active = build_session() if session is None else session
    try:
        with ThreadPoolExecutor(max_workers=min(max_workers, len(targets))) as pool:
            return list(
                pool.map(lambda target: fetch_backend_info(active, target.url, timeout), targets)
            )
    finally:
        if owned:
            active.close()
