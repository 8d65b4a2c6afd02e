"""Data structures used across the application."""

from __future__ import annotations

from enum import Enum
from typing import NamedTuple, Optional, TypedDict


class Variant(str, Enum):
    """Backend flavours recognised from a `/version` response body."""

    EXTENDED = "SubConverter-Extended"
    STANDARD = "subconverter"
    UNKNOWN = "unknown"


class BackendTarget(NamedTuple):
    """A backend to check: the address as configured and its status URL."""

    display: str
    url: str


class BackendInfo(TypedDict, total=False):
    """Metadata extracted from a response body; keys depend on the variant."""

    version: str
    build: str
    build_date: str
    snippet: str


class BackendResult(TypedDict):
    """Structured result returned after probing a single backend."""

    ok: bool
    status: Optional[int]
    error: Optional[str]
    variant: Optional[Variant]
    info: BackendInfo


__all__ = ["Variant", "BackendTarget", "BackendInfo", "BackendResult"]
