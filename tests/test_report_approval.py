"""Approval tests for the status report text."""

from __future__ import annotations

from typing import List, Tuple

from approvaltests import verify

from models import BackendResult, BackendTarget, Variant
from report import render_report


def _sample_run() -> Tuple[List[BackendTarget], List[BackendResult]]:
    targets = [
        BackendTarget("api.example.com", "https://api.example.com/version"),
        BackendTarget("sub.example.org:25500", "https://sub.example.org:25500/version"),
        BackendTarget("legacy.example.net", "https://legacy.example.net/version"),
        BackendTarget("down.example.net", "https://down.example.net/version"),
        BackendTarget("broken.example.net", "https://broken.example.net/version"),
    ]
    results: List[BackendResult] = [
        {
            "ok": True,
            "status": 200,
            "error": None,
            "variant": Variant.EXTENDED,
            "info": {"version": "v0.9.0", "build": "abc1234", "build_date": "2024-05-01"},
        },
        {
            "ok": True,
            "status": 200,
            "error": None,
            "variant": Variant.STANDARD,
            "info": {"version": "subconverter v0.9.0-c5b5b4c backend"},
        },
        {
            "ok": True,
            "status": 200,
            "error": None,
            "variant": Variant.UNKNOWN,
            "info": {"snippet": "Welcome to nginx!"},
        },
        {"ok": False, "status": None, "error": "timeout", "variant": None, "info": {}},
        {"ok": False, "status": 502, "error": "HTTP 502", "variant": None, "info": {}},
    ]
    return targets, results


def test_status_report_matches_snapshot() -> None:
    """Mixed online/offline report keeps its exact layout."""
    targets, results = _sample_run()
    verify(render_report(targets, results) + "\n")


def test_truncated_report_matches_snapshot() -> None:
    """The title announces when only the first twenty backends are shown."""
    targets = [BackendTarget("a.example", "https://a.example/version")]
    results: List[BackendResult] = [
        {"ok": False, "status": None, "error": "connection_error", "variant": None, "info": {}}
    ]
    verify(render_report(targets, results, truncated=True) + "\n")
