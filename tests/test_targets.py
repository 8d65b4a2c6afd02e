"""Unit tests for backend address resolution."""

from __future__ import annotations

from urllib.parse import urlsplit

from constants import DEFAULT_BACKEND, MAX_BACKENDS
from models import BackendTarget
from targets import (
    load_backend_targets,
    normalize_backend_target,
    parse_backend_list,
    resolve_targets,
)


def test_parse_backend_list_splits_on_commas_and_whitespace() -> None:
    """Any run of commas, spaces, tabs or newlines separates entries."""
    assert parse_backend_list("a.com,b.com \t c.com\n\r d.com,,") == [
        "a.com",
        "b.com",
        "c.com",
        "d.com",
    ]
    assert parse_backend_list("") == []


def test_resolve_keeps_order_and_duplicates() -> None:
    """Entries come back in input order, duplicates included."""
    targets, truncated = resolve_targets("a.com, b.com b.com")

    assert truncated is False
    assert targets == [
        BackendTarget("a.com", "https://a.com/version"),
        BackendTarget("b.com", "https://b.com/version"),
        BackendTarget("b.com", "https://b.com/version"),
    ]


def test_resolve_caps_at_max_backends() -> None:
    """More than twenty hosts are cut down and flagged."""
    raw = ",".join(f"host{i}.example" for i in range(25))

    targets, truncated = resolve_targets(raw)

    assert len(targets) == MAX_BACKENDS
    assert truncated is True
    assert targets[-1].display == "host19.example"


def test_resolve_falls_back_to_default_when_blank() -> None:
    """Blank input resolves to the default backend."""
    targets, truncated = resolve_targets("  \n ")

    assert truncated is False
    assert targets == [BackendTarget(DEFAULT_BACKEND, f"https://{DEFAULT_BACKEND}/version")]


def test_normalize_bare_host_with_port() -> None:
    """A bare host:port gets the https scheme and the version path."""
    display, url = normalize_backend_target("example.com:25500")

    parts = urlsplit(url)
    assert display == "example.com:25500"
    assert parts.scheme == "https"
    assert parts.netloc == "example.com:25500"
    assert parts.path == "/version"


def test_normalize_path_variants() -> None:
    """Existing paths are preserved and /version is appended exactly once."""
    assert normalize_backend_target("http://a.com/")[1] == "http://a.com/version"
    assert normalize_backend_target("a.com/version/")[1] == "https://a.com/version"
    assert normalize_backend_target("a.com/sub/")[1] == "https://a.com/sub/version"
    assert normalize_backend_target("a.com/sub")[1] == "https://a.com/sub/version"


def test_normalize_drops_query_and_fragment() -> None:
    """Query strings and fragments never reach the status URL."""
    display, url = normalize_backend_target("  https://a.com/api?x=1#top ")

    assert display == "https://a.com/api?x=1#top"
    assert url == "https://a.com/api/version"


def test_malformed_entries_are_dropped_silently() -> None:
    """Unparseable entries disappear without failing the batch."""
    assert normalize_backend_target("a.com:notaport") == ("a.com:notaport", "")

    targets, _ = resolve_targets("good.example [::1 a.com:notaport")

    assert [t.display for t in targets] == ["good.example"]


def test_load_backend_targets_prefers_backend_urls() -> None:
    """BACKEND_URLS wins over BACKEND_URL, which wins over the default."""
    env = {"BACKEND_URLS": "one.example two.example", "BACKEND_URL": "single.example"}
    targets, _ = load_backend_targets(env)
    assert [t.display for t in targets] == ["one.example", "two.example"]

    targets, _ = load_backend_targets({"BACKEND_URLS": " ", "BACKEND_URL": "single.example"})
    assert [t.display for t in targets] == ["single.example"]

    targets, _ = load_backend_targets({})
    assert [t.display for t in targets] == [DEFAULT_BACKEND]
