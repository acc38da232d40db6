"""Tests for vibecheck.context: bounded reads, line/col, and one-shot signal publication."""

import asyncio
from pathlib import Path

import pytest

from vibecheck.config import Config
from vibecheck.context import (
    DiscoveredSignals,
    ScanContext,
    line_col,
    normalize_api_path,
    read_text,
)


def test_read_text(tmp_path):
    f = tmp_path / "a.ts"
    f.write_text("export const a = 1;\n")
    assert read_text(f, 1000) == "export const a = 1;\n"


def test_read_text_oversize_is_empty(tmp_path):
    f = tmp_path / "big.ts"
    f.write_text("x" * 101)
    assert read_text(f, 100) == ""


def test_read_text_missing_is_empty(tmp_path):
    assert read_text(tmp_path / "missing.ts", 1000) == ""


def test_read_text_bad_utf8_replaced(tmp_path):
    f = tmp_path / "bin.js"
    f.write_bytes(b"ok \xff\xfe end")
    assert read_text(f, 1000).startswith("ok ")


def test_context_read_file_uses_config_limit(tmp_path):
    f = tmp_path / "a.ts"
    f.write_text("y" * 20)
    ctx = ScanContext(tmp_path, [f], Config(max_file_bytes=10))
    assert asyncio.run(ctx.read_file(f)) == ""


def test_rel_paths_are_posix_and_relative(tmp_path):
    f = tmp_path / "app" / "api" / "route.ts"
    ctx = ScanContext(tmp_path, [f])
    assert ctx.rel_paths == ("app/api/route.ts",)
    assert list(ctx.iter_files()) == [(f, "app/api/route.ts")]


def test_path_outside_root_kept_as_is(tmp_path):
    ctx = ScanContext(tmp_path / "root", [Path("/elsewhere/x.ts")])
    assert ctx.rel_paths == ("/elsewhere/x.ts",)


@pytest.mark.parametrize(
    "offset, expected",
    [(0, (1, 1)), (3, (1, 4)), (4, (2, 1)), (6, (2, 3)), (999, (3, 2))],
)
def test_line_col(offset, expected):
    assert line_col("abc\nde\nf", offset) == expected


def test_discovered_defaults_to_empty(tmp_path):
    assert ScanContext(tmp_path, []).discovered == DiscoveredSignals.empty()


def test_discovered_can_be_published_once(tmp_path):
    ctx = ScanContext(tmp_path, [])
    signals = DiscoveredSignals.build(guards=["auth"])
    ctx.discovered = signals
    assert ctx.discovered is signals
    with pytest.raises(RuntimeError):
        ctx.discovered = DiscoveredSignals.empty()


@pytest.mark.parametrize(
    "raw, expected",
    [("api/x", "/api/x"), ("/api/x/", "/api/x"), ("  /api  ", "/api"), ("/", "/"), ("", "")],
)
def test_normalize_api_path(raw, expected):
    assert normalize_api_path(raw) == expected


def test_signals_public_and_proxy_matching():
    signals = DiscoveredSignals.build(
        public_api_exact=["/api/health"],
        public_api_prefix=["/api/embed"],
        proxy_api_prefix=["/api/stripe/webhook"],
    )
    assert signals.is_public("/api/health")
    assert not signals.is_public("/api/health/deep")
    assert signals.is_public("/api/embed/widget")
    assert signals.is_proxy("/api/stripe/webhook")
    assert not signals.is_proxy("/api/users")
    assert not signals.is_public("")
