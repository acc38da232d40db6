"""Tests for stack detection and changed-file filtering."""

from vibecheck.changed_files import filter_changed
from vibecheck.repo_detect import detect_stack, resolve_stack


def test_detect_next_by_config(tmp_path):
    (tmp_path / "next.config.mjs").write_text("export default {};\n")
    assert detect_stack(tmp_path) == "nextjs"


def test_detect_next_by_app_dir(tmp_path):
    (tmp_path / "app").mkdir()
    assert detect_stack(tmp_path) == "nextjs"


def test_detect_vite(tmp_path):
    (tmp_path / "vite.config.ts").write_text("export default {};\n")
    assert detect_stack(tmp_path) == "vite"


def test_detect_nest(tmp_path):
    (tmp_path / "src").mkdir()
    (tmp_path / "src" / "main.ts").write_text("bootstrap();\n")
    assert detect_stack(tmp_path) == "nestjs"


def test_detect_unknown(tmp_path):
    assert detect_stack(tmp_path) == "auto"


def test_explicit_stack_wins(tmp_path):
    (tmp_path / "app").mkdir()
    assert resolve_stack("vite", tmp_path) == "vite"
    assert resolve_stack("auto", tmp_path) == "nextjs"


def test_filter_changed(tmp_path):
    a, b = tmp_path / "a.ts", tmp_path / "b.ts"
    assert filter_changed([a, b], tmp_path, ["b.ts"]) == [b]


def test_filter_changed_falls_back_to_all(tmp_path):
    files = [tmp_path / "a.ts"]
    assert filter_changed(files, tmp_path, None) == files
    assert filter_changed(files, tmp_path, []) == files
    assert filter_changed(files, tmp_path, ["README.md"]) == files
