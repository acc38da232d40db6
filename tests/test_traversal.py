"""Tests for file system traversal functionality."""

from pathlib import Path

import pytest

from vibecheck.traversal import (
    DEFAULT_IGNORE_DIRS,
    find_source_files,
    is_source_file,
    matches_ignore_pattern,
    should_ignore_directory,
)


class TestFileTypeChecks:
    """Test file type checking functions."""

    def test_is_source_file_recognizes_code_extensions(self):
        for name in ("page.tsx", "route.ts", "x.js", "x.jsx", "x.mjs", "x.cjs"):
            assert is_source_file(Path(name))

    def test_is_source_file_case_insensitive(self):
        assert is_source_file(Path("PAGE.TSX"))

    def test_is_source_file_rejects_other_files(self):
        assert not is_source_file(Path("README.md"))
        assert not is_source_file(Path("schema.prisma"))
        assert not is_source_file(Path("package.json"))


class TestDirectoryFiltering:
    """Test directory ignore logic."""

    def test_should_ignore_directory(self):
        assert should_ignore_directory(Path("node_modules"), DEFAULT_IGNORE_DIRS)
        assert should_ignore_directory(Path(".next"), DEFAULT_IGNORE_DIRS)
        assert not should_ignore_directory(Path("app"), DEFAULT_IGNORE_DIRS)

    def test_default_ignore_dirs_includes_common_patterns(self):
        for name in ("node_modules", ".next", "dist", "build", ".turbo", ".git"):
            assert name in DEFAULT_IGNORE_DIRS

    def test_matches_ignore_pattern(self):
        assert matches_ignore_pattern("src/generated/x.ts", ["**/generated/**"])
        assert matches_ignore_pattern("generated/x.ts", ["**/generated/**"])
        assert matches_ignore_pattern("scripts/seed.ts", ["scripts/*"])
        assert not matches_ignore_pattern("app/page.tsx", ["**/generated/**"])


class TestTraversal:
    """Test file traversal functions."""

    @pytest.fixture
    def temp_project(self, tmp_path):
        # tmp_path/
        #   app/page.tsx
        #   app/api/users/route.ts
        #   lib/db.js
        #   node_modules/pkg/index.js   (ignored dir)
        #   .next/server/chunk.js       (ignored dir)
        #   src/generated/client.ts     (ignored by pattern)
        #   README.md                   (not source)
        for rel in (
            "app/page.tsx",
            "app/api/users/route.ts",
            "lib/db.js",
            "node_modules/pkg/index.js",
            ".next/server/chunk.js",
            "src/generated/client.ts",
            "README.md",
        ):
            p = tmp_path / rel
            p.parent.mkdir(parents=True, exist_ok=True)
            p.write_text("// file\n")
        return tmp_path

    def test_collects_source_files_and_skips_ignored_dirs(self, temp_project):
        files = find_source_files(temp_project)
        rels = [f.relative_to(temp_project.resolve()).as_posix() for f in files]
        assert "app/page.tsx" in rels
        assert "app/api/users/route.ts" in rels
        assert "lib/db.js" in rels
        assert "src/generated/client.ts" in rels
        assert not any(r.startswith(("node_modules/", ".next/")) for r in rels)
        assert "README.md" not in rels

    def test_ignore_patterns(self, temp_project):
        files = find_source_files(temp_project, ignore_patterns=["**/generated/**"])
        names = {f.name for f in files}
        assert "client.ts" not in names
        assert "page.tsx" in names

    def test_results_sorted_and_absolute(self, temp_project):
        files = find_source_files(temp_project)
        assert files == sorted(files)
        assert all(f.is_absolute() for f in files)

    def test_missing_root_raises(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            find_source_files(tmp_path / "nope")

    def test_file_root_raises(self, tmp_path):
        f = tmp_path / "x.ts"
        f.write_text("")
        with pytest.raises(NotADirectoryError):
            find_source_files(f)
