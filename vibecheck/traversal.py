"""
File system traversal: walk a repository and collect web-app source files.

Recursively collects files with a code extension (.ts, .tsx, .js, .jsx,
.mjs, .cjs), skipping dependency and build output directories and anything
matching user ignore globs.

Typical usage:
    from pathlib import Path
    from vibecheck.traversal import find_source_files

    files = find_source_files(Path("./my_app"), ignore_patterns=["**/generated/**"])
"""

import fnmatch
import logging
from pathlib import Path
from typing import Iterable, Optional, Sequence, Set

logger = logging.getLogger(__name__)

SOURCE_EXTENSIONS: Set[str] = {".ts", ".tsx", ".js", ".jsx", ".mjs", ".cjs"}

# Default directories to ignore during traversal
DEFAULT_IGNORE_DIRS: Set[str] = {
    "node_modules",
    ".next",
    "dist",
    "build",
    ".turbo",
    ".git",
}


def is_source_file(path: Path) -> bool:
    """
    Check if a file has a recognized source extension.

    Examples:
        >>> is_source_file(Path("app/page.tsx"))
        True
        >>> is_source_file(Path("README.md"))
        False
    """
    return path.suffix.lower() in SOURCE_EXTENSIONS


def should_ignore_directory(dir_path: Path, ignore_dirs: Set[str]) -> bool:
    """
    Check if a directory should be skipped (name match only, case-sensitive).

    Examples:
        >>> should_ignore_directory(Path("node_modules"), {"node_modules"})
        True
        >>> should_ignore_directory(Path("src"), {"node_modules"})
        False
    """
    return dir_path.name in ignore_dirs


def matches_ignore_pattern(rel_path: str, patterns: Iterable[str]) -> bool:
    """
    True if a POSIX root-relative path matches any ignore glob.

    `**/` prefixes also match at the root, so `**/generated/**` ignores
    `generated/x.ts` as well as `src/generated/x.ts`.
    """
    for pattern in patterns:
        if fnmatch.fnmatchcase(rel_path, pattern):
            return True
        if pattern.startswith("**/") and fnmatch.fnmatchcase(rel_path, pattern[3:]):
            return True
    return False


def find_source_files(
    root: Path,
    ignore_patterns: Optional[Sequence[str]] = None,
    ignore_dirs: Optional[Set[str]] = None,
    follow_symlinks: bool = False,
) -> list[Path]:
    """
    Recursively find all source files under root.

    Args:
        root: Repository root to start from.
        ignore_patterns: fnmatch globs against the POSIX root-relative path.
        ignore_dirs: Directory names to skip. If None, uses DEFAULT_IGNORE_DIRS.
        follow_symlinks: If True, follow symbolic links during traversal.

    Returns:
        Absolute paths, sorted for deterministic ordering.

    Raises:
        FileNotFoundError: If root does not exist.
        NotADirectoryError: If root is not a directory.

    Notes:
        Permission errors on subdirectories are logged and traversal continues.
    """
    if ignore_dirs is None:
        ignore_dirs = DEFAULT_IGNORE_DIRS
    patterns = list(ignore_patterns or [])

    root = root.resolve()

    if not root.exists():
        logger.error("Root directory does not exist: %s", root)
        raise FileNotFoundError(f"Root directory does not exist: {root}")

    if not root.is_dir():
        logger.error("Root path is not a directory: %s", root)
        raise NotADirectoryError(f"Root path is not a directory: {root}")

    logger.info("Starting traversal from: %s", root)

    collected_files: list[Path] = []

    def _walk_directory(current_dir: Path) -> None:
        try:
            for entry in current_dir.iterdir():
                if entry.is_symlink() and not follow_symlinks:
                    logger.debug("Skipping symlink: %s", entry)
                    continue

                rel = entry.relative_to(root).as_posix()
                if entry.is_dir():
                    if should_ignore_directory(entry, ignore_dirs):
                        logger.debug("Ignoring directory: %s", entry)
                        continue
                    _walk_directory(entry)
                elif entry.is_file() and is_source_file(entry):
                    if matches_ignore_pattern(rel, patterns):
                        logger.debug("Ignored by pattern: %s", rel)
                        continue
                    collected_files.append(entry)
        except PermissionError as e:
            logger.warning("Permission denied accessing directory %s: %s", current_dir, e)
        except OSError as e:
            logger.warning("Error accessing directory %s: %s", current_dir, e)

    _walk_directory(root)

    collected_files.sort()

    logger.info(
        "Traversal complete: found %d source file(s) in %s",
        len(collected_files),
        root,
    )
    return collected_files
