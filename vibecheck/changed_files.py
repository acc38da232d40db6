# Incremental scans: files changed relative to HEAD according to git.

from __future__ import annotations

import logging
import subprocess
from pathlib import Path
from typing import Optional, Sequence

logger = logging.getLogger(__name__)


def get_changed_files(root: Path) -> Optional[list[str]]:
    """
    Return root-relative paths from `git diff --name-only HEAD`.

    Returns None when git is unavailable or root is not a work tree.
    """
    try:
        proc = subprocess.run(
            ["git", "diff", "--name-only", "HEAD"],
            cwd=root,
            capture_output=True,
            text=True,
            timeout=30,
            check=True,
        )
    except (OSError, subprocess.SubprocessError) as e:
        logger.warning("Could not list changed files in %s: %s", root, e)
        return None
    return [line.strip() for line in proc.stdout.splitlines() if line.strip()]


def filter_changed(files: Sequence[Path], root: Path, changed: Optional[Sequence[str]]) -> list[Path]:
    """
    Restrict files to the changed set.

    Falls back to the full list when changed is None/empty or nothing matches,
    so an incremental scan never silently scans zero files.
    """
    if not changed:
        return list(files)
    wanted = {(root / p).resolve() for p in changed}
    selected = [f for f in files if Path(f).resolve() in wanted]
    if not selected:
        logger.info("No scanned files among %d changed path(s); scanning everything", len(changed))
        return list(files)
    logger.info("Incremental scan: %d of %d file(s) changed", len(selected), len(files))
    return selected
