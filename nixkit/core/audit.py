"""Advisory scan for lines flagged for manual review."""

import os
from pathlib import Path

SKIP_DIRS = frozenset({".git", ".direnv", "node_modules", ".venv"})
BINARY_PROBE_SIZE = 8192


def is_text_file(path: Path) -> bool:
    """Heuristic: a file is text when its first block has no NUL byte."""
    try:
        with open(path, "rb") as f:
            return b"\0" not in f.read(BINARY_PROBE_SIZE)
    except OSError:
        return False


def find_marked_files(root: Path, marker: str) -> list[str]:
    """Find text files under root containing the marker.

    Args:
        root: Directory to scan
        marker: Substring flagging a disabled check

    Returns:
        Sorted POSIX paths relative to root
    """
    matches: list[str] = []
    if not marker or not root.is_dir():
        return matches

    for current, dirnames, filenames in os.walk(root):
        dirnames[:] = [name for name in dirnames if name not in SKIP_DIRS]
        for name in filenames:
            path = Path(current) / name
            if not path.is_file() or not is_text_file(path):
                continue
            if marker in path.read_text(encoding="utf-8", errors="replace"):
                matches.append(path.relative_to(root).as_posix())

    return sorted(matches)
