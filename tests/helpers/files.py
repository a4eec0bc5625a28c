"""File operation utilities for test helpers."""
from __future__ import annotations

from pathlib import Path
from typing import Any, Dict


def write_lines(path: Path, *lines: str) -> Path:
    """Write each line followed by a newline, creating parent directories.

    Returns the path so fixtures can be built inline.
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", encoding="utf-8", newline="") as handle:
        for line in lines:
            handle.write(f"{line}\n")
    return path


def dir_to_dict(path: Path) -> Dict[str, Any]:
    """Snapshot a directory: subdirectories become dicts, files their text."""
    result: Dict[str, Any] = {}
    for child in sorted(path.iterdir()):
        if child.is_dir():
            result[child.name] = dir_to_dict(child)
        else:
            result[child.name] = child.read_text(encoding="utf-8")
    return result
