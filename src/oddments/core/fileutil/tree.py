"""Directory tree helpers: pre-order walking and tree creation from mappings."""
from __future__ import annotations

import logging
import os
from collections.abc import Iterable, Mapping
from pathlib import Path
from typing import Any, Callable, Optional, Union

from oddments.core.exceptions import BadDirectoryTreeKeyError, BadDirectoryTreeValueError

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]


def walk(directory: PathLike, visit: Callable[[Path], Optional[bool]]) -> None:
    """Walk a directory tree, calling ``visit`` for each directory, pre-order.

    ``visit`` receives ``directory`` first, then each sub-directory (children
    in sorted order). When it returns ``False`` the directory's children are
    skipped; any other return value continues the walk. Symbolic links to
    directories are not followed.

    Example:
        >>> seen = []
        >>> walk("src", lambda d: seen.append(d.name) or d.name != "data")
    """
    root = Path(directory)
    if visit(root) is False:
        return
    for entry in sorted(root.iterdir()):
        if entry.is_dir() and not entry.is_symlink():
            walk(entry, visit)


def make_directory_tree(directory: PathLike, tree: Mapping[str, Any]) -> Path:
    """Create files and directories under ``directory`` from a nested mapping.

    Keys are entry names. A mapping value creates a sub-directory; a ``str``
    or ``bytes`` value is written as file contents; any other iterable writes
    ``str(item)`` for each of its items. For instance::

        make_directory_tree("/tmp/work", {
            "docs": {"README": "hello\\n"},
            "VERSION": "1.0\\n",
        })

    Returns:
        Path to ``directory``.

    Raises:
        BadDirectoryTreeKeyError: ``directory`` exists but is not a directory,
            or a key contains a path separator.
        BadDirectoryTreeValueError: A value is not a mapping or file content.
    """
    root = Path(directory)
    if root.exists():
        if not root.is_dir():
            raise BadDirectoryTreeKeyError(
                f"Directory '{root}' already exists and isn't a directory.",
                context={"directory": str(root)},
            )
    else:
        root.mkdir(parents=True)

    for entry, contents in tree.items():
        name = str(entry)
        if os.sep in name or (os.altsep and os.altsep in name):
            raise BadDirectoryTreeKeyError(
                f"Directory tree key '{name}' contains an illegal file separator character.",
                context={"key": name},
            )
        path = root / name
        if isinstance(contents, Mapping):
            make_directory_tree(path, contents)
        elif isinstance(contents, bytes):
            path.write_bytes(contents)
        elif isinstance(contents, str):
            path.write_text(contents, encoding="utf-8")
        elif isinstance(contents, Iterable):
            with open(path, "w", encoding="utf-8") as f:
                for item in contents:
                    f.write(str(item))
        else:
            raise BadDirectoryTreeValueError(name, contents)
        logger.debug("Created %s", path)

    return root


__all__ = ["walk", "make_directory_tree"]
