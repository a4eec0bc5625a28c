"""Zip archive helpers built on :mod:`zipfile`."""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Callable, List, Optional, Union
from zipfile import ZIP_DEFLATED, ZIP_STORED, ZipFile

from oddments.core.config import get_section
from oddments.core.exceptions import ConfigurationError

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]
Selector = Callable[[str], bool]

_COMPRESSION = {"deflated": ZIP_DEFLATED, "stored": ZIP_STORED}


def _compression(name: Optional[str]) -> int:
    if name is None:
        name = get_section("zip").get("compression", "deflated")
    try:
        return _COMPRESSION[str(name).lower()]
    except KeyError:
        raise ConfigurationError(
            f"Unknown zip compression '{name}'", context={"compression": name}
        ) from None


def zip_directory(
    zip_file: PathLike,
    directory: PathLike,
    *,
    recursive: bool = True,
    dir_at_top: bool = True,
    recreate: bool = True,
    select: Optional[Selector] = None,
    compression: Optional[str] = None,
) -> Path:
    """Create (or extend) a zip archive from the contents of ``directory``.

    Args:
        zip_file: Archive to write.
        directory: Directory to archive.
        recursive: Include sub-directories. When False only the files
            directly inside ``directory`` are archived.
        dir_at_top: Prefix entry names with the directory's own name, so the
            archive unpacks into a single top-level directory.
        recreate: Remove an existing archive first; otherwise append to it.
        select: Predicate on the entry name; entries it rejects are skipped.
        compression: "deflated" or "stored"; defaults to the ``zip`` config.

    Returns:
        Path to the archive.
    """
    root = Path(directory).resolve()
    archive = Path(zip_file)
    prefix = root.name if dir_at_top else ""

    if recreate and archive.exists():
        archive.unlink()
    mode = "a" if archive.exists() else "w"
    archive_resolved = archive.resolve()

    if recursive:
        paths = sorted(root.rglob("*"))
    else:
        paths = sorted(p for p in root.iterdir() if p.is_file())

    with ZipFile(archive, mode, compression=_compression(compression)) as zf:
        for path in paths:
            if path.resolve() == archive_resolved:
                continue
            rel = path.relative_to(root).as_posix()
            name = f"{prefix}/{rel}" if prefix else rel
            if select is not None and not select(name):
                continue
            zf.write(path, name)
    logger.debug("Archived %s into %s", root, archive)
    return archive


def unzip(
    zip_file: PathLike,
    directory: PathLike,
    *,
    recursive: bool = True,
    overwrite: bool = False,
    select: Optional[Selector] = None,
) -> List[Path]:
    """Extract ``zip_file`` under ``directory``.

    Args:
        recursive: When False only top-level entries are extracted.
        overwrite: Replace files that already exist.
        select: Predicate on the entry name; entries it rejects are skipped.

    Returns:
        Paths written, in archive order.

    Raises:
        FileExistsError: A target file exists and ``overwrite`` is False.
    """
    root = Path(directory)
    root.mkdir(parents=True, exist_ok=True)
    extracted: List[Path] = []
    with ZipFile(zip_file) as zf:
        for info in zf.infolist():
            name = info.filename
            if not recursive and "/" in name.rstrip("/"):
                continue
            if select is not None and not select(name):
                continue
            target = root / name
            if not info.is_dir() and target.exists() and not overwrite:
                raise FileExistsError(f"Refusing to overwrite existing file: {target}")
            extracted.append(Path(zf.extract(info, root)))
    return extracted


def zip_file_entries(zip_file: PathLike) -> List[str]:
    """Return the entry names of ``zip_file`` in archive order."""
    with ZipFile(zip_file) as zf:
        return zf.namelist()


__all__ = ["zip_directory", "unzip", "zip_file_entries"]
