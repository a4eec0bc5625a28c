"""File utilities: include preprocessing, directory trees, zip archives."""
from __future__ import annotations

from .includer import IncludeOptions, Includer
from .sources import (
    IncludeSource,
    Location,
    SourceOpener,
    glob_pattern,
    parse_location,
    resolve_target,
)
from .tree import make_directory_tree, walk
from .ziputil import unzip, zip_directory, zip_file_entries

__all__ = [
    "Includer",
    "IncludeOptions",
    "IncludeSource",
    "Location",
    "SourceOpener",
    "parse_location",
    "resolve_target",
    "glob_pattern",
    "walk",
    "make_directory_tree",
    "zip_directory",
    "unzip",
    "zip_file_entries",
]
