"""Oddments: small, independent utilities.

- ``Includer``: expand ``%include "..."`` directives from files, URLs and globs
- String templates with ``${var?default}`` and ``%var%`` syntaxes
- ``Stack``: a LIFO container
- Directory walking, directory-tree creation and zip archive helpers
"""
from __future__ import annotations

from oddments.core.exceptions import (
    BadDirectoryTreeKeyError,
    BadDirectoryTreeValueError,
    BadInputError,
    ConfigurationError,
    IncludeError,
    OddmentsError,
    OpenError,
    StackUnderflowError,
    TooManyIncludesError,
    UnsupportedSchemeError,
    VariableNotFoundError,
)
from oddments.core.fileutil import (
    IncludeOptions,
    Includer,
    make_directory_tree,
    unzip,
    walk,
    zip_directory,
    zip_file_entries,
)
from oddments.core.stack import Stack
from oddments.core.text import UnixShellStringTemplate, Variable, WindowsCmdStringTemplate

__version__ = "0.3.0"

__all__ = [
    "__version__",
    "Includer",
    "IncludeOptions",
    "Stack",
    "UnixShellStringTemplate",
    "WindowsCmdStringTemplate",
    "Variable",
    "walk",
    "make_directory_tree",
    "zip_directory",
    "unzip",
    "zip_file_entries",
    "OddmentsError",
    "ConfigurationError",
    "IncludeError",
    "BadInputError",
    "OpenError",
    "TooManyIncludesError",
    "UnsupportedSchemeError",
    "VariableNotFoundError",
    "StackUnderflowError",
    "BadDirectoryTreeKeyError",
    "BadDirectoryTreeValueError",
]
