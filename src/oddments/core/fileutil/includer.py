"""Include-file preprocessing.

An :class:`Includer` expands *include directives* in a text source into one
flattened stream of lines. The default directive syntax is::

    %include "/absolute/path/to/file"
    %include "../relative/path/to/file"
    %include "local_reference"
    %include "http://localhost/path/to/my.config"

Relative references resolve against the including file or URL: while
processing ``/home/bmc/foo.txt``, ``%include "bar.txt"`` reads
``/home/bmc/bar.txt``; while processing ``http://localhost/bmc/foo.txt`` it
reads ``http://localhost/bmc/bar.txt``.

Included sources may themselves include others. Nesting is bounded by
``max_nesting`` (default 100); a source that includes itself is stopped by
that bound, not by cycle detection.

Expansion happens eagerly at construction into a temporary file, which the
includer owns until :meth:`Includer.close`::

    with Includer("config.txt", allow_glob=True) as inc:
        for line in inc:
            print(line, end="")
"""
from __future__ import annotations

import logging
import os
import re
import tempfile
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Callable, Iterator, List, Optional, Pattern, TextIO, Tuple, Union

from oddments.core.config import get_section
from oddments.core.exceptions import BadInputError, ConfigurationError, TooManyIncludesError
from oddments.core.fileutil.sources import (
    Fetcher,
    IncludeSource,
    Location,
    SourceOpener,
    glob_pattern,
    parse_location,
    resolve_target,
)
from oddments.core.stack import Stack

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class IncludeOptions:
    """Immutable includer configuration."""

    max_nesting: int = 100
    include_pattern: Union[str, Pattern[str]] = r'^%include\s"([^"]+)"'
    allow_glob: bool = False
    sort_glob: bool = True
    encoding: str = "utf-8"
    temp_prefix: str = "oddments_includer"

    @classmethod
    def from_config(cls, **overrides: Any) -> "IncludeOptions":
        """Build options from the ``includer`` config section.

        Keyword arguments that are not ``None`` take precedence.
        """
        known = {f.name for f in fields(cls)}
        values = {k: v for k, v in get_section("includer").items() if k in known}
        values.update({k: v for k, v in overrides.items() if v is not None})
        return cls(**values)

    def __post_init__(self) -> None:
        if isinstance(self.max_nesting, bool) or not isinstance(self.max_nesting, int) or self.max_nesting < 1:
            raise ConfigurationError(
                f"max_nesting must be an integer >= 1, got {self.max_nesting!r}",
                context={"max_nesting": self.max_nesting},
            )

    def compile_pattern(self) -> Pattern[str]:
        """Compile ``include_pattern``, which must have one capture group."""
        try:
            pattern = re.compile(self.include_pattern)
        except re.error as exc:
            raise ConfigurationError(
                f"Invalid include pattern {self.include_pattern!r}: {exc}",
                context={"include_pattern": str(self.include_pattern)},
            ) from exc
        if pattern.groups != 1:
            raise ConfigurationError(
                f"Include pattern must have exactly one capture group, has {pattern.groups}",
                context={"include_pattern": pattern.pattern},
            )
        return pattern


@dataclass
class _Frame:
    depth: int
    location: Optional[Location] = None
    source: Optional[IncludeSource] = None

    def close(self) -> None:
        if self.source is not None:
            self.source.close()
            self.source = None


class Includer:
    """Preprocess a text source, resolving include directives.

    Args:
        source: A file path or URL string (``file``, ``http``, ``https`` or
            ``ftp``), a ``pathlib.Path``, or any iterable of text lines
            (open file, ``io.StringIO``, list of strings).
        max_nesting: Maximum include nesting level.
        include_pattern: Regex with a single group capturing the include
            target. Searched within each line.
        allow_glob: Expand scheme-less include targets as glob patterns.
        sort_glob: Sort glob matches before inclusion.
        encoding: Text encoding of sources and of the staged result.
        fetcher: Callable fetching http/https/ftp URLs (see SourceOpener).

    Options left as ``None`` come from the ``includer`` config section.

    Raises:
        BadInputError: ``source`` is of an unsupported type.
        OpenError: A source could not be opened at any nesting level.
        TooManyIncludesError: Nesting reached ``max_nesting``.
        UnsupportedSchemeError: A target URI has an unknown scheme.
        ConfigurationError: The options are invalid.
    """

    def __init__(
        self,
        source: Any,
        *,
        max_nesting: Optional[int] = None,
        include_pattern: Union[str, Pattern[str], None] = None,
        allow_glob: Optional[bool] = None,
        sort_glob: Optional[bool] = None,
        encoding: Optional[str] = None,
        fetcher: Optional[Fetcher] = None,
    ) -> None:
        self.options = IncludeOptions.from_config(
            max_nesting=max_nesting,
            include_pattern=include_pattern,
            allow_glob=allow_glob,
            sort_glob=sort_glob,
            encoding=encoding,
        )
        self._include_re = self.options.compile_pattern()
        self._opener = SourceOpener(
            allow_glob=self.options.allow_glob,
            sort_glob=self.options.sort_glob,
            encoding=self.options.encoding,
            fetcher=fetcher,
        )
        self._temp_path: Optional[Path] = None

        root, self._path = self._open_root(source)
        self._preprocess(root)

    @classmethod
    def create(cls, source: Any, **options: Any) -> "Includer":
        return cls(source, **options)

    @property
    def path(self) -> Optional[str]:
        """Path or URI of the original source; ``None`` for anonymous sources."""
        return self._path

    @property
    def max_nesting(self) -> int:
        return self.options.max_nesting

    @property
    def closed(self) -> bool:
        return self._temp_path is None

    # ---------- reading the staged result ----------

    def read_lines(self) -> List[str]:
        """Return every expanded line, terminators included."""
        with self._open_staged() as f:
            return f.readlines()

    readlines = read_lines

    def each_line(self, visit: Callable[[str], Any]) -> None:
        """Call ``visit`` with each expanded line, in order."""
        for line in self:
            visit(line)

    def __iter__(self) -> Iterator[str]:
        with self._open_staged() as f:
            yield from f

    def close(self) -> None:
        """Delete the staged result."""
        if self._temp_path is not None:
            self._temp_path.unlink(missing_ok=True)
            logger.debug("Removed staged include output %s", self._temp_path)
            self._temp_path = None

    def __enter__(self) -> "Includer":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    def __repr__(self) -> str:
        state = "closed" if self.closed else "open"
        return f"<Includer {self._path or '<anonymous>'} ({state})>"

    def _open_staged(self) -> TextIO:
        if self._temp_path is None:
            raise ValueError("I/O operation on closed Includer")
        return open(self._temp_path, "r", encoding=self.options.encoding, newline="")

    # ---------- expansion ----------

    def _open_root(self, source: Any) -> Tuple[IncludeSource, Optional[str]]:
        if isinstance(source, (str, os.PathLike)):
            text = os.fspath(source)
            if not isinstance(text, str):
                raise BadInputError(
                    f"Bad input of type {type(source).__name__}: path must be text",
                    context={"type": type(source).__name__},
                )
            return self._opener.open(parse_location(text), depth=1), text

        if isinstance(source, (bytes, bytearray, Mapping)) or not isinstance(source, Iterable):
            raise BadInputError(
                f"Bad input of type {type(source).__name__}",
                context={"type": type(source).__name__},
            )

        # An open file keeps its name as the base for relative includes.
        name = getattr(source, "name", None)
        if isinstance(name, str) and os.path.isfile(name):
            return IncludeSource(source, Location(path=name), owned=False), name
        return IncludeSource(source, None, owned=False), None

    def _preprocess(self, root: IncludeSource) -> None:
        stack = Stack()
        stack.push(_Frame(depth=1, source=root))
        try:
            with tempfile.NamedTemporaryFile(
                "w",
                encoding=self.options.encoding,
                newline="",
                prefix=self.options.temp_prefix,
                suffix=".txt",
                delete=False,
            ) as temp:
                self._temp_path = Path(temp.name)
                logger.debug("Staging include output for %s in %s", root.describe(), self._temp_path)
                self._expand(stack, temp)
        except Exception:
            self.close()
            raise
        finally:
            while not stack.is_empty():
                stack.pop().close()

    def _expand(self, stack: Stack, out: TextIO) -> None:
        max_nesting = self.options.max_nesting
        # Set while the last line written has no terminator; the next line
        # written starts on its own line. A final unterminated line stays as is.
        unterminated = False
        while not stack.is_empty():
            frame: _Frame = stack.top()
            if frame.source is None:
                frame.source = self._opener.open(frame.location, depth=frame.depth)

            line = frame.source.next_line()
            if line is None:
                stack.pop().close()
                continue

            match = self._include_re.search(line)
            if match is None:
                if unterminated:
                    out.write("\n")
                out.write(line)
                unterminated = not line.endswith(("\n", "\r"))
                continue

            directive = line.rstrip("\r\n")
            if frame.depth >= max_nesting:
                raise TooManyIncludesError(directive, frame.depth, max_nesting)

            raw_target = match.group(1)
            parent = frame.source.location
            target = resolve_target(raw_target, parent)
            nested = self._opener.expand(target, pattern=glob_pattern(raw_target, parent))
            # Reversed so the first match is on top and read first.
            stack.push([_Frame(depth=frame.depth + 1, location=loc) for loc in reversed(nested)])


__all__ = ["Includer", "IncludeOptions"]
