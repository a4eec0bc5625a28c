"""Opening and locating include sources.

An include source is a forward-only stream of text lines plus the location it
came from. Locations are either local filesystem paths (no scheme) or URIs
(``file``, ``http``, ``https``, ``ftp``). The location of a source is the base
against which relative include targets found inside it are resolved.
"""
from __future__ import annotations

import glob
import io
import logging
import os
import posixpath
import re
from dataclasses import dataclass, replace
from typing import Any, Callable, Iterable, Iterator, List, Optional, Union
from urllib.parse import unquote, urlsplit, urlunsplit
from urllib.request import urlopen

from oddments.core.exceptions import BadInputError, OpenError, UnsupportedSchemeError

logger = logging.getLogger(__name__)

LOCAL_SCHEMES = frozenset({"file"})
REMOTE_SCHEMES = frozenset({"http", "https", "ftp"})
SUPPORTED_SCHEMES = LOCAL_SCHEMES | REMOTE_SCHEMES

_DRIVE_RE = re.compile(r"^[A-Za-z]:[\\/]")

Fetcher = Callable[[str], Union[bytes, str]]


@dataclass(frozen=True)
class Location:
    """Resolved address of a source: a local path, or a URI when ``scheme`` is set."""

    path: str
    scheme: Optional[str] = None
    netloc: str = ""
    query: str = ""

    @property
    def is_uri(self) -> bool:
        return self.scheme is not None

    @property
    def url(self) -> str:
        if self.scheme is None:
            return self.path
        return urlunsplit((self.scheme, self.netloc, self.path, self.query, ""))

    def with_path(self, path: str) -> "Location":
        return replace(self, path=path, query="")

    def sibling(self, relative: str) -> "Location":
        """Return ``relative`` placed in this location's directory.

        Plain string joining, not RFC 3986 reference resolution: ``..``
        segments are kept as written.
        """
        if self.scheme is None:
            return self.with_path(os.path.join(os.path.dirname(self.path), relative))
        return self.with_path(posixpath.join(posixpath.dirname(self.path), relative))

    def __str__(self) -> str:
        return self.url


def _looks_absolute(target: str) -> bool:
    return target.startswith("/") or os.path.isabs(target) or bool(_DRIVE_RE.match(target))


def parse_location(target: str) -> Location:
    """Parse an include target or top-level source string into a Location.

    Strings that fail URI parsing, carry no scheme, or look like a Windows
    drive path are treated as opaque local paths and kept verbatim.
    """
    if _DRIVE_RE.match(target):
        return Location(path=target)
    try:
        parts = urlsplit(target)
    except ValueError:
        return Location(path=target)
    if not parts.scheme:
        return Location(path=target)
    return Location(
        path=parts.path,
        scheme=parts.scheme.lower(),
        netloc=parts.netloc,
        query=parts.query,
    )


def resolve_target(target: str, parent: Optional[Location]) -> Location:
    """Resolve an include target against the location of the including source.

    - A target with a scheme is absolute and used as-is.
    - With no parent location (anonymous source) the target is left alone,
      so relative paths resolve against the process working directory.
    - An absolute path inherits the parent's scheme and host, if any.
    - A relative path is placed in the parent's directory.
    """
    location = parse_location(target)
    if location.is_uri or parent is None:
        return location
    if _looks_absolute(target):
        return parent.with_path(target) if parent.is_uri else location
    return parent.sibling(target)


def glob_pattern(target: str, parent: Optional[Location]) -> str:
    """Return the glob pattern for a scheme-less include target.

    Only ``target`` carries wildcards; the directory of the including file is
    escaped so that names like ``data[1]/`` match literally.
    """
    if parent is None or parent.is_uri or _looks_absolute(target):
        return target
    return os.path.join(glob.escape(os.path.dirname(parent.path)), target)


class IncludeSource:
    """An opened input plus its resolved location.

    ``reader`` is consumed once, forward-only. Sources built from objects the
    caller handed in are not owned and are never closed here.
    """

    def __init__(self, reader: Iterable[str], location: Optional[Location], *, owned: bool = True) -> None:
        self.reader = reader
        self.location = location
        self.owned = owned
        self._lines: Iterator[str] = iter(reader)

    def next_line(self) -> Optional[str]:
        """Return the next line, or ``None`` once the reader is exhausted."""
        try:
            line = next(self._lines, None)
        except (OSError, UnicodeDecodeError) as exc:
            raise OpenError(
                f"Failed reading {self.describe()}: {exc}",
                location=self.describe(),
            ) from exc
        if line is not None and not isinstance(line, str):
            raise BadInputError(
                f"Line source {self.describe()} produced {type(line).__name__}, expected str",
                context={"location": self.describe()},
            )
        return line

    def close(self) -> None:
        if self.owned:
            close = getattr(self.reader, "close", None)
            if close is not None:
                close()

    def describe(self) -> str:
        return str(self.location) if self.location is not None else "<anonymous source>"

    def __repr__(self) -> str:
        return f"IncludeSource({self.describe()})"


def fetch_url(url: str) -> bytes:
    """Fetch a remote document with urllib (http, https and ftp)."""
    with urlopen(url) as response:
        return response.read()


class SourceOpener:
    """Open locations as line sources, dispatching on scheme.

    Args:
        allow_glob: Treat scheme-less targets as glob patterns.
        sort_glob: Sort glob matches lexicographically before inclusion.
        encoding: Text encoding for local and remote content.
        fetcher: Callable returning the body of an http/https/ftp URL as
            bytes or str. Defaults to :func:`fetch_url`.
    """

    def __init__(
        self,
        *,
        allow_glob: bool = False,
        sort_glob: bool = True,
        encoding: str = "utf-8",
        fetcher: Optional[Fetcher] = None,
    ) -> None:
        self.allow_glob = allow_glob
        self.sort_glob = sort_glob
        self.encoding = encoding
        self.fetcher: Fetcher = fetcher or fetch_url

    def check_scheme(self, location: Location) -> None:
        if location.scheme is not None and location.scheme not in SUPPORTED_SCHEMES:
            raise UnsupportedSchemeError(location.scheme, location.url)

    def expand(self, location: Location, pattern: Optional[str] = None) -> List[Location]:
        """Return the locations a resolved include target stands for.

        Only scheme-less targets are globbed, and only when ``allow_glob`` is
        set. ``pattern`` (see :func:`glob_pattern`) replaces ``location.path``
        as the glob expression when given. A pattern with no matches expands
        to nothing.
        """
        self.check_scheme(location)
        if location.scheme is not None or not self.allow_glob:
            return [location]

        pattern = location.path if pattern is None else pattern
        matches = [m for m in glob.glob(pattern) if os.path.isfile(m)]
        if self.sort_glob:
            matches.sort()
        logger.debug("Glob %s matched %d file(s)", pattern, len(matches))
        return [Location(path=m) for m in matches]

    def open(self, location: Location, *, depth: Optional[int] = None) -> IncludeSource:
        self.check_scheme(location)
        logger.debug("Opening %s (depth %s)", location, depth)
        if location.scheme is None:
            return self._open_local(location, location.path, depth)
        if location.scheme in LOCAL_SCHEMES:
            return self._open_local(location, unquote(location.path), depth)
        return self._open_remote(location, depth)

    def _open_local(self, location: Location, path: str, depth: Optional[int]) -> IncludeSource:
        try:
            handle = open(path, "r", encoding=self.encoding, newline="")
        except OSError as exc:
            raise OpenError(
                f"Cannot open {location}: {exc.strerror or exc}",
                location=str(location),
                depth=depth,
            ) from exc
        return IncludeSource(handle, location)

    def _open_remote(self, location: Location, depth: Optional[int]) -> IncludeSource:
        url = location.url
        try:
            body: Any = self.fetcher(url)
        except (OSError, ValueError) as exc:
            raise OpenError(
                f"Cannot open {url}: {exc}",
                location=url,
                depth=depth,
            ) from exc
        if isinstance(body, (bytes, bytearray)):
            try:
                body = bytes(body).decode(self.encoding)
            except UnicodeDecodeError as exc:
                raise OpenError(f"Cannot decode {url}: {exc}", location=url, depth=depth) from exc
        return IncludeSource(io.StringIO(body, newline=""), location)


__all__ = [
    "Location",
    "IncludeSource",
    "SourceOpener",
    "parse_location",
    "resolve_target",
    "glob_pattern",
    "fetch_url",
]
