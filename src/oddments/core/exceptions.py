from __future__ import annotations

from typing import Any, Dict, Mapping


class OddmentsError(Exception):
    """Base exception for the oddments library."""

    context: Dict[str, Any]

    def __init__(self, message: str = "", *, context: Mapping[str, Any] | None = None) -> None:
        super().__init__(message)
        if context is not None:
            # Store a shallow copy to avoid accidental mutation.
            self.context = dict(context)
        else:
            self.context = {}

    def to_json_error(self) -> Dict[str, Any]:
        """Return a JSON-serializable error payload."""
        return {
            "message": str(self),
            "code": self.__class__.__name__,
            "context": self.context,
        }


class ConfigurationError(OddmentsError, ValueError):
    """Raised when configuration or constructor options are invalid."""

    def __init__(self, message: str = "", *, context: Mapping[str, Any] | None = None) -> None:
        OddmentsError.__init__(self, message, context=context)
        ValueError.__init__(self, message)


# ---------------------------------------------------------------------------
# Include processing
# ---------------------------------------------------------------------------


class IncludeError(OddmentsError):
    """Raised when include processing fails."""


class BadInputError(IncludeError, TypeError):
    """Raised when an Includer source has no recognized opening strategy."""

    def __init__(self, message: str = "", *, context: Mapping[str, Any] | None = None) -> None:
        IncludeError.__init__(self, message, context=context)
        TypeError.__init__(self, message)


class OpenError(IncludeError, OSError):
    """Raised when a file or URL cannot be opened, at any nesting level."""

    def __init__(
        self,
        message: str,
        *,
        location: str | None = None,
        depth: int | None = None,
        context: Mapping[str, Any] | None = None,
    ) -> None:
        ctx = dict(context or {})
        if location:
            ctx["location"] = location
        if depth is not None:
            ctx["depth"] = depth
        IncludeError.__init__(self, message, context=ctx)
        self.location = location
        self.depth = depth


class TooManyIncludesError(IncludeError):
    """Raised when include nesting reaches the configured maximum."""

    def __init__(self, directive: str, depth: int, max_nesting: int) -> None:
        super().__init__(
            f'Too many nested includes ({depth}), at: "{directive}"',
            context={"directive": directive, "depth": depth, "max_nesting": max_nesting},
        )
        self.directive = directive
        self.depth = depth


class UnsupportedSchemeError(IncludeError, ValueError):
    """Raised when a resolved include target uses an unknown URI scheme."""

    def __init__(self, scheme: str, target: str) -> None:
        message = f"Don't know how to open {target} (unsupported scheme '{scheme}')"
        IncludeError.__init__(self, message, context={"scheme": scheme, "target": target})
        ValueError.__init__(self, message)
        self.scheme = scheme


# ---------------------------------------------------------------------------
# Templates, containers, file trees
# ---------------------------------------------------------------------------


class VariableNotFoundError(OddmentsError, KeyError):
    """Raised by unsafe templates when a variable has no value and no default."""

    def __init__(self, name: str) -> None:
        OddmentsError.__init__(self, name, context={"variable": name})
        KeyError.__init__(self, name)
        self.name = name

    def __str__(self) -> str:
        return f"Variable not found: {self.name}"


class StackUnderflowError(OddmentsError, IndexError):
    """Raised when popping an empty stack that was told not to return None."""

    def __init__(self, message: str = "pop from empty stack") -> None:
        OddmentsError.__init__(self, message)
        IndexError.__init__(self, message)


class BadDirectoryTreeKeyError(OddmentsError, ValueError):
    """Raised for illegal directory-tree entry names or target directories."""

    def __init__(self, message: str = "", *, context: Mapping[str, Any] | None = None) -> None:
        OddmentsError.__init__(self, message, context=context)
        ValueError.__init__(self, message)


class BadDirectoryTreeValueError(OddmentsError, TypeError):
    """Raised when a directory-tree value is neither a mapping nor file content."""

    def __init__(self, key: str, value: Any) -> None:
        message = (
            f"Directory tree key '{key}' has unsupported value {value!r} "
            f"of type {type(value).__name__}. Values must be mappings or file contents."
        )
        OddmentsError.__init__(self, message, context={"key": key})
        TypeError.__init__(self, message)


__all__ = [
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
