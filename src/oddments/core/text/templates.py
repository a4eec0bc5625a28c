"""Flat variable substitution in strings.

Two syntaxes are provided:

- :class:`UnixShellStringTemplate`: ``$var``, ``${var}`` and ``${var?default}``;
  ``\\$`` produces a literal ``$``.
- :class:`WindowsCmdStringTemplate`: ``%var%``; ``\\%`` produces a literal ``%``.

Values come from a resolver mapping (a dict, ``os.environ``, ...). A variable
with no value uses its default if it has one; otherwise it expands to the
empty string in *safe* mode, or raises :class:`VariableNotFoundError`.
Substituted values are inserted verbatim and are not expanded again.

    >>> UnixShellStringTemplate({"name": "world"}).substitute("hello, ${name}")
    'hello, world'
"""
from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any, Mapping, Optional, Pattern

from oddments.core.config import get_section
from oddments.core.exceptions import VariableNotFoundError

_PLACEHOLDER = "\x01"


@dataclass(frozen=True)
class Variable:
    """A variable reference found in a string: ``s[start:end]``."""

    start: int
    end: int
    name: str
    default: Optional[str] = None

    def __str__(self) -> str:
        return self.name


class TemplateBase:
    """Shared substitution logic. Subclasses supply the syntax."""

    escape_char: str = ""

    def __init__(
        self,
        resolver: Mapping[str, Any],
        *,
        safe: Optional[bool] = None,
        var_pattern: Optional[str] = None,
    ) -> None:
        cfg = get_section("templates")
        self.resolver = resolver
        self.safe = bool(cfg.get("safe", True)) if safe is None else safe
        self.var_pattern = var_pattern or cfg.get("var_pattern", "[A-Za-z0-9_]+")
        self._var_re = self._compile(self.var_pattern)
        self._escape_re = re.compile(r"\\" + re.escape(self.escape_char))

    def _compile(self, var_pattern: str) -> Pattern[str]:
        raise NotImplementedError

    def _to_variable(self, m: re.Match[str]) -> Variable:
        raise NotImplementedError

    def find_variable_ref(self, s: str) -> Optional[Variable]:
        """Return the first variable reference in ``s``, or None."""
        m = self._var_re.search(s)
        return self._to_variable(m) if m else None

    def get_variable(self, name: str, default: Optional[str] = None) -> str:
        value = self.resolver.get(name)
        if value is not None:
            return str(value)
        if default is not None:
            return default
        if self.safe:
            return ""
        raise VariableNotFoundError(name)

    def substitute(self, s: str) -> str:
        """Replace every variable reference in ``s`` with its value."""

        def repl(m: re.Match[str]) -> str:
            var = self._to_variable(m)
            return self.get_variable(var.name, var.default)

        escaped = self._escape_re.sub(_PLACEHOLDER, s)
        return self._var_re.sub(repl, escaped).replace(_PLACEHOLDER, self.escape_char)


class UnixShellStringTemplate(TemplateBase):
    """``$var`` / ``${var}`` / ``${var?default}`` substitution."""

    escape_char = "$"

    def _compile(self, var_pattern: str) -> Pattern[str]:
        return re.compile(
            r"\$\{(?P<long>" + var_pattern + r")(?:\?(?P<default>[^}]*))?\}"
            r"|\$(?P<short>" + var_pattern + r")"
        )

    def _to_variable(self, m: re.Match[str]) -> Variable:
        if m.group("long") is not None:
            return Variable(m.start(), m.end(), m.group("long"), m.group("default"))
        return Variable(m.start(), m.end(), m.group("short"))


class WindowsCmdStringTemplate(TemplateBase):
    """``%var%`` substitution."""

    escape_char = "%"

    def _compile(self, var_pattern: str) -> Pattern[str]:
        return re.compile(r"%(?P<name>" + var_pattern + r")%")

    def _to_variable(self, m: re.Match[str]) -> Variable:
        return Variable(m.start(), m.end(), m.group("name"))


__all__ = [
    "Variable",
    "TemplateBase",
    "UnixShellStringTemplate",
    "WindowsCmdStringTemplate",
]
