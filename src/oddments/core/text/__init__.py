"""Text helpers."""
from __future__ import annotations

from .templates import TemplateBase, UnixShellStringTemplate, Variable, WindowsCmdStringTemplate

__all__ = ["Variable", "TemplateBase", "UnixShellStringTemplate", "WindowsCmdStringTemplate"]
