"""Small shared helpers for oddments internals."""
from __future__ import annotations

from .merge import deep_merge

__all__ = ["deep_merge"]
