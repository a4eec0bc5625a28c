"""A simple last-in, first-out container.

Iteration and ``to_list()`` run from the top of the stack to the bottom.
"""
from __future__ import annotations

from typing import Any, Iterator, List

from oddments.core.exceptions import StackUnderflowError


class Stack:
    """LIFO stack.

    Args:
        pop_empty_none: When True (the default), ``pop()`` on an empty stack
            returns ``None``. When False it raises ``StackUnderflowError``.
    """

    def __init__(self, pop_empty_none: bool = True) -> None:
        self._items: List[Any] = []
        self.pop_empty_none = pop_empty_none

    def push(self, element: Any) -> "Stack":
        """Push ``element``; a list or tuple pushes each of its items in order.

        Returns the stack so pushes can be chained.
        """
        if isinstance(element, (list, tuple)):
            self._items.extend(element)
        else:
            self._items.append(element)
        return self

    def pop(self) -> Any:
        if not self._items:
            if self.pop_empty_none:
                return None
            raise StackUnderflowError()
        return self._items.pop()

    def top(self) -> Any:
        """Return the top element without removing it (``None`` if empty)."""
        return self._items[-1] if self._items else None

    def pop_all(self) -> List[Any]:
        """Remove every element, returning them top-first."""
        result = self.to_list()
        self._items.clear()
        return result

    def clear(self) -> "Stack":
        self._items.clear()
        return self

    def is_empty(self) -> bool:
        return not self._items

    def to_list(self) -> List[Any]:
        return list(reversed(self._items))

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self) -> Iterator[Any]:
        return iter(self.to_list())

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Stack):
            return NotImplemented
        return self._items == other._items

    def __repr__(self) -> str:
        return f"Stack({self.to_list()!r})"


__all__ = ["Stack"]
