"""
Focus history for one session, most-recent-last.
The top is always the focused window; a handle appears at most once.
"""
# @file purpose: Ordered focus history used to pick the refocus target after a close.

from __future__ import annotations

from typing import Iterator, List, Optional


class FocusStack:
    def __init__(self, initial: Optional[str] = None) -> None:
        self._items: List[str] = []
        if initial is not None:
            self._items.append(initial)

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self) -> Iterator[str]:
        return iter(list(self._items))

    def __contains__(self, handle: object) -> bool:
        return handle in self._items

    @property
    def top(self) -> Optional[str]:
        return self._items[-1] if self._items else None

    def push(self, handle: str) -> None:
        """Put `handle` on top; an existing entry is moved, not duplicated."""
        if handle in self._items:
            self._items.remove(handle)
        self._items.append(handle)

    def pop(self) -> Optional[str]:
        return self._items.pop() if self._items else None

    def remove(self, handle: str) -> bool:
        """Drop `handle` wherever it is. Returns True if it was present."""
        if handle in self._items:
            self._items.remove(handle)
            return True
        return False

    def clear(self) -> None:
        self._items.clear()

    def as_list(self) -> List[str]:
        return list(self._items)
