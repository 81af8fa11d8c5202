"""
Bounded undo/redo history of grid snapshots.
"""

import time
from typing import List, Optional, Tuple

from .grid import Grid

DEFAULT_CAPACITY = 50


class HistorySnapshot:
    """Independent copy of a grid captured at a point in time."""

    __slots__ = ("_grid", "timestamp", "label")

    def __init__(self, grid: Grid, timestamp: Optional[float] = None,
                 label: Optional[str] = None):
        self.timestamp = time.time() if timestamp is None else timestamp
        self.label = label
        # Assigned last: once set, the snapshot rejects further writes
        self._grid = grid.copy()

    def __setattr__(self, name, value):
        if hasattr(self, "_grid"):
            raise AttributeError("HistorySnapshot is immutable")
        object.__setattr__(self, name, value)

    def __repr__(self) -> str:
        return (f"HistorySnapshot(label={self.label!r}, "
                f"rows={self._grid.rows}, cols={self._grid.cols})")

    @property
    def shape(self) -> Tuple[int, int]:
        return self._grid.shape

    def restore(self) -> Grid:
        """Fresh grid copy; editing it never touches the snapshot."""
        return self._grid.copy()

    def matches(self, grid: Grid) -> bool:
        return self._grid.content_equals(grid)


class HistoryManager:
    """
    Undo/redo stack with a cursor.

    ``cursor`` points at the current entry and always satisfies
    ``-1 <= cursor < len(self)``; an empty history has cursor -1.
    """

    def __init__(self, capacity: int = DEFAULT_CAPACITY):
        if capacity < 1:
            raise ValueError("History capacity must be at least 1")
        self.capacity = capacity
        self._stack: List[HistorySnapshot] = []
        self._cursor = -1

    def __len__(self) -> int:
        return len(self._stack)

    def __repr__(self) -> str:
        return f"HistoryManager(size={len(self._stack)}, cursor={self._cursor}, capacity={self.capacity})"

    @property
    def cursor(self) -> int:
        return self._cursor

    @property
    def snapshots(self) -> Tuple[HistorySnapshot, ...]:
        return tuple(self._stack)

    @property
    def can_undo(self) -> bool:
        return self._cursor > 0

    @property
    def can_redo(self) -> bool:
        return self._cursor < len(self._stack) - 1

    def push_snapshot(self, grid: Grid, label: Optional[str] = None) -> HistorySnapshot:
        """
        Record a copy of ``grid`` as the new current state.

        Entries after the cursor (the redo branch) are discarded first. When
        the stack grows past capacity the oldest entry is evicted and the
        cursor stays put, which leaves it on the new entry.
        """
        snapshot = HistorySnapshot(grid, label=label)

        del self._stack[self._cursor + 1:]
        self._stack.append(snapshot)

        if len(self._stack) > self.capacity:
            self._stack.pop(0)
        else:
            self._cursor += 1

        return snapshot

    def undo(self) -> Optional[HistorySnapshot]:
        """Step back; None when there is nothing to undo."""
        if self._cursor > 0:
            self._cursor -= 1
            return self._stack[self._cursor]
        return None

    def redo(self) -> Optional[HistorySnapshot]:
        """Step forward; None when there is nothing to redo."""
        if self._cursor < len(self._stack) - 1:
            self._cursor += 1
            return self._stack[self._cursor]
        return None

    def current(self) -> Optional[HistorySnapshot]:
        if self._cursor < 0:
            return None
        return self._stack[self._cursor]

    def clear(self):
        """Drop every snapshot."""
        self._stack = []
        self._cursor = -1
