"""
Interactive editing of a finalized bead pattern grid.

The editor owns one grid and mutates it in place. Edits are not recorded
automatically: callers invoke :meth:`PatternEditor.commit` after the edits they
want checkpointed, which pushes a snapshot into the attached history and
notifies subscribers.
"""

from collections import deque
from typing import Callable, List, Optional, Tuple

from .grid import Grid
from .history import HistoryManager, HistorySnapshot
from .palette import PaletteColor
from .stats import color_statistics

CommitListener = Callable[[Grid, Optional[str]], None]

# 4-connected neighbour offsets: up, down, left, right
_NEIGHBOURS = ((-1, 0), (1, 0), (0, -1), (0, 1))


class PatternEditor:
    """Single-writer editing session over a grid."""

    def __init__(self, grid: Grid, history: Optional[HistoryManager] = None):
        self.grid = grid
        self.history = history
        self._listeners: List[CommitListener] = []

    def set_cell(self, row: int, col: int, color: PaletteColor) -> int:
        """
        Paint one cell. Out-of-range coordinates are ignored.

        Returns:
            Number of cells whose color changed (0 or 1)
        """
        cell = self.grid.cell(row, col)
        if cell is None or cell.matched_color.id == color.id:
            return 0
        cell.matched_color = color
        return 1

    def pick_color(self, row: int, col: int) -> Optional[PaletteColor]:
        """Eyedropper: color at a cell, None when out of range."""
        cell = self.grid.cell(row, col)
        return cell.matched_color if cell is not None else None

    def flood_fill(self, row: int, col: int, new_color: PaletteColor) -> int:
        """
        Recolor the 4-connected region of same-colored cells containing (row, col).

        Uses an explicit breadth-first queue, so region size is not bounded by
        the call stack.

        Returns:
            Number of cells recolored
        """
        start = self.grid.cell(row, col)
        if start is None:
            return 0

        target_id = start.matched_color.id
        if target_id == new_color.id:
            return 0

        filled = 0
        visited = {(row, col)}
        queue = deque([(row, col)])
        while queue:
            r, c = queue.popleft()
            cell = self.grid.cell(r, c)
            if cell is None or cell.matched_color.id != target_id:
                continue

            cell.matched_color = new_color
            filled += 1

            for dr, dc in _NEIGHBOURS:
                nr, nc = r + dr, c + dc
                if (nr, nc) not in visited and self.grid.in_bounds(nr, nc):
                    visited.add((nr, nc))
                    queue.append((nr, nc))

        return filled

    def replace_color(self, old_color: PaletteColor, new_color: PaletteColor) -> int:
        """
        Swap every occurrence of ``old_color`` for ``new_color``, anywhere in the grid.

        Returns:
            Number of cells recolored
        """
        if old_color.id == new_color.id:
            return 0

        replaced = 0
        for cell in self.grid:
            if cell.matched_color.id == old_color.id:
                cell.matched_color = new_color
                replaced += 1
        return replaced

    def color_statistics(self) -> List[Tuple[PaletteColor, int]]:
        return color_statistics(self.grid)

    def subscribe(self, listener: CommitListener) -> Callable[[], None]:
        """Register a commit listener; returns a function that unregisters it."""
        self._listeners.append(listener)

        def unsubscribe():
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def commit(self, label: Optional[str] = None) -> Optional[HistorySnapshot]:
        """
        Checkpoint the current grid and notify subscribers.

        Returns:
            The pushed snapshot, or None when no history is attached
        """
        snapshot = None
        if self.history is not None:
            snapshot = self.history.push_snapshot(self.grid, label=label)
        for listener in list(self._listeners):
            listener(self.grid, label)
        return snapshot

    def undo(self) -> bool:
        """Restore the previous checkpoint; False when there is none."""
        if self.history is None:
            return False
        snapshot = self.history.undo()
        if snapshot is None:
            return False
        self.grid = snapshot.restore()
        return True

    def redo(self) -> bool:
        """Restore the next checkpoint; False when there is none."""
        if self.history is None:
            return False
        snapshot = self.history.redo()
        if snapshot is None:
            return False
        self.grid = snapshot.restore()
        return True
