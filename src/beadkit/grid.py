"""
Bead pattern grid: a rectangular arrangement of palette-matched cells.
"""

from dataclasses import dataclass
from typing import Iterator, List, Optional, Sequence, Tuple

import numpy as np

from .palette import Palette, PaletteColor


@dataclass
class Cell:
    """Represents a single cell in the bead pattern grid."""
    row: int
    col: int
    matched_color: PaletteColor
    sampled_color: Tuple[int, int, int]

    @property
    def rgb(self) -> Tuple[int, int, int]:
        """Get RGB color for this cell."""
        return self.matched_color.rgb

    @property
    def hex(self) -> str:
        """Get hex color for this cell."""
        return self.matched_color.hex

    def copy(self) -> "Cell":
        # Palette colors are shared by reference, never copied
        return Cell(self.row, self.col, self.matched_color, self.sampled_color)


class Grid:
    """Rows x cols of cells; each cell's row/col always equals its position."""

    def __init__(self, cells: Sequence[Sequence[Cell]]):
        """Build a grid from rows of cells, validating its shape."""
        self._cells: List[List[Cell]] = [list(row) for row in cells]
        self.rows = len(self._cells)
        self.cols = len(self._cells[0]) if self._cells else 0
        self._validate()

    def _validate(self):
        if self.rows == 0 or self.cols == 0:
            raise ValueError("Grid must have at least one row and one column")

        for r, row in enumerate(self._cells):
            if len(row) != self.cols:
                raise ValueError(
                    f"Grid is not rectangular: row {r} has {len(row)} cells, expected {self.cols}"
                )
            for c, cell in enumerate(row):
                if cell.row != r or cell.col != c:
                    raise ValueError(
                        f"Cell at ({r}, {c}) reports position ({cell.row}, {cell.col})"
                    )

    @classmethod
    def from_colors(cls, colors: Sequence[Sequence[PaletteColor]],
                    sampled: Optional[np.ndarray] = None) -> "Grid":
        """
        Build a grid from a matrix of palette colors.

        Args:
            colors: Rows of matched colors
            sampled: Optional (rows, cols, 3) pre-match colors; defaults to the
                matched colors themselves
        """
        cells = []
        for r, row in enumerate(colors):
            cell_row = []
            for c, color in enumerate(row):
                if sampled is not None:
                    source = tuple(int(v) for v in sampled[r][c])
                else:
                    source = color.rgb
                cell_row.append(Cell(r, c, color, source))
            cells.append(cell_row)
        return cls(cells)

    @property
    def shape(self) -> Tuple[int, int]:
        return self.rows, self.cols

    @property
    def total_cells(self) -> int:
        return self.rows * self.cols

    def in_bounds(self, row: int, col: int) -> bool:
        return 0 <= row < self.rows and 0 <= col < self.cols

    def cell(self, row: int, col: int) -> Optional[Cell]:
        """Get grid cell at specified coordinates, None when out of range."""
        if not self.in_bounds(row, col):
            return None
        return self._cells[row][col]

    def row_cells(self, row: int) -> List[Cell]:
        return list(self._cells[row])

    def __iter__(self) -> Iterator[Cell]:
        """Iterate cells row-major."""
        for row in self._cells:
            yield from row

    def __repr__(self) -> str:
        return f"Grid(rows={self.rows}, cols={self.cols})"

    def copy(self) -> "Grid":
        """Independent deep copy; palette colors stay shared references."""
        return Grid([[cell.copy() for cell in row] for row in self._cells])

    def color_matrix(self) -> List[List[str]]:
        """Matched color ids, row by row."""
        return [[cell.matched_color.id for cell in row] for row in self._cells]

    def to_rgb_array(self) -> np.ndarray:
        """Matched colors as a (rows, cols, 3) uint8 image."""
        return np.array(
            [[cell.matched_color.rgb for cell in row] for row in self._cells],
            dtype=np.uint8,
        )

    def content_equals(self, other: "Grid") -> bool:
        """Same shape, same matched color ids and same sampled colors."""
        if self.shape != other.shape:
            return False
        return all(
            a.matched_color.id == b.matched_color.id and a.sampled_color == b.sampled_color
            for a, b in zip(self, other)
        )

    def to_dict(self) -> dict:
        """Persistence shape: cells reference palette colors by id."""
        return {
            'rows': self.rows,
            'cols': self.cols,
            'cells': [
                [
                    {'color': cell.matched_color.id, 'sampled': list(cell.sampled_color)}
                    for cell in row
                ]
                for row in self._cells
            ],
        }

    @classmethod
    def from_dict(cls, data: dict, palette: Palette) -> "Grid":
        """Rebuild a grid against a palette; unknown color ids are rejected."""
        cells = []
        for r, row in enumerate(data['cells']):
            cell_row = []
            for c, item in enumerate(row):
                color = palette.get(item['color'])
                if color is None:
                    raise ValueError(f"Unknown palette color id at ({r}, {c}): {item['color']!r}")
                sampled = tuple(int(v) for v in item.get('sampled', color.rgb))
                cell_row.append(Cell(r, c, color, sampled))
            cells.append(cell_row)

        grid = cls(cells)
        if (grid.rows, grid.cols) != (data.get('rows', grid.rows), data.get('cols', grid.cols)):
            raise ValueError("Grid dimensions do not match the stored cells")
        return grid
