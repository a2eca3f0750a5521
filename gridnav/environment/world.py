"""
Grid World Module
=================

Fixed-size grid of cell classifications. The only way other components
read or change cell state.
"""

import numpy as np
from typing import Tuple, Optional, List

from ..errors import OutOfBoundsError
from ..layout import CellType, GeneratedLayout


# 8-connected neighbourhood: N, E, S, W, then the diagonals
DIRECTIONS: Tuple[Tuple[int, int], ...] = (
    (0, -1), (1, 0), (0, 1), (-1, 0),
    (1, -1), (1, 1), (-1, 1), (-1, -1),
)


class Grid:
    """
    Obstacle grid for agent navigation.

    Contains:
    - Cell classification array (CellType values), indexed [x, y]

    Provides:
    - Bounds and obstacle queries
    - Single-cell mutation (set / toggle)
    - Neighbour enumeration for search

    Dimensions are fixed at construction. No derived state is cached, so
    every mutation is visible to the next query.
    """

    def __init__(self, width: int, height: int, cells: Optional[np.ndarray] = None):
        """
        Initialize grid.

        Args:
            width: Number of columns
            height: Number of rows
            cells: Optional initial cell array of shape (width, height)
        """
        if width <= 0 or height <= 0:
            raise ValueError(f"Grid dimensions must be positive, got {width}x{height}")
        self._width = int(width)
        self._height = int(height)

        if cells is None:
            self._cells = np.full((self._width, self._height), CellType.EMPTY, dtype=np.int8)
        else:
            cells = np.asarray(cells)
            if cells.shape != (self._width, self._height):
                raise ValueError(
                    f"Cell array shape {cells.shape} does not match grid {self._width}x{self._height}"
                )
            self._cells = cells.astype(np.int8, copy=True)

    @classmethod
    def from_layout(cls, layout: GeneratedLayout) -> 'Grid':
        """Create grid from a generated layout"""
        return cls(layout.width, layout.height, layout.cells)

    @classmethod
    def from_strings(cls, rows: List[str], obstacle: str = '#') -> 'Grid':
        """
        Create grid from text rows, one string per y.

        Any character equal to `obstacle` becomes an obstacle cell.
        """
        height = len(rows)
        width = len(rows[0]) if rows else 0
        grid = cls(width, height)
        for y, row in enumerate(rows):
            if len(row) != width:
                raise ValueError(f"Row {y} has length {len(row)}, expected {width}")
            for x, ch in enumerate(row):
                if ch == obstacle:
                    grid._cells[x, y] = CellType.OBSTACLE
        return grid

    # ==================== Property Access ====================

    @property
    def width(self) -> int:
        return self._width

    @property
    def height(self) -> int:
        return self._height

    @property
    def shape(self) -> Tuple[int, int]:
        return (self._width, self._height)

    def snapshot(self) -> np.ndarray:
        """Copy of the cell array, indexed [x, y]"""
        return self._cells.copy()

    # ==================== Cell Queries ====================

    def in_bounds(self, x: int, y: int) -> bool:
        """Check if cell is within grid bounds"""
        return 0 <= x < self._width and 0 <= y < self._height

    def check_bounds(self, pos: Tuple[int, int]) -> Tuple[int, int]:
        """Return pos as an int tuple, or raise OutOfBoundsError"""
        x, y = int(pos[0]), int(pos[1])
        if not self.in_bounds(x, y):
            raise OutOfBoundsError((x, y), self._width, self._height)
        return (x, y)

    def cell_at(self, pos: Tuple[int, int]) -> CellType:
        """Get cell classification, raising OutOfBoundsError outside the grid"""
        x, y = self.check_bounds(pos)
        return CellType(int(self._cells[x, y]))

    def is_obstacle(self, x: int, y: int) -> bool:
        """Check if in-bounds cell is an obstacle (False outside the grid)"""
        if not self.in_bounds(x, y):
            return False
        return bool(self._cells[x, y] == CellType.OBSTACLE)

    def is_passable(self, x: int, y: int) -> bool:
        """Check if cell can be entered (in bounds and not an obstacle)"""
        if not self.in_bounds(x, y):
            return False
        return bool(self._cells[x, y] != CellType.OBSTACLE)

    def neighbors(self, x: int, y: int) -> List[Tuple[int, int]]:
        """Get passable 8-connected neighbour cells"""
        result = []
        for dx, dy in DIRECTIONS:
            nx, ny = x + dx, y + dy
            if self.is_passable(nx, ny):
                result.append((nx, ny))
        return result

    def obstacle_count(self) -> int:
        """Number of obstacle cells"""
        return int(np.count_nonzero(self._cells == CellType.OBSTACLE))

    # ==================== Mutation ====================

    def set_cell(self, pos: Tuple[int, int], cell: CellType):
        """
        Set a single cell.

        Raises:
            OutOfBoundsError: pos outside the grid; nothing is changed
        """
        x, y = self.check_bounds(pos)
        self._cells[x, y] = CellType(cell)

    def toggle(self, pos: Tuple[int, int]) -> CellType:
        """Flip a cell between EMPTY and OBSTACLE and return the new value"""
        new_cell = self.cell_at(pos).toggled()
        self.set_cell(pos, new_cell)
        return new_cell

    def __repr__(self) -> str:
        return f"Grid({self._width}x{self._height}, obstacles={self.obstacle_count()})"
