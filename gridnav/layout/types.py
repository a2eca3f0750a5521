"""
Cell Types Module
=================

Defines the cell type enumeration and obstacle shapes.
"""

from enum import IntEnum
from dataclasses import dataclass
from typing import Iterator, Tuple


class CellType(IntEnum):
    """
    Cell classification.

    Values are integers for efficient numpy array storage. Start, target
    and path markers are derived from session state and never stored.
    """
    EMPTY = 0
    OBSTACLE = 1

    @property
    def name_lower(self) -> str:
        """Get lowercase name"""
        return self.name.lower()

    def is_traversable(self) -> bool:
        """Check if cell can be entered"""
        return self != CellType.OBSTACLE

    def toggled(self) -> 'CellType':
        """Return the opposite classification"""
        return CellType.EMPTY if self == CellType.OBSTACLE else CellType.OBSTACLE


@dataclass(frozen=True)
class ObstacleRect:
    """Axis-aligned block of obstacle cells"""
    x: int
    y: int
    width: int
    height: int

    def cells(self, grid_width: int, grid_height: int) -> Iterator[Tuple[int, int]]:
        """Yield the covered cells, clipped to the grid"""
        for y in range(max(0, self.y), min(grid_height, self.y + self.height)):
            for x in range(max(0, self.x), min(grid_width, self.x + self.width)):
                yield (x, y)

    @classmethod
    def from_tuple(cls, rect) -> 'ObstacleRect':
        x, y, w, h = rect
        return cls(int(x), int(y), int(w), int(h))
