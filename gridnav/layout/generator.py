"""
Layout Generator Module
=======================

Builds obstacle layouts: the fixed default layout and seeded random layouts.
Only produces cell arrays; the Grid model wraps them.
"""

import numpy as np
from scipy.ndimage import gaussian_filter
from typing import Tuple, Optional, Iterable
from dataclasses import dataclass

from .types import CellType, ObstacleRect
from ..config import GridConfig, LayoutConfig


@dataclass
class GeneratedLayout:
    """Container for a generated cell array, indexed [x, y]"""
    cells: np.ndarray

    @property
    def width(self) -> int:
        return self.cells.shape[0]

    @property
    def height(self) -> int:
        return self.cells.shape[1]

    @property
    def obstacle_ratio(self) -> float:
        """Fraction of cells that are obstacles"""
        return float(np.mean(self.cells == CellType.OBSTACLE))


class LayoutGenerator:
    """
    Obstacle layout generator.

    Creates:
    - The default layout (configured obstacle rectangles)
    - Random blob layouts from smoothed uniform noise, with clear
      discs around the agent and target positions
    """

    def __init__(self,
                 grid_config: Optional[GridConfig] = None,
                 layout_config: Optional[LayoutConfig] = None,
                 seed: Optional[int] = None):
        self.grid_config = grid_config or GridConfig()
        self.layout_config = layout_config or LayoutConfig()
        self.seed = seed
        self.rng = np.random.default_rng(seed)
        self.width = self.grid_config.width
        self.height = self.grid_config.height

    def empty_layout(self) -> GeneratedLayout:
        """Layout without obstacles"""
        return GeneratedLayout(
            cells=np.full((self.width, self.height), CellType.EMPTY, dtype=np.int8)
        )

    def default_layout(self) -> GeneratedLayout:
        """Layout made of the configured obstacle rectangles"""
        return self.from_rectangles(self.grid_config.default_obstacles)

    def from_rectangles(self, rects: Iterable) -> GeneratedLayout:
        """Layout made of (x, y, width, height) rectangles, clipped to the grid"""
        layout = self.empty_layout()
        for rect in rects:
            if not isinstance(rect, ObstacleRect):
                rect = ObstacleRect.from_tuple(rect)
            for x, y in rect.cells(self.width, self.height):
                layout.cells[x, y] = CellType.OBSTACLE
        return layout

    def generate(self,
                 agent: Optional[Tuple[int, int]] = None,
                 target: Optional[Tuple[int, int]] = None) -> GeneratedLayout:
        """
        Generate a random obstacle layout.

        Args:
            agent: Position to keep clear (default: configured agent)
            target: Position to keep clear (default: configured target)

        Returns:
            GeneratedLayout with roughly `obstacle_density` obstacle cells
        """
        density = self.layout_config.obstacle_density
        layout = self.empty_layout()
        if density <= 0.0:
            return layout

        noise = self.rng.random((self.width, self.height))
        smoothed = gaussian_filter(noise, sigma=self.layout_config.smoothing_sigma)

        # Top `density` quantile of the smoothed field becomes obstacles
        threshold = np.quantile(smoothed, 1.0 - density)
        layout.cells[smoothed > threshold] = CellType.OBSTACLE

        agent = agent if agent is not None else self.grid_config.default_agent
        target = target if target is not None else self.grid_config.default_target
        self._clear_disc(layout.cells, agent, self.layout_config.clearance_radius)
        self._clear_disc(layout.cells, target, self.layout_config.clearance_radius)

        return layout

    def _clear_disc(self, cells: np.ndarray, center: Tuple[int, int], radius: int):
        """Clear obstacles within `radius` of center"""
        cx, cy = center
        x, y = np.ogrid[0:self.width, 0:self.height]
        mask = (x - cx) ** 2 + (y - cy) ** 2 <= radius ** 2
        cells[mask] = CellType.EMPTY


def generate_agent_target(grid_config: GridConfig,
                          seed: Optional[int] = None) -> Tuple[Tuple[int, int], Tuple[int, int]]:
    """
    Generate agent and target positions in opposite corners.

    Agent: top-left quarter of the grid
    Target: bottom-right quarter of the grid
    """
    rng = np.random.default_rng(seed)
    w, h = grid_config.width, grid_config.height

    agent = (
        int(rng.integers(0, max(1, w // 4))),
        int(rng.integers(0, max(1, h // 4)))
    )

    target = (
        int(rng.integers(w - max(1, w // 4), w)),
        int(rng.integers(h - max(1, h // 4), h))
    )

    return agent, target
