"""
A* Planner Module
=================

A* pathfinding over the obstacle grid with 8-directional, unit-cost moves.
"""

import heapq
from typing import Tuple, List, Optional, Dict, Set, Callable
from dataclasses import dataclass

from ..environment import Grid, DIRECTIONS
from ..metrics import manhattan_distance, chebyshev_distance


HEURISTIC_FUNCTIONS: Dict[str, Callable[[Tuple[int, int], Tuple[int, int]], int]] = {
    'manhattan': manhattan_distance,
    'chebyshev': chebyshev_distance,
}


@dataclass
class PlannerStats:
    """Statistics from a planning run"""
    iterations: int = 0
    nodes_expanded: int = 0
    path_length: int = 0
    success: bool = False
    reason: str = ''


@dataclass
class SearchNode:
    """Search-time record; parent is an index into the run's node list (-1 for the start)"""
    position: Tuple[int, int]
    g: int
    h: int
    f: int
    parent: int = -1


class AStarPlanner:
    """
    A* planner on a Grid.

    Open set ordering:
    - lowest f first
    - on equal f, lowest h (closest to the target)
    - on equal f and h, earliest insertion; a node re-queued after its g
      improves counts as inserted at that moment

    Notes:
    - The default Manhattan heuristic can overestimate under diagonal
      moves, so a detour found around obstacles is not guaranteed to be
      the shortest. 'chebyshev' is exact on an open grid.
    - With allow_corner_cutting (default) a diagonal step may pass
      between two obstacle cells.
    - The start cell is expanded even when it is an obstacle.
    """

    def __init__(self,
                 grid: Grid,
                 heuristic: str = 'manhattan',
                 allow_corner_cutting: bool = True,
                 max_expansions: Optional[int] = None):
        """
        Initialize A* planner.

        Args:
            grid: Grid to search
            heuristic: 'manhattan' or 'chebyshev'
            allow_corner_cutting: Permit diagonal steps between two obstacles
            max_expansions: Maximum node expansions (None for unlimited)
        """
        if heuristic not in HEURISTIC_FUNCTIONS:
            raise ValueError(f"Unknown heuristic: {heuristic}")
        self.grid = grid
        self.heuristic_name = heuristic
        self._heuristic = HEURISTIC_FUNCTIONS[heuristic]
        self.allow_corner_cutting = allow_corner_cutting
        self.max_expansions = max_expansions

        # Last planning stats
        self.last_stats: Optional[PlannerStats] = None

    @classmethod
    def from_config(cls, grid: Grid, planner_config) -> 'AStarPlanner':
        return cls(
            grid,
            heuristic=planner_config.heuristic,
            allow_corner_cutting=planner_config.allow_corner_cutting,
            max_expansions=planner_config.max_expansions
        )

    def plan(self,
             start: Tuple[int, int],
             target: Tuple[int, int]) -> List[Tuple[int, int]]:
        """
        Find path from start to target.

        Args:
            start: Start position (x, y)
            target: Target position (x, y)

        Returns:
            Path as list of (x, y) positions from start to target, or empty
            list if no path found
        """
        stats = PlannerStats()
        start = (int(start[0]), int(start[1]))
        target = (int(target[0]), int(target[1]))

        if not self.grid.in_bounds(*start):
            stats.reason = 'start_out_of_bounds'
            self.last_stats = stats
            return []

        if not self.grid.in_bounds(*target):
            stats.reason = 'target_out_of_bounds'
            self.last_stats = stats
            return []

        h0 = self._heuristic(start, target)
        nodes: List[SearchNode] = [SearchNode(start, 0, h0, h0)]
        open_heap = [(h0, h0, 0, 0)]  # (f, h, insertion sequence, node index)
        open_lookup: Dict[Tuple[int, int], int] = {start: 0}
        closed: Set[Tuple[int, int]] = set()
        sequence = 1

        while open_heap:
            if self.max_expansions is not None and stats.nodes_expanded >= self.max_expansions:
                stats.reason = 'max_expansions'
                self.last_stats = stats
                return []

            f, _, _, index = heapq.heappop(open_heap)
            current = nodes[index]

            # Entry superseded by an in-place improvement
            if current.position in closed or f != current.f:
                continue

            stats.iterations += 1

            # Target check
            if current.position == target:
                path = self._reconstruct_path(nodes, index)
                stats.path_length = len(path)
                stats.success = True
                stats.reason = 'success'
                self.last_stats = stats
                return path

            del open_lookup[current.position]
            closed.add(current.position)
            stats.nodes_expanded += 1

            # Expand neighbors
            g_new = current.g + 1
            for neighbor in self._get_neighbors(current.position):
                if neighbor in closed:
                    continue

                existing = open_lookup.get(neighbor)
                if existing is None:
                    h = self._heuristic(neighbor, target)
                    nodes.append(SearchNode(neighbor, g_new, h, g_new + h, index))
                    open_lookup[neighbor] = len(nodes) - 1
                    heapq.heappush(open_heap, (g_new + h, h, sequence, len(nodes) - 1))
                    sequence += 1
                elif g_new < nodes[existing].g:
                    node = nodes[existing]
                    node.g = g_new
                    node.f = g_new + node.h
                    node.parent = index
                    heapq.heappush(open_heap, (node.f, node.h, sequence, existing))
                    sequence += 1

        # No path found
        stats.reason = 'no_path_found'
        self.last_stats = stats
        return []

    def _get_neighbors(self, pos: Tuple[int, int]) -> List[Tuple[int, int]]:
        """Get passable 8-connected neighbors"""
        x, y = pos
        if self.allow_corner_cutting:
            return self.grid.neighbors(x, y)

        neighbors = []
        for dx, dy in DIRECTIONS:
            nx, ny = x + dx, y + dy
            if not self.grid.is_passable(nx, ny):
                continue
            if dx and dy and (self.grid.is_obstacle(x + dx, y) or self.grid.is_obstacle(x, y + dy)):
                continue
            neighbors.append((nx, ny))
        return neighbors

    def _reconstruct_path(self, nodes: List[SearchNode], index: int) -> List[Tuple[int, int]]:
        """Follow parent indices back to the start"""
        path = []
        while index != -1:
            node = nodes[index]
            path.append(node.position)
            index = node.parent
        path.reverse()
        return path


def find_path(grid: Grid,
              start: Tuple[int, int],
              target: Tuple[int, int],
              **planner_kwargs) -> List[Tuple[int, int]]:
    """One-shot A* search; see AStarPlanner for options"""
    return AStarPlanner(grid, **planner_kwargs).plan(start, target)
