"""
Path Metrics Module
===================

Simulation statistics and path analysis.
"""

import math
from typing import Dict, List, Sequence, Tuple
from dataclasses import dataclass, asdict


@dataclass
class SimulationStats:
    """
    Derived statistics for a simulation session.

    path_length and efficiency change on replan; obstacles_detected and
    time_elapsed change on every step.
    """
    path_length: int = 0          # nodes in the current path
    obstacles_detected: int = 0   # detections in the latest sensor reading
    time_elapsed: float = 0.0     # simulated seconds
    efficiency: int = 0           # percent, 0 when there is no path

    def to_dict(self) -> Dict:
        return asdict(self)


def manhattan_distance(a: Tuple[int, int], b: Tuple[int, int]) -> int:
    return abs(a[0] - b[0]) + abs(a[1] - b[1])


def chebyshev_distance(a: Tuple[int, int], b: Tuple[int, int]) -> int:
    """Minimum number of 8-connected steps between two cells on an open grid"""
    return max(abs(a[0] - b[0]), abs(a[1] - b[1]))


def compute_efficiency(start: Tuple[int, int],
                       target: Tuple[int, int],
                       path: Sequence[Tuple[int, int]]) -> int:
    """
    Path efficiency as an integer percentage.

    Manhattan distance start -> target over the path node count, rounded
    half up. Diagonal routes can score above 100. Returns 0 for an empty
    path.
    """
    if not path:
        return 0
    ratio = manhattan_distance(start, target) / len(path) * 100.0
    return int(math.floor(ratio + 0.5))


@dataclass
class PathSummary:
    """Geometry of a path"""
    nodes: int = 0
    steps: int = 0
    straight_steps: int = 0
    diagonal_steps: int = 0
    euclidean_length: float = 0.0

    def to_dict(self) -> Dict:
        return asdict(self)


def summarize_path(path: Sequence[Tuple[int, int]]) -> PathSummary:
    """
    Count straight and diagonal moves along a path.

    Args:
        path: List of (x, y) positions

    Returns:
        PathSummary object
    """
    if not path:
        return PathSummary()

    summary = PathSummary(nodes=len(path))
    for prev, cur in zip(path, path[1:]):
        dx = abs(cur[0] - prev[0])
        dy = abs(cur[1] - prev[1])
        summary.steps += 1
        if dx and dy:
            summary.diagonal_steps += 1
        else:
            summary.straight_steps += 1
        summary.euclidean_length += math.hypot(dx, dy)

    return summary


def find_corner_cuts(path: Sequence[Tuple[int, int]], grid) -> List[Tuple[Tuple[int, int], Tuple[int, int]]]:
    """
    Find diagonal steps that squeeze between two obstacle cells.

    Args:
        path: List of (x, y) positions
        grid: Grid the path was planned on

    Returns:
        List of (from, to) pairs for each such step
    """
    cuts = []
    for prev, cur in zip(path, path[1:]):
        dx = cur[0] - prev[0]
        dy = cur[1] - prev[1]
        if dx == 0 or dy == 0:
            continue
        if (grid.is_obstacle(prev[0] + dx, prev[1]) and
                grid.is_obstacle(prev[0], prev[1] + dy)):
            cuts.append((tuple(prev), tuple(cur)))
    return cuts
