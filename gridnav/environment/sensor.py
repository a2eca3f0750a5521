"""
Sensor Module
=============

Limited-range obstacle sensor. Reports the obstacle cells whose centers lie
within a Euclidean radius of the agent's cell center.
"""

import math
from typing import Tuple, Dict, List, Optional
from dataclasses import dataclass

from .world import Grid
from ..errors import InvalidConfigurationError


@dataclass
class SensorBounds:
    """Square scan window around the agent, clipped to the grid"""
    xmin: int
    xmax: int
    ymin: int
    ymax: int

    @classmethod
    def from_position(cls, pos: Tuple[int, int], radius: int,
                      width: int, height: int) -> 'SensorBounds':
        """Create bounds centered at position"""
        x, y = pos
        return cls(
            xmin=max(0, x - radius),
            xmax=min(width - 1, x + radius),
            ymin=max(0, y - radius),
            ymax=min(height - 1, y + radius)
        )


@dataclass(frozen=True)
class Detection:
    """A detected obstacle cell and its distance from the agent"""
    position: Tuple[int, int]
    distance: float


@dataclass(frozen=True)
class SensorReading:
    """
    Obstacles seen from one agent position.

    Detections are in scan order (row by row, then column), so identical
    inputs always give identical readings.
    """
    position: Tuple[int, int]
    sensor_range: int
    detections: Tuple[Detection, ...] = ()

    @property
    def count(self) -> int:
        return len(self.detections)

    @property
    def positions(self) -> List[Tuple[int, int]]:
        return [d.position for d in self.detections]

    def nearest(self) -> Optional[Detection]:
        """Closest detection (first in scan order on ties), or None"""
        if not self.detections:
            return None
        return min(self.detections, key=lambda d: d.distance)

    def to_dict(self) -> Dict:
        return {
            'position': self.position,
            'sensor_range': self.sensor_range,
            'detections': [
                {'position': d.position, 'distance': d.distance}
                for d in self.detections
            ],
        }


def detect_obstacles(grid: Grid, position: Tuple[int, int], sensor_range: int) -> SensorReading:
    """
    Scan for obstacles around a position.

    Args:
        grid: Grid to scan
        position: Agent cell (x, y)
        sensor_range: Detection radius in cells (must be positive)

    Returns:
        SensorReading with every obstacle cell at distance <= sensor_range

    Raises:
        OutOfBoundsError: position outside the grid
        InvalidConfigurationError: sensor_range not a positive integer
    """
    if (isinstance(sensor_range, bool) or not isinstance(sensor_range, int)
            or sensor_range <= 0):
        raise InvalidConfigurationError(
            f"Sensor range must be a positive integer, got {sensor_range!r}"
        )

    ax, ay = grid.check_bounds(position)
    bounds = SensorBounds.from_position((ax, ay), sensor_range, grid.width, grid.height)

    detections = []
    for y in range(bounds.ymin, bounds.ymax + 1):
        for x in range(bounds.xmin, bounds.xmax + 1):
            if not grid.is_obstacle(x, y):
                continue
            distance = math.hypot(x - ax, y - ay)
            if distance <= sensor_range:
                detections.append(Detection((x, y), distance))

    return SensorReading(
        position=(ax, ay),
        sensor_range=sensor_range,
        detections=tuple(detections)
    )


class SensorModel:
    """Obstacle sensor bound to a grid"""

    def __init__(self, grid: Grid):
        self.grid = grid

    def detect(self, position: Tuple[int, int], sensor_range: int) -> SensorReading:
        return detect_obstacles(self.grid, position, sensor_range)

    def bounds(self, position: Tuple[int, int], sensor_range: int) -> SensorBounds:
        """Scan window for a position"""
        return SensorBounds.from_position(position, sensor_range,
                                          self.grid.width, self.grid.height)
