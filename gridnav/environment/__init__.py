"""
Environment Module
==================

Grid representation and obstacle sensing.
"""

from .world import Grid, DIRECTIONS
from .sensor import (
    SensorModel,
    SensorBounds,
    SensorReading,
    Detection,
    detect_obstacles,
)

__all__ = [
    'Grid',
    'DIRECTIONS',
    'SensorModel',
    'SensorBounds',
    'SensorReading',
    'Detection',
    'detect_obstacles',
]
