"""
Grid Navigation Engine
======================

A* pathfinding and step-by-step navigation simulation on a 2D obstacle grid.

An agent follows an 8-connected A* path towards a target, one waypoint per
scheduled step, scanning for obstacles within a limited sensor radius. Any
change to the grid, agent or target replans from the agent's current cell.

Key Features:
- Bounds-checked grid model with single-cell mutation
- A* with deterministic tie-breaking and configurable heuristic
- Euclidean-radius obstacle sensor
- Session controller driven by a wall-clock or simulated scheduler
- Default and seeded random obstacle layouts
- Snapshot rendering (matplotlib and plain text) and headless suites

Version: 1.0.0
"""

__version__ = "1.0.0"
__author__ = "Grid Navigation Team"

from .config import Config
from .errors import GridNavError, OutOfBoundsError, InvalidConfigurationError, SessionClosedError
from .layout import CellType, LayoutGenerator, generate_agent_target
from .environment import Grid, SensorModel, SensorReading
from .metrics import SimulationStats, compute_efficiency
from .planning import AStarPlanner, find_path
from .simulation import SimulationSession, SimulationState, StepScheduler
from .visualization import GridVisualizer, render_ascii
from .pipeline import ScenarioRunner

__all__ = [
    'Config',
    'GridNavError', 'OutOfBoundsError', 'InvalidConfigurationError', 'SessionClosedError',
    'CellType', 'LayoutGenerator', 'generate_agent_target',
    'Grid', 'SensorModel', 'SensorReading',
    'SimulationStats', 'compute_efficiency',
    'AStarPlanner', 'find_path',
    'SimulationSession', 'SimulationState', 'StepScheduler',
    'GridVisualizer', 'render_ascii',
    'ScenarioRunner',
]
