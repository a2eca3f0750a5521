"""
Configuration Module
====================

Centralized configuration management for the grid navigation engine.
"""

from .settings import (
    Config,
    GridConfig,
    SensorConfig,
    SimulationConfig,
    PlannerConfig,
    LayoutConfig,
    VisualizationConfig,
    HEURISTICS,
)

__all__ = [
    'Config',
    'GridConfig',
    'SensorConfig',
    'SimulationConfig',
    'PlannerConfig',
    'LayoutConfig',
    'VisualizationConfig',
    'HEURISTICS',
]
