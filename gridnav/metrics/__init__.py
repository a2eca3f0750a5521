"""
Metrics Module
==============

Simulation statistics and path analysis.
"""

from .path_metrics import (
    SimulationStats,
    PathSummary,
    summarize_path,
    find_corner_cuts,
    compute_efficiency,
    manhattan_distance,
    chebyshev_distance,
)

__all__ = [
    'SimulationStats',
    'PathSummary',
    'summarize_path',
    'find_corner_cuts',
    'compute_efficiency',
    'manhattan_distance',
    'chebyshev_distance',
]
