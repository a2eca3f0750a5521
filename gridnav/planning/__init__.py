"""
Planning Module
===============

A* path planning over the obstacle grid.
"""

from .astar import AStarPlanner, PlannerStats, SearchNode, find_path, HEURISTIC_FUNCTIONS

__all__ = [
    'AStarPlanner',
    'PlannerStats',
    'SearchNode',
    'find_path',
    'HEURISTIC_FUNCTIONS',
]
