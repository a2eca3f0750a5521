"""
Layout Module
=============

Cell types, obstacle shapes, and obstacle layout generation.
"""

from .types import CellType, ObstacleRect
from .generator import LayoutGenerator, GeneratedLayout, generate_agent_target

__all__ = [
    'CellType',
    'ObstacleRect',
    'LayoutGenerator',
    'GeneratedLayout',
    'generate_agent_target',
]
