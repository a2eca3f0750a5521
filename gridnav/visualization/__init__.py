"""
Visualization Module
====================

Snapshot rendering of navigation sessions.
"""

from .monitor import (
    GridVisualizer,
    render_ascii,
    create_frame_callback,
)

__all__ = [
    'GridVisualizer',
    'render_ascii',
    'create_frame_callback',
]
