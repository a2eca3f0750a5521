"""
Errors Module
=============

Exception types raised by the navigation engine.

A target that cannot be reached is not an error: the planner returns an
empty path for it.
"""


class GridNavError(Exception):
    """Base class for engine errors"""


class OutOfBoundsError(GridNavError, ValueError):
    """Position lies outside the grid extents"""

    def __init__(self, position, width: int, height: int):
        self.position = tuple(position)
        self.width = width
        self.height = height
        super().__init__(
            f"Position {self.position} is outside the {width}x{height} grid"
        )


class InvalidConfigurationError(GridNavError, ValueError):
    """Configuration value outside its accepted range"""


class SessionClosedError(GridNavError, RuntimeError):
    """Command sent to a session after close()"""
