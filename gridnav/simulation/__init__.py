"""
Simulation Module
=================

Step scheduling and the navigation session controller.
"""

from .scheduler import StepScheduler, SimulatedClock
from .controller import SimulationSession, SimulationState

__all__ = [
    'StepScheduler',
    'SimulatedClock',
    'SimulationSession',
    'SimulationState',
]
