"""
Pipeline Module
===============

Headless scenario and suite runners.
"""

from .runner import ScenarioRunner, ScenarioResult, ScenarioStatus, AggregatedResults

__all__ = [
    'ScenarioRunner',
    'ScenarioResult',
    'ScenarioStatus',
    'AggregatedResults',
]
