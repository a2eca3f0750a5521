"""
Configuration Settings Module
==============================

Dataclass-based configuration with validation and defaults.
Only handles configuration; sessions read their defaults from here.
"""

from dataclasses import dataclass, field, asdict
from typing import Dict, Optional, Any, Tuple

from ..errors import InvalidConfigurationError


HEURISTICS = ('manhattan', 'chebyshev')


@dataclass
class GridConfig:
    """Grid dimensions, default obstacles and default positions"""
    width: int = 40
    height: int = 30

    # Obstacle rectangles as (x, y, width, height)
    default_obstacles: Tuple[Tuple[int, int, int, int], ...] = (
        (10, 5, 3, 8),
        (20, 10, 5, 3),
        (30, 15, 2, 6),
        (15, 20, 8, 2),
        (5, 25, 4, 3),
    )

    default_agent: Tuple[int, int] = (2, 2)
    default_target: Tuple[int, int] = (35, 25)

    def contains(self, pos: Tuple[int, int]) -> bool:
        """Check if position lies inside the configured grid"""
        return 0 <= pos[0] < self.width and 0 <= pos[1] < self.height


@dataclass
class SensorConfig:
    """Obstacle sensor range (cells)"""
    default_range: int = 3
    min_range: int = 1
    max_range: int = 8

    def accepts(self, sensor_range) -> bool:
        return (isinstance(sensor_range, int) and not isinstance(sensor_range, bool)
                and self.min_range <= sensor_range <= self.max_range)


@dataclass
class SimulationConfig:
    """Playback timing (milliseconds between steps)"""
    default_step_delay_ms: int = 500
    min_step_delay_ms: int = 100
    max_step_delay_ms: int = 1000

    def accepts(self, delay_ms) -> bool:
        if isinstance(delay_ms, bool) or not isinstance(delay_ms, (int, float)):
            return False
        return self.min_step_delay_ms <= delay_ms <= self.max_step_delay_ms


@dataclass
class PlannerConfig:
    """
    A* planner options.

    The defaults keep the Manhattan heuristic and allow diagonal steps
    between two obstacles.
    """
    heuristic: str = 'manhattan'  # 'manhattan' or 'chebyshev'
    allow_corner_cutting: bool = True
    max_expansions: Optional[int] = None


@dataclass
class LayoutConfig:
    """Random obstacle layout generation"""
    obstacle_density: float = 0.22  # fraction of cells turned into obstacles
    smoothing_sigma: float = 1.0    # blob size of the smoothed noise
    clearance_radius: int = 2       # kept free around default agent/target


@dataclass
class VisualizationConfig:
    """Snapshot rendering configuration"""
    cell_colors: tuple = ('#f8f9fa', '#dc3545')  # empty, obstacle
    colors: Dict[str, str] = field(default_factory=lambda: {
        'path': '#28a745',
        'trail': '#6c757d',
        'agent': '#007bff',
        'target': '#dc3545',
        'sensor': '#007bff',
        'detected': '#ffc107',
    })
    figure_size: Tuple[int, int] = (10, 8)
    dpi: int = 100


@dataclass
class Config:
    """
    Master configuration class combining all sub-configurations.

    Usage:
        config = Config()
        config = Config(sensor=SensorConfig(default_range=5))
    """
    grid: GridConfig = field(default_factory=GridConfig)
    sensor: SensorConfig = field(default_factory=SensorConfig)
    simulation: SimulationConfig = field(default_factory=SimulationConfig)
    planner: PlannerConfig = field(default_factory=PlannerConfig)
    layout: LayoutConfig = field(default_factory=LayoutConfig)
    visualization: VisualizationConfig = field(default_factory=VisualizationConfig)

    # Global settings
    random_seed: Optional[int] = None
    verbose: bool = False

    def validate(self) -> 'Config':
        """
        Check the configuration for consistency.

        Returns:
            self, so calls can be chained

        Raises:
            InvalidConfigurationError: on the first inconsistent setting
        """
        grid = self.grid
        if grid.width <= 0 or grid.height <= 0:
            raise InvalidConfigurationError(
                f"Grid dimensions must be positive, got {grid.width}x{grid.height}"
            )
        for name in ('default_agent', 'default_target'):
            pos = getattr(grid, name)
            if not grid.contains(pos):
                raise InvalidConfigurationError(
                    f"grid.{name} {tuple(pos)} is outside the {grid.width}x{grid.height} grid"
                )

        sensor = self.sensor
        if sensor.min_range < 1 or sensor.min_range > sensor.max_range:
            raise InvalidConfigurationError(
                f"Invalid sensor range bounds [{sensor.min_range}, {sensor.max_range}]"
            )
        if not sensor.accepts(sensor.default_range):
            raise InvalidConfigurationError(
                f"sensor.default_range {sensor.default_range} outside "
                f"[{sensor.min_range}, {sensor.max_range}]"
            )

        sim = self.simulation
        if sim.min_step_delay_ms <= 0 or sim.min_step_delay_ms > sim.max_step_delay_ms:
            raise InvalidConfigurationError(
                f"Invalid step delay bounds [{sim.min_step_delay_ms}, {sim.max_step_delay_ms}]"
            )
        if not sim.accepts(sim.default_step_delay_ms):
            raise InvalidConfigurationError(
                f"simulation.default_step_delay_ms {sim.default_step_delay_ms} outside "
                f"[{sim.min_step_delay_ms}, {sim.max_step_delay_ms}]"
            )

        if self.planner.heuristic not in HEURISTICS:
            raise InvalidConfigurationError(
                f"Unknown heuristic '{self.planner.heuristic}', expected one of {HEURISTICS}"
            )
        if self.planner.max_expansions is not None and self.planner.max_expansions <= 0:
            raise InvalidConfigurationError("planner.max_expansions must be positive")

        if not 0.0 <= self.layout.obstacle_density < 1.0:
            raise InvalidConfigurationError(
                f"layout.obstacle_density must be in [0, 1), got {self.layout.obstacle_density}"
            )

        return self

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> 'Config':
        """Create Config from (possibly nested) dictionary"""
        config = cls()
        sections = {
            'grid': GridConfig,
            'sensor': SensorConfig,
            'simulation': SimulationConfig,
            'planner': PlannerConfig,
            'layout': LayoutConfig,
            'visualization': VisualizationConfig,
        }
        for key, value in d.items():
            if key in sections and isinstance(value, dict):
                setattr(config, key, sections[key](**value))
            elif hasattr(config, key):
                setattr(config, key, value)
        return config

    def to_dict(self) -> Dict[str, Any]:
        """Export config to dictionary"""
        return asdict(self)
