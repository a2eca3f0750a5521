"""
Simulation Controller Module
============================

Session object owning the grid, agent, target, current path and statistics.
Advances the agent one waypoint per scheduled step and replans whenever the
grid, agent or target changes.
"""

from enum import Enum
from dataclasses import replace
from typing import Tuple, List, Dict, Optional, Callable, Any

from ..config import Config
from ..environment import Grid, SensorModel, SensorReading
from ..errors import InvalidConfigurationError, SessionClosedError
from ..layout import CellType, LayoutGenerator
from ..metrics import SimulationStats, compute_efficiency
from ..planning import AStarPlanner, PlannerStats
from .scheduler import StepScheduler


class SimulationState(Enum):
    """Playback state"""
    IDLE = 'idle'
    RUNNING = 'running'
    FINISHED = 'finished'


class SimulationSession:
    """
    Single navigation session.

    Main loop (while RUNNING):
    1. Wait one step delay on the scheduler
    2. Move the agent to the next path waypoint
    3. Read the sensor at the new position
    4. Update elapsed time and detection count
    5. Finish at the last waypoint, otherwise schedule the next step

    Any change to the grid, agent or target cancels the pending step,
    replans from the agent's current cell and, if RUNNING, continues on the
    new path. At most one step is pending at any time.

    The path index counts steps taken along the current path, so the next
    waypoint is path[path_index + 1] and a path of L nodes takes L - 1 steps.
    """

    def __init__(self,
                 config: Optional[Config] = None,
                 grid: Optional[Grid] = None,
                 scheduler: Optional[StepScheduler] = None,
                 step_callback: Optional[Callable[['SimulationSession', Dict[str, Any]], None]] = None):
        """
        Initialize session and plan the first path.

        Args:
            config: Configuration object (validated here)
            grid: Grid to navigate (default: configured default layout)
            scheduler: Step scheduler (default: wall clock)
            step_callback: Called after every step as fn(session, info)
        """
        self.config = (config or Config()).validate()

        if grid is None:
            generator = LayoutGenerator(self.config.grid, self.config.layout)
            grid = Grid.from_layout(generator.default_layout())
        self._grid = grid

        self._default_agent = grid.check_bounds(self.config.grid.default_agent)
        self._default_target = grid.check_bounds(self.config.grid.default_target)

        self.scheduler = scheduler or StepScheduler()
        self.step_callback = step_callback

        self.planner = AStarPlanner.from_config(grid, self.config.planner)
        self.sensor = SensorModel(grid)

        self._agent = self._default_agent
        self._target = self._default_target
        self._sensor_range = self.config.sensor.default_range
        self._step_delay_ms = self.config.simulation.default_step_delay_ms

        self._path: Tuple[Tuple[int, int], ...] = ()
        self._path_index = 0
        self._reading: Optional[SensorReading] = None
        self._stats = SimulationStats()
        self._state = SimulationState.IDLE
        self._pending = None
        self._closed = False

        self._trail: List[Tuple[int, int]] = [self._agent]
        self._replan_count = 0
        self._step_count = 0

        self._replan('initial')

    # ==================== Read Accessors ====================

    @property
    def grid(self) -> Grid:
        return self._grid

    @property
    def agent(self) -> Tuple[int, int]:
        return self._agent

    @property
    def target(self) -> Tuple[int, int]:
        return self._target

    @property
    def path(self) -> Tuple[Tuple[int, int], ...]:
        return self._path

    @property
    def path_index(self) -> int:
        return self._path_index

    @property
    def remaining_steps(self) -> int:
        return max(0, len(self._path) - 1 - self._path_index)

    @property
    def next_waypoint(self) -> Optional[Tuple[int, int]]:
        if self.remaining_steps == 0:
            return None
        return self._path[self._path_index + 1]

    @property
    def sensor_reading(self) -> Optional[SensorReading]:
        """Latest reading, or None before the first step"""
        return self._reading

    @property
    def stats(self) -> SimulationStats:
        """Copy of the current statistics"""
        return replace(self._stats)

    @property
    def state(self) -> SimulationState:
        return self._state

    @property
    def is_running(self) -> bool:
        return self._state is SimulationState.RUNNING

    @property
    def sensor_range(self) -> int:
        return self._sensor_range

    @property
    def step_delay_ms(self) -> float:
        return self._step_delay_ms

    @property
    def trail(self) -> List[Tuple[int, int]]:
        """Positions occupied since the last reset or reposition"""
        return list(self._trail)

    @property
    def replan_count(self) -> int:
        return self._replan_count

    @property
    def step_count(self) -> int:
        return self._step_count

    @property
    def has_pending_step(self) -> bool:
        return self._pending is not None

    @property
    def last_planner_stats(self) -> Optional[PlannerStats]:
        return self.planner.last_stats

    # ==================== Commands ====================

    def set_agent_position(self, pos: Tuple[int, int]):
        """Move the agent (raises OutOfBoundsError, leaving state unchanged)"""
        pos = self._grid.check_bounds(pos)
        self._agent = pos
        self._trail = [pos]
        self._replan('agent moved')

    def set_target_position(self, pos: Tuple[int, int]):
        """Move the target (raises OutOfBoundsError, leaving state unchanged)"""
        pos = self._grid.check_bounds(pos)
        self._target = pos
        self._replan('target moved')

    def toggle_obstacle(self, pos: Tuple[int, int]) -> CellType:
        """
        Flip a cell between empty and obstacle, then replan.

        The agent is never relocated, even when the new obstacle is under it.

        Returns:
            New classification of the cell
        """
        new_cell = self._grid.toggle(pos)
        self._replan(f'cell {tuple(pos)} -> {new_cell.name_lower}')
        return new_cell

    def set_sensor_range(self, sensor_range: int):
        """Set sensor radius; applies from the next step"""
        cfg = self.config.sensor
        if not cfg.accepts(sensor_range):
            self._log(f"rejected sensor range {sensor_range!r}")
            raise InvalidConfigurationError(
                f"Sensor range must be an integer in [{cfg.min_range}, {cfg.max_range}], "
                f"got {sensor_range!r}"
            )
        self._sensor_range = sensor_range

    def set_step_delay(self, delay_ms: float):
        """
        Set the delay between steps.

        A pending step is restarted with the new delay.
        """
        cfg = self.config.simulation
        if not cfg.accepts(delay_ms):
            self._log(f"rejected step delay {delay_ms!r}")
            raise InvalidConfigurationError(
                f"Step delay must be in [{cfg.min_step_delay_ms}, {cfg.max_step_delay_ms}] ms, "
                f"got {delay_ms!r}"
            )
        self._step_delay_ms = delay_ms
        if self._pending is not None:
            self._cancel_pending()
            self._schedule_step()

    def start(self) -> bool:
        """
        Start or resume stepping.

        Returns:
            False when there is no path to follow, True otherwise
        """
        if self._closed:
            raise SessionClosedError("Session is closed")
        if not self._path:
            self._log("start ignored: no path")
            return False
        if self._state is SimulationState.RUNNING:
            return True

        if self.remaining_steps == 0:
            self._set_state(SimulationState.FINISHED)
            return True

        self._set_state(SimulationState.RUNNING)
        self._schedule_step()
        return True

    def pause(self):
        """Stop stepping; the path and index are kept"""
        if self._state is not SimulationState.RUNNING:
            return
        self._cancel_pending()
        self._set_state(SimulationState.IDLE)

    def recalculate_path(self) -> Tuple[Tuple[int, int], ...]:
        """Run the planner again without changing anything else"""
        self._replan('manual')
        return self._path

    def reset(self):
        """
        Stop, restore default agent and target, and clear statistics.

        The grid, sensor range and step delay are kept. A new path is
        planned for the default positions.
        """
        self._cancel_pending()
        self._set_state(SimulationState.IDLE)

        self._agent = self._default_agent
        self._target = self._default_target
        self._path = ()
        self._path_index = 0
        self._reading = None
        self._stats = SimulationStats()
        self._trail = [self._agent]
        self._step_count = 0

        self._replan('reset')

    def close(self):
        """Cancel any pending step and stop; the session cannot be restarted"""
        self._cancel_pending()
        if self._state is SimulationState.RUNNING:
            self._set_state(SimulationState.IDLE)
        self._closed = True

    def run_until_halted(self) -> SimulationState:
        """
        Drive the scheduler until no step is pending.

        Blocks for the real step delays on a wall-clock scheduler.
        """
        self.scheduler.run()
        return self._state

    def __enter__(self) -> 'SimulationSession':
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()

    # ==================== Internals ====================

    def _replan(self, reason: str):
        """Cancel the pending step, plan from the agent, and resume if running"""
        self._cancel_pending()

        path = self.planner.plan(self._agent, self._target)
        self._path = tuple(path)
        self._path_index = 0
        self._replan_count += 1

        self._stats.path_length = len(self._path)
        self._stats.efficiency = compute_efficiency(self._agent, self._target, self._path)

        self._log(
            f"replan ({reason}): {self._agent} -> {self._target}, "
            f"{len(self._path)} nodes, reason={self.planner.last_stats.reason}"
        )

        if self._state is SimulationState.FINISHED:
            self._set_state(SimulationState.IDLE)
        elif self._state is SimulationState.RUNNING:
            if not self._path:
                self._set_state(SimulationState.IDLE)
            elif self.remaining_steps == 0:
                self._set_state(SimulationState.FINISHED)
            else:
                self._schedule_step()

    def _schedule_step(self):
        self._pending = self.scheduler.call_later(self._step_delay_ms / 1000.0, self._step)

    def _cancel_pending(self):
        if self._pending is not None:
            self.scheduler.cancel(self._pending)
            self._pending = None

    def _step(self):
        """Advance one waypoint"""
        self._pending = None

        position = self._path[self._path_index + 1]
        self._agent = position
        self._trail.append(position)

        self._reading = self.sensor.detect(position, self._sensor_range)
        self._stats.obstacles_detected = self._reading.count
        self._stats.time_elapsed += self._step_delay_ms / 1000.0

        self._path_index += 1
        self._step_count += 1

        if self.remaining_steps == 0:
            self._set_state(SimulationState.FINISHED)
        else:
            self._schedule_step()

        if self.step_callback is not None:
            self.step_callback(self, self._step_info())

    def _step_info(self) -> Dict[str, Any]:
        return {
            'step': self._step_count,
            'position': self._agent,
            'path_index': self._path_index,
            'remaining_steps': self.remaining_steps,
            'obstacles_detected': self._stats.obstacles_detected,
            'time_elapsed': self._stats.time_elapsed,
            'state': self._state.value,
        }

    def _set_state(self, state: SimulationState):
        if state is not self._state:
            self._log(f"state {self._state.value} -> {state.value}")
            self._state = state

    def _log(self, message: str):
        if self.config.verbose:
            print(f"[session] {message}")

    def to_dict(self) -> Dict[str, Any]:
        """Snapshot of session state for reporting"""
        return {
            'state': self._state.value,
            'agent': self._agent,
            'target': self._target,
            'path': list(self._path),
            'path_index': self._path_index,
            'sensor_range': self._sensor_range,
            'step_delay_ms': self._step_delay_ms,
            'stats': self._stats.to_dict(),
            'sensor_reading': self._reading.to_dict() if self._reading else None,
            'replans': self._replan_count,
            'steps': self._step_count,
        }
