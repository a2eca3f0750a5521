#!/usr/bin/env python3
"""
System Tests for the Grid Navigation Engine
===========================================

Covers every module: configuration, grid, layouts, planner, sensor,
scheduler, session, metrics, rendering, scenario runner and CLI.

Sessions run on a simulated clock, so no test sleeps.

Run:
    pytest gridnav/test_system.py -v
"""

import json
import math

import matplotlib
matplotlib.use('Agg')
import matplotlib.pyplot as plt
import numpy as np
import pytest

from gridnav.config import Config, SensorConfig
from gridnav.environment import Grid, SensorModel, detect_obstacles
from gridnav.errors import (
    GridNavError, OutOfBoundsError, InvalidConfigurationError, SessionClosedError
)
from gridnav.layout import CellType, ObstacleRect, LayoutGenerator, generate_agent_target
from gridnav.metrics import (
    compute_efficiency, summarize_path, find_corner_cuts, manhattan_distance, chebyshev_distance
)
from gridnav.planning import AStarPlanner, find_path
from gridnav.simulation import SimulationSession, SimulationState, StepScheduler
from gridnav.visualization import GridVisualizer, render_ascii, create_frame_callback
from gridnav.pipeline import ScenarioRunner, ScenarioStatus
from gridnav.main import main


# Obstacle row at y=2 over x=0..3, gap at x=4
WALL_5X5 = [
    ".....",
    ".....",
    "####.",
    ".....",
    ".....",
]


def open_grid(width=10, height=10):
    return Grid(width, height)


def make_session(grid, agent, target, step_callback=None):
    """Session on a simulated clock with the given grid and default positions"""
    config = Config()
    config.grid.width = grid.width
    config.grid.height = grid.height
    config.grid.default_agent = agent
    config.grid.default_target = target
    return SimulationSession(config, grid, StepScheduler.simulated(), step_callback)


def assert_valid_path(grid, path, start, target):
    assert path[0] == start
    assert path[-1] == target
    for prev, cur in zip(path, path[1:]):
        assert chebyshev_distance(prev, cur) == 1
    for x, y in path[1:]:
        assert grid.is_passable(x, y)


# ==================== Configuration ====================

def test_config_defaults_validate():
    config = Config()
    assert config.validate() is config
    assert (config.grid.width, config.grid.height) == (40, 30)
    assert config.sensor.default_range == 3
    assert config.simulation.default_step_delay_ms == 500
    assert config.planner.heuristic == 'manhattan'
    assert config.planner.allow_corner_cutting


@pytest.mark.parametrize('section, name, value', [
    ('grid', 'default_agent', (40, 0)),
    ('grid', 'default_target', (-1, 5)),
    ('sensor', 'default_range', 9),
    ('simulation', 'default_step_delay_ms', 50),
    ('planner', 'heuristic', 'euclidean'),
    ('planner', 'max_expansions', 0),
    ('layout', 'obstacle_density', 1.0),
])
def test_config_rejects_inconsistent_values(section, name, value):
    config = Config()
    setattr(getattr(config, section), name, value)
    with pytest.raises(InvalidConfigurationError):
        config.validate()


def test_config_from_dict():
    config = Config.from_dict({
        'sensor': {'default_range': 5},
        'planner': {'heuristic': 'chebyshev'},
        'verbose': True,
    })
    assert config.sensor.default_range == 5
    assert config.planner.heuristic == 'chebyshev'
    assert config.verbose
    assert config.simulation.default_step_delay_ms == 500

    restored = Config.from_dict(config.to_dict())
    assert restored.sensor.default_range == 5
    assert restored.validate() is restored


def test_sensor_config_accepts_only_integers():
    cfg = SensorConfig()
    assert cfg.accepts(1) and cfg.accepts(8)
    assert not cfg.accepts(0)
    assert not cfg.accepts(9)
    assert not cfg.accepts(3.0)
    assert not cfg.accepts(True)


# ==================== Grid ====================

def test_grid_bounds_and_queries():
    grid = Grid.from_strings(WALL_5X5)
    assert grid.shape == (5, 5)
    assert grid.in_bounds(0, 0) and grid.in_bounds(4, 4)
    assert not grid.in_bounds(5, 0) and not grid.in_bounds(0, -1)

    assert grid.is_obstacle(0, 2) and grid.is_obstacle(3, 2)
    assert not grid.is_obstacle(4, 2)
    assert grid.cell_at((1, 2)) == CellType.OBSTACLE
    assert grid.obstacle_count() == 4

    # Outside the grid is neither obstacle nor passable
    assert not grid.is_obstacle(-1, 2)
    assert not grid.is_passable(-1, 2)


def test_grid_toggle_round_trip():
    grid = open_grid(3, 3)
    assert grid.toggle((1, 1)) == CellType.OBSTACLE
    assert grid.is_obstacle(1, 1)
    assert grid.toggle((1, 1)) == CellType.EMPTY
    assert grid.obstacle_count() == 0


def test_grid_out_of_bounds_mutation_raises():
    grid = open_grid(3, 3)
    with pytest.raises(OutOfBoundsError) as info:
        grid.toggle((3, 0))
    assert info.value.position == (3, 0)
    assert isinstance(info.value, GridNavError)
    assert isinstance(info.value, ValueError)

    with pytest.raises(OutOfBoundsError):
        grid.set_cell((0, -1), CellType.OBSTACLE)
    assert grid.obstacle_count() == 0


def test_grid_neighbors_skip_obstacles_and_edges():
    grid = Grid.from_strings([
        "...",
        ".#.",
        "...",
    ])
    assert sorted(grid.neighbors(0, 0)) == [(0, 1), (1, 0)]
    assert len(grid.neighbors(1, 1)) == 8


def test_grid_from_strings_rejects_ragged_rows():
    with pytest.raises(ValueError):
        Grid.from_strings(["...", ".."])


def test_grid_snapshot_is_a_copy():
    grid = open_grid(4, 4)
    cells = grid.snapshot()
    cells[0, 0] = CellType.OBSTACLE
    assert not grid.is_obstacle(0, 0)


# ==================== Layouts ====================

def test_cell_type_helpers():
    assert CellType.EMPTY.toggled() is CellType.OBSTACLE
    assert CellType.OBSTACLE.toggled() is CellType.EMPTY
    assert CellType.EMPTY.is_traversable()
    assert not CellType.OBSTACLE.is_traversable()
    assert CellType.OBSTACLE.name_lower == 'obstacle'


def test_default_layout_rectangles():
    generator = LayoutGenerator()
    grid = Grid.from_layout(generator.default_layout())
    assert grid.shape == (40, 30)
    assert grid.obstacle_count() == 24 + 15 + 12 + 16 + 12
    assert grid.is_obstacle(10, 5) and grid.is_obstacle(12, 12)
    assert not grid.is_obstacle(13, 12)
    assert not grid.is_obstacle(2, 2)
    assert not grid.is_obstacle(35, 25)


def test_obstacle_rect_is_clipped():
    cells = list(ObstacleRect(8, 8, 5, 5).cells(10, 10))
    assert sorted(cells) == [(8, 8), (8, 9), (9, 8), (9, 9)]


def test_random_layout_reproducible_and_clear_at_endpoints():
    agent, target = (3, 3), (35, 25)
    a = LayoutGenerator(seed=7).generate(agent, target)
    b = LayoutGenerator(seed=7).generate(agent, target)
    assert np.array_equal(a.cells, b.cells)
    assert 0.1 < a.obstacle_ratio < 0.3
    assert a.cells[agent] == CellType.EMPTY
    assert a.cells[target] == CellType.EMPTY


def test_random_layout_zero_density_is_empty():
    config = Config()
    config.layout.obstacle_density = 0.0
    layout = LayoutGenerator(config.grid, config.layout, seed=1).generate()
    assert layout.obstacle_ratio == 0.0


def test_generate_agent_target_quadrants():
    config = Config()
    for seed in range(10):
        agent, target = generate_agent_target(config.grid, seed)
        assert 0 <= agent[0] < 10 and 0 <= agent[1] < 7
        assert 30 <= target[0] < 40 and 23 <= target[1] < 30


# ==================== A* Planner ====================

def test_planner_start_equals_target():
    grid = open_grid()
    assert find_path(grid, (4, 4), (4, 4)) == [(4, 4)]


@pytest.mark.parametrize('start, target', [
    ((0, 0), (5, 3)),
    ((9, 0), (0, 9)),
    ((2, 7), (8, 7)),
    ((7, 1), (1, 4)),
])
def test_planner_open_grid_takes_chebyshev_steps(start, target):
    grid = open_grid()
    path = find_path(grid, start, target)
    assert_valid_path(grid, path, start, target)
    assert len(path) == chebyshev_distance(start, target) + 1


def test_planner_prefers_diagonal_first():
    path = find_path(open_grid(5, 5), (0, 0), (2, 1))
    assert path == [(0, 0), (1, 1), (2, 1)]


def test_planner_routes_around_wall():
    grid = Grid.from_strings(WALL_5X5)
    planner = AStarPlanner(grid)
    path = planner.plan((0, 0), (0, 4))

    assert_valid_path(grid, path, (0, 0), (0, 4))
    assert (4, 2) in path
    assert len(path) >= 9
    assert len(path) > manhattan_distance((0, 0), (0, 4)) + 1
    assert compute_efficiency((0, 0), (0, 4), path) < 100
    assert planner.last_stats.success
    assert planner.last_stats.reason == 'success'


def test_planner_chebyshev_is_shortest_around_wall():
    grid = Grid.from_strings(WALL_5X5)
    path = find_path(grid, (0, 0), (0, 4), heuristic='chebyshev')
    assert_valid_path(grid, path, (0, 0), (0, 4))
    assert len(path) == 9


def test_planner_is_repeatable():
    grid = Grid.from_strings(WALL_5X5)
    planner = AStarPlanner(grid)
    assert planner.plan((0, 0), (0, 4)) == planner.plan((0, 0), (0, 4))


def test_planner_enclosed_target_gives_empty_path():
    grid = Grid.from_strings([
        ".....",
        ".###.",
        ".#.#.",
        ".###.",
        ".....",
    ])
    planner = AStarPlanner(grid)
    assert planner.plan((0, 0), (2, 2)) == []
    assert not planner.last_stats.success
    assert planner.last_stats.reason == 'no_path_found'


def test_planner_obstacle_target_unreachable():
    grid = Grid.from_strings(WALL_5X5)
    assert find_path(grid, (0, 0), (1, 2)) == []


def test_planner_expands_obstacle_start():
    grid = Grid.from_strings(WALL_5X5)
    path = find_path(grid, (1, 2), (1, 4))
    assert path[0] == (1, 2)
    assert path[-1] == (1, 4)
    assert len(path) == 3


def test_planner_out_of_bounds_endpoints():
    planner = AStarPlanner(open_grid(5, 5))
    assert planner.plan((-1, 0), (2, 2)) == []
    assert planner.last_stats.reason == 'start_out_of_bounds'
    assert planner.plan((0, 0), (5, 5)) == []
    assert planner.last_stats.reason == 'target_out_of_bounds'


def test_planner_corner_cutting_option():
    grid = Grid.from_strings([
        ".#",
        "#.",
    ])
    loose = find_path(grid, (0, 0), (1, 1))
    assert loose == [(0, 0), (1, 1)]
    assert len(find_corner_cuts(loose, grid)) == 1

    assert find_path(grid, (0, 0), (1, 1), allow_corner_cutting=False) == []


def test_planner_max_expansions():
    grid = Grid.from_strings(WALL_5X5)
    planner = AStarPlanner(grid, max_expansions=1)
    assert planner.plan((0, 0), (0, 4)) == []
    assert planner.last_stats.reason == 'max_expansions'


def test_planner_sees_grid_mutation():
    grid = open_grid(5, 5)
    planner = AStarPlanner(grid)
    before = planner.plan((0, 0), (4, 0))
    grid.toggle((2, 0))
    after = planner.plan((0, 0), (4, 0))
    assert (2, 0) in before
    assert (2, 0) not in after
    assert_valid_path(grid, after, (0, 0), (4, 0))


def test_planner_rejects_unknown_heuristic():
    with pytest.raises(ValueError):
        AStarPlanner(open_grid(), heuristic='euclidean')


# ==================== Sensor ====================

def test_sensor_includes_cells_at_exact_range():
    grid = open_grid(11, 11)
    grid.toggle((8, 5))   # distance 3
    grid.toggle((8, 6))   # distance sqrt(10)
    grid.toggle((7, 7))   # distance sqrt(8)

    reading = detect_obstacles(grid, (5, 5), 3)
    assert set(reading.positions) == {(8, 5), (7, 7)}
    assert reading.count == 2
    assert reading.nearest().position == (7, 7)


def test_sensor_scan_order_and_clipping():
    grid = open_grid(6, 6)
    for pos in [(0, 3), (2, 2), (3, 0)]:
        grid.toggle(pos)
    reading = SensorModel(grid).detect((0, 0), 3)
    assert reading.positions == [(3, 0), (2, 2), (0, 3)]
    assert reading.detections[1].distance == pytest.approx(math.sqrt(8))


def test_sensor_bounds_clip_to_grid():
    bounds = SensorModel(open_grid(6, 6)).bounds((1, 5), 3)
    assert (bounds.xmin, bounds.xmax, bounds.ymin, bounds.ymax) == (0, 4, 2, 5)


def test_sensor_empty_reading():
    reading = detect_obstacles(open_grid(), (5, 5), 8)
    assert reading.count == 0
    assert reading.nearest() is None


def test_sensor_rejects_non_positive_range():
    with pytest.raises(InvalidConfigurationError):
        detect_obstacles(open_grid(), (0, 0), 0)


@pytest.mark.parametrize('sensor_range', [2.5, 3.0, True, '3'])
def test_sensor_rejects_non_integer_range(sensor_range):
    with pytest.raises(InvalidConfigurationError):
        detect_obstacles(open_grid(), (5, 5), sensor_range)


def test_sensor_rejects_position_outside_grid():
    grid = open_grid(5, 5)
    grid.toggle((4, 4))
    sensor = SensorModel(grid)
    with pytest.raises(OutOfBoundsError):
        sensor.detect((6, 6), 3)
    with pytest.raises(OutOfBoundsError):
        detect_obstacles(grid, (-1, 0), 3)
    assert sensor.detect((4, 3), 3).positions == [(4, 4)]


# ==================== Scheduler ====================

def test_scheduler_advance_fires_due_events():
    scheduler = StepScheduler.simulated()
    fired = []
    scheduler.call_later(1.0, lambda: fired.append('a'))
    late = scheduler.call_later(2.0, lambda: fired.append('b'))

    assert scheduler.advance(1.5) == 1
    assert fired == ['a']
    assert scheduler.now() == pytest.approx(1.5)

    assert scheduler.cancel(late)
    assert not scheduler.cancel(late)
    assert scheduler.advance(1.0) == 0
    assert scheduler.empty()


def test_scheduler_follow_up_events_fire_in_window():
    scheduler = StepScheduler.simulated()
    times = []

    def tick():
        times.append(scheduler.now())
        if len(times) < 3:
            scheduler.call_later(0.5, tick)

    scheduler.call_later(0.5, tick)
    assert scheduler.advance(1.0) == 2
    assert times == [0.5, 1.0]
    scheduler.run()
    assert times == [0.5, 1.0, 1.5]
    assert scheduler.fired == 3


def test_scheduler_advance_requires_simulated_clock():
    with pytest.raises(RuntimeError):
        StepScheduler().advance(1.0)


# ==================== Simulation Session ====================

def test_session_initial_state():
    session = make_session(open_grid(), (0, 0), (5, 3))
    assert session.state is SimulationState.IDLE
    assert len(session.path) == 6
    assert session.path_index == 0
    assert session.next_waypoint == session.path[1]
    assert session.sensor_reading is None
    assert session.stats.path_length == 6
    assert session.stats.efficiency == compute_efficiency((0, 0), (5, 3), session.path)
    assert session.stats.time_elapsed == 0.0
    assert not session.has_pending_step


def test_session_default_layout_reaches_target():
    with SimulationSession(Config(), scheduler=StepScheduler.simulated()) as session:
        path = session.path
        assert path[0] == (2, 2) and path[-1] == (35, 25)
        assert session.start()
        assert session.run_until_halted() is SimulationState.FINISHED
        assert session.agent == (35, 25)
        assert session.step_count == len(path) - 1


def test_session_runs_path_length_minus_one_steps():
    session = make_session(open_grid(), (0, 0), (5, 3))
    path = session.path
    assert session.start()
    assert session.state is SimulationState.RUNNING

    session.run_until_halted()
    assert session.state is SimulationState.FINISHED
    assert session.agent == path[-1]
    assert session.step_count == len(path) - 1
    assert session.scheduler.fired == len(path) - 1
    assert session.trail == list(path)
    assert session.stats.time_elapsed == pytest.approx(0.5 * (len(path) - 1))
    assert session.next_waypoint is None
    assert not session.has_pending_step


def test_session_one_step_per_delay():
    session = make_session(open_grid(), (0, 0), (9, 0))
    path = session.path
    session.start()

    assert session.scheduler.advance(0.25) == 0
    assert session.agent == (0, 0)
    assert session.scheduler.advance(0.25) == 1
    assert session.agent == path[1]
    assert session.scheduler.advance(1.0) == 2
    assert session.agent == path[3]
    assert session.path_index == 3
    assert session.scheduler.pending == 1


def test_session_pause_and_resume():
    session = make_session(open_grid(), (0, 0), (9, 0))
    path = session.path
    session.start()
    session.scheduler.advance(1.0)
    assert session.path_index == 2

    session.pause()
    assert session.state is SimulationState.IDLE
    assert not session.has_pending_step
    assert session.scheduler.advance(5.0) == 0
    assert session.agent == path[2]
    assert session.path == path

    assert session.start()
    session.run_until_halted()
    assert session.agent == (9, 0)
    assert session.step_count == len(path) - 1


def test_session_target_change_while_running_replans_from_agent():
    session = make_session(open_grid(), (0, 0), (9, 0))
    session.start()
    session.scheduler.advance(1.0)
    here = session.agent

    session.set_target_position((2, 5))
    assert session.path[0] == here
    assert session.path[-1] == (2, 5)
    assert session.path_index == 0
    assert session.is_running
    assert session.scheduler.pending == 1
    assert session.replan_count == 2

    session.run_until_halted()
    assert session.agent == (2, 5)
    assert session.state is SimulationState.FINISHED


def test_session_toggle_onto_agent_keeps_position():
    session = make_session(open_grid(), (0, 0), (5, 0))
    session.start()
    session.scheduler.advance(0.5)
    assert session.agent == (1, 0)

    assert session.toggle_obstacle((1, 0)) == CellType.OBSTACLE
    assert session.agent == (1, 0)
    assert session.grid.is_obstacle(1, 0)
    assert session.path[0] == (1, 0)
    assert session.path[-1] == (5, 0)

    session.run_until_halted()
    assert session.agent == (5, 0)


def test_session_blocking_target_while_running_goes_idle():
    session = make_session(open_grid(), (0, 0), (9, 9))
    session.start()
    session.scheduler.advance(0.5)

    for pos in [(8, 8), (8, 9), (9, 8)]:
        session.toggle_obstacle(pos)

    assert session.path == ()
    assert session.state is SimulationState.IDLE
    assert not session.has_pending_step
    assert session.stats.path_length == 0
    assert session.stats.efficiency == 0
    assert session.start() is False


def test_session_start_without_path_returns_false():
    grid = Grid.from_strings(WALL_5X5)
    session = make_session(grid, (0, 0), (2, 4))
    assert session.path
    session.toggle_obstacle((4, 2))
    assert session.path == ()
    assert session.start() is False
    assert session.state is SimulationState.IDLE


def test_session_start_at_target_finishes_immediately():
    session = make_session(open_grid(), (3, 3), (3, 3))
    assert session.path == ((3, 3),)
    assert session.start()
    assert session.state is SimulationState.FINISHED
    assert not session.has_pending_step


def test_session_replan_after_finish_returns_to_idle():
    session = make_session(open_grid(), (0, 0), (2, 0))
    session.start()
    session.run_until_halted()
    assert session.state is SimulationState.FINISHED

    session.set_target_position((2, 4))
    assert session.state is SimulationState.IDLE
    assert session.start()
    session.run_until_halted()
    assert session.agent == (2, 4)


def test_session_sensor_reading_follows_steps():
    grid = open_grid()
    grid.toggle((3, 2))
    session = make_session(grid, (0, 0), (5, 0))
    session.start()
    session.scheduler.advance(0.5)

    reading = session.sensor_reading
    assert reading.position == (1, 0)
    assert reading.positions == [(3, 2)]
    assert session.stats.obstacles_detected == 1


def test_session_rejects_invalid_sensor_range():
    session = make_session(open_grid(), (0, 0), (5, 0))
    for value in (0, 9, -1, 3.5, True):
        with pytest.raises(InvalidConfigurationError):
            session.set_sensor_range(value)
        assert session.sensor_range == 3
    session.set_sensor_range(8)
    assert session.sensor_range == 8


def test_session_rejects_invalid_step_delay():
    session = make_session(open_grid(), (0, 0), (5, 0))
    for value in (99, 1001, 0, 'fast'):
        with pytest.raises(InvalidConfigurationError):
            session.set_step_delay(value)
        assert session.step_delay_ms == 500
    session.set_step_delay(100)
    session.set_step_delay(1000)
    assert session.step_delay_ms == 1000


def test_session_step_delay_change_restarts_pending_step():
    session = make_session(open_grid(), (0, 0), (5, 0))
    session.start()
    assert session.scheduler.advance(0.25) == 0

    session.set_step_delay(1000)
    assert session.scheduler.pending == 1
    assert session.scheduler.advance(0.5) == 0
    assert session.scheduler.advance(0.5) == 1
    assert session.agent == (1, 0)
    assert session.stats.time_elapsed == pytest.approx(1.0)


def test_session_agent_position_bounds_checked():
    session = make_session(open_grid(), (0, 0), (5, 0))
    with pytest.raises(OutOfBoundsError):
        session.set_agent_position((10, 0))
    assert session.agent == (0, 0)

    session.set_agent_position((4, 4))
    assert session.path[0] == (4, 4)
    assert session.trail == [(4, 4)]

    with pytest.raises(OutOfBoundsError):
        session.set_target_position((0, 10))
    assert session.target == (5, 0)


def test_session_reset_restores_defaults():
    session = make_session(open_grid(), (0, 0), (5, 3))
    session.start()
    session.scheduler.advance(1.0)
    session.set_sensor_range(5)
    session.set_target_position((9, 9))
    session.toggle_obstacle((7, 7))

    session.reset()
    assert session.state is SimulationState.IDLE
    assert session.agent == (0, 0)
    assert session.target == (5, 3)
    assert session.path[0] == (0, 0) and session.path[-1] == (5, 3)
    assert session.path_index == 0
    assert session.step_count == 0
    assert session.sensor_reading is None
    assert session.stats.time_elapsed == 0.0
    assert session.stats.obstacles_detected == 0
    assert session.stats.path_length == len(session.path)
    assert session.sensor_range == 5
    assert session.grid.is_obstacle(7, 7)
    assert not session.has_pending_step


def test_session_stats_are_copies():
    session = make_session(open_grid(), (0, 0), (5, 3))
    stats = session.stats
    stats.path_length = 99
    assert session.stats.path_length == 6


def test_session_recalculate_path_is_stable():
    session = make_session(Grid.from_strings(WALL_5X5), (0, 0), (0, 4))
    first = session.path
    assert session.recalculate_path() == first
    assert session.replan_count == 2


def test_session_close_cancels_pending_step():
    session = make_session(open_grid(), (0, 0), (5, 0))
    session.start()
    assert session.has_pending_step

    session.close()
    assert not session.has_pending_step
    assert session.scheduler.pending == 0
    assert session.state is SimulationState.IDLE
    with pytest.raises(SessionClosedError) as info:
        session.start()
    assert isinstance(info.value, GridNavError)


def test_session_context_manager_closes():
    with make_session(open_grid(), (0, 0), (5, 0)) as session:
        session.start()
    assert session.scheduler.pending == 0


def test_session_step_callback():
    infos = []
    session = make_session(open_grid(), (0, 0), (3, 0),
                           step_callback=lambda s, info: infos.append(info))
    session.start()
    session.run_until_halted()

    assert [info['step'] for info in infos] == [1, 2, 3]
    assert infos[0]['position'] == (1, 0)
    assert infos[-1]['state'] == 'finished'
    assert infos[-1]['remaining_steps'] == 0


def test_session_rejects_out_of_grid_defaults():
    config = Config()
    with pytest.raises(OutOfBoundsError):
        SimulationSession(config, open_grid(5, 5), StepScheduler.simulated())


def test_session_to_dict_is_json_serializable():
    session = make_session(open_grid(), (0, 0), (5, 0))
    session.start()
    session.scheduler.advance(0.5)
    data = json.loads(json.dumps(session.to_dict()))
    assert data['state'] == 'running'
    assert data['path_index'] == 1


# ==================== Metrics ====================

def test_efficiency_values():
    path_9 = [(0, 0)] * 9
    assert compute_efficiency((0, 0), (0, 4), path_9) == 44
    assert compute_efficiency((0, 0), (3, 3), [(0, 0)] * 4) == 150
    assert compute_efficiency((0, 0), (1, 0), [(0, 0)] * 8) == 13
    assert compute_efficiency((0, 0), (5, 5), []) == 0


def test_summarize_path():
    summary = summarize_path([(0, 0), (1, 1), (2, 1)])
    assert summary.nodes == 3
    assert summary.steps == 2
    assert summary.diagonal_steps == 1
    assert summary.straight_steps == 1
    assert summary.euclidean_length == pytest.approx(1 + math.sqrt(2))
    assert summarize_path([]).nodes == 0


# ==================== Rendering ====================

def test_render_ascii():
    session = make_session(Grid.from_strings(WALL_5X5), (0, 0), (0, 4))
    rows = render_ascii(session).split('\n')
    assert len(rows) == 5
    assert all(len(row) == 5 for row in rows)
    assert rows[0][0] == 'A'
    assert rows[4][0] == 'T'
    assert rows[2] == '####*'


def test_visualizer_saves_snapshot(tmp_path):
    grid = open_grid()
    grid.toggle((3, 2))
    session = make_session(grid, (0, 0), (5, 0))
    session.start()
    session.scheduler.advance(0.5)

    visualizer = GridVisualizer()
    fig = visualizer.render_session(session, title='Snapshot')
    filename = tmp_path / 'snapshot.png'
    visualizer.save_figure(fig, str(filename))
    plt.close(fig)
    assert filename.exists()


def test_frame_callback_writes_one_frame_per_step(tmp_path):
    callback = create_frame_callback(GridVisualizer(), str(tmp_path / 'frames'))
    session = make_session(open_grid(5, 5), (0, 0), (2, 0), step_callback=callback)
    session.start()
    session.run_until_halted()
    assert sorted(p.name for p in (tmp_path / 'frames').iterdir()) == [
        'frame_00001.png', 'frame_00002.png'
    ]


# ==================== Scenario Runner ====================

def test_runner_default_scenario():
    result = ScenarioRunner().run_scenario(layout='default')
    assert result.status == ScenarioStatus.REACHED
    assert result.is_success
    assert result.steps == len(result.planned_path) - 1
    assert result.trail[-1] == (35, 25)
    assert result.stats['path_length'] == len(result.planned_path)
    assert result.error is None


def test_runner_empty_layout_method():
    result = ScenarioRunner().run_scenario(layout='empty', method='chebyshev_strict',
                                           agent=(0, 0), target=(5, 3))
    assert result.method == 'chebyshev_strict'
    assert len(result.planned_path) == 6
    assert result.corner_cuts == 0
    assert result.obstacle_ratio == 0.0


def test_runner_uses_configured_seed():
    config = Config()
    config.random_seed = 11
    from_config = ScenarioRunner(config).run_scenario(layout='random')
    explicit = ScenarioRunner().run_scenario(seed=11, layout='random')
    assert from_config.seed == 11
    assert (from_config.agent, from_config.target) == (explicit.agent, explicit.target)
    assert from_config.obstacle_ratio == explicit.obstacle_ratio
    assert from_config.planned_path == explicit.planned_path



def test_runner_reports_errors():
    result = ScenarioRunner().run_scenario(layout='default', agent=(100, 100))
    assert result.status == ScenarioStatus.ERROR
    assert result.error

    with pytest.raises(ValueError):
        ScenarioRunner().run_scenario(method='dijkstra')


def test_runner_suite_writes_results(tmp_path):
    runner = ScenarioRunner()
    aggregated = runner.run_suite(num_scenarios=2, seed_base=3,
                                  methods=['manhattan', 'chebyshev_strict'],
                                  output_dir=str(tmp_path), verbose=False)
    assert aggregated.num_scenarios == 2
    assert set(aggregated.summary) == {'manhattan', 'chebyshev_strict'}
    assert aggregated.summary['manhattan']['n_total'] == 2

    with open(tmp_path / 'scenarios.json') as f:
        scenarios = json.load(f)
    assert len(scenarios['manhattan']) == 2
    assert (tmp_path / 'aggregated_results.json').exists()


# ==================== CLI ====================

def test_cli_plan(capsys):
    code = main(['plan', '--layout', 'empty', '--agent', '0', '0', '--target', '5', '3'])
    assert code == 0
    out = capsys.readouterr().out
    assert '(0,0) -> ' in out
    assert out.strip().endswith('(5,3)')


def test_cli_run_with_plot(tmp_path):
    plot = tmp_path / 'run.png'
    assert main(['run', '--layout', 'default', '--plot', str(plot)]) == 0
    assert plot.exists()


def test_cli_rejects_invalid_options(capsys):
    assert main(['run', '--sensor_range', '20']) == 1
    assert 'Error' in capsys.readouterr().err


def test_cli_suite(tmp_path):
    code = main(['suite', '--num_scenarios', '1', '--methods', 'manhattan',
                 '--output', str(tmp_path)])
    assert code == 0
    assert (tmp_path / 'aggregated_results.json').exists()


def test_cli_without_command():
    assert main([]) == 1


if __name__ == '__main__':
    raise SystemExit(pytest.main([__file__, '-v']))
