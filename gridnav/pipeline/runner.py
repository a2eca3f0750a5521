"""
Pipeline Runner Module
======================

Headless scenario runner: builds a session, drives it to completion on a
simulated clock, and aggregates results over many seeded layouts.
"""

import copy
import json
import time
import numpy as np
from pathlib import Path
from typing import Dict, List, Optional, Any, Tuple, Callable
from dataclasses import dataclass, field, asdict

from ..config import Config
from ..environment import Grid
from ..errors import GridNavError
from ..layout import LayoutGenerator, generate_agent_target
from ..metrics import summarize_path, find_corner_cuts
from ..simulation import SimulationSession, StepScheduler


class ScenarioStatus:
    """Enumeration of scenario outcomes"""
    REACHED = 'reached'
    NO_PATH = 'no_path'
    HALTED = 'halted'
    ERROR = 'error'


@dataclass
class ScenarioResult:
    """Result from a single scenario run"""
    seed: Optional[int]
    layout: str
    method: str
    status: str = ScenarioStatus.ERROR
    agent: Tuple[int, int] = (0, 0)
    target: Tuple[int, int] = (0, 0)
    planned_path: List[Tuple[int, int]] = field(default_factory=list)
    trail: List[Tuple[int, int]] = field(default_factory=list)
    stats: Dict[str, Any] = field(default_factory=dict)
    path_summary: Dict[str, Any] = field(default_factory=dict)
    corner_cuts: int = 0
    nodes_expanded: int = 0
    replans: int = 0
    steps: int = 0
    obstacle_ratio: float = 0.0
    runtime_s: float = 0.0
    error: Optional[str] = None

    @property
    def is_success(self) -> bool:
        return self.status == ScenarioStatus.REACHED

    def to_dict(self) -> Dict:
        return asdict(self)


@dataclass
class AggregatedResults:
    """Aggregated results from multiple scenarios"""
    num_scenarios: int = 0
    methods: List[str] = field(default_factory=list)
    summary: Dict[str, Dict] = field(default_factory=dict)

    def to_dict(self) -> Dict:
        return asdict(self)


class ScenarioRunner:
    """
    Runs navigation scenarios without a display.

    Methods are planner variants:
    - 'manhattan': Manhattan heuristic, corner cutting allowed (default)
    - 'chebyshev': Chebyshev heuristic, corner cutting allowed
    - 'manhattan_strict' / 'chebyshev_strict': as above, no corner cutting
    """

    METHODS = {
        'manhattan': {'heuristic': 'manhattan', 'allow_corner_cutting': True},
        'chebyshev': {'heuristic': 'chebyshev', 'allow_corner_cutting': True},
        'manhattan_strict': {'heuristic': 'manhattan', 'allow_corner_cutting': False},
        'chebyshev_strict': {'heuristic': 'chebyshev', 'allow_corner_cutting': False},
    }

    LAYOUTS = ('default', 'random', 'empty')

    def __init__(self, config: Optional[Config] = None):
        """
        Initialize scenario runner.

        Args:
            config: Configuration object (uses default if None)
        """
        self.config = config or Config()

    def build_grid(self, layout: str, seed: Optional[int],
                   agent: Tuple[int, int], target: Tuple[int, int]) -> Tuple[Grid, float]:
        """Create the grid for a layout name; returns (grid, obstacle ratio)"""
        if seed is None:
            seed = self.config.random_seed
        generator = LayoutGenerator(self.config.grid, self.config.layout, seed)
        if layout == 'default':
            generated = generator.default_layout()
        elif layout == 'random':
            generated = generator.generate(agent, target)
        elif layout == 'empty':
            generated = generator.empty_layout()
        else:
            raise ValueError(f"Unknown layout: {layout}")
        return Grid.from_layout(generated), generated.obstacle_ratio

    def run_scenario(self,
                     seed: Optional[int] = None,
                     layout: str = 'default',
                     method: Optional[str] = None,
                     agent: Optional[Tuple[int, int]] = None,
                     target: Optional[Tuple[int, int]] = None,
                     realtime: bool = False,
                     step_callback: Optional[Callable] = None) -> ScenarioResult:
        """
        Run a single scenario until the agent halts.

        Args:
            seed: Random seed for random layouts and positions
                  (default: config.random_seed)
            layout: 'default', 'random' or 'empty'
            method: Planner variant from METHODS (default: config.planner)
            agent: Agent start (default: configured, or random for random layouts)
            target: Target (default: configured, or random for random layouts)
            realtime: Sleep for the real step delays instead of simulated time
            step_callback: Passed to the session

        Returns:
            ScenarioResult
        """
        config = copy.deepcopy(self.config)
        if seed is None:
            seed = config.random_seed
        if method is not None:
            if method not in self.METHODS:
                raise ValueError(f"Unknown method: {method}")
            for key, value in self.METHODS[method].items():
                setattr(config.planner, key, value)
        method_name = method or (
            config.planner.heuristic + ('' if config.planner.allow_corner_cutting else '_strict')
        )

        if layout == 'random' and (agent is None or target is None):
            random_agent, random_target = generate_agent_target(config.grid, seed)
            agent = agent if agent is not None else random_agent
            target = target if target is not None else random_target
        agent = tuple(agent) if agent is not None else tuple(config.grid.default_agent)
        target = tuple(target) if target is not None else tuple(config.grid.default_target)
        config.grid.default_agent = agent
        config.grid.default_target = target

        result = ScenarioResult(seed=seed, layout=layout, method=method_name,
                                agent=agent, target=target)
        t0 = time.perf_counter()

        try:
            runner = ScenarioRunner(config)
            grid, result.obstacle_ratio = runner.build_grid(layout, seed, agent, target)
            scheduler = StepScheduler() if realtime else StepScheduler.simulated()

            with SimulationSession(config, grid, scheduler, step_callback) as session:
                planned = list(session.path)
                result.planned_path = planned
                result.path_summary = summarize_path(planned).to_dict()
                result.corner_cuts = len(find_corner_cuts(planned, grid))
                result.nodes_expanded = session.last_planner_stats.nodes_expanded

                if session.start():
                    session.run_until_halted()

                result.trail = session.trail
                result.stats = session.stats.to_dict()
                result.replans = session.replan_count
                result.steps = session.step_count

                if not planned:
                    result.status = ScenarioStatus.NO_PATH
                elif session.agent == target:
                    result.status = ScenarioStatus.REACHED
                else:
                    result.status = ScenarioStatus.HALTED

        except GridNavError as e:
            result.status = ScenarioStatus.ERROR
            result.error = str(e)
            if config.verbose:
                print(f"[Seed {seed}] SCENARIO ERROR: {e}")

        result.runtime_s = time.perf_counter() - t0

        if config.verbose:
            print(f"[Seed {seed}] {method_name}: {result.status} "
                  f"({len(result.planned_path)} nodes, {result.runtime_s * 1000:.1f} ms)")

        return result

    def run_suite(self,
                  num_scenarios: int = 30,
                  seed_base: int = 42,
                  methods: Optional[List[str]] = None,
                  layout: str = 'random',
                  output_dir: Optional[str] = 'results',
                  verbose: bool = True) -> AggregatedResults:
        """
        Run every method on a series of seeded scenarios.

        Args:
            num_scenarios: Number of scenarios to run
            seed_base: Base seed for reproducibility
            methods: Methods to compare (default: all)
            layout: Layout for every scenario
            output_dir: Directory for JSON output (None to skip writing)
            verbose: Print progress

        Returns:
            AggregatedResults with per-method statistics
        """
        methods = methods or list(self.METHODS)
        all_results: Dict[str, List[ScenarioResult]] = {m: [] for m in methods}

        if verbose:
            print(f"Running {num_scenarios} scenarios...")
            print(f"Methods: {methods}")

        for i in range(num_scenarios):
            seed = seed_base + i
            for method in methods:
                result = self.run_scenario(seed=seed, layout=layout, method=method)
                all_results[method].append(result)
            if verbose:
                marks = ' '.join(
                    f"{m}={'✓' if all_results[m][-1].is_success else '✗'}" for m in methods
                )
                print(f"[{i + 1}/{num_scenarios}] Seed {seed}: {marks}")

        aggregated = self._aggregate_results(all_results, num_scenarios)

        if output_dir is not None:
            output_path = Path(output_dir)
            output_path.mkdir(parents=True, exist_ok=True)
            with open(output_path / 'aggregated_results.json', 'w') as f:
                json.dump(aggregated.to_dict(), f, indent=2, default=str)
            with open(output_path / 'scenarios.json', 'w') as f:
                json.dump({m: [r.to_dict() for r in rs] for m, rs in all_results.items()},
                          f, indent=2, default=str)

        if verbose:
            self._print_summary(aggregated)

        return aggregated

    def _aggregate_results(self,
                           results: Dict[str, List[ScenarioResult]],
                           num_scenarios: int) -> AggregatedResults:
        """Aggregate results per method"""
        agg = AggregatedResults(num_scenarios=num_scenarios, methods=list(results))

        for method, method_results in results.items():
            reached = [r for r in method_results if r.is_success]
            lengths = [r.stats.get('path_length', 0) for r in reached]
            efficiencies = [r.stats.get('efficiency', 0) for r in reached]
            expansions = [r.nodes_expanded for r in method_results]
            corner_cuts = [r.corner_cuts for r in reached]
            statuses: Dict[str, int] = {}
            for r in method_results:
                statuses[r.status] = statuses.get(r.status, 0) + 1

            n = len(method_results)
            agg.summary[method] = {
                'success_rate': len(reached) / n if n > 0 else 0.0,
                'path_length_mean': float(np.mean(lengths)) if lengths else None,
                'path_length_std': float(np.std(lengths)) if lengths else None,
                'efficiency_mean': float(np.mean(efficiencies)) if efficiencies else None,
                'nodes_expanded_mean': float(np.mean(expansions)) if expansions else None,
                'corner_cuts_mean': float(np.mean(corner_cuts)) if corner_cuts else None,
                'n_success': len(reached),
                'n_total': n,
                'statuses': statuses,
            }

        return agg

    def _print_summary(self, agg: AggregatedResults):
        """Print summary table"""
        print("\n" + "=" * 80)
        print("SUITE SUMMARY")
        print("=" * 80)
        print(f"Total scenarios: {agg.num_scenarios}")
        print()

        print(f"{'Method':<20} {'Success':>10} {'Length':>10} {'Eff(%)':>10} {'Expanded':>10} {'Cuts':>8}")
        print("-" * 72)

        for method in agg.methods:
            s = agg.summary.get(method, {})
            rate = s.get('success_rate', 0) * 100

            def fmt(key, pattern='.1f'):
                value = s.get(key)
                return format(value, pattern) if value is not None else "N/A"

            print(f"{method:<20} {rate:>9.1f}% {fmt('path_length_mean'):>10} "
                  f"{fmt('efficiency_mean'):>10} {fmt('nodes_expanded_mean'):>10} "
                  f"{fmt('corner_cuts_mean', '.2f'):>8}")

        print("=" * 80)
