#!/usr/bin/env python3
"""
Grid Navigation - Main Entry Point
==================================

Usage:
    # Plan once on the default layout and print it
    python -m gridnav.main plan --agent 2 2 --target 35 25

    # Run one scenario to completion (simulated time)
    python -m gridnav.main run --layout random --seed 7 --plot run.png

    # Watch it step in real time
    python -m gridnav.main run --realtime --step_delay 200 --verbose

    # Compare planner variants over many random layouts
    python -m gridnav.main suite --num_scenarios 30 --seed_base 42 --output results/

From Python:
    from gridnav import Config, SimulationSession, StepScheduler

    session = SimulationSession(Config(), scheduler=StepScheduler.simulated())
    session.start()
    session.run_until_halted()
"""

import argparse
import sys


def _build_config(args):
    from gridnav import Config

    config = Config()
    config.verbose = getattr(args, 'verbose', False)
    config.random_seed = getattr(args, 'seed', None)

    if getattr(args, 'heuristic', None):
        config.planner.heuristic = args.heuristic
    if getattr(args, 'no_corner_cutting', False):
        config.planner.allow_corner_cutting = False
    if getattr(args, 'sensor_range', None) is not None:
        config.sensor.default_range = args.sensor_range
    if getattr(args, 'step_delay', None) is not None:
        config.simulation.default_step_delay_ms = args.step_delay
    if getattr(args, 'density', None) is not None:
        config.layout.obstacle_density = args.density

    return config.validate()


def run_plan(args):
    """Plan a single path and print it"""
    from gridnav import SimulationSession, StepScheduler, ScenarioRunner, generate_agent_target
    from gridnav.visualization import render_ascii

    config = _build_config(args)

    agent = tuple(args.agent) if args.agent else None
    target = tuple(args.target) if args.target else None
    if args.layout == 'random' and (agent is None or target is None):
        random_agent, random_target = generate_agent_target(config.grid, config.random_seed)
        agent = agent or random_agent
        target = target or random_target
    if agent is not None:
        config.grid.default_agent = agent
    if target is not None:
        config.grid.default_target = target

    grid, _ = ScenarioRunner(config).build_grid(
        args.layout, config.random_seed, config.grid.default_agent, config.grid.default_target
    )

    with SimulationSession(config, grid, StepScheduler.simulated()) as session:
        print(render_ascii(session))
        print()
        stats = session.stats
        planner_stats = session.last_planner_stats
        if session.path:
            print(f"Path ({stats.path_length} nodes, efficiency {stats.efficiency}%, "
                  f"{planner_stats.nodes_expanded} expanded):")
            print(' -> '.join(f"({x},{y})" for x, y in session.path))
        else:
            print(f"No path from {session.agent} to {session.target} ({planner_stats.reason})")
        return 0 if session.path else 1


def run_single(args):
    """Run one scenario to completion"""
    from gridnav import ScenarioRunner

    config = _build_config(args)
    runner = ScenarioRunner(config)

    result = runner.run_scenario(
        layout=args.layout,
        agent=tuple(args.agent) if args.agent else None,
        target=tuple(args.target) if args.target else None,
        realtime=args.realtime
    )

    print("\n" + "=" * 60)
    print(f"SCENARIO RESULT (layout={args.layout}, seed={result.seed})")
    print("=" * 60)
    status_icon = "✓" if result.is_success else "✗"
    print(f"{status_icon} {result.method:20s}: {result.status}")
    if result.error:
        print(f"  Error: {result.error}")
    else:
        stats = result.stats
        print(f"  Agent {result.agent} -> Target {result.target}")
        print(f"  Path length:   {stats['path_length']} nodes")
        print(f"  Steps taken:   {result.steps}")
        print(f"  Detected:      {stats['obstacles_detected']} obstacles at the end")
        print(f"  Elapsed:       {stats['time_elapsed']:.1f} s (simulated)")
        print(f"  Efficiency:    {stats['efficiency']}%")
        print(f"  Corner cuts:   {result.corner_cuts}")
    print("=" * 60)

    if args.plot and not result.error:
        _save_plot(config, result, args.plot)
        print(f"Snapshot saved to: {args.plot}")

    return 0 if result.is_success else 1


def _save_plot(config, result, filename):
    """Replay the scenario's final state into a figure"""
    import matplotlib
    matplotlib.use('Agg')
    import matplotlib.pyplot as plt
    from gridnav import SimulationSession, StepScheduler, ScenarioRunner
    from gridnav.visualization import GridVisualizer

    config.grid.default_agent = result.agent
    config.grid.default_target = result.target
    grid, _ = ScenarioRunner(config).build_grid(result.layout, result.seed,
                                                result.agent, result.target)
    with SimulationSession(config, grid, StepScheduler.simulated()) as session:
        if session.start():
            session.run_until_halted()
        visualizer = GridVisualizer(config.visualization)
        fig = visualizer.render_session(session, title=f"{result.method}: {result.status}")
        visualizer.save_figure(fig, filename)
        plt.close(fig)


def run_suite(args):
    """Run full comparison suite"""
    from gridnav import ScenarioRunner

    config = _build_config(args)
    runner = ScenarioRunner(config)

    methods = args.methods.split(',') if args.methods else None
    aggregated = runner.run_suite(
        num_scenarios=args.num_scenarios,
        seed_base=args.seed_base,
        methods=methods,
        layout=args.layout,
        output_dir=args.output,
        verbose=True
    )

    print(f"\nResults saved to: {args.output}")
    return 0 if aggregated.num_scenarios > 0 else 1


def main(argv=None):
    from gridnav.errors import GridNavError

    parser = argparse.ArgumentParser(
        description='Grid Navigation Simulator',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__
    )

    subparsers = parser.add_subparsers(dest='command', help='Available commands')

    def add_common(p):
        p.add_argument('--layout', choices=('default', 'random', 'empty'), default='default',
                       help='Obstacle layout')
        p.add_argument('--seed', type=int, default=42, help='Random seed')
        p.add_argument('--density', type=float, help='Obstacle density for random layouts')
        p.add_argument('--heuristic', choices=('manhattan', 'chebyshev'), help='A* heuristic')
        p.add_argument('--no_corner_cutting', action='store_true',
                       help='Forbid diagonal steps between two obstacles')
        p.add_argument('--verbose', '-v', action='store_true', help='Verbose output')

    # Plan command
    plan_parser = subparsers.add_parser('plan', help='Plan a path and print it')
    add_common(plan_parser)
    plan_parser.add_argument('--agent', type=int, nargs=2, metavar=('X', 'Y'), help='Agent cell')
    plan_parser.add_argument('--target', type=int, nargs=2, metavar=('X', 'Y'), help='Target cell')

    # Run command
    run_parser = subparsers.add_parser('run', help='Run a single scenario')
    add_common(run_parser)
    run_parser.add_argument('--agent', type=int, nargs=2, metavar=('X', 'Y'), help='Agent cell')
    run_parser.add_argument('--target', type=int, nargs=2, metavar=('X', 'Y'), help='Target cell')
    run_parser.add_argument('--sensor_range', type=int, help='Sensor range in cells')
    run_parser.add_argument('--step_delay', type=int, help='Step delay in milliseconds')
    run_parser.add_argument('--realtime', action='store_true', help='Sleep between steps')
    run_parser.add_argument('--plot', type=str, help='Save a snapshot PNG of the final state')

    # Suite command
    suite_parser = subparsers.add_parser('suite', help='Compare planner variants')
    add_common(suite_parser)
    suite_parser.set_defaults(layout='random')
    suite_parser.add_argument('--num_scenarios', type=int, default=30, help='Number of scenarios')
    suite_parser.add_argument('--seed_base', type=int, default=42, help='Base seed')
    suite_parser.add_argument('--methods', type=str, help='Comma-separated methods')
    suite_parser.add_argument('--output', type=str, default='results', help='Output directory')

    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 1

    try:
        if args.command == 'plan':
            return run_plan(args)
        elif args.command == 'run':
            return run_single(args)
        elif args.command == 'suite':
            return run_suite(args)
        else:
            parser.print_help()
            return 1
    except GridNavError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    except KeyboardInterrupt:
        print("\nInterrupted")
        return 130


if __name__ == '__main__':
    sys.exit(main())
