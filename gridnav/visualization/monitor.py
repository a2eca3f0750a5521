"""
Visualization Module
====================

Snapshot rendering of a navigation session: matplotlib figures and plain
text. Read-only consumers of session state.
"""

import os
import numpy as np
import matplotlib.pyplot as plt
from matplotlib.colors import ListedColormap
from matplotlib.patches import Circle
from typing import List, Tuple, Optional, Sequence

from ..config import VisualizationConfig
from ..environment import Grid, SensorReading
from ..layout import CellType


class GridVisualizer:
    """
    Static grid visualization.

    Draws grid cells, sensor disc, planned path, trail, detections, agent
    and target for a session snapshot.
    """

    def __init__(self, config: Optional[VisualizationConfig] = None):
        """
        Initialize visualizer.

        Args:
            config: Visualization configuration
        """
        self.config = config or VisualizationConfig()
        self.cmap = ListedColormap(self.config.cell_colors)

    def plot_grid(self, ax, grid: Grid):
        """Plot cell classification with y growing downwards"""
        ax.imshow(
            grid.snapshot().T,
            cmap=self.cmap,
            origin='upper',
            vmin=CellType.EMPTY,
            vmax=CellType.OBSTACLE,
            interpolation='nearest'
        )

        # Cell borders
        ax.set_xticks(np.arange(-0.5, grid.width, 1), minor=True)
        ax.set_yticks(np.arange(-0.5, grid.height, 1), minor=True)
        ax.grid(which='minor', color='#e9ecef', linewidth=0.5)
        ax.tick_params(which='minor', length=0)

        ax.set_xlabel('X (cells)')
        ax.set_ylabel('Y (cells)')

    def plot_path(self, ax, path: Sequence[Tuple[int, int]],
                  color: Optional[str] = None, label: Optional[str] = None,
                  linewidth: float = 2.5, alpha: float = 0.9, linestyle: str = '-'):
        """Plot a path on existing axes"""
        if not path or len(path) < 2:
            return

        path_arr = np.array(path)
        ax.plot(path_arr[:, 0], path_arr[:, 1],
                color=color or self.config.colors['path'],
                linewidth=linewidth, alpha=alpha,
                linestyle=linestyle, label=label, zorder=6)

    def plot_sensor_range(self, ax, position: Tuple[int, int], radius: int,
                          alpha: float = 0.1):
        """Plot sensor disc"""
        circle = Circle(position, radius, fill=True,
                        color=self.config.colors['sensor'], alpha=alpha, zorder=3)
        ax.add_patch(circle)

    def plot_detections(self, ax, reading: Optional[SensorReading]):
        """Highlight detected obstacle cells"""
        if reading is None or not reading.detections:
            return

        cells = np.array(reading.positions)
        ax.scatter(cells[:, 0], cells[:, 1],
                   c=self.config.colors['detected'], marker='s', s=60,
                   alpha=0.7, zorder=7, label=f'Detected ({reading.count})')

    def plot_agent_target(self, ax, agent: Tuple[int, int], target: Tuple[int, int],
                          next_waypoint: Optional[Tuple[int, int]] = None):
        """Plot agent, target and heading towards the next waypoint"""
        ax.plot(target[0], target[1], 'o', color=self.config.colors['target'],
                markersize=10, markeredgecolor='white', markeredgewidth=1.5,
                label='Target', zorder=10)
        ax.plot(agent[0], agent[1], 'o', color=self.config.colors['agent'],
                markersize=10, markeredgecolor='white', markeredgewidth=1.5,
                label='Agent', zorder=11)

        if next_waypoint is not None:
            dx = next_waypoint[0] - agent[0]
            dy = next_waypoint[1] - agent[1]
            ax.annotate('', xy=(agent[0] + 0.4 * dx, agent[1] + 0.4 * dy), xytext=agent,
                        arrowprops=dict(arrowstyle='->', color='white', lw=1.5),
                        zorder=12)

    def render_session(self, session, ax=None, title: Optional[str] = None) -> plt.Figure:
        """
        Render a full session snapshot.

        Args:
            session: SimulationSession
            ax: Matplotlib axes (creates new figure if None)
            title: Figure title

        Returns:
            Matplotlib figure
        """
        if ax is None:
            fig, ax = plt.subplots(figsize=self.config.figure_size)
        else:
            fig = ax.figure

        self.plot_grid(ax, session.grid)
        self.plot_sensor_range(ax, session.agent, session.sensor_range)
        self.plot_path(ax, session.path, label='Planned')
        self.plot_path(ax, session.trail, color=self.config.colors['trail'],
                       label='Trail', linewidth=1.5, linestyle='--')
        self.plot_detections(ax, session.sensor_reading)
        self.plot_agent_target(ax, session.agent, session.target, session.next_waypoint)

        ax.text(
            0.02, 0.98, self._format_stats(session), transform=ax.transAxes,
            verticalalignment='top', fontsize=9,
            bbox=dict(boxstyle='round', facecolor='white', alpha=0.8),
            zorder=20
        )

        ax.set_title(title or f'Navigation ({session.state.value})')
        ax.legend(loc='lower right', fontsize=8)
        return fig

    def _format_stats(self, session) -> str:
        stats = session.stats
        lines = [
            f"Path length: {stats.path_length}",
            f"Detected: {stats.obstacles_detected}",
            f"Time: {stats.time_elapsed:.1f}s",
            f"Efficiency: {stats.efficiency}%",
        ]
        if not session.path:
            lines.append("No route to target")
        return '\n'.join(lines)

    def save_figure(self, fig: plt.Figure, filename: str, dpi: Optional[int] = None):
        """Save figure to file"""
        fig.savefig(filename, dpi=dpi or self.config.dpi,
                    bbox_inches='tight', facecolor='white')


def render_ascii(session) -> str:
    """
    Text snapshot of a session, one line per row.

    Legend: '#' obstacle, '.' empty, '*' path, '!' detected obstacle,
    'A' agent, 'T' target.
    """
    grid = session.grid
    rows: List[List[str]] = [
        ['#' if grid.is_obstacle(x, y) else '.' for x in range(grid.width)]
        for y in range(grid.height)
    ]

    for x, y in session.path:
        if rows[y][x] == '.':
            rows[y][x] = '*'

    reading = session.sensor_reading
    if reading is not None:
        for x, y in reading.positions:
            rows[y][x] = '!'

    tx, ty = session.target
    rows[ty][tx] = 'T'
    ax, ay = session.agent
    rows[ay][ax] = 'A'

    return '\n'.join(''.join(row) for row in rows)


def create_frame_callback(visualizer: GridVisualizer, frame_dir: str):
    """
    Create a step callback that saves one PNG per simulation step.

    Usage:
        visualizer = GridVisualizer()
        callback = create_frame_callback(visualizer, 'frames')
        session = SimulationSession(config, step_callback=callback)
    """
    os.makedirs(frame_dir, exist_ok=True)

    def callback(session, info):
        fig = visualizer.render_session(session, title=f"Step {info['step']}")
        filename = os.path.join(frame_dir, f"frame_{info['step']:05d}.png")
        visualizer.save_figure(fig, filename)
        plt.close(fig)

    return callback
