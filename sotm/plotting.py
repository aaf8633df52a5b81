"""Engagement plots.

Example:
    >>> from sotm.plotting import plot_engagement
    >>> fig = plot_engagement(result, target=goal)
    >>> fig.savefig("engagement.png")
"""

import matplotlib.pyplot as plt
import numpy as np
from beartype import beartype
from matplotlib.figure import Figure

from sotm.dynamics.state import FixedTarget
from sotm.simulation.engagement import EngagementResult

COLORS = {
    "primary": "#2E86AB",
    "secondary": "#A23B72",
    "accent": "#F18F01",
    "goal": "#E63946",
    "grid": "#CCCCCC",
}


def _setup_style() -> None:
    """Configure matplotlib style for consistent appearance."""
    plt.rcParams.update({
        "font.family": "sans-serif",
        "font.size": 11,
        "axes.titlesize": 14,
        "axes.labelsize": 12,
        "legend.fontsize": 10,
        "grid.alpha": 0.5,
    })


@beartype
def plot_engagement(
    result: EngagementResult,
    target: FixedTarget | None = None,
    figsize: tuple[float, float] = (12.0, 5.0),
    title: str | None = None,
) -> Figure:
    """Plot platform path, virtual goals and fire events.

    Left: field view (platform path, virtual goals, real goal opening).
    Right: heading error over time with fire events marked.

    Args:
        result: Engagement history
        target: Real goal, drawn as its opening if given
        figsize: Figure size (width, height)
        title: Optional figure title

    Returns:
        matplotlib Figure
    """
    _setup_style()

    fig, (ax_field, ax_err) = plt.subplots(1, 2, figsize=figsize)

    position = result.position
    goals = result.virtual_goals
    fired = np.array([s.fired for s in result.samples], dtype=bool)

    if len(position):
        ax_field.plot(
            position[:, 0], position[:, 1],
            c=COLORS["primary"], linewidth=2.0, label="Platform",
        )
        ax_field.scatter(
            goals[:, 0], goals[:, 1],
            c=COLORS["secondary"], s=12, alpha=0.5, label="Virtual goal",
        )
        if np.any(fired):
            ax_field.scatter(
                position[fired, 0], position[fired, 1],
                c=COLORS["accent"], s=150, marker="*", label="Fired", zorder=3,
            )

    if target is not None:
        gx, gy = float(target.position[0]), float(target.position[1])
        half = target.opening_width / 2
        ax_field.plot([gx, gx], [gy - half, gy + half], c=COLORS["goal"], linewidth=4.0,
                      label="Goal opening")

    ax_field.set_xlabel("Field X [m]")
    ax_field.set_ylabel("Field Y [m]")
    ax_field.set_aspect("equal", adjustable="datalim")
    ax_field.grid(True, alpha=0.3)
    ax_field.legend()

    t = result.time
    err = np.array([s.heading_error_deg for s in result.samples])
    ax_err.plot(t, err, c=COLORS["primary"], linewidth=1.5)
    for ft in result.fire_times:
        ax_err.axvline(ft, c=COLORS["accent"], linestyle="--", linewidth=1.0)
    ax_err.set_xlabel("Time [s]")
    ax_err.set_ylabel("Heading error [deg]")
    ax_err.grid(True, alpha=0.3)

    fig.suptitle(title or f"Engagement: {result.shots} shot(s)")
    fig.tight_layout()
    return fig
