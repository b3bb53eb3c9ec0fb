"""
Spacetime visualization of scenario worldlines.

Plots observer worldlines on a Minkowski diagram (along-track position vs
lab time) and clock readings against lab time, showing how travelling
clocks fall behind the stay-at-home clock.
"""

from __future__ import annotations
from pathlib import Path
from typing import TYPE_CHECKING

import numpy as np
import matplotlib.pyplot as plt
from matplotlib.figure import Figure
from matplotlib.axes import Axes

from twinsim.analysis.ageing import sample_worldlines

if TYPE_CHECKING:
    from twinsim.scenarios.topology import ScenarioDerivation


def _hex_color(color: int) -> str:
    return f"#{color:06x}"


def plot_spacetime_diagram(
    derivation: "ScenarioDerivation",
    title: str | None = None,
    ax: Axes | None = None,
    figsize: tuple[float, float] = (7, 8),
    n_samples: int = 400,
    show_light_cone: bool = True,
    show_milestones: bool = True,
) -> tuple[Figure, Axes]:
    """
    Plot every worldline as along-track position vs lab time.

    Args:
        derivation: Derived scenario
        title: Plot title (defaults to the topology title)
        ax: Existing axes (creates new if None)
        n_samples: Samples per worldline
        show_light_cone: Draw x = ±t through the origin
        show_milestones: Mark turnaround, handoff and completion events

    Returns:
        (fig, ax) tuple
    """
    if ax is None:
        fig, ax = plt.subplots(figsize=figsize)
    else:
        fig = ax.figure

    samples = sample_worldlines(derivation, n_samples=n_samples)
    times = samples["lab_time"]

    for role, observer in derivation.observers.items():
        positions = samples[role]["position"]
        color = _hex_color(observer.color)

        # Dashed where the observer is not yet present
        present = times >= observer.worldline.start_lab_time
        ax.plot(positions[present], times[present], color=color, linewidth=2, label=observer.label)
        if not present.all():
            ax.plot(positions[~present], times[~present], color=color, linewidth=1, linestyle="--", alpha=0.6)

        if show_milestones:
            ms = observer.milestones
            for instant, marker in ((ms.turnaround, "^"), (ms.handoff, "D"), (ms.completion, "s")):
                if instant is None:
                    continue
                x = observer.evaluate(instant).position
                ax.scatter([x], [instant], color=color, marker=marker, s=60, zorder=3, edgecolors="white")

    if show_light_cone:
        t_max = derivation.completion_instant
        cone = np.array([0.0, t_max])
        ax.plot(cone, cone, color="gray", linestyle=":", alpha=0.5, label="_nolegend_")
        ax.plot(-cone, cone, color="gray", linestyle=":", alpha=0.5, label="_nolegend_")

    ax.set_title(title or derivation.topology.title)
    ax.set_xlabel("Position along track (light units)")
    ax.set_ylabel("Lab time")
    ax.legend(loc="upper right")
    ax.grid(True, alpha=0.3)

    return fig, ax


def plot_proper_time(
    derivation: "ScenarioDerivation",
    title: str = "Clock Readings vs Lab Time",
    figsize: tuple[float, float] = (10, 6),
    n_samples: int = 400,
) -> Figure:
    """
    Plot each observer's clock reading against lab time.

    The stay-at-home reference (τ = t) is drawn for comparison; for relay
    scenarios the composite relay clock is drawn as well.

    Returns:
        Figure
    """
    fig, ax = plt.subplots(figsize=figsize)

    samples = sample_worldlines(derivation, n_samples=n_samples)
    times = samples["lab_time"]

    for role, observer in derivation.observers.items():
        ax.plot(
            times,
            samples[role]["proper_time"],
            color=_hex_color(observer.color),
            linewidth=2,
            label=observer.label,
        )

    if derivation.has_handoff:
        donor = samples[derivation.donor]["proper_time"]
        receiver = samples[derivation.receiver]["proper_time"]
        total = np.where(
            times < derivation.handoff_instant,
            donor,
            derivation.frozen_donor_proper_time + receiver,
        )
        ax.plot(times, total, color="gold", linewidth=2, linestyle="--", label="Relay total (L + R)")

    ax.plot(times, np.clip(times, 0.0, None), color="gray", linestyle=":", alpha=0.7, label="Lab time")

    ax.set_xlabel("Lab time")
    ax.set_ylabel("Proper time")
    ax.set_title(title)
    ax.legend()
    ax.grid(True, alpha=0.3)

    fig.tight_layout()
    return fig


def save_figure(fig: Figure, path: str | Path, dpi: int = 150, **kwargs) -> None:
    """Save figure to file."""
    fig.savefig(path, dpi=dpi, bbox_inches="tight", **kwargs)
