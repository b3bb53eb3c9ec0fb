"""
Visualization utilities.

- Spacetime (Minkowski) diagrams of worldlines
- Clock readings vs lab time
"""

from twinsim.viz.spacetime import (
    plot_spacetime_diagram,
    plot_proper_time,
    save_figure,
)

__all__ = [
    "plot_spacetime_diagram",
    "plot_proper_time",
    "save_figure",
]
