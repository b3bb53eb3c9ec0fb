"""
Analysis layer: derived quantities for plots and validation.

IMPORTANT: This is NOT seen by the engine. One-way derivation only.

- integrate_proper_time: numerical τ along a worldline (scipy quad)
- compare_engine_vs_integral: closed-form checkpoints vs integral
- sample_worldlines: arrays of positions and clock readings for plotting
"""

from twinsim.analysis.ageing import (
    AgeingResult,
    integrate_proper_time,
    sample_worldlines,
    compare_engine_vs_integral,
    max_discrepancy,
)

__all__ = [
    "AgeingResult",
    "integrate_proper_time",
    "sample_worldlines",
    "compare_engine_vs_integral",
    "max_discrepancy",
]
