"""
Cross-check the engine's closed-form clocks against numerical integration.

The engine reads proper time from checkpoints: τ = τ_i + Δt/γ(v_i).
Here we integrate dτ/dt = 1/γ(v(t)) directly with scipy, breaking the
integral at every leg boundary. If the two agree, the checkpoints are
composed correctly across legs.

IMPORTANT: This layer is NOT used by the engine. One-way derivation only.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import TYPE_CHECKING

import numpy as np
from scipy import integrate

if TYPE_CHECKING:
    from twinsim.core.worldline import Worldline
    from twinsim.scenarios.base import ObserverRole
    from twinsim.scenarios.topology import ScenarioDerivation


@dataclass
class AgeingResult:
    """Engine vs integrated proper time for one observer."""

    role: "ObserverRole"
    lab_time: float
    engine_proper_time: float
    integrated_proper_time: float
    integration_error: float  # Error estimate reported by quad

    @property
    def discrepancy(self) -> float:
        return abs(self.engine_proper_time - self.integrated_proper_time)


def integrate_proper_time(worldline: "Worldline", t0: float, t1: float) -> tuple[float, float]:
    """
    Integrate 1/γ(v(t)) over [t0, t1].

    Args:
        worldline: Worldline to integrate along
        t0, t1: Lab-time bounds, t0 <= t1

    Returns:
        (proper_time, error_estimate)
    """
    if t1 < t0:
        raise ValueError(f"t1 ({t1}) must not precede t0 ({t0})")
    if t1 == t0:
        return 0.0, 0.0

    candidates = [worldline.start_lab_time, *worldline.transition_times]
    if worldline.end_lab_time is not None:
        candidates.append(worldline.end_lab_time)
    breakpoints = sorted(b for b in set(candidates) if t0 < b < t1)

    # Integrate piecewise; the integrand is constant on each piece
    edges = [t0, *breakpoints, t1]
    total = 0.0
    error = 0.0
    for a, b in zip(edges[:-1], edges[1:]):
        value, err = integrate.quad(worldline.proper_time_rate, a, b)
        total += value
        error += err
    return total, error


def sample_worldlines(
    derivation: "ScenarioDerivation",
    n_samples: int = 200,
    t_end: float | None = None,
) -> dict:
    """
    Sample every observer from the scenario start to t_end.

    Returns:
        Dict with "lab_time" array and per-role "position"/"proper_time" arrays
    """
    if t_end is None:
        t_end = derivation.completion_instant
    times = np.linspace(derivation.start_lab_time, t_end, n_samples)

    samples: dict = {"lab_time": times}
    for role, observer in derivation.observers.items():
        positions, proper_times = observer.worldline.sample(times)
        samples[role] = {"position": positions, "proper_time": proper_times}
    return samples


def compare_engine_vs_integral(derivation: "ScenarioDerivation", lab_time: float) -> list[AgeingResult]:
    """
    Compare closed-form and integrated proper time for every observer.

    Integration starts at the earliest worldline start (nothing ages before).
    """
    results = []
    for role, observer in derivation.observers.items():
        wl = observer.worldline
        engine_tau = wl.evaluate(lab_time).proper_time
        t0 = min(wl.start_lab_time, lab_time)
        integrated, err = integrate_proper_time(wl, t0, lab_time)
        results.append(
            AgeingResult(
                role=role,
                lab_time=lab_time,
                engine_proper_time=engine_tau,
                integrated_proper_time=integrated,
                integration_error=err,
            )
        )
    return results


def max_discrepancy(derivation: "ScenarioDerivation", n_samples: int = 50) -> float:
    """Largest engine/integral mismatch over evenly spaced lab times."""
    times = np.linspace(derivation.start_lab_time, derivation.completion_instant, n_samples)
    worst = 0.0
    for t in times:
        for result in compare_engine_vs_integral(derivation, float(t)):
            worst = max(worst, result.discrepancy)
    return worst
