"""
Worldline: an observer's motion history as constant-velocity legs.

The worldline stores ONLY what is needed to answer "where is this observer
and what does its clock read at lab time t":
- An ordered, contiguous sequence of legs
- A proper-time checkpoint at every leg boundary

Evaluation is a pure function of lab time. Nothing is integrated tick by
tick, so readings do not depend on the step size of the caller.

Regions of lab time:
- Before the first leg: not yet present. Position is extrapolated along the
  first leg, the clock reads 0.
- Inside leg i: linear position, checkpoint[i] + Δt/γ(v_i).
- After a bounded final leg: retired. Position and clock are held at the
  values reached at the end of that leg.
"""

from __future__ import annotations
import bisect
import logging
import math
from dataclasses import dataclass, replace
from typing import Sequence

import numpy as np

from twinsim.core.errors import InvariantViolation
from twinsim.core.frame import gamma, position_at, proper_time_elapsed

logger = logging.getLogger(__name__)

# Highest speed a leg is clamped to when running without assertions
MAX_SAFE_SPEED = 0.999

# Tolerance for leg boundary contiguity
BOUNDARY_TOL = 1e-9


@dataclass(frozen=True)
class Leg:
    """One maximal interval of constant velocity."""

    start_lab_time: float
    start_position: float  # Along-track coordinate at start_lab_time
    velocity: float  # Fraction of light speed, signed along the track
    end_lab_time: float | None = None  # None: unbounded above
    at_rest: bool = False  # Stationary after trip completion (ages 1:1)

    @property
    def duration(self) -> float | None:
        """Lab-time length of the leg, None when unbounded."""
        if self.end_lab_time is None:
            return None
        return self.end_lab_time - self.start_lab_time

    @property
    def end_position(self) -> float | None:
        """Along-track position at end_lab_time, None when unbounded."""
        if self.end_lab_time is None:
            return None
        return self.position_at(self.end_lab_time)

    def position_at(self, lab_time: float) -> float:
        """Linear position, also valid (as extrapolation) outside the leg."""
        return position_at(self.start_position, self.velocity, lab_time - self.start_lab_time)

    def proper_time_over(self, elapsed: float) -> float:
        """Proper time accumulated after `elapsed` lab time inside this leg."""
        if self.at_rest:
            return elapsed
        return proper_time_elapsed(elapsed, self.velocity)

    def contains(self, lab_time: float) -> bool:
        """True if lab_time lies in [start, end)."""
        if lab_time < self.start_lab_time:
            return False
        return self.end_lab_time is None or lab_time < self.end_lab_time


@dataclass(frozen=True)
class LegEvaluation:
    """State of one worldline at one lab time."""

    lab_time: float
    position: float
    proper_time: float
    leg_index: int  # -1 before the first leg
    velocity: float
    present: bool  # False before the first leg starts
    retired: bool  # True after a bounded final leg has ended


class Worldline:
    """
    Ordered constant-velocity legs plus proper-time checkpoints.

    checkpoints[i] is the proper time accumulated over legs 0..i-1, so
    checkpoints[0] == 0. A bounded final leg adds one trailing checkpoint
    holding the total proper time of the trip.
    """

    def __init__(self, legs: Sequence[Leg]):
        if not legs:
            self._violation("a worldline needs at least one leg")
            legs = [Leg(start_lab_time=0.0, start_position=0.0, velocity=0.0, at_rest=True)]

        self.legs: tuple[Leg, ...] = self._checked_legs(list(legs))
        self.checkpoints: tuple[float, ...] = self._compute_checkpoints()
        self._starts = [leg.start_lab_time for leg in self.legs]

    # ═══════════════════════════════════════════════════════════════
    # CONSTRUCTION
    # ═══════════════════════════════════════════════════════════════

    @staticmethod
    def _violation(message: str) -> None:
        """Log an invariant violation; fatal unless running with -O."""
        logger.error("Worldline invariant violated: %s", message)
        if __debug__:
            raise InvariantViolation(message)

    def _checked_legs(self, legs: list[Leg]) -> tuple[Leg, ...]:
        checked: list[Leg] = []
        for i, leg in enumerate(legs):
            if not math.isfinite(leg.velocity) or abs(leg.velocity) >= 1.0:
                self._violation(f"leg {i} velocity {leg.velocity} is not below light speed")
                clamped = math.copysign(MAX_SAFE_SPEED, leg.velocity) if math.isfinite(leg.velocity) else 0.0
                leg = replace(leg, velocity=clamped)

            if leg.at_rest and leg.velocity != 0.0:
                self._violation(f"leg {i} is marked at rest but moves at {leg.velocity}")
                leg = replace(leg, velocity=0.0)

            is_last = i == len(legs) - 1
            if leg.end_lab_time is None and not is_last:
                self._violation(f"leg {i} is unbounded but is followed by another leg")
                leg = replace(leg, end_lab_time=legs[i + 1].start_lab_time)

            if leg.end_lab_time is not None and leg.end_lab_time < leg.start_lab_time:
                self._violation(
                    f"leg {i} ends ({leg.end_lab_time}) before it starts ({leg.start_lab_time})"
                )
                leg = replace(leg, end_lab_time=leg.start_lab_time)

            if checked:
                prev = checked[-1]
                if not math.isclose(prev.end_lab_time, leg.start_lab_time, abs_tol=BOUNDARY_TOL):
                    self._violation(
                        f"leg {i} starts at {leg.start_lab_time} but leg {i - 1} "
                        f"ends at {prev.end_lab_time}"
                    )
                    # The later leg's start time wins; the earlier leg is cut or stretched
                    # to it and the later leg starts where the earlier one ends
                    prev = replace(prev, end_lab_time=max(prev.start_lab_time, leg.start_lab_time))
                    checked[-1] = prev
                    leg = replace(leg, start_lab_time=prev.end_lab_time, start_position=prev.end_position)

            checked.append(leg)
        return tuple(checked)

    def _compute_checkpoints(self) -> tuple[float, ...]:
        checkpoints = [0.0]
        for i, leg in enumerate(self.legs):
            if leg.end_lab_time is None:
                break
            increment = leg.proper_time_over(leg.duration)
            if increment < 0.0:
                self._violation(f"leg {i} contributes negative proper time {increment}")
                increment = 0.0
            checkpoints.append(checkpoints[-1] + increment)
        return tuple(checkpoints)

    # ═══════════════════════════════════════════════════════════════
    # QUERIES
    # ═══════════════════════════════════════════════════════════════

    @property
    def start_lab_time(self) -> float:
        """Lab time at which the observer starts ageing."""
        return self.legs[0].start_lab_time

    @property
    def end_lab_time(self) -> float | None:
        """Lab time at which a bounded worldline retires, None if unbounded."""
        return self.legs[-1].end_lab_time

    @property
    def transition_times(self) -> list[float]:
        """Lab times of the boundaries between consecutive legs."""
        return self._starts[1:]

    @property
    def total_proper_time(self) -> float | None:
        """Proper time at retirement, None for an unbounded worldline."""
        if self.end_lab_time is None:
            return None
        return self.checkpoints[-1]

    def locate(self, lab_time: float) -> int:
        """Index of the leg active at lab_time, -1 before the first leg."""
        return bisect.bisect_right(self._starts, lab_time) - 1

    def evaluate(self, lab_time: float) -> LegEvaluation:
        """
        Position and accumulated proper time at a lab time.

        Args:
            lab_time: Global coordinate time

        Returns:
            LegEvaluation for that instant
        """
        lab_time = float(lab_time)
        index = self.locate(lab_time)

        if index < 0:
            first = self.legs[0]
            return LegEvaluation(
                lab_time=lab_time,
                position=first.position_at(lab_time),
                proper_time=0.0,
                leg_index=-1,
                velocity=first.velocity,
                present=False,
                retired=False,
            )

        leg = self.legs[index]
        if leg.end_lab_time is not None and lab_time >= leg.end_lab_time:
            # Only reachable on a bounded final leg
            return LegEvaluation(
                lab_time=lab_time,
                position=leg.end_position,
                proper_time=self.checkpoints[-1],
                leg_index=index,
                velocity=0.0,
                present=True,
                retired=True,
            )

        elapsed = lab_time - leg.start_lab_time
        return LegEvaluation(
            lab_time=lab_time,
            position=leg.position_at(lab_time),
            proper_time=self.checkpoints[index] + leg.proper_time_over(elapsed),
            leg_index=index,
            velocity=leg.velocity,
            present=True,
            retired=False,
        )

    def proper_time_rate(self, lab_time: float) -> float:
        """dτ/dt at lab_time: 0 while absent or retired, 1/γ(v) otherwise."""
        index = self.locate(lab_time)
        if index < 0:
            return 0.0
        leg = self.legs[index]
        if leg.end_lab_time is not None and lab_time >= leg.end_lab_time:
            return 0.0
        if leg.at_rest:
            return 1.0
        return 1.0 / gamma(leg.velocity)

    def sample(self, lab_times: Sequence[float] | np.ndarray) -> tuple[np.ndarray, np.ndarray]:
        """
        Evaluate at many lab times.

        Returns:
            (positions, proper_times) arrays with the shape of lab_times
        """
        times = np.asarray(lab_times, dtype=np.float64)
        positions = np.empty_like(times)
        proper_times = np.empty_like(times)
        for i, t in enumerate(times.flat):
            ev = self.evaluate(t)
            positions.flat[i] = ev.position
            proper_times.flat[i] = ev.proper_time
        return positions, proper_times

    def __len__(self) -> int:
        return len(self.legs)

    def __repr__(self) -> str:
        return f"Worldline(legs={len(self.legs)}, start={self.start_lab_time}, end={self.end_lab_time})"
