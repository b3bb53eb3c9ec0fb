"""
Core engine primitives.

This layer knows NOTHING about scenarios, observers, or rendering.
It only knows:
- Lorentz factors and dilated proper time
- Constant-velocity legs and the worldlines built from them
- A monotonic lab-time clock

Every reading is a pure function of lab time.
"""

from twinsim.core.errors import DomainError, InvariantViolation
from twinsim.core.frame import (
    gamma,
    proper_time_elapsed,
    position_at,
    trip_duration,
    validate_velocity,
    validate_positive,
)
from twinsim.core.worldline import Leg, LegEvaluation, Worldline
from twinsim.core.clock import SimulationClock

__all__ = [
    "DomainError",
    "InvariantViolation",
    "gamma",
    "proper_time_elapsed",
    "position_at",
    "trip_duration",
    "validate_velocity",
    "validate_positive",
    "Leg",
    "LegEvaluation",
    "Worldline",
    "SimulationClock",
]
