"""
Frame math: pure special-relativistic helpers.

Units are natural (c = 1): velocities are fractions of light speed,
distances and times share the same unit.

Nothing here holds state. Callers must guarantee |v| < 1; derived
velocities (multiples of a base velocity) are validated before use.
"""

from __future__ import annotations
import math

from twinsim.core.errors import DomainError


def validate_velocity(v: float, name: str = "v") -> float:
    """
    Check that a velocity lies in the open interval (-1, 1).

    Returns:
        v as a float

    Raises:
        DomainError: if v is non-finite or |v| >= 1
    """
    v = float(v)
    if not math.isfinite(v):
        raise DomainError(f"{name} must be finite, got {v}")
    if abs(v) >= 1.0:
        raise DomainError(f"|{name}| must be below light speed (1), got {v}")
    return v


def validate_positive(value: float, name: str) -> float:
    """Check that a distance or base velocity is strictly positive and finite."""
    value = float(value)
    if not math.isfinite(value) or value <= 0.0:
        raise DomainError(f"{name} must be a positive real, got {value}")
    return value


def gamma(v: float) -> float:
    """
    Lorentz factor γ(v) = 1 / sqrt(1 - v²).

    Args:
        v: Velocity as a fraction of light speed, |v| < 1

    Returns:
        γ >= 1 (exactly 1 for v = 0)

    Raises:
        DomainError: if |v| >= 1
    """
    v = validate_velocity(v)
    if v == 0.0:
        return 1.0
    return 1.0 / math.sqrt(1.0 - v * v)


def proper_time_elapsed(coord_time_elapsed: float, v: float) -> float:
    """
    Proper time elapsed on a clock moving at constant v.

    Δτ = Δt / γ(v). Valid for either sign of Δt.
    """
    return coord_time_elapsed / gamma(v)


def position_at(start_position: float, velocity: float, elapsed: float) -> float:
    """Along-track position after `elapsed` lab time at constant velocity."""
    return start_position + velocity * elapsed


def trip_duration(distance: float, v: float) -> float:
    """Lab time needed to cover `distance` at speed |v|."""
    return distance / abs(v)
