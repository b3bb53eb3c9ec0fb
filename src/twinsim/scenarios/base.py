"""
Base types for scenarios.

A scenario is described by a small TopologySpec value (observer roles,
multipliers, angular layout) plus ScenarioParameters (velocity, distance,
playback). Topology derivation turns the pair into one Observer per role,
each owning exactly one Worldline.

IMPORTANT: Observers never reference each other. Cross-observer readings
(the relay composite clock) are computed by the engine from the frozen
donor value carried on the derivation.
"""

from __future__ import annotations
import math
from dataclasses import dataclass, field, fields
from enum import Enum
from typing import TYPE_CHECKING, ClassVar

import numpy as np

if TYPE_CHECKING:
    from twinsim.core.worldline import LegEvaluation, Worldline


class ObserverRole(str, Enum):
    """
    Closed set of observer roles.

    In the relay topology S is the stationary reference clock, L the
    outbound donor and R the inbound receiver. In the triplets all three
    travel; S is the base (1x) observer.
    """

    S = "S"
    L = "L"
    R = "R"


class TopologyKind(Enum):
    """Structural family of a topology."""

    RELAY = "relay"  # One coordinated trip split across two clocks
    ROUND_TRIP = "round_trip"  # Independently timed out-and-back trips


# Angular layout of the triplets (radians, horizontal plane)
TRIPLET_ANGLES = {
    ObserverRole.S: math.pi / 2,
    ObserverRole.L: math.pi / 2 + 2 * math.pi / 3,
    ObserverRole.R: math.pi / 2 + 4 * math.pi / 3,
}

ROLE_COLORS = {
    ObserverRole.S: 0x3498DB,  # Blue
    ObserverRole.L: 0x2ECC71,  # Green
    ObserverRole.R: 0xE74C3C,  # Red
}


@dataclass(frozen=True)
class ObserverSpec:
    """Per-observer part of a topology description."""

    role: ObserverRole
    angle: float = 0.0  # Direction of travel in the horizontal plane
    distance_multiplier: float = 1.0
    velocity_multiplier: float = 1.0
    label: str = ""  # Presentation only

    @property
    def color(self) -> int:
        """Presentation colour for this role."""
        return ROLE_COLORS[self.role]


@dataclass(frozen=True)
class ParameterBounds:
    """Editing ranges for scenario parameters (inclusive)."""

    v: tuple[float, float] = (0.1, 0.95)
    distance: tuple[float, float] = (5.0, 20.0)
    speed: tuple[float, float] = (0.1, 5.0)
    start_distance: tuple[float, float] = (0.0, 20.0)

    def clamp(self, name: str, value: float) -> float:
        """Clamp a numeric parameter into its range; names without a range pass through."""
        bounds = getattr(self, name, None)
        if bounds is None:
            return value
        lo, hi = bounds
        return min(max(value, lo), hi)


@dataclass(frozen=True)
class ScenarioParameters:
    """
    User parameters of one scenario instance.

    Immutable: an edit creates a new value (dataclasses.replace) and the
    worldlines are re-derived from it.
    """

    v: float = 0.5  # Base velocity, fraction of light speed
    distance: float = 10.0  # Base separation
    speed: float = 2.0  # Playback multiplier (lab seconds per wall second)
    paused: bool = False
    start_distance: float = 0.0  # Flying start: how far before the origin L appears

    # Per-observer overrides of the topology multipliers (travelling observers, in order)
    distance_multipliers: tuple[float, ...] | None = None
    velocity_multipliers: tuple[float, ...] | None = None

    # Parameters whose edits change trip geometry and require a reset
    GEOMETRY_FIELDS: ClassVar[frozenset[str]] = frozenset(
        {"v", "distance", "start_distance", "distance_multipliers", "velocity_multipliers"}
    )

    @classmethod
    def field_names(cls) -> set[str]:
        """Names accepted by ScenarioInstance.set_parameter."""
        return {f.name for f in fields(cls)}


@dataclass(frozen=True)
class TopologySpec:
    """
    Small value describing one of the supported topologies.

    The four supported scenarios differ only in kind, observer count,
    multipliers and angles; all of them are derived by the same code.
    """

    name: str
    kind: TopologyKind
    observers: tuple[ObserverSpec, ...]
    defaults: ScenarioParameters = field(default_factory=ScenarioParameters)
    bounds: ParameterBounds = field(default_factory=ParameterBounds)
    flying_start: bool = False
    title: str = ""
    description: str = ""

    @property
    def roles(self) -> tuple[ObserverRole, ...]:
        return tuple(spec.role for spec in self.observers)

    @property
    def parameter_names(self) -> frozenset[str]:
        """Parameters that affect this topology."""
        names = {"v", "distance", "speed", "paused"}
        if self.flying_start:
            names.add("start_distance")
        if self.kind is TopologyKind.ROUND_TRIP:
            names.update(("distance_multipliers", "velocity_multipliers"))
        return frozenset(names)


@dataclass(frozen=True)
class Milestones:
    """Event instants of one observer, used for event markers."""

    start: float  # Lab time the observer starts ageing
    turnaround: float | None = None  # Outbound leg ends, inbound begins
    handoff: float | None = None  # Relay: control passes from donor to receiver
    completion: float | None = None  # Trip over: back at origin, or retired


@dataclass
class Observer:
    """
    An observer: role tag, presentation colour, one Worldline.

    Positions are along-track coordinates; position_vector maps them into
    the 3D scene along this observer's direction of travel.
    """

    role: ObserverRole
    worldline: "Worldline"
    milestones: Milestones
    angle: float = 0.0
    label: str = ""
    color: int = 0xFFFFFF

    @property
    def direction(self) -> np.ndarray:
        """Unit vector (x, y, z) of travel; the track lies in the y = 0 plane."""
        return np.array([math.cos(self.angle), 0.0, -math.sin(self.angle)])

    def position_vector(self, track_position: float) -> np.ndarray:
        """3D position for an along-track coordinate."""
        return track_position * self.direction

    def evaluate(self, lab_time: float) -> "LegEvaluation":
        """Evaluate this observer's worldline."""
        return self.worldline.evaluate(lab_time)
