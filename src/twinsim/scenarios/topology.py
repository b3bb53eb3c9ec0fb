"""
Scenario topologies: from parameters to worldlines.

Four topologies are supported, all described by a TopologySpec value:

- relay: S stays home, L flies out to `distance` and hands its reading to
  R, which flies back. The relay total is L's frozen reading plus R's.
  A flying-start variant shows L approaching the origin before lab time 0.
- symmetric: three observers fly out and back along directions 120° apart
  with identical speed and distance. They age identically.
- distance_scaled: same speed, 1x/2x/3x the base distance.
- velocity_scaled: same distance, 1x/2x/4x the base velocity.

Round-trip observers get three legs: outbound, inbound, at rest at the
origin (ageing 1:1 while waiting for the others).
"""

from __future__ import annotations
import logging
from dataclasses import dataclass

from twinsim.core.errors import DomainError
from twinsim.core.frame import trip_duration, validate_positive, validate_velocity
from twinsim.core.worldline import Leg, Worldline
from twinsim.scenarios.base import (
    TRIPLET_ANGLES,
    Milestones,
    Observer,
    ObserverRole,
    ObserverSpec,
    ParameterBounds,
    ScenarioParameters,
    TopologyKind,
    TopologySpec,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ScenarioDerivation:
    """Everything derived from one (topology, parameters) pair at reset."""

    topology: TopologySpec
    parameters: ScenarioParameters
    observers: dict[ObserverRole, Observer]
    start_lab_time: float
    completion_instant: float

    # Relay only: roles and the donor reading frozen at the handoff instant
    reference: ObserverRole | None = None
    donor: ObserverRole | None = None
    receiver: ObserverRole | None = None
    handoff_instant: float | None = None
    frozen_donor_proper_time: float | None = None

    @property
    def has_handoff(self) -> bool:
        return self.frozen_donor_proper_time is not None


# ═══════════════════════════════════════════════════════════════
# TOPOLOGY DESCRIPTIONS
# ═══════════════════════════════════════════════════════════════


def relay_topology(flying_start: bool = False) -> TopologySpec:
    """Twin paradox relay: stationary S, outbound L, inbound R."""
    name = "relay_flying_start" if flying_start else "relay"
    defaults = ScenarioParameters(
        v=0.5, distance=10.0, speed=2.0, start_distance=5.0 if flying_start else 0.0
    )
    return TopologySpec(
        name=name,
        kind=TopologyKind.RELAY,
        observers=(
            ObserverSpec(ObserverRole.S, angle=0.0, label="S (stationary)"),
            ObserverSpec(ObserverRole.L, angle=0.0, label="L (outbound)"),
            ObserverSpec(ObserverRole.R, angle=0.0, label="R (inbound)"),
        ),
        defaults=defaults,
        bounds=ParameterBounds(v=(0.1, 0.95), distance=(5.0, 20.0)),
        flying_start=flying_start,
        title="Twin Paradox Relay" + (" (Flying Start)" if flying_start else ""),
        description=(
            "Clock S remains stationary. L moves away, hands off to R, which returns. "
            "Total relay time < S time."
        ),
    )


def symmetric_triplet() -> TopologySpec:
    """Three identical round trips 120° apart."""
    return TopologySpec(
        name="symmetric",
        kind=TopologyKind.ROUND_TRIP,
        observers=tuple(
            ObserverSpec(role, angle=TRIPLET_ANGLES[role], label=role.value)
            for role in ObserverRole
        ),
        defaults=ScenarioParameters(v=0.5, distance=10.0, speed=2.0),
        bounds=ParameterBounds(v=(0.1, 0.95), distance=(5.0, 20.0)),
        title="Symmetric Triplet Expansion",
        description=(
            "Three observers (S, L, R) move outward at 120° angles at the same speed. "
            "They age identically."
        ),
    )


def distance_scaled_triplet() -> TopologySpec:
    """Same speed, 1x/2x/3x the base distance."""
    multipliers = {ObserverRole.S: 1.0, ObserverRole.L: 2.0, ObserverRole.R: 3.0}
    return TopologySpec(
        name="distance_scaled",
        kind=TopologyKind.ROUND_TRIP,
        observers=tuple(
            ObserverSpec(
                role,
                angle=TRIPLET_ANGLES[role],
                distance_multiplier=multipliers[role],
                label=f"{role.value} ({multipliers[role]:g}xD)",
            )
            for role in ObserverRole
        ),
        defaults=ScenarioParameters(v=0.5, distance=5.0, speed=2.0),
        bounds=ParameterBounds(v=(0.1, 0.95), distance=(2.0, 15.0)),
        title="Asymmetric Triplet",
        description=(
            "Three observers move at different distances. L goes 2x dist, R goes 3x dist "
            "of S (Base). All return to origin eventually."
        ),
    )


def velocity_scaled_triplet() -> TopologySpec:
    """Same distance, 1x/2x/4x the base velocity."""
    multipliers = {ObserverRole.S: 1.0, ObserverRole.L: 2.0, ObserverRole.R: 4.0}
    return TopologySpec(
        name="velocity_scaled",
        kind=TopologyKind.ROUND_TRIP,
        observers=tuple(
            ObserverSpec(
                role,
                angle=TRIPLET_ANGLES[role],
                velocity_multiplier=multipliers[role],
                label=f"{role.value} ({multipliers[role]:g}v)",
            )
            for role in ObserverRole
        ),
        # 4 * 0.24 = 0.96 keeps the fastest observer below light speed
        defaults=ScenarioParameters(v=0.2, distance=5.0, speed=2.0),
        bounds=ParameterBounds(v=(0.05, 0.24), distance=(2.0, 10.0)),
        title="Asymmetric Triplet (Velocity)",
        description=(
            "Three observers travel the same distance at 1x, 2x and 4x the base "
            "velocity. The fastest returns first and ages least during its trip."
        ),
    )


SCENARIOS: dict[str, TopologySpec] = {
    spec.name: spec
    for spec in (
        relay_topology(),
        relay_topology(flying_start=True),
        symmetric_triplet(),
        distance_scaled_triplet(),
        velocity_scaled_triplet(),
    )
}


def get_topology(name: str) -> TopologySpec:
    """Look up a registered topology by name."""
    try:
        return SCENARIOS[name]
    except KeyError:
        raise KeyError(f"Unknown scenario {name!r}; choose from {sorted(SCENARIOS)}") from None


# ═══════════════════════════════════════════════════════════════
# DERIVATION
# ═══════════════════════════════════════════════════════════════


def derive(topology: TopologySpec, params: ScenarioParameters) -> ScenarioDerivation:
    """
    Derive one worldline per observer.

    Args:
        topology: Topology description
        params: Parameters to derive from

    Returns:
        ScenarioDerivation with observers, milestones and instants

    Raises:
        DomainError: if the base or any derived velocity is outside (0, 1),
            or a distance is not positive
    """
    validate_positive(params.v, "v")
    validate_velocity(params.v, "v")
    validate_positive(params.distance, "distance")

    if topology.kind is TopologyKind.RELAY:
        derivation = _derive_relay(topology, params)
    else:
        derivation = _derive_round_trips(topology, params)

    logger.debug(
        "Derived %s: start=%.4f completion=%.4f observers=%s",
        topology.name,
        derivation.start_lab_time,
        derivation.completion_instant,
        [role.value for role in derivation.observers],
    )
    return derivation


def _resolve_multipliers(
    overrides: tuple[float, ...] | None,
    specs: tuple[ObserverSpec, ...],
    attr: str,
    name: str,
) -> list[float]:
    if overrides is None:
        return [getattr(spec, attr) for spec in specs]
    if len(overrides) != len(specs):
        raise DomainError(f"{name} needs {len(specs)} values, got {len(overrides)}")
    return [validate_positive(m, name) for m in overrides]


def _round_trip_legs(distance: float, velocity: float) -> tuple[list[Leg], float, float]:
    """Outbound, inbound and at-rest legs; returns (legs, turnaround, return)."""
    t_turn = trip_duration(distance, velocity)
    t_return = 2.0 * t_turn
    legs = [
        Leg(start_lab_time=0.0, start_position=0.0, velocity=velocity, end_lab_time=t_turn),
        Leg(start_lab_time=t_turn, start_position=distance, velocity=-velocity, end_lab_time=t_return),
        Leg(start_lab_time=t_return, start_position=0.0, velocity=0.0, at_rest=True),
    ]
    return legs, t_turn, t_return


def _derive_round_trips(topology: TopologySpec, params: ScenarioParameters) -> ScenarioDerivation:
    specs = topology.observers
    d_mults = _resolve_multipliers(params.distance_multipliers, specs, "distance_multiplier", "distance_multipliers")
    v_mults = _resolve_multipliers(params.velocity_multipliers, specs, "velocity_multiplier", "velocity_multipliers")

    observers: dict[ObserverRole, Observer] = {}
    for spec, d_mult, v_mult in zip(specs, d_mults, v_mults):
        distance = params.distance * d_mult
        # Multiplied velocities can leave the domain even for a valid base
        velocity = validate_velocity(params.v * v_mult, f"velocity of {spec.role.value}")

        legs, t_turn, t_return = _round_trip_legs(distance, velocity)
        observers[spec.role] = Observer(
            role=spec.role,
            worldline=Worldline(legs),
            milestones=Milestones(start=0.0, turnaround=t_turn, completion=t_return),
            angle=spec.angle,
            label=spec.label or spec.role.value,
            color=spec.color,
        )

    completion = max(obs.milestones.completion for obs in observers.values())
    return ScenarioDerivation(
        topology=topology,
        parameters=params,
        observers=observers,
        start_lab_time=0.0,
        completion_instant=completion,
    )


def _derive_relay(topology: TopologySpec, params: ScenarioParameters) -> ScenarioDerivation:
    v = params.v
    distance = params.distance
    t_handoff = trip_duration(distance, v)
    t_return = 2.0 * t_handoff

    start_lab_time = 0.0
    if topology.flying_start:
        start_distance = params.start_distance
        if start_distance < 0.0:
            raise DomainError(f"start_distance must not be negative, got {start_distance}")
        start_lab_time = -start_distance / v

    # S: single unbounded leg at rest, ages 1:1 from lab time 0
    reference = Worldline([Leg(start_lab_time=0.0, start_position=0.0, velocity=0.0, at_rest=True)])

    # L: one bounded outbound leg; retires at the turnaround point.
    # With a flying start it is extrapolated backwards (visible, reading 0).
    donor = Worldline([Leg(start_lab_time=0.0, start_position=0.0, velocity=v, end_lab_time=t_handoff)])

    # R: one bounded inbound leg from the handoff event; visible beforehand
    # approaching from beyond the turnaround point, reading 0.
    receiver = Worldline(
        [Leg(start_lab_time=t_handoff, start_position=distance, velocity=-v, end_lab_time=t_return)]
    )

    # Frozen once here, never recomputed per tick
    frozen = donor.total_proper_time

    worldlines = {ObserverRole.S: reference, ObserverRole.L: donor, ObserverRole.R: receiver}
    milestones = {
        ObserverRole.S: Milestones(start=0.0),
        ObserverRole.L: Milestones(start=0.0, handoff=t_handoff, completion=t_handoff),
        ObserverRole.R: Milestones(start=t_handoff, handoff=t_handoff, completion=t_return),
    }

    observers = {}
    for spec in topology.observers:
        observers[spec.role] = Observer(
            role=spec.role,
            worldline=worldlines[spec.role],
            milestones=milestones[spec.role],
            angle=spec.angle,
            label=spec.label or spec.role.value,
            color=spec.color,
        )

    return ScenarioDerivation(
        topology=topology,
        parameters=params,
        observers=observers,
        start_lab_time=start_lab_time,
        completion_instant=t_return,
        reference=ObserverRole.S,
        donor=ObserverRole.L,
        receiver=ObserverRole.R,
        handoff_instant=t_handoff,
        frozen_donor_proper_time=frozen,
    )
