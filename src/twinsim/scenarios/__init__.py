"""
Scenarios: topology descriptions and their derivation into worldlines.

Scenarios know how observers move, not how they are drawn.
- ObserverRole: closed set of roles (S, L, R)
- TopologySpec: observer count, multipliers, angles, parameter ranges
- derive: parameters + topology -> one Worldline per observer
"""

from twinsim.scenarios.base import (
    ObserverRole,
    TopologyKind,
    ObserverSpec,
    ParameterBounds,
    ScenarioParameters,
    TopologySpec,
    Milestones,
    Observer,
)
from twinsim.scenarios.topology import (
    ScenarioDerivation,
    SCENARIOS,
    derive,
    get_topology,
    relay_topology,
    symmetric_triplet,
    distance_scaled_triplet,
    velocity_scaled_triplet,
)

__all__ = [
    "ObserverRole",
    "TopologyKind",
    "ObserverSpec",
    "ParameterBounds",
    "ScenarioParameters",
    "TopologySpec",
    "Milestones",
    "Observer",
    "ScenarioDerivation",
    "SCENARIOS",
    "derive",
    "get_topology",
    "relay_topology",
    "symmetric_triplet",
    "distance_scaled_triplet",
    "velocity_scaled_triplet",
]
