"""
ScenarioInstance: the engine's external interface.

One instance owns one topology, its current parameters, the derived
worldlines and the simulation clock. It is single-owner and driven by a
render loop that calls advance() then snapshot() once per frame.

Parameter edits:
- v, distance, start_distance, multipliers change trip geometry. They are
  validated by a dry-run derivation and, when accepted, force a full reset
  before the next advance() or snapshot().
- speed and paused take effect immediately.
- Physically invalid values raise DomainError and leave the instance
  untouched. Valid values outside the editing range are clamped.
"""

from __future__ import annotations
import logging
import math
from dataclasses import replace
from typing import Any

from twinsim.core.clock import SimulationClock
from twinsim.core.errors import DomainError
from twinsim.core.frame import validate_positive, validate_velocity
from twinsim.engine.kinematics import KinematicsEngine, Snapshot
from twinsim.scenarios.base import ScenarioParameters, TopologySpec
from twinsim.scenarios.topology import ScenarioDerivation, derive, get_topology

logger = logging.getLogger(__name__)


class ScenarioInstance:
    """A running scenario: parameters, derived worldlines, clock."""

    def __init__(self, topology: TopologySpec, parameters: ScenarioParameters | None = None):
        self.topology = topology
        if parameters is None:
            parameters = topology.defaults
        self.parameters = self._normalise(parameters)

        self.clock = SimulationClock(paused=self.parameters.paused)
        self.derivation: ScenarioDerivation | None = None
        self.engine: KinematicsEngine | None = None

        self._needs_reset = False
        self._disposed = False
        self._completion_logged = False

        self.reset()

    @classmethod
    def init(cls, parameters: ScenarioParameters, topology: str | TopologySpec = "relay") -> "ScenarioInstance":
        """Create an instance from parameters and a topology (name or spec)."""
        if isinstance(topology, str):
            topology = get_topology(topology)
        return cls(topology, parameters)

    # ═══════════════════════════════════════════════════════════════
    # LIFECYCLE
    # ═══════════════════════════════════════════════════════════════

    def reset(self) -> None:
        """Re-derive every worldline and rewind the clock to the topology start."""
        self._check_alive()
        self.derivation = derive(self.topology, self.parameters)
        self.engine = KinematicsEngine(self.derivation)
        self.clock.reset(self.derivation.start_lab_time)
        self.clock.paused = self.parameters.paused
        self._needs_reset = False
        self._completion_logged = False
        logger.debug("Reset %s with %s", self.topology.name, self.parameters)

    def advance(self, wall_dt: float) -> None:
        """Advance lab time by wall_dt seconds at the current playback speed."""
        self._check_alive()
        self._reset_if_stale()
        self.clock.advance(wall_dt, self.parameters.speed)

        if not self._completion_logged and self.clock.reached(self.derivation.completion_instant):
            self._completion_logged = True
            logger.info(
                "Scenario %s finished at lab time %.4f",
                self.topology.name,
                self.derivation.completion_instant,
            )

    def snapshot(self) -> Snapshot:
        """Evaluate the scenario at the current lab time."""
        self._check_alive()
        self._reset_if_stale()
        return self.engine.tick(self.clock.lab_time)

    def dispose(self) -> None:
        """Release all engine state; the instance cannot be used afterwards."""
        self.derivation = None
        self.engine = None
        self._disposed = True
        logger.debug("Disposed %s", self.topology.name)

    # ═══════════════════════════════════════════════════════════════
    # PARAMETERS
    # ═══════════════════════════════════════════════════════════════

    def set_parameter(self, name: str, value: Any) -> None:
        """
        Edit one parameter.

        Args:
            name: A ScenarioParameters field name
            value: New value

        Raises:
            KeyError: unknown parameter name, or one this topology does not use
            DomainError: physically invalid value (state is unchanged)
        """
        self._check_alive()
        if name not in ScenarioParameters.field_names():
            raise KeyError(f"Unknown parameter {name!r}")
        if name not in self.topology.parameter_names:
            raise KeyError(f"Parameter {name!r} has no effect on topology {self.topology.name!r}")

        candidate = replace(self.parameters, **{name: self._coerce(name, value)})

        if name in ScenarioParameters.GEOMETRY_FIELDS:
            # Dry run: multiplied velocities may leave the domain
            derive(self.topology, candidate)
            self._needs_reset = True

        self.parameters = candidate
        if name == "paused":
            self.clock.paused = candidate.paused

    def _coerce(self, name: str, value: Any) -> Any:
        if name == "paused":
            return bool(value)

        if name in ("distance_multipliers", "velocity_multipliers"):
            if value is None:
                return None
            return tuple(validate_positive(m, name) for m in value)

        value = float(value)
        if name == "v":
            validate_positive(value, "v")
            validate_velocity(value, "v")
        elif name in ("distance", "speed"):
            validate_positive(value, name)
        elif name == "start_distance":
            if not math.isfinite(value) or value < 0.0:
                raise DomainError(f"start_distance must be a non-negative real, got {value}")

        clamped = self.topology.bounds.clamp(name, value)
        if clamped != value:
            logger.warning("%s=%g outside editing range, clamped to %g", name, value, clamped)
        return clamped

    def _normalise(self, parameters: ScenarioParameters) -> ScenarioParameters:
        changes = {}
        for name in ("v", "distance", "speed", "start_distance", "distance_multipliers", "velocity_multipliers"):
            changes[name] = self._coerce(name, getattr(parameters, name))
        changes["paused"] = bool(parameters.paused)
        return replace(parameters, **changes)

    # ═══════════════════════════════════════════════════════════════
    # QUERIES
    # ═══════════════════════════════════════════════════════════════

    @property
    def lab_time(self) -> float:
        return self.clock.lab_time

    @property
    def completion_instant(self) -> float:
        """
        Completion instant of the running derivation.

        Read-only: after a geometry edit this still reports the derivation
        the clock is running against, until the next reset.
        """
        self._check_alive()
        return self.derivation.completion_instant

    @property
    def finished(self) -> bool:
        self._check_alive()
        return self.clock.reached(self.derivation.completion_instant)

    @property
    def needs_reset(self) -> bool:
        return self._needs_reset

    @property
    def disposed(self) -> bool:
        return self._disposed

    def _check_alive(self) -> None:
        if self._disposed:
            raise RuntimeError(f"Scenario {self.topology.name!r} has been disposed")

    def _reset_if_stale(self) -> None:
        if self._needs_reset:
            logger.debug("Geometry changed since last reset; re-deriving %s", self.topology.name)
            self.reset()


def create_scenario(name: str, parameters: ScenarioParameters | None = None, **overrides) -> ScenarioInstance:
    """
    Convenience factory for a registered scenario.

    Args:
        name: Registered topology name (see twinsim.scenarios.SCENARIOS)
        parameters: Full parameter set (defaults to the topology's defaults)
        **overrides: Individual ScenarioParameters fields to replace

    Returns:
        A reset ScenarioInstance
    """
    topology = get_topology(name)
    params = parameters if parameters is not None else topology.defaults
    if overrides:
        params = replace(params, **overrides)
    return ScenarioInstance(topology, params)
