"""
Kinematics engine: one snapshot per tick.

The engine evaluates every observer's worldline at the lab time clamped to
the scenario's completion instant. Lab time may run past completion, but
positions and clock readings freeze exactly at arrival.

Snapshots are ephemeral values. They are recomputed from lab time on every
tick and never stored by the engine.
"""

from __future__ import annotations
from dataclasses import dataclass
from enum import Flag, auto
from typing import TYPE_CHECKING

from twinsim.core.frame import gamma

if TYPE_CHECKING:
    from twinsim.core.worldline import LegEvaluation
    from twinsim.scenarios.base import Observer, ObserverRole
    from twinsim.scenarios.topology import ScenarioDerivation


class EventFlag(Flag):
    """Per-observer state flags for event markers."""

    NONE = 0
    PRESENT = auto()  # Clock is running (or has run)
    OUTBOUND = auto()  # Moving away from the origin
    INBOUND = auto()  # Moving back towards the origin
    AT_REST = auto()  # Stationary and ageing 1:1
    TURNED_AROUND = auto()  # Past the turnaround instant
    HANDED_OFF = auto()  # Past the relay handoff instant
    ARRIVED = auto()  # Own trip complete
    RETIRED = auto()  # Bounded worldline ended; state held


@dataclass(frozen=True)
class ObserverState:
    """One observer at one (clamped) lab time."""

    role: "ObserverRole"
    position: tuple[float, float, float]  # Scene coordinates
    track_position: float  # Signed along-track coordinate
    distance_from_origin: float
    proper_time: float
    leg_index: int  # -1 before the first leg
    velocity: float
    gamma: float
    flags: EventFlag


@dataclass(frozen=True)
class Snapshot:
    """
    Engine output for one tick.

    lab_time is the clamped value the physics was read at, so repeated
    ticks past completion produce equal snapshots.
    """

    lab_time: float
    observers: dict["ObserverRole", ObserverState]
    scene_finished: bool
    reference_time: float  # Stay-at-home clock reading
    relay_total: float | None = None  # Composite relay clock
    frozen_donor_proper_time: float | None = None

    def __getitem__(self, role: "ObserverRole") -> ObserverState:
        return self.observers[role]

    def age_differences(self) -> dict["ObserverRole", float]:
        """How far each observer's clock lags the stay-at-home reference."""
        return {role: self.reference_time - state.proper_time for role, state in self.observers.items()}


class KinematicsEngine:
    """
    Evaluates a derived scenario at a lab time.

    Holds only the derivation; no state carries over between ticks.
    """

    def __init__(self, derivation: "ScenarioDerivation"):
        self.derivation = derivation

    @property
    def completion_instant(self) -> float:
        return self.derivation.completion_instant

    def clamp(self, lab_time: float) -> float:
        """Lab time at which physics is read: min(lab_time, completion)."""
        return min(float(lab_time), self.completion_instant)

    def is_finished(self, lab_time: float) -> bool:
        return lab_time >= self.completion_instant

    def tick(self, lab_time: float) -> Snapshot:
        """
        Evaluate every observer at the clamped lab time.

        Args:
            lab_time: Current (unclamped) lab time

        Returns:
            Snapshot of the scenario
        """
        t = self.clamp(lab_time)
        deriv = self.derivation

        states = {}
        evaluations = {}
        for role, observer in deriv.observers.items():
            ev = observer.evaluate(t)
            evaluations[role] = ev
            states[role] = self._observer_state(observer, ev, t)

        if deriv.reference is not None:
            reference_time = evaluations[deriv.reference].proper_time
        else:
            # Stay-at-home clock at the origin, started with the trips
            reference_time = max(t, 0.0)

        relay_total = None
        if deriv.has_handoff:
            relay_total = self.relay_total(t, evaluations)

        return Snapshot(
            lab_time=t,
            observers=states,
            scene_finished=self.is_finished(lab_time),
            reference_time=reference_time,
            relay_total=relay_total,
            frozen_donor_proper_time=deriv.frozen_donor_proper_time,
        )

    def relay_total(self, t: float, evaluations: dict["ObserverRole", "LegEvaluation"]) -> float:
        """
        Composite relay clock.

        Before the handoff this is the donor's live reading; from the handoff
        on it is the frozen donor value plus the receiver's own reading.
        """
        deriv = self.derivation
        if t < deriv.handoff_instant:
            return evaluations[deriv.donor].proper_time
        return deriv.frozen_donor_proper_time + evaluations[deriv.receiver].proper_time

    @staticmethod
    def _observer_state(observer: "Observer", ev: "LegEvaluation", t: float) -> ObserverState:
        flags = EventFlag.NONE
        if ev.present:
            flags |= EventFlag.PRESENT
            if ev.retired:
                flags |= EventFlag.RETIRED
            elif ev.velocity > 0.0:
                flags |= EventFlag.OUTBOUND
            elif ev.velocity < 0.0:
                flags |= EventFlag.INBOUND
            else:
                flags |= EventFlag.AT_REST

        ms = observer.milestones
        if ms.turnaround is not None and t >= ms.turnaround:
            flags |= EventFlag.TURNED_AROUND
        if ms.handoff is not None and t >= ms.handoff:
            flags |= EventFlag.HANDED_OFF
        if ms.completion is not None and t >= ms.completion:
            flags |= EventFlag.ARRIVED

        x, y, z = observer.position_vector(ev.position)
        return ObserverState(
            role=observer.role,
            position=(float(x), float(y), float(z)),
            track_position=ev.position,
            distance_from_origin=abs(ev.position),
            proper_time=ev.proper_time,
            leg_index=ev.leg_index,
            velocity=ev.velocity,
            gamma=gamma(ev.velocity),
            flags=flags,
        )
