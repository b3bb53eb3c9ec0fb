"""
Engine: per-tick evaluation and the scenario instance interface.

- KinematicsEngine: evaluates every worldline at a clamped lab time
- Snapshot / ObserverState / EventFlag: what the presentation layer reads
- ScenarioInstance: reset / advance / snapshot / set_parameter / dispose
"""

from twinsim.engine.kinematics import EventFlag, ObserverState, Snapshot, KinematicsEngine
from twinsim.engine.instance import ScenarioInstance, create_scenario

__all__ = [
    "EventFlag",
    "ObserverState",
    "Snapshot",
    "KinematicsEngine",
    "ScenarioInstance",
    "create_scenario",
]
