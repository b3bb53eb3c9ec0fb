"""
twinsim: Special-Relativistic Twin Paradox Kinematics Engine

A simulator of observers moving on piecewise constant-velocity worldlines,
reading their proper time as a function of a single global lab time.

Core concepts:
- A worldline is an ordered sequence of constant-velocity legs
- Proper time accumulates as dτ = dt / γ(v) on each leg
- Observers at rest age 1:1 with lab time
- Relay clocks hand their frozen reading to a returning partner
- The engine reads every worldline at a clamped lab time each tick

Presentation (3D scenes, labels, widgets) lives outside the engine and only
consumes snapshots.
"""

__version__ = "0.1.0"
