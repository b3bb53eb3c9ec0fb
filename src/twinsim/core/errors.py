"""
Error taxonomy for the kinematics engine.

- DomainError: a velocity or distance outside the physical domain
  (|v| >= 1, non-positive distance, non-finite input). Raised at the
  boundary where parameters are set or topologies are derived.
- InvariantViolation: a worldline built with broken structure. This is a
  bug in topology derivation, never a user error.
"""


class DomainError(ValueError):
    """A velocity or distance outside the physically valid domain."""


class InvariantViolation(AssertionError):
    """Internal worldline structure is inconsistent."""
