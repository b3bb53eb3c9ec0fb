"""
Pytest configuration and shared fixtures.
"""

import matplotlib

matplotlib.use("Agg")

import pytest
import numpy as np


@pytest.fixture
def relay_params():
    """Relay parameters from the reference walkthrough: v=0.5, D=10."""
    from twinsim.scenarios import ScenarioParameters
    return ScenarioParameters(v=0.5, distance=10.0, speed=2.0)


@pytest.fixture
def relay_derivation(relay_params):
    """Derived relay scenario (handoff at 20, return at 40)."""
    from twinsim.scenarios import derive, relay_topology
    return derive(relay_topology(), relay_params)


@pytest.fixture
def symmetric_derivation():
    """Derived symmetric triplet with v=0.8, D=5 (one-way trip 6.25)."""
    from twinsim.scenarios import ScenarioParameters, derive, symmetric_triplet
    return derive(symmetric_triplet(), ScenarioParameters(v=0.8, distance=5.0))


@pytest.fixture
def rng():
    """Reproducible random number generator."""
    return np.random.default_rng(seed=42)
