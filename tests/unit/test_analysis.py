"""Unit tests for the analysis layer."""

import numpy as np
import pytest

from twinsim.analysis import (
    compare_engine_vs_integral,
    integrate_proper_time,
    max_discrepancy,
    sample_worldlines,
)
from twinsim.core.frame import gamma
from twinsim.scenarios import ObserverRole, ScenarioParameters, derive, get_topology


class TestIntegrateProperTime:
    """Tests for numerical proper-time integration."""

    def test_single_leg(self, relay_derivation):
        wl = relay_derivation.observers[ObserverRole.L].worldline
        value, err = integrate_proper_time(wl, 0.0, 20.0)
        assert value == pytest.approx(20.0 / gamma(0.5), rel=1e-10)
        assert err < 1e-8

    def test_nothing_before_start_or_after_retirement(self, relay_derivation):
        wl = relay_derivation.observers[ObserverRole.R].worldline
        value, _ = integrate_proper_time(wl, 0.0, 60.0)
        assert value == pytest.approx(20.0 / gamma(0.5), rel=1e-10)

    def test_empty_interval(self, relay_derivation):
        wl = relay_derivation.observers[ObserverRole.S].worldline
        assert integrate_proper_time(wl, 3.0, 3.0) == (0.0, 0.0)

    def test_reversed_interval(self, relay_derivation):
        wl = relay_derivation.observers[ObserverRole.S].worldline
        with pytest.raises(ValueError):
            integrate_proper_time(wl, 5.0, 1.0)


class TestComparison:
    """Closed-form checkpoints agree with the integral."""

    @pytest.mark.parametrize(
        "name", ["relay", "relay_flying_start", "symmetric", "distance_scaled", "velocity_scaled"]
    )
    def test_every_topology_agrees(self, name):
        topology = get_topology(name)
        deriv = derive(topology, topology.defaults)
        assert max_discrepancy(deriv, n_samples=25) < 1e-8

    def test_results_per_observer(self, symmetric_derivation):
        results = compare_engine_vs_integral(symmetric_derivation, 10.0)
        assert {r.role for r in results} == set(ObserverRole)
        for r in results:
            assert r.discrepancy < 1e-8


class TestSampling:
    """Tests for worldline sampling."""

    def test_sample_worldlines(self, symmetric_derivation):
        samples = sample_worldlines(symmetric_derivation, n_samples=51)
        assert samples["lab_time"][0] == 0.0
        assert samples["lab_time"][-1] == pytest.approx(12.5)
        for role in ObserverRole:
            assert samples[role]["position"].shape == (51,)
            assert np.isclose(samples[role]["proper_time"][-1], 7.5)

    def test_flying_start_samples_from_negative_time(self):
        deriv = derive(get_topology("relay_flying_start"), ScenarioParameters(v=0.5, distance=10.0, start_distance=5.0))
        samples = sample_worldlines(deriv, n_samples=11)
        assert samples["lab_time"][0] == pytest.approx(-10.0)
        assert samples[ObserverRole.L]["proper_time"][0] == 0.0
