"""Unit tests for Leg and Worldline."""

import json
import subprocess
import sys

import numpy as np
import pytest

from twinsim.core.errors import InvariantViolation
from twinsim.core.frame import gamma
from twinsim.core.worldline import MAX_SAFE_SPEED, Leg, Worldline


def round_trip(distance=5.0, v=0.8):
    """Outbound, inbound and at-rest legs for a single observer."""
    t_turn = distance / v
    return Worldline([
        Leg(start_lab_time=0.0, start_position=0.0, velocity=v, end_lab_time=t_turn),
        Leg(start_lab_time=t_turn, start_position=distance, velocity=-v, end_lab_time=2 * t_turn),
        Leg(start_lab_time=2 * t_turn, start_position=0.0, velocity=0.0, at_rest=True),
    ])


class TestLeg:
    """Tests for a single leg."""

    def test_duration_and_end_position(self):
        leg = Leg(start_lab_time=2.0, start_position=1.0, velocity=0.5, end_lab_time=6.0)
        assert leg.duration == 4.0
        assert leg.end_position == 3.0

    def test_unbounded(self):
        leg = Leg(start_lab_time=0.0, start_position=0.0, velocity=0.0, at_rest=True)
        assert leg.duration is None
        assert leg.end_position is None
        assert leg.contains(1e9)

    def test_contains_is_half_open(self):
        leg = Leg(start_lab_time=0.0, start_position=0.0, velocity=0.5, end_lab_time=4.0)
        assert leg.contains(0.0)
        assert leg.contains(3.999)
        assert not leg.contains(4.0)
        assert not leg.contains(-0.1)


class TestCheckpoints:
    """Tests for proper-time checkpoints."""

    def test_checkpoints_accumulate(self):
        wl = round_trip(distance=5.0, v=0.8)
        assert wl.checkpoints[0] == 0.0
        assert np.isclose(wl.checkpoints[1], 3.75)
        assert np.isclose(wl.checkpoints[2], 7.5)
        # Final leg is unbounded: no trailing checkpoint
        assert len(wl.checkpoints) == 3

    def test_bounded_final_leg_has_total(self):
        wl = Worldline([Leg(start_lab_time=0.0, start_position=0.0, velocity=0.6, end_lab_time=10.0)])
        assert wl.total_proper_time == pytest.approx(8.0)
        assert wl.end_lab_time == 10.0

    def test_unbounded_has_no_total(self):
        assert round_trip().total_proper_time is None

    def test_transition_times(self):
        wl = round_trip(distance=5.0, v=0.8)
        assert wl.transition_times == [6.25, 12.5]


class TestEvaluate:
    """Tests for evaluation at a lab time."""

    def test_outbound(self):
        wl = round_trip(distance=5.0, v=0.8)
        ev = wl.evaluate(3.0)
        assert ev.leg_index == 0
        assert np.isclose(ev.position, 2.4)
        assert np.isclose(ev.proper_time, 3.0 / gamma(0.8))
        assert ev.present and not ev.retired

    def test_at_turnaround(self):
        wl = round_trip(distance=5.0, v=0.8)
        ev = wl.evaluate(6.25)
        assert ev.leg_index == 1
        assert np.isclose(ev.position, 5.0)
        assert np.isclose(ev.proper_time, 3.75)

    def test_return_closed_form(self):
        wl = round_trip(distance=5.0, v=0.8)
        ev = wl.evaluate(12.5)
        assert ev.leg_index == 2
        assert ev.position == 0.0
        assert np.isclose(ev.proper_time, (2 * 5.0 / 0.8) / gamma(0.8))

    def test_at_rest_ages_one_to_one(self):
        wl = round_trip(distance=5.0, v=0.8)
        ev = wl.evaluate(20.0)
        assert ev.position == 0.0
        assert ev.velocity == 0.0
        assert np.isclose(ev.proper_time, 7.5 + 7.5)

    def test_dilation_law_within_leg(self):
        wl = round_trip(distance=5.0, v=0.8)
        t1, t2 = 1.0, 5.5
        d_tau = wl.evaluate(t2).proper_time - wl.evaluate(t1).proper_time
        assert np.isclose(d_tau, (t2 - t1) / gamma(0.8))

    def test_not_yet_present(self):
        wl = Worldline([Leg(start_lab_time=0.0, start_position=0.0, velocity=0.5, end_lab_time=20.0)])
        ev = wl.evaluate(-4.0)
        assert ev.leg_index == -1
        assert not ev.present
        assert ev.proper_time == 0.0
        # Position extrapolated along the first leg
        assert np.isclose(ev.position, -2.0)

    def test_retired_holds_state(self):
        wl = Worldline([Leg(start_lab_time=0.0, start_position=0.0, velocity=0.5, end_lab_time=20.0)])
        at_end = wl.evaluate(20.0)
        later = wl.evaluate(35.0)
        assert later.retired
        assert later.position == at_end.position == 10.0
        assert later.proper_time == at_end.proper_time
        assert np.isclose(later.proper_time, 20.0 / gamma(0.5))

    def test_continuous_across_boundaries(self):
        wl = round_trip(distance=5.0, v=0.8)
        for boundary in wl.transition_times:
            before = wl.evaluate(boundary - 1e-9)
            after = wl.evaluate(boundary)
            assert np.isclose(before.position, after.position, atol=1e-6)
            assert np.isclose(before.proper_time, after.proper_time, atol=1e-6)

    def test_independent_of_step_size(self, rng):
        wl = round_trip(distance=5.0, v=0.8)
        # Reach the return instant through irregular increments
        steps = rng.uniform(0.001, 0.5, size=200)
        times = np.minimum(np.cumsum(steps), 12.5)
        readings = [wl.evaluate(t).proper_time for t in times]
        assert np.all(np.diff(readings) >= 0.0)
        assert np.isclose(wl.evaluate(12.5).proper_time, 7.5)


class TestProperTimeRate:
    """Tests for dτ/dt."""

    def test_rates(self):
        wl = Worldline([Leg(start_lab_time=0.0, start_position=0.0, velocity=0.6, end_lab_time=10.0)])
        assert wl.proper_time_rate(-1.0) == 0.0
        assert np.isclose(wl.proper_time_rate(5.0), 0.8)
        assert wl.proper_time_rate(10.0) == 0.0


class TestSample:
    """Tests for vectorised sampling."""

    def test_sample_shapes(self):
        wl = round_trip()
        positions, proper_times = wl.sample(np.linspace(0.0, 12.5, 11))
        assert positions.shape == (11,)
        assert proper_times.shape == (11,)
        assert np.isclose(positions[-1], 0.0)


class TestInvariants:
    """Tests for structural invariant checks."""

    def test_gap_between_legs(self):
        with pytest.raises(InvariantViolation):
            Worldline([
                Leg(start_lab_time=0.0, start_position=0.0, velocity=0.5, end_lab_time=5.0),
                Leg(start_lab_time=6.0, start_position=2.5, velocity=-0.5, end_lab_time=11.0),
            ])

    def test_leg_ends_before_start(self):
        with pytest.raises(InvariantViolation):
            Worldline([Leg(start_lab_time=5.0, start_position=0.0, velocity=0.5, end_lab_time=1.0)])

    def test_superluminal_leg(self):
        with pytest.raises(InvariantViolation):
            Worldline([Leg(start_lab_time=0.0, start_position=0.0, velocity=1.2, end_lab_time=1.0)])

    def test_unbounded_leg_not_last(self):
        with pytest.raises(InvariantViolation):
            Worldline([
                Leg(start_lab_time=0.0, start_position=0.0, velocity=0.5),
                Leg(start_lab_time=5.0, start_position=2.5, velocity=0.0, at_rest=True),
            ])

    def test_moving_at_rest_leg(self):
        with pytest.raises(InvariantViolation):
            Worldline([Leg(start_lab_time=0.0, start_position=0.0, velocity=0.3, at_rest=True)])

    def test_empty(self):
        with pytest.raises(InvariantViolation):
            Worldline([])

    def test_violation_is_logged(self, caplog):
        with pytest.raises(InvariantViolation):
            Worldline([])
        assert "invariant violated" in caplog.text


OPTIMISED_SCRIPT = """
import json
import logging
import sys

logging.basicConfig(level=logging.ERROR, stream=sys.stderr)

from twinsim.core.worldline import MAX_SAFE_SPEED, Leg, Worldline

gapped = Worldline([
    Leg(start_lab_time=0.0, start_position=0.0, velocity=0.5, end_lab_time=5.0),
    Leg(start_lab_time=6.0, start_position=2.5, velocity=-0.5, end_lab_time=11.0),
])
fast = Worldline([Leg(start_lab_time=0.0, start_position=0.0, velocity=1.2, end_lab_time=1.0)])

print(json.dumps({
    "debug": __debug__,
    "gapped_ends": [leg.end_lab_time for leg in gapped.legs],
    "gapped_starts": [leg.start_lab_time for leg in gapped.legs],
    "gapped_start_positions": [leg.start_position for leg in gapped.legs],
    "before_boundary": gapped.evaluate(5.999).position,
    "at_boundary": gapped.evaluate(6.0).position,
    "fast_velocity": fast.legs[0].velocity,
    "fast_total": fast.total_proper_time,
}))
"""


class TestInvariantsOptimised:
    """Clamp-and-continue behaviour when assertions are disabled (python -O)."""

    @pytest.fixture(scope="class")
    def result(self):
        return subprocess.run(
            [sys.executable, "-O", "-c", OPTIMISED_SCRIPT],
            capture_output=True,
            text=True,
            timeout=60,
        )

    @pytest.fixture(scope="class")
    def report(self, result):
        assert result.returncode == 0, result.stderr
        return json.loads(result.stdout)

    def test_runs_without_raising(self, result, report):
        assert result.returncode == 0
        assert report["debug"] is False

    def test_violations_logged(self, result):
        assert result.stderr.count("invariant violated") == 2

    def test_gap_closed_by_later_leg(self, report):
        assert report["gapped_ends"] == [6.0, 11.0]
        assert report["gapped_starts"] == [0.0, 6.0]

    def test_repaired_leg_starts_where_previous_ends(self, report):
        assert report["gapped_start_positions"] == [0.0, pytest.approx(3.0)]
        assert report["at_boundary"] == pytest.approx(3.0)
        assert abs(report["at_boundary"] - report["before_boundary"]) < 1e-3

    def test_superluminal_clamped(self, report):
        assert report["fast_velocity"] == MAX_SAFE_SPEED
        assert report["fast_total"] == pytest.approx(1.0 / gamma(MAX_SAFE_SPEED))
