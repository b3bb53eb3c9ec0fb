"""Unit tests for SimulationClock."""

import math

import pytest

from twinsim.core.clock import SimulationClock


class TestSimulationClock:
    """Tests for lab-time advancement."""

    def test_default_start(self):
        clock = SimulationClock()
        assert clock.lab_time == 0.0
        assert clock.paused is False

    def test_negative_start(self):
        clock = SimulationClock(start_lab_time=-10.0)
        assert clock.lab_time == -10.0

    def test_advance_scales_by_speed(self):
        clock = SimulationClock()
        clock.advance(0.5, speed_multiplier=2.0)
        clock.advance(0.25, speed_multiplier=2.0)
        assert clock.lab_time == pytest.approx(1.5)
        assert clock.n_advances == 2

    def test_paused_is_noop(self):
        clock = SimulationClock(paused=True)
        clock.advance(1.0, speed_multiplier=3.0)
        assert clock.lab_time == 0.0
        assert clock.n_advances == 0

    def test_reset_to_new_start(self):
        clock = SimulationClock()
        clock.advance(4.0)
        clock.reset(-2.5)
        assert clock.lab_time == -2.5
        assert clock.elapsed == 0.0

    def test_reset_keeps_start(self):
        clock = SimulationClock(start_lab_time=-1.0)
        clock.advance(3.0)
        clock.reset()
        assert clock.lab_time == -1.0

    def test_reached(self):
        clock = SimulationClock()
        clock.advance(10.0)
        assert clock.reached(10.0)
        assert not clock.reached(10.5)

    @pytest.mark.parametrize("dt", [-0.1, math.nan, math.inf])
    def test_rejects_bad_step(self, dt):
        clock = SimulationClock()
        with pytest.raises(ValueError):
            clock.advance(dt)
        assert clock.lab_time == 0.0
