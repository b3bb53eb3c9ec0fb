"""
SimulationClock: the global lab-time accumulator.

Lab time only moves forward. It advances by wall-clock seconds scaled by a
playback multiplier and can be paused. It starts at a topology-defined
value, which is negative for flying-start scenarios.
"""

from __future__ import annotations
import logging
import math
from dataclasses import dataclass, field

logger = logging.getLogger(__name__)


@dataclass
class SimulationClock:
    """Monotonic lab time with pause state."""

    start_lab_time: float = 0.0
    paused: bool = False

    lab_time: float = field(default=0.0, init=False)
    n_advances: int = field(default=0, init=False)

    def __post_init__(self):
        self.lab_time = float(self.start_lab_time)

    def advance(self, wall_dt: float, speed_multiplier: float = 1.0) -> float:
        """
        Advance lab time by wall_dt * speed_multiplier unless paused.

        Args:
            wall_dt: Elapsed wall-clock seconds since the previous frame
            speed_multiplier: Playback rate (lab seconds per wall second)

        Returns:
            The lab time after advancing

        Raises:
            ValueError: on a negative or non-finite step
        """
        if not math.isfinite(wall_dt) or wall_dt < 0.0:
            raise ValueError(f"wall_dt must be a non-negative real, got {wall_dt}")
        if not math.isfinite(speed_multiplier) or speed_multiplier < 0.0:
            raise ValueError(f"speed_multiplier must be a non-negative real, got {speed_multiplier}")

        if not self.paused:
            self.lab_time += wall_dt * speed_multiplier
            self.n_advances += 1
        return self.lab_time

    def reset(self, start_lab_time: float | None = None) -> None:
        """Rewind to the start lab time (optionally a new one)."""
        if start_lab_time is not None:
            self.start_lab_time = float(start_lab_time)
        self.lab_time = self.start_lab_time
        self.n_advances = 0
        logger.debug("Clock reset to lab time %.4f", self.lab_time)

    def reached(self, completion_instant: float) -> bool:
        """True once lab time is at or past the completion instant."""
        return self.lab_time >= completion_instant

    @property
    def elapsed(self) -> float:
        """Lab time elapsed since the last reset."""
        return self.lab_time - self.start_lab_time
