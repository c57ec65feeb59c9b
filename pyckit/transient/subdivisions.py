"""
Adaptive timestep control by step halving.

A step of size dt is accepted when one full step and two half steps land on
states closer than `error_threshold`. Otherwise dt is halved, down to
`min_dt`, and the first half step already computed becomes the full-step
estimate of the next attempt. After every accepted step the next attempt
doubles, clipped to what remains of the frame.
"""

from __future__ import annotations
from typing import NamedTuple, Callable, Any

from ..logging import logger
from ..options import AnalysisOptions


class Steppable(NamedTuple):
    """How to advance a state and measure the distance between two states."""
    update: Callable[[Any, float], Any]
    distance: Callable[[Any, Any], float]


class StepRecord(NamedTuple):
    """An accepted sub-step: its size and the state it produced."""
    dt: float
    state: Any


class TimestepSubdivisions:
    """Advances a steppable state across one frame with bounded local error."""

    def __init__(self, options: AnalysisOptions | None = None):
        self.options = options or AnalysisOptions()

    def search(self, state, steppable: Steppable, dt: float, full_step=None) -> tuple[float, Any]:
        """
        Find an acceptable step no larger than dt.

        Args:
            state: State to advance
            steppable: Update and distance functions
            dt: Largest step to try
            full_step: update(state, dt) if already known

        Returns:
            (accepted_dt, new_state)
        """
        opts = self.options

        if dt == opts.paused_dt:
            return dt, steppable.update(state, dt)

        while True:
            if dt <= opts.min_dt:
                if full_step is None:
                    full_step = steppable.update(state, dt)
                return dt, full_step

            a = full_step if full_step is not None else steppable.update(state, dt)
            half = dt / 2
            b1 = steppable.update(state, half)
            b2 = steppable.update(b1, half)

            if steppable.distance(a, b2) < opts.error_threshold:
                return dt, b2

            next_dt = max(half, opts.min_dt)
            # b1 is exactly update(state, next_dt) only when the floor did not kick in
            full_step = b1 if next_dt == half else None
            dt = next_dt

    def step_in_time_with_history(self, initial_state, steppable: Steppable, total_time: float) -> list[StepRecord]:
        """
        Advance initial_state by exactly total_time.

        Returns every accepted sub-step in order; their dts sum to total_time.
        """
        assert total_time > 0, f"total_time must be positive, got {total_time}"
        opts = self.options

        records = []
        state = initial_state
        elapsed = 0.0
        attempted = total_time if opts.adaptive else opts.min_dt

        while elapsed < total_time:
            remaining = total_time - elapsed
            dt = min(attempted, remaining)

            if opts.adaptive:
                dt, state = self.search(state, steppable, dt)
            else:
                state = steppable.update(state, dt)
            records.append(StepRecord(dt, state))

            # Snap to the end when only round-off is left
            if remaining - dt <= 1e-12 * total_time:
                elapsed = total_time
            else:
                elapsed += dt

            attempted = 2 * dt if opts.adaptive else opts.min_dt

        logger.debug(f"states per frame: {len(records)} (dt={total_time:g})")
        return records
