"""Steppable wrapper around DynamicCircuit and the per-frame set of sub-step states."""

from __future__ import annotations
import math
from typing import NamedTuple, Callable, Hashable

from ..options import AnalysisOptions
from .circuit import DynamicCircuit, DynamicSolution, solve_propagate, update_circuit
from .subdivisions import Steppable, StepRecord, TimestepSubdivisions


class DynamicState(NamedTuple):
    """A dynamic circuit plus the solution that produced it (None before the first step)."""
    circuit: DynamicCircuit
    solution: DynamicSolution | None
    options: AnalysisOptions

    def update(self, dt: float) -> DynamicState:
        result = solve_propagate(self.circuit, dt, self.options)
        return DynamicState(update_circuit(self.circuit, result), result, self.options)

    def characteristic_array(self) -> tuple[float, ...]:
        """Currents of all capacitors then inductors; compared to judge step error."""
        return tuple(c.state.current for c in self.circuit.capacitors) + tuple(
            ind.state.current for ind in self.circuit.inductors
        )


def state_distance(a: DynamicState, b: DynamicState) -> float:
    return math.dist(a.characteristic_array(), b.characteristic_array())


DYNAMIC_STEPPABLE = Steppable(
    update=lambda state, dt: state.update(dt),
    distance=state_distance,
)


class DynamicStateSet(NamedTuple):
    """All accepted sub-steps of one frame."""
    records: tuple[StepRecord, ...]

    @property
    def total_time(self) -> float:
        return sum(record.dt for record in self.records)

    @property
    def final_state(self) -> DynamicState:
        return self.records[-1].state

    @property
    def final_solution(self) -> DynamicSolution:
        return self.final_state.solution

    def time_average(self, value: Callable[[DynamicSolution], float]) -> float:
        """dt-weighted mean of value(solution) over the frame's sub-steps."""
        total = self.total_time
        weighted = sum(record.dt * value(record.state.solution) for record in self.records)
        return weighted / total

    def time_average_resistor_current(self, index: int) -> float:
        return self.time_average(lambda solution: solution.resistor_current(index))

    def time_average_element_current(self, element_id: Hashable) -> float:
        return self.time_average(lambda solution: solution.element_current(element_id))

    def instantaneous_resistor_current(self, index: int) -> float:
        return self.final_solution.resistor_current(index)

    def instantaneous_element_current(self, element_id: Hashable) -> float:
        return self.final_solution.element_current(element_id)


def solve_with_subdivisions(
    circuit: DynamicCircuit,
    dt: float,
    options: AnalysisOptions | None = None,
) -> DynamicStateSet:
    """Advance circuit by dt with adaptive sub-steps."""
    options = options or AnalysisOptions()
    subdivisions = TimestepSubdivisions(options)
    records = subdivisions.step_in_time_with_history(
        DynamicState(circuit, None, options), DYNAMIC_STEPPABLE, dt
    )
    return DynamicStateSet(tuple(records))
