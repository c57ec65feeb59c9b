"""Dynamic circuit: one companion-model solve per call, producing a new immutable circuit."""

from __future__ import annotations
from typing import NamedTuple, Hashable, Iterable

from ..mna import Resistor, CurrentSource, Solution, solve
from ..options import AnalysisOptions
from .elements import ElementState, ResistiveBattery, DynamicCapacitor, DynamicInductor
from .companion import Companion, CompanionNetlist


class DynamicSolution(NamedTuple):
    """Solution of one companion-model step, with read-back for replaced elements."""
    circuit: DynamicCircuit
    dt: float
    solution: Solution
    companions: dict[Hashable, Companion]  # element id -> companion
    options: AnalysisOptions

    def voltage(self, node: Hashable) -> float:
        return self.solution.voltage(node)

    def resistor_current(self, index: int) -> float:
        """Current through the circuit's own resistor `index` (node0 -> node1)."""
        return self.solution.resistor_current(index)

    def element_state(self, element_id: Hashable) -> ElementState:
        """Voltage V(node1) - V(node0) and current of a battery, capacitor or inductor."""
        companion = self.companions[element_id]
        voltage = self.solution.voltage(companion.node1) - self.solution.voltage(companion.node0)
        current = self.solution.resistor_current(companion.resistor_index)
        return ElementState(voltage, current)

    def element_current(self, element_id: Hashable) -> float:
        return self.element_state(element_id).current


class DynamicCircuit(NamedTuple):
    """
    Snapshot of a circuit with energy-storing elements.

    Element ids must be unique across batteries, capacitors and inductors.
    """
    resistors: tuple[Resistor, ...] = ()
    batteries: tuple[ResistiveBattery, ...] = ()
    capacitors: tuple[DynamicCapacitor, ...] = ()
    inductors: tuple[DynamicInductor, ...] = ()
    current_sources: tuple[CurrentSource, ...] = ()
    preferred_references: tuple[Hashable, ...] = ()

    def solve_propagate(self, dt: float, options: AnalysisOptions | None = None) -> DynamicSolution:
        return solve_propagate(self, dt, options)

    def update(self, dt: float, options: AnalysisOptions | None = None) -> DynamicCircuit:
        """Advance all capacitors and inductors by dt."""
        return update_circuit(self, solve_propagate(self, dt, options))

    def element_ids(self) -> Iterable[Hashable]:
        for element in self.batteries + self.capacitors + self.inductors:
            yield element.id


def solve_propagate(
    circuit: DynamicCircuit,
    dt: float,
    options: AnalysisOptions | None = None,
) -> DynamicSolution:
    """
    Replace batteries, capacitors and inductors with companion chains and solve once.

    Args:
        circuit: Circuit holding each element's state from the previous step
        dt: Step size in seconds (> 0)
        options: Supplies the capacitor conditioning resistance and state clamp

    Returns:
        DynamicSolution; pass it to update_circuit for the advanced circuit
    """
    assert dt > 0, f"dt must be positive, got {dt}"
    options = options or AnalysisOptions()

    ids = list(circuit.element_ids())
    assert len(ids) == len(set(ids)), f"duplicate element ids: {ids}"

    netlist = CompanionNetlist(circuit.resistors)
    companions = {}
    for battery in circuit.batteries:
        companions[battery.id] = netlist.add_resistive_battery(battery)
    for capacitor in circuit.capacitors:
        companions[capacitor.id] = netlist.add_capacitor(
            capacitor, dt, options.capacitor_resistance
        )
    for inductor in circuit.inductors:
        companions[inductor.id] = netlist.add_inductor(inductor, dt)

    solution = solve(
        netlist.resistors,
        netlist.batteries,
        circuit.current_sources,
        preferred_references=circuit.preferred_references,
    )
    return DynamicSolution(circuit, dt, solution, companions, options)


def update_circuit(circuit: DynamicCircuit, result: DynamicSolution) -> DynamicCircuit:
    """New circuit whose capacitors and inductors carry the states solved in `result`."""
    limit = result.options.max_magnitude
    capacitors = tuple(
        c._replace(state=result.element_state(c.id).clamped(limit))
        for c in circuit.capacitors
    )
    inductors = tuple(
        ind._replace(state=result.element_state(ind.id).clamped(limit))
        for ind in circuit.inductors
    )
    return circuit._replace(capacitors=capacitors, inductors=inductors)
