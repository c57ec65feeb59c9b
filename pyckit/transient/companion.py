"""
Trapezoidal companion models.

Each energy-storing element is replaced, for one step of size dt, by an ideal
battery in series with a resistor. The element current is read back through
that resistor, so the same MNA solve handles static and dynamic parts.

Sign convention (shared with ElementState):
    v = V(node1) - V(node0)
    i > 0 flows through the element from node0 to node1

Capacitor: i = -C dv/dt. Trapezoidal rule gives
    v_new = (v_prev - Req * i_prev) - Req * i_new,  Req = dt / (2C)

Inductor: -v = L di/dt. Trapezoidal rule gives
    v_new = (Req * i_prev - v_prev) - Req * i_new,  Req = 2L / dt

Both are a battery Veq from node0 to a synthetic node followed by Req.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import NamedTuple, Hashable

from ..mna import Resistor, Battery
from .elements import ResistiveBattery, DynamicCapacitor, DynamicInductor


@dataclass(frozen=True)
class SyntheticNode:
    """
    Node created for a companion chain.

    Equality includes the type, so it never matches a user node id, not even
    a tuple such as (0,).
    """
    index: int


class Companion(NamedTuple):
    """Where to read a replaced element back from the solution."""
    resistor_index: int  # current through this resistor is the element current
    node0: Hashable      # element voltage is V(node1) - V(node0)
    node1: Hashable


class CompanionNetlist:
    """
    Accumulates resistors and batteries for one solve.

    Real resistors are added first, so their indices in the solver input are
    unchanged by the synthetic elements appended after them.
    """

    def __init__(self, resistors=()):
        self.resistors: list[Resistor] = list(resistors)
        self.batteries: list[Battery] = []
        self._next_node = 0

    def new_node(self) -> SyntheticNode:
        node = SyntheticNode(self._next_node)
        self._next_node += 1
        return node

    def add_resistor(self, node0, node1, resistance: float) -> int:
        self.resistors.append(Resistor(node0, node1, resistance))
        return len(self.resistors) - 1

    def add_resistive_battery(self, battery: ResistiveBattery) -> Companion:
        """Ideal battery node0 -> s, then internal resistance s -> node1."""
        s = self.new_node()
        self.batteries.append(Battery(battery.node0, s, battery.voltage))
        k = self.add_resistor(s, battery.node1, battery.resistance)
        return Companion(k, battery.node0, battery.node1)

    def add_capacitor(
        self,
        capacitor: DynamicCapacitor,
        dt: float,
        conditioning_resistance: float,
    ) -> Companion:
        """
        Capacitor companion: battery node0 -> s1, Req s1 -> s2, then a small
        conditioning resistor s2 -> node1 that is excluded from the read-back voltage.
        """
        assert dt > 0, f"dt must be positive, got {dt}"
        assert capacitor.capacitance > 0, f"capacitance must be positive: {capacitor}"
        req = dt / (2.0 * capacitor.capacitance)
        veq = capacitor.state.voltage - req * capacitor.state.current

        s1 = self.new_node()
        s2 = self.new_node()
        self.batteries.append(Battery(s1, capacitor.node0, veq))
        k = self.add_resistor(s1, s2, req)
        self.add_resistor(s2, capacitor.node1, conditioning_resistance)
        return Companion(k, capacitor.node0, s2)

    def add_inductor(self, inductor: DynamicInductor, dt: float) -> Companion:
        """Inductor companion: battery node0 -> s, then Req s -> node1."""
        assert dt > 0, f"dt must be positive, got {dt}"
        assert inductor.inductance > 0, f"inductance must be positive: {inductor}"
        req = 2.0 * inductor.inductance / dt
        veq = req * inductor.state.current - inductor.state.voltage

        s = self.new_node()
        self.batteries.append(Battery(s, inductor.node0, veq))
        k = self.add_resistor(s, inductor.node1, req)
        return Companion(k, inductor.node0, inductor.node1)
