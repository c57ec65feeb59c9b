"""Dynamic circuit elements (immutable; a new instance is produced every step)."""

from __future__ import annotations
import math
from typing import NamedTuple, Hashable


class ElementState(NamedTuple):
    """
    Voltage/current snapshot of an energy-storing element.

    voltage is V(node1) - V(node0); current is positive flowing through the
    element from node0 to node1.
    """
    voltage: float = 0.0
    current: float = 0.0

    def clamped(self, limit: float) -> ElementState:
        """Clip both values to [-limit, limit]; non-finite values become 0."""
        def clip(x):
            if not math.isfinite(x):
                return 0.0
            return max(-limit, min(limit, x))
        return ElementState(clip(self.voltage), clip(self.current))


class ResistiveBattery(NamedTuple):
    """Ideal battery V(node0) - V(internal) = voltage, in series with its internal resistance."""
    id: Hashable
    node0: Hashable
    node1: Hashable
    voltage: float
    resistance: float = 0.0


class DynamicCapacitor(NamedTuple):
    id: Hashable
    node0: Hashable
    node1: Hashable
    capacitance: float  # Farads
    state: ElementState = ElementState()


class DynamicInductor(NamedTuple):
    id: Hashable
    node0: Hashable
    node1: Hashable
    inductance: float  # Henries
    state: ElementState = ElementState()
