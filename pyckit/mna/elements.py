"""Linear circuit elements consumed by the MNA solver (immutable records)."""

from __future__ import annotations
from typing import NamedTuple, Hashable


class Resistor(NamedTuple):
    """Resistor between two nodes. Zero resistance is an ideal wire."""
    node0: Hashable
    node1: Hashable
    resistance: float  # Ohms, >= 0


class Battery(NamedTuple):
    """Ideal voltage source enforcing V(node0) - V(node1) = voltage."""
    node0: Hashable
    node1: Hashable
    voltage: float


class CurrentSource(NamedTuple):
    """Ideal current source driving `current` from node0 to node1 through itself."""
    node0: Hashable
    node1: Hashable
    current: float
