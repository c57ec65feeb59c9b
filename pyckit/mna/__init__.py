"""Modified Nodal Analysis: linear DC solve of resistors, batteries and current sources."""

from .elements import Resistor, Battery, CurrentSource
from .solver import Solution, solve

__all__ = [
    "Resistor",
    "Battery",
    "CurrentSource",
    "Solution",
    "solve",
]
