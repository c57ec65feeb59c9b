"""Circuit networks and per-frame analysis.

Components:
    - Battery: ideal voltage source with optional internal resistance
    - R, Wire, Ammeter: resistor-like components
    - Switch: controllable switch (state via controls dict)
    - C, L: capacitor and inductor (trapezoidal companion models)
"""

from .network import Network, Vertex, ComponentKind, ComponentRef, ComponentSpec
from .components import Battery, R, Wire, Switch, Ammeter, C, L
from .analysis import CircuitState, CircuitFns, compile_network

__all__ = [
    # Network building
    "Network",
    "Vertex",
    "ComponentKind",
    "ComponentRef",
    "ComponentSpec",
    # Components
    "Battery",
    "R",
    "Wire",
    "Switch",
    "Ammeter",
    "C",
    "L",
    # Analysis
    "CircuitState",
    "CircuitFns",
    "compile_network",
]
