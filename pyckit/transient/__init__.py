"""Transient analysis: trapezoidal companion models and adaptive sub-stepping.

Components:
    - ResistiveBattery, DynamicCapacitor, DynamicInductor: dynamic elements
    - DynamicCircuit: one companion-model solve per step
    - TimestepSubdivisions: step-halving error control across a frame
"""

from .elements import ElementState, ResistiveBattery, DynamicCapacitor, DynamicInductor
from .companion import SyntheticNode, Companion, CompanionNetlist
from .circuit import DynamicCircuit, DynamicSolution, solve_propagate, update_circuit
from .subdivisions import Steppable, StepRecord, TimestepSubdivisions
from .state import (
    DynamicState,
    DynamicStateSet,
    DYNAMIC_STEPPABLE,
    state_distance,
    solve_with_subdivisions,
)

__all__ = [
    # Elements
    "ElementState",
    "ResistiveBattery",
    "DynamicCapacitor",
    "DynamicInductor",
    # Companion models
    "SyntheticNode",
    "Companion",
    "CompanionNetlist",
    # Circuit
    "DynamicCircuit",
    "DynamicSolution",
    "solve_propagate",
    "update_circuit",
    # Step control
    "Steppable",
    "StepRecord",
    "TimestepSubdivisions",
    "DynamicState",
    "DynamicStateSet",
    "DYNAMIC_STEPPABLE",
    "state_distance",
    "solve_with_subdivisions",
]
