"""
Modified Nodal Analysis solver for linear resistive circuits.

Unknowns are the voltage of every non-reference node followed by one branch
current per battery and one per near-zero resistor (below
BRANCH_RESISTANCE). Those resistors are stamped as branches,
V0 - V1 - R*I = 0, so their current is solved for directly instead of being
recovered from a voltage difference lost in round-off. Each connected
sub-graph gets its own reference node pinned at 0 V, so isolated parts of a
circuit never make the system singular.

Stamps are collected as (row, col, value) triples and scattered into a dense
float64 matrix in a single operation, then solved with a JIT-compiled LU
solve. A failed or inconsistent solve falls back to least squares and flags
the solution as singular instead of raising.
"""

from __future__ import annotations
import math
from typing import NamedTuple, Hashable, Iterable, Sequence

import jax
import jax.numpy as jnp
from jax import Array

from ..logging import logger
from .elements import Resistor, Battery, CurrentSource

# Resistors below this are solved with their own branch current unknown
BRANCH_RESISTANCE = 1e-3


class Solution(NamedTuple):
    """
    Result of one MNA solve.

    Currents follow one convention for every element: positive when flowing
    through the element from node0 to node1.
    """
    node_voltages: dict[Hashable, float]
    battery_currents: tuple[float, ...]
    branch_currents: dict[int, float]  # resistor index -> branch current (R < BRANCH_RESISTANCE)
    resistors: tuple[Resistor, ...]
    batteries: tuple[Battery, ...]
    current_sources: tuple[CurrentSource, ...] = ()
    singular: bool = False

    def voltage(self, node: Hashable) -> float:
        """Voltage at a node. Nodes absent from the circuit read 0.0."""
        return self.node_voltages.get(node, 0.0)

    def voltage_drop(self, element) -> float:
        """V(node0) - V(node1) for any two-terminal element."""
        return self.voltage(element.node0) - self.voltage(element.node1)

    def resistor_current(self, index: int) -> float:
        """Current through resistor `index` (near-zero resistors read their branch unknown)."""
        if index in self.branch_currents:
            return self.branch_currents[index]
        resistor = self.resistors[index]
        return self.voltage_drop(resistor) / resistor.resistance

    def resistor_currents(self) -> tuple[float, ...]:
        return tuple(self.resistor_current(k) for k in range(len(self.resistors)))

    def current_imbalance(self, node: Hashable) -> float:
        """
        Net current leaving `node` through all elements.

        Zero (to solver precision) at every node of a consistent solution.
        """
        total = 0.0
        for k, r in enumerate(self.resistors):
            if r.node0 == node:
                total += self.resistor_current(k)
            elif r.node1 == node:
                total -= self.resistor_current(k)
        for battery, current in zip(self.batteries, self.battery_currents):
            if battery.node0 == node:
                total += current
            elif battery.node1 == node:
                total -= current
        for source in self.current_sources:
            if source.node0 == node:
                total += source.current
            elif source.node1 == node:
                total -= source.current
        return total

    def approx_equals(self, other: Solution, tolerance: float = 1e-6) -> bool:
        """Compare node voltages and battery currents within an absolute tolerance."""
        nodes = set(self.node_voltages) | set(other.node_voltages)
        for node in nodes:
            if abs(self.voltage(node) - other.voltage(node)) > tolerance:
                return False
        if len(self.battery_currents) != len(other.battery_currents):
            return False
        for a, b in zip(self.battery_currents, other.battery_currents):
            if abs(a - b) > tolerance:
                return False
        return True


@jax.jit
def _lu_solve(A: Array, b: Array) -> tuple[Array, Array]:
    """Dense LU solve; also reports whether the result is finite and consistent."""
    x = jnp.linalg.solve(A, b)
    residual = jnp.max(jnp.abs(A @ x - b))
    scale = jnp.max(jnp.abs(A)) * jnp.max(jnp.abs(x)) + jnp.max(jnp.abs(b))
    ok = jnp.all(jnp.isfinite(x)) & (residual <= 1e-6 * scale + 1e-12)
    return x, ok


@jax.jit
def _lstsq_solve(A: Array, b: Array) -> tuple[Array, Array]:
    """Best-effort minimum-norm solve for singular systems."""
    x = jnp.linalg.lstsq(A, b)[0]
    return x, jnp.all(jnp.isfinite(x))


def _discover_nodes(elements: Iterable) -> list[Hashable]:
    """Distinct nodes in order of first appearance."""
    seen = {}
    for element in elements:
        seen.setdefault(element.node0, None)
        seen.setdefault(element.node1, None)
    return list(seen)


def _choose_references(
    nodes: Sequence[Hashable],
    elements: Iterable,
    preferred: Iterable[Hashable],
) -> set[Hashable]:
    """
    Pick one reference node per connected component.

    The first preferred node found in a component wins, otherwise the first
    node of that component in discovery order.
    """
    parent = {node: node for node in nodes}

    def find(node):
        while parent[node] != node:
            parent[node] = parent[parent[node]]
            node = parent[node]
        return node

    for element in elements:
        ra, rb = find(element.node0), find(element.node1)
        if ra != rb:
            parent[rb] = ra

    reference_of = {}
    for node in preferred:
        if node in parent:
            reference_of.setdefault(find(node), node)
    for node in nodes:
        reference_of.setdefault(find(node), node)
    return set(reference_of.values())


def solve(
    resistors: Sequence[Resistor],
    batteries: Sequence[Battery],
    current_sources: Sequence[CurrentSource] = (),
    *,
    preferred_references: Iterable[Hashable] = (),
) -> Solution:
    """
    Solve a linear circuit.

    Args:
        resistors: Resistor-like elements (resistance >= 0; 0 is an ideal wire)
        batteries: Ideal voltage sources, V(node0) - V(node1) = voltage
        current_sources: Ideal current sources
        preferred_references: Nodes to pin at 0 V where possible, in priority order

    Returns:
        Solution with a voltage for every node and a current for every battery.
        `singular` is set when the system had to be solved approximately.
    """
    resistors = tuple(resistors)
    batteries = tuple(batteries)
    current_sources = tuple(current_sources)
    elements = batteries + resistors + current_sources

    for element in elements:
        assert element.node0 != element.node1, f"element shorted to itself: {element}"
        assert math.isfinite(element[2]), f"non-finite element value: {element}"
    for r in resistors:
        assert r.resistance >= 0, f"negative resistance: {r}"

    nodes = _discover_nodes(elements)
    references = _choose_references(nodes, elements, preferred_references)

    # MNA indices: node voltages, then battery currents, then branch resistor currents
    node_idx = {}
    for node in nodes:
        if node not in references:
            node_idx[node] = len(node_idx)
    n_v = len(node_idx)

    branches = [k for k, r in enumerate(resistors) if r.resistance < BRANCH_RESISTANCE]
    branch_idx = {k: n_v + len(batteries) + j for j, k in enumerate(branches)}
    n_total = n_v + len(batteries) + len(branches)

    if n_total == 0:
        return Solution(
            node_voltages={node: 0.0 for node in nodes},
            battery_currents=(),
            branch_currents={},
            resistors=resistors,
            batteries=batteries,
            current_sources=current_sources,
        )

    rows: list[int] = []
    cols: list[int] = []
    vals: list[float] = []
    b_rows: list[int] = []
    b_vals: list[float] = []

    def stamp(i, j, value):
        if i is not None and j is not None:
            rows.append(i)
            cols.append(j)
            vals.append(value)

    def stamp_branch(ia, ib, k, value):
        """Voltage-source stamp: V(a) - V(b) = value, branch current k leaves a."""
        stamp(ia, k, 1.0)
        stamp(k, ia, 1.0)
        stamp(ib, k, -1.0)
        stamp(k, ib, -1.0)
        b_rows.append(k)
        b_vals.append(value)

    # --- Batteries ---
    for j, battery in enumerate(batteries):
        ia, ib = node_idx.get(battery.node0), node_idx.get(battery.node1)
        stamp_branch(ia, ib, n_v + j, battery.voltage)

    # --- Resistors ---
    for k, r in enumerate(resistors):
        ia, ib = node_idx.get(r.node0), node_idx.get(r.node1)
        if k in branch_idx:
            # V0 - V1 - R*I = 0
            stamp_branch(ia, ib, branch_idx[k], 0.0)
            if r.resistance > 0:
                stamp(branch_idx[k], branch_idx[k], -r.resistance)
            continue
        g = 1.0 / r.resistance
        stamp(ia, ia, g)
        stamp(ib, ib, g)
        stamp(ia, ib, -g)
        stamp(ib, ia, -g)

    # --- Current sources ---
    for source in current_sources:
        ia, ib = node_idx.get(source.node0), node_idx.get(source.node1)
        if ia is not None:
            b_rows.append(ia)
            b_vals.append(-source.current)
        if ib is not None:
            b_rows.append(ib)
            b_vals.append(source.current)

    A = jnp.zeros((n_total, n_total)).at[
        jnp.asarray(rows, dtype=jnp.int32), jnp.asarray(cols, dtype=jnp.int32)
    ].add(jnp.asarray(vals))
    b = jnp.zeros(n_total).at[jnp.asarray(b_rows, dtype=jnp.int32)].add(jnp.asarray(b_vals))

    x, ok = _lu_solve(A, b)
    singular = not bool(ok)
    if singular:
        x, finite = _lstsq_solve(A, b)
        if not bool(finite):
            x = jnp.zeros(n_total)
        logger.warning(
            f"MNA system ({n_total} unknowns) is singular or inconsistent; "
            f"using best-effort solution"
        )

    x = jax.device_get(x).tolist()

    node_voltages = {node: 0.0 for node in nodes}
    for node, idx in node_idx.items():
        node_voltages[node] = x[idx]

    return Solution(
        node_voltages=node_voltages,
        battery_currents=tuple(x[n_v:n_v + len(batteries)]),
        branch_currents={k: x[idx] for k, idx in branch_idx.items()},
        resistors=resistors,
        batteries=batteries,
        current_sources=current_sources,
        singular=singular,
    )
