"""Network, Vertex and component specs for circuit topology (immutable/functional style)."""

from __future__ import annotations
from enum import Enum
from typing import NamedTuple, TYPE_CHECKING

if TYPE_CHECKING:
    from ..options import AnalysisOptions
    from .analysis import CircuitFns


class ComponentKind(Enum):
    """Every kind of component a network can hold."""
    BATTERY = "Battery"
    RESISTOR = "R"
    WIRE = "Wire"
    SWITCH = "Switch"
    AMMETER = "Ammeter"
    CAPACITOR = "C"
    INDUCTOR = "L"

    @property
    def is_dynamic(self) -> bool:
        return self in (ComponentKind.CAPACITOR, ComponentKind.INDUCTOR)


class Vertex(NamedTuple):
    """A connection point shared by component terminals."""
    name: str
    index: int  # creation order; earlier vertices are preferred as 0V references


class ComponentRef(NamedTuple):
    """Reference to a component for later probing."""
    name: str
    kind: ComponentKind


class ComponentSpec(NamedTuple):
    """Specification for a component (topology and optional default values)."""
    name: str
    kind: ComponentKind
    nodes: tuple[str, str]  # vertex names (node_a, node_b)
    defaults: tuple[tuple[str, float], ...] = ()  # ((param_name, default_value), ...)


class Network(NamedTuple):
    """
    Immutable circuit network topology.

    Build using functional style:
        net = Network()
        net, a = net.vertex("a")
        net, b = net.vertex("b")
        net, bat = Battery(net, a, b, name="B1", value=9.0)
        net, r1 = R(net, a, b, name="R1", value=100.0)
    """
    vertices: tuple[Vertex, ...] = ()
    components: tuple[ComponentSpec, ...] = ()

    def vertex(self, name: str) -> tuple[Network, Vertex]:
        """
        Create a new vertex, or return the existing one with this name.

        Returns (new_network, vertex).
        """
        for v in self.vertices:
            if v.name == name:
                return self, v

        new_vertex = Vertex(name, len(self.vertices))
        new_net = self._replace(vertices=self.vertices + (new_vertex,))
        return new_net, new_vertex

    def component(self, name: str) -> ComponentSpec:
        for spec in self.components:
            if spec.name == name:
                return spec
        raise ValueError(f"Unknown component: {name}")

    def add_component(self, spec: ComponentSpec) -> tuple[Network, ComponentRef]:
        """
        Add a component specification.

        Returns (new_network, component_ref).
        """
        if not isinstance(spec.kind, ComponentKind):
            raise ValueError(f"Unknown component kind: {spec.kind}")
        if any(c.name == spec.name for c in self.components):
            raise ValueError(f"Duplicate component name: {spec.name}")
        node_a, node_b = spec.nodes
        if node_a == node_b:
            raise ValueError(f"{spec.name} connects vertex {node_a!r} to itself")
        known = {v.name for v in self.vertices}
        for node in spec.nodes:
            if node not in known:
                raise ValueError(f"{spec.name} uses unknown vertex {node!r}")

        new_net = self._replace(components=self.components + (spec,))
        ref = ComponentRef(spec.name, spec.kind)
        return new_net, ref

    def compile(self, dt: float, options: AnalysisOptions | None = None) -> CircuitFns:
        """
        Create analysis functions from this network.

        Args:
            dt: Nominal frame duration in seconds
            options: Solver and step-control tunables (defaults if None)

        Returns:
            CircuitFns with init, step, and probe functions
        """
        from .analysis import compile_network
        return compile_network(self, dt, options)
