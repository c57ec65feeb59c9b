"""
Per-frame circuit analysis.

compile_network() partitions a Network once and returns pure functions:

    init(params)                        -> CircuitState
    step(params, state, controls, dt)   -> CircuitState
    v(state, vertex), i(state, ref)     -> float

Every step rebuilds solver inputs from the network, params and controls.
Circuits without capacitors or inductors are solved with a single MNA
solve. Otherwise the frame is integrated with trapezoidal companion models
and adaptive sub-steps; vertex voltages come from the last sub-step,
component currents are averaged over the frame, and capacitor/inductor
states are carried into the returned CircuitState once per frame.

All currents are positive when flowing through the component from its
first terminal to its second. A battery delivering power therefore reports
a negative current.
"""

from __future__ import annotations
from typing import NamedTuple, Callable

from ..logging import logger
from ..mna import Resistor, Battery as IdealBattery, solve
from ..options import AnalysisOptions
from ..transient import (
    ElementState,
    ResistiveBattery,
    DynamicCapacitor,
    DynamicInductor,
    DynamicCircuit,
    SyntheticNode,
    solve_with_subdivisions,
)
from .network import Network, Vertex, ComponentKind, ComponentSpec, ComponentRef


class CircuitState(NamedTuple):
    """
    Immutable analysis state, the write-back value of each frame.
    """
    time: float
    node_voltages: dict[str, float]          # every vertex
    currents: dict[str, float]               # every component, frame average
    element_states: dict[str, ElementState]  # capacitors and inductors
    substeps: int = 0                        # accepted sub-steps in the last frame
    singular: bool = False                   # a best-effort solve was used


class CircuitFns(NamedTuple):
    """Collection of pure analysis functions."""
    init: Callable[[dict | None], CircuitState]
    step: Callable[..., CircuitState]
    v: Callable[[CircuitState, Vertex], float]
    i: Callable[[CircuitState, ComponentRef], float]
    dt: float
    network: Network
    options: AnalysisOptions


class Snapshot(NamedTuple):
    """Solver inputs for one frame, built from the network and current values."""
    resistors: tuple[Resistor, ...]
    resistor_names: tuple[str, ...]
    batteries: tuple[ResistiveBattery, ...]
    capacitors: tuple[DynamicCapacitor, ...]
    inductors: tuple[DynamicInductor, ...]


def get_spec_default(spec: ComponentSpec, param_name: str, fallback: float | None) -> float | None:
    """Get default value from ComponentSpec.defaults, or use fallback."""
    for name, value in spec.defaults:
        if name == param_name:
            return value
    return fallback


def compile_network(net: Network, dt: float, options: AnalysisOptions | None = None) -> CircuitFns:
    """
    Compile network into analysis functions.

    Components are partitioned here (once); values are looked up per step.
    """
    options = options or AnalysisOptions()
    default_dt = dt

    battery_specs = []
    resistor_specs = []
    capacitor_specs = []
    inductor_specs = []

    for spec in net.components:
        if spec.kind == ComponentKind.BATTERY:
            battery_specs.append(spec)
        elif spec.kind in (
            ComponentKind.RESISTOR,
            ComponentKind.WIRE,
            ComponentKind.SWITCH,
            ComponentKind.AMMETER,
        ):
            resistor_specs.append(spec)
        elif spec.kind == ComponentKind.CAPACITOR:
            capacitor_specs.append(spec)
        elif spec.kind == ComponentKind.INDUCTOR:
            inductor_specs.append(spec)
        else:
            raise ValueError(f"Unknown component kind: {spec.kind}")

    vertex_names = tuple(v.name for v in net.vertices)
    has_dynamic = any(spec.kind.is_dynamic for spec in net.components)

    def lookup(spec: ComponentSpec, key: str, params: dict, controls: dict, fallback: float | None = None) -> float:
        """Controls first, then params, then the component default."""
        if key in controls:
            val = controls[key]
        elif key in params:
            val = params[key]
        else:
            val = get_spec_default(spec, key, fallback)
        if val is None:
            raise ValueError(f"No value for {key!r} ({spec.kind.value} {spec.name})")
        if isinstance(val, bool):
            val = 1.0 if val else 0.0
        return float(val)

    def resistance(spec: ComponentSpec, params: dict, controls: dict) -> float:
        if spec.kind == ComponentKind.RESISTOR:
            r = lookup(spec, spec.name, params, controls)
            if r < 0:
                raise ValueError(f"{spec.name}: resistance must be non-negative, got {r}")
            return r if r > 0 else options.minimum_resistance
        elif spec.kind in (ComponentKind.WIRE, ComponentKind.AMMETER):
            return lookup(spec, spec.name, params, controls, options.minimum_resistance)
        elif spec.kind == ComponentKind.SWITCH:
            closed = lookup(spec, spec.name, params, controls, 0.0) > 0.5
            if closed:
                return lookup(spec, f"{spec.name}_r_on", params, controls, options.minimum_resistance)
            return lookup(spec, f"{spec.name}_r_off", params, controls, options.open_switch_resistance)
        else:
            raise ValueError(f"{spec.kind} is not resistor-like")

    def storage(spec: ComponentSpec, params: dict, controls: dict) -> float:
        """Capacitance or inductance; must be positive."""
        value = lookup(spec, spec.name, params, controls)
        if not value > 0:
            raise ValueError(f"{spec.name}: {spec.kind.value} value must be positive, got {value}")
        return value

    def snapshot(params: dict, state: CircuitState, controls: dict) -> Snapshot:
        resistors = tuple(
            Resistor(spec.nodes[0], spec.nodes[1], resistance(spec, params, controls))
            for spec in resistor_specs
        )
        batteries = tuple(
            ResistiveBattery(
                id=spec.name,
                node0=spec.nodes[0],
                node1=spec.nodes[1],
                voltage=lookup(spec, spec.name, params, controls, 0.0),
                resistance=lookup(spec, f"{spec.name}_r_internal", params, controls, 0.0),
            )
            for spec in battery_specs
        )
        capacitors = tuple(
            DynamicCapacitor(
                id=spec.name,
                node0=spec.nodes[0],
                node1=spec.nodes[1],
                capacitance=storage(spec, params, controls),
                state=state.element_states.get(spec.name, ElementState()),
            )
            for spec in capacitor_specs
        )
        inductors = tuple(
            DynamicInductor(
                id=spec.name,
                node0=spec.nodes[0],
                node1=spec.nodes[1],
                inductance=storage(spec, params, controls),
                state=state.element_states.get(spec.name, ElementState()),
            )
            for spec in inductor_specs
        )
        return Snapshot(
            resistors=resistors,
            resistor_names=tuple(spec.name for spec in resistor_specs),
            batteries=batteries,
            capacitors=capacitors,
            inductors=inductors,
        )

    def solve_static(snap: Snapshot) -> tuple[dict, dict, bool]:
        """One MNA solve; batteries with internal resistance get a synthetic node."""
        resistors = list(snap.resistors)
        batteries = []
        battery_reads = []  # (reads_resistor, index)
        for k, battery in enumerate(snap.batteries):
            if battery.resistance > 0:
                s = SyntheticNode(k)
                batteries.append(IdealBattery(battery.node0, s, battery.voltage))
                resistors.append(Resistor(s, battery.node1, battery.resistance))
                battery_reads.append((True, len(resistors) - 1))
            else:
                batteries.append(IdealBattery(battery.node0, battery.node1, battery.voltage))
                battery_reads.append((False, len(batteries) - 1))

        solution = solve(resistors, batteries, preferred_references=vertex_names)

        node_voltages = {name: solution.voltage(name) for name in vertex_names}
        currents = {}
        for k, name in enumerate(snap.resistor_names):
            currents[name] = solution.resistor_current(k)
        for battery, (reads_resistor, idx) in zip(snap.batteries, battery_reads):
            if reads_resistor:
                currents[battery.id] = solution.resistor_current(idx)
            else:
                currents[battery.id] = solution.battery_currents[idx]
        return node_voltages, currents, solution.singular

    def init(params: dict | None = None) -> CircuitState:
        """Create initial state (at rest unless {name}_v0 / {name}_i0 are given)."""
        params = params or {}
        element_states = {}
        for spec in capacitor_specs + inductor_specs:
            element_states[spec.name] = ElementState(
                voltage=float(params.get(f"{spec.name}_v0", 0.0)),
                current=float(params.get(f"{spec.name}_i0", 0.0)),
            )
        return CircuitState(
            time=0.0,
            node_voltages={name: 0.0 for name in vertex_names},
            currents={spec.name: 0.0 for spec in net.components},
            element_states=element_states,
        )

    def step(params: dict, state: CircuitState, controls: dict | None = None, dt: float | None = None) -> CircuitState:
        """
        Advance one frame.

        Args:
            params: Component values by name ({name}, {name}_r_on, ...)
            state: State returned by init() or the previous step()
            controls: Per-frame overrides, e.g. switch states {name: bool}
            dt: Frame duration; defaults to the compiled dt. dt <= 0 means paused: one
                step of options.paused_dt is solved and time does not advance.

        Returns:
            New CircuitState
        """
        controls = controls or {}
        frame_dt = dt if dt is not None else default_dt
        paused = frame_dt <= 0
        if paused:
            frame_dt = options.paused_dt
        time = state.time if paused else state.time + frame_dt

        snap = snapshot(params, state, controls)

        if not has_dynamic:
            node_voltages, currents, singular = solve_static(snap)
            return CircuitState(
                time=time,
                node_voltages=node_voltages,
                currents={spec.name: currents[spec.name] for spec in net.components},
                element_states={},
                substeps=1,
                singular=singular,
            )

        circuit = DynamicCircuit(
            resistors=snap.resistors,
            batteries=snap.batteries,
            capacitors=snap.capacitors,
            inductors=snap.inductors,
            preferred_references=vertex_names,
        )
        state_set = solve_with_subdivisions(circuit, frame_dt, options)
        final = state_set.final_solution

        currents = {}
        for k, name in enumerate(snap.resistor_names):
            currents[name] = state_set.time_average_resistor_current(k)
        for element in snap.batteries + snap.capacitors + snap.inductors:
            currents[element.id] = state_set.time_average_element_current(element.id)

        final_circuit = state_set.final_state.circuit
        element_states = {}
        for element in final_circuit.capacitors + final_circuit.inductors:
            element_states[element.id] = element.state

        singular = any(record.state.solution.solution.singular for record in state_set.records)
        if singular:
            logger.warning(f"t={time:g}: frame used a best-effort solve")

        return CircuitState(
            time=time,
            node_voltages={name: final.voltage(name) for name in vertex_names},
            currents={spec.name: currents[spec.name] for spec in net.components},
            element_states=element_states,
            substeps=len(state_set.records),
            singular=singular,
        )

    def v(state: CircuitState, vertex: Vertex) -> float:
        """Get voltage at a vertex."""
        return state.node_voltages[vertex.name]

    def i(state: CircuitState, component: ComponentRef) -> float:
        """
        Get current through a component.

        Args:
            state: Current analysis state
            component: ComponentRef returned when creating the component

        Returns:
            Current in Amperes, positive flowing from the first terminal to the second
        """
        if component.name not in state.currents:
            raise ValueError(f"Unknown component: {component.name}")
        return state.currents[component.name]

    return CircuitFns(
        init=init,
        step=step,
        v=v,
        i=i,
        dt=dt,
        network=net,
        options=options,
    )
