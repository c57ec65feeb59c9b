"""Circuit component factory functions (functional style)."""

from __future__ import annotations

from .network import Network, Vertex, ComponentKind, ComponentSpec, ComponentRef


def _add(
    net: Network,
    kind: ComponentKind,
    node_a: Vertex,
    node_b: Vertex,
    name: str,
    defaults: tuple[tuple[str, float], ...] = (),
) -> tuple[Network, ComponentRef]:
    spec = ComponentSpec(
        name=name,
        kind=kind,
        nodes=(node_a.name, node_b.name),
        defaults=defaults,
    )
    return net.add_component(spec)


def Battery(
    net: Network,
    node_pos: Vertex,
    node_neg: Vertex,
    *,
    name: str,
    value: float | None = None,
    internal_resistance: float | None = None,
) -> tuple[Network, ComponentRef]:
    """
    Create a battery enforcing V(node_pos) - V(node_neg) = value.

    Args:
        net: Network to add to
        node_pos: Positive terminal
        node_neg: Negative terminal
        name: Component name (key in params/controls for the voltage)
        value: Voltage in Volts (optional default, can be overridden at step time)
        internal_resistance: Series resistance in Ohms; param key {name}_r_internal

    Returns:
        (new_network, component_ref)

    Example:
        net, b1 = Battery(net, a, b, name="B1", value=9.0)
    """
    defaults = ()
    if value is not None:
        defaults += ((name, value),)
    if internal_resistance is not None:
        defaults += ((f"{name}_r_internal", internal_resistance),)
    return _add(net, ComponentKind.BATTERY, node_pos, node_neg, name, defaults)


def R(
    net: Network,
    node_a: Vertex,
    node_b: Vertex,
    *,
    name: str,
    value: float | None = None,
) -> tuple[Network, ComponentRef]:
    """
    Create a resistor.

    Args:
        net: Network to add to
        node_a: First terminal
        node_b: Second terminal
        name: Component name (required, used as key in params)
        value: Resistance in Ohms (optional default, can be overridden at step time)

    Returns:
        (new_network, component_ref)

    Example:
        net, r1 = R(net, a, b, name="R1", value=1000.0)  # 1 kΩ default
    """
    defaults = ((name, value),) if value is not None else ()
    return _add(net, ComponentKind.RESISTOR, node_a, node_b, name, defaults)


def Wire(net: Network, node_a: Vertex, node_b: Vertex, *, name: str) -> tuple[Network, ComponentRef]:
    """Create a wire (near-zero resistance; override with params[name])."""
    return _add(net, ComponentKind.WIRE, node_a, node_b, name)


def Switch(
    net: Network,
    node_a: Vertex,
    node_b: Vertex,
    *,
    name: str,
    closed: bool = False,
) -> tuple[Network, ComponentRef]:
    """
    Create a controllable switch.

    State (True/False) is provided via controls dict at step time, falling
    back to `closed`. Optional params: {name}_r_on, {name}_r_off for custom
    resistances.

    Args:
        net: Network to add to
        node_a: First terminal
        node_b: Second terminal
        name: Component name (required, used as key in controls)
        closed: Default state

    Returns:
        (new_network, component_ref)
    """
    defaults = ((name, 1.0 if closed else 0.0),)
    return _add(net, ComponentKind.SWITCH, node_a, node_b, name, defaults)


def Ammeter(net: Network, node_a: Vertex, node_b: Vertex, *, name: str) -> tuple[Network, ComponentRef]:
    """
    Create a series ammeter (behaves as a wire).

    Its current, probed with i(), is positive flowing from node_a to node_b.
    """
    return _add(net, ComponentKind.AMMETER, node_a, node_b, name)


def C(
    net: Network,
    node_a: Vertex,
    node_b: Vertex,
    *,
    name: str,
    value: float | None = None,
) -> tuple[Network, ComponentRef]:
    """
    Create a capacitor.

    Its state voltage is V(node_b) - V(node_a); its current is positive
    flowing through it from node_a to node_b. Initial state params:
    {name}_v0 and {name}_i0.

    Args:
        net: Network to add to
        node_a: First terminal
        node_b: Second terminal
        name: Component name (required, used as key in params)
        value: Capacitance in Farads (optional default, can be overridden at step time)

    Returns:
        (new_network, component_ref)

    Example:
        net, c1 = C(net, gnd, top, name="C1", value=1e-3)  # 1 mF default
    """
    defaults = ((name, value),) if value is not None else ()
    return _add(net, ComponentKind.CAPACITOR, node_a, node_b, name, defaults)


def L(
    net: Network,
    node_a: Vertex,
    node_b: Vertex,
    *,
    name: str,
    value: float | None = None,
) -> tuple[Network, ComponentRef]:
    """
    Create an inductor.

    Same voltage/current convention and initial state params as C().

    Args:
        net: Network to add to
        node_a: First terminal
        node_b: Second terminal
        name: Component name (required, used as key in params)
        value: Inductance in Henries (optional default, can be overridden at step time)

    Returns:
        (new_network, component_ref)

    Example:
        net, l1 = L(net, a, b, name="L1", value=1.0)
    """
    defaults = ((name, value),) if value is not None else ()
    return _add(net, ComponentKind.INDUCTOR, node_a, node_b, name, defaults)
