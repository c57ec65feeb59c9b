"""
Test: MNA linear solver.

Batteries, resistors and current sources solved directly, without a network.

This validates:
- Ohm's law and battery branch currents (sign convention node0 -> node1)
- Series / parallel combinations
- Zero-resistance resistors solved structurally
- One 0V reference per connected sub-graph
- KCL at every node
- Best-effort result for conflicting batteries
"""
import logging
import math
import pytest


def test_single_resistor_across_battery():
    from pyckit.mna import Resistor, Battery, solve

    sol = solve([Resistor("a", "0", 100.0)], [Battery("a", "0", 9.0)], preferred_references=["0"])

    assert sol.voltage("a") == pytest.approx(9.0)
    assert sol.voltage("0") == 0.0
    assert sol.resistor_current(0) == pytest.approx(0.09), \
        f"Expected 0.09A through R, got {sol.resistor_current(0)}"
    # current flows through the battery from '0' to 'a'
    assert sol.battery_currents[0] == pytest.approx(-0.09)
    assert not sol.singular


def test_series_resistors_share_current():
    from pyckit.mna import Resistor, Battery, solve

    sol = solve(
        [Resistor("a", "b", 100.0), Resistor("b", "0", 200.0)],
        [Battery("a", "0", 12.0)],
        preferred_references=["0"],
    )

    i1, i2 = sol.resistor_currents()
    assert i1 == pytest.approx(12.0 / 300.0)
    assert i2 == pytest.approx(12.0 / 300.0)
    assert sol.voltage("b") == pytest.approx(8.0)


def test_parallel_resistors_add_conductance():
    from pyckit.mna import Resistor, Battery, solve

    sol = solve(
        [Resistor("a", "0", 100.0), Resistor("a", "0", 300.0)],
        [Battery("a", "0", 9.0)],
        preferred_references=["0"],
    )

    assert sol.resistor_current(0) == pytest.approx(0.09)
    assert sol.resistor_current(1) == pytest.approx(0.03)
    assert sol.battery_currents[0] == pytest.approx(-0.12)


def test_zero_resistance_reads_branch_current():
    """An ideal wire carries the full loop current without dividing by zero."""
    from pyckit.mna import Resistor, Battery, solve

    sol = solve(
        [Resistor("a", "b", 0.0), Resistor("b", "0", 10.0)],
        [Battery("a", "0", 5.0)],
        preferred_references=["0"],
    )

    assert sol.voltage("b") == pytest.approx(5.0)
    assert sol.resistor_current(0) == pytest.approx(0.5)
    assert sol.resistor_current(1) == pytest.approx(0.5)
    assert all(math.isfinite(v) for v in sol.node_voltages.values())


def test_near_zero_resistance_reads_branch_current():
    """A 1.1e-10 ohm link carrying microamps reports the loop current exactly."""
    from pyckit.mna import Resistor, Battery, solve

    sol = solve(
        [Resistor("a", "b", 1.1e-10), Resistor("b", "0", 1e6)],
        [Battery("a", "0", 9.0)],
        preferred_references=["0"],
    )

    assert 0 in sol.branch_currents
    assert 1 not in sol.branch_currents
    assert sol.resistor_current(0) == pytest.approx(9e-6, rel=1e-9)
    assert sol.resistor_current(1) == pytest.approx(9e-6, rel=1e-9)
    assert abs(sol.current_imbalance("b")) < 1e-15


def test_netlist_two_batteries_three_resistors():
    """v1 1 0 24V, v2 3 0 15V, r1 1 2 10k, r2 2 3 8.1k, r3 2 0 4.7k."""
    from pyckit.mna import Resistor, Battery, solve

    sol = solve(
        [Resistor("1", "2", 10000.0), Resistor("2", "3", 8100.0), Resistor("2", "0", 4700.0)],
        [Battery("1", "0", 24.0), Battery("3", "0", 15.0)],
        preferred_references=["0"],
    )

    assert sol.voltage("0") == 0.0
    assert sol.voltage("1") == pytest.approx(24.0)
    assert sol.voltage("2") == pytest.approx(9.7470, abs=1e-4)
    assert sol.voltage("3") == pytest.approx(15.0)
    assert sol.battery_currents[0] == pytest.approx(-1.425e-3, abs=1e-6)
    assert sol.battery_currents[1] == pytest.approx(-6.485e-4, abs=1e-7)


def test_node_voltage_method_with_current_source():
    """Battery a-c 140V, 20 ohm a-b, 6 and 5 ohm b-c, 18A source driven from c into b."""
    from pyckit.mna import Resistor, Battery, CurrentSource, solve

    sol = solve(
        [Resistor("a", "b", 20.0), Resistor("b", "c", 6.0), Resistor("b", "c", 5.0)],
        [Battery("a", "c", 140.0)],
        [CurrentSource("c", "b", 18.0)],
    )

    # without a preference the first node seen ('a') is the reference
    assert sol.voltage("a") == 0.0
    assert sol.voltage("b") == pytest.approx(-80.0)
    assert sol.voltage("c") == pytest.approx(-140.0)
    assert sol.battery_currents[0] == pytest.approx(-4.0)


def test_current_source_into_resistor():
    from pyckit.mna import Resistor, CurrentSource, solve

    sol = solve([Resistor("a", "0", 4.0)], [], [CurrentSource("0", "a", 10.0)], preferred_references=["0"])

    assert sol.voltage("a") == pytest.approx(40.0)
    assert sol.battery_currents == ()


def test_kcl_holds_at_every_junction():
    """Bridge network with 3- and 4-element junctions."""
    from pyckit.mna import Resistor, Battery, CurrentSource, solve

    resistors = [
        Resistor("a", "b", 10.0),
        Resistor("b", "0", 20.0),
        Resistor("b", "c", 30.0),
        Resistor("c", "0", 40.0),
        Resistor("a", "c", 50.0),
        Resistor("c", "d", 0.0),
        Resistor("d", "0", 60.0),
    ]
    sol = solve(
        resistors,
        [Battery("a", "0", 10.0)],
        [CurrentSource("c", "b", 0.1)],
        preferred_references=["0"],
    )

    for node in ("a", "b", "c", "d", "0"):
        assert abs(sol.current_imbalance(node)) < 1e-9, \
            f"KCL violated at {node}: {sol.current_imbalance(node)}"


def test_disconnected_subgraphs_get_own_reference():
    from pyckit.mna import Resistor, Battery, solve

    sol = solve(
        [Resistor("a", "0", 10.0), Resistor("x", "y", 100.0)],
        [Battery("a", "0", 5.0)],
        preferred_references=["0"],
    )

    assert sol.voltage("a") == pytest.approx(5.0)
    assert sol.voltage("x") == 0.0
    assert sol.voltage("y") == 0.0
    assert sol.resistor_current(1) == 0.0
    assert sol.voltage("nowhere") == 0.0
    assert not sol.singular


def test_preferred_reference_shifts_potentials_only():
    from pyckit.mna import Resistor, Battery, solve

    resistors = [Resistor("a", "b", 100.0), Resistor("b", "0", 200.0)]
    batteries = [Battery("a", "0", 12.0)]
    ground = solve(resistors, batteries, preferred_references=["0"])
    shifted = solve(resistors, batteries, preferred_references=["b"])

    assert shifted.voltage("b") == 0.0
    assert shifted.voltage("a") - shifted.voltage("0") == pytest.approx(12.0)
    assert shifted.resistor_currents() == pytest.approx(ground.resistor_currents())
    assert not ground.approx_equals(shifted)
    assert ground.approx_equals(solve(resistors, batteries, preferred_references=["0"]))


def test_empty_circuit():
    from pyckit.mna import solve

    sol = solve([], [])
    assert sol.node_voltages == {}
    assert sol.voltage("a") == 0.0


class TestSingularSystems:
    """Modeling errors must not raise."""

    def test_conflicting_parallel_batteries_flagged(self, caplog):
        from pyckit.mna import Resistor, Battery, solve

        with caplog.at_level(logging.WARNING, logger="pyckit"):
            sol = solve(
                [Resistor("a", "0", 10.0)],
                [Battery("a", "0", 5.0), Battery("a", "0", 10.0)],
                preferred_references=["0"],
            )

        assert sol.singular
        assert all(math.isfinite(v) for v in sol.node_voltages.values())
        assert all(math.isfinite(i) for i in sol.battery_currents)
        assert any("singular" in record.getMessage() for record in caplog.records)

    def test_battery_loop_of_wires_flagged(self):
        from pyckit.mna import Resistor, Battery, solve

        sol = solve([Resistor("a", "0", 0.0)], [Battery("a", "0", 5.0)], preferred_references=["0"])

        assert sol.singular
        assert math.isfinite(sol.voltage("a"))


class TestContractViolations:

    def test_element_shorted_to_itself(self):
        from pyckit.mna import Resistor, solve

        with pytest.raises(AssertionError):
            solve([Resistor("a", "a", 1.0)], [])

    def test_negative_resistance(self):
        from pyckit.mna import Resistor, solve

        with pytest.raises(AssertionError):
            solve([Resistor("a", "b", -1.0)], [])


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
