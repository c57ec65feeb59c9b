"""
Test: Logging configuration.

This validates:
- Quiet default level
- Per-frame step statistics at DEBUG
"""
import logging
import pytest


@pytest.fixture
def restore_level():
    from pyckit.logging import logger, set_log_level

    level = logger.level
    yield
    set_log_level(level)


def test_default_level_is_warning():
    from pyckit.logging import logger

    assert logger.name == "pyckit"
    assert logger.level == logging.WARNING


def test_debug_reports_states_per_frame(restore_level, caplog):
    from pyckit.logging import enable_debug_logging
    from pyckit.mna import Resistor
    from pyckit.transient import DynamicCircuit, DynamicCapacitor, ElementState, solve_with_subdivisions

    enable_debug_logging(with_name=True)
    circuit = DynamicCircuit(
        resistors=(Resistor("top", "gnd", 10.0),),
        capacitors=(DynamicCapacitor("C1", "gnd", "top", 0.01, ElementState(5.0, 0.5)),),
        preferred_references=("gnd",),
    )

    with caplog.at_level(logging.DEBUG, logger="pyckit"):
        solve_with_subdivisions(circuit, 1 / 60)

    assert any("states per frame" in record.getMessage() for record in caplog.records)


def test_set_log_level(restore_level):
    from pyckit.logging import logger, set_log_level

    set_log_level(logging.ERROR)

    assert logger.level == logging.ERROR
    assert all(h.level == logging.ERROR for h in logger.handlers)


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
