"""Analysis options shared by the solver, companion models and step controller.

Example usage:
    opts = AnalysisOptions(min_dt=1e-4)
    opts.error_threshold = 1e-6
    opts.set("adaptive", "false")
"""

from dataclasses import dataclass, fields
from typing import Any, Dict, Mapping


def _parse_bool(value: Any) -> bool:
    """Parse a boolean from various input types."""
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        return value.lower() in ('true', '1', 'yes', 'on')
    return bool(value)


_POSITIVE = (
    'open_switch_resistance',
    'minimum_resistance',
    'min_dt',
    'error_threshold',
    'paused_dt',
    'capacitor_resistance',
    'max_magnitude',
)


@dataclass
class AnalysisOptions:
    """Tunable constants of the circuit engine.

    Options are validated on construction and on assignment. Invalid values
    raise ValueError.
    """

    open_switch_resistance: float = 1e9
    """Resistance of an open switch, in Ohms."""

    minimum_resistance: float = 1.1e-10
    """Resistance used for wires, ammeters, closed switches and zero-valued resistors."""

    min_dt: float = 1e-3
    """Smallest sub-step the step controller will halve down to, in seconds."""

    error_threshold: float = 1e-5
    """Accept a step when full-step and two-half-step states differ by less than this."""

    paused_dt: float = 1e-6
    """Frame dt used while the simulation is paused; stepped once without error control."""

    capacitor_resistance: float = 1e-4
    """Series conditioning resistance inserted with every capacitor companion."""

    adaptive: bool = True
    """Enable step-halving search. When False every sub-step is min_dt."""

    max_magnitude: float = 1e20
    """Clamp for persisted capacitor/inductor voltages and currents."""

    def __post_init__(self):
        """Validate all options after initialization."""
        self._validate_all()

    def __setattr__(self, name: str, value: Any) -> None:
        """Set attribute with validation."""
        if name in _POSITIVE and not value > 0:
            raise ValueError(f"{name} must be positive, got {value}")
        if name == 'minimum_resistance' and 'open_switch_resistance' in self.__dict__:
            if value >= self.open_switch_resistance:
                raise ValueError(
                    f"minimum_resistance must be below open_switch_resistance, got {value}"
                )
        if name == 'open_switch_resistance' and 'minimum_resistance' in self.__dict__:
            if value <= self.minimum_resistance:
                raise ValueError(
                    f"open_switch_resistance must exceed minimum_resistance, got {value}"
                )
        object.__setattr__(self, name, value)

    def _validate_all(self):
        """Validate all option values."""
        for name in _POSITIVE:
            value = getattr(self, name)
            if not value > 0:
                raise ValueError(f"{name} must be positive, got {value}")

        if self.minimum_resistance >= self.open_switch_resistance:
            raise ValueError(
                f"minimum_resistance must be below open_switch_resistance, "
                f"got {self.minimum_resistance} >= {self.open_switch_resistance}"
            )

        if not isinstance(self.adaptive, bool):
            raise ValueError(f"adaptive must be a bool, got {self.adaptive!r}")

    def set(self, name: str, value: Any) -> None:
        """Set an option by name with validation.

        Args:
            name: Option name (e.g., 'min_dt')
            value: Option value (converted to the option's type)

        Raises:
            ValueError: If option name is unknown or value is invalid
        """
        if name not in {f.name for f in fields(self)}:
            raise ValueError(f"Unknown option: {name}")

        if isinstance(getattr(self, name), bool):
            value = _parse_bool(value)
        else:
            value = float(value)

        setattr(self, name, value)
        self._validate_all()

    def to_dict(self) -> Dict[str, Any]:
        """Convert options to dictionary."""
        return {f.name: getattr(self, f.name) for f in fields(self)}

    @classmethod
    def from_dict(cls, values: Mapping[str, Any]) -> "AnalysisOptions":
        """Build options from a mapping, coercing each value like set()."""
        opts = cls()
        for name, value in values.items():
            opts.set(name, value)
        return opts

