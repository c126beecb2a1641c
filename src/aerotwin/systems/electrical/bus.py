"""Electrical bus: lossless distribution node.

A bus fans one upstream source out to several downstream branches. It has no
impedance and no internal dynamics: its output voltage and power are whatever
was last written to its inputs.
"""

from typing import Any

import pint

from aerotwin.core.units import amps, quantity_from_config, volts, watts
from aerotwin.systems.electrical.base import ComponentKind, IPhysicalComponent


class Bus(IPhysicalComponent):
    """Pass-through distribution bus.

    The bus starts de-energized. ``nominal_voltage`` describes the bus for
    displays and diagnostics and does not affect the simulation.

    Examples:
        >>> bus = Bus("main_bus", nominal_voltage=volts(28))
        >>> bus.set_input_voltage(volts(27.5))
        >>> bus.update(16.0)
        >>> bus.get_output_voltage()
        <Quantity(27.5, 'volt')>
    """

    kind = ComponentKind.BUS

    def __init__(self, name: str, nominal_voltage: pint.Quantity | None = None) -> None:
        """Initialize a de-energized bus.

        Args:
            name: Component identifier.
            nominal_voltage: Descriptive nominal voltage.
        """
        super().__init__(name)
        self.nominal_voltage = nominal_voltage.to("volt") if nominal_voltage is not None else None

        self._voltage = volts(0.0)
        self._power = watts(0.0)
        self._input_current = amps(0.0)

    @classmethod
    def from_config(cls, config: dict[str, Any]) -> "Bus":
        """Create a bus from a configuration dictionary."""
        nominal = None
        if "nominal_voltage" in config or "nominal_voltage_v" in config:
            nominal = quantity_from_config(config, "nominal_voltage", "volt", "v")
        return cls(name=config.get("name", "bus"), nominal_voltage=nominal)

    def update(self, dt: float) -> None:
        """No internal state evolves on a bus."""

    def get_output_voltage(self) -> pint.Quantity:
        return self._voltage

    def get_output_power(self) -> pint.Quantity:
        return self._power

    def get_input_current(self) -> pint.Quantity:
        """Get the current last fed into the bus (diagnostics only)."""
        return self._input_current

    def set_input_voltage(self, voltage: pint.Quantity) -> None:
        self._voltage = voltage.to("volt")

    def set_input_power(self, power: pint.Quantity) -> None:
        self._power = power.to("watt")

    def set_input_current(self, current: pint.Quantity) -> None:
        self._input_current = current.to("ampere")
