"""Generic DC load with a selectable voltage-response law.

A load consumes power from the network according to one of four laws, given
its nominal power and voltage, its operating band [min_voltage, max_voltage],
a power factor and a load factor (both in [0, 1]):

    - BINARY: full power once the input reaches min_voltage, zero below
    - LINEAR: power scales with input / nominal voltage above min_voltage
    - REGULATED: full power regardless of voltage above min_voltage
      (switching regulator)
    - PROPORTIONAL: power ramps from zero at min_voltage to full at nominal
      voltage, capped above nominal

Every law yields zero while the load is switched off. Full power means
nominal power x load factor x power factor.

A load is a network sink: its outputs are always zero.

Typical usage:
    display = GenericDcLoad(
        "display", volts(28), watts(120), volts(21), volts(32),
        VoltageResponse.REGULATED, power_factor=0.85,
    )
    display.set_power_state(True)
"""

from enum import Enum
from typing import Any

import pint

from aerotwin.core.logging_system import get_logger
from aerotwin.core.units import amps, clamp_ratio, quantity_from_config, volts, watts
from aerotwin.systems.electrical.base import ComponentKind, IPhysicalComponent

logger = get_logger(__name__)


class VoltageResponse(Enum):
    """Laws mapping supply voltage to consumed power."""

    BINARY = "binary"  # Lights, relays
    LINEAR = "linear"  # Heaters, resistive loads
    REGULATED = "regulated"  # Displays, avionics behind a regulator
    PROPORTIONAL = "proportional"  # Motors ramping up with voltage


class VoltageStatus(Enum):
    """Supply voltage relative to the load's operating band."""

    UNPOWERED = "unpowered"
    UNDERVOLTAGE = "undervoltage"
    NORMAL = "normal"
    OVERVOLTAGE = "overvoltage"


class GenericDcLoad(IPhysicalComponent):
    """DC consumer at the end of a network branch.

    ``update`` only checks the supply against the operating band; consumed
    power is computed on demand by ``get_actual_power``. Only the input
    voltage matters; input power and current pushed by the network are
    accepted and ignored.

    Examples:
        >>> light = GenericDcLoad(
        ...     "test_light", volts(28), watts(200), volts(20), volts(32),
        ...     VoltageResponse.BINARY, power_factor=0.9,
        ... )
        >>> light.set_power_state(True)
        >>> light.set_input_voltage(volts(28))
        >>> light.get_actual_power()
        <Quantity(180.0, 'watt')>
    """

    kind = ComponentKind.DC_LOAD

    def __init__(
        self,
        name: str,
        nominal_voltage: pint.Quantity,
        nominal_power: pint.Quantity,
        min_voltage: pint.Quantity,
        max_voltage: pint.Quantity,
        voltage_response: VoltageResponse,
        power_factor: float = 1.0,
        load_factor: float = 1.0,
    ) -> None:
        """Initialize a switched-off load.

        Args:
            name: Component identifier.
            nominal_voltage: Voltage at which nominal power is drawn.
            nominal_power: Rated power draw.
            min_voltage: Lowest voltage at which the load operates.
            max_voltage: Highest voltage the load tolerates.
            voltage_response: Voltage-response law.
            power_factor: Clamped to [0, 1].
            load_factor: Clamped to [0, 1] (e.g. dimming).

        Raises:
            ValueError: If nominal power is negative or the band does not
                satisfy 0 <= min_voltage < nominal_voltage <= max_voltage.
        """
        super().__init__(name)

        nominal_voltage = nominal_voltage.to("volt")
        min_voltage = min_voltage.to("volt")
        max_voltage = max_voltage.to("volt")

        if nominal_power.to("watt").magnitude < 0:
            raise ValueError(f"nominal_power must be >= 0, got {nominal_power}")
        if not (volts(0.0) <= min_voltage < nominal_voltage <= max_voltage):
            raise ValueError(
                "Voltage band must satisfy 0 <= min < nominal <= max, got "
                f"min={min_voltage}, nominal={nominal_voltage}, max={max_voltage}"
            )

        self.nominal_voltage = nominal_voltage
        self.nominal_power = nominal_power.to("watt")
        self.min_voltage = min_voltage
        self.max_voltage = max_voltage
        self.voltage_response = voltage_response
        self.power_factor = clamp_ratio(power_factor)
        self.load_factor = clamp_ratio(load_factor)

        self._is_on = False
        self._voltage_status = VoltageStatus.UNPOWERED
        # Last status reported while switched on
        self._reported_status = VoltageStatus.UNPOWERED

        self._input_voltage = volts(0.0)

    @classmethod
    def from_config(cls, config: dict[str, Any]) -> "GenericDcLoad":
        """Create a load from a configuration dictionary.

        Recognized keys: ``name``, ``nominal_voltage_v``, ``nominal_power_w``,
        ``min_voltage_v``, ``max_voltage_v`` (or the same names without the
        suffix, with unit strings), ``voltage_response``, ``power_factor``,
        ``load_factor`` and ``powered`` (initial switch state).

        Raises:
            ValueError: If a parameter is missing or malformed, or the
                voltage response is unknown.
        """
        response_name = config.get("voltage_response", VoltageResponse.BINARY.value)
        try:
            response = VoltageResponse(response_name)
        except ValueError as e:
            valid = ", ".join(law.value for law in VoltageResponse)
            raise ValueError(
                f"Unknown voltage response '{response_name}' (expected one of: {valid})"
            ) from e

        load = cls(
            name=config.get("name", "dc_load"),
            nominal_voltage=quantity_from_config(config, "nominal_voltage", "volt", "v"),
            nominal_power=quantity_from_config(config, "nominal_power", "watt", "w"),
            min_voltage=quantity_from_config(config, "min_voltage", "volt", "v"),
            max_voltage=quantity_from_config(config, "max_voltage", "volt", "v"),
            voltage_response=response,
            power_factor=float(config.get("power_factor", 1.0)),
            load_factor=float(config.get("load_factor", 1.0)),
        )
        load.set_power_state(bool(config.get("powered", False)))
        return load

    @property
    def is_on(self) -> bool:
        """Whether the load is switched on."""
        return self._is_on

    @property
    def voltage_status(self) -> VoltageStatus:
        """Supply voltage status found by the last update."""
        return self._voltage_status

    def set_power_state(self, on: bool) -> None:
        """Switch the load on or off."""
        self._is_on = on

    def set_load_factor(self, factor: float) -> None:
        """Set the load factor, clamped to [0, 1]."""
        self.load_factor = clamp_ratio(factor)

    def get_actual_power(self) -> pint.Quantity:
        """Get the power consumed at the present input voltage.

        Returns:
            Consumed power in watts.
        """
        voltage = self._input_voltage

        if not self._is_on or voltage < self.min_voltage:
            return watts(0.0)

        full_power = self.nominal_power * self.load_factor * self.power_factor

        if self.voltage_response == VoltageResponse.LINEAR:
            voltage_ratio = (voltage / self.nominal_voltage).to("dimensionless").magnitude
            return full_power * voltage_ratio

        if self.voltage_response == VoltageResponse.PROPORTIONAL:
            span = self.nominal_voltage - self.min_voltage
            voltage_factor = ((voltage - self.min_voltage) / span).to("dimensionless").magnitude
            return full_power * min(1.0, voltage_factor)

        # BINARY and REGULATED draw full power anywhere above the minimum
        return full_power

    def get_input_current(self) -> pint.Quantity:
        """Get the current drawn at the present input voltage.

        Returns:
            Consumed power / input voltage, or 0 A when unpowered.
        """
        if self._input_voltage.magnitude <= 0:
            return amps(0.0)
        return (self.get_actual_power() / self._input_voltage).to("ampere")

    def update(self, dt: float) -> None:
        """Check the supply against the operating band.

        Status changes are logged while the load is on, including the
        status found on the first update after switching on. A switched-off
        load keeps classifying its supply but reports nothing.

        Args:
            dt: Elapsed time in milliseconds (unused).
        """
        status = self._classify_voltage()
        self._voltage_status = status

        if not self._is_on:
            self._reported_status = VoltageStatus.UNPOWERED
            return

        if status == self._reported_status:
            return

        previous = self._reported_status
        self._reported_status = status

        if status == VoltageStatus.OVERVOLTAGE:
            logger.warning(
                "Overvoltage on %s: %.1f V > %.1f V max",
                self.name,
                self._input_voltage.magnitude,
                self.max_voltage.magnitude,
            )
        elif status == VoltageStatus.UNDERVOLTAGE:
            logger.warning(
                "Undervoltage on %s: %.1f V < %.1f V min",
                self.name,
                self._input_voltage.magnitude,
                self.min_voltage.magnitude,
            )
        else:
            logger.debug(
                "Supply of %s: %s -> %s (%.1f V)",
                self.name,
                previous.value,
                status.value,
                self._input_voltage.magnitude,
            )

    def _classify_voltage(self) -> VoltageStatus:
        voltage = self._input_voltage
        if voltage.magnitude <= 0:
            return VoltageStatus.UNPOWERED
        if voltage > self.max_voltage:
            return VoltageStatus.OVERVOLTAGE
        if voltage < self.min_voltage:
            return VoltageStatus.UNDERVOLTAGE
        return VoltageStatus.NORMAL

    def get_output_voltage(self) -> pint.Quantity:
        return volts(0.0)

    def get_output_power(self) -> pint.Quantity:
        return watts(0.0)

    def get_output_current(self) -> pint.Quantity:
        return amps(0.0)

    def set_input_voltage(self, voltage: pint.Quantity) -> None:
        self._input_voltage = voltage.to("volt")

    def set_input_power(self, power: pint.Quantity) -> None:
        """Ignored: consumption follows the input voltage."""

    def set_input_current(self, current: pint.Quantity) -> None:
        """Ignored: drawn current is derived by ``get_input_current``."""
