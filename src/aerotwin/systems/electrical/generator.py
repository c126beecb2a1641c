"""Engine-driven AC generator.

Models a rotating generator with a spin-up period and a linear voltage droop
under load.

State machine:
    OFF -> SPINNING_UP -> AT_SPEED, back to OFF on command.

Per tick while running:
    - spin progress = min(1, time_on / spin_up_time)
    - shaft speed = drive speed x progress
    - efficiency is derated by how far the shaft is below the speed implied
      by the rated frequency and pole count (rated_frequency x 60 / poles)
    - electrical power = min(rated power, mechanical power x efficiency)
    - droop current = power / rated voltage x phase count
    - output voltage = max(0, rated voltage - droop current x internal resistance)

The droop current is a whole-machine approximation, not a per-phase circuit
solve.

Typical usage:
    generator = Generator("gen_1", num_poles=2, rated_power=watts(90000), ...)
    generator.turn_on()
    generator.set_mechanical_input(watts(80000), rpm(12000))
    generator.update(dt=16.0)
"""

from enum import Enum
from typing import Any

import pint

from aerotwin.core.logging_system import get_logger
from aerotwin.core.units import (
    clamp_ratio,
    milliseconds,
    quantity_from_config,
    rpm,
    volts,
    watts,
)
from aerotwin.systems.electrical.base import ComponentKind, IPhysicalComponent

logger = get_logger(__name__)


class GeneratorState(Enum):
    """Generator operating states."""

    OFF = "off"
    SPINNING_UP = "spinning_up"
    AT_SPEED = "at_speed"


class Generator(IPhysicalComponent):
    """Rotating generator feeding an electrical network.

    A generator is a network source: input voltage, power and current written
    by the network are accepted and ignored.

    Examples:
        >>> gen = Generator(
        ...     "main_generator",
        ...     num_poles=2,
        ...     rated_power=watts(90000),
        ...     rated_voltage=volts(115),
        ...     rated_frequency=hertz(400),
        ...     efficiency=0.95,
        ...     internal_resistance=ohms(0.005),
        ... )
        >>> gen.turn_on()
        >>> gen.set_mechanical_input(watts(80000), rpm(12000))
        >>> gen.update(16.0)
        >>> gen.state
        <GeneratorState.AT_SPEED: 'at_speed'>
    """

    kind = ComponentKind.GENERATOR

    def __init__(
        self,
        name: str,
        num_poles: int,
        rated_power: pint.Quantity,
        rated_voltage: pint.Quantity,
        rated_frequency: pint.Quantity,
        efficiency: float,
        internal_resistance: pint.Quantity,
        spin_up_time: pint.Quantity | None = None,
        phase_count: int = 3,
    ) -> None:
        """Initialize a stopped generator.

        Args:
            name: Component identifier.
            num_poles: Number of magnetic poles.
            rated_power: Maximum electrical output power.
            rated_voltage: No-load output voltage.
            rated_frequency: Output frequency at rated shaft speed.
            efficiency: Mechanical-to-electrical efficiency, clamped to [0, 1].
            internal_resistance: Winding resistance causing droop under load.
            spin_up_time: Time from start to full speed. None or zero means
                full speed on the first tick.
            phase_count: Number of output phases.

        Raises:
            ValueError: If a rating is not positive, the resistance is
                negative or the pole or phase count is below one.
        """
        super().__init__(name)

        if num_poles < 1:
            raise ValueError(f"num_poles must be >= 1, got {num_poles}")
        if phase_count < 1:
            raise ValueError(f"phase_count must be >= 1, got {phase_count}")
        if rated_power.to("watt").magnitude <= 0:
            raise ValueError(f"rated_power must be > 0, got {rated_power}")
        if rated_voltage.to("volt").magnitude <= 0:
            raise ValueError(f"rated_voltage must be > 0, got {rated_voltage}")
        if rated_frequency.to("hertz").magnitude <= 0:
            raise ValueError(f"rated_frequency must be > 0, got {rated_frequency}")
        if internal_resistance.to("ohm").magnitude < 0:
            raise ValueError(f"internal_resistance must be >= 0, got {internal_resistance}")

        self.num_poles = num_poles
        self.rated_power = rated_power.to("watt")
        self.rated_voltage = rated_voltage.to("volt")
        self.rated_frequency = rated_frequency.to("hertz")
        self.efficiency = clamp_ratio(efficiency)
        self.internal_resistance = internal_resistance.to("ohm")
        self.spin_up_time = (spin_up_time if spin_up_time is not None else milliseconds(0)).to(
            "millisecond"
        )
        self.phase_count = phase_count

        self.expected_speed = rpm(self.rated_frequency.magnitude * 60.0 / num_poles)

        # Mechanical drive
        self._mechanical_power = watts(0.0)
        self._drive_speed = self.expected_speed

        # Running state
        self._is_on = False
        self._time_on = milliseconds(0.0)
        self._current_speed = rpm(0.0)
        self._spun_up = False

        # Outputs
        self._output_voltage = volts(0.0)
        self._output_power = watts(0.0)

    @classmethod
    def from_config(cls, config: dict[str, Any]) -> "Generator":
        """Create a generator from a configuration dictionary.

        Args:
            config: Parameters, e.g. ``{"name": "gen", "num_poles": 2,
                "rated_power": "90 kW", "rated_voltage_v": 115, ...}``.

        Returns:
            Configured, stopped generator.

        Raises:
            ValueError: If a parameter is missing or malformed.
        """
        return cls(
            name=config.get("name", "generator"),
            num_poles=int(config.get("num_poles", 2)),
            rated_power=quantity_from_config(config, "rated_power", "watt", "w"),
            rated_voltage=quantity_from_config(config, "rated_voltage", "volt", "v"),
            rated_frequency=quantity_from_config(config, "rated_frequency", "hertz", "hz"),
            efficiency=float(config.get("efficiency", 1.0)),
            internal_resistance=quantity_from_config(
                config, "internal_resistance", "ohm", "ohm", default=0.0
            ),
            spin_up_time=quantity_from_config(
                config, "spin_up_time", "millisecond", "ms", default=0.0
            ),
            phase_count=int(config.get("phase_count", 3)),
        )

    @property
    def is_on(self) -> bool:
        """Whether the generator has been commanded on."""
        return self._is_on

    @property
    def state(self) -> GeneratorState:
        """Current operating state."""
        if not self._is_on:
            return GeneratorState.OFF
        if self._spun_up:
            return GeneratorState.AT_SPEED
        return GeneratorState.SPINNING_UP

    @property
    def current_speed(self) -> pint.Quantity:
        """Present shaft speed."""
        return self._current_speed

    @property
    def time_on(self) -> pint.Quantity:
        """Time accumulated since the last start."""
        return self._time_on

    def turn_on(self) -> None:
        """Start the generator, restarting the spin-up from zero."""
        self._is_on = True
        self._time_on = milliseconds(0.0)
        self._spun_up = False
        logger.info("Generator %s started", self.name)

    def turn_off(self) -> None:
        """Stop the generator and de-energize its output."""
        was_on = self._is_on
        self._is_on = False
        self._spun_up = False
        self._zero_outputs()
        if was_on:
            logger.info("Generator %s stopped", self.name)

    def set_mechanical_input(self, power: pint.Quantity, speed: pint.Quantity) -> None:
        """Set the mechanical drive applied to the shaft.

        Ignored while the generator is off.

        Args:
            power: Mechanical input power.
            speed: Drive shaft speed.
        """
        if not self._is_on:
            return

        self._mechanical_power = power.to("watt")
        self._drive_speed = speed.to("revolutions_per_minute")

    def update(self, dt: float) -> None:
        """Advance spin-up and recompute the electrical output.

        Args:
            dt: Elapsed time in milliseconds.
        """
        if not self._is_on:
            self._zero_outputs()
            return

        if dt <= 0:
            return

        self._time_on += milliseconds(dt)

        if self.spin_up_time.magnitude > 0:
            spin_progress = (self._time_on / self.spin_up_time).to("dimensionless").magnitude
            spin_progress = min(1.0, spin_progress)
        else:
            spin_progress = 1.0

        self._current_speed = self._drive_speed * spin_progress

        speed_ratio = (self._current_speed / self.expected_speed).to("dimensionless").magnitude
        speed_ratio = min(1.0, speed_ratio)
        efficiency_factor = self.efficiency * speed_ratio

        available_power = self._mechanical_power * efficiency_factor
        self._output_power = min(available_power, self.rated_power)

        # Whole-machine approximation of the load current
        droop_current = (self._output_power / self.rated_voltage * self.phase_count).to("ampere")
        voltage_drop = (droop_current * self.internal_resistance).to("volt")
        self._output_voltage = max(volts(0.0), self.rated_voltage - voltage_drop)

        if spin_progress >= 1.0 and not self._spun_up:
            self._spun_up = True
            logger.info(
                "Generator %s at speed: %.0f rpm, %.1f V, %.0f W",
                self.name,
                self._current_speed.magnitude,
                self._output_voltage.magnitude,
                self._output_power.magnitude,
            )

    def _zero_outputs(self) -> None:
        self._output_voltage = volts(0.0)
        self._output_power = watts(0.0)
        self._current_speed = rpm(0.0)

    def get_output_voltage(self) -> pint.Quantity:
        """Get the terminal voltage after droop."""
        return self._output_voltage

    def get_output_power(self) -> pint.Quantity:
        """Get the electrical output power."""
        return self._output_power

    def set_input_voltage(self, voltage: pint.Quantity) -> None:
        """Ignored: the generator is a source."""

    def set_input_power(self, power: pint.Quantity) -> None:
        """Ignored: the generator is a source."""

    def set_input_current(self, current: pint.Quantity) -> None:
        """Ignored: the generator is a source."""
