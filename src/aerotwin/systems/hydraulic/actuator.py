"""Single-rod linear hydraulic actuator.

Models a cylinder with two variable-volume chambers (cap end and rod end)
fed through a metering valve. The actuator is not part of any electrical
network; its owner steps it directly with a time quantity.

Per update:
    1. Commanded flow into the cap chamber = valve opening x max flow rate.
       The rod chamber is only fed by leakage.
    2. Internal leakage = k_int x (p_cap - p_rod); external leakage from each
       chamber = k_ext x that chamber's pressure.
    3. Pressure change per chamber = -bulk_modulus x net_flow x dt / volume.
    4. Hydraulic force = p_cap x A_cap - p_rod x A_rod, plus the external
       force, less friction. Below a near-zero velocity, static friction
       cancels driving forces up to its limit; above it, friction is viscous.
    5. a = F / m; v += a dt; x += v dt + a dt^2 / 2; x is clamped to the
       stroke and v, a are zeroed when driving into an end stop.
    6. Chamber volumes follow the new position.

Simplifications: the moving mass is a fixed 1 kg placeholder, and each
chamber keeps a small dead volume so its volume never reaches zero.

Typical usage:
    actuator = HydraulicActuator(HydraulicActuatorConfig())
    actuator.set_valve_opening(1.0)
    actuator.set_supply_pressure(psi(3000))
    actuator.update(milliseconds(16))
    print(actuator.extension_ratio())
"""

import math
from dataclasses import dataclass, field
from typing import Any

import numpy as np
import pint

from aerotwin.core.logging_system import get_logger
from aerotwin.core.units import (
    Q_,
    clamp_ratio,
    cubic_meters,
    cubic_meters_per_second,
    kilograms,
    meters,
    meters_per_second,
    millimeters,
    newtons,
    pascals,
    quantity_from_config,
)

logger = get_logger(__name__)

# Moving mass placeholder (piston, rod and fluid are not modeled)
EFFECTIVE_MASS = kilograms(1.0)

# Below this speed the piston is considered stationary (stiction regime)
VELOCITY_THRESHOLD = meters_per_second(1e-6)


def _ensure_positive(value: pint.Quantity, name: str) -> None:
    if value.magnitude <= 0:
        raise ValueError(f"{name} must be > 0, got {value}")


def _ensure_non_negative(value: pint.Quantity | float, name: str) -> None:
    magnitude = value.magnitude if isinstance(value, pint.Quantity) else value
    if magnitude < 0:
        raise ValueError(f"{name} must be >= 0, got {value}")


def _circle_area(diameter: pint.Quantity) -> pint.Quantity:
    radius = diameter / 2.0
    return (math.pi * radius**2).to("meter**2")


@dataclass
class HydraulicActuatorConfig:
    """Configuration for a hydraulic actuator.

    Leakage coefficients are plain floats in m^3/(s*Pa); the dynamic friction
    coefficient is in N/(m/s).
    """

    bore_diameter: pint.Quantity = field(default_factory=lambda: millimeters(50.0))
    rod_diameter: pint.Quantity = field(default_factory=lambda: millimeters(25.0))
    stroke_length: pint.Quantity = field(default_factory=lambda: millimeters(200.0))
    fluid_bulk_modulus: pint.Quantity = field(default_factory=lambda: pascals(1.5e9))
    valve_max_flow_rate: pint.Quantity = field(
        default_factory=lambda: cubic_meters_per_second(1e-6)
    )
    static_friction: pint.Quantity = field(default_factory=lambda: newtons(50.0))
    dynamic_friction_coefficient: float = 100.0
    internal_leakage_coefficient: float = 0.0
    external_leakage_coefficient: float = 0.0
    dead_volume: pint.Quantity = field(default_factory=lambda: cubic_meters(1e-5))
    initial_position: pint.Quantity = field(default_factory=lambda: millimeters(0.0))

    @classmethod
    def from_config(cls, config: dict[str, Any]) -> "HydraulicActuatorConfig":
        """Create a configuration from a dictionary.

        Missing keys keep their defaults. Quantities accept unit-suffixed
        numbers (``bore_diameter_mm: 50``) or unit strings
        (``fluid_bulk_modulus: "1.5 GPa"``).

        Raises:
            ValueError: If a value is malformed.
        """
        defaults = cls()

        def read(key: str, unit: str, suffix: str, default: pint.Quantity) -> pint.Quantity:
            return quantity_from_config(config, key, unit, suffix, default=default.to(unit))

        return cls(
            bore_diameter=read("bore_diameter", "millimeter", "mm", defaults.bore_diameter),
            rod_diameter=read("rod_diameter", "millimeter", "mm", defaults.rod_diameter),
            stroke_length=read("stroke_length", "millimeter", "mm", defaults.stroke_length),
            fluid_bulk_modulus=read(
                "fluid_bulk_modulus", "pascal", "pa", defaults.fluid_bulk_modulus
            ),
            valve_max_flow_rate=read(
                "valve_max_flow_rate", "meter**3/second", "m3_s", defaults.valve_max_flow_rate
            ),
            static_friction=read("static_friction", "newton", "n", defaults.static_friction),
            dynamic_friction_coefficient=float(
                config.get("dynamic_friction_coefficient", defaults.dynamic_friction_coefficient)
            ),
            internal_leakage_coefficient=float(
                config.get("internal_leakage_coefficient", defaults.internal_leakage_coefficient)
            ),
            external_leakage_coefficient=float(
                config.get("external_leakage_coefficient", defaults.external_leakage_coefficient)
            ),
            dead_volume=read("dead_volume", "meter**3", "m3", defaults.dead_volume),
            initial_position=read(
                "initial_position", "millimeter", "mm", defaults.initial_position
            ),
        )


class HydraulicActuator:
    """Single-rod linear actuator with two compressible chambers.

    Examples:
        >>> actuator = HydraulicActuator(HydraulicActuatorConfig(), name="nose_gear")
        >>> actuator.set_valve_opening(1.0)
        >>> actuator.set_supply_pressure(pascals(2.0e7))
        >>> actuator.update(milliseconds(16))
        >>> actuator.extension_ratio()
        1.0
    """

    def __init__(self, config: HydraulicActuatorConfig, name: str = "actuator") -> None:
        """Initialize an actuator at rest.

        Args:
            config: Geometry, fluid, valve and friction parameters.
            name: Identifier used in diagnostics.

        Raises:
            ValueError: If the geometry or a coefficient is physically invalid.
        """
        self.name = name

        _ensure_positive(config.bore_diameter, "bore_diameter")
        _ensure_positive(config.rod_diameter, "rod_diameter")
        _ensure_positive(config.stroke_length, "stroke_length")
        _ensure_positive(config.fluid_bulk_modulus, "fluid_bulk_modulus")
        _ensure_positive(config.dead_volume, "dead_volume")
        _ensure_non_negative(config.valve_max_flow_rate, "valve_max_flow_rate")
        _ensure_non_negative(config.static_friction, "static_friction")
        _ensure_non_negative(config.dynamic_friction_coefficient, "dynamic_friction_coefficient")
        _ensure_non_negative(config.internal_leakage_coefficient, "internal_leakage_coefficient")
        _ensure_non_negative(config.external_leakage_coefficient, "external_leakage_coefficient")

        if config.rod_diameter >= config.bore_diameter:
            raise ValueError(
                f"rod_diameter ({config.rod_diameter}) must be smaller than "
                f"bore_diameter ({config.bore_diameter})"
            )

        self.stroke_length = config.stroke_length.to("meter")
        if not (meters(0.0) <= config.initial_position <= self.stroke_length):
            raise ValueError(
                f"initial_position must be within [0, {self.stroke_length}], "
                f"got {config.initial_position}"
            )

        self.config = config
        self.cap_area = _circle_area(config.bore_diameter)
        self.rod_area = self.cap_area - _circle_area(config.rod_diameter)
        self.bulk_modulus = config.fluid_bulk_modulus.to("pascal")
        self.max_flow_rate = config.valve_max_flow_rate.to("meter**3/second")
        self.static_friction = config.static_friction.to("newton")
        self.dead_volume = config.dead_volume.to("meter**3")

        # Leakage coefficients, m^3/(s*Pa)
        self._internal_leakage = Q_(config.internal_leakage_coefficient, "meter**3/second/pascal")
        self._external_leakage = Q_(config.external_leakage_coefficient, "meter**3/second/pascal")
        # Viscous friction, N/(m/s)
        self._viscous_friction = Q_(config.dynamic_friction_coefficient, "newton*second/meter")

        # Motion state
        self._position = config.initial_position.to("meter")
        self._velocity = meters_per_second(0.0)
        self._acceleration = Q_(0.0, "meter/second**2")

        # Chamber state
        self._cap_pressure = pascals(0.0)
        self._rod_pressure = pascals(0.0)
        self._cap_volume, self._rod_volume = self._chamber_volumes()

        # Commands
        self._valve_opening = 0.0
        self._external_force = newtons(0.0)

    @classmethod
    def from_config(cls, config: dict[str, Any]) -> "HydraulicActuator":
        """Create an actuator from a configuration dictionary."""
        return cls(HydraulicActuatorConfig.from_config(config), name=config.get("name", "actuator"))

    def set_valve_opening(self, opening: float) -> None:
        """Set the valve opening, clamped to [0, 1]."""
        self._valve_opening = clamp_ratio(opening)

    def set_supply_pressure(self, pressure: pint.Quantity) -> None:
        """Apply supply pressure to the cap chamber.

        Only takes effect while the valve is open.
        """
        if self._valve_opening > 0:
            self._cap_pressure = pressure.to("pascal")

    def set_external_force(self, force: pint.Quantity) -> None:
        """Set the external load on the rod (positive pushes toward extension)."""
        self._external_force = force.to("newton")

    def update(self, delta_time: pint.Quantity) -> None:
        """Integrate pressures and motion over one step.

        Args:
            delta_time: Step duration (any time unit). Zero or negative steps
                leave the state unchanged.
        """
        dt = delta_time.to("second")
        if dt.magnitude <= 0:
            return

        cap_flow = self.max_flow_rate * self._valve_opening
        rod_flow = cubic_meters_per_second(0.0)

        # Leakage
        internal_leakage = (self._internal_leakage * (self._cap_pressure - self._rod_pressure)).to(
            "meter**3/second"
        )
        cap_external_leakage = (self._external_leakage * self._cap_pressure).to("meter**3/second")
        rod_external_leakage = (self._external_leakage * self._rod_pressure).to("meter**3/second")

        net_cap_flow = cap_flow - internal_leakage - cap_external_leakage
        net_rod_flow = rod_flow - internal_leakage - rod_external_leakage

        # Compressibility
        self._cap_pressure -= (self.bulk_modulus * (net_cap_flow * dt / self._cap_volume)).to(
            "pascal"
        )
        self._rod_pressure -= (self.bulk_modulus * (net_rod_flow * dt / self._rod_volume)).to(
            "pascal"
        )

        # Forces
        hydraulic_force = (
            self._cap_pressure * self.cap_area - self._rod_pressure * self.rod_area
        ).to("newton")
        driving_force = hydraulic_force + self._external_force

        if abs(self._velocity) < VELOCITY_THRESHOLD:
            friction = max(-self.static_friction, min(self.static_friction, driving_force))
        else:
            friction = (self._viscous_friction * self._velocity).to("newton")

        net_force = driving_force - friction

        # Motion
        self._acceleration = (net_force / EFFECTIVE_MASS).to("meter/second**2")
        self._velocity = self._velocity + (self._acceleration * dt).to("meter/second")
        position = self._position + (self._velocity * dt + 0.5 * self._acceleration * dt**2).to(
            "meter"
        )

        self._position = max(meters(0.0), min(self.stroke_length, position))

        at_retracted_stop = self._position <= meters(0.0) and self._velocity.magnitude < 0
        at_extended_stop = self._position >= self.stroke_length and self._velocity.magnitude > 0
        if at_retracted_stop or at_extended_stop:
            logger.debug(
                "Actuator %s reached %s end stop",
                self.name,
                "extended" if at_extended_stop else "retracted",
            )
            self._velocity = meters_per_second(0.0)
            self._acceleration = Q_(0.0, "meter/second**2")

        self._cap_volume, self._rod_volume = self._chamber_volumes()

    def _chamber_volumes(self) -> tuple[pint.Quantity, pint.Quantity]:
        cap_volume = (self.cap_area * self._position).to("meter**3") + self.dead_volume
        rod_volume = (self.rod_area * (self.stroke_length - self._position)).to(
            "meter**3"
        ) + self.dead_volume
        return cap_volume, rod_volume

    def position(self) -> pint.Quantity:
        """Rod position measured from full retraction."""
        return self._position

    def velocity(self) -> pint.Quantity:
        """Rod velocity (positive when extending)."""
        return self._velocity

    def acceleration(self) -> pint.Quantity:
        return self._acceleration

    def pressure(self) -> pint.Quantity:
        """Cap-end chamber pressure."""
        return self._cap_pressure

    def rod_pressure(self) -> pint.Quantity:
        """Rod-end chamber pressure."""
        return self._rod_pressure

    def valve_opening(self) -> float:
        return self._valve_opening

    def external_force(self) -> pint.Quantity:
        return self._external_force

    def extension_ratio(self) -> float:
        """Position as a fraction of the stroke length, in [0, 1]."""
        return (self._position / self.stroke_length).to("dimensionless").magnitude

    def state_vector(self) -> np.ndarray:
        """Get the continuous state in SI units.

        Returns:
            Array ``[position_m, velocity_m_s, acceleration_m_s2,
            cap_pressure_pa, rod_pressure_pa, cap_volume_m3, rod_volume_m3]``.
        """
        return np.array(
            [
                self._position.m_as("meter"),
                self._velocity.m_as("meter/second"),
                self._acceleration.m_as("meter/second**2"),
                self._cap_pressure.m_as("pascal"),
                self._rod_pressure.m_as("pascal"),
                self._cap_volume.m_as("meter**3"),
                self._rod_volume.m_as("meter**3"),
            ],
            dtype=np.float64,
        )
