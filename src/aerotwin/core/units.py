"""Physical units for component state.

Every physical quantity held by a component (voltage, current, power,
resistance, speed, time, pressure, ...) is a pint Quantity built from the
single registry defined here. Mixing incompatible dimensions raises
``pint.DimensionalityError`` at the offending operation instead of silently
producing a wrong number.

Typical usage example:
    from aerotwin.core.units import amps, ohms, volts

    current = (volts(28.0) - volts(27.5)) / ohms(0.01)
    assert current > amps(15.0)
"""

from typing import Any

import pint

ureg = pint.UnitRegistry()
Q_ = ureg.Quantity


def volts(value: float) -> pint.Quantity:
    """Electric potential in volts."""
    return Q_(float(value), ureg.volt)


def amps(value: float) -> pint.Quantity:
    """Electric current in amperes."""
    return Q_(float(value), ureg.ampere)


def watts(value: float) -> pint.Quantity:
    """Power in watts."""
    return Q_(float(value), ureg.watt)


def ohms(value: float) -> pint.Quantity:
    """Electrical resistance in ohms."""
    return Q_(float(value), ureg.ohm)


def hertz(value: float) -> pint.Quantity:
    """Frequency in hertz."""
    return Q_(float(value), ureg.hertz)


def rpm(value: float) -> pint.Quantity:
    """Angular velocity in revolutions per minute."""
    return Q_(float(value), ureg.revolutions_per_minute)


def milliseconds(value: float) -> pint.Quantity:
    """Time in milliseconds."""
    return Q_(float(value), ureg.millisecond)


def seconds(value: float) -> pint.Quantity:
    """Time in seconds."""
    return Q_(float(value), ureg.second)


def millimeters(value: float) -> pint.Quantity:
    """Length in millimeters."""
    return Q_(float(value), ureg.millimeter)


def meters(value: float) -> pint.Quantity:
    """Length in meters."""
    return Q_(float(value), ureg.meter)


def meters_per_second(value: float) -> pint.Quantity:
    """Velocity in meters per second."""
    return Q_(float(value), ureg.meter / ureg.second)


def pascals(value: float) -> pint.Quantity:
    """Pressure in pascals."""
    return Q_(float(value), ureg.pascal)


def psi(value: float) -> pint.Quantity:
    """Pressure in pounds per square inch."""
    return Q_(float(value), ureg.psi)


def newtons(value: float) -> pint.Quantity:
    """Force in newtons."""
    return Q_(float(value), ureg.newton)


def kilograms(value: float) -> pint.Quantity:
    """Mass in kilograms."""
    return Q_(float(value), ureg.kilogram)


def cubic_meters(value: float) -> pint.Quantity:
    """Volume in cubic meters."""
    return Q_(float(value), ureg.meter**3)


def cubic_meters_per_second(value: float) -> pint.Quantity:
    """Volumetric flow rate in cubic meters per second."""
    return Q_(float(value), ureg.meter**3 / ureg.second)


def parse_quantity(value: Any, default_unit: str) -> pint.Quantity:
    """Parse a configuration value into a quantity.

    Numbers are interpreted in ``default_unit``. Strings are parsed by pint
    and must carry units compatible with ``default_unit`` (a bare numeric
    string also takes the default unit).

    Args:
        value: Number, quantity, or string such as ``"90 kW"`` or ``"3000 psi"``.
        default_unit: Unit expression used for bare numbers and as the
            dimensionality reference (e.g. ``"watt"``).

    Returns:
        The parsed quantity, expressed in ``default_unit``.

    Raises:
        ValueError: If the value cannot be parsed or has the wrong dimensions.

    Examples:
        >>> parse_quantity("90 kW", "watt")
        <Quantity(90000.0, 'watt')>
        >>> parse_quantity(28, "volt")
        <Quantity(28.0, 'volt')>
    """
    if isinstance(value, bool):
        raise ValueError(f"Expected a quantity in {default_unit}, got {value!r}")

    if isinstance(value, (int, float)):
        return Q_(float(value), default_unit)

    if isinstance(value, pint.Quantity):
        try:
            return value.to(default_unit)
        except pint.DimensionalityError as e:
            raise ValueError(f"Quantity {value} is not compatible with {default_unit}") from e

    if isinstance(value, str):
        try:
            parsed = ureg.Quantity(value)
        except Exception as e:
            raise ValueError(f"Cannot parse quantity {value!r}: {e}") from e

        if parsed.dimensionless and not parsed.unitless:
            raise ValueError(f"Quantity {value!r} has no physical units")
        if parsed.unitless:
            return Q_(float(parsed.magnitude), default_unit)

        try:
            return parsed.to(default_unit)
        except pint.DimensionalityError as e:
            raise ValueError(
                f"Quantity {value!r} is not compatible with {default_unit}"
            ) from e

    raise ValueError(f"Expected a quantity in {default_unit}, got {value!r}")


def clamp_ratio(value: float) -> float:
    """Clamp a dimensionless ratio into [0, 1]."""
    return max(0.0, min(1.0, float(value)))


def quantity_from_config(
    config: dict[str, Any],
    key: str,
    unit: str,
    suffix: str,
    default: Any = None,
) -> pint.Quantity:
    """Read a quantity from a component configuration mapping.

    Looks for ``<key>_<suffix>`` (a plain number in ``unit``) first, then for
    ``key`` (a number or a string with units), then falls back to ``default``.

    Args:
        config: Component configuration dictionary.
        key: Parameter name without unit suffix (e.g. ``"rated_power"``).
        unit: Unit of the returned quantity (e.g. ``"watt"``).
        suffix: Unit suffix used by plain-number keys (e.g. ``"w"``).
        default: Value used when neither key is present. None makes the
            parameter required.

    Returns:
        The quantity, expressed in ``unit``.

    Raises:
        ValueError: If the parameter is required and missing, or malformed.

    Examples:
        >>> quantity_from_config({"rated_power_w": 90000}, "rated_power", "watt", "w")
        <Quantity(90000.0, 'watt')>
        >>> quantity_from_config({"rated_power": "90 kW"}, "rated_power", "watt", "w")
        <Quantity(90000.0, 'watt')>
    """
    suffixed_key = f"{key}_{suffix}"
    if suffixed_key in config:
        value = config[suffixed_key]
    elif key in config:
        value = config[key]
    elif default is not None:
        value = default
    else:
        raise ValueError(f"Missing required parameter '{key}' (or '{suffixed_key}')")

    return parse_quantity(value, unit)
