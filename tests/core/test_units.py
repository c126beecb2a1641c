"""Tests for unit helpers and configuration quantity parsing."""

import pint
import pytest

from aerotwin.core.units import (
    amps,
    clamp_ratio,
    ohms,
    parse_quantity,
    psi,
    quantity_from_config,
    rpm,
    volts,
    watts,
)


class TestQuantityHelpers:
    """Test quantity constructors."""

    def test_ohms_law(self) -> None:
        """Test quantities combine with dimensional analysis."""
        current = (volts(28.0) - volts(27.5)) / ohms(0.01)
        assert current.to("ampere").magnitude == pytest.approx(50.0)

    def test_incompatible_units_raise(self) -> None:
        """Test adding incompatible dimensions raises."""
        with pytest.raises(pint.DimensionalityError):
            _ = volts(28.0) + amps(1.0)

    def test_rpm_conversion(self) -> None:
        """Test rpm converts to revolutions per second."""
        assert rpm(60.0).to("revolutions_per_second").magnitude == pytest.approx(1.0)

    def test_psi_to_pascal(self) -> None:
        """Test pressure conversion."""
        assert psi(3000.0).to("pascal").magnitude == pytest.approx(2.068e7, rel=1e-3)


class TestParseQuantity:
    """Test parsing configuration values into quantities."""

    def test_number_takes_default_unit(self) -> None:
        """Test a plain number is read in the default unit."""
        assert parse_quantity(28, "volt") == volts(28.0)

    def test_string_with_units(self) -> None:
        """Test a unit string is parsed and converted."""
        power = parse_quantity("90 kW", "watt")
        assert power.units == watts(1.0).units
        assert power.magnitude == pytest.approx(90000.0)

    def test_bare_numeric_string(self) -> None:
        """Test a numeric string without units takes the default unit."""
        assert parse_quantity("15", "ampere").magnitude == pytest.approx(15.0)

    def test_quantity_is_converted(self) -> None:
        """Test an existing quantity is converted to the default unit."""
        resistance = parse_quantity(ohms(0.5), "milliohm")
        assert resistance.magnitude == pytest.approx(500.0)

    def test_wrong_dimensions_raise(self) -> None:
        """Test incompatible units raise ValueError."""
        with pytest.raises(ValueError, match="not compatible"):
            parse_quantity("28 V", "ampere")

    def test_unparseable_string_raises(self) -> None:
        """Test garbage strings raise ValueError."""
        with pytest.raises(ValueError, match="Cannot parse"):
            parse_quantity("twenty-eight bananas", "volt")

    def test_boolean_rejected(self) -> None:
        """Test booleans are not accepted as numbers."""
        with pytest.raises(ValueError):
            parse_quantity(True, "volt")

    def test_none_rejected(self) -> None:
        """Test None is not a quantity."""
        with pytest.raises(ValueError):
            parse_quantity(None, "volt")


class TestQuantityFromConfig:
    """Test reading quantities from component configuration."""

    def test_suffixed_key_wins(self) -> None:
        """Test the unit-suffixed key is preferred over the plain key."""
        config = {"rating_a": 15, "rating": "20 A"}
        assert quantity_from_config(config, "rating", "ampere", "a").magnitude == 15.0

    def test_plain_key_with_units(self) -> None:
        """Test the plain key accepts unit strings."""
        config = {"rated_power": "90 kW"}
        power = quantity_from_config(config, "rated_power", "watt", "w")
        assert power.magnitude == pytest.approx(90000.0)

    def test_default_used_when_missing(self) -> None:
        """Test the default applies when neither key is present."""
        delay = quantity_from_config({}, "delay", "second", "s", default=0.5)
        assert delay.magnitude == 0.5

    def test_missing_required_raises(self) -> None:
        """Test a missing required parameter raises ValueError."""
        with pytest.raises(ValueError, match="rated_voltage"):
            quantity_from_config({}, "rated_voltage", "volt", "v")


class TestClampRatio:
    """Test ratio clamping."""

    @pytest.mark.parametrize(
        "value,expected",
        [(-0.5, 0.0), (0.0, 0.0), (0.42, 0.42), (1.0, 1.0), (7.0, 1.0)],
    )
    def test_clamp(self, value: float, expected: float) -> None:
        """Test values are clamped into [0, 1]."""
        assert clamp_ratio(value) == expected
