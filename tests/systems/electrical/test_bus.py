"""Tests for the distribution bus."""

import pytest

from aerotwin.core.units import amps, volts, watts
from aerotwin.systems.electrical import Bus, ComponentKind


class TestBus:
    """Test pass-through behavior."""

    def test_starts_de_energized(self) -> None:
        """Test a new bus carries nothing."""
        bus = Bus("main_bus", nominal_voltage=volts(28))

        assert bus.kind == ComponentKind.BUS
        assert bus.get_output_voltage().magnitude == 0.0
        assert bus.get_output_power().magnitude == 0.0
        assert bus.get_output_current().magnitude == 0.0

    def test_passes_inputs_through(self) -> None:
        """Test outputs mirror the last inputs."""
        bus = Bus("main_bus")
        bus.set_input_voltage(volts(27.5))
        bus.set_input_power(watts(5500))
        bus.set_input_current(amps(3.0))

        bus.update(16.0)

        assert bus.get_output_voltage().magnitude == pytest.approx(27.5)
        assert bus.get_output_power().magnitude == pytest.approx(5500.0)
        assert bus.get_input_current().magnitude == pytest.approx(3.0)

    def test_output_current_from_power(self) -> None:
        """Test the derived output current is power over voltage."""
        bus = Bus("main_bus")
        bus.set_input_voltage(volts(28))
        bus.set_input_power(watts(280))

        assert bus.get_output_current().magnitude == pytest.approx(10.0)

    def test_outputs_follow_inputs_without_update(self) -> None:
        """Test a bus has no state of its own to advance."""
        bus = Bus("main_bus")
        bus.set_input_voltage(volts(28))
        bus.set_input_voltage(volts(0))

        assert bus.get_output_voltage().magnitude == 0.0

    def test_from_config(self) -> None:
        """Test creation from a configuration dictionary."""
        bus = Bus.from_config({"name": "ess_bus", "nominal_voltage": "28 V"})

        assert bus.name == "ess_bus"
        assert bus.nominal_voltage.magnitude == pytest.approx(28.0)
        assert Bus.from_config({"name": "plain"}).nominal_voltage is None
