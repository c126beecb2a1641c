"""Tests for the engine-driven generator."""

import pytest

from aerotwin.core.units import hertz, milliseconds, ohms, rpm, volts, watts
from aerotwin.systems.electrical import ComponentKind, Generator, GeneratorState


def make_generator(**overrides) -> Generator:
    """Create a 115 V, 90 kW, 400 Hz two-pole generator."""
    params = {
        "name": "main_generator",
        "num_poles": 2,
        "rated_power": watts(90000),
        "rated_voltage": volts(115),
        "rated_frequency": hertz(400),
        "efficiency": 0.95,
        "internal_resistance": ohms(0.005),
    }
    params.update(overrides)
    return Generator(**params)


class TestGeneratorConstruction:
    """Test generator creation and validation."""

    def test_initial_state(self) -> None:
        """Test a new generator is stopped and de-energized."""
        generator = make_generator()

        assert generator.kind == ComponentKind.GENERATOR
        assert generator.state == GeneratorState.OFF
        assert not generator.is_on
        assert generator.get_output_voltage().magnitude == 0.0
        assert generator.get_output_power().magnitude == 0.0

    def test_expected_speed(self) -> None:
        """Test the shaft speed implied by frequency and pole count."""
        assert make_generator().expected_speed.magnitude == pytest.approx(12000.0)
        assert make_generator(num_poles=4).expected_speed.magnitude == pytest.approx(6000.0)

    @pytest.mark.parametrize(
        "overrides",
        [
            {"num_poles": 0},
            {"phase_count": 0},
            {"rated_power": watts(0)},
            {"rated_voltage": volts(-115)},
            {"rated_frequency": hertz(0)},
            {"internal_resistance": ohms(-0.1)},
        ],
    )
    def test_invalid_parameters(self, overrides: dict) -> None:
        """Test physically invalid parameters are rejected."""
        with pytest.raises(ValueError):
            make_generator(**overrides)

    def test_efficiency_is_clamped(self) -> None:
        """Test efficiency outside [0, 1] is clamped."""
        assert make_generator(efficiency=1.5).efficiency == 1.0

    def test_from_config(self) -> None:
        """Test creation from a configuration dictionary."""
        generator = Generator.from_config(
            {
                "name": "gen",
                "num_poles": 2,
                "rated_power": "90 kW",
                "rated_voltage_v": 115,
                "rated_frequency_hz": 400,
                "efficiency": 0.95,
                "internal_resistance_ohm": 0.05,
                "spin_up_time_ms": 2000,
            }
        )

        assert generator.name == "gen"
        assert generator.rated_power.magnitude == pytest.approx(90000.0)
        assert generator.spin_up_time.magnitude == pytest.approx(2000.0)
        assert generator.phase_count == 3

    def test_from_config_missing_rating(self) -> None:
        """Test a missing rating is reported."""
        with pytest.raises(ValueError, match="rated_voltage"):
            Generator.from_config(
                {"name": "gen", "rated_power_w": 90000, "rated_frequency_hz": 400}
            )


class TestGeneratorOperation:
    """Test generator output computation."""

    def test_off_generator_produces_nothing(self) -> None:
        """Test an off generator stays de-energized whatever its drive."""
        generator = make_generator()
        generator.set_mechanical_input(watts(80000), rpm(12000))

        generator.update(16.0)

        assert generator.get_output_voltage().magnitude == 0.0
        assert generator.get_output_power().magnitude == 0.0

    def test_instant_spin_up_with_droop(self) -> None:
        """Test output power and drooped voltage at full speed."""
        generator = make_generator()
        generator.turn_on()
        generator.set_mechanical_input(watts(80000), rpm(12000))

        generator.update(16.0)

        # 80 kW x 0.95 = 76 kW; droop current = 76000 / 115 x 3
        assert generator.state == GeneratorState.AT_SPEED
        assert generator.get_output_power().magnitude == pytest.approx(76000.0)
        expected_voltage = 115.0 - (76000.0 / 115.0 * 3.0) * 0.005
        assert generator.get_output_voltage().magnitude == pytest.approx(expected_voltage)

    def test_power_capped_at_rating(self) -> None:
        """Test electrical output never exceeds the rated power."""
        generator = make_generator()
        generator.turn_on()
        generator.set_mechanical_input(watts(200000), rpm(12000))

        generator.update(16.0)

        assert generator.get_output_power().magnitude == pytest.approx(90000.0)

    def test_voltage_never_negative(self) -> None:
        """Test a huge droop clamps the voltage at zero."""
        generator = make_generator(internal_resistance=ohms(10.0))
        generator.turn_on()
        generator.set_mechanical_input(watts(80000), rpm(12000))

        generator.update(16.0)

        assert generator.get_output_voltage().magnitude == 0.0

    def test_spin_up_progress(self) -> None:
        """Test speed and power ramp over the spin-up time."""
        generator = make_generator(spin_up_time=milliseconds(1000))
        generator.turn_on()
        generator.set_mechanical_input(watts(80000), rpm(12000))

        generator.update(250.0)

        assert generator.state == GeneratorState.SPINNING_UP
        assert generator.current_speed.magnitude == pytest.approx(3000.0)
        assert generator.get_output_power().magnitude == pytest.approx(80000.0 * 0.95 * 0.25)

        for _ in range(3):
            generator.update(250.0)

        assert generator.state == GeneratorState.AT_SPEED
        assert generator.current_speed.magnitude == pytest.approx(12000.0)
        assert generator.time_on.magnitude == pytest.approx(1000.0)

    def test_underspeed_derates_efficiency(self) -> None:
        """Test a slow drive shaft derates the conversion efficiency."""
        generator = make_generator()
        generator.turn_on()
        generator.set_mechanical_input(watts(80000), rpm(6000))

        generator.update(16.0)

        assert generator.get_output_power().magnitude == pytest.approx(80000.0 * 0.95 * 0.5)

    def test_overspeed_does_not_boost(self) -> None:
        """Test a fast drive shaft does not raise efficiency above rating."""
        generator = make_generator()
        generator.turn_on()
        generator.set_mechanical_input(watts(10000), rpm(24000))

        generator.update(16.0)

        assert generator.get_output_power().magnitude == pytest.approx(9500.0)

    def test_zero_dt_keeps_state(self) -> None:
        """Test a zero time step changes nothing."""
        generator = make_generator(spin_up_time=milliseconds(1000))
        generator.turn_on()
        generator.set_mechanical_input(watts(80000), rpm(12000))
        generator.update(500.0)
        voltage = generator.get_output_voltage()

        generator.update(0.0)

        assert generator.get_output_voltage() == voltage
        assert generator.time_on.magnitude == pytest.approx(500.0)

    def test_mechanical_input_ignored_while_off(self) -> None:
        """Test drive commands sent before turn-on are dropped."""
        generator = make_generator()
        generator.set_mechanical_input(watts(80000), rpm(12000))
        generator.turn_on()

        generator.update(16.0)

        assert generator.get_output_power().magnitude == 0.0

    def test_turn_off_zeroes_outputs(self) -> None:
        """Test stopping de-energizes the output immediately."""
        generator = make_generator()
        generator.turn_on()
        generator.set_mechanical_input(watts(80000), rpm(12000))
        generator.update(16.0)

        generator.turn_off()

        assert generator.state == GeneratorState.OFF
        assert generator.get_output_voltage().magnitude == 0.0
        assert generator.get_output_power().magnitude == 0.0
        assert generator.current_speed.magnitude == 0.0

    def test_restart_resets_spin_up(self) -> None:
        """Test turning on again restarts the spin-up from zero."""
        generator = make_generator(spin_up_time=milliseconds(1000))
        generator.turn_on()
        generator.set_mechanical_input(watts(80000), rpm(12000))
        generator.update(1000.0)

        generator.turn_off()
        generator.turn_on()
        generator.update(500.0)

        assert generator.state == GeneratorState.SPINNING_UP
        assert generator.current_speed.magnitude == pytest.approx(6000.0)

    def test_inputs_are_ignored(self) -> None:
        """Test network writes do not affect a source."""
        generator = make_generator()
        generator.set_input_voltage(volts(28))
        generator.set_input_power(watts(1000))

        generator.update(16.0)

        assert generator.get_output_voltage().magnitude == 0.0
