"""Tests for circuit breakers and their trip curves."""

import pytest

from aerotwin.core.units import amps, seconds, volts, watts
from aerotwin.systems.electrical import (
    BreakerState,
    CircuitBreaker,
    ComponentKind,
    TripCurve,
    TripCurveKind,
)


def energized_breaker(curve: TripCurve, rating: float = 15.0, **kwargs) -> CircuitBreaker:
    """Create a closed breaker fed with 28 V / 280 W."""
    breaker = CircuitBreaker("test_cb", amps(rating), curve, **kwargs)
    breaker.set_input_voltage(volts(28))
    breaker.set_input_power(watts(280))
    return breaker


class TestTripCurve:
    """Test trip decisions in isolation."""

    def test_never_trips_at_or_below_rating(self) -> None:
        """Test no curve trips without overcurrent."""
        for curve in (
            TripCurve.instantaneous(),
            TripCurve.short_delay(0.0),
            TripCurve.inverse_time(),
        ):
            assert not curve.should_trip(amps(15), amps(15), seconds(10))

    def test_instantaneous(self) -> None:
        """Test the instantaneous curve trips on any overcurrent."""
        assert TripCurve.instantaneous().should_trip(amps(15.1), amps(15), seconds(0))

    def test_delay_curves(self) -> None:
        """Test delay curves trip once the dwell reaches the delay."""
        curve = TripCurve.long_delay(2.0)

        assert not curve.should_trip(amps(30), amps(15), seconds(1.9))
        assert curve.should_trip(amps(30), amps(15), seconds(2.0))

    def test_inverse_time(self) -> None:
        """Test the inverse-time threshold shrinks with the square of the overload."""
        curve = TripCurve.inverse_time()

        # Twice the rating: 0.1 s / 4 = 25 ms
        assert not curve.should_trip(amps(30), amps(15), seconds(0.02))
        assert curve.should_trip(amps(30), amps(15), seconds(0.025))

    def test_delay_required(self) -> None:
        """Test delay curves without a delay are rejected."""
        with pytest.raises(ValueError, match="requires a delay"):
            TripCurve(TripCurveKind.SHORT_DELAY)

    def test_negative_delay_rejected(self) -> None:
        """Test negative delays are rejected."""
        with pytest.raises(ValueError):
            TripCurve.short_delay(-1.0)


class TestCircuitBreaker:
    """Test breaker state and trip timing."""

    def test_closed_breaker_passes_through(self) -> None:
        """Test a closed breaker forwards its inputs."""
        breaker = energized_breaker(TripCurve.instantaneous())
        breaker.set_input_current(amps(10))

        breaker.update(16.0)

        assert breaker.kind == ComponentKind.CIRCUIT_BREAKER
        assert breaker.state == BreakerState.CLOSED
        assert breaker.get_output_voltage().magnitude == pytest.approx(28.0)
        assert breaker.get_output_power().magnitude == pytest.approx(280.0)
        assert breaker.get_output_current().magnitude == pytest.approx(10.0)

    def test_instantaneous_trip(self) -> None:
        """Test an instantaneous breaker trips on the first overcurrent tick."""
        breaker = energized_breaker(TripCurve.instantaneous(), rating=10.0)
        breaker.set_input_current(amps(12))

        breaker.update(16.0)

        assert breaker.is_tripped
        assert breaker.get_output_voltage().magnitude == 0.0
        assert breaker.get_output_power().magnitude == 0.0
        assert breaker.get_output_current().magnitude == 0.0

    def test_short_delay_trip_timing(self) -> None:
        """Test a short-delay breaker trips once dwell reaches the delay."""
        breaker = energized_breaker(TripCurve.short_delay(0.2))
        breaker.set_input_current(amps(18))

        breaker.update(100.0)
        assert not breaker.is_tripped
        assert breaker.overcurrent_time.magnitude == pytest.approx(0.1)

        breaker.update(100.0)
        assert breaker.is_tripped

    def test_dwell_resets_when_current_drops(self) -> None:
        """Test overcurrent dwell must be continuous."""
        breaker = energized_breaker(TripCurve.short_delay(0.2))
        breaker.set_input_current(amps(18))
        breaker.update(100.0)

        breaker.set_input_current(amps(10))
        breaker.update(100.0)
        assert breaker.overcurrent_time.magnitude == 0.0

        breaker.set_input_current(amps(18))
        breaker.update(100.0)
        assert not breaker.is_tripped

    def test_inverse_time_trip(self) -> None:
        """Test heavy overloads trip an inverse-time breaker quickly."""
        breaker = energized_breaker(TripCurve.inverse_time(), rating=10.0)
        breaker.set_input_current(amps(20))

        # Threshold 25 ms
        breaker.update(20.0)
        assert not breaker.is_tripped
        breaker.update(10.0)
        assert breaker.is_tripped

    def test_zero_dt_does_nothing(self) -> None:
        """Test a zero time step never trips."""
        breaker = energized_breaker(TripCurve.instantaneous())
        breaker.set_input_current(amps(100))

        breaker.update(0.0)

        assert not breaker.is_tripped

    def test_manual_reset(self) -> None:
        """Test a tripped breaker without auto-reset stays open until reset."""
        breaker = energized_breaker(TripCurve.instantaneous())
        breaker.set_input_current(amps(20))
        breaker.update(16.0)
        breaker.set_input_current(amps(0))

        for _ in range(100):
            breaker.update(100.0)
        assert breaker.is_tripped

        breaker.reset()

        assert breaker.state == BreakerState.CLOSED
        assert breaker.overcurrent_time.magnitude == 0.0
        assert breaker.get_output_voltage().magnitude == pytest.approx(28.0)

    def test_auto_reset(self) -> None:
        """Test an auto-reset breaker closes after its reset delay."""
        breaker = energized_breaker(
            TripCurve.instantaneous(), auto_reset=True, reset_delay=seconds(0.5)
        )
        breaker.set_input_current(amps(20))
        breaker.update(100.0)
        assert breaker.is_tripped

        breaker.set_input_current(amps(0))
        for _ in range(4):
            breaker.update(100.0)
        assert breaker.is_tripped

        breaker.update(100.0)
        assert not breaker.is_tripped

    def test_auto_reset_retrips_on_persistent_fault(self) -> None:
        """Test a breaker re-trips after auto-reset if the fault persists."""
        breaker = energized_breaker(
            TripCurve.instantaneous(), auto_reset=True, reset_delay=seconds(0.2)
        )
        breaker.set_input_current(amps(20))

        breaker.update(100.0)
        breaker.update(100.0)
        breaker.update(100.0)
        assert not breaker.is_tripped

        breaker.update(100.0)
        assert breaker.is_tripped

    def test_inputs_latched_while_tripped(self) -> None:
        """Test a reset immediately reflects present upstream conditions."""
        breaker = energized_breaker(TripCurve.instantaneous())
        breaker.set_input_current(amps(20))
        breaker.update(16.0)

        breaker.set_input_voltage(volts(27))
        breaker.set_input_current(amps(5))
        breaker.reset()

        assert breaker.get_output_voltage().magnitude == pytest.approx(27.0)
        assert breaker.get_input_current().magnitude == pytest.approx(5.0)

    def test_invalid_rating(self) -> None:
        """Test non-positive ratings are rejected."""
        with pytest.raises(ValueError):
            CircuitBreaker("bad_cb", amps(0), TripCurve.instantaneous())

    def test_from_config(self) -> None:
        """Test creation from a configuration dictionary."""
        breaker = CircuitBreaker.from_config(
            {
                "name": "lights_cb",
                "rating_a": 10,
                "trip_curve": "short_delay",
                "delay_s": 0.1,
                "auto_reset": True,
                "reset_delay_s": 5.0,
            }
        )

        assert breaker.rating.magnitude == pytest.approx(10.0)
        assert breaker.trip_curve.kind == TripCurveKind.SHORT_DELAY
        assert breaker.trip_curve.delay.magnitude == pytest.approx(0.1)
        assert breaker.auto_reset
        assert breaker.reset_delay.magnitude == pytest.approx(5.0)

    def test_from_config_unknown_curve(self) -> None:
        """Test unknown trip curves are reported."""
        with pytest.raises(ValueError, match="Unknown trip curve"):
            CircuitBreaker.from_config({"name": "cb", "rating_a": 10, "trip_curve": "slow"})
