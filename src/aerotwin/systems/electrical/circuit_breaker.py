"""Circuit breaker with selectable trip curves.

A breaker passes its inputs straight through while closed. When the current
flowing in exceeds its rating it accumulates overcurrent dwell time and trips
according to its curve:

    - INSTANTANEOUS: trips on the first tick above rating
    - SHORT_DELAY / LONG_DELAY: trips once dwell >= delay
    - INVERSE_TIME: trips once dwell >= 0.1 s / (current / rating)^2

A tripped breaker forces its output voltage, power and current to zero. With
auto-reset enabled it closes again once it has spent ``reset_delay`` tripped;
otherwise it stays open until ``reset()`` is called.

Inputs are latched on every tick, tripped or not, so a reset immediately
reflects present upstream conditions.

Typical usage:
    breaker = CircuitBreaker("avionics_cb", amps(15), TripCurve.short_delay(0.2))
    breaker.set_input_current(amps(18))
    breaker.update(dt=16.0)
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any

import pint

from aerotwin.core.logging_system import get_logger
from aerotwin.core.units import amps, milliseconds, quantity_from_config, seconds, volts, watts
from aerotwin.systems.electrical.base import ComponentKind, IPhysicalComponent

logger = get_logger(__name__)

# Trip time of the inverse-time curve at an overload ratio of 1
INVERSE_TIME_CONSTANT_S = 0.1


class TripCurveKind(Enum):
    """Breaker trip characteristics."""

    INSTANTANEOUS = "instantaneous"
    SHORT_DELAY = "short_delay"
    LONG_DELAY = "long_delay"
    INVERSE_TIME = "inverse_time"


class BreakerState(Enum):
    """Breaker contact states."""

    CLOSED = "closed"
    TRIPPED = "tripped"


@dataclass(frozen=True)
class TripCurve:
    """Trip characteristic of a breaker.

    Attributes:
        kind: Curve family.
        delay: Required overcurrent dwell for SHORT_DELAY and LONG_DELAY
            curves; None for the others.
    """

    kind: TripCurveKind
    delay: pint.Quantity | None = None

    def __post_init__(self) -> None:
        if self.kind in (TripCurveKind.SHORT_DELAY, TripCurveKind.LONG_DELAY):
            if self.delay is None:
                raise ValueError(f"{self.kind.value} trip curve requires a delay")
            if self.delay.to("second").magnitude < 0:
                raise ValueError(f"Trip delay must be >= 0, got {self.delay}")

    @classmethod
    def instantaneous(cls) -> "TripCurve":
        return cls(TripCurveKind.INSTANTANEOUS)

    @classmethod
    def short_delay(cls, delay_s: float) -> "TripCurve":
        return cls(TripCurveKind.SHORT_DELAY, seconds(delay_s))

    @classmethod
    def long_delay(cls, delay_s: float) -> "TripCurve":
        return cls(TripCurveKind.LONG_DELAY, seconds(delay_s))

    @classmethod
    def inverse_time(cls) -> "TripCurve":
        return cls(TripCurveKind.INVERSE_TIME)

    def should_trip(
        self, current: pint.Quantity, rating: pint.Quantity, dwell: pint.Quantity
    ) -> bool:
        """Decide whether a breaker on this curve trips.

        Args:
            current: Current flowing into the breaker.
            rating: Breaker current rating.
            dwell: Time spent continuously above rating.

        Returns:
            True if the breaker must trip now.
        """
        if current <= rating:
            return False

        if self.kind == TripCurveKind.INSTANTANEOUS:
            return True

        if self.kind == TripCurveKind.INVERSE_TIME:
            overload_ratio = (current / rating).to("dimensionless").magnitude
            return dwell >= seconds(INVERSE_TIME_CONSTANT_S / overload_ratio**2)

        return dwell >= self.delay


class CircuitBreaker(IPhysicalComponent):
    """Protective device between a bus and a consumer.

    Examples:
        >>> breaker = CircuitBreaker("lights_cb", amps(10), TripCurve.instantaneous())
        >>> breaker.set_input_current(amps(12))
        >>> breaker.update(16.0)
        >>> breaker.is_tripped
        True
    """

    kind = ComponentKind.CIRCUIT_BREAKER

    def __init__(
        self,
        name: str,
        rating: pint.Quantity,
        trip_curve: TripCurve,
        auto_reset: bool = False,
        reset_delay: pint.Quantity | None = None,
    ) -> None:
        """Initialize a closed breaker.

        Args:
            name: Component identifier.
            rating: Current above which overcurrent dwell accumulates.
            trip_curve: Trip characteristic.
            auto_reset: Whether the breaker closes again by itself.
            reset_delay: Time spent tripped before an automatic reset.

        Raises:
            ValueError: If the rating is not positive or the reset delay is negative.
        """
        super().__init__(name)

        if rating.to("ampere").magnitude <= 0:
            raise ValueError(f"Breaker rating must be > 0, got {rating}")

        self.rating = rating.to("ampere")
        self.trip_curve = trip_curve
        self.auto_reset = auto_reset
        self.reset_delay = (reset_delay if reset_delay is not None else seconds(0.0)).to("second")

        if self.reset_delay.magnitude < 0:
            raise ValueError(f"reset_delay must be >= 0, got {reset_delay}")

        self._state = BreakerState.CLOSED
        self._overcurrent_time = seconds(0.0)
        self._trip_time = seconds(0.0)

        self._input_voltage = volts(0.0)
        self._input_power = watts(0.0)
        self._input_current = amps(0.0)

    @classmethod
    def from_config(cls, config: dict[str, Any]) -> "CircuitBreaker":
        """Create a breaker from a configuration dictionary.

        Recognized keys: ``name``, ``rating_a`` (or ``rating``), ``trip_curve``
        (one of the TripCurveKind values), ``delay_s`` (delay curves),
        ``auto_reset`` and ``reset_delay_s``.

        Raises:
            ValueError: If a parameter is missing, malformed or the trip curve
                is unknown.
        """
        curve_name = config.get("trip_curve", TripCurveKind.INSTANTANEOUS.value)
        try:
            curve_kind = TripCurveKind(curve_name)
        except ValueError as e:
            valid = ", ".join(kind.value for kind in TripCurveKind)
            raise ValueError(f"Unknown trip curve '{curve_name}' (expected one of: {valid})") from e

        delay = None
        if curve_kind in (TripCurveKind.SHORT_DELAY, TripCurveKind.LONG_DELAY):
            delay = quantity_from_config(config, "delay", "second", "s")

        return cls(
            name=config.get("name", "circuit_breaker"),
            rating=quantity_from_config(config, "rating", "ampere", "a"),
            trip_curve=TripCurve(curve_kind, delay),
            auto_reset=bool(config.get("auto_reset", False)),
            reset_delay=quantity_from_config(config, "reset_delay", "second", "s", default=0.0),
        )

    @property
    def state(self) -> BreakerState:
        """Current contact state."""
        return self._state

    @property
    def is_tripped(self) -> bool:
        """Whether the breaker is open."""
        return self._state == BreakerState.TRIPPED

    @property
    def overcurrent_time(self) -> pint.Quantity:
        """Continuous time spent above rating while closed."""
        return self._overcurrent_time

    def update(self, dt: float) -> None:
        """Accumulate dwell or trip time and apply the trip curve.

        Args:
            dt: Elapsed time in milliseconds.
        """
        if dt <= 0:
            return

        dt_s = milliseconds(dt).to("second")

        if self._state == BreakerState.TRIPPED:
            if self.auto_reset:
                self._trip_time += dt_s
                if self._trip_time >= self.reset_delay:
                    logger.info(
                        "Breaker %s auto-reset after %.2f s", self.name, self._trip_time.magnitude
                    )
                    self._close()
            return

        if self._input_current > self.rating:
            self._overcurrent_time += dt_s
        else:
            self._overcurrent_time = seconds(0.0)

        if self.trip_curve.should_trip(self._input_current, self.rating, self._overcurrent_time):
            self._state = BreakerState.TRIPPED
            self._trip_time = seconds(0.0)
            logger.warning(
                "Breaker %s tripped: %.1f A > %.1f A rating after %.3f s (%s)",
                self.name,
                self._input_current.magnitude,
                self.rating.magnitude,
                self._overcurrent_time.magnitude,
                self.trip_curve.kind.value,
            )

    def reset(self) -> None:
        """Close the breaker manually, clearing all timers."""
        if self._state == BreakerState.TRIPPED:
            logger.info("Breaker %s reset", self.name)
        self._close()

    def _close(self) -> None:
        self._state = BreakerState.CLOSED
        self._overcurrent_time = seconds(0.0)
        self._trip_time = seconds(0.0)

    def get_output_voltage(self) -> pint.Quantity:
        if self.is_tripped:
            return volts(0.0)
        return self._input_voltage

    def get_output_power(self) -> pint.Quantity:
        if self.is_tripped:
            return watts(0.0)
        return self._input_power

    def get_output_current(self) -> pint.Quantity:
        if self.is_tripped:
            return amps(0.0)
        return self._input_current

    def get_input_current(self) -> pint.Quantity:
        """Get the current last fed into the breaker."""
        return self._input_current

    def set_input_voltage(self, voltage: pint.Quantity) -> None:
        self._input_voltage = voltage.to("volt")

    def set_input_power(self, power: pint.Quantity) -> None:
        self._input_power = power.to("watt")

    def set_input_current(self, current: pint.Quantity) -> None:
        self._input_current = current.to("ampere")
