"""Simulation loop driven by measured wall-clock time.

Each tick measures the time elapsed since the previous tick and hands that
delta (in milliseconds) to the systems being simulated. The loop sleeps to
hold a target tick period (16 ms, roughly 60 Hz, by default).

Typical usage example:
    from aerotwin.core.sim_loop import SimulationLoop

    loop = SimulationLoop(aircraft_systems, tick_ms=16.0)
    loop.run(duration_s=30.0)
"""

import time
from collections.abc import Callable
from typing import Any

from aerotwin.core.logging_system import get_logger

logger = get_logger(__name__)


class DeltaTime:
    """Measures the wall-clock time between successive calls.

    Examples:
        >>> delta = DeltaTime()
        >>> dt_ms = delta.update_time()
    """

    def __init__(self, clock: Callable[[], float] = time.monotonic) -> None:
        """Initialize and start measuring from now.

        Args:
            clock: Monotonic clock returning seconds.
        """
        self._clock = clock
        self._last_time = clock()

    def reset(self) -> None:
        """Restart measurement from the current instant."""
        self._last_time = self._clock()

    def update_time(self) -> float:
        """Get milliseconds elapsed since the previous call (never negative)."""
        now = self._clock()
        delta_s = now - self._last_time
        self._last_time = now
        return max(0.0, delta_s) * 1000.0


class SimulationLoop:
    """Tick driver for an aircraft's systems.

    The driven object only needs an ``update(dt_ms)`` method. Deltas longer
    than ``max_catchup_ticks`` tick periods (debugger pauses, a suspended
    laptop) are clamped so a single tick never integrates an absurd step.

    Examples:
        >>> loop = SimulationLoop(systems, tick_ms=16.0)
        >>> loop.run(duration_s=10.0)
    """

    def __init__(
        self,
        systems: Any,
        tick_ms: float = 16.0,
        max_catchup_ticks: int = 5,
        on_tick: Callable[[float], None] | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        """Initialize the simulation loop.

        Args:
            systems: Object exposing ``update(dt_ms)``.
            tick_ms: Target tick period in milliseconds.
            max_catchup_ticks: Largest delta accepted, in tick periods.
            on_tick: Optional callback invoked after every tick with the
                simulated elapsed time in milliseconds.
            clock: Monotonic clock returning seconds.

        Raises:
            ValueError: If tick_ms is not positive or max_catchup_ticks < 1.
        """
        if tick_ms <= 0:
            raise ValueError(f"tick_ms must be > 0, got {tick_ms}")
        if max_catchup_ticks < 1:
            raise ValueError(f"max_catchup_ticks must be >= 1, got {max_catchup_ticks}")

        self.systems = systems
        self.tick_ms = tick_ms
        self.max_delta_ms = tick_ms * max_catchup_ticks
        self.on_tick = on_tick

        self._clock = clock
        self._delta_time = DeltaTime(clock)

        self.running = False
        self.paused = False
        self.tick_count = 0
        self.elapsed_ms = 0.0

    def run(self, duration_s: float | None = None) -> None:
        """Run ticks until ``stop()`` is called or the duration elapses.

        Args:
            duration_s: Simulated time to run for, in seconds. None runs
                until stopped.
        """
        self.running = True
        self._delta_time.reset()
        logger.info("Simulation loop started (tick %.1f ms)", self.tick_ms)

        try:
            while self.running:
                tick_start = self._clock()
                self.step()

                if duration_s is not None and self.elapsed_ms >= duration_s * 1000.0:
                    break

                self._limit_tick_rate(tick_start)

        except KeyboardInterrupt:
            logger.info("Simulation loop interrupted by user")

        finally:
            self.running = False
            logger.info(
                "Simulation loop stopped after %d ticks (%.1f s simulated)",
                self.tick_count,
                self.elapsed_ms / 1000.0,
            )

    def step(self) -> float:
        """Execute one tick with the measured delta.

        Returns:
            The delta in milliseconds handed to the systems (0 while paused).
        """
        dt_ms = self._delta_time.update_time()

        if dt_ms > self.max_delta_ms:
            logger.warning("Tick delta clamped: %.1f ms -> %.1f ms", dt_ms, self.max_delta_ms)
            dt_ms = self.max_delta_ms

        if self.paused:
            dt_ms = 0.0
        else:
            self.systems.update(dt_ms)
            self.elapsed_ms += dt_ms

        self.tick_count += 1

        if self.on_tick is not None:
            self.on_tick(self.elapsed_ms)

        return dt_ms

    def _limit_tick_rate(self, tick_start: float) -> None:
        """Sleep to maintain the target tick period."""
        elapsed = self._clock() - tick_start
        sleep_time = self.tick_ms / 1000.0 - elapsed

        if sleep_time > 0:
            time.sleep(sleep_time)

    def stop(self) -> None:
        """Stop the loop at the end of the current tick."""
        self.running = False
        logger.info("Simulation loop stop requested")

    def pause(self) -> None:
        """Keep ticking but hand zero deltas to the systems."""
        self.paused = True
        logger.info("Simulation loop paused")

    def resume(self) -> None:
        """Resume normal ticking without catching up on the paused time."""
        self.paused = False
        self._delta_time.reset()
        logger.info("Simulation loop resumed")

    def is_running(self) -> bool:
        """Check if the loop is running."""
        return self.running

    def is_paused(self) -> bool:
        """Check if the loop is paused."""
        return self.paused
