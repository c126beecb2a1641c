"""AeroTwin - headless aircraft systems trainer.

Builds an aircraft's systems from its wiring file and ticks them in real
time, periodically logging the latest published electrical and hydraulic
state.

Usage:
    aerotwin --config config/aircraft/e170.yaml --duration 30
"""

import argparse
import sys
from pathlib import Path

from aerotwin.aircraft.aircraft import AircraftSystems
from aerotwin.aircraft.builder import SystemsBuilder
from aerotwin.core.logging_system import get_logger, initialize_logging, shutdown_logging
from aerotwin.core.resource_path import get_config_path
from aerotwin.core.sim_loop import SimulationLoop

logger = get_logger(__name__)


class StatusReporter:
    """Logs the latest snapshots at a fixed simulated-time interval.

    Reads only what the systems published on their broadcast store.
    """

    def __init__(self, systems: AircraftSystems, interval_s: float) -> None:
        self.systems = systems
        self.interval_ms = interval_s * 1000.0
        self._next_report_ms = 0.0

    def __call__(self, elapsed_ms: float) -> None:
        if self.interval_ms <= 0 or elapsed_ms < self._next_report_ms:
            return
        self._next_report_ms = elapsed_ms + self.interval_ms

        snapshot = self.systems.latest_electrical_snapshot()
        if snapshot is not None:
            readings = ", ".join(
                f"{node.name} {node.voltage_v:.1f} V" for node in snapshot.nodes if node.voltage_v
            )
            logger.info(
                "[%6.1f s] %s | tripped: %s",
                snapshot.elapsed_s,
                readings or "network de-energized",
                ", ".join(snapshot.tripped_breakers) or "none",
            )

        for actuator in self.systems.hydraulic_snapshots():
            logger.info(
                "[%6.1f s] %s at %.0f%% (%.0f Pa)",
                actuator.elapsed_s,
                actuator.name,
                actuator.extension_ratio * 100.0,
                actuator.cap_pressure_pa,
            )


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command line arguments.

    Args:
        argv: Arguments to parse (defaults to sys.argv).

    Returns:
        Parsed arguments
    """
    parser = argparse.ArgumentParser(description="AeroTwin - aircraft systems digital twin")

    parser.add_argument(
        "--config",
        type=str,
        help="Aircraft wiring YAML (default: the bundled E170 wiring)",
    )

    parser.add_argument(
        "--duration",
        type=float,
        help="Simulated seconds to run (default: until interrupted)",
    )

    parser.add_argument(
        "--tick-ms",
        type=float,
        default=16.0,
        help="Target tick period in milliseconds (default: 16)",
    )

    parser.add_argument(
        "--status-interval",
        type=float,
        default=1.0,
        help="Seconds between status reports, 0 to disable (default: 1)",
    )

    parser.add_argument(
        "--log-config",
        type=str,
        help="Logging YAML (default: the bundled logging.yaml)",
    )

    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    """Main entry point.

    Returns:
        Exit code (0 for success).
    """
    args = parse_args(argv)

    logging_config = Path(args.log_config) if args.log_config else get_config_path("logging.yaml")
    if logging_config.exists():
        initialize_logging(str(logging_config), use_platform_dir=True)
    else:
        initialize_logging(use_platform_dir=True)
    logger.info("AeroTwin starting up...")

    try:
        config_path = Path(args.config) if args.config else get_config_path("aircraft/e170.yaml")
        systems = SystemsBuilder().build(config_path)

        loop = SimulationLoop(
            systems,
            tick_ms=args.tick_ms,
            on_tick=StatusReporter(systems, args.status_interval),
        )
        loop.run(duration_s=args.duration)
        return 0
    except Exception as e:  # pylint: disable=broad-exception-caught
        logger.exception("Fatal error: %s", e)
        return 1
    finally:
        logger.info("Shutdown complete")
        shutdown_logging()


if __name__ == "__main__":
    sys.exit(main())
