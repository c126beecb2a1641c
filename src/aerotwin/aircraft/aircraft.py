"""Aircraft systems orchestrator.

AircraftSystems owns one aircraft's electrical network, its hydraulic
actuators and the broadcast store their state is published on. It is the
single object the simulation loop ticks, and the only way a presentation
layer may command the simulated systems.

Per tick (``update``):
    1. Accumulate elapsed time; start the configured generator once the
       start delay has passed.
    2. Update the electrical network.
    3. Audit connection currents against the overcurrent limit.
    4. Step every actuator with the same delta.
    5. Publish one ElectricalSnapshot and one HydraulicSnapshot per actuator.

Typical usage:
    systems = SystemsBuilder().build("config/aircraft/e170.yaml")
    systems.update(16.0)
    snapshot = systems.store.latest(ChannelCategory.ELECTRICAL, ElectricalSnapshot)
"""

from dataclasses import dataclass, field

import pint

from aerotwin.aircraft.snapshots import ElectricalSnapshot, HydraulicSnapshot
from aerotwin.core.broadcast import BroadcastStore, ChannelCategory
from aerotwin.core.logging_system import get_logger
from aerotwin.core.units import milliseconds, newtons, pascals
from aerotwin.systems.electrical.base import ComponentKind, IPhysicalComponent
from aerotwin.systems.electrical.network import ComponentNetwork, NodeHandle, Overcurrent
from aerotwin.systems.hydraulic.actuator import HydraulicActuator

logger = get_logger(__name__)


@dataclass(frozen=True)
class GeneratorStartPlan:
    """Delayed automatic start of a generator.

    Attributes:
        component: Name of the generator node.
        delay: Elapsed simulation time after which the generator starts.
        mechanical_power: Mechanical input applied on start.
        drive_speed: Drive shaft speed applied on start.
    """

    component: str
    delay: pint.Quantity
    mechanical_power: pint.Quantity
    drive_speed: pint.Quantity


@dataclass
class ActuatorCommand:
    """Inputs held for an actuator and re-applied on every tick."""

    valve_opening: float = 0.0
    supply_pressure: pint.Quantity = field(default_factory=lambda: pascals(0.0))
    external_force: pint.Quantity = field(default_factory=lambda: newtons(0.0))


class AircraftSystems:
    """One aircraft's simulated systems.

    Examples:
        >>> systems = AircraftSystems("E170", network, actuators={"nose_gear": actuator})
        >>> systems.request_generator_start("main_generator")
        True
        >>> systems.update(16.0)
    """

    def __init__(
        self,
        name: str,
        network: ComponentNetwork,
        actuators: dict[str, HydraulicActuator] | None = None,
        store: BroadcastStore | None = None,
        generator_start: GeneratorStartPlan | None = None,
        overcurrent_limit: pint.Quantity | None = None,
    ) -> None:
        """Initialize the orchestrator.

        Args:
            name: Aircraft name.
            network: Assembled electrical network (owned from now on).
            actuators: Hydraulic actuators by name.
            store: Broadcast store to publish snapshots on. A private store
                is created when omitted.
            generator_start: Optional delayed generator start.
            overcurrent_limit: Connection current reported by the overcurrent
                audit. None disables the audit.
        """
        self.name = name
        self.network = network
        self.actuators = dict(actuators or {})
        self._commands: dict[str, ActuatorCommand] = {
            name: ActuatorCommand() for name in self.actuators
        }
        self.store = store if store is not None else BroadcastStore()
        self.generator_start = generator_start
        self.overcurrent_limit = (
            overcurrent_limit.to("ampere") if overcurrent_limit is not None else None
        )

        self._handles: dict[str, NodeHandle] = {}
        for handle in network.nodes():
            self._handles.setdefault(network.node_name(handle), handle)

        self.elapsed_ms = 0.0
        self._generator_started = False
        self.last_overcurrents: list[Overcurrent] = []
        self._reported_overcurrents: set[tuple[NodeHandle, NodeHandle]] = set()

        logger.info(
            "Created aircraft systems '%s': %d electrical components, %d actuators",
            name,
            len(network),
            len(self.actuators),
        )

    def update(self, dt_ms: float) -> None:
        """Advance every system by one tick.

        Args:
            dt_ms: Elapsed wall-clock time in milliseconds. Negative values
                are treated as zero.
        """
        dt_ms = max(0.0, dt_ms)
        self.elapsed_ms += dt_ms

        self._apply_generator_start()

        self.network.update(dt_ms)
        self._audit_overcurrent()

        step = milliseconds(dt_ms)
        for name, actuator in self.actuators.items():
            command = self._commands[name]
            actuator.set_valve_opening(command.valve_opening)
            actuator.set_supply_pressure(command.supply_pressure)
            actuator.set_external_force(command.external_force)
            actuator.update(step)

        self._publish()

    def _apply_generator_start(self) -> None:
        plan = self.generator_start
        if plan is None or self._generator_started:
            return
        if self.elapsed_ms <= plan.delay.m_as("millisecond"):
            return

        self._generator_started = True
        if self.request_generator_start(plan.component, plan.mechanical_power, plan.drive_speed):
            logger.info(
                "Generator %s started automatically after %.2f s",
                plan.component,
                self.elapsed_ms / 1000.0,
            )

    def _audit_overcurrent(self) -> None:
        if self.overcurrent_limit is None:
            self.last_overcurrents = []
            return

        self.last_overcurrents = self.network.check_overcurrent(self.overcurrent_limit)

        # Report only changes in the set of offending connections
        offenders = {(item.source, item.target) for item in self.last_overcurrents}
        if offenders == self._reported_overcurrents:
            return
        self._reported_overcurrents = offenders

        if not self.last_overcurrents:
            logger.info("Overcurrent cleared")
            return

        logger.warning("Overcurrent detected in %d connections", len(self.last_overcurrents))
        for overcurrent in self.last_overcurrents:
            logger.warning(
                "  %s -> %s: %.2f A (limit %.1f A)",
                overcurrent.source_name,
                overcurrent.target_name,
                overcurrent.current.m_as("ampere"),
                self.overcurrent_limit.magnitude,
            )

    def _publish(self) -> None:
        elapsed_s = self.elapsed_ms / 1000.0
        overcurrents = tuple(
            f"{item.source_name} -> {item.target_name}" for item in self.last_overcurrents
        )

        # The store holds the latest tick only
        self.store.clear(ChannelCategory.ELECTRICAL)
        self.store.clear(ChannelCategory.HYDRAULIC)

        self.store.send(
            ChannelCategory.ELECTRICAL,
            ElectricalSnapshot.capture(self.network, elapsed_s, overcurrents),
        )
        for name, actuator in self.actuators.items():
            self.store.send(
                ChannelCategory.HYDRAULIC, HydraulicSnapshot.capture(name, actuator, elapsed_s)
            )

    def get_component(
        self, name: str, kind: ComponentKind | None = None
    ) -> IPhysicalComponent | None:
        """Get an electrical component by name.

        Args:
            name: Component name.
            kind: Expected kind, or None to accept any.

        Returns:
            The component, or None if unknown or of another kind.
        """
        handle = self._handles.get(name)
        if handle is None:
            return None
        return self.network.get_component(handle, kind)

    def get_actuator(self, name: str) -> HydraulicActuator | None:
        """Get an actuator by name."""
        return self.actuators.get(name)

    def request_generator_start(
        self,
        name: str,
        mechanical_power: pint.Quantity | None = None,
        drive_speed: pint.Quantity | None = None,
    ) -> bool:
        """Start a generator and optionally apply its mechanical drive.

        Args:
            name: Generator name.
            mechanical_power: Mechanical input power to apply.
            drive_speed: Drive shaft speed to apply (defaults to the speed
                implied by the rated frequency).

        Returns:
            True if the generator was started, False if no generator has
            that name.
        """
        generator = self.get_component(name, ComponentKind.GENERATOR)
        if generator is None:
            logger.warning("Cannot start '%s': no such generator", name)
            return False

        generator.turn_on()
        if mechanical_power is not None:
            speed = drive_speed if drive_speed is not None else generator.expected_speed
            generator.set_mechanical_input(mechanical_power, speed)
        return True

    def request_generator_stop(self, name: str) -> bool:
        """Stop a generator.

        Returns:
            True if the generator was stopped, False if no generator has
            that name.
        """
        generator = self.get_component(name, ComponentKind.GENERATOR)
        if generator is None:
            logger.warning("Cannot stop '%s': no such generator", name)
            return False

        generator.turn_off()
        return True

    def set_load_power(self, name: str, on: bool) -> bool:
        """Switch a DC load on or off.

        Returns:
            True if successful, False if no load has that name.
        """
        load = self.get_component(name, ComponentKind.DC_LOAD)
        if load is None:
            logger.warning("Cannot switch '%s': no such load", name)
            return False

        load.set_power_state(on)
        logger.info("Load %s switched %s", name, "on" if on else "off")
        return True

    def reset_breaker(self, name: str) -> bool:
        """Reset a circuit breaker.

        Returns:
            True if successful, False if no breaker has that name.
        """
        breaker = self.get_component(name, ComponentKind.CIRCUIT_BREAKER)
        if breaker is None:
            logger.warning("Cannot reset '%s': no such breaker", name)
            return False

        breaker.reset()
        return True

    def command_actuator(
        self,
        name: str,
        valve_opening: float,
        supply_pressure: pint.Quantity | None = None,
        external_force: pint.Quantity | None = None,
    ) -> bool:
        """Command an actuator's valve, supply pressure and external load.

        The command is held and re-applied before every step. Omitted
        values keep their previous setting. Supply pressure only reaches the
        cap chamber while the valve is open.

        Args:
            name: Actuator name.
            valve_opening: Valve opening, clamped to [0, 1].
            supply_pressure: Hydraulic supply pressure.
            external_force: External load on the rod.

        Returns:
            True if successful, False if no actuator has that name.
        """
        actuator = self.actuators.get(name)
        if actuator is None:
            logger.warning("Cannot command '%s': no such actuator", name)
            return False

        command = self._commands[name]
        command.valve_opening = valve_opening
        if supply_pressure is not None:
            command.supply_pressure = supply_pressure
        if external_force is not None:
            command.external_force = external_force

        logger.debug(
            "Actuator %s commanded: valve %.2f, supply %.0f Pa, force %.1f N",
            name,
            valve_opening,
            command.supply_pressure.m_as("pascal"),
            command.external_force.m_as("newton"),
        )
        return True

    def latest_electrical_snapshot(self) -> ElectricalSnapshot | None:
        """Get the electrical snapshot published by the last tick."""
        return self.store.latest(ChannelCategory.ELECTRICAL, ElectricalSnapshot)

    def hydraulic_snapshots(self) -> list[HydraulicSnapshot]:
        """Get the actuator snapshots published by the last tick."""
        return self.store.receive(ChannelCategory.HYDRAULIC, HydraulicSnapshot)

