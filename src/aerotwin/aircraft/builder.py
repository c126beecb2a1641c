"""Systems builder for loading aircraft wiring from YAML configuration.

The SystemsBuilder reads a declarative description of an aircraft's
electrical components, their connections and its hydraulic actuators, and
assembles a ready-to-tick AircraftSystems.

Typical usage:
    builder = SystemsBuilder()
    systems = builder.build("config/aircraft/e170.yaml")
"""

from collections.abc import Callable
from pathlib import Path
from typing import Any

from aerotwin.aircraft.aircraft import AircraftSystems, GeneratorStartPlan
from aerotwin.core.broadcast import BroadcastStore
from aerotwin.core.config import ConfigLoader
from aerotwin.core.logging_system import get_logger
from aerotwin.core.units import quantity_from_config
from aerotwin.systems.electrical.base import ComponentKind, IPhysicalComponent
from aerotwin.systems.electrical.bus import Bus
from aerotwin.systems.electrical.circuit_breaker import CircuitBreaker, TripCurveKind
from aerotwin.systems.electrical.dc_load import GenericDcLoad, VoltageResponse
from aerotwin.systems.electrical.generator import Generator
from aerotwin.systems.electrical.network import ComponentNetwork, NodeHandle
from aerotwin.systems.hydraulic.actuator import HydraulicActuator

logger = get_logger(__name__)

COMPONENT_FACTORIES: dict[str, Callable[[dict[str, Any]], IPhysicalComponent]] = {
    ComponentKind.GENERATOR.value: Generator.from_config,
    ComponentKind.BUS.value: Bus.from_config,
    ComponentKind.CIRCUIT_BREAKER.value: CircuitBreaker.from_config,
    ComponentKind.DC_LOAD.value: GenericDcLoad.from_config,
}


class BuilderError(Exception):
    """Raised when an aircraft wiring description is invalid."""


class SystemsBuilder:
    """Builder for constructing aircraft systems from YAML configuration.

    The builder handles:
    - Loading the YAML wiring file
    - Creating every electrical component by type
    - Connecting components by name
    - Creating hydraulic actuators
    - Reading the generator start plan and overcurrent limit

    Physical parameter errors surface as ValueError from the component
    constructors; wiring errors (unknown types or names, duplicates, bad enum
    values) as BuilderError; cycles as CyclicConnectionError.

    Examples:
        >>> builder = SystemsBuilder()
        >>> systems = builder.build("config/aircraft/e170.yaml")
        >>> systems.update(16.0)
    """

    def __init__(self, store: BroadcastStore | None = None) -> None:
        """Initialize the builder.

        Args:
            store: Broadcast store handed to every built AircraftSystems. Each
                build gets a private store when omitted.
        """
        self.store = store

    def build(self, config_path: str | Path) -> AircraftSystems:
        """Build aircraft systems from a YAML configuration file.

        Args:
            config_path: Path to the aircraft YAML file.

        Returns:
            Assembled AircraftSystems.

        Raises:
            ConfigError: If the file is missing or not valid YAML.
            BuilderError: If the wiring description is invalid.
            ValueError: If a physical parameter is invalid.
        """
        logger.info("Loading aircraft systems from: %s", config_path)
        return self.build_from_config(ConfigLoader.load(config_path))

    def build_from_config(self, config: ConfigLoader | dict[str, Any]) -> AircraftSystems:
        """Build aircraft systems from already loaded configuration.

        Args:
            config: ConfigLoader or raw dictionary with an ``aircraft`` section.

        Returns:
            Assembled AircraftSystems.

        Raises:
            BuilderError: If the wiring description is invalid.
            ValueError: If a physical parameter is invalid.
        """
        if isinstance(config, dict):
            config = ConfigLoader(config)

        aircraft_config = config.get("aircraft")
        if not isinstance(aircraft_config, dict):
            raise BuilderError("Aircraft configuration must contain an 'aircraft' section")

        name = aircraft_config.get("name", "Unknown Aircraft")
        electrical_config = config.get("aircraft.electrical", {}) or {}
        hydraulic_config = config.get("aircraft.hydraulic", {}) or {}

        network = self._build_network(electrical_config)
        actuators = self._build_actuators(hydraulic_config)
        generator_start = self._read_generator_start(electrical_config, network)

        overcurrent_limit = None
        if "overcurrent_limit" in electrical_config or "overcurrent_limit_a" in electrical_config:
            overcurrent_limit = quantity_from_config(
                electrical_config, "overcurrent_limit", "ampere", "a"
            )

        systems = AircraftSystems(
            name,
            network,
            actuators=actuators,
            store=self.store,
            generator_start=generator_start,
            overcurrent_limit=overcurrent_limit,
        )

        logger.info(
            "Aircraft '%s' built: %d components, %d connections, %d actuators",
            name,
            len(network),
            len(network.edges()),
            len(actuators),
        )
        return systems

    def _build_network(self, electrical_config: dict[str, Any]) -> ComponentNetwork:
        """Create and connect every electrical component.

        Raises:
            BuilderError: If a component or connection entry is invalid.
        """
        network = ComponentNetwork()
        handles: dict[str, NodeHandle] = {}

        for component_config in electrical_config.get("components", []) or []:
            component = self._create_component(component_config)
            if component.name in handles:
                raise BuilderError(f"Duplicate component name: '{component.name}'")
            handles[component.name] = network.add_component(component)

        for connection in electrical_config.get("connections", []) or []:
            if not isinstance(connection, dict):
                raise BuilderError(f"Connection entry must be a mapping, got: {connection!r}")

            source = self._resolve(handles, connection, "from")
            target = self._resolve(handles, connection, "to")

            if "resistance" in connection or "resistance_ohm" in connection:
                resistance = quantity_from_config(connection, "resistance", "ohm", "ohm")
                network.connect(source, target, resistance)
            else:
                network.connect_no_resistance(source, target)

        logger.debug(
            "Electrical network: %d components, %d connections",
            len(network),
            len(network.edges()),
        )
        return network

    def _create_component(self, component_config: dict[str, Any]) -> IPhysicalComponent:
        """Create one electrical component from its configuration entry.

        Raises:
            BuilderError: If the entry has no name, or an unknown type or
                enum value.
        """
        if not isinstance(component_config, dict):
            raise BuilderError(f"Component entry must be a mapping, got: {component_config!r}")

        name = component_config.get("name")
        if not name:
            raise BuilderError(f"Component entry missing 'name': {component_config!r}")

        component_type = component_config.get("type")
        factory = COMPONENT_FACTORIES.get(component_type)
        if factory is None:
            valid = ", ".join(COMPONENT_FACTORIES)
            raise BuilderError(
                f"Unknown component type '{component_type}' for '{name}' (expected one of: {valid})"
            )

        self._check_choice(component_config, "trip_curve", TripCurveKind, name)
        self._check_choice(component_config, "voltage_response", VoltageResponse, name)

        component = factory(component_config)
        logger.debug("Created %s '%s'", component_type, name)
        return component

    @staticmethod
    def _check_choice(
        component_config: dict[str, Any], key: str, choices: type, name: str
    ) -> None:
        if key not in component_config:
            return
        value = component_config[key]
        valid = [choice.value for choice in choices]
        if value not in valid:
            raise BuilderError(
                f"Invalid {key} '{value}' for '{name}' (expected one of: {', '.join(valid)})"
            )

    @staticmethod
    def _resolve(
        handles: dict[str, NodeHandle], connection: dict[str, Any], key: str
    ) -> NodeHandle:
        component_name = connection.get(key)
        if component_name not in handles:
            raise BuilderError(
                f"Connection {connection!r} references unknown component '{component_name}'"
            )
        return handles[component_name]

    def _build_actuators(self, hydraulic_config: dict[str, Any]) -> dict[str, HydraulicActuator]:
        """Create every hydraulic actuator.

        Raises:
            BuilderError: If an actuator entry has no name or a duplicate name.
        """
        actuators: dict[str, HydraulicActuator] = {}

        for actuator_config in hydraulic_config.get("actuators", []) or []:
            name = actuator_config.get("name") if isinstance(actuator_config, dict) else None
            if not name:
                raise BuilderError(f"Actuator entry missing 'name': {actuator_config!r}")
            if name in actuators:
                raise BuilderError(f"Duplicate actuator name: '{name}'")

            actuators[name] = HydraulicActuator.from_config(actuator_config)
            logger.debug("Created actuator '%s'", name)

        return actuators

    def _read_generator_start(
        self, electrical_config: dict[str, Any], network: ComponentNetwork
    ) -> GeneratorStartPlan | None:
        """Read the delayed generator start, if configured.

        Raises:
            BuilderError: If the entry is not a mapping or the named component
                is not a generator.
        """
        start_config = electrical_config.get("generator_start")
        if not start_config:
            return None
        if not isinstance(start_config, dict):
            raise BuilderError(f"generator_start must be a mapping, got: {start_config!r}")

        component_name = start_config.get("component")
        handle = network.find(component_name) if component_name else None
        generator = (
            network.get_component(handle, ComponentKind.GENERATOR) if handle is not None else None
        )
        if generator is None:
            raise BuilderError(f"generator_start names unknown generator '{component_name}'")

        if "drive_speed" in start_config or "drive_speed_rpm" in start_config:
            drive_speed = quantity_from_config(
                start_config, "drive_speed", "revolutions_per_minute", "rpm"
            )
        else:
            drive_speed = generator.expected_speed

        return GeneratorStartPlan(
            component=component_name,
            delay=quantity_from_config(start_config, "delay", "second", "s", default=0.0),
            mechanical_power=quantity_from_config(
                start_config, "mechanical_power", "watt", "w", default=0.0
            ),
            drive_speed=drive_speed,
        )
