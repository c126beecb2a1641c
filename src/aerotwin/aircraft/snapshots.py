"""Immutable state snapshots published on the broadcast store.

Snapshots carry plain SI floats so a viewer can read them without touching
the live components or the unit registry.
"""

from dataclasses import dataclass

from aerotwin.systems.electrical.base import ComponentKind
from aerotwin.systems.electrical.network import ComponentNetwork
from aerotwin.systems.hydraulic.actuator import HydraulicActuator


@dataclass(frozen=True)
class NodeReading:
    """Outputs of one network component."""

    name: str
    kind: str
    voltage_v: float
    power_w: float
    current_a: float


@dataclass(frozen=True)
class WireReading:
    """Current through one network connection."""

    source: str
    target: str
    current_a: float


@dataclass(frozen=True)
class ElectricalSnapshot:
    """State of an aircraft's electrical network after one tick.

    Attributes:
        elapsed_s: Simulated time since start.
        nodes: Component outputs in registration order.
        wires: Connection currents in connection order.
        tripped_breakers: Names of open breakers.
        overcurrents: Connections above the audit limit, as "source -> target".
    """

    elapsed_s: float
    nodes: tuple[NodeReading, ...]
    wires: tuple[WireReading, ...]
    tripped_breakers: tuple[str, ...] = ()
    overcurrents: tuple[str, ...] = ()

    @classmethod
    def capture(
        cls,
        network: ComponentNetwork,
        elapsed_s: float,
        overcurrents: tuple[str, ...] = (),
    ) -> "ElectricalSnapshot":
        """Capture the present outputs of every node and wire of a network."""
        nodes = []
        tripped = []
        for handle in network.nodes():
            component = network.get_component(handle)
            nodes.append(
                NodeReading(
                    name=network.node_name(handle),
                    kind=component.kind.value,
                    voltage_v=component.get_output_voltage().m_as("volt"),
                    power_w=component.get_output_power().m_as("watt"),
                    current_a=component.get_output_current().m_as("ampere"),
                )
            )
            breaker = network.get_component(handle, ComponentKind.CIRCUIT_BREAKER)
            if breaker is not None and breaker.is_tripped:
                tripped.append(network.node_name(handle))

        wires = tuple(
            WireReading(
                source=network.node_name(edge.source),
                target=network.node_name(edge.target),
                current_a=edge.current.m_as("ampere"),
            )
            for edge in network.edges()
        )

        return cls(
            elapsed_s=elapsed_s,
            nodes=tuple(nodes),
            wires=wires,
            tripped_breakers=tuple(tripped),
            overcurrents=overcurrents,
        )

    def node(self, name: str) -> NodeReading | None:
        """Get the reading of a component by name."""
        for reading in self.nodes:
            if reading.name == name:
                return reading
        return None


@dataclass(frozen=True)
class HydraulicSnapshot:
    """State of one actuator after one tick (SI units)."""

    name: str
    elapsed_s: float
    position_m: float
    velocity_m_s: float
    acceleration_m_s2: float
    cap_pressure_pa: float
    rod_pressure_pa: float
    extension_ratio: float
    valve_opening: float

    @classmethod
    def capture(
        cls, name: str, actuator: HydraulicActuator, elapsed_s: float
    ) -> "HydraulicSnapshot":
        """Capture the present state of an actuator."""
        state = actuator.state_vector()
        return cls(
            name=name,
            elapsed_s=elapsed_s,
            position_m=float(state[0]),
            velocity_m_s=float(state[1]),
            acceleration_m_s2=float(state[2]),
            cap_pressure_pa=float(state[3]),
            rod_pressure_pa=float(state[4]),
            extension_ratio=actuator.extension_ratio(),
            valve_opening=actuator.valve_opening(),
        )
