"""Component network: directed-graph execution engine for electrical systems.

The network owns every electrical component of an aircraft as a node of a
directed acyclic graph. Edges are wires carrying a resistance and the
current computed on the last tick.

Each tick (``update``):
    1. Walk the nodes in topological order, updating each component and
       recording its output voltage.
    2. Recompute every edge current from the recorded voltages:
       (V_source - V_target) / R, or 0 when R <= 0.
    3. Walk the nodes in topological order again, pushing each node's output
       voltage and power and the connecting edge's current onto the inputs of
       its downstream neighbors.

Components therefore react to their upstream predecessors within the same
tick; anything that depends on downstream feedback lags by one tick.

Cycles cannot be given a per-tick order, so ``connect`` rejects any edge that
would close one.

Typical usage:
    network = ComponentNetwork()
    gen = network.add_component(generator, "main_generator")
    bus = network.add_component(Bus("main_bus"))
    network.connect_no_resistance(gen, bus)
    network.update(dt=16.0)
    current = network.get_current(gen, bus)
"""

from collections import deque
from dataclasses import dataclass, field, replace
from typing import NewType

import pint

from aerotwin.core.logging_system import get_logger
from aerotwin.core.units import amps, ohms, parse_quantity
from aerotwin.systems.electrical.base import ComponentKind, IPhysicalComponent

logger = get_logger(__name__)

NodeHandle = NewType("NodeHandle", int)

# Resistance of connect_no_resistance wires
NO_RESISTANCE = ohms(0.001)


def _as_quantity(value: pint.Quantity | float, unit: str) -> pint.Quantity:
    if isinstance(value, pint.Quantity):
        return value.to(unit)
    return parse_quantity(value, unit)


class NetworkError(Exception):
    """Raised when a network is assembled incorrectly."""


class UnknownNodeError(NetworkError):
    """Raised when a handle does not belong to the network."""


class CyclicConnectionError(NetworkError):
    """Raised when a connection would create a cycle."""


@dataclass(frozen=True)
class Edge:
    """Directed wire between two components.

    Attributes:
        source: Upstream node.
        target: Downstream node.
        resistance: Wire resistance.
        current: Current computed on the last tick (derived, read-only).
    """

    source: NodeHandle
    target: NodeHandle
    resistance: pint.Quantity
    current: pint.Quantity = field(default_factory=lambda: amps(0.0))


@dataclass(frozen=True)
class Overcurrent:
    """Edge whose current exceeded an audit limit.

    Attributes:
        source: Upstream node.
        target: Downstream node.
        source_name: Name of the upstream component.
        target_name: Name of the downstream component.
        current: Offending current.
    """

    source: NodeHandle
    target: NodeHandle
    source_name: str
    target_name: str
    current: pint.Quantity


class ComponentNetwork:
    """Directed acyclic graph of electrical components.

    Handles are small integers issued in registration order; they are never
    reused. Nodes and edges are iterated in insertion order, which makes the
    topological order (and therefore every tick) deterministic.

    Examples:
        >>> network = ComponentNetwork()
        >>> bus = network.add_component(Bus("main_bus"))
        >>> cb = network.add_component(breaker)
        >>> network.connect(bus, cb, ohms(0.01))
        >>> network.update(16.0)
        >>> network.get_current(bus, cb)
        <Quantity(0.0, 'ampere')>
    """

    def __init__(self) -> None:
        """Initialize an empty network."""
        self._components: dict[NodeHandle, IPhysicalComponent] = {}
        self._names: dict[NodeHandle, str] = {}
        self._successors: dict[NodeHandle, list[NodeHandle]] = {}
        self._edges: dict[tuple[NodeHandle, NodeHandle], Edge] = {}
        self._next_handle = 0
        self._order: list[NodeHandle] | None = None

    def __len__(self) -> int:
        return len(self._components)

    def __contains__(self, handle: object) -> bool:
        return handle in self._components

    def add_component(self, component: IPhysicalComponent, name: str | None = None) -> NodeHandle:
        """Register a component.

        Args:
            component: Component to own.
            name: Diagnostic name. Defaults to the component's own name.

        Returns:
            Stable handle for the new node, usable immediately by ``connect``.
        """
        handle = NodeHandle(self._next_handle)
        self._next_handle += 1

        self._components[handle] = component
        self._names[handle] = name if name is not None else component.name
        self._successors[handle] = []
        self._order = None

        logger.debug(
            "Registered %s '%s' as node %d", component.kind.value, self._names[handle], handle
        )
        return handle

    def connect(
        self,
        source: NodeHandle,
        target: NodeHandle,
        resistance: pint.Quantity | float,
    ) -> None:
        """Add or overwrite a directed wire.

        Re-connecting an existing pair overwrites its resistance and resets
        its cached current.

        Args:
            source: Upstream node.
            target: Downstream node.
            resistance: Wire resistance (a quantity, or a number in ohms).

        Raises:
            UnknownNodeError: If either handle is not in the network.
            ValueError: If the resistance is negative.
            CyclicConnectionError: If the wire would close a cycle.
        """
        self._require(source)
        self._require(target)

        resistance = _as_quantity(resistance, "ohm")
        if resistance.magnitude < 0:
            raise ValueError(f"Wire resistance must be >= 0, got {resistance}")

        key = (source, target)
        if key not in self._edges:
            if source == target or self._reaches(target, source):
                logger.error(
                    "Rejected connection %s -> %s: it would create a cycle",
                    self._names[source],
                    self._names[target],
                )
                raise CyclicConnectionError(
                    f"Connecting '{self._names[source]}' -> '{self._names[target]}' "
                    "would create a cycle"
                )
            self._successors[source].append(target)
            self._order = None

        self._edges[key] = Edge(source, target, resistance)
        logger.debug(
            "Connected %s -> %s (%.4f ohm)",
            self._names[source],
            self._names[target],
            resistance.magnitude,
        )

    def connect_no_resistance(self, source: NodeHandle, target: NodeHandle) -> None:
        """Connect two nodes with a near-zero resistance wire."""
        self.connect(source, target, NO_RESISTANCE)

    def update(self, dt: float) -> None:
        """Advance every component one tick and propagate values downstream.

        Args:
            dt: Elapsed time in milliseconds.
        """
        order = self.topological_order()

        voltages: dict[NodeHandle, pint.Quantity] = {}
        for handle in order:
            component = self._components[handle]
            component.update(dt)
            voltages[handle] = component.get_output_voltage()

        for key, edge in self._edges.items():
            if edge.resistance.magnitude > 0:
                current = ((voltages[edge.source] - voltages[edge.target]) / edge.resistance).to(
                    "ampere"
                )
            else:
                current = amps(0.0)
            self._edges[key] = replace(edge, current=current)

        for handle in order:
            component = self._components[handle]
            output_voltage = component.get_output_voltage()
            output_power = component.get_output_power()

            for neighbor in self._successors[handle]:
                downstream = self._components[neighbor]
                downstream.set_input_voltage(output_voltage)
                downstream.set_input_power(output_power)
                downstream.set_input_current(self._edges[(handle, neighbor)].current)

    def check_overcurrent(self, limit: pint.Quantity | float) -> list[Overcurrent]:
        """List every wire whose last computed current exceeds a limit.

        Purely informational: nothing is tripped or modified.

        Args:
            limit: Current limit (a quantity, or a number in amperes).

        Returns:
            Offending wires in connection order.
        """
        limit = _as_quantity(limit, "ampere")

        return [
            Overcurrent(
                source=edge.source,
                target=edge.target,
                source_name=self._names[edge.source],
                target_name=self._names[edge.target],
                current=edge.current,
            )
            for edge in self._edges.values()
            if edge.current > limit
        ]

    def get_current(self, source: NodeHandle, target: NodeHandle) -> pint.Quantity | None:
        """Get the last computed current of a wire.

        Returns:
            The current, or None if the two nodes are not connected.
        """
        edge = self._edges.get((source, target))
        if edge is None:
            return None
        return edge.current

    def get_component(
        self, handle: NodeHandle, kind: ComponentKind | None = None
    ) -> IPhysicalComponent | None:
        """Get the component bound to a node.

        Args:
            handle: Node handle.
            kind: Expected component kind, or None to accept any.

        Returns:
            The component, or None if it is not of the requested kind.

        Raises:
            UnknownNodeError: If the handle is not in the network.
        """
        self._require(handle)
        component = self._components[handle]
        if kind is not None and component.kind != kind:
            return None
        return component

    def find(self, name: str) -> NodeHandle | None:
        """Get the handle of the first node registered under a name."""
        for handle, node_name in self._names.items():
            if node_name == name:
                return handle
        return None

    def node_name(self, handle: NodeHandle) -> str:
        """Get the diagnostic name of a node.

        Raises:
            UnknownNodeError: If the handle is not in the network.
        """
        self._require(handle)
        return self._names[handle]

    def nodes(self) -> list[NodeHandle]:
        """Get every node handle in registration order."""
        return list(self._components)

    def edges(self) -> list[Edge]:
        """Get every wire in connection order."""
        return list(self._edges.values())

    def neighbors(self, handle: NodeHandle) -> list[NodeHandle]:
        """Get the downstream neighbors of a node.

        Raises:
            UnknownNodeError: If the handle is not in the network.
        """
        self._require(handle)
        return list(self._successors[handle])

    def topological_order(self) -> list[NodeHandle]:
        """Get the execution order of the nodes.

        Kahn's algorithm over insertion-ordered nodes; the result is cached
        until the graph changes.

        Returns:
            Every node, each after all of its upstream nodes.

        Raises:
            CyclicConnectionError: If the graph contains a cycle.
        """
        if self._order is not None:
            return list(self._order)

        in_degree = {handle: 0 for handle in self._components}
        for _source, target in self._edges:
            in_degree[target] += 1

        ready = deque(handle for handle, degree in in_degree.items() if degree == 0)
        order: list[NodeHandle] = []

        while ready:
            handle = ready.popleft()
            order.append(handle)
            for neighbor in self._successors[handle]:
                in_degree[neighbor] -= 1
                if in_degree[neighbor] == 0:
                    ready.append(neighbor)

        if len(order) != len(self._components):
            raise CyclicConnectionError("Component network contains a cycle")

        self._order = order
        return list(order)

    def _reaches(self, start: NodeHandle, goal: NodeHandle) -> bool:
        """Check whether goal is downstream of start."""
        stack = [start]
        seen = {start}
        while stack:
            handle = stack.pop()
            if handle == goal:
                return True
            for neighbor in self._successors[handle]:
                if neighbor not in seen:
                    seen.add(neighbor)
                    stack.append(neighbor)
        return False

    def _require(self, handle: NodeHandle) -> None:
        if handle not in self._components:
            raise UnknownNodeError(f"Unknown node handle: {handle!r}")
