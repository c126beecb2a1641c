"""Base interface for electrical network components.

Every element of an electrical network (generator, bus, circuit breaker,
load) implements IPhysicalComponent. The network only talks to components
through this interface: it advances them one tick, reads their outputs and
writes their inputs.

Each component also carries a ComponentKind tag so callers that need a
concrete component's extra operations (e.g. starting a generator) can ask
the network for a node of a given kind instead of testing concrete classes.

Typical usage:
    class MyComponent(IPhysicalComponent):
        kind = ComponentKind.BUS

        def update(self, dt: float) -> None:
            # Advance internal state by dt milliseconds
            pass
"""

from abc import ABC, abstractmethod
from enum import Enum

import pint

from aerotwin.core.units import amps


class ComponentKind(Enum):
    """Closed set of electrical component variants."""

    GENERATOR = "generator"  # Rotating power source
    BUS = "bus"  # Lossless distribution node
    CIRCUIT_BREAKER = "circuit_breaker"  # Protective device
    DC_LOAD = "dc_load"  # Consumer with a voltage-response law


class IPhysicalComponent(ABC):
    """Abstract base class for electrical network components.

    Outputs reflect the last ``update``; they are never changed while the
    network propagates values between components. Inputs written through the
    ``set_input_*`` methods are used on the next ``update``. A component that
    has no use for an input accepts the write and ignores it.

    Attributes:
        kind: Variant tag of the concrete component.
        name: Component identifier used in diagnostics.
    """

    kind: ComponentKind

    def __init__(self, name: str) -> None:
        """Initialize the component.

        Args:
            name: Component identifier (e.g., "main_bus", "avionics_cb").
        """
        self.name = name

    @abstractmethod
    def update(self, dt: float) -> None:
        """Advance internal state.

        A zero or negative ``dt`` must leave physically meaningful state
        unchanged.

        Args:
            dt: Elapsed time in milliseconds since the previous tick.
        """

    @abstractmethod
    def get_output_voltage(self) -> pint.Quantity:
        """Get the present output voltage."""

    @abstractmethod
    def get_output_power(self) -> pint.Quantity:
        """Get the present output power."""

    def get_output_current(self) -> pint.Quantity:
        """Get the present output current.

        Components that do not track current derive it from output power and
        voltage; an unpowered output carries no current.

        Returns:
            Output current in amperes.
        """
        voltage = self.get_output_voltage()
        if voltage.magnitude <= 0:
            return amps(0.0)
        return (self.get_output_power() / voltage).to("ampere")

    @abstractmethod
    def set_input_voltage(self, voltage: pint.Quantity) -> None:
        """Set the voltage applied by the upstream component."""

    @abstractmethod
    def set_input_power(self, power: pint.Quantity) -> None:
        """Set the power offered by the upstream component."""

    @abstractmethod
    def set_input_current(self, current: pint.Quantity) -> None:
        """Set the current flowing in from the upstream connection."""

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self.name!r})"
