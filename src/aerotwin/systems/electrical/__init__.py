"""Electrical systems package.

Provides the physical-component interface, the concrete components
(generator, bus, circuit breaker, DC load) and the component network that
schedules them every tick.
"""

from aerotwin.systems.electrical.base import ComponentKind, IPhysicalComponent
from aerotwin.systems.electrical.bus import Bus
from aerotwin.systems.electrical.circuit_breaker import (
    BreakerState,
    CircuitBreaker,
    TripCurve,
    TripCurveKind,
)
from aerotwin.systems.electrical.dc_load import GenericDcLoad, VoltageResponse, VoltageStatus
from aerotwin.systems.electrical.generator import Generator, GeneratorState
from aerotwin.systems.electrical.network import (
    ComponentNetwork,
    CyclicConnectionError,
    Edge,
    NetworkError,
    NodeHandle,
    Overcurrent,
    UnknownNodeError,
)

__all__ = [
    "BreakerState",
    "Bus",
    "CircuitBreaker",
    "ComponentKind",
    "ComponentNetwork",
    "CyclicConnectionError",
    "Edge",
    "GenericDcLoad",
    "Generator",
    "GeneratorState",
    "IPhysicalComponent",
    "NetworkError",
    "NodeHandle",
    "Overcurrent",
    "TripCurve",
    "TripCurveKind",
    "UnknownNodeError",
    "VoltageResponse",
    "VoltageStatus",
]
