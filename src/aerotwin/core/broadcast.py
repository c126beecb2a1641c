"""Typed broadcast store for cross-subsystem signaling.

The store is a table keyed by a small, closed set of categories. Each
category holds an ordered sequence of arbitrary payloads. Readers ask for a
category *and* a payload type and get back copies of every payload of that
type; payloads of other types under the same category are skipped. This lets
independently scheduled subsystems exchange data without a shared schema.

A single lock guards the whole table, so the store is the one object that may
be shared between the simulation thread and a viewer thread.

The store is an explicit object: create it once at startup and hand it to
whatever needs it.

Typical usage example:
    from aerotwin.core.broadcast import BroadcastStore, ChannelCategory

    store = BroadcastStore()
    store.send(ChannelCategory.ELECTRICAL, snapshot)
    snapshots = store.receive(ChannelCategory.ELECTRICAL, ElectricalSnapshot)
"""

import copy
import threading
from enum import Enum
from typing import Any, TypeVar

T = TypeVar("T")


class ChannelCategory(Enum):
    """Categories of broadcast payloads."""

    ELECTRICAL = "electrical"
    HYDRAULIC = "hydraulic"


class BroadcastStore:
    """Process-wide keyed broadcast table.

    ``send`` stores the payload object itself (shared); ``receive`` hands out
    deep copies so callers own what they get back. Payloads never expire;
    callers that publish every tick are expected to ``clear`` what they have
    consumed.

    Examples:
        >>> store = BroadcastStore()
        >>> store.send(ChannelCategory.HYDRAULIC, 42)
        >>> store.send(ChannelCategory.HYDRAULIC, "gear down")
        >>> store.receive(ChannelCategory.HYDRAULIC, int)
        [42]
    """

    def __init__(self) -> None:
        """Initialize an empty store."""
        self._lock = threading.Lock()
        self._messages: dict[ChannelCategory, list[Any]] = {}

    def send(self, category: ChannelCategory, value: Any) -> None:
        """Append a payload under a category.

        Args:
            category: Category to publish under.
            value: Payload. Any type; stored by reference.
        """
        with self._lock:
            self._messages.setdefault(category, []).append(value)

    def receive(self, category: ChannelCategory, payload_type: type[T]) -> list[T]:
        """Get copies of every payload of a given type under a category.

        Args:
            category: Category to read.
            payload_type: Only payloads that are instances of this type are returned.

        Returns:
            Owned copies in publication order (empty if nothing matches).
        """
        with self._lock:
            matching = [
                value
                for value in self._messages.get(category, [])
                if isinstance(value, payload_type)
            ]
            return [copy.deepcopy(value) for value in matching]

    def latest(self, category: ChannelCategory, payload_type: type[T]) -> T | None:
        """Get a copy of the most recent payload of a given type.

        Args:
            category: Category to read.
            payload_type: Payload type to look for.

        Returns:
            Copy of the newest matching payload, or None if there is none.
        """
        with self._lock:
            for value in reversed(self._messages.get(category, [])):
                if isinstance(value, payload_type):
                    return copy.deepcopy(value)
        return None

    def clear(self, category: ChannelCategory | None = None) -> None:
        """Drop stored payloads.

        Args:
            category: Category to empty, or None to empty the whole table.
        """
        with self._lock:
            if category is None:
                self._messages.clear()
            else:
                self._messages.pop(category, None)

    def count(self, category: ChannelCategory) -> int:
        """Get the number of payloads stored under a category (any type)."""
        with self._lock:
            return len(self._messages.get(category, []))
