"""Tests for the typed broadcast store."""

import threading
from dataclasses import dataclass, field

from aerotwin.core.broadcast import BroadcastStore, ChannelCategory


@dataclass
class BusReading:
    """Test payload."""

    voltage: float
    loads: list[str] = field(default_factory=list)


@dataclass
class GearReading:
    """Another test payload."""

    extension: float


class TestBroadcastStore:
    """Test suite for BroadcastStore."""

    def test_receive_filters_by_type(self) -> None:
        """Test receive returns only payloads of the requested type."""
        store = BroadcastStore()
        store.send(ChannelCategory.ELECTRICAL, BusReading(28.0))
        store.send(ChannelCategory.ELECTRICAL, "not a reading")
        store.send(ChannelCategory.ELECTRICAL, BusReading(27.5))

        readings = store.receive(ChannelCategory.ELECTRICAL, BusReading)

        assert [reading.voltage for reading in readings] == [28.0, 27.5]

    def test_categories_are_independent(self) -> None:
        """Test payloads stay under their own category."""
        store = BroadcastStore()
        store.send(ChannelCategory.HYDRAULIC, GearReading(0.5))

        assert store.receive(ChannelCategory.ELECTRICAL, GearReading) == []
        assert len(store.receive(ChannelCategory.HYDRAULIC, GearReading)) == 1

    def test_empty_category(self) -> None:
        """Test reading an empty category returns nothing."""
        store = BroadcastStore()

        assert store.receive(ChannelCategory.ELECTRICAL, BusReading) == []
        assert store.latest(ChannelCategory.ELECTRICAL, BusReading) is None
        assert store.count(ChannelCategory.ELECTRICAL) == 0

    def test_receive_returns_copies(self) -> None:
        """Test callers own what they receive."""
        store = BroadcastStore()
        store.send(ChannelCategory.ELECTRICAL, BusReading(28.0, ["display"]))

        received = store.receive(ChannelCategory.ELECTRICAL, BusReading)[0]
        received.voltage = 0.0
        received.loads.append("light")

        stored = store.receive(ChannelCategory.ELECTRICAL, BusReading)[0]
        assert stored.voltage == 28.0
        assert stored.loads == ["display"]

    def test_latest_returns_newest_match(self) -> None:
        """Test latest skips newer payloads of other types."""
        store = BroadcastStore()
        store.send(ChannelCategory.ELECTRICAL, BusReading(27.0))
        store.send(ChannelCategory.ELECTRICAL, BusReading(28.0))
        store.send(ChannelCategory.ELECTRICAL, 42)

        latest = store.latest(ChannelCategory.ELECTRICAL, BusReading)

        assert latest is not None
        assert latest.voltage == 28.0

    def test_clear_single_category(self) -> None:
        """Test clearing one category leaves the others."""
        store = BroadcastStore()
        store.send(ChannelCategory.ELECTRICAL, BusReading(28.0))
        store.send(ChannelCategory.HYDRAULIC, GearReading(1.0))

        store.clear(ChannelCategory.ELECTRICAL)

        assert store.count(ChannelCategory.ELECTRICAL) == 0
        assert store.count(ChannelCategory.HYDRAULIC) == 1

    def test_clear_all(self) -> None:
        """Test clearing without a category empties the table."""
        store = BroadcastStore()
        store.send(ChannelCategory.ELECTRICAL, BusReading(28.0))
        store.send(ChannelCategory.HYDRAULIC, GearReading(1.0))

        store.clear()

        assert store.count(ChannelCategory.ELECTRICAL) == 0
        assert store.count(ChannelCategory.HYDRAULIC) == 0

    def test_concurrent_senders(self) -> None:
        """Test sends from several threads are all kept."""
        store = BroadcastStore()

        def publish(offset: int) -> None:
            for i in range(100):
                store.send(ChannelCategory.HYDRAULIC, GearReading(offset + i))

        threads = [threading.Thread(target=publish, args=(n * 1000,)) for n in range(4)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert store.count(ChannelCategory.HYDRAULIC) == 400
        assert len(store.receive(ChannelCategory.HYDRAULIC, GearReading)) == 400
