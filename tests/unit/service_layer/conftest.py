"""Fixtures wiring the controller to fakes."""

from dataclasses import dataclass

import pytest

from fixtureguard.adapters.result_sink import CollectingResultSink
from fixtureguard.service_layer.coordinator import TestRunCoordinator
from fixtureguard.service_layer.data_fixture import DataFixtureController
from fixtureguard.service_layer.isolation import IsolationResolver
from fixtureguard.service_layer.snapshot import TableSnapshot

from .fakes import CountingReader, FakeRegistry, RecordingTransactions

# pylint: disable=redefined-outer-name


@dataclass
class Harness:
    """A coordinator wired to fakes sharing one event log."""

    events: list[str]
    registry: FakeRegistry
    reader: CountingReader
    transactions: RecordingTransactions
    sink: CollectingResultSink
    snapshot: TableSnapshot
    controller: DataFixtureController
    coordinator: TestRunCoordinator

    def run(self, test) -> None:
        self.coordinator.start_test(test)
        self.events.append(f"run:{test.nodeid}")
        self.coordinator.end_test(test)


@pytest.fixture
def harness() -> Harness:
    """Coordinator + controller over an in-memory ``store`` table with one row."""
    events: list[str] = []
    registry = FakeRegistry(events)
    reader = CountingReader(
        {"store": [{"store_id": 1, "code": "admin"}], "store_website": []}
    )
    transactions = RecordingTransactions(events)
    sink = CollectingResultSink()
    snapshot = TableSnapshot(("store", "store_website"))
    controller = DataFixtureController(
        registry, reader, sink, snapshot, IsolationResolver()
    )
    coordinator = TestRunCoordinator(transactions, [controller])
    return Harness(
        events, registry, reader, transactions, sink, snapshot, controller, coordinator
    )
