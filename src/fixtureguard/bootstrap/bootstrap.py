"""Build the coordinator and its collaborators from settings."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from fixtureguard.adapters.db.engine import make_engine
from fixtureguard.adapters.fixture_registry import FixtureContext, ImportingFixtureRegistry
from fixtureguard.adapters.result_sink import CollectingResultSink
from fixtureguard.adapters.table_reader import SqlAlchemyTableReader
from fixtureguard.adapters.transaction import (
    NullTransactionManager,
    SqlAlchemyTransactionManager,
)
from fixtureguard.config import FixtureGuardSettings
from fixtureguard.service_layer.coordinator import TestRunCoordinator
from fixtureguard.service_layer.data_fixture import DataFixtureController
from fixtureguard.service_layer.db_isolation import DbIsolationObserver
from fixtureguard.service_layer.isolation import IsolationResolver
from fixtureguard.service_layer.snapshot import TableSnapshot

if TYPE_CHECKING:
    from sqlalchemy.engine import Engine

    from fixtureguard.interfaces.transaction import TransactionManager

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class GuardContainer:
    """Everything a test run needs, wired together."""

    # pylint: disable=too-many-instance-attributes

    settings: FixtureGuardSettings
    engine: Engine | None
    coordinator: TestRunCoordinator
    controller: DataFixtureController
    registry: ImportingFixtureRegistry
    reader: SqlAlchemyTableReader
    sink: CollectingResultSink
    snapshot: TableSnapshot
    context: FixtureContext

    def dispose(self) -> None:
        if self.engine is not None:
            self.engine.dispose()


def build_container(
    settings: FixtureGuardSettings, engine: Engine | None = None
) -> GuardContainer:
    """Wire a container for ``settings``.

    Args:
        settings: Resolved settings.
        engine: Engine to use instead of one built from ``settings.db_url``.
    """
    if engine is None and settings.db_url:
        engine = make_engine(settings.db_url)

    transactions: TransactionManager = (
        SqlAlchemyTransactionManager(engine)
        if engine is not None
        else NullTransactionManager()
    )
    context = FixtureContext(engine, transactions)
    registry = ImportingFixtureRegistry(context, fixture_dir=settings.fixture_dir)
    reader = SqlAlchemyTableReader(engine)
    sink = CollectingResultSink()
    snapshot = TableSnapshot(settings.monitored_tables)
    resolver = IsolationResolver(settings.default_isolation)
    controller = DataFixtureController(
        registry,
        reader,
        sink,
        snapshot,
        resolver,
        ignore_fetch_errors=settings.ignore_fetch_errors,
    )

    coordinator = TestRunCoordinator(transactions)
    if settings.isolate_all_tests:
        coordinator.register(DbIsolationObserver(resolver))
    coordinator.register(controller)

    logger.debug(
        "fixtureguard wired: database=%s, default isolation=%s, monitored=%s",
        "yes" if engine is not None else "no",
        settings.default_isolation.value,
        list(settings.monitored_tables) or "<all>",
    )
    return GuardContainer(
        settings=settings,
        engine=engine,
        coordinator=coordinator,
        controller=controller,
        registry=registry,
        reader=reader,
        sink=sink,
        snapshot=snapshot,
        context=context,
    )


def bootstrap(settings: FixtureGuardSettings | None = None) -> GuardContainer:
    """Wire a container from ``settings`` or, if omitted, the environment."""
    return build_container(settings or FixtureGuardSettings.from_env())
