"""Data fixture controller.

Applies the fixtures a test declares and reverts them afterwards. With
transactional isolation the controller asks for a transaction before the
test and applies the fixtures once it has begun; rolling it back undoes
them. With isolation disabled the fixtures are applied directly, reverted
after the test, and the monitored tables are checked for rows the test left
behind.

Problems are recorded on the result sink against the running test rather
than raised, so the offending test fails and the rest of the suite runs.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from fixtureguard.interfaces.observer import TestLifecycleObserver

if TYPE_CHECKING:
    from fixtureguard.domain.model import TestDescriptor
    from fixtureguard.interfaces.fixture_registry import FixtureRegistry
    from fixtureguard.interfaces.observer import TransactionRequest
    from fixtureguard.interfaces.result_sink import ResultSink
    from fixtureguard.interfaces.table_reader import TableReader
    from fixtureguard.service_layer.isolation import IsolationResolver
    from fixtureguard.service_layer.snapshot import TableSnapshot

logger = logging.getLogger(__name__)


class DataFixtureController(TestLifecycleObserver):
    """Wraps each test's fixtures in a transaction or a snapshot check.

    Args:
        registry: Resolves, applies and reverts fixtures.
        reader: Reads monitored tables for the snapshot and residual check.
        sink: Where failures are recorded.
        snapshot: Process-wide table snapshot.
        resolver: Isolation mode of each test.
        ignore_fetch_errors: When True, tables that fail to read during the
            residual check are skipped silently instead of failing the test.
    """

    def __init__(  # pylint: disable=too-many-arguments
        self,
        registry: FixtureRegistry,
        reader: TableReader,
        sink: ResultSink,
        snapshot: TableSnapshot,
        resolver: IsolationResolver,
        *,
        ignore_fetch_errors: bool = False,
    ):
        self.registry = registry
        self.reader = reader
        self.sink = sink
        self.snapshot = snapshot
        self.resolver = resolver
        self.ignore_fetch_errors = ignore_fetch_errors
        self._rollback_owed: str | None = None

    def before_test(self, test: TestDescriptor, request: TransactionRequest) -> None:
        fixtures = self.registry.get_fixtures(test)
        if not fixtures:
            return
        if not self.resolver.is_disabled(test):
            # begin first so every fixture can be undone by the rollback
            logger.debug("Requesting transaction for %s", test.nodeid)
            request.request_start()
            self._rollback_owed = test.nodeid
        else:
            self._save_db_state(test)
            self.registry.apply_fixtures(fixtures)

    def after_test(self, test: TestDescriptor, request: TransactionRequest) -> None:
        owed = self._rollback_owed == test.nodeid
        self._rollback_owed = None
        if not self.registry.get_fixtures(test):
            return
        if not self.resolver.is_disabled(test):
            if owed or self.registry.applied_fixtures:
                logger.debug("Requesting rollback for %s", test.nodeid)
                request.request_rollback()
        elif self.registry.applied_fixtures:
            try:
                self.registry.revert_fixtures()
            finally:
                self._check_residual_data(test)

    def on_transaction_begin(self, test: TestDescriptor) -> None:
        if self.resolver.is_disabled(test):
            return
        self.registry.apply_fixtures(self.registry.get_fixtures(test))

    def on_transaction_end(self, test: TestDescriptor) -> None:
        self.registry.revert_fixtures()

    def _save_db_state(self, test: TestDescriptor) -> None:
        try:
            self.snapshot.capture(self.reader)
        except Exception as e:  # pylint: disable=broad-except
            logger.error("Could not capture table snapshot: %s", e)
            self.sink.record_failure(test, str(e))

    def _check_residual_data(self, test: TestDescriptor) -> None:
        report = self.snapshot.residual(self.reader)
        if report.skipped:
            logger.debug("Residual check skipped tables: %s", report.skipped)
        if message := report.isolation_message():
            logger.warning("Residual data after %s: %s", test.nodeid, list(report.leaked))
            self.sink.record_failure(test, message)
        if report.errors:
            logger.warning(
                "Residual check could not read %s after %s",
                list(report.errors),
                test.nodeid,
            )
            if not self.ignore_fetch_errors:
                self.sink.record_failure(test, report.error_message() or "")
