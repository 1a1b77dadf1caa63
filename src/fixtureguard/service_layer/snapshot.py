"""Process-wide snapshot of monitored tables.

The snapshot is captured at most once, before the first test that runs
without a transaction, and is then compared against the tables after every
such test.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from types import MappingProxyType
from typing import TYPE_CHECKING

from fixtureguard.domain.errors import SnapshotCaptureError
from fixtureguard.domain.model import Row
from fixtureguard.domain.residual import ResidualReport, data_diff
from fixtureguard.interfaces.table_reader import FetchStatus

if TYPE_CHECKING:
    from fixtureguard.interfaces.table_reader import TableReader

logger = logging.getLogger(__name__)


class TableSnapshot:
    """Rows of each monitored table, captured once.

    Args:
        tables: Tables to monitor. Empty means every table the reader lists
            at capture time.
    """

    def __init__(self, tables: Sequence[str] = ()):
        self.tables = tuple(tables)
        self._state: dict[str, list[Row]] = {}
        self._captured = False

    @property
    def captured(self) -> bool:
        return self._captured

    @property
    def state(self) -> Mapping[str, list[Row]]:
        return MappingProxyType(self._state)

    def capture(self, reader: TableReader) -> None:
        """Capture every monitored table unless already captured.

        Tables that cannot be read because no database is configured are left
        unmonitored. Any other fetch failure discards what was read so far and
        leaves the snapshot uncaptured.

        Raises:
            SnapshotCaptureError: If a table fetch failed.
        """
        if self._captured:
            return
        tables = self.tables or tuple(reader.list_tables())
        state: dict[str, list[Row]] = {}
        for table in tables:
            result = reader.fetch_all_rows(table)
            if result.status is FetchStatus.NOT_CONFIGURED:
                logger.debug("Not monitoring %s: %s", table, result.error)
                continue
            if result.status is FetchStatus.FAILED:
                raise SnapshotCaptureError(table, result.error or "unknown error")
            state[table] = list(result.rows)
        self._state = state
        self._captured = True
        logger.debug(
            "Captured snapshot of %d table(s): %s",
            len(state),
            {table: len(rows) for table, rows in state.items()},
        )

    def residual(self, reader: TableReader) -> ResidualReport:
        """Compare the current tables with the snapshot."""
        report = ResidualReport()
        for table, before in self._state.items():
            result = reader.fetch_all_rows(table)
            if result.status is FetchStatus.NOT_CONFIGURED:
                report.skipped.append(table)
                continue
            if result.status is FetchStatus.FAILED:
                report.errors[table] = result.error or "unknown error"
                continue
            if diff := data_diff(before, result.rows):
                report.leaked[table] = diff
        return report
