"""Table readers.

`SqlAlchemyTableReader` selects every row of a table through a SQLAlchemy
engine. `InMemoryTableReader` serves rows from a dict and is used by unit
tests and dry runs.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping, MutableMapping
from typing import TYPE_CHECKING

from sqlalchemy import inspect, select, table, text
from sqlalchemy.exc import SQLAlchemyError

from fixtureguard.domain.model import Row, rows_of
from fixtureguard.interfaces.table_reader import FetchResult, TableReader

if TYPE_CHECKING:
    from sqlalchemy.engine import Engine

logger = logging.getLogger(__name__)


class SqlAlchemyTableReader(TableReader):
    """Reads tables with ``SELECT *`` (no ORDER BY: rows come in fetch order).

    Args:
        engine: Engine to read through, or None when the suite has no database.
    """

    def __init__(self, engine: Engine | None):
        self.engine = engine

    def fetch_all_rows(self, table_name: str) -> FetchResult:
        if self.engine is None:
            return FetchResult.not_configured()
        stmt = select(text("*")).select_from(table(table_name))
        try:
            with self.engine.connect() as conn:
                rows = conn.execute(stmt).mappings().all()
        except SQLAlchemyError as e:
            logger.debug("Fetching table %s failed: %s", table_name, e)
            return FetchResult.failed(e)
        return FetchResult.ok(rows_of(rows))

    def list_tables(self) -> list[str]:
        if self.engine is None:
            return []
        return sorted(inspect(self.engine).get_table_names())


class InMemoryTableReader(TableReader):
    """Dict-backed reader.

    Tables missing from ``tables`` read as failed; a ``None`` mapping reads as
    not configured.
    """

    def __init__(self, tables: MutableMapping[str, list[Row]] | None = None):
        self.tables = tables

    def fetch_all_rows(self, table_name: str) -> FetchResult:
        if self.tables is None:
            return FetchResult.not_configured()
        if table_name not in self.tables:
            return FetchResult.failed(f"no such table: {table_name}")
        return FetchResult.ok(rows_of(self.tables[table_name]))

    def list_tables(self) -> list[str]:
        return sorted(self.tables or {})

    def insert(self, table_name: str, *rows: Mapping) -> None:
        """Append rows to a table, creating it if needed."""
        if self.tables is None:
            self.tables = {}
        self.tables.setdefault(table_name, []).extend(dict(r) for r in rows)
