"""Database engine factory.

Every engine fixtureguard opens goes through `make_engine` so connections are
configured the same way whether they serve the test transaction, fixture
scripts, or snapshot reads.

Fixtures of tests with isolation disabled commit through one connection and
the residual check reads the monitored tables through another, right after
the fixtures were reverted. The reader has to see those commits at once, so
SQLite stays in its default rollback journal rather than WAL, where a
reader holding an older snapshot could miss rows a fixture left behind.

- **SQLite**: enforces foreign keys and keeps temp storage in memory.
- **Other backends**: used as-is.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from sqlalchemy import create_engine, event
from sqlalchemy.engine import URL, make_url

if TYPE_CHECKING:
    from sqlite3 import Connection as SQLiteConnection

    from sqlalchemy.engine import Engine

SQLITE_NAMES = {"sqlite", "sqlite+pysqlite"}


def is_sqlite(url: str | URL) -> bool:
    """Return True if the given SQLAlchemy URL or string corresponds to SQLite."""
    u = make_url(str(url))
    return u.get_backend_name() in SQLITE_NAMES


def make_engine(url: str | URL, *, echo: bool = False) -> Engine:
    """Create a SQLAlchemy Engine for the given URL.

    SQLite connections get ``foreign_keys=ON`` and ``temp_store=MEMORY``.
    The journal mode is left at the driver default.

    Args:
        url: Database connection URL (str or :class:`URL`).
        echo: If True, log SQL statements.

    Returns:
        Engine: Configured SQLAlchemy Engine.
    """

    engine = create_engine(url, echo=echo)

    if is_sqlite(url):

        @event.listens_for(engine, "connect")
        def _sqlite_pragmas(dbapi_conn: SQLiteConnection, conn_record):  # type: ignore #pylint: disable=W0613
            cur = dbapi_conn.cursor()
            cur.execute("PRAGMA foreign_keys=ON;")
            cur.execute("PRAGMA temp_store=MEMORY;")
            cur.close()

    return engine
