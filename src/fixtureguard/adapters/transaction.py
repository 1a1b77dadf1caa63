"""Transaction managers.

`SqlAlchemyTransactionManager` checks out one connection per test and holds
its transaction open until rollback. `NullTransactionManager` is used when
the suite runs without a database: begin/rollback only flip a flag so the
lifecycle still runs.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from fixtureguard.interfaces.transaction import TransactionManager

if TYPE_CHECKING:
    from sqlalchemy.engine import Connection, Engine, RootTransaction

logger = logging.getLogger(__name__)


class SqlAlchemyTransactionManager(TransactionManager):
    """SQLAlchemy-backed transaction manager."""

    def __init__(self, engine: Engine):
        self.engine = engine
        self._connection: Connection | None = None
        self._transaction: RootTransaction | None = None

    @property
    def active(self) -> bool:
        return self._transaction is not None and self._transaction.is_active

    @property
    def connection(self) -> Connection | None:
        return self._connection

    def begin(self) -> None:
        if self._connection is not None:
            raise RuntimeError("A test transaction is already open")
        self._connection = self.engine.connect()
        self._transaction = self._connection.begin()
        logger.debug("Test transaction begun")

    def rollback(self) -> None:
        if self._connection is None:
            return
        try:
            if self._transaction is not None and self._transaction.is_active:
                self._transaction.rollback()
        finally:
            self._connection.close()
            self._connection = None
            self._transaction = None
        logger.debug("Test transaction rolled back")


class NullTransactionManager(TransactionManager):
    """Transaction manager for suites without a database."""

    def __init__(self) -> None:
        self._active = False

    @property
    def active(self) -> bool:
        return self._active

    def begin(self) -> None:
        self._active = True

    def rollback(self) -> None:
        self._active = False
