"""Transaction manager port."""

from __future__ import annotations

import abc
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from sqlalchemy.engine import Connection


class TransactionManager(abc.ABC):
    """Begins and rolls back the transaction wrapping a test.

    Both calls block on the database; connection failures propagate.
    """

    @abc.abstractmethod
    def begin(self) -> None:
        """Open the test transaction."""

    @abc.abstractmethod
    def rollback(self) -> None:
        """Roll back and release the test transaction."""

    @property
    @abc.abstractmethod
    def active(self) -> bool:
        """True while a transaction is open."""

    @property
    def connection(self) -> Connection | None:
        """Connection the open transaction runs on, if any."""
        return None
