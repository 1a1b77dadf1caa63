"""Test-run coordinator.

Notifies registered observers around each test and opens or rolls back the
test transaction when an observer asks for it. Tests run one at a time; a
coordinator holds at most one transaction.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from typing import TYPE_CHECKING

from fixtureguard.interfaces.observer import TestLifecycleObserver, TransactionRequest

if TYPE_CHECKING:
    from fixtureguard.domain.model import TestDescriptor
    from fixtureguard.interfaces.transaction import TransactionManager

logger = logging.getLogger(__name__)


class TestRunCoordinator:
    """Drives observers through the test lifecycle.

    Args:
        transactions: Opens and rolls back the test transaction.
        observers: Observers to register up front, notified in order.
    """

    __test__ = False  # not a pytest test class

    def __init__(
        self,
        transactions: TransactionManager,
        observers: Iterable[TestLifecycleObserver] = (),
    ):
        self.transactions = transactions
        self.observers: list[TestLifecycleObserver] = list(observers)
        self._in_transaction = False

    @property
    def in_transaction(self) -> bool:
        return self._in_transaction

    def register(self, observer: TestLifecycleObserver) -> None:
        self.observers.append(observer)

    def start_test(self, test: TestDescriptor) -> None:
        """Run the before-test hooks and begin a transaction if requested.

        Observer errors propagate. A transaction that was begun stays marked
        active so that `end_test` rolls it back.
        """
        request = TransactionRequest()
        for observer in self.observers:
            observer.before_test(test, request)
        if request.start_requested and not self._in_transaction:
            self.transactions.begin()
            self._in_transaction = True
            logger.debug("Transaction started for %s", test.nodeid)
            for observer in self.observers:
                observer.on_transaction_begin(test)

    def end_test(self, test: TestDescriptor) -> None:
        """Run the after-test hooks and roll back if requested.

        Every observer is notified and a requested rollback happens even if an
        earlier hook raised; the first error is re-raised afterwards.
        """
        request = TransactionRequest()
        error: Exception | None = None
        for observer in self.observers:
            try:
                observer.after_test(test, request)
            except Exception as e:  # pylint: disable=broad-except
                logger.exception("after_test hook failed for %s", test.nodeid)
                error = error or e
        if request.rollback_requested and self._in_transaction:
            try:
                self.transactions.rollback()
            finally:
                self._in_transaction = False
            logger.debug("Transaction rolled back for %s", test.nodeid)
            for observer in self.observers:
                try:
                    observer.on_transaction_end(test)
                except Exception as e:  # pylint: disable=broad-except
                    logger.exception(
                        "on_transaction_end hook failed for %s", test.nodeid
                    )
                    error = error or e
        if error is not None:
            raise error
