"""Test lifecycle observer port.

Observers are registered on a `TestRunCoordinator` and notified around each
test. `before_test`/`after_test` receive a `TransactionRequest` through which
an observer asks the coordinator to begin or roll back the test transaction;
`on_transaction_begin`/`on_transaction_end` fire once that has happened.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from fixtureguard.domain.model import TestDescriptor

# pylint: disable=unused-argument


class TransactionRequest:
    """Event parameter collecting transaction requests from observers."""

    def __init__(self) -> None:
        self._start = False
        self._rollback = False

    def request_start(self) -> None:
        self._start = True

    def request_rollback(self) -> None:
        self._rollback = True

    @property
    def start_requested(self) -> bool:
        return self._start

    @property
    def rollback_requested(self) -> bool:
        return self._rollback


class TestLifecycleObserver:
    """Base observer; every hook is a no-op by default."""

    __test__ = False  # not a pytest test class

    def before_test(self, test: TestDescriptor, request: TransactionRequest) -> None:
        """Called before the test body runs."""

    def after_test(self, test: TestDescriptor, request: TransactionRequest) -> None:
        """Called after the test body ran."""

    def on_transaction_begin(self, test: TestDescriptor) -> None:
        """Called once the test transaction has begun."""

    def on_transaction_end(self, test: TestDescriptor) -> None:
        """Called once the test transaction has been rolled back."""
