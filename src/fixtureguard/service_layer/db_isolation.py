"""Observer that wraps every transactional test in a transaction."""

from __future__ import annotations

from typing import TYPE_CHECKING

from fixtureguard.interfaces.observer import TestLifecycleObserver

if TYPE_CHECKING:
    from fixtureguard.domain.model import TestDescriptor
    from fixtureguard.interfaces.observer import TransactionRequest
    from fixtureguard.service_layer.isolation import IsolationResolver


class DbIsolationObserver(TestLifecycleObserver):
    """Requests a transaction around tests whose isolation is not disabled,
    whether or not they declare fixtures."""

    def __init__(self, resolver: IsolationResolver):
        self.resolver = resolver

    def before_test(self, test: TestDescriptor, request: TransactionRequest) -> None:
        if not self.resolver.is_disabled(test):
            request.request_start()

    def after_test(self, test: TestDescriptor, request: TransactionRequest) -> None:
        if not self.resolver.is_disabled(test):
            request.request_rollback()
