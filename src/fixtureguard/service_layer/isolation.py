"""Isolation mode resolution."""

from __future__ import annotations

from fixtureguard.domain.model import IsolationMode, TestDescriptor


class IsolationResolver:
    """Resolves the isolation mode of a test, caching the answer per test id.

    Args:
        default: Mode for tests that do not declare one.
    """

    def __init__(self, default: IsolationMode = IsolationMode.TRANSACTIONAL):
        self.default = default
        self._cache: dict[str, IsolationMode] = {}

    def resolve(self, test: TestDescriptor) -> IsolationMode:
        if (mode := self._cache.get(test.nodeid)) is None:
            mode = test.db_isolation or self.default
            self._cache[test.nodeid] = mode
        return mode

    def is_disabled(self, test: TestDescriptor) -> bool:
        return self.resolve(test) is IsolationMode.DISABLED
