"""In-memory result sink."""

from __future__ import annotations

from collections import defaultdict
from typing import TYPE_CHECKING

from fixtureguard.interfaces.result_sink import ResultSink

if TYPE_CHECKING:
    from fixtureguard.domain.model import TestDescriptor


class CollectingResultSink(ResultSink):
    """Keeps failure messages per test id until they are popped."""

    def __init__(self) -> None:
        self.failures: defaultdict[str, list[str]] = defaultdict(list)

    def record_failure(self, test: TestDescriptor, message: str) -> None:
        self.failures[test.nodeid].append(message)

    def pop(self, nodeid: str) -> list[str]:
        """Return and forget the failures recorded for ``nodeid``."""
        return self.failures.pop(nodeid, [])
