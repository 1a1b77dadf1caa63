"""Test result sink port."""

from __future__ import annotations

import abc
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from fixtureguard.domain.model import TestDescriptor


class ResultSink(abc.ABC):
    """Receives failures to be recorded against a test without raising."""

    @abc.abstractmethod
    def record_failure(self, test: TestDescriptor, message: str) -> None:
        """Mark ``test`` as failed with ``message``."""
