"""Fixture registry port."""

from __future__ import annotations

import abc
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from fixtureguard.domain.model import FixtureSet, TestDescriptor


class FixtureRegistry(abc.ABC):
    """Resolves, applies and reverts the fixtures declared on tests.

    Implementations remember which fixtures were applied so that
    `revert_fixtures` can undo exactly those, in reverse order.
    """

    @abc.abstractmethod
    def get_fixtures(self, test: TestDescriptor) -> FixtureSet:
        """Return the fixtures declared on ``test``."""

    @abc.abstractmethod
    def apply_fixtures(self, fixtures: FixtureSet) -> None:
        """Apply fixtures in order, recording each one once it succeeds."""

    @abc.abstractmethod
    def revert_fixtures(self) -> None:
        """Revert every applied fixture in reverse order and forget them."""

    @property
    @abc.abstractmethod
    def applied_fixtures(self) -> tuple[str, ...]:
        """Identifiers applied and not yet reverted."""
