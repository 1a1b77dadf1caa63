"""Exceptions raised by fixtureguard."""

from __future__ import annotations

from collections.abc import Sequence


class FixtureGuardError(Exception):
    """Base class for fixtureguard errors."""


class FixtureNotFoundError(FixtureGuardError):
    """A fixture identifier could not be resolved to a callable or script.

    Attributes:
        identifier (str): The identifier as declared on the test.
    """

    def __init__(self, identifier: str, reason: str = ""):
        message = f"Fixture {identifier!r} could not be resolved"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)
        self.identifier = identifier


class FixtureError(FixtureGuardError):
    """A fixture raised while it was being applied.

    Attributes:
        identifier (str): The failing fixture.
    """

    def __init__(self, identifier: str, cause: BaseException):
        super().__init__(f"Error in fixture: {identifier!r}.\n {cause}")
        self.identifier = identifier


class FixtureRollbackError(FixtureGuardError):
    """One or more fixture rollbacks raised.

    All rollbacks are attempted before this is raised.

    Attributes:
        failures (list[tuple[str, BaseException]]): Identifier and exception
            of each failed rollback, in revert order.
    """

    def __init__(self, failures: Sequence[tuple[str, BaseException]]):
        details = "; ".join(f"{ident!r}: {exc}" for ident, exc in failures)
        super().__init__(f"Error reverting fixtures: {details}")
        self.failures = list(failures)


class SnapshotCaptureError(FixtureGuardError):
    """Baseline table data could not be pulled.

    Attributes:
        table (str): The table whose fetch failed.
    """

    def __init__(self, table: str, cause: BaseException | str):
        super().__init__(f"Could not capture table {table!r}: {cause}")
        self.table = table
