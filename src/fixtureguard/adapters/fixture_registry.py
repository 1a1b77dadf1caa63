"""Fixture registry that imports fixtures by identifier.

Two kinds of identifiers are understood:

``"package.module:function"``
    A callable taking a `FixtureContext`. Its rollback is
    ``function_rollback`` in the same module, if defined. A generator function
    is applied by running it to its first ``yield`` and reverted by resuming
    it, so setup and cleanup can live side by side.

``"path/to/fixture.py"``
    A script executed with ``ctx`` (the `FixtureContext`) in its globals.
    Relative paths are looked up in the configured fixture directory, then
    next to the test file. Its rollback is ``fixture_rollback.py`` in the same
    directory, if present.

Fixtures are applied in declaration order and reverted in reverse order.
"""

from __future__ import annotations

import importlib
import inspect
import logging
import runpy
from collections.abc import Callable, Generator, Iterator
from contextlib import contextmanager
from functools import reduce
from pathlib import Path
from typing import TYPE_CHECKING, Any

from fixtureguard.domain.errors import (
    FixtureError,
    FixtureGuardError,
    FixtureNotFoundError,
    FixtureRollbackError,
)
from fixtureguard.domain.model import FixtureSet, TestDescriptor
from fixtureguard.interfaces.fixture_registry import FixtureRegistry

if TYPE_CHECKING:
    from sqlalchemy.engine import Connection, Engine

    from fixtureguard.interfaces.transaction import TransactionManager

logger = logging.getLogger(__name__)

SCRIPT_SUFFIX = ".py"  # pragma: no mutate
ROLLBACK_SUFFIX = "_rollback"  # pragma: no mutate


class FixtureContext:
    """What a fixture gets to work with.

    Args:
        engine: Engine of the suite database, or None without a database.
        transactions: Manager of the current test transaction.
    """

    def __init__(self, engine: Engine | None, transactions: TransactionManager):
        self.engine = engine
        self.transactions = transactions

    @contextmanager
    def connect(self) -> Iterator[Connection]:
        """Yield a connection for fixture writes.

        Inside a test transaction this is the transaction's own connection and
        nothing is committed. Otherwise a fresh connection is opened and
        committed on success.

        Raises:
            FixtureGuardError: If no database is configured.
        """
        conn = self.transactions.connection
        if self.transactions.active and conn is not None:
            yield conn
            return
        if self.engine is None:
            raise FixtureGuardError("No database configured for fixtures")
        with self.engine.begin() as fresh:
            yield fresh


class _LoadedFixture:
    """A resolved fixture with its apply and revert steps."""

    def __init__(
        self,
        identifier: str,
        apply: Callable[[], Any],
        revert: Callable[[], Any] | None,
    ):
        self.identifier = identifier
        self._apply = apply
        self._revert = revert

    def apply(self) -> None:
        self._apply()

    def revert(self) -> None:
        if self._revert is not None:
            self._revert()


class ImportingFixtureRegistry(FixtureRegistry):
    """Resolves fixture identifiers to callables or scripts and runs them."""

    def __init__(self, context: FixtureContext, fixture_dir: Path | None = None):
        self.context = context
        self.fixture_dir = fixture_dir
        self._applied: list[_LoadedFixture] = []

    @property
    def applied_fixtures(self) -> tuple[str, ...]:
        return tuple(f.identifier for f in self._applied)

    def get_fixtures(self, test: TestDescriptor) -> FixtureSet:
        """Return the test's fixtures with relative script paths resolved."""
        return FixtureSet.of(self._locate(ident, test.path) for ident in test.fixtures)

    def apply_fixtures(self, fixtures: FixtureSet) -> None:
        for identifier in fixtures:
            fixture = self._load(identifier)
            logger.debug("Applying fixture %s", identifier)
            try:
                fixture.apply()
            except Exception as e:  # pylint: disable=broad-except
                raise FixtureError(identifier, e) from e
            self._applied.append(fixture)

    def revert_fixtures(self) -> None:
        failures: list[tuple[str, BaseException]] = []
        for fixture in reversed(self._applied):
            logger.debug("Reverting fixture %s", fixture.identifier)
            try:
                fixture.revert()
            except Exception as e:  # pylint: disable=broad-except
                logger.exception("Rollback of fixture %s failed", fixture.identifier)
                failures.append((fixture.identifier, e))
        self._applied.clear()
        if failures:
            raise FixtureRollbackError(failures)

    # ------------------------------------------------------------------ #
    # Resolution
    # ------------------------------------------------------------------ #

    def _locate(self, identifier: str, test_path: str | None) -> str:
        if not identifier.endswith(SCRIPT_SUFFIX) or Path(identifier).is_absolute():
            return identifier
        candidates = []
        if self.fixture_dir is not None:
            candidates.append(self.fixture_dir / identifier)
        if test_path:
            candidates.append(Path(test_path).parent / identifier)
        for candidate in candidates:
            if candidate.is_file():
                return str(candidate.resolve())
        return identifier

    def _load(self, identifier: str) -> _LoadedFixture:
        if identifier.endswith(SCRIPT_SUFFIX):
            return self._load_script(identifier)
        return self._load_callable(identifier)

    def _load_script(self, identifier: str) -> _LoadedFixture:
        path = Path(identifier)
        if not path.is_file():
            raise FixtureNotFoundError(identifier, "no such file")
        rollback = path.with_name(f"{path.stem}{ROLLBACK_SUFFIX}{SCRIPT_SUFFIX}")

        def run(script: Path) -> None:
            runpy.run_path(
                str(script), init_globals={"ctx": self.context}, run_name="__fixture__"
            )

        return _LoadedFixture(
            identifier,
            apply=lambda: run(path),
            revert=(lambda: run(rollback)) if rollback.is_file() else None,
        )

    def _load_callable(self, identifier: str) -> _LoadedFixture:
        module_name, sep, attr_path = identifier.partition(":")
        if not sep or not module_name or not attr_path:
            raise FixtureNotFoundError(
                identifier, "expected 'package.module:function' or a .py path"
            )
        try:
            module = importlib.import_module(module_name)
        except ImportError as e:
            raise FixtureNotFoundError(identifier, str(e)) from e
        try:
            fn = reduce(getattr, attr_path.split("."), module)
        except AttributeError as e:
            raise FixtureNotFoundError(identifier, str(e)) from e
        if not callable(fn):
            raise FixtureNotFoundError(identifier, "not callable")

        if inspect.isgeneratorfunction(fn):
            return self._generator_fixture(identifier, fn)

        rollback = getattr(module, f"{attr_path}{ROLLBACK_SUFFIX}", None)
        return _LoadedFixture(
            identifier,
            apply=lambda: fn(self.context),
            revert=(lambda: rollback(self.context)) if callable(rollback) else None,
        )

    def _generator_fixture(
        self, identifier: str, fn: Callable[..., Generator[Any, None, None]]
    ) -> _LoadedFixture:
        state: dict[str, Generator[Any, None, None]] = {}

        def apply() -> None:
            gen = fn(self.context)
            next(gen)
            state["gen"] = gen

        def revert() -> None:
            gen = state.pop("gen")
            try:
                next(gen)
            except StopIteration:
                return
            gen.close()
            raise FixtureGuardError(f"Fixture {identifier!r} yielded more than once")

        return _LoadedFixture(identifier, apply=apply, revert=revert)
