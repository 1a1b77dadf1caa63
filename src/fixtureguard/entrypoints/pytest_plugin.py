"""pytest plugin wiring fixtureguard into the test lifecycle.

Registered through the ``pytest11`` entry point. Tests declare fixtures and
isolation with markers::

    @pytest.mark.data_fixture("myapp.fixtures:two_stores", "fixtures/product.py")
    @pytest.mark.db_isolation("disabled")
    def test_something(fixture_context): ...

Markers on the closest node win: a function's markers replace its class's,
which replace its module's. Fixtures apply in the order they are written,
whether stacked as decorators or listed in a module's ``pytestmark``.

Isolation problems found after a test are reported as a failed teardown of
that test; the session carries on.
"""

from __future__ import annotations

import logging
from pathlib import Path

import pytest

from fixtureguard.adapters.fixture_registry import FixtureContext
from fixtureguard.bootstrap import GuardContainer, build_container
from fixtureguard.config import FixtureGuardSettings
from fixtureguard.domain.model import FixtureSet, IsolationMode, TestDescriptor

logger = logging.getLogger(__name__)

FIXTURE_MARKER = "data_fixture"  # pragma: no mutate
ISOLATION_MARKER = "db_isolation"  # pragma: no mutate
REPORT_SECTION = "fixtureguard"  # pragma: no mutate

GUARD_KEY = pytest.StashKey[GuardContainer]()


def pytest_addoption(parser: pytest.Parser) -> None:
    group = parser.getgroup("fixtureguard", "data fixture isolation")
    group.addoption(
        "--fixtureguard-db-url",
        dest="fixtureguard_db_url",
        default=None,
        help="SQLAlchemy URL of the database fixtures write to "
        "(default: FIXTUREGUARD_DB_URL).",
    )
    group.addoption(
        "--fixtureguard-isolation",
        dest="fixtureguard_isolation",
        choices=[mode.value for mode in IsolationMode],
        default=None,
        help="Isolation mode for tests without a db_isolation marker.",
    )
    parser.addini("fixtureguard_db_url", "SQLAlchemy URL of the test database.")
    parser.addini(
        "fixtureguard_monitored_tables",
        "Tables snapshotted for tests with isolation disabled (default: all).",
        type="linelist",
        default=[],
    )
    parser.addini(
        "fixtureguard_isolation",
        "Default isolation mode: transactional or disabled.",
    )
    parser.addini(
        "fixtureguard_fixture_dir",
        "Base directory for relative fixture script paths, relative to rootdir.",
    )
    parser.addini(
        "fixtureguard_isolate_all_tests",
        "Wrap every transactional test in a transaction, with or without fixtures.",
        type="bool",
        default=False,
    )
    parser.addini(
        "fixtureguard_ignore_fetch_errors",
        "Ignore tables that cannot be read during the residual check.",
        type="bool",
        default=False,
    )


def settings_from_config(config: pytest.Config) -> FixtureGuardSettings:
    """Layer ini options and command line options over the environment."""
    fixture_dir = config.getini("fixtureguard_fixture_dir")
    settings = FixtureGuardSettings.from_env().merged(
        db_url=config.getini("fixtureguard_db_url"),
        monitored_tables=config.getini("fixtureguard_monitored_tables"),
        default_isolation=config.getini("fixtureguard_isolation"),
        fixture_dir=config.rootpath / fixture_dir if fixture_dir else None,
        isolate_all_tests=config.getini("fixtureguard_isolate_all_tests"),
        ignore_fetch_errors=config.getini("fixtureguard_ignore_fetch_errors"),
    )
    return settings.merged(
        db_url=config.getoption("fixtureguard_db_url"),
        default_isolation=config.getoption("fixtureguard_isolation"),
    )


def pytest_configure(config: pytest.Config) -> None:
    config.addinivalue_line(
        "markers",
        f"{FIXTURE_MARKER}(*identifiers): data fixtures applied before the test "
        "and reverted after it ('package.module:function' or a .py script path).",
    )
    config.addinivalue_line(
        "markers",
        f"{ISOLATION_MARKER}(mode): 'transactional' (default) or 'disabled'.",
    )
    config.stash[GUARD_KEY] = build_container(settings_from_config(config))


def pytest_unconfigure(config: pytest.Config) -> None:
    if (guard := config.stash.get(GUARD_KEY, None)) is not None:
        guard.dispose()
        del config.stash[GUARD_KEY]


def describe(item: pytest.Item) -> TestDescriptor:
    """Build the framework-neutral descriptor of a pytest item."""
    identifiers: list[str] = []
    owner = None
    for node, mark in item.iter_markers_with_node(name=FIXTURE_MARKER):
        if owner is None:
            owner = node
        elif node is not owner:
            break
        args = [str(arg) for arg in mark.args]
        if isinstance(node, pytest.Module):
            # module ``pytestmark`` lists keep source order
            identifiers.extend(args)
        else:
            # stacked decorators are stored bottom-up
            identifiers[:0] = args

    isolation = None
    if (mark := item.get_closest_marker(ISOLATION_MARKER)) is not None:
        value = mark.args[0] if mark.args else mark.kwargs.get("mode", "")
        isolation = IsolationMode.from_string(value)

    return TestDescriptor(
        nodeid=item.nodeid,
        fixtures=FixtureSet.of(identifiers),
        db_isolation=isolation,
        path=str(Path(item.path)),
    )


@pytest.hookimpl(tryfirst=True)
def pytest_runtest_setup(item: pytest.Item) -> None:
    item.config.stash[GUARD_KEY].coordinator.start_test(describe(item))


@pytest.hookimpl(trylast=True)
def pytest_runtest_teardown(item: pytest.Item) -> None:
    item.config.stash[GUARD_KEY].coordinator.end_test(describe(item))


@pytest.hookimpl(wrapper=True)
def pytest_runtest_makereport(item: pytest.Item, call: pytest.CallInfo[None]):
    report = yield
    if call.when != "teardown":
        return report
    failures = item.config.stash[GUARD_KEY].sink.pop(item.nodeid)
    if not failures:
        return report
    message = "\n\n".join(failures)
    if report.passed:
        report.outcome = "failed"
        report.longrepr = message
    else:
        report.sections.append((REPORT_SECTION, message))
    return report


@pytest.fixture
def fixture_context(request: pytest.FixtureRequest) -> FixtureContext:
    """Context the current test's fixtures were applied with.

    Use ``fixture_context.connect()`` to see fixture rows from inside a
    transactional test.
    """
    return request.config.stash[GUARD_KEY].context
