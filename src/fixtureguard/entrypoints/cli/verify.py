"""``fixtureguard verify``: apply fixtures, revert them, look for leftovers.

Runs the fixtures the same way a test with isolation disabled would: the
monitored tables are snapshotted, the fixtures applied without a
transaction, then reverted, and any rows left behind are reported.
"""

from __future__ import annotations

import logging
from pathlib import Path

import click

from fixtureguard.bootstrap import build_container
from fixtureguard.config import FixtureGuardSettings
from fixtureguard.domain.errors import FixtureGuardError
from fixtureguard.domain.model import FixtureSet, IsolationMode, TestDescriptor

from ._common import require_db_url
from .helpers import error, sanitize_url, success, warn

logger = logging.getLogger(__name__)

VERIFY_NODEID = "fixtureguard::verify"  # pragma: no mutate


@click.command()
@click.argument("fixtures", nargs=-1, required=True)
@click.option(
    "--fixture-dir",
    type=click.Path(file_okay=False, path_type=Path),
    help="Base directory for relative fixture script paths.",
)
@click.option(
    "--ignore-fetch-errors",
    is_flag=True,
    help="Do not fail when a monitored table cannot be read afterwards.",
)
@click.pass_obj
def verify(
    settings: FixtureGuardSettings,
    fixtures: tuple[str, ...],
    fixture_dir: Path | None,
    ignore_fetch_errors: bool,
) -> None:
    """Apply and revert FIXTURES, then report rows they left behind."""
    require_db_url(settings)
    settings = settings.merged(
        default_isolation=IsolationMode.DISABLED,
        fixture_dir=fixture_dir,
        ignore_fetch_errors=ignore_fetch_errors or None,
    )
    logger.info(
        "Verifying %d fixture(s) against %s",
        len(fixtures),
        sanitize_url(settings.db_url or ""),
    )

    guard = build_container(settings)
    test = TestDescriptor(
        nodeid=VERIFY_NODEID,
        fixtures=FixtureSet.of(fixtures),
        db_isolation=IsolationMode.DISABLED,
        path=str(Path.cwd() / VERIFY_NODEID),
    )
    try:
        try:
            guard.coordinator.start_test(test)
        finally:
            guard.coordinator.end_test(test)
    except FixtureGuardError as e:
        raise click.ClickException(str(e)) from e
    finally:
        guard.dispose()

    if failures := guard.sink.pop(test.nodeid):
        for message in failures:
            error(message)
        raise click.exceptions.Exit(1)
    if not guard.snapshot.state:
        warn("No monitored tables found; fixtures were applied and reverted unchecked.")
        return
    success(f"No residual data in {len(guard.snapshot.state)} monitored table(s).")
