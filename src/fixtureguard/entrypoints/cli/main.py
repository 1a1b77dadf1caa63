"""fixtureguard CLI entry point.

Defines the top-level ``fixtureguard`` command (via Click-Extra) and its
subcommands.

- ``fixtureguard tables`` lists the monitored tables with their row counts.
- ``fixtureguard verify FIXTURE...`` checks that fixtures clean up after
  themselves.

Examples
    $ fixtureguard --db-url sqlite:///app.db tables
    $ fixtureguard verify myapp.fixtures:two_stores fixtures/product.py
"""

import logging
from pathlib import Path
from typing import TYPE_CHECKING

import click
import click_extra as clickx
from platformdirs import user_log_dir

from fixtureguard import __version__
from fixtureguard.config import FixtureGuardSettings
from fixtureguard.logging import config_console_handler, config_flight_recorder, log_startup

from .helpers import parse_log_level
from .tables import tables
from .verify import verify

if TYPE_CHECKING:
    from logging import Handler

logger = logging.getLogger(__name__)


HELP = """fixtureguard command-line interface.

    Inspect the tables fixtureguard monitors and verify that data fixtures
    leave no rows behind once reverted.
    """


@clickx.extra_group(
    version=__version__,
    help=HELP,
    params=[
        clickx.ColorOption(show_envvar=True),
        clickx.ExtraVersionOption(),
    ],
)
@click.option(
    "--verbose",
    "-v",
    "verbose_count",
    count=True,
    help="Increase the default WARNING verbosity by one level per repetition.",
    default=0,
)
@click.option(
    "--quiet",
    "-q",
    "quiet_count",
    count=True,
    help="Decrease the default WARNING verbosity by one level per repetition.",
    default=0,
)
@click.option(
    "--debug/--no-debug",
    is_flag=True,
    help="Enable debug formatting (timestamps, logger names, source paths).",
    default=False,
)
@click.option(
    "--log-path",
    type=click.Path(dir_okay=False, path_type=Path),
    help="File the flight recorder writes to when a WARNING is logged.",
    default=None,
    envvar="FIXTUREGUARD_LOG_PATH",
    show_envvar=True,
)
@click.option(
    "--flight-recorder/--no-flight-recorder",
    "flight_recorder",
    is_flag=True,
    help=(
        "Keep the last DEBUG records in memory and write them to --log-path "
        "when a WARNING or ERROR occurs."
    ),
    default=False,
    show_envvar=True,
)
@click.option(
    "-L",
    "--logger-level",
    "logger_levels",
    multiple=True,
    callback=parse_log_level,
    help="Set the minimum level of specific loggers (NAME=LEVEL). Repeatable.",
    envvar="FIXTUREGUARD_LOGGER_LEVEL",
    show_envvar=True,
    default=("sqlalchemy=WARNING",),
    show_default=True,
)
@click.option(
    "--db-url",
    "db_url",
    envvar="FIXTUREGUARD_DB_URL",
    show_envvar=True,
    help="SQLAlchemy URL of the database to inspect.",
)
@click.option(
    "--table",
    "-t",
    "monitored_tables",
    multiple=True,
    help="Monitored table (repeatable; default: FIXTUREGUARD_MONITORED_TABLES or all).",
)
@clickx.pass_context
def fixtureguard(  # pylint: disable=too-many-arguments, too-many-positional-arguments
    ctx: click.Context,
    verbose_count: int,
    quiet_count: int,
    debug: bool,
    log_path: Path | None,
    flight_recorder: bool,
    logger_levels: dict[str, int],
    db_url: str | None,
    monitored_tables: tuple[str, ...],
) -> None:
    """fixtureguard command-line interface."""

    level = logging.WARNING - (10 * verbose_count) + (10 * quiet_count)
    level = max(logging.DEBUG, min(logging.CRITICAL, level))

    handlers: list[Handler] = [
        config_console_handler(
            level=level, debug_mode=debug, color=ctx.color is not False
        )
    ]
    if flight_recorder:
        if log_path is None:
            log_path = (
                Path(user_log_dir("fixtureguard", appauthor=False, ensure_exists=True))
                / "latest.log"
            )
        handlers.append(config_flight_recorder(path=log_path))
    else:
        log_path = None

    logging.basicConfig(level=logging.DEBUG, handlers=handlers, force=True)
    for name, lvl in logger_levels.items():
        logging.getLogger(name).setLevel(lvl)

    log_startup(
        logger,
        app_version=__version__,
        level=level,
        handlers=handlers,
        log_path=log_path,
        logger_levels=logger_levels,
    )

    ctx.obj = FixtureGuardSettings.from_env().merged(
        db_url=db_url, monitored_tables=list(monitored_tables)
    )
    ctx.call_on_close(logging.shutdown)


fixtureguard.add_command(tables)
fixtureguard.add_command(verify)
