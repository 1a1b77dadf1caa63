"""``fixtureguard tables``: row counts of the monitored tables."""

from __future__ import annotations

import click
from rich.console import Console
from rich.markup import escape
from rich.table import Table
from sqlalchemy.exc import SQLAlchemyError

from fixtureguard.bootstrap import build_container
from fixtureguard.config import FixtureGuardSettings
from fixtureguard.interfaces.table_reader import FetchStatus

from ._common import require_db_url


@click.command()
@click.pass_obj
def tables(settings: FixtureGuardSettings) -> None:
    """List monitored tables and their row counts."""
    require_db_url(settings)
    guard = build_container(settings)
    try:
        names = settings.monitored_tables or tuple(guard.reader.list_tables())
        out = Table("table", "rows")
        for name in names:
            result = guard.reader.fetch_all_rows(name)
            if result.status is FetchStatus.OK:
                out.add_row(name, str(len(result.rows)))
            else:
                reason = (result.error or "").partition("\n")[0]
                out.add_row(name, f"[red]{escape(reason)}[/red]")
    except SQLAlchemyError as e:
        raise click.ClickException(f"Cannot read tables: {e}") from e
    finally:
        guard.dispose()
    Console().print(out)
