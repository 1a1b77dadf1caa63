"""Residual-data detection.

Rows are compared by count only: when a table holds more rows after a test
than in its snapshot, the trailing rows (in fetch order) are reported as
leaked. Replacing or reordering rows without changing the count goes
unnoticed, and a table that shrank reports nothing.
"""

from __future__ import annotations

import pprint
from collections.abc import Sequence
from dataclasses import dataclass, field

from .model import Row

ISOLATION_PROBLEM_PREFIX = "There was a problem with isolation: "  # pragma: no mutate


def data_diff(before: Sequence[Row], after: Sequence[Row]) -> list[Row]:
    """Return the rows of ``after`` past the length of ``before``.

    Args:
        before: Rows captured in the snapshot.
        after: Rows fetched after the test.

    Returns:
        The trailing ``len(after) - len(before)`` rows, or an empty list when
        ``after`` is not longer than ``before``.
    """
    if len(before) == len(after):
        return []
    return list(after[len(before) :])


@dataclass(slots=True)
class ResidualReport:
    """Outcome of one residual check across all monitored tables.

    Attributes:
        leaked: Leaked rows per table; only tables with a diff appear.
        errors: Fetch errors per table.
        skipped: Tables that could not be read because no database is configured.
    """

    leaked: dict[str, list[Row]] = field(default_factory=dict)
    errors: dict[str, str] = field(default_factory=dict)
    skipped: list[str] = field(default_factory=list)

    @property
    def clean(self) -> bool:
        return not self.leaked and not self.errors

    def isolation_message(self) -> str | None:
        """Single failure message listing every table with leaked rows."""
        if not self.leaked:
            return None
        problem = {table: [dict(r) for r in rows] for table, rows in self.leaked.items()}
        return ISOLATION_PROBLEM_PREFIX + pprint.pformat(problem, sort_dicts=False)

    def error_message(self) -> str | None:
        if not self.errors:
            return None
        lines = [f"  {table}: {err}" for table, err in self.errors.items()]
        return "Could not verify isolation for:\n" + "\n".join(lines)
