"""Table reader port.

`TableReader.fetch_all_rows` never raises for database problems. It returns a
`FetchResult` so callers can tell "no database configured" (a test that does
not use the database; safe to ignore) from a genuine fetch error.
"""

from __future__ import annotations

import abc
from collections.abc import Sequence
from dataclasses import dataclass, field
from enum import Enum

from fixtureguard.domain.model import Row


class FetchStatus(str, Enum):
    """Outcome of a table fetch."""

    OK = "ok"
    NOT_CONFIGURED = "not_configured"
    FAILED = "failed"


@dataclass(frozen=True, slots=True)
class FetchResult:
    """Rows of a table, or the reason they could not be read."""

    status: FetchStatus
    rows: Sequence[Row] = field(default_factory=tuple)
    error: str | None = None

    @classmethod
    def ok(cls, rows: Sequence[Row]) -> FetchResult:
        return cls(FetchStatus.OK, rows=tuple(rows))

    @classmethod
    def not_configured(cls, reason: str = "no database configured") -> FetchResult:
        return cls(FetchStatus.NOT_CONFIGURED, error=reason)

    @classmethod
    def failed(cls, error: BaseException | str) -> FetchResult:
        return cls(FetchStatus.FAILED, error=str(error))


class TableReader(abc.ABC):
    """Reads whole tables in fetch order."""

    @abc.abstractmethod
    def fetch_all_rows(self, table: str) -> FetchResult:
        """Fetch every row of ``table``."""

    def list_tables(self) -> list[str]:
        """Tables known to the reader; used when no table list is configured."""
        return []
