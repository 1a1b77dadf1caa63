"""Core value types shared by every layer."""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Mapping, Sequence
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

Row = Mapping[str, Any]


class IsolationMode(str, Enum):
    """How a test's database changes are undone.

    Attributes:
        TRANSACTIONAL: The test runs inside a transaction that is rolled back.
        DISABLED: No transaction; monitored tables are snapshotted and diffed.
    """

    TRANSACTIONAL = "transactional"
    DISABLED = "disabled"

    @classmethod
    def from_string(cls, value: str) -> IsolationMode:
        """Parse a marker or config value.

        ``enabled`` is accepted as an alias of ``transactional``.

        Raises:
            ValueError: If the value is not a known mode.
        """
        raw = (value or "").strip().lower()
        if raw in {"transactional", "enabled"}:
            return cls.TRANSACTIONAL
        if raw == "disabled":
            return cls.DISABLED
        raise ValueError(f"Unknown isolation mode: {value!r}")


@dataclass(frozen=True, slots=True)
class FixtureSet:
    """Ordered, read-only sequence of fixture identifiers declared on a test."""

    identifiers: tuple[str, ...] = ()

    @classmethod
    def of(cls, identifiers: Iterable[str]) -> FixtureSet:
        return cls(tuple(identifiers))

    def __iter__(self) -> Iterator[str]:
        return iter(self.identifiers)

    def __len__(self) -> int:
        return len(self.identifiers)

    def __bool__(self) -> bool:
        return bool(self.identifiers)


@dataclass(frozen=True, slots=True)
class TestDescriptor:
    """Framework-neutral view of a test.

    Attributes:
        nodeid: Unique test id (e.g. a pytest node id).
        fixtures: Fixtures declared on the test, in application order.
        db_isolation: Isolation declared on the test, or None to use the default.
        path: Source file of the test, used to resolve relative fixture scripts.
    """

    __test__ = False  # not a pytest test class

    nodeid: str
    fixtures: FixtureSet = field(default_factory=FixtureSet)
    db_isolation: IsolationMode | None = None
    path: str | None = None


def rows_of(rows: Iterable[Row]) -> Sequence[dict[str, Any]]:
    """Materialize rows as plain dicts, preserving order."""
    return [dict(r) for r in rows]
