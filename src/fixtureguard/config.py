"""Configuration for fixtureguard.

Settings come from, highest precedence first: pytest command line options,
pytest ini options, environment variables, and the defaults below. This
module only knows about the environment and defaults; the pytest plugin
layers its options on top with `FixtureGuardSettings.merged`.
"""

from __future__ import annotations

import os
import re
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any

from fixtureguard.domain.model import IsolationMode

DB_URL_ENV = "FIXTUREGUARD_DB_URL"  # pragma: no mutate
MONITORED_TABLES_ENV = "FIXTUREGUARD_MONITORED_TABLES"  # pragma: no mutate
ISOLATION_ENV = "FIXTUREGUARD_ISOLATION"  # pragma: no mutate
FIXTURE_DIR_ENV = "FIXTUREGUARD_FIXTURE_DIR"  # pragma: no mutate


def split_names(value: str | Iterable[str] | None) -> tuple[str, ...]:
    """Split comma/whitespace separated names, dropping empty fragments."""
    if value is None:
        return ()
    chunks = [value] if isinstance(value, str) else list(value)
    names: list[str] = []
    for chunk in chunks:
        names.extend(s for s in re.split(r"[,\s]+", chunk) if s)
    return tuple(names)


def parse_bool(value: str | bool | None) -> bool:
    if isinstance(value, bool):
        return value
    return (value or "").strip().lower() in {"1", "true", "yes", "on"}


@dataclass(frozen=True)
class FixtureGuardSettings:
    """Resolved fixtureguard settings.

    Attributes:
        db_url: SQLAlchemy URL of the suite database; None runs without one.
        monitored_tables: Tables snapshotted for disabled-isolation tests.
            Empty monitors every table in the database.
        default_isolation: Mode for tests without a ``db_isolation`` marker.
        fixture_dir: Base directory for relative fixture script paths.
        isolate_all_tests: Wrap every transactional test in a transaction,
            not only tests that declare fixtures.
        ignore_fetch_errors: Skip tables that fail to read during the
            residual check instead of failing the test.
    """

    db_url: str | None = None
    monitored_tables: tuple[str, ...] = field(default_factory=tuple)
    default_isolation: IsolationMode = IsolationMode.TRANSACTIONAL
    fixture_dir: Path | None = None
    isolate_all_tests: bool = False
    ignore_fetch_errors: bool = False

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> FixtureGuardSettings:
        """Build settings from environment variables."""
        env = os.environ if environ is None else environ
        isolation = env.get(ISOLATION_ENV)
        fixture_dir = env.get(FIXTURE_DIR_ENV)
        return cls(
            db_url=env.get(DB_URL_ENV) or None,
            monitored_tables=split_names(env.get(MONITORED_TABLES_ENV)),
            default_isolation=(
                IsolationMode.from_string(isolation)
                if isolation
                else IsolationMode.TRANSACTIONAL
            ),
            fixture_dir=Path(fixture_dir) if fixture_dir else None,
        )

    def merged(self, **overrides: Any) -> FixtureGuardSettings:
        """Return a copy with every override that is not None applied.

        String values are coerced to the field's type.
        """
        changes: dict[str, Any] = {}
        for name, value in overrides.items():
            if value is None or value == "" or value == []:
                continue
            if name == "monitored_tables":
                value = split_names(value)
            elif name == "default_isolation" and not isinstance(value, IsolationMode):
                value = IsolationMode.from_string(value)
            elif name == "fixture_dir":
                value = Path(value)
            elif name in {"isolate_all_tests", "ignore_fetch_errors"}:
                value = parse_bool(value)
            changes[name] = value
        return replace(self, **changes)
