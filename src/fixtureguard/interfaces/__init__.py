"""Ports used by the service layer.

Lives under `fixtureguard.interfaces`. Do NOT import from adapters,
bootstrap, or entrypoints.
"""

from .fixture_registry import FixtureRegistry
from .observer import TestLifecycleObserver, TransactionRequest
from .result_sink import ResultSink
from .table_reader import FetchResult, FetchStatus, TableReader
from .transaction import TransactionManager

__all__ = [
    "FetchResult",
    "FetchStatus",
    "FixtureRegistry",
    "ResultSink",
    "TableReader",
    "TestLifecycleObserver",
    "TransactionManager",
    "TransactionRequest",
]
