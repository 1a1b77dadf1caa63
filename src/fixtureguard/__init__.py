"""FIXTUREGUARD

Keeps data fixtures from leaking between integration tests. Each test's
fixtures are applied inside a database transaction that is rolled back
afterwards, or, when transactions are disabled for a test, monitored tables
are snapshotted and diffed so that left-behind rows fail the offending test.
"""

__all__ = ["__version__"]
__version__ = "0.1.0"
