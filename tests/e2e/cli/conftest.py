"""Fixtures and helpers for end-to-end CLI tests.

Provides a test-only `log-demo` command that emits log messages at every
level, a CliRunner, an isolated filesystem per test, and a clean
environment so ambient FIXTUREGUARD_* variables do not leak into runs.
"""

import logging

import click
import pytest
from click.testing import CliRunner

from fixtureguard.entrypoints.cli.main import fixtureguard

# pylint: disable=redefined-outer-name

ENV_VARS = (
    "FIXTUREGUARD_DB_URL",
    "FIXTUREGUARD_MONITORED_TABLES",
    "FIXTUREGUARD_ISOLATION",
    "FIXTUREGUARD_FIXTURE_DIR",
    "FIXTUREGUARD_LOG_PATH",
    "FIXTUREGUARD_LOGGER_LEVEL",
)


@click.command()
def log_demo():
    """Emit representative log messages on a project and a third-party logger."""
    logger = logging.getLogger("fixtureguard.demo")
    logger.debug("This is a debug-level test message.")
    logger.info("This is an info-level test message.")
    logger.warning("This is a warning-level test message.")
    logger.error("This is an error-level test message.")
    logger.critical("This is a critical-level test message.")
    third_party_logger = logging.getLogger("some.thirdparty")
    third_party_logger.debug("This is a debug-level third-party test message.")
    third_party_logger.info("This is an info-level third-party test message.")
    third_party_logger.warning("This is a warning-level third-party test message.")
    logger.debug("This is a final debug-level test message.")


def _remove_command_everywhere(group, name: str) -> None:
    """Remove a command from a Click group and any click-extra sections."""
    group.commands.pop(name, None)
    if hasattr(group, "_default_section"):
        group._default_section.commands.pop(name, None)  # pylint: disable=protected-access
    for sec in getattr(group, "_sections", []):
        getattr(sec, "commands", {}).pop(name, None)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def registered_log_demo():
    """Register the 'log-demo' command for the duration of a test."""
    fixtureguard.add_command(log_demo, name="log-demo")
    try:
        yield
    finally:
        _remove_command_everywhere(fixtureguard, "log-demo")


@pytest.fixture
def runner():
    """Return a Click CliRunner for invoking CLI commands in tests."""
    return CliRunner()


@pytest.fixture
def fs(runner):
    """Confine filesystem side effects of a test to a temp directory."""
    with runner.isolated_filesystem():
        yield
