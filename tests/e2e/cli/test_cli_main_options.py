"""End-to-end tests of the top-level `fixtureguard` command's logging options.

Verbosity flags, logger-level overrides, debug formatting and the flight
recorder are exercised through the test-only `log-demo` command.
"""

import re
from pathlib import Path

import pytest

from fixtureguard.entrypoints.cli.main import fixtureguard

# pylint: disable=unused-argument


def assert_in_output(pattern: str, output: str) -> None:
    """Assert that a regex pattern is found in the output string."""
    if not re.search(pattern, output, re.MULTILINE):
        raise AssertionError(f"Pattern '{pattern}' not found in output:\n{output}")


def assert_not_in_output(pattern: str, output: str) -> None:
    """Assert that a regex pattern is NOT found in the output string."""
    if re.search(pattern, output, re.MULTILINE):
        raise AssertionError(f"Pattern '{pattern}' found in output:\n{output}")


def test_default_shows_warning(registered_log_demo, runner, fs):
    """Default invocation shows WARNING and above but not INFO."""
    result = runner.invoke(fixtureguard, ["log-demo"])
    assert result.exit_code == 0
    assert_in_output("WARNING", result.output)
    assert_not_in_output("INFO", result.output)


@pytest.mark.parametrize(
    ("flags", "shown", "hidden"),
    [
        (["-v"], "INFO", "DEBUG"),
        (["-q"], "ERROR", "WARNING"),
        (["-qq"], "CRITICAL", "ERROR"),
    ],
)
def test_verbosity_flags(registered_log_demo, runner, fs, flags, shown, hidden):
    """Each -v/-q moves the console threshold by one level."""
    result = runner.invoke(fixtureguard, [*flags, "log-demo"])
    assert result.exit_code == 0
    assert_in_output(shown, result.output)
    assert_not_in_output(hidden, result.output)


def test_vv_shows_debug(registered_log_demo, runner, fs):
    result = runner.invoke(fixtureguard, ["-vv", "log-demo"])
    assert result.exit_code == 0
    assert_in_output("DEBUG", result.output)


@pytest.mark.parametrize(
    "env, cli_args",
    [
        ({}, ["-vv", "-L", "some.thirdparty=INFO"]),
        ({"FIXTUREGUARD_LOGGER_LEVEL": "some.thirdparty=INFO"}, ["-vv"]),
    ],
)
def test_logger_level_silences_debug(registered_log_demo, runner, fs, env, cli_args):
    """Logger-level overrides silence third-party DEBUG while keeping INFO+."""
    result = runner.invoke(fixtureguard, cli_args + ["log-demo"], env=env)
    assert result.exit_code == 0
    assert_not_in_output(
        "This is a debug-level third-party test message.", result.output
    )
    assert_in_output("This is an info-level third-party test message.", result.output)


def test_third_party_records_are_prefixed(registered_log_demo, runner, fs):
    result = runner.invoke(fixtureguard, ["log-demo"])
    assert result.exit_code == 0
    assert_in_output(r"\[some\] This is a warning-level third-party", result.output)


def test_debug_mode_shows_paths(registered_log_demo, runner, fs):
    """When --debug is set, log output includes file paths and line numbers."""
    result = runner.invoke(fixtureguard, ["--debug", "log-demo"])
    assert result.exit_code == 0
    assert_in_output(r"conftest\.py:\d+\b", result.output)


def test_debug_mode_is_off_by_default(registered_log_demo, runner, fs):
    result = runner.invoke(fixtureguard, ["log-demo"])
    assert result.exit_code == 0
    assert_not_in_output(r"conftest\.py:\d+\b", result.output)


def test_flight_recorder_flush_on_warning(registered_log_demo, runner, fs):
    """The flight recorder writes buffered DEBUG records when a WARNING occurs."""
    log_path = "flight_recorder.log"
    result = runner.invoke(
        fixtureguard,
        [
            "--flight-recorder",
            "--log-path",
            log_path,
            "-L",
            "some.thirdparty=INFO",
            "log-demo",
        ],
    )
    assert result.exit_code == 0
    content = Path(log_path).read_text(encoding="utf-8")
    assert_in_output("This is a debug-level test message.", content)
    assert_not_in_output("This is a debug-level third-party test message.", content)
    assert_in_output("This is an info-level third-party test message.", content)
    assert_in_output("This is a critical-level test message.", content)
    # buffered after the last flush
    assert_not_in_output("This is a final debug-level test message.", content)


def test_flight_recorder_is_off_by_default(registered_log_demo, runner, fs):
    log_path = "flight_recorder.log"
    result = runner.invoke(fixtureguard, ["--log-path", log_path, "log-demo"])
    assert result.exit_code == 0
    assert not Path(log_path).exists()


def test_flight_recorder_truncates_log(registered_log_demo, runner, fs):
    """The log file is rewritten on each run, not appended to."""
    cli = ["--flight-recorder", "--log-path", "flight_recorder.log", "log-demo"]

    assert runner.invoke(fixtureguard, cli).exit_code == 0
    first = Path("flight_recorder.log").read_text(encoding="utf-8").count("\n")
    assert runner.invoke(fixtureguard, cli).exit_code == 0
    second = Path("flight_recorder.log").read_text(encoding="utf-8").count("\n")

    assert first == second


def test_startup_logging(registered_log_demo, runner, fs):
    log_path = "startup.log"
    result = runner.invoke(
        fixtureguard, ["--flight-recorder", "--log-path", log_path, "log-demo"]
    )
    assert result.exit_code == 0
    content = Path(log_path).read_text(encoding="utf-8")
    assert_in_output(r"fixtureguard \d+\.\d+\.\d+", content)
    assert_in_output(r"console=WARNING", content)
    assert_in_output(r"flight-recorder=ON", content)
    assert_in_output(r"Python: \d+\.\d+\.\d+", content)
    assert_in_output(r"SQLAlchemy: \d+\.\d+\.\d+", content)
    assert_in_output(r"Flight recorder: startup\.log", content)
    assert_in_output(r"Per-logger overrides: {'sqlalchemy': 'WARNING'}", content)
