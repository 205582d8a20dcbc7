"""Tests for the focus CLI layer.

``Terminal`` and ``FocusTimer`` are mocked so no test takes over the real
screen or waits on the clock.  The one unmocked ``Terminal`` runs against
CliRunner's stdin, which is not a tty.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterator
from unittest.mock import MagicMock, patch

import click.testing
import pytest

from focus.cli.main import cli
from focus.core.timer import FatalIOError


@pytest.fixture()
def runner() -> click.testing.CliRunner:
    """Return a Click CliRunner for invoking CLI commands."""
    return click.testing.CliRunner()


@pytest.fixture()
def focus_logger() -> Iterator[logging.Logger]:
    """Yield the package logger and drop any handlers a test attached."""
    package_logger = logging.getLogger("focus")
    handlers = list(package_logger.handlers)
    level = package_logger.level
    yield package_logger
    for handler in package_logger.handlers:
        if handler not in handlers:
            handler.close()
            package_logger.removeHandler(handler)
    package_logger.setLevel(level)


# ---------------------------------------------------------------------------
# focus <duration>
# ---------------------------------------------------------------------------


class TestRunTimer:
    """A valid duration runs the timer inside the terminal."""

    @patch("focus.cli.main.FocusTimer")
    @patch("focus.cli.main.Terminal")
    def test_runs_timer_with_parsed_seconds(
        self,
        mock_terminal_cls: MagicMock,
        mock_timer_cls: MagicMock,
        runner: click.testing.CliRunner,
    ) -> None:
        result = runner.invoke(cli, ["25m"])
        assert result.exit_code == 0
        mock_timer_cls.assert_called_once_with(25 * 60)
        terminal = mock_terminal_cls.return_value.__enter__.return_value
        mock_timer_cls.return_value.run.assert_called_once_with(terminal)
        mock_terminal_cls.return_value.__exit__.assert_called_once()

    @patch("focus.cli.main.FocusTimer")
    @patch("focus.cli.main.Terminal")
    def test_zero_duration_still_runs(
        self,
        mock_terminal_cls: MagicMock,
        mock_timer_cls: MagicMock,
        runner: click.testing.CliRunner,
    ) -> None:
        result = runner.invoke(cli, ["0s"])
        assert result.exit_code == 0
        mock_timer_cls.assert_called_once_with(0)

    @patch("focus.cli.main.FocusTimer")
    @patch("focus.cli.main.Terminal")
    def test_fatal_io_error_exits_1_after_restoring_terminal(
        self,
        mock_terminal_cls: MagicMock,
        mock_timer_cls: MagicMock,
        runner: click.testing.CliRunner,
    ) -> None:
        mock_terminal_cls.return_value.__exit__.return_value = False
        mock_timer_cls.return_value.run.side_effect = FatalIOError(
            "terminal input failed: bad fd"
        )
        result = runner.invoke(cli, ["10s"])
        assert result.exit_code == 1
        assert "ERROR: terminal input failed: bad fd" in result.output
        mock_terminal_cls.return_value.__exit__.assert_called_once()

    @patch("focus.cli.main.FocusTimer")
    def test_stdin_not_a_tty_exits_1(
        self, mock_timer_cls: MagicMock, runner: click.testing.CliRunner
    ) -> None:
        """CliRunner's stdin has no file descriptor, so cbreak mode is impossible."""
        result = runner.invoke(cli, ["5s"])
        assert result.exit_code == 1
        assert "ERROR: terminal setup failed" in result.output
        assert isinstance(result.exception, SystemExit)
        mock_timer_cls.assert_not_called()

    def test_missing_argument(self, runner: click.testing.CliRunner) -> None:
        result = runner.invoke(cli, [])
        assert result.exit_code != 0


# ---------------------------------------------------------------------------
# Invalid durations
# ---------------------------------------------------------------------------


class TestInvalidDuration:
    """Parse failures print ``ERROR: <message>`` and never touch the screen."""

    @pytest.mark.parametrize(
        ("raw", "message"),
        [
            ("", "empty input"),
            ("10x", "unknown unit"),
            ("10", "unknown unit"),
            ("s", "no duration"),
            ("abcs", "no duration"),
        ],
    )
    @patch("focus.cli.main.Terminal")
    def test_prints_error_and_exits_0(
        self,
        mock_terminal_cls: MagicMock,
        raw: str,
        message: str,
        runner: click.testing.CliRunner,
    ) -> None:
        result = runner.invoke(cli, [raw])
        assert result.exit_code == 0
        assert result.output == f"ERROR: {message}\n"
        mock_terminal_cls.assert_not_called()

    def test_strict_exits_1(self, runner: click.testing.CliRunner) -> None:
        result = runner.invoke(cli, ["--strict", "10x"])
        assert result.exit_code == 1
        assert "ERROR: unknown unit" in result.output

    def test_strict_from_environment(self, runner: click.testing.CliRunner) -> None:
        result = runner.invoke(cli, ["10x"], env={"FOCUS_STRICT": "1"})
        assert result.exit_code == 1


# ---------------------------------------------------------------------------
# --log-file
# ---------------------------------------------------------------------------


class TestLogFile:
    """--log-file sends package logging to a file."""

    def test_writes_log_file(
        self,
        runner: click.testing.CliRunner,
        tmp_path: Path,
        focus_logger: logging.Logger,
    ) -> None:
        log_file = tmp_path / "focus.log"
        result = runner.invoke(cli, ["--log-file", str(log_file), "10x"])
        assert result.exit_code == 0
        for handler in focus_logger.handlers:
            handler.flush()
        assert "rejected duration '10x'" in log_file.read_text()


# ---------------------------------------------------------------------------
# focus --version
# ---------------------------------------------------------------------------


class TestVersionFlag:
    """Tests for ``focus --version``."""

    def test_version_output(self, runner: click.testing.CliRunner) -> None:
        result = runner.invoke(cli, ["--version"])
        assert result.exit_code == 0
        assert "0.1.0" in result.output
