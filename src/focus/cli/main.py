"""CLI entry point for focus-timer.

Uses Click to expose the ``focus DURATION`` command, which parses the
duration and runs the full-screen timer until it elapses or ``q`` is
pressed.
"""

from __future__ import annotations

import logging
import sys

import click

import focus
from focus.core.duration import DurationError, parse_duration
from focus.core.timer import FatalIOError, FocusTimer
from focus.ui.terminal import Terminal

logger = logging.getLogger(__name__)


def _configure_logging(log_file: str) -> None:
    """Send debug logging for the package to *log_file*.

    Nothing may be written to the terminal while the timer owns the screen,
    so without a log file the package stays silent.
    """
    handler = logging.FileHandler(log_file)
    handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s"))
    package_logger = logging.getLogger("focus")
    package_logger.addHandler(handler)
    package_logger.setLevel(logging.DEBUG)


@click.command()
@click.version_option(version=focus.__version__, prog_name="focus")
@click.argument("duration")
@click.option(
    "--strict",
    is_flag=True,
    envvar="FOCUS_STRICT",
    help="Exit with status 1 when DURATION cannot be parsed.",
)
@click.option(
    "--log-file",
    type=click.Path(dir_okay=False, writable=True),
    envvar="FOCUS_LOG_FILE",
    help="Write debug logging to this file.",
)
def cli(duration: str, strict: bool, log_file: str | None) -> None:
    """Run a focus timer for DURATION, e.g. 90s, 25m or 2h.  Press q to quit."""
    if log_file is not None:
        _configure_logging(log_file)

    try:
        spec = parse_duration(duration)
    except DurationError as exc:
        logger.debug("rejected duration %r: %s", duration, exc)
        click.echo(f"ERROR: {exc}")
        # Exit status 0 on bad input is kept for compatibility; --strict opts out.
        sys.exit(1 if strict else 0)

    try:
        with Terminal() as terminal:
            FocusTimer(spec.total_seconds).run(terminal)
    except FatalIOError as exc:
        logger.exception("timer aborted")
        click.echo(f"ERROR: {exc}", err=True)
        sys.exit(1)
