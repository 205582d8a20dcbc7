"""Timer loop: a render / poll / elapsed-check state machine."""

from __future__ import annotations

import logging
import time
from enum import Enum
from typing import Protocol

from rich import box
from rich.align import Align
from rich.console import RenderableType
from rich.panel import Panel
from rich.text import Text

from focus.core.events import Event, KeyPress

logger = logging.getLogger(__name__)

POLL_INTERVAL = 1.0
QUIT_KEY = "q"


class TimerState(Enum):
    """Possible states of the timer."""

    RUNNING = "running"
    EXITED = "exited"


class FatalIOError(RuntimeError):
    """Raised when the terminal cannot be set up or its input channel fails."""


class TerminalLike(Protocol):
    """The capabilities the loop needs from a terminal."""

    def draw(self, renderable: RenderableType) -> None: ...

    def poll_event(self, timeout: float) -> bool: ...

    def read_event(self) -> Event: ...


class FocusTimer:
    """Counts elapsed whole seconds against a fixed target.

    Uses ``time.monotonic()`` captured at construction as the zero point,
    so the timer is immune to system clock changes.  The loop ends when
    the quit key is pressed or the elapsed time reaches the target.
    """

    def __init__(self, target_seconds: int) -> None:
        if target_seconds < 0:
            raise ValueError(f"target_seconds must be non-negative, got {target_seconds}")
        self._start: float = time.monotonic()
        self._target_seconds: int = target_seconds
        self._should_exit: bool = False
        self._exit_reason: str | None = None

    # -- public interface ----------------------------------------------------

    @property
    def target_seconds(self) -> int:
        return self._target_seconds

    @property
    def should_exit(self) -> bool:
        return self._should_exit

    @property
    def exit_reason(self) -> str | None:
        """``"quit"`` or ``"elapsed"`` once exited, otherwise ``None``."""
        return self._exit_reason

    @property
    def state(self) -> TimerState:
        return TimerState.EXITED if self._should_exit else TimerState.RUNNING

    def elapsed_seconds(self) -> int:
        """Return whole seconds since construction, truncated."""
        return int(time.monotonic() - self._start)

    def run(self, terminal: TerminalLike) -> None:
        """Drive the loop on *terminal* until the timer exits.

        Raises :class:`FatalIOError` if polling or reading input fails.
        """
        logger.debug("timer started: target=%ds", self._target_seconds)
        while not self._should_exit:
            terminal.draw(self.render())
            self._poll(terminal)
            self.check_elapsed()

    def handle_event(self, event: Event) -> None:
        """Apply a single input event.  Only a ``q`` key press has an effect."""
        if self._should_exit:
            return
        if isinstance(event, KeyPress):
            logger.debug("key pressed: %r", event.key)
            if event.key == QUIT_KEY:
                self._exit("quit")

    def check_elapsed(self) -> None:
        """Exit once the elapsed time has reached the target."""
        if self._should_exit:
            return
        # >= rather than ==, so a poll delayed past the boundary still ends the timer.
        if self.elapsed_seconds() >= self._target_seconds:
            self._exit("elapsed")

    def render(self) -> RenderableType:
        """Build the frame for the current state.  Has no side effects."""
        title = Text("Focus", style="bold")
        instructions = Text.assemble("Quit ", ("<Q>", "bold blue"))
        body = Text.assemble(
            "Elapsed: ",
            str(self.elapsed_seconds()),
            " / ",
            str(self._target_seconds),
        )
        return Panel(
            Align.center(body, vertical="middle"),
            title=title,
            subtitle=instructions,
            box=box.HEAVY,
        )

    # -- private helpers -----------------------------------------------------

    def _poll(self, terminal: TerminalLike) -> None:
        try:
            if not terminal.poll_event(POLL_INTERVAL):
                return
            event = terminal.read_event()
        except (OSError, EOFError) as exc:
            raise FatalIOError(f"terminal input failed: {exc}") from exc
        self.handle_event(event)

    def _exit(self, reason: str) -> None:
        self._should_exit = True
        self._exit_reason = reason
        logger.info("timer exited: reason=%s elapsed=%ds", reason, self.elapsed_seconds())
