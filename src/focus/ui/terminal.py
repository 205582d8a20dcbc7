"""Full-screen terminal built on rich's ``Live`` display and a cbreak tty."""

from __future__ import annotations

import codecs
import os
import select
import sys
import termios
import tty
from collections import deque
from typing import IO, Any

from rich.console import Console, ConsoleDimensions, RenderableType
from rich.live import Live
from rich.text import Text

from focus.core.events import Event, KeyPress, Resize
from focus.core.timer import FatalIOError

_ESCAPE = "\x1b"
_READ_SIZE = 1024


class Terminal:
    """Takes over the screen and keyboard for the lifetime of a ``with`` block.

    On entry the tty is switched to cbreak mode and rich renders on the
    alternate screen.  On exit both are restored, whatever ended the block.
    """

    def __init__(self, console: Console | None = None, stdin: IO[Any] | None = None) -> None:
        self._console: Console = console if console is not None else Console()
        self._stdin: IO[Any] = stdin if stdin is not None else sys.stdin
        self._live: Live = Live(
            Text(""),
            console=self._console,
            screen=True,
            auto_refresh=False,
        )
        self._saved_attrs: list[Any] | None = None
        self._decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")
        self._pending: deque[Event] = deque()
        self._size: ConsoleDimensions | None = None

    # -- context management --------------------------------------------------

    def __enter__(self) -> Terminal:
        """Raises :class:`FatalIOError` when stdin is not a usable tty."""
        try:
            fd = self._stdin.fileno()
            self._saved_attrs = termios.tcgetattr(fd)
            tty.setcbreak(fd)
        except (OSError, ValueError, termios.error) as exc:
            self._saved_attrs = None
            raise FatalIOError(f"terminal setup failed: {exc}") from exc
        try:
            self._live.start(refresh=True)
        except BaseException:
            self._restore_tty()
            raise
        self._size = self._console.size
        return self

    def __exit__(self, exc_type: object, exc: object, tb: object) -> None:
        try:
            self._live.stop()
        finally:
            self._restore_tty()

    # -- collaborator interface ----------------------------------------------

    def draw(self, renderable: RenderableType) -> None:
        """Replace the displayed frame with *renderable*."""
        self._live.update(renderable, refresh=True)

    def poll_event(self, timeout: float) -> bool:
        """Wait up to *timeout* seconds for an event.

        Raises ``OSError`` if the wait on stdin fails.
        """
        if self._pending or self._resized():
            return True
        readable, _, _ = select.select([self._stdin.fileno()], [], [], timeout)
        return bool(readable)

    def read_event(self) -> Event:
        """Return the next event.  Call after :meth:`poll_event` reports one.

        Raises ``EOFError`` when stdin is closed.
        """
        if self._pending:
            return self._pending.popleft()
        if self._resized():
            self._size = self._console.size
            return Resize(width=self._size.width, height=self._size.height)

        data = os.read(self._stdin.fileno(), _READ_SIZE)
        if not data:
            raise EOFError("stdin closed")
        self._pending.extend(_decode_keys(self._decoder.decode(data)))
        if not self._pending:
            # Partial multi-byte character; the rest arrives on a later read.
            return KeyPress("")
        return self._pending.popleft()

    # -- private helpers -----------------------------------------------------

    def _resized(self) -> bool:
        return self._size is not None and self._console.size != self._size

    def _restore_tty(self) -> None:
        if self._saved_attrs is None:
            return
        termios.tcsetattr(self._stdin.fileno(), termios.TCSADRAIN, self._saved_attrs)
        self._saved_attrs = None


def _decode_keys(text: str) -> list[KeyPress]:
    """Split decoded input into key presses.

    Each character is its own key, except that an escape sequence (arrow
    keys, function keys, Alt combinations) is kept whole as one key.
    """
    keys: list[KeyPress] = []
    i = 0
    while i < len(text):
        end = _sequence_end(text, i) if text[i] == _ESCAPE else i + 1
        keys.append(KeyPress(text[i:end]))
        i = end
    return keys


def _sequence_end(text: str, start: int) -> int:
    """Return the index just past the escape sequence beginning at *start*."""
    if start + 1 >= len(text) or text[start + 1] == _ESCAPE:
        return start + 1
    introducer = text[start + 1]
    if introducer == "[":
        # CSI: parameter and intermediate bytes, then one final byte 0x40-0x7E.
        for i in range(start + 2, len(text)):
            if "\x40" <= text[i] <= "\x7e":
                return i + 1
        return len(text)
    if introducer == "O":
        # SS3: exactly one character follows.
        return min(start + 3, len(text))
    return start + 2
