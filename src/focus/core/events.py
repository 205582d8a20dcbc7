"""Terminal input events consumed by the timer loop."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Union


@dataclass(frozen=True)
class KeyPress:
    key: str


@dataclass(frozen=True)
class KeyRelease:
    key: str


@dataclass(frozen=True)
class Resize:
    width: int
    height: int


Event = Union[KeyPress, KeyRelease, Resize]
