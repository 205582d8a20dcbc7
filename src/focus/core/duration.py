"""Duration parser: turns ``25m``-style input into whole seconds."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

_U64_LIMIT = 2**64
_DIGITS = frozenset("0123456789")


class DurationUnit(Enum):
    """Accepted unit suffixes and their scale in seconds."""

    SECONDS = "s"
    MINUTES = "m"
    HOURS = "h"

    @property
    def scale(self) -> int:
        return _SCALES[self]


_SCALES = {
    DurationUnit.SECONDS: 1,
    DurationUnit.MINUTES: 60,
    DurationUnit.HOURS: 3600,
}


class DurationError(ValueError):
    """Base class for duration parse failures."""


class EmptyInputError(DurationError):
    """Raised when the duration string is empty."""


class UnknownUnitError(DurationError):
    """Raised when the last character is not ``s``, ``m`` or ``h``."""


class InvalidMagnitudeError(DurationError):
    """Raised when the numeric prefix is missing, malformed or too large."""


@dataclass(frozen=True)
class DurationSpec:
    """A parsed duration.

    ``str(spec)`` gives back the canonical ``<digits><unit>`` form.
    """

    magnitude: int
    unit: DurationUnit

    @property
    def total_seconds(self) -> int:
        return self.magnitude * self.unit.scale

    def __str__(self) -> str:
        return f"{self.magnitude}{self.unit.value}"


def parse_duration(raw: str) -> DurationSpec:
    """Parse *raw* into a :class:`DurationSpec`.

    The input must be a run of ASCII digits followed by exactly one
    lowercase unit character.  Whitespace, signs and fractions are
    rejected, and both the magnitude and the resulting second count must
    fit in an unsigned 64-bit integer.
    """
    if not raw:
        raise EmptyInputError("empty input")

    try:
        unit = DurationUnit(raw[-1])
    except ValueError:
        raise UnknownUnitError("unknown unit") from None

    digits = raw[:-1]
    # int() alone would accept "+5", " 5", "1_0" and non-ASCII digits.
    if not digits or not _DIGITS.issuperset(digits):
        raise InvalidMagnitudeError("no duration")
    magnitude = int(digits)
    if magnitude >= _U64_LIMIT:
        raise InvalidMagnitudeError("no duration")

    spec = DurationSpec(magnitude=magnitude, unit=unit)
    if spec.total_seconds >= _U64_LIMIT:
        raise InvalidMagnitudeError("duration too large")
    return spec
