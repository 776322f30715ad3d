"""Core data types that flow through the conversion engine.

Converters, option validators and the duration parser all report their
outcome as a ``Success`` or ``Failure`` instead of raising, so the dispatcher
is the single place that turns a failed conversion into an exception.
"""

from __future__ import annotations

import dataclasses
import datetime
import enum
import math
import typing

# --- Result Monad ---
# Failures are plain reason strings; the dispatcher attaches the variable
# name and type tag when it raises.

TSuccess = typing.TypeVar("TSuccess")
TFailure = typing.TypeVar("TFailure")


@dataclasses.dataclass(frozen=True, slots=True)
class Success(typing.Generic[TSuccess]):
    """A successful conversion step."""

    value: TSuccess


@dataclasses.dataclass(frozen=True, slots=True)
class Failure(typing.Generic[TFailure]):
    """A failed conversion step, containing the reason."""

    error: TFailure


Result = Success[TSuccess] | Failure[TFailure]

# --- Type descriptors ---

PrimitiveTag = typing.Literal[
    "atom",
    "safe_atom",
    "boolean",
    "charlist",
    "integer",
    "float",
    "decimal",
    "json",
    "log_level",
    "module",
    "safe_module",
    "pem",
    "code_erlang",
    "code_elixir",
    "literal",
    "python",
    "timeout",
    "duration",
]

EncodedTag = typing.Literal[
    "base16", "base32", "hex32", "base64", "url_base64", "list"
]

PRIMITIVE_TYPES: frozenset[str] = frozenset(typing.get_args(PrimitiveTag))
ENCODED_TYPES: frozenset[str] = frozenset(typing.get_args(EncodedTag))

# A bare tag, or a (wrapper, secondary) pair where secondary is "string" or a
# primitive tag.
TypeDescriptor = str | tuple[str, str]

# Infinite timeout.
INFINITY: float = math.inf

# --- Durations ---


class TimeUnit(enum.Enum):
    """Units accepted by the duration grammar."""

    WEEK = "week"
    DAY = "day"
    HOUR = "hour"
    MINUTE = "minute"
    SECOND = "second"
    MILLISECOND = "millisecond"

    @property
    def milliseconds(self) -> int:
        """Length of one unit in milliseconds."""
        return _UNIT_MILLISECONDS[self]

    @classmethod
    def from_name(cls, name: str) -> TimeUnit:
        """Look up a unit by singular or plural name (``"hour"``, ``"hours"``).

        Raises:
            ValueError: If the name is not a known unit.
        """
        key = name[:-1] if name.endswith("s") else name
        try:
            return cls(key)
        except ValueError:
            raise ValueError(f"unknown time unit: {name}") from None


_UNIT_MILLISECONDS: dict[TimeUnit, int] = {
    TimeUnit.WEEK: 7 * 24 * 60 * 60 * 1000,
    TimeUnit.DAY: 24 * 60 * 60 * 1000,
    TimeUnit.HOUR: 60 * 60 * 1000,
    TimeUnit.MINUTE: 60 * 1000,
    TimeUnit.SECOND: 1000,
    TimeUnit.MILLISECOND: 1,
}


@dataclasses.dataclass(frozen=True, slots=True)
class DurationComponent:
    """One ``<magnitude><suffix>`` piece of a duration literal.

    ``explicit`` is False for a bare number, which counts as milliseconds.
    """

    unit: TimeUnit
    magnitude: int
    explicit: bool = True


@dataclasses.dataclass(frozen=True, slots=True)
class Duration:
    """A calendar-aware duration.

    Duration literals only ever fill weeks through milliseconds. ISO 8601
    input may also set years and months, and may carry negative fields.
    """

    years: int = 0
    months: int = 0
    weeks: int = 0
    days: int = 0
    hours: int = 0
    minutes: int = 0
    seconds: int = 0
    milliseconds: int = 0

    @classmethod
    def from_components(
        cls, components: typing.Iterable[tuple[TimeUnit, int]]
    ) -> Duration:
        """Build a duration from parsed ``(unit, magnitude)`` pairs."""
        fields = {f"{unit.value}s": magnitude for unit, magnitude in components}
        return cls(**fields)

    @classmethod
    def from_timedelta(cls, delta: datetime.timedelta) -> Duration:
        """Split a ``timedelta`` into days, hours, minutes, seconds and ms."""
        hours, rest = divmod(delta.seconds, 3600)
        minutes, seconds = divmod(rest, 60)
        return cls(
            days=delta.days,
            hours=hours,
            minutes=minutes,
            seconds=seconds,
            milliseconds=delta.microseconds // 1000,
        )

    def total_milliseconds(self) -> int:
        """Return the fixed length of this duration in milliseconds.

        Raises:
            ValueError: If years or months are set, which have no fixed length.
        """
        if self.years or self.months:
            raise ValueError("years and months have no fixed length")
        return (
            self.weeks * TimeUnit.WEEK.milliseconds
            + self.days * TimeUnit.DAY.milliseconds
            + self.hours * TimeUnit.HOUR.milliseconds
            + self.minutes * TimeUnit.MINUTE.milliseconds
            + self.seconds * TimeUnit.SECOND.milliseconds
            + self.milliseconds
        )

    def to_timedelta(self) -> datetime.timedelta:
        """Convert to ``datetime.timedelta``.

        Raises:
            ValueError: If years or months are set.
        """
        return datetime.timedelta(milliseconds=self.total_milliseconds())
