"""Parser for duration literals such as ``"3d 2h 5m"`` or ``"1w2d3h4m5s600"``.

A literal is one or more components. Each component is a non-negative
integer (underscores allowed after the first digit) followed by an optional
unit suffix, which may be preceded by spaces. Components may be separated by
spaces; trailing spaces are allowed, leading ones are not.

Suffixes are lowercase only:

=============  =====================================
unit           accepted suffixes
=============  =====================================
millisecond    ``milliseconds``, ``millisecond``, ``ms``
minute         ``minutes``, ``minute``, ``m``
second         ``seconds``, ``second``, ``s``
week           ``weeks``, ``week``, ``w``
day            ``days``, ``day``, ``d``
hour           ``hours``, ``hour``, ``h``
=============  =====================================

The suffixes are tried in that order so that ``ms`` is never read as minutes.
A number without a suffix means milliseconds and is only allowed as the last
component. No unit may appear twice.
"""

from __future__ import annotations

import re

from .types import (
    INFINITY,
    Duration,
    DurationComponent,
    Failure,
    Result,
    Success,
    TimeUnit,
)

_SUFFIXES: tuple[tuple[TimeUnit, tuple[str, ...]], ...] = (
    (TimeUnit.MILLISECOND, ("milliseconds", "millisecond", "ms")),
    (TimeUnit.MINUTE, ("minutes", "minute", "m")),
    (TimeUnit.SECOND, ("seconds", "second", "s")),
    (TimeUnit.WEEK, ("weeks", "week", "w")),
    (TimeUnit.DAY, ("days", "day", "d")),
    (TimeUnit.HOUR, ("hours", "hour", "h")),
)

_SUFFIX_UNITS: dict[str, TimeUnit] = {
    suffix: unit for unit, suffixes in _SUFFIXES for suffix in suffixes
}

# Alternation order matters: the first matching suffix wins.
_COMPONENT = re.compile(
    r"(?P<magnitude>[0-9][0-9_]*)"
    r"(?: *(?P<suffix>"
    + "|".join(suffix for _, suffixes in _SUFFIXES for suffix in suffixes)
    + r"))?"
)
_SPACES = re.compile(r" *")

_ISO8601 = re.compile(
    r"(?P<sign>-)?P"
    r"(?:(?P<years>-?\d+)Y)?"
    r"(?:(?P<months>-?\d+)M)?"
    r"(?:(?P<weeks>-?\d+)W)?"
    r"(?:(?P<days>-?\d+)D)?"
    r"(?:T"
    r"(?:(?P<hours>-?\d+)H)?"
    r"(?:(?P<minutes>-?\d+)M)?"
    r"(?:(?P<seconds>-?\d+)(?:[.,](?P<fraction>\d+))?S)?"
    r")?"
)


def parse_components(text: str) -> Result[list[DurationComponent], str]:
    """Parse a duration literal into its components, in input order.

    Args:
        text: The literal to parse.

    Returns:
        ``Success`` with the components, or ``Failure`` with a reason.
    """
    if not text:
        return Failure("empty duration")

    components: list[DurationComponent] = []
    pos = 0
    while pos < len(text):
        match = _COMPONENT.match(text, pos)
        if match is None:
            return Failure(f"unexpected input at position {pos}")

        try:
            magnitude = int(match.group("magnitude").replace("_", ""))
        except ValueError:
            return Failure(f"magnitude too large at position {pos}")
        suffix = match.group("suffix")
        if suffix is None:
            components.append(
                DurationComponent(TimeUnit.MILLISECOND, magnitude, explicit=False)
            )
        else:
            components.append(DurationComponent(_SUFFIX_UNITS[suffix], magnitude))

        pos = _SPACES.match(text, match.end()).end()

    return _validate(components)


def parse_duration_literal(text: str) -> Result[list[tuple[TimeUnit, int]], str]:
    """Parse a duration literal into ``(unit, magnitude)`` pairs.

    Example:
        >>> parse_duration_literal("1h 30m")
        Success(value=[(<TimeUnit.HOUR: 'hour'>, 1), (<TimeUnit.MINUTE: 'minute'>, 30)])
    """
    result = parse_components(text)
    if isinstance(result, Failure):
        return result
    return Success([(c.unit, c.magnitude) for c in result.value])


def parse_iso8601_duration(text: str) -> Result[Duration, str]:
    """Parse an ISO 8601 duration such as ``"P3DT-5H"`` or ``"-PT1.5S"``.

    Individual fields may be negative, and a leading ``-`` negates them all.
    Fractional seconds are kept to millisecond precision.
    """
    match = _ISO8601.fullmatch(text)
    fields = match.groupdict() if match else {}
    values = {
        key: value
        for key, value in fields.items()
        if key not in ("sign", "fraction") and value is not None
    }
    if not values or text.endswith("T"):
        return Failure("invalid ISO 8601 duration")

    try:
        parsed = {key: int(value) for key, value in values.items()}
    except ValueError:
        return Failure("invalid ISO 8601 duration")
    if fields["fraction"]:
        milliseconds = int(fields["fraction"][:3].ljust(3, "0"))
        parsed["milliseconds"] = (
            -milliseconds if values["seconds"].startswith("-") else milliseconds
        )
    if fields["sign"]:
        parsed = {key: -value for key, value in parsed.items()}
    return Success(Duration(**parsed))


def _validate(
    components: list[DurationComponent],
) -> Result[list[DurationComponent], str]:
    implicit = [i for i, c in enumerate(components) if not c.explicit]
    if len(implicit) > 1 or (implicit and implicit[0] != len(components) - 1):
        return Failure("unsuffixed number must be at the end")

    seen: set[TimeUnit] = set()
    for component in components:
        if component.unit in seen:
            return Failure(f"duplicate suffix: {component.unit.value}")
        seen.add(component.unit)

    return Success(components)


def fold_milliseconds(pairs: list[tuple[TimeUnit, int]]) -> int:
    """Total length of parsed ``(unit, magnitude)`` pairs in milliseconds."""
    return sum(unit.milliseconds * magnitude for unit, magnitude in pairs)


def parse_timeout(text: str) -> Result[int | float, str]:
    """Parse a timeout: ``"infinity"`` or a duration literal, in milliseconds."""
    if text == "infinity":
        return Success(INFINITY)
    result = parse_duration_literal(text)
    if isinstance(result, Failure):
        return result
    return Success(fold_milliseconds(result.value))


def parse_duration(text: str) -> Result[Duration, str]:
    """Parse a duration literal, or an ISO 8601 duration if it starts with P."""
    if text.startswith(("P", "-P")):
        return parse_iso8601_duration(text)
    result = parse_duration_literal(text)
    if isinstance(result, Failure):
        return result
    return Success(Duration.from_components(result.value))
