"""Case folding applied to raw values before conversion.

Modes follow the usual Unicode case mappings with a few variants:

- ``"default"``: per-character Unicode mapping.
- ``"ascii"``: only ``A-Z``/``a-z`` change.
- ``"greek"``: like ``"default"``, but lowercasing uses the context-sensitive
  final sigma.
- ``"turkic"``: dotted and dotless ``i`` map the Turkish way.
"""

from __future__ import annotations

import string
import typing

CaseMode = typing.Literal["default", "ascii", "greek", "turkic"]

CASE_MODES: tuple[str, ...] = typing.get_args(CaseMode)

_ASCII_LOWER = str.maketrans(string.ascii_uppercase, string.ascii_lowercase)
_ASCII_UPPER = str.maketrans(string.ascii_lowercase, string.ascii_uppercase)
_TURKIC_LOWER = str.maketrans({"I": "ı", "İ": "i"})
_TURKIC_UPPER = str.maketrans({"i": "İ", "ı": "I"})


def coerce_mode(value: object) -> CaseMode | None:
    """Normalize a ``downcase``/``upcase`` option value.

    ``True`` selects ``"default"``; ``False`` disables folding.

    Raises:
        ValueError: If the value is not a bool or a known mode name.
    """
    if value is True:
        return "default"
    if value is False:
        return None
    if isinstance(value, str) and value in CASE_MODES:
        return typing.cast(CaseMode, value)
    raise ValueError(f"invalid case mode: {value!r}")


def downcase(value: str, mode: CaseMode = "default") -> str:
    if mode == "ascii":
        return value.translate(_ASCII_LOWER)
    if mode == "greek":
        # str.lower() applies the final sigma rule
        return value.lower()
    if mode == "turkic":
        value = value.translate(_TURKIC_LOWER)
    return "".join(char.lower() for char in value)


def upcase(value: str, mode: CaseMode = "default") -> str:
    if mode == "ascii":
        return value.translate(_ASCII_UPPER)
    if mode == "turkic":
        value = value.translate(_TURKIC_UPPER)
    return value.upper()


def apply_casefold(
    value: str,
    downcase_mode: CaseMode | None = None,
    upcase_mode: CaseMode | None = None,
) -> str:
    """Fold ``value`` with whichever mode is set; at most one may be."""
    if downcase_mode is not None:
        return downcase(value, downcase_mode)
    if upcase_mode is not None:
        return upcase(value, upcase_mode)
    return value
