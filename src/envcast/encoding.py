"""Binary-to-text decoders and the list splitter.

The decoders are strict: every character must belong to the selected
alphabet and case, and padding is checked according to the ``padding`` flag
(``True`` requires it, ``False`` accepts input with or without it).
"""

from __future__ import annotations

import base64
import binascii
from collections.abc import Sequence
import math
import re
from typing import Literal

from .types import Failure, Result, Success

LetterCase = Literal["upper", "lower", "mixed"]
SplitOn = Literal["all", "first", "all_but_first", "none", "all_names"]

_BASE16 = {
    "upper": re.compile(r"[0-9A-F]*"),
    "lower": re.compile(r"[0-9a-f]*"),
    "mixed": re.compile(r"[0-9A-Fa-f]*"),
}
_BASE32 = {
    "upper": re.compile(r"[A-Z2-7]*=*"),
    "lower": re.compile(r"[a-z2-7]*=*"),
    "mixed": re.compile(r"[A-Za-z2-7]*=*"),
}
_HEX32 = {
    "upper": re.compile(r"[0-9A-V]*=*"),
    "lower": re.compile(r"[0-9a-v]*=*"),
    "mixed": re.compile(r"[0-9A-Va-v]*=*"),
}
_BASE64 = re.compile(r"[A-Za-z0-9+/]*=*")
_URL_BASE64 = re.compile(r"[A-Za-z0-9_-]*=*")
_WHITESPACE = re.compile(r"\s+")


def decode_base16(value: str, case: LetterCase = "upper") -> Result[bytes, str]:
    if not _BASE16[case].fullmatch(value):
        return Failure(f"invalid {case} case base16 data")
    try:
        return Success(base64.b16decode(value.upper()))
    except binascii.Error:
        return Failure("invalid base16 data")


def decode_base32(
    value: str, case: LetterCase = "upper", *, padding: bool = False
) -> Result[bytes, str]:
    if not _BASE32[case].fullmatch(value):
        return Failure(f"invalid {case} case base32 data")
    return _decode_blocks(base64.b32decode, value.upper(), 8, padding, "base32")


def decode_hex32(
    value: str, case: LetterCase = "upper", *, padding: bool = False
) -> Result[bytes, str]:
    if not _HEX32[case].fullmatch(value):
        return Failure(f"invalid {case} case hex32 data")
    return _decode_blocks(base64.b32hexdecode, value.upper(), 8, padding, "hex32")


def decode_base64(
    value: str, *, ignore_whitespace: bool = True, padding: bool = False
) -> Result[bytes, str]:
    if ignore_whitespace:
        value = _WHITESPACE.sub("", value)
    if not _BASE64.fullmatch(value):
        return Failure("invalid base64 data")
    return _decode_blocks(_b64decode, value, 4, padding, "base64")


def decode_url_base64(
    value: str, *, ignore_whitespace: bool = True, padding: bool = False
) -> Result[bytes, str]:
    if ignore_whitespace:
        value = _WHITESPACE.sub("", value)
    if not _URL_BASE64.fullmatch(value):
        return Failure("invalid url_base64 data")
    return _decode_blocks(_urlsafe_b64decode, value, 4, padding, "url_base64")


def _b64decode(value: str) -> bytes:
    return base64.b64decode(value, validate=True)


def _urlsafe_b64decode(value: str) -> bytes:
    return base64.b64decode(value, altchars=b"-_", validate=True)


def _decode_blocks(decoder, value: str, block: int, padding: bool, label: str):
    if padding:
        if len(value) % block:
            return Failure(f"missing {label} padding")
    else:
        stripped = value.rstrip("=")
        value = stripped + "=" * (-len(stripped) % block)
    try:
        return Success(decoder(value))
    except binascii.Error:
        return Failure(f"invalid {label} data")


# --- List splitting ---


def split_list(
    value: str,
    delimiter: str | Sequence[str] | re.Pattern[str] = ",",
    *,
    parts: int | float = math.inf,
    trim: bool = False,
    on: SplitOn | Sequence[str | int] = "first",
    include_captures: bool = False,
) -> list[str]:
    """Split ``value`` into strings.

    Args:
        value: The text to split.
        delimiter: A string, several strings (split on any of them), or a
            compiled regular expression.
        parts: Maximum number of pieces; the last piece holds the remainder.
        trim: Drop empty strings from the result.
        on: For regex delimiters, which parts of each match to split on:
            ``"first"`` (the whole match), ``"all"``, ``"all_but_first"``
            (every capture group), ``"all_names"`` (named groups, by name),
            ``"none"``, or a list of group names or numbers.
        include_captures: Keep the text of each split span in the result.

    Returns:
        The pieces, in order.

    Example:
        >>> split_list("a;b,c", [",", ";"])
        ['a', 'b', 'c']
    """
    if isinstance(delimiter, re.Pattern):
        pattern = delimiter
    else:
        if isinstance(delimiter, str):
            delimiter = [delimiter]
        alternatives = sorted(delimiter, key=len, reverse=True)
        pattern = re.compile("|".join(re.escape(d) for d in alternatives))
        on = "first"

    limit = parts - 1
    pieces: list[str] = []
    offset = 0
    splits = 0
    for match in pattern.finditer(value):
        for start, end in _match_spans(match, on):
            if splits >= limit:
                break
            if start < offset or start == end:
                continue
            pieces.append(value[offset:start])
            if include_captures:
                pieces.append(value[start:end])
            offset = end
            splits += 1
        if splits >= limit:
            break
    pieces.append(value[offset:])

    if trim:
        pieces = [piece for piece in pieces if piece]
    return pieces


def _match_spans(
    match: re.Match[str], on: SplitOn | Sequence[str | int]
) -> list[tuple[int, int]]:
    groups = range(1, match.re.groups + 1)
    if on == "first":
        selected: list[str | int] = [0]
    elif on == "all":
        selected = [0, *groups]
    elif on == "all_but_first":
        selected = list(groups)
    elif on == "none":
        selected = []
    elif on == "all_names":
        selected = sorted(match.re.groupindex)
    else:
        selected = list(on)

    spans = [match.span(group) for group in selected]
    return sorted(span for span in spans if span[0] >= 0)
