"""Primitive converters, one per type tag.

Every converter takes the (already case-folded) text and its validated
options, and returns ``Success(value)`` or ``Failure(reason)``. Converters
never raise for bad input; ``convert_as`` turns failures into
``ConversionError``.
"""

from __future__ import annotations

import ast
import builtins
from collections.abc import Callable, Mapping
import decimal
import importlib
import logging
import re
import string
import sys
from typing import TYPE_CHECKING, Any

from cryptography.exceptions import UnsupportedAlgorithm

from .duration_parser import parse_duration, parse_timeout
from .encoding import (
    decode_base16,
    decode_base32,
    decode_base64,
    decode_hex32,
    decode_url_base64,
    split_list,
)
from .engines import decode_json
from .pem import PemEntry, decode_pem, load_certificate, load_private_key
from .symbols import default_symbol_table
from .types import Failure, Result, Success

if TYPE_CHECKING:
    from .options import OptionConfig

log = logging.getLogger(__name__)

LOG_LEVELS: dict[str, int] = {
    "critical": logging.CRITICAL,
    "fatal": logging.FATAL,
    "error": logging.ERROR,
    "warning": logging.WARNING,
    "warn": logging.WARN,
    "info": logging.INFO,
    "debug": logging.DEBUG,
    "notset": logging.NOTSET,
}

_DIGITS = string.digits + string.ascii_lowercase
_INTEGER = re.compile(r"[+-]?[0-9A-Za-z]+")
_FLOAT = re.compile(r"[+-]?[0-9]+(?:\.[0-9]+)?(?:[eE][+-]?[0-9]+)?")

# --- Strict number parsing ---


def parse_integer(text: str, base: int = 10) -> int | None:
    """Parse ``text`` as a signed integer in ``base``, or return None.

    Unlike ``int()``, whitespace, underscores and radix prefixes are rejected.
    """
    if not _INTEGER.fullmatch(text):
        return None
    digits = _DIGITS[:base]
    if any(char not in digits for char in text.lstrip("+-").lower()):
        return None
    try:
        return int(text, base)
    except ValueError:
        # digit count over sys.get_int_max_str_digits()
        return None


def parse_float(text: str) -> float | None:
    """Parse ``text`` as a plain decimal float (``1``, ``-2.5``, ``3e-2``)."""
    if not _FLOAT.fullmatch(text):
        return None
    return float(text)


def parse_decimal(text: str) -> decimal.Decimal | None:
    """Parse ``text`` with the float grammar into an exact ``Decimal``."""
    if not _FLOAT.fullmatch(text):
        return None
    return decimal.Decimal(text)


# --- Converters ---


def _lookup_allowed(value: str, allowed: Mapping[str, Any]) -> Result[Any, str]:
    if value in allowed:
        return Success(allowed[value])
    return Failure("value not in `allowed`")


def convert_atom(value: str, config: OptionConfig) -> Result[Any, str]:
    if config.allowed is not None:
        return _lookup_allowed(value, config.allowed)
    return Success(default_symbol_table.intern(value))


def convert_safe_atom(value: str, config: OptionConfig) -> Result[Any, str]:
    if config.allowed is not None:
        return _lookup_allowed(value, config.allowed)
    symbol = default_symbol_table.lookup(value)
    if symbol is None:
        return Failure("unknown symbol")
    return Success(symbol)


def convert_module(value: str, config: OptionConfig) -> Result[Any, str]:
    if config.allowed is not None:
        return _lookup_allowed(value, config.allowed)
    try:
        return Success(importlib.import_module(value))
    except (ImportError, ValueError, TypeError) as e:
        return Failure(f"cannot import module: {type(e).__name__}")
    except Exception as e:  # noqa: BLE001 - module body errors are conversion failures
        log.debug("Importing module raised %s", type(e).__name__)
        return Failure(f"cannot import module: {type(e).__name__}")


def convert_safe_module(value: str, config: OptionConfig) -> Result[Any, str]:
    if config.allowed is not None:
        return _lookup_allowed(value, config.allowed)
    module = sys.modules.get(value)
    if module is None:
        return Failure("module not loaded")
    return Success(module)


def convert_boolean(value: str, config: OptionConfig) -> Result[bool, str]:
    if config.falsy is not None:
        return Success(value not in config.falsy)
    return Success(value in config.truthy)


def convert_integer(value: str, config: OptionConfig) -> Result[int, str]:
    parsed = parse_integer(value, config.base)
    if parsed is None:
        return Failure(f"not a base {config.base} integer")
    return Success(parsed)


def convert_float(value: str, config: OptionConfig) -> Result[float, str]:
    parsed = parse_float(value)
    if parsed is None:
        return Failure("not a float")
    return Success(parsed)


def convert_decimal(value: str, config: OptionConfig) -> Result[decimal.Decimal, str]:
    parsed = parse_decimal(value)
    if parsed is None:
        return Failure("not a decimal")
    return Success(parsed)


def convert_charlist(value: str, config: OptionConfig) -> Result[list[int], str]:
    return Success([ord(char) for char in value])


def convert_json(value: str, config: OptionConfig) -> Result[Any, str]:
    return decode_json(config.engine, value)


def convert_log_level(value: str, config: OptionConfig) -> Result[int, str]:
    level = LOG_LEVELS.get(value.lower())
    if level is None:
        return Failure("unknown log level")
    return Success(level)


def convert_pem(value: str, config: OptionConfig) -> Result[Any, str]:
    """Decode PEM data and pick entries according to ``filter``.

    - ``False``: every ``PemEntry``, undecoded.
    - ``True``: the first unencrypted private key if there is one, otherwise
      all unencrypted certificates (possibly none).
    - ``"cert"``: all unencrypted certificates; fails if there are none.
    - ``"key"``: the only unencrypted private key; fails unless there is
      exactly one.
    """
    try:
        entries = decode_pem(value)
    except ValueError as e:
        return Failure(str(e))

    if config.filter is False:
        return Success(entries)

    keys = [e for e in entries if e.kind == "private_key" and not e.encrypted]
    if config.filter == "key":
        if not keys:
            return Failure("no unencrypted private key")
        if len(keys) > 1:
            return Failure("more than one unencrypted private key")
        return _load_key(keys[0])
    if config.filter is True and keys:
        return _load_key(keys[0])

    certificates = [e for e in entries if e.kind == "certificate" and not e.encrypted]
    if config.filter == "cert" and not certificates:
        return Failure("no certificates")
    try:
        return Success([load_certificate(entry) for entry in certificates])
    except ValueError:
        return Failure("invalid certificate")


def _load_key(entry: PemEntry) -> Result[Any, str]:
    try:
        return Success(load_private_key(entry))
    except (ValueError, TypeError, UnsupportedAlgorithm):
        return Failure("invalid private key")


def convert_literal(value: str, config: OptionConfig) -> Result[Any, str]:
    """Parse a Python literal without executing code."""
    try:
        return Success(ast.literal_eval(value))
    except (ValueError, TypeError, SyntaxError, RecursionError, MemoryError) as e:
        return Failure(f"invalid literal: {type(e).__name__}")


def convert_python(value: str, config: OptionConfig) -> Result[Any, str]:
    """Evaluate a Python expression.

    This executes arbitrary code and must never see untrusted input.
    """
    try:
        code = compile(value, "<envcast>", "eval")
    except (SyntaxError, ValueError) as e:
        return Failure(f"invalid expression: {type(e).__name__}")
    try:
        return Success(eval(code, {"__builtins__": builtins}, {}))  # noqa: S307
    except Exception as e:  # noqa: BLE001 - evaluation errors are conversion failures
        log.debug("Expression evaluation raised %s", type(e).__name__)
        return Failure(f"evaluation failed: {type(e).__name__}")


def convert_timeout(value: str, config: OptionConfig) -> Result[int | float, str]:
    return parse_timeout(value)


def convert_duration(value: str, config: OptionConfig) -> Result[Any, str]:
    return parse_duration(value)


def convert_base16(value: str, config: OptionConfig) -> Result[bytes, str]:
    return decode_base16(value, config.case)


def convert_base32(value: str, config: OptionConfig) -> Result[bytes, str]:
    return decode_base32(value, config.case, padding=config.padding)


def convert_hex32(value: str, config: OptionConfig) -> Result[bytes, str]:
    return decode_hex32(value, config.case, padding=config.padding)


def convert_base64(value: str, config: OptionConfig) -> Result[bytes, str]:
    return decode_base64(
        value, ignore_whitespace=config.ignore_whitespace, padding=config.padding
    )


def convert_url_base64(value: str, config: OptionConfig) -> Result[bytes, str]:
    return decode_url_base64(
        value, ignore_whitespace=config.ignore_whitespace, padding=config.padding
    )


def convert_list(value: str, config: OptionConfig) -> Result[list[str], str]:
    return Success(
        split_list(
            value,
            config.delimiter,
            parts=config.parts,
            trim=config.trim,
            on=config.on,
            include_captures=config.include_captures,
        )
    )


CONVERTERS: dict[str, Callable[[str, Any], Result[Any, str]]] = {
    "atom": convert_atom,
    "safe_atom": convert_safe_atom,
    "module": convert_module,
    "safe_module": convert_safe_module,
    "boolean": convert_boolean,
    "integer": convert_integer,
    "float": convert_float,
    "decimal": convert_decimal,
    "charlist": convert_charlist,
    "json": convert_json,
    "log_level": convert_log_level,
    "pem": convert_pem,
    "code_erlang": convert_literal,
    "code_elixir": convert_python,
    "literal": convert_literal,
    "python": convert_python,
    "timeout": convert_timeout,
    "duration": convert_duration,
    "base16": convert_base16,
    "base32": convert_base32,
    "hex32": convert_hex32,
    "base64": convert_base64,
    "url_base64": convert_url_base64,
    "list": convert_list,
}
