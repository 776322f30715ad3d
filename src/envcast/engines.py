"""JSON engine resolution for the ``json`` conversion type.

An engine is any of:

- a callable taking the text (``json.loads``, ``orjson.loads``);
- a module or object exposing ``loads`` or ``decode`` (``json``, ``orjson``);
- the import name of such a module (``"json"``);
- an ``(object, "function_name", [extra, args])`` triple, called as
  ``getattr(object, "function_name")(text, *extra_args)``.

An engine may return the decoded value directly, or a ``Success``/``Failure``.
Any exception it raises is treated as a decode failure.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
import importlib
import logging
from typing import Any, Protocol, runtime_checkable

from .types import Failure, Result, Success

log = logging.getLogger(__name__)

JsonDecoder = Callable[[str], Any]


@runtime_checkable
class JsonEngine(Protocol):
    """Protocol for module-like JSON engines."""

    def loads(self, s: str, /) -> Any:
        """Decode a JSON document."""
        ...


def resolve_engine(engine: Any) -> JsonDecoder:
    """Turn an ``engine`` option value into a one-argument decoder.

    Args:
        engine: Any of the engine forms described in the module docstring.

    Returns:
        A callable that decodes a JSON string.

    Raises:
        ValueError: If the value is not a usable engine.
    """
    if isinstance(engine, str):
        try:
            engine = importlib.import_module(engine)
        except ImportError as e:
            raise ValueError(f"cannot import JSON engine {engine!r}") from e

    if isinstance(engine, tuple):
        return _resolve_triple(engine)

    if isinstance(engine, JsonEngine):
        return engine.loads

    decode = getattr(engine, "decode", None)
    if callable(decode):
        return decode

    if callable(engine):
        return engine

    raise ValueError(f"invalid JSON engine: {engine!r}")


def _resolve_triple(engine: tuple[Any, ...]) -> JsonDecoder:
    if len(engine) != 3:
        raise ValueError("JSON engine tuple must be (object, name, args)")
    target, name, extra = engine
    if not isinstance(name, str) or not isinstance(extra, Sequence) or isinstance(
        extra, str
    ):
        raise ValueError("JSON engine tuple must be (object, name, args)")

    function = getattr(target, name, None)
    if not callable(function):
        raise ValueError(f"JSON engine has no callable {name!r}")

    extra_args = tuple(extra)

    def decode(text: str) -> Any:
        return function(text, *extra_args)

    return decode


def is_json_value(value: Any) -> bool:
    """Return True if ``value`` is made only of JSON-representable parts."""
    if value is None or isinstance(value, bool | int | float | str):
        return True
    if isinstance(value, list | tuple):
        return all(is_json_value(item) for item in value)
    if isinstance(value, dict):
        return all(
            isinstance(key, str) and is_json_value(item) for key, item in value.items()
        )
    return False


def decode_json(decoder: JsonDecoder, text: str) -> Result[Any, str]:
    """Run ``decoder`` on ``text`` and normalize its outcome."""
    try:
        result = decoder(text)
    except Exception as e:  # noqa: BLE001 - engine errors are decode failures
        log.debug("JSON engine raised %s", type(e).__name__)
        return Failure(f"JSON engine raised {type(e).__name__}")

    if isinstance(result, Failure):
        return Failure(f"JSON engine failed: {result.error}")
    if isinstance(result, Success):
        result = result.value
    if not is_json_value(result):
        return Failure("JSON engine returned a non-JSON value")
    return Success(result)
