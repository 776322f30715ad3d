"""Typed conversion of raw environment values.

``convert_as`` is the single entry point. It accepts a bare type tag
(``"integer"``, ``"base64"``, ``"list"``) or a ``(wrapper, secondary)`` pair
that decodes with ``wrapper`` first and converts the result with
``secondary``:

- ``("base64", "string")`` decodes to text;
- ``("base64", "json")`` decodes, then parses the text as JSON;
- ``("list", "integer")`` splits, then converts each element.

Options are validated before the value is examined. Invalid options raise
``ConfigError``; a present value that cannot be converted raises
``ConversionError``. An absent value (``None``) is never an error and yields
the type's default.
"""

from __future__ import annotations

import logging
from typing import Any

from .casefold import apply_casefold
from .converters import CONVERTERS
from .exceptions import ConfigError, ConversionError
from .options import OptionConfig, validate_options
from .types import ENCODED_TYPES, PRIMITIVE_TYPES, Failure, TypeDescriptor

log = logging.getLogger(__name__)


def convert_as(
    raw: str | None, name: str, descriptor: TypeDescriptor, **options: Any
) -> Any:
    """Convert ``raw`` to the type named by ``descriptor``.

    Args:
        raw: The raw text, or None when the variable is unset.
        name: The variable name, used in error messages.
        descriptor: A type tag or a ``(wrapper, secondary)`` pair.
        **options: Type-specific options, shared by both levels of a pair.

    Returns:
        The converted value, or the configured default when ``raw`` is None.

    Raises:
        ConfigError: If the descriptor or its options are invalid.
        ConversionError: If ``raw`` cannot be converted.

    Example:
        >>> convert_as("18EB", "PORT", "integer", base=16)
        6379
        >>> convert_as("1,2,3", "IDS", ("list", "integer"))
        [1, 2, 3]
    """
    if isinstance(descriptor, tuple):
        return _convert_pair(raw, name, descriptor, options)
    if isinstance(descriptor, str) and (
        descriptor in PRIMITIVE_TYPES or descriptor in ENCODED_TYPES
    ):
        config = _validate(name, descriptor, options)
        return _convert(raw, name, descriptor, config)
    raise _unsupported(name, descriptor)


def _convert_pair(
    raw: str | None,
    name: str,
    descriptor: tuple[Any, ...],
    options: dict[str, Any],
) -> Any:
    if len(descriptor) != 2:
        raise _unsupported(name, descriptor)
    wrapper, secondary = descriptor
    if (
        not isinstance(wrapper, str)
        or not isinstance(secondary, str)
        or wrapper not in ENCODED_TYPES
        or not (secondary == "string" or secondary in PRIMITIVE_TYPES)
    ):
        raise _unsupported(name, descriptor)

    if wrapper == "list":
        return _convert_list(raw, name, secondary, options)

    wrapper_config = _validate(name, wrapper, options)
    if secondary == "string":
        if raw is None:
            return None
        return _decode_text(raw, name, wrapper, wrapper_config)

    secondary_config = _validate(name, secondary, options)
    if raw is None:
        return _convert(None, name, secondary, secondary_config)
    text = _decode_text(raw, name, wrapper, wrapper_config)
    return _convert(text, name, secondary, secondary_config)


def _convert_list(
    raw: str | None, name: str, secondary: str, options: dict[str, Any]
) -> Any:
    list_config = _validate(name, "list", options)
    # The default belongs to the list; elements never fall back to it.
    element_options = {
        key: value for key, value in options.items() if key != "default"
    }
    element_config = None
    if secondary != "string":
        element_config = _validate(name, secondary, element_options)

    items = _convert(raw, name, "list", list_config)
    if raw is None or element_config is None:
        return items
    return [
        _convert(item, f"{name}[{index}]", secondary, element_config)
        for index, item in enumerate(items)
    ]


def _decode_text(raw: str, name: str, wrapper: str, config: OptionConfig) -> str:
    data = _convert(raw, name, wrapper, config)
    try:
        return data.decode("utf-8")
    except UnicodeDecodeError:
        log.debug("Decoded %s value for %s is not UTF-8", wrapper, name)
        raise ConversionError(name, wrapper, "decoded data is not UTF-8") from None


def _validate(name: str, type_tag: str, options: dict[str, Any]) -> OptionConfig:
    result = validate_options(type_tag, options)
    if isinstance(result, Failure):
        log.debug("Invalid options for %s as %s: %s", name, type_tag, result.error)
        raise ConfigError(name, type_tag, result.error)
    return result.value


def _convert(
    raw: str | None, name: str, type_tag: str, config: OptionConfig
) -> Any:
    if raw is None:
        return getattr(config, "default", None)

    value = apply_casefold(
        raw, getattr(config, "downcase", None), getattr(config, "upcase", None)
    )
    result = CONVERTERS[type_tag](value, config)
    if isinstance(result, Failure):
        log.debug("Could not convert %s to %s: %s", name, type_tag, result.error)
        raise ConversionError(name, type_tag, result.error)
    return result.value


def _unsupported(name: str, descriptor: Any) -> ConfigError:
    return ConfigError(name, descriptor, "unsupported conversion type")


__all__ = ["convert_as"]
