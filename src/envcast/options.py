"""Conversion option validation using Pydantic.

Each type family has a frozen model that checks and normalizes the keyword
options passed to ``convert_as``. Validation happens before the value is
looked at, so a bad option is always reported as a configuration problem
even when the variable is unset.

Options set to ``None`` count as not provided. Unknown options are ignored:
a composite descriptor such as ``("list", "integer")`` shares one option set
between its two levels and each level reads only the keys it knows.
"""

from __future__ import annotations

from collections.abc import Mapping
import datetime
import decimal
import enum
import importlib
import logging
import math
import re
import sys
from types import ModuleType
from typing import Any

from pydantic import (
    BaseModel,
    ConfigDict,
    ValidationError,
    ValidationInfo,
    field_validator,
    model_validator,
)

from .casefold import CaseMode, coerce_mode
from .converters import LOG_LEVELS, parse_decimal, parse_float, parse_integer
from .duration_parser import parse_duration, parse_timeout
from .engines import is_json_value, resolve_engine
from .encoding import LetterCase
from .settings import get_settings
from .symbols import default_symbol_table
from .types import INFINITY, Duration, Failure, Result, Success, TimeUnit

log = logging.getLogger(__name__)

DEFAULT_TRUTHY: tuple[str, ...] = ("1", "true")

_SPLIT_ON = ("all", "first", "all_but_first", "none", "all_names")


class OptionConfig(BaseModel):
    """Base for validated, per-type conversion options."""

    model_config = ConfigDict(
        frozen=True,
        extra="ignore",
        arbitrary_types_allowed=True,
    )


def _casefold_field(v: Any, info: ValidationInfo) -> CaseMode | None:
    try:
        return coerce_mode(v)
    except ValueError:
        raise ValueError(f"invalid `{info.field_name}` value") from None


def _flag(v: Any, info: ValidationInfo) -> bool:
    if not isinstance(v, bool):
        raise ValueError(f"invalid `{info.field_name}` value")
    return v


def _letter_case(v: Any) -> LetterCase:
    if v not in ("upper", "lower", "mixed"):
        raise ValueError("invalid `case` value")
    return v


# --- Symbols and modules ---


class SymbolConfig(OptionConfig):
    """Options for ``atom`` and ``safe_atom``.

    ``allowed`` is either a list of strings or a list of members of one
    ``Enum``; it is stored as a name to value mapping.
    """

    downcase: CaseMode | None = None
    upcase: CaseMode | None = None
    allowed: Any = None
    default: Any = None

    @model_validator(mode="before")
    @classmethod
    def check_single_casefold(cls, data: Any) -> Any:
        if isinstance(data, Mapping) and "downcase" in data and "upcase" in data:
            raise ValueError("`downcase` and `upcase` options both provided")
        return data

    @field_validator("downcase", "upcase", mode="before")
    @classmethod
    def parse_casefold(cls, v: Any, info: ValidationInfo) -> CaseMode | None:
        return _casefold_field(v, info)

    @field_validator("allowed", mode="before")
    @classmethod
    def parse_allowed(cls, v: Any) -> dict[str, Any]:
        if not isinstance(v, list | tuple):
            raise ValueError("`allowed` must be a symbol list")
        if not v:
            raise ValueError("`allowed` cannot be empty")
        if all(isinstance(item, enum.Enum) for item in v):
            if len({type(item) for item in v}) != 1:
                raise ValueError("`allowed` must be a symbol list")
            return {item.name: item for item in v}
        if all(isinstance(item, str) for item in v):
            return {item: default_symbol_table.intern(item) for item in v}
        raise ValueError("`allowed` must be a symbol list")

    @field_validator("default", mode="before")
    @classmethod
    def parse_default(cls, v: Any, info: ValidationInfo) -> Any:
        allowed = info.data.get("allowed")
        if not isinstance(v, str | enum.Enum):
            raise ValueError("non-symbol `default` value")
        if allowed is None:
            if isinstance(v, enum.Enum):
                return v
            return default_symbol_table.intern(v)

        name = v.name if isinstance(v, enum.Enum) else v
        if name in allowed and (isinstance(v, str) or allowed[name] is v):
            return allowed[name]
        raise ValueError(f"`default` value '{name}' not present in `allowed`")


class ModuleConfig(OptionConfig):
    """Options for ``module`` and ``safe_module``."""

    allowed: Any = None
    default: Any = None

    @field_validator("allowed", mode="before")
    @classmethod
    def parse_allowed(cls, v: Any) -> dict[str, ModuleType]:
        if not isinstance(v, list | tuple):
            raise ValueError("`allowed` must be a module list")
        if not v:
            raise ValueError("`allowed` cannot be empty")
        if not all(isinstance(item, ModuleType) for item in v):
            raise ValueError("`allowed` must be a module list")
        return {item.__name__: item for item in v}

    @field_validator("default", mode="before")
    @classmethod
    def parse_default(cls, v: Any, info: ValidationInfo) -> ModuleType:
        allowed = info.data.get("allowed")
        if isinstance(v, ModuleType):
            if allowed is None or allowed.get(v.__name__) is v:
                return v
            raise ValueError(f"`default` value '{v.__name__}' not present in `allowed`")
        if not isinstance(v, str):
            raise ValueError("non-module `default` value")
        if allowed is not None:
            if v in allowed:
                return allowed[v]
            raise ValueError(f"`default` value '{v}' not present in `allowed`")

        type_tag = (info.context or {}).get("type_tag")
        if type_tag == "safe_module":
            module = sys.modules.get(v)
        else:
            try:
                module = importlib.import_module(v)
            except (ImportError, ValueError, TypeError):
                module = None
        if module is None:
            raise ValueError("non-module `default` value")
        return module


# --- Scalars ---


class BooleanConfig(OptionConfig):
    """Options for ``boolean``.

    At most one of ``truthy`` and ``falsy`` may be given. With ``falsy``,
    anything not listed is true; otherwise only ``truthy`` values are true.
    """

    truthy: tuple[str, ...] = DEFAULT_TRUTHY
    falsy: tuple[str, ...] | None = None
    downcase: CaseMode | None = None
    default: bool = False

    @model_validator(mode="before")
    @classmethod
    def check_matchers(cls, data: Any) -> Any:
        if not isinstance(data, Mapping):
            return data
        if "truthy" in data and "falsy" in data:
            raise ValueError("`truthy` and `falsy` options both provided")
        data = dict(data)
        data.setdefault("downcase", get_settings().boolean_downcase)
        return data

    @field_validator("truthy", "falsy", mode="before")
    @classmethod
    def parse_matchers(cls, v: Any, info: ValidationInfo) -> tuple[str, ...]:
        if (
            not isinstance(v, list | tuple | set | frozenset)
            or not v
            or not all(isinstance(item, str) for item in v)
        ):
            raise ValueError(f"invalid `{info.field_name}` value")
        return tuple(v)

    @field_validator("downcase", mode="before")
    @classmethod
    def parse_casefold(cls, v: Any, info: ValidationInfo) -> CaseMode | None:
        return _casefold_field(v, info)

    @field_validator("default", mode="before")
    @classmethod
    def parse_default(cls, v: Any) -> bool:
        if not isinstance(v, bool):
            raise ValueError("non-boolean `default` value")
        return v


class IntegerConfig(OptionConfig):
    base: int = 10
    default: int | None = None

    @field_validator("base", mode="before")
    @classmethod
    def parse_base(cls, v: Any) -> int:
        if isinstance(v, bool) or not isinstance(v, int) or not 2 <= v <= 36:
            raise ValueError("invalid `base` value (must be an integer 2..36)")
        return v

    @field_validator("default", mode="before")
    @classmethod
    def parse_default(cls, v: Any, info: ValidationInfo) -> int:
        if isinstance(v, int) and not isinstance(v, bool):
            return v
        if isinstance(v, str):
            base = info.data.get("base", 10)
            parsed = parse_integer(v, base)
            if parsed is None:
                raise ValueError(f"non-integer `default` value for base {base}")
            return parsed
        raise ValueError("non-integer `default` value")


class FloatConfig(OptionConfig):
    default: float | None = None

    @field_validator("default", mode="before")
    @classmethod
    def parse_default(cls, v: Any) -> float:
        if isinstance(v, float):
            return v
        if isinstance(v, int) and not isinstance(v, bool):
            return float(v)
        if isinstance(v, str) and (parsed := parse_float(v)) is not None:
            return parsed
        raise ValueError("non-float `default` value")


class DecimalConfig(OptionConfig):
    default: Any = None

    @field_validator("default", mode="before")
    @classmethod
    def parse_default(cls, v: Any) -> decimal.Decimal:
        if isinstance(v, decimal.Decimal):
            return v
        if isinstance(v, int) and not isinstance(v, bool):
            return decimal.Decimal(v)
        if isinstance(v, float):
            return decimal.Decimal(str(v))
        if isinstance(v, str) and (parsed := parse_decimal(v)) is not None:
            return parsed
        raise ValueError("non-decimal `default` value")


class CharlistConfig(OptionConfig):
    default: Any = None

    @field_validator("default", mode="before")
    @classmethod
    def parse_default(cls, v: Any) -> list[int]:
        if isinstance(v, str):
            return [ord(char) for char in v]
        if isinstance(v, list | tuple) and all(
            isinstance(item, int) and not isinstance(item, bool) for item in v
        ):
            return list(v)
        raise ValueError("non-charlist `default` value")


class JsonConfig(OptionConfig):
    """Options for ``json``. ``engine`` falls back to ``ENVCAST_JSON_ENGINE``."""

    default: Any = None
    engine: Any = None

    @model_validator(mode="before")
    @classmethod
    def default_engine(cls, data: Any) -> Any:
        if isinstance(data, Mapping) and "engine" not in data:
            data = dict(data)
            data["engine"] = get_settings().json_engine
        return data

    @field_validator("default", mode="before")
    @classmethod
    def parse_default(cls, v: Any) -> Any:
        if not is_json_value(v):
            raise ValueError("non-JSON `default` value")
        return v

    @field_validator("engine", mode="before")
    @classmethod
    def parse_engine(cls, v: Any) -> Any:
        try:
            return resolve_engine(v)
        except ValueError:
            raise ValueError("invalid `engine` value") from None


class LogLevelConfig(OptionConfig):
    default: int | None = None

    @field_validator("default", mode="before")
    @classmethod
    def parse_default(cls, v: Any) -> int:
        if isinstance(v, str) and v.lower() in LOG_LEVELS:
            return LOG_LEVELS[v.lower()]
        if (
            isinstance(v, int)
            and not isinstance(v, bool)
            and v in LOG_LEVELS.values()
        ):
            return v
        raise ValueError(f"invalid `default` value {v}")


class PemConfig(OptionConfig):
    filter: Any = True

    @field_validator("filter", mode="before")
    @classmethod
    def parse_filter(cls, v: Any) -> bool | str:
        if v is True or v is False or v in ("cert", "key"):
            return v
        raise ValueError("invalid `filter` value")


class CodeConfig(OptionConfig):
    """Code tags (``code_erlang``, ``code_elixir`` and aliases) take no options."""


# --- Encodings ---


class Base16Config(OptionConfig):
    case: LetterCase = "upper"

    @field_validator("case", mode="before")
    @classmethod
    def parse_case(cls, v: Any) -> LetterCase:
        return _letter_case(v)


class Base32Config(OptionConfig):
    case: LetterCase = "upper"
    padding: bool = False

    @field_validator("case", mode="before")
    @classmethod
    def parse_case(cls, v: Any) -> LetterCase:
        return _letter_case(v)

    @field_validator("padding", mode="before")
    @classmethod
    def parse_padding(cls, v: Any, info: ValidationInfo) -> bool:
        return _flag(v, info)


class Base64Config(OptionConfig):
    ignore_whitespace: bool = True
    padding: bool = False

    @field_validator("ignore_whitespace", "padding", mode="before")
    @classmethod
    def parse_flags(cls, v: Any, info: ValidationInfo) -> bool:
        return _flag(v, info)


class ListConfig(OptionConfig):
    """Options for ``list``; see ``envcast.encoding.split_list``."""

    delimiter: Any = ","
    parts: int | float = INFINITY
    trim: bool = False
    on: Any = "first"
    include_captures: bool = False
    default: list[Any] | None = None

    @field_validator("delimiter", mode="before")
    @classmethod
    def parse_delimiter(cls, v: Any) -> str | tuple[str, ...] | re.Pattern[str]:
        if isinstance(v, re.Pattern) and isinstance(v.pattern, str):
            return v
        if isinstance(v, str) and v:
            return v
        if (
            isinstance(v, list | tuple)
            and v
            and all(isinstance(item, str) and item for item in v)
        ):
            return tuple(v)
        raise ValueError("invalid `delimiter` value")

    @field_validator("parts", mode="before")
    @classmethod
    def parse_parts(cls, v: Any) -> int | float:
        if v == "infinity" or (isinstance(v, float) and v == INFINITY):
            return INFINITY
        if isinstance(v, int) and not isinstance(v, bool) and v > 0:
            return v
        raise ValueError("invalid `parts` value")

    @field_validator("trim", "include_captures", mode="before")
    @classmethod
    def parse_flags(cls, v: Any, info: ValidationInfo) -> bool:
        return _flag(v, info)

    @field_validator("on", mode="before")
    @classmethod
    def parse_on(cls, v: Any, info: ValidationInfo) -> str | tuple[str | int, ...]:
        if isinstance(v, str) and v in _SPLIT_ON:
            return v
        if not isinstance(v, list | tuple) or not all(
            isinstance(item, str | int) and not isinstance(item, bool) for item in v
        ):
            raise ValueError("invalid `on` value")

        pattern = info.data.get("delimiter")
        if isinstance(pattern, re.Pattern):
            for group in v:
                known = (
                    group in pattern.groupindex
                    if isinstance(group, str)
                    else 0 <= group <= pattern.groups
                )
                if not known:
                    raise ValueError("invalid `on` value")
        return tuple(v)

    @field_validator("default", mode="before")
    @classmethod
    def parse_default(cls, v: Any) -> list[Any]:
        if not isinstance(v, list | tuple):
            raise ValueError("non-list `default` value")
        return list(v)


# --- Durations ---


class TimeoutConfig(OptionConfig):
    """Options for ``timeout``; the default is always held in milliseconds."""

    default: int | float = INFINITY

    @field_validator("default", mode="before")
    @classmethod
    def parse_default(cls, v: Any) -> int | float:
        milliseconds = _timeout_milliseconds(v)
        if milliseconds is None:
            raise ValueError("invalid timeout `default` value")
        return milliseconds


class DurationConfig(OptionConfig):
    default: Any = None

    @field_validator("default", mode="before")
    @classmethod
    def parse_default(cls, v: Any) -> Duration:
        if isinstance(v, Duration):
            return v
        if isinstance(v, datetime.timedelta):
            return Duration.from_timedelta(v)
        if isinstance(v, str):
            result = parse_duration(v)
            if isinstance(result, Success):
                return result.value
        raise ValueError("invalid duration `default` value")


def _timeout_milliseconds(v: Any) -> int | float | None:
    if isinstance(v, float) and math.isinf(v) and v > 0:
        return INFINITY
    if isinstance(v, int) and not isinstance(v, bool):
        return v if v >= 0 else None
    if isinstance(v, str):
        result = parse_timeout(v)
        return result.value if isinstance(result, Success) else None
    if isinstance(v, Duration):
        try:
            milliseconds = v.total_milliseconds()
        except ValueError:
            return None
        return milliseconds if milliseconds >= 0 else None
    if isinstance(v, datetime.timedelta):
        milliseconds = v // datetime.timedelta(milliseconds=1)
        return milliseconds if milliseconds >= 0 else None
    if isinstance(v, Mapping):
        return _mapping_milliseconds(v)
    return None


def _mapping_milliseconds(v: Mapping[Any, Any]) -> int | None:
    if not v:
        return None
    total = 0
    seen: set[TimeUnit] = set()
    for name, magnitude in v.items():
        try:
            unit = TimeUnit.from_name(name) if isinstance(name, str) else None
        except ValueError:
            return None
        if (
            unit is None
            or unit in seen
            or isinstance(magnitude, bool)
            or not isinstance(magnitude, int)
            or magnitude < 0
        ):
            return None
        seen.add(unit)
        total += unit.milliseconds * magnitude
    return total


CONFIG_MODELS: dict[str, type[OptionConfig]] = {
    "atom": SymbolConfig,
    "safe_atom": SymbolConfig,
    "module": ModuleConfig,
    "safe_module": ModuleConfig,
    "boolean": BooleanConfig,
    "integer": IntegerConfig,
    "float": FloatConfig,
    "decimal": DecimalConfig,
    "charlist": CharlistConfig,
    "json": JsonConfig,
    "log_level": LogLevelConfig,
    "pem": PemConfig,
    "code_erlang": CodeConfig,
    "code_elixir": CodeConfig,
    "literal": CodeConfig,
    "python": CodeConfig,
    "base16": Base16Config,
    "base32": Base32Config,
    "hex32": Base32Config,
    "base64": Base64Config,
    "url_base64": Base64Config,
    "list": ListConfig,
    "timeout": TimeoutConfig,
    "duration": DurationConfig,
}


def validate_options(
    type_tag: str, options: Mapping[str, Any]
) -> Result[OptionConfig, str]:
    """Validate ``options`` for ``type_tag``.

    Args:
        type_tag: A primitive or encoded type tag.
        options: The keyword options given to ``convert_as``.

    Returns:
        ``Success`` with the normalized config, or ``Failure`` with the first
        problem found, naming the offending option in backticks.

    Example:
        >>> validate_options("integer", {"base": 1})
        Failure(error='invalid `base` value (must be an integer 2..36)')
    """
    model = CONFIG_MODELS.get(type_tag)
    if model is None:
        return Failure("unsupported conversion type")

    provided = {key: value for key, value in options.items() if value is not None}
    try:
        return Success(model.model_validate(provided, context={"type_tag": type_tag}))
    except ValidationError as e:
        return Failure(_first_reason(e))


def _first_reason(error: ValidationError) -> str:
    detail = error.errors()[0]
    cause = detail.get("ctx", {}).get("error")
    if cause is not None:
        return str(cause)
    log.debug("Unexpected option validation error: %s", detail)
    return detail["msg"]
