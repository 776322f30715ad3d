"""Library-wide settings read from ``ENVCAST_*`` environment variables.

Only defaults live here; every per-call option overrides them.

- ``ENVCAST_JSON_ENGINE``: import name of the module used to decode ``json``
  values when no ``engine`` option is given (default ``json``).
- ``ENVCAST_BOOLEAN_DOWNCASE``: case folding applied to ``boolean`` values
  when no ``downcase`` option is given (default off).
"""

from functools import lru_cache
from typing import Any

from pydantic import Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .casefold import CASE_MODES
from .exceptions import SettingsError

_TRUE_STRINGS = frozenset({"1", "true", "yes", "on"})
_FALSE_STRINGS = frozenset({"", "0", "false", "no", "off"})


class EnvcastSettings(BaseSettings):
    """Pydantic settings schema for envcast defaults."""

    model_config = SettingsConfigDict(
        env_prefix="ENVCAST_",
        case_sensitive=False,
        extra="ignore",
    )

    json_engine: str = Field(
        default="json",
        description="Import name of the default JSON engine",
        min_length=1,
    )

    boolean_downcase: bool | str = Field(
        default=False,
        description="Default `downcase` mode for boolean conversions",
    )

    @field_validator("boolean_downcase", mode="before")
    @classmethod
    def parse_boolean_downcase(cls, v: Any) -> bool | str:
        """Accept a bool, a boolean-like string, or a case mode name."""
        if isinstance(v, bool):
            return v
        if isinstance(v, str):
            normalized = v.strip().lower()
            if normalized in _TRUE_STRINGS:
                return True
            if normalized in _FALSE_STRINGS:
                return False
            if normalized in CASE_MODES:
                return normalized
        raise ValueError(
            f"Invalid boolean_downcase: {v!r}. Must be a boolean or one of: "
            + ", ".join(CASE_MODES)
        )


@lru_cache(maxsize=1)
def get_settings() -> EnvcastSettings:
    """Return the cached settings, reading the environment on first use.

    Raises:
        SettingsError: If an ``ENVCAST_*`` variable holds an invalid value.
    """
    try:
        return EnvcastSettings()
    except ValidationError as e:
        raise SettingsError(f"Invalid ENVCAST_* settings: {e}") from e


def reset_settings() -> None:
    """Forget cached settings so the next call re-reads the environment."""
    get_settings.cache_clear()
