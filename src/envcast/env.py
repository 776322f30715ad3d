"""Environment variable access with typed conversion.

Thin wrappers over ``os.environ`` that route values through ``convert_as``.
An unset variable and a variable set to the empty string are different:
``get_*`` functions return the default for the former, ``fetch_*`` functions
raise ``EnvError``.

Every function takes an optional ``environ`` mapping, which defaults to
``os.environ``.
"""

from __future__ import annotations

from collections.abc import Mapping, MutableMapping
import logging
import os
from pathlib import Path
from typing import Any

from dotenv import dotenv_values

from .conversion import convert_as
from .exceptions import EnvError
from .types import TypeDescriptor

log = logging.getLogger(__name__)

Environ = MutableMapping[str, str]


def _environ(environ: Environ | None) -> Environ:
    return os.environ if environ is None else environ


def get_env(
    name: str | None = None, default: Any = None, *, environ: Environ | None = None
) -> Any:
    """Return a variable's value, or ``default`` if it is unset.

    Without a name, returns a copy of the whole environment.
    """
    env = _environ(environ)
    if name is None:
        return dict(env)
    return env.get(name, default)


def fetch_env(name: str, *, environ: Environ | None = None) -> str:
    """Return a variable's value.

    Raises:
        EnvError: If the variable is unset.
    """
    env = _environ(environ)
    if name not in env:
        raise EnvError(name)
    return env[name]


def put_env(
    name: str | Mapping[str, str | None],
    value: str | None = None,
    *,
    environ: Environ | None = None,
) -> None:
    """Set one variable, or several from a mapping. ``None`` unsets."""
    env = _environ(environ)
    values = name if isinstance(name, Mapping) else {name: value}
    for key, item in values.items():
        if item is None:
            env.pop(key, None)
        else:
            env[key] = item


def put_env_new(name: str, value: str, *, environ: Environ | None = None) -> None:
    """Set a variable only if it is not already set."""
    env = _environ(environ)
    if name not in env:
        env[name] = value


def delete_env(name: str, *, environ: Environ | None = None) -> None:
    """Unset a variable; unsetting an unset variable is not an error."""
    _environ(environ).pop(name, None)


def get_env_as(
    name: str,
    descriptor: TypeDescriptor,
    *,
    environ: Environ | None = None,
    **options: Any,
) -> Any:
    """Return a variable converted with ``convert_as``.

    An unset variable yields the type's default.

    Example:
        >>> put_env("PORT", "18EB")
        >>> get_env_as("PORT", "integer", base=16)
        6379
    """
    return convert_as(_environ(environ).get(name), name, descriptor, **options)


def fetch_env_as(
    name: str,
    descriptor: TypeDescriptor,
    *,
    environ: Environ | None = None,
    **options: Any,
) -> Any:
    """Like ``get_env_as``, but an unset variable raises ``EnvError``.

    The ``default`` option is ignored.
    """
    options.pop("default", None)
    raw = fetch_env(name, environ=environ)
    return convert_as(raw, name, descriptor, **options)


def get_env_boolean(
    name: str, *, environ: Environ | None = None, **options: Any
) -> bool:
    """Return a variable as a boolean; unset is ``False`` unless ``default``."""
    return get_env_as(name, "boolean", environ=environ, **options)


def fetch_env_boolean(
    name: str, *, environ: Environ | None = None, **options: Any
) -> bool:
    return fetch_env_as(name, "boolean", environ=environ, **options)


def get_env_integer(
    name: str, *, environ: Environ | None = None, **options: Any
) -> int | None:
    return get_env_as(name, "integer", environ=environ, **options)


def fetch_env_integer(
    name: str, *, environ: Environ | None = None, **options: Any
) -> int:
    return fetch_env_as(name, "integer", environ=environ, **options)


def load_env_file(
    path: str | Path,
    *,
    override: bool = False,
    environ: Environ | None = None,
) -> dict[str, str]:
    """Load ``KEY=VALUE`` pairs from a .env file into the environment.

    Args:
        path: Path to the .env file.
        override: Replace variables that are already set.
        environ: Target mapping; defaults to ``os.environ``.

    Returns:
        The variables that were set.

    Raises:
        FileNotFoundError: If the file doesn't exist.
    """
    env_path = Path(path)
    if not env_path.is_file():
        raise FileNotFoundError(f"Environment file not found: {env_path}")

    env = _environ(environ)
    loaded = {}
    for key, value in dotenv_values(env_path, encoding="utf-8").items():
        # Keys without "=" have no value
        if value is None:
            continue
        if override or key not in env:
            env[key] = value
            loaded[key] = value

    log.debug("Loaded %d variables from %s", len(loaded), env_path)
    return loaded
