"""Typed conversion of environment variables."""

import importlib.metadata
import logging

from envcast.conversion import convert_as
from envcast.env import (
    delete_env,
    fetch_env,
    fetch_env_as,
    fetch_env_boolean,
    fetch_env_integer,
    get_env,
    get_env_as,
    get_env_boolean,
    get_env_integer,
    load_env_file,
    put_env,
    put_env_new,
)
from envcast.exceptions import (
    ConfigError,
    ConversionError,
    EnvcastError,
    EnvError,
    SettingsError,
)
from envcast.settings import EnvcastSettings, get_settings, reset_settings
from envcast.symbols import Symbol, SymbolTable, default_symbol_table
from envcast.types import INFINITY, Duration, Failure, Result, Success, TimeUnit

# Version handling
try:
    __version__ = importlib.metadata.version("envcast")
except importlib.metadata.PackageNotFoundError:
    __version__ = "development"

# Set up a null handler for the library's root logger.
# This prevents 'No handler found' errors if the consuming app has no logging configured.
logging.getLogger(__name__).addHandler(logging.NullHandler())

# Public API
__all__ = [  # noqa: RUF022
    # Conversion
    "convert_as",
    # Environment access
    "get_env",
    "fetch_env",
    "put_env",
    "put_env_new",
    "delete_env",
    "get_env_as",
    "fetch_env_as",
    "get_env_boolean",
    "fetch_env_boolean",
    "get_env_integer",
    "fetch_env_integer",
    "load_env_file",
    # Settings
    "EnvcastSettings",
    "get_settings",
    "reset_settings",
    # Types
    "Duration",
    "TimeUnit",
    "INFINITY",
    "Symbol",
    "SymbolTable",
    "default_symbol_table",
    "Success",
    "Failure",
    "Result",
    # Exceptions
    "EnvcastError",
    "ConfigError",
    "ConversionError",
    "EnvError",
    "SettingsError",
]
