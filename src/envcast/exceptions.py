"""Exceptions raised by envcast."""


class EnvcastError(Exception):
    """Base exception for envcast errors."""


class ConfigError(EnvcastError, ValueError):
    """Raised when the conversion options for a variable are invalid.

    Raised before the value is examined, so it always points at the calling
    code rather than at the environment.
    """

    def __init__(self, name: str, type_tag: object, reason: str):
        """Initialize with the variable name, requested type and reason."""
        self.name = name
        self.type_tag = type_tag
        self.reason = reason
        super().__init__(
            f"could not convert environment variable {name!r} "
            f"to type {type_tag}: {reason}"
        )


class ConversionError(EnvcastError, ValueError):
    """Raised when a present value cannot be converted to the requested type.

    The message never includes the value itself, which may be a secret;
    ``reason`` carries a short diagnostic instead.
    """

    def __init__(self, name: str, type_tag: object, reason: str | None = None):
        """Initialize with the variable name, requested type and reason."""
        self.name = name
        self.type_tag = type_tag
        self.reason = reason
        super().__init__(
            f"could not convert environment variable {name!r} to type {type_tag}"
        )


class EnvError(EnvcastError, KeyError):
    """Raised when a required environment variable is not set."""

    def __init__(self, name: str):
        """Initialize with the missing variable name."""
        self.name = name
        super().__init__(name)

    def __str__(self) -> str:
        return (
            f"could not fetch environment variable {self.name!r} "
            "because it is not set"
        )


class SettingsError(EnvcastError, ValueError):
    """Raised when ENVCAST_* library settings are invalid."""
