"""Configuration error definitions."""

from __future__ import annotations


class ConfigurationError(RuntimeError):
    """Raised when configuration values are invalid."""


class MissingConfigurationError(ConfigurationError):
    """Raised when required configuration values are absent or blank."""


class InvalidConfigurationError(ConfigurationError):
    """Raised when an environment variable cannot be parsed into its expected type."""

    def __init__(self, name: str, value: str, expected: str) -> None:
        super().__init__(f"Invalid value for {name}: {value!r} (expected {expected})")
        self.name = name
        self.value = value
