"""
Error types for edgeport configuration loading and migration.

Only structural problems are raised as exceptions. Item-level and
cross-reference problems are reported as strings on the resolved model.
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Optional


class EdgeportError(Exception):
    """
    Base exception for all edgeport errors.

    ``str(error)`` puts the source location, when known, on the line before
    the message.
    """

    def __init__(self, message: str, context: Optional["ErrorContext"] = None):
        self.message = message
        self.context = context
        lines = [context.format(), message] if context else [message]
        super().__init__("\n".join(lines))


class ConfigError(EdgeportError):
    """
    Raised when a worker configuration cannot be used at all.

    Examples:
    - File not found or unsupported extension
    - TOML/JSON syntax errors
    - Schema violations (missing ``name``, wrong field types)
    """

    pass


class UnknownEnvironmentError(ConfigError):
    """Raised when a target environment is not declared in the configuration."""

    def __init__(
        self,
        environment: str,
        available: list[str],
        context: Optional["ErrorContext"] = None,
    ):
        self.environment = environment
        self.available = available
        if available:
            hint = f"Available environments: {', '.join(available)}"
        else:
            hint = "The configuration declares no environments"
        super().__init__(f"Unknown environment '{environment}'. {hint}", context)


@dataclass
class ErrorContext:
    """
    Location information for an error.

    Attributes:
        file: Path to the configuration file
        field: Optional dotted path of the offending field
    """

    file: Path
    field: str | None = None

    def format(self) -> str:
        """Format as ``file`` or ``file: field``."""
        if self.field:
            return f"{self.file}: {self.field}"
        return str(self.file)


def make_config_error(
    message: str,
    file: Path | None = None,
    field: str | None = None,
) -> ConfigError:
    """
    Helper to create a ConfigError with optional context.

    Args:
        message: Error description
        file: Optional source file path
        field: Optional field path within the file

    Returns:
        ConfigError with context if a file was provided
    """
    if file is not None:
        return ConfigError(message, ErrorContext(file=file, field=field))
    return ConfigError(message)
