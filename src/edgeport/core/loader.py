"""
Worker configuration loading.

Reads ``wrangler.toml`` / ``wrangler.json`` / ``wrangler.jsonc`` files and
validates them against the source schema. Every failure here is structural
and raised as ConfigError.
"""

from __future__ import annotations

import json
import logging
import re
import tomllib
from pathlib import Path
from typing import Any, Literal

from pydantic import ValidationError

from .errors import ConfigError, ErrorContext, make_config_error
from .schema import WorkerConfig

logger = logging.getLogger(__name__)

ConfigFormat = Literal["toml", "json"]

# Discovery order when no path is given
CONFIG_FILENAMES = ("wrangler.toml", "wrangler.json", "wrangler.jsonc")

# Strings first so that comment markers inside string literals survive
_JSONC_TOKENS = re.compile(r'"(?:\\.|[^"\\])*"|//[^\n]*|/\*.*?\*/', re.DOTALL)


def detect_format(path: Path) -> ConfigFormat:
    """Detect the configuration format from the file extension."""
    suffix = path.suffix.lower()
    if suffix == ".toml":
        return "toml"
    if suffix in (".json", ".jsonc"):
        return "json"
    raise make_config_error(
        "Unsupported config format. Must be .toml, .json or .jsonc",
        file=path,
    )


def strip_json_comments(text: str) -> str:
    """Remove ``//`` and ``/* */`` comments from JSONC text."""

    def _replace(match: re.Match[str]) -> str:
        token = match.group(0)
        return token if token.startswith('"') else ""

    return _JSONC_TOKENS.sub(_replace, text)


def parse_config_text(text: str, fmt: ConfigFormat) -> dict[str, Any]:
    """Parse raw configuration text into a dictionary."""
    if fmt == "toml":
        return tomllib.loads(text)
    data = json.loads(strip_json_comments(text))
    if not isinstance(data, dict):
        raise ConfigError("Configuration root must be an object")
    return data


def validate_config_data(data: dict[str, Any], source: Path | None = None) -> WorkerConfig:
    """
    Validate parsed data against the WorkerConfig schema.

    Raises:
        ConfigError: With the first failing field as context
    """
    try:
        return WorkerConfig.model_validate(data)
    except ValidationError as e:
        first = e.errors()[0]
        field = ".".join(str(part) for part in first["loc"])
        message = f"Invalid worker configuration: {first['msg']}"
        if e.error_count() > 1:
            message += f" (and {e.error_count() - 1} more)"
        if source is not None:
            raise ConfigError(message, ErrorContext(file=source, field=field)) from e
        raise ConfigError(f"{message} at '{field}'") from e


def load_worker_config(path: Path) -> WorkerConfig:
    """
    Load and validate a worker configuration file.

    Args:
        path: Path to a .toml, .json or .jsonc file

    Returns:
        Validated WorkerConfig

    Raises:
        ConfigError: If the file is missing, unparseable or invalid
    """
    fmt = detect_format(path)

    if not path.exists():
        raise make_config_error("Configuration file not found", file=path)

    try:
        text = path.read_text(encoding="utf-8")
        data = parse_config_text(text, fmt)
    except (tomllib.TOMLDecodeError, json.JSONDecodeError) as e:
        raise make_config_error(f"Could not parse {fmt.upper()}: {e}", file=path) from e
    except ConfigError as e:
        raise make_config_error(e.message, file=path) from e

    config = validate_config_data(data, source=path)
    logger.debug("Loaded worker '%s' from %s", config.name, path)
    return config


def discover_config(directory: Path) -> Path | None:
    """Return the first worker configuration file found in ``directory``."""
    for filename in CONFIG_FILENAMES:
        candidate = directory / filename
        if candidate.is_file():
            return candidate
    return None


__all__ = [
    "CONFIG_FILENAMES",
    "ConfigFormat",
    "detect_format",
    "strip_json_comments",
    "parse_config_text",
    "validate_config_data",
    "load_worker_config",
    "discover_config",
]
