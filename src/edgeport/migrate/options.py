"""
Migration options.

Options are loaded from the ``[migrate]`` table of ``edgeport.toml`` and can
be overridden from the command line.
"""

from __future__ import annotations

import logging
import tomllib
from pathlib import Path
from typing import Any

from pydantic import BaseModel

logger = logging.getLogger(__name__)

OPTIONS_FILENAME = "edgeport.toml"


class MigrationOptions(BaseModel):
    """
    Knobs that change how a configuration is migrated.

    Attributes:
        app_name: Application name for synthesized resource names
            (defaults to the first worker's name)
        stage: Stage suffix for synthesized names (e.g. ``prod``)
        adopt: Bind to existing resources instead of creating new ones
        preserve_names: Keep existing physical names where the source declares them
        target_environment: Named environment to resolve before migrating
    """

    app_name: str | None = None
    stage: str | None = None
    adopt: bool = True
    preserve_names: bool = True
    target_environment: str | None = None

    def with_overrides(self, **overrides: Any) -> MigrationOptions:
        """Return a copy with every non-None override applied."""
        update = {k: v for k, v in overrides.items() if v is not None}
        return self.model_copy(update=update)


def load_migration_options(toml_path: Path) -> MigrationOptions:
    """
    Load migration options from edgeport.toml.

    Args:
        toml_path: Path to edgeport.toml file

    Returns:
        MigrationOptions with values from file or defaults
    """
    if not toml_path.exists():
        return MigrationOptions()

    try:
        with open(toml_path, "rb") as f:
            data = tomllib.load(f)
    except (OSError, tomllib.TOMLDecodeError) as e:
        logger.debug("Ignoring unreadable options file %s: %s", toml_path, e)
        return MigrationOptions()

    section = data.get("migrate", {})
    if not section:
        return MigrationOptions()

    return _parse_options(section)


def _parse_options(data: dict[str, Any]) -> MigrationOptions:
    """Parse the [migrate] table, ignoring unknown keys."""
    known = {k: data[k] for k in MigrationOptions.model_fields if k in data}
    return MigrationOptions.model_validate(known)


__all__ = [
    "OPTIONS_FILENAME",
    "MigrationOptions",
    "load_migration_options",
]
