"""
Environment resolution for worker configurations.

A worker configuration may declare named overrides under ``[env.<name>]``.
Resolving an environment produces a complete configuration unit from the
base unit and one override, using a fixed per-field merge policy:

- Scalar fields (``name``, ``main``, ``compatibility_date``, ...): the
  override value replaces the base value when declared.
- List and table fields (``kv_namespaces``, ``routes``, ``queues``, ...):
  the override replaces the whole value. Elements are never merged, an
  environment is a full redefinition of that category.
- Map fields (``vars`` and the module blob maps): shallow merge, override
  keys win and base keys not named by the override survive.

A field that the override does not declare is inherited unchanged.

Usage:
    from edgeport.core.environment import resolve_environment

    unit = resolve_environment(config, "production")
"""

from __future__ import annotations

import logging

from .errors import UnknownEnvironmentError
from .schema import EnvironmentOverride, UnitFields, WorkerConfig

logger = logging.getLogger(__name__)

# Fields merged key-by-key instead of replaced
MERGED_MAP_FIELDS: frozenset[str] = frozenset({"vars", "text_blobs", "data_blobs", "wasm_modules"})


def declared_fields(override: UnitFields) -> list[str]:
    """Return the schema fields an override actually declares, in schema order."""
    return [
        name
        for name in UnitFields.model_fields
        if name in override.model_fields_set and getattr(override, name) is not None
    ]


def merge_environment(
    base: WorkerConfig,
    override: EnvironmentOverride,
    environment: str,
) -> WorkerConfig:
    """
    Merge one environment override onto a base unit.

    Args:
        base: The top-level worker configuration
        override: The partial configuration for ``environment``
        environment: Name of the environment being resolved

    Returns:
        A new WorkerConfig with no nested environments. The base is not modified.
    """
    update: dict[str, object] = {}

    for field_name in declared_fields(override):
        value = getattr(override, field_name)
        if field_name in MERGED_MAP_FIELDS:
            value = {**(getattr(base, field_name) or {}), **value}
        update[field_name] = value

    # Unknown keys follow the replace rule
    for key, value in (override.model_extra or {}).items():
        if key != "env":
            update[key] = value

    overridden = frozenset(update)
    update["env"] = {}

    resolved = base.model_copy(update=update, deep=True)
    resolved._environment = environment
    resolved._overridden = overridden

    logger.debug(
        "Resolved environment '%s' for worker '%s' (overridden: %s)",
        environment,
        base.name,
        ", ".join(sorted(overridden)) or "none",
    )
    return resolved


def resolve(
    base: WorkerConfig,
    overrides: dict[str, EnvironmentOverride] | None = None,
) -> dict[str, WorkerConfig]:
    """
    Resolve every named environment of a unit.

    Args:
        base: The top-level worker configuration
        overrides: Overrides to apply; defaults to ``base.env``

    Returns:
        Mapping of environment name to resolved unit, in declaration order
    """
    if overrides is None:
        overrides = base.env
    return {name: merge_environment(base, override, name) for name, override in overrides.items()}


def resolve_default(base: WorkerConfig) -> WorkerConfig:
    """Resolve the no-environment case: the base unit itself."""
    return base


def resolve_environment(base: WorkerConfig, environment: str | None) -> WorkerConfig:
    """
    Resolve a single target environment.

    A unit without any ``env`` table inherits its base configuration.

    Raises:
        UnknownEnvironmentError: If the unit declares environments but not
            ``environment``
    """
    if environment is None:
        return resolve_default(base)

    if not base.env:
        logger.debug(
            "Worker '%s' declares no environments; using its base configuration for '%s'",
            base.name,
            environment,
        )
        return resolve_default(base)

    override = base.env.get(environment)
    if override is None:
        raise UnknownEnvironmentError(environment, base.environment_names)

    return merge_environment(base, override, environment)


__all__ = [
    "MERGED_MAP_FIELDS",
    "declared_fields",
    "merge_environment",
    "resolve",
    "resolve_default",
    "resolve_environment",
]
