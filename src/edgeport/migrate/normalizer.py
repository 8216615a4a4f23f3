"""
Resource normalizer.

Walks every resource category declared by a resolved worker configuration
and registers one NormalizedResource per declaration in the shared
registry.

Naming rules:
- Variable names use the local id unless it is a generic placeholder
  (``binding`` or the category's short name), in which case the short name
  plus the 1-based position within the category is used, the first
  position taking no suffix. ``KV`` and ``KV`` become ``kv`` and ``kv2``.
  A name already taken by another registered resource gets the next free
  numeric suffix.
- Display names keep the user's original name when ``preserve_names`` is set
  and the declaration identifies an existing platform resource; otherwise
  ``<appName>-<localId>[-<stage>]`` is synthesized.

A declaration missing a required field is skipped with a warning. The rest
of the unit is still migrated.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any

from edgeport.core.ir import NormalizedResource, ResourceKey, ResourceType
from edgeport.core.schema import WorkerConfig

from .catalog import CATALOG, CategorySpec, category_for
from .keys import local_id_of, make_key, normalize_local_id
from .options import MigrationOptions
from .registry import ResourceRegistry

logger = logging.getLogger(__name__)

GENERIC_BINDING_NAMES = frozenset({"binding"})


# =============================================================================
# Normalization Result
# =============================================================================


@dataclass
class NormalizationResult:
    """Resources used by one unit plus item-level warnings."""

    resources: list[NormalizedResource] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    def add_resource(self, resource: NormalizedResource) -> None:
        """Add a resource, ignoring repeats of the same key."""
        if all(r.key != resource.key for r in self.resources):
            self.resources.append(resource)

    def add_warning(self, warning: str) -> None:
        """Add a warning message."""
        self.warnings.append(warning)


# =============================================================================
# Naming
# =============================================================================


def synthesize_name(app_name: str, local_id: str, stage: str | None) -> str:
    """Build ``<appName>-<localId>[-<stage>]``."""
    parts = [app_name, local_id]
    if stage:
        parts.append(stage)
    return "-".join(parts)


def base_variable_name(category: CategorySpec, local_id: str, ordinal: int) -> str:
    """Variable name before registry-wide collision handling."""
    if local_id and local_id not in GENERIC_BINDING_NAMES and local_id != category.short_name:
        return local_id
    return f"{category.short_name}{ordinal if ordinal > 1 else ''}"


def unique_variable_name(candidate: str, registry: ResourceRegistry) -> str:
    """Append the next free numeric suffix if ``candidate`` is already registered."""
    if not registry.is_variable_taken(candidate):
        return candidate
    suffix = 2
    while registry.is_variable_taken(f"{candidate}{suffix}"):
        suffix += 1
    return f"{candidate}{suffix}"


def display_name_for(
    category: CategorySpec,
    declaration: Any,
    local_id: str,
    app_name: str,
    options: MigrationOptions,
) -> str:
    """Physical name for a declared resource."""
    if options.preserve_names and category.identifier(declaration):
        return category.preserved_name(declaration)
    return synthesize_name(app_name, local_id, options.stage)


# =============================================================================
# Per-Unit Keys
# =============================================================================


def skip_reason(category: CategorySpec, declaration: Any) -> str | None:
    """Why a declaration cannot be registered, or None if it can."""
    if not category.binding_name(declaration).strip():
        return "empty binding name"
    if category.required_attr and not getattr(declaration, category.required_attr, None):
        return f"missing required field '{category.required_attr}'"
    return None


class UnitKeys:
    """
    Key allocation within one unit.

    The first declaration of a key gets the plain key. Later declarations
    deriving the same key are given ``<localId>_<n>`` so that each one keeps
    its own registry entry. Normalizer and binding resolver walk the same
    declarations through this class, so both arrive at the same keys.
    """

    def __init__(self) -> None:
        self._seen: dict[ResourceKey, int] = {}

    def assign(self, resource_type: ResourceType, binding_name: str) -> tuple[ResourceKey, bool]:
        """Return the key for the next declaration and whether it was renamed."""
        local_id = normalize_local_id(binding_name)
        key = make_key(resource_type, local_id)
        if key not in self._seen:
            self._seen[key] = 1
            return key, False

        occurrence = self._seen[key] + 1
        self._seen[key] = occurrence
        candidate = make_key(resource_type, f"{local_id}_{occurrence}")
        while candidate in self._seen:
            occurrence += 1
            candidate = make_key(resource_type, f"{local_id}_{occurrence}")
        self._seen[candidate] = 1
        return candidate, True


# =============================================================================
# Normalizer
# =============================================================================


def normalize_resources(
    unit: WorkerConfig,
    registry: ResourceRegistry,
    options: MigrationOptions,
) -> NormalizationResult:
    """
    Register every resource declared by ``unit``.

    Args:
        unit: A resolved worker configuration
        registry: Registry shared by all units in this run
        options: Migration options; ``app_name`` defaults to the unit name

    Returns:
        NormalizationResult listing the unit's resources in declaration order,
        including entries first registered by earlier units
    """
    result = NormalizationResult()
    app_name = options.app_name or unit.name
    unit_keys = UnitKeys()

    for category in CATALOG:
        ordinal = 0
        for declaration in category.declarations(unit):
            if skip_reason(category, declaration) is None:
                ordinal += 1
            resource = _normalize_declaration(
                category, declaration, ordinal, unit, registry, options, app_name, unit_keys, result
            )
            if resource is not None:
                result.add_resource(resource)

    _normalize_consumed_queues(unit, registry, options, app_name, result)

    for warning in collect_unsupported_warnings(unit):
        result.add_warning(warning)

    logger.debug(
        "Normalized worker '%s': %d resources, %d warnings",
        unit.name,
        len(result.resources),
        len(result.warnings),
    )
    return result


def _normalize_declaration(
    category: CategorySpec,
    declaration: Any,
    ordinal: int,
    unit: WorkerConfig,
    registry: ResourceRegistry,
    options: MigrationOptions,
    app_name: str,
    unit_keys: UnitKeys,
    result: NormalizationResult,
) -> NormalizedResource | None:
    """Register one declaration, or return None if it has to be skipped."""
    binding_name = category.binding_name(declaration)
    local_id = normalize_local_id(binding_name)

    reason = skip_reason(category, declaration)
    if reason is not None:
        label = f"{category.label} '{binding_name}'" if binding_name.strip() else category.label
        result.add_warning(f"Skipped {label} in worker '{unit.name}': {reason}")
        logger.debug("Skipping %s in worker '%s': %s", label, unit.name, reason)
        return None

    key, renamed = unit_keys.assign(category.resource_type, binding_name)
    if renamed:
        result.add_warning(
            f"Duplicate {category.label} binding '{binding_name}' in worker '{unit.name}' "
            f"registered as '{key}'"
        )

    def factory() -> NormalizedResource:
        return NormalizedResource(
            key=key,
            resource_type=category.resource_type,
            target_type=category.target_type,
            generated_identifier=local_id_of(key),
            display_name=display_name_for(
                category, declaration, local_id_of(key), app_name, options
            ),
            variable_name=unique_variable_name(
                base_variable_name(category, local_id, ordinal), registry
            ),
            adopt_existing=options.adopt and category.adoptable,
            properties=category.properties(declaration),
            source_environment=_source_environment(unit, category.config_field),
            has_preview_id=category.has_preview(declaration),
        )

    return registry.get_or_insert(key, factory)


def _source_environment(unit: WorkerConfig, config_field: str) -> str | None:
    """Environment name if the category was supplied by the environment override."""
    if config_field in unit.overridden_fields:
        return unit.environment_name
    return None


# =============================================================================
# Queue Consumers
# =============================================================================


def resolve_queue_key(registry: ResourceRegistry, queue_name: str) -> ResourceKey:
    """
    Key of the registered queue with physical name ``queue_name``.

    Falls back to the first free key derived from the queue name itself,
    which is where a consumed queue without any producer is registered.
    """
    registered = registry.find(ResourceType.QUEUE, queue_name=queue_name)
    if registered is not None:
        return registered.key

    candidate = make_key(ResourceType.QUEUE, queue_name)
    suffix = 2
    while registry.has(candidate):
        candidate = make_key(ResourceType.QUEUE, f"{queue_name}_{suffix}")
        suffix += 1
    return candidate


def _normalize_consumed_queues(
    unit: WorkerConfig,
    registry: ResourceRegistry,
    options: MigrationOptions,
    app_name: str,
    result: NormalizationResult,
) -> None:
    """Register queues that the unit consumes but nobody produces to."""
    if not unit.queues or not unit.queues.consumers:
        return

    category = category_for(ResourceType.QUEUE)
    for consumer in unit.queues.consumers:
        queue_name = consumer.queue.strip()
        if not queue_name:
            result.add_warning(f"Skipped queue consumer in worker '{unit.name}': empty queue name")
            continue

        key = resolve_queue_key(registry, queue_name)
        local_id = local_id_of(key)

        def factory() -> NormalizedResource:
            display_name = (
                queue_name
                if options.preserve_names
                else synthesize_name(app_name, local_id, options.stage)
            )
            return NormalizedResource(
                key=key,
                resource_type=ResourceType.QUEUE,
                target_type=category.target_type,
                generated_identifier=local_id,
                display_name=display_name,
                variable_name=unique_variable_name(
                    base_variable_name(category, local_id, 1), registry
                ),
                adopt_existing=options.adopt,
                properties={"queue_name": queue_name},
                source_environment=_source_environment(unit, category.config_field),
            )

        result.add_resource(registry.get_or_insert(key, factory))


# =============================================================================
# Unsupported Constructs
# =============================================================================


def collect_unsupported_warnings(unit: WorkerConfig) -> list[str]:
    """Warnings for source settings that cannot be migrated automatically."""
    name = unit.name
    warnings: list[str] = []

    if unit.unsafe:
        warnings.append(f"Worker '{name}': unsafe bindings may require manual migration")
    if unit.site:
        warnings.append(
            f"Worker '{name}': static site configuration should use an Assets resource"
        )
    if unit.tail_consumers:
        warnings.append(f"Worker '{name}': tail consumers require manual configuration")
    for blob_field in ("text_blobs", "data_blobs", "wasm_modules"):
        if getattr(unit, blob_field):
            warnings.append(
                f"Worker '{name}': '{blob_field}' module bindings require manual migration"
            )
    if unit.durable_objects and unit.durable_objects.migrations:
        warnings.append(
            f"Worker '{name}': durable object migrations are not converted; "
            "review class migrations manually"
        )
    if any(c.has_preview(d) for c in CATALOG for d in c.declarations(unit)):
        warnings.append(f"Worker '{name}': preview resources are not migrated")
    if unit.dev:
        warnings.append(f"Worker '{name}': [dev] settings are ignored")

    return warnings


__all__ = [
    "GENERIC_BINDING_NAMES",
    "NormalizationResult",
    "synthesize_name",
    "base_variable_name",
    "unique_variable_name",
    "display_name_for",
    "skip_reason",
    "UnitKeys",
    "normalize_resources",
    "resolve_queue_key",
    "collect_unsupported_warnings",
]
