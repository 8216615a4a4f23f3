"""
Cross-reference validation of a resolved model.

Read-only checks over the registry and the resolved workers. Nothing here
raises or mutates the model; every finding is returned as a string.

Errors (generated code would be wrong):
- A binding name declared twice within one worker
- Two workers with the same id

Warnings (review before deploying):
- A resource binding whose key is not registered
- A queue consumer or dead letter queue that is not a registered queue
- Two registered resources of one type sharing a physical name
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass, field

from edgeport.core.ir import DeployableUnit, ResourceBinding, ResourceType

from .catalog import CATEGORIES_BY_TYPE
from .registry import ResourceRegistry

logger = logging.getLogger(__name__)

# Several bindings may legitimately point at the same worker
_SHAREABLE_TYPES = frozenset({ResourceType.SERVICE_REFERENCE})


@dataclass
class ValidationReport:
    """Errors and warnings from cross-reference validation."""

    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    @property
    def success(self) -> bool:
        """True if there are no errors."""
        return len(self.errors) == 0

    def add_error(self, error: str) -> None:
        """Add an error message."""
        self.errors.append(error)

    def add_warning(self, warning: str) -> None:
        """Add a warning message."""
        self.warnings.append(warning)


def validate_model(registry: ResourceRegistry, units: Iterable[DeployableUnit]) -> ValidationReport:
    """
    Check cross references across all workers.

    Args:
        registry: The run's resource registry
        units: Resolved workers, in processing order

    Returns:
        ValidationReport with errors and warnings in deterministic order
    """
    report = ValidationReport()
    units = list(units)

    _check_unit_ids(units, report)
    for unit in units:
        _check_duplicate_bindings(unit, report)
        _check_resource_bindings(unit, registry, report)
        _check_consumers(unit, registry, report)
    _check_shared_physical_names(registry, report)

    logger.debug(
        "Validated %d workers: %d errors, %d warnings",
        len(units),
        len(report.errors),
        len(report.warnings),
    )
    return report


def _check_unit_ids(units: list[DeployableUnit], report: ValidationReport) -> None:
    seen: set[str] = set()
    for unit in units:
        if unit.unit_id in seen:
            report.add_error(f"Duplicate worker '{unit.unit_id}': worker names must be unique")
        seen.add(unit.unit_id)


def _check_duplicate_bindings(unit: DeployableUnit, report: ValidationReport) -> None:
    """A binding name may appear only once per worker."""
    categories: dict[str, list[str]] = {}
    for declaration in unit.declared_bindings:
        categories.setdefault(declaration.name, []).append(declaration.category)

    for name, declared_as in categories.items():
        if len(declared_as) > 1:
            report.add_error(
                f"Duplicate binding name '{name}' in worker '{unit.unit_id}' "
                f"(declared as {', '.join(declared_as)})"
            )


def _check_resource_bindings(
    unit: DeployableUnit,
    registry: ResourceRegistry,
    report: ValidationReport,
) -> None:
    """Every resource binding must point at a registered resource."""
    reported: set[str] = set()
    for name, binding in unit.bindings.items():
        if isinstance(binding, ResourceBinding) and not registry.has(binding.key):
            reported.add(name)
            report.add_warning(
                f"Binding '{name}' in worker '{unit.unit_id}' refers to an unregistered "
                f"resource '{binding.key}'"
            )

    # Declarations the resolver had to drop
    for declaration in unit.declared_bindings:
        if declaration.key is None or registry.has(declaration.key):
            continue
        if declaration.name in reported:
            continue
        reported.add(declaration.name)
        label = CATEGORIES_BY_TYPE[ResourceType(declaration.category)].label
        report.add_warning(
            f"Binding '{declaration.name}' in worker '{unit.unit_id}' refers to an unregistered "
            f"resource '{declaration.key}'; the {label} binding was not migrated"
        )


def _check_consumers(
    unit: DeployableUnit,
    registry: ResourceRegistry,
    report: ValidationReport,
) -> None:
    """Consumed queues and dead letter queues must be registered queues."""
    for consumer in unit.consumers:
        target = registry.get(consumer.queue_key)
        if target is None or target.resource_type != ResourceType.QUEUE:
            report.add_warning(
                f"Queue consumer in worker '{unit.unit_id}' refers to an unregistered "
                f"queue '{consumer.queue_name}'"
            )

        dlq_key = consumer.settings.dead_letter_queue
        if dlq_key is None:
            continue
        dlq = registry.get(dlq_key)
        if dlq is None and consumer.dead_letter_queue_name:
            dlq = registry.find(ResourceType.QUEUE, queue_name=consumer.dead_letter_queue_name)
        if dlq is None or dlq.resource_type != ResourceType.QUEUE:
            report.add_warning(
                f"Queue consumer for '{consumer.queue_name}' in worker '{unit.unit_id}' uses "
                f"dead letter queue '{consumer.dead_letter_queue_name}', which is not a "
                "registered queue"
            )


def _check_shared_physical_names(registry: ResourceRegistry, report: ValidationReport) -> None:
    """Distinct keys resolving to one physical resource usually mean a naming mismatch."""
    owners: dict[tuple[ResourceType, str], str] = {}
    for resource in registry.entries():
        if resource.resource_type in _SHAREABLE_TYPES:
            continue
        if not CATEGORIES_BY_TYPE[resource.resource_type].adoptable:
            continue
        slot = (resource.resource_type, resource.display_name)
        first = owners.get(slot)
        if first is None:
            owners[slot] = resource.key
            continue
        report.add_warning(
            f"Resources '{first}' and '{resource.key}' share the physical name "
            f"'{resource.display_name}'"
        )


__all__ = [
    "ValidationReport",
    "validate_model",
]
