"""
Binding resolver.

Turns a worker's declared bindings into normalized bindings:
- Resource declarations become ResourceBinding entries pointing at the
  registry key the normalizer used. Declarations whose key is not registered
  are left out; the cross-reference validator reports them.
- Plain variables become SecretBinding, TextBinding or JsonBinding.

Secret detection looks at the variable *name* only. It matches any of
``api[_-]?key``, ``secret``, ``password``, ``token``, ``private[_-]?key``,
``auth`` and ``credential`` case-insensitively as substrings, so names such
as ``AUTHOR`` or ``TOKENIZER_CONFIG`` are classified as secrets too.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field

from edgeport.core.ir import (
    BindingDeclaration,
    DeployableUnit,
    JsonBinding,
    NormalizedBinding,
    QueueConsumerSettings,
    QueueConsumerSpec,
    ResourceBinding,
    ResourceKey,
    SecretBinding,
    TextBinding,
)
from edgeport.core.schema import VarValue, WorkerConfig

from .catalog import CATALOG
from .normalizer import UnitKeys, resolve_queue_key, skip_reason
from .registry import ResourceRegistry

logger = logging.getLogger(__name__)

VAR_CATEGORY = "var"

SECRET_PATTERNS: tuple[re.Pattern[str], ...] = tuple(
    re.compile(pattern, re.IGNORECASE)
    for pattern in (
        r"api[_-]?key",
        r"secret",
        r"password",
        r"token",
        r"private[_-]?key",
        r"auth",
        r"credential",
    )
)


def is_secret_name(name: str) -> bool:
    """Heuristic: does a variable name look like it holds a secret?"""
    return any(pattern.search(name) for pattern in SECRET_PATTERNS)


def classify_variable(name: str, value: VarValue) -> NormalizedBinding:
    """Classify one plain variable by name, then by value type."""
    if is_secret_name(name):
        return SecretBinding(env_var_name=name)
    if isinstance(value, str):
        return TextBinding(value=value)
    return JsonBinding(value=value)


# =============================================================================
# Binding Resolution
# =============================================================================


@dataclass
class BindingResolution:
    """
    Bindings of one worker.

    Attributes:
        bindings: Binding name to binding, first declaration wins
        secret_names: Variables classified as secrets, in declaration order
        declarations: Every binding declaration, duplicates included
        resource_keys: Registry keys bound by the worker, in declaration order
        consumers: Queue consumers with resolved queue keys
    """

    bindings: dict[str, NormalizedBinding] = field(default_factory=dict)
    secret_names: list[str] = field(default_factory=list)
    declarations: list[BindingDeclaration] = field(default_factory=list)
    resource_keys: list[ResourceKey] = field(default_factory=list)
    consumers: list[QueueConsumerSpec] = field(default_factory=list)

    @property
    def secret_name_set(self) -> frozenset[str]:
        return frozenset(self.secret_names)


def resolve_bindings(unit: WorkerConfig, registry: ResourceRegistry) -> BindingResolution:
    """
    Resolve every binding declared by ``unit`` against the registry.

    Never raises for missing resources; unresolved resource bindings are
    omitted from ``bindings`` but remain in ``declarations``.
    """
    resolution = BindingResolution()
    unit_keys = UnitKeys()

    for category in CATALOG:
        for declaration in category.declarations(unit):
            name = category.binding_name(declaration)
            key = None
            if skip_reason(category, declaration) is None:
                key, _ = unit_keys.assign(category.resource_type, name)
            resolution.declarations.append(
                BindingDeclaration(name=name, category=category.resource_type.value, key=key)
            )
            if key is None or name in resolution.bindings:
                continue

            if not registry.has(key):
                logger.debug("Binding '%s' in worker '%s' has no registered resource", name, unit.name)
                continue

            resolution.bindings[name] = ResourceBinding(key=key)
            if key not in resolution.resource_keys:
                resolution.resource_keys.append(key)

    for name, value in (unit.vars or {}).items():
        resolution.declarations.append(BindingDeclaration(name=name, category=VAR_CATEGORY))
        if name in resolution.bindings:
            continue

        binding = classify_variable(name, value)
        resolution.bindings[name] = binding
        if isinstance(binding, SecretBinding):
            resolution.secret_names.append(name)

    resolution.consumers = resolve_consumers(unit, registry)
    for consumer in resolution.consumers:
        if consumer.queue_key not in resolution.resource_keys:
            resolution.resource_keys.append(consumer.queue_key)

    return resolution


def resolve_consumers(unit: WorkerConfig, registry: ResourceRegistry) -> list[QueueConsumerSpec]:
    """Resolve queue consumer targets and dead letter queues to registry keys."""
    if not unit.queues or not unit.queues.consumers:
        return []

    consumers = []
    for consumer in unit.queues.consumers:
        queue_name = consumer.queue.strip()
        if not queue_name:
            continue

        dlq_name = consumer.dead_letter_queue
        settings = QueueConsumerSettings(
            batch_size=consumer.max_batch_size,
            max_wait_time_ms=(
                consumer.max_batch_timeout * 1000 if consumer.max_batch_timeout is not None else None
            ),
            max_retries=consumer.max_retries,
            max_concurrency=consumer.max_concurrency,
            retry_delay=consumer.retry_delay,
            dead_letter_queue=resolve_queue_key(registry, dlq_name) if dlq_name else None,
        )
        consumers.append(
            QueueConsumerSpec(
                queue_key=resolve_queue_key(registry, queue_name),
                queue_name=queue_name,
                settings=settings,
                dead_letter_queue_name=dlq_name,
            )
        )
    return consumers


def relink_dead_letter_queues(unit: DeployableUnit, registry: ResourceRegistry) -> DeployableUnit:
    """
    Re-resolve dead letter queue keys against the final registry.

    A dead letter queue produced by a later worker is registered under that
    worker's binding name, not under the key guessed while this worker was
    resolved.
    """
    consumers = []
    for consumer in unit.consumers:
        if consumer.dead_letter_queue_name:
            key = resolve_queue_key(registry, consumer.dead_letter_queue_name)
            if key != consumer.settings.dead_letter_queue:
                settings = consumer.settings.model_copy(update={"dead_letter_queue": key})
                consumer = consumer.model_copy(update={"settings": settings})
        consumers.append(consumer)
    return unit.model_copy(update={"consumers": consumers})


__all__ = [
    "VAR_CATEGORY",
    "SECRET_PATTERNS",
    "is_secret_name",
    "classify_variable",
    "BindingResolution",
    "resolve_bindings",
    "resolve_consumers",
    "relink_dead_letter_queues",
]
