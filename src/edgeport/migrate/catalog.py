"""
Resource category catalog.

One static entry per resource type describing where its declarations live
in a worker configuration, which fields name it, and whether it can be
adopted. Normalizer and binding resolver both walk categories in this order,
which fixes the declaration order of resources and bindings.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any

from edgeport.core.ir import ResourceType
from edgeport.core.schema import WorkerConfig


@dataclass(frozen=True)
class CategorySpec:
    """
    Static description of one resource category.

    Attributes:
        resource_type: Resource category
        config_field: Top-level configuration field holding the declarations
        short_name: Prefix for synthesized variable names (``kv``, ``db``, ...)
        target_type: Constructor name in the generated program
        label: Human-readable name used in diagnostics
        binding_attr: Declaration attribute holding the binding name
        name_attr: Declaration attribute holding the physical resource name
        required_attr: Declarations without this attribute are skipped
        identifier_attr: Attribute whose presence marks an existing platform resource
        adoptable: Whether the resource may be bound to an existing instance
        preview_attrs: Attributes declaring preview resources
        property_attrs: Declaration attributes copied into properties, as (attr, property)
        extract: Returns the declarations of this category for a unit
    """

    resource_type: ResourceType
    config_field: str
    short_name: str
    target_type: str
    label: str
    extract: Callable[[WorkerConfig], list[Any]]
    binding_attr: str = "binding"
    name_attr: str | None = None
    required_attr: str | None = None
    identifier_attr: str | None = None
    adoptable: bool = True
    preview_attrs: tuple[str, ...] = ()
    property_attrs: tuple[tuple[str, str], ...] = field(default_factory=tuple)

    def declarations(self, unit: WorkerConfig) -> list[Any]:
        """Declarations of this category in ``unit``, in declaration order."""
        return self.extract(unit)

    def binding_name(self, declaration: Any) -> str:
        return getattr(declaration, self.binding_attr)

    def physical_name(self, declaration: Any) -> str | None:
        if self.name_attr is None:
            return None
        return getattr(declaration, self.name_attr, None)

    def identifier(self, declaration: Any) -> str | None:
        if self.identifier_attr is None:
            return None
        return getattr(declaration, self.identifier_attr, None)

    def preserved_name(self, declaration: Any) -> str:
        """The user's original name: physical name if declared, else the binding name."""
        return self.physical_name(declaration) or self.binding_name(declaration)

    def has_preview(self, declaration: Any) -> bool:
        return any(getattr(declaration, attr, None) for attr in self.preview_attrs)

    def properties(self, declaration: Any) -> dict[str, Any]:
        """Category-specific properties, omitting undeclared values."""
        props: dict[str, Any] = {}
        for attr, prop in self.property_attrs:
            value = getattr(declaration, attr, None)
            if value is not None:
                props[prop] = value
        return props


def _list(value: list[Any] | None) -> list[Any]:
    return list(value) if value else []


def _single(value: Any | None) -> list[Any]:
    return [value] if value is not None else []


CATALOG: tuple[CategorySpec, ...] = (
    CategorySpec(
        resource_type=ResourceType.NAMESPACE_STORE,
        config_field="kv_namespaces",
        short_name="kv",
        target_type="KVNamespace",
        label="KV namespace",
        extract=lambda unit: _list(unit.kv_namespaces),
        identifier_attr="id",
        preview_attrs=("preview_id",),
        property_attrs=(("id", "namespace_id"),),
    ),
    CategorySpec(
        resource_type=ResourceType.OBJECT_STORE,
        config_field="r2_buckets",
        short_name="bucket",
        target_type="R2Bucket",
        label="R2 bucket",
        extract=lambda unit: _list(unit.r2_buckets),
        name_attr="bucket_name",
        required_attr="bucket_name",
        identifier_attr="bucket_name",
        preview_attrs=("preview_bucket_name",),
        property_attrs=(("bucket_name", "bucket_name"), ("jurisdiction", "jurisdiction")),
    ),
    CategorySpec(
        resource_type=ResourceType.RELATIONAL_DB,
        config_field="d1_databases",
        short_name="db",
        target_type="D1Database",
        label="D1 database",
        extract=lambda unit: _list(unit.d1_databases),
        name_attr="database_name",
        required_attr="database_name",
        identifier_attr="database_name",
        preview_attrs=("preview_database_id",),
        property_attrs=(
            ("database_name", "database_name"),
            ("database_id", "database_id"),
            ("migrations_dir", "migrations_dir"),
            ("migrations_table", "migrations_table"),
        ),
    ),
    CategorySpec(
        resource_type=ResourceType.QUEUE,
        config_field="queues",
        short_name="queue",
        target_type="Queue",
        label="queue producer",
        extract=lambda unit: _list(unit.queues.producers) if unit.queues else [],
        name_attr="queue",
        required_attr="queue",
        identifier_attr="queue",
        property_attrs=(("queue", "queue_name"), ("delivery_delay", "delivery_delay")),
    ),
    CategorySpec(
        resource_type=ResourceType.STATEFUL_OBJECT_CLASS,
        config_field="durable_objects",
        short_name="do",
        target_type="DurableObjectNamespace",
        label="durable object",
        extract=lambda unit: _list(unit.durable_objects.bindings) if unit.durable_objects else [],
        binding_attr="name",
        name_attr="class_name",
        required_attr="class_name",
        adoptable=False,
        property_attrs=(
            ("class_name", "class_name"),
            ("script_name", "script_name"),
            ("environment", "environment"),
        ),
    ),
    CategorySpec(
        resource_type=ResourceType.SERVICE_REFERENCE,
        config_field="services",
        short_name="service",
        target_type="ServiceBinding",
        label="service binding",
        extract=lambda unit: _list(unit.services),
        name_attr="service",
        required_attr="service",
        identifier_attr="service",
        property_attrs=(
            ("service", "service"),
            ("environment", "environment"),
            ("entrypoint", "entrypoint"),
        ),
    ),
    CategorySpec(
        resource_type=ResourceType.ACCELERATED_DB_CONNECTOR,
        config_field="hyperdrive",
        short_name="hyperdrive",
        target_type="Hyperdrive",
        label="Hyperdrive config",
        extract=lambda unit: _list(unit.hyperdrive),
        required_attr="id",
        identifier_attr="id",
        property_attrs=(("id", "hyperdrive_id"),),
    ),
    CategorySpec(
        resource_type=ResourceType.VECTOR_INDEX,
        config_field="vectorize",
        short_name="vectorize",
        target_type="VectorizeIndex",
        label="Vectorize index",
        extract=lambda unit: _list(unit.vectorize),
        name_attr="index_name",
        required_attr="index_name",
        identifier_attr="index_name",
        property_attrs=(("index_name", "index_name"),),
    ),
    CategorySpec(
        resource_type=ResourceType.AI_MODEL_ENDPOINT,
        config_field="ai",
        short_name="ai",
        target_type="Ai",
        label="AI binding",
        extract=lambda unit: _single(unit.ai),
        adoptable=False,
    ),
    CategorySpec(
        resource_type=ResourceType.RENDER_SERVICE,
        config_field="browser",
        short_name="browser",
        target_type="BrowserRendering",
        label="browser rendering binding",
        extract=lambda unit: _single(unit.browser),
        adoptable=False,
    ),
    CategorySpec(
        resource_type=ResourceType.ANALYTICS_DATASET,
        config_field="analytics_engine_datasets",
        short_name="analytics",
        target_type="AnalyticsEngineDataset",
        label="Analytics Engine dataset",
        extract=lambda unit: _list(unit.analytics_engine_datasets),
        name_attr="dataset",
        identifier_attr="dataset",
        property_attrs=(("dataset", "dataset"),),
    ),
    CategorySpec(
        resource_type=ResourceType.DISPATCH_NAMESPACE,
        config_field="dispatch_namespaces",
        short_name="dispatch",
        target_type="DispatchNamespace",
        label="dispatch namespace",
        extract=lambda unit: _list(unit.dispatch_namespaces),
        name_attr="namespace",
        required_attr="namespace",
        identifier_attr="namespace",
        property_attrs=(("namespace", "namespace"), ("outbound", "outbound")),
    ),
)

CATEGORIES_BY_TYPE: dict[ResourceType, CategorySpec] = {c.resource_type: c for c in CATALOG}

# Resource types that are never adopted, whatever the adopt option says
NON_ADOPTABLE_TYPES: frozenset[ResourceType] = frozenset(
    c.resource_type for c in CATALOG if not c.adoptable
)


def category_for(resource_type: ResourceType) -> CategorySpec:
    """Look up the catalog entry for a resource type."""
    return CATEGORIES_BY_TYPE[resource_type]


__all__ = [
    "CategorySpec",
    "CATALOG",
    "CATEGORIES_BY_TYPE",
    "NON_ADOPTABLE_TYPES",
    "category_for",
]
