"""
Source configuration models for worker configuration files.

These models describe the shape of a ``wrangler.toml`` / ``wrangler.json``
file after parsing. Validation here is structural only: field types and
required top-level fields. Cross references and naming are checked later by
the migration pipeline.

Physical resource names (``bucket_name``, ``database_name``, ...) are typed
optional on purpose so that a single incomplete declaration reaches the
resource normalizer, which skips it with a warning instead of rejecting the
whole file.
"""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, PrivateAttr

VarValue = bool | int | float | str | dict[str, Any] | list[Any]


# =============================================================================
# Resource Declarations
# =============================================================================


class KVNamespaceDecl(BaseModel):
    """A ``[[kv_namespaces]]`` entry."""

    binding: str
    id: str | None = None
    preview_id: str | None = None

    model_config = ConfigDict(extra="allow")


class R2BucketDecl(BaseModel):
    """A ``[[r2_buckets]]`` entry."""

    binding: str
    bucket_name: str | None = None
    preview_bucket_name: str | None = None
    jurisdiction: Literal["eu", "fedramp"] | None = None

    model_config = ConfigDict(extra="allow")


class D1DatabaseDecl(BaseModel):
    """A ``[[d1_databases]]`` entry."""

    binding: str
    database_name: str | None = None
    database_id: str | None = None
    preview_database_id: str | None = None
    migrations_dir: str | None = None
    migrations_table: str | None = None

    model_config = ConfigDict(extra="allow")


class DurableObjectBindingDecl(BaseModel):
    """A ``[[durable_objects.bindings]]`` entry."""

    name: str
    class_name: str | None = None
    script_name: str | None = None
    environment: str | None = None

    model_config = ConfigDict(extra="allow")


class RenamedClassDecl(BaseModel):
    """A renamed durable object class inside a migration."""

    from_: str = Field(alias="from")
    to: str


class DurableObjectMigrationDecl(BaseModel):
    """A ``[[migrations]]`` entry for durable object classes."""

    tag: str
    new_classes: list[str] | None = None
    new_sqlite_classes: list[str] | None = None
    renamed_classes: list[RenamedClassDecl] | None = None
    deleted_classes: list[str] | None = None


class DurableObjectsDecl(BaseModel):
    """The ``[durable_objects]`` table."""

    bindings: list[DurableObjectBindingDecl] | None = None
    migrations: list[DurableObjectMigrationDecl] | None = None


class QueueProducerDecl(BaseModel):
    """A ``[[queues.producers]]`` entry."""

    binding: str
    queue: str | None = None
    delivery_delay: int | None = None

    model_config = ConfigDict(extra="allow")


class QueueConsumerDecl(BaseModel):
    """A ``[[queues.consumers]]`` entry."""

    queue: str
    max_batch_size: int | None = None
    max_batch_timeout: float | None = None
    max_retries: int | None = None
    dead_letter_queue: str | None = None
    max_concurrency: int | None = None
    retry_delay: int | None = None

    model_config = ConfigDict(extra="allow")


class QueuesDecl(BaseModel):
    """The ``[queues]`` table."""

    producers: list[QueueProducerDecl] | None = None
    consumers: list[QueueConsumerDecl] | None = None


class ServiceBindingDecl(BaseModel):
    """A ``[[services]]`` entry."""

    binding: str
    service: str | None = None
    environment: str | None = None
    entrypoint: str | None = None

    model_config = ConfigDict(extra="allow")


class AnalyticsDatasetDecl(BaseModel):
    """An ``[[analytics_engine_datasets]]`` entry."""

    binding: str
    dataset: str | None = None

    model_config = ConfigDict(extra="allow")


class VectorizeDecl(BaseModel):
    """A ``[[vectorize]]`` entry."""

    binding: str
    index_name: str | None = None

    model_config = ConfigDict(extra="allow")


class HyperdriveDecl(BaseModel):
    """A ``[[hyperdrive]]`` entry."""

    binding: str
    id: str | None = None
    localConnectionString: str | None = None

    model_config = ConfigDict(extra="allow")


class AIBindingDecl(BaseModel):
    """The ``[ai]`` table."""

    binding: str

    model_config = ConfigDict(extra="allow")


class BrowserBindingDecl(BaseModel):
    """The ``[browser]`` table."""

    binding: str

    model_config = ConfigDict(extra="allow")


class DispatchNamespaceDecl(BaseModel):
    """A ``[[dispatch_namespaces]]`` entry."""

    binding: str
    namespace: str | None = None
    outbound: dict[str, Any] | None = None

    model_config = ConfigDict(extra="allow")


# =============================================================================
# Worker Settings
# =============================================================================


class RouteDecl(BaseModel):
    """A route given as a table rather than a bare pattern."""

    pattern: str
    zone_id: str | None = None
    zone_name: str | None = None
    custom_domain: bool | None = None


class TriggersDecl(BaseModel):
    """The ``[triggers]`` table."""

    crons: list[str] | None = None


class ObservabilityDecl(BaseModel):
    """The ``[observability]`` table."""

    enabled: bool | None = None
    head_sampling_rate: float | None = None


class PlacementDecl(BaseModel):
    """The ``[placement]`` table."""

    mode: Literal["smart", "off"] | None = None


class TailConsumerDecl(BaseModel):
    """A ``[[tail_consumers]]`` entry."""

    service: str
    environment: str | None = None


class UnsafeBindingDecl(BaseModel):
    """An ``[[unsafe.bindings]]`` entry."""

    name: str
    type: str

    model_config = ConfigDict(extra="allow")


class UnsafeDecl(BaseModel):
    """The ``[unsafe]`` table."""

    bindings: list[UnsafeBindingDecl] | None = None
    metadata: dict[str, Any] | None = None


class SiteDecl(BaseModel):
    """The legacy ``[site]`` table (Workers Sites)."""

    bucket: str
    include: list[str] | None = None
    exclude: list[str] | None = None


# =============================================================================
# Configuration Units
# =============================================================================


class UnitFields(BaseModel):
    """
    Fields shared by a worker configuration and its environment overrides.

    Every field defaults to ``None`` so that "not declared" is always
    distinguishable from "declared empty".
    """

    name: str | None = None
    main: str | None = None
    compatibility_date: str | None = None
    compatibility_flags: list[str] | None = None
    workers_dev: bool | None = None
    account_id: str | None = None
    usage_model: Literal["bundled", "unbound"] | None = None

    # Resource bindings
    kv_namespaces: list[KVNamespaceDecl] | None = None
    r2_buckets: list[R2BucketDecl] | None = None
    d1_databases: list[D1DatabaseDecl] | None = None
    durable_objects: DurableObjectsDecl | None = None
    queues: QueuesDecl | None = None
    services: list[ServiceBindingDecl] | None = None
    analytics_engine_datasets: list[AnalyticsDatasetDecl] | None = None
    vectorize: list[VectorizeDecl] | None = None
    hyperdrive: list[HyperdriveDecl] | None = None
    ai: AIBindingDecl | None = None
    browser: BrowserBindingDecl | None = None
    dispatch_namespaces: list[DispatchNamespaceDecl] | None = None

    # Values
    vars: dict[str, VarValue] | None = None
    text_blobs: dict[str, str] | None = None
    data_blobs: dict[str, str] | None = None
    wasm_modules: dict[str, str] | None = None
    unsafe: UnsafeDecl | None = None

    # Routing and triggers
    routes: list[str | RouteDecl] | None = None
    route: str | None = None
    triggers: TriggersDecl | None = None

    # Runtime settings
    observability: ObservabilityDecl | None = None
    placement: PlacementDecl | None = None
    logpush: bool | None = None
    tail_consumers: list[TailConsumerDecl] | None = None
    limits: dict[str, Any] | None = None

    # Static assets and local development
    site: SiteDecl | None = None
    assets: dict[str, Any] | None = None
    dev: dict[str, Any] | None = None

    model_config = ConfigDict(extra="allow")


class EnvironmentOverride(UnitFields):
    """A partial configuration under ``[env.<name>]``."""

    pass


class WorkerConfig(UnitFields):
    """
    One worker configuration file.

    ``name`` is required: a unit without a name cannot be given a safe
    identity. ``env`` holds the named environment overrides.
    """

    name: str
    env: dict[str, EnvironmentOverride] = Field(default_factory=dict)

    _environment: str | None = PrivateAttr(default=None)
    _overridden: frozenset[str] = PrivateAttr(default_factory=frozenset)

    @property
    def environment_name(self) -> str | None:
        """Name of the environment this unit was resolved for, if any."""
        return self._environment

    @property
    def overridden_fields(self) -> frozenset[str]:
        """Fields whose value came from the environment override."""
        return self._overridden

    @property
    def environment_names(self) -> list[str]:
        """Declared environment names in declaration order."""
        return list(self.env)


__all__ = [
    "VarValue",
    "KVNamespaceDecl",
    "R2BucketDecl",
    "D1DatabaseDecl",
    "DurableObjectBindingDecl",
    "DurableObjectMigrationDecl",
    "DurableObjectsDecl",
    "QueueProducerDecl",
    "QueueConsumerDecl",
    "QueuesDecl",
    "ServiceBindingDecl",
    "AnalyticsDatasetDecl",
    "VectorizeDecl",
    "HyperdriveDecl",
    "AIBindingDecl",
    "BrowserBindingDecl",
    "DispatchNamespaceDecl",
    "RouteDecl",
    "TriggersDecl",
    "ObservabilityDecl",
    "PlacementDecl",
    "TailConsumerDecl",
    "UnsafeDecl",
    "SiteDecl",
    "UnitFields",
    "EnvironmentOverride",
    "WorkerConfig",
]
