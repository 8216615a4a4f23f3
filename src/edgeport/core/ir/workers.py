"""
Worker types for the edgeport IR.

This module contains the resolved form of a deployable unit and its
routing, trigger and queue-consumer settings.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from .bindings import BindingDeclaration, NormalizedBinding
from .resources import ResourceKey


class RouteSpec(BaseModel):
    """A route pattern with optional zone information."""

    pattern: str
    zone_id: str | None = None
    zone_name: str | None = None
    custom_domain: bool = False

    model_config = ConfigDict(frozen=True)


class QueueConsumerSettings(BaseModel):
    """
    Batching and retry settings for a queue consumer.

    ``max_concurrency`` must survive migration; dropping it silently changes
    consumer scaling.
    """

    batch_size: int | None = None
    max_wait_time_ms: float | None = None
    max_retries: int | None = None
    max_concurrency: int | None = None
    retry_delay: int | None = None
    dead_letter_queue: ResourceKey | None = None

    model_config = ConfigDict(frozen=True)


class QueueConsumerSpec(BaseModel):
    """A worker consuming messages from a queue."""

    queue_key: ResourceKey
    queue_name: str
    settings: QueueConsumerSettings = Field(default_factory=QueueConsumerSettings)
    dead_letter_queue_name: str | None = None

    model_config = ConfigDict(frozen=True)


class CompatibilitySpec(BaseModel):
    """Runtime compatibility date and flags, passed through unchanged."""

    date: str | None = None
    flags: list[str] = Field(default_factory=list)

    model_config = ConfigDict(frozen=True)


class DeployableUnit(BaseModel):
    """
    A fully resolved worker.

    Attributes:
        unit_id: Worker name from the source configuration
        display_name: Script name in the generated program
        variable_name: Symbol for the worker in the generated program
        entrypoint: Path to the worker entry module
        compatibility: Compatibility date and flags
        bindings: Binding name to binding, in declaration order
        secret_names: Variables classified as secrets, in declaration order
        declared_bindings: Every binding declaration, duplicates included
        resource_keys: Registry keys this worker uses, in declaration order
        routes: Route patterns
        crons: Scheduled trigger expressions
        consumers: Queue consumer settings
        custom_domains: Patterns of routes declared as custom domains
        source_environment: Environment the unit was resolved for
    """

    unit_id: str
    display_name: str
    variable_name: str
    entrypoint: str
    compatibility: CompatibilitySpec = Field(default_factory=CompatibilitySpec)
    bindings: dict[str, NormalizedBinding] = Field(default_factory=dict)
    secret_names: list[str] = Field(default_factory=list)
    declared_bindings: list[BindingDeclaration] = Field(default_factory=list)
    resource_keys: list[ResourceKey] = Field(default_factory=list)
    routes: list[RouteSpec] = Field(default_factory=list)
    crons: list[str] = Field(default_factory=list)
    consumers: list[QueueConsumerSpec] = Field(default_factory=list)
    custom_domains: list[str] = Field(default_factory=list)
    observability: dict[str, Any] | None = None
    placement: str | None = None
    usage_model: str | None = None
    logpush: bool | None = None
    source_environment: str | None = None

    model_config = ConfigDict(frozen=True)
