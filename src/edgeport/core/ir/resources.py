"""
Resource types for the edgeport IR.

This module contains the normalized form of every provisionable resource:
- ResourceType: The closed set of resource categories
- ResourceKey: Stable ``<resourceType>:<localId>`` identifier
- NormalizedResource: One physical resource to create or adopt
"""

from __future__ import annotations

from enum import Enum
from typing import Any, NewType

from pydantic import BaseModel, ConfigDict, Field

ResourceKey = NewType("ResourceKey", str)


class ResourceType(str, Enum):
    """Resource categories a worker can bind to."""

    NAMESPACE_STORE = "namespace-store"  # KV namespace
    OBJECT_STORE = "object-store"  # R2 bucket
    RELATIONAL_DB = "relational-db"  # D1 database
    QUEUE = "queue"
    STATEFUL_OBJECT_CLASS = "stateful-object-class"  # Durable Object namespace
    SERVICE_REFERENCE = "service-reference"  # Service binding to another worker
    ACCELERATED_DB_CONNECTOR = "accelerated-db-connector"  # Hyperdrive
    VECTOR_INDEX = "vector-index"  # Vectorize
    AI_MODEL_ENDPOINT = "ai-model-endpoint"  # Workers AI
    RENDER_SERVICE = "render-service"  # Browser rendering
    ANALYTICS_DATASET = "analytics-dataset"  # Analytics Engine
    DISPATCH_NAMESPACE = "dispatch-namespace"  # Workers for Platforms


class NormalizedResource(BaseModel):
    """
    A single resource registered during migration.

    Entries are created once, by the first unit that declares them, and are
    never modified afterwards.

    Attributes:
        key: Stable registry key
        resource_type: Resource category
        target_type: Constructor name in the generated program (e.g. ``KVNamespace``)
        generated_identifier: First constructor argument in the generated program
        display_name: Physical name of the resource
        variable_name: Symbol other generated statements refer to
        adopt_existing: Bind to an existing physical resource instead of creating one
        properties: Category-specific settings
        source_environment: Environment override that supplied the declaration
        has_preview_id: A preview resource was declared (not migrated)
    """

    key: ResourceKey
    resource_type: ResourceType
    target_type: str
    generated_identifier: str
    display_name: str
    variable_name: str
    adopt_existing: bool = False
    properties: dict[str, Any] = Field(default_factory=dict)
    source_environment: str | None = None
    has_preview_id: bool = False

    model_config = ConfigDict(frozen=True)
