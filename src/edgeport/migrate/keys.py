"""
Resource key scheme.

Every registered resource is identified by ``<prefix>:<localId>``. The
prefix comes from a fixed table, one entry per resource type, and the local
id is the binding name lowercased with every character outside
``[a-z0-9_]`` replaced by ``_``.

Both the resource normalizer and the binding resolver derive keys through
``make_key``; neither sanitizes names on its own.
"""

from __future__ import annotations

import re

from edgeport.core.ir import ResourceKey, ResourceType

KEY_SEPARATOR = ":"

KEY_PREFIXES: dict[ResourceType, str] = {
    ResourceType.NAMESPACE_STORE: "namespace-store",
    ResourceType.OBJECT_STORE: "object-store",
    ResourceType.RELATIONAL_DB: "relational-db",
    ResourceType.QUEUE: "queue",
    ResourceType.STATEFUL_OBJECT_CLASS: "stateful-object-class",
    ResourceType.SERVICE_REFERENCE: "service-reference",
    ResourceType.ACCELERATED_DB_CONNECTOR: "accelerated-db-connector",
    ResourceType.VECTOR_INDEX: "vector-index",
    ResourceType.AI_MODEL_ENDPOINT: "ai-model-endpoint",
    ResourceType.RENDER_SERVICE: "render-service",
    ResourceType.ANALYTICS_DATASET: "analytics-dataset",
    ResourceType.DISPATCH_NAMESPACE: "dispatch-namespace",
}

_TYPES_BY_PREFIX: dict[str, ResourceType] = {
    prefix: resource_type for resource_type, prefix in KEY_PREFIXES.items()
}

_INVALID_LOCAL_CHARS = re.compile(r"[^a-z0-9_]")


def normalize_local_id(raw_local_name: str) -> str:
    """Lowercase a name and replace every character outside ``[a-z0-9_]`` with ``_``."""
    return _INVALID_LOCAL_CHARS.sub("_", raw_local_name.lower())


def make_key(resource_type: ResourceType, raw_local_name: str) -> ResourceKey:
    """
    Build the registry key for a resource.

    Pure and idempotent: equal inputs always give equal keys. An empty local
    name is accepted here; rejecting it is the normalizer's job.

    Examples:
        >>> make_key(ResourceType.NAMESPACE_STORE, "My-Cache")
        'namespace-store:my_cache'
    """
    prefix = KEY_PREFIXES[resource_type]
    return ResourceKey(f"{prefix}{KEY_SEPARATOR}{normalize_local_id(raw_local_name)}")


def parse_key(key: str) -> tuple[ResourceType, str]:
    """
    Split a key into its resource type and local id.

    Local ids never contain the separator, so splitting on the first one is
    unambiguous.

    Raises:
        ValueError: If the key has no separator or an unknown prefix
    """
    prefix, separator, local_id = key.partition(KEY_SEPARATOR)
    if not separator:
        raise ValueError(f"Malformed resource key '{key}': missing '{KEY_SEPARATOR}'")
    resource_type = _TYPES_BY_PREFIX.get(prefix)
    if resource_type is None:
        raise ValueError(f"Malformed resource key '{key}': unknown prefix '{prefix}'")
    return resource_type, local_id


def local_id_of(key: str) -> str:
    """Return the local id part of a key."""
    return parse_key(key)[1]


__all__ = [
    "KEY_SEPARATOR",
    "KEY_PREFIXES",
    "normalize_local_id",
    "make_key",
    "parse_key",
    "local_id_of",
]
