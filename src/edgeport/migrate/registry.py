"""
Resource registry shared by every unit in one migration run.

The registry keeps exactly one NormalizedResource per key, in insertion
order. Insertion order is the canonical order for all generated output and
is never re-sorted.

Sharing policy is first-writer-wins: when a later unit declares a resource
that maps to an existing key, ``get_or_insert`` returns the registered entry
unchanged and the later declaration's properties are ignored.
"""

from __future__ import annotations

from collections.abc import Callable, Iterator, ValuesView
from typing import Any

from edgeport.core.ir import NormalizedResource, ResourceKey, ResourceType


class ResourceRegistry:
    """
    Ordered key to resource store.

    One instance per pipeline run; do not reuse across runs.

    Usage:
        registry = ResourceRegistry()
        resource = registry.get_or_insert(key, lambda: build_resource(key))
    """

    def __init__(self) -> None:
        self._entries: dict[ResourceKey, NormalizedResource] = {}
        self._variable_names: set[str] = set()

    def has(self, key: str) -> bool:
        """Check whether a key is registered."""
        return key in self._entries

    def get(self, key: str) -> NormalizedResource | None:
        """Get the resource for a key, or None."""
        return self._entries.get(ResourceKey(key))

    def get_or_insert(
        self,
        key: ResourceKey,
        factory: Callable[[], NormalizedResource],
    ) -> NormalizedResource:
        """
        Return the entry for ``key``, creating it with ``factory`` if absent.

        The factory is only called when the key is new, so an existing entry
        is returned without side effects.

        Raises:
            ValueError: If the factory builds a resource under a different key
        """
        existing = self._entries.get(key)
        if existing is not None:
            return existing

        resource = factory()
        if resource.key != key:
            raise ValueError(f"Factory for '{key}' built resource with key '{resource.key}'")

        self._entries[key] = resource
        self._variable_names.add(resource.variable_name)
        return resource

    def entries(self) -> ValuesView[NormalizedResource]:
        """
        Registered resources in insertion order.

        The returned view is lazy and can be iterated any number of times.
        """
        return self._entries.values()

    def keys(self) -> list[ResourceKey]:
        """Registered keys in insertion order."""
        return list(self._entries)

    def of_type(self, resource_type: ResourceType) -> list[NormalizedResource]:
        """Registered resources of one type, in insertion order."""
        return [r for r in self._entries.values() if r.resource_type == resource_type]

    def find(self, resource_type: ResourceType, **properties: Any) -> NormalizedResource | None:
        """Find the first resource of a type whose properties match all given values."""
        for resource in self._entries.values():
            if resource.resource_type != resource_type:
                continue
            if all(resource.properties.get(k) == v for k, v in properties.items()):
                return resource
        return None

    def is_variable_taken(self, variable_name: str) -> bool:
        """Check whether a registered resource already uses a variable name."""
        return variable_name in self._variable_names

    def get_variable_name(self, key: str) -> str | None:
        """Variable name of the resource registered under ``key``."""
        resource = self.get(key)
        return resource.variable_name if resource else None

    def __contains__(self, key: object) -> bool:
        return key in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[NormalizedResource]:
        return iter(self._entries.values())


__all__ = ["ResourceRegistry"]
