"""
edgeport Intermediate Representation (IR) types.

The IR is the stable layer between the parsed source configuration and the
code generator. All types are re-exported from this package.
"""

from .bindings import (
    BindingDeclaration,
    JsonBinding,
    NormalizedBinding,
    ResourceBinding,
    SecretBinding,
    TextBinding,
)
from .resources import (
    NormalizedResource,
    ResourceKey,
    ResourceType,
)
from .workers import (
    CompatibilitySpec,
    DeployableUnit,
    QueueConsumerSettings,
    QueueConsumerSpec,
    RouteSpec,
)

__all__ = [
    # Resources
    "NormalizedResource",
    "ResourceKey",
    "ResourceType",
    # Bindings
    "BindingDeclaration",
    "JsonBinding",
    "NormalizedBinding",
    "ResourceBinding",
    "SecretBinding",
    "TextBinding",
    # Workers
    "CompatibilitySpec",
    "DeployableUnit",
    "QueueConsumerSettings",
    "QueueConsumerSpec",
    "RouteSpec",
]
