"""
Binding types for the edgeport IR.

A binding is the name under which a worker sees a resource or value at
runtime. Every binding is exactly one of:
- ResourceBinding: points at a registered resource key
- SecretBinding: value supplied out-of-band at deploy time
- TextBinding: inline string value
- JsonBinding: inline number, boolean or structured value
"""

from __future__ import annotations

from typing import Annotated, Any, Literal

from pydantic import BaseModel, ConfigDict, Field

from .resources import ResourceKey


class ResourceBinding(BaseModel):
    """Binding to a registered resource."""

    kind: Literal["resource"] = "resource"
    key: ResourceKey

    model_config = ConfigDict(frozen=True)


class SecretBinding(BaseModel):
    """Binding whose value is read from an environment variable at deploy time."""

    kind: Literal["secret"] = "secret"
    env_var_name: str

    model_config = ConfigDict(frozen=True)


class TextBinding(BaseModel):
    """Plain text variable."""

    kind: Literal["text"] = "text"
    value: str

    model_config = ConfigDict(frozen=True)


class JsonBinding(BaseModel):
    """Non-string variable (number, boolean, table or array)."""

    kind: Literal["json"] = "json"
    value: Any

    model_config = ConfigDict(frozen=True)


NormalizedBinding = Annotated[
    ResourceBinding | SecretBinding | TextBinding | JsonBinding,
    Field(discriminator="kind"),
]


class BindingDeclaration(BaseModel):
    """
    One binding name as declared in the source configuration.

    Kept separately from the binding map so that duplicate declarations
    remain visible to validation.

    Attributes:
        name: Binding name as written by the user
        category: Resource type value, or ``"var"`` for plain variables
        key: Registry key derived for a resource declaration; None for
            variables and for declarations skipped during normalization
    """

    name: str
    category: str
    key: ResourceKey | None = None

    model_config = ConfigDict(frozen=True)
