"""
edgeport - migrate worker configuration files to resource programs.

Reads wrangler-style worker configurations and resolves them into a
registry of resources and workers that a code generator can render as an
infrastructure-as-code program.
"""

from __future__ import annotations

from ._version import get_version
from .core.errors import ConfigError, EdgeportError, UnknownEnvironmentError

__version__ = get_version()

__all__ = [
    "__version__",
    "EdgeportError",
    "ConfigError",
    "UnknownEnvironmentError",
]
