"""
edgeport Migrate - worker configuration to resource program IR.

This package turns validated worker configurations into a ResolvedModel:
- keys: stable resource keys
- registry: shared, ordered resource store
- normalizer: resource declarations to registered resources
- bindings: binding declarations to normalized bindings
- validator: cross-reference checks
- pipeline: runs the stages over one or more workers

Usage:
    from edgeport.migrate import MigrationOptions, run_pipeline

    model = run_pipeline([config], MigrationOptions(stage="prod"))
"""

from .bindings import BindingResolution, is_secret_name, resolve_bindings
from .catalog import CATALOG, NON_ADOPTABLE_TYPES, CategorySpec
from .keys import make_key, normalize_local_id, parse_key
from .normalizer import NormalizationResult, normalize_resources
from .options import MigrationOptions, load_migration_options
from .pipeline import ResolvedModel, run_pipeline
from .registry import ResourceRegistry
from .validator import ValidationReport, validate_model

__all__ = [
    # Options
    "MigrationOptions",
    "load_migration_options",
    # Keys and registry
    "make_key",
    "normalize_local_id",
    "parse_key",
    "ResourceRegistry",
    # Stages
    "CATALOG",
    "CategorySpec",
    "NON_ADOPTABLE_TYPES",
    "NormalizationResult",
    "normalize_resources",
    "BindingResolution",
    "is_secret_name",
    "resolve_bindings",
    "ValidationReport",
    "validate_model",
    # Pipeline
    "ResolvedModel",
    "run_pipeline",
]
