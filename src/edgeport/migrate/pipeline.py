"""
Migration pipeline.

Runs the migration stages over one or more worker configurations:

    resolve environment -> normalize resources -> resolve bindings   (per worker)
    -> cross-reference validation -> ResolvedModel

Workers are processed strictly in the order given. The registry is shared by
all workers of one run, so the first worker to declare a resource decides
its stored properties and later workers reuse that entry unchanged.

Only structural problems raise (for example an unknown target
environment). Everything else ends up as a warning or error string on the
returned model so that a reviewable result is always produced.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Any

from edgeport.core.environment import resolve_environment
from edgeport.core.ir import (
    CompatibilitySpec,
    DeployableUnit,
    NormalizedResource,
    RouteSpec,
)
from edgeport.core.schema import RouteDecl, WorkerConfig

from .bindings import BindingResolution, relink_dead_letter_queues, resolve_bindings
from .keys import normalize_local_id
from .normalizer import normalize_resources
from .options import MigrationOptions
from .registry import ResourceRegistry
from .validator import validate_model

logger = logging.getLogger(__name__)

DEFAULT_ENTRYPOINT = "src/index.js"


# =============================================================================
# Resolved Model
# =============================================================================


@dataclass
class ResolvedModel:
    """
    Output of one pipeline run, ready for code generation.

    Attributes:
        app_name: Application name used for synthesized names
        stage: Stage suffix, if any
        registry: Every resource, in registration order
        units: Resolved workers, in input order
        warnings: Advisory findings
        errors: Findings that should block code generation
    """

    app_name: str
    stage: str | None
    registry: ResourceRegistry
    units: list[DeployableUnit] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)

    @property
    def success(self) -> bool:
        """True if there are no errors."""
        return len(self.errors) == 0

    @property
    def resources(self) -> list[NormalizedResource]:
        """Registered resources in canonical order."""
        return list(self.registry.entries())

    @property
    def secret_names(self) -> list[str]:
        """Secret variable names across all workers, first occurrence order."""
        names: list[str] = []
        for unit in self.units:
            for name in unit.secret_names:
                if name not in names:
                    names.append(name)
        return names

    def get_unit(self, unit_id: str) -> DeployableUnit | None:
        """Find a worker by id."""
        for unit in self.units:
            if unit.unit_id == unit_id:
                return unit
        return None

    def summary(self) -> dict[str, Any]:
        """Get a summary of the resolved model."""
        by_type: dict[str, int] = {}
        for resource in self.registry.entries():
            by_type[resource.resource_type.value] = by_type.get(resource.resource_type.value, 0) + 1
        return {
            "success": self.success,
            "workers": len(self.units),
            "resources": len(self.registry),
            "resources_by_type": by_type,
            "secrets": len(self.secret_names),
            "errors": len(self.errors),
            "warnings": len(self.warnings),
        }

    def to_dict(self) -> dict[str, Any]:
        """JSON-ready representation in canonical order."""
        return {
            "app_name": self.app_name,
            "stage": self.stage,
            "resources": [r.model_dump(mode="json") for r in self.registry.entries()],
            "workers": [u.model_dump(mode="json") for u in self.units],
            "secrets": self.secret_names,
            "warnings": list(self.warnings),
            "errors": list(self.errors),
        }


# =============================================================================
# Worker Assembly
# =============================================================================


def unit_display_name(unit: WorkerConfig, app_name: str, options: MigrationOptions) -> str:
    """Script name for a worker: the original name, or ``<app>[-<unit>][-<stage>]``."""
    if options.preserve_names:
        return unit.name

    parts = [app_name]
    slug = _slug(unit.name)
    if slug and slug != _slug(app_name):
        parts.append(slug)
    if options.stage:
        parts.append(options.stage)
    return "-".join(parts)


def _slug(name: str) -> str:
    return "-".join(part for part in normalize_local_id(name).split("_") if part)


def transform_routes(unit: WorkerConfig) -> list[RouteSpec]:
    """Normalize ``routes`` entries and the legacy ``route`` string."""
    routes: list[RouteSpec] = []
    for route in unit.routes or []:
        if isinstance(route, RouteDecl):
            routes.append(
                RouteSpec(
                    pattern=route.pattern,
                    zone_id=route.zone_id,
                    zone_name=route.zone_name,
                    custom_domain=bool(route.custom_domain),
                )
            )
        else:
            routes.append(RouteSpec(pattern=route))
    if unit.route:
        routes.append(RouteSpec(pattern=unit.route))
    return routes


def build_deployable_unit(
    unit: WorkerConfig,
    resolution: BindingResolution,
    app_name: str,
    options: MigrationOptions,
) -> DeployableUnit:
    """Assemble the resolved worker from its configuration and bindings."""
    routes = transform_routes(unit)
    observability = (
        unit.observability.model_dump(exclude_none=True) if unit.observability else None
    )
    return DeployableUnit(
        unit_id=unit.name,
        display_name=unit_display_name(unit, app_name, options),
        variable_name=normalize_local_id(unit.name),
        entrypoint=unit.main or DEFAULT_ENTRYPOINT,
        compatibility=CompatibilitySpec(
            date=unit.compatibility_date,
            flags=list(unit.compatibility_flags or []),
        ),
        bindings=dict(resolution.bindings),
        secret_names=list(resolution.secret_names),
        declared_bindings=list(resolution.declarations),
        resource_keys=list(resolution.resource_keys),
        routes=routes,
        crons=list(unit.triggers.crons or []) if unit.triggers else [],
        consumers=list(resolution.consumers),
        custom_domains=[r.pattern for r in routes if r.custom_domain],
        observability=observability,
        placement=unit.placement.mode if unit.placement else None,
        usage_model=unit.usage_model,
        logpush=unit.logpush,
        source_environment=unit.environment_name,
    )


# =============================================================================
# Pipeline
# =============================================================================


def run_pipeline(
    configs: Sequence[WorkerConfig],
    options: MigrationOptions | None = None,
) -> ResolvedModel:
    """
    Resolve worker configurations into a single model.

    Args:
        configs: Worker configurations in processing order
        options: Migration options; defaults are used when omitted

    Returns:
        ResolvedModel with registry, workers, warnings and errors

    Raises:
        UnknownEnvironmentError: If ``options.target_environment`` is not
            declared by one of the workers
    """
    options = options or MigrationOptions()
    app_name = options.app_name or (configs[0].name if configs else "app")
    effective = options.with_overrides(app_name=app_name)

    registry = ResourceRegistry()
    model = ResolvedModel(app_name=app_name, stage=options.stage, registry=registry)

    for config in configs:
        unit = resolve_environment(config, options.target_environment)

        normalized = normalize_resources(unit, registry, effective)
        model.warnings.extend(normalized.warnings)

        resolution = resolve_bindings(unit, registry)
        model.units.append(build_deployable_unit(unit, resolution, app_name, effective))

    model.units = [relink_dead_letter_queues(unit, registry) for unit in model.units]

    report = validate_model(registry, model.units)
    model.warnings.extend(report.warnings)
    model.errors.extend(report.errors)

    logger.info(
        "Resolved %d workers and %d resources (%d errors, %d warnings)",
        len(model.units),
        len(registry),
        len(model.errors),
        len(model.warnings),
    )
    return model


__all__ = [
    "DEFAULT_ENTRYPOINT",
    "ResolvedModel",
    "unit_display_name",
    "transform_routes",
    "build_deployable_unit",
    "run_pipeline",
]
