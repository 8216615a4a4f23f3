"""
Migration commands for edgeport CLI.

Commands for checking and previewing the migration of worker configurations:
- validate: Load configurations, run the pipeline, report problems
- plan: Show the resolved model as tables or JSON
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from edgeport.core.errors import ConfigError
from edgeport.core.ir import JsonBinding, ResourceBinding, SecretBinding, TextBinding
from edgeport.core.loader import discover_config, load_worker_config
from edgeport.core.schema import WorkerConfig
from edgeport.migrate import MigrationOptions, ResolvedModel, load_migration_options, run_pipeline
from edgeport.migrate.options import OPTIONS_FILENAME

console = Console()

ConfigArgs = Annotated[
    list[Path] | None,
    typer.Argument(
        help="Worker configuration files (default: wrangler.toml/.json/.jsonc in the current directory)",
    ),
]


# =============================================================================
# Helper Functions
# =============================================================================


def _resolve_config_paths(paths: list[Path] | None) -> list[Path]:
    """Return the given paths, or the configuration discovered in the cwd."""
    if paths:
        return paths

    discovered = discover_config(Path.cwd())
    if discovered is None:
        console.print("[red]No worker configuration found in the current directory[/red]")
        raise typer.Exit(1)
    return [discovered]


def _load_configs(paths: list[Path]) -> list[WorkerConfig]:
    try:
        return [load_worker_config(path) for path in paths]
    except ConfigError as e:
        console.print(f"[red]Configuration error:[/red] {escape(str(e))}")
        raise typer.Exit(1) from e


def _build_options(
    config_paths: list[Path],
    options_file: Path | None,
    **overrides: object,
) -> MigrationOptions:
    """Options from edgeport.toml, with command line flags taking precedence."""
    toml_path = options_file or config_paths[0].parent / OPTIONS_FILENAME
    return load_migration_options(toml_path).with_overrides(**overrides)


def _run(configs: list[WorkerConfig], options: MigrationOptions) -> ResolvedModel:
    try:
        return run_pipeline(configs, options)
    except ConfigError as e:
        console.print(f"[red]Configuration error:[/red] {escape(str(e))}")
        raise typer.Exit(1) from e


def _describe_binding(binding: object) -> tuple[str, str]:
    """(kind, target) columns for a binding row."""
    if isinstance(binding, ResourceBinding):
        return "resource", binding.key
    if isinstance(binding, SecretBinding):
        return "secret", f"${binding.env_var_name}"
    if isinstance(binding, TextBinding):
        return "text", repr(binding.value)
    if isinstance(binding, JsonBinding):
        return "json", json.dumps(binding.value)
    return "unknown", str(binding)


def _print_diagnostics(model: ResolvedModel) -> None:
    if model.warnings:
        console.print(f"[yellow]Warnings ({len(model.warnings)}):[/yellow]")
        for warning in model.warnings:
            console.print(f"  - {escape(warning)}")
        console.print()

    if model.errors:
        console.print(f"[red]Errors ({len(model.errors)}):[/red]")
        for error in model.errors:
            console.print(f"  - {escape(error)}")
        console.print()


def _print_summary(model: ResolvedModel) -> None:
    summary = model.summary()

    table = Table(title="Resources")
    table.add_column("Type", style="cyan")
    table.add_column("Count", style="green", justify="right")
    for resource_type, count in summary["resources_by_type"].items():
        table.add_row(resource_type, str(count))
    console.print(table)

    console.print(f"  Workers: {summary['workers']}")
    console.print(f"  Resources: {summary['resources']}")
    console.print(f"  Secrets: {summary['secrets']}")
    console.print()


def _print_plan(model: ResolvedModel) -> None:
    resources = Table(title="Resources")
    resources.add_column("Key", style="cyan")
    resources.add_column("Type")
    resources.add_column("Name")
    resources.add_column("Variable")
    resources.add_column("Adopt")
    for resource in model.registry.entries():
        resources.add_row(
            escape(resource.key),
            resource.target_type,
            escape(resource.display_name),
            resource.variable_name,
            "yes" if resource.adopt_existing else "no",
        )
    console.print(resources)
    console.print()

    for unit in model.units:
        console.print(f"[bold]Worker[/bold] [cyan]{escape(unit.display_name)}[/cyan]")
        console.print(f"  Entrypoint: {escape(unit.entrypoint)}")
        if unit.source_environment:
            console.print(f"  Environment: {escape(unit.source_environment)}")
        for route in unit.routes:
            console.print(f"  Route: {escape(route.pattern)}")
        for cron in unit.crons:
            console.print(f"  Cron: {escape(cron)}")

        if unit.bindings:
            bindings = Table(show_header=True)
            bindings.add_column("Binding", style="cyan")
            bindings.add_column("Kind")
            bindings.add_column("Target")
            for name, binding in unit.bindings.items():
                kind, target = _describe_binding(binding)
                bindings.add_row(escape(name), kind, escape(target))
            console.print(bindings)

        for consumer in unit.consumers:
            console.print(
                f"  Consumes: {escape(consumer.queue_name)} ({escape(consumer.queue_key)})"
            )
        console.print()


# =============================================================================
# Commands
# =============================================================================


def validate_command(
    configs: ConfigArgs = None,
    env: Annotated[
        str | None,
        typer.Option("--env", "-e", help="Named environment to resolve"),
    ] = None,
    options_file: Annotated[
        Path | None,
        typer.Option("--options", help="Path to edgeport.toml"),
    ] = None,
) -> None:
    """
    Validate worker configurations for migration.

    Loads every configuration, resolves resources and bindings, and reports
    warnings and errors. Exits with code 1 when errors are found.

    Example:
        edgeport validate wrangler.toml
        edgeport validate api/wrangler.toml jobs/wrangler.toml --env production
    """
    paths = _resolve_config_paths(configs)
    workers = _load_configs(paths)
    options = _build_options(paths, options_file, target_environment=env)
    model = _run(workers, options)

    _print_summary(model)
    _print_diagnostics(model)

    if not model.success:
        console.print("[red]Validation failed[/red]")
        raise typer.Exit(1)

    console.print("[green]Configuration is valid[/green]")


def plan_command(
    configs: ConfigArgs = None,
    app_name: Annotated[
        str | None,
        typer.Option("--app", help="Application name for synthesized resource names"),
    ] = None,
    stage: Annotated[
        str | None,
        typer.Option("--stage", "-s", help="Stage suffix for synthesized names"),
    ] = None,
    env: Annotated[
        str | None,
        typer.Option("--env", "-e", help="Named environment to resolve"),
    ] = None,
    adopt: Annotated[
        bool | None,
        typer.Option("--adopt/--no-adopt", help="Bind to existing resources"),
    ] = None,
    preserve_names: Annotated[
        bool | None,
        typer.Option("--preserve-names/--no-preserve-names", help="Keep existing physical names"),
    ] = None,
    options_file: Annotated[
        Path | None,
        typer.Option("--options", help="Path to edgeport.toml"),
    ] = None,
    as_json: Annotated[
        bool,
        typer.Option("--json", help="Print the resolved model as JSON"),
    ] = False,
) -> None:
    """
    Show the resolved migration model.

    Example:
        edgeport plan wrangler.toml --stage prod --no-preserve-names
        edgeport plan --json > model.json
    """
    paths = _resolve_config_paths(configs)
    workers = _load_configs(paths)
    options = _build_options(
        paths,
        options_file,
        app_name=app_name,
        stage=stage,
        target_environment=env,
        adopt=adopt,
        preserve_names=preserve_names,
    )
    model = _run(workers, options)

    if as_json:
        typer.echo(json.dumps(model.to_dict(), indent=2))
    else:
        console.print(f"\n[bold]edgeport plan[/bold] - {escape(model.app_name)}\n")
        _print_plan(model)
        _print_diagnostics(model)

    if not model.success:
        raise typer.Exit(1)


__all__ = [
    "validate_command",
    "plan_command",
]
