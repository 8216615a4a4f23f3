"""
edgeport CLI Package.

- migrate.py: validate and plan commands
- utils.py: Shared utilities
"""

from __future__ import annotations

import sys

import typer

from edgeport.cli.migrate import plan_command, validate_command
from edgeport.cli.utils import configure_logging, get_version, version_callback

__version__ = get_version()

app = typer.Typer(
    help="""
edgeport - migrate worker configurations to resource programs.

Reads wrangler.toml / wrangler.json files and resolves them into resources
and bindings ready for code generation.
""",
    no_args_is_help=True,
)


@app.callback()
def main_callback(
    version: bool | None = typer.Option(
        None,
        "--version",
        "-v",
        callback=version_callback,
        is_eager=True,
        help="Show version and environment information",
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        help="Log migration stages to stderr",
    ),
) -> None:
    """edgeport CLI main callback for global options."""
    configure_logging(verbose)


app.command(name="validate")(validate_command)
app.command(name="plan")(plan_command)


def main(argv: list[str] | None = None) -> None:
    app(args=argv, standalone_mode=True)


if __name__ == "__main__":
    main(sys.argv[1:])


__all__ = [
    "__version__",
    "app",
    "main",
    "get_version",
    "version_callback",
]
