"""
edgeport CLI utilities.

Shared helpers used across CLI modules.
"""

import logging
import platform
from pathlib import Path

import typer

from edgeport._version import get_version


def version_callback(value: bool) -> None:
    """Display version and environment information."""
    if value:
        try:
            import edgeport

            install_location = Path(edgeport.__file__).parent
        except Exception:
            install_location = Path.cwd()

        typer.echo(f"edgeport {get_version()}")
        typer.echo(f"Python {platform.python_version()} ({platform.python_implementation()})")
        typer.echo(f"Location: {install_location}")
        raise typer.Exit()


def configure_logging(verbose: bool) -> None:
    """Send debug output of the migration stages to stderr when verbose."""
    if verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")


__all__ = [
    "get_version",
    "version_callback",
    "configure_logging",
]
