"""Command line entry points for Reverie."""

import logging

from typer import Option, Typer

from ..configuration.cli import config_app
from .entries import entries_app
from .patterns import patterns_app


cli = Typer(help="Reverie journal pattern tools")
cli.add_typer(entries_app, name="entries")
cli.add_typer(patterns_app, name="patterns")
cli.add_typer(config_app, name="config")


@cli.callback()
def main(
    verbose: bool = Option(False, "--verbose", "-v", help="Enable debug logging"),
) -> None:
    """Detect recurring patterns across your journal entries."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


__all__ = ["cli", "entries_app", "patterns_app", "config_app"]
