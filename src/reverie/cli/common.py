"""Helpers shared by the CLI command groups."""

from __future__ import annotations

from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, NoReturn, Optional

import typer

from reverie.configuration.settings import Settings, bootstrap_settings
from reverie.errors import ReverieError
from reverie.errors.user_messages import format_error_for_cli
from reverie.orchestrator.pattern_engine import PatternEngine, build_engine
from reverie.storage.entry_store import EntryStore


DEFAULT_USER = "local"


def resolve_settings(config_path: Path, database_path: Optional[Path] = None) -> Settings:
    """Load settings, applying a one-off database override."""
    overrides: dict = {}
    if database_path:
        overrides = {"workspace": {"storage": {"database_path": str(database_path)}}}
    try:
        return bootstrap_settings(path=config_path, overrides=overrides)
    except ReverieError as e:
        fail(e)


@contextmanager
def open_engine(config_path: Path, database_path: Optional[Path] = None) -> Iterator[PatternEngine]:
    engine, entry_store, pattern_store = build_engine(resolve_settings(config_path, database_path))
    try:
        yield engine
    finally:
        entry_store.close()
        pattern_store.close()


@contextmanager
def open_entry_store(config_path: Path, database_path: Optional[Path] = None) -> Iterator[EntryStore]:
    settings = resolve_settings(config_path, database_path)
    with EntryStore(settings.workspace.storage.database_path) as store:
        yield store


def fail(error: ReverieError) -> NoReturn:
    """Print a user-facing error and exit with status 1."""
    typer.echo(format_error_for_cli(error), err=True)
    raise typer.Exit(code=1)
