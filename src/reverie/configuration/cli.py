"""CLI commands for managing Reverie settings."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Optional

import typer

from reverie.configuration.settings import (
    API_KEY_SECRET,
    DEFAULT_CONFIG_PATH,
    Settings,
    SecretStore,
    bootstrap_settings,
    load_settings,
    save_settings,
)
from reverie.errors import InvalidConfigError


config_app = typer.Typer(help="Manage Reverie configuration")

SECRET_KEYS = {"workspace.suggestions.api_key"}


@config_app.command("init")
def init_config(
    config_path: Path = typer.Option(DEFAULT_CONFIG_PATH, help="Path to config file"),
    database_path: Optional[Path] = typer.Option(None, help="Override SQLite database path"),
    suggestions: Optional[bool] = typer.Option(
        None, "--suggestions/--no-suggestions", help="Enable the suggestion service"
    ),
    base_url: Optional[str] = typer.Option(None, help="Suggestion service base URL"),
    model: Optional[str] = typer.Option(None, help="Suggestion model name"),
) -> None:
    """Initialize the Reverie settings file."""

    overrides: dict = {}
    if database_path:
        overrides.setdefault("workspace", {}).setdefault("storage", {})["database_path"] = str(
            database_path
        )
    if suggestions is not None:
        overrides.setdefault("workspace", {}).setdefault("suggestions", {})["enabled"] = suggestions
    if base_url:
        overrides.setdefault("workspace", {}).setdefault("suggestions", {})["base_url"] = base_url
    if model:
        overrides.setdefault("workspace", {}).setdefault("suggestions", {})["model"] = model

    settings = bootstrap_settings(path=config_path, overrides=overrides)
    typer.echo(f"Configuration initialized at {config_path}")
    typer.echo(_summarize_settings(settings))


@config_app.command("show")
def show_config(config_path: Path = typer.Option(DEFAULT_CONFIG_PATH, help="Path to config")) -> None:
    """Display effective configuration with secrets masked."""

    try:
        settings = load_settings(config_path)
    except (FileNotFoundError, InvalidConfigError) as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(code=1)
    typer.echo(_summarize_settings(settings))


@config_app.command("set")
def set_config(
    key: str = typer.Argument(..., help="Configuration key, e.g. workspace.analysis.min_entries"),
    value: str = typer.Argument(..., help="New value"),
    config_path: Path = typer.Option(DEFAULT_CONFIG_PATH, help="Path to config"),
) -> None:
    """Update a configuration value."""

    if key in SECRET_KEYS:
        SecretStore().set_secret(API_KEY_SECRET, value)
        typer.echo(f"Stored {key} in the system keychain")
        return

    settings = load_settings(config_path) if config_path.exists() else Settings()
    payload = settings.model_dump(mode="python")
    _assign(payload, key.split("."), value)
    try:
        updated = Settings.model_validate(payload)
    except ValueError as e:
        typer.echo(f"Invalid value for {key}: {e}", err=True)
        raise typer.Exit(code=1)
    save_settings(updated, config_path)
    typer.echo(f"Updated {key}")


def _summarize_settings(settings: Settings) -> str:
    data = settings.model_dump(mode="json")
    if settings.workspace.suggestions.api_key is not None:
        data["workspace"]["suggestions"]["api_key"] = "***"
    return json.dumps(data, indent=2)


def _assign(payload: dict, keys: list[str], value: str) -> None:
    current = payload
    for key in keys[:-1]:
        current = current.setdefault(key, {})
    current[keys[-1]] = value
