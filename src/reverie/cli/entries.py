"""Journal entry commands: record, import and list entries."""

from __future__ import annotations

import json
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import List, Optional

import typer
from pydantic import ValidationError
from rich.console import Console
from rich.table import Table

from reverie.cli.common import DEFAULT_USER, fail, open_entry_store
from reverie.configuration.settings import DEFAULT_CONFIG_PATH
from reverie.errors import ReverieError
from reverie.models.entry import Entry

console = Console()
entries_app = typer.Typer(help="Record and inspect journal entries")


@entries_app.command("add")
def add_entry(
    title: str = typer.Option(..., "--title", help="Entry title"),
    narrative: str = typer.Option("", "--narrative", help="Free-text account"),
    symbol: Optional[List[str]] = typer.Option(None, "--symbol", "-s", help="Symbol tag (repeatable)"),
    emotion: Optional[List[str]] = typer.Option(None, "--emotion", "-e", help="Emotion tag (repeatable)"),
    theme: Optional[List[str]] = typer.Option(None, "--theme", "-t", help="Theme tag (repeatable)"),
    color: Optional[List[str]] = typer.Option(None, "--color", help="Color tag (repeatable)"),
    tag: Optional[List[str]] = typer.Option(None, "--tag", help="Life-context tag, e.g. work-stress (repeatable)"),
    lucidity: Optional[float] = typer.Option(None, "--lucidity", min=0, max=10),
    sleep_quality: Optional[float] = typer.Option(None, "--sleep-quality", min=0, max=10),
    vividness: Optional[float] = typer.Option(None, "--vividness", min=0, max=10),
    date: Optional[datetime] = typer.Option(None, "--date", help="When it was recorded (default: now)"),
    user: str = typer.Option(DEFAULT_USER, "--user", "-u", help="Entry owner"),
    config_path: Path = typer.Option(DEFAULT_CONFIG_PATH, "--config-path", help="Path to config"),
    database_path: Optional[Path] = typer.Option(None, "--database-path", help="Override database"),
) -> None:
    """Record a single journal entry."""
    entry = Entry(
        user_id=user,
        timestamp=date or datetime.now(timezone.utc),
        title=title,
        narrative=narrative,
        symbols=symbol,
        emotions=emotion,
        themes=theme,
        colors=color,
        context_tags=tag,
        lucidity=lucidity,
        sleep_quality=sleep_quality,
        vividness=vividness,
    )
    with open_entry_store(config_path, database_path) as store:
        store.add(entry)
    console.print(f"[green]Recorded entry[/green] {entry.id} ({entry.timestamp:%Y-%m-%d})")


@entries_app.command("import")
def import_entries(
    path: Path = typer.Argument(..., exists=True, dir_okay=False, help="JSON file with entries"),
    user: str = typer.Option(DEFAULT_USER, "--user", "-u", help="Owner for imported entries"),
    config_path: Path = typer.Option(DEFAULT_CONFIG_PATH, "--config-path", help="Path to config"),
    database_path: Optional[Path] = typer.Option(None, "--database-path", help="Override database"),
) -> None:
    """Import entries from a JSON list (or an object with an "entries" list)."""
    try:
        payload = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        typer.echo(f"Error: {path} is not valid JSON: {e}", err=True)
        raise typer.Exit(code=1)

    items = payload.get("entries", []) if isinstance(payload, dict) else payload
    if not isinstance(items, list):
        typer.echo("Error: expected a list of entries", err=True)
        raise typer.Exit(code=1)

    entries: List[Entry] = []
    skipped = 0
    for index, item in enumerate(items):
        if not isinstance(item, dict):
            skipped += 1
            continue
        try:
            entries.append(Entry.model_validate({**item, "user_id": user}))
        except ValidationError as e:
            skipped += 1
            typer.echo(f"Skipping entry #{index}: {e.error_count()} validation errors", err=True)

    try:
        with open_entry_store(config_path, database_path) as store:
            stored = store.add_many(entries)
    except ReverieError as e:
        fail(e)

    console.print(f"[green]Imported {stored} entries[/green] for {user}" + (f", skipped {skipped}" if skipped else ""))


@entries_app.command("list")
def list_entries(
    user: str = typer.Option(DEFAULT_USER, "--user", "-u", help="Entry owner"),
    days: int = typer.Option(30, "--days", "-d", min=1, help="How far back to look"),
    output_json: bool = typer.Option(False, "--json", help="Output as JSON"),
    config_path: Path = typer.Option(DEFAULT_CONFIG_PATH, "--config-path", help="Path to config"),
    database_path: Optional[Path] = typer.Option(None, "--database-path", help="Override database"),
) -> None:
    """List entries recorded in the last N days, oldest first."""
    end = datetime.now(timezone.utc)
    try:
        with open_entry_store(config_path, database_path) as store:
            entries = store.list_entries(user, end - timedelta(days=days), end)
    except ReverieError as e:
        fail(e)

    if output_json:
        typer.echo(json.dumps([entry.model_dump(mode="json") for entry in entries], indent=2))
        return

    if not entries:
        console.print(f"[yellow]No entries in the last {days} days[/yellow]")
        return

    table = Table(title=f"Entries for {user} (last {days} days)")
    table.add_column("Date", style="cyan")
    table.add_column("Title")
    table.add_column("Symbols")
    table.add_column("Emotions")
    table.add_column("Themes")
    table.add_column("Lucidity", justify="right")
    for entry in entries:
        table.add_row(
            f"{entry.timestamp:%Y-%m-%d %H:%M}",
            entry.title,
            ", ".join(entry.symbols),
            ", ".join(entry.emotions),
            ", ".join(entry.themes),
            "" if entry.lucidity is None else f"{entry.lucidity:g}",
        )
    console.print(table)
