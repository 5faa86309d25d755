"""Pattern commands: detect, inspect and manage detected patterns.

Examples:
    reverie patterns detect --days 30
    reverie patterns detect --refresh --json
    reverie patterns show 3f2a... --json
    reverie patterns insights
"""

from __future__ import annotations

import asyncio
import json
from pathlib import Path
from typing import Optional, Sequence

import typer
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from reverie.cli.common import DEFAULT_USER, fail, open_engine
from reverie.configuration.settings import DEFAULT_CONFIG_PATH
from reverie.errors import ReverieError
from reverie.models.pattern import Pattern

console = Console()
patterns_app = typer.Typer(help="Detect and manage recurring patterns")


def _patterns_table(patterns: Sequence[Pattern], title: str) -> Table:
    table = Table(title=title)
    table.add_column("ID", style="dim", no_wrap=True)
    table.add_column("Type", style="cyan", no_wrap=True)
    table.add_column("Name", style="bold", overflow="fold")
    table.add_column("Freq", justify="right")
    table.add_column("Conf", justify="right")
    table.add_column("Correlation", overflow="fold")
    for pattern in patterns:
        correlation = pattern.correlation
        table.add_row(
            (pattern.id or "-")[:8],
            pattern.pattern_type.value,
            pattern.name,
            str(pattern.frequency),
            f"{pattern.confidence:.0%}",
            f"{correlation.event_type} ({correlation.strength:.0%})" if correlation else "-",
        )
    return table


@patterns_app.command("detect")
def detect_patterns(
    user: str = typer.Option(DEFAULT_USER, "--user", "-u", help="Whose entries to analyze"),
    days: Optional[int] = typer.Option(None, "--days", "-d", help="Window in days (7-365)"),
    refresh: bool = typer.Option(False, "--refresh", help="Ignore cached patterns"),
    output_json: bool = typer.Option(False, "--json", help="Output as JSON"),
    config_path: Path = typer.Option(DEFAULT_CONFIG_PATH, "--config-path", help="Path to config"),
    database_path: Optional[Path] = typer.Option(None, "--database-path", help="Override database"),
) -> None:
    """Detect patterns over the window, reusing cached ones unless --refresh."""
    try:
        with open_engine(config_path, database_path) as engine:
            result = asyncio.run(engine.get_patterns(user, window_days=days, refresh=refresh))
    except ReverieError as e:
        fail(e)

    if output_json:
        typer.echo(result.model_dump_json(indent=2))
        return

    if result.message:
        console.print(f"[yellow]{result.message}[/yellow]")
    if not result.patterns:
        console.print("No patterns detected yet.")
        return

    source = "cached" if result.cached else f"{result.snapshot_size} entries"
    console.print(_patterns_table(result.patterns, f"Patterns over {result.window_days} days ({source})"))
    if result.failed_upserts:
        console.print(f"[red]Not saved:[/red] {', '.join(result.failed_upserts)}")


@patterns_app.command("list")
def list_patterns(
    user: str = typer.Option(DEFAULT_USER, "--user", "-u"),
    output_json: bool = typer.Option(False, "--json", help="Output as JSON"),
    config_path: Path = typer.Option(DEFAULT_CONFIG_PATH, "--config-path", help="Path to config"),
    database_path: Optional[Path] = typer.Option(None, "--database-path", help="Override database"),
) -> None:
    """List active patterns with the current cache state."""
    try:
        with open_engine(config_path, database_path) as engine:
            state = engine.cache_state(user)
            patterns = engine.repository.list_active(user)
    except ReverieError as e:
        fail(e)

    if output_json:
        typer.echo(
            json.dumps({"state": state.value, "patterns": [p.to_dict() for p in patterns]}, indent=2)
        )
        return

    console.print(f"Cache state: [bold]{state.value}[/bold]")
    if patterns:
        console.print(_patterns_table(patterns, f"Active patterns for {user}"))


@patterns_app.command("show")
def show_pattern(
    pattern_id: str = typer.Argument(..., help="Pattern id"),
    user: str = typer.Option(DEFAULT_USER, "--user", "-u"),
    output_json: bool = typer.Option(False, "--json", help="Output as JSON"),
    config_path: Path = typer.Option(DEFAULT_CONFIG_PATH, "--config-path", help="Path to config"),
    database_path: Optional[Path] = typer.Option(None, "--database-path", help="Override database"),
) -> None:
    """Show one pattern and the latest entries that share its elements."""
    try:
        with open_engine(config_path, database_path) as engine:
            detail = engine.get_pattern_detail(user, pattern_id)
    except ReverieError as e:
        fail(e)

    if output_json:
        typer.echo(detail.model_dump_json(indent=2))
        return

    pattern = detail.pattern
    body = [
        pattern.description,
        "",
        f"Frequency: {pattern.frequency} of {pattern.sample_size} entries",
        f"Confidence: {pattern.confidence:.0%}",
        f"Seen: {pattern.first_occurrence:%Y-%m-%d} to {pattern.last_occurrence:%Y-%m-%d}",
    ]
    if pattern.correlation:
        body.append(f"Correlation: {pattern.correlation.description}")
    if pattern.insight:
        body.extend(["", pattern.insight])
    console.print(Panel(escape("\n".join(body)), title=escape(f"{pattern.name} [{pattern.pattern_type.value}]")))

    if detail.related_entries:
        table = Table(title="Related entries")
        table.add_column("Date", style="cyan")
        table.add_column("Title")
        for entry in detail.related_entries:
            table.add_row(f"{entry.timestamp:%Y-%m-%d}", entry.title)
        console.print(table)


def _set_active(pattern_id: str, user: str, active: bool, config_path: Path, database_path: Optional[Path]) -> None:
    try:
        with open_engine(config_path, database_path) as engine:
            pattern = engine.update_pattern(user, pattern_id, is_active=active)
    except ReverieError as e:
        fail(e)
    console.print(f"{'Activated' if active else 'Deactivated'} {pattern.name}")


@patterns_app.command("deactivate")
def deactivate_pattern(
    pattern_id: str = typer.Argument(..., help="Pattern id"),
    user: str = typer.Option(DEFAULT_USER, "--user", "-u"),
    config_path: Path = typer.Option(DEFAULT_CONFIG_PATH, "--config-path", help="Path to config"),
    database_path: Optional[Path] = typer.Option(None, "--database-path", help="Override database"),
) -> None:
    """Hide a pattern from cached results."""
    _set_active(pattern_id, user, False, config_path, database_path)


@patterns_app.command("activate")
def activate_pattern(
    pattern_id: str = typer.Argument(..., help="Pattern id"),
    user: str = typer.Option(DEFAULT_USER, "--user", "-u"),
    config_path: Path = typer.Option(DEFAULT_CONFIG_PATH, "--config-path", help="Path to config"),
    database_path: Optional[Path] = typer.Option(None, "--database-path", help="Override database"),
) -> None:
    """Make a deactivated pattern visible again."""
    _set_active(pattern_id, user, True, config_path, database_path)


@patterns_app.command("annotate")
def annotate_pattern(
    pattern_id: str = typer.Argument(..., help="Pattern id"),
    insight: str = typer.Argument(..., help="New insight text"),
    user: str = typer.Option(DEFAULT_USER, "--user", "-u"),
    config_path: Path = typer.Option(DEFAULT_CONFIG_PATH, "--config-path", help="Path to config"),
    database_path: Optional[Path] = typer.Option(None, "--database-path", help="Override database"),
) -> None:
    """Replace a pattern's insight text."""
    try:
        with open_engine(config_path, database_path) as engine:
            pattern = engine.update_pattern(user, pattern_id, insight=insight)
    except ReverieError as e:
        fail(e)
    console.print(f"Updated insight for {pattern.name}")


@patterns_app.command("delete")
def delete_pattern(
    pattern_id: str = typer.Argument(..., help="Pattern id"),
    user: str = typer.Option(DEFAULT_USER, "--user", "-u"),
    config_path: Path = typer.Option(DEFAULT_CONFIG_PATH, "--config-path", help="Path to config"),
    database_path: Optional[Path] = typer.Option(None, "--database-path", help="Override database"),
) -> None:
    """Delete a pattern permanently."""
    try:
        with open_engine(config_path, database_path) as engine:
            engine.delete_pattern(user, pattern_id)
    except ReverieError as e:
        fail(e)
    console.print(f"Deleted pattern {pattern_id}")


@patterns_app.command("insights")
def show_insights(
    user: str = typer.Option(DEFAULT_USER, "--user", "-u"),
    output_json: bool = typer.Option(False, "--json", help="Output as JSON"),
    config_path: Path = typer.Option(DEFAULT_CONFIG_PATH, "--config-path", help="Path to config"),
    database_path: Optional[Path] = typer.Option(None, "--database-path", help="Override database"),
) -> None:
    """Summarize the strongest active patterns and recent trends."""
    try:
        with open_engine(config_path, database_path) as engine:
            report = engine.insight_report(user)
    except ReverieError as e:
        fail(e)

    if output_json:
        typer.echo(report.model_dump_json(indent=2))
        return

    summary = report.summary
    console.print(
        f"Patterns: {summary.total_patterns}  Significant: {summary.significant_patterns}  "
        f"Strong correlations: {summary.strong_correlations}  "
        f"Average confidence: {summary.average_confidence:.0%}"
    )
    for insight in report.insights:
        line = f"[{insight.severity.value}] {insight.pattern.name}: {insight.description}"
        if insight.recommendation:
            line += f"\n    -> {insight.recommendation}"
        console.print(line, markup=False)

    trends = report.recent_trends
    if trends.entry_count:
        console.print(
            f"Last {trends.entry_count} entries: average lucidity {trends.average_lucidity:.1f}, "
            f"emotions {', '.join(trends.common_emotions) or '-'}, "
            f"symbols {', '.join(trends.common_symbols) or '-'}"
        )
    for recommendation in report.recommendations:
        console.print(f"- {recommendation}")
