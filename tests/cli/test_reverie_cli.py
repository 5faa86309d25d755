"""Tests for the reverie command line interface."""

from __future__ import annotations

import json
from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest
from typer.testing import CliRunner

from reverie.cli import cli


@pytest.fixture
def runner() -> CliRunner:
    return CliRunner()


@pytest.fixture
def paths(tmp_path: Path, monkeypatch) -> dict:
    monkeypatch.setenv("REVERIE_WORKSPACE_PATH", str(tmp_path / "workspace"))
    monkeypatch.delenv("REVERIE_SUGGESTIONS_ENABLED", raising=False)
    monkeypatch.delenv("REVERIE_SUGGESTIONS_API_KEY", raising=False)
    monkeypatch.delenv("REVERIE_DATABASE_PATH", raising=False)
    return {
        "config": tmp_path / "config.json",
        "database": tmp_path / "workspace" / "reverie.db",
    }


def _storage_args(paths: dict) -> list:
    return ["--config-path", str(paths["config"]), "--database-path", str(paths["database"])]


@pytest.fixture
def entries_file(tmp_path: Path) -> Path:
    now = datetime.now(timezone.utc)
    entries = [
        {
            "timestamp": (now - timedelta(days=days)).isoformat(),
            "title": f"Dream {days}",
            "symbols": ["house"] if days == 3 else ["water"],
            "emotions": ["fear"] if days == 3 else ["calm"],
            "context_tags": [] if days == 3 else ["work-stress"],
        }
        for days in range(1, 6)
    ]
    path = tmp_path / "entries.json"
    path.write_text(json.dumps({"entries": entries + [{"title": "no timestamp"}]}))
    return path


@pytest.fixture
def imported(runner, paths, entries_file) -> dict:
    result = runner.invoke(cli, ["entries", "import", str(entries_file), "--user", "alice", *_storage_args(paths)])
    assert result.exit_code == 0, result.output
    return paths


def _detect(runner, paths, *extra) -> dict:
    result = runner.invoke(
        cli, ["patterns", "detect", "--user", "alice", "--json", *extra, *_storage_args(paths)]
    )
    assert result.exit_code == 0, result.output
    return json.loads(result.stdout)


def test_import_reports_counts(runner, paths, entries_file):
    result = runner.invoke(cli, ["entries", "import", str(entries_file), "--user", "alice", *_storage_args(paths)])

    assert result.exit_code == 0
    assert "Imported 5 entries" in result.output
    assert "skipped 1" in result.output


def test_add_and_list_entries(runner, paths):
    add = runner.invoke(
        cli,
        [
            "entries", "add",
            "--title", "Flying over the city",
            "--symbol", "flying", "--symbol", "city",
            "--emotion", "joy",
            "--lucidity", "8",
            "--user", "bob",
            *_storage_args(paths),
        ],
    )
    assert add.exit_code == 0, add.output

    listed = runner.invoke(cli, ["entries", "list", "--user", "bob", "--json", *_storage_args(paths)])

    assert listed.exit_code == 0
    entries = json.loads(listed.stdout)
    assert len(entries) == 1
    assert entries[0]["symbols"] == ["flying", "city"]
    assert entries[0]["lucidity"] == 8.0


def test_detect_json(runner, imported):
    payload = _detect(runner, imported)

    assert payload["cached"] is False
    assert payload["state"] == "cached"
    assert payload["snapshot_size"] == 5
    water = next(p for p in payload["patterns"] if p["name"] == "Recurring Symbol: water")
    assert water["frequency"] == 4
    assert water["correlation"]["event_type"] == "work-stress"

    again = _detect(runner, imported)
    assert again["cached"] is True


def test_detect_table_shows_usable_short_ids(runner, imported):
    patterns = _detect(runner, imported)["patterns"]
    water_id = next(p["id"] for p in patterns if p["name"] == "Recurring Symbol: water")

    table = runner.invoke(cli, ["patterns", "list", "--user", "alice", *_storage_args(imported)])

    assert table.exit_code == 0
    assert water_id[:8] in table.output
    assert "SYMBOL_FREQUENCY" in table.output
    assert "water" in table.output

    shown = runner.invoke(
        cli, ["patterns", "show", water_id[:8], "--user", "alice", "--json", *_storage_args(imported)]
    )
    assert shown.exit_code == 0, shown.output
    assert json.loads(shown.stdout)["pattern"]["id"] == water_id

    deactivated = runner.invoke(
        cli, ["patterns", "deactivate", water_id[:8], "--user", "alice", *_storage_args(imported)]
    )
    assert deactivated.exit_code == 0


def test_detect_rejects_bad_window(runner, imported):
    result = runner.invoke(
        cli, ["patterns", "detect", "--user", "alice", "--days", "3", *_storage_args(imported)]
    )
    assert result.exit_code == 1


def test_detect_with_too_few_entries(runner, paths):
    payload = _detect(runner, paths)
    assert payload["patterns"] == []
    assert payload["message"]


def test_list_show_deactivate_delete(runner, imported):
    patterns = _detect(runner, imported)["patterns"]
    pattern_id = next(p["id"] for p in patterns if p["name"] == "Recurring Symbol: water")

    listed = runner.invoke(cli, ["patterns", "list", "--user", "alice", "--json", *_storage_args(imported)])
    assert json.loads(listed.stdout)["state"] == "cached"

    shown = runner.invoke(
        cli, ["patterns", "show", pattern_id, "--user", "alice", "--json", *_storage_args(imported)]
    )
    assert shown.exit_code == 0
    detail = json.loads(shown.stdout)
    assert detail["pattern"]["id"] == pattern_id
    assert len(detail["related_entries"]) == 4

    deactivated = runner.invoke(
        cli, ["patterns", "deactivate", pattern_id, "--user", "alice", *_storage_args(imported)]
    )
    assert deactivated.exit_code == 0
    listed = runner.invoke(cli, ["patterns", "list", "--user", "alice", "--json", *_storage_args(imported)])
    assert pattern_id not in [p["id"] for p in json.loads(listed.stdout)["patterns"]]

    deleted = runner.invoke(cli, ["patterns", "delete", pattern_id, "--user", "alice", *_storage_args(imported)])
    assert deleted.exit_code == 0
    missing = runner.invoke(cli, ["patterns", "show", pattern_id, "--user", "alice", *_storage_args(imported)])
    assert missing.exit_code == 1


def test_insights_json(runner, imported):
    _detect(runner, imported)

    result = runner.invoke(cli, ["patterns", "insights", "--user", "alice", "--json", *_storage_args(imported)])

    assert result.exit_code == 0
    report = json.loads(result.stdout)
    assert report["summary"]["total_patterns"] >= 1
    assert report["recent_trends"]["entry_count"] == 5
    assert any(insight["actionable"] for insight in report["insights"])


def test_config_init_show_set(runner, paths):
    init = runner.invoke(
        cli,
        ["config", "init", "--config-path", str(paths["config"]), "--database-path", str(paths["database"])],
    )
    assert init.exit_code == 0, init.output
    assert paths["config"].exists()

    updated = runner.invoke(
        cli,
        ["config", "set", "workspace.analysis.min_entries", "4", "--config-path", str(paths["config"])],
    )
    assert updated.exit_code == 0

    shown = runner.invoke(cli, ["config", "show", "--config-path", str(paths["config"])])
    assert shown.exit_code == 0
    assert json.loads(shown.stdout)["workspace"]["analysis"]["min_entries"] == 4


def test_config_set_rejects_invalid_value(runner, paths):
    runner.invoke(cli, ["config", "init", "--config-path", str(paths["config"])])

    result = runner.invoke(
        cli,
        ["config", "set", "workspace.analysis.min_entries", "zero", "--config-path", str(paths["config"])],
    )

    assert result.exit_code == 1


def test_config_show_missing_file(runner, tmp_path: Path):
    result = runner.invoke(cli, ["config", "show", "--config-path", str(tmp_path / "nope.json")])
    assert result.exit_code == 1
