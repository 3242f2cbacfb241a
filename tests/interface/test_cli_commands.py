"""Tests for CLI commands: review, due, forecast, stats, show, reset and config."""

import json

import pytest
from typer.testing import CliRunner

from anamnesis.consts import VERSION
from anamnesis.interface.cli import app

runner = CliRunner()

PROGRESS = """\
lessons:
  - lesson_id: overdue
    next_review_date: 2026-03-10T12:00:00+00:00
    interval: 6
    ease_factor: 2.5
    repetition: 2
    mastery_level: 2
  - lesson_id: fresh
  - lesson_id: upcoming
    next_review_date: 2026-03-16T08:00:00+00:00
    interval: 15
    ease_factor: 2.2
    repetition: 3
    mastery_level: 3
"""

AT = "2026-03-15T12:00:00+00:00"


@pytest.fixture
def progress_file(tmp_path):
    path = tmp_path / "progress.yaml"
    path.write_text(PROGRESS, encoding="utf-8")
    return path


# --- Help ---


def test_cli_help():
    result = runner.invoke(app, ["--help"])
    assert result.exit_code == 0
    assert "review" in result.stdout
    assert "due" in result.stdout


def test_version():
    result = runner.invoke(app, ["version"])
    assert result.exit_code == 0
    assert result.stdout.strip() == VERSION


# --- Review ---


def test_review_updates_file(progress_file):
    result = runner.invoke(app, ["review", "overdue", "4", str(progress_file), "--at", AT])

    assert result.exit_code == 0, result.stdout
    assert "interval 15d" in result.stdout
    assert "2026-03-30T12:00:00+00:00" in result.stdout

    show = runner.invoke(app, ["show", "overdue", str(progress_file)])
    assert "reps 3" in show.stdout
    assert "mastery 3" in show.stdout
    assert "lapses 0, streak 1" in show.stdout


def test_review_rejects_bad_quality(progress_file):
    result = runner.invoke(app, ["review", "overdue", "7", str(progress_file)])
    assert result.exit_code != 0


def test_review_respects_ease_bounds(progress_file):
    result = runner.invoke(
        app, ["--max-ease", "3.0", "review", "overdue", "5", str(progress_file), "--at", AT]
    )
    assert result.exit_code == 0
    assert "ease 2.60" in result.stdout


def test_inverted_bounds_exit(progress_file):
    result = runner.invoke(app, ["--min-ease", "2.6", "--max-ease", "2.0", "version"])
    assert result.exit_code == 2


def test_missing_progress_file_argument():
    result = runner.invoke(app, ["due"])
    assert result.exit_code == 2


# --- Due / Forecast / Stats ---


def test_due_lists_by_priority(progress_file):
    result = runner.invoke(app, ["due", str(progress_file), "--at", AT])

    assert result.exit_code == 0
    lines = result.stdout.strip().splitlines()
    assert len(lines) == 2
    assert "fresh" in lines[0]
    assert "overdue" in lines[1]


def test_due_json(progress_file):
    result = runner.invoke(app, ["due", str(progress_file), "--at", AT, "--json", "--limit", "1"])

    rows = json.loads(result.stdout)
    assert [r["lesson_id"] for r in rows] == ["fresh"]
    assert rows[0]["priority"] == 150


def test_forecast(progress_file):
    result = runner.invoke(app, ["forecast", str(progress_file), "--days", "1", "--at", AT])
    assert result.exit_code == 0
    assert result.stdout.startswith("3 lesson(s)")


def test_stats_json(progress_file):
    result = runner.invoke(app, ["stats", str(progress_file), "--at", AT, "--json"])

    data = json.loads(result.stdout)
    assert data["total_items"] == 3
    assert data["due"] == 2
    assert data["new"] == 1


# --- Show / Reset ---


def test_show_unknown_lesson(progress_file):
    result = runner.invoke(app, ["show", "ghost", str(progress_file)])
    assert result.exit_code == 1


def test_reset_with_force(progress_file):
    result = runner.invoke(app, ["reset", "upcoming", str(progress_file), "--force"])
    assert result.exit_code == 0

    show = runner.invoke(app, ["show", "upcoming", str(progress_file)])
    assert "due now" in show.stdout


def test_reset_aborts_without_confirmation(progress_file):
    result = runner.invoke(app, ["reset", "upcoming", str(progress_file)], input="n\n")
    assert result.exit_code != 0
    assert "upcoming" in progress_file.read_text()


def test_malformed_file_reports_error(tmp_path):
    bad = tmp_path / "bad.yaml"
    bad.write_text("lessons:\n  - lesson_id: a\n    next_review_date: soon\n")
    result = runner.invoke(app, ["due", str(bad)])
    assert result.exit_code == 1


# --- Config ---


def test_config_show(tmp_path, monkeypatch):
    monkeypatch.setenv("ANAMNESIS_PROGRESS_FILE", str(tmp_path / "p.yaml"))
    result = runner.invoke(app, ["config", "show"])

    assert result.exit_code == 0
    data = json.loads(result.stdout)
    assert data["min_ease"] == 1.3
    assert data["progress_file"] == str((tmp_path / "p.yaml").resolve())


def test_progress_file_from_config(progress_file, monkeypatch):
    monkeypatch.setenv("ANAMNESIS_PROGRESS_FILE", str(progress_file))
    result = runner.invoke(app, ["forecast", "--days", "0", "--at", AT])
    assert result.exit_code == 0
    assert result.stdout.startswith("2 lesson(s)")
