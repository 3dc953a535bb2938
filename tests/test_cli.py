"""Tests for the command line interface."""

import pytest
from typer.testing import CliRunner

from moodtrack.cli import app

runner = CliRunner()


@pytest.fixture(autouse=True)
def cli_env(mock_settings):
    """Point the CLI at the temporary database from ``mock_settings``."""
    return mock_settings


def test_version():
    result = runner.invoke(app, ["version"])
    assert result.exit_code == 0
    assert "moodtrack v0.1.0" in result.output


def test_mood_requires_login():
    result = runner.invoke(app, ["mood", "happy"])
    assert result.exit_code == 1
    assert "Not signed in" in result.output


def test_login_mood_history():
    result = runner.invoke(app, ["login", "anna@example.com", "Anna"])
    assert result.exit_code == 0, result.output
    assert "Signed in as Anna" in result.output

    result = runner.invoke(app, ["mood", "calm", "--intensity", "6", "--notes", "fine"])
    assert result.exit_code == 0, result.output
    assert "intensity 6/10" in result.output

    result = runner.invoke(app, ["history"])
    assert result.exit_code == 0
    assert "Ruhig" in result.output


def test_set_metric_and_health():
    runner.invoke(app, ["login", "anna@example.com", "Anna"])

    result = runner.invoke(app, ["set-metric", "steps", "4200"])
    assert result.exit_code == 0, result.output
    assert "steps = 4200" in result.output

    result = runner.invoke(app, ["health"])
    assert result.exit_code == 0
    assert "manual" in result.output


def test_sync_without_credentials_fails():
    runner.invoke(app, ["login", "anna@example.com", "Anna"])
    result = runner.invoke(app, ["sync"])
    assert result.exit_code == 1
    assert "nicht verfügbar" in result.output


def test_remind_and_language():
    result = runner.invoke(app, ["remind", "--at", "07:30"])
    assert result.exit_code == 0, result.output
    assert "07:30" in result.output

    result = runner.invoke(app, ["remind", "--at", "7h"])
    assert result.exit_code == 1

    result = runner.invoke(app, ["language", "xx"])
    assert result.exit_code == 1

    result = runner.invoke(app, ["language", "en"])
    assert result.exit_code == 0
    assert "Language set to en" in result.output


def test_remind_reports_failed_reminder_time(monkeypatch):
    from moodtrack.db import StorageError
    from moodtrack.tracker import Tracker

    def failing(self, hour, minute):
        self._fail("error_save", StorageError("UPDATE app_settings SET daily_reminder_hour=?"))
        return None

    monkeypatch.setattr(Tracker, "set_reminder_time", failing)
    runner.invoke(app, ["login", "anna@example.com", "Anna"])

    result = runner.invoke(app, ["remind", "--at", "07:30"])
    assert result.exit_code == 1
    assert "Daily reminder at" not in result.output
    assert "nicht verfügbar" in result.output
    assert "UPDATE" not in result.output


def test_widget_streak():
    runner.invoke(app, ["login", "anna@example.com", "Anna"])
    runner.invoke(app, ["mood", "happy"])

    result = runner.invoke(app, ["widget"])
    assert result.exit_code == 0
    assert "1 days" in result.output
