"""Unit tests for the CLI — command registration, demo and journal output."""

from __future__ import annotations

import logging
from pathlib import Path

import pytest
from typer.testing import CliRunner

import marketledger.cli.app as cli_app
from marketledger.cli.app import app
from marketledger.config import MarketConfig
from marketledger.core.event_journal import EventJournal

runner = CliRunner()


class TestCliApp:
    def test_help_flag(self):
        result = runner.invoke(app, ["--help"])
        assert result.exit_code == 0
        assert "demo" in result.output
        assert "journal" in result.output

    def test_demo_runs_and_journals(self, tmp_path: Path):
        db = tmp_path / "demo.db"
        result = runner.invoke(app, ["demo", "--journal", str(db), "--price", "100"])
        assert result.exit_code == 0, result.output
        assert "Second withdrawal rejected" in result.output
        journal = EventJournal(db)
        assert [e.event_kind.value for e in journal.get_events()] == [
            "item_listed",
            "item_bought",
        ]

    def test_journal_missing_file(self, tmp_path: Path):
        result = runner.invoke(app, ["journal", "--journal", str(tmp_path / "nope.db")])
        assert result.exit_code == 1
        assert "not found" in result.output

    def test_journal_verify(self, tmp_path: Path):
        db = tmp_path / "demo.db"
        runner.invoke(app, ["demo", "--journal", str(db)])
        result = runner.invoke(app, ["journal", "--journal", str(db), "--verify"])
        assert result.exit_code == 0, result.output
        assert "Hash chain valid" in result.output

    def test_journal_unknown_kind(self, tmp_path: Path):
        db = tmp_path / "demo.db"
        runner.invoke(app, ["demo", "--journal", str(db)])
        result = runner.invoke(app, ["journal", "--journal", str(db), "--kind", "bogus"])
        assert result.exit_code == 1

    def test_log_level_option(self, tmp_path: Path):
        runner.invoke(app, ["--log-level", "warning", "journal", "--journal", str(tmp_path / "x.db")])
        assert logging.getLogger().level == logging.WARNING

    def test_debug_config_forces_debug_logging(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ):
        monkeypatch.setattr(cli_app, "config", MarketConfig(debug=True))
        runner.invoke(app, ["--log-level", "warning", "journal", "--journal", str(tmp_path / "x.db")])
        assert logging.getLogger().level == logging.DEBUG
