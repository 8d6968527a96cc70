"""Unit tests for startup configuration."""

from __future__ import annotations

from pathlib import Path

import pytest

from note_config import NotesConfig, load_config, resolve_db_path
from note_errors import ConfigError, StorageLocationUnavailable


class TestResolveDbPath:
    def test_under_home(self):
        assert resolve_db_path({"HOME": "/home/alice"}) == Path("/home/alice/.notes_db")

    def test_override_wins(self, tmp_path: Path):
        env = {"HOME": "/home/alice", "NOTES_DB_PATH": str(tmp_path / "db")}
        assert resolve_db_path(env) == tmp_path / "db"

    def test_missing_home_is_fatal(self):
        with pytest.raises(StorageLocationUnavailable, match="HOME"):
            resolve_db_path({})

    def test_blank_home_is_fatal(self):
        with pytest.raises(StorageLocationUnavailable):
            resolve_db_path({"HOME": "   "})


class TestLoadConfig:
    def test_defaults(self):
        assert load_config({"HOME": "/home/alice"}) == NotesConfig(
            db_path=Path("/home/alice/.notes_db"),
            db_format="legacy",
            log_level="WARNING",
        )

    def test_json_format_and_level(self):
        cfg = load_config({"HOME": "/h", "NOTES_DB_FORMAT": "JSON", "NOTES_LOG_LEVEL": "debug"})
        assert cfg.db_format == "json"
        assert cfg.log_level == "DEBUG"

    def test_unknown_format(self):
        with pytest.raises(ConfigError, match="NOTES_DB_FORMAT"):
            load_config({"HOME": "/h", "NOTES_DB_FORMAT": "xml"})

    def test_unknown_log_level(self):
        with pytest.raises(ConfigError, match="NOTES_LOG_LEVEL"):
            load_config({"HOME": "/h", "NOTES_LOG_LEVEL": "LOUD"})

    def test_reads_process_environment(self, monkeypatch, tmp_path: Path):
        monkeypatch.delenv("NOTES_DB_PATH", raising=False)
        monkeypatch.delenv("NOTES_DB_FORMAT", raising=False)
        monkeypatch.delenv("NOTES_LOG_LEVEL", raising=False)
        monkeypatch.setenv("HOME", str(tmp_path))
        assert load_config().db_path == tmp_path / ".notes_db"
