"""Tests for the config module."""

from __future__ import annotations

from pathlib import Path
from unittest.mock import patch

import pytest

from steadymind import config
from steadymind.models import AppConfig


@pytest.fixture()
def cfg_dir(tmp_path: Path):
    """Point the config file and default journal location at tmp_path."""
    directory = tmp_path / "config"
    with patch.object(config, "_CONFIG_DIR", directory), \
            patch.object(config, "_CONFIG_FILE", directory / "config.json"), \
            patch.object(config, "_DB_DIR", tmp_path / "data"):
        yield directory


def _write_raw(cfg_dir: Path, text: str) -> None:
    cfg_dir.mkdir(parents=True, exist_ok=True)
    (cfg_dir / "config.json").write_text(text)


class TestReadWrite:
    def test_defaults_without_file(self, cfg_dir: Path) -> None:
        assert config.load_config() == AppConfig()

    def test_written_values_come_back(self, cfg_dir: Path) -> None:
        written = config.save_config(AppConfig(db_path="/srv/journal.db", log_level="INFO"))
        assert written == cfg_dir / "config.json"
        assert config.load_config() == AppConfig(db_path="/srv/journal.db", log_level="INFO")

    @pytest.mark.parametrize(
        "raw",
        ["{not json", '["a", "list"]', '{"log_level": "LOUD"}'],
    )
    def test_unreadable_file_falls_back(self, cfg_dir: Path, raw: str) -> None:
        _write_raw(cfg_dir, raw)
        assert config.load_config() == AppConfig()

    def test_env_override(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("STEADYMIND_CONFIG_DIR", str(tmp_path / "elsewhere"))
        assert config._config_dir() == tmp_path / "elsewhere"


class TestJournalLocation:
    def test_default_location(self, cfg_dir: Path, tmp_path: Path) -> None:
        location = config.get_db_path()
        assert location == tmp_path / "data" / "steadymind.db"
        assert location.parent.is_dir()

    def test_custom_file(self, cfg_dir: Path, tmp_path: Path) -> None:
        target = tmp_path / "nested" / "mine.db"
        assert config.set_db_path(str(target)).db_path == str(target)
        assert config.get_db_path() == target
        assert target.parent.is_dir()

    def test_directory_gets_default_name(self, cfg_dir: Path, tmp_path: Path) -> None:
        folder = tmp_path / "journal"
        folder.mkdir()
        assert config.set_db_path(str(folder)).db_path == str(folder / "steadymind.db")

    def test_reset_keeps_log_level(self, cfg_dir: Path, tmp_path: Path) -> None:
        config.set_log_level("error")
        config.set_db_path(str(tmp_path / "mine.db"))
        reset = config.reset_db_path()
        assert reset.db_path is None
        assert reset.log_level == "ERROR"


class TestLogLevel:
    def test_case_insensitive(self, cfg_dir: Path) -> None:
        assert config.set_log_level("debug").log_level == "DEBUG"
        assert config.load_config().log_level == "DEBUG"

    def test_unknown_level_not_saved(self, cfg_dir: Path) -> None:
        with pytest.raises(ValueError, match="unknown log level"):
            config.set_log_level("chatty")
        assert not (cfg_dir / "config.json").exists()
