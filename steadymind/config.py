"""Where steadymind keeps its journal and how loudly it logs."""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path

from pydantic import ValidationError

from steadymind.models import AppConfig

log = logging.getLogger(__name__)

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR")


def _config_dir() -> Path:
    """Config directory; ``STEADYMIND_CONFIG_DIR`` overrides the default."""
    override = os.environ.get("STEADYMIND_CONFIG_DIR")
    if override:
        return Path(override).expanduser()
    return Path.home() / ".config" / "steadymind"


_CONFIG_DIR = _config_dir()
_CONFIG_FILE = _CONFIG_DIR / "config.json"
_DB_DIR = Path.home() / ".local" / "share" / "steadymind"
_DB_NAME = "steadymind.db"


def load_config() -> AppConfig:
    """Read ``config.json``; a missing or unreadable file yields ``AppConfig()``."""
    if _CONFIG_FILE.exists():
        try:
            data = json.loads(_CONFIG_FILE.read_text())
            return AppConfig(**data)
        except (json.JSONDecodeError, TypeError, ValidationError) as exc:
            log.warning("Ignoring unreadable config %s: %s", _CONFIG_FILE, exc)
    return AppConfig()


def save_config(config: AppConfig) -> Path:
    """Persist *config* as JSON and return the file written."""
    _CONFIG_DIR.mkdir(parents=True, exist_ok=True)
    _CONFIG_FILE.write_text(config.model_dump_json(indent=2))
    return _CONFIG_FILE


def get_db_path() -> Path:
    """Journal database file, creating its parent directory if needed."""
    config = load_config()
    if config.db_path is not None:
        p = Path(config.db_path)
        p.parent.mkdir(parents=True, exist_ok=True)
        return p
    _DB_DIR.mkdir(parents=True, exist_ok=True)
    return _DB_DIR / _DB_NAME


def set_db_path(path: str) -> AppConfig:
    """Point the journal at *path* (a file, or a directory to hold steadymind.db)."""
    resolved = Path(path).expanduser().resolve()
    # directory given: keep the journal inside it
    if resolved.is_dir():
        resolved = resolved / _DB_NAME
    resolved.parent.mkdir(parents=True, exist_ok=True)
    config = load_config()
    config.db_path = str(resolved)
    save_config(config)
    return config


def reset_db_path() -> AppConfig:
    """Forget any custom journal location."""
    config = load_config()
    config.db_path = None
    save_config(config)
    return config


def set_log_level(level: str) -> AppConfig:
    """Persist the default log level. Raises ValueError for unknown levels."""
    level = level.upper()
    if level not in LOG_LEVELS:
        raise ValueError(f"unknown log level {level!r}; use one of {', '.join(LOG_LEVELS)}")
    config = load_config()
    config.log_level = level
    save_config(config)
    return config
