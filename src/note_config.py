"""Startup configuration via environment variables.

- HOME: the database lives at ``$HOME/.notes_db``
- NOTES_DB_PATH: explicit database path (takes precedence over HOME)
- NOTES_DB_FORMAT: ``legacy`` (default, binary record) or ``json``
- NOTES_LOG_LEVEL: logging level name (default WARNING)

Resolved once at startup; the path is never re-resolved while running.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Optional

from note_codec import DB_FORMATS, DbFormat
from note_errors import ConfigError, StorageLocationUnavailable

DB_FILENAME = ".notes_db"
DEFAULT_LOG_LEVEL = "WARNING"


@dataclass(frozen=True)
class NotesConfig:
    db_path: Path
    db_format: DbFormat = "legacy"
    log_level: str = DEFAULT_LOG_LEVEL


def resolve_db_path(environ: Mapping[str, str]) -> Path:
    """Return the database path from the environment.

    Raises:
        StorageLocationUnavailable: Neither NOTES_DB_PATH nor HOME is set.
    """
    override = environ.get("NOTES_DB_PATH", "").strip()
    if override:
        return Path(override).expanduser()
    home = environ.get("HOME", "").strip()
    if not home:
        raise StorageLocationUnavailable(
            "HOME is not set; cannot locate the notes database "
            "(set HOME or NOTES_DB_PATH)"
        )
    return Path(home) / DB_FILENAME


def load_config(environ: Optional[Mapping[str, str]] = None) -> NotesConfig:
    env = os.environ if environ is None else environ

    db_format = env.get("NOTES_DB_FORMAT", "legacy").strip().lower() or "legacy"
    if db_format not in DB_FORMATS:
        raise ConfigError(
            f"NOTES_DB_FORMAT must be one of {', '.join(DB_FORMATS)}, got {db_format!r}"
        )

    log_level = env.get("NOTES_LOG_LEVEL", DEFAULT_LOG_LEVEL).strip().upper() or DEFAULT_LOG_LEVEL
    if not isinstance(logging.getLevelName(log_level), int):
        raise ConfigError(f"NOTES_LOG_LEVEL {log_level!r} is not a logging level")

    return NotesConfig(
        db_path=resolve_db_path(env),
        db_format=db_format,  # type: ignore[arg-type]
        log_level=log_level,
    )
