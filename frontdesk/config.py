"""Runtime configuration for the front-desk tools.

Paths default to a ``data`` directory at the project root and can be
overridden through environment variables.
"""
from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Optional

DEFAULT_SNAPSHOT_NAME = "checkins.json"
DEFAULT_HISTORY_NAME = "checkins_history.txt"
DEFAULT_RECORDS_NAME = "records.json"
DEFAULT_LOG_LEVEL = "INFO"


def _project_root() -> Path:
    """Return the project root directory."""

    return Path(__file__).resolve().parents[1]


@dataclass(frozen=True)
class Settings:
    """Resolved file locations and logging level."""

    data_dir: Path
    snapshot_file: Path
    history_file: Path
    records_file: Path
    log_level: str = DEFAULT_LOG_LEVEL


def load_settings(environ: Optional[Mapping[str, str]] = None) -> Settings:
    """Build :class:`Settings` from ``environ`` (defaults to ``os.environ``)."""

    env = os.environ if environ is None else environ

    override = env.get("FRONTDESK_DATA_DIR")
    data_dir = Path(override) if override else _project_root() / "data"

    def _file(key: str, default_name: str) -> Path:
        value = env.get(key)
        return Path(value) if value else data_dir / default_name

    return Settings(
        data_dir=data_dir,
        snapshot_file=_file("FRONTDESK_SNAPSHOT_FILE", DEFAULT_SNAPSHOT_NAME),
        history_file=_file("FRONTDESK_HISTORY_FILE", DEFAULT_HISTORY_NAME),
        records_file=_file("FRONTDESK_RECORDS_FILE", DEFAULT_RECORDS_NAME),
        log_level=(env.get("FRONTDESK_LOG_LEVEL") or DEFAULT_LOG_LEVEL).upper(),
    )
