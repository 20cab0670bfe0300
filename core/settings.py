"""Centralized application configuration."""
from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Optional
import logging
import os
import sys


def get_default_data_dir(
    app_name: str,
    *,
    platform: Optional[str] = None,
    env: Optional[Mapping[str, str]] = None,
    home: Optional[Path] = None,
) -> Path:
    """Return an OS-specific user data directory for ``app_name``."""

    platform_id = (platform or sys.platform).lower()
    environ = dict(env or os.environ)
    home_dir = Path(home or Path.home())
    sanitized = app_name.strip() or "app"
    sanitized = sanitized.replace("/", "-").replace("\\", "-")

    if platform_id.startswith("win"):
        base = Path(environ.get("APPDATA") or home_dir / "AppData" / "Roaming")
    elif platform_id == "darwin":
        base = Path(environ.get("APPDATA") or home_dir / "Library" / "Application Support")
    else:
        base = Path(environ.get("XDG_DATA_HOME") or home_dir / ".local" / "share")

    return (base.expanduser() / sanitized)


def resolve_data_dir(app_name: str, env: Optional[Mapping[str, str]] = None) -> Path:
    """``TASKDESK_DATA_DIR`` wins over the per-user default."""

    environ = dict(env or os.environ)
    override = environ.get("TASKDESK_DATA_DIR", "").strip()
    if override:
        return Path(override).expanduser()
    return get_default_data_dir(app_name, env=environ)


APP_NAME = "TaskDesk"


DATA_DIR = resolve_data_dir(APP_NAME)
LOG_DIR = DATA_DIR / "logs"
EXPORT_DIR = DATA_DIR / "exports"

for _dir in (DATA_DIR, LOG_DIR, EXPORT_DIR):
    _dir.mkdir(parents=True, exist_ok=True)


DB_PATH = DATA_DIR / "tasks.db"
LOG_PATH = LOG_DIR / "taskdesk.log"


@dataclass(frozen=True)
class ThemeColors:
    surface_bg: str = "#F1F5F9"
    text_subtle: str = "#6B7280"
    error: str = "#EF4444"
    success: str = "#10B981"
    warning: str = "#F59E0B"
    info: str = "#3B82F6"
    completed_text: str = "#9CA3AF"


@dataclass(frozen=True)
class UISettings:
    app_title: str = APP_NAME
    theme_mode: str = "system"
    color_scheme_seed: str = "#6366F1"
    window_min_width: int = 900
    window_min_height: int = 600
    side_panel_width: int = 360
    theme: ThemeColors = ThemeColors()


UI = UISettings()


@dataclass(frozen=True)
class ViewSettings:
    title_max_length: int = 200
    description_max_length: int = 1000
    notification_ttl_sec: float = 5.0
    csv_timestamp_format: str = "%Y-%m-%d %H:%M:%S"
    display_timestamp_format: str = "%b %d, %Y %H:%M"
    backup_version: str = "1.0"


VIEW = ViewSettings()


@dataclass(frozen=True)
class LoggingSettings:
    enabled: bool = True
    path: Path = LOG_PATH
    level: int = logging.INFO
    max_bytes: int = 1_000_000
    backup_count: int = 3


LOGGING = LoggingSettings()


__all__ = [
    "APP_NAME",
    "DATA_DIR",
    "LOG_DIR",
    "EXPORT_DIR",
    "DB_PATH",
    "LOG_PATH",
    "UI",
    "VIEW",
    "LOGGING",
    "get_default_data_dir",
    "resolve_data_dir",
]
