# src/taskdeck/config.py

"""Centralized settings loaded from environment variables (+ optional .env).

Design goals:
- One Settings object for the whole app (normal "settings layer").
- No secrets required at import time.
- Legacy module-level constants are exported for simple scripts.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

ENV_PREFIX = "TASKDECK"


def _k(suffix: str) -> str:
    """Build env var name with the project prefix."""
    return f"{ENV_PREFIX}_{suffix}"


def _load_dotenv_if_available() -> None:
    """Load .env locally if python-dotenv is installed. Safe no-op otherwise."""
    try:
        from dotenv import load_dotenv  # type: ignore
    except Exception:
        return
    load_dotenv(override=False)


_load_dotenv_if_available()


def _env(name: str, default: str = "") -> str:
    v = os.getenv(name)
    return default if v is None else v


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "y", "on"}


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return float(raw)
    except ValueError:
        return default


def _env_path(name: str, default: Path) -> Path:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    return Path(raw).expanduser()


@dataclass(frozen=True, slots=True)
class Settings:
    # ---- App / logging ----
    app_name: str
    log_level: str

    # ---- Connector flags ----
    console_enabled: bool
    reminders_enabled: bool

    # ---- Local data paths (ignored by git) ----
    data_dir: Path
    db_path: Path
    storage_key: str

    # ---- History ----
    history_limit: int

    # ---- Reminders (interval and window are coupled) ----
    reminder_interval_seconds: float
    reminder_lead_seconds: float
    reminder_grace_seconds: float

    @staticmethod
    def from_env() -> "Settings":
        app_name = _env(_k("APP_NAME"), "taskdeck").strip() or "taskdeck"
        log_level = _env(_k("LOG_LEVEL"), "INFO")

        console_enabled = _env_bool(_k("CONSOLE_ENABLED"), True)
        reminders_enabled = _env_bool(_k("REMINDERS_ENABLED"), True)

        data_dir = _env_path(_k("DATA_DIR"), Path(".local/taskdeck"))
        db_path = _env_path(_k("DB_PATH"), data_dir / "taskdeck.sqlite3")
        storage_key = _env(_k("STORAGE_KEY"), "todo-tasks").strip() or "todo-tasks"

        history_limit = max(0, _env_int(_k("HISTORY_LIMIT"), 0))

        reminder_interval_seconds = _env_float(_k("REMINDER_INTERVAL_SECONDS"), 10.0)
        reminder_lead_seconds = _env_float(_k("REMINDER_LEAD_SECONDS"), 30.0)
        reminder_grace_seconds = _env_float(_k("REMINDER_GRACE_SECONDS"), 60.0)

        return Settings(
            app_name=app_name,
            log_level=log_level,
            console_enabled=console_enabled,
            reminders_enabled=reminders_enabled,
            data_dir=data_dir,
            db_path=db_path,
            storage_key=storage_key,
            history_limit=history_limit,
            reminder_interval_seconds=reminder_interval_seconds,
            reminder_lead_seconds=reminder_lead_seconds,
            reminder_grace_seconds=reminder_grace_seconds,
        )


SETTINGS = Settings.from_env()

# ---- Optional local overrides (never committed) ----
# Prefer .env; use config_local.py only for safe overrides.
try:
    import config_local as _config_local  # type: ignore

    # Simple overrides for selected legacy names. Keep it explicit.
    if hasattr(_config_local, "CONSOLE_ENABLED"):
        object.__setattr__(SETTINGS, "console_enabled", bool(_config_local.CONSOLE_ENABLED))  # type: ignore[misc]
    if hasattr(_config_local, "REMINDERS_ENABLED"):
        object.__setattr__(SETTINGS, "reminders_enabled", bool(_config_local.REMINDERS_ENABLED))  # type: ignore[misc]
except Exception:
    pass


def get_settings() -> Settings:
    return SETTINGS


# --------------------------------------------------------------------------------------
# Legacy module-level constants.
# --------------------------------------------------------------------------------------

APP_NAME = SETTINGS.app_name
LOG_LEVEL = SETTINGS.log_level

CONSOLE_ENABLED = SETTINGS.console_enabled
REMINDERS_ENABLED = SETTINGS.reminders_enabled

DATA_DIR = SETTINGS.data_dir
DB_PATH = SETTINGS.db_path
STORAGE_KEY = SETTINGS.storage_key

HISTORY_LIMIT = SETTINGS.history_limit

REMINDER_INTERVAL_SECONDS = SETTINGS.reminder_interval_seconds
REMINDER_LEAD_SECONDS = SETTINGS.reminder_lead_seconds
REMINDER_GRACE_SECONDS = SETTINGS.reminder_grace_seconds
