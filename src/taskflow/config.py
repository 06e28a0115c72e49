# src/taskflow/config.py

"""Centralized settings loaded from environment variables (+ optional .env).

Design goals:
- One Settings object for the whole app.
- No secrets required at import time (credentials are checked when the
  record store client is built).
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

ENV_PREFIX = "TASKFLOW"


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


def _first_env(*names: str, default: str | None = None) -> str | None:
    for n in names:
        v = os.getenv(n)
        if v is not None and v.strip() != "":
            return v
    return default


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "y", "on"}


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
    data_dir: Path

    # ---- Record store ----
    project_id: str | None
    public_key: str | None
    api_base_url: str
    connect_timeout_seconds: float
    read_timeout_seconds: float
    task_table: str
    category_table: str

    # ---- Behaviour ----
    default_category: str | None
    offline: bool

    @staticmethod
    def from_env() -> "Settings":
        app_name = _env(_k("APP_NAME"), "TaskFlow") or "TaskFlow"
        log_level = _env(_k("LOG_LEVEL"), "INFO")
        data_dir = _env_path(_k("DATA_DIR"), Path(".local/taskflow"))

        # Accept the bare names too, the hosted backend documents them that way.
        project_id = _first_env(_k("PROJECT_ID"), "PROJECT_ID", default=None)
        public_key = _first_env(_k("PUBLIC_KEY"), "PUBLIC_KEY", default=None)
        api_base_url = _env(_k("API_BASE_URL"), "https://api.records.example.com/v1")

        connect_timeout = _env_float(_k("CONNECT_TIMEOUT_SECONDS"), 5.0)
        read_timeout = _env_float(_k("READ_TIMEOUT_SECONDS"), 20.0)

        task_table = _env(_k("TASK_TABLE"), "task").strip() or "task"
        category_table = _env(_k("CATEGORY_TABLE"), "category").strip() or "category"

        default_category = (_env(_k("DEFAULT_CATEGORY"), "").strip() or None)
        offline = _env_bool(_k("OFFLINE"), False)

        return Settings(
            app_name=app_name,
            log_level=log_level,
            data_dir=data_dir,
            project_id=project_id.strip() if project_id else None,
            public_key=public_key.strip() if public_key else None,
            api_base_url=api_base_url,
            connect_timeout_seconds=connect_timeout,
            read_timeout_seconds=max(read_timeout, connect_timeout),
            task_table=task_table,
            category_table=category_table,
            default_category=default_category,
            offline=offline,
        )


SETTINGS = Settings.from_env()


def get_settings() -> Settings:
    return SETTINGS
