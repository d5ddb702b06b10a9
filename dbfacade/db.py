from __future__ import annotations

# dbfacade/db.py
import os
import sqlite3
from typing import Optional

import yaml
from pydantic import BaseModel

# Store path resolution order:
# 1) env DBFACADE_DB_PATH (highest priority)
# 2) config.yaml test_db_path (when a test run is detected)
# 3) config.yaml db_path
# 4) fallback: ./dbfacade.db
DEFAULT_DB_PATH = "dbfacade.db"
DEFAULT_CONFIG_PATH = "config.yaml"
DEFAULT_TIMEOUT = 5.0

_PATH_KEYS = ("db_path", "test_db_path", "log_file")
_FLAG_KEYS = ("foreign_keys", "strict_identifiers")


class DatabaseSettings(BaseModel):
    db_path: str
    log_file: Optional[str] = None
    timeout: float = DEFAULT_TIMEOUT
    foreign_keys: bool = True
    strict_identifiers: bool = False


def _read_config_yaml(config_path: str | None = None) -> dict:
    cfg_path = config_path or os.environ.get("DBFACADE_CONFIG") or DEFAULT_CONFIG_PATH
    if not os.path.exists(cfg_path):
        return {}
    try:
        with open(cfg_path, "r", encoding="utf-8") as f:
            cfg = yaml.safe_load(f) or {}
    except (OSError, yaml.YAMLError):
        return {}
    if not isinstance(cfg, dict):
        return {}
    out = {}
    for k in _PATH_KEYS:
        v = cfg.get(k)
        if isinstance(v, str) and v.strip():
            out[k] = v.strip()
    for k in _FLAG_KEYS:
        if isinstance(cfg.get(k), bool):
            out[k] = cfg[k]
    timeout = cfg.get("timeout")
    if isinstance(timeout, (int, float)) and not isinstance(timeout, bool) and timeout >= 0:
        out["timeout"] = float(timeout)
    return out


def _is_test_run() -> bool:
    return (os.environ.get("APP_ENV") == "test") or (os.environ.get("PYTEST_CURRENT_TEST") is not None)


def get_db_path(config_path: str | None = None) -> str:
    env_path = os.environ.get("DBFACADE_DB_PATH")
    cfg = _read_config_yaml(config_path)

    if env_path:
        path = env_path
    elif _is_test_run() and cfg.get("test_db_path"):
        path = cfg["test_db_path"]
    elif cfg.get("db_path"):
        path = cfg["db_path"]
    else:
        path = DEFAULT_DB_PATH

    # make sure the parent directory exists
    dirn = os.path.dirname(path) or "."
    os.makedirs(dirn, exist_ok=True)
    return path


def get_log_path(config_path: str | None = None) -> str | None:
    return os.environ.get("DBFACADE_LOG_FILE") or _read_config_yaml(config_path).get("log_file")


def load_settings(config_path: str | None = None) -> DatabaseSettings:
    """
    Resolve facade settings from the environment and config.yaml.
    Only db_path and log_file can be overridden through the environment.
    """
    cfg = _read_config_yaml(config_path)
    values = {k: cfg[k] for k in ("timeout", *_FLAG_KEYS) if k in cfg}
    return DatabaseSettings(
        db_path=get_db_path(config_path),
        log_file=get_log_path(config_path),
        **values,
    )


def open_connection(
    db_path: str,
    timeout: float = DEFAULT_TIMEOUT,
    foreign_keys: bool = True,
) -> sqlite3.Connection:
    """
    Open a SQLite connection in autocommit mode (isolation_level=None), so
    transactions only exist when BEGIN is issued explicitly.
    Row factory is sqlite3.Row. Driver errors propagate to the caller.
    """
    conn = sqlite3.connect(
        db_path,
        timeout=timeout,
        check_same_thread=False,
        isolation_level=None,
    )
    try:
        if foreign_keys:
            conn.execute("PRAGMA foreign_keys = ON;")
        conn.row_factory = sqlite3.Row
    except sqlite3.Error:
        conn.close()
        raise
    return conn
