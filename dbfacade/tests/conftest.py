import os
import sys
import pytest
from pathlib import Path

# Ensure project root on sys.path
_THIS_DIR = Path(__file__).resolve().parent
_PROJECT_ROOT = _THIS_DIR.parent.parent
if str(_PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(_PROJECT_ROOT))

from dbfacade import Database  # noqa: E402


@pytest.fixture(autouse=True)
def _isolated_env(monkeypatch, tmp_path):
    # Never let a developer's env or config.yaml leak into a test
    for key in ("DBFACADE_DB_PATH", "DBFACADE_LOG_FILE", "DBFACADE_CONFIG", "APP_ENV"):
        monkeypatch.delenv(key, raising=False)
    monkeypatch.chdir(tmp_path)
    yield


@pytest.fixture()
def db_path(tmp_path):
    return str(tmp_path / "facade_test.db")


@pytest.fixture()
def log_path(tmp_path):
    return tmp_path / "errors.log"


@pytest.fixture()
def db(db_path, log_path):
    database = Database(db_path, str(log_path))
    yield database
    database.close()


@pytest.fixture()
def users_db(db):
    assert db.create_table("users", {"id": "INTEGER PRIMARY KEY", "email": "TEXT", "age": "INTEGER"})
    return db


def read_log(log_path: Path) -> list[str]:
    if not log_path.exists():
        return []
    return log_path.read_text(encoding="utf-8").splitlines()


@pytest.fixture()
def log_lines(log_path):
    return lambda: read_log(log_path)
