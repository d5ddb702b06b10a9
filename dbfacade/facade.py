"""SQLite data-access facade.

Every public operation reports failure as ``False`` and writes the reason to
the error log; driver exceptions never reach the caller. Table, column, WHERE
and ORDER BY text are interpolated into SQL verbatim, only values are bound
as parameters.
"""
from __future__ import annotations

import logging
import sqlite3
from typing import Any, Iterable, Literal, Mapping, Optional

from . import sql
from .db import DEFAULT_TIMEOUT, DatabaseSettings, load_settings, open_connection
from .logs import ErrorLog
from .validation import first_failure

logger = logging.getLogger(__name__)

Row = dict[str, Any]


class Database:
    def __init__(
        self,
        filename: str,
        log_file: Optional[str] = None,
        *,
        timeout: float = DEFAULT_TIMEOUT,
        foreign_keys: bool = True,
        strict_identifiers: bool = False,
    ):
        self.filename = filename
        self.timeout = timeout
        self.foreign_keys = foreign_keys
        self.strict_identifiers = strict_identifiers
        self._log = ErrorLog(log_file)
        self._conn: Optional[sqlite3.Connection] = None
        self.connect()

    @classmethod
    def from_settings(cls, settings: Optional[DatabaseSettings] = None) -> "Database":
        s = settings or load_settings()
        return cls(
            s.db_path,
            s.log_file,
            timeout=s.timeout,
            foreign_keys=s.foreign_keys,
            strict_identifiers=s.strict_identifiers,
        )

    @property
    def log_file(self) -> Optional[str]:
        return self._log.log_file

    # ---------- connection lifecycle ----------

    @property
    def connected(self) -> bool:
        return self._conn is not None

    @property
    def in_transaction(self) -> bool:
        return self._conn is not None and self._conn.in_transaction

    def connect(self) -> bool:
        """Open the store. No-op when already connected."""
        if self._conn is not None:
            return True
        try:
            self._conn = open_connection(self.filename, self.timeout, self.foreign_keys)
            return True
        except sqlite3.Error as e:
            self.log_error(f"Database connection failed: {e}")
            return False

    def disconnect(self) -> None:
        conn, self._conn = self._conn, None
        if conn is not None:
            conn.close()

    def close(self) -> None:
        """Disconnect and release the error log handler."""
        self.disconnect()
        self._log.close()

    def log_error(self, message: str) -> None:
        self._log.write(message)

    # ---------- table management ----------

    def create_table(self, table_name: str, columns: Mapping[str, str]) -> bool:
        try:
            self._check_identifiers(table_name, columns)
            self._execute(sql.create_table_sql(table_name, columns))
            return True
        except (sqlite3.Error, ValueError) as e:
            self.log_error(f"Failed to create table '{table_name}': {e}")
            return False

    def drop_table(self, table_name: str) -> bool:
        try:
            self._check_identifiers(table_name)
            self._execute(sql.drop_table_sql(table_name))
            return True
        except (sqlite3.Error, ValueError) as e:
            self.log_error(f"Failed to drop table '{table_name}': {e}")
            return False

    # ---------- validation ----------

    def validate_data(self, data: Mapping[str, Any], rules: Optional[Mapping[str, str]] = None) -> bool:
        failure = first_failure(data, rules)
        if failure is not None:
            self.log_error(failure.message)
            return False
        return True

    # ---------- CRUD ----------

    def set(
        self,
        table_name: str,
        data: Mapping[str, Any],
        rules: Optional[Mapping[str, str]] = None,
    ) -> bool:
        """Insert one row. Returns False without touching the store when validation fails."""
        if not self.validate_data(data, rules):
            return False
        try:
            self._check_identifiers(table_name, data)
            self._execute(sql.insert_sql(table_name, data.keys()), sql.merge_bindings(data))
            return True
        except (sqlite3.Error, ValueError) as e:
            self.log_error(f"Failed to insert into table '{table_name}': {e}")
            return False

    def update(
        self,
        table_name: str,
        data: Mapping[str, Any],
        where: str,
        bindings: Optional[Mapping[str, Any]] = None,
        rules: Optional[Mapping[str, str]] = None,
    ) -> bool:
        """
        Update rows matching `where`. Data values are bound first, then
        `bindings`; a binding whose key equals a column name replaces that
        column's value. Matching zero rows is not an error.
        """
        if not self.validate_data(data, rules):
            return False
        try:
            self._check_identifiers(table_name, data)
            self._execute(sql.update_sql(table_name, data.keys(), where), sql.merge_bindings(data, bindings))
            return True
        except (sqlite3.Error, ValueError) as e:
            self.log_error(f"Failed to update table '{table_name}': {e}")
            return False

    def delete(self, table_name: str, where: str, bindings: Optional[Mapping[str, Any]] = None) -> bool:
        try:
            self._check_identifiers(table_name)
            self._execute(sql.delete_sql(table_name, where), sql.merge_bindings(bindings))
            return True
        except (sqlite3.Error, ValueError) as e:
            self.log_error(f"Failed to delete from table '{table_name}': {e}")
            return False

    def get(
        self,
        table_name: str,
        where: Optional[str] = None,
        bindings: Optional[Mapping[str, Any]] = None,
        columns: str | Iterable[str] = "*",
        order_by: Optional[str] = None,
        limit: Optional[int] = None,
    ) -> list[Row] | Literal[False]:
        """
        Select rows as a list of column -> value dicts (possibly empty), or
        False on error. limit=0 is treated as no limit.
        """
        try:
            if not isinstance(columns, str):
                columns = list(columns)
                self._check_identifiers(table_name, columns)
            else:
                self._check_identifiers(table_name)
            statement = sql.select_sql(table_name, where, columns, order_by, limit)
            cur = self._execute(statement, sql.merge_bindings(bindings))
            return [dict(r) for r in cur.fetchall()]
        except (sqlite3.Error, ValueError) as e:
            self.log_error(f"Failed to select from table '{table_name}': {e}")
            return False

    # ---------- transactions ----------

    def begin_transaction(self) -> bool:
        try:
            self._execute("BEGIN")
            return True
        except sqlite3.Error as e:
            self.log_error(f"Failed to begin transaction: {e}")
            return False

    def commit_transaction(self) -> bool:
        try:
            self._execute("COMMIT")
            return True
        except sqlite3.Error as e:
            self.log_error(f"Failed to commit transaction: {e}")
            return False

    def rollback_transaction(self) -> bool:
        try:
            self._execute("ROLLBACK")
            return True
        except sqlite3.Error as e:
            self.log_error(f"Failed to roll back transaction: {e}")
            return False

    # ---------- internals ----------

    def _execute(self, statement: str, params: Mapping[str, Any] | None = None) -> sqlite3.Cursor:
        if self._conn is None:
            raise sqlite3.ProgrammingError("Cannot operate on a closed database.")
        logger.debug("sql: %s params=%s", statement, params)
        try:
            return self._conn.execute(statement, params or {})
        except OverflowError as e:
            # ints outside the signed 64-bit range cannot be bound
            raise sqlite3.ProgrammingError(str(e)) from e

    def _check_identifiers(self, table_name: str, columns: Iterable[str] = ()) -> None:
        if not self.strict_identifiers:
            return
        sql.check_identifier(table_name)
        for name in columns:
            sql.check_identifier(name)
