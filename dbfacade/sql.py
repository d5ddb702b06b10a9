"""SQL text builders for the facade.

Keep functions pure and focused, so the facade avoids assembling SQL strings
inline. Table and column names are interpolated verbatim: callers must pass
trusted identifiers unless they run them through check_identifier() first.
"""
from __future__ import annotations

import re
from typing import Iterable, Mapping

_IDENTIFIER_RE = re.compile(r"[A-Za-z_][A-Za-z0-9_]*")


def check_identifier(name: str) -> str:
    """Raise ValueError unless name is a plain SQL identifier."""
    if not isinstance(name, str) or not _IDENTIFIER_RE.fullmatch(name):
        raise ValueError(f"Unsafe SQL identifier: {name!r}")
    return name


def create_table_sql(table: str, columns: Mapping[str, str]) -> str:
    defs = [f"{name} {col_type}" for name, col_type in columns.items()]
    return f"CREATE TABLE IF NOT EXISTS {table} ({', '.join(defs)})"


def drop_table_sql(table: str) -> str:
    return f"DROP TABLE IF EXISTS {table}"


def insert_sql(table: str, columns: Iterable[str]) -> str:
    cols = list(columns)
    placeholders = ", ".join(f":{c}" for c in cols)
    return f"INSERT INTO {table} ({', '.join(cols)}) VALUES ({placeholders})"


def update_sql(table: str, columns: Iterable[str], where: str) -> str:
    assignments = ", ".join(f"{c} = :{c}" for c in columns)
    return f"UPDATE {table} SET {assignments} WHERE {where}"


def delete_sql(table: str, where: str) -> str:
    return f"DELETE FROM {table} WHERE {where}"


def select_sql(
    table: str,
    where: str | None = None,
    columns: str | Iterable[str] = "*",
    order_by: str | None = None,
    limit: int | None = None,
) -> str:
    """
    Each optional clause is appended only when its argument is truthy.
    limit=0 therefore means "no LIMIT clause", not "zero rows".
    """
    if not isinstance(columns, str):
        columns = ", ".join(columns)
    sql = f"SELECT {columns} FROM {table}"
    if where:
        sql += f" WHERE {where}"
    if order_by:
        sql += f" ORDER BY {order_by}"
    if limit:
        sql += f" LIMIT {int(limit)}"
    return sql


def merge_bindings(*groups: Mapping[str, object] | None) -> dict[str, object]:
    """
    Merge placeholder -> value mappings in bind order; a later group wins on
    key collision. Keys may carry a leading ':' (PDO style), it is stripped.
    """
    params: dict[str, object] = {}
    for group in groups:
        if not group:
            continue
        for key, value in group.items():
            params[str(key).lstrip(":")] = value
    return params
