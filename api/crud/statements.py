"""
SQL statement builders for generated CRUD handlers.

This is the only module that interpolates identifiers into SQL text. Table and
column names come from the catalog snapshot (for INSERT/UPDATE the column
names come from the request body and are rejected by the database when they do
not exist). Values are never interpolated; they are always bound as $n
parameters.
"""

from __future__ import annotations

from typing import Any, NamedTuple, Sequence

from core.tables import TableDescriptor


class Statement(NamedTuple):
    text: str
    params: tuple[Any, ...]


def _placeholders(count: int, *, start: int = 1) -> list[str]:
    return [f"${idx}" for idx in range(start, start + count)]


def _where(keys: Sequence[str], *, start: int = 1) -> str:
    return " AND ".join(f"{key} = {ph}" for key, ph in zip(keys, _placeholders(len(keys), start=start)))


def select_all(table: TableDescriptor) -> Statement:
    return Statement(f"SELECT * FROM {table.table_name}", ())


def select_one(table: TableDescriptor, key_values: Sequence[Any]) -> Statement:
    where = _where(table.primary_key)
    return Statement(
        f"SELECT * FROM {table.table_name} WHERE {where} LIMIT 1",
        tuple(key_values),
    )


def insert(table: TableDescriptor, columns: Sequence[str], values: Sequence[Any]) -> Statement:
    if not columns:
        return Statement(f"INSERT INTO {table.table_name} DEFAULT VALUES RETURNING *", ())
    cols = ", ".join(columns)
    placeholders = ", ".join(_placeholders(len(columns)))
    return Statement(
        f"INSERT INTO {table.table_name} ({cols}) VALUES ({placeholders}) RETURNING *",
        tuple(values),
    )


def update(
    table: TableDescriptor,
    columns: Sequence[str],
    values: Sequence[Any],
    key_values: Sequence[Any],
) -> Statement:
    if not columns:
        raise ValueError("UPDATE requires at least one column.")
    assignments = ", ".join(f"{col} = {ph}" for col, ph in zip(columns, _placeholders(len(columns))))
    where = _where(table.primary_key, start=len(columns) + 1)
    return Statement(
        f"UPDATE {table.table_name} SET {assignments} WHERE {where} RETURNING *",
        tuple(values) + tuple(key_values),
    )


def delete(table: TableDescriptor, key_values: Sequence[Any]) -> Statement:
    where = _where(table.primary_key)
    return Statement(f"DELETE FROM {table.table_name} WHERE {where}", tuple(key_values))
