"""Builds the SQL statements used by a table handle.

Every statement uses positional ``?`` placeholders. Identifiers are
interpolated into the text, so they are checked against a plain identifier
pattern and double-quoted, which also lets keywords such as ``order`` be
used as column names.
"""

from collections.abc import Mapping
from typing import Any

from sqlitehelper.errors import InvalidInputError
from sqlitehelper.models.base import ensure_identifier
from sqlitehelper.models.query import QueryDescriptor
from sqlitehelper.models.row_intent import RowIntent
from sqlitehelper.services.row_codec import encode_value


def identifier(value: str) -> str:
    """Validate a table or column name and quote it, raising InvalidInputError."""
    try:
        return f'"{ensure_identifier(value, "identifier")}"'
    except ValueError as exc:
        raise InvalidInputError(str(exc)) from exc


def bind_value(value: Any) -> Any:
    """Encode a value for binding, raising InvalidInputError if it cannot be stored."""
    try:
        return encode_value(value)
    except (TypeError, ValueError) as exc:
        raise InvalidInputError(f"value cannot be serialized to JSON: {exc}") from exc


def build_query(table_name: str, intent: RowIntent) -> QueryDescriptor:
    """Build the INSERT or UPDATE statement for a row intent.

    Args:
        table_name: Target table.
        intent: Columns to write and, for updates, the equality match.

    Returns:
        QueryDescriptor with SET/INSERT values and WHERE values kept apart.
    """
    table = identifier(table_name)
    names = [identifier(name) for name in intent.columns]
    values = tuple(bind_value(value) for value in intent.columns.values())

    if intent.where is None:
        placeholders = ", ".join("?" for _ in names)
        statement = f"INSERT INTO {table} ({', '.join(names)}) VALUES ({placeholders})"
        return QueryDescriptor(statement=statement, values=values)

    if not intent.where:
        raise InvalidInputError("where must contain at least one column; use no where clause to insert")

    set_clause = ", ".join(f"{name} = ?" for name in names)
    where_clause = " AND ".join(f"{identifier(name)} = ?" for name in intent.where)
    where_values = tuple(bind_value(value) for value in intent.where.values())
    statement = f"UPDATE {table} SET {set_clause} WHERE {where_clause}"
    return QueryDescriptor(statement=statement, values=values, where_values=where_values)


def build_create_table(table_name: str, columns: Mapping[str, str]) -> str:
    if not columns:
        raise InvalidInputError("at least one column is required to create a table")
    definitions = ", ".join(f"{identifier(name)} {declared}" for name, declared in columns.items())
    return f"CREATE TABLE {identifier(table_name)} ({definitions})"


def build_select(table_name: str, column_name: str) -> str:
    return f"SELECT * FROM {identifier(table_name)} WHERE {identifier(column_name)} = ?"


def build_select_all(table_name: str) -> str:
    return f"SELECT * FROM {identifier(table_name)}"


def build_select_column(table_name: str, column_name: str) -> str:
    return f"SELECT {identifier(column_name)} FROM {identifier(table_name)}"


def build_delete(table_name: str, column_name: str) -> str:
    return f"DELETE FROM {identifier(table_name)} WHERE {identifier(column_name)} = ?"
