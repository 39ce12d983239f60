"""Table schema generation and SQL rendering.

Maps resolved columns to SQLite storage types and renders the DROP, CREATE
and INSERT statements used by the loader and the row importer.  Identifiers
are always double-quoted so headers with spaces or reserved words are safe.
"""

from __future__ import annotations

from collections.abc import Sequence

from sheetdb.errors import SchemaError
from sheetdb.models import Column, ColumnFormat, SchemaColumn

TEXT = "TEXT"
REAL = "REAL"
INTEGER = "INTEGER"


def quote_identifier(name: str) -> str:
    """Quote *name* as an SQL identifier, doubling embedded double quotes.

    Raises
    ------
    SchemaError
        If *name* is empty or contains a NUL character.
    """
    if not name:
        raise SchemaError("Column or table name must not be empty.", stage="schema")
    if "\x00" in name:
        raise SchemaError(
            f"Name {name!r} contains a NUL character.",
            stage="schema",
            column_name=name.replace("\x00", ""),
        )
    return '"' + name.replace('"', '""') + '"'


def storage_type(fmt: ColumnFormat, number_storage_type: str = REAL) -> str:
    """Return the SQLite storage type for a column format.

    FLOAT is ``REAL``; NUMBER uses *number_storage_type* (``REAL`` unless
    configured as ``INTEGER``); TEXT and DATE are ``TEXT``.
    """
    if fmt is ColumnFormat.FLOAT:
        return REAL
    if fmt is ColumnFormat.NUMBER:
        return number_storage_type
    return TEXT


def build_schema(
    columns: Sequence[Column], number_storage_type: str = REAL
) -> list[SchemaColumn]:
    """Derive one ``SchemaColumn`` per column, preserving order."""
    schema = []
    for col in columns:
        quote_identifier(col.name)
        schema.append(
            SchemaColumn(
                name=col.name,
                storage_type=storage_type(col.format, number_storage_type),
            )
        )
    return schema


def render_drop_table(table_name: str) -> str:
    return f"DROP TABLE IF EXISTS {quote_identifier(table_name)}"


def render_create_table(table_name: str, schema: Sequence[SchemaColumn]) -> str:
    """Render ``CREATE TABLE`` for *schema*.

    Raises
    ------
    SchemaError
        If *schema* is empty or a name cannot be quoted.
    """
    if not schema:
        raise SchemaError(
            f"Table '{table_name}' must have at least one column.", stage="schema"
        )
    column_sql = ", ".join(
        f"{quote_identifier(col.name)} {col.storage_type}" for col in schema
    )
    return f"CREATE TABLE {quote_identifier(table_name)} ({column_sql})"


def render_insert(table_name: str, schema: Sequence[SchemaColumn]) -> str:
    """Render a parameterised ``INSERT`` with one ``?`` placeholder per column."""
    fields = ", ".join(quote_identifier(col.name) for col in schema)
    placeholders = ", ".join("?" for _ in schema)
    return f"INSERT INTO {quote_identifier(table_name)} ({fields}) VALUES ({placeholders})"
