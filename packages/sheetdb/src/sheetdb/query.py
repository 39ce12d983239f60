"""Read-only query helpers returning pandas DataFrames."""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

import pandas as pd

from sheetdb.backends.sqlite import SQLiteStore
from sheetdb.errors import StorageError


def read_query(
    store: SQLiteStore, statement: str, params: Sequence[Any] = ()
) -> pd.DataFrame:
    """Run *statement* against *store* and return the result as a DataFrame.

    Raises
    ------
    StorageError
        If the query fails.
    """
    try:
        return pd.read_sql_query(statement, store.connection, params=tuple(params))
    except (pd.errors.DatabaseError, ValueError) as exc:
        raise StorageError(f"Query failed: {exc}", stage="query") from exc


def format_frame(df: pd.DataFrame) -> str:
    """Render a query result as a plain-text table for terminal output."""
    if df.empty:
        return "(no rows)"
    return df.to_string(index=False)
