"""SQLite backend for the StructuredStore protocol.

Provides the ``Destination`` descriptor and a concrete store backed by
Python's built-in ``sqlite3`` module.  The connection runs in autocommit
mode; multi-statement atomicity is requested explicitly with
:meth:`SQLiteStore.begin` / :meth:`SQLiteStore.commit`.
"""

from __future__ import annotations

import logging
import sqlite3
from collections.abc import Iterable, Sequence
from typing import Any

from pydantic import BaseModel, ConfigDict, model_validator

from sheetdb.errors import ErrorCode, StorageError

logger = logging.getLogger("sheetdb")

MEMORY = ":memory:"


class Destination(BaseModel):
    """Where the imported table is stored.

    Exactly one form applies:

    * ``path`` set -- a database file on disk;
    * ``shared_name`` set -- a named in-memory database shared by every
      connection in this process that uses the same name (it lives while at
      least one connection stays open);
    * neither -- a private in-memory database owned by a single connection.
    """

    model_config = ConfigDict(frozen=True)

    path: str | None = None
    shared_name: str | None = None

    @model_validator(mode="after")
    def _one_form(self) -> Destination:
        if self.path is not None and self.shared_name is not None:
            raise ValueError("Destination takes either 'path' or 'shared_name', not both")
        return self

    @classmethod
    def file(cls, path: str) -> Destination:
        return cls(path=path)

    @classmethod
    def memory(cls) -> Destination:
        return cls()

    @classmethod
    def shared_memory(cls, name: str) -> Destination:
        return cls(shared_name=name)

    @classmethod
    def parse(cls, value: str | Destination) -> Destination:
        """Build a destination from a path string; ``":memory:"`` means private in-memory."""
        if isinstance(value, Destination):
            return value
        if value == MEMORY:
            return cls.memory()
        return cls.file(value)

    @property
    def is_memory(self) -> bool:
        return self.path is None

    def connect_args(self) -> tuple[str, bool]:
        """Return ``(database, uri)`` arguments for ``sqlite3.connect``."""
        if self.shared_name is not None:
            return f"file:{self.shared_name}?mode=memory&cache=shared", True
        if self.path is not None:
            return self.path, False
        return MEMORY, False


class SQLiteStore:
    """SQLite-backed structured store.

    Satisfies :class:`~sheetdb.protocols.StructuredStore` via structural
    subtyping (no inheritance required).  Usable as a context manager; the
    connection is closed on exit.

    Parameters
    ----------
    destination:
        Where the database lives.  Uses a private in-memory database when
        *None*.
    """

    def __init__(self, destination: Destination | None = None) -> None:
        self._destination = destination or Destination.memory()
        database, uri = self._destination.connect_args()
        try:
            self._conn = sqlite3.connect(database, uri=uri, isolation_level=None)
        except sqlite3.Error as exc:
            raise StorageError(
                f"Failed to connect to SQLite database at {database}: {exc}",
                code=ErrorCode.E_BACKEND_DB_CONNECT,
                stage="open",
            ) from exc

    @property
    def destination(self) -> Destination:
        return self._destination

    @property
    def connection(self) -> sqlite3.Connection:
        """The underlying ``sqlite3`` connection, for read-only consumers such as pandas."""
        return self._conn

    # ------------------------------------------------------------------
    # Protocol methods
    # ------------------------------------------------------------------

    def execute(self, statement: str, params: Sequence[Any] = ()) -> None:
        """Execute a single statement.

        Raises
        ------
        StorageError
            If SQLite rejects the statement.
        """
        try:
            self._conn.execute(statement, tuple(params))
        except sqlite3.Error as exc:
            raise StorageError(
                f"Failed to execute statement: {exc}", stage="write"
            ) from exc

    def executemany(self, statement: str, rows: Iterable[Sequence[Any]]) -> None:
        """Execute *statement* once per parameter row."""
        try:
            self._conn.executemany(statement, rows)
        except sqlite3.Error as exc:
            raise StorageError(
                f"Failed to execute batched statement: {exc}", stage="write"
            ) from exc

    def query(self, statement: str, params: Sequence[Any] = ()) -> list[tuple]:
        """Run a query and return all result rows."""
        try:
            cursor = self._conn.execute(statement, tuple(params))
            return cursor.fetchall()
        except sqlite3.Error as exc:
            raise StorageError(f"Query failed: {exc}", stage="query") from exc

    def begin(self) -> None:
        self.execute("BEGIN")

    def commit(self) -> None:
        self.execute("COMMIT")

    def rollback(self) -> None:
        """Roll back the open transaction, if any."""
        if self._conn.in_transaction:
            self.execute("ROLLBACK")

    # ------------------------------------------------------------------
    # Introspection
    # ------------------------------------------------------------------

    def table_exists(self, table_name: str) -> bool:
        """Return True if the table exists in the database."""
        rows = self.query(
            "SELECT COUNT(*) FROM sqlite_master WHERE type='table' AND name=?",
            (table_name,),
        )
        return rows[0][0] > 0

    def get_table_schema(self, table_name: str) -> dict[str, str]:
        """Return the table schema as ``{column_name: type_string}`` in column order."""
        quoted = '"' + table_name.replace('"', '""') + '"'
        rows = self.query(f"PRAGMA table_info({quoted})")
        # PRAGMA table_info returns: (cid, name, type, notnull, dflt_value, pk)
        return {row[1]: row[2] for row in rows}

    def get_connection_uri(self) -> str:
        """Return the database connection URI."""
        database, _ = self._destination.connect_args()
        return f"sqlite:///{database}"

    # ------------------------------------------------------------------
    # Resource management
    # ------------------------------------------------------------------

    def close(self) -> None:
        """Close the underlying SQLite connection."""
        self._conn.close()

    def __enter__(self) -> SQLiteStore:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()


def open_store(destination: str | Destination) -> SQLiteStore:
    """Open the store for *destination* (a ``Destination`` or a path string)."""
    dest = Destination.parse(destination)
    logger.debug("Opening SQLite store %s", dest.connect_args()[0])
    return SQLiteStore(dest)
