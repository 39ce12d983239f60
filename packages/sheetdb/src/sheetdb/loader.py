"""TableLoader -- orchestrator and public API for the sheetdb pipeline.

Loads the first sheet of a workbook into a table:

1. Open the workbook via :func:`open_workbook`.
2. Read the header row of the first sheet.
3. Resolve one :class:`Column` per header via :class:`ColumnResolver`.
4. Build the table schema via :func:`build_schema`.
5. Open the destination store.
6. Inside one transaction: drop the table, recreate it, and import every
   data row via :class:`RowImporter`.
7. Commit and return the open store.

The loader is **all-or-nothing**: any error rolls back the transaction,
releases the store and the workbook, and propagates to the caller.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from pathlib import Path

from sheetdb.backends.sqlite import Destination, SQLiteStore, open_store
from sheetdb.config import SheetDBConfig
from sheetdb.converters import ConverterRegistry
from sheetdb.errors import EmptySheetError, SheetDBError
from sheetdb.importer import RowImporter
from sheetdb.models import Column, ImportStats
from sheetdb.protocols import Workbook
from sheetdb.resolver import ColumnResolver
from sheetdb.schema import build_schema, render_create_table, render_drop_table
from sheetdb.workbook import open_workbook

logger = logging.getLogger("sheetdb")


class TableLoader:
    """Top-level orchestrator for loading a workbook into a table.

    Parameters
    ----------
    config:
        Pipeline configuration.  Uses defaults when *None*.
    registry:
        Converters used for guessed columns.  Built from *config* when *None*.
    workbook_opener:
        Callable opening a workbook path.  Defaults to the openpyxl reader.
    store_opener:
        Callable opening a destination.  Defaults to the SQLite backend.
    """

    def __init__(
        self,
        config: SheetDBConfig | None = None,
        registry: ConverterRegistry | None = None,
        workbook_opener: Callable[[str], Workbook] = open_workbook,
        store_opener: Callable[[Destination], SQLiteStore] = open_store,
    ) -> None:
        self._config = config or SheetDBConfig()
        self._resolver = ColumnResolver(self._config, registry)
        self._importer = RowImporter(self._config)
        self._open_workbook = workbook_opener
        self._open_store = store_opener

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def load(
        self,
        path: str | Path,
        destination: str | Destination,
        *overrides: Column,
    ) -> SQLiteStore:
        """Load the first sheet of the workbook at *path* into *destination*.

        Parameters
        ----------
        path:
            Filesystem path to the ``.xlsx`` workbook.
        destination:
            A ``Destination`` or a path string (``":memory:"`` for a private
            in-memory database).
        overrides:
            Columns replacing the default text column of the header with the
            same name.

        Returns
        -------
        SQLiteStore
            The open store holding the populated table.  The caller owns it
            and must close it.

        Raises
        ------
        WorkbookOpenError
            If the workbook cannot be opened.
        EmptySheetError
            If the first sheet has no header row.
        DuplicateHeaderError, SchemaError
            If the header row cannot be turned into a table definition.
        ConversionError, RowShapeError
            If a data row cannot be converted.
        StorageError
            If the destination rejects a statement.
        """
        start = time.monotonic()
        file_path = str(path)
        filename = Path(file_path).name
        dest = Destination.parse(destination)
        table_name = self._config.table_name

        try:
            store, stats, sheet_name, columns = self._load(
                file_path, dest, table_name, overrides
            )
        except SheetDBError as exc:
            logger.error(
                "sheetdb | file=%s | code=%s | detail=%s",
                filename,
                exc.code.value,
                exc.message,
            )
            raise

        elapsed = time.monotonic() - start
        logger.info(
            "Loaded %s sheet '%s' into table '%s': %d columns, %d rows inserted, "
            "%d blank rows skipped (%.3fs)",
            filename,
            sheet_name,
            table_name,
            len(columns),
            stats.rows_inserted,
            stats.rows_skipped,
            elapsed,
        )
        return store

    # ------------------------------------------------------------------
    # Private methods
    # ------------------------------------------------------------------

    def _load(
        self,
        file_path: str,
        dest: Destination,
        table_name: str,
        overrides: tuple[Column, ...],
    ) -> tuple[SQLiteStore, ImportStats, str, list[Column]]:
        config = self._config
        filename = Path(file_path).name

        workbook = self._open_workbook(file_path)
        try:
            sheet_names = workbook.sheet_names()
            if not sheet_names:
                raise EmptySheetError(
                    f"Workbook {filename} has no sheets.", stage="read"
                )
            sheet_name = sheet_names[0]
            cursor = workbook.row_cursor(sheet_name)

            if not cursor.advance():
                raise EmptySheetError(
                    f"Sheet '{sheet_name}' has no rows to read from.",
                    sheet_name=sheet_name,
                    stage="read",
                )
            headers = cursor.current_row_cells()
            if not headers:
                raise EmptySheetError(
                    f"Sheet '{sheet_name}' has an empty header row.",
                    sheet_name=sheet_name,
                    stage="read",
                )

            sample = None
            if config.infer_formats:
                sample = workbook.sample_row(sheet_name, cursor.row_number + 1)

            columns = self._resolver.resolve(headers, overrides, sample)
            schema = build_schema(columns, config.number_storage_type)
            create_sql = render_create_table(table_name, schema)
            drop_sql = render_drop_table(table_name)

            store = self._open_store(dest)
            try:
                store.begin()
                store.execute(drop_sql)
                store.execute(create_sql)
                stats = self._importer.run(
                    cursor, columns, store, table_name, sheet_name=sheet_name
                )
                store.commit()
            except BaseException:
                try:
                    store.rollback()
                finally:
                    store.close()
                raise
        finally:
            workbook.close()

        return store, stats, sheet_name, columns


def load_from_excel(
    path: str | Path,
    destination: str | Destination,
    *overrides: Column,
    config: SheetDBConfig | None = None,
) -> SQLiteStore:
    """Load all rows of the first sheet of a workbook into a new table.

    Columns without an override are stored as text.  See
    :meth:`TableLoader.load` for details and raised errors.
    """
    return TableLoader(config).load(path, destination, *overrides)
