"""Row importer: convert each data row and insert it into the destination table."""

from __future__ import annotations

import logging
import time
from collections.abc import Sequence
from datetime import date, datetime
from typing import Any

from sheetdb.config import SheetDBConfig
from sheetdb.errors import ConversionError, RowShapeError
from sheetdb.models import Column, ImportStats
from sheetdb.protocols import RowCursor, StructuredStore
from sheetdb.schema import build_schema, render_insert

logger = logging.getLogger("sheetdb")


def to_storage_value(value: Any) -> Any:
    """Adapt a converted value to something SQLite stores natively.

    Dates and datetimes become ISO-8601 text.
    """
    if isinstance(value, datetime):
        return value.isoformat(sep=" ")
    if isinstance(value, date):
        return value.isoformat()
    return value


class RowImporter:
    """Consume a row cursor and insert converted rows.

    The first conversion or storage failure aborts the import; the caller is
    responsible for rolling back whatever was written before it.
    """

    def __init__(self, config: SheetDBConfig | None = None) -> None:
        self._config = config or SheetDBConfig()

    def run(
        self,
        cursor: RowCursor,
        columns: Sequence[Column],
        store: StructuredStore,
        table_name: str,
        sheet_name: str | None = None,
    ) -> ImportStats:
        """Import every remaining row of *cursor* into *table_name*.

        Raises
        ------
        ConversionError
            If a converter rejects a cell.  The converter's exception is
            chained as ``__cause__``.
        RowShapeError
            If a row has more cells than there are columns.
        StorageError
            If the store rejects an insert.
        """
        start = time.monotonic()
        stats = ImportStats()
        statement = render_insert(
            table_name, build_schema(columns, self._config.number_storage_type)
        )
        batch_size = self._config.insert_batch_size
        pending: list[list[Any]] = []

        while cursor.advance():
            stats.rows_read += 1
            cells = cursor.current_row_cells()
            if not cells:
                stats.rows_skipped += 1
                continue

            values = self._convert_row(cursor.row_number, cells, columns, sheet_name)
            if batch_size <= 1:
                store.execute(statement, values)
                stats.rows_inserted += 1
                continue

            pending.append(values)
            if len(pending) >= batch_size:
                store.executemany(statement, pending)
                stats.rows_inserted += len(pending)
                pending = []

        if pending:
            store.executemany(statement, pending)
            stats.rows_inserted += len(pending)

        stats.duration_seconds = time.monotonic() - start
        return stats

    def _convert_row(
        self,
        row_number: int,
        cells: Sequence[str],
        columns: Sequence[Column],
        sheet_name: str | None,
    ) -> list[Any]:
        if len(cells) > len(columns):
            raise RowShapeError(
                f"Row {row_number} has {len(cells)} cells but only "
                f"{len(columns)} columns are defined.",
                stage="import",
                sheet_name=sheet_name,
                row_number=row_number,
            )

        # Missing trailing cells stay NULL.
        values: list[Any] = [None] * len(columns)
        for index, text in enumerate(cells):
            column = columns[index]
            try:
                values[index] = to_storage_value(column.converter(text))
            except Exception as exc:
                detail = f" (value {text!r})" if self._config.log_sample_data else ""
                logger.error(
                    "sheetdb | sheet=%s | row=%d | column=%s | code=%s | detail=%s%s",
                    sheet_name,
                    row_number,
                    column.name,
                    ConversionError.default_code.value,
                    type(exc).__name__,
                    detail,
                )
                raise ConversionError(
                    f"Cannot convert cell in column '{column.name}' at row "
                    f"{row_number} as {column.format.value}: {exc}",
                    stage="import",
                    sheet_name=sheet_name,
                    row_number=row_number,
                    column_name=column.name,
                ) from exc
        return values
