"""Pydantic data models and enumerations for sheetdb.

Defines the column format enum, the resolved ``Column`` descriptor, the
``SchemaColumn`` produced by the schema builder, the ``SampleCell`` used for
format guessing, and the ``ImportStats`` summary returned by the row importer.
"""

from __future__ import annotations

from collections.abc import Callable
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict

Converter = Callable[[str], Any]


# ---------------------------------------------------------------------------
# Enumerations
# ---------------------------------------------------------------------------


class ColumnFormat(str, Enum):
    """Logical format of the values held in a spreadsheet column.

    Drives both the converter applied to each cell and the storage type
    chosen for the column in the destination table.
    """

    TEXT = "text"
    DATE = "date"
    NUMBER = "number"
    FLOAT = "float"


# ---------------------------------------------------------------------------
# Core models
# ---------------------------------------------------------------------------


class Column(BaseModel):
    """Resolved description of one spreadsheet column.

    ``converter`` turns a cell's text into the value stored in the table and
    raises when the text does not match the column's format.  Columns are
    immutable; an override replaces a default column wholesale.
    """

    model_config = ConfigDict(frozen=True)

    name: str
    format: ColumnFormat = ColumnFormat.TEXT
    converter: Converter


class SchemaColumn(BaseModel):
    """One ``(name, storage type)`` pair of a table definition."""

    model_config = ConfigDict(frozen=True)

    name: str
    storage_type: str


class SampleCell(BaseModel):
    """Native value and number format of a cell, used for format guessing."""

    value: Any = None
    number_format: str | None = None
    is_date: bool = False


class ImportStats(BaseModel):
    """Counters collected while importing the data rows of a sheet."""

    rows_read: int = 0
    rows_inserted: int = 0
    rows_skipped: int = 0
    duration_seconds: float = 0.0
