"""sheetdb -- load spreadsheet sheets into queryable SQLite tables.

Public API exports for the loader, column factories, converters, models,
errors, configuration, and the SQLite store.
"""

from sheetdb.backends.sqlite import MEMORY, Destination, SQLiteStore, open_store
from sheetdb.config import SheetDBConfig
from sheetdb.converters import (
    ConverterRegistry,
    date_column,
    date_converter,
    float_column,
    keep_as_is,
    number_column,
    parse_float,
    parse_number,
    text_column,
)
from sheetdb.errors import (
    ConversionError,
    DuplicateHeaderError,
    EmptySheetError,
    ErrorCode,
    IngestError,
    NoMoreRowsError,
    RowShapeError,
    SchemaError,
    SheetDBError,
    StorageError,
    WorkbookOpenError,
)
from sheetdb.importer import RowImporter
from sheetdb.loader import TableLoader, load_from_excel
from sheetdb.models import Column, ColumnFormat, ImportStats, SampleCell, SchemaColumn
from sheetdb.protocols import RowCursor, StructuredStore, Workbook
from sheetdb.query import format_frame, read_query
from sheetdb.resolver import ColumnResolver
from sheetdb.schema import build_schema
from sheetdb.workbook import open_workbook

__all__ = [
    # Loader
    "TableLoader",
    "load_from_excel",
    # Pipeline stages
    "ColumnResolver",
    "RowImporter",
    "build_schema",
    # Converters
    "ConverterRegistry",
    "keep_as_is",
    "date_converter",
    "parse_float",
    "parse_number",
    "text_column",
    "date_column",
    "float_column",
    "number_column",
    # Models
    "ColumnFormat",
    "Column",
    "SchemaColumn",
    "SampleCell",
    "ImportStats",
    # Errors
    "ErrorCode",
    "IngestError",
    "SheetDBError",
    "WorkbookOpenError",
    "EmptySheetError",
    "NoMoreRowsError",
    "DuplicateHeaderError",
    "SchemaError",
    "ConversionError",
    "RowShapeError",
    "StorageError",
    # Config
    "SheetDBConfig",
    # Collaborators
    "Destination",
    "MEMORY",
    "SQLiteStore",
    "open_store",
    "open_workbook",
    "Workbook",
    "RowCursor",
    "StructuredStore",
    # Queries
    "read_query",
    "format_frame",
]
