"""Normalized error codes, structured error model, and raisable exceptions for sheetdb.

``ErrorCode`` holds stable string codes suitable for metrics and alerting.
``IngestError`` is the Pydantic data model describing a failure; the
``SheetDBError`` exception family wraps it so failures can be raised and
caught in control flow while keeping the structured model available as
``exc.error``.
"""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel


class ErrorCode(str, Enum):
    """Normalized error codes for the sheetdb load pipeline.

    Values equal their names.  Codes prefixed with ``E_`` are errors;
    codes prefixed with ``W_`` are non-fatal warnings.
    """

    # Workbook errors
    E_PARSE_CORRUPT = "E_PARSE_CORRUPT"
    E_PARSE_EMPTY = "E_PARSE_EMPTY"

    # Column / schema errors
    E_SCHEMA_DUPLICATE_HEADER = "E_SCHEMA_DUPLICATE_HEADER"
    E_PROCESS_SCHEMA_GEN = "E_PROCESS_SCHEMA_GEN"

    # Row errors
    E_CONVERT_VALUE = "E_CONVERT_VALUE"
    E_ROW_TOO_WIDE = "E_ROW_TOO_WIDE"

    # Backend errors
    E_BACKEND_DB_CONNECT = "E_BACKEND_DB_CONNECT"
    E_BACKEND_DB_WRITE = "E_BACKEND_DB_WRITE"

    # Warnings (non-fatal)
    W_OVERRIDE_UNMATCHED = "W_OVERRIDE_UNMATCHED"
    W_FORMAT_INCONCLUSIVE = "W_FORMAT_INCONCLUSIVE"


class IngestError(BaseModel):
    """Structured error with code, message, and location context.

    ``sheet_name``, ``row_number`` (1-based, as shown in the spreadsheet)
    and ``column_name`` are filled in where the failing stage knows them.
    """

    code: ErrorCode
    message: str
    stage: str | None = None
    recoverable: bool = False
    sheet_name: str | None = None
    row_number: int | None = None
    column_name: str | None = None


class SheetDBError(Exception):
    """Raisable exception wrapping an ``IngestError`` data model.

    Subclasses pin the ``code``; callers pass the remaining ``IngestError``
    fields as keyword arguments.  The structured model is available as the
    ``.error`` attribute.
    """

    default_code: ErrorCode = ErrorCode.E_PARSE_CORRUPT

    def __init__(self, message: str, **kwargs: object) -> None:
        kwargs.setdefault("code", self.default_code)
        self.error = IngestError(message=message, **kwargs)  # type: ignore[arg-type]
        super().__init__(message)

    @property
    def code(self) -> ErrorCode:
        return self.error.code

    @property
    def message(self) -> str:
        return self.error.message

    @property
    def stage(self) -> str | None:
        return self.error.stage


class WorkbookOpenError(SheetDBError):
    """The workbook file is missing, unreadable, or not a valid workbook archive."""

    default_code = ErrorCode.E_PARSE_CORRUPT


class EmptySheetError(SheetDBError):
    """The selected sheet has no header row."""

    default_code = ErrorCode.E_PARSE_EMPTY


# Name used by callers familiar with the cursor-style API.
NoMoreRowsError = EmptySheetError


class DuplicateHeaderError(SheetDBError):
    """Two header cells carry the same column name."""

    default_code = ErrorCode.E_SCHEMA_DUPLICATE_HEADER


class SchemaError(SheetDBError):
    """A column cannot be rendered into a table definition."""

    default_code = ErrorCode.E_PROCESS_SCHEMA_GEN


class ConversionError(SheetDBError):
    """A cell's text does not match its column's expected format."""

    default_code = ErrorCode.E_CONVERT_VALUE


class RowShapeError(SheetDBError):
    """A data row holds more cells than the header row defines."""

    default_code = ErrorCode.E_ROW_TOO_WIDE


class StorageError(SheetDBError):
    """Opening the destination or executing a statement against it failed."""

    default_code = ErrorCode.E_BACKEND_DB_WRITE
