"""openpyxl-backed workbook reader.

Opens an ``.xlsx`` workbook and exposes its sheets as forward-only row
cursors yielding cell *text*, the way the cells are displayed in a
spreadsheet application:

* strings are returned unchanged, empty cells as ``""``;
* integers (and integral floats) without a decimal point, other floats via
  their shortest ``repr``;
* booleans as ``TRUE`` / ``FALSE``;
* dates and times rendered with the cell's number format, translated to a
  ``strftime`` pattern by :func:`excel_date_pattern` (ISO-8601 when the
  format cannot be translated).

Trailing blank cells are dropped from every row, so a fully blank row is an
empty list.  Formulas are not evaluated; the cached result stored in the file
is read instead.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Iterator, Sequence
from datetime import date, datetime, time
from pathlib import Path
from typing import Any

import openpyxl
from openpyxl.worksheet.worksheet import Worksheet

from sheetdb.errors import EmptySheetError, WorkbookOpenError
from sheetdb.models import SampleCell

logger = logging.getLogger("sheetdb")

_FORMAT_TOKEN = re.compile(
    r'"[^"]*"|\\.|\[[^\]]*\]|AM/PM|A/P|\.0+|[yY]+|[mM]+|[dD]+|[hH]+|[sS]+|.',
    re.IGNORECASE,
)


# ---------------------------------------------------------------------------
# Cell rendering
# ---------------------------------------------------------------------------


def excel_date_pattern(number_format: str | None) -> str | None:
    """Translate an Excel date/time number format into a ``strftime`` pattern.

    Only the first section of the format is considered.  Bracketed sections
    (locale, colour, elapsed time) and fractional seconds are dropped, quoted
    and backslash-escaped text is kept literally.  ``m`` tokens directly after
    an hour token or directly before a seconds token are minutes.

    Returns ``None`` when the format contains no date or time tokens.

    >>> excel_date_pattern("mm/dd/yy")
    '%m/%d/%y'
    >>> excel_date_pattern("h:mm AM/PM")
    '%I:%M %p'
    """
    if not number_format or number_format.lower() == "general":
        return None

    section = number_format.split(";")[0]
    parts: list[tuple[str, str]] = []
    for token in _FORMAT_TOKEN.findall(section):
        lowered = token.lower()
        if token.startswith('"'):
            parts.append(("lit", token[1:-1]))
        elif token.startswith("\\"):
            parts.append(("lit", token[1:]))
        elif token.startswith("[") or token.startswith(".0"):
            continue
        elif lowered in ("am/pm", "a/p"):
            parts.append(("ampm", lowered))
        elif lowered[0] in "ymdhs":
            parts.append((lowered[0], lowered))
        else:
            parts.append(("lit", token))

    if not any(kind in ("y", "m", "d", "h", "s") for kind, _ in parts):
        return None

    twelve_hour = any(kind == "ampm" for kind, _ in parts)
    pattern: list[str] = []
    for index, (kind, token) in enumerate(parts):
        if kind == "lit":
            pattern.append(token.replace("%", "%%"))
        elif kind == "y":
            pattern.append("%Y" if len(token) > 2 else "%y")
        elif kind == "m":
            if len(token) <= 2 and _is_minute_token(parts, index):
                pattern.append("%M")
            elif len(token) == 4:
                pattern.append("%B")
            elif len(token) >= 3:
                pattern.append("%b")
            else:
                pattern.append("%m")
        elif kind == "d":
            if len(token) == 3:
                pattern.append("%a")
            elif len(token) >= 4:
                pattern.append("%A")
            else:
                pattern.append("%d")
        elif kind == "h":
            pattern.append("%I" if twelve_hour else "%H")
        elif kind == "s":
            pattern.append("%S")
        elif kind == "ampm":
            pattern.append("%p")
    return "".join(pattern)


def _is_minute_token(parts: Sequence[tuple[str, str]], index: int) -> bool:
    """Return True if the ``m`` token at *index* means minutes, not months."""
    for kind, _ in reversed(parts[:index]):
        if kind != "lit":
            if kind == "h":
                return True
            break
    for kind, _ in parts[index + 1 :]:
        if kind != "lit":
            return kind == "s"
    return False


def cell_text(value: Any, number_format: str | None = None) -> str:
    """Render a native cell value as the text shown in a spreadsheet."""
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return "TRUE" if value else "FALSE"
    if isinstance(value, int):
        return str(value)
    if isinstance(value, float):
        if value.is_integer():
            return str(int(value))
        return repr(value)
    if isinstance(value, (datetime, date, time)):
        pattern = excel_date_pattern(number_format)
        if pattern is None:
            return value.isoformat()
        return value.strftime(pattern)
    return str(value)


def _trim_trailing_blanks(cells: list[str]) -> list[str]:
    end = len(cells)
    while end > 0 and cells[end - 1] == "":
        end -= 1
    return cells[:end]


# ---------------------------------------------------------------------------
# Cursor and workbook
# ---------------------------------------------------------------------------


class OpenpyxlRowCursor:
    """Forward-only cursor over the rows of one worksheet.

    Call :meth:`advance` before each :meth:`current_row_cells`;
    ``row_number`` is the 1-based spreadsheet row of the current row.
    """

    def __init__(self, worksheet: Worksheet) -> None:
        self._rows: Iterator[tuple[Any, ...]] = worksheet.iter_rows()
        self._current: list[str] | None = None
        self.row_number = 0

    def advance(self) -> bool:
        """Move to the next row. Returns False once the sheet is exhausted."""
        try:
            row = next(self._rows)
        except StopIteration:
            self._current = None
            return False
        self.row_number += 1
        self._current = _trim_trailing_blanks(
            [cell_text(cell.value, getattr(cell, "number_format", None)) for cell in row]
        )
        return True

    def current_row_cells(self) -> list[str]:
        """Return the text of the current row's cells."""
        if self._current is None:
            raise RuntimeError("advance() must return True before reading cells")
        return list(self._current)


class OpenpyxlWorkbook:
    """Workbook opened with openpyxl in ``data_only`` mode.

    Use :func:`open_workbook` rather than constructing directly.
    """

    def __init__(self, path: str, workbook: openpyxl.Workbook) -> None:
        self.path = path
        self._wb = workbook

    def sheet_names(self) -> list[str]:
        """Sheet names in workbook order."""
        return list(self._wb.sheetnames)

    def row_cursor(self, sheet_name: str) -> OpenpyxlRowCursor:
        """Return a cursor positioned before the first row of *sheet_name*.

        Raises
        ------
        EmptySheetError
            If the sheet is a chart sheet (it has no rows).
        KeyError
            If the workbook has no sheet called *sheet_name*.
        """
        ws = self._wb[sheet_name]
        if not isinstance(ws, Worksheet):
            raise EmptySheetError(
                f"Sheet '{sheet_name}' is not a worksheet and has no rows.",
                sheet_name=sheet_name,
                stage="read",
            )
        return OpenpyxlRowCursor(ws)

    def sample_row(self, sheet_name: str, row_number: int) -> list[SampleCell]:
        """Return native values and number formats of one row without moving any cursor.

        Trailing empty cells are dropped; a row past the end of the sheet
        yields an empty list.
        """
        ws = self._wb[sheet_name]
        if not isinstance(ws, Worksheet) or row_number > (ws.max_row or 0):
            return []
        cells: list[SampleCell] = []
        for row in ws.iter_rows(min_row=row_number, max_row=row_number):
            for cell in row:
                cells.append(
                    SampleCell(
                        value=cell.value,
                        number_format=getattr(cell, "number_format", None),
                        is_date=bool(getattr(cell, "is_date", False)),
                    )
                )
        while cells and cells[-1].value in (None, ""):
            cells.pop()
        return cells

    def close(self) -> None:
        self._wb.close()


def open_workbook(path: str) -> OpenpyxlWorkbook:
    """Open the workbook at *path*.

    Raises
    ------
    WorkbookOpenError
        If the file does not exist, cannot be read, or is not a valid
        ``.xlsx`` archive.
    """
    if not Path(path).is_file():
        raise WorkbookOpenError(f"Workbook not found: {path}", stage="open")
    try:
        wb = openpyxl.load_workbook(path, data_only=True)
    except Exception as exc:
        raise WorkbookOpenError(
            f"Cannot open workbook {path}: {exc}", stage="open"
        ) from exc
    logger.debug("Opened workbook %s with sheets %s", path, wb.sheetnames)
    return OpenpyxlWorkbook(path, wb)
