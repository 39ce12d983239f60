"""Shared test fixtures for sheetdb tests.

Provides a ``sample_config`` fixture, an in-memory ``ListCursor`` satisfying
the ``RowCursor`` protocol, a factory writing ad-hoc ``.xlsx`` files, and
session-scoped generators for the timesheet workbooks used by the loader
tests.
"""

from __future__ import annotations

import pathlib
from collections.abc import Callable, Sequence
from datetime import datetime, timedelta
from typing import Any

import openpyxl
import pytest

from sheetdb.config import SheetDBConfig

# Employee -> number of timesheet rows; 343 rows in total.
TIMESHEET_EMPLOYEES = {
    "James T. Kirk": 55,
    "Jean-Luc Picard": 101,
    "Kathryn Janeway": 99,
    "Benjamin Sisko": 88,
}
TIMESHEET_ROWS = sum(TIMESHEET_EMPLOYEES.values())
TIMESHEET_HEADERS = ["Date", "Employee", "Hours worked", "Status"]


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


class ListCursor:
    """In-memory row cursor satisfying the ``RowCursor`` protocol.

    ``row_number`` counts from ``start_row`` so error locations match a
    sheet whose header occupies the row before the first data row.
    """

    def __init__(self, rows: Sequence[Sequence[str]], start_row: int = 2) -> None:
        self._rows = [list(r) for r in rows]
        self._index = -1
        self.row_number = start_row - 1

    def advance(self) -> bool:
        self._index += 1
        if self._index >= len(self._rows):
            return False
        self.row_number += 1
        return True

    def current_row_cells(self) -> list[str]:
        return list(self._rows[self._index])


def write_xlsx(
    path: pathlib.Path,
    rows: Sequence[Sequence[Any]],
    number_formats: dict[int, str] | None = None,
    title: str = "Sheet1",
) -> pathlib.Path:
    """Write *rows* to the first sheet of a new workbook at *path*.

    ``None`` cells are left blank and an empty row leaves a blank spreadsheet
    row.  *number_formats* maps a 1-based column index to the number format
    applied to every data cell in that column.
    """
    wb = openpyxl.Workbook()
    ws = wb.active
    ws.title = title
    for row_idx, row in enumerate(rows, start=1):
        for col_idx, value in enumerate(row, start=1):
            if value is None:
                continue
            cell = ws.cell(row=row_idx, column=col_idx, value=value)
            if number_formats and row_idx > 1 and col_idx in number_formats:
                cell.number_format = number_formats[col_idx]
    wb.save(path)
    return path


def _timesheet_rows(as_dates: bool) -> list[list[Any]]:
    rows: list[list[Any]] = [list(TIMESHEET_HEADERS)]
    start = datetime(2021, 8, 2)
    n = 0
    for employee, count in TIMESHEET_EMPLOYEES.items():
        for i in range(count):
            day = start + timedelta(days=n % 60)
            date_value: Any = day if as_dates else day.strftime("%m/%d/%y")
            hours = 8.0 if i % 3 else 7.5
            status = "non billable" if i % 5 == 0 else "billable"
            rows.append([date_value, employee, hours, status])
            n += 1
    return rows


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def sample_config() -> SheetDBConfig:
    """Return a SheetDBConfig with all defaults."""
    return SheetDBConfig()


@pytest.fixture()
def make_xlsx(tmp_path: pathlib.Path) -> Callable[..., str]:
    """Factory fixture writing rows to a temp .xlsx file and returning its path."""

    def _write(
        rows: Sequence[Sequence[Any]],
        filename: str = "book.xlsx",
        number_formats: dict[int, str] | None = None,
    ) -> str:
        return str(write_xlsx(tmp_path / filename, rows, number_formats))

    return _write


@pytest.fixture(scope="session")
def timesheet_xlsx(tmp_path_factory: pytest.TempPathFactory) -> pathlib.Path:
    """Timesheet workbook with dates stored as ``MM/DD/YY`` text cells."""
    path = tmp_path_factory.mktemp("xlsx") / "timesheet.xlsx"
    return write_xlsx(path, _timesheet_rows(as_dates=False))


@pytest.fixture(scope="session")
def timesheet_dates_xlsx(tmp_path_factory: pytest.TempPathFactory) -> pathlib.Path:
    """Timesheet workbook with real date cells formatted ``mm/dd/yy``."""
    path = tmp_path_factory.mktemp("xlsx") / "timesheet_dates.xlsx"
    return write_xlsx(path, _timesheet_rows(as_dates=True), number_formats={1: "mm/dd/yy"})


@pytest.fixture(scope="session")
def empty_xlsx(tmp_path_factory: pytest.TempPathFactory) -> pathlib.Path:
    """Workbook whose only sheet has no cells at all."""
    path = tmp_path_factory.mktemp("xlsx") / "empty.xlsx"
    openpyxl.Workbook().save(path)
    return path


@pytest.fixture(scope="session")
def invalid_xlsx(tmp_path_factory: pytest.TempPathFactory) -> pathlib.Path:
    """File with an .xlsx extension that is not a zip archive."""
    path = tmp_path_factory.mktemp("xlsx") / "invalid.xlsx"
    path.write_bytes(b"this is not a workbook\x00\x01\x02")
    return path
