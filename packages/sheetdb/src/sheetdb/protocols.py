"""Collaborator protocols for the sheetdb pipeline.

Defines the structural-subtyping interfaces the loader and importer depend
on: the workbook reader, its row cursor, and the structured store.  All
protocols are ``@runtime_checkable`` so callers can optionally verify
conformance with ``isinstance`` checks.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

if TYPE_CHECKING:
    from sheetdb.models import SampleCell


@runtime_checkable
class RowCursor(Protocol):
    """Forward-only cursor over the rows of a sheet."""

    row_number: int

    def advance(self) -> bool:
        """Move to the next row. Returns False when no rows remain."""
        ...

    def current_row_cells(self) -> list[str]:
        """Return the text of each cell in the current row."""
        ...


@runtime_checkable
class Workbook(Protocol):
    """An opened spreadsheet workbook."""

    def sheet_names(self) -> list[str]:
        """Return sheet names in workbook order."""
        ...

    def row_cursor(self, sheet_name: str) -> RowCursor:
        """Return a cursor positioned before the first row of the sheet."""
        ...

    def sample_row(self, sheet_name: str, row_number: int) -> list[SampleCell]:
        """Return native cell values of one row without moving any cursor."""
        ...

    def close(self) -> None:
        """Release the workbook."""
        ...


@runtime_checkable
class StructuredStore(Protocol):
    """Interface for the relational store that receives the imported table."""

    def execute(self, statement: str, params: Sequence[Any] = ()) -> None:
        """Execute a single statement."""
        ...

    def executemany(self, statement: str, rows: Iterable[Sequence[Any]]) -> None:
        """Execute a statement once per parameter row."""
        ...

    def query(self, statement: str, params: Sequence[Any] = ()) -> list[tuple]:
        """Run a query and return all result rows."""
        ...

    def begin(self) -> None:
        """Start a transaction."""
        ...

    def commit(self) -> None:
        """Commit the current transaction."""
        ...

    def rollback(self) -> None:
        """Roll back the current transaction."""
        ...

    def close(self) -> None:
        """Release the store."""
        ...
