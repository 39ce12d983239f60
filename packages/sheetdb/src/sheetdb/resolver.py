"""Column resolution: one typed ``Column`` per header.

Every header starts from the default text column (identity converter).  A
caller override with the same name replaces it wholesale.  When format
guessing is enabled, headers without an override take their format from the
native value of the first data row instead.
"""

from __future__ import annotations

import logging
import string
from collections.abc import Iterable, Sequence
from datetime import date, datetime

from sheetdb.config import SheetDBConfig
from sheetdb.converters import ConverterRegistry, date_converter
from sheetdb.errors import DuplicateHeaderError, ErrorCode
from sheetdb.models import Column, ColumnFormat, Converter, SampleCell
from sheetdb.workbook import excel_date_pattern

logger = logging.getLogger("sheetdb")

# SQLite compares column names case-insensitively for ASCII letters only.
_ASCII_LOWER = str.maketrans(string.ascii_uppercase, string.ascii_lowercase)


def _blank_as_null(converter: Converter) -> Converter:
    """Wrap a guessed converter so blank cells are stored as NULL."""

    def _convert(val: str) -> object:
        if not val.strip():
            return None
        return converter(val)

    return _convert


def _parse_iso(val: str) -> datetime:
    return datetime.fromisoformat(val.strip())


class ColumnResolver:
    """Resolve headers into ordered ``Column`` descriptors.

    Parameters
    ----------
    config:
        Pipeline configuration; ``infer_formats`` enables format guessing.
    registry:
        Converters used for guessed columns.  Built from *config* when *None*.
    """

    def __init__(
        self,
        config: SheetDBConfig | None = None,
        registry: ConverterRegistry | None = None,
    ) -> None:
        self._config = config or SheetDBConfig()
        self._registry = registry or ConverterRegistry(self._config.default_date_format)

    def resolve(
        self,
        headers: Sequence[str],
        overrides: Iterable[Column] = (),
        sample: Sequence[SampleCell] | None = None,
    ) -> list[Column]:
        """Return one column per header, in header order.

        Overrides naming no header are ignored.  When several overrides share
        a name, the last one wins.

        Raises
        ------
        DuplicateHeaderError
            If two headers carry the same name, ignoring ASCII case.
        """
        seen: set[str] = set()
        folded: set[str] = set()
        for index, header in enumerate(headers):
            key = header.translate(_ASCII_LOWER)
            if key in folded:
                raise DuplicateHeaderError(
                    f"Duplicate header '{header}' at column {index + 1}.",
                    stage="resolve",
                    column_name=header,
                )
            folded.add(key)
            seen.add(header)

        by_name = {col.name: col for col in overrides}
        for name in by_name.keys() - seen:
            logger.debug(
                "sheetdb | code=%s | detail=override '%s' matches no header",
                ErrorCode.W_OVERRIDE_UNMATCHED.value,
                name,
            )

        columns: list[Column] = []
        for index, header in enumerate(headers):
            if header in by_name:
                column = by_name[header]
            elif self._config.infer_formats:
                cell = sample[index] if sample is not None and index < len(sample) else None
                column = self.guess_column(header, cell)
            else:
                column = self._registry.column(header, ColumnFormat.TEXT)
            logger.debug("Column %d '%s' resolved as %s", index + 1, header, column.format.value)
            columns.append(column)
        return columns

    def guess_column(self, name: str, cell: SampleCell | None) -> Column:
        """Guess a column from a sample cell, falling back to text.

        Dates use a converter built from the cell's number format, integers
        become NUMBER and other numbers FLOAT.  Blank cells in a guessed
        typed column are stored as NULL.
        """
        if cell is None or cell.value is None or cell.value == "":
            logger.debug(
                "sheetdb | code=%s | detail=no sample value for '%s'",
                ErrorCode.W_FORMAT_INCONCLUSIVE.value,
                name,
            )
            return self._registry.column(name, ColumnFormat.TEXT)

        value = cell.value
        if isinstance(value, (datetime, date)):
            pattern = excel_date_pattern(cell.number_format)
            converter = date_converter(pattern) if pattern else _parse_iso
            return Column(
                name=name,
                format=ColumnFormat.DATE,
                converter=_blank_as_null(converter),
            )
        if isinstance(value, bool):
            return self._registry.column(name, ColumnFormat.TEXT)
        if isinstance(value, int):
            fmt = ColumnFormat.NUMBER
        elif isinstance(value, float):
            fmt = ColumnFormat.FLOAT
        else:
            return self._registry.column(name, ColumnFormat.TEXT)
        return Column(
            name=name,
            format=fmt,
            converter=_blank_as_null(self._registry.get(fmt)),
        )
