"""Cell converters and the format-to-converter registry.

A converter is a pure function taking a cell's text and returning the value
to store, raising (usually ``ValueError``) when the text does not fit the
column's format.  The row importer wraps such failures in
``ConversionError``.
"""

from __future__ import annotations

import logging
from datetime import datetime

from sheetdb.models import Column, ColumnFormat, Converter

logger = logging.getLogger("sheetdb")


# ---------------------------------------------------------------------------
# Built-in converters
# ---------------------------------------------------------------------------


def keep_as_is(val: str) -> str:
    """Return the cell text unchanged."""
    return val


def date_converter(date_format: str) -> Converter:
    """Return a converter parsing cell text with ``datetime.strptime``.

    *date_format* uses ``strptime`` directives, e.g. ``"%m/%d/%y"`` for
    ``08/02/21``.
    """

    def _parse_date(val: str) -> datetime:
        return datetime.strptime(val.strip(), date_format)

    _parse_date.__qualname__ = f"date_converter({date_format!r})"
    return _parse_date


def parse_float(val: str) -> float:
    """Parse cell text as a floating-point number."""
    return float(val.strip())


def parse_number(val: str) -> int | float:
    """Parse cell text as an integer, accepting decimal text as a float."""
    text = val.strip()
    try:
        return int(text)
    except ValueError:
        return float(text)


# ---------------------------------------------------------------------------
# Column factories
# ---------------------------------------------------------------------------


def text_column(name: str) -> Column:
    """Column stored as text, cell values passed through unchanged."""
    return Column(name=name, format=ColumnFormat.TEXT, converter=keep_as_is)


def date_column(name: str, date_format: str) -> Column:
    """Column whose cells are parsed as dates using *date_format*."""
    return Column(
        name=name,
        format=ColumnFormat.DATE,
        converter=date_converter(date_format),
    )


def float_column(name: str) -> Column:
    """Column whose cells are parsed as floating-point numbers."""
    return Column(name=name, format=ColumnFormat.FLOAT, converter=parse_float)


def number_column(name: str) -> Column:
    """Column whose cells are parsed as integers (or decimals)."""
    return Column(name=name, format=ColumnFormat.NUMBER, converter=parse_number)


# ---------------------------------------------------------------------------
# Registry
# ---------------------------------------------------------------------------


class ConverterRegistry:
    """Maps each ``ColumnFormat`` to the converter used for it.

    Parameters
    ----------
    default_date_format:
        ``strptime`` pattern used by the registered DATE converter.
    """

    def __init__(self, default_date_format: str = "%Y-%m-%d") -> None:
        self._converters: dict[ColumnFormat, Converter] = {
            ColumnFormat.TEXT: keep_as_is,
            ColumnFormat.DATE: date_converter(default_date_format),
            ColumnFormat.NUMBER: parse_number,
            ColumnFormat.FLOAT: parse_float,
        }

    def register(self, fmt: ColumnFormat, converter: Converter) -> None:
        """Replace the converter used for *fmt*."""
        if not callable(converter):
            raise TypeError(f"Converter for {fmt.value} must be callable")
        logger.debug("Registered converter %r for format %s", converter, fmt.value)
        self._converters[fmt] = converter

    def get(self, fmt: ColumnFormat) -> Converter:
        """Return the converter for *fmt*.

        Raises
        ------
        KeyError
            If no converter is registered for *fmt*.
        """
        return self._converters[fmt]

    def column(self, name: str, fmt: ColumnFormat) -> Column:
        """Build a ``Column`` for *name* using the converter registered for *fmt*."""
        return Column(name=name, format=fmt, converter=self.get(fmt))

    def __contains__(self, fmt: object) -> bool:
        return fmt in self._converters
