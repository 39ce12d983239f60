"""Tests for sheetdb.query and the sheetdb command-line driver."""

from __future__ import annotations

import pathlib

import pandas as pd
import pytest

from conftest import TIMESHEET_ROWS
from sheetdb import cli
from sheetdb.backends.sqlite import Destination, SQLiteStore
from sheetdb.errors import StorageError
from sheetdb.query import format_frame, read_query


@pytest.fixture()
def store():
    with SQLiteStore() as s:
        s.execute('CREATE TABLE "data" ("Employee" TEXT, "Hours worked" REAL)')
        s.executemany(
            'INSERT INTO "data" VALUES (?, ?)',
            [["Kirk", 8.0], ["Kirk", 7.5], ["Sisko", 8.0]],
        )
        yield s


class TestReadQuery:
    @pytest.mark.unit
    def test_returns_frame(self, store: SQLiteStore) -> None:
        df = read_query(
            store,
            'SELECT "Employee", SUM("Hours worked") AS total FROM "data" '
            'GROUP BY "Employee" ORDER BY "Employee"',
        )
        assert list(df.columns) == ["Employee", "total"]
        assert df["total"].tolist() == [15.5, 8.0]

    @pytest.mark.unit
    def test_params(self, store: SQLiteStore) -> None:
        df = read_query(store, 'SELECT * FROM "data" WHERE "Employee" = ?', ["Sisko"])
        assert len(df) == 1

    @pytest.mark.unit
    def test_bad_query(self, store: SQLiteStore) -> None:
        with pytest.raises(StorageError):
            read_query(store, "SELECT * FROM nowhere")

    @pytest.mark.unit
    def test_format_empty(self) -> None:
        assert format_frame(pd.DataFrame({"a": []})) == "(no rows)"

    @pytest.mark.unit
    def test_format_rows(self) -> None:
        text = format_frame(pd.DataFrame({"Employee": ["Kirk"], "total": [15.5]}))
        assert "Employee" in text
        assert "15.5" in text


class TestCli:
    @pytest.mark.integration
    def test_load_and_query(
        self, timesheet_xlsx: pathlib.Path, capsys: pytest.CaptureFixture[str]
    ) -> None:
        code = cli.main(
            [
                str(timesheet_xlsx),
                "--date",
                "Date=%m/%d/%y",
                "--float",
                "Hours worked",
                "--query",
                'SELECT COUNT(*) AS n FROM data WHERE "Employee" = \'James T. Kirk\'',
            ]
        )
        out = capsys.readouterr().out
        assert code == 0
        assert f"Loaded {TIMESHEET_ROWS} rows into table 'data'." in out
        assert "55" in out

    @pytest.mark.integration
    def test_table_and_db_options(
        self, timesheet_xlsx: pathlib.Path, tmp_path: pathlib.Path, capsys: pytest.CaptureFixture[str]
    ) -> None:
        db_path = tmp_path / "out.sqlite"
        code = cli.main([str(timesheet_xlsx), "--db", str(db_path), "--table", "timesheet"])
        assert code == 0
        assert "into table 'timesheet'" in capsys.readouterr().out
        with SQLiteStore(Destination.file(str(db_path))) as s:
            assert s.table_exists("timesheet")

    @pytest.mark.integration
    def test_config_file(
        self, timesheet_xlsx: pathlib.Path, tmp_path: pathlib.Path, capsys: pytest.CaptureFixture[str]
    ) -> None:
        config_path = tmp_path / "sheetdb.yaml"
        config_path.write_text("table_name: sheet\n")
        assert cli.main([str(timesheet_xlsx), "--config", str(config_path)]) == 0
        assert "into table 'sheet'" in capsys.readouterr().out

    @pytest.mark.unit
    @pytest.mark.parametrize(
        ("filename", "content"),
        [
            ("missing.yaml", None),
            ("sheetdb.toml", "table_name = 'x'\n"),
            ("sheetdb.yaml", "insert_batch_size: 0\n"),
            ("sheetdb.yaml", "table_name: [unclosed\n"),
            ("sheetdb.json", "{not json"),
        ],
    )
    def test_bad_config_reported(
        self,
        filename: str,
        content: str | None,
        timesheet_xlsx: pathlib.Path,
        tmp_path: pathlib.Path,
        capsys: pytest.CaptureFixture[str],
    ) -> None:
        config_path = tmp_path / filename
        if content is not None:
            config_path.write_text(content)
        code = cli.main([str(timesheet_xlsx), "--config", str(config_path)])
        assert code == 1
        assert "error: cannot load config" in capsys.readouterr().err

    @pytest.mark.integration
    def test_load_error_reported(
        self, invalid_xlsx: pathlib.Path, capsys: pytest.CaptureFixture[str]
    ) -> None:
        code = cli.main([str(invalid_xlsx)])
        assert code == 1
        assert "error: [E_PARSE_CORRUPT]" in capsys.readouterr().err

    @pytest.mark.integration
    def test_bad_query_reported(
        self, timesheet_xlsx: pathlib.Path, capsys: pytest.CaptureFixture[str]
    ) -> None:
        code = cli.main([str(timesheet_xlsx), "--query", "SELECT * FROM nowhere"])
        assert code == 1
        assert "error: [E_BACKEND_DB_WRITE]" in capsys.readouterr().err

    @pytest.mark.unit
    def test_date_option_requires_format(self) -> None:
        with pytest.raises(SystemExit):
            cli.build_parser().parse_args(["book.xlsx", "--date", "Date"])

    @pytest.mark.unit
    def test_date_option_splits_on_last_equals(self) -> None:
        args = cli.build_parser().parse_args(["book.xlsx", "--date", "a=b=%Y"])
        (column,) = args.date
        assert column.name == "a=b"
