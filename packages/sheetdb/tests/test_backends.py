"""Tests for sheetdb.backends.sqlite -- Destination and SQLiteStore."""

from __future__ import annotations

import pathlib

import pytest
from pydantic import ValidationError

from sheetdb.backends.sqlite import MEMORY, Destination, SQLiteStore, open_store
from sheetdb.errors import ErrorCode, StorageError
from sheetdb.protocols import StructuredStore


class TestDestination:
    @pytest.mark.unit
    def test_parse_memory(self) -> None:
        dest = Destination.parse(MEMORY)
        assert dest.is_memory
        assert dest.connect_args() == (":memory:", False)

    @pytest.mark.unit
    def test_parse_path(self) -> None:
        dest = Destination.parse("book.sqlite")
        assert not dest.is_memory
        assert dest.connect_args() == ("book.sqlite", False)

    @pytest.mark.unit
    def test_parse_passes_destination_through(self) -> None:
        dest = Destination.shared_memory("x")
        assert Destination.parse(dest) is dest

    @pytest.mark.unit
    def test_shared_memory_uri(self) -> None:
        dest = Destination.shared_memory("book")
        assert dest.is_memory
        assert dest.connect_args() == ("file:book?mode=memory&cache=shared", True)

    @pytest.mark.unit
    def test_path_and_shared_name_exclusive(self) -> None:
        with pytest.raises(ValidationError):
            Destination(path="a.sqlite", shared_name="a")

    @pytest.mark.unit
    def test_frozen(self) -> None:
        dest = Destination.memory()
        with pytest.raises(ValidationError):
            dest.path = "x"  # type: ignore[misc]


class TestSQLiteStore:
    @pytest.mark.unit
    def test_satisfies_protocol(self) -> None:
        with SQLiteStore() as store:
            assert isinstance(store, StructuredStore)

    @pytest.mark.unit
    def test_execute_and_query(self) -> None:
        with SQLiteStore() as store:
            store.execute('CREATE TABLE "t" ("a" TEXT, "b" REAL)')
            store.execute('INSERT INTO "t" VALUES (?, ?)', ["x", 1.5])
            store.executemany('INSERT INTO "t" VALUES (?, ?)', [["y", 2.0], ["z", None]])
            assert store.query('SELECT * FROM "t" ORDER BY "a"') == [
                ("x", 1.5),
                ("y", 2.0),
                ("z", None),
            ]

    @pytest.mark.unit
    def test_rollback_discards_transaction(self) -> None:
        with SQLiteStore() as store:
            store.execute('CREATE TABLE "t" ("a" TEXT)')
            store.begin()
            store.execute('INSERT INTO "t" VALUES (?)', ["x"])
            store.rollback()
            assert store.query('SELECT COUNT(*) FROM "t"') == [(0,)]

    @pytest.mark.unit
    def test_rollback_without_transaction_is_noop(self) -> None:
        with SQLiteStore() as store:
            store.rollback()

    @pytest.mark.unit
    def test_bad_statement_raises_storage_error(self) -> None:
        with SQLiteStore() as store:
            with pytest.raises(StorageError) as exc_info:
                store.execute("INSERT INTO missing VALUES (1)")
            assert exc_info.value.code is ErrorCode.E_BACKEND_DB_WRITE
            assert exc_info.value.__cause__ is not None

    @pytest.mark.unit
    def test_bad_query_raises_storage_error(self) -> None:
        with SQLiteStore() as store:
            with pytest.raises(StorageError):
                store.query("SELECT * FROM missing")

    @pytest.mark.unit
    def test_unreachable_file_raises_connect_error(self, tmp_path: pathlib.Path) -> None:
        dest = Destination.file(str(tmp_path / "no" / "such" / "dir" / "db.sqlite"))
        with pytest.raises(StorageError) as exc_info:
            SQLiteStore(dest)
        assert exc_info.value.code is ErrorCode.E_BACKEND_DB_CONNECT

    @pytest.mark.unit
    def test_introspection(self) -> None:
        with SQLiteStore() as store:
            assert not store.table_exists("t")
            store.execute('CREATE TABLE "t" ("b" REAL, "a" TEXT)')
            assert store.table_exists("t")
            assert list(store.get_table_schema("t").items()) == [("b", "REAL"), ("a", "TEXT")]

    @pytest.mark.unit
    def test_connection_uri(self, tmp_path: pathlib.Path) -> None:
        path = str(tmp_path / "db.sqlite")
        with open_store(path) as store:
            assert store.get_connection_uri() == f"sqlite:///{path}"

    @pytest.mark.unit
    def test_shared_memory_between_connections(self) -> None:
        dest = Destination.shared_memory("sheetdb_backend_test")
        with open_store(dest) as writer:
            writer.execute('CREATE TABLE "t" ("a" TEXT)')
            writer.execute('INSERT INTO "t" VALUES (?)', ["x"])
            with open_store(dest) as reader:
                assert reader.query('SELECT "a" FROM "t"') == [("x",)]
