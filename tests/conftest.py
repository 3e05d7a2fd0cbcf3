from __future__ import annotations

import sqlite3
from collections.abc import Generator
from typing import Any

import pytest

from dynsql import Database, StatementConfig


class FakeCursor:
    """DB-API cursor double that records statements and replays canned results."""

    def __init__(self, connection: FakeConnection) -> None:
        self.connection = connection
        self.lastrowid: int | None = connection.lastrowid
        self.rowcount: int = connection.rowcount
        self.description: list[tuple[Any, ...]] | None = None
        self._rows: list[tuple[Any, ...]] = []
        self.closed = False

    def execute(self, sql: str, parameters: Any = None) -> None:
        self.connection.executed.append((sql, tuple(parameters or ())))
        if self.connection.error is not None:
            raise self.connection.error
        self._rows = list(self.connection.rows)
        if self.connection.columns:
            self.description = [(name, None, None, None, None, None, None) for name in self.connection.columns]

    def fetchone(self) -> tuple[Any, ...] | None:
        return self._rows.pop(0) if self._rows else None

    def fetchall(self) -> list[tuple[Any, ...]]:
        rows, self._rows = self._rows, []
        return rows

    def close(self) -> None:
        self.closed = True


class FakeConnection:
    def __init__(
        self,
        *,
        lastrowid: int | None = None,
        rowcount: int = -1,
        rows: list[tuple[Any, ...]] | None = None,
        columns: list[str] | None = None,
        error: Exception | None = None,
    ) -> None:
        self.lastrowid = lastrowid
        self.rowcount = rowcount
        self.rows = rows or []
        self.columns = columns or []
        self.error = error
        self.executed: list[tuple[str, tuple[Any, ...]]] = []
        self.cursors: list[FakeCursor] = []

    def cursor(self) -> FakeCursor:
        cursor = FakeCursor(self)
        self.cursors.append(cursor)
        return cursor


@pytest.fixture
def fake_connection() -> FakeConnection:
    return FakeConnection(lastrowid=42, rowcount=3)


@pytest.fixture
def mysql_db(fake_connection: FakeConnection) -> Database:
    return Database(fake_connection, config=StatementConfig(dialect="mysql"))


@pytest.fixture
def sqlite_connection() -> Generator[sqlite3.Connection, None, None]:
    connection = sqlite3.connect(":memory:")
    connection.execute("CREATE TABLE users (id INTEGER PRIMARY KEY, name TEXT, score INTEGER, base_score INTEGER)")
    connection.executemany(
        "INSERT INTO users (name, score, base_score) VALUES (?, ?, ?)",
        [("alice", 10, 100), ("bob", 20, 200), ("carol", 30, 300)],
    )
    yield connection
    connection.close()


@pytest.fixture
def sqlite_db(sqlite_connection: sqlite3.Connection) -> Database:
    return Database(sqlite_connection, config=StatementConfig(dialect="sqlite"))
