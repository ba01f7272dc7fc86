"""
SQLite log sink.

Stores the crawl record in a fixed relational schema. Every row is keyed by
the auto-incremented id of the page's request row.
"""

import sqlite3
import time
from collections.abc import Mapping
from typing import Any

from pagehound.exceptions import ConfigurationError, LogSinkError
from pagehound.models import Request, Response
from pagehound.sinks.base import LogSink

TABLES = ("requests", "request_headers", "responses", "response_headers", "messages")

SCHEMA = """
CREATE TABLE IF NOT EXISTS requests (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    microtime REAL NOT NULL,
    url TEXT NOT NULL,
    referrer TEXT,
    method TEXT NOT NULL
);
CREATE TABLE IF NOT EXISTS request_headers (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    request_id INTEGER REFERENCES requests(id),
    header TEXT NOT NULL,
    value TEXT
);
CREATE TABLE IF NOT EXISTS responses (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    request_id INTEGER REFERENCES requests(id),
    microtime REAL NOT NULL,
    statuscode INTEGER NOT NULL,
    message TEXT
);
CREATE TABLE IF NOT EXISTS response_headers (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    request_id INTEGER REFERENCES requests(id),
    header TEXT NOT NULL,
    value TEXT
);
CREATE TABLE IF NOT EXISTS messages (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    request_id INTEGER REFERENCES requests(id),
    handler TEXT NOT NULL,
    key TEXT NOT NULL,
    value TEXT
);
"""


def _to_db_value(value: Any) -> str | None:
    if value is None:
        return None
    if isinstance(value, bytes):
        return value.decode("utf-8", errors="replace")
    return str(value)


class SqliteLogSink(LogSink):
    """Log sink writing to an SQLite database file."""

    def __init__(self, dbfile: str | None, append: bool = False):
        """
        Open (and by default reset) the log database.

        Args:
            dbfile: Path of the database file.
            append: Keep rows from previous runs instead of dropping tables.

        Raises:
            ConfigurationError: If no database file is given.
            LogSinkError: If the database cannot be opened or initialized.
        """
        if not dbfile:
            raise ConfigurationError("SQLite log sink requires a 'dbfile' option", option="dbfile")

        self.dbfile = dbfile
        self.append = append
        self._request_id: int | None = None
        self._closed = False

        try:
            self._conn = sqlite3.connect(dbfile)
            if not append:
                for table in TABLES:
                    self._conn.execute(f"DROP TABLE IF EXISTS {table}")
            self._conn.executescript(SCHEMA)
            self._conn.commit()
        except sqlite3.Error as e:
            raise LogSinkError(f"Unable to open SQLite log '{dbfile}': {e}") from e

    def _execute(self, sql: str, params: tuple = ()) -> sqlite3.Cursor:
        try:
            return self._conn.execute(sql, params)
        except sqlite3.Error as e:
            raise LogSinkError(f"Unable to write SQLite log: {e}") from e

    def start_page(self) -> None:
        self._request_id = None

    def log_request(self, request: Request) -> None:
        cursor = self._execute(
            "INSERT INTO requests (microtime, url, referrer, method) VALUES (?, ?, ?, ?)",
            (time.time(), request.url, request.referrer, request.method),
        )
        self._request_id = cursor.lastrowid

        for name, value in request.headers.items():
            self._execute(
                "INSERT INTO request_headers (request_id, header, value) VALUES (?, ?, ?)",
                (self._request_id, name, value),
            )

    def log_response(self, response: Response) -> None:
        self._execute(
            "INSERT INTO responses (request_id, microtime, statuscode, message) "
            "VALUES (?, ?, ?, ?)",
            (self._request_id, time.time(), response.status_code, response.reason),
        )

        for name, value in response.header_items():
            self._execute(
                "INSERT INTO response_headers (request_id, header, value) VALUES (?, ?, ?)",
                (self._request_id, name, value),
            )

    def log_handler_info(self, handler: str, info: Mapping[str, Any]) -> None:
        for key, value in info.items():
            self._execute(
                "INSERT INTO messages (request_id, handler, key, value) VALUES (?, ?, ?, ?)",
                (self._request_id, handler, str(key), _to_db_value(value)),
            )

    def end_page(self) -> None:
        try:
            self._conn.commit()
        except sqlite3.Error as e:
            raise LogSinkError(f"Unable to write SQLite log: {e}") from e
        self._request_id = None

    def close(self) -> None:
        """Commit pending rows and close the database."""
        if self._closed:
            return
        self._conn.commit()
        self._conn.close()
        self._closed = True
