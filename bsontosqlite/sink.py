from __future__ import annotations

import sqlite3
from pathlib import Path
from typing import Optional, Union

from . import logger
from .errors import DatabaseOpenError, InvalidTableNameError, TableCreateError

PRAGMAS_SQL = """
PRAGMA synchronous = NORMAL;
PRAGMA temp_store = MEMORY;
"""


def sanitize_table_name(name: str) -> str:
    """Replace hyphens, dots and spaces by underscores. Nothing else is checked."""
    for ch in ("-", ".", " "):
        name = name.replace(ch, "_")
    return name


def _create_table_sql(table: str) -> str:
    return f"""
CREATE TABLE IF NOT EXISTS {table} (
  id            INTEGER PRIMARY KEY AUTOINCREMENT,
  document_id   TEXT UNIQUE,
  data          TEXT
)
"""


class SQLiteSink:
    """Destination table of one collection in a single-file SQLite database.

    The connection is opened on construction and closed once by `close` or
    by leaving the `with` block. Rows are committed one by one, there is no
    transaction around the whole import.

    Table names are interpolated into the SQL after `sanitize_table_name`,
    without quoting, so the caller is responsible for passing a trusted
    collection name.
    """

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path)
        self.table: Optional[str] = None
        self._insert_sql: Optional[str] = None
        logger.debug(f"Opening SQLite database (file={self.path})")
        self.conn = None
        try:
            self.conn = sqlite3.connect(str(self.path))
            self.conn.executescript(PRAGMAS_SQL)
        except sqlite3.Error as e:
            self.close()
            raise DatabaseOpenError(f"failed to open database {self.path}: {e}") from e

    def __enter__(self) -> SQLiteSink:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def close(self) -> None:
        if self.conn is None:
            return
        self.conn.close()
        self.conn = None
        logger.debug(f"Closed SQLite database (file={self.path})")

    def ensure_table(self, collection_name: str) -> str:
        """
        Create the destination table unless it already exists

        :param collection_name: the collection name, sanitized here
        :return: the table name actually used
        :raises InvalidTableNameError: if nothing is left after sanitizing
        :raises TableCreateError: if SQLite refuses the statement
        """
        table = sanitize_table_name(collection_name)
        if not table:
            raise InvalidTableNameError(
                "collection name is empty, set 'collection' or 'collectionName' in the metadata")
        try:
            self.conn.execute(_create_table_sql(table))
            self.conn.commit()
        except sqlite3.Error as e:
            raise TableCreateError(f"failed to create table {table}: {e}") from e

        self.table = table
        self._insert_sql = f"INSERT OR REPLACE INTO {table} (document_id, data) VALUES (?, ?)"
        logger.info(f"Database table ready (table={table})")
        return table

    def upsert(self, document_id: str, data: str) -> None:
        """Insert a row, replacing the one with the same document_id.

        An empty document_id is a valid key: documents without `_id` all land
        on the same row and the last one wins.
        """
        if self._insert_sql is None:
            raise RuntimeError("ensure_table must be called before upsert")
        try:
            self.conn.execute(self._insert_sql, (document_id, data))
        except sqlite3.Error:
            self.conn.rollback()
            raise
        self.conn.commit()

    def row_count(self) -> int:
        if self.table is None:
            raise RuntimeError("ensure_table must be called before row_count")
        return self.conn.execute(f"SELECT COUNT(*) FROM {self.table}").fetchone()[0]
