# database/__init__.py
from __future__ import annotations

import logging
from pathlib import Path
import sqlite3

from ..config import DB_PATH
from ..constants import SCHEMA_VERSION
from . import schema as schema_module
from .errors import StoreError
from .seeders.default_data import seed as seed_default_data
from .versioning import get_current_version, set_current_version

_log = logging.getLogger(__name__)

MEMORY = ":memory:"


def get_connection(db_path: Path | str = DB_PATH) -> sqlite3.Connection:
    """
    Returns a sqlite3.Connection with:
      - WAL mode (file databases only)
      - foreign_keys ON
      - row_factory = sqlite3.Row (so rows behave like dicts and tuples)
    """
    if str(db_path) != MEMORY:
        Path(db_path).parent.mkdir(parents=True, exist_ok=True)
    conn = sqlite3.connect(str(db_path))
    conn.row_factory = sqlite3.Row
    conn.execute("PRAGMA foreign_keys = ON;")
    if str(db_path) != MEMORY:
        conn.execute("PRAGMA journal_mode = WAL;")
    return conn


class Store:
    """
    The one SQLite handle the ledgers share.

    Lifecycle: open -> migrate -> ready; close releases the handle. If open()
    fails the store stays closed, so calling open() again is the retry path.
    """

    def __init__(self, db_path: Path | str = DB_PATH):
        self.db_path = db_path
        self._conn: sqlite3.Connection | None = None
        self.migration_failures: list[str] = []

    @property
    def is_open(self) -> bool:
        return self._conn is not None

    @property
    def conn(self) -> sqlite3.Connection:
        if self._conn is None:
            raise StoreError("Store is not open; call open() first.")
        return self._conn

    def open(self) -> "Store":
        if self._conn is not None:
            return self
        conn = None
        try:
            conn = get_connection(self.db_path)
            previous = get_current_version(conn)
            # Always apply the schema (idempotent; legacy steps are fault-tolerant)
            self.migration_failures = schema_module.init_schema(conn)
            # Seeders are safe to run repeatedly (idempotent).
            seed_default_data(conn)
            set_current_version(conn, SCHEMA_VERSION)
        except (sqlite3.Error, OSError) as e:
            if conn is not None:
                conn.close()
            raise StoreError(f"Could not open store at {self.db_path}: {e}") from e
        if previous != SCHEMA_VERSION:
            _log.info("schema at %s: %s -> %s", self.db_path, previous or "new", SCHEMA_VERSION)
        self._conn = conn
        return self

    def close(self) -> None:
        if self._conn is None:
            return
        try:
            self._conn.commit()
        finally:
            self._conn.close()
            self._conn = None

    def __enter__(self) -> "Store":
        return self.open()

    def __exit__(self, *exc) -> None:
        self.close()


__all__ = [
    "Store",
    "get_connection",
]
