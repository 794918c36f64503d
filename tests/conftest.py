# tests/conftest.py
# ---------------------------------------------------------------------
# Ground rules:
# - Every test gets its own SQLite file under tmp_path (no shared DB)
# - The ledger clock is pinned so sale_date/sale_time are predictable
# - conn.row_factory = sqlite3.Row, same as the app connection
# ---------------------------------------------------------------------

from __future__ import annotations

import sqlite3
from datetime import datetime
from pathlib import Path

import pytest

from produce_ledger import Ledger


class FixedClock:
    """Callable clock the tests can move forward by hand."""

    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def set(self, iso: str) -> None:
        self.now = datetime.fromisoformat(iso)


# ---------- Paths ----------
@pytest.fixture()
def db_path(tmp_path: Path) -> Path:
    return tmp_path / "data" / "produce_sales.db"


# ---------- Clock ----------
@pytest.fixture()
def clock() -> FixedClock:
    return FixedClock(datetime(2024, 1, 1, 9, 30, 0))


# ---------- Ledger on a fresh store ----------
@pytest.fixture()
def ledger(db_path: Path, clock: FixedClock):
    lg = Ledger(db_path, clock=clock).initialize()
    try:
        yield lg
    finally:
        lg.close()


# ---------- Raw connection for legacy fixtures ----------
@pytest.fixture()
def raw_conn(db_path: Path):
    db_path.parent.mkdir(parents=True, exist_ok=True)
    con = sqlite3.connect(db_path)
    con.row_factory = sqlite3.Row
    try:
        yield con
    finally:
        con.close()
