from __future__ import annotations

import logging
import sqlite3

from ..constants import (
    DEFAULT_COMMODITY,
    DEFAULT_UNIT,
    PAYMENT_STATUS_PAID,
    TABLE_INVENTORY,
    TABLE_PENDING_PAYMENTS,
    TABLE_SALES,
    TABLE_SETTINGS,
    TABLE_VEGETABLE_TYPES,
)

_log = logging.getLogger(__name__)

SQL = rf"""
/* ======================== LEDGER TABLES ======================== */

/* -------- sales --------
   trays_sold / rate_per_tray are the single-commodity columns; they stay
   readable and keep being written next to quantity_sold / rate_per_unit. */
CREATE TABLE IF NOT EXISTS {TABLE_SALES} (
    id                 INTEGER PRIMARY KEY AUTOINCREMENT,
    vendor_name        TEXT NOT NULL,
    vegetable_type     TEXT DEFAULT '{DEFAULT_COMMODITY}',
    quantity_sold      REAL,
    unit_type          TEXT DEFAULT '{DEFAULT_UNIT}',
    rate_per_unit      REAL,
    total_amount       REAL NOT NULL,
    payment_method     TEXT NOT NULL,
    payment_status     TEXT DEFAULT '{PAYMENT_STATUS_PAID}',
    due_amount         REAL DEFAULT 0,
    sale_date          TEXT NOT NULL,
    sale_time          TEXT NOT NULL,
    truck_arrival_time TEXT,
    distribution_time  TEXT,
    notes              TEXT,
    created_at         DATETIME DEFAULT CURRENT_TIMESTAMP,
    trays_sold         REAL,
    rate_per_tray      REAL
);
CREATE INDEX IF NOT EXISTS idx_sales_date ON {TABLE_SALES}(sale_date, sale_time);

/* -------- per-day stock, one row per (commodity, date) -------- */
CREATE TABLE IF NOT EXISTS {TABLE_INVENTORY} (
    id                   INTEGER PRIMARY KEY AUTOINCREMENT,
    vegetable_type       TEXT NOT NULL,
    initial_stock        REAL NOT NULL DEFAULT 0,
    current_stock        REAL NOT NULL DEFAULT 0,
    unit_type            TEXT NOT NULL DEFAULT '{DEFAULT_UNIT}',
    market_rate          REAL NOT NULL DEFAULT 0,
    carry_over_from_date TEXT,
    date                 TEXT NOT NULL,
    truck_arrival_time   TEXT,
    created_at           DATETIME DEFAULT CURRENT_TIMESTAMP,
    UNIQUE (vegetable_type, date)
);
CREATE INDEX IF NOT EXISTS idx_inventory_date ON {TABLE_INVENTORY}(date);

/* -------- running receivable per vendor -------- */
CREATE TABLE IF NOT EXISTS {TABLE_PENDING_PAYMENTS} (
    id                    INTEGER PRIMARY KEY AUTOINCREMENT,
    vendor_name           TEXT NOT NULL,
    total_due_amount      REAL NOT NULL DEFAULT 0 CHECK (total_due_amount >= 0),
    last_transaction_date TEXT,
    payment_due_date      TEXT,
    created_at            DATETIME DEFAULT CURRENT_TIMESTAMP,
    updated_at            DATETIME DEFAULT CURRENT_TIMESTAMP
);
CREATE UNIQUE INDEX IF NOT EXISTS idx_pending_payments_vendor
ON {TABLE_PENDING_PAYMENTS}(vendor_name);

/* -------- key/value settings -------- */
CREATE TABLE IF NOT EXISTS {TABLE_SETTINGS} (
    id         INTEGER PRIMARY KEY AUTOINCREMENT,
    key        TEXT UNIQUE NOT NULL,
    value      TEXT NOT NULL,
    updated_at DATETIME DEFAULT CURRENT_TIMESTAMP
);

/* -------- commodity catalogue -------- */
CREATE TABLE IF NOT EXISTS {TABLE_VEGETABLE_TYPES} (
    id           INTEGER PRIMARY KEY AUTOINCREMENT,
    name         TEXT UNIQUE NOT NULL,
    default_unit TEXT NOT NULL DEFAULT '{DEFAULT_UNIT}',
    is_active    INTEGER NOT NULL DEFAULT 1 CHECK (is_active IN (0,1)),
    created_at   DATETIME DEFAULT CURRENT_TIMESTAMP
);
"""

# Columns a trays-only Sales table is missing, with the DDL used to add them.
# Defaults are safe for old rows: they were all paid tomato sales by the tray.
SALES_MIGRATION_COLUMNS: tuple[tuple[str, str], ...] = (
    ("vegetable_type", f"TEXT DEFAULT '{DEFAULT_COMMODITY}'"),
    ("quantity_sold", "REAL"),
    ("unit_type", f"TEXT DEFAULT '{DEFAULT_UNIT}'"),
    ("rate_per_unit", "REAL"),
    ("payment_status", f"TEXT DEFAULT '{PAYMENT_STATUS_PAID}'"),
    ("due_amount", "REAL DEFAULT 0"),
    ("truck_arrival_time", "TEXT"),
    ("distribution_time", "TEXT"),
    ("notes", "TEXT"),
    ("trays_sold", "REAL"),
    ("rate_per_tray", "REAL"),
)

# (label, statement) pairs; each runs on its own and only touches NULL cells.
SALES_BACKFILL_STEPS: tuple[tuple[str, str], ...] = (
    (
        "backfill quantity_sold",
        f"UPDATE {TABLE_SALES} SET quantity_sold = trays_sold "
        "WHERE quantity_sold IS NULL AND trays_sold IS NOT NULL",
    ),
    (
        "backfill rate_per_unit",
        f"UPDATE {TABLE_SALES} SET rate_per_unit = rate_per_tray "
        "WHERE rate_per_unit IS NULL AND rate_per_tray IS NOT NULL",
    ),
    (
        "backfill vegetable_type",
        f"UPDATE {TABLE_SALES} SET vegetable_type = '{DEFAULT_COMMODITY}' "
        "WHERE vegetable_type IS NULL OR TRIM(vegetable_type) = ''",
    ),
    (
        "backfill unit_type",
        f"UPDATE {TABLE_SALES} SET unit_type = '{DEFAULT_UNIT}' "
        "WHERE unit_type IS NULL OR TRIM(unit_type) = ''",
    ),
    (
        "backfill payment_status",
        f"UPDATE {TABLE_SALES} SET payment_status = '{PAYMENT_STATUS_PAID}' "
        "WHERE payment_status IS NULL",
    ),
    (
        "backfill due_amount",
        f"UPDATE {TABLE_SALES} SET due_amount = 0 WHERE due_amount IS NULL",
    ),
)


def table_columns(conn: sqlite3.Connection, table: str) -> set[str]:
    cur = conn.execute(f"PRAGMA table_info({table});")
    return {row[1] for row in cur.fetchall()}  # row[1] = name


def is_legacy_sales_table(conn: sqlite3.Connection) -> bool:
    """True when Sales predates the multi-commodity columns."""
    cols = table_columns(conn, TABLE_SALES)
    return bool(cols) and not {"vegetable_type", "quantity_sold", "rate_per_unit"} <= cols


def _run_step(conn: sqlite3.Connection, label: str, sql: str, failed: list[str]) -> None:
    try:
        conn.execute(sql)
    except sqlite3.Error as e:
        # e.g. "duplicate column name" when a previous run already applied it
        _log.warning("migration step '%s' skipped: %s", label, e)
        failed.append(label)


def migrate_sales(conn: sqlite3.Connection) -> list[str]:
    """
    Bring a trays-only Sales table up to the multi-commodity shape.

    Missing columns are added with safe defaults and the new quantity/rate
    columns are backfilled from trays_sold/rate_per_tray. Nothing is dropped
    or renamed. Every step stands alone: a failing step is logged and the
    rest still run. Returns the labels of the steps that failed.
    """
    failed: list[str] = []
    existing = table_columns(conn, TABLE_SALES)
    for name, ddl in SALES_MIGRATION_COLUMNS:
        if name in existing:
            continue
        _run_step(conn, f"add column {name}", f"ALTER TABLE {TABLE_SALES} ADD COLUMN {name} {ddl};", failed)
    for label, sql in SALES_BACKFILL_STEPS:
        _run_step(conn, label, sql, failed)
    return failed


def init_schema(conn: sqlite3.Connection) -> list[str]:
    """
    Apply the idempotent DDL, then migrate legacy Sales rows.

    DDL failures propagate (sqlite3.Error); migration failures never do.
    """
    legacy = is_legacy_sales_table(conn)
    conn.executescript(SQL)
    if legacy:
        _log.info("legacy single-commodity Sales table detected; migrating")
    failed = migrate_sales(conn)
    conn.commit()
    return failed
