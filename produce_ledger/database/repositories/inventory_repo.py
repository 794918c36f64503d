from __future__ import annotations

"""
Per-commodity, per-day stock (Inventory table).

Conventions:
- One row per (vegetable_type, date); a second intake for the same key
  replaces the first (no merge).
- Sales decrement current_stock; deleting a sale adds it back. The stock is
  never clamped here, so a negative current_stock is a data-quality signal
  (more sold than was taken in), not an error.
- Date strings are ISO 'YYYY-MM-DD'.
"""

from dataclasses import dataclass
import logging
import sqlite3
from typing import List, Optional

from ...constants import TABLE_INVENTORY
from ...utils.helpers import to_float
from ...utils.validators import is_iso_date, is_non_negative_number, non_empty, try_parse_float
from ..errors import StoreError, ValidationError

_log = logging.getLogger(__name__)


@dataclass
class InventoryRecord:
    id: int
    commodity: str
    initial_stock: float
    current_stock: float
    unit: str
    market_rate: float
    date: str
    carry_over_from_date: str | None = None
    truck_arrival_time: str | None = None

    @property
    def stock_value(self) -> float:
        return self.current_stock * self.market_rate


class InventoryRepo:
    def __init__(self, conn: sqlite3.Connection):
        self.conn = conn

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------
    def get_by_date(self, date: str) -> List[InventoryRecord]:
        """All records for `date`, ordered by commodity name."""
        rows = self.conn.execute(
            f"""
            SELECT * FROM {TABLE_INVENTORY}
            WHERE date = ?
            ORDER BY vegetable_type COLLATE NOCASE
            """,
            (date,),
        ).fetchall()
        return [self._row_to_record(r) for r in rows]

    def get(self, commodity: str, date: str) -> Optional[InventoryRecord]:
        r = self.conn.execute(
            f"SELECT * FROM {TABLE_INVENTORY} WHERE vegetable_type = ? AND date = ?",
            (commodity, date),
        ).fetchone()
        return self._row_to_record(r) if r else None

    def inventory_value(self, date: str) -> float:
        """Sum of current_stock × market_rate for `date`."""
        r = self.conn.execute(
            f"""
            SELECT COALESCE(SUM(current_stock * market_rate), 0.0) AS v
            FROM {TABLE_INVENTORY}
            WHERE date = ?
            """,
            (date,),
        ).fetchone()
        return to_float(r["v"])

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------
    def intake(
        self,
        commodity: str,
        initial_stock: float,
        unit: str,
        market_rate: float,
        date: str,
        carry_over_from_date: str | None = None,
        *,
        truck_arrival_time: str | None = None,
    ) -> int:
        """
        Create or replace the (commodity, date) record with
        current_stock = initial_stock. Returns the record id.
        """
        self._validate_intake(commodity, initial_stock, unit, market_rate, date, carry_over_from_date)
        try:
            with self.conn:
                self._upsert(
                    commodity.strip(),
                    float(initial_stock),
                    unit.strip(),
                    float(market_rate),
                    date,
                    carry_over_from_date,
                    truck_arrival_time,
                )
        except sqlite3.Error as e:
            raise StoreError(f"Could not record intake of {commodity!r} on {date}: {e}") from e
        return self.get(commodity.strip(), date).id

    def apply_consumption(self, commodity: str, quantity: float, date: str) -> bool:
        """
        current_stock -= quantity for (commodity, date). A negative quantity
        adds stock back (sale reversal).

        Returns False, without error, when no record exists: a missing stock
        record never blocks a sale.
        """
        ok, qty = try_parse_float(quantity)
        if not ok:
            raise ValidationError("Quantity must be a number.", field="quantity")
        with self.conn:
            cur = self.conn.execute(
                f"""
                UPDATE {TABLE_INVENTORY}
                   SET current_stock = current_stock - ?
                 WHERE vegetable_type = ? AND date = ?
                """,
                (qty, commodity, date),
            )
        if cur.rowcount == 0:
            _log.debug("no stock record for %s on %s; consumption of %s not tracked", commodity, date, qty)
            return False
        return True

    def carry_over(self, from_date: str, to_date: str) -> List[InventoryRecord]:
        """
        Open `to_date` with every commodity that had stock left on
        `from_date`; commodities with nothing left are skipped.
        """
        if not (is_iso_date(from_date) and is_iso_date(to_date)):
            raise ValidationError("Dates must be YYYY-MM-DD.", field="date")
        if from_date == to_date:
            raise ValidationError("Cannot carry stock over onto the same day.", field="date")
        leftovers = [r for r in self.get_by_date(from_date) if r.current_stock > 0]
        try:
            with self.conn:
                for r in leftovers:
                    self._upsert(r.commodity, r.current_stock, r.unit, r.market_rate, to_date, from_date, None)
        except sqlite3.Error as e:
            raise StoreError(f"Could not carry stock over from {from_date} to {to_date}: {e}") from e
        _log.info("carried %d commodities over from %s to %s", len(leftovers), from_date, to_date)
        return [self.get(r.commodity, to_date) for r in leftovers]

    # ------------------------------------------------------------------
    # Utilities
    # ------------------------------------------------------------------
    def _upsert(self, commodity, initial_stock, unit, market_rate, date, carry_over_from_date, truck_arrival_time):
        self.conn.execute(
            f"""
            INSERT INTO {TABLE_INVENTORY} (
                vegetable_type, initial_stock, current_stock, unit_type,
                market_rate, carry_over_from_date, date, truck_arrival_time
            ) VALUES (?, ?, ?, ?, ?, ?, ?, ?)
            ON CONFLICT(vegetable_type, date) DO UPDATE SET
                initial_stock        = excluded.initial_stock,
                current_stock        = excluded.current_stock,
                unit_type            = excluded.unit_type,
                market_rate          = excluded.market_rate,
                carry_over_from_date = excluded.carry_over_from_date,
                truck_arrival_time   = excluded.truck_arrival_time
            """,
            (commodity, initial_stock, initial_stock, unit, market_rate,
             carry_over_from_date, date, truck_arrival_time),
        )

    @staticmethod
    def _validate_intake(commodity, initial_stock, unit, market_rate, date, carry_over_from_date) -> None:
        if not non_empty(commodity):
            raise ValidationError("Commodity cannot be empty.", field="commodity")
        if not non_empty(unit):
            raise ValidationError("Unit cannot be empty.", field="unit")
        if not is_non_negative_number(initial_stock):
            raise ValidationError("Initial stock must be zero or more.", field="initial_stock")
        if not is_non_negative_number(market_rate):
            raise ValidationError("Market rate must be zero or more.", field="market_rate")
        if not is_iso_date(date):
            raise ValidationError("Date must be YYYY-MM-DD.", field="date")
        if carry_over_from_date is not None and not is_iso_date(carry_over_from_date):
            raise ValidationError("Carry-over date must be YYYY-MM-DD.", field="carry_over_from_date")

    @staticmethod
    def _row_to_record(r: sqlite3.Row) -> InventoryRecord:
        return InventoryRecord(
            id=int(r["id"]),
            commodity=r["vegetable_type"],
            initial_stock=to_float(r["initial_stock"]),
            current_stock=to_float(r["current_stock"]),
            unit=r["unit_type"],
            market_rate=to_float(r["market_rate"]),
            date=r["date"],
            carry_over_from_date=r["carry_over_from_date"],
            truck_arrival_time=r["truck_arrival_time"],
        )
