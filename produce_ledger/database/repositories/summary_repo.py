# database/repositories/summary_repo.py
from __future__ import annotations

import logging
import sqlite3
from datetime import datetime
from typing import Any, Callable, Dict, List, Optional, Tuple

from ...constants import PAYMENT_METHODS, PAYMENT_STATUSES, TABLE_SALES
from ...utils.helpers import to_float, today_str
from ...utils.validators import is_iso_date
from ..errors import ValidationError
from .inventory_repo import InventoryRepo
from .sales_repo import Sale, SalesRepo
from .settings_repo import SettingsRepo

_log = logging.getLogger(__name__)

# rows a failed backfill left half-migrated only carry trays_sold
_QTY = "COALESCE(quantity_sold, trays_sold, 0)"

_AGGREGATE_SQL = f"""
    SELECT
        COALESCE(SUM({_QTY}), 0)                                     AS total_quantity_sold,
        COALESCE(SUM(total_amount), 0.0)                             AS total_money_earned,
        COALESCE(SUM(total_amount - COALESCE(due_amount, 0)), 0.0)   AS paid_amount,
        COALESCE(SUM(COALESCE(due_amount, 0)), 0.0)                  AS pending_amount,
        COUNT(*)                                                     AS total_transactions
    FROM {TABLE_SALES}
"""


class SummaryRepo:
    """
    Read-only aggregation over Sales and Inventory.

    Each method returns either a dict of figures or a list of Sale rows.
    Dates are compared as ISO 'YYYY-MM-DD' text so the sale_date index applies;
    "today" comes from the injected clock, never from SQLite's DATE('now').
    """

    def __init__(
        self,
        conn: sqlite3.Connection,
        inventory: InventoryRepo,
        settings: SettingsRepo,
        clock: Callable[[], datetime] = datetime.now,
    ) -> None:
        self.conn = conn
        self.inventory = inventory
        self.settings = settings
        self.clock = clock

    # ----------------------------- aggregates ------------------------------

    def todays_summary(self, today: Optional[str] = None) -> Dict[str, Any]:
        """
        Today's sales figures plus the day's stock snapshot.

        If the stock lookup fails, the sales figures are still returned with
        an empty inventory list.
        """
        day = today or today_str(self.clock())
        summary = self._aggregate(" WHERE sale_date = ?", (day,))

        target = self.settings.get_daily_target()
        summary["date"] = day
        summary["daily_target"] = target
        summary["units_left"] = max(0.0, target - summary["total_quantity_sold"])

        try:
            inventory = self.inventory.get_by_date(day)
        except Exception as e:  # noqa: BLE001
            _log.warning("inventory snapshot for %s unavailable: %s", day, e)
            inventory = []
        summary["inventory"] = inventory
        summary["inventory_value"] = sum(r.stock_value for r in inventory)
        return summary

    def all_time_summary(self) -> Dict[str, Any]:
        return self._aggregate("", ())

    # ------------------------------- queries -------------------------------

    def date_range_summary(
        self,
        start: str,
        end: str,
        *,
        commodity: Optional[str] = None,
        payment_status: Optional[str] = None,
        vendor: Optional[str] = None,
        payment_method: Optional[str] = None,
    ) -> List[Sale]:
        """
        Sales with start <= sale_date <= end, newest first.

        Optional filters: exact commodity, payment status and payment method;
        vendor is a case-insensitive substring of vendor_name.
        """
        if not (is_iso_date(start) and is_iso_date(end)):
            raise ValidationError("Dates must be YYYY-MM-DD.", field="date")
        if payment_status is not None and payment_status not in PAYMENT_STATUSES:
            raise ValidationError("Payment status must be 'paid' or 'pending'.", field="payment_status")
        if payment_method is not None and payment_method not in PAYMENT_METHODS:
            raise ValidationError(
                f"Payment method must be one of {', '.join(PAYMENT_METHODS)}.", field="payment_method"
            )

        where = ["sale_date >= ?", "sale_date <= ?"]
        params: List[Any] = [start, end]
        if commodity:
            where.append("vegetable_type = ?")
            params.append(commodity.strip())
        if payment_status:
            where.append("payment_status = ?")
            params.append(payment_status)
        if payment_method:
            where.append("payment_method = ?")
            params.append(payment_method)
        if vendor and vendor.strip():
            # case-insensitive substring; no LIKE wildcards
            where.append("instr(LOWER(vendor_name), LOWER(?)) > 0")
            params.append(vendor.strip())

        sql = f"SELECT * FROM {TABLE_SALES} WHERE " + " AND ".join(where)
        sql += " ORDER BY sale_date DESC, sale_time DESC, id DESC"
        return [SalesRepo.row_to_sale(r) for r in self.conn.execute(sql, params).fetchall()]

    # ------------------------------- helpers -------------------------------

    def _aggregate(self, where_sql: str, params: Tuple) -> Dict[str, Any]:
        r = self.conn.execute(_AGGREGATE_SQL + where_sql, params).fetchone()
        return {
            "total_quantity_sold": to_float(r["total_quantity_sold"]),
            "total_money_earned": to_float(r["total_money_earned"]),
            "paid_amount": to_float(r["paid_amount"]),
            "pending_amount": to_float(r["pending_amount"]),
            "total_transactions": int(r["total_transactions"] or 0),
        }
