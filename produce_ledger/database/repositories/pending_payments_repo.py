# database/repositories/pending_payments_repo.py
from __future__ import annotations

from dataclasses import dataclass
import logging
import sqlite3
from typing import Optional

from ...constants import TABLE_PENDING_PAYMENTS
from ...utils.helpers import to_float, today_str
from ...utils.validators import is_iso_date, is_strictly_positive_number, non_empty, try_parse_float
from ..errors import StoreError, ValidationError

_log = logging.getLogger(__name__)

# balances within this of zero are stored as 0.0
_EPS = 1e-9


@dataclass
class PendingPayment:
    id: int
    vendor_name: str
    total_due_amount: float
    last_transaction_date: str | None
    payment_due_date: str | None = None


class PendingPaymentsRepo:
    """
    Running accounts-receivable balance per vendor.

    Conventions:
      • Credit/pending sales ADD to the balance (positive amounts).
      • Payments received and reversals of pending sales SUBTRACT.
      • Every subtraction is floored at zero, and a balance within _EPS of
        zero is stored as 0.0 so float residue never keeps a vendor listed.
      • A vendor row is never deleted; a zero balance is re-activated by the
        next pending sale.
    """

    def __init__(self, conn: sqlite3.Connection):
        self.conn = conn

    # ---- reads ------------------------------------------------------------

    def get(self, vendor_name: str) -> Optional[PendingPayment]:
        r = self.conn.execute(
            f"""
            SELECT id, vendor_name, total_due_amount, last_transaction_date, payment_due_date
            FROM {TABLE_PENDING_PAYMENTS}
            WHERE vendor_name = ?
            """,
            (vendor_name.strip(),),
        ).fetchone()
        return self._row_to_payment(r) if r else None

    def list_outstanding(self) -> list[PendingPayment]:
        """Vendors that still owe money, most recent transaction first."""
        rows = self.conn.execute(
            f"""
            SELECT id, vendor_name, total_due_amount, last_transaction_date, payment_due_date
            FROM {TABLE_PENDING_PAYMENTS}
            WHERE total_due_amount > ?
            ORDER BY last_transaction_date DESC, vendor_name COLLATE NOCASE
            """,
            (_EPS,),
        ).fetchall()
        return [self._row_to_payment(r) for r in rows]

    def total_outstanding(self) -> float:
        r = self.conn.execute(
            f"""
            SELECT COALESCE(SUM(total_due_amount), 0.0) AS v
            FROM {TABLE_PENDING_PAYMENTS}
            WHERE total_due_amount > ?
            """,
            (_EPS,),
        ).fetchone()
        return to_float(r["v"])

    # ---- mutations --------------------------------------------------------

    def apply_charge(
        self,
        vendor_name: str,
        amount: float,
        date: str,
        payment_due_date: str | None = None,
    ) -> Optional[float]:
        """
        Add `amount` to the vendor's balance (creating the row on first
        charge). A negative amount reverses a charge and is floored at zero.

        Returns the new balance, or None when a non-positive amount names a
        vendor with no row (nothing to reverse).
        """
        if not non_empty(vendor_name):
            raise ValidationError("Vendor name cannot be empty.", field="vendor_name")
        ok, amt = try_parse_float(amount)
        if not ok:
            raise ValidationError("Amount must be a number.", field="amount")
        if not is_iso_date(date):
            raise ValidationError("Date must be YYYY-MM-DD.", field="date")
        if payment_due_date is not None and not is_iso_date(payment_due_date):
            raise ValidationError("Payment due date must be YYYY-MM-DD.", field="payment_due_date")
        vendor = vendor_name.strip()

        if amt <= 0 and self.get(vendor) is None:
            _log.debug("no pending balance for %s; reversal of %s ignored", vendor, amt)
            return None
        try:
            with self.conn:
                self.conn.execute(
                    f"""
                    INSERT INTO {TABLE_PENDING_PAYMENTS}
                        (vendor_name, total_due_amount, last_transaction_date, payment_due_date)
                    VALUES (:vendor, CASE WHEN :amt < :eps THEN 0.0 ELSE :amt END, :date, :due_date)
                    ON CONFLICT(vendor_name) DO UPDATE SET
                        total_due_amount      = CASE WHEN total_due_amount + :amt < :eps
                                                     THEN 0.0 ELSE total_due_amount + :amt END,
                        last_transaction_date = excluded.last_transaction_date,
                        payment_due_date      = COALESCE(excluded.payment_due_date, payment_due_date),
                        updated_at            = CURRENT_TIMESTAMP
                    """,
                    {"vendor": vendor, "amt": amt, "eps": _EPS, "date": date, "due_date": payment_due_date},
                )
        except sqlite3.Error as e:
            raise StoreError(f"Could not update balance for {vendor!r}: {e}") from e
        return self.get(vendor).total_due_amount

    def record_payment_received(
        self,
        vendor_name: str,
        amount_paid: float,
        date: str | None = None,
    ) -> Optional[float]:
        """
        Subtract a payment from the vendor's balance, floored at zero.
        Returns the new balance, or None if the vendor has no balance row.
        """
        if not non_empty(vendor_name):
            raise ValidationError("Vendor name cannot be empty.", field="vendor_name")
        if not is_strictly_positive_number(amount_paid):
            raise ValidationError("Payment amount must be a positive number.", field="amount_paid")
        if date is not None and not is_iso_date(date):
            raise ValidationError("Date must be YYYY-MM-DD.", field="date")
        vendor = vendor_name.strip()
        try:
            with self.conn:
                cur = self.conn.execute(
                    f"""
                    UPDATE {TABLE_PENDING_PAYMENTS}
                       SET total_due_amount      = CASE WHEN total_due_amount - :paid < :eps
                                                        THEN 0.0 ELSE total_due_amount - :paid END,
                           last_transaction_date = :date,
                           updated_at            = CURRENT_TIMESTAMP
                     WHERE vendor_name = :vendor
                    """,
                    {"paid": float(amount_paid), "eps": _EPS, "date": date or today_str(), "vendor": vendor},
                )
        except sqlite3.Error as e:
            raise StoreError(f"Could not record payment from {vendor!r}: {e}") from e
        if cur.rowcount == 0:
            _log.debug("payment from %s ignored: no pending balance", vendor)
            return None
        return self.get(vendor).total_due_amount

    # ---- utilities --------------------------------------------------------

    @staticmethod
    def _row_to_payment(r: sqlite3.Row) -> PendingPayment:
        return PendingPayment(
            id=int(r["id"]),
            vendor_name=r["vendor_name"],
            total_due_amount=to_float(r["total_due_amount"]),
            last_transaction_date=r["last_transaction_date"],
            payment_due_date=r["payment_due_date"],
        )
