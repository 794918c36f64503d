from __future__ import annotations

from dataclasses import dataclass, fields
from datetime import datetime
import logging
import sqlite3
from typing import Any, Callable, Mapping, Optional, Union

from ...constants import (
    DEFAULT_COMMODITY,
    DEFAULT_UNIT,
    PAYMENT_METHODS,
    PAYMENT_STATUS_PAID,
    PAYMENT_STATUS_PENDING,
    PAYMENT_STATUSES,
    TABLE_SALES,
)
from ...utils.helpers import now_time_str, to_float, today_str
from ...utils.validators import is_non_negative_number, is_strictly_positive_number, non_empty
from ..errors import NonCriticalWarning, NotFoundError, StoreError, ValidationError
from .inventory_repo import InventoryRepo
from .pending_payments_repo import PendingPaymentsRepo

_log = logging.getLogger(__name__)


@dataclass
class SaleInput:
    """Canonical input for recording a sale."""
    vendor_name: str
    quantity: float
    rate_per_unit: float
    payment_method: str = "Cash"
    commodity: str = DEFAULT_COMMODITY
    unit: str = DEFAULT_UNIT
    payment_status: str | None = None   # None: pending for Credit, else paid
    amount_paid: float = 0.0            # part-payment taken on a pending sale
    truck_arrival_time: str | None = None
    distribution_time: str | None = None
    notes: str | None = None


@dataclass
class LegacySaleInput:
    """The trays-only form: vendor, trays, rate per tray, payment method."""
    vendor_name: str
    quantity: float
    rate: float
    payment_method: str = "Cash"


RawSaleInput = Union[SaleInput, LegacySaleInput, Mapping[str, Any]]

# mapping keys accepted as aliases of the canonical field names
_INPUT_ALIASES = {
    "vendor": "vendor_name",
    "vegetable_type": "commodity",
    "quantity_sold": "quantity",
    "trays_sold": "quantity",
    "rate": "rate_per_unit",
    "rate_per_tray": "rate_per_unit",
    "unit_type": "unit",
}
_LEGACY_KEYS = {"trays_sold", "rate_per_tray"}


@dataclass
class Sale:
    id: int
    vendor_name: str
    commodity: str
    quantity: float
    unit: str
    rate_per_unit: float
    total_amount: float
    payment_method: str
    payment_status: str
    due_amount: float
    sale_date: str
    sale_time: str
    truck_arrival_time: str | None = None
    distribution_time: str | None = None
    notes: str | None = None
    created_at: str | None = None

    @property
    def is_pending(self) -> bool:
        return self.payment_status == PAYMENT_STATUS_PENDING

    @property
    def paid_amount(self) -> float:
        return self.total_amount - self.due_amount


def normalize_sale_input(raw: RawSaleInput) -> SaleInput:
    """
    Turn any accepted input shape into a SaleInput.

    - SaleInput passes through.
    - LegacySaleInput (or a mapping using trays_sold/rate_per_tray) becomes a
      paid sale of the default commodity in the default unit.
    - Other mappings are read by canonical field name or alias.
    """
    if isinstance(raw, SaleInput):
        return raw
    if isinstance(raw, LegacySaleInput):
        return SaleInput(
            vendor_name=raw.vendor_name,
            quantity=raw.quantity,
            rate_per_unit=raw.rate,
            payment_method=raw.payment_method,
            payment_status=PAYMENT_STATUS_PAID,
        )
    if not isinstance(raw, Mapping):
        raise ValidationError(f"Unsupported sale input: {type(raw).__name__}.")

    known = {f.name for f in fields(SaleInput)}
    data: dict[str, Any] = {}
    for key, value in raw.items():
        name = _INPUT_ALIASES.get(key, key)
        if name not in known:
            raise ValidationError(f"Unknown sale field {key!r}.", field=key)
        data[name] = value
    for required in ("vendor_name", "quantity", "rate_per_unit"):
        if required not in data:
            raise ValidationError(f"Missing sale field {required!r}.", field=required)
    if _LEGACY_KEYS & set(raw):
        data.setdefault("payment_status", PAYMENT_STATUS_PAID)
    return SaleInput(**data)


class SalesRepo:
    """
    Sales ledger: the only writer of the Sales table.

    Key behavior:
      - record_sale() commits the sale row first, then decrements the day's
        stock and (for pending sales) charges the vendor's balance.
      - delete_sale() removes the row, then reverses both effects.
      - Follow-up steps are best effort: a failure is logged, kept in
        `last_warnings` as a NonCriticalWarning, and never undoes the sale.
      - Rows are written with both quantity_sold/rate_per_unit and the legacy
        trays_sold/rate_per_tray columns.
    """

    def __init__(
        self,
        conn: sqlite3.Connection,
        inventory: InventoryRepo,
        payments: PendingPaymentsRepo,
        clock: Callable[[], datetime] = datetime.now,
    ):
        self.conn = conn
        self.inventory = inventory
        self.payments = payments
        self.clock = clock
        self.last_warnings: list[NonCriticalWarning] = []

    # ---------------------------------------------------------------------
    # READ
    # ---------------------------------------------------------------------
    def get(self, sale_id: int) -> Optional[Sale]:
        r = self.conn.execute(f"SELECT * FROM {TABLE_SALES} WHERE id = ?", (sale_id,)).fetchone()
        return self.row_to_sale(r) if r else None

    def list_recent(self, limit: int = 100) -> list[Sale]:
        rows = self.conn.execute(
            f"SELECT * FROM {TABLE_SALES} ORDER BY sale_date DESC, sale_time DESC, id DESC LIMIT ?",
            (max(1, int(limit)),),
        ).fetchall()
        return [self.row_to_sale(r) for r in rows]

    # ---------------------------------------------------------------------
    # WRITE
    # ---------------------------------------------------------------------
    def record_sale(self, raw: RawSaleInput) -> int:
        """
        Validate and store a sale, then apply its stock and balance effects.
        Returns the new sale id.
        """
        si = normalize_sale_input(raw)
        self._validate(si)

        quantity = float(si.quantity)
        rate = float(si.rate_per_unit)
        status = si.payment_status or (
            PAYMENT_STATUS_PENDING if si.payment_method == "Credit" else PAYMENT_STATUS_PAID
        )
        total = quantity * rate
        amount_paid = float(si.amount_paid or 0.0)
        if status == PAYMENT_STATUS_PENDING and amount_paid >= total:
            raise ValidationError("Part-payment must be less than the sale total.", field="amount_paid")
        due = total - amount_paid if status == PAYMENT_STATUS_PENDING else 0.0

        now = self.clock()
        sale_date, sale_time = today_str(now), now_time_str(now)
        vendor = si.vendor_name.strip()
        commodity = si.commodity.strip()

        try:
            with self.conn:
                cur = self.conn.execute(
                    f"""
                    INSERT INTO {TABLE_SALES} (
                        vendor_name, vegetable_type, quantity_sold, unit_type,
                        rate_per_unit, total_amount, payment_method, payment_status,
                        due_amount, sale_date, sale_time, truck_arrival_time,
                        distribution_time, notes, trays_sold, rate_per_tray
                    ) VALUES (?,?,?,?,?,?,?,?,?,?,?,?,?,?,?,?)
                    """,
                    (
                        vendor, commodity, quantity, si.unit.strip(),
                        rate, total, si.payment_method, status,
                        due, sale_date, sale_time, si.truck_arrival_time,
                        si.distribution_time, si.notes, quantity, rate,
                    ),
                )
        except sqlite3.Error as e:
            raise StoreError(f"Could not save sale for {vendor!r}: {e}") from e
        sale_id = int(cur.lastrowid)
        _log.info("sale %s: %s %s %s to %s (%s, %s)", sale_id, quantity, si.unit, commodity, vendor, si.payment_method, status)

        self.last_warnings = []
        self._best_effort(
            "inventory update",
            lambda: self.inventory.apply_consumption(commodity, quantity, sale_date),
        )
        if status == PAYMENT_STATUS_PENDING and due > 0:
            self._best_effort(
                "pending payment update",
                lambda: self.payments.apply_charge(vendor, due, sale_date),
            )
        return sale_id

    def delete_sale(self, sale_id: int) -> bool:
        """
        Delete a sale and reverse its stock and balance effects, using the
        commodity/quantity/date and due amount recorded on the row.
        """
        sale = self.get(sale_id)
        if sale is None:
            raise NotFoundError(f"Sale {sale_id} not found.")
        try:
            with self.conn:
                cur = self.conn.execute(f"DELETE FROM {TABLE_SALES} WHERE id = ?", (sale_id,))
        except sqlite3.Error as e:
            raise StoreError(f"Could not delete sale {sale_id}: {e}") from e
        removed = cur.rowcount > 0
        if not removed:
            return False
        _log.info("sale %s deleted; reversing its effects", sale_id)

        self.last_warnings = []
        self._best_effort(
            "inventory reversal",
            lambda: self.inventory.apply_consumption(sale.commodity, -sale.quantity, sale.sale_date),
        )
        if sale.is_pending and sale.due_amount > 0:
            self._best_effort(
                "pending payment reversal",
                lambda: self.payments.apply_charge(sale.vendor_name, -sale.due_amount, sale.sale_date),
            )
        return True

    # ---------------------------------------------------------------------
    # INTERNALS
    # ---------------------------------------------------------------------
    def _best_effort(self, step: str, fn: Callable[[], Any]) -> None:
        try:
            fn()
        except Exception as e:  # noqa: BLE001
            warning = NonCriticalWarning(step, e)
            _log.warning("%s", warning, exc_info=True)
            self.last_warnings.append(warning)

    @staticmethod
    def _validate(si: SaleInput) -> None:
        if not non_empty(si.vendor_name):
            raise ValidationError("Vendor name cannot be empty.", field="vendor_name")
        if not non_empty(si.commodity):
            raise ValidationError("Commodity cannot be empty.", field="commodity")
        if not non_empty(si.unit):
            raise ValidationError("Unit cannot be empty.", field="unit")
        if not is_strictly_positive_number(si.quantity):
            raise ValidationError("Quantity must be a positive number.", field="quantity")
        if not is_strictly_positive_number(si.rate_per_unit):
            raise ValidationError("Rate per unit must be a positive number.", field="rate_per_unit")
        if si.payment_method not in PAYMENT_METHODS:
            raise ValidationError(
                f"Payment method must be one of {', '.join(PAYMENT_METHODS)}.", field="payment_method"
            )
        if si.payment_status is not None and si.payment_status not in PAYMENT_STATUSES:
            raise ValidationError("Payment status must be 'paid' or 'pending'.", field="payment_status")
        if not is_non_negative_number(si.amount_paid or 0):
            raise ValidationError("Part-payment cannot be negative.", field="amount_paid")

    @staticmethod
    def row_to_sale(r: sqlite3.Row) -> Sale:
        """
        Map a Sales row to a Sale, reading the multi-commodity columns and
        falling back to the trays-only ones for rows that predate them.
        """
        keys = r.keys()

        def col(name, default=None):
            return r[name] if name in keys and r[name] is not None else default

        quantity = col("quantity_sold", col("trays_sold"))
        rate = col("rate_per_unit", col("rate_per_tray"))
        return Sale(
            id=int(r["id"]),
            vendor_name=r["vendor_name"],
            commodity=col("vegetable_type", DEFAULT_COMMODITY),
            quantity=to_float(quantity),
            unit=col("unit_type", DEFAULT_UNIT),
            rate_per_unit=to_float(rate),
            total_amount=to_float(r["total_amount"]),
            payment_method=r["payment_method"],
            payment_status=col("payment_status", PAYMENT_STATUS_PAID),
            due_amount=to_float(col("due_amount")),
            sale_date=r["sale_date"],
            sale_time=r["sale_time"],
            truck_arrival_time=col("truck_arrival_time"),
            distribution_time=col("distribution_time"),
            notes=col("notes"),
            created_at=col("created_at"),
        )
