from __future__ import annotations

from datetime import datetime
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional

from .config import DB_PATH
from .database import Store
from .database.errors import StoreError
from .database.repositories import (
    CommoditiesRepo,
    CommodityType,
    InventoryRecord,
    InventoryRepo,
    LegacySaleInput,
    PendingPayment,
    PendingPaymentsRepo,
    Sale,
    SalesRepo,
    SettingsRepo,
    SummaryRepo,
)
from .database.repositories.sales_repo import RawSaleInput
from .utils.helpers import today_str
from .utils.loggers import get_logger


class Ledger:
    """
    The function surface a UI calls: one store, one set of repositories.

    Usage:
        with Ledger("data/produce_sales.db") as ledger:
            sale_id = ledger.record_sale({"vendor_name": "A", "quantity": 10, "rate_per_unit": 20})
            ledger.todays_summary()

    Every method other than initialize()/close() raises StoreError until
    initialize() has succeeded.
    """

    def __init__(
        self,
        db_path: Path | str | None = None,
        clock: Callable[[], datetime] = datetime.now,
    ):
        self.store = Store(db_path if db_path is not None else DB_PATH)
        self.clock = clock
        self.log = get_logger()
        self._repos: Dict[str, Any] | None = None

    # ------------------------------------------------------------------
    # lifecycle
    # ------------------------------------------------------------------
    def initialize(self) -> "Ledger":
        if self._repos is not None:
            return self
        self.store.open()
        conn = self.store.conn
        inventory = InventoryRepo(conn)
        payments = PendingPaymentsRepo(conn)
        settings = SettingsRepo(conn)
        self._repos = {
            "inventory": inventory,
            "payments": payments,
            "settings": settings,
            "commodities": CommoditiesRepo(conn),
            "sales": SalesRepo(conn, inventory, payments, clock=self.clock),
            "summary": SummaryRepo(conn, inventory, settings, clock=self.clock),
        }
        if self.store.migration_failures:
            self.log.warning("store opened; skipped migration steps: %s", ", ".join(self.store.migration_failures))
        return self

    def close(self) -> None:
        self._repos = None
        self.store.close()

    def __enter__(self) -> "Ledger":
        return self.initialize()

    def __exit__(self, *exc) -> None:
        self.close()

    def _repo(self, name: str):
        if self._repos is None:
            raise StoreError("Ledger is not initialized; call initialize() first.")
        return self._repos[name]

    @property
    def sales(self) -> SalesRepo:
        return self._repo("sales")

    @property
    def inventory(self) -> InventoryRepo:
        return self._repo("inventory")

    @property
    def payments(self) -> PendingPaymentsRepo:
        return self._repo("payments")

    @property
    def settings(self) -> SettingsRepo:
        return self._repo("settings")

    @property
    def commodities(self) -> CommoditiesRepo:
        return self._repo("commodities")

    @property
    def summary(self) -> SummaryRepo:
        return self._repo("summary")

    # ------------------------------------------------------------------
    # sales
    # ------------------------------------------------------------------
    def record_sale(self, sale_input: RawSaleInput) -> int:
        return self.sales.record_sale(sale_input)

    def record_legacy_sale(self, vendor_name: str, quantity: float, rate: float, payment_method: str = "Cash") -> int:
        return self.sales.record_sale(LegacySaleInput(vendor_name, quantity, rate, payment_method))

    def delete_sale(self, sale_id: int) -> bool:
        return self.sales.delete_sale(sale_id)

    def recent_sales(self, limit: int = 100) -> List[Sale]:
        return self.sales.list_recent(limit)

    # ------------------------------------------------------------------
    # inventory
    # ------------------------------------------------------------------
    def intake(
        self,
        commodity: str,
        initial_stock: float,
        unit: str,
        market_rate: float,
        date: str | None = None,
        carry_over_from_date: str | None = None,
        *,
        truck_arrival_time: str | None = None,
    ) -> int:
        day = date or today_str(self.clock())
        return self.inventory.intake(
            commodity, initial_stock, unit, market_rate, day, carry_over_from_date,
            truck_arrival_time=truck_arrival_time,
        )

    def carry_over(self, from_date: str, to_date: str) -> List[InventoryRecord]:
        return self.inventory.carry_over(from_date, to_date)

    def inventory_for(self, date: str) -> List[InventoryRecord]:
        return self.inventory.get_by_date(date)

    # ------------------------------------------------------------------
    # receivables
    # ------------------------------------------------------------------
    def apply_charge(
        self,
        vendor_name: str,
        amount: float,
        date: str | None = None,
        *,
        payment_due_date: str | None = None,
    ) -> Optional[float]:
        return self.payments.apply_charge(
            vendor_name, amount, date or today_str(self.clock()), payment_due_date=payment_due_date
        )

    def record_payment_received(self, vendor_name: str, amount_paid: float) -> Optional[float]:
        return self.payments.record_payment_received(
            vendor_name, amount_paid, today_str(self.clock())
        )

    def list_outstanding(self) -> List[PendingPayment]:
        return self.payments.list_outstanding()

    # ------------------------------------------------------------------
    # summaries
    # ------------------------------------------------------------------
    def todays_summary(self) -> Dict[str, Any]:
        return self.summary.todays_summary()

    def date_range_summary(self, start: str, end: str, **filters) -> List[Sale]:
        return self.summary.date_range_summary(start, end, **filters)

    def all_time_summary(self) -> Dict[str, Any]:
        return self.summary.all_time_summary()

    # ------------------------------------------------------------------
    # settings & catalogue
    # ------------------------------------------------------------------
    def get_setting(self, key: str, default: str | None = None) -> str | None:
        return self.settings.get_setting(key, default)

    def set_setting(self, key: str, value) -> None:
        self.settings.set_setting(key, value)

    def list_commodity_types(self, active_only: bool = True) -> List[CommodityType]:
        return self.commodities.list_commodity_types(active_only)

    def add_commodity_type(self, name: str, default_unit: str) -> int:
        return self.commodities.add_commodity_type(name, default_unit)
