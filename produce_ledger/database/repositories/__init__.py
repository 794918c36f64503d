# database/repositories/__init__.py
"""
Repository layer public API.

Usage:
    from produce_ledger.database.repositories import (
        # Sales
        SalesRepo, Sale, SaleInput, LegacySaleInput, normalize_sale_input,
        # Inventory
        InventoryRepo, InventoryRecord,
        # Receivables
        PendingPaymentsRepo, PendingPayment,
        # Read-only aggregates
        SummaryRepo,
        # Configuration
        SettingsRepo, CommoditiesRepo, CommodityType,
    )
"""

# ---------------- Commodities --------------
from .commodities_repo import CommoditiesRepo, CommodityType

# ---------------- Inventory ----------------
from .inventory_repo import InventoryRepo, InventoryRecord

# ---------------- Receivables --------------
from .pending_payments_repo import PendingPaymentsRepo, PendingPayment

# ------------------ Sales ------------------
from .sales_repo import (
    SalesRepo,
    Sale,
    SaleInput,
    LegacySaleInput,
    normalize_sale_input,
)

# ---------------- Settings -----------------
from .settings_repo import SettingsRepo

# ---------------- Summaries ----------------
from .summary_repo import SummaryRepo

__all__ = [
    # commodities_repo
    "CommoditiesRepo",
    "CommodityType",
    # inventory_repo
    "InventoryRepo",
    "InventoryRecord",
    # pending_payments_repo
    "PendingPaymentsRepo",
    "PendingPayment",
    # sales_repo
    "SalesRepo",
    "Sale",
    "SaleInput",
    "LegacySaleInput",
    "normalize_sale_input",
    # settings_repo
    "SettingsRepo",
    # summary_repo
    "SummaryRepo",
]
