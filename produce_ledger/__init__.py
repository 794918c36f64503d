"""
Ledger core for a wholesale produce business: sales, per-day inventory and
vendor receivables kept consistent on one SQLite store.
"""

from .ledger import Ledger

__all__ = ["Ledger"]
