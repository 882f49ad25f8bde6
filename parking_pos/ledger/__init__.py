"""
Cashier Shift Ledger Module

Per-operator running total of collected payments, reconciled and cleared
when the cashier logs out.
"""

from .service import TransactionLedger
from .schemas import LedgerAppendRequest, LedgerEntryOut, LedgerSummary, ShiftReport

__all__ = [
    "TransactionLedger",
    "LedgerAppendRequest",
    "LedgerEntryOut",
    "LedgerSummary",
    "ShiftReport"
]
