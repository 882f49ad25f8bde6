from pydantic import BaseModel, Field
from typing import List
from datetime import datetime
from decimal import Decimal

class LedgerAppendRequest(BaseModel):
    """Amount collected by the cashier"""
    amount: Decimal = Field(..., ge=0)

class LedgerEntryOut(BaseModel):
    id: int
    operator_id: str
    amount: Decimal
    created_at: datetime

    class Config:
        from_attributes = True

class LedgerSummary(BaseModel):
    """Running total for the operator's current shift"""
    operator_id: str
    entries: List[LedgerEntryOut]
    entry_count: int
    total: Decimal

class ShiftReport(LedgerSummary):
    """Shift summary produced when the ledger is closed at logout"""
    closed_at: datetime
