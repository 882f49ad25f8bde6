from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session
from datetime import datetime

from parking_pos.database import get_db
from parking_pos.dependencies import get_now
from parking_pos.ledger.schemas import LedgerAppendRequest, LedgerEntryOut, LedgerSummary, ShiftReport
from parking_pos.ledger.service import TransactionLedger

router = APIRouter()

@router.get("/{operator_id}", response_model=LedgerSummary)
def get_ledger(operator_id: str, db: Session = Depends(get_db)):
    """Entries and running total of the operator's shift"""
    return TransactionLedger(db, operator_id).summary()

@router.post("/{operator_id}", response_model=LedgerEntryOut, status_code=status.HTTP_201_CREATED)
def append_ledger_entry(
    operator_id: str,
    request: LedgerAppendRequest,
    now: datetime = Depends(get_now),
    db: Session = Depends(get_db)
):
    """Record a collected amount outside the payment endpoints"""
    try:
        return TransactionLedger(db, operator_id).append(request.amount, now)
    except ValueError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e)
        )

@router.delete("/{operator_id}")
def clear_ledger(operator_id: str, db: Session = Depends(get_db)):
    """Clear the operator's shift"""
    removed = TransactionLedger(db, operator_id).clear()
    return {"operator_id": operator_id, "removed": removed}

@router.post("/{operator_id}/close-shift", response_model=ShiftReport)
def close_shift(
    operator_id: str,
    now: datetime = Depends(get_now),
    db: Session = Depends(get_db)
):
    """Summarize and clear the shift at logout"""
    return TransactionLedger(db, operator_id).close_shift(now)
