from typing import List
from datetime import datetime
from decimal import Decimal
import logging

from sqlalchemy import func
from sqlalchemy.orm import Session

from parking_pos.models import LedgerEntry
from parking_pos.ledger.schemas import LedgerEntryOut, LedgerSummary, ShiftReport

logger = logging.getLogger(__name__)

CENTS = Decimal("0.01")


class TransactionLedger:
    """Append-only per-operator log of collected payments for one shift.

    Only used for cash reconciliation at logout; ticket and payment log
    records remain the source of truth for revenue.
    """

    def __init__(self, db: Session, operator_id: str):
        self.db = db
        self.operator_id = operator_id

    def _query(self):
        return self.db.query(LedgerEntry).filter(LedgerEntry.operator_id == self.operator_id)

    def append(self, amount: Decimal, now: datetime, commit: bool = True) -> LedgerEntry:
        """Record a collected amount"""
        amount = Decimal(amount)
        if amount < 0:
            raise ValueError("Ledger amounts cannot be negative")

        entry = LedgerEntry(operator_id=self.operator_id, amount=amount, created_at=now)
        self.db.add(entry)
        if commit:
            self.db.commit()
            self.db.refresh(entry)
        else:
            self.db.flush()
        return entry

    def entries(self) -> List[LedgerEntry]:
        return self._query().order_by(LedgerEntry.created_at, LedgerEntry.id).all()

    def sum(self) -> Decimal:
        total = self.db.query(func.coalesce(func.sum(LedgerEntry.amount), 0)).filter(
            LedgerEntry.operator_id == self.operator_id
        ).scalar()
        return Decimal(str(total)).quantize(CENTS)

    def clear(self) -> int:
        """Drop every entry of the operator's shift, returns the number removed"""
        removed = self._query().delete(synchronize_session=False)
        self.db.commit()
        logger.info("Cleared %d ledger entries for operator %s", removed, self.operator_id)
        return removed

    def summary(self) -> LedgerSummary:
        return self._summarize(self.entries())

    def _summarize(self, rows: List[LedgerEntry]) -> LedgerSummary:
        entries = [LedgerEntryOut.model_validate(e) for e in rows]
        total = sum((e.amount for e in entries), Decimal("0"))
        return LedgerSummary(
            operator_id=self.operator_id,
            entries=entries,
            entry_count=len(entries),
            total=Decimal(total).quantize(CENTS)
        )

    def close_shift(self, now: datetime) -> ShiftReport:
        """Summarize the shift and clear exactly the entries reported.

        Payments appended after the entries are read stay in the ledger for
        the next report.
        """
        rows = self.entries()
        summary = self._summarize(rows)
        reported_ids = [row.id for row in rows]
        if reported_ids:
            self.db.query(LedgerEntry).filter(
                LedgerEntry.id.in_(reported_ids)
            ).delete(synchronize_session=False)
        self.db.commit()
        logger.info(
            "Closed shift for operator %s: %d payments, total %s",
            self.operator_id, summary.entry_count, summary.total
        )
        return ShiftReport(**summary.model_dump(), closed_at=now)
