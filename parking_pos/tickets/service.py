from typing import Optional, Union
from datetime import datetime, timezone
from decimal import Decimal
from io import BytesIO
import logging
import uuid

import qrcode
from qrcode import constants
from sqlalchemy.orm import Session

from parking_pos.config import settings
from parking_pos.exceptions import TicketNotFound, AlreadyClosed, PayFirstNotAllowed
from parking_pos.fees.calculator import (
    FeeCalculator, default_calculator, coerce_vehicle_type, coerce_fee_schedule
)
from parking_pos.fees.schemas import VehicleType, FeeScheduleName
from parking_pos.ledger.service import TransactionLedger
from parking_pos.models import ParkingTicket, ParkingLog
from parking_pos.tickets.schemas import (
    TicketStatus, TicketLookup, ParkingTicketOut, ParkingLogOut, PaymentResult
)

logger = logging.getLogger(__name__)


def _utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


class TicketStore:
    """Creates, looks up and closes parking tickets.

    Closing is a single conditional UPDATE on ``checked_out`` so that two
    cashiers scanning the same ticket cannot both collect payment.
    """

    def __init__(self, db: Session, calculator: Optional[FeeCalculator] = None):
        self.db = db
        self.calculator = calculator or default_calculator

    def create_ticket(
        self,
        vehicle_type: Union[VehicleType, str],
        issuer_id: str,
        is_pwd: bool,
        now: datetime,
        fee_schedule: Optional[FeeScheduleName] = None
    ) -> ParkingTicket:
        """Issue a new open ticket at the gate"""
        vehicle = coerce_vehicle_type(vehicle_type)
        schedule = fee_schedule or FeeScheduleName(settings.DEFAULT_FEE_SCHEDULE)

        ticket = ParkingTicket(
            id=str(uuid.uuid4()),
            vehicle_type=vehicle.value,
            is_pwd=bool(is_pwd),
            fee_schedule=schedule.value,
            entry_time=_utc(now),
            checked_out=False,
            issued_by_id=issuer_id
        )
        self.db.add(ticket)
        self.db.commit()
        self.db.refresh(ticket)

        logger.info(
            "Issued ticket %s (%s, pwd=%s) by %s",
            ticket.id, ticket.vehicle_type, ticket.is_pwd, issuer_id
        )
        return ticket

    def get_ticket(self, ticket_id: str) -> ParkingTicket:
        ticket = self.db.get(ParkingTicket, ticket_id)
        if ticket is None:
            raise TicketNotFound(ticket_id)
        return ticket

    def close_ticket(
        self,
        ticket_id: str,
        fee: Decimal,
        duration_minutes: int,
        payer_id: str,
        now: datetime,
        commit: bool = True
    ) -> ParkingTicket:
        """Mark a ticket as paid and write its payment log row.

        Raises AlreadyClosed when the ticket was checked out before, including
        by a concurrent request that won the update.
        """
        exit_time = _utc(now)
        updated = self.db.query(ParkingTicket).filter(
            ParkingTicket.id == ticket_id,
            ParkingTicket.checked_out.is_(False)
        ).update(
            {
                ParkingTicket.checked_out: True,
                ParkingTicket.exit_time: exit_time,
                ParkingTicket.total_fee: fee,
                ParkingTicket.duration_minutes: duration_minutes,
                ParkingTicket.checked_out_by_id: payer_id
            },
            synchronize_session=False
        )

        if updated == 0:
            if commit:
                self.db.rollback()
            # Distinguish a missing ticket from one that lost the race
            self.get_ticket(ticket_id)
            logger.warning("Rejected duplicate payment for ticket %s by %s", ticket_id, payer_id)
            raise AlreadyClosed(ticket_id)

        self.db.add(ParkingLog(
            ticket_id=ticket_id,
            duration_minutes=duration_minutes,
            fee_charged=fee,
            checked_out_by_id=payer_id,
            created_at=exit_time
        ))

        if commit:
            self.db.commit()
        else:
            self.db.flush()

        ticket = self.get_ticket(ticket_id)
        self.db.refresh(ticket)
        return ticket

    def quote_ticket(self, ticket_id: str, now: datetime) -> TicketLookup:
        """Read-only scan: live fee for open tickets, a notice for closed ones"""
        ticket = self.get_ticket(ticket_id)
        vehicle = coerce_vehicle_type(ticket.vehicle_type)
        schedule = coerce_fee_schedule(ticket.fee_schedule)
        ticket_out = ParkingTicketOut.model_validate(ticket)

        if ticket.checked_out:
            return TicketLookup(
                status=TicketStatus.CHECKED_OUT,
                ticket=ticket_out,
                message="Ticket already checked out",
                details="This parking ticket has already been processed and checked out."
            )

        quote = self.calculator.compute_fee(vehicle, ticket.entry_time, ticket.is_pwd, now, schedule=schedule)
        return TicketLookup(status=TicketStatus.PAYABLE, ticket=ticket_out, quote=quote)

    def pay_ticket(
        self,
        ticket_id: str,
        payer_id: str,
        now: datetime,
        expected_fee: Optional[Decimal] = None
    ) -> PaymentResult:
        """Charge the authoritative fee, close the ticket and credit the payer's ledger"""
        ticket = self.get_ticket(ticket_id)
        if ticket.checked_out:
            raise AlreadyClosed(ticket_id)

        # The discount flag recorded at issue time is the only source of truth
        quote = self.calculator.compute_fee(
            ticket.vehicle_type,
            ticket.entry_time,
            ticket.is_pwd,
            now,
            schedule=coerce_fee_schedule(ticket.fee_schedule)
        )

        try:
            closed = self.close_ticket(
                ticket_id, quote.amount_due, quote.duration_minutes, payer_id, now, commit=False
            )
            TransactionLedger(self.db, payer_id).append(quote.amount_due, now, commit=False)
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise

        fee_changed = expected_fee is not None and Decimal(expected_fee) != quote.amount_due
        if fee_changed:
            logger.info(
                "Ticket %s: client showed %s, charged %s", ticket_id, expected_fee, quote.amount_due
            )

        return self._payment_result(closed, quote.amount_due, fee_changed)

    def pay_first(
        self,
        issuer_id: str,
        is_pwd: bool,
        now: datetime,
        vehicle_type: Union[VehicleType, str] = VehicleType.MOTORCYCLE
    ) -> PaymentResult:
        """Open and close a motorcycle ticket in one transaction at the flat fee"""
        vehicle = coerce_vehicle_type(vehicle_type)
        if vehicle != VehicleType.MOTORCYCLE:
            raise PayFirstNotAllowed(f"Pay-first is only available for motorcycles, not {vehicle.value}")

        amount = self.calculator.compute_pay_first_fee(is_pwd).amount_due
        entry_time = _utc(now)
        ticket = ParkingTicket(
            id=str(uuid.uuid4()),
            vehicle_type=vehicle.value,
            is_pwd=bool(is_pwd),
            fee_schedule=FeeScheduleName.STANDARD.value,
            entry_time=entry_time,
            checked_out=False,
            issued_by_id=issuer_id
        )

        try:
            self.db.add(ticket)
            self.db.flush()
            closed = self.close_ticket(ticket.id, amount, 0, issuer_id, now, commit=False)
            TransactionLedger(self.db, issuer_id).append(amount, now, commit=False)
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise

        logger.info("Pay-first ticket %s charged %s by %s", closed.id, amount, issuer_id)
        return self._payment_result(closed, amount)

    def _payment_result(
        self,
        ticket: ParkingTicket,
        amount: Decimal,
        fee_changed: bool = False
    ) -> PaymentResult:
        log = ticket.logs[-1]
        return PaymentResult(
            ticket=ParkingTicketOut.model_validate(ticket),
            log=ParkingLogOut.model_validate(log),
            amount_charged=amount,
            fee_changed=fee_changed
        )

    def generate_qr_png(self, ticket_id: str, box_size: int = 10, border: int = 4) -> bytes:
        """PNG image of a QR code carrying the ticket id"""
        ticket = self.get_ticket(ticket_id)

        qr = qrcode.QRCode(
            version=1,
            error_correction=constants.ERROR_CORRECT_M,
            box_size=box_size,
            border=border,
        )
        qr.add_data(ticket.id)
        qr.make(fit=True)

        qr_image = qr.make_image(fill_color="black", back_color="white")
        buffer = BytesIO()
        qr_image.save(buffer, format="PNG")
        return buffer.getvalue()
