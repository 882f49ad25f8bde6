from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.responses import Response
from sqlalchemy.orm import Session
from datetime import datetime
import logging

from parking_pos.database import get_db
from parking_pos.dependencies import get_now, get_fee_calculator
from parking_pos.exceptions import (
    TicketNotFound, AlreadyClosed, InvalidVehicleType, PayFirstNotAllowed, InvalidFeeSchedule
)
from parking_pos.fees.calculator import FeeCalculator
from parking_pos.tickets.schemas import (
    TicketCreateRequest, PayParkingRequest, PayFirstParkingRequest,
    ParkingTicketOut, TicketLookup, PaymentResult
)
from parking_pos.tickets.service import TicketStore

logger = logging.getLogger(__name__)

router = APIRouter()

def get_ticket_store(
    db: Session = Depends(get_db),
    calculator: FeeCalculator = Depends(get_fee_calculator)
) -> TicketStore:
    return TicketStore(db, calculator)

@router.post("/ticket", response_model=ParkingTicketOut, status_code=status.HTTP_201_CREATED)
def create_ticket(
    request: TicketCreateRequest,
    now: datetime = Depends(get_now),
    store: TicketStore = Depends(get_ticket_store)
):
    """Issue a parking ticket at the gate"""
    try:
        return store.create_ticket(request.vehicle_type, request.issued_by_id, request.is_pwd, now)
    except InvalidVehicleType as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e)
        )

@router.post("/pay-parking", response_model=PaymentResult)
def pay_parking(
    request: PayParkingRequest,
    now: datetime = Depends(get_now),
    store: TicketStore = Depends(get_ticket_store)
):
    """Pay and close a scanned ticket"""
    try:
        return store.pay_ticket(
            request.ticket_id,
            request.checked_out_by_id,
            now,
            expected_fee=request.expected_fee
        )
    except TicketNotFound:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Invalid QR code"
        )
    except AlreadyClosed:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Ticket already paid"
        )
    except (InvalidVehicleType, InvalidFeeSchedule) as e:
        logger.error("Malformed ticket %s: %s", request.ticket_id, e)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to pay parking ticket, please scan again"
        )

@router.post("/pay-first-parking", response_model=PaymentResult)
def pay_first_parking(
    request: PayFirstParkingRequest,
    now: datetime = Depends(get_now),
    store: TicketStore = Depends(get_ticket_store)
):
    """Open and pay a motorcycle ticket in one step"""
    try:
        return store.pay_first(request.issued_by_id, request.is_pwd, now, vehicle_type=request.vehicle_type)
    except PayFirstNotAllowed as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e)
        )

@router.get("/{ticket_id}", response_model=TicketLookup)
def get_ticket(
    ticket_id: str,
    now: datetime = Depends(get_now),
    store: TicketStore = Depends(get_ticket_store)
):
    """Scan a ticket: live fee while open, a notice once checked out"""
    try:
        return store.quote_ticket(ticket_id, now)
    except TicketNotFound:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Invalid QR code"
        )
    except (InvalidVehicleType, InvalidFeeSchedule) as e:
        logger.error("Malformed ticket %s: %s", ticket_id, e)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to read ticket, please scan again"
        )

@router.get("/{ticket_id}/qr")
def get_ticket_qr(ticket_id: str, store: TicketStore = Depends(get_ticket_store)):
    """QR code image printed on the ticket"""
    try:
        png = store.generate_qr_png(ticket_id)
    except TicketNotFound:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Ticket not found"
        )
    return Response(content=png, media_type="image/png")
