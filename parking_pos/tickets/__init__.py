"""
Parking Ticket Module

Ticket lifecycle for the gate and cashier apps:

- Ticket issuance with vehicle type and PWD / senior citizen flag
- Scan lookup with a live fee quote, or a notice once checked out
- At-most-once payment via a conditional close
- Pay-first tickets for motorcycles, opened and paid in one step
- QR code images carrying the ticket id

Key Components:
- service.py: TicketStore, the ticket persistence and payment logic
- router.py: FastAPI endpoints used by the scanner app
- schemas.py: Pydantic request/response models
"""

from .service import TicketStore
from .schemas import (
    TicketStatus, TicketCreateRequest, PayParkingRequest, PayFirstParkingRequest,
    ParkingTicketOut, ParkingLogOut, TicketLookup, PaymentResult
)

__all__ = [
    "TicketStore",
    "TicketStatus",
    "TicketCreateRequest",
    "PayParkingRequest",
    "PayFirstParkingRequest",
    "ParkingTicketOut",
    "ParkingLogOut",
    "TicketLookup",
    "PaymentResult"
]
