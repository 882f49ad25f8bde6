from pydantic import BaseModel, Field, validator
from typing import Optional
from datetime import datetime
from decimal import Decimal
from enum import Enum

from parking_pos.fees.schemas import VehicleType, FeeScheduleName, FeeQuote

class TicketStatus(str, Enum):
    """Payment state of a ticket as seen by the scanner"""
    PAYABLE = "payable"
    CHECKED_OUT = "checked_out"

# Request Models
class TicketCreateRequest(BaseModel):
    """Issue a ticket at the gate"""
    vehicle_type: VehicleType
    issued_by_id: str = Field(..., min_length=1)
    is_pwd: bool = False

    @validator('vehicle_type', pre=True)
    def normalize_vehicle_type(cls, v):
        if isinstance(v, str):
            return v.strip().lower()
        return v

class PayParkingRequest(BaseModel):
    """Pay and close a scanned ticket.

    The fee is always computed server-side from the stored ticket; the
    client-side figure is only used to detect a stale display.
    """
    ticket_id: str = Field(..., min_length=1)
    checked_out_by_id: str = Field(..., min_length=1)
    expected_fee: Optional[Decimal] = Field(None, ge=0)

class PayFirstParkingRequest(BaseModel):
    """Open and pay a motorcycle ticket in one step"""
    issued_by_id: str = Field(..., min_length=1)
    is_pwd: bool = False
    vehicle_type: VehicleType = VehicleType.MOTORCYCLE

    @validator('vehicle_type', pre=True)
    def normalize_vehicle_type(cls, v):
        if isinstance(v, str):
            return v.strip().lower()
        return v

# Response Models
class ParkingTicketOut(BaseModel):
    id: str
    vehicle_type: VehicleType
    is_pwd: bool
    fee_schedule: FeeScheduleName
    entry_time: datetime
    exit_time: Optional[datetime] = None
    total_fee: Optional[Decimal] = None
    duration_minutes: Optional[int] = None
    checked_out: bool
    issued_by_id: str
    checked_out_by_id: Optional[str] = None

    @validator('vehicle_type', pre=True)
    def normalize_vehicle_type(cls, v):
        if isinstance(v, str):
            return v.strip().lower()
        return v

    class Config:
        from_attributes = True

class ParkingLogOut(BaseModel):
    id: int
    ticket_id: str
    duration_minutes: int
    fee_charged: Decimal
    checked_out_by_id: str
    created_at: datetime

    class Config:
        from_attributes = True

class TicketLookup(BaseModel):
    """Read-only scan result: either a live quote or a checked-out notice"""
    status: TicketStatus
    ticket: ParkingTicketOut
    quote: Optional[FeeQuote] = None
    message: Optional[str] = None
    details: Optional[str] = None

class PaymentResult(BaseModel):
    """Closed ticket with the payment log row written for it"""
    ticket: ParkingTicketOut
    log: ParkingLogOut
    amount_charged: Decimal
    fee_changed: bool = False

