from pydantic import BaseModel, Field, validator
from typing import Optional
from datetime import datetime
from decimal import Decimal
from enum import Enum

class VehicleType(str, Enum):
    """Billable vehicle types"""
    CAR = "car"
    MOTORCYCLE = "motorcycle"

class FeeScheduleName(str, Enum):
    """Fee schedule a ticket was issued under"""
    STANDARD = "standard"
    LEGACY = "legacy"

class FeeSchedule(BaseModel):
    """Rate card used by the fee calculator"""
    grace_period_minutes: int = 15
    base_minutes: int = 180
    base_rate: Decimal = Decimal('30')
    extra_hour_rate: Decimal = Decimal('20')
    minutes_per_day: int = 1440
    daily_fee: Decimal = Decimal('500')
    motorcycle_flat_fee: Decimal = Decimal('30')
    pwd_extra_hour_rate: Decimal = Decimal('20')

class RateCard(BaseModel):
    """Active rate card as exposed to the clients"""
    schedule: FeeScheduleName
    currency: str
    rates: FeeSchedule

class FeeQuote(BaseModel):
    """Fee due for a ticket at a given instant"""
    amount_due: Decimal = Field(..., ge=0)
    duration_minutes: int = Field(..., ge=0)

class PayFirstQuote(BaseModel):
    """Flat fee for a ticket opened and paid in one step"""
    amount_due: Decimal = Field(..., ge=0)

class FeeQuoteRequest(BaseModel):
    """Request to price an arbitrary stay"""
    vehicle_type: VehicleType
    entry_time: datetime
    is_pwd: Optional[bool] = False
    schedule: FeeScheduleName = FeeScheduleName.STANDARD

    @validator('vehicle_type', pre=True)
    def normalize_vehicle_type(cls, v):
        if isinstance(v, str):
            return v.strip().lower()
        return v

    @validator('is_pwd', pre=True)
    def default_is_pwd(cls, v):
        return False if v is None else v
