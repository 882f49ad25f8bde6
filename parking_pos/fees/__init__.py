"""
Parking Fee Module

Converts a ticket's billing inputs (vehicle type, entry time, discount flag)
into the amount due at a given instant.

- Free grace window for every vehicle
- Flat base block and hourly billing for cars, with whole-day billing
- Base block waived for PWD / senior citizen tickets
- Flat fee for motorcycles, and a separate pay-first quote
- Superseded legacy schedule for tickets issued before the grace window existed

Key Components:
- calculator.py: FeeCalculator and the module-level compute functions
- router.py: FastAPI endpoints for quotes and the active rate card
- schemas.py: Pydantic models for fee requests, quotes and rate cards
"""

from .calculator import FeeCalculator, compute_fee, compute_pay_first_fee, elapsed_minutes
from .schemas import (
    VehicleType, FeeSchedule, FeeScheduleName, FeeQuote, PayFirstQuote,
    FeeQuoteRequest, RateCard
)

__all__ = [
    "FeeCalculator",
    "compute_fee",
    "compute_pay_first_fee",
    "elapsed_minutes",
    "VehicleType",
    "FeeSchedule",
    "FeeScheduleName",
    "FeeQuote",
    "PayFirstQuote",
    "FeeQuoteRequest",
    "RateCard"
]
