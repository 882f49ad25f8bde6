from fastapi import APIRouter, Depends, HTTPException, status, Query
from datetime import datetime

from parking_pos.config import settings
from parking_pos.dependencies import get_now, get_fee_calculator
from parking_pos.exceptions import InvalidVehicleType
from parking_pos.fees.calculator import FeeCalculator
from parking_pos.fees.schemas import (
    FeeQuoteRequest, FeeQuote, PayFirstQuote, RateCard, FeeScheduleName
)

router = APIRouter()
rate_router = APIRouter()

@router.post("/quote", response_model=FeeQuote)
def quote_fee(
    request: FeeQuoteRequest,
    now: datetime = Depends(get_now),
    calculator: FeeCalculator = Depends(get_fee_calculator)
):
    """Price a stay that started at entry_time, as of now"""
    try:
        return calculator.compute_fee(
            request.vehicle_type,
            request.entry_time,
            request.is_pwd,
            now,
            schedule=request.schedule
        )
    except InvalidVehicleType as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e)
        )

@router.get("/pay-first", response_model=PayFirstQuote)
def quote_pay_first(
    is_pwd: bool = Query(False, description="PWD / senior citizen discount"),
    calculator: FeeCalculator = Depends(get_fee_calculator)
):
    """Flat pay-first fee for motorcycles"""
    return calculator.compute_pay_first_fee(is_pwd)

@rate_router.get("", response_model=RateCard)
@rate_router.get("/", response_model=RateCard, include_in_schema=False)
def get_active_rate(calculator: FeeCalculator = Depends(get_fee_calculator)):
    """Active rate card"""
    return RateCard(
        schedule=FeeScheduleName(settings.DEFAULT_FEE_SCHEDULE),
        currency=settings.CURRENCY,
        rates=calculator.schedule
    )
