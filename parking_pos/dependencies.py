from datetime import datetime, timezone
from parking_pos.fees.calculator import FeeCalculator, default_calculator

def get_now() -> datetime:
    """Current wall-clock time in UTC; overridden in tests"""
    return datetime.now(timezone.utc)

def get_fee_calculator() -> FeeCalculator:
    return default_calculator
