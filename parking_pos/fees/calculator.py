from typing import Optional, Union
from datetime import datetime, timedelta, timezone
from decimal import Decimal
import logging

from parking_pos.exceptions import InvalidVehicleType, InvalidFeeSchedule
from parking_pos.fees.schemas import (
    VehicleType, FeeSchedule, FeeScheduleName, FeeQuote, PayFirstQuote
)

logger = logging.getLogger(__name__)

ONE_MINUTE = timedelta(minutes=1)


def coerce_vehicle_type(vehicle_type: Union[VehicleType, str, None]) -> VehicleType:
    """Map a stored or submitted vehicle type onto VehicleType (case-insensitive)"""
    if isinstance(vehicle_type, VehicleType):
        return vehicle_type
    if isinstance(vehicle_type, str):
        try:
            return VehicleType(vehicle_type.strip().lower())
        except ValueError:
            pass
    raise InvalidVehicleType(vehicle_type)


def coerce_fee_schedule(fee_schedule: Union[FeeScheduleName, str, None]) -> FeeScheduleName:
    """Map a stored schedule name onto FeeScheduleName"""
    try:
        return FeeScheduleName(fee_schedule)
    except ValueError:
        raise InvalidFeeSchedule(fee_schedule)


def _as_utc(value: datetime) -> datetime:
    # SQLite hands back naive datetimes; everything is stored as UTC
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def elapsed_minutes(entry_time: datetime, now: datetime) -> int:
    """Whole minutes between entry and now, clamped at zero"""
    minutes = (_as_utc(now) - _as_utc(entry_time)) // ONE_MINUTE
    if minutes < 0:
        logger.warning(
            "Clock skew: now %s is before entry time %s, clamping duration to 0",
            now.isoformat(), entry_time.isoformat()
        )
        return 0
    return minutes


class FeeCalculator:
    """Pure parking fee computation.

    Never reads the clock: callers pass ``now`` explicitly, so a calculator
    can be shared between requests and threads.
    """

    def __init__(self, schedule: Optional[FeeSchedule] = None):
        self.schedule = schedule or FeeSchedule()

    def compute_fee(
        self,
        vehicle_type: Union[VehicleType, str],
        entry_time: datetime,
        is_pwd: Optional[bool],
        now: datetime,
        schedule: FeeScheduleName = FeeScheduleName.STANDARD
    ) -> FeeQuote:
        """Fee due for a stay from entry_time until now"""
        vehicle = coerce_vehicle_type(vehicle_type)
        minutes = elapsed_minutes(entry_time, now)

        if schedule == FeeScheduleName.LEGACY:
            amount = self._legacy_fee(vehicle, minutes)
        else:
            amount = self._standard_fee(vehicle, bool(is_pwd), minutes)

        return FeeQuote(amount_due=amount, duration_minutes=minutes)

    def compute_pay_first_fee(self, is_pwd: Optional[bool]) -> PayFirstQuote:
        """Flat motorcycle fee charged when the ticket is paid at entry"""
        if is_pwd:
            return PayFirstQuote(amount_due=Decimal('0'))
        return PayFirstQuote(amount_due=self.schedule.motorcycle_flat_fee)

    def _standard_fee(self, vehicle: VehicleType, is_pwd: bool, minutes: int) -> Decimal:
        s = self.schedule

        # Free grace window for everyone
        if minutes <= s.grace_period_minutes:
            return Decimal('0')

        if is_pwd:
            return self._pwd_fee(minutes)

        if vehicle == VehicleType.MOTORCYCLE:
            return s.motorcycle_flat_fee

        return self._car_fee(minutes)

    def _pwd_fee(self, minutes: int) -> Decimal:
        """Base block waived; every started hour after it is billed"""
        s = self.schedule
        free_minutes = s.base_minutes + s.grace_period_minutes
        if minutes <= free_minutes:
            return Decimal('0')

        full_hours, remainder = divmod(minutes - free_minutes, 60)
        fee = s.pwd_extra_hour_rate * full_hours
        if remainder > 0:
            fee += s.pwd_extra_hour_rate
        return fee

    def _car_fee(self, minutes: int) -> Decimal:
        s = self.schedule
        full_days = minutes // s.minutes_per_day

        if full_days >= 1:
            extra_minutes = minutes - full_days * s.minutes_per_day
            fee = s.daily_fee * full_days
        elif minutes <= s.base_minutes:
            return s.base_rate
        else:
            extra_minutes = minutes - s.base_minutes
            fee = s.base_rate

        # A started hour is billed only once it runs past the grace period
        full_hours, remainder = divmod(extra_minutes, 60)
        fee += s.extra_hour_rate * full_hours
        if remainder >= s.grace_period_minutes:
            fee += s.extra_hour_rate
        return fee

    def _legacy_fee(self, vehicle: VehicleType, minutes: int) -> Decimal:
        """Superseded schedule: no grace window, no discount, no daily billing"""
        s = self.schedule
        if vehicle == VehicleType.MOTORCYCLE:
            return s.motorcycle_flat_fee
        if minutes <= s.base_minutes:
            return s.base_rate

        extra_hours = -(-(minutes - s.base_minutes) // 60)
        return s.base_rate + s.extra_hour_rate * extra_hours


default_calculator = FeeCalculator()


def compute_fee(
    vehicle_type: Union[VehicleType, str],
    entry_time: datetime,
    is_pwd: Optional[bool],
    now: datetime
) -> FeeQuote:
    return default_calculator.compute_fee(vehicle_type, entry_time, is_pwd, now)


def compute_pay_first_fee(is_pwd: Optional[bool]) -> PayFirstQuote:
    return default_calculator.compute_pay_first_fee(is_pwd)
