"""Billing period generation for lease rent schedules"""

from datetime import date
from decimal import Decimal
from typing import List

from rent_gateway.domain.exceptions import InvalidLeaseError, UnsupportedFrequencyError
from rent_gateway.domain.models import BillingPeriod, Lease, PaymentFrequency
from rent_gateway.domain.proration import calculate_pro_ration
from rent_gateway.utils.date_utils import anchor_to_day, days_between, days_in_month, next_month_on_day

# A period this many days shorter than its month still bills the full rent
FULL_MONTH_TOLERANCE_DAYS = 1


def validate_lease(lease: Lease) -> None:
    """
    Check the scheduling preconditions of a lease.

    Raises:
        InvalidLeaseError: end not after start, negative rent, or due day outside 1-31
    """
    if lease.lease_end <= lease.lease_start:
        raise InvalidLeaseError("Lease end must be after lease start")
    if lease.monthly_rent < 0:
        raise InvalidLeaseError("Monthly rent cannot be negative")
    if not 1 <= lease.rent_due_day <= 31:
        raise InvalidLeaseError(f"Rent due day must be between 1 and 31, got {lease.rent_due_day}")


def is_full_cycle(period_start: date, period_end: date, rent_due_day: int) -> bool:
    """True when the period runs from one due-day anchor to the next"""
    return (
        period_start == anchor_to_day(period_start.year, period_start.month, rent_due_day)
        and period_end == next_month_on_day(period_start, rent_due_day)
    )


def is_partial_period(period_start: date, period_end: date) -> bool:
    """True when the period falls short of its month by more than the tolerance"""
    month_days = days_in_month(period_start.year, period_start.month)
    return days_between(period_start, period_end) < month_days - FULL_MONTH_TOLERANCE_DAYS


def generate_payment_periods(
    lease_start: date,
    lease_end: date,
    monthly_rent: Decimal,
    rent_due_day: int,
    frequency: PaymentFrequency = PaymentFrequency.MONTHLY,
) -> List[BillingPeriod]:
    """
    Walk [lease_start, lease_end) and emit contiguous monthly billing periods.

    Rules:
    - First period starts on lease_start, whatever the due day
    - Later periods start on rent_due_day of the cursor's month
    - Each period ends on rent_due_day of the following month, clipped to lease_end
    - Rent is due at the start of the period it covers
    - Due days past a short month's end clamp to its last day
    - A period from one due-day anchor to the next bills full rent, even
      when clamping makes it shorter than its start month

    Example:
        2024-06-10 -> 2024-06-20, due day 1, 900/month
        -> one pro-rated period [2024-06-10, 2024-06-20), 10 days, 300.00
    """
    frequency = PaymentFrequency(frequency)
    if frequency is not PaymentFrequency.MONTHLY:
        raise UnsupportedFrequencyError(f"{frequency.value} schedules are not supported")

    monthly_rent = Decimal(monthly_rent)
    periods: List[BillingPeriod] = []
    cursor = lease_start

    while cursor < lease_end:
        if not periods:
            period_start = lease_start
        else:
            period_start = anchor_to_day(cursor.year, cursor.month, rent_due_day)

        period_end = min(next_month_on_day(period_start, rent_due_day), lease_end)

        if not is_full_cycle(period_start, period_end, rent_due_day) and is_partial_period(period_start, period_end):
            pro_ration = calculate_pro_ration(monthly_rent, period_start, period_end)
            period = BillingPeriod(
                period_start=period_start,
                period_end=period_end,
                due_date=period_start,
                amount_due=pro_ration.amount,
                is_pro_rated=True,
                pro_rate_days=pro_ration.days,
            )
        else:
            period = BillingPeriod(
                period_start=period_start,
                period_end=period_end,
                due_date=period_start,
                amount_due=monthly_rent,
                is_pro_rated=False,
            )

        periods.append(period)
        cursor = period_end

    return periods


def generate_lease_schedule(lease: Lease) -> List[BillingPeriod]:
    """Validate a lease and generate its billing periods"""
    validate_lease(lease)
    return generate_payment_periods(
        lease.lease_start,
        lease.lease_end,
        lease.monthly_rent,
        lease.rent_due_day,
        lease.payment_frequency,
    )
