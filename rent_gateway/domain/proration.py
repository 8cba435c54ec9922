"""Pro-ration of monthly rent over partial billing periods"""

from datetime import date
from decimal import Decimal, ROUND_HALF_UP

from rent_gateway.domain.models import ProRation
from rent_gateway.utils.date_utils import days_between, days_in_month

CENT = Decimal("0.01")


def round_currency(amount: Decimal) -> Decimal:
    """Round half-up to the currency's minor unit"""
    return amount.quantize(CENT, rounding=ROUND_HALF_UP)


def calculate_pro_ration(monthly_rent: Decimal, period_start: date, period_end: date) -> ProRation:
    """
    Pro-rate monthly rent over [period_start, period_end).

    The daily rate is anchored to the real length of the month containing
    period_start, so a period spanning that whole month reduces to exactly
    monthly_rent. A positive rent never pro-rates below one cent.

    Example:
        1000 over 2024-02-01 -> 2024-02-11 (29-day February)
        1000 / 29 * 10 = 344.827... -> 344.83 for 10 days
    """
    days = days_between(period_start, period_end)
    if days == 0:
        return ProRation(amount=Decimal("0.00"), days=0)

    month_days = days_in_month(period_start.year, period_start.month)

    # Multiply before dividing so full months stay exact
    amount = round_currency(Decimal(monthly_rent) * days / month_days)
    if amount == 0 and monthly_rent > 0:
        amount = CENT

    return ProRation(amount=amount, days=days)
