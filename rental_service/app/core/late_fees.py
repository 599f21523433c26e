"""Late-fee arithmetic for collection payments.

The fee is never stored: it is derived from the due date, the grace period and
either the settlement date (fee frozen) or the evaluation date.
"""
from datetime import date, timedelta
from decimal import Decimal, ROUND_HALF_UP
from typing import Optional

CENT = Decimal("0.01")


def days_overdue(due_date_start: date, settled_on: Optional[date], today: date,
                 grace_days: int) -> int:
    counted_from = due_date_start + timedelta(days=grace_days)
    until = settled_on or today
    return max(0, (until - counted_from).days)


def late_fee(amount, days: int, daily_rate) -> Decimal:
    if days <= 0 or not amount:
        return Decimal("0.00")
    fee = Decimal(str(amount)) * Decimal(str(daily_rate)) * days
    return fee.quantize(CENT, rounding=ROUND_HALF_UP)
