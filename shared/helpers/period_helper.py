"""Calendar helpers for contract and billing periods.

Every period in the system is inclusive on both ends: a period that starts on
``start`` and spans ``n`` months ends on ``start + n months - 1 day``.
"""
from datetime import date, timedelta
from typing import Optional, Tuple, Union

from dateutil.relativedelta import relativedelta

from rental_service.app.enum.contracts_enum import PaymentFrequency

FrequencyLike = Union[PaymentFrequency, str]


def months_per_period(frequency: FrequencyLike) -> int:
    return PaymentFrequency(frequency).months


def add_months(value: date, months: int) -> date:
    return value + relativedelta(months=months)


def end_of_span(start: date, months: int) -> date:
    """Inclusive last day of a span of ``months`` months starting on ``start``."""
    return add_months(start, months) - timedelta(days=1)


def contract_end_date(start_date: date, duration_months: int) -> date:
    return end_of_span(start_date, duration_months)


def period_end(period_start: date, frequency: FrequencyLike) -> date:
    return end_of_span(period_start, months_per_period(frequency))


def period_bounds(anchor: date, index: int, frequency: FrequencyLike) -> Tuple[date, date]:
    """Bounds of the ``index``-th period counted from ``anchor``.

    Both ends are computed from the anchor so consecutive periods stay
    contiguous even when the anchor falls on a day missing from shorter months.
    """
    step = months_per_period(frequency)
    start = add_months(anchor, index * step)
    end = add_months(anchor, (index + 1) * step) - timedelta(days=1)
    return start, end


def periods_in(months: int, frequency: FrequencyLike) -> int:
    return months // months_per_period(frequency)


def months_between(start: date, end_exclusive: date) -> int:
    """Whole months from ``start`` up to ``end_exclusive``."""
    if end_exclusive <= start:
        return 0
    delta = relativedelta(end_exclusive, start)
    return delta.years * 12 + delta.months


def month_year(value: date) -> str:
    return value.strftime("%Y-%m")


# ----------------------------------------------------
# Bucketing
# ----------------------------------------------------
def month_bounds(value: date) -> Tuple[date, date]:
    start = value.replace(day=1)
    return start, end_of_span(start, 1)


def quarter_bounds(value: date) -> Tuple[date, date]:
    start = date(value.year, 3 * ((value.month - 1) // 3) + 1, 1)
    return start, end_of_span(start, 3)


def half_year_bounds(value: date) -> Tuple[date, date]:
    start = date(value.year, 1 if value.month <= 6 else 7, 1)
    return start, end_of_span(start, 6)


def year_bounds(value: date) -> Tuple[date, date]:
    start = date(value.year, 1, 1)
    return start, date(value.year, 12, 31)


def bucket_bounds(value: date, frequency: FrequencyLike) -> Tuple[date, date]:
    """Calendar bucket of the given frequency that contains ``value``."""
    return {
        PaymentFrequency.monthly: month_bounds,
        PaymentFrequency.quarterly: quarter_bounds,
        PaymentFrequency.semi_annually: half_year_bounds,
        PaymentFrequency.annually: year_bounds,
    }[PaymentFrequency(frequency)](value)


def get_current_date(test_date: Optional[date] = None) -> date:
    return test_date or date.today()
