"""Assigns tenant collections to an owner's payout period.

Every collection payment on the property whose due date or settlement date
falls inside the period is placed in exactly one category. Only money that
is both settled and attributable to this payout (due and paid inside it, or
an older debt collected inside it) counts toward the gross.
"""
import logging
from datetime import date
from decimal import Decimal, ROUND_HALF_UP
from typing import Optional

from sqlalchemy import and_, func, or_
from sqlalchemy.orm import Session

from rental_service.app.enum.payments_enum import ReconciliationCategory
from rental_service.app.models.financials.expenses import Expense
from rental_service.app.models.payments.collection_payments import CollectionPayment
from rental_service.app.models.properties.units import Unit
from rental_service.app.schemas.payments.supply_payments_schemas import (
    ReconciliationBucket,
    ReconciliationItem,
    ReconciliationResult,
)
from rental_service.app.schemas.system.settings_schemas import PaymentSettings
from shared.helpers.period_helper import get_current_date

logger = logging.getLogger(__name__)

CENT = Decimal("0.01")


def categorize(payment, period_start: date, period_end: date) -> Optional[ReconciliationCategory]:
    """First matching category, or ``None`` when the payment does not touch the period."""
    due = payment.due_date_start
    settled = payment.settlement_date

    if period_start <= due <= period_end:
        if settled is None:
            return ReconciliationCategory.unpaid_for_period
        if settled <= period_end:
            return ReconciliationCategory.due_and_paid_in_period
        return ReconciliationCategory.paid_late_after_period

    if settled is not None and period_start <= settled <= period_end:
        if due < period_start:
            return ReconciliationCategory.late_collected_for_earlier_period
        return ReconciliationCategory.collected_early_for_future_period

    return None


def period_candidates(db: Session, property_id, period_start: date, period_end: date):
    return (
        db.query(CollectionPayment)
        .join(Unit, CollectionPayment.unit_id == Unit.id)
        .filter(
            Unit.property_id == property_id,
            or_(
                and_(CollectionPayment.due_date_start >= period_start,
                     CollectionPayment.due_date_start <= period_end),
                and_(CollectionPayment.collection_date >= period_start,
                     CollectionPayment.collection_date <= period_end),
            ),
        )
        .order_by(CollectionPayment.due_date_start, CollectionPayment.payment_number)
        .all()
    )


def period_expenses(db: Session, property_id, period_start: date, period_end: date) -> Decimal:
    total = (
        db.query(func.coalesce(func.sum(Expense.cost), 0))
        .filter(
            Expense.property_id == property_id,
            Expense.date >= period_start,
            Expense.date <= period_end,
        )
        .scalar()
    )
    return Decimal(str(total)).quantize(CENT)


def reconcile_period(
    db: Session,
    property_id,
    period_start: date,
    period_end: date,
    commission_rate,
    payment_settings: PaymentSettings,
    other_deductions=Decimal("0"),
) -> ReconciliationResult:
    today = get_current_date(payment_settings.test_date)
    buckets = {
        category: ReconciliationBucket(category=category, counted=category.counted)
        for category in ReconciliationCategory
    }

    for payment in period_candidates(db, property_id, period_start, period_end):
        category = categorize(payment, period_start, period_end)
        if category is None:
            continue
        fee = payment.late_fee(payment_settings, today)
        item = ReconciliationItem(
            payment_id=payment.id,
            payment_number=payment.payment_number,
            unit_id=payment.unit_id,
            due_date_start=payment.due_date_start,
            due_date_end=payment.due_date_end,
            settlement_date=payment.settlement_date,
            amount=payment.amount,
            late_fee=fee,
            total_amount=payment.amount + fee,
        )
        bucket = buckets[category]
        bucket.payments.append(item)
        bucket.subtotal += item.total_amount

    gross = sum((b.subtotal for b in buckets.values() if b.counted), Decimal("0"))
    rate = Decimal(str(commission_rate))
    commission = (gross * rate / Decimal("100")).quantize(CENT, rounding=ROUND_HALF_UP)
    expenses = period_expenses(db, property_id, period_start, period_end)
    other = Decimal(str(other_deductions))

    result = ReconciliationResult(
        property_id=property_id,
        period_start=period_start,
        period_end=period_end,
        buckets=buckets,
        gross_amount=gross,
        commission_rate=rate,
        commission_amount=commission,
        maintenance_deduction=expenses,
        other_deductions=other,
        net_amount=gross - commission - expenses - other,
    )
    logger.debug("Reconciled property %s for %s..%s: gross=%s net=%s",
                 property_id, period_start, period_end, gross, result.net_amount)
    return result
