"""Payment status derived from dates, plus the matching query predicates.

A status is never stored. ``derive_status`` evaluates one row in Python and
each predicate expresses the same rule as a SQL clause, so filtering a query
by a predicate selects exactly the rows ``derive_status`` would label with
that status.
"""
from datetime import date, timedelta

from sqlalchemy import and_, or_

from rental_service.app.enum.payments_enum import PaymentStatus
from rental_service.app.models.payments.collection_payments import CollectionPayment


def derive_status(payment, today: date, grace_days: int) -> PaymentStatus:
    if payment.collection_date is not None:
        return PaymentStatus.collected
    if (payment.delay_duration or 0) > 0:
        return PaymentStatus.postponed
    if payment.due_date_start < today - timedelta(days=grace_days):
        return PaymentStatus.overdue
    if payment.due_date_start <= today:
        return PaymentStatus.due
    return PaymentStatus.upcoming


# ----------------------------------------------------
# Query predicates
# ----------------------------------------------------
def _open_payments():
    return and_(
        CollectionPayment.collection_date.is_(None),
        or_(CollectionPayment.delay_duration.is_(None), CollectionPayment.delay_duration <= 0),
    )


def collected_payments():
    return CollectionPayment.collection_date.isnot(None)


def postponed_payments():
    return and_(
        CollectionPayment.collection_date.is_(None),
        CollectionPayment.delay_duration > 0,
    )


def overdue_payments(today: date, grace_days: int):
    return and_(
        _open_payments(),
        CollectionPayment.due_date_start < today - timedelta(days=grace_days),
    )


def due_for_collection(today: date, grace_days: int):
    return and_(
        _open_payments(),
        CollectionPayment.due_date_start >= today - timedelta(days=grace_days),
        CollectionPayment.due_date_start <= today,
    )


def upcoming_payments(today: date):
    return and_(_open_payments(), CollectionPayment.due_date_start > today)


def status_filter(status, today: date, grace_days: int):
    status = PaymentStatus(status)
    if status == PaymentStatus.collected:
        return collected_payments()
    if status == PaymentStatus.postponed:
        return postponed_payments()
    if status == PaymentStatus.overdue:
        return overdue_payments(today, grace_days)
    if status == PaymentStatus.due:
        return due_for_collection(today, grace_days)
    return upcoming_payments(today)
