"""Divisibility and timeline-overlap checks for contracts.

The queries here are written against the mapped table so they can run either
through an ORM ``Session`` or through the raw ``Connection`` handed to flush
listeners.
"""
from datetime import date
from typing import Any

from sqlalchemy import and_, or_, select

from rental_service.app.core.errors import (
    DateOrderError,
    DurationDivisionError,
    OverlapError,
)
from rental_service.app.enum.contracts_enum import BLOCKING_CONTRACT_STATUSES
from shared.helpers.period_helper import (
    FrequencyLike,
    contract_end_date,
    months_per_period,
)


def is_valid_duration(months: int, frequency: FrequencyLike) -> bool:
    return months % months_per_period(frequency) == 0


def calculate_payments_count(months: int, frequency: FrequencyLike) -> int:
    step = months_per_period(frequency)
    if not is_valid_duration(months, frequency):
        raise DurationDivisionError(months, str(getattr(frequency, "value", frequency)), step)
    return months // step


def ensure_date_order(start_date: date, end_date: date):
    if start_date is None or end_date is None or start_date >= end_date:
        raise DateOrderError(start_date, end_date)


def overlap_clause(columns, start_date: date, end_date: date):
    """Four-way interval test against ``columns.start_date``/``columns.end_date``."""
    return or_(
        # candidate start inside existing
        and_(columns.start_date <= start_date, columns.end_date >= start_date),
        # candidate end inside existing
        and_(columns.start_date <= end_date, columns.end_date >= end_date),
        # candidate contains existing
        and_(columns.start_date >= start_date, columns.end_date <= end_date),
        # existing contains candidate
        and_(columns.start_date <= start_date, columns.end_date >= end_date),
    )


def find_overlapping(
    db,
    model,
    entity_id: Any,
    start_date: date,
    end_date: date,
    exclude_contract_id: Any = None,
):
    """First blocking sibling contract whose interval touches [start_date, end_date]."""
    columns = model.__table__.c
    stmt = (
        select(columns.id, columns.contract_number, columns.start_date, columns.end_date)
        .where(
            columns[model.entity_field] == entity_id,
            columns.status.in_(BLOCKING_CONTRACT_STATUSES),
            overlap_clause(columns, start_date, end_date),
        )
        .order_by(columns.start_date)
        .limit(1)
    )
    if exclude_contract_id is not None:
        stmt = stmt.where(columns.id != exclude_contract_id)
    return db.execute(stmt).first()


def _raise_for(conflict, error_cls=OverlapError):
    raise error_cls(
        conflict.contract_number,
        conflict.start_date,
        conflict.end_date,
        contract_id=conflict.id,
    )


def validate_start_date(
    db,
    model,
    entity_id: Any,
    start_date: date,
    exclude_contract_id: Any = None,
):
    conflict = find_overlapping(
        db, model, entity_id, start_date, start_date, exclude_contract_id)
    if conflict:
        _raise_for(conflict)


def validate_duration(
    db,
    model,
    entity_id: Any,
    start_date: date,
    months: int,
    exclude_contract_id: Any = None,
):
    end_date = contract_end_date(start_date, months)
    ensure_date_order(start_date, end_date)
    conflict = find_overlapping(
        db, model, entity_id, start_date, end_date, exclude_contract_id)
    if conflict:
        _raise_for(conflict)


def validate_window(
    db,
    model,
    entity_id: Any,
    start_date: date,
    end_date: date,
    exclude_contract_id: Any = None,
    error_cls=OverlapError,
):
    """Overlap check for an explicit window, used by reschedule and renewal."""
    ensure_date_order(start_date, end_date)
    conflict = find_overlapping(
        db, model, entity_id, start_date, end_date, exclude_contract_id)
    if conflict:
        _raise_for(conflict, error_cls)


def validate_contract_terms(
    db,
    model,
    entity_id: Any,
    start_date: date,
    months: int,
    frequency: FrequencyLike,
    exclude_contract_id: Any = None,
    check_overlap: bool = True,
) -> int:
    """Run every pre-save check and return the number of payments the terms yield."""
    count = calculate_payments_count(months, frequency)
    ensure_date_order(start_date, contract_end_date(start_date, months))
    if check_overlap:
        validate_start_date(db, model, entity_id, start_date, exclude_contract_id)
        validate_duration(db, model, entity_id, start_date, months, exclude_contract_id)
    return count
