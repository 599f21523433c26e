"""Expands a contract's terms into its dated payment obligations."""
import logging
from datetime import date
from typing import List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from rental_service.app.core.errors import ContractEngineError
from rental_service.app.crud.contracts.duration_validator import calculate_payments_count
from rental_service.app.enum.contracts_enum import ContractStatus
from rental_service.app.schemas.system.settings_schemas import PaymentSettings
from shared.helpers.period_helper import FrequencyLike, end_of_span, period_bounds

logger = logging.getLogger(__name__)


def obligations_query(db: Session, contract):
    model = contract.payment_model
    return db.query(model).filter(getattr(model, contract.payment_fk) == contract.id)


def has_obligations(db: Session, contract) -> bool:
    return obligations_query(db, contract).first() is not None


def can_generate_payments(db: Session, contract) -> bool:
    return contract.status == ContractStatus.active.value and not has_obligations(db, contract)


def build_schedule(
    contract,
    start: date,
    months: int,
    frequency: FrequencyLike,
    rate,
    payment_settings: PaymentSettings,
    first_sequence: int = 1,
    window_end: Optional[date] = None,
) -> List:
    """Unsaved obligations covering ``months`` months from ``start``.

    The last period ends on ``window_end`` (the contract's end date) when given.
    """
    count = calculate_payments_count(months, frequency)
    window_end = window_end or end_of_span(start, months)
    payments = []
    for index in range(count):
        period_start, period_stop = period_bounds(start, index, frequency)
        if index == count - 1:
            period_stop = window_end
        payments.append(contract.build_payment(
            first_sequence + index, period_start, period_stop, frequency, rate, payment_settings))
    return payments


def generate(db: Session, contract, payment_settings: PaymentSettings, commit: bool = True) -> List:
    """Persist the full schedule of ``contract``.

    Callers check ``can_generate_payments`` first; running twice duplicates rows.
    """
    payments = build_schedule(
        contract,
        contract.start_date,
        contract.duration_months,
        contract.payment_frequency,
        contract.rate,
        payment_settings,
        window_end=contract.end_date,
    )
    db.add_all(payments)
    if commit:
        try:
            db.commit()
        except Exception:
            db.rollback()
            raise
    logger.info("Generated %d payments for contract %s",
                len(payments), contract.contract_number)
    return payments


def generate_payments_if_needed(db: Session, contract, payment_settings: PaymentSettings):
    """Post-commit hook for contract saves.

    Returns ``(generated_count, error_message)``; a failure is logged and
    reported but never undoes the contract save.
    """
    if not can_generate_payments(db, contract):
        return 0, None
    try:
        return len(generate(db, contract, payment_settings)), None
    except (ContractEngineError, SQLAlchemyError) as e:
        db.rollback()
        logger.warning("Failed to auto-generate payments for contract %s: %s",
                       contract.contract_number, e)
        return 0, str(e)
