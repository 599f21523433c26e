"""Reschedule and renewal of an in-flight payment schedule.

Both operations run inside one transaction that holds row locks on the
contract and its obligations. Settled obligations are never touched; the
obligation delete is guarded on ``settlement_date IS NULL`` so a settlement
that lands mid-operation can only make the delete come up short, which is
detected and retried once before giving up.
"""
import logging
from datetime import timedelta
from typing import List

from sqlalchemy.orm import Session

from rental_service.app.core.errors import (
    ContractStateError,
    RescheduleConflictError,
    StaleStateError,
)
from rental_service.app.crud.contracts.duration_validator import (
    calculate_payments_count,
    validate_window,
)
from rental_service.app.crud.payments.payment_schedule_service import (
    build_schedule,
    obligations_query,
)
from rental_service.app.enum.contracts_enum import ContractStatus, PaymentFrequency
from rental_service.app.schemas.contracts.contracts_schemas import ScheduleChangeResult
from rental_service.app.schemas.system.settings_schemas import PaymentSettings
from shared.helpers.period_helper import contract_end_date, months_between

logger = logging.getLogger(__name__)

RESCHEDULABLE_STATUSES = (ContractStatus.active.value, ContractStatus.draft.value)
RENEWABLE_STATUSES = (ContractStatus.active.value,)


def can_reschedule(db: Session, contract) -> bool:
    return (
        contract.status in RESCHEDULABLE_STATUSES
        and obligations_query(db, contract).first() is not None
    )


def can_renew(contract) -> bool:
    return contract.status in RENEWABLE_STATUSES


def _lock_contract(db: Session, contract):
    model = type(contract)
    return (
        db.query(model)
        .filter(model.id == contract.id)
        .with_for_update()
        .populate_existing()
        .one()
    )


def _locked_obligations(db: Session, contract) -> List:
    model = contract.payment_model
    return (
        obligations_query(db, contract)
        .order_by(model.sequence)
        .with_for_update()
        .populate_existing()
        .all()
    )


def _delete_unsettled(db: Session, contract, payment_ids) -> int:
    if not payment_ids:
        return 0
    model = contract.payment_model
    return (
        obligations_query(db, contract)
        .filter(model.id.in_(payment_ids), model.settlement_date.is_(None))
        .delete(synchronize_session="fetch")
    )


def paid_coverage(contract, settled):
    """``(paid_months, next_start)`` of the schedule already accounted for."""
    if not settled:
        return 0, contract.start_date
    next_start = max(p.due_date_end for p in settled) + timedelta(days=1)
    return months_between(contract.start_date, next_start), next_start


def reschedule(
    db: Session,
    contract,
    new_rate,
    additional_months: int,
    new_frequency,
    payment_settings: PaymentSettings,
) -> ScheduleChangeResult:
    """Replace the unsettled tail of the schedule with ``additional_months`` of new terms."""
    new_frequency = PaymentFrequency(new_frequency)
    if contract.status not in RESCHEDULABLE_STATUSES:
        raise ContractStateError(
            f"Contract {contract.contract_number} cannot be rescheduled while {contract.status}",
            {"status": contract.status},
        )
    calculate_payments_count(additional_months, new_frequency)

    try:
        contract = _lock_contract(db, contract)
        deleted_total = 0
        for attempt in (1, 2):
            payments = _locked_obligations(db, contract)
            settled = [p for p in payments if p.is_settled]
            open_ids = [p.id for p in payments if not p.is_settled]

            paid_months, new_start = paid_coverage(contract, settled)
            new_duration = paid_months + additional_months
            new_end = contract_end_date(contract.start_date, new_duration)
            validate_window(
                db, type(contract), contract.entity_id, new_start, new_end,
                exclude_contract_id=contract.id, error_cls=RescheduleConflictError)

            deleted = _delete_unsettled(db, contract, open_ids)
            deleted_total += deleted
            if deleted == len(open_ids):
                break
            logger.warning(
                "Settlement recorded during reschedule of contract %s "
                "(expected %d deletions, got %d), re-reading obligations",
                contract.contract_number, len(open_ids), deleted)
        else:
            raise StaleStateError(
                f"Payments of contract {contract.contract_number} changed during reschedule",
                {"contract_id": str(contract.id)},
            )
        db.expire(contract, ["payments"])

        next_sequence = max((p.sequence for p in settled), default=0) + 1
        created = build_schedule(
            contract, new_start, additional_months, new_frequency, new_rate,
            payment_settings, first_sequence=next_sequence, window_end=new_end)
        db.add_all(created)

        contract.duration_months = new_duration
        contract.end_date = new_end
        contract.rate = new_rate
        contract.payment_frequency = new_frequency.value
        db.commit()
    except Exception:
        db.rollback()
        raise

    db.refresh(contract)
    logger.info(
        "Rescheduled contract %s: %d payments deleted, %d created, ends %s",
        contract.contract_number, deleted_total, len(created), new_end)
    return ScheduleChangeResult(
        contract_id=contract.id,
        contract_number=contract.contract_number,
        deleted_count=deleted_total,
        created_count=len(created),
        paid_months=paid_months,
        new_duration_months=new_duration,
        new_start_date=new_start,
        new_end_date=new_end,
    )


def renew(
    db: Session,
    contract,
    new_rate,
    extension_months: int,
    new_frequency,
    payment_settings: PaymentSettings,
) -> ScheduleChangeResult:
    """Append ``extension_months`` of obligations after the current end date."""
    new_frequency = PaymentFrequency(new_frequency)
    if not can_renew(contract):
        raise ContractStateError(
            f"Contract {contract.contract_number} cannot be renewed while {contract.status}",
            {"status": contract.status},
        )
    calculate_payments_count(extension_months, new_frequency)

    try:
        contract = _lock_contract(db, contract)
        payments = _locked_obligations(db, contract)

        new_start = contract.end_date + timedelta(days=1)
        new_duration = contract.duration_months + extension_months
        new_end = contract_end_date(contract.start_date, new_duration)
        validate_window(
            db, type(contract), contract.entity_id, new_start, new_end,
            exclude_contract_id=contract.id, error_cls=RescheduleConflictError)

        next_sequence = max((p.sequence for p in payments), default=0) + 1
        created = build_schedule(
            contract, new_start, extension_months, new_frequency, new_rate,
            payment_settings, first_sequence=next_sequence, window_end=new_end)
        db.add_all(created)

        paid_months, _ = paid_coverage(contract, [p for p in payments if p.is_settled])
        contract.duration_months = new_duration
        contract.end_date = new_end
        contract.rate = new_rate
        contract.payment_frequency = new_frequency.value
        db.commit()
    except Exception:
        db.rollback()
        raise

    db.refresh(contract)
    logger.info("Renewed contract %s by %d months, now ends %s",
                contract.contract_number, extension_months, new_end)
    return ScheduleChangeResult(
        contract_id=contract.id,
        contract_number=contract.contract_number,
        deleted_count=0,
        created_count=len(created),
        paid_months=paid_months,
        new_duration_months=new_duration,
        new_start_date=new_start,
        new_end_date=new_end,
    )
