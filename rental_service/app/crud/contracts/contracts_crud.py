"""Persistence and lifecycle operations shared by both contract kinds.

Every function takes the contract model (``UnitContract`` or
``PropertyContract``) or an instance of it; the kind-specific modules only add
entity lookups and input shaping on top.
"""
import logging
from datetime import date
from typing import Any, Dict, Optional

from sqlalchemy import or_
from sqlalchemy.orm import Session

from rental_service.app.core.errors import ContractEngineError, ContractStateError
from rental_service.app.crud.contracts.duration_validator import validate_contract_terms
from rental_service.app.crud.contracts.reschedule_service import can_renew, can_reschedule, paid_coverage
from rental_service.app.crud.payments.payment_schedule_service import (
    can_generate_payments,
    generate,
    generate_payments_if_needed,
    has_obligations,
    obligations_query,
)
from rental_service.app.enum.contracts_enum import BLOCKING_CONTRACT_STATUSES, ContractStatus
from rental_service.app.schemas.contracts.contracts_schemas import (
    AvailabilityRequest,
    AvailabilityResult,
    ContractPaymentSummary,
    ContractRequest,
    ContractSaveResult,
)
from rental_service.app.schemas.system.settings_schemas import PaymentSettings
from shared.helpers.period_helper import contract_end_date

logger = logging.getLogger(__name__)

# fields that reshape the schedule once it exists
TERM_FIELDS = ("start_date", "duration_months", "payment_frequency")


# ----------------------------------------------------
# ✅ Queries
# ----------------------------------------------------
def build_filters(model, params: ContractRequest):
    filters = []
    if params.status:
        filters.append(model.status == params.status.value)
    if params.entity_id:
        filters.append(getattr(model, model.entity_field) == params.entity_id)
    if params.search:
        like = f"%{params.search}%"
        filters.append(or_(model.contract_number.ilike(like), model.notes.ilike(like)))
    return filters


def get_list(db: Session, model, params: ContractRequest):
    q = db.query(model).filter(*build_filters(model, params)).order_by(model.start_date.desc())
    total = q.count()
    rows = q.offset(params.skip).limit(params.limit).all()
    return rows, total


def get_by_id(db: Session, model, contract_id) -> Optional[Any]:
    return db.query(model).filter(model.id == contract_id).first()


# ----------------------------------------------------
# ✅ Create / update
# ----------------------------------------------------
def _save_result(contract, generated=0, error=None) -> ContractSaveResult:
    return ContractSaveResult(
        contract_id=contract.id,
        contract_number=contract.contract_number,
        payments_generated=generated,
        generation_error=error,
    )


def create_contract(db: Session, model, data: Dict[str, Any],
                    payment_settings: PaymentSettings) -> ContractSaveResult:
    validate_contract_terms(
        db, model, data[model.entity_field], data["start_date"],
        data["duration_months"], data["payment_frequency"],
        check_overlap=data.get("status") in BLOCKING_CONTRACT_STATUSES,
    )
    contract = model(**data)
    try:
        db.add(contract)
        db.commit()
    except Exception:
        db.rollback()
        raise
    db.refresh(contract)
    logger.info("Created contract %s (%s)", contract.contract_number, contract.status)

    generated, error = generate_payments_if_needed(db, contract, payment_settings)
    return _save_result(contract, generated, error)


def update_contract(db: Session, contract, data: Dict[str, Any],
                    payment_settings: PaymentSettings) -> ContractSaveResult:
    changes = {k: v for k, v in data.items() if getattr(contract, k) != v}
    if any(k in changes for k in TERM_FIELDS) and has_obligations(db, contract):
        raise ContractStateError(
            f"Contract {contract.contract_number} already has payments; "
            "reschedule it to change its terms",
            {"fields": sorted(k for k in changes if k in TERM_FIELDS)},
        )

    merged = {
        field: changes.get(field, getattr(contract, field))
        for field in (contract.entity_field, "status", *TERM_FIELDS)
    }
    if set(changes) & {contract.entity_field, "status", *TERM_FIELDS}:
        validate_contract_terms(
            db, type(contract), merged[contract.entity_field], merged["start_date"],
            merged["duration_months"], merged["payment_frequency"],
            exclude_contract_id=contract.id,
            check_overlap=merged["status"] in BLOCKING_CONTRACT_STATUSES,
        )

    try:
        for key, value in changes.items():
            setattr(contract, key, value)
        db.commit()
    except Exception:
        db.rollback()
        raise
    db.refresh(contract)

    generated, error = generate_payments_if_needed(db, contract, payment_settings)
    return _save_result(contract, generated, error)


# ----------------------------------------------------
# ✅ Lifecycle
# ----------------------------------------------------
def activate_contract(db: Session, contract, payment_settings: PaymentSettings) -> ContractSaveResult:
    if contract.status != ContractStatus.draft.value:
        raise ContractStateError(
            f"Only draft contracts can be activated; {contract.contract_number} is {contract.status}",
            {"status": contract.status},
        )
    return update_contract(db, contract, {"status": ContractStatus.active.value}, payment_settings)


def terminate_contract(db: Session, contract, reason: Optional[str] = None,
                       terminated_at: Optional[date] = None):
    if contract.status != ContractStatus.active.value:
        raise ContractStateError(
            f"Only active contracts can be terminated; {contract.contract_number} is {contract.status}",
            {"status": contract.status},
        )
    try:
        contract.status = ContractStatus.terminated.value
        contract.termination_reason = reason
        contract.terminated_at = terminated_at or date.today()
        db.commit()
    except Exception:
        db.rollback()
        raise
    db.refresh(contract)
    logger.info("Terminated contract %s", contract.contract_number)
    return contract


def generate_contract_payments(db: Session, contract, payment_settings: PaymentSettings) -> int:
    """Manual generation for contracts whose automatic generation failed."""
    if not can_generate_payments(db, contract):
        raise ContractStateError(
            f"Payments cannot be generated for contract {contract.contract_number}: "
            "it must be active and have no payments yet",
            {"status": contract.status},
        )
    return len(generate(db, contract, payment_settings))


# ----------------------------------------------------
# ✅ Summaries and checks
# ----------------------------------------------------
def payment_summary(db: Session, contract) -> ContractPaymentSummary:
    payments = obligations_query(db, contract).all()
    settled = [p for p in payments if p.is_settled]
    paid_months, _ = paid_coverage(contract, settled)
    return ContractPaymentSummary(
        contract_id=contract.id,
        total_payments=len(payments),
        settled_payments=len(settled),
        unsettled_payments=len(payments) - len(settled),
        paid_months=paid_months,
        remaining_months=max(0, contract.duration_months - paid_months),
        can_generate_payments=can_generate_payments(db, contract),
        can_reschedule=can_reschedule(db, contract),
        can_renew=can_renew(contract),
    )


def check_availability(db: Session, model, request: AvailabilityRequest) -> AvailabilityResult:
    try:
        count = validate_contract_terms(
            db, model, request.entity_id, request.start_date,
            request.duration_months, request.payment_frequency,
            exclude_contract_id=request.exclude_contract_id,
        )
    except ContractEngineError as e:
        return AvailabilityResult(
            available=False,
            error_code=e.status_code,
            message=e.message,
            conflict=e.details,
        )
    return AvailabilityResult(
        available=True,
        end_date=contract_end_date(request.start_date, request.duration_months),
        payments_count=count,
    )
